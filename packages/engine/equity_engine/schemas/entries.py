"""Cap table entries and the raw rows they are loaded from.

A CapTableEntry is one stakeholder's stake in the company. Entries are owned
by exactly one CapTable; everything handed out to callers is a copy.

TeamMemberRow and InvestorRow describe the rows the persistence layer supplies
when a table is rebuilt from storage.
"""

from enum import Enum
from decimal import Decimal
from pydantic import ConfigDict, Field, field_validator

from .base import DomainModel, EntryId, EquityPercent, ShareCount


# =============================================================================
# Entry Kind
# =============================================================================

class EntryKind(str, Enum):
    """Closed set of stakeholder kinds.

    Kind drives aggregation, reporting and the persistence partition. It never
    changes how dilution or normalization is calculated.
    """

    FOUNDER = "founder"
    TEAM = "team"
    INVESTOR = "investor"


# Team roles that load as founders; every other role loads as team.
FOUNDER_ROLES = frozenset({"Founder", "Co-Founder"})


# =============================================================================
# Cap Table Entry
# =============================================================================

class CapTableEntry(DomainModel):
    """One stakeholder's stake in the company.

    Examples:
        Founder:
            id="founder_alice", kind="founder", name="Alice",
            equity_percent=Decimal("80.00"), shares=800_000

        Seed investor:
            id="acme_vc", kind="investor", name="Acme Ventures",
            equity_percent=Decimal("20.00"), shares=200_000

    ``shares`` is always a projection of ``equity_percent`` under the table's
    ShareStructureCFG; the ledger re-derives it after every change.
    """

    model_config = ConfigDict(use_enum_values=False)

    id: EntryId = Field(
        description="Opaque stable identifier (externally assigned)"
    )

    kind: EntryKind = Field(
        description="Stakeholder kind: founder, team or investor"
    )

    name: str = Field(
        description="Display label (not required to be unique)"
    )

    equity_percent: EquityPercent = Field(
        description="Percentage of fully diluted ownership (25 = 25%)"
    )

    shares: ShareCount = Field(
        default=0,
        description="Share count derived from equity_percent"
    )

    fully_diluted: bool = Field(
        default=True,
        description="True if the stake is expressed on a fully diluted basis"
    )


# =============================================================================
# External Rows
# =============================================================================

class _ExternalRow(DomainModel):
    """Common shape of rows loaded from storage."""

    id: EntryId
    name: str

    equity_percent: EquityPercent = Field(
        default=Decimal("0"),
        description="Stored percentage; a missing value loads as 0"
    )

    @field_validator('equity_percent', mode='before')
    @classmethod
    def missing_percent_is_zero(cls, v):
        """Treat null / blank stored percentages as no equity."""
        if v is None or (isinstance(v, str) and not v.strip()):
            return Decimal("0")
        if isinstance(v, float):
            return Decimal(str(v))
        return v


class TeamMemberRow(_ExternalRow):
    """Founder or team member row as stored by the team table."""

    role: str = Field(
        default="",
        description="Job role; 'Founder' and 'Co-Founder' load as founders"
    )

    @property
    def kind(self) -> EntryKind:
        return EntryKind.FOUNDER if self.role in FOUNDER_ROLES else EntryKind.TEAM


class InvestorRow(_ExternalRow):
    """Investor row as stored by the investors table.

    The caller only supplies investors it considers current (for example,
    investors attached to a closed funding round).
    """

    @property
    def kind(self) -> EntryKind:
        return EntryKind.INVESTOR

