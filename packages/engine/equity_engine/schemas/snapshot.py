"""Read-only views handed out by the engine.

CapTableSnapshot is a frozen, deep-copied picture of a table at one moment.
ValidationResult reports whether the 100% invariant holds without mutating.
EquityTotals is the externally reported "team %, investor %, total %" summary.
"""

from typing import List, Optional
from datetime import datetime
from decimal import Decimal
from pydantic import ConfigDict, Field

from .base import DomainModel, ShareCount
from .entries import CapTableEntry, EntryKind


# =============================================================================
# Cap Table Snapshot
# =============================================================================

class CapTableSnapshot(DomainModel):
    """Point-in-time copy of a cap table.

    Key properties:
        - Frozen: fields cannot be reassigned
        - Isolated: entries are deep copies, editing them never touches the
          live table
        - Self-describing: carries its own totals and timestamp

    Usage:
        snapshot = cap_table.get_snapshot()
        for entry in snapshot.entries:
            store.save(entry.id, entry.equity_percent)

        investor_pct = snapshot.equity_by_kind(EntryKind.INVESTOR)
    """

    model_config = ConfigDict(frozen=True)

    entries: List[CapTableEntry] = Field(
        default_factory=list,
        description="Copies of every entry, in table order"
    )

    total_shares: ShareCount = Field(
        default=0,
        description="Sum of shares across entries"
    )

    total_equity: Decimal = Field(
        default=Decimal("0"),
        description="Sum of equity_percent across entries, rounded to table precision"
    )

    taken_at: datetime = Field(
        description="When the snapshot was taken (UTC)"
    )

    def entries_by_kind(self, kind: EntryKind) -> List[CapTableEntry]:
        """Entries of one kind, in table order."""
        kind = EntryKind(kind)
        return [e for e in self.entries if e.kind == kind]

    def equity_by_kind(self, kind: EntryKind) -> Decimal:
        """Unrounded equity held by one kind."""
        return sum((e.equity_percent for e in self.entries_by_kind(kind)), Decimal("0"))


# =============================================================================
# Validation Result
# =============================================================================

class ValidationResult(DomainModel):
    """Outcome of CapTable.validate().

    Example:
        result = cap_table.validate()
        if not result.valid:
            cap_table.recalculate()
    """

    valid: bool = Field(
        description="True if the table total is within tolerance of 100"
    )

    total: Decimal = Field(
        description="Observed table total (rounded to table precision)"
    )

    error: Optional[str] = Field(
        default=None,
        description="Why the table is invalid (None when valid)"
    )


# =============================================================================
# Equity Totals
# =============================================================================

class EquityTotals(DomainModel):
    """Externally visible ownership summary after a recalculation."""

    team: Decimal = Field(
        description="Equity held by founders and team members"
    )

    investors: Decimal = Field(
        description="Equity held by investors"
    )

    total: Decimal = Field(
        description="Total equity across the table"
    )
