"""Equity engine schemas.

This package contains all Pydantic models used by the engine:
- Base types and conventions
- Share structure configuration
- Cap table entries and the external rows they load from
- Snapshots, validation results and reported totals

Usage:
    from equity_engine.schemas import (
        CapTableEntry, EntryKind, CapTableSnapshot, ShareStructureCFG
    )
"""

# Base types
from .base import (
    DomainModel,
    EquityPercent,
    ShareCount,
    EntryId,
)

# Configuration
from .structure import ShareStructureCFG

# Entries and rows
from .entries import (
    EntryKind,
    CapTableEntry,
    TeamMemberRow,
    InvestorRow,
    FOUNDER_ROLES,
)

# Read-only views
from .snapshot import (
    CapTableSnapshot,
    ValidationResult,
    EquityTotals,
)

__all__ = [
    # Base types
    "DomainModel",
    "EquityPercent",
    "ShareCount",
    "EntryId",
    # Configuration
    "ShareStructureCFG",
    # Entries
    "EntryKind",
    "CapTableEntry",
    "TeamMemberRow",
    "InvestorRow",
    "FOUNDER_ROLES",
    # Views
    "CapTableSnapshot",
    "ValidationResult",
    "EquityTotals",
]
