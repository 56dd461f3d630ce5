"""Shared fixtures for equity engine tests."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from equity_engine.ledger import CapTable
from equity_engine.schemas import CapTableEntry, EntryKind


FIXED_NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


def fixed_clock() -> datetime:
    return FIXED_NOW


def make_entry(entry_id, kind, percent, name=None) -> CapTableEntry:
    """Entry helper: shares are re-derived by the table on construction."""
    return CapTableEntry(
        id=entry_id,
        kind=kind,
        name=name or entry_id,
        equity_percent=Decimal(str(percent)),
    )


def percents(cap_table: CapTable) -> dict:
    """Map of entry id -> equity percent, in table order."""
    return {e.id: e.equity_percent for e in cap_table.get_entries()}


@pytest.fixture
def founder_table():
    """Alice 100%, built the way a new company starts."""
    cap_table = CapTable(clock=fixed_clock)
    cap_table.add_entry(EntryKind.FOUNDER, "Alice", 100, entry_id="alice")
    return cap_table


@pytest.fixture
def seeded_table():
    """Alice 80% (founder), VC1 20% (investor)."""
    cap_table = CapTable(clock=fixed_clock)
    cap_table.add_entry(EntryKind.FOUNDER, "Alice", 100, entry_id="alice")
    cap_table.add_entry(EntryKind.INVESTOR, "VC1", 20, entry_id="vc1")
    return cap_table


@pytest.fixture
def three_way_table():
    """Alice 50% (founder), Bob 30% (team), Acme 20% (investor), loaded as-is."""
    return CapTable(
        [
            make_entry("alice", EntryKind.FOUNDER, "50", "Alice"),
            make_entry("bob", EntryKind.TEAM, "30", "Bob"),
            make_entry("acme_vc", EntryKind.INVESTOR, "20", "Acme Ventures"),
        ],
        clock=fixed_clock,
    )
