"""Tests for the cap table mutation API.

Tests cover:
- add_entry dilution, boundaries and capacity checks
- update_entry dilution / redistribution and capacity reporting
- remove_entry redistribution
- Atomicity: failed calls leave the table untouched
- The founder -> seed -> update -> removal walkthrough
"""

import uuid
from decimal import Decimal

import pytest

from equity_engine.errors import (
    CapacityExceeded,
    CapTableError,
    DegenerateTable,
    DuplicateEntry,
    EntryNotFound,
    InvalidPercentage,
)
from equity_engine.ledger import CapTable
from equity_engine.schemas import EntryKind, ShareStructureCFG

from conftest import fixed_clock, make_entry, percents


# =============================================================================
# Walkthrough
# =============================================================================

def test_founder_seed_update_remove_walkthrough():
    """Alice founds, VC1 invests, Alice's stake shrinks, VC1 leaves.

    Math:
        - Alice 100% -> 1,000,000 shares
        - VC1 invests 20%: Alice diluted by 0.8 -> 80% / 800,000 shares
        - Alice set to 60%: VC1 scaled by (100-60)/(100-80) = 2 -> 40%
        - VC1 removed: Alice scaled by (60+40)/60 -> 100%
    """
    cap_table = CapTable(clock=fixed_clock)

    alice = cap_table.add_entry(EntryKind.FOUNDER, "Alice", 100, entry_id="alice")
    snapshot = cap_table.get_snapshot()
    assert snapshot.total_equity == Decimal("100")
    assert snapshot.total_shares == 1_000_000
    assert snapshot.entries[0].equity_percent == Decimal("100")

    vc1 = cap_table.add_entry(EntryKind.INVESTOR, "VC1", 20, entry_id="vc1")
    snapshot = cap_table.get_snapshot()
    assert percents(cap_table) == {"alice": Decimal("80"), "vc1": Decimal("20")}
    assert [e.shares for e in snapshot.entries] == [800_000, 200_000]
    assert snapshot.total_equity == Decimal("100")

    cap_table.update_entry(alice, 60)
    assert percents(cap_table) == {"alice": Decimal("60"), "vc1": Decimal("40")}
    assert cap_table.get_snapshot().total_equity == Decimal("100")

    cap_table.remove_entry(vc1)
    assert percents(cap_table) == {"alice": Decimal("100")}
    assert cap_table.get_entry("alice").shares == 1_000_000


# =============================================================================
# add_entry
# =============================================================================

class TestAddEntry:
    """Adding stakes dilutes existing holders pro-rata."""

    def test_first_entry_keeps_stated_percentage(self):
        cap_table = CapTable()
        cap_table.add_entry(EntryKind.FOUNDER, "Alice", 100, entry_id="alice")
        entry = cap_table.get_entry("alice")
        assert entry.equity_percent == Decimal("100")
        assert entry.shares == 1_000_000

    def test_dilution_is_proportional(self, three_way_table):
        """Factor 0.85 on a table of 50/30/20."""
        three_way_table.add_entry(EntryKind.INVESTOR, "Seed Fund", 15, entry_id="seed")

        assert percents(three_way_table) == {
            "alice": Decimal("42.5"),
            "bob": Decimal("25.5"),
            "acme_vc": Decimal("17"),
            "seed": Decimal("15"),
        }

    def test_dilution_conserves_existing_total(self):
        """Others sum to T * (100 - p) / 100 exactly; the new stake is exactly p.

        33.34 / 33.33 / 33.33 diluted by 0.93:
            exact 31.0062, 30.9969, 30.9969 -> rounded 31.01, 31.00, 31.00 (93.01)
            target 93.00 -> Alice (most rounded up) gives back 0.01
        """
        cap_table = CapTable([
            make_entry("alice", EntryKind.FOUNDER, "33.34"),
            make_entry("bob", EntryKind.FOUNDER, "33.33"),
            make_entry("carol", EntryKind.FOUNDER, "33.33"),
        ])
        cap_table.add_entry(EntryKind.INVESTOR, "VC", 7, entry_id="vc")

        result = percents(cap_table)
        assert result["vc"] == Decimal("7")
        assert result["alice"] + result["bob"] + result["carol"] == Decimal("93.00")
        assert result["alice"] == Decimal("31.00")
        assert cap_table.total_equity == Decimal("100.00")

    def test_shares_follow_rounded_percentage(self, three_way_table):
        three_way_table.add_entry(EntryKind.TEAM, "Dana", Decimal("3.33"), entry_id="dana")
        for entry in three_way_table.get_entries():
            assert entry.shares == int(entry.equity_percent * 10_000)

    def test_float_input_is_read_as_written(self, founder_table):
        founder_table.add_entry(EntryKind.INVESTOR, "VC", 20.1, entry_id="vc")
        assert founder_table.get_entry("vc").equity_percent == Decimal("20.1")
        assert founder_table.get_entry("alice").equity_percent == Decimal("79.9")

    def test_generates_uuid_when_no_id_given(self, founder_table):
        entry_id = founder_table.add_entry(EntryKind.TEAM, "Bob", 5)
        assert str(uuid.UUID(entry_id)) == entry_id
        assert entry_id in founder_table

    def test_returns_caller_supplied_id(self, founder_table):
        assert founder_table.add_entry(EntryKind.TEAM, "Bob", 5, entry_id="row-42") == "row-42"

    def test_zero_percent_rejected(self, founder_table):
        with pytest.raises(InvalidPercentage, match="Invalid equity percentage: 0%"):
            founder_table.add_entry(EntryKind.TEAM, "Bob", 0)

    def test_negative_percent_rejected(self, founder_table):
        with pytest.raises(InvalidPercentage):
            founder_table.add_entry(EntryKind.TEAM, "Bob", -5)

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), "abc", None, True])
    def test_non_numeric_or_non_finite_rejected(self, founder_table, value):
        with pytest.raises(InvalidPercentage):
            founder_table.add_entry(EntryKind.TEAM, "Bob", value)
        assert percents(founder_table) == {"alice": Decimal("100")}

    def test_above_hundred_on_non_empty_table_exceeds_capacity(self, founder_table):
        with pytest.raises(CapacityExceeded, match="Maximum allowed: 100%") as exc_info:
            founder_table.add_entry(EntryKind.INVESTOR, "VC", Decimal("100.01"))

        assert exc_info.value.max_allowed == Decimal("100")
        assert exc_info.value.requested == Decimal("100.01")
        assert exc_info.value.current_total == Decimal("100")
        assert percents(founder_table) == {"alice": Decimal("100")}

    def test_above_hundred_on_empty_table_is_invalid(self):
        with pytest.raises(InvalidPercentage):
            CapTable().add_entry(EntryKind.FOUNDER, "Alice", Decimal("100.01"))

    def test_duplicate_id_rejected(self, seeded_table):
        with pytest.raises(DuplicateEntry, match="vc1 already exists"):
            seeded_table.add_entry(EntryKind.INVESTOR, "VC1 again", 10, entry_id="vc1")
        assert percents(seeded_table) == {"alice": Decimal("80"), "vc1": Decimal("20")}

    def test_unknown_kind_rejected_without_mutation(self, seeded_table):
        with pytest.raises(ValueError):
            seeded_table.add_entry("advisor", "Eve", 5)
        assert len(seeded_table) == 2
        assert percents(seeded_table) == {"alice": Decimal("80"), "vc1": Decimal("20")}

    def test_kind_accepts_plain_string(self, founder_table):
        founder_table.add_entry("investor", "VC", 10, entry_id="vc")
        assert founder_table.get_entry("vc").kind is EntryKind.INVESTOR

    def test_errors_share_a_common_base(self, founder_table):
        with pytest.raises(CapTableError):
            founder_table.add_entry(EntryKind.TEAM, "Bob", 0)


# =============================================================================
# update_entry
# =============================================================================

class TestUpdateEntry:
    """Updating one stake rescales the others by (100 - new) / (100 - old)."""

    def test_shrinking_redistributes_to_others(self, three_way_table):
        """Alice 50 -> 30: others scaled by 70/50 = 1.4 (Bob 42, Acme 28)."""
        three_way_table.update_entry("alice", 30)
        assert percents(three_way_table) == {
            "alice": Decimal("30"),
            "bob": Decimal("42"),
            "acme_vc": Decimal("28"),
        }

    def test_growing_within_tolerance_dilutes_others(self, seeded_table):
        """Alice 80 -> 80.01 fits the 0.01 tolerance; VC1 scaled by 19.99/20."""
        seeded_table.update_entry("alice", Decimal("80.01"))
        assert percents(seeded_table) == {
            "alice": Decimal("80.01"),
            "vc1": Decimal("19.99"),
        }

    def test_growing_beyond_remaining_exceeds_capacity(self, seeded_table):
        with pytest.raises(CapacityExceeded, match="Maximum allowed: 80.00%") as exc_info:
            seeded_table.update_entry("alice", 90)

        error = exc_info.value
        assert error.current_total == Decimal("20")
        assert error.requested == Decimal("90")
        assert error.max_allowed == Decimal("80")
        assert percents(seeded_table) == {"alice": Decimal("80"), "vc1": Decimal("20")}

    def test_same_value_is_noop_for_others(self, three_way_table):
        three_way_table.update_entry("bob", 30)
        assert percents(three_way_table) == {
            "alice": Decimal("50"),
            "bob": Decimal("30"),
            "acme_vc": Decimal("20"),
        }

    def test_update_to_zero_hands_stake_to_others(self, three_way_table):
        """Bob 30 -> 0: others scaled by 100/70."""
        three_way_table.update_entry("bob", 0)
        result = percents(three_way_table)
        assert result["bob"] == Decimal("0")
        assert result["alice"] == Decimal("71.43")
        assert result["acme_vc"] == Decimal("28.57")
        assert three_way_table.get_entry("bob").shares == 0

    def test_unknown_id(self, seeded_table):
        with pytest.raises(EntryNotFound, match="Entry with id ghost not found"):
            seeded_table.update_entry("ghost", 10)

    @pytest.mark.parametrize("value", [-1, Decimal("100.5"), float("nan")])
    def test_out_of_range_rejected(self, seeded_table, value):
        with pytest.raises(InvalidPercentage):
            seeded_table.update_entry("vc1", value)
        assert percents(seeded_table) == {"alice": Decimal("80"), "vc1": Decimal("20")}

    def test_sole_holder_cannot_drop_to_zero(self, founder_table):
        with pytest.raises(DegenerateTable):
            founder_table.update_entry("alice", 0)
        assert percents(founder_table) == {"alice": Decimal("100")}

    def test_sole_holder_stays_at_hundred(self, founder_table):
        """Nobody can absorb the vacated stake, so normalization restores 100%."""
        founder_table.update_entry("alice", 50)
        assert percents(founder_table) == {"alice": Decimal("100")}

    def test_entry_order_is_preserved(self, three_way_table):
        three_way_table.update_entry("bob", 10)
        assert [e.id for e in three_way_table.get_entries()] == ["alice", "bob", "acme_vc"]

    def test_holder_loaded_above_hundred_can_shrink(self):
        """Stored 100.004 + 0.004 is within tolerance, so it loads as-is.

        Alice has no room to redistribute into: Bob is left unscaled and
        normalization brings the pair back to 100%.
        """
        cap_table = CapTable.from_external_data(
            [
                {"id": "alice", "name": "Alice", "role": "Founder", "equity_percent": "100.004"},
                {"id": "bob", "name": "Bob", "role": "Engineer", "equity_percent": "0.004"},
            ],
            [],
        )
        assert cap_table.validate().valid

        cap_table.update_entry("alice", 50)

        assert percents(cap_table) == {"alice": Decimal("99.99"), "bob": Decimal("0.01")}
        assert cap_table.total_equity == Decimal("100.00")
        assert all(e.equity_percent >= 0 for e in cap_table.get_entries())


# =============================================================================
# remove_entry
# =============================================================================

class TestRemoveEntry:
    """Removed stakes are redistributed pro-rata to the remaining holders."""

    def test_redistributes_proportionally(self, three_way_table):
        """Bob's 30% spread over Alice/Acme by 100/70."""
        three_way_table.remove_entry("bob")
        assert percents(three_way_table) == {
            "alice": Decimal("71.43"),
            "acme_vc": Decimal("28.57"),
        }

    def test_remaining_total_returns_to_hundred(self, three_way_table):
        three_way_table.remove_entry("acme_vc")
        assert three_way_table.total_equity == Decimal("100")
        assert percents(three_way_table) == {
            "alice": Decimal("62.50"),
            "bob": Decimal("37.50"),
        }

    def test_removing_last_entry_empties_table(self, founder_table):
        founder_table.remove_entry("alice")
        assert len(founder_table) == 0
        assert founder_table.total_equity == Decimal("0")

    def test_unknown_id(self, seeded_table):
        with pytest.raises(EntryNotFound):
            seeded_table.remove_entry("ghost")
        assert len(seeded_table) == 2

    def test_removing_zero_stake_changes_nothing_else(self):
        cap_table = CapTable([
            make_entry("alice", EntryKind.FOUNDER, "100"),
            make_entry("bob", EntryKind.TEAM, "0"),
        ])
        cap_table.remove_entry("bob")
        assert percents(cap_table) == {"alice": Decimal("100")}


# =============================================================================
# Construction and clear
# =============================================================================

def test_constructor_rejects_duplicate_ids():
    with pytest.raises(DuplicateEntry):
        CapTable([
            make_entry("alice", EntryKind.FOUNDER, "50"),
            make_entry("alice", EntryKind.TEAM, "50"),
        ])


def test_constructor_copies_entries():
    entry = make_entry("alice", EntryKind.FOUNDER, "100")
    cap_table = CapTable([entry])
    entry.equity_percent = Decimal("1")
    assert cap_table.get_entry("alice").equity_percent == Decimal("100")


def test_constructor_accepts_mappings():
    cap_table = CapTable([
        {"id": "alice", "kind": "founder", "name": "Alice", "equity_percent": "100"},
    ])
    assert cap_table.get_entry("alice").kind is EntryKind.FOUNDER
    assert cap_table.get_entry("alice").shares == 1_000_000


def test_clear_empties_table(seeded_table):
    seeded_table.clear()
    assert len(seeded_table) == 0
    assert seeded_table.get_snapshot().entries == []


def test_custom_share_structure():
    """10M authorized shares: 1% = 100,000 shares."""
    cap_table = CapTable(structure=ShareStructureCFG(total_authorized_shares=10_000_000))
    cap_table.add_entry(EntryKind.FOUNDER, "Alice", 100, entry_id="alice")
    cap_table.add_entry(EntryKind.INVESTOR, "VC1", 20, entry_id="vc1")

    snapshot = cap_table.get_snapshot()
    assert [e.shares for e in snapshot.entries] == [8_000_000, 2_000_000]
    assert snapshot.total_shares == 10_000_000


def test_independent_tables_do_not_interact(seeded_table):
    other = CapTable()
    other.add_entry(EntryKind.FOUNDER, "Zed", 100, entry_id="zed")
    assert "zed" not in seeded_table
    assert percents(seeded_table) == {"alice": Decimal("80"), "vc1": Decimal("20")}
