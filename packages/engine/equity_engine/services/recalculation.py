"""Recalculate-and-persist workflow around the cap table engine.

Load rows -> rebuild the table (no dilution) -> normalize -> write every
percentage back to its partition -> report team / investor / total equity.

The engine stays free of I/O; this module is the only place that talks to an
EquityStore. Callers serialize runs per company (one run at a time against the
same store).
"""

import logging
from decimal import Decimal
from typing import Optional, Tuple

from ..ledger import CapTable, round_percent
from ..ports import EquityStore
from ..schemas import (
    CapTableEntry,
    EntryKind,
    EquityTotals,
    ShareStructureCFG,
)
from ..schemas.base import HUNDRED, ZERO

logger = logging.getLogger(__name__)


def team_and_investor_totals(cap_table: CapTable) -> Tuple[Decimal, Decimal]:
    """(founder + team equity, investor equity) for a table."""
    team = (
        cap_table.get_total_equity_by_kind(EntryKind.FOUNDER)
        + cap_table.get_total_equity_by_kind(EntryKind.TEAM)
    )
    investors = cap_table.get_total_equity_by_kind(EntryKind.INVESTOR)
    return team, investors


def persist_entry(
    store: EquityStore, entry: CapTableEntry, structure: ShareStructureCFG
) -> None:
    """Write one entry's rounded percentage to the partition for its kind."""
    percent = round_percent(entry.equity_percent, structure)
    kind = EntryKind(entry.kind)

    if kind in (EntryKind.FOUNDER, EntryKind.TEAM):
        store.save_team_equity(entry.id, percent)
        logger.info("Updating team member %s: %.2f%%", entry.name, percent)
    elif kind is EntryKind.INVESTOR:
        store.save_investor_equity(entry.id, percent)
        logger.info("Updating investor %s: %.2f%%", entry.name, percent)
    else:
        raise ValueError(f"Unhandled entry kind: {kind!r}")


def recalculate_equity(
    store: EquityStore,
    *,
    structure: Optional[ShareStructureCFG] = None,
    single_owner_takes_all: bool = True,
) -> EquityTotals:
    """Normalize a company's stored equity so it sums to 100%.

    Args:
        store: Source of rows and destination of normalized percentages
        structure: Share structure for the rebuilt table
        single_owner_takes_all: With exactly one team member and no investors,
            store that member at exactly 100% instead of relying on scaling

    Returns:
        EquityTotals with team (founders + team), investor and total equity

    Raises:
        DegenerateTable: If the stored rows hold no equity at all
    """
    structure = structure or ShareStructureCFG()
    team_rows = list(store.load_team_members())
    investor_rows = list(store.load_investors())

    cap_table = CapTable.from_external_data(
        team_rows, investor_rows, structure=structure
    )
    validation = cap_table.validate()
    logger.info("Current total: %.2f%%", validation.total)
    logger.info(
        "Team members: %d, Investors: %d", len(team_rows), len(investor_rows)
    )
    cap_table.ensure_normalizable()

    if single_owner_takes_all and len(team_rows) == 1 and not investor_rows:
        member = team_rows[0]
        logger.info(
            "Single team member (%s), setting to 100%%", member.name
        )
        store.save_team_equity(member.id, HUNDRED)
        return EquityTotals(team=HUNDRED, investors=ZERO, total=HUNDRED)

    # Loading already normalized; this pass is a no-op unless drift remains
    cap_table.recalculate()
    snapshot = cap_table.get_snapshot()
    team_total, investor_total = team_and_investor_totals(cap_table)

    logger.info(
        "After normalization - Team: %.2f%%, Investors: %.2f%%, Total: %.2f%%",
        team_total, investor_total, snapshot.total_equity,
    )
    logger.info("Updating %d entries", len(snapshot.entries))

    for entry in snapshot.entries:
        persist_entry(store, entry, structure)

    logger.info(
        "Successfully updated %d entries. New total: %.2f%%",
        len(snapshot.entries), snapshot.total_equity,
    )
    return EquityTotals(
        team=team_total,
        investors=investor_total,
        total=snapshot.total_equity,
    )
