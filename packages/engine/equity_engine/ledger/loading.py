"""Rebuilding a cap table from stored rows.

Loading existing state is not a funding event. Entries are built directly from
the stored percentages, so nobody is diluted; the table is then normalized
once to absorb rounding drift left behind by earlier sessions.

Replaying stored rows through add_entry instead would re-dilute every holder
each time the table is merely reloaded.
"""

import logging
from typing import Any, Callable, List, Mapping, Optional, Sequence, Union
from datetime import datetime

from ..schemas import (
    CapTableEntry,
    InvestorRow,
    ShareStructureCFG,
    TeamMemberRow,
)
from .arithmetic import shares_for
from .cap_table import CapTable

logger = logging.getLogger(__name__)


def build_entries(
    team_rows: Sequence[Union[TeamMemberRow, Mapping[str, Any]]],
    investor_rows: Sequence[Union[InvestorRow, Mapping[str, Any]]],
    structure: ShareStructureCFG,
) -> List[CapTableEntry]:
    """Turn stored rows into entries, team rows first.

    Team rows with role "Founder" or "Co-Founder" become founder entries,
    every other team row a team entry; investor rows become investor entries.

    Raises:
        pydantic.ValidationError: If a row is malformed or holds a negative
            or non-finite percentage
    """
    rows: List[Union[TeamMemberRow, InvestorRow]] = []
    rows.extend(TeamMemberRow.model_validate(row) for row in team_rows)
    rows.extend(InvestorRow.model_validate(row) for row in investor_rows)

    return [
        CapTableEntry(
            id=row.id,
            kind=row.kind,
            name=row.name,
            equity_percent=row.equity_percent,
            shares=shares_for(row.equity_percent, structure),
        )
        for row in rows
    ]


def from_external_data(
    team_rows: Sequence[Union[TeamMemberRow, Mapping[str, Any]]],
    investor_rows: Sequence[Union[InvestorRow, Mapping[str, Any]]],
    *,
    structure: Optional[ShareStructureCFG] = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> CapTable:
    """Build a CapTable from stored team and investor rows without dilution.

    Args:
        team_rows: Founder/team rows {id, name, role, equity_percent}
        investor_rows: Investor rows {id, name, equity_percent}, already
            filtered by the caller to the investors it considers current
        structure: Share structure for the table
        clock: Snapshot clock for the table

    Returns:
        A normalized CapTable (the constructor runs recalculate once)

    Example:
        Stored: Alice 60.004%, Bob 19.998%, VC1 20.001% (total 100.003)
        -> within tolerance, loaded as-is
        Stored: Alice 50%, VC1 30% (total 80)
        -> normalized to Alice 62.50%, VC1 37.50%
    """
    structure = structure or ShareStructureCFG()
    entries = build_entries(team_rows, investor_rows, structure)
    logger.debug(
        "Loading cap table from %d team row(s) and %d investor row(s)",
        len(team_rows), len(investor_rows),
    )
    return CapTable(entries, structure=structure, clock=clock)
