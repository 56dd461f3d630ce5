"""In-memory EquityStore.

Holds team and investor rows in dicts. Useful for tests, dry runs and callers
that want to preview a recalculation before writing to their real store.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Iterable, Mapping

from ..errors import EntryNotFound
from ..schemas import InvestorRow, TeamMemberRow

logger = logging.getLogger(__name__)


@dataclass
class InMemoryEquityStore:
    """Dict-backed store satisfying the EquityStore protocol.

    Loads mirror the filters a real store applies: team members listed in
    ``inactive_members`` and investors listed in ``open_round_investors``
    (their round has not closed) are skipped. Every save is also recorded in
    ``writes`` as (partition, id, percent).
    """

    team_members: dict[str, TeamMemberRow] = field(default_factory=dict)
    investors: dict[str, InvestorRow] = field(default_factory=dict)
    inactive_members: set[str] = field(default_factory=set)
    open_round_investors: set[str] = field(default_factory=set)
    writes: list[tuple[str, str, Decimal]] = field(default_factory=list)

    @classmethod
    def from_rows(
        cls,
        team_rows: Iterable[Mapping[str, Any]] = (),
        investor_rows: Iterable[Mapping[str, Any]] = (),
    ) -> "InMemoryEquityStore":
        """Build a store from plain row mappings.

        Row mappings may carry ``is_active`` (team) and ``in_closed_round``
        (investors); both default to True.
        """
        store = cls()
        for raw in team_rows:
            row = TeamMemberRow.model_validate(
                {k: v for k, v in raw.items() if k != "is_active"}
            )
            store.team_members[row.id] = row
            if not raw.get("is_active", True):
                store.inactive_members.add(row.id)
        for raw in investor_rows:
            row = InvestorRow.model_validate(
                {k: v for k, v in raw.items() if k != "in_closed_round"}
            )
            store.investors[row.id] = row
            if not raw.get("in_closed_round", True):
                store.open_round_investors.add(row.id)
        return store

    def load_team_members(self) -> list[TeamMemberRow]:
        return [
            row.model_copy()
            for member_id, row in self.team_members.items()
            if member_id not in self.inactive_members
        ]

    def load_investors(self) -> list[InvestorRow]:
        return [
            row.model_copy()
            for investor_id, row in self.investors.items()
            if investor_id not in self.open_round_investors
        ]

    def save_team_equity(self, member_id: str, equity_percent: Decimal) -> None:
        if member_id not in self.team_members:
            raise EntryNotFound(member_id)
        self.team_members[member_id].equity_percent = equity_percent
        self.writes.append(("team", member_id, equity_percent))
        logger.debug("Stored team member %s at %s%%", member_id, equity_percent)

    def save_investor_equity(self, investor_id: str, equity_percent: Decimal) -> None:
        if investor_id not in self.investors:
            raise EntryNotFound(investor_id)
        self.investors[investor_id].equity_percent = equity_percent
        self.writes.append(("investor", investor_id, equity_percent))
        logger.debug("Stored investor %s at %s%%", investor_id, equity_percent)
