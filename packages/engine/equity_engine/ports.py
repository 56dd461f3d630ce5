"""Storage boundary used by the recalculation service.

The engine never touches storage itself. Whatever persists equity rows (a
hosted database, a spreadsheet, an in-memory dict in tests) implements this
protocol and is handed to the service.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Protocol, Sequence

from .schemas import InvestorRow, TeamMemberRow


class EquityStore(Protocol):
    """Persistence port for one company's ownership rows.

    Loads are expected to apply the store's business filters: only active
    team members, and only investors attached to a closed funding round.
    Writes are keyed by entry id and partitioned by table.
    """

    def load_team_members(self) -> Sequence[TeamMemberRow]:
        """Return the active founder and team rows."""
        ...

    def load_investors(self) -> Sequence[InvestorRow]:
        """Return the investor rows currently considered valid."""
        ...

    def save_team_equity(self, member_id: str, equity_percent: Decimal) -> None:
        """Persist a founder/team member's equity percentage."""
        ...

    def save_investor_equity(self, investor_id: str, equity_percent: Decimal) -> None:
        """Persist an investor's equity percentage."""
        ...
