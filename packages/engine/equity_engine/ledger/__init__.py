"""Cap table ledger: the engine that keeps ownership at 100%.

Usage:
    from equity_engine.ledger import CapTable, from_external_data

    cap_table = from_external_data(team_rows, investor_rows)
    cap_table.add_entry(EntryKind.INVESTOR, "Acme Ventures", 15)
    snapshot = cap_table.get_snapshot()
"""

from .cap_table import CapTable
from .loading import build_entries, from_external_data
from .arithmetic import round_percent, scale_proportionally, shares_for, to_percent

__all__ = [
    "CapTable",
    "build_entries",
    "from_external_data",
    "round_percent",
    "scale_proportionally",
    "shares_for",
    "to_percent",
]
