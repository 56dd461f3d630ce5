"""Ownership reports as pandas DataFrames.

Turns a CapTableSnapshot into frames for dashboards, exports or analysis.

Output DataFrames:
- ownership_frame: one row per entry, sorted by equity descending
- ownership_by_kind_frame: equity and shares aggregated per kind
- summary_frame: single row of headline totals
"""

from typing import Dict

import pandas as pd

from .schemas import CapTableSnapshot, EntryKind

OWNERSHIP_COLUMNS = ["id", "name", "kind", "equity_percent", "shares", "fully_diluted"]
BY_KIND_COLUMNS = ["kind", "entries", "equity_percent", "shares"]
SUMMARY_COLUMNS = [
    "total_shares",
    "total_equity",
    "team_equity",
    "investor_equity",
    "holders",
]


def ownership_frame(snapshot: CapTableSnapshot) -> pd.DataFrame:
    """Per-entry ownership breakdown.

    Columns:
        * id: Entry identifier
        * name: Display name
        * kind: founder / team / investor
        * equity_percent: Percentage held (float, for display)
        * shares: Derived share count
        * fully_diluted: Whether the stake is fully diluted

    Example:
        df = ownership_frame(cap_table.get_snapshot())
        df.head(3)  # top three holders
    """
    rows = [
        {
            "id": entry.id,
            "name": entry.name,
            "kind": EntryKind(entry.kind).value,
            "equity_percent": float(entry.equity_percent),
            "shares": entry.shares,
            "fully_diluted": entry.fully_diluted,
        }
        for entry in snapshot.entries
    ]

    if not rows:
        return pd.DataFrame(columns=OWNERSHIP_COLUMNS)

    df = pd.DataFrame(rows, columns=OWNERSHIP_COLUMNS)
    # Stable sort keeps table order among equal stakes
    return df.sort_values("equity_percent", ascending=False, kind="stable").reset_index(drop=True)


def ownership_by_kind_frame(snapshot: CapTableSnapshot) -> pd.DataFrame:
    """Ownership aggregated by stakeholder kind.

    Every kind gets a row, including kinds with no entries, in the order
    founder, team, investor.
    """
    ownership_df = ownership_frame(snapshot)

    if ownership_df.empty:
        by_kind = pd.DataFrame({"entries": 0, "equity_percent": 0.0, "shares": 0},
                               index=pd.Index([], name="kind"))
    else:
        by_kind = ownership_df.groupby("kind").agg(
            entries=("id", "count"),
            equity_percent=("equity_percent", "sum"),
            shares=("shares", "sum"),
        )

    kinds = [kind.value for kind in EntryKind]
    by_kind = by_kind.reindex(kinds, fill_value=0)
    by_kind.index.name = "kind"
    by_kind = by_kind.reset_index()
    by_kind["equity_percent"] = by_kind["equity_percent"].astype(float).round(2)
    by_kind["entries"] = by_kind["entries"].astype(int)
    by_kind["shares"] = by_kind["shares"].astype(int)
    return by_kind[BY_KIND_COLUMNS]


def summary_frame(snapshot: CapTableSnapshot) -> pd.DataFrame:
    """Single-row headline summary ("team %, investor %, total %")."""
    team = snapshot.equity_by_kind(EntryKind.FOUNDER) + snapshot.equity_by_kind(EntryKind.TEAM)
    investors = snapshot.equity_by_kind(EntryKind.INVESTOR)

    summary: Dict[str, object] = {
        "total_shares": snapshot.total_shares,
        "total_equity": float(snapshot.total_equity),
        "team_equity": round(float(team), 2),
        "investor_equity": round(float(investors), 2),
        "holders": len(snapshot.entries),
    }
    return pd.DataFrame([summary], columns=SUMMARY_COLUMNS)
