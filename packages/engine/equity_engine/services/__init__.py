"""Workflows that drive the engine against a storage port."""

from .recalculation import persist_entry, recalculate_equity, team_and_investor_totals

__all__ = ["persist_entry", "recalculate_equity", "team_and_investor_totals"]
