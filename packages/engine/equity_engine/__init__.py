"""Equity Engine - cap table ownership that always sums to 100%.

This package tracks fractional ownership of a company across founders, team
members and investors:
- Pro-rata dilution when new equity is issued
- Pro-rata redistribution when a stake shrinks or is removed
- Normalization of accumulated rounding drift
- Non-diluting reconstruction from stored rows
- Snapshots, per-kind totals and pandas reports

The engine is designed to be:
- Framework-agnostic (no web or database dependencies)
- Exact (Decimal arithmetic, explicit rounding)
- Testable (pure Python with Pydantic validation)
"""

from .errors import *  # noqa: F403, F401
from .schemas import *  # noqa: F403, F401
from .ledger import CapTable, from_external_data  # noqa: F401

__version__ = "0.1.0"
