"""Exception hierarchy for the cap table engine.

Every error raised by the engine derives from CapTableError so callers can
catch engine failures in one place. The concrete classes also derive from the
closest built-in (ValueError / LookupError) so generic handlers keep working.

Taxonomy:
- InvalidPercentage: value is non-numeric, non-finite, or out of range
- CapacityExceeded: mutation would push the table above 100% beyond tolerance
- EntryNotFound: unknown entry id on lookup/update/remove
- DuplicateEntry: entry id already present in the table
- DegenerateTable: total equity is zero or negative, nothing to normalize
"""

from decimal import Decimal
from typing import Any, Optional


class CapTableError(Exception):
    """Base class for all cap table engine errors."""
    pass


class InvalidPercentage(CapTableError, ValueError):
    """Raised when an equity percentage is not a finite number in range."""

    def __init__(self, value: Any, reason: Optional[str] = None):
        self.value = value
        message = f"Invalid equity percentage: {value}%."
        if reason:
            message = f"{message} {reason}"
        super().__init__(message)


class CapacityExceeded(CapTableError, ValueError):
    """Raised when a mutation would overflow the table above 100%.

    Attributes:
        current_total: Equity already held by the entries the mutation keeps
        requested: Percentage the caller asked for
        max_allowed: Largest percentage that would have been accepted
    """

    def __init__(
        self,
        message: str,
        current_total: Decimal,
        requested: Decimal,
        max_allowed: Decimal,
    ):
        self.current_total = current_total
        self.requested = requested
        self.max_allowed = max_allowed
        super().__init__(message)


class EntryNotFound(CapTableError, LookupError):
    """Raised when an entry id is not present in the table."""

    def __init__(self, entry_id: str):
        self.entry_id = entry_id
        super().__init__(f"Entry with id {entry_id} not found")


class DuplicateEntry(CapTableError, ValueError):
    """Raised when an entry id is already present in the table."""

    def __init__(self, entry_id: str):
        self.entry_id = entry_id
        super().__init__(f"Entry with id {entry_id} already exists")


class DegenerateTable(CapTableError):
    """Raised when the table total is zero or negative and cannot be scaled."""

    def __init__(self, total: Decimal):
        self.total = total
        super().__init__(
            f"Invalid cap table: Total equity is {total}%, nothing to normalize"
        )


__all__ = [
    "CapTableError",
    "InvalidPercentage",
    "CapacityExceeded",
    "EntryNotFound",
    "DuplicateEntry",
    "DegenerateTable",
]
