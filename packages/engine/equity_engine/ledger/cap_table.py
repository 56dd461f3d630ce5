"""The cap table engine.

CapTable keeps an ordered list of ownership entries and maintains the 100%
invariant across mutations:

- add_entry: a new stake dilutes every existing holder pro-rata
- update_entry: the other holders absorb the change pro-rata
- remove_entry: the removed stake is redistributed pro-rata
- recalculate: rescales the table to 100% when drift exceeds tolerance

Every mutation validates its inputs first, then works on a scratch copy of the
entries that is swapped in only once the whole change has been computed. A
failed call never leaves the table partially modified.

Loading a table from storage is NOT a funding event and must not dilute
anyone: use CapTable.from_external_data (or the constructor) for that, never
a sequence of add_entry calls.
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Callable, Iterable, List, Mapping, Optional, Sequence, Union
from uuid import uuid4

from ..errors import (
    CapacityExceeded,
    DegenerateTable,
    DuplicateEntry,
    EntryNotFound,
    InvalidPercentage,
)
from ..schemas import (
    CapTableEntry,
    CapTableSnapshot,
    EntryKind,
    InvestorRow,
    ShareStructureCFG,
    TeamMemberRow,
    ValidationResult,
)
from ..schemas.base import HUNDRED, ZERO
from .arithmetic import round_percent, scale_proportionally, shares_for, to_percent

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CapTable:
    """Stateful calculator over one company's ownership entries.

    Example:
        cap_table = CapTable()
        alice = cap_table.add_entry(EntryKind.FOUNDER, "Alice", 100)
        vc = cap_table.add_entry(EntryKind.INVESTOR, "VC1", 20)
        # Alice diluted to 80%, VC1 holds 20%

        cap_table.update_entry(alice, 60)
        # VC1 absorbs the vacated 20 points pro-rata: 40%

        cap_table.remove_entry(vc)
        # Alice back to 100%

    Instances are cheap, hold no global state and are meant to live for a
    single calculation: construct, mutate, snapshot, discard.
    """

    def __init__(
        self,
        entries: Iterable[Union[CapTableEntry, Mapping[str, Any]]] = (),
        *,
        structure: Optional[ShareStructureCFG] = None,
        clock: Optional[Clock] = None,
    ):
        """Build a table from existing entries without diluting anyone.

        Args:
            entries: Entries (or mappings validated into entries) taken as-is
            structure: Share structure; defaults to 1M shares, 0.01 tolerance
            clock: Callable returning the snapshot timestamp (default: UTC now)

        Raises:
            DuplicateEntry: If two entries share an id
        """
        self.structure = structure or ShareStructureCFG()
        self._clock = clock or _utc_now
        self._entries: List[CapTableEntry] = []

        for raw in entries:
            if isinstance(raw, CapTableEntry):
                entry = raw.model_copy(deep=True)
            else:
                entry = CapTableEntry.model_validate(raw)
            if any(existing.id == entry.id for existing in self._entries):
                raise DuplicateEntry(entry.id)
            self._entries.append(entry)

        self.recalculate()

    @classmethod
    def from_external_data(
        cls,
        team_rows: Sequence[Union[TeamMemberRow, Mapping[str, Any]]],
        investor_rows: Sequence[Union[InvestorRow, Mapping[str, Any]]],
        *,
        structure: Optional[ShareStructureCFG] = None,
        clock: Optional[Clock] = None,
    ) -> "CapTable":
        """Rebuild a table from stored rows. See loading.from_external_data."""
        from .loading import from_external_data

        return from_external_data(
            team_rows, investor_rows, structure=structure, clock=clock
        )

    # =========================================================================
    # Mutations
    # =========================================================================

    def add_entry(
        self,
        kind: EntryKind,
        name: str,
        equity_percent: Any,
        *,
        entry_id: Optional[str] = None,
        fully_diluted: bool = True,
    ) -> str:
        """Add a stake, diluting every existing holder pro-rata.

        Existing holders are multiplied by (100 - p) / 100 before the new stake
        of exactly p is appended, modelling a funding round.

        Args:
            kind: Stakeholder kind
            name: Display name
            equity_percent: New stake p, 0 < p <= 100
            entry_id: Caller's id for the entry; a UUID4 string when omitted
            fully_diluted: Stored on the entry as-is

        Returns:
            The entry id

        Raises:
            InvalidPercentage: p not finite, p <= 0, or p > 100 on an empty table
            CapacityExceeded: p > 100 on a non-empty table, or the diluted
                table would still exceed 100% beyond tolerance
            DuplicateEntry: entry_id already in the table

        Example:
            Table: Alice 100%
            add_entry(INVESTOR, "VC1", 20) -> Alice 80%, VC1 20%
        """
        percent = to_percent(equity_percent)
        current_total = self._total(self._entries)

        if percent <= ZERO:
            raise InvalidPercentage(
                equity_percent, "Must be greater than 0 and at most 100."
            )
        if percent > HUNDRED:
            if not self._entries:
                raise InvalidPercentage(
                    equity_percent, "Must be greater than 0 and at most 100."
                )
            raise CapacityExceeded(
                f"Cannot add {percent}% equity. "
                f"Current total: {current_total:.2f}%. Maximum allowed: 100%.",
                current_total=current_total,
                requested=percent,
                max_allowed=HUNDRED,
            )

        projected_total = current_total * (HUNDRED - percent) / HUNDRED + percent
        if projected_total > HUNDRED + self.structure.tolerance:
            raise CapacityExceeded(
                f"Cannot add {percent}% equity. "
                f"Current total: {current_total:.2f}%, "
                f"Projected total: {projected_total:.2f}%. "
                f"Maximum allowed: 100%.",
                current_total=current_total,
                requested=percent,
                max_allowed=HUNDRED,
            )

        entry_id = entry_id if entry_id is not None else str(uuid4())
        if entry_id in self:
            raise DuplicateEntry(entry_id)

        new_entry = CapTableEntry(
            id=entry_id,
            kind=EntryKind(kind),
            name=name,
            equity_percent=percent,
            shares=shares_for(percent, self.structure),
            fully_diluted=fully_diluted,
        )

        staged = self._scratch()
        if current_total > ZERO:
            dilution_factor = (HUNDRED - percent) / HUNDRED
            self._scale(staged, dilution_factor)
        staged.append(new_entry)

        self._entries = staged
        logger.debug(
            "Added %s %r at %s%%, diluted %d holder(s)",
            new_entry.kind.value, name, percent, len(staged) - 1,
        )
        self.recalculate()
        return entry_id

    def update_entry(self, entry_id: str, new_equity_percent: Any) -> None:
        """Set one entry's percentage; the others absorb the change pro-rata.

        Every other entry is scaled by (100 - new) / (100 - old): a factor
        below 1 dilutes them when this entry grows, above 1 hands them the
        vacated percentage when it shrinks.

        Raises:
            EntryNotFound: Unknown entry_id
            InvalidPercentage: Value not finite or outside [0, 100]
            CapacityExceeded: Others plus the new value exceed 100% beyond
                tolerance; max_allowed is 100 - others
            DegenerateTable: The update would leave nothing but zero stakes

        Example:
            Table: Alice 80%, VC1 20%
            update_entry(alice, 60) -> VC1 = 20 * (100-60)/(100-80) = 40%
        """
        index = self._index_of(entry_id)
        new_percent = to_percent(new_equity_percent)
        if new_percent < ZERO or new_percent > HUNDRED:
            raise InvalidPercentage(
                new_equity_percent, "Must be between 0 and 100."
            )

        old_percent = self._entries[index].equity_percent
        other_total = self._total(self._entries) - old_percent
        projected_total = other_total + new_percent

        if projected_total > HUNDRED + self.structure.tolerance:
            max_allowed = HUNDRED - other_total
            raise CapacityExceeded(
                f"Cannot set equity to {new_percent}%. "
                f"Other entries total: {other_total:.2f}%, "
                f"Projected total: {projected_total:.2f}%. "
                f"Maximum allowed: {max_allowed:.2f}%.",
                current_total=other_total,
                requested=new_percent,
                max_allowed=max_allowed,
            )
        if projected_total <= ZERO:
            raise DegenerateTable(projected_total)

        staged = self._scratch()
        target = staged.pop(index)
        delta = new_percent - old_percent

        # old >= 100 leaves no holders to scale; recalculate restores 100%
        if delta != ZERO and old_percent < HUNDRED:
            factor = (HUNDRED - new_percent) / (HUNDRED - old_percent)
            self._scale(staged, factor)

        self._set_percent(target, new_percent)
        staged.insert(index, target)

        self._entries = staged
        logger.debug(
            "Updated %r from %s%% to %s%%", entry_id, old_percent, new_percent
        )
        self.recalculate()

    def remove_entry(self, entry_id: str) -> None:
        """Remove an entry and redistribute its percentage pro-rata.

        Remaining entries are scaled by (remaining + removed) / remaining.

        Raises:
            EntryNotFound: Unknown entry_id

        Example:
            Table: Alice 60%, VC1 40%
            remove_entry(vc1) -> Alice = 60 * (60+40)/60 = 100%
        """
        index = self._index_of(entry_id)

        staged = self._scratch()
        removed = staged.pop(index)
        remaining_total = self._total(staged)

        if staged and removed.equity_percent > ZERO and remaining_total > ZERO:
            factor = (remaining_total + removed.equity_percent) / remaining_total
            self._scale(staged, factor)

        self._entries = staged
        logger.debug(
            "Removed %r (%s%%), redistributed across %d holder(s)",
            entry_id, removed.equity_percent, len(staged),
        )
        self.recalculate()

    def clear(self) -> None:
        """Drop every entry."""
        self._entries = []
        self.recalculate()

    # =========================================================================
    # Normalization
    # =========================================================================

    def recalculate(self) -> None:
        """Restore the 100% invariant and re-derive every share count.

        If the total is positive and more than tolerance away from 100, every
        entry is scaled by 100 / total; the scaled percentages sum to exactly
        100 at table precision. Calling this twice in a row is the same as
        calling it once.
        """
        total = self._total(self._entries)
        tolerance = self.structure.tolerance

        if total > ZERO and abs(total - HUNDRED) > tolerance:
            self._scale(self._entries, HUNDRED / total)
            logger.debug(
                "Normalized cap table from %s%% to %s%%",
                total, self._total(self._entries),
            )

        for entry in self._entries:
            entry.shares = shares_for(entry.equity_percent, self.structure)

    def validate(self) -> ValidationResult:
        """Check the 100% invariant without mutating anything."""
        total = self._total(self._entries)
        rounded = round_percent(total, self.structure)

        if total <= ZERO:
            return ValidationResult(
                valid=False,
                total=rounded,
                error=(
                    f"Cap table is degenerate: Total equity is {total:.2f}%, "
                    "nothing to normalize"
                ),
            )

        if abs(total - HUNDRED) > self.structure.tolerance:
            return ValidationResult(
                valid=False,
                total=rounded,
                error=f"Cap table is invalid: Total equity is {total:.2f}%, expected 100%",
            )

        return ValidationResult(valid=True, total=rounded)

    def ensure_normalizable(self) -> None:
        """Raise DegenerateTable if the table total is zero or negative."""
        total = self._total(self._entries)
        if total <= ZERO:
            raise DegenerateTable(round_percent(total, self.structure))

    # =========================================================================
    # Queries
    # =========================================================================

    def get_snapshot(self) -> CapTableSnapshot:
        """Deep copy of every entry plus totals and a timestamp."""
        entries = self.get_entries()
        return CapTableSnapshot(
            entries=entries,
            total_shares=sum(e.shares for e in entries),
            total_equity=round_percent(self._total(entries), self.structure),
            taken_at=self._clock(),
        )

    def get_entries(self) -> List[CapTableEntry]:
        """Copies of every entry, in table order."""
        return [entry.model_copy(deep=True) for entry in self._entries]

    def get_entry(self, entry_id: str) -> CapTableEntry:
        """Copy of one entry.

        Raises:
            EntryNotFound: Unknown entry_id
        """
        return self._entries[self._index_of(entry_id)].model_copy(deep=True)

    def get_entries_by_kind(self, kind: EntryKind) -> List[CapTableEntry]:
        """Copies of the entries of one kind, in table order."""
        kind = EntryKind(kind)
        return [
            entry.model_copy(deep=True)
            for entry in self._entries
            if entry.kind == kind
        ]

    def get_total_equity_by_kind(self, kind: EntryKind) -> Decimal:
        """Equity held by one kind (e.g. "founders hold 62%")."""
        kind = EntryKind(kind)
        return self._total(e for e in self._entries if e.kind == kind)

    @property
    def total_equity(self) -> Decimal:
        return self._total(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, entry_id: object) -> bool:
        return any(entry.id == entry_id for entry in self._entries)

    def __repr__(self) -> str:
        return f"CapTable(entries={len(self._entries)}, total={self.total_equity})"

    # =========================================================================
    # Internals
    # =========================================================================

    @staticmethod
    def _total(entries: Iterable[CapTableEntry]) -> Decimal:
        return sum((entry.equity_percent for entry in entries), ZERO)

    def _index_of(self, entry_id: str) -> int:
        for index, entry in enumerate(self._entries):
            if entry.id == entry_id:
                return index
        raise EntryNotFound(entry_id)

    def _scratch(self) -> List[CapTableEntry]:
        return [entry.model_copy(deep=True) for entry in self._entries]

    def _set_percent(self, entry: CapTableEntry, percent: Decimal) -> None:
        # Shares follow the rounded percentage, never the other way around
        entry.equity_percent = percent
        entry.shares = shares_for(percent, self.structure)

    def _scale(self, entries: List[CapTableEntry], factor: Decimal) -> None:
        scaled = scale_proportionally(
            [entry.equity_percent for entry in entries], factor, self.structure
        )
        for entry, percent in zip(entries, scaled):
            self._set_percent(entry, percent)
