"""
Ordered worklists used by the grouping engine.

A :class:`Pool` never shrinks while it is being scanned: taking an item only
flips its ``active`` flag, so positions stay stable and discovery order is
exactly the insertion order.  Returning an item reactivates it in its original
slot.
"""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass
class PoolEntry(Generic[T]):
    index: int
    item: T
    active: bool = True
    # Seeds that failed stay gatherable but are never seeded again.
    seeded: bool = False


class Pool(Generic[T]):
    """Position-indexed worklist of items with soft removal."""

    def __init__(self, items: Iterable[T] = ()):
        self._entries: list[PoolEntry[T]] = [
            PoolEntry(index=i, item=item) for i, item in enumerate(items)
        ]

    def __len__(self) -> int:
        return sum(1 for e in self._entries if e.active)

    def __bool__(self) -> bool:
        return any(e.active for e in self._entries)

    def active(self) -> Iterator[PoolEntry[T]]:
        """Active entries in original order."""
        for entry in self._entries:
            if entry.active:
                yield entry

    def items(self) -> list[T]:
        return [e.item for e in self.active()]

    def next_seed(self) -> PoolEntry[T] | None:
        """First active entry that has not served as a seed yet."""
        for entry in self._entries:
            if entry.active and not entry.seeded:
                return entry
        return None

    def has_seed(self) -> bool:
        return self.next_seed() is not None

    def take(self, entries: Iterable[PoolEntry[T]]) -> None:
        for entry in entries:
            entry.active = False

    def give_back(self, entries: Iterable[PoolEntry[T]]) -> None:
        for entry in entries:
            entry.active = True
