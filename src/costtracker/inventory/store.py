"""
=============================================================================
ITEM STORE
=============================================================================

The whole inventory lives in one list in memory. Nothing is persisted: a
restart starts from an empty list.

Items are addressed by their position in the list (0-based). The listing
page shows positions starting at 1; forms and URLs carry the 0-based
index.

=============================================================================
LOCKING
=============================================================================

    ┌─────────────┐   lock   ┌──────────────┐   unlock   ┌─────────────┐
    │  snapshot() │ ───────► │ copy list    │ ─────────► │ render HTML │
    └─────────────┘          └──────────────┘            └─────────────┘
                              (held here only)             (no lock)

The lock is held only long enough to copy or mutate the list, never while
rendering or writing to a socket. Items are immutable, so a copied list
can be read freely after the lock is released.

=============================================================================
"""

import threading
from dataclasses import dataclass
from typing import Iterator, List, Optional


@dataclass(frozen=True)
class Item:
    """
    One inventory line.

        >>> Item("Tornillo", 10, 0.25).total_cost
        2.5
    """

    name: str
    quantity: int
    unit_cost: float

    @property
    def total_cost(self) -> float:
        """quantity × unit_cost"""
        return self.quantity * self.unit_cost


class ItemStore:
    """
    Lock-guarded, ordered, in-memory list of items.

    Passed explicitly to the handlers that need it, so tests can build a
    fresh store per case.
    """

    def __init__(self, items: Optional[List[Item]] = None):
        self._items: List[Item] = list(items or [])
        self._lock = threading.Lock()

    def snapshot(self) -> List[Item]:
        """Return a copy of the current list."""
        with self._lock:
            return list(self._items)

    def append(self, item: Item) -> int:
        """
        Add an item at the end of the list.

        Returns:
            The new item's index.
        """
        with self._lock:
            self._items.append(item)
            return len(self._items) - 1

    def get(self, index: int) -> Optional[Item]:
        """Return the item at index, or None if out of range."""
        with self._lock:
            if 0 <= index < len(self._items):
                return self._items[index]
            return None

    def replace(self, index: int, item: Item) -> bool:
        """
        Replace the item at index.

        Returns:
            False (and changes nothing) if index is out of range.
        """
        with self._lock:
            if not 0 <= index < len(self._items):
                return False
            self._items[index] = item
            return True

    def total_cost(self) -> float:
        """Sum of every item's total cost."""
        return sum(item.total_cost for item in self.snapshot())

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def __iter__(self) -> Iterator[Item]:
        return iter(self.snapshot())
