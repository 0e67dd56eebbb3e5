"""Entry store protocol for swappable backends.

The storage layer abstracts the hash table behind a CowMap:
- Local in-memory dict (default)
- Alternative tables with their own growth policy

Usage:
    store = LocalEntryStore.with_capacity(16)
    cow_map = CowMap(store=store)
"""

from __future__ import annotations

from collections.abc import Hashable, Iterator
from typing import Protocol


class EntryStore[S](Protocol):
    """Abstract keyed storage. Hashing and equality are delegated to the key."""

    def get(self, key: Hashable) -> S | None:
        """Get the slot stored under key."""
        ...

    def insert(self, key: Hashable, slot: S) -> S | None:
        """Store slot under key. Returns the previous slot if any."""
        ...

    def remove(self, key: Hashable) -> S | None:
        """Remove key. Returns the removed slot if any."""
        ...

    def __contains__(self, key: object) -> bool:
        """Check if key is present."""
        ...

    def keys(self) -> Iterator[Hashable]:
        """Iterate stored keys. No ordering guarantee."""
        ...

    def items(self) -> Iterator[tuple[Hashable, S]]:
        """Iterate (key, slot) pairs. No ordering guarantee."""
        ...

    def len(self) -> int:
        """Number of live slots."""
        ...

    def is_empty(self) -> bool:
        """Check if no slots are stored."""
        ...

    def capacity(self) -> int:
        """Lower bound on slots storable without growing."""
        ...

    def reserve(self, additional: int) -> None:
        """Guarantee capacity for at least additional more slots."""
        ...

    def shrink_to_fit(self) -> None:
        """Release unused capacity (best effort)."""
        ...
