"""Local in-memory entry store.

Dict-based storage suitable for single-process use. Python dicts do not
expose their allocation, so capacity is tracked with the bucket model of a
SwissTable: a power-of-two bucket count filled to at most 7/8.

Usage:
    store = LocalEntryStore.with_capacity(10)
    store.capacity()  # 14
"""

from __future__ import annotations

import logging
from collections.abc import Hashable, Iterator

logger = logging.getLogger(__name__)

# Tables below this many buckets are filled to bucket_mask instead of 7/8.
_SMALL_TABLE_BUCKETS = 8


def capacity_to_buckets(capacity: int) -> int:
    """Smallest bucket count able to hold capacity entries.

    Args:
        capacity: Requested number of entries.

    Returns:
        Power-of-two bucket count (0 for an empty request).
    """
    if capacity == 0:
        return 0
    if capacity < _SMALL_TABLE_BUCKETS:
        return 4 if capacity < 4 else 8
    adjusted = -(-capacity * 8 // 7)  # ceil(capacity * 8 / 7)
    return 1 << (adjusted - 1).bit_length()


def buckets_to_capacity(buckets: int) -> int:
    """Usable entries for a bucket count.

    Args:
        buckets: Power-of-two bucket count (or 0).

    Returns:
        Number of entries storable before growth.
    """
    if buckets == 0:
        return 0
    bucket_mask = buckets - 1
    if bucket_mask < _SMALL_TABLE_BUCKETS:
        return bucket_mask
    return buckets // 8 * 7


class LocalEntryStore[S]:
    """Simple in-memory store using a dict.

    Structure:
        _slots[key] = slot

    Args:
        capacity: Initial number of entries to reserve room for.
    """

    def __init__(self, capacity: int = 0):
        """Initialize an empty store.

        Args:
            capacity: Initial number of entries to reserve room for.

        Raises:
            ValueError: If capacity is negative.
        """
        if capacity < 0:
            raise ValueError(f"Capacity must be non-negative, got {capacity}")
        self._slots: dict[Hashable, S] = {}
        self._buckets = capacity_to_buckets(capacity)

    @classmethod
    def with_capacity(cls, capacity: int) -> LocalEntryStore[S]:
        """Create a store with room for at least capacity entries."""
        return cls(capacity)

    def _resize_for(self, required: int) -> None:
        """Resize buckets so that required entries fit."""
        buckets = capacity_to_buckets(required)
        if buckets != self._buckets:
            logger.debug("Entry store resized: %d -> %d buckets", self._buckets, buckets)
            self._buckets = buckets

    def get(self, key: Hashable) -> S | None:
        """Get the slot stored under key.

        Args:
            key: Key to look up.

        Returns:
            Slot or None if not present.
        """
        return self._slots.get(key)

    def insert(self, key: Hashable, slot: S) -> S | None:
        """Store slot under key, growing if full.

        An existing key object is kept; only the slot is replaced.

        Args:
            key: Key to store under.
            slot: Slot to store.

        Returns:
            Previous slot or None if key was absent.
        """
        previous = self._slots.get(key)
        if previous is None:
            if len(self._slots) + 1 > self.capacity():
                self._resize_for(max(len(self._slots) + 1, self.capacity() * 2))
        self._slots[key] = slot
        return previous

    def remove(self, key: Hashable) -> S | None:
        """Remove key from the store.

        Args:
            key: Key to remove.

        Returns:
            Removed slot or None if not present.
        """
        return self._slots.pop(key, None)

    def __contains__(self, key: object) -> bool:
        return key in self._slots

    def keys(self) -> Iterator[Hashable]:
        """Iterate stored keys.

        Yields:
            Each key as stored.
        """
        yield from self._slots

    def items(self) -> Iterator[tuple[Hashable, S]]:
        """Iterate (key, slot) pairs.

        Yields:
            Tuples of (key, slot).
        """
        yield from self._slots.items()

    def len(self) -> int:
        """Number of stored slots."""
        return len(self._slots)

    def is_empty(self) -> bool:
        """Check if the store holds no slots."""
        return not self._slots

    def capacity(self) -> int:
        """Entries storable before the next growth.

        Returns:
            Lower bound on insertable entries without reallocation.
        """
        return buckets_to_capacity(self._buckets)

    def reserve(self, additional: int) -> None:
        """Reserve room for at least additional more entries.

        Args:
            additional: Number of further entries to make room for.

        Raises:
            ValueError: If additional is negative.
        """
        if additional < 0:
            raise ValueError(f"Cannot reserve a negative amount: {additional}")
        required = len(self._slots) + additional
        if required > self.capacity():
            self._resize_for(required)

    def shrink_to_fit(self) -> None:
        """Shrink capacity to the smallest bucket count holding current entries."""
        self._resize_for(len(self._slots))

    def __len__(self) -> int:
        return len(self._slots)

    def __repr__(self) -> str:
        return f"LocalEntryStore(len={len(self._slots)}, capacity={self.capacity()})"
