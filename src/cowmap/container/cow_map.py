"""Copy-on-write hash map.

Usage:
    with BorrowScope("request") as scope:
        cow_map = CowMap()
        cow_map.insert_borrowed_value("key1", scope.lend(source))  # no copy
        cow_map.insert_owned("key2", [4, 5, 6])

        cow_map.get("key1")                # reads source directly
        cow_map.get_mut("key1").append(7)  # clones once, source untouched
        cow_map.entry_form("key1")         # Form.OWNED

        view = cow_map.borrow_fields()     # every entry Borrowed from cow_map
"""

from __future__ import annotations

import itertools
import logging
from collections.abc import Hashable, Iterator
from types import TracebackType
from typing import Self, cast

from cowmap.config import CowMapSettings
from cowmap.container.models import Entry, MapStats
from cowmap.core.borrow import BorrowScope, Ref, as_ref
from cowmap.core.cow import CowValue, Form, KeyPolicy, get_cloner
from cowmap.core.types import Owned
from cowmap.errors import ScopeClosedError
from cowmap.storage import EntryStore, LocalEntryStore

logger = logging.getLogger(__name__)

_map_ids = itertools.count()


class CowMap[K: Hashable, V]:
    """Hash map whose keys and values are each Borrowed or Owned.

    Borrowed entries hold a Ref into caller-owned data and are cloned into
    Owned form only when mutable access or materialization is requested.
    The map also acts as a lender: borrow_fields() hands out refs tied to
    this map's own scope, which every data-changing operation invalidates.

    Not thread-safe; wrap in an external lock for concurrent use.

    Args:
        capacity: Entries to reserve room for. Defaults to settings.initial_capacity.
        settings: Defaults for capacity, key policy and clone mode. Loaded from
            the environment when omitted.
        store: Entry store backend. Defaults to LocalEntryStore.
        name: Label used in logs and error messages.
    """

    def __init__(
        self,
        capacity: int | None = None,
        *,
        settings: CowMapSettings | None = None,
        store: EntryStore[Entry] | None = None,
        name: str | None = None,
    ):
        """Initialize an empty map.

        Args:
            capacity: Entries to reserve room for.
            settings: Map defaults. Loaded from COWMAP_* environment when omitted.
            store: Entry store backend.
            name: Label used in logs and error messages.

        Raises:
            ValueError: If capacity is negative.
        """
        self._settings = settings if settings is not None else CowMapSettings()
        initial = self._settings.initial_capacity if capacity is None else capacity
        if initial < 0:
            raise ValueError(f"Capacity must be non-negative, got {initial}")
        if store is None:
            store = LocalEntryStore(initial)
        elif initial:
            store.reserve(initial)
        self._store: EntryStore[Entry] = store
        self._name = name if name is not None else f"cowmap-{next(_map_ids)}"
        self._scope = BorrowScope(self._name)
        self._key_policy = self._settings.key_policy
        self._cloner = get_cloner(self._settings.clone_mode)
        self._stats = MapStats()

    @classmethod
    def new(cls, *, settings: CowMapSettings | None = None) -> CowMap[K, V]:
        """Create an empty map."""
        return cls(settings=settings)

    @classmethod
    def with_capacity(
        cls, capacity: int, *, settings: CowMapSettings | None = None
    ) -> CowMap[K, V]:
        """Create an empty map with room for at least capacity entries.

        Args:
            capacity: Number of entries insertable without growth.
            settings: Map defaults.

        Returns:
            New map with capacity() >= capacity.
        """
        return cls(capacity, settings=settings)

    # Introspection and store pass-through

    @property
    def name(self) -> str:
        """Return the map label."""
        return self._name

    @property
    def key_policy(self) -> KeyPolicy:
        """Return the key policy fixed at construction."""
        return self._key_policy

    @property
    def stats(self) -> MapStats:
        """Return live cost counters."""
        return self._stats

    @property
    def scope(self) -> BorrowScope:
        """Return the scope refs from borrow_fields() are leased from."""
        return self._scope

    @property
    def is_closed(self) -> bool:
        """Check if close() has been called."""
        return self._scope.closed

    def capacity(self) -> int:
        """Lower bound on entries insertable without reallocation."""
        return self._store.capacity()

    def reserve(self, additional: int) -> None:
        """Reserve room for at least additional more entries.

        Args:
            additional: Number of further entries.
        """
        self._store.reserve(additional)

    def shrink_to_fit(self) -> None:
        """Release unused capacity (best effort)."""
        self._store.shrink_to_fit()

    def len(self) -> int:
        """Number of entries."""
        return self._store.len()

    def is_empty(self) -> bool:
        """Check if the map has no entries."""
        return self._store.is_empty()

    def _check_open(self) -> None:
        if self._scope.closed:
            raise ScopeClosedError(f"Map {self._name!r} is closed")

    # Insertion

    def _insert(
        self, lookup_key: Hashable, key: CowValue[K], value: CowValue[V]
    ) -> Owned[V] | None:
        """Store value under lookup_key, returning the replaced value owned.

        Args:
            lookup_key: Key object used for hashing and equality.
            key: Key cell in its requested form.
            value: Value cell in its requested form.

        Returns:
            Previous value in owned form, or None if the key was new.
        """
        self._check_open()
        entry = self._store.get(lookup_key)
        if entry is None:
            self._scope.invalidate()
            self._store.insert(lookup_key, Entry(key=key, value=value))
            return None

        previous_form = entry.value.form
        previous: V = entry.value.into_owned(self._cloner)
        if previous_form is Form.BORROWED:
            self._stats.clones += 1
        self._scope.invalidate()
        entry.value = value
        if self._key_policy is KeyPolicy.OVERWRITE:
            entry.key = key
        self._stats.replacements += 1
        return previous

    def insert_owned(self, key: K, value: V) -> Owned[V] | None:
        """Insert an owned key and an owned value.

        Ownership of both objects passes to the map; callers should not keep
        mutating them.

        Args:
            key: Key to store.
            value: Value to store.

        Returns:
            Previous value in owned form, or None if key was absent.
        """
        return self._insert(key, CowValue.owned(key), CowValue.owned(value))

    def insert_borrowed(self, key: Ref[K], value: Ref[V]) -> Owned[V] | None:
        """Insert a borrowed key and a borrowed value. Nothing is copied.

        Args:
            key: Ref to the key.
            value: Ref to the value.

        Returns:
            Previous value in owned form, or None if key was absent.

        Raises:
            TypeError: If key or value is not a Ref.
            DanglingReferenceError: If key or value is already stale.
        """
        key_ref = as_ref(key, "key")
        value_ref = as_ref(value, "value")
        return self._insert(
            key_ref.get(), CowValue.borrowed(key_ref), CowValue.borrowed(value_ref)
        )

    def insert_borrowed_key(self, key: Ref[K], value: V) -> Owned[V] | None:
        """Insert a borrowed key and an owned value.

        Args:
            key: Ref to the key.
            value: Value to store; ownership passes to the map.

        Returns:
            Previous value in owned form, or None if key was absent.

        Raises:
            TypeError: If key is not a Ref.
            DanglingReferenceError: If key is already stale.
        """
        key_ref = as_ref(key, "key")
        return self._insert(key_ref.get(), CowValue.borrowed(key_ref), CowValue.owned(value))

    def insert_borrowed_value(self, key: K, value: Ref[V]) -> Owned[V] | None:
        """Insert an owned key and a borrowed value.

        Args:
            key: Key to store; ownership passes to the map.
            value: Ref to the value.

        Returns:
            Previous value in owned form, or None if key was absent.

        Raises:
            TypeError: If value is not a Ref.
            DanglingReferenceError: If value is already stale.
        """
        value_ref = as_ref(value, "value")
        return self._insert(key, CowValue.owned(key), CowValue.borrowed(value_ref))

    # Access

    def get(self, key: K) -> V | None:
        """Read the value stored under key, whatever its form.

        Borrowed values are returned without copying and must be treated as
        read-only.

        Args:
            key: Key to look up.

        Returns:
            Stored value or None if absent.

        Raises:
            DanglingReferenceError: If the entry is Borrowed and stale.
        """
        self._check_open()
        entry = self._store.get(key)
        if entry is None:
            return None
        return entry.value.read()

    def _materialize(self, entry: Entry) -> bool:
        cloned = entry.value.materialize(self._cloner)
        if cloned:
            self._stats.clones += 1
        return cloned

    def get_mut(self, key: K) -> Owned[V] | None:
        """Get the value under key for mutation, cloning it once if Borrowed.

        Changes made through the result stay in this map.

        Args:
            key: Key to look up.

        Returns:
            Owned value or None if absent.

        Raises:
            DanglingReferenceError: If the entry is Borrowed and stale.
        """
        self._check_open()
        entry = self._store.get(key)
        if entry is None:
            return None
        self._materialize(entry)
        self._scope.invalidate()
        return entry.value.get_mut(self._cloner)

    def make_owned(self, key: K) -> Owned[V] | None:
        """Force the value under key into Owned form without exposing mutability.

        Idempotent: only the first call on a Borrowed entry clones.

        Args:
            key: Key to look up.

        Returns:
            Owned value or None if absent.

        Raises:
            DanglingReferenceError: If the entry is Borrowed and stale.
        """
        self._check_open()
        entry = self._store.get(key)
        if entry is None:
            return None
        if self._materialize(entry):
            self._scope.invalidate()
        return entry.value.make_owned(self._cloner)

    def entry_form(self, key: K) -> Form | None:
        """Report whether the value under key is Borrowed or Owned.

        Args:
            key: Key to look up.

        Returns:
            Form or None if absent.
        """
        self._check_open()
        entry = self._store.get(key)
        return None if entry is None else entry.value.form

    def key_form(self, key: K) -> Form | None:
        """Report whether the stored key equal to key is Borrowed or Owned.

        Args:
            key: Key to look up.

        Returns:
            Form or None if absent.
        """
        self._check_open()
        entry = self._store.get(key)
        return None if entry is None else entry.key.form

    def forms(self) -> dict[K, Form]:
        """Map every stored key, as keys() yields it, to the form of its value.

        Returns:
            Dict of key -> Form. Values are not dereferenced.

        Raises:
            DanglingReferenceError: On reaching a stale borrowed key.
        """
        self._check_open()
        return {cast(K, entry.key.read()): entry.value.form for _, entry in self._store.items()}

    def keys(self) -> Iterator[K]:
        """Iterate stored keys. Each call returns a fresh iterator.

        Yields:
            Each stored key, in its stored form.

        Raises:
            DanglingReferenceError: On reaching a stale borrowed key.
        """
        self._check_open()
        for _, entry in self._store.items():
            yield entry.key.read()

    def items(self) -> Iterator[tuple[K, V]]:
        """Iterate (key, value) pairs without materializing anything.

        Yields:
            Tuples of (key, value).

        Raises:
            DanglingReferenceError: On reaching a stale borrowed entry.
        """
        self._check_open()
        for _, entry in self._store.items():
            yield entry.key.read(), entry.value.read()

    # Derived maps

    def borrow_fields(self) -> CowMap[K, V]:
        """Derive a map whose every key and value borrows from this map.

        This map is left untouched. The result reads the same data, reports
        Form.BORROWED everywhere, and dangles once this map is mutated or
        closed. Entries the result materializes itself stay valid.

        Returns:
            New map bound to this map's lifetime.
        """
        self._check_open()
        view: CowMap[K, V] = CowMap(
            self._store.len(), settings=self._settings, name=f"{self._name}.borrowed"
        )
        for lookup_key, entry in self._store.items():
            view._store.insert(
                lookup_key,
                Entry(
                    key=entry.key.reborrow(self._scope),
                    value=entry.value.reborrow(self._scope),
                ),
            )
        logger.debug(
            "Map %s lent %d entries at generation %d",
            self._name,
            view.len(),
            self._scope.generation,
        )
        return view

    def clone(self) -> CowMap[K, V]:
        """Copy the map keeping each entry's form.

        Borrowed entries share their refs; owned keys and values are cloned.

        Returns:
            Independent map with the same contents.
        """
        self._check_open()
        other: CowMap[K, V] = CowMap(
            self._store.capacity(), settings=self._settings, name=f"{self._name}.clone"
        )
        for lookup_key, entry in self._store.items():
            other._store.insert(
                lookup_key,
                Entry(
                    key=entry.key.duplicate(self._cloner),
                    value=entry.value.duplicate(self._cloner),
                ),
            )
        return other

    def close(self) -> None:
        """End the map's lifetime: drop all entries and invalidate lent refs."""
        if self._scope.closed:
            return
        for key in list(self._store.keys()):
            self._store.remove(key)
        self._scope.close()
        logger.debug("Map %s closed", self._name)

    # Python protocol support

    def __len__(self) -> int:
        return self._store.len()

    def __contains__(self, key: object) -> bool:
        return key in self._store

    def __iter__(self) -> Iterator[K]:
        return self.keys()

    def __copy__(self) -> CowMap[K, V]:
        return self.clone()

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        if self._scope.closed:
            return f"CowMap({self._name!r}, closed)"
        entries = [entry for _, entry in self._store.items()]
        borrowed = sum(1 for entry in entries if entry.value.form is Form.BORROWED)
        return f"CowMap({self._name!r}, len={len(entries)}, borrowed={borrowed})"
