"""Copy-on-write value cell.

Usage:
    cell = CowValue.borrowed(scope.lend([1, 2, 3]))
    cell.read()        # [1, 2, 3], no copy
    cell.get_mut().append(4)  # clones once, source list untouched
    cell.form          # Form.OWNED
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, cast

from cowmap.core.borrow import BorrowScope, Ref
from cowmap.core.cow.models import Form
from cowmap.core.cow.operations import to_owned

logger = logging.getLogger(__name__)

_UNSET: Any = object()


class CowValue[T]:
    """Single slot in exactly one of two states: Borrowed(ref) or Owned(value).

    The only in-place transition is Borrowed → Owned. Going back to Borrowed
    means building a new cell via reborrow().
    """

    __slots__ = ("_ref", "_owned")

    def __init__(self, *, ref: Ref[T] | None = None, owned: T = _UNSET) -> None:
        if (ref is None) == (owned is _UNSET):
            raise ValueError("CowValue needs exactly one of ref or owned")
        self._ref = ref
        self._owned = owned

    @classmethod
    def borrowed(cls, ref: Ref[T]) -> CowValue[T]:
        """Create a cell in Borrowed state."""
        return cls(ref=ref)

    @classmethod
    def owned(cls, value: T) -> CowValue[T]:
        """Create a cell in Owned state."""
        return cls(owned=value)

    @property
    def form(self) -> Form:
        """Return the current state tag. No side effects."""
        return Form.BORROWED if self._ref is not None else Form.OWNED

    @property
    def ref(self) -> Ref[T] | None:
        """Return the borrowed handle, or None when owned."""
        return self._ref

    def read(self) -> T:
        """Dereference either state.

        Returns:
            The current value. Borrowed data must not be mutated by the caller.

        Raises:
            DanglingReferenceError: If Borrowed and the ref is stale.
        """
        if self._ref is not None:
            return self._ref.get()
        return cast(T, self._owned)

    def materialize(self, cloner: Callable[[T], T] = to_owned) -> bool:
        """Transition Borrowed → Owned by cloning the referent.

        Args:
            cloner: Function producing the private copy.

        Returns:
            True if a clone was made, False if already owned.

        Raises:
            DanglingReferenceError: If Borrowed and the ref is stale.
        """
        if self._ref is None:
            return False
        self._owned = cloner(self._ref.get())
        self._ref = None
        logger.debug("Materialized borrowed %s", type(self._owned).__name__)
        return True

    def get_mut(self, cloner: Callable[[T], T] = to_owned) -> T:
        """Materialize, then return the owned payload for mutation.

        Args:
            cloner: Function producing the private copy if needed.

        Returns:
            Owned value; changes through it stay private to this cell.
        """
        self.materialize(cloner)
        return cast(T, self._owned)

    def make_owned(self, cloner: Callable[[T], T] = to_owned) -> T:
        """Materialize without requesting mutation.

        Args:
            cloner: Function producing the private copy if needed.

        Returns:
            Owned value, for reading.
        """
        self.materialize(cloner)
        return cast(T, self._owned)

    def into_owned(self, cloner: Callable[[T], T] = to_owned) -> T:
        """Extract an owned value, cloning a borrowed referent.

        The cell itself is left as it was; callers drop it afterwards.

        Args:
            cloner: Function producing the private copy if needed.

        Returns:
            Owned value.
        """
        if self._ref is not None:
            return cloner(self._ref.get())
        return cast(T, self._owned)

    def reborrow(self, scope: BorrowScope) -> CowValue[T]:
        """Build a Borrowed cell pointing at this cell's data.

        Owned payloads are lent from scope; borrowed refs keep their leases
        and gain one from scope.

        Args:
            scope: Scope standing for the lifetime of this cell's owner.

        Returns:
            New cell in Borrowed state.
        """
        if self._ref is not None:
            return CowValue.borrowed(self._ref.reborrow(scope))
        return CowValue.borrowed(scope.lend(cast(T, self._owned)))

    def duplicate(self, cloner: Callable[[T], T] = to_owned) -> CowValue[T]:
        """Copy the cell keeping its form.

        Borrowed cells share their ref; owned payloads are cloned.

        Args:
            cloner: Function cloning owned payloads.

        Returns:
            New independent cell.
        """
        if self._ref is not None:
            self._ref.check()
            return CowValue.borrowed(self._ref)
        return CowValue.owned(cloner(cast(T, self._owned)))

    def __repr__(self) -> str:
        if self._ref is not None:
            return f"Borrowed({self._ref!r})"
        return f"Owned({self._owned!r})"
