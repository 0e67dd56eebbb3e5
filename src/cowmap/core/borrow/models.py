"""Borrow models: leases and reference handles.

A Ref is the Python stand-in for a borrowed reference. It keeps the referent
alive (plain reference counting) and carries one or more leases. Every
dereference validates all leases, so a Ref outliving any scope it was stamped
by raises DanglingReferenceError instead of handing back data whose owner has
moved on.

Usage:
    with BorrowScope("request") as scope:
        ref = scope.lend([1, 2, 3])
        ref.get()  # [1, 2, 3]
    ref.get()  # raises DanglingReferenceError
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from cowmap.errors import DanglingReferenceError

if TYPE_CHECKING:
    from cowmap.core.borrow.scope import BorrowScope


@dataclass(frozen=True, slots=True)
class Lease:
    """Liveness token issued by a BorrowScope.

    A lease stays valid while its scope is open and still on the generation
    that issued it.
    """

    scope: BorrowScope
    generation: int

    def __hash__(self) -> int:
        return hash((id(self.scope), self.generation))

    def is_alive(self) -> bool:
        """Check if the issuing scope still honours this lease.

        Returns:
            True if the scope is open and on the same generation.
        """
        return self.scope.is_alive(self)


class Ref[T]:
    """Shared, read-only handle to externally owned data.

    Refs are created by BorrowScope.lend() or by reborrowing an existing Ref.
    Mutating the referent through get() is outside the contract: borrowed
    data is read-only to the map holding it.
    """

    __slots__ = ("_value", "_leases")

    def __init__(self, value: T, leases: tuple[Lease, ...]) -> None:
        if not leases:
            raise ValueError("Ref requires at least one lease")
        self._value = value
        self._leases = leases

    @property
    def leases(self) -> tuple[Lease, ...]:
        """Return the leases this ref is validated against."""
        return self._leases

    def is_alive(self) -> bool:
        """Check whether every lease on this ref is still valid.

        Returns:
            True if the ref can be dereferenced.
        """
        return all(lease.is_alive() for lease in self._leases)

    def check(self) -> None:
        """Validate liveness without dereferencing.

        Raises:
            DanglingReferenceError: If any lease is stale.
        """
        for lease in self._leases:
            if not lease.is_alive():
                raise DanglingReferenceError(
                    f"Reference outlived scope {lease.scope.name!r} "
                    f"(lease generation {lease.generation})",
                    lease=lease,
                )

    def get(self) -> T:
        """Dereference the handle.

        Returns:
            The referenced value.

        Raises:
            DanglingReferenceError: If any lease is stale.
        """
        self.check()
        return self._value

    def reborrow(self, scope: BorrowScope) -> Ref[T]:
        """Derive a new ref to the same data, additionally bound to scope.

        The result is valid only while both this ref's scopes and scope are.

        Args:
            scope: Extra scope to bind the new ref to.

        Returns:
            New Ref sharing the referent.

        Raises:
            DanglingReferenceError: If this ref is already stale.
        """
        self.check()
        return Ref(self._value, (*self._leases, scope.lease()))

    def __repr__(self) -> str:
        state = "alive" if self.is_alive() else "dangling"
        return f"Ref({type(self._value).__name__}, {state})"


def as_ref(candidate: Any, role: str) -> Ref[Any]:
    """Validate a borrowed argument at the insertion boundary.

    Args:
        candidate: Object passed where a borrowed reference is expected.
        role: "key" or "value", used in error messages.

    Returns:
        The candidate, typed as Ref.

    Raises:
        TypeError: If candidate is not a Ref.
        DanglingReferenceError: If candidate is stale.
    """
    if not isinstance(candidate, Ref):
        raise TypeError(
            f"Borrowed {role} must be a Ref from BorrowScope.lend(), "
            f"got {type(candidate).__name__}"
        )
    candidate.check()
    return candidate
