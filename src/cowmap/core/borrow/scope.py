"""Borrow scope service.

BorrowScope is a stateful service that manages the validity window of lent
references with generation tracking, so stale handles are detected on use.
"""

from __future__ import annotations

import itertools
import logging
from types import TracebackType
from typing import Self

from cowmap.core.borrow.models import Lease, Ref
from cowmap.errors import ScopeClosedError

logger = logging.getLogger(__name__)

_scope_ids = itertools.count()


class BorrowScope:
    """Issues leases and validates them by generation.

    Invalidating the scope bumps its generation: every lease issued before
    becomes stale while the scope itself stays usable. Closing the scope
    makes all leases stale permanently.

    Args:
        name: Label used in logs and error messages.
    """

    def __init__(self, name: str | None = None):
        """Initialize an open scope at generation 0.

        Args:
            name: Label used in logs and error messages.
        """
        self._id = next(_scope_ids)
        self._name = name if name is not None else f"scope-{self._id}"
        self._generation = 0
        self._closed = False

    @property
    def name(self) -> str:
        """Return the scope label."""
        return self._name

    @property
    def generation(self) -> int:
        """Return the current generation."""
        return self._generation

    @property
    def closed(self) -> bool:
        """Return True once close() has been called."""
        return self._closed

    def lease(self) -> Lease:
        """Issue a lease for the current generation.

        Returns:
            Lease valid until the next invalidate() or close().

        Raises:
            ScopeClosedError: If the scope is closed.
        """
        if self._closed:
            raise ScopeClosedError(f"Cannot lend from closed scope {self._name!r}")
        return Lease(scope=self, generation=self._generation)

    def lend[T](self, value: T) -> Ref[T]:
        """Lend value as a borrowed reference bound to this scope.

        Args:
            value: Data owned by the caller.

        Returns:
            Ref to value, valid for this scope's current generation.

        Raises:
            ScopeClosedError: If the scope is closed.
        """
        return Ref(value, (self.lease(),))

    def is_alive(self, lease: Lease) -> bool:
        """Check if a lease issued by this scope is still valid.

        Args:
            lease: Lease to check.

        Returns:
            True if lease belongs to this scope, the scope is open and on the
            lease's generation.
        """
        if lease.scope is not self or self._closed:
            return False
        return lease.generation == self._generation

    def invalidate(self) -> None:
        """Make every outstanding lease stale. The scope stays open."""
        self._generation += 1
        logger.debug("Scope %s invalidated, generation now %d", self._name, self._generation)

    def close(self) -> None:
        """End the scope. Idempotent."""
        if self._closed:
            return
        self._closed = True
        self._generation += 1
        logger.debug("Scope %s closed", self._name)

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
        state = "closed" if self._closed else f"gen={self._generation}"
        return f"BorrowScope({self._name!r}, {state})"
