"""Exception hierarchy for cowmap."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cowmap.core.borrow.models import Lease


class CowMapError(Exception):
    """Base exception for all cowmap errors."""


class DanglingReferenceError(CowMapError):
    """Raised when a borrowed reference is used after its scope ended.

    Attributes:
        lease: The stale lease that failed validation, if known.
    """

    def __init__(self, message: str, *, lease: Lease | None = None) -> None:
        self.lease = lease
        super().__init__(message)


class ScopeClosedError(DanglingReferenceError):
    """Raised when lending from, or operating on, a closed scope."""
