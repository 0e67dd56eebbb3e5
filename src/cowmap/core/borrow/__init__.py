"""Borrow functionality: scopes, leases and reference handles."""

from cowmap.core.borrow.models import Lease, Ref, as_ref
from cowmap.core.borrow.scope import BorrowScope

__all__ = [
    "BorrowScope",
    "Lease",
    "Ref",
    "as_ref",
]
