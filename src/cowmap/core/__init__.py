"""Core functionalities: borrow tracking and the copy-on-write cell.

Architecture Note:
    core/ contains the building blocks with per-object state only.
    For containers and storage, see container/ and storage/.
"""

from cowmap.core.borrow import BorrowScope, Lease, Ref, as_ref
from cowmap.core.cow import (
    CloneMode,
    CowValue,
    Form,
    KeyPolicy,
    ToOwned,
    get_cloner,
    to_owned,
    to_owned_shallow,
)
from cowmap.core.types import Owned

__all__ = [
    # Types
    "Owned",
    # Borrow
    "BorrowScope",
    "Lease",
    "Ref",
    "as_ref",
    # Cow
    "CowValue",
    "Form",
    "KeyPolicy",
    "ToOwned",
    "CloneMode",
    "get_cloner",
    "to_owned",
    "to_owned_shallow",
]
