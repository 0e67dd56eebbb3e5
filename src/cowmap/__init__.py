"""cowmap: copy-on-write hash map with borrowed and owned entries.

Usage:
    from cowmap import BorrowScope, CowMap, Form

    source = [1, 2, 3]
    with BorrowScope("caller") as scope:
        cow_map = CowMap()
        cow_map.insert_borrowed(scope.lend("key1"), scope.lend(source))
        cow_map.insert_owned("key2", [4, 5, 6])

        cow_map.get_mut("key1")[:] = [4, 5, 6]
        assert cow_map.entry_form("key1") is Form.OWNED
        assert source == [1, 2, 3]
"""

__version__ = "0.1.0"

# Config
from cowmap.config import CowMapSettings

# Containers
from cowmap.container import CowMap, MapStats

# Core primitives
from cowmap.core import (
    BorrowScope,
    CowValue,
    Form,
    KeyPolicy,
    Lease,
    Owned,
    Ref,
    ToOwned,
    to_owned,
)

# Errors
from cowmap.errors import CowMapError, DanglingReferenceError, ScopeClosedError

# Storage
from cowmap.storage import EntryStore, LocalEntryStore

__all__ = [
    # Version
    "__version__",
    # Core
    "BorrowScope",
    "Lease",
    "Ref",
    "CowValue",
    "Form",
    "KeyPolicy",
    "Owned",
    "ToOwned",
    "to_owned",
    # Containers
    "CowMap",
    "MapStats",
    # Storage
    "EntryStore",
    "LocalEntryStore",
    # Config
    "CowMapSettings",
    # Errors
    "CowMapError",
    "DanglingReferenceError",
    "ScopeClosedError",
]
