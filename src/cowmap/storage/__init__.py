"""Entry store backends."""

from cowmap.storage.local import LocalEntryStore
from cowmap.storage.protocol import EntryStore

__all__ = [
    "EntryStore",
    "LocalEntryStore",
]
