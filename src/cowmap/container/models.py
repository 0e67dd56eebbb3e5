"""Container models: entry slots and counters."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from cowmap.core.cow import CowValue


@dataclass(slots=True)
class Entry:
    """One slot: key and value, each in Borrowed or Owned form."""

    key: CowValue[Any]
    value: CowValue[Any]


@dataclass(slots=True)
class MapStats:
    """Cost counters for a single map."""

    clones: int = 0
    """Borrowed → Owned clones of values, including replaced values."""

    replacements: int = 0
    """Inserts that replaced an existing entry."""
