"""Copy-on-write containers."""

from cowmap.container.cow_map import CowMap
from cowmap.container.models import Entry, MapStats

__all__ = [
    "CowMap",
    "Entry",
    "MapStats",
]
