"""Core type definitions for cowmap."""

type Owned[T] = T
"""Type alias indicating a value is a private copy held by (or taken from) a map.

When you see `Owned[T]` in a return type, mutating the value never affects any
borrowed source the map was filled from.
"""
