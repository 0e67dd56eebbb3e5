"""Cow models: form and key-policy enumerations, cloning protocol.

ToOwned is an optional interface values can implement to control how a
borrowed value is turned into a private copy. Values without it are
deep-copied.
"""

from __future__ import annotations

from enum import Enum, auto
from typing import Protocol, Self, runtime_checkable


class Form(Enum):
    """Whether a stored key or value is a reference or a private copy."""

    BORROWED = auto()
    """Non-owning reference into data held outside the map."""

    OWNED = auto()
    """Private copy owned by the map."""


@runtime_checkable
class ToOwned(Protocol):
    """Borrowed instance → independent owned instance."""

    def __to_owned__(self) -> Self: ...


class KeyPolicy(Enum):
    """What happens to the stored key when an equal key is inserted again.

    A map uses one policy for its whole life.
    """

    RETAIN_FIRST = auto()
    """Keep the first-inserted key and its form. Default."""

    OVERWRITE = auto()
    """Replace the stored key with the new key in its requested form."""
