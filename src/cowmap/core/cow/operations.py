"""Pure functions for materializing borrowed data."""

from __future__ import annotations

import copy
from collections.abc import Callable
from typing import Literal, TypeVar, cast

from cowmap.core.cow.models import ToOwned

T = TypeVar("T")

CloneMode = Literal["deep", "shallow"]


def to_owned(value: T) -> T:
    """Produce an independent copy of value.

    Uses the ToOwned protocol when implemented, otherwise a deep copy.

    Args:
        value: Value to copy.

    Returns:
        Copy that shares no mutable state with value.
    """
    if isinstance(value, ToOwned):
        return cast(T, value.__to_owned__())
    return copy.deepcopy(value)


def to_owned_shallow(value: T) -> T:
    """Copy only the top-level container.

    Uses the ToOwned protocol when implemented, otherwise copy.copy().

    Args:
        value: Value to copy.

    Returns:
        Shallow copy of value.
    """
    if isinstance(value, ToOwned):
        return cast(T, value.__to_owned__())
    return copy.copy(value)


def get_cloner(mode: CloneMode) -> Callable[[T], T]:
    """Get the clone function for a clone mode.

    Args:
        mode: "deep" or "shallow".

    Returns:
        Pure function implementing the clone.

    Raises:
        ValueError: If mode is unknown.
    """
    cloners: dict[str, Callable[[T], T]] = {
        "deep": to_owned,
        "shallow": to_owned_shallow,
    }
    if mode not in cloners:
        raise ValueError(f"Unknown clone mode: {mode!r}")
    return cloners[mode]
