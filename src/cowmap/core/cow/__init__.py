"""Copy-on-write functionality: value cell, form, and cloning operations."""

from cowmap.core.cow.core import CowValue
from cowmap.core.cow.models import Form, KeyPolicy, ToOwned
from cowmap.core.cow.operations import CloneMode, get_cloner, to_owned, to_owned_shallow

__all__ = [
    # Models
    "Form",
    "KeyPolicy",
    "ToOwned",
    # Core
    "CowValue",
    # Operations
    "CloneMode",
    "get_cloner",
    "to_owned",
    "to_owned_shallow",
]
