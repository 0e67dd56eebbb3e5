"""Configuration module using Pydantic Settings.

Usage:
    from cowmap.config import CowMapSettings

    settings = CowMapSettings(initial_capacity=64)
"""

from cowmap.config.settings import CowMapSettings

__all__ = [
    "CowMapSettings",
]
