"""Configuration settings using Pydantic Settings.

Provides typed defaults for new maps with environment variable support.

Usage:
    from cowmap.config import CowMapSettings

    # Load from environment variables (COWMAP_*)
    settings = CowMapSettings()

    # Or override with explicit values
    settings = CowMapSettings(key_policy=KeyPolicy.OVERWRITE)
"""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from cowmap.core.cow import CloneMode, KeyPolicy


class CowMapSettings(BaseSettings):  # type: ignore[misc]
    """Defaults applied when constructing a CowMap.

    Attributes:
        initial_capacity: Entries to reserve room for on construction.
        key_policy: Stored-key handling on replacement.
        clone_mode: How borrowed data is copied on materialization.

    Environment Variables:
        COWMAP_INITIAL_CAPACITY
        COWMAP_KEY_POLICY (RETAIN_FIRST or OVERWRITE)
        COWMAP_CLONE_MODE (deep or shallow)
    """

    model_config = SettingsConfigDict(
        env_prefix="COWMAP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    initial_capacity: int = Field(default=0, ge=0)
    key_policy: KeyPolicy = KeyPolicy.RETAIN_FIRST
    clone_mode: CloneMode = "deep"

    @field_validator("key_policy", mode="before")
    @classmethod
    def _parse_key_policy(cls, value: object) -> object:
        """Accept enum member names (case-insensitive) from the environment."""
        if isinstance(value, str):
            try:
                return KeyPolicy[value.upper()]
            except KeyError as e:
                raise ValueError(f"Unknown key policy: {value!r}") from e
        return value
