"""Loader settings, environment-driven via pydantic-settings.

Every field can be overridden with an ``ENTITY_GRAPH_`` prefixed environment
variable or a ``.env`` file, e.g. ``ENTITY_GRAPH_MAX_IN_PARAMS=900``.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LoaderSettings(BaseSettings):
    """Tunables for the fetch planner."""

    model_config = SettingsConfigDict(
        env_prefix="ENTITY_GRAPH_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Largest IN (...) list sent in one scoped statement
    max_in_params: int = Field(default=500, ge=1)

    # Resolve deferred relationships or refuse to
    raise_on_lazy_load: bool = False

    # Lazy loads of one Type.relationship before a warning is logged; 0 disables
    nplus1_warning_threshold: int = Field(default=10, ge=0)

    log_level: str = "WARNING"

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v


@lru_cache
def get_settings() -> LoaderSettings:
    return LoaderSettings()
