"""Global configuration for Arbiter.

This module provides centralized configuration management with support for
environment variables and sensible defaults.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings


class ArbiterConfig(BaseSettings):
    """Arbiter configuration settings.

    Values can be overridden via environment variables with ARBITER_ prefix.
    Example: ARBITER_MAX_HIERARCHY_DEPTH=128 overrides max_hierarchy_depth.
    """

    # Resolution policy
    prefer_direct_over_varargs: bool = Field(
        default=True,
        description="Skip varargs expansion whenever a fixed-arity candidate applies",
    )
    zero_arg_varargs_fallback: bool = Field(
        default=True,
        description="With no trailing arguments, prefer the most general varargs element type",
    )

    # Lattice walks
    max_hierarchy_depth: int = Field(
        default=64,
        ge=1,
        le=1024,
        description="Maximum supertype depth visited by hierarchy walks",
    )

    # Registry
    cache_members: bool = Field(
        default=True,
        description="Memoize per-type member indexes in the registry",
    )

    # CLI
    log_level: str = Field(
        default="WARNING",
        description="Logging level used by the CLI",
    )

    model_config = {
        "env_prefix": "ARBITER_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


@lru_cache
def get_config() -> ArbiterConfig:
    """Get cached configuration instance.

    Returns:
        ArbiterConfig singleton instance.
    """
    return ArbiterConfig()


def reload_config() -> ArbiterConfig:
    """Reload configuration (clears cache).

    Returns:
        Fresh ArbiterConfig instance.
    """
    get_config.cache_clear()
    return get_config()
