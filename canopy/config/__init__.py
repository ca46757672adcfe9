"""
Runtime Configuration Module

Provides configuration loading and logging setup for canopy.
"""

from .runtime import (
    DEFAULT_HASH_ALGORITHM,
    RuntimeConfig,
    get_default_config,
    set_default_config,
    setup_logging,
)

__all__ = [
    "DEFAULT_HASH_ALGORITHM",
    "RuntimeConfig",
    "get_default_config",
    "set_default_config",
    "setup_logging",
]
