"""
Runtime Configuration

Central configuration for tree construction defaults and logging.
"""

from __future__ import annotations

import copy
import logging
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

load_dotenv()


# Environment variable prefix
ENV_PREFIX = "CANOPY_"

DEFAULT_HASH_ALGORITHM = "sha256"


@dataclass
class RuntimeConfig:
    """
    Runtime configuration for canopy.

    Can be loaded from:
    - Environment variables (and a .env file)
    - YAML file
    - Programmatic construction
    """
    hash_algorithm: str = DEFAULT_HASH_ALGORITHM
    log_level: str = "WARNING"
    log_file: Optional[str] = None
    extra: dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def _get_env_overrides() -> dict[str, Any]:
        """
        Get configuration overrides from environment variables.

        Supported variables:
        - CANOPY_HASH_ALGORITHM: default hash algorithm for new trees
        - CANOPY_LOG_LEVEL: logging level name (DEBUG, INFO, ...)
        - CANOPY_LOG_FILE: optional log file path
        """
        overrides: dict[str, Any] = {}

        if os.getenv(f"{ENV_PREFIX}HASH_ALGORITHM"):
            overrides["hash_algorithm"] = os.getenv(f"{ENV_PREFIX}HASH_ALGORITHM")
        if os.getenv(f"{ENV_PREFIX}LOG_LEVEL"):
            overrides["log_level"] = os.getenv(f"{ENV_PREFIX}LOG_LEVEL")
        if os.getenv(f"{ENV_PREFIX}LOG_FILE"):
            overrides["log_file"] = os.getenv(f"{ENV_PREFIX}LOG_FILE")

        return overrides

    @classmethod
    def from_env(cls) -> "RuntimeConfig":
        """Load configuration purely from environment variables."""
        return cls.from_dict(cls._get_env_overrides())

    @classmethod
    def from_yaml(cls, path: str | Path) -> "RuntimeConfig":
        """Load configuration from a YAML file."""
        import yaml
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f)

        return cls.from_dict(data or {})

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RuntimeConfig":
        """Load configuration from a dictionary (supports partial data)."""
        logging_data = data.get("logging", {}) or {}
        return cls(
            hash_algorithm=str(data.get("hash_algorithm", DEFAULT_HASH_ALGORITHM)).lower(),
            log_level=data.get("log_level", logging_data.get("level", "WARNING")),
            log_file=data.get("log_file", logging_data.get("file")),
            extra=data.get("extra", {}) or {},
        )

    def with_env_overrides(self) -> "RuntimeConfig":
        """
        Return a new config with environment variable overrides applied.

        This allows loading from a config file first, then overlaying env vars.
        """
        overrides = self._get_env_overrides()
        if not overrides:
            return self

        new_config = copy.deepcopy(self)
        for key, value in overrides.items():
            if key == "hash_algorithm":
                value = value.lower()
            setattr(new_config, key, value)
        return new_config

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to a dictionary."""
        return {
            "hash_algorithm": self.hash_algorithm,
            "log_level": self.log_level,
            "log_file": self.log_file,
            "extra": self.extra,
        }


def setup_logging(
    level: str | None = None,
    log_file: str | None = None,
    config: RuntimeConfig | None = None,
) -> None:
    """
    Configure stdlib logging for applications embedding canopy.

    Arguments left as None are taken from ``config`` (the default runtime
    config when not given), i.e. from CANOPY_LOG_LEVEL / CANOPY_LOG_FILE or
    the ``logging`` section of a YAML file.
    """
    config = config or get_default_config()
    level = level or config.log_level
    log_file = log_file or config.log_file

    log_level = getattr(logging, level.upper(), logging.WARNING)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
    )


# Global default configuration
_default_config: Optional[RuntimeConfig] = None


def get_default_config() -> RuntimeConfig:
    """Get the default runtime configuration."""
    global _default_config
    if _default_config is None:
        _default_config = RuntimeConfig.from_env()
    return _default_config


def set_default_config(config: RuntimeConfig | None) -> None:
    """Set the default runtime configuration (None resets to env defaults)."""
    global _default_config
    _default_config = config
