"""
Centralized configuration for trellis.

Uses Pydantic BaseSettings for environment variable integration
and validation. All configurable values should be defined here.

Configuration sources (in order of precedence):
1. Explicit constructor arguments
2. Environment variables (TRELLIS_*)
3. .env file
4. Default values

Example:
    from trellis.config import get_config

    config = get_config()
    print(config.pypi_index_url)  # From TRELLIS_PYPI_INDEX_URL or default

    # Override at runtime
    config = get_config(log_level="debug")
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from trellis.consts import DEFAULT_PYPI_INDEX_URL
from trellis.errors import CacheDirError
from trellis.platform import Platform


def _default_cache_dir() -> Optional[str]:
    xdg = os.environ.get("XDG_CACHE_HOME")
    if xdg:
        return os.path.join(xdg, "trellis")
    try:
        return str(Path.home() / ".cache" / "trellis")
    except RuntimeError:
        # No resolvable home directory (stripped containers, some CI runners)
        return None


class TrellisConfig(BaseSettings):
    """
    Central configuration for trellis.

    All settings can be overridden via environment variables
    prefixed with TRELLIS_.

    Example:
        export TRELLIS_CACHE_DIR=/var/cache/trellis
        export TRELLIS_LOG_LEVEL=debug
    """

    model_config = SettingsConfigDict(
        env_prefix="TRELLIS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Caching
    cache_dir: Optional[str] = Field(
        default_factory=_default_cache_dir,
        description="Root cache directory (package metadata lives under <cache_dir>/pypi)",
    )

    # PyPI
    pypi_index_url: str = Field(
        default=DEFAULT_PYPI_INDEX_URL,
        description="Simple-API index used for PyPI metadata",
    )
    http_timeout: float = Field(
        default=30.0,
        gt=0,
        description="HTTP timeout in seconds for package metadata requests",
    )

    # Host platform override
    platform: Optional[Platform] = Field(
        default=None,
        description="Pretend the host is this platform (e.g. linux-64)",
    )

    # Logging
    log_level: Literal["debug", "info", "warning", "error"] = Field(
        default="warning",
        description="Logging level for trellis",
    )
    log_format: Literal["json", "text"] = Field(
        default="text",
        description="Log output format (json for log shippers, text for console)",
    )

    @field_validator("cache_dir")
    @classmethod
    def expand_path(cls, v: Optional[str]) -> Optional[str]:
        """Expand ~ and environment variables in paths."""
        if v is None:
            return v
        return os.path.expanduser(os.path.expandvars(v))

    @field_validator("platform", mode="before")
    @classmethod
    def parse_platform(cls, v: object) -> object:
        if isinstance(v, str):
            if not v.strip():
                return None
            return Platform.parse(v)
        return v

    def default_cache_dir(self) -> Path:
        """Return the cache root, raising ``CacheDirError`` if it is unknown."""
        if not self.cache_dir:
            raise CacheDirError("could not determine default cache directory")
        return Path(self.cache_dir)


# Global singleton
_config: Optional[TrellisConfig] = None


def get_config(**overrides) -> TrellisConfig:
    """
    Get the global configuration instance.

    Creates a singleton on first call. Subsequent calls return
    the same instance unless overrides are provided.

    Args:
        **overrides: Override any config values

    Returns:
        TrellisConfig instance
    """
    global _config

    if overrides or _config is None:
        _config = TrellisConfig(**overrides)

    return _config


def reset_config() -> None:
    """Reset the global configuration (for testing)."""
    global _config
    _config = None


def get_log_level() -> str:
    """Get the configured log level."""
    return get_config().log_level
