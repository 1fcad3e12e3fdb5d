"""Runtime configuration for reclaim.

This module provides the configuration model and I/O functions for
settings that tune scanning thresholds and the privileged helper.

Configuration is stored in ~/.config/reclaim/config.toml
"""

import logging
import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from reclaim.core.paths import get_config_path

logger = logging.getLogger(__name__)

DEFAULT_HELPER_SOCKET = "/run/reclaim-helper.sock"
DEFAULT_HELPER_SERVICE = "reclaim-helper.service"
DEFAULT_HELPER_TIMEOUT = 30.0


class ReclaimConfig(BaseModel):
    """Configuration for scanning and privileged removal.

    Attributes:
        helper_socket: Unix socket the privileged helper listens on.
        helper_service: systemd unit that provides the helper.
        helper_timeout_seconds: Bound on the wait for a helper reply.
        large_file_threshold_mb: Minimum size for large-file candidates.
        large_file_min_age_days: Minimum age for large-file candidates.
        large_file_max_results: Cap on large-file candidates per scan.
        extra_safe_roots: Additional directories trusted for cleanup.
    """

    model_config = ConfigDict(extra="forbid")

    helper_socket: Annotated[
        str,
        Field(description="Unix socket of the privileged helper"),
    ] = DEFAULT_HELPER_SOCKET
    helper_service: Annotated[
        str,
        Field(description="systemd unit providing the privileged helper"),
    ] = DEFAULT_HELPER_SERVICE
    helper_timeout_seconds: Annotated[
        float,
        Field(ge=1, le=300, description="Helper reply timeout in seconds (1-300)"),
    ] = DEFAULT_HELPER_TIMEOUT
    large_file_threshold_mb: Annotated[
        int,
        Field(ge=1, description="Minimum large-file size in MiB"),
    ] = 50
    large_file_min_age_days: Annotated[
        int,
        Field(ge=0, description="Minimum large-file age in days"),
    ] = 30
    large_file_max_results: Annotated[
        int,
        Field(ge=1, le=10_000, description="Maximum large-file candidates"),
    ] = 200
    extra_safe_roots: Annotated[
        list[str],
        Field(description="Additional directories trusted for cleanup"),
    ] = []

    @field_validator("extra_safe_roots")
    @classmethod
    def validate_absolute(cls, v: list[str]) -> list[str]:
        """Reject relative or root safe-root entries."""
        for entry in v:
            if not entry.startswith("/"):
                msg = f"extra_safe_roots entries must be absolute paths, got '{entry}'"
                raise ValueError(msg)
            if entry.rstrip("/") == "":
                msg = "extra_safe_roots cannot contain the filesystem root"
                raise ValueError(msg)
        return v

    @property
    def large_file_threshold_bytes(self) -> int:
        """Large-file threshold converted to bytes."""
        return self.large_file_threshold_mb * 1_048_576


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigParseError(ConfigError):
    """Raised when the config file cannot be parsed."""


def load_config(path: Path | None = None) -> ReclaimConfig:
    """Load configuration from a TOML file.

    A missing file yields the defaults.

    Args:
        path: Path to the config file. If None, uses the default config path.

    Returns:
        Validated ReclaimConfig object.

    Raises:
        ConfigParseError: If the TOML syntax is invalid.
        ConfigError: If the file cannot be read or doesn't match the schema.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        logger.debug("No config at %s, using defaults", config_path)
        return ReclaimConfig()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config: {e}") from e

    try:
        return ReclaimConfig.model_validate(data)
    except (ValueError, ValidationError) as e:
        raise ConfigError(f"Invalid config content: {e}") from e


def save_config(config: ReclaimConfig, path: Path | None = None) -> Path:
    """Save configuration to a TOML file.

    The file is written atomically by first writing to a temporary file
    and then using os.replace() for atomic rename. Every setting is
    written so the file documents the effective values.

    Args:
        config: The ReclaimConfig object to save.
        path: Path to save the config. If None, uses the default config path.

    Returns:
        Path where the config was saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    config_path = path or get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    data = config.model_dump()

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(config_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigError(f"Failed to write config: {e}") from e

    return config_path
