"""Configuration for file following.

Settings come from dataclass defaults, optionally overlaid with a YAML
file and then with explicit overrides (typically from the command line).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class FollowConfig:
    """Configuration for a FollowingReader and its watcher.

    Attributes:
        poll_interval_seconds: Longest time the watcher waits for a change
            before re-checking its stop flag (default: 2.0).
        read_block_size: Maximum bytes per forwarded chunk (default: 1024).
        use_polling_observer: Use stat() polling instead of native OS
            notifications (default: False).
        log_level: Level for the tailstream logger (default: INFO).
    """

    poll_interval_seconds: float = 2.0
    read_block_size: int = 1024
    use_polling_observer: bool = False
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.poll_interval_seconds <= 0:
            raise ValueError(
                f"poll_interval_seconds must be positive, got {self.poll_interval_seconds}"
            )
        if self.read_block_size <= 0:
            raise ValueError(f"read_block_size must be positive, got {self.read_block_size}")
        self.log_level = str(self.log_level).upper()
        if self.log_level not in _LOG_LEVELS:
            raise ValueError(
                f"Invalid log_level '{self.log_level}'. Allowed: {', '.join(_LOG_LEVELS)}"
            )


def load_follow_config(config_path: str | Path | None = None, **overrides: Any) -> FollowConfig:
    """Build a FollowConfig from an optional YAML file and overrides.

    Args:
        config_path: YAML file holding a mapping of FollowConfig fields.
        **overrides: Field values that win over the file; None is ignored.

    Returns:
        Validated configuration.

    Raises:
        FileNotFoundError: If config_path doesn't exist
        ValueError: If the YAML is invalid or names unknown fields
    """
    config = FollowConfig()
    known = {f.name for f in fields(FollowConfig)}

    if config_path is not None:
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        try:
            with open(path) as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Failed to parse configuration YAML: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError(f"Configuration in {path} must be a mapping")

        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown configuration keys in {path}: {', '.join(unknown)}")

        config = replace(config, **data)
        logger.debug(f"Loaded configuration from {path}")

    unknown = sorted(set(overrides) - known)
    if unknown:
        raise ValueError(f"Unknown configuration keys: {', '.join(unknown)}")

    values = {key: value for key, value in overrides.items() if value is not None}
    if values:
        config = replace(config, **values)

    return config
