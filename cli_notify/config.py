"""
Configuration file parsing and management.

Reads YAML configuration files and merges them (project → user → defaults).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from typing import Any

import yaml

from .common import vlog


# Configuration file locations (in priority order)
CONFIG_LOCATIONS = [
    ".cli-notify.yml",                                        # Project root (highest priority)
    ".cli-notify.yaml",
    os.path.expanduser("~/.config/cli-notify/config.yml"),   # User global
    os.path.expanduser("~/.config/cli-notify/config.yaml"),
]


@dataclass(frozen=True)
class NotifierConfig:
    """
    Settings for the upgrade notifier.

    Attributes:
        version: Config schema version
        enabled: Whether the version check runs at all
        package_manager: Force a package manager ("yarn", "pnpm", "npm", ...)
        registry_timeout_seconds: Timeout for registry metadata requests
        pnpm_global_marker: Path segment identifying pnpm's global store
        prerelease_tag: Dist-tag consulted when running a prerelease
        color: Colorize the rendered notice
        source: Path to the configuration file that was loaded
        explicit_fields: Settings present in the source file (None when the
            config was built in code: non-default values count as set)
    """
    version: int = 1
    enabled: bool = True
    package_manager: str | None = None
    registry_timeout_seconds: int = 30
    pnpm_global_marker: str = "pnpm-global"
    prerelease_tag: str = "next"
    color: bool = True
    source: str = ""
    explicit_fields: frozenset[str] | None = field(default=None, compare=False, repr=False)

    def __post_init__(self):
        """Validate config after initialization."""
        if self.version != 1:
            raise ValueError(f"Unsupported config version: {self.version}. Expected version 1")

        if self.registry_timeout_seconds < 1 or self.registry_timeout_seconds > 300:
            raise ValueError(
                f"Invalid registry_timeout_seconds: {self.registry_timeout_seconds}. "
                "Must be between 1 and 300"
            )

        if not self.pnpm_global_marker:
            raise ValueError("pnpm_global_marker must not be empty")

        if not self.prerelease_tag:
            raise ValueError("prerelease_tag must not be empty")

    @staticmethod
    def from_dict(data: dict[str, Any], source: str = "") -> NotifierConfig:
        """Create NotifierConfig from dictionary."""
        return NotifierConfig(
            version=data.get("version", 1),
            enabled=data.get("enabled", True),
            package_manager=data.get("package_manager"),
            registry_timeout_seconds=data.get("registry_timeout_seconds", 30),
            pnpm_global_marker=data.get("pnpm_global_marker", "pnpm-global"),
            prerelease_tag=data.get("prerelease_tag", "next"),
            color=data.get("color", True),
            source=source,
            explicit_fields=frozenset(key for key in data if key in _SETTING_NAMES),
        )

    def set_fields(self) -> frozenset[str]:
        """Names of the settings this config sets explicitly."""
        if self.explicit_fields is not None:
            return self.explicit_fields
        defaults = NotifierConfig()
        return frozenset(
            name for name in _SETTING_NAMES
            if getattr(self, name) != getattr(defaults, name)
        )

    def merge_with(self, other: NotifierConfig) -> NotifierConfig:
        """
        Merge this config with another, preferring values from this config.

        A setting keeps this config's value when this config sets it (even to
        the default value); otherwise the other config's value is used.

        Args:
            other: Other config to merge (lower priority)

        Returns:
            New merged NotifierConfig object
        """
        mine = self.set_fields()
        merged: dict[str, Any] = {
            name: getattr(self if name in mine else other, name)
            for name in _SETTING_NAMES
        }
        return NotifierConfig(
            **merged,
            source=self.source or other.source,
            explicit_fields=mine | other.set_fields(),
        )


_SETTING_NAMES = tuple(
    f.name for f in fields(NotifierConfig) if f.name not in ("source", "explicit_fields")
)


def _load_yaml(file_path: str) -> dict[str, Any] | None:
    """
    Load YAML configuration file.

    Args:
        file_path: Path to YAML file

    Returns:
        Parsed configuration dictionary, or None if the file is unreadable or invalid
    """
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
            return data if isinstance(data, dict) else {}
    except (OSError, yaml.YAMLError):
        return None


def load_config_file(file_path: str, verbose: bool = False) -> NotifierConfig | None:
    """
    Load configuration from a single file.

    Args:
        file_path: Path to configuration file
        verbose: Enable verbose logging

    Returns:
        NotifierConfig object, or None if file cannot be loaded
    """
    if not os.path.exists(file_path):
        return None

    vlog(f"Loading config from: {file_path}", verbose)

    data = _load_yaml(file_path)
    if data is None:
        vlog(f"Invalid config file: {file_path}", verbose)
        return None

    try:
        config = NotifierConfig.from_dict(data, source=file_path)
        vlog(f"Loaded config successfully: {file_path}", verbose)
        return config
    except (ValueError, TypeError) as e:
        vlog(f"Config validation failed for {file_path}: {e}", verbose)
        return None


def load_config(
    custom_path: str | None = None,
    verbose: bool = False,
) -> NotifierConfig:
    """
    Load and merge configuration from all sources.

    Configuration precedence (highest to lowest):
    1. Custom path (if provided)
    2. Project .cli-notify.yml
    3. User ~/.config/cli-notify/config.yml
    4. Default configuration

    Args:
        custom_path: Optional path to custom configuration file
        verbose: Enable verbose logging

    Returns:
        Merged NotifierConfig object (defaults if no config found)

    Raises:
        ValueError: If custom_path is provided but file cannot be loaded
    """
    configs: list[NotifierConfig] = []

    if custom_path:
        config = load_config_file(custom_path, verbose)
        if config is None:
            raise ValueError(f"Could not load config from specified path: {custom_path}")
        configs.append(config)

    for location in CONFIG_LOCATIONS:
        config = load_config_file(location, verbose)
        if config is not None:
            configs.append(config)
            vlog(f"Found config at: {location}", verbose)

    if not configs:
        vlog("No config files found, using defaults", verbose)
        return NotifierConfig()

    merged = configs[0]
    for config in configs[1:]:
        merged = merged.merge_with(config)

    vlog(f"Merged {len(configs)} config files", verbose)
    return merged
