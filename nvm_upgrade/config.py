"""
Configuration file parsing and preference persistence.

Supports YAML configuration files (JSON accepted for *.json paths).
Merges configurations from multiple sources (project → user → system → defaults).
Preferences written after a successful upgrade live in a separate JSON file.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .common import vlog
from .environment import DEFAULT_DIST_URL, VALID_OS_NAMES
from .installer import VALID_STRATEGIES
from .sources import DEFAULT_ARCHIVE_EXTENSIONS


# Configuration file locations (in priority order)
CONFIG_LOCATIONS = [
    ".nvm-upgrade.yml",                                      # Project root (highest priority)
    ".nvm-upgrade.yaml",                                     # Alternative extension
    os.path.expanduser("~/.config/nvm-upgrade/config.yml"),  # User global
    os.path.expanduser("~/.config/nvm-upgrade/config.yaml"),
    "/etc/nvm-upgrade/config.yml",                           # System global
    "/etc/nvm-upgrade/config.yaml",
]

DEFAULT_PREFERENCES_FILE = os.path.expanduser("~/.config/nvm-upgrade/preferences.json")
DEFAULT_PIN_FILE = ".nvmrc"
INSTALL_METHODS = ("remote", "local", "network")


@dataclass(frozen=True)
class InstallConfig:
    """
    Installation behaviour.

    Attributes:
        strategy: 'auto' (pick by OS), 'nvm' or 'manual'
        accepted_extensions: Local archive suffixes accepted at the path prompt
        network_share: Offer installing from a network share URL (None if unset)
        dist_url: Base URL of the official Node.js releases
    """
    strategy: str = "auto"
    accepted_extensions: tuple[str, ...] = DEFAULT_ARCHIVE_EXTENSIONS
    network_share: bool | None = None
    dist_url: str = DEFAULT_DIST_URL

    def __post_init__(self):
        if self.strategy not in VALID_STRATEGIES:
            raise ValueError(
                f"Invalid install strategy: {self.strategy}. "
                f"Must be one of: {', '.join(VALID_STRATEGIES)}"
            )
        if not self.accepted_extensions:
            raise ValueError("accepted_extensions must not be empty")
        for ext in self.accepted_extensions:
            if not ext.startswith("."):
                raise ValueError(f"Invalid archive extension: {ext}. Extensions start with '.'")

    @staticmethod
    def from_dict(data: dict[str, Any]) -> InstallConfig:
        """Create InstallConfig from dictionary."""
        return InstallConfig(
            strategy=data.get("strategy", "auto"),
            accepted_extensions=tuple(data.get("accepted_extensions", DEFAULT_ARCHIVE_EXTENSIONS)),
            network_share=data.get("network_share"),
            dist_url=data.get("dist_url", DEFAULT_DIST_URL),
        )


@dataclass(frozen=True)
class ProjectConfig:
    """
    Project files written after a successful upgrade.

    Attributes:
        pin_file: Version pin file name, relative to the project directory
        preferences_file: JSON preferences file
        report_file: Optional JSON report written at the end of each run
    """
    pin_file: str = DEFAULT_PIN_FILE
    preferences_file: str = DEFAULT_PREFERENCES_FILE
    report_file: str | None = None

    @staticmethod
    def from_dict(data: dict[str, Any]) -> ProjectConfig:
        """Create ProjectConfig from dictionary."""
        preferences_file = data.get("preferences_file", DEFAULT_PREFERENCES_FILE)
        return ProjectConfig(
            pin_file=data.get("pin_file", DEFAULT_PIN_FILE),
            preferences_file=os.path.expanduser(preferences_file),
            report_file=data.get("report_file"),
        )


@dataclass(frozen=True)
class Config:
    """
    Complete configuration for nvm-upgrade.

    Attributes:
        version: Config schema version
        os_override: OS detection override ('auto', 'macOS', 'Linux', 'WSL')
        timeout_seconds: Connectivity probe timeout
        install: Installation behaviour
        project: Project file locations
        source: Path to the configuration file that was loaded
    """
    version: int = 1
    os_override: str = "auto"
    timeout_seconds: int = 3
    install: InstallConfig = field(default_factory=InstallConfig)
    project: ProjectConfig = field(default_factory=ProjectConfig)
    source: str = ""

    def __post_init__(self):
        """Validate config after initialization."""
        if self.version != 1:
            raise ValueError(f"Unsupported config version: {self.version}. Expected version 1")

        valid_os = {"auto", *VALID_OS_NAMES} - {"unknown"}
        if self.os_override not in valid_os:
            raise ValueError(
                f"Invalid environment os: {self.os_override}. "
                f"Must be one of: {', '.join(sorted(valid_os))}"
            )

        if self.timeout_seconds < 1 or self.timeout_seconds > 60:
            raise ValueError(
                f"Invalid timeout_seconds: {self.timeout_seconds}. "
                "Must be between 1 and 60"
            )

    @staticmethod
    def from_dict(data: dict[str, Any], source: str = "") -> Config:
        """Create Config from dictionary."""
        environment_data = data.get("environment", {})
        network_data = data.get("network", {})

        return Config(
            version=data.get("version", 1),
            os_override=environment_data.get("os", "auto"),
            timeout_seconds=network_data.get("timeout_seconds", 3),
            install=InstallConfig.from_dict(data.get("install", {})),
            project=ProjectConfig.from_dict(data.get("project", {})),
            source=source,
        )

    def merge_with(self, other: Config) -> Config:
        """
        Merge this config with another, preferring values from this config.

        A value equal to its default counts as unset and falls back to other.
        network_share is unset only when None, so an explicit false still wins.

        Args:
            other: Other config to merge (lower priority)

        Returns:
            New merged Config object
        """
        defaults_install = InstallConfig()
        defaults_project = ProjectConfig()

        def pick(mine, theirs, default):
            return mine if mine != default else theirs

        merged_install = InstallConfig(
            strategy=pick(self.install.strategy, other.install.strategy, defaults_install.strategy),
            accepted_extensions=pick(
                self.install.accepted_extensions,
                other.install.accepted_extensions,
                defaults_install.accepted_extensions,
            ),
            network_share=(
                self.install.network_share
                if self.install.network_share is not None
                else other.install.network_share
            ),
            dist_url=pick(self.install.dist_url, other.install.dist_url, defaults_install.dist_url),
        )

        merged_project = ProjectConfig(
            pin_file=pick(self.project.pin_file, other.project.pin_file, defaults_project.pin_file),
            preferences_file=pick(
                self.project.preferences_file,
                other.project.preferences_file,
                defaults_project.preferences_file,
            ),
            report_file=self.project.report_file or other.project.report_file,
        )

        return Config(
            version=self.version,
            os_override=pick(self.os_override, other.os_override, "auto"),
            timeout_seconds=pick(self.timeout_seconds, other.timeout_seconds, 3),
            install=merged_install,
            project=merged_project,
            source=self.source or other.source,
        )


def _load_yaml(file_path: str) -> dict[str, Any] | None:
    """
    Load YAML configuration file.

    Returns:
        Parsed configuration dictionary, or None if the file is invalid
    """
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
            return data if isinstance(data, dict) else {}
    except (OSError, yaml.YAMLError):
        return None


def _load_json(file_path: str) -> dict[str, Any] | None:
    """
    Load JSON configuration file.

    Returns:
        Parsed configuration dictionary, or None if file invalid
    """
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = json.load(f)
            return data if isinstance(data, dict) else {}
    except (OSError, json.JSONDecodeError):
        return None


def load_config_file(file_path: str, verbose: bool = False) -> Config | None:
    """
    Load configuration from a single file.

    Args:
        file_path: Path to a .yml/.yaml or .json file
        verbose: Enable verbose logging

    Returns:
        Config object, or None if file cannot be loaded
    """
    if not os.path.exists(file_path):
        return None

    vlog(f"Loading config from: {file_path}", verbose)

    if file_path.endswith(".json"):
        data = _load_json(file_path)
    else:
        data = _load_yaml(file_path)

    if data is None:
        vlog(f"Invalid config file: {file_path}", verbose)
        return None

    try:
        config = Config.from_dict(data, source=file_path)
        vlog(f"Loaded config successfully: {file_path}", verbose)
        return config
    except (ValueError, TypeError) as e:
        vlog(f"Config validation failed for {file_path}: {e}", verbose)
        return None


def load_config(
    custom_path: str | None = None,
    verbose: bool = False,
) -> Config:
    """
    Load and merge configuration from all sources.

    Configuration precedence (highest to lowest):
    1. Custom path (if provided)
    2. Project .nvm-upgrade.yml
    3. User ~/.config/nvm-upgrade/config.yml
    4. System /etc/nvm-upgrade/config.yml
    5. Default configuration

    Args:
        custom_path: Optional path to custom configuration file
        verbose: Enable verbose logging

    Returns:
        Merged Config object (never None, returns defaults if no config found)

    Raises:
        ValueError: If custom_path is provided but file cannot be loaded
    """
    configs: list[Config] = []

    if custom_path:
        config = load_config_file(custom_path, verbose)
        if config is None:
            raise ValueError(f"Could not load config from specified path: {custom_path}")
        configs.append(config)

    for location in CONFIG_LOCATIONS:
        config = load_config_file(location, verbose)
        if config is not None:
            configs.append(config)

    if not configs:
        vlog("No config files found, using defaults", verbose)
        return Config()

    merged = configs[0]
    for config in configs[1:]:
        merged = merged.merge_with(config)

    vlog(f"Merged {len(configs)} config files", verbose)
    return merged


@dataclass(frozen=True)
class Preferences:
    """
    Values remembered from the last successful upgrade.

    These are recorded for the operator's reference; the upgrade workflow
    does not read them back.

    Attributes:
        last_used_version: Version activated by the last run
        preferred_install_method: Source used by the last run
    """
    last_used_version: str | None = None
    preferred_install_method: str = "remote"

    def __post_init__(self):
        if self.preferred_install_method not in INSTALL_METHODS:
            raise ValueError(
                f"Invalid preferredInstallMethod: {self.preferred_install_method}. "
                f"Must be one of: {', '.join(INSTALL_METHODS)}"
            )

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON layout of the preferences file."""
        return {
            "lastUsedVersion": self.last_used_version,
            "preferredInstallMethod": self.preferred_install_method,
        }

    @staticmethod
    def from_dict(data: dict[str, Any]) -> Preferences:
        """Create Preferences from the preferences file layout."""
        return Preferences(
            last_used_version=data.get("lastUsedVersion"),
            preferred_install_method=data.get("preferredInstallMethod", "remote"),
        )


class PreferenceStore:
    """
    JSON-file backed preferences.

    A missing or unreadable file yields the defaults.

    Args:
        path: Preferences file location
    """

    KEYS = ("lastUsedVersion", "preferredInstallMethod")

    def __init__(self, path: str | os.PathLike = DEFAULT_PREFERENCES_FILE):
        self.path = Path(path)

    def _read(self) -> dict[str, Any]:
        data = _load_json(str(self.path))
        return data if data is not None else {}

    def get(self) -> Preferences:
        """Load preferences (defaults if the file does not exist)."""
        return Preferences.from_dict(self._read())

    def set(self, key: str, value: Any) -> None:
        """
        Update one preference and rewrite the file.

        Raises:
            KeyError: If key is not a known preference
            ValueError: If the value is invalid for the key
        """
        if key not in self.KEYS:
            raise KeyError(f"Unknown preference: {key}")

        data = self._read()
        data[key] = value
        Preferences.from_dict(data)

        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
