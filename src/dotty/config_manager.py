"""Configuration management module.

This module owns the dotty configuration document: the data model for global
settings and profiles, the load-or-initialize bootstrap, and the routine that
writes the document back to disk.

Architecture:
- Document stored at <base_path>/config.toml
- base_path is resolved once at first run and then stored in the document
- Every command performs load -> single mutation -> full rewrite
- No partial updates, no caching across invocations

Example config.toml:
    base_path = "/home/user/.config/dotty"
    log_level = "WARN"
    active_profile = "nord-theme"

    [profiles.nord-theme]
    branch = "nord"

    [profiles.solarized]
    branch = "solarized"
"""

import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

import tomli
import tomlkit

from dotty.exceptions import (
    ConfigParseError,
    ConfigReadError,
    ConfigWriteError,
    StartupError,
)
from dotty.file_system import FileSystem

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "config.toml"
LOG_FILE_NAME = "dotty.log"
DEV_MODE_ENV_VAR = "DOTTY_DEV_MODE"
DEFAULT_BRANCH = "main"

LOG_FORMAT = "%(asctime)s %(levelname)s - %(message)s"
DEV_LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"


class LogLevel(Enum):
    """Severity filter for the dotty log file."""

    OFF = "OFF"
    ERROR = "ERROR"
    WARN = "WARN"
    INFO = "INFO"
    DEBUG = "DEBUG"

    @classmethod
    def from_str(cls, value: str) -> "LogLevel":
        """Parse a level name, case-insensitively.

        Raises:
            ValueError: If value is not a known level
        """
        try:
            return cls(value.strip().upper())
        except ValueError:
            valid = ", ".join(level.value.lower() for level in cls)
            raise ValueError(f"Invalid log level: {value!r} (expected one of: {valid})") from None

    @property
    def logging_level(self) -> int:
        """Matching stdlib logging level. OFF is above CRITICAL."""
        return {
            LogLevel.OFF: logging.CRITICAL + 10,
            LogLevel.ERROR: logging.ERROR,
            LogLevel.WARN: logging.WARNING,
            LogLevel.INFO: logging.INFO,
            LogLevel.DEBUG: logging.DEBUG,
        }[self]


@dataclass
class ProfileConfig:
    """A profile's binding to version control.

    Attributes:
        branch: Git branch holding this profile's files
    """

    branch: str = DEFAULT_BRANCH

    def to_dict(self) -> dict[str, Any]:
        return {"branch": self.branch}

    @classmethod
    def from_dict(cls, profile_id: str, data: Any) -> "ProfileConfig":
        """Create ProfileConfig from a parsed TOML table.

        Raises:
            ConfigParseError: If the table is malformed
        """
        if not isinstance(data, dict):
            raise ConfigParseError(f"Profile '{profile_id}' must be a table")
        branch = data.get("branch")
        if not isinstance(branch, str):
            raise ConfigParseError(f"Profile '{profile_id}' missing required string field: branch")
        return cls(branch=branch)


@dataclass
class DottyConfig:
    """The dotty configuration document.

    Attributes:
        base_path: Directory holding config.toml and dotty.log
        log_level: Log file severity filter
        profiles: Mapping of profile ID to ProfileConfig
        active_profile: ID of the profile in effect ("" when none)
    """

    base_path: Path = field(default_factory=Path)
    log_level: LogLevel = LogLevel.WARN
    profiles: dict[str, ProfileConfig] = field(default_factory=dict)
    active_profile: str = ""

    @classmethod
    def default_with_base_path(cls, base_path: Path) -> "DottyConfig":
        """Default document rooted at base_path."""
        return cls(base_path=base_path)

    @property
    def config_path(self) -> Path:
        return self.base_path / CONFIG_FILE_NAME

    @property
    def log_path(self) -> Path:
        return self.base_path / LOG_FILE_NAME

    def profile_ids(self) -> list[str]:
        """Profile IDs in listing order (sorted)."""
        return sorted(self.profiles)

    def branches(self, exclude: str | None = None) -> list[str]:
        """Branches used by profiles, optionally skipping one profile ID."""
        return [
            profile.branch
            for profile_id, profile in sorted(self.profiles.items())
            if profile_id != exclude
        ]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for TOML serialization.

        Scalars come first so they stay at the top level of the document.
        """
        return {
            "base_path": str(self.base_path),
            "log_level": self.log_level.value,
            "active_profile": self.active_profile,
            "profiles": {
                profile_id: profile.to_dict()
                for profile_id, profile in sorted(self.profiles.items())
            },
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DottyConfig":
        """Create DottyConfig from a parsed TOML document.

        Raises:
            ConfigParseError: If required fields are missing or malformed
        """
        base_path = data.get("base_path")
        if not isinstance(base_path, str):
            raise ConfigParseError("Config missing required string field: base_path")

        try:
            log_level = LogLevel.from_str(str(data.get("log_level", LogLevel.WARN.value)))
        except ValueError as e:
            raise ConfigParseError(str(e)) from e

        profiles_data = data.get("profiles", {})
        if not isinstance(profiles_data, dict):
            raise ConfigParseError("Config field 'profiles' must be a table")

        active_profile = data.get("active_profile", "")
        if not isinstance(active_profile, str):
            raise ConfigParseError("Config field 'active_profile' must be a string")

        return cls(
            base_path=Path(base_path),
            log_level=log_level,
            profiles={
                profile_id: ProfileConfig.from_dict(profile_id, profile_data)
                for profile_id, profile_data in sorted(profiles_data.items())
            },
            active_profile=active_profile,
        )


@runtime_checkable
class ConfigLoader(Protocol):
    """Protocol for locating and (de)serializing the config document."""

    def get_base_path(self) -> Path:
        """Resolve and create the directory holding dotty's files.

        Raises:
            StartupError: If the directory cannot be resolved or created
        """
        ...

    def config_from_str(self, content: str) -> DottyConfig:
        """Parse a config document.

        Raises:
            ConfigParseError: If content is not a valid config document
        """
        ...

    def config_to_string(self, config: DottyConfig) -> str:
        """Serialize a config document.

        Raises:
            ConfigWriteError: If the document cannot be represented as TOML
        """
        ...


class ConfigLoaderClient:
    """TOML config loader rooted in ~/.config/dotty.

    In development mode (DOTTY_DEV_MODE set) files live under
    ./.config/dotty in the working directory instead, so a checkout never
    touches the real user config.
    """

    @staticmethod
    def is_dev_mode() -> bool:
        return os.getenv(DEV_MODE_ENV_VAR, "").strip().lower() in {"1", "true", "yes", "on"}

    def get_base_path(self) -> Path:
        try:
            root = Path.cwd() if self.is_dev_mode() else Path.home()
        except (OSError, RuntimeError) as e:
            location = "current" if self.is_dev_mode() else "home"
            raise StartupError(f"Unable to access the {location} directory: {e}") from e

        path = root / ".config" / "dotty"
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StartupError(f"Unable to create directories required by dotty: {path}: {e}") from e

        logger.debug(f"Base path ready: {path}")
        return path

    def config_from_str(self, content: str) -> DottyConfig:
        try:
            data = tomli.loads(content)
        except tomli.TOMLDecodeError as e:
            raise ConfigParseError(f"Invalid TOML: {e}") from e
        return DottyConfig.from_dict(data)

    def config_to_string(self, config: DottyConfig) -> str:
        try:
            doc = tomlkit.document()
            for key, value in config.to_dict().items():
                doc[key] = value
            return tomlkit.dumps(doc)
        except Exception as e:
            raise ConfigWriteError(f"Failed to serialize config: {e}") from e


def load_or_default(fs: FileSystem, loader: ConfigLoader) -> DottyConfig:
    """Load the config document, creating a default one on first run.

    An existing file is never rewritten here. If it cannot be read or parsed
    the error is raised so the user's data is left alone.

    Args:
        fs: File system access
        loader: Config loader

    Returns:
        DottyConfig loaded from disk, or the freshly written default

    Raises:
        StartupError: If the base path cannot be resolved
        ConfigReadError: If the existing file cannot be read
        ConfigParseError: If the existing file cannot be parsed
        ConfigWriteError: If the default document cannot be written
    """
    base_path = loader.get_base_path()
    path = base_path / CONFIG_FILE_NAME

    if not fs.exists(path):
        config = DottyConfig.default_with_base_path(base_path)
        _write(fs, path, loader.config_to_string(config))
        logger.info(f"Created default config at: {path}")
        return config

    try:
        content = fs.read_to_string(path)
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"Error reading config: {path} :: {e}")
        raise ConfigReadError(f"Unable to read existing config file at: {path}") from e

    try:
        config = loader.config_from_str(content)
    except ConfigParseError as e:
        logger.error(f"Error parsing config: {path} :: {e}")
        raise ConfigParseError(f"Unable to parse existing config file at: {path}\n{e}") from e

    logger.debug(f"Loaded config from: {path}")
    return config


def persist(config: DottyConfig, fs: FileSystem, loader: ConfigLoader) -> Path:
    """Write the whole config document to <base_path>/config.toml.

    Returns:
        Path that was written

    Raises:
        ConfigWriteError: If serializing or writing fails
    """
    path = config.config_path
    _write(fs, path, loader.config_to_string(config))
    logger.debug(f"Saved config to: {path}")
    return path


def _write(fs: FileSystem, path: Path, contents: str) -> None:
    try:
        fs.write(path, contents)
    except OSError as e:
        logger.error(f"Error writing config: {path} :: {e}")
        raise ConfigWriteError(f"Unable to write config file at: {path}: {e}") from e


def setup_logging(config: DottyConfig, dev_mode: bool = False) -> Path:
    """Send dotty's log records to <base_path>/dotty.log.

    Replaces any handler installed by a previous call.

    Args:
        config: Loaded config (base_path and log_level are used)
        dev_mode: Use the more verbose development format

    Returns:
        Path of the log file

    Raises:
        StartupError: If the log file cannot be opened
    """
    package_logger = logging.getLogger("dotty")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    log_path = config.log_path
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_path, encoding="utf-8")
    except OSError as e:
        raise StartupError(f"Unable to open log file: {log_path}: {e}") from e

    handler.setFormatter(logging.Formatter(DEV_LOG_FORMAT if dev_mode else LOG_FORMAT))
    package_logger.addHandler(handler)
    package_logger.setLevel(config.log_level.logging_level)

    return log_path


__all__ = [
    "CONFIG_FILE_NAME",
    "DEFAULT_BRANCH",
    "DEV_MODE_ENV_VAR",
    "LOG_FILE_NAME",
    "ConfigLoader",
    "ConfigLoaderClient",
    "DottyConfig",
    "LogLevel",
    "ProfileConfig",
    "load_or_default",
    "persist",
    "setup_logging",
]
