"""User settings stored in ~/.brewdesk.yaml."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .constants import DEFAULT_CACHE_TTL
from .detect.result import DetectionConfigError, PackageDetectionConfig

logger = logging.getLogger(__name__)

# Current config schema version
CURRENT_VERSION = "1"

CONFIG_ENV_VAR = "BREWDESK_CONFIG"


class ConfigVersionError(Exception):
    """Raised when config version is incompatible."""

    pass


class ConfigValidationError(Exception):
    """Raised when config values are invalid."""

    pass


def default_config_path() -> Path:
    """Settings path: $BREWDESK_CONFIG if set, else ~/.brewdesk.yaml."""
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".brewdesk.yaml"


def _validate_version(version: Any) -> str:
    """Validate config version and return normalized version string.

    Args:
        version: Version value from config, or None if missing

    Returns:
        Validated version string

    Raises:
        ConfigVersionError: If version is incompatible
    """
    if version is None:
        logger.warning("Config file missing version field, assuming version '1'")
        return CURRENT_VERSION

    try:
        version_num = int(str(version))
    except ValueError:
        raise ConfigVersionError(
            f"Unrecognized config version '{version}'. "
            f"Supported versions: {CURRENT_VERSION}"
        ) from None

    if version_num > int(CURRENT_VERSION):
        raise ConfigVersionError(
            f"Config file requires brewdesk config version {version} or newer. "
            f"This brewdesk supports config version {CURRENT_VERSION}. "
            "Please upgrade brewdesk to use this config."
        )

    return str(version)


def _validate_ttl(value: Any) -> float:
    """Validate cache TTL seconds.

    Raises:
        ConfigValidationError: If value is not a non-negative number
    """
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise ConfigValidationError(
            f"cache.ttl_seconds must be a number, got {value!r}"
        )
    if value < 0:
        raise ConfigValidationError(
            f"cache.ttl_seconds must not be negative, got {value}"
        )
    return value


def _parse_package_overrides(data: Any) -> dict[str, PackageDetectionConfig]:
    """Convert the `packages` section into detection configs.

    Raises:
        ConfigValidationError: If the section or any entry is malformed
    """
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigValidationError("packages must be a mapping of package ids")

    overrides: dict[str, PackageDetectionConfig] = {}
    for name, entry in data.items():
        try:
            overrides[str(name)] = PackageDetectionConfig.from_dict(entry or {})
        except DetectionConfigError as e:
            raise ConfigValidationError(f"packages.{name}: {e}") from None
    return overrides


def _config_to_dict(config: PackageDetectionConfig) -> dict[str, Any]:
    data: dict[str, Any] = {}
    if config.binary_paths:
        data["binary_paths"] = list(config.binary_paths)
    if config.brew_name is not None:
        data["brew_name"] = config.brew_name
    if config.is_cask:
        data["is_cask"] = True
    if config.version_command is not None:
        data["version_command"] = config.version_command
    if config.version_regex is not None:
        regex = config.version_regex
        data["version_regex"] = regex if isinstance(regex, str) else regex.pattern
    return data


@dataclass
class Config:
    """Represents a ~/.brewdesk.yaml configuration."""

    version: str = CURRENT_VERSION
    cache_ttl: float = DEFAULT_CACHE_TTL
    # Per-package detection overrides, merged over the catalog
    packages: dict[str, PackageDetectionConfig] = field(default_factory=dict)

    @classmethod
    def load(cls, path: Path) -> "Config":
        """Load config from a YAML settings file.

        Raises:
            ConfigVersionError: If config version is incompatible
            ConfigValidationError: If values are invalid
        """
        with open(path) as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ConfigValidationError(f"{path}: top level must be a mapping")

        version = _validate_version(data.get("version"))

        cache = data.get("cache") or {}
        if not isinstance(cache, dict):
            raise ConfigValidationError("cache must be a mapping")
        cache_ttl = _validate_ttl(cache.get("ttl_seconds", DEFAULT_CACHE_TTL))

        packages = _parse_package_overrides(data.get("packages"))

        return cls(version=version, cache_ttl=cache_ttl, packages=packages)

    @classmethod
    def load_or_default(cls, path: Path) -> "Config":
        """Load config from path, or return defaults if the file is absent."""
        if not path.exists():
            logger.debug(f"No config at {path}, using defaults")
            return cls()
        return cls.load(path)

    def save(self, path: Path) -> None:
        """Save config to a YAML settings file."""
        data: dict[str, Any] = {
            "version": self.version,
            "cache": {"ttl_seconds": self.cache_ttl},
        }
        if self.packages:
            data["packages"] = {
                name: _config_to_dict(config) for name, config in self.packages.items()
            }

        with open(path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)
