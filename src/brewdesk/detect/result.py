"""Data classes and protocols for software detection."""

import re
from dataclasses import dataclass, field, fields
from typing import Any, Literal, Protocol

DetectionSource = Literal["binary", "homebrew", "command"]


class DetectionConfigError(Exception):
    """Raised when a package detection config is malformed."""

    pass


@dataclass(frozen=True)
class DetectionResult:
    """Outcome of detecting a single package.

    A negative result carries no version, path or source.
    """

    installed: bool
    version: str | None = None
    path: str | None = None
    source: DetectionSource | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-friendly dict, omitting unset fields."""
        data: dict[str, Any] = {"installed": self.installed}
        if self.version is not None:
            data["version"] = self.version
        if self.path is not None:
            data["path"] = self.path
        if self.source is not None:
            data["source"] = self.source
        return data


NOT_INSTALLED = DetectionResult(installed=False)


@dataclass(frozen=True)
class PackageDetectionConfig:
    """How a package should be looked for by each detection strategy."""

    # Candidate executables, checked in order (~ and glob wildcards allowed)
    binary_paths: tuple[str, ...] = ()
    # Homebrew formula/cask name when it differs from the package id
    brew_name: str | None = None
    is_cask: bool = False
    # Shell command printing the version, e.g. "node -v"
    version_command: str | None = None
    version_regex: str | re.Pattern[str] | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.binary_paths, tuple):
            object.__setattr__(self, "binary_paths", tuple(self.binary_paths))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PackageDetectionConfig":
        """Build a config from a YAML mapping.

        CONTRACT:
          Inputs:
            - data: mapping with any of the keys binary_paths, brew_name,
              is_cask, version_command, version_regex

          Outputs:
            - PackageDetectionConfig with the given values, defaults elsewhere

          Invariants:
            - Unknown keys are rejected, never silently dropped
            - version_regex, when present, compiles as a Python regex

        Raises:
            DetectionConfigError: If the mapping is malformed
        """
        if not isinstance(data, dict):
            raise DetectionConfigError(
                f"Detection config must be a mapping, got {type(data).__name__}"
            )

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise DetectionConfigError(
                f"Unknown detection config keys: {', '.join(unknown)}"
            )

        binary_paths = data.get("binary_paths") or []
        if not isinstance(binary_paths, list) or not all(
            isinstance(p, str) for p in binary_paths
        ):
            raise DetectionConfigError("binary_paths must be a list of strings")

        for key in ("brew_name", "version_command", "version_regex"):
            value = data.get(key)
            if value is not None and not isinstance(value, str):
                raise DetectionConfigError(f"{key} must be a string")

        is_cask = data.get("is_cask", False)
        if not isinstance(is_cask, bool):
            raise DetectionConfigError("is_cask must be true or false")

        version_regex = data.get("version_regex")
        if version_regex is not None:
            try:
                re.compile(version_regex)
            except re.error as e:
                raise DetectionConfigError(
                    f"Invalid version_regex {version_regex!r}: {e}"
                ) from None

        return cls(
            binary_paths=tuple(binary_paths),
            brew_name=data.get("brew_name"),
            is_cask=is_cask,
            version_command=data.get("version_command"),
            version_regex=version_regex,
        )


@dataclass
class CacheEntry:
    """A cached detection result and when it was stored (milliseconds)."""

    result: DetectionResult
    timestamp: float = field(default=0.0)


class DetectionStrategy(Protocol):
    """Protocol for a single way of deciding whether a package is installed.

    CONTRACT:
      Purpose: Inspect one evidence source (filesystem, Homebrew, a version
               command) and report install state for a package.

      Invariants:
        - detect() returns NOT_INSTALLED rather than raising for ordinary
          failures (missing files, failed commands, timeouts)
        - name is constant for a strategy instance
    """

    @property
    def name(self) -> str:
        """Strategy identifier, also used as DetectionResult.source."""
        ...

    def detect(
        self, package_name: str, config: PackageDetectionConfig
    ) -> DetectionResult:
        """Detect whether package_name is installed using config."""
        ...
