"""Software detection - is a package installed, and which version.

Detection runs an ordered chain of independent strategies and stops at the
first positive answer:

  1. BinaryStrategy   - executable exists at a configured path
  2. HomebrewStrategy - `brew list` succeeds (version from `brew info`)
  3. CommandStrategy  - a version command exits 0 (version parsed from output)

Results, positive and negative, are cached per package for a TTL. Anything
that changes install state must invalidate the package's entry.

Usage:
    from brewdesk.detect import create_detector

    detector = create_detector()
    result = detector.detect("git")
    if result.installed:
        print(result.version, result.source)

    # after `brew install git`
    detector.invalidate_cache("git")
"""

from .binary import BinaryStrategy
from .cache import DetectionCache
from .command import CommandStrategy
from .configs import (
    get_package_detection_config,
    has_package_detection_config,
    load_detection_configs,
)
from .detector import (
    SoftwareDetector,
    create_detector,
    get_detector,
    reset_detector,
)
from .homebrew import HomebrewStrategy
from .result import (
    NOT_INSTALLED,
    CacheEntry,
    DetectionConfigError,
    DetectionResult,
    DetectionStrategy,
    PackageDetectionConfig,
)
from .version import DEFAULT_VERSION_PATTERN, extract_version

__all__ = [
    "NOT_INSTALLED",
    "DEFAULT_VERSION_PATTERN",
    "BinaryStrategy",
    "CacheEntry",
    "CommandStrategy",
    "DetectionCache",
    "DetectionConfigError",
    "DetectionResult",
    "DetectionStrategy",
    "HomebrewStrategy",
    "PackageDetectionConfig",
    "SoftwareDetector",
    "create_detector",
    "extract_version",
    "get_detector",
    "get_package_detection_config",
    "has_package_detection_config",
    "load_detection_configs",
    "reset_detector",
]
