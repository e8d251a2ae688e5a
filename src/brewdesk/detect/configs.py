"""Static per-package detection configuration, built from the catalog."""

from functools import lru_cache

from ..catalog import CatalogError, load_packages
from .result import DetectionConfigError, PackageDetectionConfig


@lru_cache(maxsize=1)
def _load_detection_configs() -> dict[str, PackageDetectionConfig]:
    configs: dict[str, PackageDetectionConfig] = {}
    for name, entry in load_packages().items():
        try:
            configs[name] = PackageDetectionConfig.from_dict(
                entry.get("detection") or {}
            )
        except DetectionConfigError as e:
            raise CatalogError(f"Invalid detection config for '{name}': {e}") from e
    return configs


def load_detection_configs() -> dict[str, PackageDetectionConfig]:
    """Return a fresh mapping of package id to detection config.

    The configs themselves are immutable; the mapping is a copy so callers
    may add or replace entries.
    """
    return dict(_load_detection_configs())


def get_package_detection_config(package_name: str) -> PackageDetectionConfig:
    """Detection config for package_name, or an empty config if unknown."""
    return _load_detection_configs().get(package_name, PackageDetectionConfig())


def has_package_detection_config(package_name: str) -> bool:
    """Check if the catalog defines detection for package_name."""
    return package_name in _load_detection_configs()
