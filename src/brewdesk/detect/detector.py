"""Coordinator that runs detection strategies behind a TTL cache."""

import logging
import time
from collections.abc import Callable, Iterable, Mapping, Sequence

from ..constants import DEFAULT_CACHE_TTL
from .binary import BinaryStrategy
from .cache import DetectionCache
from .command import CommandStrategy
from .configs import load_detection_configs
from .homebrew import HomebrewStrategy
from .result import (
    NOT_INSTALLED,
    DetectionResult,
    DetectionStrategy,
    PackageDetectionConfig,
)

logger = logging.getLogger(__name__)


def default_strategies() -> list[DetectionStrategy]:
    """Strategies in priority order: binary, homebrew, command."""
    return [BinaryStrategy(), HomebrewStrategy(), CommandStrategy()]


class SoftwareDetector:
    """Decides whether packages are installed using an ordered strategy chain.

    Binary path checks run first (cheapest, most reliable), then the Homebrew
    query, then the version command (most permissive). The first positive
    result wins. Both positive and negative outcomes are cached, so callers
    that change install state must call invalidate_cache() afterwards.
    """

    def __init__(
        self,
        cache_ttl_seconds: float = DEFAULT_CACHE_TTL,
        *,
        strategies: Sequence[DetectionStrategy] | None = None,
        configs: Mapping[str, PackageDetectionConfig] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._strategies: list[DetectionStrategy] = (
            list(strategies) if strategies is not None else default_strategies()
        )
        self._cache = DetectionCache(cache_ttl_seconds, clock=clock)
        self._configs: dict[str, PackageDetectionConfig] = dict(configs or {})

    def detect(self, package_name: str) -> DetectionResult:
        """Detect whether package_name is installed.

        CONTRACT:
          Inputs:
            - package_name: package identifier; unknown ids use an empty config

          Outputs:
            - cached DetectionResult if a live entry exists
            - otherwise the first positive strategy result, or NOT_INSTALLED

          Invariants:
            - Never raises: strategy exceptions count as "not installed"
            - A cache hit invokes no strategy
            - A miss writes exactly one cache entry

          Algorithm:
            1. Return the live cache entry, if any
            2. Run strategies in order; stop at the first installed=True
            3. Cache and return that result, or NOT_INSTALLED if none matched
        """
        cached = self._cache.get(package_name)
        if cached is not None:
            logger.debug(f"{package_name}: cache hit ({cached})")
            return cached

        config = self.get_package_config(package_name)

        for strategy in self._strategies:
            try:
                result = strategy.detect(package_name, config)
            except Exception as e:
                logger.debug(f"{package_name}: {strategy.name} strategy failed: {e}")
                continue

            if result.installed:
                logger.debug(f"{package_name}: detected by {strategy.name} ({result})")
                self._cache.set(package_name, result)
                return result

        logger.debug(f"{package_name}: not installed")
        self._cache.set(package_name, NOT_INSTALLED)
        return NOT_INSTALLED

    def detect_many(self, package_names: Iterable[str]) -> dict[str, DetectionResult]:
        """Detect several packages one after another."""
        return {name: self.detect(name) for name in package_names}

    def get_package_config(self, package_name: str) -> PackageDetectionConfig:
        """Configured detection for package_name, or an empty config."""
        return self._configs.get(package_name, PackageDetectionConfig())

    def set_package_config(
        self, package_name: str, config: PackageDetectionConfig
    ) -> None:
        """Replace the detection config for one package."""
        self._configs[package_name] = config

    def set_package_configs(
        self, configs: Mapping[str, PackageDetectionConfig]
    ) -> None:
        """Merge configs into the table; existing ids are overwritten."""
        self._configs.update(configs)

    def invalidate_cache(self, package_name: str) -> None:
        """Forget the cached result for package_name."""
        self._cache.delete(package_name)

    def refresh_cache(self, package_name: str) -> DetectionResult:
        """Invalidate and immediately re-detect package_name."""
        self._cache.delete(package_name)
        return self.detect(package_name)

    def clear_cache(self) -> None:
        """Forget every cached result."""
        self._cache.clear()

    def is_cached(self, package_name: str) -> bool:
        """Check for a live cached result for package_name."""
        return self._cache.has(package_name)

    def get_strategies(self) -> list[DetectionStrategy]:
        """Strategies in execution order (a copy)."""
        return list(self._strategies)


def create_detector(
    cache_ttl_seconds: float = DEFAULT_CACHE_TTL,
    overrides: Mapping[str, PackageDetectionConfig] | None = None,
) -> SoftwareDetector:
    """Build a detector seeded with the catalog's detection table.

    overrides replace catalog entries with the same id and add new ones.
    """
    detector = SoftwareDetector(cache_ttl_seconds, configs=load_detection_configs())
    if overrides:
        detector.set_package_configs(overrides)
    return detector


_DETECTOR: SoftwareDetector | None = None


def get_detector() -> SoftwareDetector:
    """Return the shared detector, creating it on first use."""
    global _DETECTOR
    if _DETECTOR is None:
        _DETECTOR = create_detector()
    return _DETECTOR


def reset_detector() -> None:
    """Drop the shared detector (test isolation)."""
    global _DETECTOR
    _DETECTOR = None
