"""Detection by looking for executables at known filesystem paths."""

import glob
import logging
import os

from .result import NOT_INSTALLED, DetectionResult, PackageDetectionConfig
from .utils import expand_path, has_glob_pattern, is_executable

logger = logging.getLogger(__name__)


class BinaryStrategy:
    """Detects software by checking candidate executable paths in order.

    Supports ~ expansion and glob patterns for version-manager layouts such as
    "~/.nvm/versions/node/v20.*/bin/node".
    """

    name = "binary"

    def detect(
        self, package_name: str, config: PackageDetectionConfig
    ) -> DetectionResult:
        """Return the first candidate path that is an existing executable.

        CONTRACT:
          Inputs:
            - package_name: package identifier (used for logging only)
            - config: detection config; only binary_paths is consulted

          Outputs:
            - DetectionResult(installed=True, path=<resolved path>,
              source="binary") for the first qualifying candidate
            - NOT_INSTALLED if no candidate qualifies or the list is empty

          Invariants:
            - Candidates are tried in list order; earlier ones win
            - Never raises for filesystem errors
        """
        for candidate in config.binary_paths:
            expanded = expand_path(candidate)

            if has_glob_pattern(expanded):
                match = self._find_glob_match(expanded)
                if match is not None:
                    logger.debug(f"{package_name}: found {match} (from {candidate})")
                    return DetectionResult(installed=True, path=match, source="binary")
            elif is_executable(expanded):
                logger.debug(f"{package_name}: found {expanded}")
                return DetectionResult(installed=True, path=expanded, source="binary")

        return NOT_INSTALLED

    def _find_glob_match(self, pattern: str) -> str | None:
        """Return the first executable glob match as an absolute path, if any.

        Matches are taken in filesystem enumeration order.
        """
        try:
            matches = glob.glob(pattern)
        except (OSError, ValueError) as e:
            logger.debug(f"Glob failed for {pattern}: {e}")
            return None

        for match in matches:
            if is_executable(match):
                return os.path.abspath(match)
        return None
