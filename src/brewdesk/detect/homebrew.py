"""Detection by asking Homebrew whether a formula or cask is installed."""

import json
import logging
import os
import subprocess
from collections.abc import Sequence
from typing import Any

from ..constants import BREW_PATHS, COMMAND_TIMEOUT
from .result import NOT_INSTALLED, DetectionResult, PackageDetectionConfig

logger = logging.getLogger(__name__)


def parse_brew_info_version(stdout: str, is_cask: bool) -> str | None:
    """Extract the version from `brew info --json=v2` output.

    Casks report casks[0].version; formulae report
    formulae[0].versions.stable, falling back to formulae[0].version.
    Anything unexpected yields None.
    """
    try:
        data: Any = json.loads(stdout)
    except ValueError:
        return None

    if not isinstance(data, dict):
        return None

    key = "casks" if is_cask else "formulae"
    entries = data.get(key)
    if not isinstance(entries, list) or not entries:
        return None

    first = entries[0]
    if not isinstance(first, dict):
        return None

    version: Any = None
    if not is_cask:
        versions = first.get("versions")
        if isinstance(versions, dict):
            version = versions.get("stable")
    if not version:
        version = first.get("version")

    if isinstance(version, str) and version:
        return version
    return None


class HomebrewStrategy:
    """Detects software through `brew list` and `brew info`.

    brew is located at fixed paths only; the inherited PATH of a desktop or
    launchd process frequently omits the Homebrew prefix.
    """

    name = "homebrew"

    def __init__(
        self,
        brew_paths: Sequence[str] = BREW_PATHS,
        timeout: float = COMMAND_TIMEOUT,
    ):
        self.brew_paths = tuple(brew_paths)
        self.timeout = timeout

    def find_brew_path(self) -> str | None:
        """Return the first known brew location that exists."""
        for path in self.brew_paths:
            if os.path.exists(path):
                return path
        return None

    def detect(
        self, package_name: str, config: PackageDetectionConfig
    ) -> DetectionResult:
        """Check whether Homebrew lists the package as installed.

        CONTRACT:
          Inputs:
            - package_name: package identifier, used as the brew name unless
              config.brew_name is set
            - config: detection config; brew_name and is_cask are consulted

          Outputs:
            - DetectionResult(installed=True, path=<brew path>, version=...,
              source="homebrew") when `brew list` succeeds
            - NOT_INSTALLED when brew is missing, `brew list` fails or times out

          Invariants:
            - version is None whenever `brew info` fails or is malformed
            - Subprocess failures never propagate
        """
        brew_path = self.find_brew_path()
        if brew_path is None:
            logger.debug("Homebrew not found at known paths")
            return NOT_INSTALLED

        brew_name = config.brew_name or package_name

        if not self.check_listed(brew_path, brew_name, config.is_cask):
            return NOT_INSTALLED

        version = self.get_version(brew_path, brew_name, config.is_cask)
        return DetectionResult(
            installed=True, version=version, path=brew_path, source="homebrew"
        )

    def check_listed(self, brew_path: str, brew_name: str, is_cask: bool) -> bool:
        """Run `brew list [--cask] <name>` and report whether it exited 0."""
        cmd = [brew_path, "list"]
        if is_cask:
            cmd.append("--cask")
        cmd.append(brew_name)

        try:
            subprocess.run(
                cmd,
                capture_output=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout,
                check=True,
            )
        except subprocess.CalledProcessError:
            return False
        except subprocess.TimeoutExpired:
            logger.debug(f"'brew list {brew_name}' timed out after {self.timeout}s")
            return False
        except OSError as e:
            logger.debug(f"Failed to run {brew_path}: {e}")
            return False
        return True

    def get_version(self, brew_path: str, brew_name: str, is_cask: bool) -> str | None:
        """Read the installed version from `brew info --json=v2`."""
        cmd = [brew_path, "info", "--json=v2"]
        if is_cask:
            cmd.append("--cask")
        cmd.append(brew_name)

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout,
                check=True,
            )
        except (subprocess.CalledProcessError, subprocess.TimeoutExpired, OSError) as e:
            logger.debug(f"'brew info {brew_name}' failed: {e}")
            return None

        return parse_brew_info_version(result.stdout, is_cask)
