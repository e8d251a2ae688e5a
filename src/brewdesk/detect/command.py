"""Detection by running a version command with an augmented PATH."""

import logging
import os
import subprocess

from ..constants import COMMAND_TIMEOUT
from .result import NOT_INSTALLED, DetectionResult, PackageDetectionConfig
from .utils import expand_path
from .version import extract_version

logger = logging.getLogger(__name__)

SHELL = "/bin/bash"

# Searched before the inherited PATH: system prefixes plus the default-alias
# directories of common version managers (fnm, nvm, pipx/uv, rustup).
COMMON_PATHS: tuple[str, ...] = (
    "/opt/homebrew/bin",
    "/opt/homebrew/sbin",
    "/usr/local/bin",
    "/usr/local/sbin",
    "/usr/bin",
    "/usr/sbin",
    "/bin",
    "/sbin",
    "~/.fnm/aliases/default/bin",
    "~/.nvm/versions/node/default/bin",
    "~/.local/bin",
    "~/.cargo/bin",
)


class CommandStrategy:
    """Detects software by executing its configured version command.

    Opt-in per package: packages without a version_command are reported as
    not installed by this strategy.
    """

    name = "command"

    def __init__(self, timeout: float = COMMAND_TIMEOUT):
        self.timeout = timeout

    def build_env(self) -> dict[str, str]:
        """Copy of the process environment with COMMON_PATHS prepended to PATH."""
        env = dict(os.environ)
        extra = os.pathsep.join(expand_path(p) for p in COMMON_PATHS)
        env["PATH"] = f"{extra}{os.pathsep}{env.get('PATH', '')}"
        return env

    def detect(
        self, package_name: str, config: PackageDetectionConfig
    ) -> DetectionResult:
        """Run config.version_command and parse its output.

        CONTRACT:
          Inputs:
            - package_name: package identifier (used for logging only)
            - config: detection config; version_command and version_regex

          Outputs:
            - DetectionResult(installed=True, version=<optional>,
              source="command") when the command exits 0
            - NOT_INSTALLED when unset, non-zero exit, timeout or spawn error

          Invariants:
            - installed mirrors the command's exit status exactly
            - path is never set
        """
        if not config.version_command:
            return NOT_INSTALLED

        try:
            result = subprocess.run(
                config.version_command,
                shell=True,
                executable=SHELL,
                env=self.build_env(),
                capture_output=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout,
                check=True,
            )
        except subprocess.CalledProcessError as e:
            logger.debug(
                f"{package_name}: '{config.version_command}' exited {e.returncode}"
            )
            return NOT_INSTALLED
        except subprocess.TimeoutExpired:
            logger.debug(
                f"{package_name}: '{config.version_command}' timed out "
                f"after {self.timeout}s"
            )
            return NOT_INSTALLED
        except OSError as e:
            logger.debug(f"{package_name}: cannot run version command: {e}")
            return NOT_INSTALLED

        version = extract_version(result.stdout or "", config.version_regex)
        return DetectionResult(installed=True, version=version, source="command")
