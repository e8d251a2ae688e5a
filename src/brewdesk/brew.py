"""Homebrew command execution for install and uninstall.

Commands stream their output line by line to optional callbacks, which also
receive progress updates classified from Homebrew's output. After every
install or uninstall, successful or not, the package's detection cache entry
is invalidated so the next status check reflects the new state.
"""

import logging
import os
import re
import subprocess
import threading
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Literal

from .constants import BREW_PATHS
from .detect.detector import SoftwareDetector

logger = logging.getLogger(__name__)

BrewAction = Literal["install", "uninstall", "search", "info", "list", "version"]
InstallationStatus = Literal["downloading", "installing", "completed", "failed"]
ErrorType = Literal["network", "permission", "notfound", "unknown"]

OutputCallback = Callable[[str, Literal["stdout", "stderr"]], None]


class BrewNotFoundError(Exception):
    """Raised when no Homebrew executable exists at the known paths."""

    pass


@dataclass
class InstallationProgress:
    """Progress of an install/uninstall, derived from a line of output."""

    id: str
    status: InstallationStatus
    progress: int | None = None
    message: str = ""


@dataclass
class ErrorInfo:
    """User-facing classification of a failed brew command."""

    type: ErrorType
    message: str
    retryable: bool


@dataclass
class BrewCommandResult:
    """Outcome of a brew command."""

    success: bool
    exit_code: int | None
    output: str
    error: str | None = None

    @property
    def error_info(self) -> ErrorInfo | None:
        """Classified error for failed commands, None on success."""
        if self.success:
            return None
        return parse_error(self.error or "")


def build_command(
    brew_path: str,
    action: BrewAction,
    package_name: str | None = None,
    is_cask: bool = False,
) -> list[str]:
    """Build the argv for a brew action.

    Examples:
        build_command("/opt/homebrew/bin/brew", "install", "docker", True)
        -> ["/opt/homebrew/bin/brew", "install", "--cask", "docker"]
    """
    if action == "version":
        return [brew_path, "--version"]

    cmd = [brew_path, action]
    if is_cask:
        cmd.append("--cask")
    if package_name and action != "list":
        cmd.append(package_name)
    return cmd


def parse_progress(text: str, package_id: str) -> InstallationProgress | None:
    """Classify a chunk of brew output as a progress update.

    Checks are ordered: uninstall phrases first, then download, install,
    unpack and link phrases. Returns None for lines with no progress meaning.
    """
    lower = text.lower()

    if "uninstalling" in lower or "removing" in lower:
        return InstallationProgress(package_id, "installing", 50, "Uninstalling...")

    if "unlinking" in lower:
        return InstallationProgress(package_id, "installing", 75, "Unlinking...")

    if "downloading" in lower or "fetching" in lower:
        percent = re.search(r"(\d+)%", text)
        return InstallationProgress(
            package_id,
            "downloading",
            int(percent.group(1)) if percent else None,
            "Downloading...",
        )

    if "installing" in lower or "pouring" in lower or "pour" in lower:
        return InstallationProgress(package_id, "installing", 50, "Installing...")

    if "unpacking" in lower or "extracting" in lower:
        return InstallationProgress(package_id, "installing", 75, "Extracting...")

    if "linking" in lower or "symlinking" in lower:
        return InstallationProgress(package_id, "installing", 90, "Linking...")

    return None


_NETWORK_MARKERS = (
    "etimedout",
    "fetch failed",
    "connection timed out",
    "network is unreachable",
)
_PERMISSION_MARKERS = ("permission denied", "operation not permitted", "access denied")
_NOTFOUND_MARKERS = ("404", "not found", "no such file", "no available formula")


def parse_error(stderr: str) -> ErrorInfo:
    """Turn brew's stderr into a friendly error classification."""
    lower = stderr.lower()

    if any(marker in lower for marker in _NETWORK_MARKERS):
        return ErrorInfo(
            "network",
            "Network connection timed out. Check your connection or switch "
            "to a different mirror.",
            retryable=True,
        )

    if any(marker in lower for marker in _PERMISSION_MARKERS):
        return ErrorInfo(
            "permission",
            "Permission denied. Check ownership of the Homebrew prefix or run "
            "with the required privileges.",
            retryable=False,
        )

    if any(marker in lower for marker in _NOTFOUND_MARKERS):
        return ErrorInfo(
            "notfound",
            "Package not found. It may have been removed or the name is wrong.",
            retryable=False,
        )

    first_line = stderr.split("\n")[0].strip()
    return ErrorInfo(
        "unknown",
        first_line or "An unknown error occurred during installation.",
        retryable=True,
    )


class BrewRunner:
    """Runs brew commands and keeps the detector's cache honest."""

    def __init__(
        self,
        detector: SoftwareDetector,
        brew_paths: Sequence[str] = BREW_PATHS,
    ):
        self.detector = detector
        self.brew_paths = tuple(brew_paths)

    def find_brew_path(self) -> str | None:
        """Return the first known brew location that exists."""
        for path in self.brew_paths:
            if os.path.exists(path):
                return path
        return None

    def _build_env(self, brew_path: str) -> dict[str, str]:
        env = dict(os.environ)
        brew_dirs = {os.path.dirname(p) for p in self.brew_paths}
        brew_dirs.add(os.path.dirname(brew_path))
        prefix = os.pathsep.join(sorted(brew_dirs))
        env["PATH"] = f"{prefix}{os.pathsep}{env.get('PATH', '')}"
        env["HOMEBREW_NO_AUTO_UPDATE"] = "1"
        return env

    def execute(
        self,
        action: BrewAction,
        package_name: str | None = None,
        is_cask: bool = False,
        *,
        package_id: str | None = None,
        on_output: OutputCallback | None = None,
        on_progress: Callable[[InstallationProgress], None] | None = None,
    ) -> BrewCommandResult:
        """Run a brew action, streaming output to the callbacks.

        CONTRACT:
          Inputs:
            - action: brew subcommand
            - package_name: Homebrew formula/cask name, if the action takes one
            - is_cask: pass --cask
            - package_id: id used in progress updates (defaults to package_name)

          Outputs:
            - BrewCommandResult with collected stdout/stderr and exit code

          Invariants:
            - A failure to spawn brew yields success=False, exit_code=-1
            - Any exception while streaming (KeyboardInterrupt, a raising
              callback) terminates the child and propagates

        Raises:
            BrewNotFoundError: If brew is not installed at a known path
        """
        brew_path = self.find_brew_path()
        if brew_path is None:
            raise BrewNotFoundError(
                "Homebrew is not installed. See https://brew.sh to install it."
            )

        progress_id = package_id or package_name or action
        cmd = build_command(brew_path, action, package_name, is_cask)
        logger.debug(f"Running: {' '.join(cmd)}")

        try:
            proc = subprocess.Popen(
                cmd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                encoding="utf-8",
                errors="replace",
                env=self._build_env(brew_path),
            )
        except OSError as e:
            logger.debug(f"Failed to start {cmd[0]}: {e}")
            return BrewCommandResult(
                success=False, exit_code=-1, output="", error=str(e)
            )

        stderr_lines: list[str] = []

        def read_stderr() -> None:
            assert proc.stderr is not None
            for line in proc.stderr:
                stderr_lines.append(line)
                if on_output:
                    on_output(line, "stderr")

        stderr_thread = threading.Thread(target=read_stderr, daemon=True)
        stderr_thread.start()

        stdout_lines: list[str] = []
        try:
            assert proc.stdout is not None
            for line in proc.stdout:
                stdout_lines.append(line)
                if on_output:
                    on_output(line, "stdout")
                progress = parse_progress(line, progress_id)
                if progress and on_progress:
                    on_progress(progress)
            exit_code = proc.wait()
        except BaseException:
            proc.terminate()
            proc.wait()
            stderr_thread.join(timeout=1)
            raise

        # stderr reaches EOF once the child has exited
        stderr_thread.join()

        success = exit_code == 0
        error = "".join(stderr_lines) or None
        if on_progress:
            on_progress(
                InstallationProgress(
                    progress_id,
                    "completed" if success else "failed",
                    100 if success else 0,
                    "Done" if success else "Failed",
                )
            )

        logger.debug(f"{' '.join(cmd)} exited {exit_code}")
        return BrewCommandResult(
            success=success,
            exit_code=exit_code,
            output="".join(stdout_lines),
            error=error,
        )

    def install(
        self,
        package_id: str,
        *,
        brew_name: str | None = None,
        is_cask: bool = False,
        on_output: OutputCallback | None = None,
        on_progress: Callable[[InstallationProgress], None] | None = None,
    ) -> BrewCommandResult:
        """Install a package and invalidate its cached detection result."""
        try:
            return self.execute(
                "install",
                brew_name or package_id,
                is_cask,
                package_id=package_id,
                on_output=on_output,
                on_progress=on_progress,
            )
        finally:
            self.detector.invalidate_cache(package_id)

    def uninstall(
        self,
        package_id: str,
        *,
        brew_name: str | None = None,
        is_cask: bool = False,
        on_output: OutputCallback | None = None,
        on_progress: Callable[[InstallationProgress], None] | None = None,
    ) -> BrewCommandResult:
        """Uninstall a package and invalidate its cached detection result."""
        try:
            return self.execute(
                "uninstall",
                brew_name or package_id,
                is_cask,
                package_id=package_id,
                on_output=on_output,
                on_progress=on_progress,
            )
        finally:
            self.detector.invalidate_cache(package_id)
