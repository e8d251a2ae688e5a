"""Test doubles and helpers shared across brewdesk tests."""

import os
import stat
from pathlib import Path

import pytest

from brewdesk.detect import NOT_INSTALLED, DetectionResult, PackageDetectionConfig


class FakeClock:
    """Manually advanced monotonic clock (seconds)."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingStrategy:
    """Strategy double returning a fixed result and counting calls."""

    def __init__(
        self,
        name: str,
        result: DetectionResult = NOT_INSTALLED,
        error: Exception | None = None,
    ):
        self.name = name
        self.result = result
        self.error = error
        self.calls: list[tuple[str, PackageDetectionConfig]] = []

    @property
    def call_count(self) -> int:
        return len(self.calls)

    def detect(
        self, package_name: str, config: PackageDetectionConfig
    ) -> DetectionResult:
        self.calls.append((package_name, config))
        if self.error is not None:
            raise self.error
        return self.result


def make_executable(path: Path, content: str = "#!/bin/sh\nexit 0\n") -> Path:
    """Create an executable file at path (parents included)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


requires_bash = pytest.mark.skipif(
    not os.path.exists("/bin/bash"), reason="requires /bin/bash"
)
