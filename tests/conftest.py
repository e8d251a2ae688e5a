"""Shared fixtures for brewdesk tests."""

from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
from helpers import FakeClock, make_executable

from brewdesk.detect import reset_detector


@pytest.fixture
def clock() -> FakeClock:
    """A fake clock starting at t=1000s."""
    return FakeClock()


@pytest.fixture
def executable_factory(tmp_path: Path) -> Callable[[str], Path]:
    """Create executables relative to tmp_path."""

    def factory(relative: str) -> Path:
        return make_executable(tmp_path / relative)

    return factory


@pytest.fixture(autouse=True)
def _isolate_detector() -> Iterator[None]:
    """Each test starts without a shared detector."""
    reset_detector()
    yield
    reset_detector()


@pytest.fixture
def home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point HOME at a temporary directory."""
    home_dir = tmp_path / "home"
    home_dir.mkdir()
    monkeypatch.setenv("HOME", str(home_dir))
    return home_dir


