"""
Shared pytest fixtures for hami tests.

This module provides:
- Settings cache isolation (``HAMI_*`` environment is re-read per test)
- A ``workspace`` fixture: a temporary working directory and user home
"""

from __future__ import annotations

from pathlib import Path

import pytest

from hami.core.node import SharedState
from hami.core.settings import clear_settings_cache


@pytest.fixture(autouse=True)
def _isolate_settings():
    """Clear cached settings before and after each test."""
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> dict[str, Path]:
    """Run the test inside ``tmp_path/work`` with ``tmp_path/home`` as the user home."""
    work = tmp_path / "work"
    home = tmp_path / "home"
    work.mkdir()
    home.mkdir()
    monkeypatch.chdir(work)
    monkeypatch.setenv("HAMI_HOME_DIRECTORY", str(home))
    return {"work": work, "home": home}


@pytest.fixture
def hami_shared(workspace: dict[str, Path]) -> SharedState:
    """Shared state with all four hami directories created."""
    work, home = workspace["work"], workspace["home"]
    (work / ".hami").mkdir()
    (home / ".hami").mkdir()
    return {
        "working_directory": str(work),
        "hami_directory": str(work / ".hami"),
        "user_home_directory": str(home),
        "user_hami_directory": str(home / ".hami"),
    }
