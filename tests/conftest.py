"""Shared fixtures for leftovers tests."""

import os
import time
from pathlib import Path

import pytest

DAY = 86400


def set_age(path: Path, days: float) -> None:
    """Backdate a path's modification time."""
    stamp = time.time() - days * DAY
    os.utime(path, (stamp, stamp), follow_symlinks=False)


@pytest.fixture
def home(tmp_path):
    """An empty fake home directory."""
    home_dir = tmp_path / "home"
    home_dir.mkdir()
    return home_dir


@pytest.fixture
def make_dir():
    """Create a directory holding one sparse file of size_mb, aged age_days."""

    def _make(path: Path, size_mb: float = 0, age_days: float = 0) -> Path:
        path.mkdir(parents=True, exist_ok=True)
        if size_mb:
            with open(path / "data.bin", "wb") as f:
                f.truncate(int(size_mb * 1024 * 1024))
            set_age(path / "data.bin", age_days)
        set_age(path, age_days)
        return path

    return _make


@pytest.fixture
def make_file():
    """Create a sparse file of size_mb, aged age_days."""

    def _make(path: Path, size_mb: float = 0, age_days: float = 0) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "wb") as f:
            f.truncate(int(size_mb * 1024 * 1024))
        set_age(path, age_days)
        return path

    return _make
