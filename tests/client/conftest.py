"""Shared fixtures for client tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from tests.client.fakes import FakeRemote


@pytest.fixture
def remote() -> FakeRemote:
    """Create an empty fake remote index."""
    return FakeRemote()


@pytest.fixture
def target(tmp_path: Path) -> Path:
    """Create the local target directory."""
    path = tmp_path / "target"
    path.mkdir()
    return path
