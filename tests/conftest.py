"""Shared pytest fixtures for all tests."""

from pathlib import Path

import pytest

from spendeasy.store import init_database


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    """Create an initialized SQLite database in a temporary directory.

    Args:
        tmp_path: pytest tmp_path fixture for temporary directory.

    Returns:
        Path to the database file.
    """
    path = tmp_path / "spendeasy.db"
    init_database(path)
    return path
