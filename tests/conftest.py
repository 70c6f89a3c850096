"""Shared test fixtures for pgfluent."""

from collections.abc import Generator

import pytest

from pgfluent.config import CONSTRAINT_MATCHING_ENV, LOG_LEVEL_ENV


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Run every test against default settings unless it sets its own."""
    monkeypatch.delenv(CONSTRAINT_MATCHING_ENV, raising=False)
    monkeypatch.delenv(LOG_LEVEL_ENV, raising=False)
    yield
