# tests/conftest.py

"""Shared pytest fixtures for the pipeline tests."""

from collections.abc import Generator
from pathlib import Path
from unittest.mock import patch

import pytest

from deal_scout.config.settings import Settings


@pytest.fixture(autouse=True)
def mock_sleep() -> Generator[None, None, None]:
    """Retry backoff runs instantly."""
    with patch("time.sleep"):
        yield


@pytest.fixture(autouse=True)
def isolated_output_dirs(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Keep results and run logs out of the working tree."""
    monkeypatch.setattr(Settings, "RESULTS_DIR", tmp_path / "results")
    monkeypatch.setattr(Settings, "LOGS_DIR", tmp_path / "logs")
    monkeypatch.setattr(Settings, "RELAY_API_KEY", "")
