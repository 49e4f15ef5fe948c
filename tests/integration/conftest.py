"""Pytest configuration and fixtures for integration tests.

Provides a working directory with an options file and the environment
credentials the CLI reads.
"""

import os
from pathlib import Path
from typing import Callable
from unittest.mock import patch

import pytest


@pytest.fixture
def service_env(monkeypatch):
    """Set the credentials environment and keep any local .env file out."""
    monkeypatch.setenv("ARTIFACT_SYNC_URL", "https://cms.example.com/api")
    monkeypatch.setenv("ARTIFACT_SYNC_USER", "tester")
    monkeypatch.setenv("ARTIFACT_SYNC_PASSWORD", "secret")
    with patch("src.cli.credentials.load_dotenv"):
        yield


@pytest.fixture
def working_dir(tmp_path) -> Path:
    """Empty working directory for one journey."""
    work = tmp_path / "work"
    work.mkdir()
    return work


@pytest.fixture
def write_options(working_dir) -> Callable[[str], str]:
    """Write .artifact-sync/options.yaml into the working directory.

    Returns:
        Function taking the YAML text and returning the file path
    """
    def _write(text: str) -> str:
        options_dir = working_dir / ".artifact-sync"
        options_dir.mkdir(exist_ok=True)
        path = options_dir / "options.yaml"
        path.write_text(text, encoding="utf-8")
        return str(path)
    return _write


@pytest.fixture
def make_files(working_dir) -> Callable[..., None]:
    """Create empty files at the given paths, relative to the working directory."""
    def _make(*paths: str) -> None:
        for rel_path in paths:
            full_path = os.path.join(str(working_dir), rel_path)
            os.makedirs(os.path.dirname(full_path), exist_ok=True)
            with open(full_path, "w", encoding="utf-8") as f:
                f.write("{}")
    return _make
