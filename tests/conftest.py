from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Generator, Iterator
from pathlib import Path

import pytest
from click.testing import CliRunner

from gitreconcile.config import NetworkConfig, ReconcileConfig
from tests.fixtures.repositories import RemoteRepo, create_remote


@pytest.fixture(autouse=True)
def configure_test_logging() -> Generator[None, None, None]:
    """Configure structlog for the test run.

    Logs go to stderr at WARNING so they never mix with CLI stdout.
    """
    from gitreconcile.logging import configure_logging

    configure_logging(level=logging.WARNING)
    yield


@pytest.fixture
def temp_dir() -> Iterator[Path]:
    """Create a temporary directory for test files.

    Also saves and restores the current working directory to prevent
    tests that use os.chdir() from affecting other tests.
    """
    original_cwd = os.getcwd()
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)
    os.chdir(original_cwd)


@pytest.fixture
def clean_env(
    temp_dir: Path, monkeypatch: pytest.MonkeyPatch
) -> Generator[None, None, None]:
    """Remove GITRECONCILE_* and GITHUB_TOKEN and hide the user config file."""
    original_env = os.environ.copy()
    for key in list(os.environ.keys()):
        if key.startswith("GITRECONCILE_") or key == "GITHUB_TOKEN":
            del os.environ[key]
    monkeypatch.setattr(
        "gitreconcile.config.get_user_config_path",
        lambda: temp_dir / "user-config" / "config.yaml",
    )
    yield
    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


# =============================================================================
# Git repositories
# =============================================================================


@pytest.fixture
def remote_repo(tmp_path: Path) -> Generator[RemoteRepo, None, None]:
    """Create a bare remote whose ``main`` holds one commit with README.md.

    Yields:
        RemoteRepo for the bare repository.
    """
    remote = create_remote(tmp_path)
    yield remote
    remote.close()


@pytest.fixture
def empty_remote(tmp_path: Path) -> Generator[RemoteRepo, None, None]:
    """Create a bare remote without any commits."""
    remote = create_remote(tmp_path / "empty", seed=False)
    yield remote
    remote.close()


@pytest.fixture
def file_config(clean_env: None) -> ReconcileConfig:
    """Configuration that accepts file:// URLs of the test remotes."""
    return ReconcileConfig(
        network=NetworkConfig(allowed_schemes=["file"], timeout_seconds=60)
    )
