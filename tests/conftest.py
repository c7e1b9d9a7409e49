"""
Shared pytest fixtures for tagver tests.
"""

import shutil
from pathlib import Path
from typing import Generator

import pytest

from tests.factories import GitRepoBuilder


@pytest.fixture
def git_repo(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[GitRepoBuilder, None, None]:
    """An empty real git repository isolated from the user's git config."""
    if shutil.which("git") is None:
        pytest.skip("git executable not available")

    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.delenv("GIT_DIR", raising=False)
    monkeypatch.delenv("GIT_WORK_TREE", raising=False)
    for var in ("TAGVER_GIT_BINARY", "TAGVER_GIT_TIMEOUT", "TAGVER_REVISION", "TAGVER_REMOTE"):
        monkeypatch.delenv(var, raising=False)

    repo_dir = tmp_path / "repo"
    repo_dir.mkdir()
    yield GitRepoBuilder(repo_dir)
