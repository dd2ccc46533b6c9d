"""Shared pytest fixtures for the test suite."""

import re
import shutil
import subprocess
from collections.abc import Generator
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock, patch

import pytest

from trunk_release.engine import BranchPolicy
from trunk_release.main import DEFAULT_RELEASE_BRANCH_PATTERN, DEFAULT_RELEASE_BRANCH_TEMPLATE, ActionInputs
from trunk_release.memory_store import InMemoryStore
from trunk_release.store import GitStore


def make_inputs(**overrides: Any) -> ActionInputs:
    """Create dry-run ActionInputs with the default branch configuration.

    This is a shared helper used across multiple test modules.
    """
    values: dict[str, Any] = {
        "action": "release-cut",
        "trunk_branch_name": "main",
        "release_branch_pattern": DEFAULT_RELEASE_BRANCH_PATTERN,
        "release_branch_template": DEFAULT_RELEASE_BRANCH_TEMPLATE,
        "dry_run": True,
        "token": "test-token",
        "repository": "owner/repo",
    }
    values.update(overrides)
    return ActionInputs(**values)


def git(repo: Path, *args: str) -> str:
    """Run a git command in a test repository and return its stdout."""
    proc = subprocess.run(
        ["git", *args],
        cwd=str(repo),
        capture_output=True,
        text=True,
        check=True,
    )
    return proc.stdout


def git_commit(repo: Path, message: str, *tags: str) -> None:
    """Create an empty commit in a test repository and tag it."""
    git(repo, "commit", "--allow-empty", "-m", message)
    for tag in tags:
        git(repo, "tag", tag)


@pytest.fixture
def policy() -> BranchPolicy:
    """Default branch policy: trunk 'main', release branches 'release-X.Y.x'."""
    return BranchPolicy(
        trunk_branch_name="main",
        release_pattern=re.compile(DEFAULT_RELEASE_BRANCH_PATTERN),
        release_branch_template=DEFAULT_RELEASE_BRANCH_TEMPLATE,
    )


@pytest.fixture
def store() -> InMemoryStore:
    """Empty in-memory store on branch 'main'."""
    return InMemoryStore()


@pytest.fixture
def git_repo(tmp_path: Path) -> Path:
    """Create an empty git repository on branch 'main'."""
    if shutil.which("git") is None:
        pytest.skip("git is not installed")

    repo = tmp_path / "repo"
    repo.mkdir()
    git(repo, "init", "--initial-branch", "main")
    git(repo, "config", "user.name", "Test User")
    git(repo, "config", "user.email", "test@example.com")
    git(repo, "config", "commit.gpgsign", "false")
    git(repo, "config", "tag.gpgsign", "false")
    return repo


@pytest.fixture
def git_store(git_repo: Path) -> GitStore:
    """GitStore for the temporary repository."""
    return GitStore(git_repo)


@pytest.fixture
def mock_pygithub() -> Generator[dict[str, Any], None, None]:
    """Patch PyGithub for unit tests."""
    with patch("trunk_release.github_api.Github") as mock_github:
        mock_repo = MagicMock()
        mock_repo.clone_url = "https://github.com/owner/repo.git"
        mock_repo.permissions.push = True
        mock_github.return_value.get_repo.return_value = mock_repo
        yield {"github": mock_github, "repo": mock_repo}
