"""Pytest configuration and fixtures for Branch Outline tests."""

import shutil
import subprocess
import tempfile
from collections.abc import Generator
from pathlib import Path

import pytest


def git(cwd: Path, *args: str) -> str:
    """Run git in a test repository and return stdout."""
    cp = subprocess.run(["git", *args], cwd=cwd, check=True, capture_output=True, text=True)
    return cp.stdout


def commit(repo: Path, name: str, message: str):
    (repo / name).write_text(f"{message}\n")
    git(repo, "add", name)
    git(repo, "commit", "-q", "-m", message)


@pytest.fixture(autouse=True)
def isolated_config_dir(tmp_path_factory, monkeypatch) -> Path:
    """Keep settings and logs written by tests out of the real config directory."""
    config_home = tmp_path_factory.mktemp("config-home")
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    return config_home


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    temp_path = Path(tempfile.mkdtemp()).resolve()
    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def temp_git_repo(temp_dir: Path) -> Path:
    """Create a temporary git repository on branch 'main' with one commit."""
    repo = temp_dir / "repo"
    repo.mkdir()
    git(repo, "init", "-q")
    git(repo, "symbolic-ref", "HEAD", "refs/heads/main")
    git(repo, "config", "user.name", "Test User")
    git(repo, "config", "user.email", "test@example.com")
    git(repo, "config", "commit.gpgsign", "false")
    commit(repo, "README.md", "Initial commit")
    return repo


@pytest.fixture
def tracked_git_repo(temp_git_repo: Path, temp_dir: Path) -> Path:
    """Repository with an origin remote and branches in several tracking states.

    main     tracks origin/main, one commit ahead
    feature  tracks origin/feature, upstream deleted (gone)
    topic    no upstream
    """
    remote = temp_dir / "remote.git"
    git(temp_dir, "init", "-q", "--bare", str(remote))
    git(temp_git_repo, "remote", "add", "origin", str(remote))
    git(temp_git_repo, "push", "-q", "-u", "origin", "main")

    git(temp_git_repo, "checkout", "-q", "-b", "feature")
    commit(temp_git_repo, "feature.txt", "Feature work")
    git(temp_git_repo, "push", "-q", "-u", "origin", "feature")
    git(temp_git_repo, "push", "-q", "origin", "--delete", "feature")

    git(temp_git_repo, "checkout", "-q", "-b", "topic", "main")
    git(temp_git_repo, "checkout", "-q", "main")
    commit(temp_git_repo, "local.txt", "Local only")
    return temp_git_repo


@pytest.fixture
def sample_config(temp_dir: Path) -> dict:
    """Provide a sample configuration for testing."""
    return {
        "categories": {"Work": ["/src/alpha", "/src/beta"]},
        "document_path": str(temp_dir / "branches.org"),
        "status_command": "git status",
        "theme": "dark",
        "window_geometry": None,
    }


@pytest.fixture
def config_file(temp_dir: Path, sample_config: dict) -> Path:
    """Create a temporary config file for testing."""
    import json

    config_path = temp_dir / "config.json"
    config_path.write_text(json.dumps(sample_config, indent=2))
    return config_path
