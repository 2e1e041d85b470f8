"""Git operations for Branch Outline."""

import logging
import os
import shutil
import subprocess
from pathlib import Path
from typing import List

from error_handler import ExternalToolError, RepositoryNotFoundError

# Forced on every git invocation so literal tokens like 'gone', 'ahead' and
# 'behind' do not depend on the user's locale.
GIT_LOCALE_ENV = {"LANG": "C", "LC_ALL": "C", "LANGUAGE": "C"}


def which(cmd: str) -> str | None:
    """Find command in PATH."""
    return shutil.which(cmd)


def git_env() -> dict[str, str]:
    """Environment for git subprocesses: the caller's, with a fixed locale."""
    env = dict(os.environ)
    env.update(GIT_LOCALE_ENV)
    return env


def run_git(args: List[str], cwd: Path | None = None, check: bool = True) -> subprocess.CompletedProcess[str]:
    """Run a git command with safe argument passing and a fixed locale."""
    cmd = ["git"] + list(args)
    try:
        cp = subprocess.run(
            cmd,
            cwd=str(cwd) if cwd else None,
            env=git_env(),
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
        )
    except FileNotFoundError:
        raise ExternalToolError(cmd, None, "git not found on PATH")
    if check and cp.returncode != 0:
        raise ExternalToolError(cmd, cp.returncode, cp.stderr.strip())
    return cp


def ensure_repo_root(path: Path | str) -> Path:
    """Return the repo root for any path inside a git repo."""
    path = Path(path).expanduser()
    if not path.is_dir():
        raise RepositoryNotFoundError(path, "no such directory")
    try:
        cp = run_git(["-C", str(path), "rev-parse", "--show-toplevel"])
    except ExternalToolError as e:
        if e.returncode is None:
            raise
        raise RepositoryNotFoundError(path, e.stderr) from e
    return Path(cp.stdout.strip())


def git_version_ok(min_major: int = 2, min_minor: int = 22) -> bool:
    """Check if git version meets minimum requirements."""
    try:
        v = run_git(["--version"], check=False).stdout.strip()
        parts = v.split()
        if len(parts) >= 3:
            nums = parts[2].split(".")
            major = int(nums[0])
            minor = int(nums[1])
            return (major > min_major) or (major == min_major and minor >= min_minor)
    except (ValueError, IndexError, AttributeError, ExternalToolError) as e:
        logging.warning(f"Failed to parse git version: {e}")
    return False

