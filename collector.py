"""Collect the branch state of one repository into a RepositoryInfo."""

import subprocess
from pathlib import Path
from typing import Callable, List

from branch_parser import parse_branch_line
from error_handler import UnexpectedOutputError
from git_utils import run_git
from logging_config import get_logger
from models import BranchRecord, RepositoryInfo

logger = get_logger(__name__)

GitRunner = Callable[..., subprocess.CompletedProcess]


def parse_branch_listing(text: str) -> tuple[BranchRecord, ...]:
    """Parse the complete output of `git branch -vv`.

    Every non-blank line must parse; the first one that does not raises
    UnexpectedOutputError. The listing must mark exactly one branch active
    unless it is empty (a repository without commits has no branches yet).
    """
    records: List[BranchRecord] = []
    for number, line in enumerate(text.splitlines(), start=1):
        if not line.strip():
            continue
        record = parse_branch_line(line)
        if record is None:
            raise UnexpectedOutputError(line, number)
        records.append(record)

    active = [r for r in records if r.is_active]
    if records and len(active) != 1:
        raise UnexpectedOutputError(
            text.strip(),
            reason=f"expected one checked-out branch, found {len(active)}",
        )
    return tuple(records)


class BranchListCollector:
    """Runs git for a repository and builds its RepositoryInfo.

    `run` has the signature of git_utils.run_git and is the only way this class
    touches the outside world.
    """

    def __init__(self, run: GitRunner = run_git):
        self.run = run

    def collect(self, repository_root: Path | str) -> RepositoryInfo:
        root = str(repository_root)
        listing = self.run(["-C", root, "branch", "-vv", "--no-color"])
        branches = parse_branch_listing(listing.stdout)
        info = RepositoryInfo(
            root_path=root,
            current_branch=self._current_branch(root),
            current_tracking=self._current_tracking(root),
            branches=branches,
        )
        logger.debug(f"Collected {len(branches)} branches from {root} (on {info.current_branch})")
        return info

    def _current_branch(self, root: str) -> str:
        cp = self.run(["-C", root, "rev-parse", "--abbrev-ref", "HEAD"], check=False)
        if cp.returncode != 0:
            # unborn branch: HEAD does not resolve yet
            cp = self.run(["-C", root, "symbolic-ref", "--short", "HEAD"])
        return cp.stdout.strip()

    def _current_tracking(self, root: str) -> str | None:
        cp = self.run(
            ["-C", root, "rev-parse", "--abbrev-ref", "--symbolic-full-name", "@{upstream}"],
            check=False,
        )
        if cp.returncode != 0:
            return None
        return cp.stdout.strip() or None


def collect(repository_root: Path | str, run: GitRunner = run_git) -> RepositoryInfo:
    """Collect branch state for one repository."""
    return BranchListCollector(run).collect(repository_root)
