"""Data models for Branch Outline."""

from dataclasses import dataclass


@dataclass(frozen=True)
class BranchRecord:
    """One local branch as reported by `git branch -vv`."""

    name: str  # may be a pseudo-name such as '(HEAD detached at abc1234)'
    is_active: bool
    commit_hash: str
    upstream: str | None = None
    ahead: int | None = None  # None means git reported no count
    behind: int | None = None
    gone: bool = False

    @property
    def is_detached(self) -> bool:
        return self.name.startswith("(")

    @property
    def diverged(self) -> bool:
        """True when git reported an ahead or behind count."""
        return self.ahead is not None or self.behind is not None


@dataclass(frozen=True)
class RepositoryInfo:
    """Snapshot of one repository's branch state, built fresh on every pass."""

    root_path: str
    current_branch: str
    current_tracking: str | None
    branches: tuple[BranchRecord, ...] = ()

    @property
    def name(self) -> str:
        """Last path segment of the repository root."""
        stripped = self.root_path.rstrip("/\\")
        return stripped.replace("\\", "/").rsplit("/", 1)[-1] or self.root_path

    @property
    def active_branch(self) -> BranchRecord | None:
        for record in self.branches:
            if record.is_active:
                return record
        return None
