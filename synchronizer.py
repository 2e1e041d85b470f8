"""Bring an outline subtree in line with a repository's current branches.

Branch nodes are matched by their "Branch" property, not by heading text.
Matched nodes are updated in place, unknown branches are appended at the end
of the subtree, and nodes for branches that no longer exist are left alone.
Nothing is ever reordered or deleted.
"""

from logging_config import get_logger
from models import BranchRecord, RepositoryInfo
from outline import OutlineNode

logger = get_logger(__name__)

BRANCH = "Branch"
COMMIT = "Commit"
TRACKS = "Tracks"
AHEAD = "Ahead"
BEHIND = "Behind"


def _set_or_remove(node: OutlineNode, key: str, value):
    if value is None:
        node.remove_property(key)
    else:
        node.set_property(key, str(value))


def update_branch_node(node: OutlineNode, record: BranchRecord):
    """Copy a branch record onto its node."""
    node.set_property(BRANCH, record.name)
    node.set_property(COMMIT, record.commit_hash)
    _set_or_remove(node, TRACKS, record.upstream)
    _set_or_remove(node, AHEAD, record.ahead)
    _set_or_remove(node, BEHIND, record.behind)
    node.set_attention(record.diverged)


def synchronize(subtree: OutlineNode, info: RepositoryInfo):
    """Update the branch nodes under `subtree` from `info`, in place."""
    pending = {record.name: record for record in info.branches}
    seen = set()

    for node in subtree.iter_descendants():
        name = node.get_property(BRANCH)
        if name is None:
            continue
        record = pending.pop(name, None)
        if record is not None:
            update_branch_node(node, record)
            seen.add(name)
        elif name in seen:
            logger.warning(
                f"Duplicate node for branch {name!r} in {info.root_path}; "
                f"only the first one is kept up to date"
            )

    for record in pending.values():
        node = subtree.append_child(record.name)
        update_branch_node(node, record)
        logger.info(f"Added branch {record.name!r} to {info.name}")
