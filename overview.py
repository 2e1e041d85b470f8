"""Build or refresh the whole branch overview document."""

import time
from pathlib import Path
from typing import Callable, Iterable, List, Mapping, Optional

from collector import BranchListCollector
from error_handler import REPOSITORY_ERRORS, ErrorHandler, ErrorInfo, get_error_handler
from git_utils import ensure_repo_root
from logging_config import get_logger, log_performance
from models import RepositoryInfo
from outline import OutlineNode
from synchronizer import synchronize

logger = get_logger(__name__)

GITDIR = "Gitdir"
HEAD = "Head"
UPSTREAM = "Upstream"


class OverviewBuilder:
    """Refreshes category and repository headings of an outline document.

    Repositories are processed one at a time. A repository that cannot be
    collected is reported through the error handler and skipped; the others
    are still updated.
    """

    def __init__(
        self,
        collector: Optional[BranchListCollector] = None,
        resolve_root: Callable[[Path | str], Path] = ensure_repo_root,
        error_handler: Optional[ErrorHandler] = None,
    ):
        self.collector = collector or BranchListCollector()
        self.resolve_root = resolve_root
        self.error_handler = error_handler or get_error_handler()

    def build(self, document: OutlineNode, categories: Mapping[str, Iterable[str]]) -> List[ErrorInfo]:
        """Refresh every category; return the warnings raised on the way."""
        start = time.monotonic()
        warnings: List[ErrorInfo] = []
        for category, roots in categories.items():
            warnings.extend(self.update_category(document, category, roots))
        log_performance(logger, "overview refresh", time.monotonic() - start,
                        categories=len(categories), warnings=len(warnings))
        return warnings

    def update_category(self, document: OutlineNode, category: str, roots: Iterable[str]) -> List[ErrorInfo]:
        """Refresh the repositories of one category.

        The category heading is only created once a repository in it has been
        collected.
        """
        category_node: Optional[OutlineNode] = None
        warnings: List[ErrorInfo] = []
        for path in roots:
            try:
                info = self.collector.collect(self.resolve_root(path))
            except REPOSITORY_ERRORS as e:
                warnings.append(self.error_handler.handle_repository_error(e, path, category))
                continue
            if category_node is None:
                category_node = self.category_node(document, category)
            self.apply(document, category_node, info)
        return warnings

    def category_node(self, document: OutlineNode, category: str) -> OutlineNode:
        """The top-level heading for a category, created when missing."""
        node = document.find_child(category)
        if node is None:
            node = document.append_child(category)
            logger.info(f"Created category heading {category!r}")
        return node

    def repository_node(self, document: OutlineNode, category_node: OutlineNode, root: str) -> OutlineNode:
        """The node carrying Gitdir=root anywhere in the document, created when missing."""
        node = document.find_by_property(GITDIR, root)
        if node is None:
            node = category_node.append_child(Path(root).name or root)
            node.set_property(GITDIR, root)
            logger.info(f"Created repository heading for {root}")
        return node

    def apply(self, document: OutlineNode, category_node: OutlineNode, info: RepositoryInfo) -> OutlineNode:
        """Write an already collected RepositoryInfo into the document."""
        node = self.repository_node(document, category_node, info.root_path)
        node.set_property(HEAD, info.current_branch)
        if info.current_tracking is None:
            node.remove_property(UPSTREAM)
        else:
            node.set_property(UPSTREAM, info.current_tracking)
        synchronize(node, info)
        return node
