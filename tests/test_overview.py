"""Tests for building and refreshing the branch overview."""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

import org_store
from error_handler import (
    ErrorCategory,
    ErrorHandler,
    ErrorSeverity,
    ExternalToolError,
    MalformedNumberError,
    RepositoryNotFoundError,
    UnexpectedOutputError,
)
from models import BranchRecord, RepositoryInfo
from outline import OutlineDocument
from overview import OverviewBuilder


def info_for(root: str, *names: str) -> RepositoryInfo:
    branches = tuple(
        BranchRecord(name, i == 0, f"{i:07x}", upstream=f"origin/{name}")
        for i, name in enumerate(names)
    )
    return RepositoryInfo(root, names[0], f"origin/{names[0]}", branches)


class FakeCollector:
    """Returns canned RepositoryInfo per root, or raises a canned error."""

    def __init__(self, results: dict):
        self.results = results
        self.calls = []

    def collect(self, root):
        self.calls.append(str(root))
        result = self.results[str(root)]
        if isinstance(result, Exception):
            raise result
        return result


def make_builder(results: dict, resolve_root=Path) -> tuple[OverviewBuilder, ErrorHandler]:
    handler = ErrorHandler()
    return OverviewBuilder(FakeCollector(results), resolve_root=resolve_root, error_handler=handler), handler


class TestUpdateCategory:
    """Tests for OverviewBuilder.update_category."""

    def test_creates_category_and_repository_headings(self):
        builder, _ = make_builder({"/src/alpha": info_for("/src/alpha", "main", "dev")})
        doc = OutlineDocument()

        warnings = builder.update_category(doc, "Work", ["/src/alpha"])

        assert warnings == []
        work = doc.find_child("Work")
        alpha = work.children[0]
        assert alpha.heading == "alpha"
        assert alpha.level == 2
        assert alpha.get_property("Gitdir") == "/src/alpha"
        assert alpha.get_property("Head") == "main"
        assert alpha.get_property("Upstream") == "origin/main"
        assert [c.heading for c in alpha.children] == ["main", "dev"]

    def test_reuses_existing_nodes(self):
        builder, _ = make_builder({"/src/alpha": info_for("/src/alpha", "main")})
        doc = OutlineDocument()
        builder.update_category(doc, "Work", ["/src/alpha"])
        before = org_store.dumps(doc)

        builder.update_category(doc, "Work", ["/src/alpha"])

        assert org_store.dumps(doc) == before
        assert len(doc.children) == 1

    def test_category_of_only_failing_repositories_is_not_created(self):
        results = {"/src/r1": ExternalToolError(["git"], 128), "/src/r2": UnexpectedOutputError("???", 1)}
        builder, _ = make_builder(results)
        doc = OutlineDocument()

        warnings = builder.update_category(doc, "Work", ["/src/r1", "/src/r2"])

        assert len(warnings) == 2
        assert doc.children == []
        assert org_store.dumps(doc) == ""

    def test_locates_repository_by_gitdir_anywhere(self):
        doc = OutlineDocument()
        moved = doc.append_child("Archive").append_child("Alpha (old name)")
        moved.set_property("Gitdir", "/src/alpha")
        builder, _ = make_builder({"/src/alpha": info_for("/src/alpha", "main")})

        builder.update_category(doc, "Work", ["/src/alpha"])

        assert doc.find_child("Work").children == []
        assert [c.heading for c in moved.children] == ["main"]

    def test_upstream_removed_when_not_tracking(self):
        doc = OutlineDocument()
        builder, _ = make_builder({"/src/alpha": info_for("/src/alpha", "main")})
        builder.update_category(doc, "Work", ["/src/alpha"])
        builder.collector.results["/src/alpha"] = RepositoryInfo(
            "/src/alpha", "main", None, (BranchRecord("main", True, "1234567"),)
        )

        builder.update_category(doc, "Work", ["/src/alpha"])

        assert doc.find_by_property("Gitdir", "/src/alpha").get_property("Upstream") is None

    def test_resolved_root_is_the_identity(self):
        builder, _ = make_builder(
            {"/src/alpha": info_for("/src/alpha", "main")},
            resolve_root=lambda p: Path("/src/alpha"),
        )
        doc = OutlineDocument()

        builder.update_category(doc, "Work", ["/src/alpha/sub/dir"])

        assert builder.collector.calls == ["/src/alpha"]
        assert doc.find_by_property("Gitdir", "/src/alpha") is not None


class TestErrorIsolation:
    """One failing repository must not stop the others."""

    def test_external_tool_error_skips_only_that_repository(self):
        results = {
            "/src/r1": info_for("/src/r1", "main"),
            "/src/r2": ExternalToolError(["git", "branch", "-vv"], 128, "fatal: bad object"),
            "/src/r3": info_for("/src/r3", "main", "dev"),
        }
        builder, _ = make_builder(results)
        doc = OutlineDocument()

        warnings = builder.update_category(doc, "Work", ["/src/r1", "/src/r2", "/src/r3"])

        assert len(warnings) == 1
        assert warnings[0].severity == ErrorSeverity.WARNING
        assert warnings[0].category == ErrorCategory.GIT_OPERATION
        assert warnings[0].context["repo_path"] == "/src/r2"
        assert doc.find_by_property("Gitdir", "/src/r1") is not None
        assert doc.find_by_property("Gitdir", "/src/r2") is None
        r3 = doc.find_by_property("Gitdir", "/src/r3")
        assert [c.heading for c in r3.children] == ["main", "dev"]

    @pytest.mark.parametrize("error, category", [
        (UnexpectedOutputError("???", 3), ErrorCategory.OUTPUT_FORMAT),
        (MalformedNumberError("x", "* main 1 [o/main: ahead x]"), ErrorCategory.OUTPUT_FORMAT),
    ])
    def test_output_errors_are_warnings(self, error, category):
        builder, _ = make_builder({"/src/r1": error})

        warnings = builder.update_category(OutlineDocument(), "Work", ["/src/r1"])

        assert [w.category for w in warnings] == [category]

    def test_failed_repository_subtree_is_not_modified(self):
        doc = OutlineDocument()
        builder, _ = make_builder({"/src/r1": info_for("/src/r1", "main")})
        builder.update_category(doc, "Work", ["/src/r1"])
        before = org_store.dumps(doc)
        builder.collector.results["/src/r1"] = UnexpectedOutputError("???", 2)

        builder.update_category(doc, "Work", ["/src/r1"])

        assert org_store.dumps(doc) == before

    def test_repository_not_found(self):
        def resolve(path):
            raise RepositoryNotFoundError(path, "fatal: not a git repository")

        builder, _ = make_builder({}, resolve_root=resolve)

        warnings = builder.update_category(OutlineDocument(), "Work", ["/tmp/nowhere"])

        assert len(warnings) == 1
        assert warnings[0].category == ErrorCategory.REPOSITORY
        assert "not inside a git repository" in warnings[0].user_message

    def test_notification_callback_receives_each_warning(self):
        results = {"/src/r1": ExternalToolError(["git"], 1), "/src/r2": ExternalToolError(["git"], 1)}
        builder, handler = make_builder(results)
        callback = MagicMock()
        handler.set_notification_callback(callback)

        builder.update_category(OutlineDocument(), "Work", ["/src/r1", "/src/r2"])

        assert callback.call_count == 2

    def test_other_exceptions_propagate(self):
        builder, _ = make_builder({"/src/r1": KeyError("boom")})

        with pytest.raises(KeyError):
            builder.update_category(OutlineDocument(), "Work", ["/src/r1"])


class TestBuild:
    """Tests for OverviewBuilder.build."""

    def test_all_categories(self):
        results = {
            "/src/r1": info_for("/src/r1", "main"),
            "/src/r2": ExternalToolError(["git"], 1),
            "/home/me/dotfiles": info_for("/home/me/dotfiles", "master"),
        }
        builder, _ = make_builder(results)
        doc = OutlineDocument()

        warnings = builder.build(doc, {"Work": ["/src/r1", "/src/r2"], "Personal": ["/home/me/dotfiles"]})

        assert len(warnings) == 1
        assert [c.heading for c in doc.children] == ["Work", "Personal"]
        assert doc.find_child("Personal").children[0].heading == "dotfiles"

    def test_against_real_repositories(self, tracked_git_repo: Path, temp_dir: Path):
        missing = temp_dir / "not-a-repo"
        missing.mkdir()
        doc = OutlineDocument()

        warnings = OverviewBuilder(error_handler=ErrorHandler()).build(
            doc, {"Work": [str(tracked_git_repo), str(missing)]}
        )

        assert len(warnings) == 1
        assert warnings[0].context["repo_path"] == str(missing)
        repo = doc.find_by_property("Gitdir", str(tracked_git_repo))
        assert repo.get_property("Head") == "main"
        main = repo.find_by_property("Branch", "main")
        assert main.get_property("Ahead") == "1"
        assert main.needs_attention
        assert repo.find_by_property("Branch", "topic").get_property("Tracks") is None
