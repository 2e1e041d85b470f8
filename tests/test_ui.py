"""Tests for the desktop viewer, run on the offscreen Qt platform."""

import json
import os
from pathlib import Path
from unittest.mock import patch

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
QtWidgets = pytest.importorskip("PySide6.QtWidgets")

from PySide6.QtCore import Qt  # noqa: E402

import org_store  # noqa: E402
from outline import OutlineDocument  # noqa: E402
from ui.main_window import OutlineWindow  # noqa: E402
from ui.outline_tree import ATTENTION_COLOR, OutlineTree  # noqa: E402


@pytest.fixture(scope="module")
def qapp():
    return QtWidgets.QApplication.instance() or QtWidgets.QApplication([])


@pytest.fixture
def document() -> OutlineDocument:
    doc = OutlineDocument()
    repo = doc.append_child("Work").append_child("alpha")
    repo.set_property("Gitdir", "/src/alpha")
    main = repo.append_child("main")
    main.set_property("Branch", "main")
    main.set_property("Commit", "1234567")
    main.set_property("Tracks", "origin/main")
    main.set_property("Ahead", 2)
    main.set_attention(True)
    topic = repo.append_child("topic")
    topic.set_property("Branch", "topic")
    return doc


def find_item(tree, heading: str):
    items = tree.findItems(heading, Qt.MatchFlag.MatchExactly | Qt.MatchFlag.MatchRecursive, 0)
    assert items, f"no item {heading!r}"
    return items[0]


class TestOutlineTree:
    """Tests for OutlineTree."""

    def test_populate_columns(self, qapp, document):
        tree = OutlineTree()
        tree.populate(document)

        item = find_item(tree, "main")
        assert [item.text(column) for column in range(5)] == ["main", "1234567", "origin/main", "+2", ""]
        assert item.foreground(0).color().name() == ATTENTION_COLOR
        assert find_item(tree, "topic").text(3) == ""

    def test_node_for_selection(self, qapp, document):
        tree = OutlineTree()
        tree.populate(document)

        tree.setCurrentItem(find_item(tree, "topic"))

        assert tree.selected_node() is document.find_by_property("Branch", "topic")

    def test_collapsed_headings_stay_collapsed(self, qapp, document):
        tree = OutlineTree()
        tree.populate(document)
        find_item(tree, "alpha").setExpanded(False)

        reloaded = org_store.loads(org_store.dumps(document))
        tree.populate(reloaded)

        assert find_item(tree, "Work").isExpanded()
        assert not find_item(tree, "alpha").isExpanded()


@pytest.fixture
def window(qapp, temp_dir: Path, temp_git_repo: Path):
    cfg = {"categories": {"Work": [str(temp_git_repo)]}, "theme": "light"}
    with patch("ui.main_window.git_version_ok", return_value=True):
        win = OutlineWindow(cfg, document_path=temp_dir / "branches.org", config_path=temp_dir / "settings.json")
    yield win
    win.close()


class TestOutlineWindow:
    """Tests for OutlineWindow."""

    def test_refresh_writes_document(self, window, temp_dir: Path, temp_git_repo: Path):
        window.refresh()

        document = org_store.load(temp_dir / "branches.org")
        assert document.find_by_property("Gitdir", str(temp_git_repo)) is not None
        assert window.status_label.text() == "Updated 1 repositories"
        assert find_item(window.tree, "main").text(1)

    def test_refresh_without_repositories(self, window, temp_dir: Path):
        window.cfg["categories"] = {}

        window.refresh()

        assert "No repositories configured" in window.status_label.text()
        assert not (temp_dir / "branches.org").exists()

    def test_refresh_reports_skipped_repository(self, window, temp_dir: Path):
        plain = temp_dir / "plain"
        plain.mkdir()
        window.cfg["categories"]["Work"].append(str(plain))

        window.refresh()

        assert "1 skipped" in window.status_label.text()

    def test_show_status_for_selected_branch(self, window, temp_git_repo: Path):
        window.refresh()
        window.tree.setCurrentItem(find_item(window.tree, "main"))

        with patch("ui.main_window.status_at", return_value=temp_git_repo) as mock_status:
            window.show_status()

        node, _prompt, command = mock_status.call_args.args
        assert node.get_property("Branch") == "main"
        assert command == "git status"
        assert window.status_label.text() == f"Status opened for {temp_git_repo.name}"

    def test_remove_selected_repository(self, window, monkeypatch, temp_dir: Path):
        window.refresh()
        window.tree.setCurrentItem(find_item(window.tree, "main"))
        monkeypatch.setattr(QtWidgets.QMessageBox, "question",
                            lambda *args: QtWidgets.QMessageBox.StandardButton.Yes)

        window.remove_selected_repository()

        assert window.cfg["categories"] == {}
        assert json.loads((temp_dir / "settings.json").read_text())["categories"] == {}
        assert org_store.load(temp_dir / "branches.org").find_child("Work") is not None

    def test_close_saves_geometry(self, window, temp_dir: Path):
        window.close()

        saved = json.loads((temp_dir / "settings.json").read_text())
        assert "x" in saved["window_geometry"]
