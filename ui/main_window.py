"""Main window and application logic."""

from pathlib import Path

from PySide6.QtGui import QAction, QKeySequence
from PySide6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QHBoxLayout,
    QLabel, QPushButton, QStatusBar, QMessageBox, QFileDialog,
)

import org_store
from actions import status_at
from config import (
    load_config, save_config, add_repository, remove_repository, get_categories,
    get_document_path, get_status_command,
)
from error_handler import REPOSITORY_ERRORS, ErrorInfo, ErrorSeverity, get_error_handler
from git_utils import git_version_ok
from logging_config import get_logger
from outline import OutlineDocument
from overview import GITDIR, OverviewBuilder

from .dialogs import AddRepositoryDialog
from .outline_tree import OutlineTree

logger = get_logger(__name__)

DARK_STYLE = """
    QMainWindow, QWidget { background-color: #0f1115; color: #e6e7ee; }
    QTreeWidget { background-color: #151823; alternate-background-color: #1a1f2e; border: 1px solid #404757; }
    QHeaderView::section { background-color: #1a1f2e; color: #9aa1b2; border: none; padding: 4px; }
    QPushButton { background-color: #1a1f2e; border: 1px solid #404757; border-radius: 4px; padding: 6px 12px; }
    QPushButton:hover { background-color: #20273a; }
    QStatusBar { background-color: #1a1f2e; color: #9aa1b2; border-top: 1px solid #404757; }
"""

LIGHT_STYLE = """
    QMainWindow, QWidget { background-color: #f5f6fb; color: #0e1116; }
    QTreeWidget { background-color: #ffffff; alternate-background-color: #f0f2f7; border: 1px solid #d1d5db; }
    QPushButton { background-color: #f0f2f7; border: 1px solid #d1d5db; border-radius: 4px; padding: 6px 12px; }
    QStatusBar { background-color: #f0f2f7; color: #475569; border-top: 1px solid #d1d5db; }
"""


class OutlineWindow(QMainWindow):
    """Shows the branch overview and refreshes it on demand."""

    def __init__(self, cfg: dict | None = None, builder: OverviewBuilder | None = None,
                 document_path: Path | None = None, config_path: Path | None = None):
        super().__init__()
        self.setWindowTitle("Branch Outline")
        self.resize(900, 600)

        self.config_path = config_path
        self.cfg = cfg if cfg is not None else load_config(config_path)
        self.document_path = document_path or get_document_path(self.cfg)
        self.builder = builder or OverviewBuilder()
        self.document: OutlineDocument = OutlineDocument()

        self._setup_ui()
        self._setup_menus()
        self._apply_theme(self.cfg.get("theme", "dark"))
        get_error_handler().set_notification_callback(self._on_error)

        if not git_version_ok():
            QMessageBox.warning(self, "Git version", "Git 2.22+ is recommended. Some output may not be understood.")

        self._restore_settings()
        self.reload_document()

    def _setup_ui(self):
        """Setup the main UI."""
        central_widget = QWidget()
        self.setCentralWidget(central_widget)

        main_layout = QVBoxLayout(central_widget)
        main_layout.setContentsMargins(12, 12, 12, 12)
        main_layout.setSpacing(6)

        self.tree = OutlineTree(self)
        self.tree.itemActivated.connect(lambda item, column: self.show_status())
        main_layout.addWidget(self.tree, 1)

        bottom_layout = QHBoxLayout()
        bottom_layout.setSpacing(6)

        refresh_btn = QPushButton("Refresh")
        refresh_btn.clicked.connect(self.refresh)
        refresh_btn.setToolTip("Update every tracked repository (F5)")
        bottom_layout.addWidget(refresh_btn)

        status_btn = QPushButton("Status")
        status_btn.clicked.connect(self.show_status)
        status_btn.setToolTip("Open a status view for the selected repository")
        bottom_layout.addWidget(status_btn)

        add_btn = QPushButton("Add repository…")
        add_btn.clicked.connect(self.add_repository)
        bottom_layout.addWidget(add_btn)

        bottom_layout.addStretch()
        main_layout.addLayout(bottom_layout)

        self.status_bar = QStatusBar()
        self.setStatusBar(self.status_bar)
        self.status_label = QLabel("Ready")
        self.status_bar.addWidget(self.status_label)

    def _setup_menus(self):
        """Setup the menu bar."""
        menubar = self.menuBar()

        file_menu = menubar.addMenu("File")
        add_action = QAction("Add repository…", self)
        add_action.setShortcut(QKeySequence("Ctrl+O"))
        add_action.triggered.connect(self.add_repository)
        file_menu.addAction(add_action)

        remove_action = QAction("Remove repository", self)
        remove_action.triggered.connect(self.remove_selected_repository)
        file_menu.addAction(remove_action)

        reload_action = QAction("Reload document", self)
        reload_action.triggered.connect(self.reload_document)
        file_menu.addAction(reload_action)

        file_menu.addSeparator()
        exit_action = QAction("Exit", self)
        exit_action.triggered.connect(self.close)
        file_menu.addAction(exit_action)

        view_menu = menubar.addMenu("View")
        refresh_action = QAction("Refresh", self)
        refresh_action.setShortcut(QKeySequence("F5"))
        refresh_action.triggered.connect(self.refresh)
        view_menu.addAction(refresh_action)

        status_action = QAction("Status", self)
        status_action.setShortcut(QKeySequence("Ctrl+S"))
        status_action.triggered.connect(self.show_status)
        view_menu.addAction(status_action)

        view_menu.addSeparator()
        dark_action = QAction("Dark theme", self)
        dark_action.triggered.connect(lambda: self._switch_theme("dark"))
        view_menu.addAction(dark_action)
        light_action = QAction("Light theme", self)
        light_action.triggered.connect(lambda: self._switch_theme("light"))
        view_menu.addAction(light_action)

        help_menu = menubar.addMenu("Help")
        about_action = QAction("About", self)
        about_action.triggered.connect(self._show_about)
        help_menu.addAction(about_action)

    def _apply_theme(self, mode: str = "dark"):
        """Apply theme styling."""
        self.setStyleSheet(DARK_STYLE if mode == "dark" else LIGHT_STYLE)

    def _switch_theme(self, mode: str):
        self._apply_theme(mode)
        self.cfg["theme"] = mode
        save_config(self.cfg, self.config_path)

    def _show_about(self):
        QMessageBox.about(
            self,
            "About",
            "Branch Outline\n"
            "Keeps an Org outline of the local branches of your repositories,\n"
            "with upstream tracking and ahead/behind counts.\n"
            f"Document: {self.document_path}"
        )

    def _restore_settings(self):
        """Restore window geometry."""
        geom = self.cfg.get("window_geometry")
        if geom and 'x' in geom and '+' in geom:
            try:
                size_part, pos_part = geom.split('+', 1)
                width, height = map(int, size_part.split('x'))
                x, y = map(int, pos_part.split('+'))
            except ValueError:
                logger.warning(f"Ignoring malformed window geometry {geom!r}")
                return
            self.resize(width, height)
            self.move(x, y)

    def reload_document(self):
        """Read the document from disk so edits made in the file are kept."""
        try:
            self.document = org_store.load(self.document_path)
        except OSError as e:
            get_error_handler().handle_file_system_error(e, "load outline", self.document_path)
            return
        self.tree.populate(self.document)

    def refresh(self):
        """Update the document from every configured repository and save it."""
        self.reload_document()
        categories = get_categories(self.cfg)
        if not categories:
            self._set_status("No repositories configured. Use 'Add repository…' first.")
            return

        warnings = self.builder.build(self.document, categories)
        try:
            org_store.save(self.document, self.document_path)
        except OSError as e:
            info = get_error_handler().handle_file_system_error(e, "save outline", self.document_path)
            QMessageBox.critical(self, "Could not save outline", info.user_message)
        self.tree.populate(self.document)

        total = sum(len(roots) for roots in categories.values())
        if warnings:
            self._set_status(f"Updated {total - len(warnings)} of {total} repositories; "
                             f"{len(warnings)} skipped (see log)")
        else:
            self._set_status(f"Updated {total} repositories")

    def _prompt_repository(self) -> str | None:
        folder = QFileDialog.getExistingDirectory(self, "Choose a git repository")
        return folder or None

    def show_status(self):
        """Open the status view for the repository of the selected heading."""
        try:
            root = status_at(self.tree.selected_node(), self._prompt_repository,
                             get_status_command(self.cfg))
        except REPOSITORY_ERRORS as e:
            QMessageBox.critical(self, "Status", str(e))
            return
        if root is not None:
            self._set_status(f"Status opened for {root.name}")

    def add_repository(self):
        """Add a repository to the configuration and refresh."""
        categories = list(get_categories(self.cfg))
        dlg = AddRepositoryDialog(self, categories)
        if dlg.exec() and dlg.result:
            category, root = dlg.result
            add_repository(self.cfg, category, root)
            save_config(self.cfg, self.config_path)
            self.refresh()

    def remove_selected_repository(self):
        """Stop tracking the repository of the selected heading.

        Its headings stay in the document along with any notes.
        """
        node = self.tree.selected_node()
        repo = node.find_ancestor_with(GITDIR) if node else None
        if repo is None or repo.parent is None:
            self._set_status("Select a repository heading first.")
            return
        root = repo.get_property(GITDIR)
        category = repo.parent.heading
        if root not in get_categories(self.cfg).get(category, []):
            self._set_status(f"{root} is not configured under {category}.")
            return
        answer = QMessageBox.question(self, "Remove repository", f"Stop tracking {root}?")
        if answer != QMessageBox.StandardButton.Yes:
            return
        remove_repository(self.cfg, category, root)
        save_config(self.cfg, self.config_path)
        self._set_status(f"Removed {root} from {category}")

    def _on_error(self, info: ErrorInfo):
        if info.severity in (ErrorSeverity.WARNING, ErrorSeverity.ERROR, ErrorSeverity.CRITICAL):
            self._set_status(info.user_message)

    def _set_status(self, text: str):
        """Set status bar text."""
        self.status_label.setText(text)

    def closeEvent(self, event):
        """Handle close event."""
        geometry = self.geometry()
        self.cfg["window_geometry"] = f"{geometry.width()}x{geometry.height()}+{geometry.x()}+{geometry.y()}"
        try:
            save_config(self.cfg, self.config_path)
        except OSError as e:
            get_error_handler().handle_file_system_error(e, "save settings")
        get_error_handler().set_notification_callback(None)
        event.accept()
