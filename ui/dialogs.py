"""Dialog components for Branch Outline."""

from pathlib import Path

from PySide6.QtWidgets import (
    QComboBox,
    QDialog,
    QFileDialog,
    QGridLayout,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QMessageBox,
    QPushButton,
    QVBoxLayout,
)

from error_handler import RepositoryNotFoundError, ExternalToolError
from git_utils import ensure_repo_root


class AddRepositoryDialog(QDialog):
    """Dialog for adding a repository to a category."""

    def __init__(self, parent, categories: list[str], default_category: str = ""):
        super().__init__(parent)
        self.setWindowTitle("Add repository")
        self.setModal(True)
        self.result = None  # (category, repo_root)

        self._setup_ui(categories, default_category)
        self.path_entry.setFocus()

    def _setup_ui(self, categories: list[str], default_category: str):
        """Setup the dialog UI."""
        layout = QVBoxLayout(self)
        layout.setContentsMargins(20, 20, 20, 20)
        layout.setSpacing(10)

        form_layout = QGridLayout()
        form_layout.setSpacing(8)

        form_layout.addWidget(QLabel("Repository path:"), 0, 0, 1, 2)

        path_row_layout = QHBoxLayout()
        self.path_entry = QLineEdit()
        self.path_entry.setMinimumWidth(400)
        self.path_entry.setToolTip("Any directory inside the repository; its top level is used.")
        path_row_layout.addWidget(self.path_entry)

        browse_btn = QPushButton("Browse…")
        browse_btn.clicked.connect(self._browse)
        path_row_layout.addWidget(browse_btn)
        form_layout.addLayout(path_row_layout, 1, 0, 1, 2)

        form_layout.addWidget(QLabel("Category:"), 2, 0, 1, 2)
        self.category_combo = QComboBox()
        self.category_combo.setEditable(True)
        self.category_combo.addItems(categories)
        self.category_combo.setCurrentText(default_category or (categories[0] if categories else "Repositories"))
        self.category_combo.setToolTip("Existing category, or type a new name.")
        form_layout.addWidget(self.category_combo, 3, 0, 1, 1)

        layout.addLayout(form_layout)

        button_layout = QHBoxLayout()
        button_layout.addStretch()

        cancel_btn = QPushButton("Cancel")
        cancel_btn.clicked.connect(self.reject)
        button_layout.addWidget(cancel_btn)

        add_btn = QPushButton("Add")
        add_btn.clicked.connect(self._accept)
        add_btn.setDefault(True)
        button_layout.addWidget(add_btn)

        layout.addLayout(button_layout)

        self.path_entry.returnPressed.connect(self._accept)

    def _browse(self):
        """Browse for the repository directory."""
        folder = QFileDialog.getExistingDirectory(self, "Choose a git repository")
        if folder:
            self.path_entry.setText(folder)

    def _accept(self):
        """Validate inputs and accept."""
        path = self.path_entry.text().strip()
        category = self.category_combo.currentText().strip()
        if not path or not category:
            QMessageBox.critical(self, "Missing input", "Please enter a repository path and a category.")
            return
        try:
            root = ensure_repo_root(Path(path))
        except (RepositoryNotFoundError, ExternalToolError) as e:
            QMessageBox.critical(self, "Not a git repository", str(e))
            return
        self.result = (category, root)
        self.accept()
