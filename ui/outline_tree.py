"""Tree widget showing an outline document."""

from PySide6.QtCore import Qt
from PySide6.QtGui import QBrush, QColor, QFont
from PySide6.QtWidgets import QTreeWidget, QTreeWidgetItem

from outline import OutlineNode
from synchronizer import AHEAD, BEHIND, COMMIT, TRACKS

COLUMNS = ["Heading", "Commit", "Tracks", "Ahead", "Behind"]
ATTENTION_COLOR = "#f4be6c"
PATH_ROLE = Qt.ItemDataRole.UserRole + 1


class OutlineTree(QTreeWidget):
    """Read-only view of an OutlineNode hierarchy.

    Each item keeps a reference to its node, so the selection can be resolved
    back to the document.
    """

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setColumnCount(len(COLUMNS))
        self.setHeaderLabels(COLUMNS)
        self.setAlternatingRowColors(True)
        self.setUniformRowHeights(True)
        self._nodes: dict[int, OutlineNode] = {}

    def populate(self, document: OutlineNode):
        """Rebuild the items from `document`, keeping expanded headings expanded."""
        expanded = self._expanded_paths()
        first_fill = not self._nodes
        self.clear()
        self._nodes = {}
        for child in document.children:
            self.addTopLevelItem(self._make_item(child, ""))
        # items only expand once they belong to the tree
        for item in self._walk_items():
            item.setExpanded(first_fill or item.data(0, PATH_ROLE) in expanded)
        self.resizeColumnToContents(0)

    def _make_item(self, node: OutlineNode, parent_path: str) -> QTreeWidgetItem:
        path = f"{parent_path}/{node.heading}"
        ahead = node.get_property(AHEAD)
        behind = node.get_property(BEHIND)
        item = QTreeWidgetItem([
            node.heading,
            node.get_property(COMMIT) or "",
            node.get_property(TRACKS) or "",
            f"+{ahead}" if ahead else "",
            f"-{behind}" if behind else "",
        ])
        item.setData(0, Qt.ItemDataRole.UserRole, id(node))
        item.setData(0, PATH_ROLE, path)
        self._nodes[id(node)] = node

        if node.needs_attention:
            for column in range(len(COLUMNS)):
                item.setForeground(column, QBrush(QColor(ATTENTION_COLOR)))
        if node.level == 1:
            font = QFont()
            font.setBold(True)
            item.setFont(0, font)

        for child in node.children:
            item.addChild(self._make_item(child, path))
        return item

    def _walk_items(self):
        stack = [self.topLevelItem(i) for i in range(self.topLevelItemCount())]
        while stack:
            item = stack.pop()
            yield item
            stack.extend(item.child(i) for i in range(item.childCount()))

    def _expanded_paths(self) -> set:
        # nodes are rebuilt on every reload, so expansion is keyed by heading path
        return {item.data(0, PATH_ROLE) for item in self._walk_items() if item.isExpanded()}

    def node_for_item(self, item: QTreeWidgetItem | None) -> OutlineNode | None:
        if item is None:
            return None
        return self._nodes.get(item.data(0, Qt.ItemDataRole.UserRole))

    def selected_node(self) -> OutlineNode | None:
        return self.node_for_item(self.currentItem())
