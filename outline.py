"""In-memory outline document: headings with properties and children."""

from typing import Iterator, List, Optional

ATTENTION_KEYWORD = "TODO"


class OutlineNode:
    """A heading in the outline with its properties, body text and children."""

    def __init__(
        self,
        heading: str = "",
        level: int = 0,
        properties: Optional[dict] = None,
        todo: Optional[str] = None,
        body: Optional[List[str]] = None,
    ):
        self.heading = heading
        self.level = level
        self.properties: dict[str, str] = dict(properties or {})
        self.todo = todo
        self.body: List[str] = list(body or [])
        self.children: List["OutlineNode"] = []
        self.parent: Optional["OutlineNode"] = None

    def __repr__(self) -> str:
        return f"OutlineNode(level={self.level}, heading={self.heading!r}, properties={self.properties!r})"

    # Properties

    def get_property(self, key: str) -> Optional[str]:
        return self.properties.get(key)

    def set_property(self, key: str, value: str):
        self.properties[key] = str(value)

    def remove_property(self, key: str):
        self.properties.pop(key, None)

    # Attention marker

    @property
    def needs_attention(self) -> bool:
        return self.todo == ATTENTION_KEYWORD

    def set_attention(self, flag: bool):
        """Mark the node as needing attention, or clear any keyword."""
        self.todo = ATTENTION_KEYWORD if flag else None

    # Structure

    def add_child(self, node: "OutlineNode") -> "OutlineNode":
        """Attach an existing node as the last child."""
        node.parent = self
        self.children.append(node)
        return node

    def append_child(self, heading: str) -> "OutlineNode":
        """Create a new last child one level below this node."""
        return self.add_child(OutlineNode(heading, self.level + 1))

    def iter_descendants(self) -> Iterator["OutlineNode"]:
        """All nodes below this one in document order (depth first)."""
        stack = list(reversed(self.children))
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def find_child(self, heading: str) -> Optional["OutlineNode"]:
        for child in self.children:
            if child.heading == heading:
                return child
        return None

    def find_by_property(self, key: str, value: str) -> Optional["OutlineNode"]:
        """First descendant whose property `key` equals `value`."""
        for node in self.iter_descendants():
            if node.properties.get(key) == value:
                return node
        return None

    def find_ancestor_with(self, key: str) -> Optional["OutlineNode"]:
        """Nearest ancestor-or-self that carries property `key`."""
        node: Optional[OutlineNode] = self
        while node is not None:
            if key in node.properties:
                return node
            node = node.parent
        return None

    def inherited_property(self, key: str) -> Optional[str]:
        node = self.find_ancestor_with(key)
        return node.properties[key] if node else None


class OutlineDocument(OutlineNode):
    """Root of an outline. Its body holds any text before the first heading."""

    def __init__(self, preamble: Optional[List[str]] = None):
        super().__init__(heading="", level=0, body=preamble)
