"""Read and write outline documents as Org-mode files.

Only the parts of Org syntax the outline uses are interpreted: heading stars,
a leading TODO/DONE keyword and the property drawer directly below a heading.
Every other line is kept verbatim as body text of the heading above it, so
notes typed into the file survive a rewrite.
"""

import re
from pathlib import Path

from logging_config import get_logger
from outline import OutlineDocument, OutlineNode

logger = get_logger(__name__)

HEADING_RE = re.compile(r"^(\*+)[ \t]+(.*?)[ \t]*$")
# a lone keyword is heading text, e.g. a branch named DONE
KEYWORD_RE = re.compile(r"^(TODO|DONE)[ \t]+(.+)$")
PROPERTY_RE = re.compile(r"^[ \t]*:([^:\s]+):(?:[ \t]+(.*?))?[ \t]*$")
DRAWER_START = ":PROPERTIES:"
DRAWER_END = ":END:"


def _parse_heading(match: re.Match) -> OutlineNode:
    level = len(match.group(1))
    text = match.group(2) or ""
    todo = None
    kw = KEYWORD_RE.match(text)
    if kw:
        todo = kw.group(1)
        text = kw.group(2)
    return OutlineNode(text, level, todo=todo)


def _read_drawer(lines: list[str], start: int, node: OutlineNode) -> int:
    """Read a property drawer beginning at lines[start]; return the next index.

    An unterminated drawer is left as body text.
    """
    if start >= len(lines) or lines[start].strip() != DRAWER_START:
        return start
    properties = {}
    for i in range(start + 1, len(lines)):
        stripped = lines[i].strip()
        if stripped == DRAWER_END:
            node.properties.update(properties)
            return i + 1
        m = PROPERTY_RE.match(lines[i])
        if not m:
            break
        properties[m.group(1)] = m.group(2) or ""
    logger.warning(f"Unterminated property drawer under heading {node.heading!r}")
    return start


def loads(text: str) -> OutlineDocument:
    """Parse Org text into an outline document."""
    lines = text.splitlines()
    document = OutlineDocument()
    stack: list[OutlineNode] = [document]
    current: OutlineNode = document

    i = 0
    while i < len(lines):
        match = HEADING_RE.match(lines[i])
        if not match:
            current.body.append(lines[i])
            i += 1
            continue
        node = _parse_heading(match)
        while stack[-1].level >= node.level:
            stack.pop()
        stack[-1].add_child(node)
        stack.append(node)
        current = node
        i = _read_drawer(lines, i + 1, node)
    return document


def _dump_node(node: OutlineNode, out: list[str]):
    title = node.heading
    if node.todo:
        title = f"{node.todo} {title}" if title else node.todo
    # stars need a following space even for an empty heading
    out.append(f"{'*' * node.level} {title}")
    if node.properties:
        out.append(DRAWER_START)
        for key, value in node.properties.items():
            out.append(f":{key}: {value}".rstrip())
        out.append(DRAWER_END)
    out.extend(node.body)


def dumps(document: OutlineNode) -> str:
    """Render an outline document as Org text."""
    out: list[str] = list(document.body)
    for node in document.iter_descendants():
        _dump_node(node, out)
    return "\n".join(out) + "\n" if out else ""


def load(path: Path) -> OutlineDocument:
    """Load a document from disk; a missing file gives an empty document."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.info(f"No outline at {path}, starting a new one")
        return OutlineDocument()
    return loads(text)


def save(document: OutlineNode, path: Path):
    """Write a document to disk, replacing the file atomically."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.parent / f".{path.name}.tmp"
    tmp.write_text(dumps(document), encoding="utf-8")
    tmp.replace(path)
    logger.debug(f"Saved outline to {path}")
