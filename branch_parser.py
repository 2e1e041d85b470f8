"""Parser for the human-oriented output of `git branch -vv`.

A line looks like::

    * main      abc1234 [origin/main: ahead 2, behind 1] Subject line
      feature   d34db33 [origin/feature: gone] Subject line
      topic     1234567 Subject line
    * (HEAD detached at abc1234) abc1234 Subject line
    + other     89abcde (/path/to/worktree) [origin/other] Subject line

The fields are scanned left to right with a small cursor rather than a single
regular expression, so the optional tracking clause can be returned as one of
three explicit variants.
"""

from dataclasses import dataclass

from error_handler import MalformedNumberError
from models import BranchRecord

# '+' marks a branch checked out in another worktree
ACTIVE_MARKERS = {"*": True, " ": False, "+": False}
HEX_DIGITS = frozenset("0123456789abcdefABCDEF")


@dataclass(frozen=True)
class Untracked:
    """No tracking clause on the line."""


@dataclass(frozen=True)
class Tracking:
    """The branch tracks an existing upstream."""
    upstream: str
    ahead: int | None = None
    behind: int | None = None


@dataclass(frozen=True)
class Gone:
    """The upstream was configured but has been deleted on the remote."""
    upstream: str


TrackingClause = Untracked | Tracking | Gone


class _Cursor:
    """Left-to-right position in a single line."""

    def __init__(self, text: str, pos: int = 0):
        self.text = text
        self.pos = pos

    def at_end(self) -> bool:
        return self.pos >= len(self.text)

    def peek(self) -> str:
        return "" if self.at_end() else self.text[self.pos]

    def take_while(self, predicate) -> str:
        start = self.pos
        while not self.at_end() and predicate(self.text[self.pos]):
            self.pos += 1
        return self.text[start:self.pos]

    def skip_spaces(self) -> int:
        return len(self.take_while(lambda c: c == " "))

    def take_delimited(self, opening: str, closing: str) -> str | None:
        """Consume `opening ... closing` and return the text between them."""
        if self.peek() != opening:
            return None
        end = self.text.find(closing, self.pos + 1)
        if end < 0:
            return None
        inner = self.text[self.pos + 1:end]
        self.pos = end + 1
        return inner

    def at_separator(self) -> bool:
        """True at end of line or on a space."""
        return self.at_end() or self.peek() == " "


def _parse_count(text: str, line: str) -> int:
    if not text or not (text.isascii() and text.isdigit()):
        raise MalformedNumberError(text, line)
    return int(text)


def _looks_like_count(text: str) -> bool:
    # a count starts with a digit or sign; anything else is subject text
    return bool(text) and (text[0].isdigit() or text[0] in "+-")


def parse_tracking_clause(content: str, line: str = "") -> TrackingClause:
    """Interpret the text between the brackets of a tracking clause.

    Returns Untracked when the text is not a tracking clause at all (a commit
    subject that happens to start with a bracket). Raises MalformedNumberError
    when an ahead/behind keyword is followed by something that starts like a
    count but is not a valid one.
    """
    upstream, colon, status = content.partition(":")
    upstream = upstream.strip()
    if not upstream or " " in upstream:
        return Untracked()
    if not colon:
        return Tracking(upstream)

    status = status.strip()
    if status == "gone":
        return Gone(upstream)

    counts: dict[str, int] = {}
    for part in status.split(","):
        keyword, _, number = part.strip().partition(" ")
        number = number.strip()
        if keyword not in ("ahead", "behind") or keyword in counts or not _looks_like_count(number):
            return Untracked()
        counts[keyword] = _parse_count(number, line)
    return Tracking(upstream, counts.get("ahead"), counts.get("behind"))


def parse_branch_line(line: str) -> BranchRecord | None:
    """Parse one line of `git branch -vv` output.

    Returns None when the line does not have the shape of a branch line.
    """
    line = line.rstrip("\r\n")
    if len(line) < 2 or line[0] not in ACTIVE_MARKERS or line[1] != " ":
        return None
    marker = line[0]
    cursor = _Cursor(line, 2)

    if cursor.peek() == "(":
        inner = cursor.take_delimited("(", ")")
        if inner is None:
            return None
        name = f"({inner})"
    else:
        name = cursor.take_while(lambda c: c != " ")
    if not name or cursor.skip_spaces() == 0:
        return None

    commit_hash = cursor.take_while(lambda c: c in HEX_DIGITS)
    if not commit_hash or not cursor.at_separator():
        return None
    cursor.skip_spaces()

    # git prints the worktree path of branches checked out elsewhere
    if marker == "+" and cursor.peek() == "(":
        if cursor.take_delimited("(", ")") is None or not cursor.at_separator():
            return None
        cursor.skip_spaces()

    clause: TrackingClause = Untracked()
    if cursor.peek() == "[":
        checkpoint = cursor.pos
        inner = cursor.take_delimited("[", "]")
        if inner is not None and cursor.at_separator():
            clause = parse_tracking_clause(inner, line)
        else:
            cursor.pos = checkpoint

    return _to_record(name, marker == "*", commit_hash, clause)


def _to_record(name: str, is_active: bool, commit_hash: str, clause: TrackingClause) -> BranchRecord:
    if isinstance(clause, Gone):
        return BranchRecord(name, is_active, commit_hash, upstream=clause.upstream, gone=True)
    if isinstance(clause, Tracking):
        return BranchRecord(
            name, is_active, commit_hash,
            upstream=clause.upstream, ahead=clause.ahead, behind=clause.behind,
        )
    return BranchRecord(name, is_active, commit_hash)
