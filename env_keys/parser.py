"""Line classification and tokenization for dotenv-style files."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Set
import re

BLANK = "blank"
COMMENT = "comment"
ASSIGNMENT = "assignment"

LINE_SPLIT_RE = re.compile(r"\r?\n")
EXPORT_PREFIX_RE = re.compile(r"^\s*export\s+")

# Quote scanner states.
_NORMAL = 0
_IN_SINGLE = 1
_IN_DOUBLE = 2


@dataclass(frozen=True)
class Assignment:
    key: str
    raw_value: str


@dataclass(frozen=True)
class Token:
    """One classified line. ``raw`` is always the untouched line text."""

    kind: str
    raw: str
    key: Optional[str] = None
    raw_value: Optional[str] = None

    @property
    def is_assignment(self) -> bool:
        return self.kind == ASSIGNMENT


def is_blank(line: str) -> bool:
    return not line.strip()


def is_comment(line: str) -> bool:
    return line.lstrip().startswith("#")


def find_top_level_equals(line: str) -> Optional[int]:
    """Return the index of the first ``=`` outside single or double quotes.

    A quote character only toggles its own state while the other kind of
    quote is closed. Escapes are not understood.
    """
    state = _NORMAL
    for index, char in enumerate(line):
        if state == _NORMAL:
            if char == "=":
                return index
            if char == "'":
                state = _IN_SINGLE
            elif char == '"':
                state = _IN_DOUBLE
        elif state == _IN_SINGLE:
            if char == "'":
                state = _NORMAL
        elif char == '"':
            state = _NORMAL
    return None


def parse_assignment(line: str) -> Optional[Assignment]:
    """Split ``[export] KEY=value`` into key and raw value.

    Returns None when there is no unquoted ``=``. The key may come back
    empty; callers decide what to do with that.
    """
    body = EXPORT_PREFIX_RE.sub("", line, count=1)
    index = find_top_level_equals(body)
    if index is None:
        return None
    return Assignment(key=body[:index].strip(), raw_value=body[index + 1 :])


def classify_line(line: str) -> Token:
    if is_blank(line):
        return Token(BLANK, line)
    if is_comment(line):
        return Token(COMMENT, line)
    assignment = parse_assignment(line)
    if assignment is None or not assignment.key:
        # Unparseable lines are kept verbatim as comments so nothing is lost.
        return Token(COMMENT, line)
    return Token(ASSIGNMENT, line, key=assignment.key, raw_value=assignment.raw_value)


def split_lines(text: str) -> List[str]:
    return LINE_SPLIT_RE.split(text)


def tokenize(text: str) -> List[Token]:
    """Tokenize a whole file, one token per line.

    Empty text yields no tokens. Quote state never carries across lines.
    """
    if not text:
        return []
    return [classify_line(line) for line in split_lines(text)]


def render_tokens(tokens: Iterable[Token]) -> str:
    return "\n".join(token.raw for token in tokens)


def collect_keys(tokens: Iterable[Token]) -> Set[str]:
    """Return every assignment key present in ``tokens``."""
    return {token.key for token in tokens if token.is_assignment}
