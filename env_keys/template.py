"""Render and patch the committed template file.

Every key is written as ``KEY=`` with an empty value; source values never
reach the template.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, List, Optional, Sequence, Set, Tuple

from .keys import KeyEntry, leading_block, merge_sources
from .parser import (
    Token,
    classify_line,
    collect_keys,
    is_blank,
    split_lines,
    tokenize,
)

TOOL_NAME = "copy-env-keys-to-env-example"
WARNING_MISSING_IN_SOURCES = "# NOTE: Key not found in .env or .env.local"
SECTION_HEADER = "# --- Added by {tool} on {stamp} ---"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def format_timestamp(moment: datetime) -> str:
    return moment.strftime(TIMESTAMP_FORMAT)


def section_header(moment: datetime) -> str:
    return SECTION_HEADER.format(tool=TOOL_NAME, stamp=format_timestamp(moment))


def _finish(lines: List[str]) -> str:
    """Join lines, dropping trailing blank lines, with one final newline."""
    end = len(lines)
    while end and is_blank(lines[end - 1]):
        end -= 1
    return "\n".join(lines[:end]) + "\n"


def _entry_lines(entry: KeyEntry, *, with_comments: bool = True) -> List[str]:
    lines = list(entry.comments_before) if with_comments else []
    lines.append(f"{entry.key}=")
    return lines


def build_template(primary: Sequence[Token], secondary: Sequence[Token]) -> str:
    """Render a template from scratch out of the two source token streams."""
    merged = merge_sources(primary, secondary)
    header = leading_block(primary)

    lines: List[str] = list(header)
    for position, entry in enumerate(merged.entries):
        # The first key's comments usually are the file header itself.
        duplicate_header = (
            position == 0 and bool(header) and list(entry.comments_before) == header
        )
        lines.extend(_entry_lines(entry, with_comments=not duplicate_header))

    lines.extend(merged.trailing_primary or merged.trailing_secondary)
    return _finish(lines)


def _previous_non_blank(lines: List[str]) -> Optional[str]:
    for line in reversed(lines):
        if not is_blank(line):
            return line
    return None


def flag_unknown_keys(content: str, known_keys: Set[str]) -> Tuple[str, List[str]]:
    """Put the warning line above every assignment whose key no source has.

    A key already preceded (ignoring blank lines) by the warning is left as
    is, so repeated runs do not stack warnings. Returns the new content and
    the keys that received a warning in this call.
    """
    output: List[str] = []
    flagged: List[str] = []
    for line in split_lines(content):
        token = classify_line(line)
        if (
            token.is_assignment
            and token.key not in known_keys
            and _previous_non_blank(output) != WARNING_MISSING_IN_SOURCES
        ):
            output.append(WARNING_MISSING_IN_SOURCES)
            if token.key not in flagged:
                flagged.append(token.key)
        output.append(line)
    return "\n".join(output).rstrip("\n") + "\n", flagged


def annotate_unknown_keys(content: str, known_keys: Set[str]) -> str:
    return flag_unknown_keys(content, known_keys)[0]


def missing_entries(
    template: Sequence[Token], entries: Iterable[KeyEntry]
) -> List[KeyEntry]:
    present = collect_keys(template)
    return [entry for entry in entries if entry.key not in present]


def append_missing_keys(
    content: str,
    entries: Iterable[KeyEntry],
    *,
    now: Optional[datetime] = None,
) -> str:
    """Append keys the template lacks under one timestamped section header.

    Existing content is kept as written apart from trailing blank lines.
    Returns ``content`` untouched when nothing is missing.
    """
    missing = missing_entries(tokenize(content), entries)
    if not missing:
        return content

    body = content.rstrip()
    lines = split_lines(body) if body else []
    lines.append(section_header(now or datetime.now()))
    for entry in missing:
        lines.extend(_entry_lines(entry))
    return "\n".join(lines) + "\n"
