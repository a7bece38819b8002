"""Key indexing and multi-source merging.

Each key is indexed at its first occurrence only, together with the run of
comment and blank lines directly above it. Later assignments of the same key
are dropped from the index and do not consume the pending comments, so those
comments attach to the next new key instead.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import reduce
from typing import List, Sequence, Set, Tuple

from .parser import Token


@dataclass(frozen=True)
class KeyEntry:
    key: str
    comments_before: Tuple[str, ...] = ()


@dataclass(frozen=True)
class KeyIndex:
    entries: Tuple[KeyEntry, ...]
    trailing: Tuple[str, ...]

    @property
    def keys(self) -> List[str]:
        return [entry.key for entry in self.entries]


@dataclass(frozen=True)
class MergedKeys:
    """Merged key list plus each source's unattached trailing block."""

    entries: Tuple[KeyEntry, ...]
    trailing_primary: Tuple[str, ...]
    trailing_secondary: Tuple[str, ...]

    @property
    def keys(self) -> List[str]:
        return [entry.key for entry in self.entries]


@dataclass
class _IndexState:
    seen: Set[str] = field(default_factory=set)
    pending: List[str] = field(default_factory=list)
    entries: List[KeyEntry] = field(default_factory=list)


def _step(state: _IndexState, token: Token) -> _IndexState:
    if not token.is_assignment:
        state.pending.append(token.raw)
    elif token.key not in state.seen:
        state.entries.append(KeyEntry(token.key, tuple(state.pending)))
        state.seen.add(token.key)
        state.pending = []
    return state


def index_keys(tokens: Sequence[Token]) -> KeyIndex:
    """Index the first occurrence of every key with its leading comments."""
    state = reduce(_step, tokens, _IndexState())
    return KeyIndex(entries=tuple(state.entries), trailing=tuple(state.pending))


def leading_block(tokens: Sequence[Token]) -> List[str]:
    """Return the raw lines before the first assignment."""
    block: List[str] = []
    for token in tokens:
        if token.is_assignment:
            break
        block.append(token.raw)
    return block


def merge_sources(
    primary: Sequence[Token], secondary: Sequence[Token]
) -> MergedKeys:
    """Primary keys in order, then keys only the secondary source defines.

    Keys compare byte-exact after surrounding whitespace trim; on a clash the
    primary's comment block wins.
    """
    primary_index = index_keys(primary)
    secondary_index = index_keys(secondary)

    merged = list(primary_index.entries)
    seen = set(primary_index.keys)
    for entry in secondary_index.entries:
        if entry.key not in seen:
            merged.append(entry)
            seen.add(entry.key)

    return MergedKeys(
        entries=tuple(merged),
        trailing_primary=primary_index.trailing,
        trailing_secondary=secondary_index.trailing,
    )
