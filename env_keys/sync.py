"""Bring the template file in line with the keys of the source files."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import List, Optional
import os
import stat
import tempfile

from .config import Settings
from .keys import merge_sources
from .parser import collect_keys, tokenize
from .template import (
    append_missing_keys,
    build_template,
    flag_unknown_keys,
    missing_entries,
)

CREATED = "created"
UPDATED = "updated"
UNCHANGED = "unchanged"


class EnvSyncError(RuntimeError):
    """Raised when the template cannot be computed or written."""


@dataclass
class SyncOutcome:
    """Summary of a sync run."""

    mode: str
    content: str
    output_path: Optional[Path] = None
    added_keys: List[str] = field(default_factory=list)
    flagged_keys: List[str] = field(default_factory=list)
    written: bool = False


def read_optional(path: Path) -> Optional[str]:
    """Return the file text, or None when the file does not exist."""
    try:
        return path.read_text(encoding="utf-8")
    except (FileNotFoundError, NotADirectoryError):
        return None
    except OSError as exc:
        raise EnvSyncError(f"Could not read {path}: {exc}") from exc


def _current_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


def _target_mode(path: Path) -> int:
    """Mode of the existing file, or what a plain create would give."""
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        return 0o666 & ~_current_umask()


def write_atomic(path: Path, content: str) -> None:
    """Write ``content`` through a temp file so readers never see a partial file.

    The result keeps the target's permissions, or follows the umask for a
    new file.
    """
    tmp_name: Optional[str] = None
    try:
        mode = _target_mode(path)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{path.name}.", suffix=".tmp", dir=path.parent
        )
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as handle:
            handle.write(content)
        os.chmod(tmp_name, mode)
        os.replace(tmp_name, path)
        tmp_name = None
    except OSError as exc:
        raise EnvSyncError(f"Could not write {path}: {exc}") from exc
    finally:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.remove(tmp_name)


def compute_update(
    template_content: str,
    primary_content: str,
    secondary_content: str,
    *,
    now: Optional[datetime] = None,
) -> SyncOutcome:
    """Annotate unknown keys, then append missing ones, without touching disk."""
    primary = tokenize(primary_content)
    secondary = tokenize(secondary_content)
    known = collect_keys(primary) | collect_keys(secondary)
    merged = merge_sources(primary, secondary)

    annotated, flagged = flag_unknown_keys(template_content, known)
    added = [entry.key for entry in missing_entries(tokenize(annotated), merged.entries)]
    updated = append_missing_keys(annotated, merged.entries, now=now)

    return SyncOutcome(
        mode=UNCHANGED if updated == template_content else UPDATED,
        content=updated,
        added_keys=added,
        flagged_keys=flagged,
    )


def sync_env_example(
    settings: Settings, *, now: Optional[datetime] = None
) -> SyncOutcome:
    """Create or patch the template at ``settings.output_path``.

    Writes nothing in dry-run mode or when the template is already current.
    """
    primary_content = read_optional(settings.primary_path)
    secondary_content = read_optional(settings.secondary_path)
    if not primary_content and not secondary_content:
        raise EnvSyncError(
            f"No {settings.primary_source} or {settings.secondary_source} found. "
            "Nothing to do."
        )
    primary_content = primary_content or ""
    secondary_content = secondary_content or ""

    output_path = settings.output_path
    existing = read_optional(output_path)
    if existing is None:
        primary = tokenize(primary_content)
        secondary = tokenize(secondary_content)
        outcome = SyncOutcome(
            mode=CREATED,
            content=build_template(primary, secondary),
            output_path=output_path,
            added_keys=merge_sources(primary, secondary).keys,
        )
    else:
        outcome = compute_update(
            existing, primary_content, secondary_content, now=now
        )
        outcome.output_path = output_path

    if not settings.dry_run and outcome.mode != UNCHANGED:
        write_atomic(output_path, outcome.content)
        outcome.written = True
    return outcome
