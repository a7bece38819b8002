from __future__ import annotations

from datetime import datetime
import io

from dotenv import dotenv_values

from env_keys.keys import merge_sources
from env_keys.parser import tokenize
from env_keys.template import (
    WARNING_MISSING_IN_SOURCES,
    annotate_unknown_keys,
    append_missing_keys,
    build_template,
    flag_unknown_keys,
    format_timestamp,
    missing_entries,
    section_header,
)

NOW = datetime(2026, 1, 2, 3, 4, 5)
HEADER = "# --- Added by copy-env-keys-to-env-example on 2026-01-02 03:04:05 ---"


def _entries(primary: str, secondary: str = ""):
    return merge_sources(tokenize(primary), tokenize(secondary)).entries


def test_build_template_from_primary_only() -> None:
    built = build_template(tokenize("A=1\n# db config\nB=2\n"), [])
    assert built == "A=\n# db config\nB=\n"


def test_build_template_merges_secondary_keys() -> None:
    built = build_template(tokenize("A=1\n"), tokenize("A=2\nC=3\n"))
    assert built == "A=\nC=\n"


def test_build_template_does_not_repeat_file_header() -> None:
    built = build_template(tokenize("# Project settings\n\nA=1\nB=2\n"), [])
    assert built == "# Project settings\n\nA=\nB=\n"


def test_build_template_keeps_primary_footer() -> None:
    built = build_template(
        tokenize("A=1\n\n# end of file\n"), tokenize("B=1\n# local footer\n")
    )
    assert built == "A=\nB=\n\n# end of file\n"


def test_build_template_falls_back_to_secondary_footer() -> None:
    built = build_template(tokenize("A=1"), tokenize("B=2\n# local only"))
    assert built == "A=\nB=\n# local only\n"


def test_build_template_prefers_primary_footer_even_without_primary_keys() -> None:
    built = build_template(
        tokenize("# just notes\n"), tokenize("B=1\n# local tail\n")
    )
    assert built == "# just notes\n\nB=\n# just notes\n"


def test_build_template_never_copies_values() -> None:
    built = build_template(
        tokenize('SECRET=hunter2\nexport TOKEN="abc=def"\nSECRET=other\n'), []
    )
    assert built == "SECRET=\nTOKEN=\n"
    assert "hunter2" not in built
    assert "abc" not in built


def test_built_template_loads_with_empty_values() -> None:
    built = build_template(
        tokenize("# app\nexport A=1\n\n# db\nB='x=y'\n"), tokenize("C=3\n")
    )
    assert dotenv_values(stream=io.StringIO(built)) == {"A": "", "B": "", "C": ""}


def test_annotate_marks_only_unknown_keys() -> None:
    annotated = annotate_unknown_keys("FOO=1\nBAR=2", {"FOO"})
    assert annotated == f"FOO=1\n{WARNING_MISSING_IN_SOURCES}\nBAR=2\n"


def test_annotate_is_idempotent() -> None:
    once = annotate_unknown_keys("# legacy\nOLD=\nNEW=\n", {"NEW"})
    assert once == f"# legacy\n{WARNING_MISSING_IN_SOURCES}\nOLD=\nNEW=\n"
    assert annotate_unknown_keys(once, {"NEW"}) == once


def test_annotate_looks_past_blank_lines_for_existing_warning() -> None:
    content = f"{WARNING_MISSING_IN_SOURCES}\n\nOLD=\n"
    assert annotate_unknown_keys(content, set()) == content


def test_annotate_ignores_commented_assignments() -> None:
    assert annotate_unknown_keys("# FOO=bar\nFOO=1", {"FOO"}) == "# FOO=bar\nFOO=1\n"


def test_annotate_normalizes_trailing_newlines() -> None:
    assert annotate_unknown_keys("A=\n\n\n", {"A"}) == "A=\n"


def test_flag_unknown_keys_reports_only_new_warnings() -> None:
    content = f"{WARNING_MISSING_IN_SOURCES}\nOLD=\nB=\nC=\nB=\n"
    annotated, flagged = flag_unknown_keys(content, {"C"})

    assert flagged == ["B"]
    assert annotated == (
        f"{WARNING_MISSING_IN_SOURCES}\nOLD=\n"
        f"{WARNING_MISSING_IN_SOURCES}\nB=\nC=\n"
        f"{WARNING_MISSING_IN_SOURCES}\nB=\n"
    )
    assert flag_unknown_keys(annotated, {"C"}) == (annotated, [])


def test_append_missing_keys_adds_section() -> None:
    updated = append_missing_keys("A=\n", _entries("A=1\nB=2\n"), now=NOW)
    assert updated == f"A=\n{HEADER}\nB=\n"


def test_append_missing_keys_carries_comments_and_trims_blank_tail() -> None:
    updated = append_missing_keys(
        "# existing\nA=\n\n\n", _entries("A=1\n\n# db\nB=2\n"), now=NOW
    )
    assert updated == f"# existing\nA=\n{HEADER}\n\n# db\nB=\n"


def test_append_missing_keys_is_noop_when_complete() -> None:
    content = "A=\n\n\n"
    assert append_missing_keys(content, _entries("A=1\n"), now=NOW) is content


def test_append_missing_keys_to_blank_template() -> None:
    assert append_missing_keys("\n", _entries("A=1"), now=NOW) == f"{HEADER}\nA=\n"


def test_missing_entries_preserves_merged_order() -> None:
    entries = _entries("A=1\nC=1\n", "B=1\nD=1\n")
    missing = missing_entries(tokenize("C=\n"), entries)
    assert [entry.key for entry in missing] == ["A", "B", "D"]


def test_timestamp_is_zero_padded() -> None:
    assert format_timestamp(datetime(2026, 3, 4, 5, 6, 7)) == "2026-03-04 05:06:07"
    assert section_header(NOW) == HEADER
