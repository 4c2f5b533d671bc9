from __future__ import annotations

"""
Unit tests for Domain Models.

Verifies the BuildFile record, version-map entries, rename records,
output sink parsing and the dataclass error kinds.
"""

import pytest

from assetversioner.domain.errors import (
    InvalidOutputSpec,
    SiblingCollisionOverflow,
    UnknownModuleId,
    UnresolvedRenameTarget,
    VersioningError,
)
from assetversioner.domain.file_models import BuildFile
from assetversioner.domain.version_models import (
    Callback,
    ModuleRenameRecord,
    Placeholder,
    ToFile,
    VersionEntry,
    VersioningIssue,
    VersioningResult,
    parse_output_sink,
)

# -----------------------------------------------------------------------------
# BuildFile
# -----------------------------------------------------------------------------

def test_build_file_normalizes_path_and_extension() -> None:
    f = BuildFile("src\\css\\Main.CSS", data="a{}")

    assert f.path == "src/css/Main.CSS"
    assert f.extname == "css"
    assert f.output_path == "src/css/Main.CSS"
    assert f.is_text


def test_build_file_data_setter_drops_raw() -> None:
    f = BuildFile("src/a.js", data="x", raw=b"stale")
    assert f.get_data_buffer() == b"stale"

    f.data = "new"
    assert f.get_data_buffer() == b"new"


def test_binary_build_file_has_empty_text() -> None:
    f = BuildFile("src/a.png", raw=b"\x00\x01")
    assert not f.is_text
    assert f.data == ""
    assert f.get_data_buffer() == b"\x00\x01"


def test_output_paths_are_registered_once() -> None:
    f = BuildFile("src/a.png", raw=b"")
    assert f.add_output_path("src/a_1.png") is True
    assert f.add_output_path("src/a_1.png") is False

    f.output_path = "dist/a.png"
    assert f.output_paths == ["dist/a.png", "src/a_1.png"]


def test_attribute_bag() -> None:
    f = BuildFile("src/a.js", data="")
    f.set("k", 1)
    assert f.get("k") == 1
    f.unset("k")
    assert f.get("k", "default") == "default"

# -----------------------------------------------------------------------------
# Version entries and records
# -----------------------------------------------------------------------------

def test_version_entry_value_for_page() -> None:
    entry = VersionEntry(value="{}", output_by_page=True, page_values={"a.html": "{1}"})

    assert entry.value_for("a.html") == "{1}"
    assert entry.value_for("b.html") == "{}"
    assert VersionEntry(value="x").value_for("a.html") == "x"


def test_rename_record_renamed_name() -> None:
    record = ModuleRenameRecord("biz/main", "biz/main_abc", "abc", "src/biz/main.js")
    assert record.renamed_name == "main_abc"

# -----------------------------------------------------------------------------
# Output sinks
# -----------------------------------------------------------------------------

def test_parse_output_sink_variants() -> None:
    def handler(versions, files):
        return None

    known = ["src/config.js", "config"]

    assert parse_output_sink(None, known) is None
    assert parse_output_sink("", known) is None
    assert parse_output_sink(handler, known) == Callback(handler=handler)
    assert parse_output_sink("src/config.js", known) == ToFile(path="src/config.js")
    assert parse_output_sink("__VERSIONS__", known) == Placeholder(token="__VERSIONS__")
    assert parse_output_sink("'__VERSIONS__'", known) == Placeholder(token="'__VERSIONS__'")


def test_known_path_wins_over_placeholder_reading() -> None:
    assert parse_output_sink("config", ["config"]) == ToFile(path="config")


@pytest.mark.parametrize("raw", ["not a token", "missing/file.js", 42])
def test_parse_output_sink_rejects_unknown_forms(raw) -> None:
    with pytest.raises(InvalidOutputSpec) as exc_info:
        parse_output_sink(raw, [])
    assert exc_info.value.value == raw

# -----------------------------------------------------------------------------
# Errors and results
# -----------------------------------------------------------------------------

def test_error_kinds_share_base_and_render_messages() -> None:
    errors = [
        UnknownModuleId("biz/x", context="no source file"),
        UnresolvedRenameTarget("biz/x", "src/a.js"),
        InvalidOutputSpec("??"),
        SiblingCollisionOverflow("src/a", "b", 3),
    ]
    for error in errors:
        assert isinstance(error, VersioningError)
        assert str(error)

    assert str(errors[0]) == "Unknown module id 'biz/x' (no source file)"
    assert "src/a.js" in str(errors[1])


def test_issue_from_error() -> None:
    issue = VersioningIssue.from_error(UnknownModuleId("biz/x"), subject="biz/x")
    assert issue.kind == "UnknownModuleId"
    assert issue.subject == "biz/x"
    assert issue.message == "Unknown module id 'biz/x'"


def test_result_defaults() -> None:
    result = VersioningResult(ok=True)
    assert result.skipped is False
    assert result.version_map == {}
    assert result.issues == []
