from __future__ import annotations

"""
Unit tests for the Module Graph Renamer.

Verifies renamed output paths, self-id rewriting, dependency rewriting
across files and segments, and the recoverable error kinds.
"""

import pytest

from assetversioner.core.hashing.hasher import md5sum
from assetversioner.core.rewriting.module_renamer import ModuleRenamer, rename_modules

BIZ_MAIN = (
    "define('biz/bizMain', ['require', './helper'], function (require) {\n"
    "  var h = require('./helper');\n"
    "  return h;\n"
    "});\n"
)
APP = (
    "define(function (require) {\n"
    "  // require('./bizMain') stays in comments\n"
    "  var main = require('./bizMain');\n"
    "  var same = require('biz/bizMain');\n"
    "  var tpl = require('text!biz/bizMain');\n"
    "  return main;\n"
    "});\n"
)
PAGE = "<script>require(['biz/bizMain'], function (m) { m(); });</script>"


@pytest.fixture
def module_files(make_files, by_path):
    return by_path(make_files({
        "src/biz/bizMain.js": BIZ_MAIN,
        "src/biz/app.js": APP,
        "src/biz/helper.js": "define(function () { return 1; });",
        "src/page.html": PAGE,
    }))


def test_rename_updates_output_path_and_declaration(module_files) -> None:
    records, issues = rename_modules(
        ["biz/bizMain"], list(module_files.values()), versions={"biz/bizMain": "abc123"}
    )

    main = module_files["src/biz/bizMain.js"]
    assert issues == []
    assert main.output_path == "src/biz/bizMain_abc123.js"
    assert "define('biz/bizMain_abc123', ['require', './helper']" in main.data
    assert "require('./helper')" in main.data

    record = records["biz/bizMain"]
    assert record.renamed_module_id == "biz/bizMain_abc123"
    assert record.renamed_name == "bizMain_abc123"
    assert record.declaring_file_path == "src/biz/bizMain.js"


def test_repeated_rename_keeps_single_token(module_files) -> None:
    files = list(module_files.values())
    rename_modules(["biz/bizMain"], files, versions={"biz/bizMain": "abc123"})
    rename_modules(["biz/bizMain"], files, versions={"biz/bizMain": "abc123"})

    assert module_files["src/biz/bizMain.js"].output_path == "src/biz/bizMain_abc123.js"
    assert "biz/bizMain_abc123_abc123" not in module_files["src/page.html"].data


def test_rename_updates_every_reference(module_files) -> None:
    rename_modules(["biz/bizMain"], list(module_files.values()), versions={"biz/bizMain": "abc123"})
    app = module_files["src/biz/app.js"]

    assert "var main = require('./bizMain_abc123');" in app.data
    assert "var same = require('biz/bizMain_abc123');" in app.data
    assert "require('text!biz/bizMain')" in app.data
    assert "// require('./bizMain') stays in comments" in app.data
    assert "require(['biz/bizMain_abc123']" in module_files["src/page.html"].data


def test_unrelated_files_are_untouched(module_files) -> None:
    helper = module_files["src/biz/helper.js"]
    before = helper.data

    rename_modules(["biz/bizMain"], list(module_files.values()), versions={"biz/bizMain": "abc123"})

    assert helper.data == before
    assert helper.output_path == "src/biz/helper.js"


def test_token_defaults_to_fingerprint_of_original_content(module_files) -> None:
    records, _ = rename_modules(["biz/bizMain"], list(module_files.values()), md5_length=6)
    assert records["biz/bizMain"].version_token == md5sum(BIZ_MAIN)[:6]


def test_relative_requests_resolve_per_segment(make_files, by_path) -> None:
    files = by_path(make_files({
        "src/bundle.js": (
            "define('a/one', function (require) { return require('./two'); });\n"
            "define('b/three', function (require) { return require('./two'); });\n"
        ),
        "src/a/two.js": "define(function () {});",
        "src/b/two.js": "define(function () {});",
    }))
    rename_modules(["a/two"], list(files.values()), versions={"a/two": "t1"})

    bundle = files["src/bundle.js"].data
    assert "define('a/one', function (require) { return require('./two_t1'); });" in bundle
    assert "define('b/three', function (require) { return require('./two'); });" in bundle


def test_unknown_module_id_is_reported(module_files) -> None:
    records, issues = rename_modules(["biz/nothing"], list(module_files.values()))

    assert records == {}
    assert [i.kind for i in issues] == ["UnknownModuleId"]
    assert issues[0].subject == "biz/nothing"


def test_reference_to_unresolved_target_is_reported(make_files) -> None:
    files = make_files({"src/biz/app.js": "define(function (require) { require('biz/missing'); });"})
    records, issues = rename_modules(["biz/missing"], files)

    kinds = [i.kind for i in issues]
    assert records == {}
    assert kinds == ["UnknownModuleId", "UnresolvedRenameTarget"]
    assert "src/biz/app.js" in issues[1].message


def test_module_id_helpers() -> None:
    renamer = ModuleRenamer([], source_root="src/")
    assert renamer.module_path("biz/main") == "src/biz/main.js"
    assert renamer.module_id_of("src/biz/main.js") == "biz/main"
    assert renamer.module_id_of("lib/other.js") is None
