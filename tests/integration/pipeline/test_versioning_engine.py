from __future__ import annotations

"""
Integration tests for the Versioning Engine.

Drives complete passes over in-memory projects and verifies the
combined effect of every stage, the single-invocation gate and the
reporting of recoverable problems.
"""

import json
import re

import pytest

from assetversioner.core.hashing.hasher import md5sum
from assetversioner.core.pipeline.engine import VersioningProcessor, run_versioning

LOGO = b"\x89PNG-logo"

INDEX = (
    '<script src="src/lib/util.js"></script>\n'
    '<link href="src/css/main.css" rel="stylesheet">\n'
    "<script>require.config({ urlArgs: __VERSIONS__ });require(['biz/main']);</script>\n"
)


@pytest.fixture
def project(make_files):
    return make_files({
        "src/index.html": INDEX,
        "src/biz/main.js": "define('biz/main', ['common/util'], function (u) { return u; });",
        "src/biz/other.js": "define('biz/other', [], function () {});",
        "src/common/util.js": "define('common/util', [], function () { return 1; });",
        "src/lib/util.js": "window.util = {};",
        "src/css/main.css": "body { background: url(../img/logo.png); }",
        "src/img/logo.png": LOGO,
        "dep/jquery.js": "/* __VERSIONS__ */",
    })


def _cfg(**overrides):
    cfg = {
        "output": "__VERSIONS__",
        "js_file_paths": ["src/lib/util.js"],
        "css_file_paths": ["src/css/main.css"],
        "css_url": True,
    }
    cfg.update(overrides)
    return cfg


def test_full_pass_rewrites_every_reference(project, by_path) -> None:
    result = run_versioning(project, _cfg())
    files = by_path(project)

    assert result.ok and not result.skipped
    assert result.issues == []

    css = files["src/css/main.css"].data
    assert css == f"body {{ background: url(../img/logo.png?v={md5sum(LOGO)[:8]}); }}"

    index = files["src/index.html"].data
    assert f'src="src/lib/util.js?v={md5sum("window.util = {};")[:8]}"' in index
    assert f'href="src/css/main.css?v={md5sum(css)[:8]}"' in index
    assert f"urlArgs: {json.dumps(result.path_versions)} }}" in index
    assert "__VERSIONS__" not in index


def test_vendored_files_are_left_untouched(project, by_path) -> None:
    result = run_versioning(project, _cfg())

    assert by_path(project)["dep/jquery.js"].data == "/* __VERSIONS__ */"
    assert result.summary["files"] == 8
    assert result.summary["in_scope"] == 7
    assert not any(key.startswith("dep") for key in result.path_versions)


def test_summary_counters(project) -> None:
    result = run_versioning(project, _cfg())

    assert result.summary["file_versions"] == 2
    assert result.summary["renamed_modules"] == 0
    assert result.summary["rewritten_files"] == 1
    assert result.summary["path_versions"] == len(result.path_versions)


def test_gate_runs_the_pass_once(project, by_path) -> None:
    processor = VersioningProcessor(_cfg())
    processor.before_all(project)

    assert processor.process(project[1], project).skipped
    first = processor.process(project[0], project)
    index_after_first = by_path(project)["src/index.html"].data
    again = processor.process(project[0], project)

    assert not first.skipped
    assert again.skipped
    assert processor.result is first
    assert by_path(project)["src/index.html"].data == index_after_first


def test_file_rename_mode(project, by_path) -> None:
    run_versioning(project, _cfg(rename=True, css_url=False))
    files = by_path(project)

    token = md5sum("window.util = {};")[:8]
    renamed = f"src/lib/util_{token}.js"
    assert files["src/lib/util.js"].output_paths == ["src/lib/util.js", renamed]
    assert f'src="{renamed}"' in files["src/index.html"].data


def test_css_dirs_are_matched_in_memory(project, by_path) -> None:
    run_versioning(project, _cfg(css_file_paths=[], css_dirs=["src/css"], css_url=False))

    css = by_path(project)["src/css/main.css"].data
    assert f'href="src/css/main.css?v={md5sum(css)[:8]}"' in by_path(project)["src/index.html"].data


def test_auto_module_renaming(project, by_path) -> None:
    result = run_versioning(project, {"rename_modules": True})
    files = by_path(project)

    record = result.renames["biz/main"]
    assert re.fullmatch(r"biz/main_[0-9a-f]{8}", record.renamed_module_id)
    assert files["src/biz/main.js"].output_path == f"src/{record.renamed_module_id}.js"
    assert f"require(['{record.renamed_module_id}'])" in files["src/index.html"].data
    assert "biz/main" not in result.path_versions
    assert "biz/other" in result.path_versions


def test_invalid_sink_is_reported_without_aborting(project) -> None:
    result = run_versioning(project, _cfg(output="no such sink"))

    assert result.ok
    assert [i.kind for i in result.issues] == ["InvalidOutputSpec"]
    assert result.path_versions


def test_strict_mode_rejects_invalid_config(project) -> None:
    with pytest.raises(ValueError):
        run_versioning(project, {"path_prefix_depth": 0}, strict=True)


def test_empty_file_set() -> None:
    result = run_versioning([], _cfg())
    assert result.ok
    assert result.summary == {"files": 0}
