from __future__ import annotations

"""
Unit tests for the Path-Prefix Version Collector.

Verifies the depth-bounded traversal, token shape and the use of
alternate hashes for same-named siblings.
"""

import re

import pytest

from assetversioner.core.analysis.hash_tree import build_version_tree
from assetversioner.core.analysis.version_collector import collect_path_versions, resolve_depth
from assetversioner.core.hashing.hasher import md5sum
from assetversioner.domain.constants import FILE_LEVEL_DEPTH

TOKEN_RX = re.compile(r"^v=[0-9a-f]{16}$")


def _all(_file) -> bool:
    return True


def test_depth_two_aggregates_deeper_files(make_files) -> None:
    tree = build_version_tree(make_files({"src/e.js": "a", "src/a/b/c.js": "b"}), _all)
    versions = collect_path_versions(tree, 2)

    assert set(versions) == {"e", "a/b"}
    assert all(TOKEN_RX.match(v) for v in versions.values())
    assert versions["e"] == "v=" + md5sum("a")[:16]
    assert versions["a/b"] == "v=" + tree.node("src/a/b").hash[:16]
    assert versions["e"] != versions["a/b"]


def test_depth_one_emits_top_level_prefixes(make_files) -> None:
    tree = build_version_tree(make_files({"src/e.js": "a", "src/a/b/c.js": "b"}), _all)
    assert set(collect_path_versions(tree, 1)) == {"e", "a"}


def test_file_depth_emits_one_token_per_file(make_files) -> None:
    files = make_files({"src/e.js": "a", "src/a/b/c.js": "b", "src/a/page.html": "c"})
    tree = build_version_tree(files, _all)
    versions = collect_path_versions(tree, "file")

    assert set(versions) == {"e", "a/b/c", "a/page"}
    for key, token in versions.items():
        source = next(f for f in files if f.path.startswith(f"src/{key}."))
        assert token == "v=" + md5sum(source)[:16]


def test_unlisted_extensions_are_kept_in_prefix(make_files) -> None:
    tree = build_version_tree(make_files({"src/a.css": "x"}), _all)
    assert set(collect_path_versions(tree, "file")) == {"a.css"}


def test_twin_siblings_emit_alternate_hash(make_files) -> None:
    tree = build_version_tree(make_files({"src/x.js": "1", "src/x/y.js": "2"}), _all)
    versions = collect_path_versions(tree, 1)

    alt = tree.node("src/x").alt_hash
    assert versions["x"] == "v=" + alt[:16]
    assert versions["x"] != "v=" + tree.node("src/x").hash[:16]
    assert versions["x"] != "v=" + tree.node("src/x.js").hash[:16]


@pytest.mark.parametrize("changed", ["src/x.js", "src/x/y.js"])
def test_twin_token_changes_with_either_sibling(make_files, changed: str) -> None:
    base = {"src/x.js": "1", "src/x/y.js": "2"}
    before = collect_path_versions(build_version_tree(make_files(base), _all), 1)

    modified = dict(base)
    modified[changed] = "changed"
    after = collect_path_versions(build_version_tree(make_files(modified), _all), 1)

    assert before["x"] != after["x"]


def test_empty_tree_yields_empty_map(make_files) -> None:
    tree = build_version_tree(make_files({"lib/a.js": "1"}), lambda f: False)
    assert collect_path_versions(tree, 2) == {}


def test_resolve_depth_accepts_file_literal() -> None:
    assert resolve_depth("file") == FILE_LEVEL_DEPTH
    assert resolve_depth("3") == 3
    assert resolve_depth(2) == 2
