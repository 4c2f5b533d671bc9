from __future__ import annotations

"""
Unit tests for CSS url() Reference Versioning.

Verifies query and rename modes, resolution of stylesheet-relative urls,
absolute URL passthrough and unresolved-reference reporting.
"""

import pytest

from assetversioner.core.hashing.hasher import md5sum
from assetversioner.core.rewriting.css_url import resolve_css_url, split_url, version_css_urls

CSS = ["css", "less"]
PNG = b"\x89PNG-logo"


@pytest.fixture
def stylesheet_files(make_files):
    return make_files({
        "src/css/main.css": (
            "body { background: url(images/logo.png?foo=1); }\n"
            ".cdn { background: url(http://cdn.example.com/x.png); }\n"
        ),
        "src/css/images/logo.png": PNG,
    })


def test_existing_query_gets_ampersand_token(stylesheet_files) -> None:
    issues = version_css_urls(stylesheet_files, CSS, 8, auto_scan=True)
    css = stylesheet_files[0]
    token = md5sum(PNG)[:8]

    assert issues == []
    assert f"url(images/logo.png?foo=1&v={token})" in css.data
    assert "url(http://cdn.example.com/x.png)" in css.data


def test_quoted_url_and_fragment(make_files) -> None:
    css, font = make_files({
        "src/css/a.css": "@font-face { src: url('fonts/icons.svg#icon'); }",
        "src/css/fonts/icons.svg": b"<svg/>",
    })
    version_css_urls([css, font], CSS, 8, auto_scan=True)

    token = md5sum(b"<svg/>")[:8]
    assert css.data == f"@font-face {{ src: url('fonts/icons.svg?v={token}#icon'); }}"


def test_parent_relative_url_resolves(make_files) -> None:
    css, image = make_files({
        "src/css/a.css": "div { background: url(../img/bg.png); }",
        "src/img/bg.png": b"bg",
    })
    version_css_urls([css, image], CSS, 6, auto_scan=True)
    assert f"url(../img/bg.png?v={md5sum(b'bg')[:6]})" in css.data


def test_data_and_protocol_relative_urls_untouched(make_files) -> None:
    text = "a { b: url(data:image/png;base64,AAAA); c: url(//cdn.example.com/y.png); }"
    css = make_files({"src/a.css": text})[0]

    assert version_css_urls([css], CSS, 8, auto_scan=True) == []
    assert css.data == text


def test_unresolved_url_is_reported_in_auto_scan(make_files) -> None:
    css = make_files({"src/a.css": "a { b: url(missing.png); }"})[0]

    issues = version_css_urls([css], CSS, 8, auto_scan=True)

    assert len(issues) == 1
    assert issues[0].kind == "UnresolvedCssUrl"
    assert issues[0].subject == "missing.png"
    assert css.data == "a { b: url(missing.png); }"


def test_explicit_versions_without_auto_scan(make_files) -> None:
    css, _ = files = make_files({
        "src/css/a.css": "a { b: url(img/x.png); c: url(img/y.png); }",
        "src/css/img/x.png": b"x",
    })
    issues = version_css_urls(files, CSS, 8, versions={"src/css/img/x.png": "abc"})

    assert issues == []
    assert css.data == "a { b: url(img/x.png?v=abc); c: url(img/y.png); }"


def test_nothing_happens_without_versions_or_auto_scan(stylesheet_files) -> None:
    before = stylesheet_files[0].data
    assert version_css_urls(stylesheet_files, CSS, 8) == []
    assert stylesheet_files[0].data == before


def test_rename_mode_substitutes_file_name(make_files) -> None:
    css, image = make_files({
        "src/css/a.css": "a { b: url(img/x.png?q=1); } c { d: url(img/x.png); }",
        "src/css/img/x.png": b"x",
    })
    version_css_urls([css, image], CSS, 8, rename=True, auto_scan=True)

    token = md5sum(b"x")[:8]
    assert css.data == f"a {{ b: url(img/x_{token}.png?q=1); }} c {{ d: url(img/x_{token}.png); }}"
    assert image.output_paths == ["src/css/img/x.png", f"src/css/img/x_{token}.png"]



@pytest.mark.parametrize("rename", [False, True])
def test_single_letter_file_name_is_versioned_inside_argument(make_files, rename: bool) -> None:
    css, image = make_files({
        "src/css/a.css": "a { background: url(u); }",
        "src/css/u": b"u",
    })
    version_css_urls([css, image], CSS, 8, rename=rename, auto_scan=True)

    token = md5sum(b"u")[:8]
    expected = f"u_{token}" if rename else f"u?v={token}"
    assert css.data == f"a {{ background: url({expected}); }}"


def test_split_and_resolve_helpers() -> None:
    assert split_url("a/b.png?x=1#f") == ("a/b.png", "?x=1", "#f")
    assert split_url("a/b.png") == ("a/b.png", "", "")
    assert resolve_css_url("src/css/a.css", "../img/b.png?x") == "src/img/b.png"
