from __future__ import annotations

"""
CSS url() Reference Versioning.

Adds version information to resources referenced from stylesheets through
url(...) expressions: either as a 'v=' query parameter or, in rename mode,
by substituting the referenced file name with its versioned form. Absolute
http(s) URLs are never touched.
"""

import logging
import posixpath
import re
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from assetversioner.core.hashing.hasher import invalidate, md5sum
from assetversioner.core.pipeline.components.filters import (
    get_rename_file_path,
    is_file_type_of,
    normalize_path,
)
from assetversioner.core.rewriting.reference_rewriter import append_version_query
from assetversioner.domain.file_models import BuildFile
from assetversioner.domain.version_models import VersioningIssue

logger = logging.getLogger(__name__)

CSS_URL_RX = re.compile(r"""url\s*\(\s*['"]?\s*([^\s'"()]*)\s*['"]?\s*\)""")
_EXTERNAL_URL_RX = re.compile(r"^(https?:|data:|//)", re.IGNORECASE)

RENAMED_MARKER = "renamed"

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def version_css_urls(
        files: Sequence[BuildFile],
        css_suffixes: Sequence[str],
        md5_length: int,
        rename: bool = False,
        versions: Optional[Dict[str, str]] = None,
        auto_scan: bool = False,
) -> List[VersioningIssue]:
    """
    Version every url(...) reference of the stylesheets in the file set.

    Args:
        files: All files of the pass (stylesheets and referenced resources).
        css_suffixes: Extensions treated as stylesheets.
        md5_length: Token length for lazily hashed resources.
        rename: Substitute file names instead of appending a query.
        versions: Known tokens keyed by normalized project path.
        auto_scan: Hash any resolvable resource on demand and warn about
                   references that resolve to no known file.

    Returns:
        List[VersioningIssue]: Warnings for unresolved references.
    """
    known: Dict[str, str] = dict(versions or {})
    if not known and not auto_scan:
        return []

    index = {f.path: f for f in files}
    issues: List[VersioningIssue] = []

    for file in files:
        if not file.is_text or not is_file_type_of(file.extname, css_suffixes):
            continue

        def _replace(match: "re.Match[str]", css_path: str = file.path) -> str:
            return _version_url(match, css_path, index, known, md5_length, rename, auto_scan, issues)

        new_data = CSS_URL_RX.sub(_replace, file.data)
        if new_data != file.data:
            file.data = new_data
            invalidate(file)

    return issues


def split_url(url: str) -> Tuple[str, str, str]:
    """Split a URL into (path, query, fragment); query keeps its '?'."""
    fragment = ""
    hash_idx = url.find("#")
    if hash_idx > 0:
        url, fragment = url[:hash_idx], url[hash_idx:]

    query = ""
    query_idx = url.find("?")
    if query_idx >= 0:
        url, query = url[:query_idx], url[query_idx:]

    return url, query, fragment


def resolve_css_url(css_path: str, url: str) -> str:
    """Resolve a stylesheet-relative url path against the stylesheet's directory."""
    path, _, _ = split_url(url)
    return normalize_path(posixpath.join(posixpath.dirname(css_path), path))

# -----------------------------------------------------------------------------
# INTERNAL HELPERS
# -----------------------------------------------------------------------------

def _version_url(
        match: "re.Match[str]",
        css_path: str,
        index: Mapping[str, BuildFile],
        known: Dict[str, str],
        md5_length: int,
        rename: bool,
        auto_scan: bool,
        issues: List[VersioningIssue],
) -> str:
    text = match.group(0)
    url = match.group(1)

    if not url or url.startswith("#") or _EXTERNAL_URL_RX.match(url):
        return text

    resolved = resolve_css_url(css_path, url)
    version = known.get(resolved)

    if not version and auto_scan:
        target = index.get(resolved)
        if target is not None:
            version = md5sum(target, md5_length)
            known[resolved] = version

    if not version:
        if auto_scan:
            msg = f"Add resource version failed: '{url}' in file '{css_path}'"
            logger.warning(msg)
            issues.append(VersioningIssue(kind="UnresolvedCssUrl", subject=url, message=msg))
        return text

    if not rename:
        return _splice_url(match, append_version_query(url, version))

    target = index.get(resolved)
    if target is None:
        msg = f"Cannot rename '{url}' in '{css_path}': no such file '{resolved}'"
        logger.warning(msg)
        issues.append(VersioningIssue(kind="UnresolvedCssUrl", subject=url, message=msg))
        return text

    if not target.get(RENAMED_MARKER):
        target.add_output_path(get_rename_file_path(target.output_path, version))
        target.set(RENAMED_MARKER, True)

    path, query, fragment = split_url(url)
    return _splice_url(match, get_rename_file_path(path, version) + query + fragment)


def _splice_url(match: "re.Match[str]", new_url: str) -> str:
    """Replace the captured url argument inside the whole url(...) match."""
    text = match.group(0)
    start = match.start(1) - match.start(0)
    end = match.end(1) - match.start(0)
    return text[:start] + new_url + text[end:]
