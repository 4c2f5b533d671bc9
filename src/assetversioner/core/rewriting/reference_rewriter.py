from __future__ import annotations

"""
Resource Reference Rewriter.

Propagates version tokens into text-bearing files. Every version-map key is
matched as a literal: structured entries are substituted verbatim
(placeholders, renamed paths), bare tokens are appended to the reference as
a 'v=' query parameter.
"""

import logging
import re
from typing import Iterable, List, Optional, Sequence

from assetversioner.core.hashing.hasher import invalidate
from assetversioner.core.pipeline.components.filters import is_file_type_of
from assetversioner.domain.constants import VERSION_QUERY_KEY
from assetversioner.domain.file_models import BuildFile
from assetversioner.domain.version_models import VersionEntry, VersionMap, VersionValue

logger = logging.getLogger(__name__)

# Query string directly following a matched reference
_QUERY_PATTERN = r"(?P<query>\?[^\s'\"<>#()]*)?"

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def update_resource_reference(
        files: Iterable[BuildFile],
        version_map: VersionMap,
        tpl_suffixes: Sequence[str],
        script_suffixes: Sequence[str] = (),
) -> int:
    """
    Rewrite version-map keys inside template (and script) files.

    Templates receive every entry. Scripts only receive structured entries,
    so placeholders embedded in loader configuration get substituted while
    plain path references in code stay untouched.

    Args:
        files: Candidate files.
        version_map: Literal key to bare token or VersionEntry.
        tpl_suffixes: Extensions treated as templates/pages.
        script_suffixes: Extensions treated as scripts.

    Returns:
        int: Number of files whose content changed.
    """
    version_map = {k: v for k, v in version_map.items() if k}
    if not version_map:
        return 0

    all_rx = compile_reference_pattern(version_map.keys())
    structured_keys = [k for k, v in version_map.items() if isinstance(v, VersionEntry)]
    structured_rx = compile_reference_pattern(structured_keys) if structured_keys else None

    changed = 0
    for file in files:
        if not file.is_text:
            continue

        if is_file_type_of(file.extname, tpl_suffixes):
            rx: Optional[re.Pattern] = all_rx
        elif structured_rx is not None and is_file_type_of(file.extname, script_suffixes):
            rx = structured_rx
        else:
            continue

        new_data = rewrite_references(file.data, rx, version_map, file.output_path)
        if new_data != file.data:
            file.data = new_data
            invalidate(file)
            changed += 1
            logger.debug(f"Updated resource references in '{file.path}'")

    return changed


def compile_reference_pattern(keys: Iterable[str]) -> re.Pattern:
    """
    Compile one alternation matching any key as a whole literal occurrence.

    Longer keys come first so overlapping keys resolve to the longest
    match, and a key never matches inside a longer word or file name.
    """
    alternatives: List[str] = []
    for key in sorted({k for k in keys if k}, key=len, reverse=True):
        alt = re.escape(key)
        if _is_word_char(key[0]):
            alt = r"(?<![\w-])" + alt
        if _is_word_char(key[-1]):
            alt = alt + r"(?![\w-]|\.\w)"
        alternatives.append(alt)

    return re.compile(r"(?P<key>" + "|".join(alternatives) + r")" + _QUERY_PATTERN)


def rewrite_references(
        content: str,
        rx: re.Pattern,
        version_map: VersionMap,
        output_path: str = "",
) -> str:
    """Apply the compiled reference pattern to a piece of text."""

    def _replace(match: "re.Match[str]") -> str:
        key = match.group("key")
        query = match.group("query") or ""
        return render_reference(key, query, version_map[key], output_path)

    return rx.sub(_replace, content)


def render_reference(key: str, query: str, value: VersionValue, output_path: str = "") -> str:
    """
    Build the replacement text of one reference.

    Args:
        key: The matched literal.
        query: Query string that followed the literal, if any.
        value: Bare token or structured entry.
        output_path: Output path of the file being rewritten.

    Returns:
        str: Replacement text.
    """
    if isinstance(value, VersionEntry):
        return value.value_for(output_path) + query

    return append_version_query(key + query, value)


def append_version_query(url: str, token: str) -> str:
    """
    Append 'v=<token>' to a URL, keeping any fragment at the end.

    Uses '?' for a bare URL, '&' when a query exists and no separator when
    the URL already ends in '?' or '&'.
    """
    param = token if token.startswith(VERSION_QUERY_KEY + "=") else f"{VERSION_QUERY_KEY}={token}"

    fragment = ""
    hash_idx = url.find("#")
    if hash_idx > 0:
        url, fragment = url[:hash_idx], url[hash_idx:]

    if url.endswith("?") or url.endswith("&"):
        sep = ""
    elif "?" in url:
        sep = "&"
    else:
        sep = "?"

    return url + sep + param + fragment

# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _is_word_char(ch: str) -> bool:
    return ch.isalnum() or ch == "_"
