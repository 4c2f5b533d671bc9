from __future__ import annotations

"""
File Filtering and Classification Engine.

Implements regex-based exclusion over project paths and suffix-based
classification of build files into resource categories (templates,
scripts, styles, images).
"""

import posixpath
import re
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from assetversioner.domain.constants import DEFAULT_EXCLUDE_PATTERNS, DEFAULT_FILE_SUFFIX
from assetversioner.domain.file_models import BuildFile

# -----------------------------------------------------------------------------
# CONFIGURATION DEFAULTS
# -----------------------------------------------------------------------------

def default_exclude_patterns() -> List[str]:
    """
    Get the default exclusion regex list.

    Vendored dependencies under 'dep/' carry their own versions and are
    never fingerprinted or rewritten.

    Returns:
        List[str]: List of regex strings matched against project paths.
    """
    return list(DEFAULT_EXCLUDE_PATTERNS)


def default_file_suffix() -> Dict[str, List[str]]:
    return {k: list(v) for k, v in DEFAULT_FILE_SUFFIX.items()}

# -----------------------------------------------------------------------------
# PATTERN COMPILATION AND MATCHING
# -----------------------------------------------------------------------------

def compile_patterns(patterns: Iterable[str]) -> List[re.Pattern]:
    """
    Transform raw regex strings into compiled Pattern objects.

    Malformed regex strings are discarded.

    Args:
        patterns: List of raw regex strings.

    Returns:
        List[re.Pattern]: Compiled regex objects.
    """
    compiled: List[re.Pattern] = []
    for p in patterns:
        try:
            compiled.append(re.compile(p))
        except re.error:
            continue
    return compiled


def matches_any(name: str, compiled_patterns: List[re.Pattern]) -> bool:
    """
    Verify if a string matches at least one compiled regex pattern.

    Args:
        name: Project path to evaluate.
        compiled_patterns: Pre-compiled regex objects.

    Returns:
        bool: True if any match is found, False otherwise.
    """
    return any(rx.search(name) for rx in compiled_patterns)


def build_path_filter(exclude_patterns: Optional[Iterable[str]] = None) -> Callable[[BuildFile], bool]:
    """
    Build the include predicate applied to every file of a pass.

    Args:
        exclude_patterns: Regexes over project paths. None uses the defaults.

    Returns:
        Callable[[BuildFile], bool]: True for files the engine may process.
    """
    rx = compile_patterns(default_exclude_patterns() if exclude_patterns is None else exclude_patterns)
    return lambda file: not matches_any(file.path, rx)

# -----------------------------------------------------------------------------
# FILE CLASSIFICATION LOGIC
# -----------------------------------------------------------------------------

def is_file_type_of(extname: str, suffixes: Sequence[str]) -> bool:
    """
    Check an extension against a category suffix list.

    Args:
        extname: Extension without the dot, any case.
        suffixes: Lower-case suffix list.

    Returns:
        bool: True if the extension belongs to the category.
    """
    return extname.lower() in suffixes


def is_source_file(file: BuildFile, source_root: str, suffixes: Sequence[str]) -> bool:
    """True for files under the source root whose extension is in the category."""
    return file.path.startswith(source_root.rstrip("/") + "/") and is_file_type_of(file.extname, suffixes)

# -----------------------------------------------------------------------------
# PATH HELPERS
# -----------------------------------------------------------------------------

def normalize_path(path: str) -> str:
    """Normalize a project path to forward slashes without '.' or '..' segments."""
    return posixpath.normpath(path.replace("\\", "/"))


def remove_path_ext_name(path: str) -> str:
    """Strip the extension of the last path segment."""
    return re.sub(r"\.([^./\\]*)$", "", path)


def get_rename_file_path(path: str, version: str) -> str:
    """
    Insert the version token before the extension of a path.

    Example: 'src/biz/bizMain.js' -> 'src/biz/bizMain_abc123.js'.
    """
    head, tail = posixpath.split(path)
    stem, ext = posixpath.splitext(tail)
    renamed = f"{stem}_{version}{ext}"
    return posixpath.join(head, renamed) if head else renamed
