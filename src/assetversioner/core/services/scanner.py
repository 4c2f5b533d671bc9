from __future__ import annotations

"""
Project Discovery Service.

Traverses a project directory and loads every artifact into BuildFile
records for the versioning pass. Also provides the directory-scan
primitive used by stylesheet directory discovery.
"""

import logging
import os
import re
from typing import Dict, Iterable, List, Optional, Sequence

from assetversioner.core.pipeline.components.filters import compile_patterns, matches_any
from assetversioner.domain.file_models import BuildFile

logger = logging.getLogger(__name__)

# Directory names never descended into
DEFAULT_SKIP_DIRS = [r"^\.git$", r"^\.hg$", r"^\.svn$", r"^node_modules$", r"^__pycache__$"]

# Extensions loaded as text in addition to the configured text categories
EXTRA_TEXT_SUFFIXES = ("json", "txt", "xml", "md", "map")

TEXT_CATEGORIES = ("tpl", "js", "css")


# ==============================================================================
# PUBLIC API (DISCOVERY SERVICES)
# ==============================================================================

def yield_project_paths(
        input_path: str,
        skip_rx: Optional[List[re.Pattern]] = None,
        skip_abs: Iterable[str] = (),
) -> Iterable[str]:
    """
    Walk the project and yield slash-delimited paths relative to its root.

    Excluded directories are pruned in place so they are never traversed.

    Args:
        input_path: Project root.
        skip_rx: Compiled patterns for directory names to prune.
        skip_abs: Absolute directories to prune (e.g. the output directory).

    Yields:
        str: Relative project paths in sorted walk order.
    """
    root_abs = os.path.abspath(input_path)
    skip_rx = skip_rx if skip_rx is not None else compile_patterns(DEFAULT_SKIP_DIRS)
    skip_set = {os.path.abspath(p) for p in skip_abs}

    for root, dirs, files in os.walk(root_abs):
        dirs[:] = [
            d for d in dirs
            if not matches_any(d, skip_rx) and os.path.join(root, d) not in skip_set
        ]
        dirs.sort()
        files.sort()

        for file_name in files:
            rel_path = os.path.relpath(os.path.join(root, file_name), root_abs)
            yield rel_path.replace(os.sep, "/")


def load_project_files(
        input_path: str,
        file_suffix: Dict[str, List[str]],
        skip_abs: Iterable[str] = (),
) -> List[BuildFile]:
    """
    Load every project file into a BuildFile.

    Templates, scripts and stylesheets are decoded as UTF-8 text; everything
    else is carried as bytes. Unreadable files are logged and skipped.

    Args:
        input_path: Project root.
        file_suffix: Category suffix table from the configuration.
        skip_abs: Absolute directories to leave out.

    Returns:
        List[BuildFile]: Loaded files in deterministic order.
    """
    text_suffixes = set(EXTRA_TEXT_SUFFIXES)
    for category in TEXT_CATEGORIES:
        text_suffixes.update(file_suffix.get(category, []))

    root_abs = os.path.abspath(input_path)
    files: List[BuildFile] = []

    for rel_path in yield_project_paths(root_abs, skip_abs=skip_abs):
        abs_path = os.path.join(root_abs, rel_path)
        ext = os.path.splitext(rel_path)[1][1:].lower()
        try:
            with open(abs_path, "rb") as f:
                raw = f.read()
        except OSError as e:
            logger.error(f"Failed to read '{rel_path}': {e}")
            continue

        if ext in text_suffixes:
            try:
                files.append(BuildFile(rel_path, data=raw.decode("utf-8")))
                continue
            except UnicodeDecodeError:
                logger.warning(f"'{rel_path}' is not valid UTF-8; loaded as binary.")
        files.append(BuildFile(rel_path, raw=raw))

    logger.info(f"Loaded {len(files)} files from {root_abs}")
    return files


def scan_resource_paths(input_path: str, dirs: Sequence[str], suffixes: Sequence[str]) -> List[str]:
    """
    List the files under the given project directories with a matching suffix.

    Args:
        input_path: Project root.
        dirs: Project-relative directories to scan.
        suffixes: Accepted extensions (lower-case, no dot).

    Returns:
        List[str]: Project-relative paths.
    """
    found: List[str] = []
    root_abs = os.path.abspath(input_path)

    for rel_dir in dirs:
        base = os.path.join(root_abs, rel_dir)
        if not os.path.isdir(base):
            logger.warning(f"Directory to scan not found: '{rel_dir}'")
            continue
        for rel_path in yield_project_paths(base):
            if os.path.splitext(rel_path)[1][1:].lower() in suffixes:
                found.append(f"{rel_dir.strip('/')}/{rel_path}")

    return found
