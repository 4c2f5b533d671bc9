from __future__ import annotations

"""
File-Level Versioning Stage.

Generates one version token per explicitly listed (or directory-scanned)
script or stylesheet, without building a hash tree. Tokens are keyed by
the file's output path so template references to it can be rewritten.
"""

import logging
from typing import Dict, Iterable, List, Sequence

from assetversioner.core.hashing.hasher import md5sum
from assetversioner.core.pipeline.components.filters import get_rename_file_path
from assetversioner.domain.file_models import BuildFile
from assetversioner.domain.version_models import VersionEntry, VersionMap

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def inline_file_versioning(
        process_paths: Iterable[str],
        files: Sequence[BuildFile],
        md5_length: int,
) -> Dict[str, str]:
    """
    Fingerprint the files whose source path is listed.

    Args:
        process_paths: Source paths selected for versioning.
        files: Files of the pass.
        md5_length: Token length.

    Returns:
        Dict[str, str]: Output path to token.
    """
    wanted = set(process_paths)
    if not wanted:
        return {}

    versions: Dict[str, str] = {}
    for file in files:
        if file.path in wanted:
            versions[file.output_path] = md5sum(file, md5_length)

    missing = wanted - {f.path for f in files}
    for path in sorted(missing):
        logger.warning(f"Versioned file not found in build set: '{path}'")

    return versions


def init_file_version_info(
        version_map: VersionMap,
        process_paths: Iterable[str],
        files: Sequence[BuildFile],
        md5_length: int,
        rename: bool = False,
) -> int:
    """
    Add file-level version entries to the shared version map.

    In rename mode the file gains an additional versioned output path and
    the entry substitutes the reference with that path.

    Returns:
        int: Number of entries added.
    """
    versions = inline_file_versioning(process_paths, files, md5_length)
    if not rename:
        version_map.update(versions)
        return len(versions)

    by_output = {f.output_path: f for f in files}
    for output_path, token in versions.items():
        renamed = get_rename_file_path(output_path, token)
        by_output[output_path].add_output_path(renamed)
        version_map[output_path] = VersionEntry(value=renamed, rename=True)

    return len(versions)


def match_files_under(dirs: Iterable[str], files: Sequence[BuildFile], suffixes: Sequence[str]) -> List[str]:
    """
    Select the source paths under the given directories with a matching suffix.

    In-memory counterpart of a directory scan, used when the build set was
    not loaded from disk.
    """
    prefixes = [d.rstrip("/") + "/" for d in dirs if d]
    return [
        f.path for f in files
        if f.extname in suffixes and any(f.path.startswith(p) for p in prefixes)
    ]
