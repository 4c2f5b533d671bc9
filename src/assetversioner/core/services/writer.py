from __future__ import annotations

"""
Output Persistence.

Writes every output path of every BuildFile under the destination
directory. A file renamed by versioning is written under its new name;
a file that gained an extra versioned copy is written under both.
"""

import logging
import os
from typing import List, Sequence

from assetversioner.domain.file_models import BuildFile

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# FILE OUTPUT MANAGEMENT
# -----------------------------------------------------------------------------

def write_build_files(
        files: Sequence[BuildFile],
        output_dir: str,
        dry_run: bool = False,
) -> List[str]:
    """
    Persist the build set to disk.

    Args:
        files: Files after the versioning pass.
        output_dir: Destination root.
        dry_run: Compute the destination list without writing.

    Returns:
        List[str]: Absolute paths written (or that would be written).

    Raises:
        OSError: If the destination is not writable.
    """
    written: List[str] = []
    for file in files:
        buffer = file.get_data_buffer()
        for output_path in file.output_paths:
            target = os.path.join(output_dir, *output_path.split("/"))
            written.append(target)
            if dry_run:
                continue
            os.makedirs(os.path.dirname(target), exist_ok=True)
            with open(target, "wb") as out:
                out.write(buffer)

    if dry_run:
        logger.info(f"Dry run: {len(written)} files would be written to {output_dir}")
    else:
        logger.info(f"{len(written)} files written to {output_dir}")
    return written
