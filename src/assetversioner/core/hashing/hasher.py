from __future__ import annotations

"""
Content Fingerprinting Service.

Computes MD5 fingerprints of raw content or build files. The full digest of
a file is computed at most once per pass and memoized on the file itself;
every requested truncation is a prefix slice of that single digest. MD5 is
used for cache busting only, never for security.
"""

import hashlib
from typing import Optional, Union

from assetversioner.domain.file_models import BuildFile

_MEMO_KEY = "md5sum"

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def md5sum(content: Union[BuildFile, bytes, str], length: Optional[int] = None) -> str:
    """
    Return the hex MD5 fingerprint of the given content, truncated from the front.

    Args:
        content: A BuildFile (memoized), raw bytes or text (UTF-8 encoded).
        length: Number of hex characters to keep. None keeps all 32.

    Returns:
        str: Hexadecimal fingerprint.
    """
    if isinstance(content, BuildFile):
        digest = content.get(_MEMO_KEY)
        if digest is None:
            digest = _full_digest(content.get_data_buffer())
            content.set(_MEMO_KEY, digest)
    elif isinstance(content, bytes):
        digest = _full_digest(content)
    else:
        digest = _full_digest(content.encode("utf-8"))

    if length is None:
        return digest
    return digest[:length]


def invalidate(file: BuildFile) -> None:
    """Drop the memoized fingerprint after a file's content was rewritten."""
    file.unset(_MEMO_KEY)


def is_memoized(file: BuildFile) -> bool:
    return file.get(_MEMO_KEY) is not None

# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _full_digest(data: bytes) -> str:
    return hashlib.md5(data).hexdigest()
