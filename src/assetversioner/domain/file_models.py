from __future__ import annotations

"""
Build File Data Model.

Defines the mutable file record shared between the host build pipeline and
the versioning engine. The engine reads content from it and writes back
rewritten content and output paths; nothing else about a file outlives a
processing pass.
"""

import posixpath
from typing import Any, Dict, List, Optional

# -----------------------------------------------------------------------------
# FILE RECORD
# -----------------------------------------------------------------------------

class BuildFile:
    """
    A single build artifact addressed by a slash-delimited project path.

    Attributes:
        path: Source path relative to the project root (e.g. 'src/a/b.js').
        extname: Lower-case extension without the leading dot.
        output_paths: Every destination path of this artifact. The first
                      entry is the primary output path.
    """

    def __init__(
            self,
            path: str,
            data: Optional[str] = None,
            raw: Optional[bytes] = None,
            output_path: Optional[str] = None,
    ) -> None:
        self.path = path.replace("\\", "/")
        self.extname = posixpath.splitext(self.path)[1][1:].lower()
        self._data = data
        self._raw = raw
        self.output_paths: List[str] = [output_path or self.path]
        self._attrs: Dict[str, Any] = {}

    def __repr__(self) -> str:
        return f"BuildFile({self.path!r})"

    # -------------------------------------------------------------------------
    # CONTENT ACCESS
    # -------------------------------------------------------------------------

    @property
    def is_text(self) -> bool:
        return self._data is not None

    @property
    def data(self) -> str:
        """Textual content; empty string for binary artifacts."""
        return self._data if self._data is not None else ""

    @data.setter
    def data(self, value: str) -> None:
        self._data = value
        self._raw = None

    def get_data_buffer(self) -> bytes:
        """Return the byte content used for fingerprinting."""
        if self._raw is not None:
            return self._raw
        return self.data.encode("utf-8")

    # -------------------------------------------------------------------------
    # OUTPUT PATHS
    # -------------------------------------------------------------------------

    @property
    def output_path(self) -> str:
        return self.output_paths[0]

    @output_path.setter
    def output_path(self, value: str) -> None:
        self.output_paths[0] = value

    def add_output_path(self, value: str) -> bool:
        """
        Register an additional artifact path for this file.

        Returns:
            bool: False when the path was already registered.
        """
        if value in self.output_paths:
            return False
        self.output_paths.append(value)
        return True

    # -------------------------------------------------------------------------
    # PER-PASS ATTRIBUTES
    # -------------------------------------------------------------------------

    def get(self, key: str, default: Any = None) -> Any:
        return self._attrs.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._attrs[key] = value

    def unset(self, key: str) -> None:
        self._attrs.pop(key, None)
