from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation to ensure the 'src' directory is importable.
2. Shared fixtures building in-memory file sets and configurations.
"""

import os
import sys
from typing import Any, Callable, Dict, List, Union

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)

from assetversioner.domain.file_models import BuildFile  # noqa: E402


# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def make_files() -> Callable[[Dict[str, Union[str, bytes]]], List[BuildFile]]:
    """
    Return a factory turning a {path: content} mapping into BuildFiles.

    Text content becomes a text file, bytes a binary one.
    """

    def _factory(mapping: Dict[str, Union[str, bytes]]) -> List[BuildFile]:
        files: List[BuildFile] = []
        for path, content in mapping.items():
            if isinstance(content, bytes):
                files.append(BuildFile(path, raw=content))
            else:
                files.append(BuildFile(path, data=content))
        return files

    return _factory


@pytest.fixture
def by_path() -> Callable[[List[BuildFile]], Dict[str, BuildFile]]:
    """Index a file list by source path."""
    return lambda files: {f.path: f for f in files}


@pytest.fixture
def mock_config_dict(tmp_path: Any) -> Dict[str, Any]:
    """
    Return a complete configuration dictionary for testing.

    Mirrors 'assetversioner.domain.config.get_default_config' with paths
    pointing into the test's temporary directory.
    """
    return {
        "input_path": str(tmp_path),
        "output_path": str(tmp_path / "output"),
        "source_root": "src",
        "file_suffix": {
            "tpl": ["tpl", "html"],
            "js": ["js"],
            "css": ["css", "less"],
            "img": ["png", "jpg", "jpeg", "gif", "svg", "webp", "ico"],
        },
        "exclude_patterns": [r"^dep/"],
        "path_prefix_depth": 2,
        "output": None,
        "output_by_page": False,
        "default_output": None,
        "rename_modules": [],
        "rename": False,
        "md5_length": 8,
        "js_file_paths": [],
        "css_file_paths": [],
        "css_dirs": [],
        "css_url": False,
    }
