from __future__ import annotations

"""
Domain Constants and Static Data Structures.

Centralizes default values for the versioning engine: resource category
suffixes, fingerprint lengths, namespace roots and the textual shapes
recognized in output-sink configuration.
"""

import re
import sys
from typing import Dict, List

CURRENT_CONFIG_VERSION = "1.0.0"

# -----------------------------------------------------------------------------
# NAMESPACE AND OUTPUT DEFAULTS
# -----------------------------------------------------------------------------

DEFAULT_SOURCE_ROOT = "src"
DEFAULT_OUTPUT_SUBDIR = "output"
DEFAULT_PATH_PREFIX_DEPTH = 2

# Passing this depth (or the config literal "file") yields one token per file
FILE_LEVEL_DEPTH = sys.maxsize
FILE_LEVEL_DEPTH_LITERAL = "file"

# -----------------------------------------------------------------------------
# FINGERPRINT LENGTHS
# -----------------------------------------------------------------------------

FULL_HASH_LENGTH = 32
TREE_HASH_LENGTH = 32
PREFIX_TOKEN_LENGTH = 16
DEFAULT_MD5_LENGTH = 8

# -----------------------------------------------------------------------------
# RESOURCE CATEGORIES
# -----------------------------------------------------------------------------

DEFAULT_FILE_SUFFIX: Dict[str, List[str]] = {
    "tpl": ["tpl", "html"],
    "js": ["js"],
    "css": ["css", "less"],
    "img": ["png", "jpg", "jpeg", "gif", "svg", "webp", "ico"],
}

# Extensions stripped from leaf ids when emitting path prefixes
PREFIX_STRIP_EXTENSIONS = ("js", "html", "tpl")

DEFAULT_EXCLUDE_PATTERNS: List[str] = [r"^dep/"]

# -----------------------------------------------------------------------------
# OUTPUT SINK AND SNIPPET SHAPES
# -----------------------------------------------------------------------------

PLACEHOLDER_RX = re.compile(r"^('|\")?[\w-]+('|\")?$")

REQUIRE_CONFIG_TEMPLATE = "require.config({{ urlArgs: {payload} }});"

VERSION_QUERY_KEY = "v"
