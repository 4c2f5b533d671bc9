from __future__ import annotations

"""
Configuration Domain Management.

Provides the default versioning configuration and JSON persistence for
project-level settings files. Callers merge layers in the order
defaults < settings file < explicit overrides.
"""

import copy
import json
import logging
import os
from typing import Any, Dict, Optional

from assetversioner.domain.constants import (
    CURRENT_CONFIG_VERSION,
    DEFAULT_EXCLUDE_PATTERNS,
    DEFAULT_FILE_SUFFIX,
    DEFAULT_MD5_LENGTH,
    DEFAULT_OUTPUT_SUBDIR,
    DEFAULT_PATH_PREFIX_DEPTH,
    DEFAULT_SOURCE_ROOT,
)

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILENAME = "versioning.json"

# -----------------------------------------------------------------------------
# Configuration Models (Dict-based)
# -----------------------------------------------------------------------------

def get_default_config() -> Dict[str, Any]:
    """
    Generate the default runtime configuration.
    This dictionary drives the behavior of the versioning pipeline.

    Returns:
        Dict[str, Any]: Default configuration values.
    """
    base = os.getcwd()
    return {
        # IO Paths
        "input_path": base,
        "output_path": os.path.join(base, DEFAULT_OUTPUT_SUBDIR),

        # Namespace and categories
        "source_root": DEFAULT_SOURCE_ROOT,
        "file_suffix": copy.deepcopy(DEFAULT_FILE_SUFFIX),
        "exclude_patterns": list(DEFAULT_EXCLUDE_PATTERNS),

        # Path-prefix (require) versioning
        "path_prefix_depth": DEFAULT_PATH_PREFIX_DEPTH,
        "output": None,
        "output_by_page": False,
        "default_output": None,

        # Module renaming
        "rename_modules": [],

        # File-level versioning
        "rename": False,
        "md5_length": DEFAULT_MD5_LENGTH,
        "js_file_paths": [],
        "css_file_paths": [],
        "css_dirs": [],
        "css_url": False,
    }

# -----------------------------------------------------------------------------
# Persistence Logic
# -----------------------------------------------------------------------------

def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load a settings file and merge it over the defaults.

    Missing or corrupted files fall back to defaults.

    Args:
        path: JSON settings file. Defaults to 'versioning.json' in the cwd.

    Returns:
        Dict[str, Any]: The merged configuration.
    """
    config = get_default_config()
    config_path = path or os.path.join(os.getcwd(), DEFAULT_CONFIG_FILENAME)

    if not os.path.exists(config_path):
        logger.debug(f"Config file not found at {config_path}. Using defaults.")
        return config

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.error(f"Failed to load config '{config_path}': {e}. Using defaults.")
        return config

    if not isinstance(data, dict):
        logger.warning("Corrupted config file. Using defaults.")
        return config

    data.pop("version", None)
    config.update(data)
    logger.debug(f"Configuration loaded from {config_path}")
    return config


def save_config(config: Dict[str, Any], path: str) -> None:
    """
    Persist a configuration dictionary as JSON.

    Callable values (callback sinks) are not serializable and are dropped.

    Args:
        config: The configuration to save.
        path: Target file path.
    """
    serializable = {k: v for k, v in config.items() if not callable(v)}
    serializable["version"] = CURRENT_CONFIG_VERSION
    try:
        os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(serializable, f, ensure_ascii=False, indent=4)
        logger.debug(f"Configuration saved to {path}")
    except OSError as e:
        logger.error(f"Failed to save configuration: {e}")
