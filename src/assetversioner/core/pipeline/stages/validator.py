from __future__ import annotations

"""
Configuration Validation Service.

Acts as the gatekeeper for the versioning pass, ensuring the configuration
dictionary conforms to the expected schema. Handles type coercion, suffix
normalization and default value injection so the engine never fails on
malformed settings.
"""

import logging
from typing import Any, Dict, List, Tuple, Union

from assetversioner.core.pipeline.components.filters import (
    default_exclude_patterns,
    default_file_suffix,
)
from assetversioner.domain.config import get_default_config
from assetversioner.domain.constants import (
    DEFAULT_MD5_LENGTH,
    DEFAULT_PATH_PREFIX_DEPTH,
    FILE_LEVEL_DEPTH,
    FILE_LEVEL_DEPTH_LITERAL,
    FULL_HASH_LENGTH,
    PLACEHOLDER_RX,
)

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def validate_config(
        config: Any,
        *,
        strict: bool = False,
) -> Tuple[Dict[str, Any], List[str]]:
    """
    Validate and normalize the provided configuration dictionary.

    Converts untrusted inputs (CLI flags, JSON settings files, host build
    options) into strictly typed parameters and fills missing keys with
    domain defaults.

    Args:
        config: Raw configuration data (usually a dictionary).
        strict: If True, raises exceptions on type mismatch instead of coercing.

    Returns:
        Tuple[Dict[str, Any], List[str]]: A tuple containing the normalized
                                          configuration and a list of warnings.
    """
    warnings: List[str] = []
    defaults = get_default_config()

    # 1. Base Type Validation
    if not isinstance(config, dict):
        msg = f"Invalid config type: expected dict, received {type(config).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Using defaults.")
        logger.warning(msg)
        return defaults, warnings

    merged: Dict[str, Any] = dict(defaults)
    merged.update(config)

    # 2. Schema Definition (Declarative mapping)
    string_fields = ["input_path", "output_path", "source_root"]

    bool_fields = ["rename", "output_by_page"]

    list_fields_map = {
        "js_file_paths": [],
        "css_file_paths": [],
        "css_dirs": [],
        "exclude_patterns": default_exclude_patterns(),
    }

    # 3. Field Processing & Normalization
    for field in string_fields:
        merged[field] = _as_str(
            merged.get(field), defaults.get(field, ""), field, warnings, strict
        )

    for field in bool_fields:
        merged[field] = _as_bool(
            merged.get(field), defaults.get(field, False), field, warnings, strict
        )

    for field, fallback in list_fields_map.items():
        merged[field] = _as_list_str(
            merged.get(field), fallback, field, warnings, strict, allow_empty=True
        )

    # 4. Domain-Specific Normalization
    merged["source_root"] = merged["source_root"].strip("/") or defaults["source_root"]
    merged["md5_length"] = _as_md5_length(merged.get("md5_length"), warnings, strict)
    merged["path_prefix_depth"] = _as_depth(merged.get("path_prefix_depth"), warnings, strict)
    merged["file_suffix"] = _normalize_file_suffix(merged.get("file_suffix"), warnings, strict)
    merged["css_url"] = _as_css_url(merged.get("css_url"), warnings, strict)
    merged["rename_modules"] = _as_rename_modules(merged.get("rename_modules"), warnings, strict)
    merged["default_output"] = _as_placeholder(merged.get("default_output"), warnings, strict)

    # 5. Cross-field checks
    if merged["rename_modules"] and merged.get("output") not in (None, ""):
        msg = (
            "Both path-prefix versioning ('output') and module renaming "
            "('rename_modules') are enabled; renamed modules are excluded from the hash tree."
        )
        if strict:
            raise ValueError(msg)
        warnings.append(msg)

    if merged["output_by_page"] and callable(merged.get("output")):
        warnings.append("'output_by_page' only applies to placeholder outputs; ignored for callbacks.")

    return merged, warnings


# -----------------------------------------------------------------------------
# PRIVATE HELPERS: TYPE COERCION
# -----------------------------------------------------------------------------

def _as_str(value: Any, fallback: str, field: str, warnings: List[str], strict: bool) -> str:
    """Validate and sanitize string inputs."""
    if value is None:
        return fallback
    if isinstance(value, str):
        v = value.strip()
        return v if v else fallback

    msg = f"Invalid field '{field}': expected str, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_bool(value: Any, fallback: bool, field: str, warnings: List[str], strict: bool) -> bool:
    """Coerce various input types into native booleans."""
    if isinstance(value, bool):
        return value
    if value is None:
        return fallback

    if not strict:
        if isinstance(value, (int, float)) and value in (0, 1):
            warnings.append(f"Field '{field}' converted from number {value} to bool.")
            return bool(value)
        if isinstance(value, str):
            s = value.strip().lower()
            if s in ("true", "1", "yes", "y", "on"):
                warnings.append(f"Field '{field}' converted from '{value}' to True.")
                return True
            if s in ("false", "0", "no", "n", "off"):
                warnings.append(f"Field '{field}' converted from '{value}' to False.")
                return False

    msg = f"Invalid field '{field}': expected bool, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_list_str(
        value: Any,
        fallback: List[str],
        field: str,
        warnings: List[str],
        strict: bool,
        allow_empty: bool = False,
) -> List[str]:
    """Ensure input is a list of sanitized strings, supporting CSV parsing."""
    if value is None:
        return list(fallback)

    if isinstance(value, str) and not strict:
        items = [x.strip() for x in value.split(",") if x.strip()]
        if items:
            warnings.append(f"Field '{field}' converted from CSV string to list.")
            return items
        return list(fallback)

    if isinstance(value, (list, tuple)):
        out: List[str] = []
        for i, item in enumerate(value):
            if isinstance(item, str):
                s = item.strip()
                if s:
                    out.append(s)
            else:
                msg = f"Invalid item in '{field}[{i}]': expected str."
                if strict:
                    raise TypeError(msg)
                warnings.append(f"{msg} Item discarded.")
        if out or (allow_empty and not value):
            return out
        return list(fallback)

    msg = f"Invalid field '{field}': expected list[str], received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return list(fallback)


def _as_int(value: Any, field: str, warnings: List[str], strict: bool) -> Union[int, None]:
    """Coerce ints and numeric strings; None when not convertible."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and not strict:
        try:
            parsed = int(value.strip())
        except ValueError:
            return None
        warnings.append(f"Field '{field}' converted from '{value}' to {parsed}.")
        return parsed
    return None


# -----------------------------------------------------------------------------
# PRIVATE HELPERS: DOMAIN NORMALIZATION
# -----------------------------------------------------------------------------

def _as_depth(value: Any, warnings: List[str], strict: bool) -> int:
    """Accept a positive depth or the file-level literal."""
    if value is None:
        return DEFAULT_PATH_PREFIX_DEPTH
    if isinstance(value, str) and value.strip().lower() == FILE_LEVEL_DEPTH_LITERAL:
        return FILE_LEVEL_DEPTH

    depth = _as_int(value, "path_prefix_depth", warnings, strict)
    if depth is not None and depth > 0:
        return depth

    msg = f"Invalid field 'path_prefix_depth': expected int > 0 or '{FILE_LEVEL_DEPTH_LITERAL}', received {value!r}."
    if strict:
        raise ValueError(msg)
    warnings.append(f"{msg} Using {DEFAULT_PATH_PREFIX_DEPTH}.")
    return DEFAULT_PATH_PREFIX_DEPTH


def _as_md5_length(value: Any, warnings: List[str], strict: bool) -> int:
    if value is None:
        return DEFAULT_MD5_LENGTH

    length = _as_int(value, "md5_length", warnings, strict)
    if length is not None and 0 < length <= FULL_HASH_LENGTH:
        return length

    msg = f"Invalid field 'md5_length': expected int in 1..{FULL_HASH_LENGTH}, received {value!r}."
    if strict:
        raise ValueError(msg)
    warnings.append(f"{msg} Using {DEFAULT_MD5_LENGTH}.")
    return DEFAULT_MD5_LENGTH


def _normalize_file_suffix(value: Any, warnings: List[str], strict: bool) -> Dict[str, List[str]]:
    """Merge category overrides over the defaults; suffixes lower-case without dot."""
    out = default_file_suffix()
    if value is None:
        return out

    if not isinstance(value, dict):
        msg = f"Invalid field 'file_suffix': expected dict, received {type(value).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Using defaults.")
        return out

    for category, suffixes in value.items():
        items = _as_list_str(suffixes, out.get(category, []), f"file_suffix.{category}", warnings, strict)
        normalized: List[str] = []
        for s in items:
            e = s.lower()
            if e.startswith("."):
                warnings.append(f"Suffix '{s}' corrected to '{e[1:]}'.")
                e = e[1:]
            if e and e not in normalized:
                normalized.append(e)
        out[category] = normalized
    return out


def _as_css_url(value: Any, warnings: List[str], strict: bool) -> Union[bool, List[str]]:
    """False disables, True auto-scans, a list names the resources to version."""
    if value is None or isinstance(value, bool):
        return bool(value)
    if isinstance(value, (list, tuple, str)):
        return _as_list_str(value, [], "css_url", warnings, strict)

    msg = f"Invalid field 'css_url': expected bool or list[str], received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Disabled.")
    return False


def _as_rename_modules(value: Any, warnings: List[str], strict: bool) -> Union[bool, List[str]]:
    """A list of module ids, or True to derive them from page entry requires."""
    if value is None or value is False:
        return []
    if value is True:
        return True
    if isinstance(value, (list, tuple, str)):
        return _as_list_str(value, [], "rename_modules", warnings, strict, allow_empty=True)

    msg = f"Invalid field 'rename_modules': expected list[str] or bool, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Disabled.")
    return []


def _as_placeholder(value: Any, warnings: List[str], strict: bool) -> Union[str, None]:
    if value is None or value == "":
        return None
    if isinstance(value, str) and PLACEHOLDER_RX.match(value):
        return value

    msg = f"Invalid field 'default_output': expected a placeholder token, received {value!r}."
    if strict:
        raise ValueError(msg)
    warnings.append(f"{msg} Ignored.")
    return None
