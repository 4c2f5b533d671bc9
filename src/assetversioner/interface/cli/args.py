from __future__ import annotations

"""
CLI Argument Definition and Mapping.

Defines the command-line schema and translates the parsed namespace into
configuration overrides understood by the versioning engine.
"""

import argparse
from typing import Any, Dict, List, Optional, Union

from assetversioner.domain.constants import FILE_LEVEL_DEPTH_LITERAL

AUTO_RENAME_LITERAL = "auto"

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the assetversioner CLI.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog="assetversioner",
        description="Fingerprint static assets and rewrite references to them for cache busting.",
    )

    # --- Path Management ---
    p.add_argument(
        "-i", "--input",
        dest="input_path",
        default=None,
        help="Project root to version (default: current directory).",
    )
    p.add_argument(
        "-o", "--output",
        dest="output_path",
        default=None,
        help="Destination directory for versioned files (default: <input>/output).",
    )
    p.add_argument(
        "--config",
        dest="config_file",
        default=None,
        help="JSON settings file (default: ./versioning.json).",
    )
    p.add_argument(
        "--source-root",
        dest="source_root",
        default=None,
        help="Directory module ids are relative to (default: src).",
    )

    # --- Path-Prefix Versioning ---
    p.add_argument(
        "--depth",
        dest="path_prefix_depth",
        default=None,
        help=f"Path-prefix depth: a positive integer or '{FILE_LEVEL_DEPTH_LITERAL}'.",
    )
    p.add_argument(
        "--sink",
        dest="output",
        default=None,
        help="Where path-prefix versions go: a project file path or a placeholder token.",
    )
    p.add_argument(
        "--by-page",
        dest="output_by_page",
        action="store_true",
        help="Scope placeholder versions to the entry modules of each page.",
    )
    p.add_argument(
        "--default-sink",
        dest="default_output",
        default=None,
        help="Catch-all placeholder receiving the full path-prefix map.",
    )

    # --- Module Renaming ---
    p.add_argument(
        "--rename-modules",
        dest="rename_modules",
        default=None,
        help=f"Comma-separated module ids to rename, or '{AUTO_RENAME_LITERAL}' for page entries.",
    )

    # --- File-Level Versioning ---
    p.add_argument(
        "--rename",
        action="store_true",
        help="Encode tokens in file names instead of a 'v=' query.",
    )
    p.add_argument(
        "--md5-length",
        dest="md5_length",
        type=int,
        default=None,
        help="Length of file-level tokens (1-32, default 8).",
    )
    p.add_argument("--js", dest="js_file_paths", default=None, help="Comma-separated scripts to version.")
    p.add_argument("--css", dest="css_file_paths", default=None, help="Comma-separated stylesheets to version.")
    p.add_argument("--css-dirs", dest="css_dirs", default=None, help="Comma-separated directories of stylesheets.")
    p.add_argument(
        "--css-url",
        dest="css_url",
        nargs="?",
        const=True,
        default=None,
        help="Version url() references in stylesheets; optionally limited to a comma-separated list.",
    )
    p.add_argument(
        "--exclude",
        dest="exclude_patterns",
        default=None,
        help="Comma-separated regexes of project paths to leave untouched.",
    )

    # --- Runtime Constraints and Safety ---
    p.add_argument(
        "--dry-run",
        action="store_true",
        help="Run the pass and report without writing any file.",
    )
    p.add_argument(
        "--strict",
        action="store_true",
        help="Reject invalid settings and fail when issues are reported.",
    )

    # --- Configuration and Diagnostic Tools ---
    p.add_argument(
        "--use-defaults",
        action="store_true",
        help="Ignore any settings file.",
    )
    p.add_argument(
        "--dump-config",
        action="store_true",
        help="Print the effective configuration and exit.",
    )
    p.add_argument(
        "--debug",
        action="store_true",
        help="Elevate logging verbosity to DEBUG.",
    )
    p.add_argument(
        "--log-file",
        dest="log_file",
        default=None,
        help="Also write logs to this rotating file.",
    )

    # --- Format Selection ---
    p.add_argument(
        "--json",
        dest="json_output",
        action="store_true",
        help="Print the result as JSON.",
    )

    return p

# -----------------------------------------------------------------------------
# ARGUMENT MAPPING
# -----------------------------------------------------------------------------

def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Translate the argparse Namespace into a configuration dictionary.

    Only options given on the command line are present; None means
    "keep the configured value".

    Args:
        args: Parsed command-line arguments.

    Returns:
        Dict[str, Any]: Configuration overrides subset.
    """
    overrides: Dict[str, Any] = {
        "input_path": args.input_path,
        "output_path": args.output_path,
        "source_root": args.source_root,
        "path_prefix_depth": _parse_depth(args.path_prefix_depth),
        "output": args.output,
        "default_output": args.default_output,
        "md5_length": args.md5_length,
    }

    if args.output_by_page:
        overrides["output_by_page"] = True
    if args.rename:
        overrides["rename"] = True

    overrides["rename_modules"] = _parse_rename_modules(args.rename_modules)
    overrides["js_file_paths"] = _split_csv(args.js_file_paths)
    overrides["css_file_paths"] = _split_csv(args.css_file_paths)
    overrides["css_dirs"] = _split_csv(args.css_dirs)
    overrides["exclude_patterns"] = _split_csv(args.exclude_patterns)

    if args.css_url is True:
        overrides["css_url"] = True
    elif args.css_url:
        overrides["css_url"] = _split_csv(args.css_url)

    return overrides

# -----------------------------------------------------------------------------
# HELPERS
# -----------------------------------------------------------------------------

def _split_csv(value: Optional[str]) -> Optional[List[str]]:
    """
    Convert a comma-separated string into a list of sanitized strings.
    """
    if value is None:
        return None
    parts = [x.strip() for x in value.split(",")]
    return [x for x in parts if x]


def _parse_depth(value: Optional[str]) -> Union[int, str, None]:
    """Numeric depths become ints; anything else is left to the validator."""
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return value


def _parse_rename_modules(value: Optional[str]) -> Union[bool, List[str], None]:
    if value is None:
        return None
    if value.strip().lower() == AUTO_RENAME_LITERAL:
        return True
    return _split_csv(value)
