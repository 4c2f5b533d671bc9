from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Orchestrates the CLI lifecycle: logging initialization, configuration
layering (defaults, settings file, CLI overrides), project loading, the
versioning pass, output persistence and result rendering.
"""

import json
import os
import sys
from dataclasses import asdict
from typing import Any, Dict, List, Optional

from assetversioner.core.pipeline.engine import run_versioning
from assetversioner.core.pipeline.stages.validator import validate_config
from assetversioner.core.services.scanner import load_project_files
from assetversioner.core.services.writer import write_build_files
from assetversioner.domain.config import get_default_config, load_config
from assetversioner.domain.version_models import VersioningResult
from assetversioner.infra.fs import is_within, normalize_path, safe_mkdir
from assetversioner.infra.logging import (
    LoggingConfig,
    configure_logging,
    get_logger,
    level_for_verbosity,
)
from assetversioner.interface.cli import args as cli_args

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_BAD_INPUT = 2
EXIT_INTERRUPTED = 130

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Execute the CLI workflow.

    Args:
        argv: Optional list of command line arguments. Defaults to sys.argv.

    Returns:
        int: Process exit code (0 success, 1 failure or strict issues,
             2 invalid input directory, 130 interrupted).
    """
    # 1. Argument parsing phase
    parser = cli_args.build_parser()
    args = parser.parse_args(argv)

    # 2. Logging bootstrap
    configure_logging(LoggingConfig(
        level=level_for_verbosity(args.debug),
        console=True,
        log_file=args.log_file,
    ))
    logger.debug("CLI execution initiated. Resolving configuration hierarchy...")

    # 3. Configuration layering
    base_conf = get_default_config() if args.use_defaults else load_config(args.config_file)
    raw_conf = _merge_config(base_conf, cli_args.args_to_overrides(args))

    try:
        clean_conf, _ = validate_config(raw_conf, strict=bool(args.strict))
    except (TypeError, ValueError) as e:
        logger.error(f"Invalid configuration: {e}")
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_FAILURE

    if args.dump_config:
        print(json.dumps(clean_conf, ensure_ascii=False, indent=2, default=str))
        return EXIT_OK

    # 4. Pre-flight input verification
    input_path = normalize_path(clean_conf["input_path"], os.getcwd())
    if not os.path.isdir(input_path):
        msg = f"Input directory does not exist: {input_path}"
        logger.error(msg)
        print(f"ERROR: {msg}", file=sys.stderr)
        return EXIT_BAD_INPUT

    output_path = normalize_path(clean_conf["output_path"], os.path.join(input_path, "output"))
    clean_conf["input_path"] = input_path
    clean_conf["output_path"] = output_path

    # 5. Versioning pass
    logger.info(f"Targeting input directory: {input_path}")
    try:
        skip = [output_path] if is_within(output_path, input_path) else []
        files = load_project_files(input_path, clean_conf["file_suffix"], skip_abs=skip)
        result = run_versioning(files, clean_conf, scan_disk=True)

        written: List[str] = []
        if result.ok:
            if not args.dry_run:
                ok, err = safe_mkdir(output_path)
                if not ok:
                    raise OSError(f"Cannot create output directory {output_path}: {err}")
            written = write_build_files(files, output_path, dry_run=bool(args.dry_run))
    except KeyboardInterrupt:
        logger.warning("Interrupted by user.")
        print("Interrupted.", file=sys.stderr)
        return EXIT_INTERRUPTED
    except Exception as e:
        msg = f"Versioning failed: {e}"
        logger.critical(msg, exc_info=True)
        print(f"ERROR: {msg}", file=sys.stderr)
        return EXIT_FAILURE

    # 6. Output rendering phase
    if args.json_output:
        payload = asdict(result)
        payload["written"] = written
        payload["dry_run"] = bool(args.dry_run)
        print(json.dumps(payload, ensure_ascii=False, indent=2))
    else:
        _print_human_summary(result, output_path, written, bool(args.dry_run))

    if not result.ok:
        return EXIT_FAILURE
    if args.strict and result.issues:
        return EXIT_FAILURE
    return EXIT_OK

# -----------------------------------------------------------------------------
# CONFIGURATION MERGING
# -----------------------------------------------------------------------------

def _merge_config(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """
    Shallow-merge CLI overrides into the base configuration.

    Only known keys are merged and None never replaces a configured value.

    Args:
        base: Defaults merged with the settings file.
        overrides: Values given on the command line.

    Returns:
        Dict[str, Any]: The merged configuration.
    """
    out = dict(base)
    for k, v in overrides.items():
        if k in base and v is not None:
            out[k] = v
    return out

# -----------------------------------------------------------------------------
# VIEW RENDERING (HUMAN READABLE)
# -----------------------------------------------------------------------------

def _print_human_summary(
        result: VersioningResult,
        output_path: str,
        written: List[str],
        dry_run: bool,
) -> None:
    """
    Print the result of the pass as a terminal report.

    Args:
        result: The versioning result to render.
        output_path: Destination directory.
        written: Files written (or that would be written).
        dry_run: Whether files were actually written.
    """
    if not result.ok:
        print(f"ERROR: {result.error}", file=sys.stderr)
        return

    print("Versioning completed.")
    if dry_run:
        print(f"Dry run: {len(written)} files would be written to {output_path}")
    else:
        print(f"Output directory: {output_path} ({len(written)} files)")

    labels = {
        "in_scope": "Files in scope",
        "path_versions": "Path-prefix versions",
        "file_versions": "File-level versions",
        "renamed_modules": "Renamed modules",
        "rewritten_files": "Files with rewritten references",
    }
    for key, label in labels.items():
        if key in result.summary:
            print(f"{label}: {result.summary[key]}")

    if result.path_versions:
        print("\nPath-prefix versions:")
        for prefix, token in sorted(result.path_versions.items()):
            print(f"  - {prefix}: {token}")

    if result.renames:
        print("\nRenamed modules:")
        for record in result.renames.values():
            print(f"  - {record.original_module_id} -> {record.renamed_module_id}")

    if result.issues:
        print(f"\nIssues ({len(result.issues)}):")
        for issue in result.issues:
            print(f"  - [{issue.kind}] {issue.message}")

# -----------------------------------------------------------------------------
# CLI ENTRYPOINT
# -----------------------------------------------------------------------------

if __name__ == "__main__":
    sys.exit(main())
