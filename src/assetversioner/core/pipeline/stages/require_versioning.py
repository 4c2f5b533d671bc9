from __future__ import annotations

"""
Path-Prefix (require) Versioning Stage.

Builds the content hash tree over the module namespace, collects the
path-prefix tokens at the configured depth and delivers them to the
configured output sink as a loader 'urlArgs' configuration.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Set

from assetversioner.core.analysis.entry_scoper import scope_page_versions
from assetversioner.core.analysis.hash_tree import build_version_tree
from assetversioner.core.analysis.version_collector import collect_path_versions
from assetversioner.core.hashing.hasher import invalidate, md5sum
from assetversioner.core.pipeline.components.filters import is_file_type_of, is_source_file
from assetversioner.domain.constants import PLACEHOLDER_RX, REQUIRE_CONFIG_TEMPLATE
from assetversioner.domain.errors import InvalidOutputSpec
from assetversioner.domain.file_models import BuildFile
from assetversioner.domain.version_models import (
    Callback,
    Placeholder,
    ToFile,
    VersionEntry,
    VersioningIssue,
    VersionMap,
    parse_output_sink,
)

logger = logging.getLogger(__name__)


@dataclass
class RequireVersioningOutcome:
    """Artifacts of the require versioning stage."""
    path_versions: Dict[str, str] = field(default_factory=dict)
    page_versions: Dict[str, Dict[str, str]] = field(default_factory=dict)
    issues: List[VersioningIssue] = field(default_factory=list)

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def render_require_config(path_versions: Dict[str, str]) -> str:
    """Serialize path-prefix versions as a loader configuration snippet."""
    return REQUIRE_CONFIG_TEMPLATE.format(payload=json.dumps(path_versions))


def run_require_versioning(
        files: Sequence[BuildFile],
        version_map: VersionMap,
        cfg: Dict[str, Any],
        excluded_paths: Optional[Set[str]] = None,
) -> RequireVersioningOutcome:
    """
    Compute path-prefix versions and emit them to the configured sink.

    Args:
        files: Files of the pass (already filtered).
        version_map: Shared map receiving placeholder and output-file entries.
        cfg: Validated configuration.
        excluded_paths: Source paths kept out of the tree (renamed modules).

    Returns:
        RequireVersioningOutcome: Path versions, page scopes and issues.
    """
    outcome = RequireVersioningOutcome()
    excluded = excluded_paths or set()
    suffix = cfg["file_suffix"]
    source_root = cfg["source_root"]

    try:
        sink = parse_output_sink(cfg.get("output"), (f.path for f in files))
    except InvalidOutputSpec as e:
        logger.warning(str(e))
        outcome.issues.append(VersioningIssue.from_error(e, subject=str(e.value)))
        sink = None

    output_file = _find_file(files, sink.path) if isinstance(sink, ToFile) else None
    module_suffixes = list(suffix["js"]) + list(suffix["tpl"])

    def _include(file: BuildFile) -> bool:
        return (
            file is not output_file
            and file.path not in excluded
            and is_source_file(file, source_root, module_suffixes)
        )

    tree = build_version_tree(files, _include, root_id=source_root, issues=outcome.issues)
    outcome.path_versions = collect_path_versions(tree, cfg["path_prefix_depth"])
    path_versions = outcome.path_versions

    if output_file is not None:
        output_file.data = render_require_config(path_versions)
        invalidate(output_file)
        version_map[output_file.output_path] = md5sum(output_file, cfg["md5_length"])
        logger.info(f"Path-prefix versions written to '{output_file.path}'")

    elif isinstance(sink, Callback):
        try:
            sink.handler(path_versions, list(files))
        except Exception as e:
            logger.error(f"Version output callback failed: {e}", exc_info=True)
            outcome.issues.append(VersioningIssue(kind="CallbackError", subject="output", message=str(e)))

    elif isinstance(sink, Placeholder):
        if cfg.get("output_by_page"):
            pages = [f for f in files if f.is_text and is_file_type_of(f.extname, suffix["tpl"])]
            outcome.page_versions = scope_page_versions(pages, path_versions)
            version_map[sink.token] = VersionEntry(
                value=json.dumps({}),
                output_by_page=True,
                page_values={p: json.dumps(m) for p, m in outcome.page_versions.items()},
            )
        else:
            version_map[sink.token] = VersionEntry(value=json.dumps(path_versions))

    _emit_default_output(cfg.get("default_output"), outcome, version_map)
    return outcome

# -----------------------------------------------------------------------------
# INTERNAL HELPERS
# -----------------------------------------------------------------------------

def _emit_default_output(
        placeholder: Optional[str],
        outcome: RequireVersioningOutcome,
        version_map: VersionMap,
) -> None:
    """Deliver the full path-prefix map to the catch-all placeholder."""
    if not placeholder:
        return

    if not isinstance(placeholder, str) or not PLACEHOLDER_RX.match(placeholder):
        error = InvalidOutputSpec(placeholder)
        logger.warning(str(error))
        outcome.issues.append(VersioningIssue.from_error(error, subject=str(placeholder)))
        return

    version_map[placeholder] = VersionEntry(value=json.dumps(outcome.path_versions))


def _find_file(files: Sequence[BuildFile], path: str) -> Optional[BuildFile]:
    for file in files:
        if file.path == path:
            return file
    return None
