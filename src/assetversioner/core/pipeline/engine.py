from __future__ import annotations

"""
Core versioning orchestration.

Coordinates one versioning pass over an in-memory file set:
1. Validates configuration.
2. Excludes vendored paths.
3. Renames selected modules and rewrites the module graph.
4. Builds the hash tree and emits path-prefix versions to the sink.
5. Versions url() references inside stylesheets.
6. Generates file-level tokens for listed scripts and stylesheets.
7. Rewrites literal references in templates and scripts.

The processor is driven by a host build pipeline through a before-all /
per-file lifecycle, and gates itself so the pass runs exactly once.
"""

import logging
import os
from typing import Any, Callable, Dict, List, Optional, Sequence, Set

from assetversioner.core.analysis.entry_scoper import collect_page_entry_modules
from assetversioner.core.pipeline.components.filters import build_path_filter, is_file_type_of
from assetversioner.core.pipeline.stages.file_versioning import (
    init_file_version_info,
    inline_file_versioning,
    match_files_under,
)
from assetversioner.core.pipeline.stages.require_versioning import run_require_versioning
from assetversioner.core.pipeline.stages.validator import validate_config
from assetversioner.core.rewriting.css_url import version_css_urls
from assetversioner.core.rewriting.module_renamer import rename_modules
from assetversioner.core.rewriting.reference_rewriter import update_resource_reference
from assetversioner.core.services.scanner import scan_resource_paths
from assetversioner.domain.file_models import BuildFile
from assetversioner.domain.version_models import (
    ModuleRenameRecord,
    VersioningIssue,
    VersioningResult,
    VersionMap,
)

logger = logging.getLogger(__name__)

DirScanner = Callable[[str, Sequence[str], Sequence[str]], List[str]]


class VersioningProcessor:
    """
    Single-invocation versioning processor for a host build pipeline.

    The host calls 'before_all' once with the full file set and then
    'process' for every file. Only the first file selected in 'before_all'
    triggers the pass; every other call is a no-op.

    Args:
        config: Raw configuration dictionary.
        strict: Raise on invalid configuration instead of coercing.
        dir_scanner: Directory-scan primitive used for 'css_dirs' discovery.
    """

    def __init__(
            self,
            config: Optional[Dict[str, Any]] = None,
            *,
            strict: bool = False,
            dir_scanner: Optional[DirScanner] = None,
    ) -> None:
        self.cfg, self.warnings = validate_config(config or {}, strict=strict)
        for warning in self.warnings:
            logger.warning(f"Configuration Warning: {warning}")

        self.dir_scanner = dir_scanner
        self._sentinel: Optional[BuildFile] = None
        self._done = False
        self.result: Optional[VersioningResult] = None

    # -------------------------------------------------------------------------
    # HOST LIFECYCLE
    # -------------------------------------------------------------------------

    def before_all(self, files: Sequence[BuildFile]) -> None:
        """Select the file whose processing triggers the pass."""
        self._sentinel = files[0] if files else None

    def process(self, file: BuildFile, files: Sequence[BuildFile]) -> VersioningResult:
        """
        Run the pass for the selected file on first call; skip otherwise.

        Args:
            file: File currently handled by the host.
            files: The full file set of the build.

        Returns:
            VersioningResult: The pass result, or a skipped result.
        """
        if self._done or file is not self._sentinel:
            logger.debug(f"Versioning pass already handled; skipping '{file.path}'")
            return VersioningResult(ok=True, skipped=True)

        self._done = True
        self.result = self._run(files)
        return self.result

    # -------------------------------------------------------------------------
    # PASS
    # -------------------------------------------------------------------------

    def _run(self, all_files: Sequence[BuildFile]) -> VersioningResult:
        cfg = self.cfg
        suffix = cfg["file_suffix"]
        issues: List[VersioningIssue] = []
        version_map: VersionMap = {}
        renames: Dict[str, ModuleRenameRecord] = {}

        logger.info("Versioning pass started.")

        # 1) Exclusions
        include = build_path_filter(cfg["exclude_patterns"])
        files = [f for f in all_files if include(f)]
        logger.debug(f"{len(all_files) - len(files)} files excluded, {len(files)} in scope")

        # 2) Module renaming
        excluded_from_tree: Set[str] = set()
        module_ids = self._rename_targets(files)
        if module_ids:
            renames, rename_issues = rename_modules(
                module_ids,
                files,
                source_root=cfg["source_root"],
                md5_length=cfg["md5_length"],
                script_suffixes=suffix["js"],
                tpl_suffixes=suffix["tpl"],
            )
            issues.extend(rename_issues)
            excluded_from_tree = {r.declaring_file_path for r in renames.values()}

        # 3) Path-prefix versions
        require_outcome = run_require_versioning(files, version_map, cfg, excluded_from_tree)
        issues.extend(require_outcome.issues)

        # 4) Stylesheet url() references
        css_url = cfg["css_url"]
        if css_url:
            issues.extend(version_css_urls(
                files,
                suffix["css"],
                cfg["md5_length"],
                rename=cfg["rename"],
                versions=self._css_url_versions(css_url, files),
                auto_scan=css_url is True,
            ))

        # 5) File-level tokens
        process_paths = list(cfg["js_file_paths"]) + list(cfg["css_file_paths"])
        process_paths.extend(self._scan_css_dirs(files))
        added = init_file_version_info(
            version_map, process_paths, files, cfg["md5_length"], rename=cfg["rename"]
        )

        # 6) Reference rewriting
        rewritten = update_resource_reference(files, version_map, suffix["tpl"], suffix["js"])

        summary = {
            "files": len(all_files),
            "in_scope": len(files),
            "path_versions": len(require_outcome.path_versions),
            "file_versions": added,
            "renamed_modules": len(renames),
            "rewritten_files": rewritten,
            "issues": len(issues),
        }
        logger.info(f"Versioning pass completed: {summary}")

        return VersioningResult(
            ok=True,
            version_map=version_map,
            path_versions=require_outcome.path_versions,
            renames=renames,
            page_versions=require_outcome.page_versions,
            issues=issues,
            summary=summary,
        )

    # -------------------------------------------------------------------------
    # PRIVATE HELPERS
    # -------------------------------------------------------------------------

    def _rename_targets(self, files: Sequence[BuildFile]) -> List[str]:
        targets = self.cfg["rename_modules"]
        if targets is True:
            pages = [f for f in files if f.is_text and is_file_type_of(f.extname, self.cfg["file_suffix"]["tpl"])]
            return collect_page_entry_modules(pages)
        return list(targets or [])

    def _css_url_versions(self, css_url: Any, files: Sequence[BuildFile]) -> Dict[str, str]:
        """Tokens for an explicit resource list; empty in auto-scan mode."""
        if css_url is True:
            return {}
        return inline_file_versioning(css_url, files, self.cfg["md5_length"])

    def _scan_css_dirs(self, files: Sequence[BuildFile]) -> List[str]:
        dirs = self.cfg["css_dirs"]
        if not dirs:
            return []

        css_suffixes = self.cfg["file_suffix"]["css"]
        input_path = self.cfg["input_path"]
        if self.dir_scanner is not None and os.path.isdir(input_path):
            return self.dir_scanner(input_path, dirs, css_suffixes)
        return match_files_under(dirs, files, css_suffixes)


def run_versioning(
        files: Sequence[BuildFile],
        config: Optional[Dict[str, Any]] = None,
        *,
        strict: bool = False,
        scan_disk: bool = False,
) -> VersioningResult:
    """
    Run one complete versioning pass over a file set.

    Args:
        files: Every file of the build.
        config: Raw configuration dictionary.
        strict: Raise on invalid configuration instead of coercing.
        scan_disk: Discover 'css_dirs' resources on disk under 'input_path'.

    Returns:
        VersioningResult: Version map, renames, issues and summary.
    """
    processor = VersioningProcessor(
        config, strict=strict, dir_scanner=scan_resource_paths if scan_disk else None
    )
    processor.before_all(files)
    if not files:
        logger.info("No files to version.")
        return VersioningResult(ok=True, summary={"files": 0})
    return processor.process(files[0], files)
