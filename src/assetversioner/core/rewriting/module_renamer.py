from __future__ import annotations

"""
Module Graph Renamer.

Encodes version tokens into the file names of selected AMD modules and
rewrites every reference to them across the module graph: asynchronous
dependency lists, synchronous in-body requires and the renamed module's
own 'define' identifier.
"""

import logging
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from assetversioner.core.hashing.hasher import invalidate, md5sum
from assetversioner.core.pipeline.components.filters import (
    get_rename_file_path,
    is_file_type_of,
    remove_path_ext_name,
)
from assetversioner.core.rewriting.module_grammar import (
    Literal,
    is_plugin_request,
    resolve_module_id,
    split_declarations,
)
from assetversioner.domain.constants import DEFAULT_MD5_LENGTH, DEFAULT_SOURCE_ROOT
from assetversioner.domain.errors import UnknownModuleId, UnresolvedRenameTarget
from assetversioner.domain.file_models import BuildFile
from assetversioner.domain.version_models import ModuleRenameRecord, VersioningIssue

logger = logging.getLogger(__name__)

MODULE_RENAMED_MARKER = "module_renamed"

Edit = Tuple[int, int, str]


class ModuleRenamer:
    """
    Computes rename records for a set of module ids and applies them.

    Args:
        files: Every file of the pass.
        source_root: Directory that module ids are relative to.
        md5_length: Length of the token inserted into file names.
        script_suffixes: Extensions of module sources.
        tpl_suffixes: Extensions of pages that may declare entry requires.
    """

    def __init__(
            self,
            files: Sequence[BuildFile],
            source_root: str = DEFAULT_SOURCE_ROOT,
            md5_length: int = DEFAULT_MD5_LENGTH,
            script_suffixes: Sequence[str] = ("js",),
            tpl_suffixes: Sequence[str] = ("tpl", "html"),
    ) -> None:
        self.files = files
        self.source_root = source_root.rstrip("/")
        self.md5_length = md5_length
        self.script_suffixes = script_suffixes
        self.tpl_suffixes = tpl_suffixes

        self.records: Dict[str, ModuleRenameRecord] = {}
        self.unresolved: Set[str] = set()
        self.issues: List[VersioningIssue] = []
        self._index = {f.path: f for f in files}

    # -------------------------------------------------------------------------
    # PUBLIC API
    # -------------------------------------------------------------------------

    def plan(self, module_ids: Iterable[str], versions: Optional[Dict[str, str]] = None) -> Dict[str, ModuleRenameRecord]:
        """
        Create a rename record for every module id that maps to a file.

        All tokens are computed here, before any file content is mutated.
        """
        for module_id in module_ids:
            if module_id in self.records:
                continue

            file = self._index.get(self.module_path(module_id))
            if file is None:
                self._report(UnknownModuleId(module_id, context="no source file"), module_id)
                self.unresolved.add(module_id)
                continue

            token = (versions or {}).get(module_id) or md5sum(file, self.md5_length)
            renamed_path = get_rename_file_path(file.path, token)
            self.records[module_id] = ModuleRenameRecord(
                original_module_id=module_id,
                renamed_module_id=self.module_id_of(renamed_path),
                version_token=token,
                declaring_file_path=file.path,
            )

        return self.records

    def apply(self) -> int:
        """
        Rename output paths and rewrite every declaration in the corpus.

        Returns:
            int: Number of files whose content changed.
        """
        for record in self.records.values():
            file = self._index[record.declaring_file_path]
            if file.get(MODULE_RENAMED_MARKER):
                continue
            file.output_path = get_rename_file_path(file.output_path, record.version_token)
            file.set(MODULE_RENAMED_MARKER, record.renamed_module_id)
            logger.info(f"Module '{record.original_module_id}' renamed to '{record.renamed_module_id}'")

        changed = 0
        for file in self.files:
            if not file.is_text:
                continue
            if not (is_file_type_of(file.extname, self.script_suffixes)
                    or is_file_type_of(file.extname, self.tpl_suffixes)):
                continue
            if self.rewrite_file(file):
                changed += 1
        return changed

    def rewrite_file(self, file: BuildFile) -> bool:
        """Rewrite the declarations of one file; True if its content changed."""
        source = file.data
        file_module_id = self.module_id_of(file.path) if is_file_type_of(file.extname, self.script_suffixes) else None

        edits: List[Edit] = []
        for decl in split_declarations(source):
            declaring_id = decl.self_id.value if decl.self_id else file_module_id

            if decl.self_id is not None and decl.self_id.value in self.records:
                edits.append(self._literal_edit(decl.self_id, self.records[decl.self_id.value].renamed_module_id))

            for deps in decl.dependency_lists:
                for literal in deps:
                    edit = self._request_edit(literal, declaring_id, file.path)
                    if edit:
                        edits.append(edit)

            for literal in decl.sync_requires:
                edit = self._request_edit(literal, declaring_id, file.path)
                if edit:
                    edits.append(edit)

        if not edits:
            return False

        file.data = _apply_edits(source, edits)
        invalidate(file)
        logger.debug(f"Rewrote {len(edits)} module references in '{file.path}'")
        return True

    def module_path(self, module_id: str) -> str:
        return f"{self.source_root}/{module_id}.js"

    def module_id_of(self, path: str) -> Optional[str]:
        prefix = self.source_root + "/"
        if not path.startswith(prefix):
            return None
        return remove_path_ext_name(path[len(prefix):])

    # -------------------------------------------------------------------------
    # PRIVATE HELPERS
    # -------------------------------------------------------------------------

    def _request_edit(self, literal: Literal, declaring_id: Optional[str], file_path: str) -> Optional[Edit]:
        request = literal.value
        if is_plugin_request(request):
            return None

        module_id = resolve_module_id(request, declaring_id)
        if module_id is None:
            return None

        record = self.records.get(module_id)
        if record is None:
            if module_id in self.unresolved:
                self._report(UnresolvedRenameTarget(module_id, file_path), module_id)
            return None

        head, _, _ = request.rpartition("/")
        renamed = f"{head}/{record.renamed_name}" if head else record.renamed_name
        return self._literal_edit(literal, renamed)

    @staticmethod
    def _literal_edit(literal: Literal, value: str) -> Edit:
        return literal.start, literal.end, f"{literal.quote}{value}{literal.quote}"

    def _report(self, error: Exception, subject: str) -> None:
        logger.warning(str(error))
        self.issues.append(VersioningIssue.from_error(error, subject=subject))


def rename_modules(
        module_ids: Iterable[str],
        files: Sequence[BuildFile],
        source_root: str = DEFAULT_SOURCE_ROOT,
        md5_length: int = DEFAULT_MD5_LENGTH,
        versions: Optional[Dict[str, str]] = None,
        script_suffixes: Sequence[str] = ("js",),
        tpl_suffixes: Sequence[str] = ("tpl", "html"),
) -> Tuple[Dict[str, ModuleRenameRecord], List[VersioningIssue]]:
    """
    Rename the given modules and rewrite every reference to them.

    Args:
        module_ids: Module ids selected for renaming.
        files: Every file of the pass.
        source_root: Directory that module ids are relative to.
        md5_length: Token length.
        versions: Optional precomputed tokens by module id.
        script_suffixes: Extensions of module sources.
        tpl_suffixes: Extensions of pages.

    Returns:
        Tuple[Dict[str, ModuleRenameRecord], List[VersioningIssue]]:
            Records keyed by original id and the recoverable problems found.
    """
    renamer = ModuleRenamer(files, source_root, md5_length, script_suffixes, tpl_suffixes)
    renamer.plan(module_ids, versions)
    renamer.apply()
    return renamer.records, renamer.issues

# -----------------------------------------------------------------------------
# INTERNAL HELPERS
# -----------------------------------------------------------------------------

def _apply_edits(source: str, edits: List[Edit]) -> str:
    out = source
    for start, end, text in sorted(set(edits), reverse=True):
        out = out[:start] + text + out[end:]
    return out
