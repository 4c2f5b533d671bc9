from __future__ import annotations

"""
Versioning Domain Data Models.

Defines the version-map entry types, the module rename record, the closed
set of output sinks and the result object handed back by the pipeline
engine to its callers (CLI or host build tool).
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from assetversioner.domain.constants import PLACEHOLDER_RX
from assetversioner.domain.errors import InvalidOutputSpec

# -----------------------------------------------------------------------------
# VERSION MAP ENTRIES
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class VersionEntry:
    """
    Structured version-map value substituted verbatim for its key.

    Attributes:
        value: Replacement text for the literal key.
        rename: True when the key is a path and value its renamed form.
        output_by_page: True when page_values carries per-page replacements.
        page_values: Replacement text keyed by page output path.
    """
    value: str
    rename: bool = False
    output_by_page: bool = False
    page_values: Optional[Dict[str, str]] = None

    def value_for(self, output_path: str) -> str:
        if self.output_by_page and self.page_values and output_path in self.page_values:
            return self.page_values[output_path]
        return self.value


VersionValue = Union[str, VersionEntry]
VersionMap = Dict[str, VersionValue]

# -----------------------------------------------------------------------------
# MODULE RENAMING
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class ModuleRenameRecord:
    """
    Mapping of one module selected for physical renaming.

    Attributes:
        original_module_id: Module id before renaming (e.g. 'biz/bizMain').
        renamed_module_id: Module id after renaming (e.g. 'biz/bizMain_abc123').
        version_token: Token inserted into the file name.
        declaring_file_path: Source path of the file declaring the module.
    """
    original_module_id: str
    renamed_module_id: str
    version_token: str
    declaring_file_path: str

    @property
    def renamed_name(self) -> str:
        """Trailing segment of the renamed module id."""
        return self.renamed_module_id.rsplit("/", 1)[-1]

# -----------------------------------------------------------------------------
# OUTPUT SINKS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class ToFile:
    """Write the require.config snippet into the file at this path."""
    path: str


@dataclass(frozen=True)
class Callback:
    """Hand the computed path-version map to a caller-supplied function."""
    handler: Callable[[Dict[str, str], List[Any]], Any]


@dataclass(frozen=True)
class Placeholder:
    """Substitute the serialized map wherever this literal token appears."""
    token: str


OutputSink = Union[ToFile, Callback, Placeholder]


def parse_output_sink(raw: Any, known_paths: Iterable[str]) -> Optional[OutputSink]:
    """
    Resolve a raw output configuration value into one OutputSink variant.

    A string naming a known file wins over the placeholder reading of the
    same string.

    Args:
        raw: Configured value (path string, callable, placeholder or None).
        known_paths: Source paths of the files in the current pass.

    Returns:
        Optional[OutputSink]: The sink, or None when no output is configured.

    Raises:
        InvalidOutputSpec: If the value matches none of the recognized forms.
    """
    if raw is None or raw == "":
        return None
    if callable(raw):
        return Callback(handler=raw)
    if isinstance(raw, str):
        if raw in set(known_paths):
            return ToFile(path=raw)
        if PLACEHOLDER_RX.match(raw):
            return Placeholder(token=raw)
    raise InvalidOutputSpec(raw)

# -----------------------------------------------------------------------------
# RESULT MODELS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class VersioningIssue:
    """
    Non-fatal problem recorded during a versioning pass.

    Attributes:
        kind: Error kind name (e.g. 'UnknownModuleId').
        subject: Offending identifier (module id, url or config value).
        message: Human-readable diagnostic.
    """
    kind: str
    subject: str
    message: str

    @classmethod
    def from_error(cls, error: Exception, subject: str) -> "VersioningIssue":
        return cls(kind=type(error).__name__, subject=subject, message=str(error))


@dataclass(frozen=True)
class VersioningResult:
    """
    Outcome of one engine invocation.

    Attributes:
        ok: False only when the pass could not start at all.
        error: Descriptive message in case of failure.
        skipped: True when the single-invocation gate short-circuited.
        version_map: Literal key to token/entry mapping used for rewriting.
        path_versions: Path-prefix tokens emitted by the tree collector.
        renames: Rename records keyed by original module id.
        page_versions: Per-page subsets of path_versions.
        issues: Recoverable problems reported during the pass.
        summary: Counters for reporting.
    """
    ok: bool
    error: str = ""
    skipped: bool = False
    version_map: VersionMap = field(default_factory=dict)
    path_versions: Dict[str, str] = field(default_factory=dict)
    renames: Dict[str, ModuleRenameRecord] = field(default_factory=dict)
    page_versions: Dict[str, Dict[str, str]] = field(default_factory=dict)
    issues: List[VersioningIssue] = field(default_factory=list)
    summary: Dict[str, Any] = field(default_factory=dict)
