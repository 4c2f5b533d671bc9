"""Exception hierarchy for the versioning engine.

Every kind below is recoverable: components raise or construct them, log
their message and keep processing the rest of the file set.
"""

from dataclasses import dataclass


class VersioningError(Exception):
    """Base exception for all versioning engine errors."""

    pass


@dataclass
class UnknownModuleId(VersioningError):
    """A requested module id has no corresponding file or hash entry."""

    module_id: str
    context: str = ""

    def __post_init__(self) -> None:
        super().__init__(str(self))

    def __str__(self) -> str:
        base = f"Unknown module id '{self.module_id}'"
        if self.context:
            base += f" ({self.context})"
        return base


@dataclass
class UnresolvedRenameTarget(VersioningError):
    """A dependency references a module slated for rename with no rename record."""

    module_id: str
    file_path: str

    def __post_init__(self) -> None:
        super().__init__(str(self))

    def __str__(self) -> str:
        return (
            f"Unresolved rename target '{self.module_id}' "
            f"referenced in '{self.file_path}'"
        )


@dataclass
class InvalidOutputSpec(VersioningError):
    """The output sink configuration matches none of the recognized forms."""

    value: object

    def __post_init__(self) -> None:
        super().__init__(str(self))

    def __str__(self) -> str:
        return (
            f"Invalid output spec {self.value!r}: expected a known file path, "
            f"a callable or a placeholder matching ^('|\")?[\\w-]+('|\")?$"
        )


@dataclass
class SiblingCollisionOverflow(VersioningError):
    """More than two siblings share one name at the same tree level."""

    parent_id: str
    name: str
    count: int

    def __post_init__(self) -> None:
        super().__init__(str(self))

    def __str__(self) -> str:
        return (
            f"Sibling collision overflow under '{self.parent_id}': "
            f"{self.count} nodes named '{self.name}' (at most 2 supported)"
        )
