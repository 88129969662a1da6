"""Exception hierarchy for DirGen.

Every failure raised by the loader, the expander or the materializer derives
from :class:`DirGenError`, so callers (the CLI in particular) can report any
run failure with a single ``except`` clause.  Each subclass keeps the values
that identify the problem as attributes and builds its message itself.
"""

from __future__ import annotations

from pathlib import Path

ILLEGAL_NAME_CHARS = '\\/:*?"<>|'


class DirGenError(Exception):
    """Base class for every error raised while generating a directory tree."""


# ---------------------------------------------------------------------------
# Definition loading and configuration
# ---------------------------------------------------------------------------


class DefinitionError(DirGenError):
    """Raised when a definition file cannot be read or is malformed."""

    def __init__(self, message: str, path: str | Path | None = None) -> None:
        self.path = Path(path) if path is not None else None
        if self.path is not None:
            message = f"{self.path}: {message}"
        super().__init__(message)


class ConfigError(DirGenError):
    """Raised when a saved configuration file cannot be read or written."""

    def __init__(self, message: str, path: str | Path) -> None:
        self.path = Path(path)
        super().__init__(f"{self.path}: {message}")


# ---------------------------------------------------------------------------
# Tree expansion
# ---------------------------------------------------------------------------


class ExpansionError(DirGenError):
    """Raised when the definition tree cannot be expanded."""


class ValidationError(ExpansionError):
    """Two siblings share the same name after expansion."""

    def __init__(self, parent_name: str, duplicate: str = "") -> None:
        self.parent_name = parent_name
        self.duplicate = duplicate
        detail = f" ('{duplicate}')" if duplicate else ""
        super().__init__(
            f"Folder '{parent_name}' contains more than one folder or file "
            f"with the same name{detail}."
        )


class InvalidNameError(ExpansionError):
    """A name or token value cannot be used as a file or folder name."""

    def __init__(self, value: str, reason: str = "") -> None:
        self.value = value
        self.reason = reason or (
            f"contains characters that are not allowed in file names "
            f"( {' '.join(ILLEGAL_NAME_CHARS)} )"
        )
        super().__init__(f"Name '{value}' {self.reason}.")


class MissingAttributeError(ExpansionError):
    """A node has no ``name`` attribute."""

    def __init__(self, node_kind: str) -> None:
        self.node_kind = node_kind
        super().__init__(
            f"'{node_kind}' node has no 'name' attribute, or the attribute is invalid."
        )


# ---------------------------------------------------------------------------
# Materialization
# ---------------------------------------------------------------------------


class FilesystemError(DirGenError):
    """An operation against the output filesystem failed."""

    def __init__(self, message: str, path: str | Path | None = None) -> None:
        self.path = Path(path) if path is not None else None
        super().__init__(message)


class TargetMissingError(FilesystemError):
    """The output location does not exist or is not a directory."""

    def __init__(self, path: str | Path) -> None:
        super().__init__(
            f"Output path '{path}' does not exist or is not a directory.", path
        )


class AlreadyExistsError(FilesystemError):
    """A folder or file that must be created already exists."""

    def __init__(self, path: str | Path, hint: str = "") -> None:
        message = f"'{path}' already exists."
        if hint:
            message = f"{message} {hint}"
        super().__init__(message, path)


class NotEmptyError(FilesystemError):
    """The output location must be empty but already has entries."""

    def __init__(self, path: str | Path) -> None:
        super().__init__(
            f"Output path '{path}' already contains other files or folders. "
            "Remove them, or give the directory a root folder name.",
            path,
        )


class SourceNotFoundError(FilesystemError):
    """A file referenced by the definition cannot be found."""

    def __init__(self, path: str | Path) -> None:
        super().__init__(f"Source file '{path}' does not exist or is not a file.", path)
