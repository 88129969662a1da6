"""Pydantic v2 models for DirGen definitions.

A definition is an ordered tree of :class:`Node` objects rooted at a
``directory`` node, plus a :class:`TokenTable` mapping token keys to the
literal names they expand into.  Comments found in the source file are kept
as :class:`Annotation` children so the expander can discard them itself.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Iterable, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class NodeKind(str, Enum):
    """Structural node types."""
    ROOT = "directory"
    FOLDER = "folder"
    FILE = "file"


# ---------------------------------------------------------------------------
# Tree models
# ---------------------------------------------------------------------------

class Annotation(BaseModel):
    """A non-structural child slot (e.g. an XML comment)."""
    kind: Literal["annotation"] = "annotation"
    text: str = Field(default="", description="Comment text, kept for debugging only")


class Node(BaseModel):
    """A folder, a file, or the root directory of a definition."""
    kind: NodeKind = Field(..., description="Node type")
    name: Optional[str] = Field(
        default=None,
        description="Folder or file name, '$Key' token reference, "
        "or the root folder name for the root node",
    )
    target_path: Optional[str] = Field(
        default=None, description="Output location (root node only)"
    )
    children: list[Union[Node, Annotation]] = Field(
        default_factory=list, description="Ordered child slots"
    )

    @property
    def is_root(self) -> bool:
        return self.kind is NodeKind.ROOT

    @property
    def root_folder_name(self) -> Optional[str]:
        """Name of the folder to create under the target path, if any."""
        return self.name if self.is_root else None


Node.model_rebuild()


# ---------------------------------------------------------------------------
# Tokens
# ---------------------------------------------------------------------------

class TokenTable(BaseModel):
    """Immutable mapping of token key to its ordered, distinct values."""

    model_config = ConfigDict(frozen=True)

    entries: dict[str, tuple[str, ...]] = Field(default_factory=dict)

    @classmethod
    def from_mapping(cls, mapping: dict[str, Iterable[str]]) -> TokenTable:
        """Build a table, collapsing duplicate values (first occurrence wins)."""
        return cls(
            entries={
                key: tuple(dict.fromkeys(values)) for key, values in mapping.items()
            }
        )

    def get(self, key: str) -> tuple[str, ...]:
        """Return the values for *key*, or an empty tuple for unknown keys."""
        return self.entries.get(key, ())


# ---------------------------------------------------------------------------
# Loaded definition
# ---------------------------------------------------------------------------

class Definition(BaseModel):
    """Everything read from one definition file."""
    root: Node = Field(..., description="The 'directory' root node")
    tokens: TokenTable = Field(default_factory=TokenTable)
    source_path: Path = Field(..., description="Absolute path of the definition file")

    @property
    def definition_dir(self) -> Path:
        """Directory containing the definition file; base for relative paths."""
        return self.source_path.parent

    @property
    def target_path(self) -> Path:
        """Resolved output location.

        Defaults to the definition file's directory; a relative
        ``target_path`` is taken relative to that directory as well.
        """
        if not self.root.target_path:
            return self.definition_dir
        target = Path(self.root.target_path).expanduser()
        if not target.is_absolute():
            target = self.definition_dir / target
        return target

    @property
    def root_folder_name(self) -> Optional[str]:
        return self.root.root_folder_name
