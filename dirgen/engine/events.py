"""Progress events emitted while loading, expanding and materializing."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from pydantic import BaseModel, ConfigDict, Field


class Stage(str, Enum):
    """Which step of a generation run an event describes."""
    LOAD_START = "load_start"
    LOAD_DIRECTORY = "load_directory"
    LOAD_TOKENS = "load_tokens"
    LOAD_TARGET = "load_target"
    LOAD_END = "load_end"
    EXPAND_START = "expand_start"
    EXPAND_END = "expand_end"
    MATERIALIZE_START = "materialize_start"
    CREATE_DIRECTORY = "create_directory"
    COPY_FILE = "copy_file"
    MATERIALIZE_END = "materialize_end"


class ProgressEvent(BaseModel):
    """One human-readable progress notification."""

    model_config = ConfigDict(frozen=True)

    stage: Stage
    message: str
    path: Optional[Path] = Field(default=None, description="Filesystem path the step touched")

    def __str__(self) -> str:
        return self.message


ProgressSink = Callable[[ProgressEvent], None]
