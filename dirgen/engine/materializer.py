"""Replays an expanded definition tree onto the filesystem.

The materializer never changes the process working directory.  It keeps its
own stack of output paths instead: entering a folder that has children pushes
``cursor / name``, leaving it pops.  A failure therefore leaves no state
behind to restore, only whatever was created before it (there is no
rollback).
"""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Iterator

from ..definition.models import Node, NodeKind
from ..errors import (
    AlreadyExistsError,
    FilesystemError,
    NotEmptyError,
    SourceNotFoundError,
    TargetMissingError,
)
from .events import ProgressEvent, Stage
from .walker import Step, descends_into, walk


class FilesystemMaterializer:
    """Creates the folders and copies the files of an expanded tree.

    Args:
        definition_dir: Directory holding the files that ``file`` nodes
            copy, normally the directory of the definition file.
    """

    def __init__(self, definition_dir: str | Path) -> None:
        self.definition_dir = Path(definition_dir)

    # -- Public API --------------------------------------------------------

    def iter_materialize(self, tree: Node, target_root: str | Path) -> Iterator[ProgressEvent]:
        """Materialize *tree* under *target_root*, yielding one event per step.

        The work happens as the iterator is consumed; each directory or file
        event is yielded after the operation it reports has completed.  The
        final ``MATERIALIZE_END`` event carries the output root in ``path``.

        Raises:
            TargetMissingError: *target_root* is not an existing directory.
            AlreadyExistsError: The root folder, a folder or a copied file
                already exists.
            NotEmptyError: No root folder name is set and *target_root* is
                not empty.
            SourceNotFoundError: A ``file`` source is missing.
            FilesystemError: Any other OS-level failure.
        """
        target = Path(target_root)
        yield ProgressEvent(
            stage=Stage.MATERIALIZE_START,
            message=f"Creating directories in '{target}'.",
            path=target,
        )

        output_root = self._prepare_output_root(tree, target)
        if output_root != target:
            yield self._directory_event(output_root)

        cursor = [output_root]
        for step, node in walk(tree):
            if step is Step.EXIT:
                cursor.pop()
                continue

            if node.kind is NodeKind.FOLDER:
                path = cursor[-1] / node.name
                self._make_directory(path)
                yield self._directory_event(path)
                if descends_into(node):
                    cursor.append(path)
            elif node.kind is NodeKind.FILE:
                source = self.resolve_source(node.name)
                destination = cursor[-1] / node.name
                self._copy_file(source, destination)
                yield ProgressEvent(
                    stage=Stage.COPY_FILE,
                    message=f"Copied file '{node.name}' (into {cursor[-1]})",
                    path=destination,
                )

        yield ProgressEvent(
            stage=Stage.MATERIALIZE_END,
            message="Finished creating directories.",
            path=output_root,
        )

    def materialize(self, tree: Node, target_root: str | Path) -> Path:
        """Materialize *tree* eagerly and return the output root."""
        output_root = Path(target_root)
        for event in self.iter_materialize(tree, target_root):
            if event.stage is Stage.MATERIALIZE_END and event.path is not None:
                output_root = event.path
        return output_root

    def resolve_source(self, name: str) -> Path:
        """Return the source of a ``file`` node.

        File names obey the same legality rule as folder names, so a source
        is always a plain file name inside the definition directory.
        """
        return self.definition_dir / name

    # -- Preconditions -----------------------------------------------------

    def _prepare_output_root(self, tree: Node, target: Path) -> Path:
        if not target.is_dir():
            raise TargetMissingError(target)

        root_name = tree.root_folder_name
        if root_name is not None:
            output_root = target / root_name
            if output_root.exists():
                raise AlreadyExistsError(
                    output_root, "Delete the root folder and try again."
                )
            self._make_directory(output_root)
            return output_root

        try:
            occupied = any(target.iterdir())
        except OSError as exc:
            raise FilesystemError(f"Cannot list '{target}': {exc}", target) from exc
        if occupied:
            raise NotEmptyError(target)
        return target

    # -- Filesystem operations ---------------------------------------------

    @staticmethod
    def _make_directory(path: Path) -> None:
        try:
            path.mkdir()
        except FileExistsError as exc:
            raise AlreadyExistsError(path) from exc
        except OSError as exc:
            raise FilesystemError(f"Cannot create directory '{path}': {exc}", path) from exc

    @staticmethod
    def _copy_file(source: Path, destination: Path) -> None:
        if not source.is_file():
            raise SourceNotFoundError(source)
        if destination.exists() or destination.is_symlink():
            raise AlreadyExistsError(destination)
        try:
            shutil.copy2(source, destination)
        except OSError as exc:
            raise FilesystemError(
                f"Cannot copy '{source}' to '{destination}': {exc}", destination
            ) from exc

    @staticmethod
    def _directory_event(path: Path) -> ProgressEvent:
        return ProgressEvent(
            stage=Stage.CREATE_DIRECTORY,
            message=f"Created directory '{path.name}' (in {path.parent})",
            path=path,
        )


def materialize(tree: Node, target_root: str | Path, definition_dir: str | Path) -> Path:
    """Materialize an expanded *tree*; see :class:`FilesystemMaterializer`."""
    return FilesystemMaterializer(definition_dir).materialize(tree, target_root)
