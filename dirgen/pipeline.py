"""DirGen orchestrator and command-line entry point.

A run has three stages:

1. LOAD        -- read the definition file (layout, tokens, output path).
2. EXPAND      -- resolve tokens and validate names (no disk access).
3. MATERIALIZE -- create folders and copy files under the output path.

Every stage reports progress as :class:`ProgressEvent` objects, delivered in
order to the ``on_progress`` callback given to :class:`DirectoryGenerator`.

Usage::

    dirgen layout.xml
    dirgen layout.yaml --target ./out
    dirgen --template layout.xml
"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path
from typing import Iterator, Optional

from pydantic import BaseModel, Field
from rich.panel import Panel

from dirgen import __version__
from dirgen.config import GeneratorConfig
from dirgen.definition.loader import parse_directory, parse_tokens, read_document
from dirgen.definition.models import Definition, Node
from dirgen.engine.events import ProgressEvent, ProgressSink, Stage
from dirgen.engine.expander import expand
from dirgen.engine.materializer import FilesystemMaterializer
from dirgen.errors import DirGenError
from dirgen.scaffolder.templates import write_template
from dirgen.utils import (
    console,
    format_duration,
    print_error,
    print_event,
    print_success,
    print_summary_table,
    print_warning,
)


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


class GenerationResult(BaseModel):
    """Outcome of a successful run."""

    output_root: Path = Field(..., description="Folder the layout was written into")
    directories: int = Field(default=0, description="Number of directories created")
    files: int = Field(default=0, description="Number of files copied")
    elapsed: float = Field(default=0.0, description="Wall-clock seconds for the run")


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------


class DirectoryGenerator:
    """Loads a definition file, expands it and materializes it on disk.

    Attributes:
        config: Run settings.
        on_progress: Callback receiving every progress event, in order.
        definition: The loaded definition (set by :meth:`load`).
        expanded_tree: The expanded tree (set by :meth:`expand`).
    """

    def __init__(
        self,
        config: GeneratorConfig | None = None,
        on_progress: ProgressSink | None = None,
    ) -> None:
        self.config = config or GeneratorConfig()
        self.on_progress = on_progress
        self.definition: Optional[Definition] = None
        self.expanded_tree: Optional[Node] = None

    def _emit(self, event: ProgressEvent) -> None:
        if self.on_progress is not None:
            self.on_progress(event)

    # ------------------------------------------------------------------
    # Stage 1: load
    # ------------------------------------------------------------------

    def iter_load(self, path: str | Path) -> Iterator[ProgressEvent]:
        """Load *path*, announcing each step before it runs."""
        source = Path(path).resolve()
        yield ProgressEvent(stage=Stage.LOAD_START, message=f"Loading '{path}'.", path=source)
        document = read_document(source)

        yield ProgressEvent(stage=Stage.LOAD_DIRECTORY, message="Reading the directory layout.")
        root = parse_directory(document, source)

        yield ProgressEvent(stage=Stage.LOAD_TOKENS, message="Reading tokens.")
        tokens = parse_tokens(document, source)

        yield ProgressEvent(stage=Stage.LOAD_TARGET, message="Reading the output path.")
        self.definition = Definition(root=root, tokens=tokens, source_path=source)
        self.expanded_tree = None

        yield ProgressEvent(
            stage=Stage.LOAD_END, message=f"Finished loading '{path}'.", path=source
        )

    def load(self, path: str | Path) -> Definition:
        """Load a definition file and return it."""
        for event in self.iter_load(path):
            self._emit(event)
        assert self.definition is not None
        return self.definition

    # ------------------------------------------------------------------
    # Stage 2: expand
    # ------------------------------------------------------------------

    def iter_expand(self) -> Iterator[ProgressEvent]:
        definition = self._require_definition()
        yield ProgressEvent(stage=Stage.EXPAND_START, message="Analysing the directory layout.")
        self.expanded_tree = expand(definition.root, definition.tokens)
        yield ProgressEvent(
            stage=Stage.EXPAND_END, message="Finished analysing the directory layout."
        )

    def expand(self) -> Node:
        """Expand the loaded definition and return the expanded tree."""
        for event in self.iter_expand():
            self._emit(event)
        assert self.expanded_tree is not None
        return self.expanded_tree

    # ------------------------------------------------------------------
    # Stage 3: materialize
    # ------------------------------------------------------------------

    @property
    def target_path(self) -> Path:
        """Output location for the loaded definition, after config overrides."""
        return self.config.resolve_target(self._require_definition().target_path)

    def iter_generate(self) -> Iterator[ProgressEvent]:
        """Expand the loaded definition, then materialize it."""
        yield from self.iter_expand()
        definition = self._require_definition()
        materializer = FilesystemMaterializer(definition.definition_dir)
        yield from materializer.iter_materialize(self.expanded_tree, self.target_path)

    def generate(self) -> Path:
        """Expand and materialize the loaded definition.

        Returns:
            The output root (the root folder, or the target path itself).
        """
        output_root = self.target_path
        for event in self.iter_generate():
            self._emit(event)
            if event.stage is Stage.MATERIALIZE_END and event.path is not None:
                output_root = event.path
        return output_root

    # ------------------------------------------------------------------
    # Whole run
    # ------------------------------------------------------------------

    def iter_run(self, path: str | Path) -> Iterator[ProgressEvent]:
        """Load, expand and materialize *path*, yielding every event."""
        yield from self.iter_load(path)
        yield from self.iter_generate()

    def run(self, path: str | Path) -> GenerationResult:
        """Run a full generation for the definition file at *path*.

        Raises:
            DirGenError: On any failure; nothing is rolled back.
        """
        started = time.monotonic()
        directories = files = 0
        output_root: Optional[Path] = None

        for event in self.iter_run(path):
            self._emit(event)
            if event.stage is Stage.CREATE_DIRECTORY:
                directories += 1
            elif event.stage is Stage.COPY_FILE:
                files += 1
            elif event.stage is Stage.MATERIALIZE_END:
                output_root = event.path

        return GenerationResult(
            output_root=output_root or self.target_path,
            directories=directories,
            files=files,
            elapsed=time.monotonic() - started,
        )

    def _require_definition(self) -> Definition:
        if self.definition is None:
            raise DirGenError("No definition loaded; call load() first.")
        return self.definition


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dirgen",
        description="DirGen -- build a directory tree from a definition file",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  dirgen layout.xml\n"
            "  dirgen layout.yaml --target ./out\n"
            "  dirgen --template layout.xml\n"
            "  dirgen --target ./out --quiet --save-config run.json\n"
            "  dirgen layout.xml --config run.json\n"
        ),
    )
    # One action per invocation.
    action = parser.add_mutually_exclusive_group()
    action.add_argument(
        "definition",
        nargs="?",
        help="Definition file (.xml, .yaml, .yml or .json) describing the layout",
    )
    action.add_argument(
        "--template", "-x",
        metavar="OUTPUT",
        default=None,
        help="Write a commented template definition file to OUTPUT and exit",
    )
    action.add_argument(
        "--save-config",
        metavar="FILE",
        default=None,
        help="Write the effective settings to a JSON file for --config and exit",
    )
    parser.add_argument(
        "--config", "-c",
        metavar="FILE",
        default=None,
        help="Read settings from a JSON file instead of DIRGEN_* environment variables",
    )
    parser.add_argument(
        "--target", "-t",
        default=None,
        help="Output location (overrides the definition's target_path)",
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Only print errors and the final result",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _build_config(args: argparse.Namespace) -> GeneratorConfig:
    """Settings for this invocation; command-line flags win over the file or environment."""
    if args.config:
        config = GeneratorConfig.load(Path(args.config))
    else:
        config = GeneratorConfig.from_env()
    if args.target:
        config.target_path = Path(args.target)
    if args.quiet:
        config.quiet = True
    return config


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for ``dirgen``; returns the process exit code."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.template:
        try:
            written = write_template(args.template)
        except DirGenError as exc:
            print_error(str(exc))
            return 1
        print_success(f"Wrote template definition '{written}'.")
        return 0

    if args.definition is None and args.save_config is None:
        console.print(
            Panel(
                f"[bold bright_cyan]DirGen (Directory Generator)[/bold bright_cyan]\n"
                f"Version {__version__}",
                border_style="bright_cyan",
            )
        )
        console.print(parser.format_help(), highlight=False, markup=False)
        return 0

    try:
        config = _build_config(args)
    except DirGenError as exc:
        print_error(str(exc))
        return 1

    if args.save_config:
        try:
            written = config.save(Path(args.save_config))
        except DirGenError as exc:
            print_error(str(exc))
            return 1
        print_success(f"Saved configuration to '{written}'.")
        return 0

    definition_path = Path(args.definition)
    if not definition_path.is_file():
        print_error(f"Definition file not found: {definition_path}")
        return 1

    generator = DirectoryGenerator(
        config, on_progress=None if config.quiet else print_event
    )
    try:
        result = generator.run(definition_path)
    except DirGenError as exc:
        print_error(str(exc))
        return 1

    if generator.expanded_tree is not None and not generator.expanded_tree.children:
        print_warning("The layout is empty after token expansion; nothing was created inside it.")

    if config.show_summary and not config.quiet:
        print_summary_table(
            {
                "Definition": str(definition_path),
                "Output": str(result.output_root),
                "Directories": str(result.directories),
                "Files": str(result.files),
                "Duration": format_duration(result.elapsed),
            },
            title="DirGen",
        )
    print_success(f"Directory generation completed: {result.output_root}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
