"""DirGen tree-expansion engine.

Expansion is pure; materialization is the only part that touches disk::

    from dirgen.definition import load_definition
    from dirgen.engine import expand, materialize

    definition = load_definition("layout.xml")
    tree = expand(definition.root, definition.tokens)
    output_root = materialize(tree, definition.target_path, definition.definition_dir)
"""

from dirgen.engine.events import ProgressEvent, ProgressSink, Stage
from dirgen.engine.expander import TreeExpander, expand, unescape_name, validate_name
from dirgen.engine.materializer import FilesystemMaterializer, materialize
from dirgen.engine.walker import Step, WalkStep, walk

__all__ = [
    "ProgressEvent",
    "ProgressSink",
    "Stage",
    "TreeExpander",
    "expand",
    "unescape_name",
    "validate_name",
    "FilesystemMaterializer",
    "materialize",
    "Step",
    "WalkStep",
    "walk",
]
