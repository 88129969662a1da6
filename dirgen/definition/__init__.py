"""DirGen definition model and loader.

Usage::

    from dirgen.definition import load_definition

    definition = load_definition("layout.xml")
    print(definition.target_path)
    print(definition.tokens.get("Product"))
"""

from dirgen.definition.loader import load_definition, parse_directory, parse_tokens, read_document
from dirgen.definition.models import (
    Annotation,
    Definition,
    Node,
    NodeKind,
    TokenTable,
)

__all__ = [
    "load_definition",
    "read_document",
    "parse_directory",
    "parse_tokens",
    "Annotation",
    "Definition",
    "Node",
    "NodeKind",
    "TokenTable",
]
