"""Lookup helpers for asserting on definition trees in tests."""

from __future__ import annotations

from typing import Optional

from dirgen.definition.models import Node


def structural_children(node: Node) -> list[Node]:
    """Children of *node* that are real nodes, in order."""
    return [child for child in node.children if isinstance(child, Node)]


def child_names(node: Node) -> list[Optional[str]]:
    return [child.name for child in structural_children(node)]


def find(node: Node, *names: str) -> Optional[Node]:
    """Follow a chain of child names, returning ``None`` when one is missing.

    ``find(tree, "B", "Red")`` returns the ``Red`` child of ``B``.
    """
    for name in names:
        node = next((c for c in structural_children(node) if c.name == name), None)
        if node is None:
            return None
    return node
