"""Linear enter/exit traversal of an expanded tree."""

from __future__ import annotations

from enum import Enum
from typing import Iterator, NamedTuple

from ..definition.models import Node, NodeKind


class Step(str, Enum):
    ENTER = "enter"
    EXIT = "exit"


class WalkStep(NamedTuple):
    step: Step
    node: Node


def descends_into(node: Node) -> bool:
    """Return ``True`` for folders whose children the walk will visit."""
    return node.kind is NodeKind.FOLDER and bool(node.children)


def walk(tree: Node) -> Iterator[WalkStep]:
    """Yield an ENTER step for every node below *tree*, in document order.

    Folders with children also get an EXIT step after their last descendant.
    The root itself is not reported, and annotations are skipped.
    """
    stack = [(tree, iter(tree.children))]
    while stack:
        node, children = stack[-1]
        child = next(children, None)
        if child is None:
            stack.pop()
            if stack:
                yield WalkStep(Step.EXIT, node)
            continue
        if not isinstance(child, Node):
            continue
        yield WalkStep(Step.ENTER, child)
        if descends_into(child):
            stack.append((child, iter(child.children)))
