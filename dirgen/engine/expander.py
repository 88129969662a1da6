"""Token expansion and name validation for definition trees.

The expander makes a private deep copy of the definition tree and rewrites it
in a single iterative pass:

* ``$Key`` nodes are replaced, in place, by one sibling per value of ``Key``
  in the token table.  Each sibling gets its own copy of the token node's
  children.  Unknown keys expand to nothing.
* ``\\$Name`` becomes the literal name ``$Name``.
* Every final name is checked for characters that cannot appear in file
  names, and the children of every node are checked for duplicate names.
* Annotations (comments) are deleted as the cursor reaches them.

Names are resolved post-order: a node's children are complete before the
node itself is renamed or replicated, so collisions introduced by expansion
are caught when the parent is revisited, and a token node is copied only
after its own subtree is final.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from ..definition.models import Node, TokenTable
from ..errors import (
    ILLEGAL_NAME_CHARS,
    InvalidNameError,
    MissingAttributeError,
    ValidationError,
)


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

TOKEN_PREFIX = "$"
ESCAPE_MARKER = "\\"

_ILLEGAL_NAME_PATTERN = re.compile(f"[{re.escape(ILLEGAL_NAME_CHARS)}]")
_RESERVED_NAMES = frozenset({"", ".", ".."})
_ROOT_LABEL = "(root)"


# ---------------------------------------------------------------------------
# Name helpers
# ---------------------------------------------------------------------------

def is_token_reference(name: str) -> bool:
    """Return ``True`` if *name* refers to a token (``$Key``)."""
    return name.startswith(TOKEN_PREFIX)


def unescape_name(name: str) -> str:
    """Strip the escape marker from ``\\$Name``; other names are unchanged."""
    if name.startswith(ESCAPE_MARKER + TOKEN_PREFIX):
        return name[len(ESCAPE_MARKER):]
    return name


def validate_name(name: str) -> str:
    """Return *name* unchanged if it can be used as a file or folder name.

    Raises:
        InvalidNameError: If the name contains ``\\ / : * ? " < > |`` or is
            empty, ``.`` or ``..``.
    """
    if name in _RESERVED_NAMES:
        raise InvalidNameError(name, "is not a usable file or folder name")
    if _ILLEGAL_NAME_PATTERN.search(name):
        raise InvalidNameError(name)
    return name


# ---------------------------------------------------------------------------
# Cursor helpers
# ---------------------------------------------------------------------------

@dataclass
class _Frame:
    """Position of the cursor inside ``parent.children``."""

    parent: Node
    index: int


def _first_structural_child(node: Node) -> Optional[Node]:
    """Drop leading annotations and return the first real child, if any."""
    children = node.children
    while children and not isinstance(children[0], Node):
        del children[0]
    return children[0] if children else None


def _advance(stack: list[_Frame]) -> tuple[Node, bool]:
    """Move the cursor to the next sibling, or up to the parent.

    Returns the new current node and whether its children are all visited.
    """
    frame = stack[-1]
    siblings = frame.parent.children
    index = frame.index + 1
    while index < len(siblings) and not isinstance(siblings[index], Node):
        del siblings[index]
    if index < len(siblings):
        frame.index = index
        return siblings[index], False
    stack.pop()
    return frame.parent, True


def _check_unique_children(node: Node) -> None:
    seen: set[Optional[str]] = set()
    for child in node.children:
        if child.name in seen:
            parent_name = node.name if node.name is not None else _ROOT_LABEL
            raise ValidationError(parent_name, child.name or "")
        seen.add(child.name)


# ---------------------------------------------------------------------------
# Expander
# ---------------------------------------------------------------------------

class TreeExpander:
    """Expands ``$token`` nodes of a definition tree against a token table.

    The input tree is never modified; :meth:`expand` works on a deep copy.
    """

    def __init__(self, tokens: TokenTable) -> None:
        self.tokens = tokens

    def expand(self, tree: Node) -> Node:
        """Return the expanded, validated copy of *tree*.

        Raises:
            MissingAttributeError: A node has no name.
            InvalidNameError: A name or token value is not a legal file name.
            ValidationError: Two siblings end up with the same name.
        """
        root = tree.model_copy(deep=True)
        stack: list[_Frame] = []
        current = root
        children_visited = False

        while True:
            if children_visited:
                _check_unique_children(current)
                children_visited = False
            else:
                first = _first_structural_child(current)
                if first is not None:
                    stack.append(_Frame(current, 0))
                    current = first
                    continue

            if not stack:
                self._resolve_root(current)
                return root

            frame = stack[-1]
            frame.index = self._resolve(frame.parent, frame.index)
            current, children_visited = _advance(stack)

    # -- Name resolution ----------------------------------------------------

    def _resolve(self, parent: Node, index: int) -> int:
        """Finalize ``parent.children[index]``.

        Returns the index of the last node now occupying that slot; the cursor
        continues right after it.  When a token expands to nothing this is
        ``index - 1``.
        """
        node = parent.children[index]
        if node.name is None:
            raise MissingAttributeError(node.kind.value)

        if not is_token_reference(node.name):
            node.name = validate_name(unescape_name(node.name))
            return index

        values = self.tokens.get(node.name[len(TOKEN_PREFIX):])
        for offset, value in enumerate(values, start=1):
            validate_name(value)
            replica = Node(
                kind=node.kind,
                name=value,
                children=[child.model_copy(deep=True) for child in node.children],
            )
            parent.children.insert(index + offset, replica)
        del parent.children[index]
        return index + len(values) - 1

    def _resolve_root(self, root: Node) -> None:
        # The root folder name is optional and never a token reference.
        if root.name is None:
            return
        if is_token_reference(root.name):
            raise InvalidNameError(
                root.name, "is a token reference; the root folder name must be literal"
            )
        root.name = validate_name(unescape_name(root.name))


def expand(tree: Node, tokens: TokenTable) -> Node:
    """Expand *tree* against *tokens*; see :class:`TreeExpander`."""
    return TreeExpander(tokens).expand(tree)
