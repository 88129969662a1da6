"""Unit tests for the tree expander (dirgen.engine.expander).

Tests cover:
- Token expansion (known, unknown, duplicates, nested, file tokens)
- Independence of copied subtrees and immutability of the input
- Sibling collision detection
- Escaped names and name legality
- Annotation stripping and the token-free round trip
"""

from __future__ import annotations

import pytest

from dirgen.definition.models import Annotation, Node, NodeKind, TokenTable
from dirgen.engine.expander import (
    TreeExpander,
    expand,
    is_token_reference,
    unescape_name,
    validate_name,
)
from dirgen.errors import InvalidNameError, MissingAttributeError, ValidationError
from tree_helpers import child_names, find

pytestmark = pytest.mark.unit


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _root(*children, name=None) -> Node:
    return Node(kind=NodeKind.ROOT, name=name, children=list(children))


def _folder(name, *children) -> Node:
    return Node(kind=NodeKind.FOLDER, name=name, children=list(children))


def _file(name) -> Node:
    return Node(kind=NodeKind.FILE, name=name)


def _note(text="comment") -> Annotation:
    return Annotation(text=text)


def _tokens(**values) -> TokenTable:
    return TokenTable.from_mapping(values)


# ---------------------------------------------------------------------------
# Name helpers
# ---------------------------------------------------------------------------


class TestNameHelpers:
    def test_token_reference(self):
        assert is_token_reference("$Color")
        assert not is_token_reference("Color")
        assert not is_token_reference("\\$Color")

    def test_unescape_strips_marker_before_dollar(self):
        assert unescape_name("\\$Color") == "$Color"

    def test_unescape_leaves_other_names(self):
        assert unescape_name("Color") == "Color"
        assert unescape_name("a$b") == "a$b"

    @pytest.mark.parametrize("name", ["a\\b", "a/b", "a:b", "a*b", "a?b", 'a"b', "a<b", "a>b", "a|b"])
    def test_illegal_characters_rejected(self, name):
        with pytest.raises(InvalidNameError) as exc_info:
            validate_name(name)
        assert exc_info.value.value == name

    @pytest.mark.parametrize("name", ["", ".", ".."])
    def test_reserved_names_rejected(self, name):
        with pytest.raises(InvalidNameError):
            validate_name(name)

    def test_legal_name_returned(self):
        assert validate_name("Images (2024) $v1.0") == "Images (2024) $v1.0"


# ---------------------------------------------------------------------------
# Token expansion
# ---------------------------------------------------------------------------


class TestTokenExpansion:
    def test_scenario_folders_with_color_token(self):
        tree = _root(
            _folder("A"),
            _folder("B", _folder("$Color", _folder("images"), _file("logo.png"))),
        )

        result = expand(tree, _tokens(Color=["Red", "Green"]))

        assert child_names(result) == ["A", "B"]
        assert child_names(find(result, "B")) == ["Red", "Green"]
        for color in ("Red", "Green"):
            assert child_names(find(result, "B", color)) == ["images", "logo.png"]
            assert find(result, "B", color).kind is NodeKind.FOLDER

    def test_unknown_token_removed_without_error(self):
        tree = _root(_folder("A"), _folder("$Missing", _folder("x")), _folder("C"))

        result = expand(tree, _tokens(Color=["Red"]))

        assert child_names(result) == ["A", "C"]

    def test_unknown_token_as_only_child(self):
        tree = _root(_folder("A", _folder("$Missing")))

        result = expand(tree, TokenTable())

        assert find(result, "A").children == []

    def test_unknown_token_as_last_child(self):
        tree = _root(_folder("A"), _folder("$Missing"))

        result = expand(tree, TokenTable())

        assert child_names(result) == ["A"]

    def test_token_with_empty_value_list(self):
        tree = _root(_folder("$Empty"), _folder("Kept"))

        result = expand(tree, _tokens(Empty=[]))

        assert child_names(result) == ["Kept"]

    def test_values_inserted_in_table_order_before_following_siblings(self):
        tree = _root(_folder("First"), _folder("$Size"), _folder("Last"))

        result = expand(tree, _tokens(Size=["S", "M", "L"]))

        assert child_names(result) == ["First", "S", "M", "L", "Last"]

    def test_duplicate_values_collapse(self):
        tree = _root(_folder("$Size"))

        result = expand(tree, _tokens(Size=["S", "M", "S"]))

        assert child_names(result) == ["S", "M"]

    def test_file_token_keeps_file_kind(self):
        tree = _root(_folder("docs", _file("$Doc")))

        result = expand(tree, _tokens(Doc=["readme.txt", "logo.png"]))

        docs = find(result, "docs")
        assert child_names(docs) == ["readme.txt", "logo.png"]
        assert all(child.kind is NodeKind.FILE for child in docs.children)

    def test_nested_tokens_expand_as_cross_product(self):
        tree = _root(_folder("$Product", _folder("$Lang", _file("readme.txt"))))

        result = expand(tree, _tokens(Product=["Alpha", "Beta"], Lang=["en", "ja"]))

        assert child_names(result) == ["Alpha", "Beta"]
        for product in ("Alpha", "Beta"):
            assert child_names(find(result, product)) == ["en", "ja"]
            for lang in ("en", "ja"):
                assert child_names(find(result, product, lang)) == ["readme.txt"]

    def test_token_value_starting_with_dollar_is_not_reexpanded(self):
        tree = _root(_folder("$Key"))

        result = expand(tree, _tokens(Key=["$Other"], Other=["Never"]))

        assert child_names(result) == ["$Other"]

    def test_each_value_gets_independent_subtree(self):
        tree = _root(_folder("$Color", _folder("images", _folder("raw"))))

        result = expand(tree, _tokens(Color=["Red", "Green"]))
        red_images = find(result, "Red", "images")
        red_images.name = "renamed"
        red_images.children.append(_folder("extra"))

        green_images = find(result, "Green", "images")
        assert green_images.name == "images"
        assert child_names(green_images) == ["raw"]
        assert red_images is not green_images

    def test_input_tree_is_not_modified(self):
        tree = _root(
            _note(),
            _folder("$Color", _folder("images")),
            _folder("\\$Literal"),
        )
        before = tree.model_dump()

        expand(tree, _tokens(Color=["Red"]))

        assert tree.model_dump() == before

    def test_expander_class_is_reusable(self):
        expander = TreeExpander(_tokens(Color=["Red"]))

        first = expander.expand(_root(_folder("$Color")))
        second = expander.expand(_root(_folder("x", _folder("$Color"))))

        assert child_names(first) == ["Red"]
        assert child_names(find(second, "x")) == ["Red"]


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class TestValidation:
    def test_collision_introduced_by_expansion(self):
        tree = _root(_folder("B", _folder("Red"), _folder("$Color")))

        with pytest.raises(ValidationError) as exc_info:
            expand(tree, _tokens(Color=["Red", "Green"]))

        assert exc_info.value.parent_name == "B"
        assert exc_info.value.duplicate == "Red"

    def test_plain_duplicate_siblings(self):
        tree = _root(_folder("Shared"), _folder("Shared"), name="Project")

        with pytest.raises(ValidationError) as exc_info:
            expand(tree, TokenTable())

        assert exc_info.value.parent_name == "Project"

    def test_collision_under_unnamed_root(self):
        tree = _root(_file("a.txt"), _file("a.txt"))

        with pytest.raises(ValidationError) as exc_info:
            expand(tree, TokenTable())

        assert exc_info.value.parent_name == "(root)"

    def test_collision_between_two_tokens(self):
        tree = _root(_folder("$A"), _folder("$B"))

        with pytest.raises(ValidationError):
            expand(tree, _tokens(A=["Shared"], B=["Other", "Shared"]))

    def test_same_name_under_different_parents_is_allowed(self):
        tree = _root(_folder("A", _folder("images")), _folder("B", _folder("images")))

        result = expand(tree, TokenTable())

        assert find(result, "A", "images") is not None
        assert find(result, "B", "images") is not None

    def test_names_are_case_sensitive(self):
        tree = _root(_folder("Images"), _folder("images"))

        result = expand(tree, TokenTable())

        assert child_names(result) == ["Images", "images"]

    def test_illegal_token_value(self):
        tree = _root(_folder("$Color"))

        with pytest.raises(InvalidNameError) as exc_info:
            expand(tree, _tokens(Color=["Red", "Blue/Green"]))

        assert exc_info.value.value == "Blue/Green"

    def test_illegal_plain_name(self):
        tree = _root(_folder("A", _folder("what?")))

        with pytest.raises(InvalidNameError) as exc_info:
            expand(tree, TokenTable())

        assert exc_info.value.value == "what?"

    def test_missing_name(self):
        tree = _root(_folder("A", Node(kind=NodeKind.FILE)))

        with pytest.raises(MissingAttributeError) as exc_info:
            expand(tree, TokenTable())

        assert exc_info.value.node_kind == "file"

    def test_root_name_token_reference_rejected(self):
        with pytest.raises(InvalidNameError):
            expand(_root(_folder("A"), name="$Project"), _tokens(Project=["P"]))

    def test_root_name_validated(self):
        with pytest.raises(InvalidNameError):
            expand(_root(_folder("A"), name="a:b"), TokenTable())

    def test_root_without_name_is_allowed(self):
        result = expand(_root(_folder("A")), TokenTable())

        assert result.name is None


# ---------------------------------------------------------------------------
# Escapes
# ---------------------------------------------------------------------------


class TestEscapes:
    def test_escaped_name_survives_as_literal(self):
        tree = _root(_folder("\\$Color", _folder("x")))

        result = expand(tree, _tokens(Color=["Red"]))

        assert child_names(result) == ["$Color"]
        assert child_names(find(result, "$Color")) == ["x"]

    def test_escaped_file_name(self):
        tree = _root(_file("\\$price.txt"))

        result = expand(tree, TokenTable())

        assert child_names(result) == ["$price.txt"]

    def test_escaped_root_name(self):
        result = expand(_root(_folder("A"), name="\\$Root"), TokenTable())

        assert result.name == "$Root"

    def test_escaped_name_collides_with_token_value(self):
        tree = _root(_folder("\\$X"), _folder("$Key"))

        with pytest.raises(ValidationError):
            expand(tree, _tokens(Key=["$X"]))


# ---------------------------------------------------------------------------
# Annotations & round trip
# ---------------------------------------------------------------------------


class TestAnnotations:
    def test_annotations_removed_at_every_position(self):
        tree = _root(
            _note("leading"),
            _folder("A", _note(), _folder("inner"), _note(), _note()),
            _note("middle"),
            _folder("B", _note("only child")),
            _note("trailing"),
        )

        result = expand(tree, TokenTable())

        assert result.children == [
            _folder("A", _folder("inner")),
            _folder("B"),
        ]

    def test_annotations_under_token_node_not_copied(self):
        tree = _root(_folder("$Color", _note(), _file("logo.png"), _note()))

        result = expand(tree, _tokens(Color=["Red", "Green"]))

        for color in ("Red", "Green"):
            assert find(result, color).children == [_file("logo.png")]

    def test_annotation_between_token_and_sibling(self):
        tree = _root(_folder("$Color"), _note(), _folder("Z"))

        result = expand(tree, _tokens(Color=["Red"]))

        assert child_names(result) == ["Red", "Z"]

    def test_token_free_tree_round_trips(self):
        tree = _root(
            _folder("A", _folder("B", _file("logo.png")), _folder("C")),
            _note(),
            _folder("D"),
            _file("readme.txt"),
            name="Project",
        )
        expected = _root(
            _folder("A", _folder("B", _file("logo.png")), _folder("C")),
            _folder("D"),
            _file("readme.txt"),
            name="Project",
        )

        result = expand(tree, _tokens(Unused=["x"]))

        assert result == expected

    def test_deep_tree(self):
        leaf = _folder("leaf")
        node = leaf
        for depth in range(40):
            node = _folder(f"level{depth}", node)
        tree = _root(node)

        result = expand(tree, TokenTable())

        assert result == tree
