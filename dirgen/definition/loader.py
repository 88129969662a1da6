"""Definition file reader for DirGen.

Turns an XML, YAML or JSON definition file into the :mod:`models` tree.  The
loader only checks the *shape* of the document; names, tokens and sibling
collisions are the expander's business.

XML layout::

    <dirgen>
      <directory target_path="out" name="Products">
        <folder name="$Product">
          <folder name="images" />
          <file name="logo.png" />
        </folder>
      </directory>
      <tokens>
        <token key="Product">
          <token_value value="Alpha" />
          <token_value value="Beta" />
        </token>
      </tokens>
    </dirgen>

YAML / JSON layout::

    directory:
      target_path: out
      name: Products
      children:
        - folder: $Product
          children:
            - folder: images
            - file: logo.png
    tokens:
      Product: [Alpha, Beta]
"""

from __future__ import annotations

import json
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Any, Union

import yaml

from ..errors import DefinitionError
from .models import Annotation, Definition, Node, NodeKind, TokenTable


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DIRECTORY_TAG = "directory"
TOKENS_TAG = "tokens"
TOKEN_TAG = "token"
TOKEN_VALUE_TAG = "token_value"

_XML_SUFFIXES = (".xml",)
_YAML_SUFFIXES = (".yaml", ".yml")
_JSON_SUFFIXES = (".json",)

_CHILD_KINDS = {NodeKind.FOLDER.value: NodeKind.FOLDER, NodeKind.FILE.value: NodeKind.FILE}

RawDocument = Union[ET.Element, dict[str, Any]]


# ---------------------------------------------------------------------------
# Reading
# ---------------------------------------------------------------------------

def detect_format(path: str | Path) -> str:
    """Return ``"xml"``, ``"yaml"`` or ``"json"`` based on the file suffix.

    Unknown suffixes are read as XML.
    """
    suffix = Path(path).suffix.lower()
    if suffix in _YAML_SUFFIXES:
        return "yaml"
    if suffix in _JSON_SUFFIXES:
        return "json"
    return "xml"


def read_document(path: str | Path) -> RawDocument:
    """Read and syntax-check a definition file.

    Returns:
        The XML root element, or the decoded mapping for YAML/JSON files.

    Raises:
        DefinitionError: If the file is missing, unreadable or malformed.
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise DefinitionError("definition file not found", file_path)

    fmt = detect_format(file_path)
    try:
        if fmt == "xml":
            parser = ET.XMLParser(target=ET.TreeBuilder(insert_comments=True))
            return ET.parse(file_path, parser=parser).getroot()
        text = file_path.read_text(encoding="utf-8")
        data = yaml.safe_load(text) if fmt == "yaml" else json.loads(text)
    except ET.ParseError as exc:
        raise DefinitionError(f"invalid XML: {exc}", file_path) from exc
    except yaml.YAMLError as exc:
        raise DefinitionError(f"invalid YAML: {exc}", file_path) from exc
    except json.JSONDecodeError as exc:
        raise DefinitionError(f"invalid JSON: {exc}", file_path) from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise DefinitionError(f"cannot read file: {exc}", file_path) from exc

    if not isinstance(data, dict):
        raise DefinitionError("top level must be a mapping", file_path)
    return data


# ---------------------------------------------------------------------------
# Directory tree
# ---------------------------------------------------------------------------

def parse_directory(document: RawDocument, path: str | Path | None = None) -> Node:
    """Extract the root ``directory`` node from a raw document."""
    if isinstance(document, ET.Element):
        element = document.find(DIRECTORY_TAG)
        if element is None:
            raise DefinitionError(f"missing <{DIRECTORY_TAG}> element", path)
        return Node(
            kind=NodeKind.ROOT,
            name=element.get("name"),
            target_path=element.get("target_path"),
            children=_xml_children(element, path),
        )

    raw = document.get(DIRECTORY_TAG)
    if not isinstance(raw, dict):
        raise DefinitionError(f"missing '{DIRECTORY_TAG}' mapping", path)
    target = raw.get("target_path")
    return Node(
        kind=NodeKind.ROOT,
        name=_optional_str(raw.get("name"), "directory name", path),
        target_path=_optional_str(target, "target_path", path),
        children=_mapping_children(raw.get("children"), path),
    )


def _xml_children(element: ET.Element, path: str | Path | None) -> list[Node | Annotation]:
    children: list[Node | Annotation] = []
    for child in element:
        if child.tag is ET.Comment:
            children.append(Annotation(text=(child.text or "").strip()))
            continue
        kind = _CHILD_KINDS.get(child.tag)
        if kind is None:
            raise DefinitionError(f"unknown element <{child.tag}>", path)
        if kind is NodeKind.FILE and any(c.tag is not ET.Comment for c in child):
            raise DefinitionError(f"<file name=\"{child.get('name')}\"> cannot have children", path)
        children.append(
            Node(kind=kind, name=child.get("name"), children=_xml_children(child, path))
        )
    return children


def _mapping_children(raw: Any, path: str | Path | None) -> list[Node | Annotation]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise DefinitionError("'children' must be a list", path)

    children: list[Node | Annotation] = []
    for item in raw:
        if not isinstance(item, dict):
            raise DefinitionError(f"child entries must be mappings, got {item!r}", path)
        kinds = [k for k in item if k in _CHILD_KINDS]
        if len(kinds) != 1:
            raise DefinitionError(
                f"child entry must have exactly one of 'folder' or 'file': {item!r}", path
            )
        kind = _CHILD_KINDS[kinds[0]]
        if kind is NodeKind.FILE and item.get("children"):
            raise DefinitionError(f"file '{item['file']}' cannot have children", path)
        children.append(
            Node(
                kind=kind,
                name=_optional_str(item[kinds[0]], f"{kinds[0]} name", path),
                children=_mapping_children(item.get("children"), path),
            )
        )
    return children


def _optional_str(value: Any, what: str, path: str | Path | None) -> str | None:
    """Return *value* unchanged if it is text or missing.

    Unquoted YAML scalars such as ``01`` or ``yes`` load as numbers and
    booleans; they are rejected rather than converted.
    """
    if value is None or isinstance(value, str):
        return value
    raise DefinitionError(
        f"{what} {value!r} is not text; quote it in the definition file", path
    )


# ---------------------------------------------------------------------------
# Tokens
# ---------------------------------------------------------------------------

def parse_tokens(document: RawDocument, path: str | Path | None = None) -> TokenTable:
    """Extract the token table; a document without tokens yields an empty table."""
    mapping: dict[str, list[str]] = {}

    if isinstance(document, ET.Element):
        tokens = document.find(TOKENS_TAG)
        if tokens is None:
            return TokenTable()
        for token in tokens.findall(TOKEN_TAG):
            key = token.get("key")
            if key is None:
                raise DefinitionError(f"<{TOKEN_TAG}> without a 'key' attribute", path)
            if key in mapping:
                raise DefinitionError(f"token '{key}' is defined more than once", path)
            values: list[str] = []
            for item in token.findall(TOKEN_VALUE_TAG):
                value = item.get("value")
                if value is None:
                    raise DefinitionError(
                        f"<{TOKEN_VALUE_TAG}> of token '{key}' has no 'value' attribute", path
                    )
                values.append(value)
            mapping[key] = values
        return TokenTable.from_mapping(mapping)

    raw = document.get(TOKENS_TAG)
    if raw is None:
        return TokenTable()
    if not isinstance(raw, dict):
        raise DefinitionError(f"'{TOKENS_TAG}' must be a mapping of key to values", path)
    for key, values in raw.items():
        if values is None:
            values = []
        elif not isinstance(values, list):
            values = [values]
        if any(v is None for v in values):
            raise DefinitionError(f"token '{key}' has an empty value", path)
        if not isinstance(key, str):
            raise DefinitionError(f"token key {key!r} is not text; quote it in the definition file", path)
        mapping[key] = [_optional_str(v, f"value of token '{key}'", path) for v in values]
    return TokenTable.from_mapping(mapping)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def load_definition(path: str | Path) -> Definition:
    """Read a definition file into a :class:`Definition`.

    Args:
        path: XML, YAML or JSON definition file.

    Raises:
        DefinitionError: If the file is missing or malformed.
    """
    source = Path(path).resolve()
    document = read_document(source)
    return Definition(
        root=parse_directory(document, source),
        tokens=parse_tokens(document, source),
        source_path=source,
    )
