"""Jinja2 rendering of skeleton definition files.

Provides the TemplateRenderer class, which loads Jinja2 templates from the
``dirgen/scaffolder/templates/`` directory, and :func:`write_template`, which
writes a commented starter definition that documents every element of the
format.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, select_autoescape

from ..errors import AlreadyExistsError, DefinitionError


# ---------------------------------------------------------------------------
# Template directory discovery
# ---------------------------------------------------------------------------

_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"

# Output suffix -> template file.  No suffix means XML.
_TEMPLATE_BY_SUFFIX: dict[str, str] = {
    "": "definition.xml.j2",
    ".xml": "definition.xml.j2",
    ".yaml": "definition.yaml.j2",
    ".yml": "definition.yaml.j2",
}

SAMPLE_TOKEN_VALUES = ("Apple", "Banana", "Orange")


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders the Jinja2 templates shipped with DirGen."""

    def __init__(self, template_dir: str | Path | None = None) -> None:
        if template_dir is None:
            template_dir = _DEFAULT_TEMPLATE_DIR
        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape([]),
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["quote"] = _quote_filter

    def render(self, template_path: str, context: dict[str, Any]) -> str:
        """Render a single template with the provided context.

        Args:
            template_path: Path relative to the template directory (e.g.
                ``"definition.xml.j2"``).
            context: Dictionary of variables available inside the template.
        """
        template = self.env.get_template(template_path)
        return template.render(**context)

    def render_to_file(
        self,
        template_path: str,
        output_path: str | Path,
        context: dict[str, Any],
    ) -> Path:
        """Render a template and write the result to *output_path*.

        Parent directories are created automatically.
        """
        content = self.render(template_path, context)
        out = Path(output_path)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(content, encoding="utf-8")
        return out


# ---------------------------------------------------------------------------
# Skeleton definition
# ---------------------------------------------------------------------------


def template_for(output_path: str | Path) -> str:
    """Return the template name used for *output_path*'s suffix.

    Raises:
        DefinitionError: If the suffix is not ``.xml``, ``.yaml`` or ``.yml``.
    """
    suffix = Path(output_path).suffix.lower()
    try:
        return _TEMPLATE_BY_SUFFIX[suffix]
    except KeyError:
        raise DefinitionError(
            f"cannot write a template with suffix '{suffix}' (use .xml, .yaml or .yml)",
            output_path,
        ) from None


def build_template_context(output_path: str | Path) -> dict[str, Any]:
    """Build the context for a skeleton definition written to *output_path*.

    The sample output location is named after the file, and the sample
    ``$File`` token copies the definition file itself.
    """
    path = Path(output_path)
    return {
        "target_path": path.stem,
        "file_name": path.name,
        "token_values": list(SAMPLE_TOKEN_VALUES),
    }


def write_template(
    output_path: str | Path, renderer: TemplateRenderer | None = None
) -> Path:
    """Write a commented skeleton definition file.

    Args:
        output_path: Destination file; its suffix selects XML or YAML.
        renderer: Optional renderer (defaults to the bundled templates).

    Returns:
        The path that was written.

    Raises:
        AlreadyExistsError: If *output_path* already exists.
        DefinitionError: If the suffix is not supported.
    """
    out = Path(output_path)
    template_name = template_for(out)
    if out.exists():
        raise AlreadyExistsError(out, "Choose another file name.")
    renderer = renderer or TemplateRenderer()
    return renderer.render_to_file(template_name, out, build_template_context(out))


# ---------------------------------------------------------------------------
# Jinja2 custom filters
# ---------------------------------------------------------------------------

def _quote_filter(value: Any) -> str:
    """Render *value* as a double-quoted scalar (valid JSON and YAML)."""
    return json.dumps(str(value))
