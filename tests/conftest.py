"""Shared pytest fixtures for the DirGen test suite.

Provides reusable fixtures for:
- A definition directory holding source files to copy
- An empty output directory
- Writing definition files (XML / YAML / JSON) on the fly
- A progress-event recorder
"""

from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Callable

import pytest

from dirgen.engine.events import ProgressEvent


# ---------------------------------------------------------------------------
# Paths & Directories
# ---------------------------------------------------------------------------

@pytest.fixture
def definition_dir(tmp_path: Path) -> Path:
    """Directory that holds definition files and the sources they copy."""
    defs = tmp_path / "defs"
    defs.mkdir()
    (defs / "logo.png").write_bytes(b"\x89PNG\r\n\x1a\nfake-image")
    (defs / "readme.txt").write_text("Read me first.\n", encoding="utf-8")
    yield defs


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    """Empty output directory."""
    out = tmp_path / "out"
    out.mkdir()
    yield out


# ---------------------------------------------------------------------------
# Definition files
# ---------------------------------------------------------------------------

@pytest.fixture
def write_definition(definition_dir: Path) -> Callable[[str, str], Path]:
    """Factory writing a dedented definition file into ``definition_dir``."""

    def _write(filename: str, content: str) -> Path:
        path = definition_dir / filename
        path.write_text(textwrap.dedent(content).lstrip(), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def scenario_xml(output_dir: Path) -> str:
    """Folders A and B; B holds ``$Color`` (Red, Green) with a sub-folder and a file."""
    return f"""
        <?xml version="1.0" encoding="utf-8"?>
        <dirgen>
          <!-- per-colour asset tree -->
          <directory target_path="{output_dir}" name="Products">
            <folder name="A" />
            <folder name="B">
              <folder name="$Color">
                <folder name="images" />
                <file name="logo.png" />
              </folder>
            </folder>
          </directory>
          <tokens>
            <token key="Color">
              <token_value value="Red" />
              <token_value value="Green" />
            </token>
          </tokens>
        </dirgen>
    """


@pytest.fixture
def scenario_definition(write_definition, scenario_xml: str) -> Path:
    """``scenario_xml`` written to ``defs/products.xml``."""
    return write_definition("products.xml", scenario_xml)


# ---------------------------------------------------------------------------
# Progress events
# ---------------------------------------------------------------------------

@pytest.fixture
def recorded_events() -> list[ProgressEvent]:
    """List that collects events when its ``append`` is used as a sink."""
    return []
