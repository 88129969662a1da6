"""DirGen configuration.

Run-level settings that do not belong in a definition file.  Uses a Pydantic
v2 model so values are validated at construction time and can be
serialised to/from JSON or environment variables without boiler-plate.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationError

from dirgen.errors import ConfigError

_TRUE_VALUES = {"1", "true", "yes", "on"}


class GeneratorConfig(BaseModel):
    """Settings for one generation run.

    Instances are typically created once by the CLI entry point and handed
    to :class:`dirgen.pipeline.DirectoryGenerator`.
    """

    target_path: Optional[Path] = Field(
        default=None,
        description="Output location; overrides the definition's target_path",
    )
    quiet: bool = Field(default=False, description="Suppress progress output")
    show_summary: bool = Field(
        default=True, description="Print a summary table after a successful run"
    )

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    def resolve_target(self, definition_target: Path) -> Path:
        """Return the output location for a run.

        The configured ``target_path`` wins over the one from the definition.
        """
        if self.target_path is not None:
            return self.target_path.expanduser()
        return definition_target

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path) -> Path:
        """Persist the configuration to a JSON file.

        Returns:
            The path where the file was written.

        Raises:
            ConfigError: If the file cannot be written.
        """
        target = Path(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"cannot write configuration ({exc.strerror or exc})", target) from exc
        return target

    @classmethod
    def load(cls, path: Path) -> "GeneratorConfig":
        """Load a configuration written by :meth:`save` (or by hand).

        Raises:
            ConfigError: If the file cannot be read or does not hold a valid
                configuration.
        """
        source = Path(path)
        try:
            raw = source.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"cannot read configuration ({exc.strerror or exc})", source) from exc
        try:
            return cls.model_validate_json(raw)
        except ValidationError as exc:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or 'document'}: {err['msg']}"
                for err in exc.errors()
            )
            raise ConfigError(f"invalid configuration ({problems})", source) from None

    @classmethod
    def from_env(cls) -> "GeneratorConfig":
        """Build a ``GeneratorConfig`` from environment variables.

        Recognised variables (all optional):
            DIRGEN_TARGET_PATH, DIRGEN_QUIET, DIRGEN_SHOW_SUMMARY.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("DIRGEN_TARGET_PATH"):
            kwargs["target_path"] = Path(os.environ["DIRGEN_TARGET_PATH"])
        if os.environ.get("DIRGEN_QUIET"):
            kwargs["quiet"] = os.environ["DIRGEN_QUIET"].strip().lower() in _TRUE_VALUES
        if os.environ.get("DIRGEN_SHOW_SUMMARY"):
            kwargs["show_summary"] = (
                os.environ["DIRGEN_SHOW_SUMMARY"].strip().lower() in _TRUE_VALUES
            )
        return cls(**kwargs)
