"""Refresh configuration — config file (YAML / JSON / TOML) + CLI overrides.

Config file format::

    # edmviews.yaml
    language: cs
    context_suffix: BloggingContext
    source: module
    output_dir: ./Generated
    strict_sections: false
    marker: "// ViewGenHash="
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from .artifact import DEFAULT_MARKER
from .errors import InvalidLanguageOption
from .models import DuplicatePolicy, LanguageOption

logger = logging.getLogger(__name__)


def parse_language(token: str | None) -> LanguageOption:
    """Parse ``cs`` / ``vb`` (any case).  Empty means C#."""
    if token is None or token == "":
        return LanguageOption.CSHARP
    if isinstance(token, LanguageOption):
        return token
    try:
        return LanguageOption(token.lower())
    except ValueError:
        raise InvalidLanguageOption(token) from None


# ---------------------------------------------------------------------------
# Model
# ---------------------------------------------------------------------------

class RefreshConfig(BaseModel):
    """Settings for a refresh run."""

    language: LanguageOption = LanguageOption.CSHARP
    context_suffix: str = "Context"
    source: str = "module"
    output_dir: Optional[Path] = None
    strict_sections: bool = False
    marker: str = Field(default=DEFAULT_MARKER, min_length=1)
    init_kwargs: dict[str, Any] = Field(default_factory=dict)

    @field_validator("language", mode="before")
    @classmethod
    def _parse_language(cls, value: Any) -> LanguageOption:
        return parse_language(value)

    @field_validator("source")
    @classmethod
    def _check_source(cls, value: str) -> str:
        value = value.lower()
        if value not in ("module", "file"):
            raise ValueError("source must be 'module' or 'file'")
        return value

    @property
    def duplicate_policy(self) -> DuplicatePolicy:
        if self.strict_sections:
            return DuplicatePolicy.STRICT_UNIQUE
        return DuplicatePolicy.FIRST_MATCH


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------

def _read_config_file(path: Path) -> dict[str, Any]:
    raw = path.read_text(encoding="utf-8")

    if path.suffix in (".yaml", ".yml"):
        import yaml

        return yaml.safe_load(raw) or {}
    if path.suffix == ".json":
        return json.loads(raw)
    if path.suffix == ".toml":
        import tomllib

        data = tomllib.loads(raw)
        # allow a [tool.edmviews] table inside pyproject.toml
        return data.get("tool", {}).get("edmviews", data)

    # Try JSON first, then YAML
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        import yaml

        return yaml.safe_load(raw) or {}


def load_config(config_path: str | Path | None = None, **overrides: Any) -> RefreshConfig:
    """Load a ``RefreshConfig``; keyword overrides that are not None win."""
    data: dict[str, Any] = {}

    if config_path:
        path = Path(config_path).expanduser().resolve()
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        data = _read_config_file(path)
        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping")
        logger.debug("Loaded config from %s: %s", path, sorted(data))

    for key, value in overrides.items():
        if value is not None:
            data[key] = value

    return RefreshConfig(**data)
