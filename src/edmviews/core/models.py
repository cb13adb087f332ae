"""Pydantic models shared by the refresh pipeline.

These models describe the pieces that flow between the namespace
resolver, the splitter, the schema loader, the generator and the
artifact store.  The orchestrator owns one set of them per run.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any, Optional
from xml.etree.ElementTree import Element

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class SchemaVersion(str, Enum):
    """Supported schema generations."""
    V1 = "1.0"
    V2 = "2.0"
    V3 = "3.0"


class SectionKind(str, Enum):
    """The four kinds of section a composite document is made of."""
    CONCEPTUAL = "conceptual"
    STORAGE = "storage"
    MAPPING = "mapping"
    COMPOSITE = "composite"

    @property
    def local_name(self) -> str:
        """Unqualified element name that roots this kind of section."""
        return _LOCAL_NAMES[self]


_LOCAL_NAMES = {
    SectionKind.CONCEPTUAL: "Schema",
    SectionKind.STORAGE: "Schema",
    SectionKind.MAPPING: "Mapping",
    SectionKind.COMPOSITE: "Edmx",
}


class Severity(str, Enum):
    WARNING = "warning"
    ERROR = "error"


class LanguageOption(str, Enum):
    """Target language of the generated views file."""
    CSHARP = "cs"
    VB = "vb"

    @property
    def extension(self) -> str:
        return f".{self.value}"


class StampState(str, Enum):
    """Outcome of reading the stamp line of an artifact."""
    FOUND = "found"
    EMPTY = "empty"
    NOT_FOUND = "not_found"


class RefreshAction(str, Enum):
    TOUCHED = "touched"
    REGENERATED = "regenerated"
    FAILED = "failed"


class DuplicatePolicy(str, Enum):
    """How the splitter treats a section that occurs more than once."""
    FIRST_MATCH = "first_match"
    STRICT_UNIQUE = "strict_unique"


# ---------------------------------------------------------------------------
# Diagnostics
# ---------------------------------------------------------------------------

class Diagnostic(BaseModel):
    """A warning or error produced while loading or generating."""
    severity: Severity
    message: str
    location: Optional[str] = None

    @property
    def is_error(self) -> bool:
        return self.severity == Severity.ERROR

    @classmethod
    def error(cls, message: str, **kwargs: Any) -> Diagnostic:
        return cls(severity=Severity.ERROR, message=message, **kwargs)

    @classmethod
    def warning(cls, message: str, **kwargs: Any) -> Diagnostic:
        return cls(severity=Severity.WARNING, message=message, **kwargs)

    def __str__(self) -> str:
        parts = []
        if self.location:
            parts.append(f"{self.location}:")
        parts.append(f"{self.severity.value}:")
        parts.append(self.message)
        return " ".join(parts)


# ---------------------------------------------------------------------------
# Sections & validated model
# ---------------------------------------------------------------------------

class SplitSections(BaseModel):
    """The three sections extracted from a composite document."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    version: SchemaVersion
    conceptual: Element
    storage: Element
    mapping: Element
    warnings: list[Diagnostic] = Field(default_factory=list)


class EntitySetMapping(BaseModel):
    """One ``EntitySetMapping`` of the mapping section."""
    entity_set: str
    store_entity_set: str = ""


class ValidatedModel(BaseModel):
    """The three sections after a successful load.

    Built only by a schema loader; the generator consumes it.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    version: SchemaVersion
    conceptual: Element
    storage: Element
    mapping: Element
    conceptual_container: str = ""
    storage_container: str = ""
    entity_sets: list[str] = Field(default_factory=list)
    store_entity_sets: list[str] = Field(default_factory=list)
    set_mappings: list[EntitySetMapping] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Model source
# ---------------------------------------------------------------------------

class ModelSource(BaseModel):
    """A composite document handed over by a model provider."""
    name: str
    edmx: str
    origin: str = ""


# ---------------------------------------------------------------------------
# Artifact & run results
# ---------------------------------------------------------------------------

class StampRead(BaseModel):
    """Stamp read from the first line of an artifact."""
    state: StampState
    fingerprint: str = ""

    @property
    def found(self) -> bool:
        return self.state == StampState.FOUND

    def matches(self, fingerprint: str) -> bool:
        return self.found and self.fingerprint == fingerprint


class RefreshResult(BaseModel):
    """Outcome of one orchestrator invocation."""
    artifact_path: Path
    action: RefreshAction
    success: bool = True
    old_fingerprint: StampRead = Field(
        default_factory=lambda: StampRead(state=StampState.NOT_FOUND)
    )
    new_fingerprint: str = ""
    diagnostics: list[Diagnostic] = Field(default_factory=list)
    elapsed: float = 0.0

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.is_error]

    @property
    def warnings(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if not d.is_error]

    def raise_for_errors(self) -> None:
        """Raise ``SchemaLoadError`` or ``GenerationError`` when the run failed."""
        from .errors import GenerationError, SchemaLoadError

        if self.success:
            return
        if self.action == RefreshAction.FAILED:
            raise SchemaLoadError(self.errors)
        raise GenerationError(self.errors)
