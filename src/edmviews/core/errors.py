"""Exceptions raised by the refresh pipeline.

Structural problems (bad document, unknown namespace, missing section)
and I/O failures end a run.  Loader and generator errors normally travel
as diagnostics; ``SchemaLoadError`` and ``GenerationError`` exist for
callers that prefer an exception (see ``RefreshResult.raise_for_errors``).
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Iterable

if TYPE_CHECKING:
    from .models import Diagnostic, SectionKind


class EdmViewsError(Exception):
    """Base class for all edmviews errors."""


class ModelUnavailable(EdmViewsError):
    """No model could be obtained from the model provider."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class MalformedDocument(EdmViewsError):
    """The composite document is not well formed or has the wrong root."""


class UnknownNamespace(EdmViewsError):
    def __init__(self, namespace: str) -> None:
        super().__init__(f"Unknown namespace: {namespace}")
        self.namespace = namespace


class NamespaceConfigurationError(EdmViewsError):
    """The namespace table cannot be inverted."""


class SectionNotFound(EdmViewsError):
    def __init__(self, kind: SectionKind, namespace: str) -> None:
        super().__init__(
            f"No {kind.value} section <{kind.local_name}> found in namespace {namespace}"
        )
        self.kind = kind
        self.namespace = namespace


class DuplicateSection(EdmViewsError):
    def __init__(self, kind: SectionKind, count: int) -> None:
        super().__init__(
            f"Found {count} {kind.value} sections <{kind.local_name}>; expected exactly one"
        )
        self.kind = kind
        self.count = count


class InvalidLanguageOption(EdmViewsError):
    def __init__(self, token: str) -> None:
        super().__init__(f'Lang parameter invalid.  Must be "cs" or "vb", was {token}')
        self.token = token


class _DiagnosticError(EdmViewsError):
    def __init__(self, diagnostics: Iterable[Diagnostic]) -> None:
        self.diagnostics = list(diagnostics)
        summary = "; ".join(str(d) for d in self.diagnostics[:3])
        if len(self.diagnostics) > 3:
            summary += f" (+{len(self.diagnostics) - 3} more)"
        super().__init__(summary or self._default_message)

    _default_message = ""


class SchemaLoadError(_DiagnosticError):
    _default_message = "Schema load failed"


class GenerationError(_DiagnosticError):
    _default_message = "View generation failed"


class ArtifactIOError(EdmViewsError):
    def __init__(self, path: Path | str, reason: str) -> None:
        super().__init__(f"Error accessing file {path}: {reason}")
        self.path = Path(path)
        self.reason = reason

