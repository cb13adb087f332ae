"""Abstract base class for view generators."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod

from ..core.models import Diagnostic, LanguageOption, ValidatedModel

# Characters that cannot appear in an identifier
_NON_IDENT_RE = re.compile(r"\W")


class BaseViewGenerator(ABC):
    """Every view generator inherits from this class.

    A generator is bound to one target language and turns a
    ``ValidatedModel`` into source text plus diagnostics.  It also offers a
    validation-only mode that produces the diagnostics without any text.
    """

    def __init__(self, language: LanguageOption = LanguageOption.CSHARP) -> None:
        self.language = language

    @abstractmethod
    def generate(self, model: ValidatedModel) -> tuple[str, list[Diagnostic]]:
        """Return the generated views source and its diagnostics."""
        ...

    @abstractmethod
    def validate_only(self, model: ValidatedModel) -> list[Diagnostic]:
        """Run the checks ``generate`` would run, without emitting text."""
        ...

    # -- Helpers ---------------------------------------------------------

    @staticmethod
    def _identifier(name: str, fallback: str = "Model") -> str:
        """Create a source-safe identifier from *name*."""
        ident = _NON_IDENT_RE.sub("_", name).strip("_") or fallback
        if ident[0].isdigit():
            ident = f"_{ident}"
        return ident

    def _quote(self, text: str) -> str:
        """Quote *text* as a string literal of the target language."""
        escaped = text.replace('"', '""')
        if self.language == LanguageOption.CSHARP:
            return f'@"{escaped}"'
        return f'"{escaped}"'
