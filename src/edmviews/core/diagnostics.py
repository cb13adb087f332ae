"""Diagnostic aggregation and reporting."""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

from .models import Diagnostic

logger = logging.getLogger(__name__)


def merge(*phases: Iterable[Diagnostic]) -> list[Diagnostic]:
    """Concatenate diagnostic lists, keeping phase order and each phase's own order."""
    merged: list[Diagnostic] = []
    for phase in phases:
        merged.extend(phase)
    return merged


def has_errors(diagnostics: Iterable[Diagnostic]) -> bool:
    return any(d.is_error for d in diagnostics)


def report_diagnostics(
    diagnostics: Sequence[Diagnostic],
    log: logging.Logger | None = None,
) -> bool:
    """Log every diagnostic at its severity.

    Returns True if any of them was an error.
    """
    log = log or logger
    severe = False
    for diag in diagnostics:
        if diag.is_error:
            log.error("%s", diag)
            severe = True
        else:
            log.warning("%s", diag)
    return severe
