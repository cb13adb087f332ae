"""edmviews — keep pre-generated mapping views in step with their data model.

A views file is stamped with the fingerprint of the composite document
(conceptual + storage + mapping schemas) it was generated from.  Running
a refresh re-reads the model, and either touches the views file when the
fingerprint still matches or regenerates it when it does not.
"""

from .core.errors import (
    ArtifactIOError,
    DuplicateSection,
    EdmViewsError,
    GenerationError,
    InvalidLanguageOption,
    MalformedDocument,
    ModelUnavailable,
    NamespaceConfigurationError,
    SchemaLoadError,
    SectionNotFound,
    UnknownNamespace,
)
from .core.models import (
    Diagnostic,
    DuplicatePolicy,
    LanguageOption,
    RefreshAction,
    RefreshResult,
    SchemaVersion,
    SectionKind,
    Severity,
)
from .pipeline import RefreshPipeline

__version__ = "0.1.0"

__all__ = [
    "ArtifactIOError",
    "Diagnostic",
    "DuplicatePolicy",
    "DuplicateSection",
    "EdmViewsError",
    "GenerationError",
    "InvalidLanguageOption",
    "LanguageOption",
    "MalformedDocument",
    "ModelUnavailable",
    "NamespaceConfigurationError",
    "RefreshAction",
    "RefreshPipeline",
    "RefreshResult",
    "SchemaLoadError",
    "SchemaVersion",
    "SectionKind",
    "SectionNotFound",
    "Severity",
    "UnknownNamespace",
    "__version__",
]
