"""Schema-version ↔ XML namespace resolution.

Every section of a composite document lives in a namespace that encodes
the schema generation it was written for.  ``NamespaceTable`` holds the
fixed forward table (version × section kind → URI) together with its
inverse, and refuses to exist if the inverse would be ambiguous.

Usage::

    from edmviews.core.namespaces import DEFAULT_RESOLVER

    ns = DEFAULT_RESOLVER.namespace_for(SchemaVersion.V3, SectionKind.MAPPING)
    version = DEFAULT_RESOLVER.version_for(ns)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping
from xml.etree.ElementTree import Element, ElementTree

from .errors import MalformedDocument, NamespaceConfigurationError, UnknownNamespace
from .models import SchemaVersion, SectionKind

# ---------------------------------------------------------------------------
# Known namespaces
# ---------------------------------------------------------------------------

DEFAULT_NAMESPACES: dict[SectionKind, dict[SchemaVersion, str]] = {
    SectionKind.CONCEPTUAL: {
        SchemaVersion.V1: "http://schemas.microsoft.com/ado/2006/04/edm",
        SchemaVersion.V2: "http://schemas.microsoft.com/ado/2008/09/edm",
        SchemaVersion.V3: "http://schemas.microsoft.com/ado/2009/11/edm",
    },
    SectionKind.STORAGE: {
        SchemaVersion.V1: "http://schemas.microsoft.com/ado/2006/04/edm/ssdl",
        SchemaVersion.V2: "http://schemas.microsoft.com/ado/2009/02/edm/ssdl",
        SchemaVersion.V3: "http://schemas.microsoft.com/ado/2009/11/edm/ssdl",
    },
    SectionKind.MAPPING: {
        SchemaVersion.V1: "urn:schemas-microsoft-com:windows:storage:mapping:CS",
        SchemaVersion.V2: "http://schemas.microsoft.com/ado/2008/09/mapping/cs",
        SchemaVersion.V3: "http://schemas.microsoft.com/ado/2009/11/mapping/cs",
    },
    SectionKind.COMPOSITE: {
        SchemaVersion.V1: "http://schemas.microsoft.com/ado/2007/06/edmx",
        SchemaVersion.V2: "http://schemas.microsoft.com/ado/2008/10/edmx",
        SchemaVersion.V3: "http://schemas.microsoft.com/ado/2009/11/edmx",
    },
}


def split_qname(tag: str) -> tuple[str, str]:
    """Split an ElementTree tag ``{uri}local`` into ``(uri, local)``."""
    if tag.startswith("{"):
        uri, _, local = tag[1:].partition("}")
        return uri, local
    return "", tag


def qname(namespace: str, local_name: str) -> str:
    return f"{{{namespace}}}{local_name}" if namespace else local_name


# ---------------------------------------------------------------------------
# Table
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class NamespaceTable:
    """Immutable forward and reverse namespace tables.

    The reverse table is computed once from the forward table.  A URI that
    appears more than once (across kinds or versions) would make it
    ambiguous, so construction fails with ``NamespaceConfigurationError``.
    """

    forward: Mapping[SectionKind, Mapping[SchemaVersion, str]]
    reverse: Mapping[str, tuple[SchemaVersion, SectionKind]] = field(init=False)

    def __post_init__(self) -> None:
        frozen: dict[SectionKind, Mapping[SchemaVersion, str]] = {}
        reverse: dict[str, tuple[SchemaVersion, SectionKind]] = {}

        for kind, by_version in self.forward.items():
            frozen[kind] = MappingProxyType(dict(by_version))
            for version, uri in by_version.items():
                if uri in reverse:
                    prior_version, prior_kind = reverse[uri]
                    raise NamespaceConfigurationError(
                        f"Namespace {uri} is registered for both "
                        f"{prior_kind.value} {prior_version.value} and "
                        f"{kind.value} {version.value}"
                    )
                reverse[uri] = (version, kind)

        object.__setattr__(self, "forward", MappingProxyType(frozen))
        object.__setattr__(self, "reverse", MappingProxyType(reverse))

    @classmethod
    def default(cls) -> NamespaceTable:
        return cls(DEFAULT_NAMESPACES)

    @property
    def versions(self) -> list[SchemaVersion]:
        found = {v for by_version in self.forward.values() for v in by_version}
        return [v for v in SchemaVersion if v in found]

    def rows(self) -> list[tuple[SchemaVersion, SectionKind, str]]:
        """Every (version, kind, uri) triple, ordered by version then kind."""
        out = []
        for version in self.versions:
            for kind in SectionKind:
                uri = self.forward.get(kind, {}).get(version)
                if uri is not None:
                    out.append((version, kind, uri))
        return out


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------

class NamespaceResolver:
    """Answers version/namespace questions against a ``NamespaceTable``."""

    def __init__(self, table: NamespaceTable | None = None) -> None:
        self.table = table or DEFAULT_TABLE

    def namespace_for(self, version: SchemaVersion, kind: SectionKind) -> str:
        uri = self.table.forward.get(kind, {}).get(version)
        if uri is None:
            raise UnknownNamespace(f"<no {kind.value} namespace for version {version.value}>")
        return uri

    def version_for(self, namespace: str) -> SchemaVersion:
        entry = self.table.reverse.get(namespace)
        if entry is None:
            raise UnknownNamespace(namespace)
        return entry[0]

    def version_from_document(self, doc: Element | ElementTree) -> SchemaVersion:
        """Read the schema version off the root of a composite document."""
        return self.version_from_section(doc, SectionKind.COMPOSITE)

    def version_from_section(
        self, doc: Element | ElementTree, kind: SectionKind
    ) -> SchemaVersion:
        """Read the schema version off a standalone section root."""
        root = doc.getroot() if isinstance(doc, ElementTree) else doc
        if root is None:
            raise MalformedDocument("Document has no root element")

        uri, local = split_qname(root.tag)
        if local != kind.local_name:
            raise MalformedDocument(
                f"Unexpected root node local name for {kind.value} document: "
                f"expected {kind.local_name}, found {local}"
            )
        return self.version_for(uri)


DEFAULT_TABLE = NamespaceTable.default()
DEFAULT_RESOLVER = NamespaceResolver(DEFAULT_TABLE)
