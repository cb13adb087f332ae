"""Schema loading — turn split sections into a ``ValidatedModel``.

``SchemaLoader`` is the interface the pipeline depends on.  The bundled
``XmlSchemaLoader`` performs structural checks only: each section must be
rooted in the right element and namespace, all three must agree on the
schema version, and the entity containers and set mappings are indexed
for the generator.
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol
from xml.etree.ElementTree import Element

from .errors import UnknownNamespace
from .models import Diagnostic, EntitySetMapping, SchemaVersion, SectionKind, ValidatedModel
from .namespaces import DEFAULT_RESOLVER, NamespaceResolver, qname, split_qname

logger = logging.getLogger(__name__)


class SchemaLoader(Protocol):
    def load(
        self, conceptual: Element, storage: Element, mapping: Element
    ) -> tuple[Optional[ValidatedModel], list[Diagnostic]]:
        ...


class XmlSchemaLoader:
    """Structural loader for conceptual, storage and mapping sections."""

    def __init__(self, resolver: NamespaceResolver | None = None) -> None:
        self.resolver = resolver or DEFAULT_RESOLVER

    def load(
        self, conceptual: Element, storage: Element, mapping: Element
    ) -> tuple[Optional[ValidatedModel], list[Diagnostic]]:
        diagnostics: list[Diagnostic] = []

        versions: dict[SectionKind, SchemaVersion] = {}
        for kind, element in (
            (SectionKind.CONCEPTUAL, conceptual),
            (SectionKind.STORAGE, storage),
            (SectionKind.MAPPING, mapping),
        ):
            version = self._check_root(kind, element, diagnostics)
            if version is not None:
                versions[kind] = version

        if len(versions) < 3:
            return None, diagnostics

        if len(set(versions.values())) > 1:
            found = ", ".join(f"{k.value}={v.value}" for k, v in versions.items())
            diagnostics.append(
                Diagnostic.error(f"Sections disagree on schema version ({found})")
            )
            return None, diagnostics

        version = versions[SectionKind.CONCEPTUAL]
        c_ns = self.resolver.namespace_for(version, SectionKind.CONCEPTUAL)
        s_ns = self.resolver.namespace_for(version, SectionKind.STORAGE)
        m_ns = self.resolver.namespace_for(version, SectionKind.MAPPING)

        self._check_schema_attributes(conceptual, SectionKind.CONCEPTUAL, diagnostics)
        self._check_schema_attributes(storage, SectionKind.STORAGE, diagnostics)

        c_container = conceptual.find(qname(c_ns, "EntityContainer"))
        s_container = storage.find(qname(s_ns, "EntityContainer"))
        for kind, container in (
            (SectionKind.CONCEPTUAL, c_container),
            (SectionKind.STORAGE, s_container),
        ):
            if container is None:
                diagnostics.append(
                    Diagnostic.warning(
                        "Schema declares no EntityContainer", location=kind.value
                    )
                )

        model = ValidatedModel(
            version=version,
            conceptual=conceptual,
            storage=storage,
            mapping=mapping,
            conceptual_container=_name_of(c_container),
            storage_container=_name_of(s_container),
            entity_sets=_entity_sets(c_container, c_ns),
            store_entity_sets=_entity_sets(s_container, s_ns),
            set_mappings=_set_mappings(mapping, m_ns),
        )
        logger.debug(
            "Loaded model: %d entity sets, %d store sets, %d set mappings",
            len(model.entity_sets),
            len(model.store_entity_sets),
            len(model.set_mappings),
        )
        return model, diagnostics

    # -- Helpers ---------------------------------------------------------

    def _check_root(
        self, kind: SectionKind, element: Element, diagnostics: list[Diagnostic]
    ) -> Optional[SchemaVersion]:
        uri, local = split_qname(element.tag)
        if local != kind.local_name:
            diagnostics.append(
                Diagnostic.error(
                    f"Expected <{kind.local_name}> element, found <{local}>",
                    location=kind.value,
                )
            )
            return None
        try:
            version = self.resolver.version_for(uri)
        except UnknownNamespace:
            diagnostics.append(
                Diagnostic.error(f"Unknown namespace: {uri}", location=kind.value)
            )
            return None
        if self.resolver.namespace_for(version, kind) != uri:
            diagnostics.append(
                Diagnostic.error(
                    f"Namespace {uri} is not a {kind.value} namespace",
                    location=kind.value,
                )
            )
            return None
        return version

    @staticmethod
    def _check_schema_attributes(
        element: Element, kind: SectionKind, diagnostics: list[Diagnostic]
    ) -> None:
        if not element.get("Namespace"):
            diagnostics.append(
                Diagnostic.warning("Schema has no Namespace attribute", location=kind.value)
            )
        if kind == SectionKind.STORAGE and not element.get("Provider"):
            diagnostics.append(
                Diagnostic.warning("Schema has no Provider attribute", location=kind.value)
            )


def _name_of(element: Optional[Element]) -> str:
    return element.get("Name", "") if element is not None else ""


def _entity_sets(container: Optional[Element], namespace: str) -> list[str]:
    if container is None:
        return []
    return [
        es.get("Name", "")
        for es in container.findall(qname(namespace, "EntitySet"))
        if es.get("Name")
    ]


def _set_mappings(mapping: Element, namespace: str) -> list[EntitySetMapping]:
    out: list[EntitySetMapping] = []
    for esm in mapping.iter(qname(namespace, "EntitySetMapping")):
        fragment = esm.find(f".//{qname(namespace, 'MappingFragment')}")
        if fragment is not None:
            store_set = fragment.get("StoreEntitySet", "")
        else:
            store_set = esm.get("StoreEntitySet", "")
        out.append(
            EntitySetMapping(
                entity_set=esm.get("Name", ""),
                store_entity_set=store_set,
            )
        )
    return out
