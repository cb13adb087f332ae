"""Split a composite document into its conceptual, storage and mapping sections."""

from __future__ import annotations

import copy
import logging
from xml.etree import ElementTree as ET
from xml.etree.ElementTree import Element

from .errors import DuplicateSection, MalformedDocument, SectionNotFound
from .models import Diagnostic, DuplicatePolicy, SectionKind, SplitSections
from .namespaces import DEFAULT_RESOLVER, NamespaceResolver, qname

logger = logging.getLogger(__name__)

_SECTION_KINDS = (SectionKind.CONCEPTUAL, SectionKind.STORAGE, SectionKind.MAPPING)


def parse_document(text: str) -> Element:
    """Parse composite document text, turning syntax errors into ``MalformedDocument``."""
    try:
        return ET.fromstring(text)
    except ET.ParseError as exc:
        raise MalformedDocument(f"Composite document is not well-formed XML: {exc}") from exc


class CompositeSplitter:
    """Locates the three sections of a composite document.

    Sections are searched among *all* descendants in document order, since
    they usually sit under ``Runtime/ConceptualModels`` style wrappers.
    With ``DuplicatePolicy.FIRST_MATCH`` the first hit wins and any extra
    hits are reported as warnings; ``STRICT_UNIQUE`` rejects them.
    """

    def __init__(
        self,
        resolver: NamespaceResolver | None = None,
        policy: DuplicatePolicy = DuplicatePolicy.FIRST_MATCH,
    ) -> None:
        self.resolver = resolver or DEFAULT_RESOLVER
        self.policy = policy

    def split(self, doc: Element | ET.ElementTree) -> SplitSections:
        root = doc.getroot() if isinstance(doc, ET.ElementTree) else doc
        version = self.resolver.version_from_document(root)
        logger.debug("Composite document is schema version %s", version.value)

        found: dict[SectionKind, Element] = {}
        warnings: list[Diagnostic] = []

        for kind in _SECTION_KINDS:
            namespace = self.resolver.namespace_for(version, kind)
            matches = list(root.iter(qname(namespace, kind.local_name)))
            if not matches:
                raise SectionNotFound(kind, namespace)

            if len(matches) > 1:
                if self.policy == DuplicatePolicy.STRICT_UNIQUE:
                    raise DuplicateSection(kind, len(matches))
                message = (
                    f"Composite document contains {len(matches)} {kind.value} "
                    f"sections; using the first one"
                )
                logger.warning(message)
                warnings.append(Diagnostic.warning(message, location=kind.value))

            found[kind] = copy.deepcopy(matches[0])

        return SplitSections(
            version=version,
            conceptual=found[SectionKind.CONCEPTUAL],
            storage=found[SectionKind.STORAGE],
            mapping=found[SectionKind.MAPPING],
            warnings=warnings,
        )

    def split_text(self, text: str) -> SplitSections:
        return self.split(parse_document(text))
