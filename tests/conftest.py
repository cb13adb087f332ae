"""Shared fixtures: composite documents for every schema version."""

from __future__ import annotations

from pathlib import Path

import pytest

from edmviews.core.models import SchemaVersion, SectionKind
from edmviews.core.namespaces import DEFAULT_NAMESPACES

EXAMPLES_DIR = Path(__file__).parent.parent / "examples"


def ns(version: SchemaVersion, kind: SectionKind) -> str:
    return DEFAULT_NAMESPACES[kind][version]


def conceptual_xml(version: SchemaVersion, container: str = "ShopContext") -> str:
    return (
        f'<Schema Namespace="Shop" xmlns="{ns(version, SectionKind.CONCEPTUAL)}">'
        f'<EntityContainer Name="{container}">'
        '<EntitySet Name="Orders" EntityType="Shop.Order" />'
        "</EntityContainer>"
        "</Schema>"
    )


def storage_xml(version: SchemaVersion) -> str:
    return (
        f'<Schema Namespace="ShopStore" Provider="System.Data.SqlClient" '
        f'xmlns="{ns(version, SectionKind.STORAGE)}">'
        '<EntityContainer Name="ShopStore">'
        '<EntitySet Name="Order" EntityType="Self.Order" />'
        "</EntityContainer>"
        "</Schema>"
    )


def mapping_xml(version: SchemaVersion) -> str:
    return (
        f'<Mapping Space="C-S" xmlns="{ns(version, SectionKind.MAPPING)}">'
        '<EntityContainerMapping StorageEntityContainer="ShopStore" CdmEntityContainer="ShopContext">'
        '<EntitySetMapping Name="Orders">'
        '<EntityTypeMapping TypeName="Shop.Order">'
        '<MappingFragment StoreEntitySet="Order" />'
        "</EntityTypeMapping>"
        "</EntitySetMapping>"
        "</EntityContainerMapping>"
        "</Mapping>"
    )


def make_edmx(
    version: SchemaVersion = SchemaVersion.V3,
    *,
    conceptual: bool = True,
    storage: bool = True,
    mapping: bool = True,
    extra_conceptual: str = "",
) -> str:
    """Build a composite document with the sections nested in wrappers."""
    parts = [f'<Edmx Version="{version.value}" xmlns="{ns(version, SectionKind.COMPOSITE)}">', "<Runtime>"]
    if conceptual:
        parts.append(f"<ConceptualModels>{conceptual_xml(version)}{extra_conceptual}</ConceptualModels>")
    if storage:
        parts.append(f"<StorageModels>{storage_xml(version)}</StorageModels>")
    if mapping:
        parts.append(f"<Mappings>{mapping_xml(version)}</Mappings>")
    parts.append("</Runtime></Edmx>")
    return "\n".join(parts)


@pytest.fixture
def edmx_text() -> str:
    return make_edmx()


@pytest.fixture
def blogging_edmx_path() -> Path:
    return EXAMPLES_DIR / "blogging.edmx"


@pytest.fixture
def blogging_models_path() -> Path:
    return EXAMPLES_DIR / "blogging_models.py"
