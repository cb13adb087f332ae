"""Tests for the namespace table and resolver."""

from __future__ import annotations

import xml.etree.ElementTree as ET

import pytest

from edmviews.core.errors import MalformedDocument, NamespaceConfigurationError, UnknownNamespace
from edmviews.core.models import SchemaVersion, SectionKind
from edmviews.core.namespaces import (
    DEFAULT_NAMESPACES,
    DEFAULT_RESOLVER,
    NamespaceResolver,
    NamespaceTable,
    split_qname,
)

from conftest import make_edmx


# ---------------------------------------------------------------------------
# Table
# ---------------------------------------------------------------------------

class TestNamespaceTable:
    @pytest.mark.parametrize("version", list(SchemaVersion))
    @pytest.mark.parametrize("kind", list(SectionKind))
    def test_every_entry_round_trips(self, version, kind):
        uri = DEFAULT_RESOLVER.namespace_for(version, kind)
        assert DEFAULT_RESOLVER.version_for(uri) == version

    def test_twelve_distinct_namespaces(self):
        table = NamespaceTable.default()
        assert len(table.reverse) == 12
        assert len(table.rows()) == 12

    def test_duplicate_uri_fails_at_construction(self):
        bad = {kind: dict(by_version) for kind, by_version in DEFAULT_NAMESPACES.items()}
        bad[SectionKind.STORAGE][SchemaVersion.V2] = bad[SectionKind.CONCEPTUAL][SchemaVersion.V1]
        with pytest.raises(NamespaceConfigurationError, match="registered for both"):
            NamespaceTable(bad)

    def test_table_is_read_only(self):
        table = NamespaceTable.default()
        with pytest.raises(TypeError):
            table.reverse["urn:new"] = (SchemaVersion.V1, SectionKind.MAPPING)
        with pytest.raises(TypeError):
            table.forward[SectionKind.MAPPING][SchemaVersion.V1] = "urn:other"

    def test_source_mapping_is_not_shared(self):
        source = {SectionKind.MAPPING: {SchemaVersion.V1: "urn:a"}}
        table = NamespaceTable(source)
        source[SectionKind.MAPPING][SchemaVersion.V1] = "urn:b"
        assert table.forward[SectionKind.MAPPING][SchemaVersion.V1] == "urn:a"


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------

class TestNamespaceResolver:
    def test_unknown_namespace(self):
        with pytest.raises(UnknownNamespace):
            DEFAULT_RESOLVER.version_for("http://example.com/not-a-schema")

    def test_missing_version_in_partial_table(self):
        resolver = NamespaceResolver(
            NamespaceTable({SectionKind.MAPPING: {SchemaVersion.V1: "urn:only"}})
        )
        with pytest.raises(UnknownNamespace):
            resolver.namespace_for(SchemaVersion.V2, SectionKind.MAPPING)

    @pytest.mark.parametrize("version", list(SchemaVersion))
    def test_version_from_document(self, version):
        root = ET.fromstring(make_edmx(version))
        assert DEFAULT_RESOLVER.version_from_document(root) == version

    def test_version_from_element_tree(self):
        tree = ET.ElementTree(ET.fromstring(make_edmx(SchemaVersion.V2)))
        assert DEFAULT_RESOLVER.version_from_document(tree) == SchemaVersion.V2

    def test_wrong_root_name_is_malformed(self):
        uri = DEFAULT_NAMESPACES[SectionKind.COMPOSITE][SchemaVersion.V3]
        root = ET.fromstring(f'<Model xmlns="{uri}" />')
        with pytest.raises(MalformedDocument, match="Unexpected root node"):
            DEFAULT_RESOLVER.version_from_document(root)

    def test_unknown_root_namespace(self):
        root = ET.fromstring('<Edmx xmlns="http://example.com/edmx" />')
        with pytest.raises(UnknownNamespace):
            DEFAULT_RESOLVER.version_from_document(root)

    def test_version_from_section(self):
        uri = DEFAULT_NAMESPACES[SectionKind.CONCEPTUAL][SchemaVersion.V1]
        root = ET.fromstring(f'<Schema xmlns="{uri}" />')
        assert DEFAULT_RESOLVER.version_from_section(root, SectionKind.CONCEPTUAL) == SchemaVersion.V1


class TestSplitQName:
    def test_qualified(self):
        assert split_qname("{urn:x}Schema") == ("urn:x", "Schema")

    def test_unqualified(self):
        assert split_qname("Schema") == ("", "Schema")
