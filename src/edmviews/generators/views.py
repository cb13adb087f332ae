"""Mapping-based views generator (C# / VB).

Emits one class per conceptual entity container with a constant for
each mapped entity set naming the store set it reads from.  The output
is a pure function of the validated model and the target language.
"""

from __future__ import annotations

import logging

from ..core.models import Diagnostic, LanguageOption, ValidatedModel
from .base import BaseViewGenerator

logger = logging.getLogger(__name__)

VIEWS_NAMESPACE = "Edm_EntityMappingGeneratedViews"

_CS_HEADER = """\
//------------------------------------------------------------------------------
// <auto-generated>
//     This code was generated by edmviews from entity container {container}.
//     Changes to this file will be lost if the code is regenerated.
// </auto-generated>
//------------------------------------------------------------------------------
"""

_VB_HEADER = """\
'------------------------------------------------------------------------------
' <auto-generated>
'     This code was generated by edmviews from entity container {container}.
'     Changes to this file will be lost if the code is regenerated.
' </auto-generated>
'------------------------------------------------------------------------------
"""


class MappingViewGenerator(BaseViewGenerator):
    """Generates a views class from entity-set mappings."""

    def validate_only(self, model: ValidatedModel) -> list[Diagnostic]:
        diagnostics: list[Diagnostic] = []
        entity_sets = set(model.entity_sets)
        store_sets = set(model.store_entity_sets)
        mapped: set[str] = set()

        for esm in model.set_mappings:
            location = f"EntitySetMapping {esm.entity_set or '?'}"
            if not esm.entity_set:
                diagnostics.append(
                    Diagnostic.error("EntitySetMapping has no Name", location="mapping")
                )
                continue
            if esm.entity_set not in entity_sets:
                diagnostics.append(
                    Diagnostic.error(
                        f"Entity set {esm.entity_set} is not declared in container "
                        f"{model.conceptual_container or '?'}",
                        location=location,
                    )
                )
            if esm.store_entity_set and esm.store_entity_set not in store_sets:
                diagnostics.append(
                    Diagnostic.error(
                        f"Store entity set {esm.store_entity_set} is not declared in "
                        f"container {model.storage_container or '?'}",
                        location=location,
                    )
                )
            elif not esm.store_entity_set:
                diagnostics.append(
                    Diagnostic.warning("No store entity set is mapped", location=location)
                )
            mapped.add(esm.entity_set)

        for name in model.entity_sets:
            if name not in mapped:
                diagnostics.append(
                    Diagnostic.warning(
                        f"Entity set {name} has no mapping", location="conceptual"
                    )
                )

        logger.debug("Validated mappings: %d diagnostic(s)", len(diagnostics))
        return diagnostics

    def generate(self, model: ValidatedModel) -> tuple[str, list[Diagnostic]]:
        diagnostics = self.validate_only(model)
        container = model.conceptual_container or "Model"

        views: list[tuple[str, str]] = []
        used: set[str] = {"ContainerName"}
        for esm in model.set_mappings:
            if not esm.entity_set:
                continue
            ident = self._identifier(esm.entity_set)
            while ident in used:
                ident += "_"
            used.add(ident)
            target = esm.store_entity_set
            if target and model.storage_container:
                target = f"{model.storage_container}.{target}"
            views.append((ident, target))

        class_name = f"ViewsForBaseEntitySets{self._identifier(container)}"
        if self.language == LanguageOption.VB:
            body = self._render_vb(container, class_name, views)
        else:
            body = self._render_cs(container, class_name, views)
        return body, diagnostics

    # -- Rendering -------------------------------------------------------

    def _render_cs(self, container: str, class_name: str, views: list[tuple[str, str]]) -> str:
        lines = [_CS_HEADER.format(container=container)]
        lines.append(f"namespace {VIEWS_NAMESPACE}")
        lines.append("{")
        lines.append(f"    public sealed class {class_name}")
        lines.append("    {")
        lines.append(f"        public const string ContainerName = {self._quote(container)};")
        for ident, target in views:
            lines.append(f"        public const string {ident} = {self._quote(target)};")
        lines.append("    }")
        lines.append("}")
        return "\n".join(lines) + "\n"

    def _render_vb(self, container: str, class_name: str, views: list[tuple[str, str]]) -> str:
        lines = [_VB_HEADER.format(container=container)]
        lines.append(f"Namespace {VIEWS_NAMESPACE}")
        lines.append(f"    Public NotInheritable Class {class_name}")
        lines.append(f"        Public Const ContainerName As String = {self._quote(container)}")
        for ident, target in views:
            lines.append(f"        Public Const [{ident}] As String = {self._quote(target)}")
        lines.append("    End Class")
        lines.append("End Namespace")
        return "\n".join(lines) + "\n"
