"""Orchestration pipeline — decides whether a views file must be regenerated.

One ``refresh`` run goes::

    provider → composite text → fingerprint → stamp on existing views file
        equal     → touch the file, done
        different → split → load → generate → write (stamped)

The fast path reads a single line.  Structural problems (unreadable
model, malformed document, missing section) and file errors raise before
anything is written; loader and generator errors come back as
diagnostics and turn ``success`` off.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Callable, Optional

from rich.console import Console

from .core.artifact import ArtifactStore, views_file_name, views_path_for_edmx
from .core.diagnostics import has_errors, merge, report_diagnostics
from .core.hashing import fingerprint
from .core.loader import SchemaLoader, XmlSchemaLoader
from .core.models import (
    Diagnostic,
    DuplicatePolicy,
    LanguageOption,
    RefreshAction,
    RefreshResult,
    StampRead,
    StampState,
)
from .core.namespaces import DEFAULT_RESOLVER, NamespaceResolver
from .core.provider import FileModelProvider, ModelProvider, ModuleModelProvider
from .core.splitter import CompositeSplitter
from .generators.base import BaseViewGenerator
from .generators.views import MappingViewGenerator

logger = logging.getLogger(__name__)
console = Console(stderr=True)

GeneratorFactory = Callable[[LanguageOption], BaseViewGenerator]


class RefreshPipeline:
    """Model → stamped views file, regenerating only when the model changed.

    Usage::

        pipeline = RefreshPipeline(language=LanguageOption.CSHARP)
        result = pipeline.refresh("myapp/models.py", "BloggingContext")
        print(result.action, result.success)

    Parameters
    ----------
    provider
        Where composite documents come from (default: Python modules).
    loader
        Schema loader for the split sections.
    generator_factory
        Builds the generator for a language (default: ``MappingViewGenerator``).
    language
        Target language of the views file.
    duplicate_policy
        How the splitter treats repeated sections.
    store
        Artifact store (owns the stamp marker).
    """

    def __init__(
        self,
        *,
        provider: ModelProvider | None = None,
        loader: SchemaLoader | None = None,
        generator_factory: GeneratorFactory = MappingViewGenerator,
        language: LanguageOption = LanguageOption.CSHARP,
        duplicate_policy: DuplicatePolicy = DuplicatePolicy.FIRST_MATCH,
        resolver: NamespaceResolver | None = None,
        store: ArtifactStore | None = None,
        quiet: bool = False,
    ) -> None:
        resolver = resolver or DEFAULT_RESOLVER
        self.provider = provider or ModuleModelProvider()
        self.loader = loader or XmlSchemaLoader(resolver)
        self.generator = generator_factory(language)
        self.language = language
        self.splitter = CompositeSplitter(resolver, duplicate_policy)
        self.store = store or ArtifactStore()
        self.quiet = quiet

    # ------------------------------------------------------------------
    # Refresh (stamp-checked)
    # ------------------------------------------------------------------

    def refresh(
        self,
        locator: str,
        selector: Optional[str] = None,
        *,
        output: str | Path | None = None,
        output_dir: str | Path | None = None,
    ) -> RefreshResult:
        """Regenerate the views file for *locator* only if its model changed.

        Parameters
        ----------
        locator, selector
            Passed to the model provider.
        output
            Explicit views file path.  Defaults to
            ``<output_dir>/<ModelName>.Views.<ext>``.
        output_dir
            Directory for the default file name (default: current directory).
        """
        start = time.perf_counter()
        logger.info(
            "refresh: locator=%s, selector=%s, lang=%s", locator, selector, self.language.value
        )

        source = self.provider.get_model(locator, selector)
        self._say(f"[green]✓[/] Model [bold]{source.name}[/] ({len(source.edmx):,} chars)")

        if output is not None:
            views_path = Path(output)
        else:
            views_path = Path(output_dir or ".") / views_file_name(source.name, self.language)

        text = source.edmx
        new_hash = fingerprint(text)
        old_stamp = self.store.read_fingerprint(views_path)

        if old_stamp.matches(new_hash):
            logger.info("Views are already current.  Touching file.")
            self.store.touch(views_path)
            self._say(f"[dim]Views are already current:[/] {views_path}")
            result = RefreshResult(
                artifact_path=views_path,
                action=RefreshAction.TOUCHED,
                old_fingerprint=old_stamp,
                new_fingerprint=new_hash,
            )
        else:
            logger.info("Writing views to %s", views_path)
            result = self._regenerate(text, new_hash, views_path, old_stamp)

        result.elapsed = time.perf_counter() - start
        logger.info("refresh done.  Elapsed time=%.3fs", result.elapsed)
        return result

    # ------------------------------------------------------------------
    # Unconditional generation from an EDMX file
    # ------------------------------------------------------------------

    def generate_views(
        self, edmx_path: str | Path, *, output: str | Path | None = None
    ) -> RefreshResult:
        """Always (re)write the views file for an ``.edmx`` file.

        The file is still stamped, so a later ``refresh`` of the same
        document takes the fast path.
        """
        start = time.perf_counter()
        edmx_path = Path(edmx_path)
        source = FileModelProvider().get_model(str(edmx_path))
        views_path = Path(output) if output is not None else views_path_for_edmx(
            edmx_path, self.language
        )

        text = source.edmx
        result = self._regenerate(
            text,
            fingerprint(text),
            views_path,
            self.store.read_fingerprint(views_path),
        )
        result.elapsed = time.perf_counter() - start
        return result

    # ------------------------------------------------------------------
    # Validation only
    # ------------------------------------------------------------------

    def validate(self, edmx: str) -> list[Diagnostic]:
        """Split, load and validate *edmx*; nothing is written."""
        sections = self.splitter.split_text(edmx)
        model, load_diags = self.loader.load(
            sections.conceptual, sections.storage, sections.mapping
        )
        diagnostics = merge(sections.warnings, load_diags)
        if model is None:
            if not has_errors(diagnostics):
                diagnostics.append(Diagnostic.error("Schema load failed"))
            return diagnostics
        return merge(diagnostics, self.generator.validate_only(model))

    # ------------------------------------------------------------------
    # Composite document export
    # ------------------------------------------------------------------

    def write_edmx(
        self,
        locator: str,
        selector: Optional[str] = None,
        *,
        output: str | Path | None = None,
    ) -> Path:
        """Write the provider's composite document to ``<ModelName>.edmx``."""
        source = self.provider.get_model(locator, selector)
        path = Path(output) if output else Path(f"{source.name}.edmx")
        logger.info("Writing Edmx to %s", path)
        self.store.write_text(path, source.edmx)
        self._say(f"[green]✓[/] Wrote {path}")
        return path

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _regenerate(
        self, text: str, new_hash: str, views_path: Path, old_stamp: StampRead
    ) -> RefreshResult:
        if old_stamp.state == StampState.EMPTY:
            logger.info("Views file %s carries no stamp; regenerating", views_path)

        sections = self.splitter.split_text(text)
        model, load_diags = self.loader.load(
            sections.conceptual, sections.storage, sections.mapping
        )
        diagnostics = merge(sections.warnings, load_diags)

        if model is None:
            if not has_errors(diagnostics):
                diagnostics.append(Diagnostic.error("Schema load failed"))
            report_diagnostics(diagnostics, logger)
            self._say(f"[red]✗[/] Schema load failed; {views_path} not written")
            return RefreshResult(
                artifact_path=views_path,
                action=RefreshAction.FAILED,
                success=False,
                old_fingerprint=old_stamp,
                new_fingerprint=new_hash,
                diagnostics=diagnostics,
            )

        body, gen_diags = self.generator.generate(model)
        diagnostics = merge(diagnostics, gen_diags)

        # Errors do not suppress the write; the caller can inspect the output.
        written = self.store.write(views_path, new_hash, body, diagnostics)
        severe = report_diagnostics(written, logger)

        if severe:
            self._say(f"[red]✗[/] Wrote {views_path} with errors")
        else:
            self._say(f"[green]✓[/] Wrote {views_path}")
        return RefreshResult(
            artifact_path=views_path,
            action=RefreshAction.REGENERATED,
            success=not severe,
            old_fingerprint=old_stamp,
            new_fingerprint=new_hash,
            diagnostics=written,
        )

    def _say(self, message: str) -> None:
        if not self.quiet:
            console.print(message)
