"""edmviews CLI — keep pre-generated mapping views current."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click
from rich.console import Console

from .core.artifact import ArtifactStore
from .core.config import RefreshConfig, load_config
from .core.errors import EdmViewsError
from .core.models import Diagnostic, RefreshResult
from .core.namespaces import DEFAULT_TABLE
from .core.provider import get_provider
from .pipeline import RefreshPipeline

console = Console()
logger = logging.getLogger("edmviews.cli")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _build_pipeline(config: RefreshConfig, **kwargs) -> RefreshPipeline:
    provider_kwargs = {"init_kwargs": config.init_kwargs} if config.source == "module" else {}
    return RefreshPipeline(
        provider=get_provider(config.source, **provider_kwargs),
        language=config.language,
        duplicate_policy=config.duplicate_policy,
        store=ArtifactStore(config.marker),
        **kwargs,
    )


def _print_diagnostics(diagnostics: list[Diagnostic]) -> None:
    for diag in diagnostics:
        style = "red" if diag.is_error else "yellow"
        console.print(f"[{style}]{diag.severity.value}[/] {diag}", highlight=False)


def _finish(result: RefreshResult) -> None:
    _print_diagnostics(result.diagnostics)
    console.print(
        f"[bold]{result.action.value}[/] {result.artifact_path} "
        f"[dim]({result.elapsed:.2f}s)[/]"
    )
    if not result.success:
        sys.exit(1)


def _fail(exc: Exception) -> None:
    logger.error("%s", exc)
    console.print(f"[bold red]❌ {type(exc).__name__}:[/] {exc}")
    sys.exit(1)


_lang_option = click.option(
    "--lang",
    default=None,
    help='Language of the views file: "cs" or "vb" (default: cs).',
)
_config_option = click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="YAML, JSON or TOML config file.",
)
_verbose_option = click.option("-v", "--verbose", is_flag=True, default=False, help="Debug logging.")
_marker_option = click.option(
    "--marker",
    default=None,
    help="Stamp marker written before the fingerprint (default: \"// ViewGenHash=\").",
)


@click.group()
@click.version_option(version="0.1.0", prog_name="edmviews")
def main():
    """edmviews — Generate and refresh pre-generated mapping views."""
    pass


@main.command()
@click.argument("locator")
@click.option(
    "--context",
    "context_suffix",
    default=None,
    help="Suffix of the model class name to use (default: Context).",
)
@click.option(
    "--source",
    type=click.Choice(["module", "file"], case_sensitive=False),
    default=None,
    help="LOCATOR is a Python module/.py file (module) or an .edmx file (file).",
)
@_lang_option
@click.option("-o", "--output", type=click.Path(), default=None, help="Views file path.")
@click.option(
    "--output-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Directory for <ModelName>.Views.<ext> (default: current directory).",
)
@click.option(
    "--strict-sections",
    is_flag=True,
    default=None,
    help="Reject documents with repeated sections instead of using the first.",
)
@click.option(
    "--connection-string",
    default=None,
    help="Passed to the model class as connection_string=...",
)
@_marker_option
@_config_option
@_verbose_option
def refresh(
    locator: str,
    context_suffix: str | None,
    source: str | None,
    lang: str | None,
    output: str | None,
    output_dir: str | None,
    strict_sections: bool | None,
    connection_string: str | None,
    marker: str | None,
    config_path: str | None,
    verbose: bool,
):
    """Regenerate the views file for LOCATOR only if its model changed."""
    _setup_logging(verbose)
    try:
        config = load_config(
            config_path,
            language=lang,
            context_suffix=context_suffix,
            source=source,
            output_dir=output_dir,
            strict_sections=strict_sections or None,
            marker=marker,
        )
        if connection_string is not None:
            config.init_kwargs["connection_string"] = connection_string
        pipeline = _build_pipeline(config)
        result = pipeline.refresh(
            locator,
            config.context_suffix,
            output=output,
            output_dir=config.output_dir,
        )
    except (EdmViewsError, OSError, ValueError) as exc:
        _fail(exc)
    else:
        _finish(result)


@main.command()
@click.argument("edmx_file", type=click.Path(dir_okay=False))
@_lang_option
@click.option("-o", "--output", type=click.Path(), default=None, help="Views file path.")
@_marker_option
@_config_option
@_verbose_option
def generate(
    edmx_file: str,
    lang: str | None,
    output: str | None,
    marker: str | None,
    config_path: str | None,
    verbose: bool,
):
    """Generate the views file for EDMX_FILE unconditionally."""
    _setup_logging(verbose)
    try:
        config = load_config(config_path, language=lang, marker=marker)
        pipeline = RefreshPipeline(
            language=config.language,
            duplicate_policy=config.duplicate_policy,
            store=ArtifactStore(config.marker),
        )
        result = pipeline.generate_views(Path(edmx_file), output=output)
    except (EdmViewsError, OSError, ValueError) as exc:
        _fail(exc)
    else:
        _finish(result)


@main.command()
@click.argument("edmx_file", type=click.Path(exists=True, dir_okay=False))
@_verbose_option
def validate(edmx_file: str, verbose: bool):
    """Validate EDMX_FILE without writing anything."""
    _setup_logging(verbose)
    try:
        text = Path(edmx_file).read_text(encoding="utf-8")
        diagnostics = RefreshPipeline(quiet=True).validate(text)
    except (EdmViewsError, OSError, ValueError) as exc:
        _fail(exc)
    else:
        _print_diagnostics(diagnostics)
        errors = sum(1 for d in diagnostics if d.is_error)
        console.print(
            f"{errors} error(s), {len(diagnostics) - errors} warning(s)"
        )
        if errors:
            sys.exit(1)


@main.command("write-edmx")
@click.argument("locator")
@click.option(
    "--context",
    "context_suffix",
    default=None,
    help="Suffix of the model class name (default: any class with to_edmx).",
)
@click.option("-o", "--output", type=click.Path(), default=None, help="Output .edmx path.")
@_verbose_option
def write_edmx(locator: str, context_suffix: str | None, output: str | None, verbose: bool):
    """Write the composite document of the model class in LOCATOR."""
    _setup_logging(verbose)
    try:
        # no suffix given: first model class in the module
        RefreshPipeline().write_edmx(locator, context_suffix or "", output=output)
    except EdmViewsError as exc:
        _fail(exc)


@main.command()
def namespaces():
    """List the known schema versions and their namespaces."""
    from rich.table import Table as RichTable

    table = RichTable(title="Schema Namespaces", show_lines=False)
    table.add_column("Version", style="bold cyan")
    table.add_column("Section", style="bold")
    table.add_column("Namespace")

    for version, kind, uri in DEFAULT_TABLE.rows():
        table.add_row(version.value, kind.value, uri)

    console.print(table)


if __name__ == "__main__":
    main()
