"""
DarTwin CLI.

Commands:
- parse: DSL file -> model JSON
- graph: DSL file -> graph JSON
- layout: DSL file -> positioned graph JSON
- check: report parser and graph builder diagnostics (human, vscode or table)
- validate: check externally supplied model or graph JSON
"""

import logging
import platform
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from dartwin._version import get_version
from dartwin.core import ir
from dartwin.core.errors import ConfigError
from dartwin.core.graph_builder import build_graph_with_diagnostics
from dartwin.core.interchange import (
    graph_to_json,
    model_to_json,
    positioned_graph_to_json,
    validate_graph_data,
    validate_model_data,
)
from dartwin.core.manifest import DarTwinManifest, load_project_manifest
from dartwin.core.parser import parse_file
from dartwin.ui.layout_engine import get_layout_cache, layout_graph, metrics_from_config

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"

console = Console()


def version_callback(value: bool) -> None:
    """Display version and environment information."""
    if value:
        typer.echo(f"DarTwin {get_version()}")
        typer.echo(f"Python {platform.python_version()} ({platform.python_implementation()})")
        raise typer.Exit()


app = typer.Typer(
    help="""DarTwin – digital twin architecture diagrams from a DSL

Pipeline: DSL text -> model -> graph -> positioned graph

Each command reads one .dartwin file; settings come from the nearest
dartwin.toml, if any.
""",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool | None = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and environment information",
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Log debug output to stderr"),
) -> None:
    """DarTwin CLI main callback for global options."""
    ctx.obj = {"verbose": verbose}


# =============================================================================
# Helpers
# =============================================================================


def _load_settings(ctx: typer.Context, file: Path) -> DarTwinManifest:
    """Load the manifest governing ``file`` and configure logging from it."""
    try:
        manifest = load_project_manifest(file)
    except ConfigError as e:
        typer.echo(f"Config error: {e}", err=True)
        raise typer.Exit(code=1)

    verbose = bool(ctx.obj and ctx.obj.get("verbose"))
    level = logging.DEBUG if verbose else manifest.logging.level_number
    logging.basicConfig(level=level, format=LOG_FORMAT, force=True)
    return manifest


def _require_file(path: str) -> Path:
    file = Path(path)
    if not file.is_file():
        typer.echo(f"File not found: {path}", err=True)
        raise typer.Exit(code=1)
    return file


def _parse(path: Path) -> tuple[ir.DarTwinModel, list[ir.Diagnostic]]:
    try:
        return parse_file(path)
    except UnicodeDecodeError as e:
        typer.echo(f"Cannot read {path}: not valid UTF-8 ({e.reason} at byte {e.start})", err=True)
        raise typer.Exit(code=1)


def _emit(text: str, output: str | None) -> None:
    if output:
        Path(output).write_text(text + "\n", encoding="utf-8")
        typer.echo(f"Wrote {output}", err=True)
    else:
        typer.echo(text)


def _print_human_diagnostics(file: Path, diagnostics: list[ir.Diagnostic]) -> None:
    for diagnostic in diagnostics:
        typer.echo(f"{file}:{diagnostic.format()}")


def _print_vscode_diagnostics(file: Path, diagnostics: list[ir.Diagnostic]) -> None:
    # file:line:col: severity: message
    for diagnostic in diagnostics:
        line = diagnostic.line or 1
        column = diagnostic.column or 1
        typer.echo(f"{file}:{line}:{column}: {diagnostic.severity.value}: {diagnostic.message}")


def _print_diagnostics_table(file: Path, diagnostics: list[ir.Diagnostic]) -> None:
    if not diagnostics:
        console.print("[dim]No diagnostics.[/dim]")
        return

    table = Table(title=str(file))
    table.add_column("Line", justify="right", style="dim")
    table.add_column("Severity", no_wrap=True)
    table.add_column("Code", no_wrap=True)
    table.add_column("Message")

    for diagnostic in diagnostics:
        severity = diagnostic.severity.value
        table.add_row(
            str(diagnostic.line) if diagnostic.line is not None else "",
            f"[yellow]{severity}[/yellow]" if severity == "warning" else severity,
            diagnostic.code.value,
            diagnostic.message,
        )

    console.print(table)


# =============================================================================
# Commands
# =============================================================================


@app.command(name="parse")
def parse_command(
    ctx: typer.Context,
    file: str = typer.Argument(..., help="DarTwin DSL file"),
    output: str | None = typer.Option(None, "--output", "-o", help="Write JSON to this file"),
) -> None:
    """
    Parse a DSL file and print its model as JSON.
    """
    path = _require_file(file)
    _load_settings(ctx, path)
    model, _ = _parse(path)
    _emit(model_to_json(model), output)


@app.command(name="graph")
def graph_command(
    ctx: typer.Context,
    file: str = typer.Argument(..., help="DarTwin DSL file"),
    output: str | None = typer.Option(None, "--output", "-o", help="Write JSON to this file"),
) -> None:
    """
    Build the render-ready graph of a DSL file and print it as JSON.
    """
    path = _require_file(file)
    _load_settings(ctx, path)
    model, _ = _parse(path)
    graph, _ = build_graph_with_diagnostics(model)
    _emit(graph_to_json(graph), output)


@app.command(name="layout")
def layout_command(
    ctx: typer.Context,
    file: str = typer.Argument(..., help="DarTwin DSL file"),
    output: str | None = typer.Option(None, "--output", "-o", help="Write JSON to this file"),
    no_cache: bool = typer.Option(False, "--no-cache", help="Recompute even if cached"),
) -> None:
    """
    Lay out a DSL file and print the positioned graph as JSON.
    """
    path = _require_file(file)
    manifest = _load_settings(ctx, path)

    try:
        metrics = metrics_from_config(manifest.layout)
    except ConfigError as e:
        typer.echo(f"Config error: {e}", err=True)
        raise typer.Exit(code=1)

    model, _ = _parse(path)
    graph, _ = build_graph_with_diagnostics(model)

    use_cache = manifest.layout.cache and not no_cache
    cache = get_layout_cache(manifest.project_root or path.resolve().parent) if use_cache else None

    positioned = cache.get(graph, metrics) if cache else None
    if positioned is None:
        positioned = layout_graph(graph, metrics)
        if cache:
            cache.set(graph, positioned, metrics)

    _emit(positioned_graph_to_json(positioned), output)


@app.command(name="check")
def check_command(
    ctx: typer.Context,
    file: str = typer.Argument(..., help="DarTwin DSL file"),
    format: str = typer.Option(
        "human", "--format", "-f", help="Output format: 'human', 'vscode' or 'table'"
    ),
) -> None:
    """
    Report skipped statements, duplicates and unresolved references.

    Exits with status 1 when there is at least one warning.
    """
    path = _require_file(file)
    _load_settings(ctx, path)

    model, parse_diagnostics = _parse(path)
    graph, build_diagnostics = build_graph_with_diagnostics(model)
    diagnostics = parse_diagnostics + build_diagnostics

    if format == "vscode":
        _print_vscode_diagnostics(path, diagnostics)
    elif format == "table":
        _print_diagnostics_table(path, diagnostics)
    else:
        _print_human_diagnostics(path, diagnostics)

    warnings = [d for d in diagnostics if d.severity == ir.DiagnosticSeverity.WARNING]
    if warnings:
        if format != "vscode":
            typer.echo(f"{len(warnings)} warning(s)", err=True)
        raise typer.Exit(code=1)

    if format != "vscode":
        typer.echo(f"OK: {len(graph.nodes)} nodes, {len(graph.edges)} edges")


@app.command(name="validate")
def validate_command(
    file: str = typer.Argument(..., help="JSON file to validate"),
    kind: str = typer.Option("model", "--kind", "-k", help="What the JSON holds: 'model' or 'graph'"),
) -> None:
    """
    Validate model or graph JSON produced by another tool.
    """
    if kind not in ("model", "graph"):
        typer.echo(f"Unknown kind: {kind} (expected 'model' or 'graph')", err=True)
        raise typer.Exit(code=1)

    path = _require_file(file)
    data = path.read_bytes()
    result = validate_model_data(data) if kind == "model" else validate_graph_data(data)

    if not result.valid:
        where = f" at {result.field}" if result.field else ""
        typer.echo(f"Invalid {kind}{where}: {result.message}", err=True)
        raise typer.Exit(code=1)

    typer.echo(f"OK: valid {kind}")


def main() -> None:
    """Entry point for the ``dartwin`` command."""
    app()


if __name__ == "__main__":
    main()
