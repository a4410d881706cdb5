"""Typer-based CLI for JobGraph."""

from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from . import __version__, config_manager
from .config import BACKENDS, UNRESOLVED_CHOICES, ScanSettings
from .graph import JobGraph, resolve_target
from .pipeline import accept_all, default_path_formatter, generate, include_terms
from .records import JobPatterns
from .render import RENDERERS
from .search import SearchError, get_search_provider

console = Console()
err_console = Console(stderr=True)

app = typer.Typer(
    help="🧵 JobGraph — map which code paths enqueue which background jobs.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

config_app = typer.Typer(
    help="⚙️  Configuration — scan patterns and defaults.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)
app.add_typer(config_app, name="config")


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        typer.echo(f"JobGraph v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log scan progress."),
):
    """JobGraph: static job invocation graphs for Ruby codebases."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _settings(
    backend: Optional[str] = None,
    exclude: Optional[str] = None,
    unresolved: Optional[str] = None,
) -> ScanSettings:
    if backend is not None and backend not in BACKENDS:
        raise typer.BadParameter(f"--backend must be one of: {', '.join(BACKENDS)}")
    if unresolved is not None and unresolved not in UNRESOLVED_CHOICES:
        raise typer.BadParameter(f"--unresolved must be one of: {', '.join(UNRESOLVED_CHOICES)}")

    settings = config_manager.load_scan_settings()
    overrides = {
        key: value
        for key, value in (("backend", backend), ("exclude", exclude), ("unresolved", unresolved))
        if value is not None
    }
    return replace(settings, **overrides)


def _fail(exc: Exception) -> None:
    err_console.print(f"[red]Error:[/red] {exc}")
    raise typer.Exit(code=1)


def _scan(dirs: List[Path], settings: ScanSettings) -> JobGraph:
    graph = JobGraph(JobPatterns(settings))
    search = get_search_provider(settings.backend)
    for directory in dirs:
        graph.scan(str(directory.expanduser()), search)
    return graph


DirsArgument = typer.Argument(..., help="Source directories to scan.")


@app.command("graph")
def graph_command(
    dirs: List[Path] = DirsArgument,
    include: Optional[List[str]] = typer.Option(
        None, "--include", "-i", help="Only draw jobs whose name contains this text (repeatable)."
    ),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the diagram to this file."),
    output_format: str = typer.Option("plantuml", "--format", "-f", help="plantuml or dot."),
    unresolved: Optional[str] = typer.Option(
        None, "--unresolved", help="Invocations of undeclared jobs: drop, keep or flag."
    ),
    backend: Optional[str] = typer.Option(None, "--backend", help="Search backend: auto, ripgrep or python."),
    exclude: Optional[str] = typer.Option(None, "--exclude", help="ripgrep glob for paths to skip."),
):
    """Render the job invocation graph."""
    if output_format not in RENDERERS:
        raise typer.BadParameter(f"--format must be one of: {', '.join(RENDERERS)}")
    settings = _settings(backend, exclude, unresolved)
    job_filter = include_terms(*include) if include else accept_all
    expanded = [str(d.expanduser()) for d in dirs]

    try:
        if output is None:
            generate(
                expanded,
                default_path_formatter,
                job_filter,
                None,
                settings=settings,
                output_format=output_format,
            )
            return
        with open(output, "w", encoding="utf-8") as sink:
            generate(
                expanded,
                default_path_formatter,
                job_filter,
                sink,
                settings=settings,
                output_format=output_format,
            )
    except (SearchError, ValueError, OSError) as exc:
        _fail(exc)
    err_console.print(f"[green]✓[/green] Wrote {output_format} diagram to {output}")


@app.command("jobs")
def jobs_command(
    dirs: List[Path] = DirsArgument,
    backend: Optional[str] = typer.Option(None, "--backend", help="Search backend: auto, ripgrep or python."),
    exclude: Optional[str] = typer.Option(None, "--exclude", help="ripgrep glob for paths to skip."),
):
    """List declared jobs, sorted by qualified name."""
    settings = _settings(backend, exclude)
    try:
        graph = _scan(dirs, settings)
    except (SearchError, ValueError, OSError) as exc:
        _fail(exc)

    if not graph.declarations:
        typer.echo("No job declarations found.")
        raise typer.Exit(code=0)

    table = Table(title="Declared jobs", show_header=True)
    table.add_column("Job", style="cyan")
    table.add_column("Location", style="dim")
    for dec in sorted(graph.declarations):
        table.add_row(dec.declared_name, default_path_formatter(str(dec.location)))
    console.print(table)


@app.command("calls")
def calls_command(
    dirs: List[Path] = DirsArgument,
    backend: Optional[str] = typer.Option(None, "--backend", help="Search backend: auto, ripgrep or python."),
    exclude: Optional[str] = typer.Option(None, "--exclude", help="ripgrep glob for paths to skip."),
):
    """List job invocation sites with their candidate names."""
    settings = _settings(backend, exclude)
    try:
        graph = _scan(dirs, settings)
    except (SearchError, ValueError, OSError) as exc:
        _fail(exc)

    if not graph.invocations:
        typer.echo("No job invocations found.")
        raise typer.Exit(code=0)

    declared = {dec.declared_name for dec in graph.declarations}
    table = Table(title="Job invocations", show_header=True, show_lines=True)
    table.add_column("Caller", style="cyan")
    table.add_column("Location", style="dim")
    table.add_column("Candidates")
    table.add_column("Resolved", style="green")
    for perf in graph.invocations:
        target = resolve_target(perf.candidates, declared)
        table.add_row(
            default_path_formatter(perf.invoking_name),
            default_path_formatter(str(perf.location)),
            "\n".join(perf.candidates),
            target or "[yellow]unresolved[/yellow]",
        )
    console.print(table)


@config_app.command("show")
def config_show():
    """Show the effective scan settings."""
    settings = config_manager.load_scan_settings()
    table = Table(title=f"Scan settings ({config_manager.CONFIG_FILE})", show_header=True)
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    for key, value in settings.to_mapping().items():
        if isinstance(value, list):
            value = ", ".join(value)
        table.add_row(key, str(value))
    console.print(table)


@config_app.command("set")
def config_set(
    key: str = typer.Argument(..., help="Setting name, e.g. job_suffix."),
    value: str = typer.Argument(..., help="New value; comma-separated for invoke_methods."),
):
    """Persist one scan setting."""
    try:
        stored = config_manager.save_setting(key, value)
    except KeyError:
        raise typer.BadParameter(f"Unknown setting '{key}'.")
    except ValueError as exc:
        raise typer.BadParameter(str(exc))
    typer.echo(f"Set {key} = {stored}")


@config_app.command("reset")
def config_reset():
    """Restore default scan settings."""
    if config_manager.reset_config():
        typer.echo("Scan settings reset to defaults.")
    else:
        typer.echo("No stored scan settings.")


def run() -> None:
    app()


if __name__ == "__main__":
    run()
