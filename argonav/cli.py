"""Typer-based CLI for argonav WorkflowTemplate navigation.

Lines and columns on the command line are 1-based, like an editor shows
them; the library works with 0-based lines internally.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from . import __version__, config
from .cli_groups import config_grp
from .config_manager import load_settings, update_setting
from .models import SearchResult, SourceLocation
from .navigator import Navigator
from .watcher import WorkspaceWatcher

console = Console()

app = typer.Typer(
    help="🧭 argonav: go to definition and find references for Argo WorkflowTemplates.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.add_typer(config_grp, name="config")


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        typer.echo(f"argonav v{__version__}")
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
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log scanning details."),
):
    """argonav: heuristic navigation for Argo WorkflowTemplate YAML trees."""
    _configure_logging(verbose)


def _configure_logging(verbose: bool) -> None:
    package_logger = logging.getLogger("argonav")
    if not any(isinstance(h, RichHandler) for h in package_logger.handlers):
        package_logger.addHandler(RichHandler(console=Console(stderr=True), show_path=False))
    package_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


def _navigator(root: Path) -> Navigator:
    return Navigator.from_settings(root.resolve(), load_settings())


def _echo_locations(locations: List[SourceLocation]) -> None:
    for location in locations:
        typer.echo(f"{location.file}:{location.line + 1}")


def _report(result: SearchResult, what: str) -> None:
    if not result.locations:
        if result.query_name not in config.QUIET_NAMES:
            console.print(f"[yellow]⚠[/yellow] No {what} found for '{result.query_name}'.")
        raise typer.Exit(code=1)
    _echo_locations(result.locations)
    if len(result.locations) > 1:
        console.print(f"[dim]Found {len(result.locations)} {what} for '{result.query_name}'.[/dim]")


ROOT_OPTION = typer.Option(
    Path("."), "--root", "-r", exists=True, file_okay=False, help="Workspace root to scan."
)


@app.command("files")
def list_files(
    root: Path = typer.Argument(Path("."), exists=True, file_okay=False, help="Workspace root to scan."),
):
    """List the YAML files that searches will scan."""
    files = _navigator(root).search.list_files(root.resolve())
    if not files:
        typer.echo("No YAML files found.")
        return
    for path in files:
        typer.echo(path)


@app.command("definition")
def definition(
    name: str = typer.Argument(..., help="WorkflowTemplate name."),
    root: Path = ROOT_OPTION,
):
    """Find WorkflowTemplate definitions by metadata name."""
    result = _navigator(root).search.find_definition(root.resolve(), name)
    _report(result, "WorkflowTemplate definitions")


@app.command("template")
def template(
    workflow_template: str = typer.Argument(..., help="WorkflowTemplate name."),
    template_name: str = typer.Argument(..., help="Template name inside the WorkflowTemplate."),
    root: Path = ROOT_OPTION,
):
    """Find a template definition inside a WorkflowTemplate."""
    result = _navigator(root).search.find_template_in_workflow_template(
        root.resolve(), workflow_template, template_name
    )
    _report(result, "template definitions")


@app.command("template-refs")
def template_refs(
    workflow_template: str = typer.Argument(..., help="WorkflowTemplate name."),
    template_name: str = typer.Argument(..., help="Template name inside the WorkflowTemplate."),
    root: Path = ROOT_OPTION,
):
    """Find templateRef usages of a template."""
    result = _navigator(root).search.find_template_references(
        root.resolve(), workflow_template, template_name
    )
    _report(result, "references")


@app.command("workflow-template-refs")
def workflow_template_refs(
    workflow_template: str = typer.Argument(..., help="WorkflowTemplate name."),
    root: Path = ROOT_OPTION,
):
    """Find templateRef and workflowTemplateRef usages of a WorkflowTemplate."""
    result = _navigator(root).search.find_workflow_template_references(root.resolve(), workflow_template)
    _report(result, "references")


@app.command("resolve")
def resolve(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="YAML document containing the cursor."),
    line: int = typer.Argument(..., min=1, help="Cursor line (1-based)."),
    column: int = typer.Argument(1, min=1, help="Cursor column (1-based)."),
    root: Path = ROOT_OPTION,
    include_declaration: bool = typer.Option(
        False, "--include-declaration", help="List the cursor position first for reference searches."
    ),
):
    """Classify a cursor position and navigate from it.

    Example:
      argonav resolve workflows/main.yaml 12 15
      argonav resolve templates/build.yaml 8 --include-declaration
    """
    try:
        text = file.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        console.print(f"[red]✗[/red] Cannot read {file}: {exc}")
        raise typer.Exit(code=1)

    navigator = _navigator(root)
    outcome = navigator.navigate(
        text,
        line - 1,
        column - 1,
        document_path=str(file.resolve()),
        include_declaration=include_declaration,
    )
    if outcome is None:
        console.print("[yellow]⚠[/yellow] Nothing to navigate at this position.")
        raise typer.Exit(code=1)

    query = outcome.query
    console.print(f"[bold]{query.kind.value}[/bold] {query.describe()}")
    _report(outcome.result, "matches")


@app.command("watch")
def watch(
    root: Path = typer.Argument(Path("."), exists=True, file_okay=False, help="Workspace root to watch."),
):
    """👀 Watch a workspace and report cache invalidations.

    Example:
      argonav watch
      argonav watch ./workflows
    """
    navigator = _navigator(root)

    def on_change(path: str) -> None:
        navigator.invalidate(path)
        console.print(f"  [green]✓[/green] Invalidated caches ({Path(path).name} changed)")

    watcher = WorkspaceWatcher(root.resolve(), on_change)
    console.print(f"\n[bold green]👀 Watching[/bold green] [cyan]{root.resolve()}[/cyan] for YAML changes...")
    console.print("[dim]  Press Ctrl+C to stop[/dim]\n")

    watcher.start()
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        console.print(f"\n[yellow]Stopped watching.[/yellow] {watcher.handler.event_count} change(s) seen.")
    finally:
        watcher.stop()


@config_grp.command("show")
def config_show():
    """Show the effective search settings."""
    settings = load_settings()
    table = Table(title=f"Search settings ({config.CONFIG_FILE})")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    for key, value in settings.to_mapping().items():
        table.add_row(key, str(value))
    console.print(table)


@config_grp.command("set")
def config_set(
    key: str = typer.Argument(..., help="Setting name, e.g. file_concurrency."),
    value: str = typer.Argument(..., help="New value."),
):
    """Change one search setting and persist it."""
    try:
        settings = update_setting(key, value)
    except KeyError:
        raise typer.BadParameter(f"Unknown setting '{key}'.")
    except ValueError as exc:
        raise typer.BadParameter(f"Invalid value for '{key}': {exc}")
    except OSError as exc:
        console.print(f"[red]✗[/red] {exc}")
        raise typer.Exit(code=1)
    typer.echo(f"Set {key} = {settings.to_mapping()[key]}")


if __name__ == "__main__":
    app()
