"""Typer CLI entry point for POM Guard."""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from sqlmodel import Session

from pom_guard.config import DatabaseConfig, RepositoryConfig
from pom_guard.consistency import collect_report
from pom_guard.db import create_sqlite_engine, ingest_forest, init_db, load_edges
from pom_guard.exceptions import PomGuardError
from pom_guard.forest import build_forest
from pom_guard.graph import build_graph, graph_from_edges, reverse_dependencies
from pom_guard.repository import create_repository_service
from pom_guard.updates import check_updates
from pom_guard.visualize import (
    build_forest_tree,
    consolidated_table,
    inconsistency_table,
    updates_table,
    usage_table,
)
from pom_guard.visualize_html import export_pyvis

app = typer.Typer(add_completion=False, help="Analyze multi-module Maven builds.")
console = Console()


class ColorMode(str, Enum):
    auto = "auto"
    always = "always"
    never = "never"


@app.callback()
def _main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
    color: Annotated[ColorMode, typer.Option("--color", help="When to use colors.")] = ColorMode.auto,
) -> None:
    global console
    if color is ColorMode.always:
        console = Console(force_terminal=True)
    elif color is ColorMode.never:
        console = Console(no_color=True, highlight=False)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _fail(exc: Exception) -> typer.Exit:
    # Unwrapped so paths in the message stay intact.
    console.print(f"[bold red]Error:[/bold red] {exc}", soft_wrap=True)
    return typer.Exit(code=1)


@app.command()
def analyze(
    pom: Annotated[Path, typer.Argument(help="Root pom.xml (or the directory holding it).")],
    detailed_usage: Annotated[
        bool, typer.Option("--detailed-usage", help="Show which modules declare each dependency.")
    ] = False,
    force_multi_module: Annotated[
        bool,
        typer.Option("--force-multi-module", help="Treat the build as multi-module (auto-detected by default)."),
    ] = False,
    show_tree: Annotated[bool, typer.Option("--tree/--no-tree", help="Print the module tree.")] = True,
) -> None:
    """Resolve the build and report consolidated dependencies and version inconsistencies."""
    try:
        forest = build_forest(pom)
    except PomGuardError as exc:
        raise _fail(exc) from None

    root = forest.root
    multi_module = force_multi_module or (root is not None and root.is_multi_module())
    kind = "multi-module" if multi_module else "single module"
    console.print(f"[bold blue]Analyzing {kind} project:[/bold blue] {root.compact() if root else pom}")
    if show_tree:
        console.print(build_forest_tree(forest))

    report = collect_report(forest)
    console.print(consolidated_table(report))

    if multi_module and report.has_version_inconsistencies():
        console.print(
            f"[bold yellow]WARNING:[/bold yellow] Found {len(report.version_inconsistencies)} "
            "inconsistent dependency versions"
        )
        console.print(inconsistency_table(report))
    elif multi_module:
        console.print("[green]No version inconsistencies found across modules.[/green]")

    if detailed_usage:
        console.print(usage_table(report))


@app.command("check-updates")
def check_updates_cmd(
    pom: Annotated[Path, typer.Argument(help="Root pom.xml (or the directory holding it).")],
    workers: Annotated[
        Optional[int], typer.Option("--workers", min=1, help="Concurrent repository lookups.")
    ] = None,
    only_outdated: Annotated[
        bool, typer.Option("--only-outdated", help="Hide entries that are up to date.")
    ] = False,
) -> None:
    """Look up the latest published version of every dependency and parent."""
    try:
        forest = build_forest(pom)
        config = RepositoryConfig.from_env()
        with create_repository_service(config) as service:
            results = check_updates(forest, service, workers=workers or config.workers)
    except PomGuardError as exc:
        raise _fail(exc) from None

    if only_outdated:
        results = [r for r in results if r.has_update]
    console.print(updates_table(results))
    outdated = sum(1 for r in results if r.has_update)
    console.print(f"[dim]{outdated} update(s) available[/dim]")


@app.command()
def ingest(
    pom: Annotated[Path, typer.Argument(help="Root pom.xml (or the directory holding it).")],
    db: Annotated[Optional[Path], typer.Option("--db", help="SQLite db path.")] = None,
) -> None:
    """Resolve the build and persist modules and declarations into SQLite (SQLModel)."""
    db_path = db or DatabaseConfig.from_env().sqlite_path
    try:
        forest = build_forest(pom)
        engine = create_sqlite_engine(db_path)
        init_db(engine)
        with Session(engine) as session:
            count = ingest_forest(session, forest)
    except PomGuardError as exc:
        raise _fail(exc) from None

    console.print(f"[green]Ingested[/green] {count} module(s) into [bold]{db_path}[/bold].")


@app.command()
def reverse(
    target: Annotated[str, typer.Argument(help="Target GAV: groupId:artifactId:version")],
    db: Annotated[Optional[Path], typer.Option("--db", help="SQLite db path.")] = None,
    limit: Annotated[int, typer.Option("--limit", help="Max rows to print.")] = 200,
) -> None:
    """Show which modules declare TARGET, from an ingested database."""
    db_path = db or DatabaseConfig.from_env().sqlite_path
    if not db_path.exists():
        raise _fail(PomGuardError(f"Database not found: {db_path}"))

    engine = create_sqlite_engine(db_path)
    with Session(engine) as session:
        edges = load_edges(session)

    g = graph_from_edges(edges)

    preds = reverse_dependencies(g, target)
    table = Table(title=f"Reverse dependencies (who declares {target})")
    table.add_column("#", style="dim", width=6)
    table.add_column("Module")

    if not preds:
        console.print(table)
        console.print("[dim]No reverse dependencies found (or target not in graph).[/dim]")
        return

    for i, gav in enumerate(preds[:limit], start=1):
        table.add_row(str(i), gav)
    console.print(table)

    if len(preds) > limit:
        console.print(f"[dim]Truncated: showing {limit}/{len(preds)}[/dim]")


@app.command()
def html(
    pom: Annotated[Path, typer.Argument(help="Root pom.xml (or the directory holding it).")],
    out: Annotated[Path, typer.Option("--out", help="Output HTML file path.")] = Path("deps.html"),
) -> None:
    """Export an interactive HTML graph of modules, parents and dependencies (Pyvis)."""
    try:
        forest = build_forest(pom)
    except PomGuardError as exc:
        raise _fail(exc) from None

    out_path = export_pyvis(build_graph(forest), out)
    console.print(f"[green]Wrote[/green] {out_path}")


def main() -> None:
    """Console-script entry point."""
    app()
