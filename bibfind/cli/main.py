#!/usr/bin/env python3
"""
Main CLI for bibfind - fuzzy picker for a YAML reference library.

Usage:
    bibfind                         - Interactive search of the configured library
    bibfind search [LIBRARY]        - Same, explicitly
    bibfind query [LIBRARY] -q TEXT - Rank once and print a table
    bibfind show-config             - Print the effective configuration
"""

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import click
import yaml
from loguru import logger
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from ..core.config import Config, SearchConfig
from ..core.coordinator import Launcher, spawn_worker
from ..core.errors import BibfindError
from ..core.library import (
    LibraryEntry,
    build_records,
    entry_values,
    find_entry,
    load_library,
    resolve_file,
)
from ..core.log import setup_logging
from ..core.session import SearchSession, SessionView
from .app import InteractiveApp

console = Console()
err_console = Console(stderr=True)


@dataclass
class CliState:
    config: Config
    stderr_sink: Optional[int] = None


def run_inline(job) -> None:
    """Scan launcher for one-shot commands: run the scan on the caller's thread."""
    job()


def parse_categories(values: Sequence[str]) -> List[List[str]]:
    """Turn ("title,author", "year") into [["title", "author"], ["year"]]."""
    categories = []
    for value in values:
        fields = [name.strip() for name in value.split(",") if name.strip()]
        if not fields:
            raise click.BadParameter(f"empty category: {value!r}", param_hint="--category")
        categories.append(fields)
    return categories


def effective_search_config(
    config: Config,
    categories: Sequence[str],
    weights: Sequence[float],
) -> SearchConfig:
    """Apply --category/--weight overrides on top of the configured search section."""
    data = config.search.model_dump()
    if categories:
        data["categories"] = parse_categories(categories)
        data["labels"] = None
        data["weights"] = None
    if weights:
        data["weights"] = list(weights)
    return SearchConfig(**data)


def load_records(
    config: Config,
    library: Optional[Path],
    search_config: SearchConfig,
    launcher: Launcher = spawn_worker,
) -> Tuple[List[LibraryEntry], SearchSession]:
    entries = load_library(
        library or config.library.path,
        pattern=config.library.pattern,
        stringify_scalars=config.library.stringify_scalars,
    )
    records = build_records(entries, search_config.categories)
    session = SearchSession(
        records,
        len(search_config.categories),
        weights=search_config.weights,
        launcher=launcher,
    )
    return entries, session


def search_options(f):
    f = click.option(
        "--weight", "-w", "weights", type=float, multiple=True,
        help="Weight per category, in category order",
    )(f)
    f = click.option(
        "--category", "-C", "categories", multiple=True,
        help="Comma-separated fields searched together; repeat for more boxes",
    )(f)
    f = click.argument(
        "library", required=False,
        type=click.Path(file_okay=False, path_type=Path),
    )(f)
    return f


@click.group(invoke_without_command=True)
@click.option(
    "--config", "-c", "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Config file path",
)
@click.option("--verbose", "-v", is_flag=True, help="Log debug output to stderr")
@click.pass_context
def cli(ctx, config_path: Optional[Path], verbose: bool):
    """bibfind - fuzzy search through a YAML reference library."""
    setup_logging(verbose=verbose)
    try:
        config = Config.load(config_path)
    except (ValidationError, yaml.YAMLError) as e:
        err_console.print(f"[red]Invalid configuration:[/red] {e}")
        ctx.exit(2)

    stderr_sink = setup_logging(config.logging.level, config.logging.file, verbose)
    ctx.obj = CliState(config=config, stderr_sink=stderr_sink)

    if ctx.invoked_subcommand is None:
        ctx.invoke(search)


@cli.command()
@search_options
@click.option("--print-field", "-f", help="Field of the chosen entry to print")
@click.option("--open", "open_files", is_flag=True, help="Open the chosen entry's files")
@click.pass_context
def search(
    ctx,
    library: Optional[Path],
    categories: Tuple[str, ...],
    weights: Tuple[float, ...],
    print_field: Optional[str],
    open_files: bool,
):
    """Search interactively and print the chosen entry's files."""
    state: CliState = ctx.obj
    config = state.config
    try:
        search_config = effective_search_config(config, categories, weights)
        entries, session = load_records(config, library, search_config)
    except (BibfindError, ValidationError) as e:
        err_console.print(f"[red]Error:[/red] {e}")
        ctx.exit(1)

    app = InteractiveApp(
        session,
        search_config.category_labels,
        tick_rate=search_config.tick_rate,
        console=err_console,
    )

    # The full-screen display owns the terminal; keep logging to the file only
    if state.stderr_sink is not None:
        logger.remove(state.stderr_sink)
        state.stderr_sink = None

    try:
        selected = asyncio.run(app.run())
    except KeyboardInterrupt:
        selected = None

    if selected is None:
        err_console.print("[yellow]Nothing selected[/yellow]")
        ctx.exit(1)

    entry = find_entry(entries, selected)
    field_name = print_field or config.library.output_field
    values = entry_values(entry, field_name)
    if not values:
        err_console.print(f"[yellow]Selected entry has no '{field_name}' field[/yellow]")
    for value in values:
        click.echo(value)
        if open_files:
            target = resolve_file(entry, value)
            logger.info(f"Opening {target}")
            click.launch(str(target))


@cli.command()
@search_options
@click.option("--query", "-q", "queries", multiple=True, help="Query text, one per category")
@click.option("--limit", "-l", default=10, show_default=True, help="Max results")
@click.pass_context
def query(
    ctx,
    library: Optional[Path],
    categories: Tuple[str, ...],
    weights: Tuple[float, ...],
    queries: Tuple[str, ...],
    limit: int,
):
    """Rank the library once against the given queries."""
    config = ctx.obj.config
    try:
        search_config = effective_search_config(config, categories, weights)
        entries, session = load_records(
            config, library, search_config, launcher=run_inline
        )
    except (BibfindError, ValidationError) as e:
        err_console.print(f"[red]Error:[/red] {e}")
        ctx.exit(1)

    if len(queries) > len(search_config.categories):
        raise click.BadParameter(
            f"got {len(queries)} queries for {len(search_config.categories)} categories",
            param_hint="--query",
        )
    for i, text in enumerate(queries):
        session.set_query(i, text)

    session.tick()
    view = session.poll()
    display_results(view, entries, search_config.category_labels, limit)


def display_results(
    view: SessionView,
    entries: Sequence[LibraryEntry],
    labels: Sequence[str],
    limit: int,
):
    """Display ranked results in a table."""
    if not len(view.ranked):
        console.print("[yellow]No results found[/yellow]")
        return

    table = Table(title=f"Results ({len(view.ranked)} matches)")
    table.add_column("#", justify="right")
    table.add_column(labels[0].capitalize(), style="cyan", no_wrap=False)
    table.add_column("Score", justify="right")
    table.add_column("File", style="magenta")

    for position, ranked in enumerate(view.ranked.entries[:limit], 1):
        entry = find_entry(entries, ranked.record.id)
        source = entry.path.name if entry is not None and entry.path else ""
        table.add_row(
            str(position),
            ranked.record.title,
            f"{ranked.score:.3f}",
            source,
        )

    console.print(table)


@cli.command(name="show-config")
@click.pass_context
def show_config(ctx):
    """Print the effective configuration as YAML."""
    click.echo(ctx.obj.config.to_yaml(), nl=False)


def main():
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
