"""Command line interface for OfficeFinder."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from officefinder.config import AppConfig
from officefinder.errors import UsageError
from officefinder.history import SearchHistory
from officefinder.models import RunOutcome, SearchOptions, SearchResultRecord
from officefinder.search.orchestrator import SearchCallbacks, SearchOrchestrator


console = Console()
app = typer.Typer(help="OfficeFinder - search ODT, DOCX and XLSX documents")

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _setup_logging(verbose: bool, log_file: Optional[Path] = None) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=LOG_DATE_FORMAT, handlers=handlers)


def _build_options(exact_phrase: bool, ignore_spaces: bool, proximity: Optional[int]) -> SearchOptions:
    try:
        return SearchOptions(
            exact_phrase=exact_phrase,
            ignore_spaces=ignore_spaces,
            proximity=proximity is not None,
            proximity_distance=proximity if proximity is not None else 3,
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _open_history(history_file: Optional[Path]) -> SearchHistory:
    config = AppConfig(history_path=history_file)
    history = SearchHistory(config.resolve_history_path(Path.cwd()), limit=config.history_limit)
    history.load()
    return history


def _remember_term(history_file: Optional[Path], term: str) -> None:
    history = _open_history(history_file)
    history.add(term)
    try:
        history.save()
    except OSError as exc:
        logging.getLogger(__name__).warning("Could not save search history: %s", exc)


def _print_results(records: List[SearchResultRecord]) -> None:
    if not records:
        console.print("[yellow]No matches found.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("File")
    table.add_column("Matches", justify="right")
    table.add_column("Snippet")
    for record in records:
        table.add_row(str(record.file_path), str(record.match_count), record.snippet)
    console.print(table)


def _print_summary(outcome: RunOutcome) -> None:
    stats = outcome.stats
    if outcome.cancelled:
        console.print(
            f"Cancelled. Scanned {stats.files_scanned} files, found {stats.matches_found} matches."
        )
    elif outcome.error is not None:
        console.print(f"[red]Error: {outcome.error}[/red]")
    else:
        console.print(
            f"Done. Scanned {stats.files_scanned} files, found {stats.matches_found} matches. "
            f"In {stats.elapsed:.1f}s"
        )


@app.command()
def search(
    root: Path = typer.Argument(..., help="Directory to search.", resolve_path=True),
    term: str = typer.Argument(..., help="Search term"),
    exact_phrase: bool = typer.Option(
        False, "--exact-phrase", "-e", help="Match the term as a whole-word phrase"
    ),
    ignore_spaces: bool = typer.Option(
        False, "--ignore-spaces", "-s", help="With --exact-phrase, ignore whitespace differences"
    ),
    proximity: Optional[int] = typer.Option(
        None,
        "--proximity",
        "-p",
        help="Match the term's words in order, at most N words apart (1-10)",
    ),
    snippet_chars: int = typer.Option(AppConfig().snippet_chars, help="Snippet length in characters"),
    history_file: Path = typer.Option(None, "--history-file", help="Search history file"),
    remember: bool = typer.Option(True, "--history/--no-history", help="Record the term in the history"),
    log_file: Path = typer.Option(None, "--log-file", help="Also write the search log to this file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Search documents under ROOT for TERM."""
    _setup_logging(verbose, log_file)
    options = _build_options(exact_phrase, ignore_spaces, proximity)
    config = AppConfig(history_path=history_file, snippet_chars=snippet_chars)
    orchestrator = SearchOrchestrator.from_config(config)

    with console.status("Searching…") as status:
        callbacks = SearchCallbacks(on_progress=status.update)
        try:
            handle = orchestrator.run(root, term, options, callbacks)
        except UsageError as exc:
            raise typer.BadParameter(str(exc)) from exc

        if remember:
            _remember_term(history_file, term)

        try:
            while not handle.wait(0.2):
                pass
        except KeyboardInterrupt:
            status.update("Cancelling…")
            handle.cancel()
            handle.wait()

    outcome = handle.result()
    _print_results(handle.results)
    _print_summary(outcome)
    if outcome.error is not None:
        raise typer.Exit(code=1)


@app.command()
def history(
    history_file: Path = typer.Option(None, "--history-file", help="Search history file"),
    clear: bool = typer.Option(False, "--clear", help="Forget all stored terms"),
) -> None:
    """Show recent search terms."""
    store = _open_history(history_file)
    if clear:
        store.clear()
        store.save()
        console.print("Search history cleared.")
        return

    if not store.terms:
        console.print("[yellow]No search history.[/yellow]")
        return
    for index, term in enumerate(store.terms, start=1):
        console.print(f"{index:>2}. {term}")


@app.command()
def web(
    host: str = typer.Option("127.0.0.1", help="Host interface"),
    port: int = typer.Option(8000, help="Server port"),
) -> None:
    """Start the JSON search API."""
    try:
        import uvicorn
    except ImportError as exc:  # pragma: no cover
        raise typer.BadParameter(
            "uvicorn is not installed. Install the web extras with \"python -m pip install '.[web]'\""
        ) from exc

    from officefinder.web.app import app as web_app

    console.print(f"Starting web API on http://{host}:{port}")
    uvicorn.run(
        web_app,
        host=host,
        port=port,
        reload=False,
        log_level="info",
    )
