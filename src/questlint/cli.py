"""questlint CLI - typer application entry point."""

from __future__ import annotations

import atexit
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape

from questlint.config import ConfigError, LintConfig, load_config
from questlint.observability import close_file_logging, configure_logging, get_logger
from questlint.storage.errors import SourceUnavailableError

# Load environment variables from .env file
load_dotenv()

app = typer.Typer(
    name="qlint",
    help="questlint: validate quest-flow documents and reference data.",
    no_args_is_help=True,
)
# Report lines are plain text; never reflow or highlight them.
console = Console(soft_wrap=True, highlight=False)
err_console = Console(stderr=True, soft_wrap=True, highlight=False)

log = get_logger(__name__)

DEFAULT_LOGS_DIR = Path("logs")
SEPARATOR = "-" * 40

# Exit codes
EXIT_OK = 0
EXIT_ISSUES = 1
EXIT_SOURCE_ERROR = 2


@app.callback()
def main(
    verbose: Annotated[
        int,
        typer.Option(
            "-v",
            "--verbose",
            count=True,
            help="Increase verbosity: -v for INFO, -vv for DEBUG.",
        ),
    ] = 0,
    log_to_file: Annotated[
        bool,
        typer.Option(
            "--log",
            help="Enable file logging to ./logs/debug.jsonl.",
        ),
    ] = False,
) -> None:
    """questlint: validate quest-flow documents and reference data."""
    configure_logging(
        verbosity=verbose,
        log_to_file=log_to_file,
        logs_dir=DEFAULT_LOGS_DIR if log_to_file else None,
    )
    if log_to_file:
        atexit.register(close_file_logging)


def _fail(message: str) -> typer.Exit:
    err_console.print(f"[red]Error:[/red] {escape(message)}")
    return typer.Exit(EXIT_SOURCE_ERROR)


def _load_settings(config_path: Path | None) -> LintConfig:
    """Load configuration, exiting with code 2 if it cannot be read."""
    try:
        return load_config(config_path)
    except ConfigError as e:
        raise _fail(str(e)) from None


@app.command()
def check(
    quests: Annotated[
        Path | None,
        typer.Option("--quests", help="Path to quests directory (default: ./quests)."),
    ] = None,
    data: Annotated[
        Path | None,
        typer.Option("--data", help="Path to reference data directory (default: ./data)."),
    ] = None,
    config: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Config file (default: ./questlint.yaml)."),
    ] = None,
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Only output issues, no summary."),
    ] = False,
    no_journal_checks: Annotated[
        bool,
        typer.Option("--no-journal-checks", help="Skip the journal entry flow checks."),
    ] = False,
) -> None:
    """Validate every quest in the repository.

    Exits 0 when clean, 1 when issues or load failures were found, and 2
    when the quests or reference data cannot be read at all.
    """
    from questlint.checker import check_repository

    settings = _load_settings(config).with_overrides(
        quests_dir=quests,
        data_dir=data,
        journal_checks=False if no_journal_checks else None,
    )

    try:
        report = check_repository(settings)
    except SourceUnavailableError as e:
        raise _fail(str(e)) from None

    if report.quests_checked == 0 and not report.load_failures:
        if not quiet:
            console.print("No quests found.", markup=False)
        raise typer.Exit(EXIT_OK)

    for line in report.lines():
        console.print(line, markup=False)

    if not quiet:
        console.print(SEPARATOR, markup=False)
        console.print(report.summary, markup=False)

    raise typer.Exit(report.exit_code)


@app.command()
def validate(
    file: Annotated[Path, typer.Argument(help="Quest document to validate.")],
    data: Annotated[
        Path | None,
        typer.Option("--data", help="Path to reference data directory (default: ./data)."),
    ] = None,
    config: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Config file (default: ./questlint.yaml)."),
    ] = None,
) -> None:
    """Validate a single quest document (no cross-quest rules)."""
    from questlint.checker import validate_document
    from questlint.graph.validation_types import LoadFailure
    from questlint.storage.catalog import load_catalog
    from questlint.storage.loader import QuestParseError, load_quest_file

    settings = _load_settings(config).with_overrides(data_dir=data)

    if not file.is_file():
        raise _fail(f"Quest file not found: {file}")

    try:
        catalog = load_catalog(settings.data_dir)
    except SourceUnavailableError as e:
        raise _fail(str(e)) from None

    try:
        quest = load_quest_file(file)
    except QuestParseError as e:
        console.print(LoadFailure(path=file, reason=e.reason).format(), markup=False)
        raise typer.Exit(EXIT_ISSUES) from None

    result = validate_document(quest, catalog, settings)
    for issue in result.issues:
        console.print(issue.for_quest(quest.quest_id).format(), markup=False)

    if result.valid:
        console.print(f"[green]✓[/green] {quest.quest_id} is valid")
        raise typer.Exit(EXIT_OK)

    log.info("quest_invalid", quest_id=quest.quest_id, issues=len(result.issues))
    raise typer.Exit(EXIT_ISSUES)


@app.command()
def serve(
    host: Annotated[str, typer.Option("--host", help="Interface to bind.")] = "127.0.0.1",
    port: Annotated[int, typer.Option("--port", help="Port to listen on.")] = 8080,
    config: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Config file (default: ./questlint.yaml)."),
    ] = None,
) -> None:
    """Serve the validation API over HTTP."""
    import uvicorn

    from questlint.api import create_app

    settings = _load_settings(config)
    log.info("api_starting", host=host, port=port, quests_dir=str(settings.quests_dir))
    uvicorn.run(create_app(settings), host=host, port=port)


@app.command()
def version() -> None:
    """Show version information."""
    from questlint import __version__

    console.print(f"questlint v{__version__}")


if __name__ == "__main__":
    app()
