"""
Typer CLI for the speed-reading exercise engine.

Commands:
    speedreading analyze FILE       - Analyze a Turkish reading text
    speedreading init-db            - Initialize database tables
    speedreading sweep              - Time out expired attempts once
    speedreading sweep --watch      - Keep sweeping at the configured interval

Usage:
    speedreading --help
    speedreading analyze texts/okuma.txt --keywords 5
    speedreading sweep --watch --interval 30
"""

from __future__ import annotations

import json
import sys
import time
from pathlib import Path
from typing import Optional

import typer
from loguru import logger
from rich import print as rprint
from rich.console import Console
from rich.table import Table

from config import get_settings

app = typer.Typer(
    help="Speed-reading exercise engine: text analysis and attempt maintenance",
    no_args_is_help=True,
)

console = Console()


def configure_logging() -> None:
    """Route loguru to stderr (and the configured log file) at the configured level."""
    settings = get_settings()
    logger.remove()
    logger.add(
        sys.stderr,
        level=settings.log_level,
        format="<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | {message}",
    )
    if settings.log_file:
        Path(settings.log_file).parent.mkdir(parents=True, exist_ok=True)
        logger.add(settings.log_file, level=settings.log_level, rotation="10 MB", retention=5, encoding="utf-8")


# ========================================
# Text Analysis
# ========================================


@app.command("analyze")
def analyze(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="UTF-8 text file"),
    keywords: Optional[int] = typer.Option(None, "--keywords", "-k", min=1, help="Number of keywords to extract"),
    as_json: bool = typer.Option(False, "--json", help="Print the full analysis as JSON"),
) -> None:
    """
    Analyze a reading text: statistics, readability, difficulty and keywords.
    """
    from src.exercise.authoring import derive_time_limit
    from src.reading import TextDifficultyAnalyzer

    settings = get_settings()
    analyzer = TextDifficultyAnalyzer(
        keyword_count=keywords or settings.keyword_count,
        summary_max_length=settings.summary_max_length,
    )
    result = analyzer.analyze(path.read_text(encoding="utf-8"))

    if as_json:
        console.print_json(json.dumps(result.to_dict(), ensure_ascii=False))
        return

    stats = result.statistics
    table = Table(title=f"Text Analysis: {path.name}")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green", justify="right")

    table.add_row("Words", str(stats.word_count))
    table.add_row("Sentences", str(stats.sentence_count))
    table.add_row("Paragraphs", str(stats.paragraph_count))
    table.add_row("Syllables", str(stats.syllable_count))
    table.add_row("Avg words/sentence", f"{stats.average_words_per_sentence:.1f}")
    table.add_row("Avg word length", f"{stats.average_word_length:.1f}")
    table.add_row("Lexical diversity", f"{stats.lexical_diversity:.2f}")
    table.add_row("Readability", f"{result.readability_score:.1f}")
    table.add_row("Difficulty", result.difficulty.value)
    table.add_row("Difficulty score", f"{result.difficulty_score:.1f}")
    table.add_row("Target level", result.target_education_level.value)
    table.add_row("Reading time", f"{stats.estimated_reading_time_minutes} min")
    table.add_row(
        "Suggested time limit",
        f"{derive_time_limit(stats.word_count, result.target_education_level)} min",
    )
    console.print(table)

    if result.keywords:
        rprint(f"[bold]Keywords:[/bold] {', '.join(result.keywords)}")
    if result.summary:
        rprint(f"[bold]Summary:[/bold] {result.summary}")


# ========================================
# Database
# ========================================


@app.command("init-db")
def init_db() -> None:
    """
    Initialize database tables from SQLAlchemy models.

    Safe to run multiple times (idempotent).
    """
    from src.db.database import init_db as create_tables

    logger.info("Initializing database tables...")
    create_tables()
    rprint("[green]✓[/green] Database initialized!")


# ========================================
# Attempt Maintenance
# ========================================


@app.command("sweep")
def sweep(
    watch: bool = typer.Option(False, "--watch", "-w", help="Keep sweeping until interrupted"),
    interval: Optional[int] = typer.Option(None, "--interval", "-i", min=1, help="Seconds between sweeps"),
) -> None:
    """
    Time out in-progress attempts whose deadline has passed.
    """
    from src.attempts import AttemptStateMachine, BackgroundSweeper
    from src.db.sql_repository import SqlAttemptRepository, SqlExerciseRepository

    tracker = AttemptStateMachine(SqlExerciseRepository(), SqlAttemptRepository())

    if not watch:
        count = tracker.sweep()
        rprint(f"[green]✓[/green] Timed out {count} expired attempt(s)")
        return

    sweeper = BackgroundSweeper(tracker, interval_seconds=interval or get_settings().sweep_interval_seconds)
    sweeper.sweep_now()
    sweeper.start()
    rprint(f"[cyan]Sweeping every {sweeper.interval_seconds}s. Press Ctrl+C to stop.[/cyan]")
    try:
        while sweeper.status.is_running:
            time.sleep(1.0)
    except KeyboardInterrupt:
        pass
    finally:
        sweeper.stop()
        status = sweeper.status
        rprint(f"[green]✓[/green] {status.total_sweeps} sweep(s), {status.total_timed_out} attempt(s) timed out")


def main() -> None:
    """Entry point for the CLI."""
    configure_logging()
    app()


if __name__ == "__main__":
    main()
