"""
Command-Line Interface

CLI commands for feedback-rag.

Commands:
    feedback-rag analyze    - Embed a feedback CSV and run analysis queries
    feedback-rag summarize  - Print profile summaries (no API calls)

Usage:
    # Run the built-in example queries
    feedback-rag analyze data/customer_feedback_satisfaction.csv

    # Ask your own questions
    feedback-rag analyze data.csv -q "Who is likely to churn?" -q "What do Gold members value?"

    # Smaller batches, slower pacing
    feedback-rag analyze data.csv --batch-size 200 --batch-delay 0.5

    # Inspect the text that gets embedded
    feedback-rag summarize data.csv --limit 5
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel

from feedback_rag.ingestion.embedder import batch_count
from feedback_rag.ingestion.loader import CSVFormatError, RecordParseError

__all__ = ["main", "app"]

app = typer.Typer(
    name="feedback-rag",
    help="Retrieval-augmented analysis of customer feedback",
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _load_or_exit(analyzer, csv_path: Path):
    try:
        return analyzer.load(csv_path)
    except FileNotFoundError as e:
        err_console.print(f"[red]{e}[/]")
        raise typer.Exit(code=1)
    except (CSVFormatError, RecordParseError) as e:
        err_console.print(f"[red]Invalid feedback data: {e}[/]")
        raise typer.Exit(code=1)


@app.command()
def analyze(
    csv_path: Path = typer.Argument(
        ...,
        help="Customer feedback CSV",
    ),
    queries: Optional[list[str]] = typer.Option(
        None,
        "--query", "-q",
        help="Analysis query (repeatable). Defaults to the example queries.",
    ),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config", "-c",
        help="TOML configuration file",
        exists=True,
    ),
    batch_size: Optional[int] = typer.Option(
        None,
        "--batch-size", "-b",
        help="Records per embedding call",
    ),
    batch_delay: Optional[float] = typer.Option(
        None,
        "--batch-delay",
        help="Seconds to pause between embedding calls",
    ),
    top_k: Optional[int] = typer.Option(
        None,
        "--top-k", "-k",
        help="Similar profiles retrieved per query",
    ),
    query_delay: Optional[float] = typer.Option(
        None,
        "--query-delay",
        help="Seconds to pause between queries",
    ),
    llm_model: Optional[str] = typer.Option(
        None,
        "--llm-model",
        help="Chat model for the analysis",
    ),
    embedding_model: Optional[str] = typer.Option(
        None,
        "--embedding-model",
        help="Embedding model",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Log progress details",
    ),
) -> None:
    """Embed a feedback CSV and run analysis queries against it."""
    from feedback_rag.api.analyzer import EXAMPLE_QUERIES, FeedbackAnalyzer
    from feedback_rag.config import FeedbackConfig

    load_dotenv()
    _configure_logging(verbose)

    try:
        base = FeedbackConfig.from_file(config_file) if config_file else FeedbackConfig()
        config = base.with_overrides(
            embedding_batch_size=batch_size,
            embedding_batch_delay=batch_delay,
            query_top_k=top_k,
            query_delay=query_delay,
            llm_model=llm_model,
            embedding_model=embedding_model,
        )
    except ValueError as e:
        err_console.print(f"[red]Invalid configuration: {e}[/]")
        raise typer.Exit(code=1)

    analyzer = FeedbackAnalyzer(config)
    records = _load_or_exit(analyzer, csv_path)
    console.print(f"Loaded {len(records)} customer records")

    def on_batch(report) -> None:
        if report.succeeded:
            console.print(
                f"Completed chunk {report.batch_number}/{report.batch_count} "
                f"({report.size} records)"
            )
        else:
            err_console.print(
                f"[red]Error processing chunk {report.batch_number}: {report.error}[/]"
            )

    def on_outcome(outcome) -> None:
        console.print()
        if outcome.ok:
            console.print(Panel(
                Markdown(outcome.analysis),
                title=f"Query: {outcome.query}",
                border_style="green",
            ))
        else:
            err_console.print(f"[red]Error analyzing query '{outcome.query}': {outcome.error}[/]")

    async def _run() -> None:
        async with analyzer:
            chunks = batch_count(len(records), config.embedding_batch_size)
            console.print(
                f"Split into {chunks} chunks of size {config.embedding_batch_size} "
                f"(embedding with {config.embedding_model})"
            )
            result = await analyzer.ingest(records, on_batch=on_batch)
            console.print(f"Generated embeddings for {len(result.pairs)} records")
            if result.dropped_ids:
                err_console.print(
                    f"[yellow]{len(result.dropped_ids)} records dropped from "
                    f"{result.batches_failed} failed chunk(s)[/]"
                )

            await analyzer.run_queries(
                list(queries) if queries else list(EXAMPLE_QUERIES),
                on_outcome=on_outcome,
            )

    try:
        asyncio.run(_run())
    except (RuntimeError, ImportError) as e:
        err_console.print(f"[red]{e}[/]")
        raise typer.Exit(code=1)


@app.command()
def summarize(
    csv_path: Path = typer.Argument(
        ...,
        help="Customer feedback CSV",
    ),
    limit: int = typer.Option(
        10,
        "--limit", "-n",
        help="Number of summaries to print (0 for all)",
    ),
) -> None:
    """Print the profile summaries that would be embedded."""
    from feedback_rag.api.analyzer import FeedbackAnalyzer

    records = _load_or_exit(FeedbackAnalyzer(), csv_path)
    shown = records if limit <= 0 else records[:limit]

    for record in shown:
        console.print(f"[cyan]{record.customer_id}[/] {record.profile_summary}")
    console.print(f"\n[dim]{len(shown)} of {len(records)} records[/]")


def main() -> None:
    """Entry point for the CLI."""
    app()
