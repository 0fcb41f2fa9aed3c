#!/usr/bin/env python3
"""
Analyze Customer Feedback Script

Thin wrapper around FeedbackAnalyzer: loads the CSV, embeds it in paced
chunks, then runs the example queries (or your own) one by one.

Usage:
    python scripts/analyze_feedback.py data/customer_feedback_satisfaction.csv
    python scripts/analyze_feedback.py data/feedback.csv --chunk-size 500
    python scripts/analyze_feedback.py data/feedback.csv --query "Who is likely to churn?"
    python scripts/analyze_feedback.py data/feedback.csv --model gpt-4o
"""

from __future__ import annotations

import argparse
import asyncio
import sys
import time
from pathlib import Path

from dotenv import load_dotenv

from feedback_rag.api.analyzer import EXAMPLE_QUERIES, FeedbackAnalyzer
from feedback_rag.config import FeedbackConfig
from feedback_rag.ingestion.embedder import batch_count
from feedback_rag.types.results import BatchReport, QueryOutcome

PROJECT_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(PROJECT_ROOT / ".env")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Run retrieval-augmented analysis over a customer feedback CSV"
    )
    parser.add_argument(
        "input",
        type=Path,
        nargs="?",
        default=PROJECT_ROOT / "data" / "customer_feedback_satisfaction.csv",
        help="Path to the feedback CSV",
    )
    parser.add_argument(
        "--chunk-size",
        type=int,
        default=None,
        help="Records per embedding call (default: from FeedbackConfig)",
    )
    parser.add_argument(
        "--top-k",
        type=int,
        default=None,
        help="Similar profiles per query (default: from FeedbackConfig)",
    )
    parser.add_argument(
        "--model",
        type=str,
        default=None,
        help="Chat model override (default: from FeedbackConfig)",
    )
    parser.add_argument(
        "--query",
        action="append",
        default=None,
        help="Analysis query; repeat for several (default: example queries)",
    )
    return parser.parse_args()


def on_batch(report: BatchReport) -> None:
    if report.succeeded:
        print(f"Completed chunk {report.batch_number} ({report.size} records)")
    else:
        print(f"Error processing chunk {report.batch_number}: {report.error}", file=sys.stderr)


def on_outcome(outcome: QueryOutcome) -> None:
    print(f"\n=== Query: {outcome.query} ===\n")
    if outcome.ok:
        print(f"Analysis:\n{outcome.analysis}\n")
    else:
        print(f"Error analyzing query: {outcome.error}", file=sys.stderr)


async def main() -> None:
    args = parse_args()

    config = FeedbackConfig().with_overrides(
        embedding_batch_size=args.chunk_size,
        query_top_k=args.top_k,
        llm_model=args.model,
    )

    start = time.time()
    async with FeedbackAnalyzer(config) as analyzer:
        records = analyzer.load(args.input)
        print(f"Loaded {len(records)} customer records")

        chunks = batch_count(len(records), config.embedding_batch_size)
        print(f"Split into {chunks} chunks of size {config.embedding_batch_size}")

        result = await analyzer.ingest(records, on_batch=on_batch)
        print(f"Generated embeddings for {len(result.pairs)} records")
        for failure in result.failed_batches:
            print(
                f"  Chunk {failure.batch_number} dropped: {', '.join(failure.dropped_ids)}",
                file=sys.stderr,
            )

        await analyzer.run_queries(args.query or EXAMPLE_QUERIES, on_outcome=on_outcome)

    print(f"Total script duration: {time.time() - start:.2f}s")


if __name__ == "__main__":
    asyncio.run(main())
