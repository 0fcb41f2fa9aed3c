"""
Chunked Embedding Producer

Embeds summarized records in fixed-size batches, one embedding call at a
time, pausing between calls to stay under the provider's rate limits.

Batch Semantics:
    - Records are split into contiguous batches of at most batch_size,
      preserving input order.
    - Batches are sent strictly sequentially; the pause between them is a
      self-imposed rate limit and is never parallelized away.
    - A failed batch is logged (with the customer ids it carried) and
      dropped. There is no retry, and later batches still run.
    - A misconfigured provider fails validate() before the first batch and
      aborts the run.
    - Cancellation takes effect at the next await (the pause or the next
      embedding call); CancelledError is never swallowed.

Example:
    >>> producer = ChunkedEmbeddingProducer(embeddings, batch_size=1000)
    >>> result = await producer.produce(records)
    >>> print(f"{len(result.pairs)} embedded, {len(result.dropped_ids)} dropped")
"""

from __future__ import annotations

import asyncio
import logging
import math
import time
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, TypeVar

from feedback_rag.types.records import FeedbackRecord
from feedback_rag.types.results import (
    BatchFailure,
    BatchReport,
    EmbeddedRecord,
    EmbeddingRunResult,
)

if TYPE_CHECKING:
    from feedback_rag.providers.base import EmbeddingProvider

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_BATCH_SIZE = 1000
DEFAULT_BATCH_DELAY = 0.2


def chunk_records(records: Sequence[T], batch_size: int) -> list[list[T]]:
    """
    Split records into contiguous batches of at most batch_size.

    Args:
        records: Items to split (order is preserved)
        batch_size: Maximum batch length, >= 1

    Returns:
        ceil(len(records) / batch_size) batches

    Raises:
        ValueError: If batch_size < 1
    """
    if batch_size < 1:
        raise ValueError(f"batch_size must be >= 1, got {batch_size}")
    return [
        list(records[start:start + batch_size])
        for start in range(0, len(records), batch_size)
    ]


def batch_count(total: int, batch_size: int) -> int:
    """Number of batches chunk_records() produces for total items."""
    return math.ceil(total / batch_size) if total else 0


class ChunkedEmbeddingProducer:
    """
    Best-effort, paced batch embedding of feedback records.

    Args:
        embeddings: Provider used for every batch call
        batch_size: Records per embedding call
        batch_delay: Seconds to pause between consecutive batches
    """

    def __init__(
        self,
        embeddings: "EmbeddingProvider",
        batch_size: int = DEFAULT_BATCH_SIZE,
        batch_delay: float = DEFAULT_BATCH_DELAY,
    ) -> None:
        if batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {batch_size}")
        if batch_delay < 0:
            raise ValueError(f"batch_delay must be >= 0, got {batch_delay}")
        self.embeddings = embeddings
        self.batch_size = batch_size
        self.batch_delay = batch_delay

    async def produce(
        self,
        records: Sequence[FeedbackRecord],
        *,
        on_batch: Callable[[BatchReport], None] | None = None,
    ) -> EmbeddingRunResult:
        """
        Embed all records batch by batch.

        Args:
            records: Summarized records, in the order they should be indexed
            on_batch: Optional callback invoked after every batch

        Returns:
            EmbeddingRunResult whose pairs concatenate every successful
            batch in batch order

        Raises:
            ValueError: A record has no profile summary (checked up front)
            Exception: Whatever the provider's validate() raises
        """
        texts = [record.embedding_text() for record in records]

        # Misconfiguration must abort before any batch is sent
        self.embeddings.validate()

        batches = chunk_records(list(zip(records, texts)), self.batch_size)
        result = EmbeddingRunResult(batches_total=len(batches))
        logger.info(
            f"Embedding {len(records)} records in {len(batches)} batches "
            f"of up to {self.batch_size}"
        )

        for number, batch in enumerate(batches, start=1):
            if number > 1 and self.batch_delay > 0:
                await asyncio.sleep(self.batch_delay)

            report = await self._embed_batch(number, len(batches), batch, result)
            if on_batch:
                on_batch(report)

        logger.info(
            f"Generated embeddings for {len(result.pairs)} records "
            f"({result.batches_failed} of {result.batches_total} batches failed)"
        )
        if result.dropped_ids:
            logger.warning(
                f"Dropped {len(result.dropped_ids)} records from failed batches: "
                f"{', '.join(result.dropped_ids)}"
            )
        return result

    async def _embed_batch(
        self,
        number: int,
        total: int,
        batch: list[tuple[FeedbackRecord, str]],
        result: EmbeddingRunResult,
    ) -> BatchReport:
        """Embed one batch, appending pairs or a failure to result."""
        batch_records = [record for record, _ in batch]
        batch_texts = [text for _, text in batch]
        start = time.perf_counter_ns()
        logger.debug(f"Processing batch {number}/{total} ({len(batch)} records)")

        try:
            vectors = await self.embeddings.embed(batch_texts)
            if len(vectors) != len(batch_texts):
                raise ValueError(
                    f"embedding service returned {len(vectors)} vectors "
                    f"for {len(batch_texts)} texts"
                )
            pairs = [
                EmbeddedRecord.single(record, vector)
                for record, vector in zip(batch_records, vectors)
            ]
        except Exception as e:
            dropped = [record.customer_id for record in batch_records]
            logger.error(
                f"Embedding batch {number}/{total} failed: {e}; "
                f"dropped customer ids: {', '.join(dropped)}"
            )
            result.failed_batches.append(
                BatchFailure(batch_number=number, error=str(e), dropped_ids=dropped)
            )
            return BatchReport(
                batch_number=number,
                batch_count=total,
                size=len(batch),
                succeeded=False,
                error=str(e),
            )

        result.pairs.extend(pairs)
        elapsed_ms = (time.perf_counter_ns() - start) // 1_000_000
        logger.info(f"Completed batch {number}/{total} ({len(batch)} records, {elapsed_ms}ms)")
        return BatchReport(
            batch_number=number,
            batch_count=total,
            size=len(batch),
            succeeded=True,
        )


async def embed_records(
    records: Sequence[FeedbackRecord],
    embeddings: "EmbeddingProvider",
    *,
    batch_size: int = DEFAULT_BATCH_SIZE,
    batch_delay: float = DEFAULT_BATCH_DELAY,
    on_batch: Callable[[BatchReport], None] | None = None,
) -> EmbeddingRunResult:
    """Convenience wrapper around ChunkedEmbeddingProducer.produce()."""
    producer = ChunkedEmbeddingProducer(
        embeddings, batch_size=batch_size, batch_delay=batch_delay
    )
    return await producer.produce(records, on_batch=on_batch)
