"""
FeedbackAnalyzer - Primary Entry Point

Wires configuration, providers, the embedding producer, the vector index
and the query pipeline together, and drives batches of analysis queries.

Example:
    >>> async with FeedbackAnalyzer() as analyzer:
    ...     records = analyzer.load("data/customer_feedback_satisfaction.csv")
    ...     run = await analyzer.ingest(records)
    ...     outcomes = await analyzer.run_queries(EXAMPLE_QUERIES)
    ...     for outcome in outcomes:
    ...         print(outcome.query, outcome.analysis or outcome.error)

    # Or with sync API
    >>> analyzer = FeedbackAnalyzer()
    >>> analyzer.ingest_sync(analyzer.load("feedback.csv"))
    >>> print(analyzer.analyze_sync("Who is likely to churn?"))
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Any

from feedback_rag.types.results import QueryOutcome

if TYPE_CHECKING:
    from feedback_rag.config.settings import FeedbackConfig
    from feedback_rag.index.memory import InMemoryVectorIndex
    from feedback_rag.providers.base import EmbeddingProvider, LLMProvider
    from feedback_rag.query.pipeline import RetrievalAugmentedPipeline
    from feedback_rag.types.records import FeedbackRecord
    from feedback_rag.types.results import BatchReport, EmbeddingRunResult

logger = logging.getLogger(__name__)

EXAMPLE_QUERIES: tuple[str, ...] = (
    "What patterns do you see in high-income customers with low satisfaction scores?",
    "Analyze the relationship between purchase frequency and loyalty levels.",
    "What characteristics define our most satisfied customers?",
    "Identify potential churn risks based on customer patterns.",
)


class FeedbackAnalyzer:
    """
    Retrieval-augmented analysis over a customer-feedback dataset.

    Args:
        config: Optional configuration. Uses defaults if not provided.
        llm: Optional LLM provider (created from config on first use)
        embeddings: Optional embedding provider (created from config on first use)
    """

    def __init__(
        self,
        config: "FeedbackConfig | None" = None,
        *,
        llm: "LLMProvider | None" = None,
        embeddings: "EmbeddingProvider | None" = None,
    ) -> None:
        if config is None:
            from feedback_rag.config import FeedbackConfig
            config = FeedbackConfig()
        self._config = config

        # Injected providers survive close(); config-built ones are recreated lazily
        self._injected_llm = llm
        self._injected_embeddings = embeddings
        self._llm = llm
        self._embeddings = embeddings
        self._index: "InMemoryVectorIndex | None" = None
        self._pipeline: "RetrievalAugmentedPipeline | None" = None

    def _create_llm_provider(self) -> "LLMProvider":
        """Create LLM provider based on config."""
        provider = self._config.llm_provider.lower()

        if provider == "openai":
            from feedback_rag.providers.llm.openai import OpenAILLMProvider
            return OpenAILLMProvider(
                api_key=self._config.openai_api_key,
                model=self._config.llm_model,
            )
        raise ValueError(f"Unknown LLM provider: {provider}")

    def _create_embedding_provider(self) -> "EmbeddingProvider":
        """Create embedding provider based on config."""
        provider = self._config.embedding_provider.lower()

        if provider == "openai":
            from feedback_rag.providers.embedding.openai import OpenAIEmbeddingProvider
            return OpenAIEmbeddingProvider(
                api_key=self._config.openai_api_key,
                model=self._config.embedding_model,
            )
        raise ValueError(f"Unknown embedding provider: {provider}")

    # === Lifecycle ===

    async def __aenter__(self) -> "FeedbackAnalyzer":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Drop the index and any providers built from config."""
        self._index = None
        self._pipeline = None
        self._llm = self._injected_llm
        self._embeddings = self._injected_embeddings

    # === Properties ===

    @property
    def config(self) -> "FeedbackConfig":
        """Current configuration."""
        return self._config

    @property
    def llm(self) -> "LLMProvider":
        if self._llm is None:
            self._llm = self._create_llm_provider()
        return self._llm

    @property
    def embeddings(self) -> "EmbeddingProvider":
        if self._embeddings is None:
            self._embeddings = self._create_embedding_provider()
        return self._embeddings

    @property
    def index(self) -> "InMemoryVectorIndex":
        """The built index. Raises RuntimeError before ingest()."""
        if self._index is None:
            raise RuntimeError("No index yet: call ingest() first")
        return self._index

    @property
    def is_ready(self) -> bool:
        """Whether an index has been built."""
        return self._index is not None

    # === Ingestion ===

    def load(self, path: str | Path) -> list["FeedbackRecord"]:
        """
        Load and summarize records from a feedback CSV.

        Raises:
            FileNotFoundError, CSVFormatError, RecordParseError
        """
        from feedback_rag.ingestion.loader import load_feedback_records

        return load_feedback_records(path)

    async def ingest(
        self,
        records: Sequence["FeedbackRecord"],
        *,
        on_batch: Callable[["BatchReport"], None] | None = None,
    ) -> "EmbeddingRunResult":
        """
        Embed records in paced batches and build the vector index.

        Failed batches are dropped (see EmbeddingRunResult.failed_batches);
        the index is built from whatever succeeded.

        Args:
            records: Summarized records
            on_batch: Optional per-batch progress callback

        Returns:
            The embedding run result
        """
        from feedback_rag.index.memory import InMemoryVectorIndex
        from feedback_rag.ingestion.embedder import ChunkedEmbeddingProducer
        from feedback_rag.query.pipeline import RetrievalAugmentedPipeline

        producer = ChunkedEmbeddingProducer(
            self.embeddings,
            batch_size=self._config.embedding_batch_size,
            batch_delay=self._config.embedding_batch_delay,
        )
        result = await producer.produce(records, on_batch=on_batch)

        self._index = InMemoryVectorIndex.build(result.pairs, embeddings=self.embeddings)
        self._pipeline = RetrievalAugmentedPipeline.from_config(
            self._index, self.llm, self._config
        )
        logger.info(f"Vector index built with {len(self._index)} entries")
        return result

    # === Querying ===

    async def analyze(self, query: str) -> str:
        """
        Run one query through the retrieval-augmented pipeline.

        Raises:
            RuntimeError: If ingest() has not been called
            Exception: LLM errors, unmodified
        """
        if self._pipeline is None:
            raise RuntimeError("No index yet: call ingest() first")
        return await self._pipeline.run(query)

    async def run_queries(
        self,
        queries: Sequence[str] = EXAMPLE_QUERIES,
        *,
        delay: float | None = None,
        on_outcome: Callable[[QueryOutcome], None] | None = None,
    ) -> list[QueryOutcome]:
        """
        Run queries one after another with a pause between them.

        A failed LLM call is logged and recorded on that query's outcome;
        the remaining queries still run.

        Args:
            queries: Analysis queries, in order
            delay: Seconds between queries (default: config.query_delay)
            on_outcome: Optional callback after each query

        Returns:
            One QueryOutcome per query, in order
        """
        if self._pipeline is None:
            raise RuntimeError("No index yet: call ingest() first")

        pause = self._config.query_delay if delay is None else delay
        outcomes: list[QueryOutcome] = []

        for position, query in enumerate(queries):
            if position and pause > 0:
                await asyncio.sleep(pause)

            start = time.perf_counter()
            try:
                analysis = await self.analyze(query)
                outcome = QueryOutcome(
                    query=query,
                    analysis=analysis,
                    duration_seconds=time.perf_counter() - start,
                )
            except Exception as e:
                logger.error(f"Error analyzing query {query!r}: {e}")
                outcome = QueryOutcome(
                    query=query,
                    error=str(e) or type(e).__name__,
                    duration_seconds=time.perf_counter() - start,
                )

            outcomes.append(outcome)
            if on_outcome:
                on_outcome(outcome)

        return outcomes

    # === Sync API ===

    def ingest_sync(self, records: Sequence["FeedbackRecord"]) -> "EmbeddingRunResult":
        """Synchronous wrapper for ingest()."""
        return asyncio.run(self.ingest(records))

    def analyze_sync(self, query: str) -> str:
        """Synchronous wrapper for analyze()."""
        return asyncio.run(self.analyze(query))
