"""
Retrieval-Augmented Pipeline

Answers one analysis query in three stages:
    1. Fan-out: keep the raw query and, concurrently, look up the top-k
       most similar profiles in the vector index
    2. Merge: wait for both branches, then format one prompt body
    3. Generate: send the prompt (with the analyst preamble) to the LLM

Failure Policy:
    - Lookup errors are logged and replaced by a failure notice
    - Empty lookups are replaced by a "no profiles" notice
    - Only an error from the final LLM call reaches the caller, unmodified

The pipeline holds no per-query state, so several run() calls may be in
flight at once.

Example:
    >>> pipeline = RetrievalAugmentedPipeline(index, llm, top_k=3)
    >>> analysis = await pipeline.run("Which loyal customers are unhappy?")
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Sequence
from typing import TYPE_CHECKING

from feedback_rag.config.settings import DEFAULT_SYSTEM_PREAMBLE
from feedback_rag.query.prompts import format_prompt
from feedback_rag.types.results import RetrievalResult

if TYPE_CHECKING:
    from feedback_rag.config.settings import FeedbackConfig
    from feedback_rag.index.memory import InMemoryVectorIndex
    from feedback_rag.providers.base import LLMProvider

logger = logging.getLogger(__name__)


class RetrievalAugmentedPipeline:
    """
    Retrieve -> format -> LLM composition over an in-memory index.

    Args:
        index: Built vector index with an embedding provider bound
        llm: Provider for the final analysis call
        top_k: Profiles retrieved per query
        system_preamble: System message for the LLM call
        temperature: Sampling temperature for the LLM call
        max_tokens: Token limit for the LLM call
    """

    def __init__(
        self,
        index: "InMemoryVectorIndex",
        llm: "LLMProvider",
        *,
        top_k: int = 3,
        system_preamble: str | None = DEFAULT_SYSTEM_PREAMBLE,
        temperature: float = 0.0,
        max_tokens: int = 1024,
    ) -> None:
        if top_k < 1:
            raise ValueError(f"top_k must be >= 1, got {top_k}")
        self.index = index
        self.llm = llm
        self.top_k = top_k
        self.system_preamble = system_preamble
        self.temperature = temperature
        self.max_tokens = max_tokens

    @classmethod
    def from_config(
        cls,
        index: "InMemoryVectorIndex",
        llm: "LLMProvider",
        config: "FeedbackConfig",
    ) -> "RetrievalAugmentedPipeline":
        """Create a pipeline using query and LLM settings from config."""
        return cls(
            index,
            llm,
            top_k=config.query_top_k,
            system_preamble=config.system_preamble,
            temperature=config.llm_temperature,
            max_tokens=config.llm_max_tokens,
        )

    async def run(self, query: str) -> str:
        """
        Execute all three stages for one query.

        Returns:
            The LLM's analysis text

        Raises:
            Exception: Whatever the LLM provider raised, unmodified
        """
        prompt = await self.prepare(query)

        start = time.perf_counter_ns()
        analysis = await self.llm.generate(
            prompt,
            system=self.system_preamble,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )
        elapsed_ms = (time.perf_counter_ns() - start) // 1_000_000
        logger.info(f"Analysis generated by {self.llm.model_name} in {elapsed_ms}ms")
        return analysis

    async def prepare(self, query: str) -> str:
        """
        Run the fan-out and merge stages and return the prompt body.

        Never raises for retrieval problems.
        """
        passthrough, lookup = await asyncio.gather(
            self._passthrough(query),
            self._lookup(query),
            return_exceptions=True,
        )
        # gather only surfaces an exception from the passthrough on cancellation
        if isinstance(passthrough, BaseException):
            raise passthrough
        if isinstance(lookup, asyncio.CancelledError):
            raise lookup
        if isinstance(lookup, BaseException):
            logger.warning(f"Error fetching similar profiles: {lookup}")
        return format_prompt(passthrough, lookup)

    async def _passthrough(self, query: str) -> str:
        return query

    async def _lookup(self, query: str) -> Sequence[RetrievalResult]:
        start = time.perf_counter_ns()
        results = await self.index.search(query, self.top_k)
        elapsed_ms = (time.perf_counter_ns() - start) // 1_000_000
        logger.info(f"Retrieved {len(results)} similar profiles in {elapsed_ms}ms")
        return results
