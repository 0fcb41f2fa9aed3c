"""
Tests for the retrieval-augmented pipeline and prompt formatting.

Unit tests for the pure formatter and integration tests for the full
fan-out -> merge -> generate flow with mocked providers.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from feedback_rag.config.settings import DEFAULT_SYSTEM_PREAMBLE, FeedbackConfig
from feedback_rag.index.memory import InMemoryVectorIndex
from feedback_rag.query.pipeline import RetrievalAugmentedPipeline
from feedback_rag.query.prompts import (
    NO_PROFILES_NOTICE,
    RETRIEVAL_FAILED_NOTICE,
    format_profile,
    format_prompt,
)
from feedback_rag.types.results import EmbeddedRecord, RetrievalResult

QUERY = "Which loyal customers are unhappy?"

# -----------------------------------------------------------------------------
# Fixtures
# -----------------------------------------------------------------------------


@pytest.fixture
def mock_llm() -> MagicMock:
    """Create a mock LLM provider."""
    llm = MagicMock()
    llm.generate = AsyncMock(return_value="Generated analysis")
    llm.model_name = "test-model"
    return llm


@pytest.fixture
def mock_embeddings() -> MagicMock:
    """Embedding provider whose query vector points along the first axis."""
    embeddings = MagicMock()
    embeddings.embed_single = AsyncMock(return_value=[1.0, 0.0, 0.0])
    embeddings.dimensions = 3
    return embeddings


@pytest.fixture
def populated_index(records, mock_embeddings) -> InMemoryVectorIndex:
    """Five records with C002 closest to the first axis."""
    vectors = [
        [0.5, 0.5, 0.0],
        [1.0, 0.0, 0.0],
        [0.0, 1.0, 0.0],
        [0.8, 0.0, 0.6],
        [0.0, 0.0, 1.0],
    ]
    pairs = [EmbeddedRecord.single(r, v) for r, v in zip(records, vectors)]
    return InMemoryVectorIndex.build(pairs, embeddings=mock_embeddings)


@pytest.fixture
def hit(make_record) -> RetrievalResult:
    record = make_record(
        "C042", age=61, gender="Male", country="Canada", income=120500.5,
        product_quality=3, service_quality=4, purchase_frequency=2,
        feedback_score="Low", loyalty_level="Gold", satisfaction_score=23.44,
    )
    return RetrievalResult(score=0.87654, embedding=[1.0, 0.0], record=record)


# -----------------------------------------------------------------------------
# Prompt formatting
# -----------------------------------------------------------------------------


class TestFormatPrompt:
    """Tests for the pure merge step."""

    def test_profile_contains_all_fields(self, hit):
        text = format_profile(1, hit)
        assert text.startswith("1. Customer C042 (similarity score: 0.88)")
        for fragment in (
            "61 year old Male from Canada",
            "Income: $120500.50",
            "Satisfaction Score: 23.4%",
            "Loyalty Level: Gold",
            "Purchase Frequency: 2 times per year",
            "Product Quality: 3/10, Service Quality: 4/10",
            "Feedback Score: Low",
        ):
            assert fragment in text

    def test_results_are_numbered(self, hit, make_record):
        second = RetrievalResult(score=0.5, embedding=[0.0, 1.0], record=make_record("C007"))
        prompt = format_prompt(QUERY, [hit, second])

        assert prompt.startswith(f"Analysis Query: {QUERY}")
        assert "Relevant Customer Profiles for Context:" in prompt
        assert "1. Customer C042" in prompt
        assert "2. Customer C007" in prompt
        assert prompt.index("C042") < prompt.index("C007")

    def test_empty_lookup_notice(self):
        prompt = format_prompt(QUERY, [])
        assert QUERY in prompt
        assert NO_PROFILES_NOTICE in prompt
        assert RETRIEVAL_FAILED_NOTICE not in prompt

    def test_failed_lookup_notice(self):
        prompt = format_prompt(QUERY, ConnectionError("index offline"))
        assert QUERY in prompt
        assert RETRIEVAL_FAILED_NOTICE in prompt
        # The raw error is logged, not sent to the model
        assert "index offline" not in prompt

    def test_notices_are_complete_sentences(self):
        for notice in (NO_PROFILES_NOTICE, RETRIEVAL_FAILED_NOTICE):
            assert notice[0].isupper()
            assert notice.endswith(".")


# -----------------------------------------------------------------------------
# Pipeline
# -----------------------------------------------------------------------------


class TestRetrievalAugmentedPipeline:
    """Integration tests for RetrievalAugmentedPipeline."""

    @pytest.mark.asyncio
    async def test_run_with_results(self, populated_index, mock_llm, mock_embeddings):
        """Top-k profiles are formatted into the prompt sent to the LLM."""
        pipeline = RetrievalAugmentedPipeline(populated_index, mock_llm, top_k=3)
        answer = await pipeline.run(QUERY)

        assert answer == "Generated analysis"
        mock_embeddings.embed_single.assert_awaited_once_with(QUERY)
        prompt = mock_llm.generate.await_args.args[0]
        assert prompt.startswith(f"Analysis Query: {QUERY}")
        assert "1. Customer C002" in prompt
        assert "2. Customer C004" in prompt
        assert "3. Customer C001" in prompt
        assert "C003" not in prompt
        assert mock_llm.generate.await_args.kwargs["system"] == DEFAULT_SYSTEM_PREAMBLE

    @pytest.mark.asyncio
    async def test_empty_index_still_calls_llm(self, mock_llm, mock_embeddings):
        """No results yields the notice and still reaches the LLM."""
        index = InMemoryVectorIndex.build([], embeddings=mock_embeddings)
        pipeline = RetrievalAugmentedPipeline(index, mock_llm, top_k=3)

        answer = await pipeline.run(QUERY)

        assert answer == "Generated analysis"
        prompt = mock_llm.generate.await_args.args[0]
        assert QUERY in prompt
        assert NO_PROFILES_NOTICE in prompt

    @pytest.mark.asyncio
    async def test_retrieval_failure_degrades(self, mock_llm, caplog):
        """A failing lookup is logged and replaced by a notice."""
        index = MagicMock()
        index.search = AsyncMock(side_effect=RuntimeError("embedding service down"))
        pipeline = RetrievalAugmentedPipeline(index, mock_llm)

        with caplog.at_level("WARNING"):
            answer = await pipeline.run(QUERY)

        assert answer == "Generated analysis"
        mock_llm.generate.assert_awaited_once()
        prompt = mock_llm.generate.await_args.args[0]
        assert QUERY in prompt
        assert RETRIEVAL_FAILED_NOTICE in prompt
        assert "embedding service down" in caplog.text

    @pytest.mark.asyncio
    async def test_llm_error_propagates_unmodified(self, populated_index, mock_llm):
        error = TimeoutError("chat model timed out")
        mock_llm.generate = AsyncMock(side_effect=error)
        pipeline = RetrievalAugmentedPipeline(populated_index, mock_llm)

        with pytest.raises(TimeoutError) as exc_info:
            await pipeline.run(QUERY)
        assert exc_info.value is error

    @pytest.mark.asyncio
    async def test_prepare_does_not_call_llm(self, populated_index, mock_llm):
        prompt = await RetrievalAugmentedPipeline(populated_index, mock_llm, top_k=1).prepare(QUERY)
        assert "1. Customer C002" in prompt
        assert "2. Customer" not in prompt
        mock_llm.generate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_branches_run_concurrently(self, mock_llm):
        """The merge waits for the lookup branch to finish."""
        started = asyncio.Event()
        release = asyncio.Event()

        async def slow_search(text, k):
            started.set()
            await release.wait()
            return []

        index = MagicMock()
        index.search = AsyncMock(side_effect=slow_search)
        pipeline = RetrievalAugmentedPipeline(index, mock_llm)

        task = asyncio.create_task(pipeline.prepare(QUERY))
        await started.wait()
        assert not task.done()
        release.set()
        assert NO_PROFILES_NOTICE in await task

    @pytest.mark.asyncio
    async def test_independent_concurrent_runs(self, populated_index, mock_llm):
        """Concurrent runs each get their own prompt."""
        pipeline = RetrievalAugmentedPipeline(populated_index, mock_llm)
        queries = [f"question {i}" for i in range(4)]

        await asyncio.gather(*(pipeline.run(q) for q in queries))

        prompts = sorted(call.args[0] for call in mock_llm.generate.await_args_list)
        assert [p.splitlines()[0] for p in prompts] == [f"Analysis Query: {q}" for q in queries]

    def test_from_config(self, populated_index, mock_llm):
        config = FeedbackConfig(
            query_top_k=5, llm_temperature=0.3, llm_max_tokens=256, system_preamble="Be brief."
        )
        pipeline = RetrievalAugmentedPipeline.from_config(populated_index, mock_llm, config)
        assert pipeline.top_k == 5
        assert pipeline.temperature == 0.3
        assert pipeline.max_tokens == 256
        assert pipeline.system_preamble == "Be brief."

    def test_invalid_top_k(self, populated_index, mock_llm):
        with pytest.raises(ValueError):
            RetrievalAugmentedPipeline(populated_index, mock_llm, top_k=0)
