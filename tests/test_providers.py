"""
Tests for the OpenAI providers.

The LangChain clients are mocked; no network calls are made.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from feedback_rag.providers.base import EmbeddingProvider, LLMProvider
from feedback_rag.providers.embedding.openai import OpenAIEmbeddingProvider
from feedback_rag.providers.llm.openai import OpenAILLMProvider


class TestOpenAIEmbeddingProvider:
    """Tests for OpenAIEmbeddingProvider."""

    def test_implements_interface(self):
        assert isinstance(OpenAIEmbeddingProvider(api_key="sk-test"), EmbeddingProvider)

    @pytest.mark.parametrize(
        ("model", "dims"),
        [
            ("text-embedding-ada-002", 1536),
            ("text-embedding-3-small", 1536),
            ("text-embedding-3-large", 3072),
        ],
    )
    def test_dimensions(self, model, dims):
        provider = OpenAIEmbeddingProvider(model=model)
        assert provider.dimensions == dims
        assert provider.model_name == model

    def test_validate_without_key(self, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        with pytest.raises(RuntimeError, match="API key"):
            OpenAIEmbeddingProvider().validate()

    def test_validate_with_key_builds_client(self):
        with patch(
            "feedback_rag.providers.embedding.openai._get_openai_embeddings"
        ) as factory:
            OpenAIEmbeddingProvider(api_key="sk-test").validate()
        factory.assert_called_once_with(api_key="sk-test", model="text-embedding-ada-002")

    @pytest.mark.asyncio
    async def test_embed_batch(self):
        client = MagicMock()
        client.embed_documents.return_value = [[0.1, 0.2], [0.3, 0.4]]
        provider = OpenAIEmbeddingProvider(api_key="sk-test")
        provider._client = client

        vectors = await provider.embed(["a", "b"])

        assert vectors == [[0.1, 0.2], [0.3, 0.4]]
        client.embed_documents.assert_called_once_with(["a", "b"])

    @pytest.mark.asyncio
    async def test_embed_empty_skips_client(self):
        provider = OpenAIEmbeddingProvider(api_key="sk-test")
        provider._client = MagicMock()
        assert await provider.embed([]) == []
        provider._client.embed_documents.assert_not_called()

    @pytest.mark.asyncio
    async def test_embed_single(self):
        client = MagicMock()
        client.embed_query.return_value = [0.5, 0.5]
        provider = OpenAIEmbeddingProvider(api_key="sk-test")
        provider._client = client

        assert await provider.embed_single("query") == [0.5, 0.5]

    @pytest.mark.asyncio
    async def test_embed_error_propagates(self):
        client = MagicMock()
        client.embed_documents.side_effect = ConnectionError("network down")
        provider = OpenAIEmbeddingProvider(api_key="sk-test")
        provider._client = client

        with pytest.raises(ConnectionError):
            await provider.embed(["a"])


class TestOpenAILLMProvider:
    """Tests for OpenAILLMProvider."""

    def test_implements_interface(self):
        provider = OpenAILLMProvider(api_key="sk-test", model="gpt-4o")
        assert isinstance(provider, LLMProvider)
        assert provider.model_name == "gpt-4o"

    @pytest.mark.asyncio
    async def test_generate_sends_system_and_prompt(self):
        from langchain_core.messages import HumanMessage, SystemMessage

        bound = MagicMock()
        bound.ainvoke = AsyncMock(return_value=MagicMock(content="analysis text"))
        chat = MagicMock()
        chat.bind.return_value = bound

        with patch(
            "feedback_rag.providers.llm.openai._get_chat_openai", return_value=chat
        ) as factory:
            provider = OpenAILLMProvider(api_key="sk-test", model="gpt-4")
            text = await provider.generate(
                "prompt body", system="preamble", temperature=0.2, max_tokens=300
            )

        assert text == "analysis text"
        factory.assert_called_once_with(api_key="sk-test", model="gpt-4", temperature=0.2)
        chat.bind.assert_called_once_with(max_tokens=300)
        messages = bound.ainvoke.await_args.args[0]
        assert isinstance(messages[0], SystemMessage)
        assert messages[0].content == "preamble"
        assert isinstance(messages[1], HumanMessage)
        assert messages[1].content == "prompt body"

    @pytest.mark.asyncio
    async def test_generate_without_system(self):
        bound = MagicMock()
        bound.ainvoke = AsyncMock(return_value=MagicMock(content="ok"))
        chat = MagicMock()
        chat.bind.return_value = bound

        with patch("feedback_rag.providers.llm.openai._get_chat_openai", return_value=chat):
            await OpenAILLMProvider(api_key="sk-test").generate("just the prompt")

        messages = bound.ainvoke.await_args.args[0]
        assert len(messages) == 1

    @pytest.mark.asyncio
    async def test_client_reused_across_calls(self):
        """One ChatOpenAI client serves every call at the same temperature."""
        bound = MagicMock()
        bound.ainvoke = AsyncMock(return_value=MagicMock(content="ok"))
        chat = MagicMock()
        chat.temperature = 0.0
        chat.bind.return_value = bound

        with patch(
            "feedback_rag.providers.llm.openai._get_chat_openai", return_value=chat
        ) as factory:
            provider = OpenAILLMProvider(api_key="sk-test")
            await provider.generate("first")
            await provider.generate("second")

        factory.assert_called_once_with(api_key="sk-test", model="gpt-4", temperature=0.0)
        assert bound.ainvoke.await_count == 2
