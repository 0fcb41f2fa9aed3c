"""
LLM and Embedding Providers

Provider-agnostic interfaces for LLM and embedding operations.

Modules:
    base: Abstract provider interfaces
    llm/: LLM provider implementations
    embedding/: Embedding provider implementations

Supported LLM Providers:
    - OpenAI (gpt-4, gpt-4o) via LangChain

Supported Embedding Providers:
    - OpenAI (text-embedding-ada-002, text-embedding-3-*) via LangChain

Design:
    - All providers implement abstract interfaces (LLMProvider, EmbeddingProvider)
    - Lazy import to avoid requiring all dependencies

Example:
    >>> from feedback_rag.providers import LLMProvider, EmbeddingProvider
    >>> from feedback_rag.providers.llm import OpenAILLMProvider
    >>> from feedback_rag.providers.embedding import OpenAIEmbeddingProvider
"""

from feedback_rag.providers.base import EmbeddingProvider, LLMProvider

__all__ = ["LLMProvider", "EmbeddingProvider"]
