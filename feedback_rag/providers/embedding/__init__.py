"""
Embedding Provider Implementations

Modules:
    openai: OpenAI embeddings (text-embedding-ada-002 by default)

Each provider implements the EmbeddingProvider interface with:
    - embed(): Batch embedding generation
    - embed_single(): Single text embedding
    - validate(): Fail-fast configuration check
    - dimensions: Vector dimensionality
    - model_name: Current model identifier

Batching and pacing are not done here; see
feedback_rag.ingestion.embedder.ChunkedEmbeddingProducer.

Example:
    >>> from feedback_rag.providers.embedding import OpenAIEmbeddingProvider
    >>> provider = OpenAIEmbeddingProvider(model="text-embedding-ada-002")
    >>> vectors = await provider.embed(["Hello", "World"])
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from feedback_rag.providers.embedding.openai import OpenAIEmbeddingProvider


def __getattr__(name: str):
    """Lazy import of providers to avoid requiring all dependencies."""
    if name == "OpenAIEmbeddingProvider":
        from feedback_rag.providers.embedding.openai import OpenAIEmbeddingProvider
        return OpenAIEmbeddingProvider
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = ["OpenAIEmbeddingProvider"]
