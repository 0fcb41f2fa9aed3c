"""
LLM Provider Implementations

Modules:
    openai: OpenAI chat models via LangChain's ChatOpenAI

Example:
    >>> from feedback_rag.providers.llm import OpenAILLMProvider
    >>> provider = OpenAILLMProvider(model="gpt-4")
    >>> text = await provider.generate("Summarize...", system="You are...")
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from feedback_rag.providers.llm.openai import OpenAILLMProvider


def __getattr__(name: str):
    """Lazy import of providers to avoid requiring all dependencies."""
    if name == "OpenAILLMProvider":
        from feedback_rag.providers.llm.openai import OpenAILLMProvider
        return OpenAILLMProvider
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = ["OpenAILLMProvider"]
