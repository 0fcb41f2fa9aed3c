"""
Query Pipeline

Retrieval-augmented analysis over the in-memory vector index.

Modules:
    pipeline: RetrievalAugmentedPipeline (fan-out, merge, generate)
    prompts: Pure prompt formatting and notice texts

Example:
    >>> from feedback_rag.query import RetrievalAugmentedPipeline
    >>> pipeline = RetrievalAugmentedPipeline(index, llm, top_k=3)
    >>> print(await pipeline.run("What drives churn among Bronze customers?"))
"""

from feedback_rag.query.pipeline import RetrievalAugmentedPipeline
from feedback_rag.query.prompts import (
    NO_PROFILES_NOTICE,
    RETRIEVAL_FAILED_NOTICE,
    format_profile,
    format_prompt,
)

__all__ = [
    "RetrievalAugmentedPipeline",
    "format_prompt",
    "format_profile",
    "NO_PROFILES_NOTICE",
    "RETRIEVAL_FAILED_NOTICE",
]
