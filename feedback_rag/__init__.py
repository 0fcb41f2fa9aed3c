"""
feedback-rag - Retrieval-Augmented Customer Feedback Analysis

Embeds customer-feedback profiles in paced batches, keeps them in an
in-memory vector index, and answers analytical questions by feeding the
most similar profiles to an LLM.

Example:
    >>> from feedback_rag import FeedbackAnalyzer
    >>> async with FeedbackAnalyzer() as analyzer:
    ...     records = analyzer.load("data/customer_feedback_satisfaction.csv")
    ...     await analyzer.ingest(records)
    ...     print(await analyzer.analyze("Who are our least loyal customers?"))

Main Classes:
    FeedbackAnalyzer: Primary entry point (load, ingest, query)
    FeedbackConfig: Configuration management
    InMemoryVectorIndex: Build-once cosine similarity index
    RetrievalAugmentedPipeline: Retrieve -> format -> LLM composition
"""

__version__ = "0.1.0"


# Public API - lazy imports to avoid loading optional dependencies
def __getattr__(name: str):
    """Lazy import public API components."""

    if name == "FeedbackAnalyzer":
        from feedback_rag.api.analyzer import FeedbackAnalyzer
        return FeedbackAnalyzer

    if name == "FeedbackConfig":
        from feedback_rag.config.settings import FeedbackConfig
        return FeedbackConfig

    if name == "InMemoryVectorIndex":
        from feedback_rag.index.memory import InMemoryVectorIndex
        return InMemoryVectorIndex

    if name == "RetrievalAugmentedPipeline":
        from feedback_rag.query.pipeline import RetrievalAugmentedPipeline
        return RetrievalAugmentedPipeline

    # Types
    if name in ("FeedbackRecord", "EmbeddedRecord", "RetrievalResult", "QueryOutcome"):
        from feedback_rag import types
        return getattr(types, name)

    raise AttributeError(f"module 'feedback_rag' has no attribute {name!r}")


__all__ = [
    # Main classes
    "FeedbackAnalyzer",
    "FeedbackConfig",
    "InMemoryVectorIndex",
    "RetrievalAugmentedPipeline",

    # Types
    "FeedbackRecord",
    "EmbeddedRecord",
    "RetrievalResult",
    "QueryOutcome",

    # Version
    "__version__",
]
