"""
Ingestion Pipeline

Turns the feedback CSV into embedded records ready for indexing.

Stages:
    1. Loading: CSV rows -> validated FeedbackRecords (loader)
    2. Summarization: record -> deterministic profile text (summarizer)
    3. Embedding: paced, batch-isolated embedding calls (embedder)

Example:
    >>> from feedback_rag.ingestion import load_feedback_records, embed_records
    >>> records = load_feedback_records("data/customer_feedback_satisfaction.csv")
    >>> result = await embed_records(records, embeddings, batch_size=1000)
"""

from feedback_rag.ingestion.embedder import (
    ChunkedEmbeddingProducer,
    batch_count,
    chunk_records,
    embed_records,
)
from feedback_rag.ingestion.loader import (
    CSVFormatError,
    RecordParseError,
    load_feedback_records,
)
from feedback_rag.ingestion.summarizer import summarize, summarize_records

__all__ = [
    # Loading
    "load_feedback_records",
    "CSVFormatError",
    "RecordParseError",
    # Summarization
    "summarize",
    "summarize_records",
    # Embedding
    "ChunkedEmbeddingProducer",
    "chunk_records",
    "batch_count",
    "embed_records",
]
