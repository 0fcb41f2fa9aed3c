"""
Type Definitions

Pydantic models shared across ingestion, indexing and querying.

Modules:
    records: FeedbackRecord and identity helpers
    results: Embedding, retrieval and query result models
"""

from feedback_rag.types.records import (
    CSV_COLUMNS,
    FeedbackRecord,
    dedupe_records,
    record_sort_key,
    same_record,
)
from feedback_rag.types.results import (
    BatchFailure,
    BatchReport,
    EmbeddedRecord,
    EmbeddingRunResult,
    QueryOutcome,
    RetrievalResult,
)

__all__ = [
    # Records
    "CSV_COLUMNS",
    "FeedbackRecord",
    "same_record",
    "record_sort_key",
    "dedupe_records",
    # Embedding
    "EmbeddedRecord",
    "BatchReport",
    "BatchFailure",
    "EmbeddingRunResult",
    # Retrieval
    "RetrievalResult",
    # Query
    "QueryOutcome",
]
