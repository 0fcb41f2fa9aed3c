"""
Result Types

Models produced by the embedding, retrieval and query stages.

Embedding Models:
    - EmbeddedRecord: A record with its embedding vector(s) (index entry)
    - BatchReport: Progress report emitted after each embedding batch
    - BatchFailure: A dropped batch and the identifiers it carried
    - EmbeddingRunResult: Outcome of a whole chunked embedding run

Retrieval Models:
    - RetrievalResult: One ranked similarity hit

Query Models:
    - QueryOutcome: Outcome of one query in a driver run
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, computed_field

from feedback_rag.types.records import FeedbackRecord


class EmbeddedRecord(BaseModel):
    """
    A feedback record paired with its embedding vector(s).

    One vector per record is the usual case; several are allowed when a
    record's text is split into multiple embeddable spans.
    """

    model_config = ConfigDict(frozen=True)

    record: FeedbackRecord
    embeddings: list[list[float]] = Field(..., min_length=1)

    @classmethod
    def single(cls, record: FeedbackRecord, vector: list[float]) -> "EmbeddedRecord":
        """Pair a record with exactly one vector."""
        return cls(record=record, embeddings=[vector])


class RetrievalResult(BaseModel):
    """
    One similarity hit from the vector index.

    Attributes:
        score: Cosine similarity to the query (higher is closer)
        embedding: The entry's best-matching vector
        record: Source feedback record
    """

    model_config = ConfigDict(frozen=True)

    score: float
    embedding: list[float]
    record: FeedbackRecord


class BatchReport(BaseModel):
    """Progress report for one embedding batch."""

    batch_number: int
    batch_count: int
    size: int
    succeeded: bool
    error: str | None = None


class BatchFailure(BaseModel):
    """An embedding batch that failed and was dropped."""

    batch_number: int
    error: str
    dropped_ids: list[str] = Field(default_factory=list)


class EmbeddingRunResult(BaseModel):
    """
    Outcome of a chunked embedding run.

    Attributes:
        pairs: Successfully embedded records, in original order
        batches_total: Number of batches attempted
        failed_batches: Details of every dropped batch
    """

    pairs: list[EmbeddedRecord] = Field(default_factory=list)
    batches_total: int = 0
    failed_batches: list[BatchFailure] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def batches_failed(self) -> int:
        return len(self.failed_batches)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def dropped_ids(self) -> list[str]:
        """Identifiers lost to failed batches, in batch order."""
        return [cid for failure in self.failed_batches for cid in failure.dropped_ids]

    @property
    def succeeded(self) -> bool:
        """True when no batch was dropped."""
        return not self.failed_batches


class QueryOutcome(BaseModel):
    """
    Outcome of one query in a driver run.

    Exactly one of analysis / error is set.
    """

    query: str
    analysis: str | None = None
    error: str | None = None
    duration_seconds: float = 0.0

    @property
    def ok(self) -> bool:
        return self.error is None
