"""Shared fixtures for feedback-rag tests."""

from collections.abc import Callable

import pytest

from feedback_rag.ingestion.summarizer import summarize
from feedback_rag.types.records import FeedbackRecord


def build_record(customer_id: str = "C001", **overrides) -> FeedbackRecord:
    """Create a summarized FeedbackRecord with sensible defaults."""
    fields = {
        "customer_id": customer_id,
        "age": 34,
        "gender": "Female",
        "country": "France",
        "income": 52000.0,
        "product_quality": 8,
        "service_quality": 7,
        "purchase_frequency": 12,
        "feedback_score": "High",
        "loyalty_level": "Gold",
        "satisfaction_score": 81.25,
    }
    fields.update(overrides)
    record = FeedbackRecord(**fields)
    return record.with_summary(summarize(record))


@pytest.fixture
def make_record() -> Callable[..., FeedbackRecord]:
    """Factory for summarized records."""
    return build_record


@pytest.fixture
def records() -> list[FeedbackRecord]:
    """Five distinct summarized records, C001..C005."""
    return [
        build_record(f"C00{i}", age=20 + i, purchase_frequency=i)
        for i in range(1, 6)
    ]
