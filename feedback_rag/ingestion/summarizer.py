"""
Profile Summaries

Deterministic natural-language rendering of a feedback record. The
summary is the only text embedded for a record, so the template must not
change between ingestion and query time.
"""

from __future__ import annotations

from collections.abc import Iterable

from feedback_rag.types.records import FeedbackRecord


def summarize(record: FeedbackRecord) -> str:
    """
    Render a record as a profile paragraph.

    Field order: demographics, income, quality ratings, purchase frequency,
    feedback score, loyalty level, satisfaction score.
    """
    return (
        f"Customer Profile: {record.age} year old {record.gender} from {record.country} "
        f"with income ${record.income:.2f}. "
        f"Product Quality Rating: {record.product_quality}/10, "
        f"Service Quality: {record.service_quality}/10. "
        f"Purchases {record.purchase_frequency} times per year. "
        f"Feedback Score: {record.feedback_score}. "
        f"Loyalty Level: {record.loyalty_level}. "
        f"Satisfaction Score: {record.satisfaction_score:.1f}%"
    )


def summarize_records(records: Iterable[FeedbackRecord]) -> list[FeedbackRecord]:
    """Return copies of the records with their profile summary populated."""
    return [record.with_summary(summarize(record)) for record in records]
