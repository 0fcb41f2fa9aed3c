"""
Prompt Formatting

Pure functions that merge a query with its retrieval outcome into the
prompt body sent to the LLM. Every branch yields a complete prompt: a
failed or empty lookup degrades to the query plus a notice, never to an
error.
"""

from __future__ import annotations

from collections.abc import Sequence

from feedback_rag.config.settings import DEFAULT_SYSTEM_PREAMBLE
from feedback_rag.types.results import RetrievalResult

NO_PROFILES_NOTICE = "No relevant customer profiles were found for this query."
RETRIEVAL_FAILED_NOTICE = (
    "Similar customer profiles could not be retrieved because of a retrieval error."
)

__all__ = [
    "DEFAULT_SYSTEM_PREAMBLE",
    "NO_PROFILES_NOTICE",
    "RETRIEVAL_FAILED_NOTICE",
    "format_profile",
    "format_prompt",
]


def format_profile(position: int, result: RetrievalResult) -> str:
    """Render one retrieved profile as a numbered block."""
    r = result.record
    return (
        f"{position}. Customer {r.customer_id} (similarity score: {result.score:.2f})\n"
        f"   Demographics: {r.age} year old {r.gender} from {r.country}\n"
        f"   Income: ${r.income:.2f}\n"
        f"   Satisfaction Score: {r.satisfaction_score:.1f}%\n"
        f"   Loyalty Level: {r.loyalty_level}\n"
        f"   Purchase Frequency: {r.purchase_frequency} times per year\n"
        f"   Product Quality: {r.product_quality}/10, Service Quality: {r.service_quality}/10\n"
        f"   Feedback Score: {r.feedback_score}"
    )


def format_prompt(
    query: str,
    lookup: Sequence[RetrievalResult] | BaseException,
) -> str:
    """
    Merge the query and its lookup outcome into one prompt body.

    Args:
        query: The original analysis query
        lookup: Ranked results, or the exception the lookup raised

    Returns:
        Prompt text that always starts with the original query
    """
    header = f"Analysis Query: {query}"

    if isinstance(lookup, BaseException):
        return f"{header}\n\n{RETRIEVAL_FAILED_NOTICE}"

    if not lookup:
        return f"{header}\n\n{NO_PROFILES_NOTICE}"

    profiles = "\n\n".join(
        format_profile(position, result)
        for position, result in enumerate(lookup, start=1)
    )
    return f"{header}\n\nRelevant Customer Profiles for Context:\n\n{profiles}"
