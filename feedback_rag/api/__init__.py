"""
Public API

Modules:
    analyzer: FeedbackAnalyzer facade and the example analysis queries
"""

from feedback_rag.api.analyzer import EXAMPLE_QUERIES, FeedbackAnalyzer

__all__ = ["FeedbackAnalyzer", "EXAMPLE_QUERIES"]
