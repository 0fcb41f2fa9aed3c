"""
Configuration System

Configuration Priority (highest to lowest):
    1. Programmatic (passed to FeedbackConfig())
    2. Environment variables (FEEDBACK_RAG_* prefix)
    3. Built-in defaults

A TOML file can be loaded explicitly with FeedbackConfig.from_file().

Modules:
    settings: FeedbackConfig class
"""

from feedback_rag.config.settings import DEFAULT_SYSTEM_PREAMBLE, FeedbackConfig

__all__ = ["FeedbackConfig", "DEFAULT_SYSTEM_PREAMBLE"]
