"""
FeedbackConfig - Configuration Management

Sensible defaults with full override capability.

Example:
    >>> # Use defaults (reads from environment)
    >>> analyzer = FeedbackAnalyzer()

    >>> # Explicit configuration
    >>> config = FeedbackConfig(
    ...     embedding_batch_size=500,
    ...     query_top_k=5,
    ... )
    >>> analyzer = FeedbackAnalyzer(config=config)

    >>> # From config file
    >>> config = FeedbackConfig.from_file("./feedback_rag.toml")

Environment Variables:
    FEEDBACK_RAG_LLM_PROVIDER - LLM provider name
    FEEDBACK_RAG_LLM_MODEL - Chat model for analysis
    FEEDBACK_RAG_EMBEDDING_PROVIDER - Embedding provider name
    FEEDBACK_RAG_EMBEDDING_MODEL - Embedding model name
    FEEDBACK_RAG_BATCH_SIZE - Records per embedding call
    FEEDBACK_RAG_BATCH_DELAY - Pause between embedding calls (seconds)
    FEEDBACK_RAG_TOP_K - Profiles retrieved per query
    FEEDBACK_RAG_QUERY_DELAY - Pause between queries in batch runs (seconds)
    OPENAI_API_KEY - OpenAI API key (standard name)
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

DEFAULT_SYSTEM_PREAMBLE = """\
You are an expert customer insights analyst. Analyze customer profiles and provide:
1. Key behavioral patterns and trends
2. Risk factors or concerns
3. Specific, actionable recommendations
4. Opportunities for improving customer satisfaction

Base your analysis on both the specific query and the provided similar customer profiles.
Be concise but insightful in your analysis."""


class FeedbackConfig:
    """Configuration for feedback-rag."""

    # === LLM Configuration ===

    llm_provider: str = "openai"
    """LLM provider: only "openai" is implemented"""

    llm_model: str = "gpt-4"
    """Chat model used for the final analysis"""

    llm_temperature: float = 0.0
    """Sampling temperature for the analysis call"""

    llm_max_tokens: int = 1024
    """Maximum tokens in one analysis"""

    system_preamble: str = DEFAULT_SYSTEM_PREAMBLE
    """System message sent with every analysis prompt"""

    # === Embedding Configuration ===

    embedding_provider: str = "openai"
    """Embedding provider: only "openai" is implemented"""

    embedding_model: str = "text-embedding-ada-002"
    """Embedding model name"""

    embedding_batch_size: int = 1000
    """Records per embedding API call"""

    embedding_batch_delay: float = 0.2
    """Seconds to pause between embedding calls"""

    # === Query Configuration ===

    query_top_k: int = 3
    """Number of similar profiles retrieved per query"""

    query_delay: float = 2.0
    """Seconds to pause between queries in a batch run"""

    # === API Keys ===

    openai_api_key: str | None = None

    def __init__(self, **kwargs: Any) -> None:
        """
        Initialize configuration.

        Args:
            **kwargs: Override any configuration option

        Raises:
            ValueError: Unknown option or out-of-range value
        """
        # Load from environment first
        self._load_from_env()

        # Apply explicit overrides
        for key, value in kwargs.items():
            if hasattr(self, key) and not key.startswith("_"):
                setattr(self, key, value)
            else:
                raise ValueError(f"Unknown configuration option: {key}")

        self.validate()

    def _load_from_env(self) -> None:
        """Load configuration from environment variables."""
        self.openai_api_key = os.getenv("OPENAI_API_KEY")

        if provider := os.getenv("FEEDBACK_RAG_LLM_PROVIDER"):
            self.llm_provider = provider
        if model := os.getenv("FEEDBACK_RAG_LLM_MODEL"):
            self.llm_model = model
        if provider := os.getenv("FEEDBACK_RAG_EMBEDDING_PROVIDER"):
            self.embedding_provider = provider
        if model := os.getenv("FEEDBACK_RAG_EMBEDDING_MODEL"):
            self.embedding_model = model
        if batch_size := os.getenv("FEEDBACK_RAG_BATCH_SIZE"):
            self.embedding_batch_size = int(batch_size)
        if delay := os.getenv("FEEDBACK_RAG_BATCH_DELAY"):
            self.embedding_batch_delay = float(delay)
        if top_k := os.getenv("FEEDBACK_RAG_TOP_K"):
            self.query_top_k = int(top_k)
        if delay := os.getenv("FEEDBACK_RAG_QUERY_DELAY"):
            self.query_delay = float(delay)

    def validate(self) -> None:
        """
        Check value ranges.

        Raises:
            ValueError: If any option is out of range
        """
        if self.embedding_batch_size < 1:
            raise ValueError(
                f"embedding_batch_size must be >= 1, got {self.embedding_batch_size}"
            )
        if self.embedding_batch_delay < 0:
            raise ValueError(
                f"embedding_batch_delay must be >= 0, got {self.embedding_batch_delay}"
            )
        if self.query_top_k < 1:
            raise ValueError(f"query_top_k must be >= 1, got {self.query_top_k}")
        if self.query_delay < 0:
            raise ValueError(f"query_delay must be >= 0, got {self.query_delay}")

    @classmethod
    def from_file(cls, path: str | Path) -> "FeedbackConfig":
        """
        Load configuration from TOML file.

        Nested sections are flattened with a section prefix.

        Example TOML:
            [llm]
            provider = "openai"
            model = "gpt-4o"

            [embedding]
            model = "text-embedding-3-small"
            batch_size = 500
            batch_delay = 0.5

            [query]
            top_k = 5
            delay = 1.0

            [api_keys]
            openai = "sk-..."

        Args:
            path: Path to TOML configuration file

        Returns:
            FeedbackConfig instance with values from file

        Raises:
            FileNotFoundError: If config file doesn't exist
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path, "rb") as f:
            data = tomllib.load(f)

        flat_config: dict[str, Any] = {}

        # Map section names to config key prefixes
        section_mapping = {
            "llm": "llm_",
            "embedding": "embedding_",
            "query": "query_",
            "api_keys": "",  # api_keys.openai -> openai_api_key
        }

        for section, prefix in section_mapping.items():
            if section in data:
                for key, value in data[section].items():
                    if section == "api_keys":
                        flat_config[f"{key}_api_key"] = value
                    else:
                        flat_config[f"{prefix}{key}"] = value

        # Also support flat top-level keys
        for key, value in data.items():
            if key not in section_mapping and not isinstance(value, dict):
                flat_config[key] = value

        return cls(**flat_config)

    @classmethod
    def from_env(cls) -> "FeedbackConfig":
        """Load configuration from environment variables only."""
        return cls()

    def to_file(self, path: str | Path) -> None:
        """
        Save configuration to TOML file.

        API keys and the system preamble are not written.

        Args:
            path: Path to write TOML configuration file
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        sections: dict[str, dict[str, str | int | float]] = {
            "llm": {
                "provider": self.llm_provider,
                "model": self.llm_model,
                "temperature": self.llm_temperature,
                "max_tokens": self.llm_max_tokens,
            },
            "embedding": {
                "provider": self.embedding_provider,
                "model": self.embedding_model,
                "batch_size": self.embedding_batch_size,
                "batch_delay": self.embedding_batch_delay,
            },
            "query": {
                "top_k": self.query_top_k,
                "delay": self.query_delay,
            },
        }

        lines = ["# feedback-rag configuration", ""]

        for section_name, section_values in sections.items():
            lines.append(f"[{section_name}]")
            for key, value in section_values.items():
                if isinstance(value, str):
                    lines.append(f'{key} = "{value}"')
                else:
                    lines.append(f"{key} = {value}")
            lines.append("")

        lines.extend([
            "# API keys should be set via environment variables:",
            "# OPENAI_API_KEY",
            "",
        ])

        path.write_text("\n".join(lines))

    def with_overrides(self, **kwargs: Any) -> "FeedbackConfig":
        """
        Return new config with specified overrides.

        None values are ignored so CLI options can be passed through as-is.
        """
        new_config = FeedbackConfig.__new__(FeedbackConfig)
        for key in dir(self):
            if not key.startswith("_") and not callable(getattr(self, key)):
                setattr(new_config, key, getattr(self, key))
        for key, value in kwargs.items():
            if value is None:
                continue
            if not hasattr(new_config, key):
                raise ValueError(f"Unknown configuration option: {key}")
            setattr(new_config, key, value)
        new_config.validate()
        return new_config
