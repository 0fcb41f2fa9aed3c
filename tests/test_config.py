"""Tests for FeedbackConfig."""

import pytest

from feedback_rag.config import DEFAULT_SYSTEM_PREAMBLE, FeedbackConfig


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's environment out of config tests."""
    for name in (
        "OPENAI_API_KEY",
        "FEEDBACK_RAG_LLM_PROVIDER",
        "FEEDBACK_RAG_LLM_MODEL",
        "FEEDBACK_RAG_EMBEDDING_PROVIDER",
        "FEEDBACK_RAG_EMBEDDING_MODEL",
        "FEEDBACK_RAG_BATCH_SIZE",
        "FEEDBACK_RAG_BATCH_DELAY",
        "FEEDBACK_RAG_TOP_K",
        "FEEDBACK_RAG_QUERY_DELAY",
    ):
        monkeypatch.delenv(name, raising=False)


class TestDefaults:
    """Built-in defaults."""

    def test_defaults(self):
        config = FeedbackConfig()
        assert config.embedding_batch_size == 1000
        assert config.embedding_batch_delay == 0.2
        assert config.query_top_k == 3
        assert config.query_delay == 2.0
        assert config.embedding_model == "text-embedding-ada-002"
        assert config.llm_model == "gpt-4"
        assert config.system_preamble == DEFAULT_SYSTEM_PREAMBLE
        assert config.openai_api_key is None


class TestOverrides:
    """Environment and keyword overrides."""

    def test_environment(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
        monkeypatch.setenv("FEEDBACK_RAG_BATCH_SIZE", "250")
        monkeypatch.setenv("FEEDBACK_RAG_BATCH_DELAY", "1.5")
        monkeypatch.setenv("FEEDBACK_RAG_TOP_K", "5")
        monkeypatch.setenv("FEEDBACK_RAG_LLM_MODEL", "gpt-4o")

        config = FeedbackConfig()
        assert config.openai_api_key == "sk-env"
        assert config.embedding_batch_size == 250
        assert config.embedding_batch_delay == 1.5
        assert config.query_top_k == 5
        assert config.llm_model == "gpt-4o"

    def test_keywords_beat_environment(self, monkeypatch):
        monkeypatch.setenv("FEEDBACK_RAG_TOP_K", "5")
        assert FeedbackConfig(query_top_k=7).query_top_k == 7

    def test_unknown_option(self):
        with pytest.raises(ValueError, match="Unknown configuration option"):
            FeedbackConfig(chunk_size=10)

    @pytest.mark.parametrize(
        "option",
        [
            {"embedding_batch_size": 0},
            {"embedding_batch_delay": -0.1},
            {"query_top_k": 0},
            {"query_delay": -1},
        ],
    )
    def test_out_of_range(self, option):
        with pytest.raises(ValueError):
            FeedbackConfig(**option)

    def test_with_overrides_ignores_none(self):
        base = FeedbackConfig(query_top_k=4)
        updated = base.with_overrides(query_top_k=None, embedding_batch_size=10)

        assert updated.query_top_k == 4
        assert updated.embedding_batch_size == 10
        assert base.embedding_batch_size == 1000

    def test_with_overrides_validates(self):
        with pytest.raises(ValueError):
            FeedbackConfig().with_overrides(query_top_k=-3)


class TestFiles:
    """TOML round-trips."""

    def test_from_file_sections(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text(
            '[llm]\nmodel = "gpt-4o"\n\n'
            "[embedding]\nbatch_size = 50\nbatch_delay = 0.5\n\n"
            "[query]\ntop_k = 4\ndelay = 0.0\n\n"
            '[api_keys]\nopenai = "sk-file"\n'
        )
        config = FeedbackConfig.from_file(path)

        assert config.llm_model == "gpt-4o"
        assert config.embedding_batch_size == 50
        assert config.embedding_batch_delay == 0.5
        assert config.query_top_k == 4
        assert config.query_delay == 0.0
        assert config.openai_api_key == "sk-file"

    def test_from_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            FeedbackConfig.from_file(tmp_path / "missing.toml")

    def test_round_trip(self, tmp_path):
        original = FeedbackConfig(embedding_batch_size=123, query_top_k=6, llm_model="gpt-4o-mini")
        path = tmp_path / "out" / "config.toml"
        original.to_file(path)

        loaded = FeedbackConfig.from_file(path)
        assert loaded.embedding_batch_size == 123
        assert loaded.query_top_k == 6
        assert loaded.llm_model == "gpt-4o-mini"
        assert "sk-" not in path.read_text()
