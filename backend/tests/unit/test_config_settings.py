"""Unit tests for application settings configuration."""

from pathlib import Path

from rag_lab.config import Settings


def test_settings_uses_backend_env_file_independent_of_cwd():
    """Settings should always include backend/.env as an env source."""
    env_files = Settings.model_config.get("env_file")
    assert env_files is not None

    normalized = {str(Path(item)) for item in env_files}
    expected_backend_env = str(Path(__file__).resolve().parents[2] / ".env")

    assert expected_backend_env in normalized
    assert str(Path(".env")) in normalized


def test_pipeline_defaults():
    settings = Settings(_env_file=None)

    assert settings.embedding_batch_size == 16
    assert settings.embedding_max_workers == 4
    assert settings.embedding_max_retries == 2
    assert settings.embedding_retry_base_delay == 1.0
    assert settings.chunk_tokens_configurable < settings.chunk_tokens_fixed
    assert settings.similarity_threshold == 0.2
    assert settings.max_chunks == 5
    assert settings.max_memory_tokens == 1000
    assert settings.baseline_dimension == 1536
    assert settings.generation_max_tokens == 500


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("VECTOR_STORE_BACKEND", "memory")
    monkeypatch.setenv("MAX_CHUNKS", "7")
    monkeypatch.setenv("SURUS_DEFAULT_DIMENSION", "256")

    settings = Settings(_env_file=None)

    assert settings.vector_store_backend == "memory"
    assert settings.max_chunks == 7
    assert settings.surus_default_dimension == 256
