from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings

_BACKEND_DIR = Path(__file__).resolve().parents[1]
_ENV_FILES = (
    _BACKEND_DIR / ".env",
    ".env",
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    app_title: str = "RAG Lab API"
    app_version: str = "0.1.0"
    app_env: str = "development"
    cors_origins: list[str] = ["http://localhost:3000"]

    # Vector store
    vector_store_backend: str = "qdrant"     # "qdrant" | "memory"
    qdrant_url: str = "http://localhost:6333"
    qdrant_api_key: str = ""

    # Configurable-dimension embeddings (Surus)
    surus_api_key: str = ""
    surus_base_url: str = "https://api.surus.dev/functions"
    surus_embedding_model: str = "nomic-ai/nomic-embed-text-v2-moe"
    surus_default_dimension: int = 768
    surus_max_dimension: int = 768

    # Fixed-dimension embeddings (OpenAI)
    openai_api_key: str = ""
    openai_base_url: str = "https://api.openai.com"
    openai_embedding_model: str = "text-embedding-3-small"
    openai_native_dimension: int = 1536

    # Generation
    generation_api_key: str = ""
    generation_base_url: str = "https://api.surus.dev/functions"
    generation_model: str = "Qwen/Qwen3-1.7B"
    generation_max_tokens: int = 500

    # Embedding gateway
    embedding_batch_size: int = 16
    embedding_max_workers: int = 4
    embedding_max_retries: int = 2
    embedding_retry_base_delay: float = 1.0

    # Chunking
    chunk_tokens_configurable: int = 256
    chunk_tokens_fixed: int = 512
    chunk_overlap_tokens: int = 32

    # Retrieval / prompting
    similarity_threshold: float = 0.2
    max_chunks: int = 5
    max_memory_tokens: int = 1000
    max_parallel_searches: int = 4

    # Storage cost model
    storage_cost_per_mb_month: float = 0.001
    baseline_dimension: int = 1536

    # Logging — per-category log levels (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    log_level: str = "INFO"                  # Root / app-wide
    log_level_http: str = "WARNING"          # httpx / httpcore — outbound HTTP
    log_level_uvicorn: str = "INFO"          # uvicorn.access / uvicorn.error
    log_level_pipeline: str = "INFO"         # ingestion / retrieval / chat pipelines
    log_level_providers: str = "INFO"        # embedding, LLM and vector store adapters

    model_config = {
        "env_file": _ENV_FILES,
        "env_file_encoding": "utf-8",
    }


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance — reads .env once."""
    return Settings()
