"""Embedding provider adapters."""

from .embeddings_api_client import EmbeddingsApiClient
from .openai_embedding_provider import OpenAIEmbeddingProvider
from .surus_embedding_provider import SurusEmbeddingProvider

__all__ = ["EmbeddingsApiClient", "OpenAIEmbeddingProvider", "SurusEmbeddingProvider"]
