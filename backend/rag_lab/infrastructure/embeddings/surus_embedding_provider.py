"""Surus embedding provider — configurable-dimension (matryoshka) nomic model.

Default model: nomic-ai/nomic-embed-text-v2-moe (768 native dimensions,
truncated server-side to any requested size).
"""

import httpx

from rag_lab.application.interfaces.embedding_provider import (
    ConfigurableDimensionEmbeddingProvider,
)
from rag_lab.infrastructure.embeddings.embeddings_api_client import EmbeddingsApiClient


class SurusEmbeddingProvider(ConfigurableDimensionEmbeddingProvider):
    """Infrastructure adapter — sends the requested ``dimensions`` with every call."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.surus.dev/functions",
        model: str = "nomic-ai/nomic-embed-text-v2-moe",
        default_dimension: int = 768,
        max_dimension: int = 768,
        http_client: httpx.AsyncClient | None = None,
    ):
        self._default_dimension = default_dimension
        self._max_dimension = max_dimension
        self._api = EmbeddingsApiClient(
            provider_name=self.provider_name,
            api_key=api_key,
            base_url=base_url,
            model=model,
            http_client=http_client,
        )

    @property
    def provider_name(self) -> str:
        return "surus"

    @property
    def default_dimension(self) -> int:
        return self._default_dimension

    @property
    def max_dimension(self) -> int:
        return self._max_dimension

    async def embed(self, texts: list[str], dimension: int) -> list[list[float]]:
        return await self._api.create_embeddings(texts, dimensions=dimension)
