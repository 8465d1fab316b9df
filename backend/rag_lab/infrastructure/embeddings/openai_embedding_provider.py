"""OpenAI embedding provider — fixed native dimension.

The requested dimension is ignored: the model always answers with its
native vector size, so no ``dimensions`` field is sent.
"""

import httpx

from rag_lab.application.interfaces.embedding_provider import (
    FixedDimensionEmbeddingProvider,
)
from rag_lab.infrastructure.embeddings.embeddings_api_client import EmbeddingsApiClient


class OpenAIEmbeddingProvider(FixedDimensionEmbeddingProvider):
    """Infrastructure adapter — calls the OpenAI /v1/embeddings API."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.openai.com",
        model: str = "text-embedding-3-small",
        native_dimension: int = 1536,
        http_client: httpx.AsyncClient | None = None,
    ):
        self._native_dimension = native_dimension
        self._api = EmbeddingsApiClient(
            provider_name=self.provider_name,
            api_key=api_key,
            base_url=base_url,
            model=model,
            http_client=http_client,
        )

    @property
    def provider_name(self) -> str:
        return "openai"

    @property
    def native_dimension(self) -> int:
        return self._native_dimension

    async def embed(self, texts: list[str], dimension: int) -> list[list[float]]:
        return await self._api.create_embeddings(texts)
