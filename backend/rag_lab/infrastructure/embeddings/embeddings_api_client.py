"""HTTP client for OpenAI-compatible ``/v1/embeddings`` endpoints.

Shared by every embedding provider adapter. Uses an injected
``httpx.AsyncClient`` when given, otherwise opens one per call.
"""

import logging
from typing import Any

import httpx

from rag_lab.domain.exceptions import ProviderError, ProviderResponseError

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT = 120.0


class EmbeddingsApiClient:
    """Posts ``{model, input, dimensions?}`` and returns vectors in input order."""

    def __init__(
        self,
        *,
        provider_name: str,
        api_key: str,
        base_url: str,
        model: str,
        http_client: httpx.AsyncClient | None = None,
    ):
        self._provider_name = provider_name
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._model = model
        self._http_client = http_client

    @property
    def model(self) -> str:
        return self._model

    def _get_headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    async def _get_client(self) -> httpx.AsyncClient:
        if self._http_client is not None:
            return self._http_client
        return httpx.AsyncClient(timeout=_DEFAULT_TIMEOUT)

    async def create_embeddings(
        self, texts: list[str], *, dimensions: int | None = None
    ) -> list[list[float]]:
        """Embed *texts*; ``dimensions`` is only sent when given.

        Raises:
            ProviderError: Non-200 status or transport failure.
            ProviderResponseError: Body lacks the ``data[].embedding`` shape.
        """
        if not texts:
            return []

        url = f"{self._base_url}/v1/embeddings"
        payload: dict[str, Any] = {"model": self._model, "input": texts}
        if dimensions is not None:
            payload["dimensions"] = dimensions

        client = await self._get_client()
        should_close = self._http_client is None

        try:
            response = await client.post(url, headers=self._get_headers(), json=payload)
        except httpx.TransportError as exc:
            logger.error("Embedding request to %s failed: %s", self._provider_name, exc)
            raise ProviderError(self._provider_name, 0, str(exc)) from exc
        finally:
            if should_close:
                await client.aclose()

        if response.status_code != 200:
            error_text = response.text[:500]
            logger.error(
                "Embedding API error %d from %s: %s",
                response.status_code,
                self._provider_name,
                error_text,
            )
            raise ProviderError(self._provider_name, response.status_code, error_text)

        vectors = self._parse_embeddings(response)
        logger.info(
            "Generated %d embeddings (provider=%s, model=%s, dims=%d)",
            len(vectors),
            self._provider_name,
            self._model,
            len(vectors[0]) if vectors else 0,
        )
        return vectors

    def _parse_embeddings(self, response: httpx.Response) -> list[list[float]]:
        try:
            data = response.json()
        except ValueError as exc:
            raise ProviderResponseError(
                self._provider_name, f"Response is not JSON: {response.text[:200]}"
            ) from exc

        items = data.get("data") if isinstance(data, dict) else None
        if not isinstance(items, list):
            raise ProviderResponseError(
                self._provider_name, "Response is missing the 'data' array of embeddings"
            )

        # Sort by index to ensure correct ordering
        if all(isinstance(item, dict) and "index" in item for item in items):
            items = sorted(items, key=lambda item: item["index"])

        vectors: list[list[float]] = []
        for position, item in enumerate(items):
            embedding = item.get("embedding") if isinstance(item, dict) else None
            if not isinstance(embedding, list):
                raise ProviderResponseError(
                    self._provider_name, f"Item {position} has no 'embedding' vector"
                )
            vectors.append(embedding)
        return vectors
