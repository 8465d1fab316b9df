"""Qdrant vector store adapter over the official async client.

Response shapes (vector params, scored points) are parsed by
``qdrant-client``; this adapter only maps them onto domain entities and
turns client failures into ``VectorStoreError``.
"""

import logging
from collections.abc import Awaitable
from typing import TypeVar

from qdrant_client import AsyncQdrantClient, models
from qdrant_client.http.exceptions import ResponseHandlingException, UnexpectedResponse

from rag_lab.application.interfaces.vector_store import VectorStore
from rag_lab.domain.entities import CollectionInfo, ScoredPoint, StoredPoint
from rag_lab.domain.exceptions import VectorStoreError

logger = logging.getLogger(__name__)

_T = TypeVar("_T")


class QdrantVectorStore(VectorStore):
    """Infrastructure adapter — talks to Qdrant through ``AsyncQdrantClient``."""

    def __init__(
        self,
        url: str | None = None,
        api_key: str | None = None,
        client: AsyncQdrantClient | None = None,
        timeout: int = 30,
    ):
        if client is None and url is None:
            raise ValueError("Either url or client is required")
        self._client = client or AsyncQdrantClient(url=url, api_key=api_key, timeout=timeout)

    async def _call(self, operation: str, call: Awaitable[_T]) -> _T:
        """Await a client call, translating client failures into VectorStoreError."""
        try:
            return await call
        except UnexpectedResponse as exc:
            raise VectorStoreError(
                operation, exc.status_code or 0, self._error_message(exc)
            ) from exc
        except ResponseHandlingException as exc:
            raise VectorStoreError(operation, 0, str(exc.source)) from exc

    @staticmethod
    def _error_message(exc: UnexpectedResponse) -> str:
        try:
            data = exc.structured()
        except ValueError:
            return exc.content.decode(errors="replace")[:500]
        status = data.get("status") if isinstance(data, dict) else None
        if isinstance(status, dict) and "error" in status:
            return str(status["error"])
        return exc.content.decode(errors="replace")[:500]

    async def list_collections(self) -> list[str]:
        response = await self._call("list_collections", self._client.get_collections())
        return [collection.name for collection in response.collections]

    async def get_collection(self, name: str) -> CollectionInfo | None:
        if not await self._call("get_collection", self._client.collection_exists(name)):
            return None

        info = await self._call("get_collection", self._client.get_collection(name))
        vectors = info.config.params.vectors
        # Named vector configs come back as a mapping; only the unnamed one has a size
        size = vectors.size if isinstance(vectors, models.VectorParams) else None
        return CollectionInfo(name=name, dimension=size, points_count=info.points_count)

    async def create_collection(
        self, name: str, dimension: int, distance: str = "Cosine"
    ) -> None:
        try:
            metric = models.Distance(distance)
        except ValueError as exc:
            raise VectorStoreError("create_collection", 400, f"Unknown distance '{distance}'") from exc

        await self._call(
            "create_collection",
            self._client.create_collection(
                collection_name=name,
                vectors_config=models.VectorParams(size=dimension, distance=metric),
            ),
        )
        logger.info("Created collection %s (size=%d, distance=%s)", name, dimension, distance)

    async def delete_collection(self, name: str) -> None:
        deleted = await self._call("delete_collection", self._client.delete_collection(name))
        if not deleted:
            raise VectorStoreError("delete_collection", 404, f"Collection {name} not found")
        logger.info("Deleted collection %s", name)

    async def upsert(
        self, name: str, points: list[StoredPoint], *, wait: bool = True
    ) -> None:
        if not points:
            return
        await self._call(
            "upsert",
            self._client.upsert(
                collection_name=name,
                points=[
                    models.PointStruct(id=p.id, vector=p.vector, payload=p.payload.to_dict())
                    for p in points
                ],
                wait=wait,
            ),
        )

    async def search(
        self,
        name: str,
        vector: list[float],
        limit: int,
        *,
        score_threshold: float | None = None,
    ) -> list[ScoredPoint]:
        response = await self._call(
            "search",
            self._client.query_points(
                collection_name=name,
                query=vector,
                limit=limit,
                with_payload=True,
                score_threshold=score_threshold,
            ),
        )
        return [
            ScoredPoint(id=point.id, score=float(point.score), payload=point.payload or {})
            for point in response.points
        ]
