"""Process-local vector store with exact cosine search.

Used for local development and tests when no Qdrant server is available.
"""

import asyncio
import math

from rag_lab.application.interfaces.vector_store import VectorStore
from rag_lab.domain.entities import CollectionInfo, ScoredPoint, StoredPoint
from rag_lab.domain.exceptions import VectorStoreError


def cosine_similarity(a: list[float], b: list[float]) -> float:
    dot = sum(x * y for x, y in zip(a, b))
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(y * y for y in b))
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return dot / (norm_a * norm_b)


class _Collection:
    def __init__(self, dimension: int):
        self.dimension = dimension
        self.points: dict[int | str, StoredPoint] = {}


class InMemoryVectorStore(VectorStore):
    """Dict-backed store; collections keep insertion order for enumeration."""

    def __init__(self):
        self._collections: dict[str, _Collection] = {}
        self._lock = asyncio.Lock()

    def _require(self, operation: str, name: str) -> _Collection:
        collection = self._collections.get(name)
        if collection is None:
            raise VectorStoreError(operation, 404, f"Collection {name} not found")
        return collection

    async def list_collections(self) -> list[str]:
        return list(self._collections)

    async def get_collection(self, name: str) -> CollectionInfo | None:
        collection = self._collections.get(name)
        if collection is None:
            return None
        return CollectionInfo(
            name=name,
            dimension=collection.dimension,
            points_count=len(collection.points),
        )

    async def create_collection(
        self, name: str, dimension: int, distance: str = "Cosine"
    ) -> None:
        if distance != "Cosine":
            raise VectorStoreError("create_collection", 400, f"Unsupported distance {distance}")
        async with self._lock:
            if name in self._collections:
                raise VectorStoreError("create_collection", 409, f"Collection {name} already exists")
            self._collections[name] = _Collection(dimension)

    async def delete_collection(self, name: str) -> None:
        async with self._lock:
            self._require("delete_collection", name)
            del self._collections[name]

    async def upsert(
        self, name: str, points: list[StoredPoint], *, wait: bool = True
    ) -> None:
        async with self._lock:
            collection = self._require("upsert", name)
            for point in points:
                if len(point.vector) != collection.dimension:
                    raise VectorStoreError(
                        "upsert",
                        400,
                        f"Vector dimension error: expected dim: {collection.dimension}, "
                        f"got {len(point.vector)}",
                    )
            for point in points:
                collection.points[point.id] = point

    async def search(
        self,
        name: str,
        vector: list[float],
        limit: int,
        *,
        score_threshold: float | None = None,
    ) -> list[ScoredPoint]:
        collection = self._require("search", name)
        if len(vector) != collection.dimension:
            raise VectorStoreError(
                "search",
                400,
                f"Vector dimension error: expected dim: {collection.dimension}, got {len(vector)}",
            )

        scored = [
            ScoredPoint(
                id=point.id,
                score=cosine_similarity(vector, point.vector),
                payload=point.payload.to_dict(),
            )
            for point in collection.points.values()
        ]
        if score_threshold is not None:
            scored = [s for s in scored if s.score >= score_threshold]
        scored.sort(key=lambda s: s.score, reverse=True)
        return scored[:limit]
