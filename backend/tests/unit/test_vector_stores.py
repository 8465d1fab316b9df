"""Unit tests for the Qdrant adapter and the in-memory vector store."""

import httpx
import pytest
from qdrant_client import AsyncQdrantClient, models
from qdrant_client.http.exceptions import ResponseHandlingException, UnexpectedResponse

from rag_lab.domain.entities import PointPayload, SourceFormat, StoredPoint
from rag_lab.domain.exceptions import VectorStoreError
from rag_lab.infrastructure.vector_store import (
    InMemoryVectorStore,
    QdrantVectorStore,
    cosine_similarity,
)


# ── Helpers ──


def _point(point_id: int, vector: list[float], text: str = "hello") -> StoredPoint:
    return StoredPoint(
        id=point_id,
        vector=vector,
        payload=PointPayload(
            text=text,
            timestamp="2026-01-01T00:00:00+00:00",
            dimension=len(vector),
            provider="surus",
            estimated_tokens=2,
            source_format=SourceFormat.ARRAY,
            original_index=0,
        ),
    )


class FailingQdrantClient:
    """Stands in for AsyncQdrantClient; every call fails with ``error``."""

    def __init__(self, error: Exception):
        self._error = error

    async def query_points(self, **kwargs):
        raise self._error

    async def get_collections(self):
        raise self._error


class MissingDeleteQdrantClient:
    async def delete_collection(self, name):
        return False


def _qdrant() -> QdrantVectorStore:
    return QdrantVectorStore(client=AsyncQdrantClient(location=":memory:"))


# ── QdrantVectorStore ──


def test_qdrant_store_needs_url_or_client():
    with pytest.raises(ValueError):
        QdrantVectorStore()


@pytest.mark.asyncio
async def test_list_collections_returns_names_in_creation_order():
    store = _qdrant()
    await store.create_collection("documents_surus_8d", 8)
    await store.create_collection("notes", 4)

    assert await store.list_collections() == ["documents_surus_8d", "notes"]


@pytest.mark.asyncio
async def test_create_collection_uses_size_and_cosine_distance():
    client = AsyncQdrantClient(location=":memory:")
    store = QdrantVectorStore(client=client)

    await store.create_collection("documents_surus_8d", 8)

    vectors = (await client.get_collection("documents_surus_8d")).config.params.vectors
    assert vectors.size == 8
    assert vectors.distance == models.Distance.COSINE


@pytest.mark.asyncio
async def test_unknown_distance_is_rejected():
    with pytest.raises(VectorStoreError) as exc_info:
        await _qdrant().create_collection("documents_surus_8d", 8, distance="Hamming")

    assert exc_info.value.status_code == 400


@pytest.mark.asyncio
async def test_get_collection_reads_vector_size_and_count():
    store = _qdrant()
    await store.create_collection("documents_surus_2d", 2)
    await store.upsert("documents_surus_2d", [_point(1, [0.1, 0.2]), _point(2, [0.3, 0.1])])

    info = await store.get_collection("documents_surus_2d")

    assert info.name == "documents_surus_2d"
    assert info.dimension == 2
    assert info.points_count == 2


@pytest.mark.asyncio
async def test_get_missing_collection_returns_none():
    assert await _qdrant().get_collection("documents_surus_8d") is None


@pytest.mark.asyncio
async def test_search_ranks_by_cosine_and_returns_payload():
    store = _qdrant()
    await store.create_collection("documents_surus_2d", 2)
    await store.upsert("documents_surus_2d", [
        _point(1, [0.0, 1.0], "orthogonal"),
        _point(2, [1.0, 0.1], "close"),
        _point(3, [1.0, 1.0], "diagonal"),
    ])

    points = await store.search("documents_surus_2d", [1.0, 0.0], 2)

    assert [p.id for p in points] == [2, 3]
    assert points[0].score == pytest.approx(0.995, abs=1e-3)
    assert points[0].payload["text"] == "close"
    assert points[0].payload["source_format"] == "array"
    assert points[0].payload["original_index"] == 0


@pytest.mark.asyncio
async def test_search_applies_score_threshold_when_given():
    store = _qdrant()
    await store.create_collection("documents_surus_2d", 2)
    await store.upsert("documents_surus_2d", [
        _point(1, [0.0, 1.0], "orthogonal"),
        _point(2, [1.0, 0.1], "close"),
    ])

    points = await store.search("documents_surus_2d", [1.0, 0.0], 5, score_threshold=0.5)

    assert [p.payload["text"] for p in points] == ["close"]


@pytest.mark.asyncio
async def test_error_response_raises_vector_store_error():
    error = UnexpectedResponse(
        status_code=400,
        reason_phrase="Bad Request",
        content=b'{"status": {"error": "Wrong input: Vector dimension error"}}',
        headers=httpx.Headers(),
    )
    store = QdrantVectorStore(client=FailingQdrantClient(error))

    with pytest.raises(VectorStoreError) as exc_info:
        await store.search("documents_surus_2d", [0.1], 5)

    assert exc_info.value.status_code == 400
    assert exc_info.value.operation == "search"
    assert "dimension" in exc_info.value.message


@pytest.mark.asyncio
async def test_unreachable_server_raises_with_status_zero():
    error = ResponseHandlingException(httpx.ConnectError("connection refused"))
    store = QdrantVectorStore(client=FailingQdrantClient(error))

    with pytest.raises(VectorStoreError) as exc_info:
        await store.list_collections()

    assert exc_info.value.status_code == 0
    assert "refused" in exc_info.value.message


@pytest.mark.asyncio
async def test_delete_missing_collection_raises():
    store = QdrantVectorStore(client=MissingDeleteQdrantClient())

    with pytest.raises(VectorStoreError) as exc_info:
        await store.delete_collection("documents_surus_8d")

    assert exc_info.value.status_code == 404


# ── InMemoryVectorStore ──


def test_cosine_similarity():
    assert cosine_similarity([1.0, 0.0], [1.0, 0.0]) == pytest.approx(1.0)
    assert cosine_similarity([1.0, 0.0], [0.0, 1.0]) == pytest.approx(0.0)
    assert cosine_similarity([0.0, 0.0], [1.0, 0.0]) == 0.0


@pytest.mark.asyncio
async def test_in_memory_search_ranks_by_cosine_similarity():
    store = InMemoryVectorStore()
    await store.create_collection("documents_surus_2d", 2)
    await store.upsert("documents_surus_2d", [
        _point(1, [0.0, 1.0], "orthogonal"),
        _point(2, [1.0, 0.1], "close"),
        _point(3, [1.0, 1.0], "diagonal"),
    ])

    points = await store.search("documents_surus_2d", [1.0, 0.0], 2)

    assert [p.payload["text"] for p in points] == ["close", "diagonal"]


@pytest.mark.asyncio
async def test_in_memory_rejects_wrong_dimension():
    store = InMemoryVectorStore()
    await store.create_collection("documents_surus_2d", 2)

    with pytest.raises(VectorStoreError):
        await store.upsert("documents_surus_2d", [_point(1, [1.0, 0.0, 0.0])])
    with pytest.raises(VectorStoreError):
        await store.search("documents_surus_2d", [1.0], 5)


@pytest.mark.asyncio
async def test_in_memory_lifecycle():
    store = InMemoryVectorStore()
    await store.create_collection("documents_surus_2d", 2)

    with pytest.raises(VectorStoreError):
        await store.create_collection("documents_surus_2d", 2)

    await store.upsert("documents_surus_2d", [_point(1, [1.0, 0.0]), _point(1, [0.0, 1.0])])
    info = await store.get_collection("documents_surus_2d")
    assert info.points_count == 1

    await store.delete_collection("documents_surus_2d")
    assert await store.get_collection("documents_surus_2d") is None
    assert await store.list_collections() == []
