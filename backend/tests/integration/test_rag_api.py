"""End-to-end API tests: ingest, list, query, chat and clear over fakes."""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from rag_lab.application.interfaces.chat_provider import ChatProvider
from rag_lab.application.interfaces.embedding_provider import (
    ConfigurableDimensionEmbeddingProvider,
    FixedDimensionEmbeddingProvider,
)
from rag_lab.application.services import EmbeddingGateway, EmbeddingProviderRegistry
from rag_lab.config import Settings, get_settings
from rag_lab.domain.entities import ChatCompletionResult, ChatMessage, TokenUsage
from rag_lab.domain.exceptions import ProviderError
from rag_lab.infrastructure.dependencies import (
    get_chat_provider,
    get_embedding_gateway,
    get_embedding_providers,
    get_vector_store,
)
from rag_lab.infrastructure.vector_store import InMemoryVectorStore
from rag_lab.main import app

PLAYWRIGHT_TEXT = "Playwright is a tool. It automates browsers. It supports multiple languages."


# ── Fakes ──


class UniformSurusProvider(ConfigurableDimensionEmbeddingProvider):
    """Every text maps to the same direction, so every stored chunk scores 1.0."""

    def __init__(self, *, fail_with: int | None = None):
        self._fail_with = fail_with

    @property
    def provider_name(self) -> str:
        return "surus"

    @property
    def default_dimension(self) -> int:
        return 8

    @property
    def max_dimension(self) -> int:
        return 64

    async def embed(self, texts: list[str], dimension: int) -> list[list[float]]:
        if self._fail_with is not None:
            raise ProviderError("surus", self._fail_with, "upstream failure")
        return [[1.0] * dimension for _ in texts]


class UniformOpenAIProvider(FixedDimensionEmbeddingProvider):
    @property
    def provider_name(self) -> str:
        return "openai"

    @property
    def native_dimension(self) -> int:
        return 16

    async def embed(self, texts: list[str], dimension: int) -> list[list[float]]:
        return [[1.0] * 16 for _ in texts]


class EchoChatProvider(ChatProvider):
    """Answers with the number of messages it was given."""

    def __init__(self):
        self.calls = 0

    @property
    def provider_name(self) -> str:
        return "echo"

    async def complete(
        self,
        messages: list[ChatMessage],
        model: str,
        *,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> ChatCompletionResult:
        self.calls += 1
        return ChatCompletionResult(
            model=model,
            content=f"answered from {len(messages)} messages",
            finish_reason="stop",
            usage=TokenUsage(prompt_tokens=30, completion_tokens=5, total_tokens=35),
            provider="echo",
        )


@pytest_asyncio.fixture
async def api():
    """Client with the store, providers and LLM replaced by in-process fakes."""
    store = InMemoryVectorStore()
    chat_provider = EchoChatProvider()
    surus = UniformSurusProvider()

    app.dependency_overrides[get_vector_store] = lambda: store
    app.dependency_overrides[get_embedding_providers] = lambda: EmbeddingProviderRegistry(
        [surus, UniformOpenAIProvider()]
    )
    app.dependency_overrides[get_embedding_gateway] = lambda: EmbeddingGateway(retry_base_delay=0)
    app.dependency_overrides[get_chat_provider] = lambda: chat_provider

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        client.store = store  # type: ignore[attr-defined]
        client.chat_provider = chat_provider  # type: ignore[attr-defined]
        yield client

    app.dependency_overrides.clear()


# ── Documents ──


@pytest.mark.asyncio
async def test_ingest_text_returns_collection_and_costs(api):
    response = await api.post("/api/v1/documents", json={"content": PLAYWRIGHT_TEXT})

    assert response.status_code == 201
    data = response.json()
    assert data["chunk_count"] == 1
    assert data["provider"] == "surus"
    assert data["dimension"] == 8
    assert data["collection"] == "documents_surus_8d"
    assert data["cost_metrics"]["total_vectors"] == 1
    assert data["cost_metrics"]["vector_bytes"] == 32
    assert data["cost_metrics"]["savings_percent"] > 0


@pytest.mark.asyncio
async def test_ingest_structured_content_with_fixed_provider(api):
    response = await api.post(
        "/api/v1/documents",
        json={
            "content": {"install": "Run pip install.", "usage": "Import the package."},
            "provider": "openai",
            "dimension": 4,
        },
    )

    assert response.status_code == 201
    data = response.json()
    assert data["chunk_count"] == 2
    assert data["dimension"] == 16
    assert data["collection"] == "documents_openai_16d"


@pytest.mark.asyncio
async def test_empty_content_is_a_bad_request(api):
    response = await api.post("/api/v1/documents", json={"content": ""})

    assert response.status_code == 400
    assert response.json()["detail"]["error"] == "Content is required"
    assert await api.store.list_collections() == []


@pytest.mark.asyncio
async def test_unknown_provider_is_a_bad_request_with_suggestion(api):
    response = await api.post(
        "/api/v1/documents", json={"content": "Some text.", "provider": "cohere"}
    )

    assert response.status_code == 400
    assert "suggestion" in response.json()["detail"]


@pytest.mark.asyncio
async def test_provider_failure_is_reported(api):
    app.dependency_overrides[get_embedding_providers] = lambda: EmbeddingProviderRegistry(
        [UniformSurusProvider(fail_with=503)]
    )

    response = await api.post("/api/v1/documents", json={"content": "Some text."})

    assert response.status_code == 503
    assert "surus" in response.json()["detail"]


@pytest.mark.asyncio
async def test_list_and_clear_collections(api):
    await api.post("/api/v1/documents", json={"content": "Some text.", "dimension": 8})
    await api.post("/api/v1/documents", json={"content": "Other text.", "dimension": 32})

    listed = await api.get("/api/v1/documents/collections")
    assert listed.status_code == 200
    assert [(c["name"], c["points_count"]) for c in listed.json()] == [
        ("documents_surus_8d", 1),
        ("documents_surus_32d", 1),
    ]

    cleared = await api.delete("/api/v1/documents")
    assert cleared.status_code == 200
    assert cleared.json()["deleted_count"] == 2

    listed = await api.get("/api/v1/documents/collections")
    assert listed.json() == []


# ── Query & chat ──


@pytest.mark.asyncio
async def test_query_without_documents_reports_no_collections(api):
    response = await api.post("/api/v1/query", json={"question": "What is Playwright?"})

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "no_collections"
    assert data["sources"] == []
    assert api.chat_provider.calls == 0


@pytest.mark.asyncio
async def test_query_answers_from_ingested_documents(api):
    await api.post("/api/v1/documents", json={"content": PLAYWRIGHT_TEXT})

    response = await api.post("/api/v1/query", json={"question": "What is Playwright?"})

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "found"
    assert data["answer"] == "answered from 2 messages"
    assert data["sources"][0]["text"] == PLAYWRIGHT_TEXT
    assert data["sources"][0]["collection"] == "documents_surus_8d"
    assert data["sources"][0]["score"] == pytest.approx(1.0)
    assert data["usage"]["total_tokens"] == 35


@pytest.mark.asyncio
async def test_query_above_every_score_reports_no_relevant_hits(api):
    await api.post("/api/v1/documents", json={"content": PLAYWRIGHT_TEXT})

    response = await api.post(
        "/api/v1/query", json={"question": "Anything?", "similarity_threshold": 1.0}
    )

    assert response.json()["status"] == "no_relevant_hits"
    assert api.chat_provider.calls == 0


@pytest.mark.asyncio
async def test_omitted_retrieval_knobs_fall_back_to_settings(api):
    app.dependency_overrides[get_settings] = lambda: Settings(
        similarity_threshold=1.0, max_chunks=1
    )
    await api.post("/api/v1/documents", json={"content": PLAYWRIGHT_TEXT})

    response = await api.post("/api/v1/query", json={"question": "Anything?"})

    assert response.json()["status"] == "no_relevant_hits"


@pytest.mark.asyncio
async def test_configured_max_chunks_bounds_sources(api):
    app.dependency_overrides[get_settings] = lambda: Settings(max_chunks=1)
    await api.post(
        "/api/v1/documents",
        json={"content": ["First stored passage here.", "Second stored passage here."]},
    )

    response = await api.post("/api/v1/query", json={"question": "Which passage?"})

    assert response.json()["status"] == "found"
    assert len(response.json()["sources"]) == 1


@pytest.mark.asyncio
async def test_chat_includes_conversation_memory(api):
    await api.post("/api/v1/documents", json={"content": PLAYWRIGHT_TEXT})

    response = await api.post(
        "/api/v1/chat",
        json={
            "message": "Which languages?",
            "conversation": [
                {"role": "user", "content": "What is Playwright?"},
                {"role": "assistant", "content": "A browser automation tool."},
            ],
        },
    )

    assert response.status_code == 200
    # system + 2 memory turns + context + user
    assert response.json()["answer"] == "answered from 5 messages"


@pytest.mark.asyncio
async def test_chat_rejects_empty_message(api):
    response = await api.post("/api/v1/chat", json={"message": ""})
    assert response.status_code == 422
