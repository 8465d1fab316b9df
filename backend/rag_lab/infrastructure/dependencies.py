"""FastAPI dependency injection — wires infrastructure to application layer."""

from functools import lru_cache

from fastapi import Depends

from rag_lab.application.interfaces.chat_provider import ChatProvider
from rag_lab.application.interfaces.vector_store import VectorStore
from rag_lab.application.services import (
    ChunkingPolicy,
    CollectionRouter,
    EmbeddingGateway,
    EmbeddingProviderRegistry,
    IngestionService,
    MonotonicPointIdGenerator,
    RagChatService,
    RetrievalService,
)
from rag_lab.config import Settings, get_settings
from rag_lab.infrastructure.embeddings import OpenAIEmbeddingProvider, SurusEmbeddingProvider
from rag_lab.infrastructure.llm import ChatCompletionsClient
from rag_lab.infrastructure.vector_store import InMemoryVectorStore, QdrantVectorStore


@lru_cache
def _in_memory_store() -> InMemoryVectorStore:
    """One process-wide store so data survives between requests."""
    return InMemoryVectorStore()


@lru_cache
def _qdrant_store(url: str, api_key: str | None) -> QdrantVectorStore:
    """One client (and connection pool) per Qdrant endpoint."""
    return QdrantVectorStore(url=url, api_key=api_key)


@lru_cache
def _point_id_generator() -> MonotonicPointIdGenerator:
    return MonotonicPointIdGenerator()


def get_vector_store(settings: Settings = Depends(get_settings)) -> VectorStore:
    """Provides the configured vector store backend."""
    if settings.vector_store_backend == "memory":
        return _in_memory_store()
    return _qdrant_store(settings.qdrant_url, settings.qdrant_api_key or None)


def get_embedding_providers(
    settings: Settings = Depends(get_settings),
) -> EmbeddingProviderRegistry:
    """Provides the registry of every embedding provider the service can route to."""
    return EmbeddingProviderRegistry([
        SurusEmbeddingProvider(
            api_key=settings.surus_api_key,
            base_url=settings.surus_base_url,
            model=settings.surus_embedding_model,
            default_dimension=settings.surus_default_dimension,
            max_dimension=settings.surus_max_dimension,
        ),
        OpenAIEmbeddingProvider(
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url,
            model=settings.openai_embedding_model,
            native_dimension=settings.openai_native_dimension,
        ),
    ])


def get_embedding_gateway(settings: Settings = Depends(get_settings)) -> EmbeddingGateway:
    return EmbeddingGateway(
        batch_size=settings.embedding_batch_size,
        max_workers=settings.embedding_max_workers,
        max_retries=settings.embedding_max_retries,
        retry_base_delay=settings.embedding_retry_base_delay,
    )


def get_collection_router(
    vector_store: VectorStore = Depends(get_vector_store),
) -> CollectionRouter:
    return CollectionRouter(vector_store)


def get_ingestion_service(
    settings: Settings = Depends(get_settings),
    vector_store: VectorStore = Depends(get_vector_store),
    router: CollectionRouter = Depends(get_collection_router),
    gateway: EmbeddingGateway = Depends(get_embedding_gateway),
    providers: EmbeddingProviderRegistry = Depends(get_embedding_providers),
) -> IngestionService:
    """Provides an IngestionService with chunking policy and cost model from settings."""
    return IngestionService(
        vector_store,
        router,
        gateway,
        providers,
        chunking_policy=ChunkingPolicy(
            configurable_max_tokens=settings.chunk_tokens_configurable,
            fixed_max_tokens=settings.chunk_tokens_fixed,
            overlap_tokens=settings.chunk_overlap_tokens,
        ),
        id_generator=_point_id_generator(),
        baseline_dimension=settings.baseline_dimension,
        cost_per_mb_per_month=settings.storage_cost_per_mb_month,
    )


def get_retrieval_service(
    settings: Settings = Depends(get_settings),
    vector_store: VectorStore = Depends(get_vector_store),
    router: CollectionRouter = Depends(get_collection_router),
    gateway: EmbeddingGateway = Depends(get_embedding_gateway),
    providers: EmbeddingProviderRegistry = Depends(get_embedding_providers),
) -> RetrievalService:
    return RetrievalService(
        vector_store,
        router,
        gateway,
        providers,
        max_parallel_searches=settings.max_parallel_searches,
    )


def get_chat_provider(settings: Settings = Depends(get_settings)) -> ChatProvider:
    return ChatCompletionsClient(
        api_key=settings.generation_api_key,
        base_url=settings.generation_base_url,
    )


def get_rag_chat_service(
    settings: Settings = Depends(get_settings),
    retrieval: RetrievalService = Depends(get_retrieval_service),
    chat_provider: ChatProvider = Depends(get_chat_provider),
) -> RagChatService:
    """Provides a RagChatService generating with the configured model."""
    return RagChatService(
        retrieval,
        chat_provider,
        model=settings.generation_model,
        max_output_tokens=settings.generation_max_tokens,
        max_memory_tokens=settings.max_memory_tokens,
    )
