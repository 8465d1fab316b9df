from .collection_router import CollectionRouter
from .embedding_gateway import EmbeddingGateway
from .ingestion_service import ChunkingPolicy, IngestionService
from .point_ids import MonotonicPointIdGenerator
from .prompt_builder import build_prompt, trim_memory
from .provider_registry import EmbeddingProviderRegistry
from .rag_chat_service import RagAnswer, RagChatService
from .retrieval_service import RetrievalService, merge_hits
from .storage_costs import calculate_storage_costs
from .text_chunker import TextChunker

__all__ = [
    "CollectionRouter",
    "EmbeddingGateway",
    "ChunkingPolicy",
    "IngestionService",
    "MonotonicPointIdGenerator",
    "build_prompt",
    "trim_memory",
    "EmbeddingProviderRegistry",
    "RagAnswer",
    "RagChatService",
    "RetrievalService",
    "merge_hits",
    "calculate_storage_costs",
    "TextChunker",
]
