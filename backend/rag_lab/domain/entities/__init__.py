from .chunk import Chunk, SourceFormat
from .chat_message import CHAT_ROLES, ChatMessage, ChatCompletionResult, TokenUsage
from .vector_point import (
    COLLECTION_PREFIX,
    CollectionIdentity,
    CollectionInfo,
    PointPayload,
    ScoredPoint,
    SearchHit,
    StoredPoint,
)
from .pipeline_result import (
    IngestionResult,
    RetrievalResult,
    RetrievalStatus,
    StorageCostMetrics,
)

__all__ = [
    "Chunk",
    "SourceFormat",
    "CHAT_ROLES",
    "ChatMessage",
    "ChatCompletionResult",
    "TokenUsage",
    "COLLECTION_PREFIX",
    "CollectionIdentity",
    "CollectionInfo",
    "PointPayload",
    "ScoredPoint",
    "SearchHit",
    "StoredPoint",
    "IngestionResult",
    "RetrievalResult",
    "RetrievalStatus",
    "StorageCostMetrics",
]
