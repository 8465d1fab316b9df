from .documents import (
    ClearResponse,
    CollectionResponse,
    IngestRequest,
    IngestResponse,
    StorageCostResponse,
)
from .query import (
    ChatRequest,
    ConversationMessage,
    QueryRequest,
    RagAnswerResponse,
    SourceHit,
    TokenUsageResponse,
)

__all__ = [
    "ClearResponse",
    "CollectionResponse",
    "IngestRequest",
    "IngestResponse",
    "StorageCostResponse",
    "ChatRequest",
    "ConversationMessage",
    "QueryRequest",
    "RagAnswerResponse",
    "SourceHit",
    "TokenUsageResponse",
]
