from .chat_provider import ChatProvider
from .embedding_provider import (
    ConfigurableDimensionEmbeddingProvider,
    DimensionMode,
    EmbeddingProvider,
    FixedDimensionEmbeddingProvider,
)
from .vector_store import VectorStore

__all__ = [
    "ChatProvider",
    "ConfigurableDimensionEmbeddingProvider",
    "DimensionMode",
    "EmbeddingProvider",
    "FixedDimensionEmbeddingProvider",
    "VectorStore",
]
