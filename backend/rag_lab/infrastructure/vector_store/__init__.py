from .in_memory_vector_store import InMemoryVectorStore, cosine_similarity
from .qdrant_vector_store import QdrantVectorStore

__all__ = ["InMemoryVectorStore", "QdrantVectorStore", "cosine_similarity"]
