"""Abstract interface (port) for the external vector store."""

from abc import ABC, abstractmethod

from rag_lab.domain.entities import CollectionInfo, ScoredPoint, StoredPoint


class VectorStore(ABC):
    """Port for collection lifecycle, point writes, and similarity search.

    All methods raise ``VectorStoreError`` on backend failures.
    """

    @abstractmethod
    async def list_collections(self) -> list[str]:
        """Return the names of all collections, in the store's enumeration order."""
        ...

    @abstractmethod
    async def get_collection(self, name: str) -> CollectionInfo | None:
        """Return collection info, or None if the collection does not exist."""
        ...

    @abstractmethod
    async def create_collection(
        self, name: str, dimension: int, distance: str = "Cosine"
    ) -> None:
        ...

    @abstractmethod
    async def delete_collection(self, name: str) -> None:
        ...

    @abstractmethod
    async def upsert(
        self, name: str, points: list[StoredPoint], *, wait: bool = True
    ) -> None:
        """Write points; with ``wait=True`` return only once the store acknowledges them."""
        ...

    @abstractmethod
    async def search(
        self,
        name: str,
        vector: list[float],
        limit: int,
        *,
        score_threshold: float | None = None,
    ) -> list[ScoredPoint]:
        """Return the nearest points by similarity, best first."""
        ...
