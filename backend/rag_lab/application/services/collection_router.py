"""Collection router — the single owner of collection lifecycle operations.

Maps ``(provider, dimension)`` to a collection and keeps the stored vector
size in line with the identity. A size mismatch destroys and recreates the
collection: vectors written at the old size are discarded.
"""

import logging

from rag_lab.application.interfaces.vector_store import VectorStore
from rag_lab.domain.entities import COLLECTION_PREFIX, CollectionIdentity, CollectionInfo
from rag_lab.domain.exceptions import VectorStoreError
from rag_lab.infrastructure.logging.colored_logger import PipelineLogger, PipelineStage

logger = logging.getLogger(__name__)
plog = PipelineLogger("CollectionRouter")

COSINE = "Cosine"


class CollectionRouter:
    """Application service for collection routing, creation, and cleanup."""

    def __init__(self, vector_store: VectorStore):
        self._store = vector_store

    @staticmethod
    def identity_for(provider: str, dimension: int) -> CollectionIdentity:
        return CollectionIdentity(provider=provider, dimension=dimension)

    async def ensure_collection(self, provider: str, dimension: int) -> CollectionIdentity:
        """Make sure the routed collection exists with vector size ``dimension``.

        Store failures propagate; no local recovery is attempted.
        """
        identity = self.identity_for(provider, dimension)
        existing = await self._store.get_collection(identity.name)

        if existing is None:
            logger.info("Creating collection %s (%dd, cosine)", identity.name, dimension)
            await self._store.create_collection(identity.name, dimension, COSINE)
            return identity

        if existing.dimension != dimension:
            logger.warning(
                "Collection %s has dimension %s but %d is required — deleting and "
                "recreating (existing vectors are discarded)",
                identity.name,
                existing.dimension,
                dimension,
            )
            await self._store.delete_collection(identity.name)
            await self._store.create_collection(identity.name, dimension, COSINE)
            return identity

        logger.debug("Collection %s already matches (%dd)", identity.name, dimension)
        return identity

    async def list_identities(self) -> list[CollectionIdentity]:
        """Return identities of all routed collections, in store enumeration order.

        Names that carry the prefix but fail to parse are logged and skipped.
        """
        identities: list[CollectionIdentity] = []
        for name in await self._store.list_collections():
            if not name.startswith(COLLECTION_PREFIX):
                continue
            identity = CollectionIdentity.parse(name)
            if identity is None:
                logger.warning("Skipping collection with unparseable name: %s", name)
                continue
            identities.append(identity)
        return identities

    async def describe(self, identity: CollectionIdentity) -> CollectionInfo | None:
        return await self._store.get_collection(identity.name)

    async def clear_all(self) -> list[str]:
        """Delete every document collection; returns the names actually deleted."""
        names = [
            name
            for name in await self._store.list_collections()
            if name.startswith(COLLECTION_PREFIX)
        ]
        plog.step_start(PipelineStage.CLEAR, f"Clearing {len(names)} document collections")

        deleted: list[str] = []
        for name in names:
            try:
                await self._store.delete_collection(name)
            except VectorStoreError as exc:
                plog.step_error(PipelineStage.CLEAR, f"Failed to delete {name}", error=exc)
                continue
            deleted.append(name)

        plog.step_complete(PipelineStage.CLEAR, f"Deleted {len(deleted)} of {len(names)} collections")
        return deleted
