"""Retrieval service — fan a query out across every routed collection and merge.

Flow:
  1. Enumerate collections following the ``documents_{provider}_{dimension}d``
     scheme. None at all → ``NO_COLLECTIONS`` without embedding anything.
  2. For each collection, embed the query with that collection's provider
     and dimension (one embedding per distinct pair) and fetch its top
     ``max_chunks`` hits without a score threshold.
  3. Pool hits in enumeration order, stable-sort by descending score,
     keep hits scoring strictly above the threshold, truncate to
     ``max_chunks``. Nothing left → ``NO_RELEVANT_HITS``.

A collection whose provider is unknown, whose query embedding fails, or
whose search fails is logged and skipped; the other collections still
count. Response-contract violations from a provider are not skipped.
"""

import asyncio
import logging

from rag_lab.application.interfaces.embedding_provider import EmbeddingProvider
from rag_lab.application.interfaces.vector_store import VectorStore
from rag_lab.application.services.collection_router import CollectionRouter
from rag_lab.application.services.embedding_gateway import EmbeddingGateway
from rag_lab.application.services.provider_registry import EmbeddingProviderRegistry
from rag_lab.domain.entities import (
    CollectionIdentity,
    RetrievalResult,
    RetrievalStatus,
    SearchHit,
)
from rag_lab.domain.exceptions import (
    DocumentValidationError,
    ProviderError,
    ProviderResponseError,
    VectorStoreError,
)
from rag_lab.infrastructure.logging.colored_logger import PipelineLogger, PipelineStage

logger = logging.getLogger(__name__)
plog = PipelineLogger("RetrievalService")

DEFAULT_MAX_PARALLEL_SEARCHES = 4

_EmbeddingKey = tuple[str, int]


class RetrievalService:
    """Application service for multi-collection similarity search."""

    def __init__(
        self,
        vector_store: VectorStore,
        router: CollectionRouter,
        gateway: EmbeddingGateway,
        providers: EmbeddingProviderRegistry,
        *,
        max_parallel_searches: int = DEFAULT_MAX_PARALLEL_SEARCHES,
    ):
        self._store = vector_store
        self._router = router
        self._gateway = gateway
        self._providers = providers
        self._max_parallel = max(1, max_parallel_searches)

    async def retrieve(
        self,
        query: str,
        similarity_threshold: float,
        max_chunks: int,
    ) -> RetrievalResult:
        """Return ranked, threshold-filtered hits from all collections."""
        identities = await self._router.list_identities()
        if not identities:
            logger.info("No document collections found; skipping query embedding")
            return RetrievalResult(status=RetrievalStatus.NO_COLLECTIONS)

        collection_names = [identity.name for identity in identities]
        plog.step_start(
            PipelineStage.SEARCH,
            f"Searching {len(identities)} collections",
            threshold=similarity_threshold,
            max_chunks=max_chunks,
        )

        semaphore = asyncio.Semaphore(self._max_parallel)
        embeddings: dict[_EmbeddingKey, asyncio.Future[list[float]]] = {}

        try:
            async with asyncio.TaskGroup() as group:
                searches = [
                    group.create_task(
                        self._search_collection(
                            identity, query, max_chunks, semaphore, embeddings
                        )
                    )
                    for identity in identities
                ]
        except ExceptionGroup as failure:
            # Siblings are already cancelled; surface the first error itself
            raise failure.exceptions[0] from None
        finally:
            for task in embeddings.values():
                if not task.done():
                    task.cancel()

        pooled = [hit for search in searches for hit in search.result()]
        ranked = merge_hits(pooled, similarity_threshold, max_chunks)

        plog.step_complete(
            PipelineStage.MERGE,
            f"{len(ranked)} of {len(pooled)} hits kept",
            collections=len(identities),
        )

        if not ranked:
            return RetrievalResult(
                status=RetrievalStatus.NO_RELEVANT_HITS,
                collections_searched=collection_names,
            )
        return RetrievalResult(
            status=RetrievalStatus.FOUND,
            hits=ranked,
            collections_searched=collection_names,
        )

    async def _search_collection(
        self,
        identity: CollectionIdentity,
        query: str,
        limit: int,
        semaphore: asyncio.Semaphore,
        embeddings: dict[_EmbeddingKey, "asyncio.Future[list[float]]"],
    ) -> list[SearchHit]:
        provider = self._providers.get(identity.provider)
        if provider is None:
            logger.warning(
                "Skipping %s: no embedding provider named '%s' is configured",
                identity.name,
                identity.provider,
            )
            return []

        async with semaphore:
            try:
                vector = await self._query_embedding(provider, identity, query, embeddings)
                points = await self._store.search(identity.name, vector, limit)
            except ProviderResponseError:
                raise
            except (DocumentValidationError, ProviderError, VectorStoreError) as exc:
                plog.step_error(PipelineStage.SEARCH, f"Search in {identity.name} failed", error=exc)
                return []

        logger.debug("%s returned %d hits", identity.name, len(points))
        return [
            SearchHit(point=point, score=point.score, collection=identity)
            for point in points
        ]

    def _query_embedding(
        self,
        provider: EmbeddingProvider,
        identity: CollectionIdentity,
        query: str,
        embeddings: dict[_EmbeddingKey, "asyncio.Future[list[float]]"],
    ) -> "asyncio.Future[list[float]]":
        """Share one embedding task per (provider, resolved dimension)."""
        dimension = provider.resolve_dimension(identity.dimension)
        key = (provider.provider_name, dimension)
        if key not in embeddings:
            embeddings[key] = asyncio.ensure_future(
                self._gateway.embed_one(query, dimension, provider)
            )
        return embeddings[key]


def merge_hits(
    hits: list[SearchHit],
    similarity_threshold: float,
    max_chunks: int,
) -> list[SearchHit]:
    """Sort by score (stable on merge order), keep scores above the threshold, truncate."""
    ranked = sorted(hits, key=lambda hit: hit.score, reverse=True)
    relevant = [hit for hit in ranked if hit.score > similarity_threshold]
    return relevant[: max(0, max_chunks)]
