"""Ingestion service — chunk, embed, route, and persist submitted content.

This is an application service that coordinates:
1. Resolving the effective dimension from the provider variant
2. Chunking the content with a provider-dependent token budget
3. Ensuring the routed collection exists with the right vector size
4. Generating embeddings via the EmbeddingGateway
5. Upserting one point per chunk and computing storage cost metrics
"""

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import datetime, timezone

from rag_lab.application.interfaces.embedding_provider import DimensionMode
from rag_lab.application.interfaces.vector_store import VectorStore
from rag_lab.application.services.collection_router import CollectionRouter
from rag_lab.application.services.embedding_gateway import EmbeddingGateway
from rag_lab.application.services.point_ids import MonotonicPointIdGenerator
from rag_lab.application.services.provider_registry import EmbeddingProviderRegistry
from rag_lab.application.services.storage_costs import (
    DEFAULT_BASELINE_DIMENSION,
    DEFAULT_COST_PER_MB_PER_MONTH,
    calculate_storage_costs,
)
from rag_lab.application.services.text_chunker import ChunkableContent, TextChunker
from rag_lab.domain.entities import (
    Chunk,
    CollectionIdentity,
    IngestionResult,
    PointPayload,
    StoredPoint,
)
from rag_lab.domain.exceptions import DocumentValidationError, VectorStoreError
from rag_lab.domain.tokens import estimate_tokens
from rag_lab.infrastructure.logging.colored_logger import PipelineLogger, PipelineStage

logger = logging.getLogger(__name__)
plog = PipelineLogger("IngestionService")


@dataclass(frozen=True)
class ChunkingPolicy:
    """Per-chunk token budgets by provider variant.

    Configurable-dimension models have the stricter context window, so they
    get the smaller budget.
    """

    configurable_max_tokens: int = 256
    fixed_max_tokens: int = 512
    overlap_tokens: int = 32

    def budget_for(self, mode: DimensionMode) -> int:
        if mode is DimensionMode.CONFIGURABLE:
            return self.configurable_max_tokens
        return self.fixed_max_tokens


class IngestionService:
    """Application service for turning raw content into stored vectors."""

    def __init__(
        self,
        vector_store: VectorStore,
        router: CollectionRouter,
        gateway: EmbeddingGateway,
        providers: EmbeddingProviderRegistry,
        *,
        chunker: TextChunker | None = None,
        chunking_policy: ChunkingPolicy | None = None,
        id_generator: MonotonicPointIdGenerator | None = None,
        baseline_dimension: int = DEFAULT_BASELINE_DIMENSION,
        cost_per_mb_per_month: float = DEFAULT_COST_PER_MB_PER_MONTH,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self._store = vector_store
        self._router = router
        self._gateway = gateway
        self._providers = providers
        self._chunker = chunker or TextChunker()
        self._policy = chunking_policy or ChunkingPolicy()
        self._ids = id_generator or MonotonicPointIdGenerator()
        self._baseline_dimension = baseline_dimension
        self._cost_per_mb = cost_per_mb_per_month
        self._clock = clock

    async def ingest(
        self,
        content: ChunkableContent,
        provider_name: str,
        dimension: int | None = None,
    ) -> IngestionResult:
        """Ingest *content* into the collection routed for (provider, dimension).

        Raises:
            DocumentValidationError: Empty content, unknown provider, bad
                dimension, or content that produces no chunks. Raised before
                any store call.
            ProviderError: If embedding fails after retries.
            VectorStoreError: If collection setup or the upsert fails.
        """
        if _is_empty(content):
            raise DocumentValidationError("Content is required")

        provider = self._providers.require(provider_name)
        effective_dimension = provider.resolve_dimension(dimension)
        max_tokens = self._policy.budget_for(provider.dimension_mode)

        plog.step_start(
            PipelineStage.PIPELINE,
            "Ingesting content",
            provider=provider.provider_name,
            dimension=effective_dimension,
        )

        chunks = self._chunker.chunk(content, max_tokens, self._policy.overlap_tokens)
        if not chunks:
            raise DocumentValidationError(
                "Text could not be chunked. Please provide longer text or text with punctuation.",
                suggestion="Try adding a period at the end of your text or provide more content.",
            )
        plog.step_complete(
            PipelineStage.CHUNK,
            f"{len(chunks)} chunks",
            max_tokens=max_tokens,
            overlap=self._policy.overlap_tokens,
        )

        with plog.timed_step(PipelineStage.ROUTE, "Ensuring collection"):
            identity = await self._router.ensure_collection(
                provider.provider_name, effective_dimension
            )

        with plog.timed_step(PipelineStage.EMBED, f"Embedding {len(chunks)} chunks"):
            vectors = await self._gateway.embed_batch(
                [chunk.text for chunk in chunks], effective_dimension, provider
            )

        points = self._build_points(chunks, vectors, identity)

        with plog.timed_step(PipelineStage.UPSERT, f"Upserting {len(points)} points into {identity.name}"):
            await self._store.upsert(identity.name, points, wait=True)

        vector_count = await self._count_points(identity, fallback=len(chunks))
        cost_metrics = calculate_storage_costs(
            vector_count,
            effective_dimension,
            baseline_dimension=self._baseline_dimension,
            cost_per_mb_per_month=self._cost_per_mb,
        )
        plog.detail(
            "Storage estimate",
            vectors=vector_count,
            storage_mb=f"{cost_metrics.storage_mb:.4f}",
            monthly_cost=f"${cost_metrics.monthly_cost:.6f}",
            savings=(
                f"{cost_metrics.savings_percent:.1f}%"
                if cost_metrics.savings_percent is not None
                else "n/a"
            ),
        )

        plog.step_complete(
            PipelineStage.COMPLETE,
            f"Ingested {len(chunks)} chunks into {identity.name}",
            total_vectors=vector_count,
        )
        return IngestionResult(
            chunk_count=len(chunks),
            dimension=effective_dimension,
            provider=provider.provider_name,
            collection=identity,
            cost_metrics=cost_metrics,
        )

    def _build_points(
        self,
        chunks: list[Chunk],
        vectors: list[list[float]],
        identity: CollectionIdentity,
    ) -> list[StoredPoint]:
        """One point per chunk; ids are reserved as a contiguous, never-reused range."""
        timestamp = self._clock().isoformat()
        ids = self._ids.reserve(len(chunks))
        return [
            StoredPoint(
                id=point_id,
                vector=vector,
                payload=PointPayload(
                    text=chunk.text,
                    timestamp=timestamp,
                    dimension=identity.dimension,
                    provider=identity.provider,
                    estimated_tokens=estimate_tokens(chunk.text),
                    source_format=chunk.source_format,
                    source_key=chunk.source_key,
                    original_index=chunk.original_index,
                ),
            )
            for point_id, chunk, vector in zip(ids, chunks, vectors, strict=True)
        ]

    async def _count_points(self, identity: CollectionIdentity, *, fallback: int) -> int:
        """Point count reported by the store, or *fallback* if it cannot report one."""
        try:
            info = await self._router.describe(identity)
        except VectorStoreError as exc:
            logger.warning("Could not read point count for %s: %s", identity.name, exc)
            return fallback
        if info is None or info.points_count is None:
            return fallback
        return info.points_count


def _is_empty(content: ChunkableContent | None) -> bool:
    if content is None:
        return True
    if isinstance(content, str):
        return not content.strip()
    if isinstance(content, Mapping):
        return not content
    return len(content) == 0
