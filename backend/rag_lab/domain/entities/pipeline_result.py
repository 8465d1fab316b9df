"""Domain entities for ingestion and retrieval outcomes."""

from dataclasses import dataclass, field
from enum import Enum

from .vector_point import CollectionIdentity, SearchHit


@dataclass(frozen=True)
class StorageCostMetrics:
    """Estimated storage footprint and monthly cost of a collection.

    ``savings_percent`` is relative to the baseline dimension and is only
    reported when the collection dimension differs from that baseline.
    """

    total_vectors: int
    dimension: int
    vector_bytes: int
    storage_mb: float
    monthly_cost: float
    baseline_dimension: int
    baseline_monthly_cost: float
    savings_percent: float | None = None


@dataclass
class IngestionResult:
    """Outcome of a successful ingestion call."""

    chunk_count: int
    dimension: int
    provider: str
    collection: CollectionIdentity
    cost_metrics: StorageCostMetrics


class RetrievalStatus(str, Enum):
    """Distinguishes a populated result from the two empty-result conditions."""

    FOUND = "found"
    NO_COLLECTIONS = "no_collections"
    NO_RELEVANT_HITS = "no_relevant_hits"


@dataclass
class RetrievalResult:
    """Ranked, threshold-filtered, size-bounded hits across all collections."""

    status: RetrievalStatus
    hits: list[SearchHit] = field(default_factory=list)
    collections_searched: list[str] = field(default_factory=list)

    @property
    def context(self) -> str:
        """Hit texts joined into a single context block, best first."""
        return "\n\n".join(hit.text for hit in self.hits if hit.text)
