"""Domain entities for vector collections, stored points, and search hits."""

import re
from dataclasses import dataclass, field
from typing import Any

from .chunk import SourceFormat

COLLECTION_PREFIX = "documents_"
_COLLECTION_NAME_RE = re.compile(r"documents_(\w+)_(\d+)d")


@dataclass(frozen=True)
class CollectionIdentity:
    """Routing key for a backing collection, derived from (provider, dimension).

    The rendered name ``documents_{provider}_{dimension}d`` is shared by the
    ingestion and retrieval pipelines and must stay stable.
    """

    provider: str
    dimension: int

    @property
    def name(self) -> str:
        return f"{COLLECTION_PREFIX}{self.provider}_{self.dimension}d"

    @classmethod
    def parse(cls, name: str) -> "CollectionIdentity | None":
        """Parse a collection name back into an identity, or None if it does not match."""
        match = _COLLECTION_NAME_RE.fullmatch(name)
        if not match:
            return None
        provider, dimension = match.groups()
        return cls(provider=provider, dimension=int(dimension))

    def __str__(self) -> str:
        return self.name


@dataclass
class CollectionInfo:
    """Configuration and size reported by the vector store for one collection."""

    name: str
    dimension: int | None
    points_count: int | None = None


@dataclass(frozen=True)
class PointPayload:
    """Payload persisted next to each vector."""

    text: str
    timestamp: str  # ISO-8601, UTC
    dimension: int
    provider: str
    estimated_tokens: int
    source_format: SourceFormat | None = None
    source_key: str | None = None
    original_index: int | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "text": self.text,
            "timestamp": self.timestamp,
            "dimension": self.dimension,
            "provider": self.provider,
            "estimated_tokens": self.estimated_tokens,
        }
        if self.source_format is not None:
            data["source_format"] = self.source_format.value
        if self.source_key is not None:
            data["source_key"] = self.source_key
        if self.original_index is not None:
            data["original_index"] = self.original_index
        return data


@dataclass(frozen=True)
class StoredPoint:
    """A vector plus payload, as written to the store. Never mutated after creation."""

    id: int
    vector: list[float]
    payload: PointPayload


@dataclass
class ScoredPoint:
    """A raw search result returned by the vector store."""

    id: int | str
    score: float
    payload: dict[str, Any] = field(default_factory=dict)


@dataclass
class SearchHit:
    """A search result tagged with the collection it came from."""

    point: ScoredPoint
    score: float
    collection: CollectionIdentity

    @property
    def text(self) -> str:
        return str(self.point.payload.get("text", ""))

    @property
    def provider(self) -> str:
        return self.collection.provider

    @property
    def dimension(self) -> int:
        return self.collection.dimension
