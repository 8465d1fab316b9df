"""Pydantic schemas for document ingestion and collection management."""

from pydantic import BaseModel, Field


# ── Request Schemas ──────────────────────────────────────────────────


class IngestRequest(BaseModel):
    """Request body for ingesting plain text, a list of strings, or a key→text map."""

    content: str | list[str] | dict[str, str] = Field(
        ..., description="Plain text, an array of texts, or a JSON object of texts"
    )
    provider: str = Field(default="surus", description="Embedding provider name")
    dimension: int | None = Field(
        default=None,
        ge=1,
        description="Requested dimension (ignored by fixed-dimension providers)",
    )


# ── Response Schemas ─────────────────────────────────────────────────


class StorageCostResponse(BaseModel):
    total_vectors: int
    dimension: int
    vector_bytes: int
    storage_mb: float
    monthly_cost: float
    baseline_dimension: int
    baseline_monthly_cost: float
    savings_percent: float | None = None


class IngestResponse(BaseModel):
    """Outcome of an ingestion: where the chunks went and what they cost."""

    chunk_count: int
    dimension: int
    provider: str
    collection: str
    cost_metrics: StorageCostResponse


class CollectionResponse(BaseModel):
    name: str
    provider: str
    dimension: int
    points_count: int | None = None


class ClearResponse(BaseModel):
    deleted_collections: list[str] = []
    deleted_count: int = 0
