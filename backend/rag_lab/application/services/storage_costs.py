"""Storage cost model for stored vectors (32-bit floats)."""

from rag_lab.domain.entities import StorageCostMetrics

BYTES_PER_FLOAT = 4
BYTES_PER_MB = 1024 * 1024
DEFAULT_BASELINE_DIMENSION = 1536
DEFAULT_COST_PER_MB_PER_MONTH = 0.001  # USD, rough estimate


def calculate_storage_costs(
    vector_count: int,
    dimension: int,
    *,
    baseline_dimension: int = DEFAULT_BASELINE_DIMENSION,
    cost_per_mb_per_month: float = DEFAULT_COST_PER_MB_PER_MONTH,
) -> StorageCostMetrics:
    """Estimate storage size and monthly cost, compared with a baseline dimension."""
    vector_bytes = dimension * BYTES_PER_FLOAT
    storage_mb = vector_count * vector_bytes / BYTES_PER_MB
    monthly_cost = storage_mb * cost_per_mb_per_month

    baseline_mb = vector_count * baseline_dimension * BYTES_PER_FLOAT / BYTES_PER_MB
    baseline_cost = baseline_mb * cost_per_mb_per_month

    savings_percent: float | None = None
    if dimension != baseline_dimension and baseline_cost > 0:
        savings_percent = (baseline_cost - monthly_cost) / baseline_cost * 100

    return StorageCostMetrics(
        total_vectors=vector_count,
        dimension=dimension,
        vector_bytes=vector_bytes,
        storage_mb=storage_mb,
        monthly_cost=monthly_cost,
        baseline_dimension=baseline_dimension,
        baseline_monthly_cost=baseline_cost,
        savings_percent=savings_percent,
    )
