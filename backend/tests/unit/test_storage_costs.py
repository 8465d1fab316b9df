"""Unit tests for the storage cost model and point id generation."""

import pytest

from rag_lab.application.services.point_ids import MonotonicPointIdGenerator
from rag_lab.application.services.storage_costs import calculate_storage_costs


# ── Storage costs ──


def test_reduced_dimension_reports_savings():
    metrics = calculate_storage_costs(1000, 768)

    assert metrics.vector_bytes == 3072
    assert metrics.storage_mb == pytest.approx(2.9296875)
    assert metrics.monthly_cost == pytest.approx(0.0029296875)
    assert metrics.baseline_dimension == 1536
    assert metrics.baseline_monthly_cost == pytest.approx(0.005859375)
    assert metrics.savings_percent == pytest.approx(50.0)


def test_baseline_dimension_reports_no_savings():
    metrics = calculate_storage_costs(1000, 1536)
    assert metrics.savings_percent is None


def test_larger_dimension_reports_negative_savings():
    metrics = calculate_storage_costs(10, 3072)
    assert metrics.savings_percent == pytest.approx(-100.0)


def test_empty_collection_costs_nothing():
    metrics = calculate_storage_costs(0, 256)

    assert metrics.storage_mb == 0
    assert metrics.monthly_cost == 0
    assert metrics.savings_percent is None


def test_custom_cost_rate_and_baseline():
    metrics = calculate_storage_costs(
        1024 * 1024 // 4, 1, baseline_dimension=2, cost_per_mb_per_month=2.0
    )

    assert metrics.storage_mb == pytest.approx(1.0)
    assert metrics.monthly_cost == pytest.approx(2.0)
    assert metrics.savings_percent == pytest.approx(50.0)


# ── Point ids ──


def test_reservations_in_same_microsecond_do_not_overlap():
    generator = MonotonicPointIdGenerator(clock_ns=lambda: 5_000_000)

    first = generator.reserve(3)
    second = generator.reserve(2)

    assert first == [5000, 5001, 5002]
    assert second == [5003, 5004]


def test_reservation_follows_clock_when_it_moves_ahead():
    now = [5_000_000]
    generator = MonotonicPointIdGenerator(clock_ns=lambda: now[0])
    generator.reserve(3)

    now[0] = 10_000_000

    assert generator.reserve(1) == [10000]


def test_reservation_never_goes_backwards_with_clock():
    now = [10_000_000]
    generator = MonotonicPointIdGenerator(clock_ns=lambda: now[0])
    generator.reserve(1)

    now[0] = 1_000_000

    assert generator.reserve(1) == [10001]


def test_empty_reservation():
    assert MonotonicPointIdGenerator().reserve(0) == []
