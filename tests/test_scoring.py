"""Tests for the blended per-ton scoring function."""

import pytest

from rakeplan.models import OptimizationParams
from rakeplan.optimization import ScoringFunction
from rakeplan.optimization.scoring import tardiness_hours
from tests.fixtures.planning_data import make_order


class TestTardinessHours:

    def test_on_time_is_zero(self):
        assert tardiness_hours(10.0, 48.0) == 0.0

    def test_late(self):
        assert tardiness_hours(50.5, 48.0) == 2.5


class TestPerTonScore:
    """Test ranking score."""

    def test_on_time_is_weighted_transport_only(self):
        scoring = ScoringFunction(OptimizationParams())
        order = make_order(due_hour=48.0)

        # (1 - 0.4) * 1.8 * 111
        assert scoring.per_ton_score(order, 111, 1.85) == pytest.approx(119.88)

    def test_late_adds_weighted_tardiness_times_priority(self):
        scoring = ScoringFunction(OptimizationParams())
        order = make_order(due_hour=0.0, priority=3)

        # 0.6 * 1.8 * 100 + 0.4 * 15 * 2 * 3
        assert scoring.per_ton_score(order, 100, 2.0) == pytest.approx(108.0 + 36.0)

    def test_priority_scales_lateness_linearly(self):
        scoring = ScoringFunction(OptimizationParams(service_level_weight=1.0))
        normal = make_order(due_hour=0.0, priority=1)
        urgent = make_order(due_hour=0.0, priority=3)

        assert scoring.per_ton_score(urgent, 100, 4.0) == pytest.approx(
            3 * scoring.per_ton_score(normal, 100, 4.0)
        )

    def test_weight_zero_ignores_lateness(self):
        scoring = ScoringFunction(OptimizationParams(service_level_weight=0.0))
        order = make_order(due_hour=0.0)
        assert scoring.per_ton_score(order, 100, 50.0) == pytest.approx(180.0)

    def test_weight_outside_unit_interval_not_clamped(self):
        scoring = ScoringFunction(OptimizationParams(service_level_weight=1.5))
        order = make_order(due_hour=48.0)

        # (1 - 1.5) * 1.8 * 100
        assert scoring.per_ton_score(order, 100, 1.0) == pytest.approx(-90.0)


class TestRealizedCost:
    """Test unweighted cost of a committed allocation."""

    def test_components(self):
        scoring = ScoringFunction(OptimizationParams())
        order = make_order(due_hour=0.0, priority=3)

        cost = scoring.realized_cost(order, tons=10.0, distance_km=100, arrival_hours=2.0)

        assert cost.transport == pytest.approx(1800.0)
        assert cost.tardiness == pytest.approx(900.0)
        assert cost.total == pytest.approx(2700.0)

    def test_not_weighted_by_service_level(self):
        order = make_order(due_hour=0.0)
        low = ScoringFunction(OptimizationParams(service_level_weight=0.0))
        high = ScoringFunction(OptimizationParams(service_level_weight=1.0))

        assert low.realized_cost(order, 10.0, 100, 2.0) == high.realized_cost(order, 10.0, 100, 2.0)
