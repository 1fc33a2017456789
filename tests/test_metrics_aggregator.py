"""Tests for plan metrics and utilization breakdowns."""

import pytest

from rakeplan.costs import MetricsAggregator
from rakeplan.models import OptimizationParams
from rakeplan.optimization import AssignmentResult
from tests.fixtures.planning_data import make_bundle


def _assignment(tons, eta, cost, order_id="O1", yard_id="Y1", rake_id="R1"):
    return AssignmentResult(
        order_id=order_id,
        yard_id=yard_id,
        rake_id=rake_id,
        tons=tons,
        distance_km=111,
        eta_hour=eta,
        cost=cost,
    )


@pytest.fixture
def assignments():
    """100t on time and 300t late against O1 (due h48)."""
    return [
        _assignment(100.0, 10.0, 50.0),
        _assignment(300.0, 50.0, 150.0),
    ]


class TestAggregate:

    def test_totals_and_percentages(self, scenario_a_data, assignments):
        metrics = MetricsAggregator(scenario_a_data).aggregate(assignments)

        assert metrics.total_tons == 400.0
        assert metrics.total_cost == 200.0
        assert metrics.avg_eta == pytest.approx((100 * 10 + 300 * 50) / 400)
        assert metrics.on_time_pct == pytest.approx(25.0)
        assert metrics.rake_utilization_pct == pytest.approx(400 / 3480 * 100)

    def test_arrival_at_due_hour_is_on_time(self, scenario_a_data):
        metrics = MetricsAggregator(scenario_a_data).aggregate([_assignment(10.0, 48.0, 1.0)])
        assert metrics.on_time_pct == 100.0

    def test_empty_plan_all_zero(self, scenario_a_data):
        metrics = MetricsAggregator(scenario_a_data).aggregate([])

        assert metrics.total_tons == 0.0
        assert metrics.avg_eta == 0.0
        assert metrics.on_time_pct == 0.0
        assert metrics.rake_utilization_pct == 0.0

    def test_no_fleet_no_division_by_zero(self):
        data = make_bundle(rakes=[], orders=[])
        metrics = MetricsAggregator(data).aggregate([])
        assert metrics.rake_utilization_pct == 0.0


class TestObjective:

    def test_penalizes_unmet_demand(self, scenario_a_data, assignments):
        aggregator = MetricsAggregator(scenario_a_data)
        metrics = aggregator.aggregate(assignments)
        params = OptimizationParams()

        assert aggregator.unfulfilled_tons(metrics) == 4600.0
        assert aggregator.objective(metrics, params) == pytest.approx(200.0 + 2000.0 * 4600.0)

    def test_custom_penalty(self, scenario_a_data, assignments):
        aggregator = MetricsAggregator(scenario_a_data)
        metrics = aggregator.aggregate(assignments)
        params = OptimizationParams(unfulfilled_penalty_per_ton=10.0)

        assert aggregator.objective(metrics, params) == pytest.approx(200.0 + 46000.0)

    def test_no_demand_no_penalty(self, scenario_d_data, params):
        aggregator = MetricsAggregator(scenario_d_data)
        metrics = aggregator.aggregate([])
        assert aggregator.objective(metrics, params) == 0.0


class TestBreakdowns:

    def test_rake_utilization(self, scenario_b_data):
        aggregator = MetricsAggregator(scenario_b_data)
        rows = aggregator.rake_utilization([
            _assignment(3480.0, 5.0, 1.0, rake_id="R1"),
            _assignment(1520.0, 3.0, 1.0, rake_id="R2"),
        ])

        assert [r.rake_id for r in rows] == ["R1", "R2"]
        assert rows[0].utilization_pct == pytest.approx(100.0)
        assert rows[1].utilization_pct == pytest.approx(1520 / 3480 * 100)

    def test_idle_rake_listed(self, scenario_b_data):
        rows = MetricsAggregator(scenario_b_data).rake_utilization([])
        assert [(r.rake_id, r.tons) for r in rows] == [("R1", 0.0), ("R2", 0.0)]

    def test_yard_loading(self, scenario_a_data, assignments):
        [row] = MetricsAggregator(scenario_a_data).yard_loading(assignments, horizon_hours=72.0)

        assert row.tons == 400.0
        assert row.loading_hours == pytest.approx(0.4)
        assert row.utilization_pct == pytest.approx(0.4 / 72 * 100)
        assert "Y1" in str(row)
