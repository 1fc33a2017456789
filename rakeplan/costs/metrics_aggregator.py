"""Plan metrics aggregator.

Reduces a list of assignments into summary KPIs:
- Total tons and total cost
- Tons-weighted average ETA
- On-time tons percentage
- Fleet-wide rake utilization
and computes the soft-penalty objective used by the heuristic.
"""

from typing import List, Dict, Iterable

from rakeplan.models import DataBundle, OptimizationParams
from rakeplan.optimization.constraint_tracker import effective_loading_rate
from rakeplan.optimization.result_schema import AssignmentResult, PlanMetrics
from .utilization import RakeUtilization, YardLoading


class MetricsAggregator:
    """
    Computes KPIs from assignments.

    Every percentage is 0 when its denominator is 0, so an empty plan yields
    all-zero metrics.

    Example:
        aggregator = MetricsAggregator(data)
        metrics = aggregator.aggregate(assignments)
        objective = aggregator.objective(metrics, params)
    """

    def __init__(self, data: DataBundle):
        """
        Initialize aggregator.

        Args:
            data: Planning input (orders for due hours, rakes for capacity)
        """
        self.data = data
        self._due_hour: Dict[str, float] = {o.id: o.due_hour for o in data.orders}

    def aggregate(self, assignments: Iterable[AssignmentResult]) -> PlanMetrics:
        """
        Reduce assignments into PlanMetrics.

        Args:
            assignments: Committed assignments

        Returns:
            PlanMetrics with totals and percentages
        """
        total_tons = 0.0
        total_cost = 0.0
        weighted_eta = 0.0
        on_time_tons = 0.0

        for a in assignments:
            total_tons += a.tons
            total_cost += a.cost
            weighted_eta += a.eta_hour * a.tons
            if a.eta_hour <= self._due_hour[a.order_id]:
                on_time_tons += a.tons

        fleet_capacity = self.data.fleet_capacity_tons

        return PlanMetrics(
            total_tons=total_tons,
            total_cost=total_cost,
            avg_eta=weighted_eta / total_tons if total_tons else 0.0,
            on_time_pct=on_time_tons / total_tons * 100 if total_tons else 0.0,
            rake_utilization_pct=total_tons / fleet_capacity * 100 if fleet_capacity else 0.0,
        )

    def unfulfilled_tons(self, metrics: PlanMetrics) -> float:
        """Demand not covered by the plan (never negative)."""
        return max(0.0, self.data.total_demand_tons - metrics.total_tons)

    def objective(self, metrics: PlanMetrics, params: OptimizationParams) -> float:
        """Total cost plus the soft penalty on unmet demand."""
        return metrics.total_cost + params.unfulfilled_penalty_per_ton * self.unfulfilled_tons(metrics)

    def rake_utilization(self, assignments: Iterable[AssignmentResult]) -> List[RakeUtilization]:
        """Per-rake tons against capacity, in fleet order."""
        by_rake = {r.id: RakeUtilization(rake_id=r.id, capacity_tons=r.capacity_tons) for r in self.data.rakes}
        for a in assignments:
            by_rake[a.rake_id].tons += a.tons
        return list(by_rake.values())

    def yard_loading(
        self,
        assignments: Iterable[AssignmentResult],
        horizon_hours: float
    ) -> List[YardLoading]:
        """Per-yard loading hours against the horizon, in yard order."""
        rates = {y.id: effective_loading_rate(y.loading_rate_tph) for y in self.data.yards}
        by_yard = {y.id: YardLoading(yard_id=y.id, horizon_hours=horizon_hours) for y in self.data.yards}
        for a in assignments:
            entry = by_yard[a.yard_id]
            entry.tons += a.tons
            entry.loading_hours += a.tons / rates[a.yard_id]
        return list(by_yard.values())
