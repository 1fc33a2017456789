"""Blended per-ton cost used to rank candidates and price commitments.

The ranking score blends transport cost against schedule risk with the
service level weight ``w``:

    score = (1 - w) * cost_per_km_per_ton * distance
          + w * tardiness_penalty * max(0, arrival - due_hour) * priority

Ranking uses travel time alone as the arrival estimate. Realized cost,
computed once tons are fixed, is unweighted and includes the loading time.
"""

from dataclasses import dataclass

from rakeplan.models import Order, OptimizationParams


def tardiness_hours(arrival_hours: float, due_hour: float) -> float:
    """Hours late (0 if on time)."""
    return max(0.0, arrival_hours - due_hour)


@dataclass(frozen=True)
class CostComponents:
    """Realized cost split into its transport and tardiness parts."""
    transport: float
    tardiness: float

    @property
    def total(self) -> float:
        return self.transport + self.tardiness


class ScoringFunction:
    """Per-ton scoring and realized cost for a parameter set.

    Example:
        scoring = ScoringFunction(params)
        score = scoring.per_ton_score(order, distance_km=420, arrival_hours=7.5)
    """

    def __init__(self, params: OptimizationParams):
        self.params = params

    def transport_per_ton(self, distance_km: float) -> float:
        return self.params.cost_per_km_per_ton * distance_km

    def tardiness_per_ton(self, order: Order, arrival_hours: float) -> float:
        """Priority-weighted lateness penalty per ton."""
        return (
            self.params.tardiness_penalty_per_ton_per_hour
            * tardiness_hours(arrival_hours, order.due_hour)
            * order.priority
        )

    def per_ton_score(self, order: Order, distance_km: float, arrival_hours: float) -> float:
        """
        Blended per-ton score (lower is preferred).

        Args:
            order: Order being served
            distance_km: Planning distance of the candidate
            arrival_hours: Estimated arrival (travel time only when ranking)

        Returns:
            Weighted sum of transport and tardiness cost per ton
        """
        w = self.params.service_level_weight
        return (
            (1 - w) * self.transport_per_ton(distance_km)
            + w * self.tardiness_per_ton(order, arrival_hours)
        )

    def realized_cost(
        self,
        order: Order,
        tons: float,
        distance_km: float,
        arrival_hours: float
    ) -> CostComponents:
        """
        Monetary cost of a committed allocation.

        Args:
            order: Order being served
            tons: Tons allocated
            distance_km: Planning distance
            arrival_hours: Loading hours plus travel hours

        Returns:
            CostComponents with transport and tardiness parts
        """
        return CostComponents(
            transport=tons * self.transport_per_ton(distance_km),
            tardiness=tons * self.tardiness_per_ton(order, arrival_hours),
        )
