"""Optimization parameter model for allocation runs."""

from pydantic import BaseModel, ConfigDict, Field


class OptimizationParams(BaseModel):
    """
    Cost and horizon parameters shared by both allocation backends.

    Attributes:
        cost_per_km_per_ton: Transport variable cost ($/ton/km)
        tardiness_penalty_per_ton_per_hour: Penalty per ton per hour late
        loading_penalty_per_hour: Reserved. Accepted for compatibility but not
            consumed by either backend.
        service_level_weight: Blend between transport cost (0) and schedule
            risk (1). Expected in [0, 1]; values outside are not clamped.
        max_work_hours: Planning horizon in hours (bounds yard loading time
            and candidate travel time)
        unfulfilled_penalty_per_ton: Soft penalty per ton of unmet demand used
            in the heuristic objective
    """

    cost_per_km_per_ton: float = Field(
        default=1.8,
        description="Transport variable cost per ton per km",
        ge=0
    )
    tardiness_penalty_per_ton_per_hour: float = Field(
        default=15.0,
        description="Penalty per ton per hour of lateness",
        ge=0
    )
    loading_penalty_per_hour: float = Field(
        default=2000.0,
        description="Reserved: not used by the heuristic or the LP",
        ge=0
    )
    service_level_weight: float = Field(
        default=0.4,
        description="Weight between transport cost (0) and service level (1); not clamped"
    )
    max_work_hours: float = Field(
        default=72.0,
        description="Planning horizon (hours)",
        gt=0
    )
    unfulfilled_penalty_per_ton: float = Field(
        default=2000.0,
        description="Objective penalty per ton of unmet demand",
        ge=0
    )

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        """String representation."""
        return (
            f"OptimizationParams(cost/km/t={self.cost_per_km_per_ton}, "
            f"tardiness/t/h={self.tardiness_penalty_per_ton_per_hour}, "
            f"w={self.service_level_weight}, horizon={self.max_work_hours}h)"
        )
