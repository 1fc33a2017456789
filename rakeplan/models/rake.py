"""Rake data model for the transport fleet."""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class Rake(BaseModel):
    """
    Represents a rake (a train of wagons) with fixed tonnage capacity.

    Attributes:
        id: Unique rake identifier
        wagons: Number of wagons
        capacity_per_wagon_tons: Payload per wagon in tons
        max_speed_kmph: Maximum running speed (floored at 30 km/h when planning)
        fixed_cost: Fixed dispatch cost (informational, not part of the objective)
        crew_window_hours: Optional crew availability window in hours
        maintenance_downtime_hours: Optional maintenance downtime in hours
    """
    id: str = Field(..., description="Unique rake identifier")
    wagons: int = Field(..., description="Number of wagons", ge=1)
    capacity_per_wagon_tons: float = Field(..., description="Capacity per wagon (tons)", gt=0)
    max_speed_kmph: float = Field(..., description="Maximum speed (km/h)")
    fixed_cost: float = Field(default=0.0, description="Fixed dispatch cost", ge=0)
    crew_window_hours: Optional[float] = Field(None, description="Crew availability window (hours)", ge=0)
    maintenance_downtime_hours: Optional[float] = Field(None, description="Maintenance downtime (hours)", ge=0)

    model_config = ConfigDict(frozen=True)

    @property
    def capacity_tons(self) -> float:
        """Total carrying capacity (wagons x capacity per wagon)."""
        return self.wagons * self.capacity_per_wagon_tons

    def available_hours(self, horizon_hours: float) -> float:
        """
        Usable hours within the planning horizon.

        Crew window (defaulting to the horizon) minus maintenance downtime,
        never negative.

        Args:
            horizon_hours: Planning horizon used when no crew window is set

        Returns:
            Available hours for this rake
        """
        window = self.crew_window_hours if self.crew_window_hours is not None else horizon_hours
        downtime = self.maintenance_downtime_hours or 0.0
        return max(0.0, window - downtime)

    def __str__(self) -> str:
        """String representation."""
        return f"Rake {self.id}: {self.wagons} x {self.capacity_per_wagon_tons:g}t = {self.capacity_tons:,.0f}t"
