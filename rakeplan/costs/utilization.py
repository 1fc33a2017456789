"""Utilization breakdown data models.

Data classes reporting how much of each capacity dimension a plan consumed.
"""

from dataclasses import dataclass


@dataclass
class RakeUtilization:
    """
    Tons carried by one rake against its capacity.

    Attributes:
        rake_id: Rake identifier
        tons: Tons allocated to the rake
        capacity_tons: Wagons x capacity per wagon
    """
    rake_id: str
    tons: float = 0.0
    capacity_tons: float = 0.0

    @property
    def utilization_pct(self) -> float:
        if self.capacity_tons <= 0:
            return 0.0
        return self.tons / self.capacity_tons * 100

    def __str__(self) -> str:
        """String representation."""
        return f"Rake {self.rake_id}: {self.tons:,.0f}/{self.capacity_tons:,.0f}t ({self.utilization_pct:.1f}%)"


@dataclass
class YardLoading:
    """
    Loading hours consumed at one yard against the horizon.

    Attributes:
        yard_id: Yard identifier
        tons: Tons loaded at the yard
        loading_hours: Sum of tons / loading rate
        horizon_hours: Loading-hour budget (max work hours)
    """
    yard_id: str
    tons: float = 0.0
    loading_hours: float = 0.0
    horizon_hours: float = 0.0

    @property
    def utilization_pct(self) -> float:
        if self.horizon_hours <= 0:
            return 0.0
        return self.loading_hours / self.horizon_hours * 100

    def __str__(self) -> str:
        """String representation."""
        return (
            f"Yard {self.yard_id}: {self.tons:,.0f}t, "
            f"{self.loading_hours:.2f}/{self.horizon_hours:.0f}h ({self.utilization_pct:.1f}%)"
        )
