"""Mutable allocation state for one greedy run.

The tracker owns every counter that changes while orders are committed:
per-yard per-product tons used, per-rake tons used and per-yard loading
hours used. Input models are never mutated. A tracker belongs to exactly one
run; concurrent runs must each build their own with ``from_data()``.
"""

from dataclasses import dataclass, field
from typing import Dict, Tuple
from collections import defaultdict
import math

from rakeplan.models import DataBundle
from .constants import FEASIBILITY_TOLERANCE, MIN_LOADING_RATE_TPH


def effective_loading_rate(loading_rate_tph: float) -> float:
    """Loading rate with the MIN_LOADING_RATE_TPH floor applied."""
    return max(MIN_LOADING_RATE_TPH, loading_rate_tph)


@dataclass
class ConstraintTracker:
    """Capacity counters for one allocation run.

    Attributes:
        inventory: Original tons per (yard, product)
        rake_capacity: Original capacity per rake (wagons x capacity per wagon)
        loading_rate: Effective loading rate per yard (tons/hour, floored)
        max_work_hours: Loading-hour budget per yard
        inventory_used: Tons drawn per yard per product
        rake_tons_used: Tons loaded per rake
        yard_load_hours_used: Loading hours consumed per yard
    """
    inventory: Dict[Tuple[str, str], float]
    rake_capacity: Dict[str, float]
    loading_rate: Dict[str, float]
    max_work_hours: float
    inventory_used: Dict[str, Dict[str, float]] = field(
        default_factory=lambda: defaultdict(lambda: defaultdict(float))
    )
    rake_tons_used: Dict[str, float] = field(default_factory=lambda: defaultdict(float))
    yard_load_hours_used: Dict[str, float] = field(default_factory=lambda: defaultdict(float))

    @classmethod
    def from_data(cls, data: DataBundle, max_work_hours: float) -> 'ConstraintTracker':
        """Build a fresh tracker with nothing consumed."""
        inventory = {}
        for yard in data.yards:
            for product, tons in yard.inventory.items():
                inventory[(yard.id, product)] = tons

        return cls(
            inventory=inventory,
            rake_capacity={r.id: r.capacity_tons for r in data.rakes},
            loading_rate={y.id: effective_loading_rate(y.loading_rate_tph) for y in data.yards},
            max_work_hours=max_work_hours,
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def remaining_inventory(self, yard_id: str, product: str) -> float:
        used = self.inventory_used.get(yard_id, {}).get(product, 0.0)
        return self.inventory.get((yard_id, product), 0.0) - used

    def remaining_rake_capacity(self, rake_id: str) -> float:
        return self.rake_capacity.get(rake_id, 0.0) - self.rake_tons_used.get(rake_id, 0.0)

    def yard_hours_left(self, yard_id: str) -> float:
        return self.max_work_hours - self.yard_load_hours_used.get(yard_id, 0.0)

    def max_loadable_tons(self, yard_id: str) -> float:
        """Whole tons the yard can still load within the horizon."""
        return max(0, math.floor(self.yard_hours_left(yard_id) * self.loading_rate[yard_id]))

    def max_commit(self, yard_id: str, rake_id: str, product: str) -> float:
        """Tightest of the three capacity dimensions for a (yard, rake, product)."""
        return min(
            self.remaining_inventory(yard_id, product),
            self.remaining_rake_capacity(rake_id),
            self.max_loadable_tons(yard_id),
        )

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def commit(self, yard_id: str, rake_id: str, product: str, tons: float) -> float:
        """
        Record an allocation against all three capacity dimensions.

        Args:
            yard_id: Yard supplying the tons
            rake_id: Rake carrying the tons
            product: Product drawn from yard inventory
            tons: Tons allocated (must be positive and within capacity)

        Returns:
            Loading hours consumed at the yard by this allocation

        Raises:
            ValueError: If tons is not positive or exceeds remaining capacity
        """
        if tons <= 0:
            raise ValueError(f"Allocation must be positive, got {tons}")

        available = self.max_commit(yard_id, rake_id, product)
        if tons > available + FEASIBILITY_TOLERANCE:
            raise ValueError(
                f"Allocation of {tons:,.2f}t at yard {yard_id} on rake {rake_id} "
                f"exceeds remaining capacity {available:,.2f}t"
            )

        load_hours = tons / self.loading_rate[yard_id]

        self.inventory_used[yard_id][product] += tons
        self.rake_tons_used[rake_id] += tons
        self.yard_load_hours_used[yard_id] += load_hours

        return load_hours

    def snapshot(self) -> 'ConstraintTracker':
        """Independent copy of the current state (for read-only evaluation)."""
        used = defaultdict(lambda: defaultdict(float))
        for yard_id, by_product in self.inventory_used.items():
            used[yard_id].update(by_product)

        return ConstraintTracker(
            inventory=dict(self.inventory),
            rake_capacity=dict(self.rake_capacity),
            loading_rate=dict(self.loading_rate),
            max_work_hours=self.max_work_hours,
            inventory_used=used,
            rake_tons_used=defaultdict(float, self.rake_tons_used),
            yard_load_hours_used=defaultdict(float, self.yard_load_hours_used),
        )

    def __str__(self) -> str:
        """String representation."""
        tons = sum(self.rake_tons_used.values())
        hours = sum(self.yard_load_hours_used.values())
        return f"ConstraintTracker: {tons:,.0f}t committed, {hours:,.2f} yard loading hours used"
