"""Pre-flight checks on planning input.

DataBundle construction already rejects malformed input (negative tons,
unknown references). This module looks for input that is valid but will
plan poorly, so the user can see why orders end up short before running:

- orders for products no yard stocks
- demand per product above total inventory
- total demand above fleet capacity
- customers no yard can reach within the horizon
- yards and rakes that only plan because of the rate and speed floors
- rakes with no usable hours

Issues are returned and logged; nothing here raises.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Dict, Any, Optional
from collections import defaultdict
import logging

from rakeplan.models import DataBundle, OptimizationParams
from rakeplan.network import DistanceModel
from rakeplan.optimization.constants import MIN_LOADING_RATE_TPH, MIN_SPEED_KMPH
from rakeplan.optimization.candidate_generator import effective_speed

logger = logging.getLogger(__name__)


class ValidationSeverity(Enum):
    """Severity levels for validation issues."""
    INFO = "info"
    WARNING = "warning"


@dataclass
class ValidationIssue:
    """Represents a single validation issue.

    Attributes:
        id: Identifier for the issue type
        category: Category of validation (e.g., "Supply", "Fleet")
        severity: Severity level
        title: Short title describing the issue
        description: Detailed description, naming the affected records
        metadata: Additional metadata about the issue
    """
    id: str
    category: str
    severity: ValidationSeverity
    title: str
    description: str
    metadata: Optional[Dict[str, Any]] = None


class DataValidator:
    """Finds input that will lead to shortfalls or relies on planning floors."""

    def __init__(
        self,
        data: DataBundle,
        params: Optional[OptimizationParams] = None,
        distance_model: Optional[DistanceModel] = None,
    ):
        """Initialize validator.

        Args:
            data: Planning input
            params: Run parameters (default parameters if None)
            distance_model: Optional shared distance cache
        """
        self.data = data
        self.params = params or OptimizationParams()
        self.distance_model = distance_model or DistanceModel()
        self.issues: List[ValidationIssue] = []

    def validate_all(self) -> List[ValidationIssue]:
        """Run all checks and return the issues found."""
        self.issues = []

        self.check_supply()
        self.check_fleet_capacity()
        self.check_reachability()
        self.check_floors()
        self.check_rake_hours()

        for issue in self.issues:
            level = logging.WARNING if issue.severity == ValidationSeverity.WARNING else logging.INFO
            logger.log(level, f"{issue.title}: {issue.description}")

        return self.issues

    def _add(self, id, category, severity, title, description, **metadata):
        self.issues.append(ValidationIssue(
            id=id,
            category=category,
            severity=severity,
            title=title,
            description=description,
            metadata=metadata or None,
        ))

    def check_supply(self):
        """Products nobody stocks, and product demand above inventory."""
        demand: Dict[str, float] = defaultdict(float)
        for order in self.data.orders:
            demand[order.product] += order.tons

        stock: Dict[str, float] = defaultdict(float)
        for yard in self.data.yards:
            for product, tons in yard.inventory.items():
                stock[product] += tons

        for product, tons in demand.items():
            if stock[product] <= 0:
                orders = [o.id for o in self.data.orders if o.product == product]
                self._add(
                    'unstocked_product', 'Supply', ValidationSeverity.WARNING,
                    f"No inventory of {product}",
                    f"{len(orders)} order(s) for {tons:,.0f}t of {product} cannot be served: {', '.join(orders)}",
                    product=product, orders=orders,
                )
            elif tons > stock[product]:
                self._add(
                    'demand_exceeds_inventory', 'Supply', ValidationSeverity.WARNING,
                    f"Demand exceeds inventory for {product}",
                    f"{tons:,.0f}t ordered, {stock[product]:,.0f}t held across all yards",
                    product=product, demand=tons, inventory=stock[product],
                )

    def check_fleet_capacity(self):
        demand = self.data.total_demand_tons
        capacity = self.data.fleet_capacity_tons
        if demand > capacity:
            self._add(
                'demand_exceeds_fleet', 'Fleet', ValidationSeverity.WARNING,
                "Demand exceeds fleet capacity",
                f"{demand:,.0f}t ordered, fleet carries {capacity:,.0f}t in one horizon",
                demand=demand, capacity=capacity,
            )

    def check_reachability(self):
        """Customers whose orders no yard and rake can reach within the horizon."""
        if not self.data.rakes:
            return

        fastest = max(effective_speed(r.max_speed_kmph) for r in self.data.rakes)
        horizon = self.params.max_work_hours
        customers = self.data.customers_by_id

        unreachable = []
        for customer_id in sorted({o.customer_id for o in self.data.orders}):
            customer = customers[customer_id]
            reachable = any(
                self.distance_model.between(yard, customer) / fastest <= horizon
                for yard in self.data.yards
            )
            if not reachable:
                unreachable.append(customer_id)

        if unreachable:
            self._add(
                'unreachable_customer', 'Network', ValidationSeverity.WARNING,
                "Customers beyond the horizon",
                f"No yard reaches {', '.join(unreachable)} within {horizon:g}h at {fastest:g} km/h",
                customers=unreachable,
            )

    def check_floors(self):
        """Yards and rakes that plan with the minimum rate or speed."""
        slow_yards = [y.id for y in self.data.yards if y.loading_rate_tph < MIN_LOADING_RATE_TPH]
        if slow_yards:
            self._add(
                'loading_rate_floor', 'Configuration', ValidationSeverity.INFO,
                "Loading rate floored",
                f"Yards {', '.join(slow_yards)} plan at {MIN_LOADING_RATE_TPH:g} tph",
                yards=slow_yards,
            )

        slow_rakes = [r.id for r in self.data.rakes if r.max_speed_kmph < MIN_SPEED_KMPH]
        if slow_rakes:
            self._add(
                'speed_floor', 'Configuration', ValidationSeverity.INFO,
                "Rake speed floored",
                f"Rakes {', '.join(slow_rakes)} plan at {MIN_SPEED_KMPH:g} km/h",
                rakes=slow_rakes,
            )

    def check_rake_hours(self):
        """Rakes whose crew window is used up by maintenance."""
        idle = [
            r.id for r in self.data.rakes
            if r.available_hours(self.params.max_work_hours) <= 0
        ]
        if idle:
            self._add(
                'rake_no_hours', 'Fleet', ValidationSeverity.WARNING,
                "Rakes without usable hours",
                f"Rakes {', '.join(idle)} have no crew hours left after downtime (exact backend cannot use them)",
                rakes=idle,
            )

    def get_summary_stats(self) -> Dict[str, Any]:
        """Counts by severity and category."""
        stats = {
            'total_issues': len(self.issues),
            'by_severity': {
                s.value: len([i for i in self.issues if i.severity == s])
                for s in ValidationSeverity
            },
            'by_category': {},
        }
        for issue in self.issues:
            stats['by_category'][issue.category] = stats['by_category'].get(issue.category, 0) + 1
        return stats

    def has_warnings(self) -> bool:
        return any(i.severity == ValidationSeverity.WARNING for i in self.issues)
