"""Solution validation - checks that fail loudly on incorrect plans.

This validator runs AFTER a backend returns and catches bugs that made it
through allocation. Every plan, greedy or LP, must satisfy:

- every assignment ships a positive tonnage
- tons drawn per yard and product never exceed the yard's inventory
- tons loaded per rake never exceed the rake's capacity
- loading hours per yard fit within the horizon
- no order receives more than it asked for, and every under-filled order
  has a shortfall message

If validation fails, the plan is INVALID and should not be used.
"""

from typing import List, Dict, Tuple
from dataclasses import dataclass, field
from collections import defaultdict
import logging

from rakeplan.models import DataBundle, OptimizationParams
from rakeplan.optimization.constants import FEASIBILITY_TOLERANCE
from rakeplan.optimization.constraint_tracker import effective_loading_rate
from rakeplan.optimization.result_schema import OptimizationResult

logger = logging.getLogger(__name__)


@dataclass
class SolutionValidationError:
    """Represents a broken plan invariant (CRITICAL - plan invalid)."""
    category: str
    message: str
    details: Dict = field(default_factory=dict)


class SolutionInvariantError(ValueError):
    """Raised by assert_valid() when a plan breaks an invariant."""

    def __init__(self, errors: List[SolutionValidationError]):
        self.errors = errors
        lines = [f"{e.category}: {e.message}" for e in errors]
        super().__init__(f"{len(errors)} plan invariant(s) violated:\n  " + "\n  ".join(lines))


def _exceeds(total: float, limit: float) -> bool:
    return total > limit + FEASIBILITY_TOLERANCE * max(1.0, abs(limit))


class SolutionValidator:
    """Validates allocation results against the input they were planned from."""

    def __init__(
        self,
        data: DataBundle,
        params: OptimizationParams,
        result: OptimizationResult,
    ):
        """Initialize validator.

        Args:
            data: Planning input the result was produced from
            params: Parameters of the run (for the horizon)
            result: Result to check
        """
        self.data = data
        self.params = params
        self.result = result

    def validate(self) -> Tuple[bool, List[SolutionValidationError]]:
        """Run all validation checks.

        Returns:
            Tuple of (is_valid, list of errors)
            is_valid is False if ANY error found (plan is invalid)
        """
        errors = []

        errors.extend(self._validate_references())
        errors.extend(self._validate_positive_tons())
        errors.extend(self._validate_inventory())
        errors.extend(self._validate_rake_capacity())
        errors.extend(self._validate_yard_hours())
        errors.extend(self._validate_order_fill())

        for error in errors:
            logger.error(f"Plan invariant violated [{error.category}]: {error.message}")

        return (len(errors) == 0, errors)

    def assert_valid(self) -> None:
        """Raise SolutionInvariantError if any invariant is broken."""
        is_valid, errors = self.validate()
        if not is_valid:
            raise SolutionInvariantError(errors)

    def _validate_references(self) -> List[SolutionValidationError]:
        """Assignments must name known orders, yards and rakes."""
        errors = []
        orders = self.data.orders_by_id
        yards = {y.id for y in self.data.yards}
        rakes = {r.id for r in self.data.rakes}

        for i, a in enumerate(self.result.assignments):
            missing = []
            if a.order_id not in orders:
                missing.append(f"order {a.order_id}")
            if a.yard_id not in yards:
                missing.append(f"yard {a.yard_id}")
            if a.rake_id not in rakes:
                missing.append(f"rake {a.rake_id}")
            if missing:
                errors.append(SolutionValidationError(
                    category='Unknown Reference',
                    message=f"Assignment {i} references unknown {', '.join(missing)}",
                    details={'index': i, 'missing': missing}
                ))

        return errors

    def _known_assignments(self):
        orders = self.data.orders_by_id
        yards = {y.id for y in self.data.yards}
        rakes = {r.id for r in self.data.rakes}
        return [
            a for a in self.result.assignments
            if a.order_id in orders and a.yard_id in yards and a.rake_id in rakes
        ]

    def _validate_positive_tons(self) -> List[SolutionValidationError]:
        errors = []
        for i, a in enumerate(self.result.assignments):
            if a.tons <= 0:
                errors.append(SolutionValidationError(
                    category='Non-Positive Tons',
                    message=f"Assignment {i} ({a.order_id}/{a.yard_id}/{a.rake_id}) ships {a.tons}t",
                    details={'index': i, 'tons': a.tons}
                ))
        return errors

    def _validate_inventory(self) -> List[SolutionValidationError]:
        """Tons drawn per (yard, product) <= inventory."""
        errors = []
        orders = self.data.orders_by_id
        yards = {y.id: y for y in self.data.yards}

        drawn: Dict[Tuple[str, str], float] = defaultdict(float)
        for a in self._known_assignments():
            drawn[(a.yard_id, orders[a.order_id].product)] += a.tons

        for (yard_id, product), tons in drawn.items():
            inventory = yards[yard_id].available(product)
            if _exceeds(tons, inventory):
                errors.append(SolutionValidationError(
                    category='Inventory Exceeded',
                    message=f"Yard {yard_id} ships {tons:,.2f}t of {product} but holds {inventory:,.2f}t",
                    details={'yard': yard_id, 'product': product, 'shipped': tons, 'inventory': inventory}
                ))

        return errors

    def _validate_rake_capacity(self) -> List[SolutionValidationError]:
        """Tons per rake <= wagons x capacity per wagon."""
        errors = []
        rakes = {r.id: r for r in self.data.rakes}

        loaded: Dict[str, float] = defaultdict(float)
        for a in self._known_assignments():
            loaded[a.rake_id] += a.tons

        for rake_id, tons in loaded.items():
            capacity = rakes[rake_id].capacity_tons
            if _exceeds(tons, capacity):
                errors.append(SolutionValidationError(
                    category='Rake Capacity Exceeded',
                    message=f"Rake {rake_id} carries {tons:,.2f}t, capacity {capacity:,.2f}t",
                    details={'rake': rake_id, 'tons': tons, 'capacity': capacity}
                ))

        return errors

    def _validate_yard_hours(self) -> List[SolutionValidationError]:
        """Loading hours per yard <= horizon."""
        errors = []
        rates = {y.id: effective_loading_rate(y.loading_rate_tph) for y in self.data.yards}
        horizon = self.params.max_work_hours

        hours: Dict[str, float] = defaultdict(float)
        for a in self._known_assignments():
            hours[a.yard_id] += a.tons / rates[a.yard_id]

        for yard_id, used in hours.items():
            if _exceeds(used, horizon):
                errors.append(SolutionValidationError(
                    category='Yard Hours Exceeded',
                    message=f"Yard {yard_id} loads for {used:.4f}h, horizon {horizon}h",
                    details={'yard': yard_id, 'hours': used, 'horizon': horizon}
                ))

        return errors

    def _validate_order_fill(self) -> List[SolutionValidationError]:
        """No order over-filled; under-filled orders carry a shortfall message."""
        errors = []
        allocated = self.result.tons_by_order()

        for order in self.data.orders:
            tons = allocated.get(order.id, 0.0)

            if _exceeds(tons, order.tons):
                errors.append(SolutionValidationError(
                    category='Order Over-Allocated',
                    message=f"Order {order.id} receives {tons:,.2f}t of {order.tons:,.2f}t requested",
                    details={'order': order.id, 'allocated': tons, 'requested': order.tons}
                ))
            elif _exceeds(order.tons, tons) and not self._has_shortfall_message(order.id):
                errors.append(SolutionValidationError(
                    category='Missing Shortfall Message',
                    message=f"Order {order.id} short by {order.tons - tons:,.2f}t with no diagnostic",
                    details={'order': order.id, 'allocated': tons, 'requested': order.tons}
                ))

        return errors

    def _has_shortfall_message(self, order_id: str) -> bool:
        prefix = f"Unfulfilled: {order_id} short by"
        return any(m.startswith(prefix) for m in self.result.messages)

