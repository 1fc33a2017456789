"""Greedy earliest-due-date allocator.

Allocates orders one at a time, earliest due hour first. For each order the
feasible candidates are ranked by blended per-ton score and filled in turn
until the order is covered or candidates run out. Capacity is enforced by a
ConstraintTracker owned by the run:

- yard inventory per product
- rake carrying capacity
- yard loading hours within the horizon (tracked per yard, shared by all
  rakes loading there)

Orders that cannot be fully covered are reported as shortfalls and
allocation continues with the next order.
"""

from typing import Callable, Dict, List, Optional
from dataclasses import dataclass, field
import logging

from rakeplan.models import DataBundle, Order, OptimizationParams
from rakeplan.network import DistanceModel
from .candidate_generator import Candidate, CandidateGenerator
from .constraint_tracker import ConstraintTracker
from .result_schema import AssignmentResult
from .scoring import ScoringFunction

logger = logging.getLogger(__name__)


def shortfall_message(order_id: str, shortfall_tons: float) -> str:
    """Diagnostic for an under-filled order."""
    return f"Unfulfilled: {order_id} short by {shortfall_tons:.0f} tons"


@dataclass
class AllocationRun:
    """
    Output of one greedy allocation.

    Attributes:
        assignments: Assignments in allocation order
        messages: Diagnostics in order-processing order
        shortfalls: Unallocated tons per under-filled order
        tracker: Final capacity state of the run
        cancelled: True if the run stopped early on request
    """
    assignments: List[AssignmentResult] = field(default_factory=list)
    messages: List[str] = field(default_factory=list)
    shortfalls: Dict[str, float] = field(default_factory=dict)
    tracker: Optional[ConstraintTracker] = None
    cancelled: bool = False

    @property
    def total_tons(self) -> float:
        return sum(a.tons for a in self.assignments)


class GreedyAllocator:
    """
    Earliest-due-date greedy allocation against explicit capacity state.

    Example:
        allocator = GreedyAllocator(data, params)
        run = allocator.allocate()
        for message in run.messages:
            print(message)
    """

    def __init__(
        self,
        data: DataBundle,
        params: OptimizationParams,
        distance_model: Optional[DistanceModel] = None,
    ):
        """
        Initialize allocator.

        Args:
            data: Planning input
            params: Optimization parameters
            distance_model: Optional shared distance cache
        """
        self.data = data
        self.params = params
        self.scoring = ScoringFunction(params)
        self.generator = CandidateGenerator(
            data, params, distance_model=distance_model, scoring=self.scoring
        )

    def sorted_orders(self) -> List[Order]:
        """Orders by ascending due hour; ties keep input order."""
        return sorted(self.data.orders, key=lambda o: o.due_hour)

    def ranked_candidates(self, order: Order, tracker: ConstraintTracker) -> List[Candidate]:
        """Feasible candidates by ascending score; ties keep input order."""
        candidates = self.generator.candidates_for(order, tracker)
        return sorted(candidates, key=lambda c: c.per_ton_score)

    def allocate(
        self,
        tracker: Optional[ConstraintTracker] = None,
        should_cancel: Optional[Callable[[], bool]] = None,
    ) -> AllocationRun:
        """
        Allocate every order against a tracker.

        Args:
            tracker: Capacity state to consume. A fresh tracker is built when
                None. Never share one tracker between concurrent runs.
            should_cancel: Checked between orders; when it returns True the
                remaining orders are reported unallocated.

        Returns:
            AllocationRun with assignments, shortfall messages and final state
        """
        if tracker is None:
            tracker = ConstraintTracker.from_data(self.data, self.params.max_work_hours)

        run = AllocationRun(tracker=tracker)
        orders = self.sorted_orders()

        logger.info(f"Greedy allocation started: {self.data.summary()}")

        for position, order in enumerate(orders):
            if should_cancel is not None and should_cancel():
                run.cancelled = True
                skipped = orders[position:]
                run.messages.append(f"Cancelled: {len(skipped)} orders not processed")
                for pending in skipped:
                    run.shortfalls[pending.id] = pending.tons
                    run.messages.append(shortfall_message(pending.id, pending.tons))
                logger.warning(f"Greedy allocation cancelled before order {order.id}")
                break

            remaining = self._allocate_order(order, tracker, run.assignments)

            if remaining > 0:
                run.shortfalls[order.id] = remaining
                run.messages.append(shortfall_message(order.id, remaining))
                logger.warning(f"Order {order.id} short by {remaining:,.0f}t of {order.tons:,.0f}t")

        logger.info(
            f"Greedy allocation finished: {len(run.assignments)} assignments, "
            f"{run.total_tons:,.0f}t allocated, {len(run.shortfalls)} orders short"
        )
        return run

    def _allocate_order(
        self,
        order: Order,
        tracker: ConstraintTracker,
        assignments: List[AssignmentResult],
    ) -> float:
        """Fill one order from its ranked candidates; returns unallocated tons."""
        remaining = order.tons
        candidates = self.ranked_candidates(order, tracker)

        logger.debug(f"Order {order.id}: {len(candidates)} feasible candidates")

        for candidate in candidates:
            if remaining <= 0:
                break

            # Earlier commits for this order may have drawn on the same yard or rake
            alloc = min(
                remaining,
                candidate.max_tons,
                tracker.max_commit(candidate.yard.id, candidate.rake.id, order.product),
            )
            if alloc <= 0:
                continue

            load_hours = tracker.commit(candidate.yard.id, candidate.rake.id, order.product, alloc)

            arrival = load_hours + candidate.travel_hours
            cost = self.scoring.realized_cost(order, alloc, candidate.distance_km, arrival)

            assignments.append(AssignmentResult(
                order_id=order.id,
                yard_id=candidate.yard.id,
                rake_id=candidate.rake.id,
                tons=alloc,
                distance_km=candidate.distance_km,
                eta_hour=arrival,
                cost=cost.total,
            ))

            logger.debug(
                f"  {candidate.key}: {alloc:,.0f}t, eta {arrival:.2f}h, cost {cost.total:,.2f}"
            )

            remaining -= alloc

        return remaining
