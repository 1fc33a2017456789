"""Candidate enumeration for order allocation.

This module enumerates (order, yard, rake) pairings and their static per-ton
coefficients. Static coefficients (distance, travel time, time consumption)
are computed once per run; only the remaining-capacity dependent feasibility
and the ``max_tons`` ceiling are re-derived each time an order is evaluated.
"""

from typing import List, Dict, Optional
from dataclasses import dataclass, replace
import logging

from rakeplan.models import DataBundle, Order, Yard, Rake, OptimizationParams
from rakeplan.network import DistanceModel
from .constants import MIN_SPEED_KMPH
from .constraint_tracker import ConstraintTracker, effective_loading_rate
from .scoring import ScoringFunction

logger = logging.getLogger(__name__)


def effective_speed(max_speed_kmph: float) -> float:
    """Rake speed with the MIN_SPEED_KMPH floor applied."""
    return max(MIN_SPEED_KMPH, max_speed_kmph)


@dataclass(frozen=True)
class Candidate:
    """
    A hypothetical (order, yard, rake) pairing.

    Attributes:
        index: Position in input iteration order (yard-major, rake-minor)
        order: Order being served
        yard: Supplying yard
        rake: Carrying rake
        distance_km: Planning distance yard -> customer (whole km, >= 1)
        travel_hours: distance / max(30, rake speed)
        hour_per_ton: Linearized time per ton: loading plus travel amortized
            over the rake capacity (used by the LP rake-hours constraint)
        per_ton_score: Blended per-ton cost, travel time as arrival estimate
        max_tons: Ceiling from order, yard inventory and rake capacity at
            evaluation time (order tons for static candidates)
    """
    index: int
    order: Order
    yard: Yard
    rake: Rake
    distance_km: int
    travel_hours: float
    hour_per_ton: float
    per_ton_score: float
    max_tons: float

    @property
    def key(self) -> str:
        return f"{self.order.id}_{self.yard.id}_{self.rake.id}"

    def __str__(self) -> str:
        return (
            f"Candidate {self.key}: {self.distance_km}km, {self.travel_hours:.2f}h, "
            f"score={self.per_ton_score:.2f}/t, max={self.max_tons:,.0f}t"
        )


class CandidateGenerator:
    """
    Enumerates feasible candidates for an order.

    A candidate is feasible when the yard still holds the order's product,
    the rake still has capacity, and travel time fits in the horizon.
    Candidate generation only reads the tracker; it never commits.

    Example:
        generator = CandidateGenerator(data, params)
        tracker = ConstraintTracker.from_data(data, params.max_work_hours)
        for candidate in generator.candidates_for(order, tracker):
            print(candidate)
    """

    def __init__(
        self,
        data: DataBundle,
        params: OptimizationParams,
        distance_model: Optional[DistanceModel] = None,
        scoring: Optional[ScoringFunction] = None,
    ):
        """
        Initialize the generator and precompute static coefficients.

        Args:
            data: Planning input
            params: Optimization parameters
            distance_model: Distance lookup (created if None)
            scoring: Scoring function (created from params if None)
        """
        self.data = data
        self.params = params
        self.distance_model = distance_model or DistanceModel()
        self.scoring = scoring or ScoringFunction(params)

        self._static: Dict[str, List[Candidate]] = {}
        self._build_index()

    def _build_index(self) -> None:
        """Compute distance, travel time and time coefficients for every triple."""
        customers = self.data.customers_by_id

        for order in self.data.orders:
            customer = customers[order.customer_id]
            entries = []
            index = 0

            for yard in self.data.yards:
                distance = self.distance_model.between(yard, customer)
                load_hours_per_ton = 1.0 / effective_loading_rate(yard.loading_rate_tph)

                for rake in self.data.rakes:
                    travel_hours = distance / effective_speed(rake.max_speed_kmph)
                    hour_per_ton = load_hours_per_ton + travel_hours / max(1.0, rake.capacity_tons)

                    entries.append(Candidate(
                        index=index,
                        order=order,
                        yard=yard,
                        rake=rake,
                        distance_km=distance,
                        travel_hours=travel_hours,
                        hour_per_ton=hour_per_ton,
                        per_ton_score=self.scoring.per_ton_score(order, distance, travel_hours),
                        max_tons=order.tons,
                    ))
                    index += 1

            self._static[order.id] = entries

        logger.debug(
            f"Candidate index built: {sum(len(v) for v in self._static.values())} triples "
            f"for {len(self._static)} orders"
        )

    def static_candidates(self, order: Order) -> List[Candidate]:
        """All (yard, rake) pairings for an order, ignoring capacity state."""
        return list(self._static.get(order.id, []))

    def within_horizon(self, candidate: Candidate) -> bool:
        return candidate.travel_hours <= self.params.max_work_hours

    def feasible_candidates(self) -> List[Candidate]:
        """
        Capacity-independent feasible triples for every order.

        A triple qualifies when the yard stocks the order's product and the
        travel time fits in the horizon. Used by the LP formulation, which has
        no allocation state.

        Returns:
            Candidates in order input order, then yard-major, rake-minor
        """
        result = []
        for order in self.data.orders:
            for candidate in self._static.get(order.id, []):
                if candidate.yard.available(order.product) <= 0:
                    continue
                if not self.within_horizon(candidate):
                    continue
                result.append(candidate)
        return result

    def candidates_for(
        self,
        order: Order,
        tracker: ConstraintTracker,
        remaining_tons: Optional[float] = None,
    ) -> List[Candidate]:
        """
        Feasible candidates for an order against the current tracker state.

        Args:
            order: Order to serve
            tracker: Allocation state (read only)
            remaining_tons: Tons still to allocate (defaults to order tons)

        Returns:
            Candidates in input iteration order, each with a positive max_tons
        """
        remaining = order.tons if remaining_tons is None else remaining_tons
        result = []

        for candidate in self._static.get(order.id, []):
            available_inventory = tracker.remaining_inventory(candidate.yard.id, order.product)
            if available_inventory <= 0:
                continue

            capacity_left = tracker.remaining_rake_capacity(candidate.rake.id)
            if capacity_left <= 0:
                continue

            if not self.within_horizon(candidate):
                continue

            max_tons = min(remaining, available_inventory, capacity_left)
            if max_tons <= 0:
                continue

            result.append(replace(candidate, max_tons=max_tons))

        return result
