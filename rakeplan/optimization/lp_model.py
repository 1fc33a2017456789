"""Linear-programming formulation of rake allocation.

Decision variables:
- x[k]: tons shipped along feasible candidate k (order, yard, rake)

Constraints:
- Demand: tons shipped for an order equal the order's tons
- Inventory: tons shipped from a yard per product <= yard inventory
- Rake capacity: tons carried per rake <= wagons x capacity per wagon
- Rake hours: sum(x * hour_per_ton) over a rake <= rake available hours
- Yard hours: sum(x / loading rate) over a yard <= horizon

Objective:
- Minimize sum(x * per_ton_score), with arrival approximated by travel time
  so the coefficient stays linear

Unlike the greedy heuristic this backend never shorts demand: if the orders
cannot all be covered the model is infeasible and the solve fails.
"""

from typing import Dict, List, Optional, Tuple
from collections import defaultdict
import logging

from pyomo.environ import (
    ConcreteModel,
    Constraint,
    NonNegativeReals,
    Objective,
    Set,
    Var,
    minimize,
    value,
)
from pyomo.opt import TerminationCondition

from rakeplan.models import DataBundle, OptimizationParams
from rakeplan.network import DistanceModel
from rakeplan.costs import MetricsAggregator
from .base_model import BaseOptimizationModel, SolverResult
from .candidate_generator import Candidate, CandidateGenerator
from .constants import LP_TONS_EPSILON
from .constraint_tracker import effective_loading_rate
from .result_schema import AssignmentResult, Backend, OptimizationResult, SolverInfo
from .solver_config import SolverConfig

logger = logging.getLogger(__name__)


class RakeAllocationLP(BaseOptimizationModel):
    """
    Exact allocation model over feasible (order, yard, rake) triples.

    A triple is feasible when the yard stocks the order's product and the
    travel time fits the horizon. Orders without any feasible triple make the
    model infeasible; this is detected before the solver is called.

    Example:
        lp = RakeAllocationLP(data, params)
        result = lp.solve(time_limit_seconds=10)
        if result.is_optimal():
            plan = lp.get_solution()
    """

    def __init__(
        self,
        data: DataBundle,
        params: OptimizationParams,
        solver_config: Optional[SolverConfig] = None,
        distance_model: Optional[DistanceModel] = None,
    ):
        """
        Initialize the LP.

        Args:
            data: Planning input
            params: Optimization parameters
            solver_config: Solver configuration (default if None)
            distance_model: Optional shared distance cache
        """
        super().__init__(solver_config)
        self.data = data
        self.params = params

        generator = CandidateGenerator(data, params, distance_model=distance_model)
        self.candidates: List[Candidate] = generator.feasible_candidates()

        self._by_order: Dict[str, List[int]] = defaultdict(list)
        self._by_yard_product: Dict[Tuple[str, str], List[int]] = defaultdict(list)
        self._by_rake: Dict[str, List[int]] = defaultdict(list)
        self._by_yard: Dict[str, List[int]] = defaultdict(list)

        for k, c in enumerate(self.candidates):
            self._by_order[c.order.id].append(k)
            self._by_yard_product[(c.yard.id, c.order.product)].append(k)
            self._by_rake[c.rake.id].append(k)
            self._by_yard[c.yard.id].append(k)

        self.unservable_orders: List[str] = [
            o.id for o in data.orders if not self._by_order.get(o.id)
        ]

    def build_model(self) -> ConcreteModel:
        """Build the Pyomo model."""
        model = ConcreteModel(name="RakeAllocationLP")
        horizon = self.params.max_work_hours
        candidates = self.candidates

        model.candidates = Set(initialize=range(len(candidates)), ordered=True)
        model.orders = Set(initialize=[o.id for o in self.data.orders], ordered=True)
        model.yard_products = Set(
            initialize=[(y.id, p) for y in self.data.yards for p in self.data.products],
            dimen=2,
            ordered=True,
        )
        model.rakes = Set(initialize=[r.id for r in self.data.rakes], ordered=True)
        model.yards = Set(initialize=[y.id for y in self.data.yards], ordered=True)

        model.x = Var(
            model.candidates,
            within=NonNegativeReals,
            doc="Tons shipped along candidate (order, yard, rake)"
        )

        orders = self.data.orders_by_id
        yards = {y.id: y for y in self.data.yards}
        rakes = {r.id: r for r in self.data.rakes}

        def demand_rule(model, o):
            """Every order is fully covered."""
            ks = self._by_order.get(o)
            if not ks:
                # Reported as infeasible before the solve
                return Constraint.Skip
            return sum(model.x[k] for k in ks) == orders[o].tons

        model.demand_con = Constraint(
            model.orders,
            rule=demand_rule,
            doc="Tons shipped equal tons ordered"
        )

        def inventory_rule(model, y, p):
            ks = self._by_yard_product.get((y, p))
            if not ks:
                return Constraint.Skip
            return sum(model.x[k] for k in ks) <= yards[y].available(p)

        model.inventory_con = Constraint(
            model.yard_products,
            rule=inventory_rule,
            doc="Yard inventory per product"
        )

        def rake_capacity_rule(model, r):
            ks = self._by_rake.get(r)
            if not ks:
                return Constraint.Skip
            return sum(model.x[k] for k in ks) <= rakes[r].capacity_tons

        model.rake_capacity_con = Constraint(
            model.rakes,
            rule=rake_capacity_rule,
            doc="Rake carrying capacity"
        )

        def rake_hours_rule(model, r):
            ks = self._by_rake.get(r)
            if not ks:
                return Constraint.Skip
            return (
                sum(model.x[k] * candidates[k].hour_per_ton for k in ks)
                <= rakes[r].available_hours(horizon)
            )

        model.rake_hours_con = Constraint(
            model.rakes,
            rule=rake_hours_rule,
            doc="Rake usable hours (crew window minus downtime)"
        )

        def yard_hours_rule(model, y):
            ks = self._by_yard.get(y)
            if not ks:
                return Constraint.Skip
            rate = effective_loading_rate(yards[y].loading_rate_tph)
            return sum(model.x[k] / rate for k in ks) <= horizon

        model.yard_hours_con = Constraint(
            model.yards,
            rule=yard_hours_rule,
            doc="Yard loading hours within the horizon"
        )

        model.obj = Objective(
            expr=sum(model.x[k] * candidates[k].per_ton_score for k in model.candidates),
            sense=minimize,
        )

        logger.debug(
            f"LP built: {len(candidates)} variables over {len(self.data.orders)} orders"
        )
        return model

    def solve(
        self,
        solver_name: Optional[str] = None,
        solver_options=None,
        tee: bool = False,
        time_limit_seconds: Optional[float] = None,
    ) -> SolverResult:
        """
        Build and solve the LP.

        Infeasibility from unservable orders and the empty problem are both
        settled without calling a solver.
        """
        if self.unservable_orders:
            self.model = self.build_model()
            self.result = SolverResult(
                success=False,
                termination_condition=TerminationCondition.infeasible,
                solver_name=solver_name,
                num_variables=self.model.nvariables(),
                num_constraints=self.model.nconstraints(),
                infeasibility_message=(
                    f"Orders with no feasible (yard, rake) candidate: "
                    f"{', '.join(self.unservable_orders)}"
                ),
            )
            logger.warning(self.result.infeasibility_message)
            return self.result

        if not self.candidates:
            # No orders: the optimum is the empty plan
            self.model = self.build_model()
            self.result = SolverResult(
                success=True,
                objective_value=0.0,
                termination_condition=TerminationCondition.optimal,
                solve_time_seconds=0.0,
                solver_name=solver_name,
            )
            self._extract(self.result)
            return self.result

        return super().solve(
            solver_name=solver_name,
            solver_options=solver_options,
            tee=tee,
            time_limit_seconds=time_limit_seconds,
        )

    def extract_solution(self, model: ConcreteModel) -> OptimizationResult:
        """Rebuild assignments from x values above LP_TONS_EPSILON."""
        assignments = []

        for k in model.candidates:
            tons = value(model.x[k], exception=False)
            if tons is None or tons <= LP_TONS_EPSILON:
                continue

            c = self.candidates[k]
            eta = tons / effective_loading_rate(c.yard.loading_rate_tph) + c.travel_hours
            assignments.append(AssignmentResult(
                order_id=c.order.id,
                yard_id=c.yard.id,
                rake_id=c.rake.id,
                tons=tons,
                distance_km=c.distance_km,
                eta_hour=eta,
                cost=tons * c.per_ton_score,
            ))

        metrics = MetricsAggregator(self.data).aggregate(assignments)
        objective = value(model.obj, exception=False) if len(model.candidates) else 0.0

        solver_info = None
        if self.result is not None:
            solver_info = SolverInfo(
                solver_name=self.result.solver_name,
                termination_condition=(
                    str(self.result.termination_condition)
                    if self.result.termination_condition is not None else None
                ),
                solve_time_seconds=self.result.solve_time_seconds,
                num_variables=model.nvariables(),
                num_constraints=model.nconstraints(),
            )

        return OptimizationResult(
            backend=Backend.LP,
            assignments=assignments,
            objective=objective if objective is not None else 0.0,
            metrics=metrics,
            messages=[],
            solver=solver_info,
        )
