"""Allocation backends and dispatch.

Both backends take the same DataBundle and OptimizationParams and return the
same OptimizationResult shape. The dispatcher selects one by Backend tag:

- Backend.GREEDY: earliest-due-date heuristic; always completes, shortfalls
  are reported as messages
- Backend.LP: exact Pyomo model; raises SolverFailedError when the solver
  cannot prove an optimal plan within its time limit

A failed LP solve is only replaced by the heuristic when the caller asks for
it with ``fallback_to_greedy=True``, and the result then records the fallback.
"""

from typing import Callable, Dict, Optional, Union
import logging

from rakeplan.models import DataBundle, OptimizationParams
from rakeplan.costs import MetricsAggregator
from rakeplan.utils.version import format_error_with_version
from .base_model import SolverResult
from .greedy_allocator import GreedyAllocator
from .lp_model import RakeAllocationLP
from .result_schema import Backend, OptimizationResult
from .solver_config import SolverConfig

logger = logging.getLogger(__name__)


class SolverFailedError(RuntimeError):
    """The LP backend could not produce a feasible plan.

    Attributes:
        result: Solver status of the failed solve
    """

    def __init__(self, message: str, result: SolverResult):
        super().__init__(message)
        self.result = result


def run_greedy(
    data: DataBundle,
    params: OptimizationParams,
    *,
    should_cancel: Optional[Callable[[], bool]] = None,
    **_solver_options,
) -> OptimizationResult:
    """Allocate with the greedy heuristic.

    Solver options are accepted so both backends share a call signature; the
    heuristic ignores them.
    """
    run = GreedyAllocator(data, params).allocate(should_cancel=should_cancel)

    aggregator = MetricsAggregator(data)
    metrics = aggregator.aggregate(run.assignments)
    objective = aggregator.objective(metrics, params)

    logger.info(
        f"Greedy result: {metrics.total_tons:,.0f}t of {data.total_demand_tons:,.0f}t, "
        f"objective {objective:,.2f}, on-time {metrics.on_time_pct:.1f}%"
    )

    return OptimizationResult(
        backend=Backend.GREEDY,
        assignments=run.assignments,
        objective=objective,
        metrics=metrics,
        messages=run.messages,
    )


def run_lp(
    data: DataBundle,
    params: OptimizationParams,
    *,
    solver_name: Optional[str] = None,
    time_limit_seconds: Optional[float] = None,
    should_cancel: Optional[Callable[[], bool]] = None,
) -> OptimizationResult:
    """Allocate with the exact LP.

    Raises:
        SolverFailedError: If the model is infeasible, the solve hits its
            time limit, or no solver is installed
    """
    config = SolverConfig(time_limit_seconds) if time_limit_seconds is not None else SolverConfig()
    lp = RakeAllocationLP(data, params, solver_config=config)

    logger.info(
        f"LP solve started: {len(lp.candidates)} candidate triples, "
        f"time limit {config.time_limit_seconds:.0f}s"
    )
    result = lp.solve(solver_name=solver_name)
    solution = lp.get_solution()

    if not result.is_feasible() or solution is None:
        raise SolverFailedError(result.infeasibility_message or str(result), result)

    if result.timed_out():
        raise SolverFailedError(
            f"LP solve hit the {config.time_limit_seconds:g}s time limit before proving optimality",
            result,
        )

    logger.info(
        f"LP result: {solution.metrics.total_tons:,.0f}t, {len(solution.assignments)} assignments, {result}"
    )
    return solution


#: Backend tag -> runner
BACKENDS: Dict[Backend, Callable[..., OptimizationResult]] = {
    Backend.GREEDY: run_greedy,
    Backend.LP: run_lp,
}


def optimize(
    data: DataBundle,
    params: OptimizationParams,
    backend: Union[Backend, str] = Backend.GREEDY,
    *,
    solver_name: Optional[str] = None,
    time_limit_seconds: Optional[float] = None,
    fallback_to_greedy: bool = False,
    should_cancel: Optional[Callable[[], bool]] = None,
) -> OptimizationResult:
    """
    Run one allocation with the selected backend.

    Args:
        data: Planning input
        params: Optimization parameters
        backend: Backend tag ("greedy" or "lp")
        solver_name: LP solver to use (None = best available)
        time_limit_seconds: LP solve time limit
        fallback_to_greedy: On LP failure, return the heuristic plan instead
            of raising. The result carries ``fallback_from="lp"`` and a
            leading message naming the failure.
        should_cancel: Cooperative cancellation check for the heuristic

    Returns:
        OptimizationResult

    Raises:
        ValueError: Unknown backend tag
        SolverFailedError: LP failure without fallback
    """
    backend = Backend(backend)
    runner = BACKENDS[backend]

    try:
        return runner(
            data,
            params,
            solver_name=solver_name,
            time_limit_seconds=time_limit_seconds,
            should_cancel=should_cancel,
        )
    except SolverFailedError as e:
        logger.error(format_error_with_version(f"{backend.value} backend failed: {e}"))
        if not fallback_to_greedy:
            raise
        failure = str(e)

    logger.warning(f"Falling back from {backend.value} to the greedy heuristic")
    result = run_greedy(data, params, should_cancel=should_cancel)

    return result.model_copy(update={
        'fallback_from': backend,
        'messages': [f"LP backend failed ({failure}); using greedy heuristic"] + result.messages,
    })
