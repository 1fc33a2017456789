"""Rake allocation planner.

Assigns order tonnage to yard inventory and rake capacity, minimizing a blend
of transport cost and tardiness. Two interchangeable backends share one
result contract: a greedy earliest-due-date heuristic and an exact LP.

Example:
    from rakeplan import DataBundle, OptimizationParams, optimize

    result = optimize(data, OptimizationParams(), backend="greedy")
    print(result.to_dataframe(data))
"""

__version__ = "0.1.0"

from .models import Yard, Rake, Customer, Order, DataBundle, OptimizationParams
from .network import DistanceModel
from .optimization import (
    Backend,
    AssignmentResult,
    PlanMetrics,
    OptimizationResult,
    GreedyAllocator,
    RakeAllocationLP,
    SolverFailedError,
    optimize,
)
from .costs import MetricsAggregator
from .validation import DataValidator, SolutionValidator
from .scenario import ScenarioRunner

__all__ = [
    "__version__",
    "Yard",
    "Rake",
    "Customer",
    "Order",
    "DataBundle",
    "OptimizationParams",
    "DistanceModel",
    "Backend",
    "AssignmentResult",
    "PlanMetrics",
    "OptimizationResult",
    "GreedyAllocator",
    "RakeAllocationLP",
    "SolverFailedError",
    "optimize",
    "MetricsAggregator",
    "DataValidator",
    "SolutionValidator",
    "ScenarioRunner",
]
