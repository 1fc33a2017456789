"""Allocation backends for rake planning.

Two interchangeable backends produce the same OptimizationResult:
GreedyAllocator (earliest-due-date heuristic over a ConstraintTracker) and
RakeAllocationLP (exact Pyomo linear program). ``optimize()`` dispatches
between them by Backend tag.
"""

from .result_schema import (
    Backend,
    AssignmentResult,
    PlanMetrics,
    SolverInfo,
    OptimizationResult,
)
from .constraint_tracker import ConstraintTracker
from .scoring import ScoringFunction, CostComponents
from .candidate_generator import Candidate, CandidateGenerator
from .greedy_allocator import GreedyAllocator, AllocationRun
from .solver_config import SolverConfig
from .base_model import BaseOptimizationModel, SolverResult
from .lp_model import RakeAllocationLP
from .backends import (
    SolverFailedError,
    optimize,
    run_greedy,
    run_lp,
)

__all__ = [
    # Result contract
    "Backend",
    "AssignmentResult",
    "PlanMetrics",
    "SolverInfo",
    "OptimizationResult",
    # Greedy heuristic
    "ConstraintTracker",
    "ScoringFunction",
    "CostComponents",
    "Candidate",
    "CandidateGenerator",
    "GreedyAllocator",
    "AllocationRun",
    # LP backend
    "SolverConfig",
    "BaseOptimizationModel",
    "SolverResult",
    "RakeAllocationLP",
    # Dispatch
    "SolverFailedError",
    "optimize",
    "run_greedy",
    "run_lp",
]
