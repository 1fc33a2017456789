"""Base class for Pyomo optimization models.

This module provides an abstract base class for model building, solving and
result extraction.

IMPORTANT: Models must return OptimizationResult (Pydantic validated) from
extract_solution(). This keeps the exact backend on the same output contract
as the greedy heuristic.
"""

from abc import ABC, abstractmethod
from typing import Optional, Dict, Any, TYPE_CHECKING
from dataclasses import dataclass, field
import logging
import math
import time

from pyomo.environ import ConcreteModel, Var, value
from pyomo.opt import SolverStatus, TerminationCondition
from pydantic import ValidationError

from .solver_config import SolverConfig

if TYPE_CHECKING:
    from .result_schema import OptimizationResult

logger = logging.getLogger(__name__)


@dataclass
class SolverResult:
    """
    Status of one solver invocation.

    Attributes:
        success: Whether the solver returned a usable solution
        objective_value: Objective function value
        solver_status: Pyomo solver status
        termination_condition: Pyomo termination condition
        solve_time_seconds: Time taken to solve (seconds)
        solver_name: Name of solver used
        num_variables: Number of decision variables
        num_constraints: Number of constraints
        infeasibility_message: Why the solve failed (if applicable)
        metadata: Additional result metadata
    """
    success: bool
    objective_value: Optional[float] = None
    solver_status: Optional[SolverStatus] = None
    termination_condition: Optional[TerminationCondition] = None
    solve_time_seconds: Optional[float] = None
    solver_name: Optional[str] = None
    num_variables: int = 0
    num_constraints: int = 0
    infeasibility_message: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def is_optimal(self) -> bool:
        """Check if solution is optimal."""
        return (
            self.success
            and self.termination_condition == TerminationCondition.optimal
        )

    def is_feasible(self) -> bool:
        """Check if a valid (possibly non-optimal) solution is available."""
        if not self.success:
            return False

        return self.termination_condition in [
            TerminationCondition.optimal,
            TerminationCondition.feasible,
            TerminationCondition.maxTimeLimit,
        ]

    def is_infeasible(self) -> bool:
        """Check if model is infeasible."""
        return self.termination_condition == TerminationCondition.infeasible

    def timed_out(self) -> bool:
        """Check if the solve stopped at its time limit."""
        return self.termination_condition == TerminationCondition.maxTimeLimit

    def __str__(self) -> str:
        """String representation."""
        if self.is_optimal():
            status = "OPTIMAL"
        elif self.is_feasible():
            status = "FEASIBLE"
        elif self.is_infeasible():
            status = "INFEASIBLE"
        else:
            status = f"{self.termination_condition}"

        result = f"SolverResult: {status}"
        if self.objective_value is not None:
            result += f", objective = {self.objective_value:,.2f}"
        if self.solve_time_seconds is not None:
            result += f", time = {self.solve_time_seconds:.2f}s"

        return result


class BaseOptimizationModel(ABC):
    """
    Abstract base class for Pyomo models.

    Subclasses implement:
    - build_model(): Construct the Pyomo model
    - extract_solution(): Convert the solved model into an OptimizationResult

    This base class provides:
    - Solver configuration and time limits
    - Model building and solving workflow
    - Result extraction and validation
    """

    def __init__(self, solver_config: Optional[SolverConfig] = None):
        """
        Initialize optimization model.

        Args:
            solver_config: SolverConfig instance. If None, creates default config.
        """
        self.solver_config = solver_config or SolverConfig()
        self.model: Optional[ConcreteModel] = None
        self.result: Optional[SolverResult] = None
        self.solution: Optional['OptimizationResult'] = None
        self._build_time: Optional[float] = None

    @abstractmethod
    def build_model(self) -> ConcreteModel:
        """
        Build and return the Pyomo optimization model.

        Returns:
            ConcreteModel: Pyomo model with variables, constraints, and objective
        """
        raise NotImplementedError("Subclass must implement build_model()")

    @abstractmethod
    def extract_solution(self, model: ConcreteModel) -> 'OptimizationResult':
        """
        Extract solution values from the solved model.

        Args:
            model: Solved Pyomo ConcreteModel

        Returns:
            OptimizationResult: Validated solution data (Pydantic model)

        Raises:
            ValidationError: If solution data doesn't conform to schema
        """
        raise NotImplementedError("Subclass must implement extract_solution()")

    def _solve_with_appsi_highs(
        self,
        time_limit_seconds: Optional[float],
        tee: bool = False,
    ) -> SolverResult:
        """
        Solve model using the APPSI HiGHS interface.

        Args:
            time_limit_seconds: Maximum solve time
            tee: Show solver output

        Returns:
            SolverResult
        """
        from pyomo.contrib.appsi.solvers import Highs
        from pyomo.contrib.appsi.base import TerminationCondition as AppsiTC

        solver = Highs()
        if time_limit_seconds:
            solver.config.time_limit = time_limit_seconds
        if tee:
            solver.config.stream_solver = True
        solver.config.load_solution = False

        for key, val in SolverConfig.HIGHS_LP.items():
            solver.highs_options[key] = val

        solve_start = time.time()
        results = solver.solve(self.model)
        solve_time = time.time() - solve_start

        # Map APPSI termination conditions to the legacy enum
        appsi_tc = results.termination_condition
        objective_value = getattr(results, 'best_feasible_objective', None)
        if appsi_tc == AppsiTC.optimal:
            legacy_tc = TerminationCondition.optimal
            success = True
        elif appsi_tc == AppsiTC.infeasible:
            legacy_tc = TerminationCondition.infeasible
            success = False
        elif appsi_tc == AppsiTC.unbounded:
            legacy_tc = TerminationCondition.unbounded
            success = False
        elif appsi_tc == AppsiTC.maxTimeLimit:
            legacy_tc = TerminationCondition.maxTimeLimit
            success = objective_value is not None
        else:
            legacy_tc = TerminationCondition.unknown
            success = False

        if success:
            results.solution_loader.load_vars()

        return SolverResult(
            success=success,
            objective_value=objective_value,
            termination_condition=legacy_tc,
            solve_time_seconds=solve_time,
            solver_name='appsi_highs',
            num_variables=self.model.nvariables(),
            num_constraints=self.model.nconstraints(),
            infeasibility_message=self._failure_message(legacy_tc, success),
        )

    def solve(
        self,
        solver_name: Optional[str] = None,
        solver_options: Optional[Dict[str, Any]] = None,
        tee: bool = False,
        time_limit_seconds: Optional[float] = None,
    ) -> SolverResult:
        """
        Build and solve the optimization model.

        Args:
            solver_name: Name of solver to use (None = best available)
            solver_options: Additional solver options
            tee: If True, print solver output
            time_limit_seconds: Maximum solve time in seconds (defaults to the
                solver config limit)

        Returns:
            SolverResult with solve status and objective value
        """
        build_start = time.time()
        self.model = self.build_model()
        self._build_time = time.time() - build_start

        if time_limit_seconds is None:
            time_limit_seconds = self.solver_config.time_limit_seconds

        if solver_name is None:
            try:
                solver_name = self.solver_config.get_best_available_solver()
            except RuntimeError as e:
                self.result = self._unavailable_result(str(e))
                return self.result

        if solver_name == 'appsi_highs':
            result = self._solve_with_appsi_highs(time_limit_seconds=time_limit_seconds, tee=tee)
            self.result = result
            if result.is_feasible():
                self._extract(result)
            return result

        options = dict(solver_options or {})
        options.update(SolverConfig(time_limit_seconds).time_limit_options(solver_name))

        try:
            solver = self.solver_config.create_solver(solver_name, options)
        except RuntimeError as e:
            self.result = self._unavailable_result(str(e))
            return self.result

        solve_start = time.time()
        results = solver.solve(
            self.model,
            tee=tee,
            symbolic_solver_labels=False,
            load_solutions=False,  # Load manually to handle errors better
        )
        solve_time = time.time() - solve_start

        result = self._process_results(results, solver_name, solve_time)
        self.result = result

        if result.is_feasible():
            self.model.solutions.load_from(results)
            if result.objective_value is None and hasattr(self.model, 'obj'):
                result.objective_value = value(self.model.obj, exception=False)
            if result.objective_value is None:
                # Solver reported a solution but no variable values were loaded
                result.success = False
                result.infeasibility_message = self._failure_message(result.termination_condition, False)
                return result
            self._extract(result)

        return result

    def _extract(self, result: SolverResult) -> None:
        """Run extract_solution(), failing fast on schema violations."""
        try:
            self.solution = self.extract_solution(self.model)
        except ValidationError as ve:
            # A schema violation is a bug in extract_solution(), never a solver issue
            logger.error(f"CRITICAL: Model violates OptimizationResult schema: {ve}")
            raise

        result.metadata.update(self.solution.model_dump(mode='json'))

    def _unavailable_result(self, message: str) -> SolverResult:
        return SolverResult(
            success=False,
            infeasibility_message=message,
            num_variables=self.model.nvariables() if self.model else 0,
            num_constraints=self.model.nconstraints() if self.model else 0,
        )

    @staticmethod
    def _failure_message(termination_condition, success: bool) -> Optional[str]:
        if success:
            return None
        if termination_condition == TerminationCondition.infeasible:
            return "Model is infeasible. Constraints cannot all be satisfied simultaneously."
        if termination_condition == TerminationCondition.maxTimeLimit:
            return "Solver hit the time limit without a feasible solution."
        return f"Solver failed - Termination: {termination_condition}"

    def _process_results(
        self,
        results,
        solver_name: Optional[str],
        solve_time: float
    ) -> SolverResult:
        """
        Process legacy solver results into SolverResult.

        Args:
            results: Pyomo solver results
            solver_name: Name of solver used
            solve_time: Time taken to solve

        Returns:
            SolverResult
        """
        solver_status = results.solver.status if hasattr(results, 'solver') else None
        termination_condition = results.solver.termination_condition if hasattr(results, 'solver') else None

        success = (
            solver_status in [SolverStatus.ok, SolverStatus.warning]
            and termination_condition in [
                TerminationCondition.optimal,
                TerminationCondition.feasible,
                TerminationCondition.maxTimeLimit,
            ]
        )

        # A time-limit stop is only usable if the solver kept an incumbent
        if success and termination_condition == TerminationCondition.maxTimeLimit:
            success = len(getattr(results, 'solution', ())) > 0

        # For minimization, upper_bound is the objective value
        objective_value = None
        if hasattr(results, 'problem') and hasattr(results.problem, 'upper_bound'):
            objective_value = results.problem.upper_bound
            if objective_value is not None and math.isinf(objective_value):
                objective_value = None

        return SolverResult(
            success=success,
            objective_value=objective_value,
            solver_status=solver_status,
            termination_condition=termination_condition,
            solve_time_seconds=solve_time,
            solver_name=solver_name,
            num_variables=self.model.nvariables() if self.model else 0,
            num_constraints=self.model.nconstraints() if self.model else 0,
            infeasibility_message=self._failure_message(termination_condition, success),
        )

    def get_solution(self) -> Optional['OptimizationResult']:
        """Extracted solution from the last solve (None if not solved or failed)."""
        return self.solution

    def get_model_statistics(self) -> Dict[str, Any]:
        """
        Get statistics about the model.

        Returns:
            Dictionary with model statistics
        """
        if self.model is None:
            return {
                'built': False,
                'num_variables': 0,
                'num_constraints': 0,
            }

        return {
            'built': True,
            'build_time_seconds': self._build_time,
            'num_variables': self.model.nvariables(),
            'num_constraints': self.model.nconstraints(),
            'num_continuous_vars': sum(
                1 for var in self.model.component_data_objects(Var, active=True)
                if var.is_continuous()
            ),
        }

    def reset(self):
        """Clear the built model, results, and solution."""
        self.model = None
        self.result = None
        self.solution = None
        self._build_time = None
