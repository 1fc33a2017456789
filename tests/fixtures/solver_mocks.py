"""Reusable solver mocks for LP model tests.

The mock stands in for a Pyomo solver so that the LP formulation and
solution extraction can be tested without a solver binary.
"""

from unittest.mock import Mock

from pyomo.core.expr.visitor import identify_variables
from pyomo.environ import value
from pyomo.opt import SolverStatus, TerminationCondition


def _cover_demand(pyomo_model):
    """Ship each order's full tons on the first variable of its demand row.

    Every other variable is set to 0. The result satisfies the demand rows
    but not necessarily the capacity rows.
    """
    for var in pyomo_model.x.values():
        var.set_value(0.0)

    for con in pyomo_model.demand_con.values():
        first = next(identify_variables(con.body))
        first.set_value(value(con.upper))


def create_mock_solver_config(
    termination_condition=TerminationCondition.optimal,
    solver_status=SolverStatus.ok,
    time_limit_seconds=30.0,
    with_incumbent=False,
):
    """
    Create a mock SolverConfig that bypasses solver detection.

    Args:
        termination_condition: Termination the mock solver reports
        solver_status: Status the mock solver reports
        time_limit_seconds: Time limit exposed by the config
        with_incumbent: For a maxTimeLimit termination, whether the solver
            stopped holding a feasible point

    Returns:
        Mock SolverConfig object with create_solver() method
    """
    mock_config = Mock()
    mock_config.time_limit_seconds = time_limit_seconds
    mock_config.get_best_available_solver = Mock(return_value='highs')
    mock_config.solve_calls = []

    def mock_create_solver(solver_name=None, options=None):
        """Create a mock solver for the rake allocation LP."""
        mock_solver = Mock()
        mock_solver.options = dict(options or {})

        def mock_solve(pyomo_model, **kwargs):
            mock_config.solve_calls.append({'options': mock_solver.options, **kwargs})

            feasible = termination_condition in (
                TerminationCondition.optimal,
                TerminationCondition.feasible,
            ) or (with_incumbent and termination_condition == TerminationCondition.maxTimeLimit)
            if feasible and hasattr(pyomo_model, 'demand_con'):
                _cover_demand(pyomo_model)

            mock_results = Mock()
            mock_results.solver.status = solver_status
            mock_results.solver.termination_condition = termination_condition
            mock_results.solution = [Mock()] if feasible else []

            # Set problem bounds to avoid Mock type errors
            mock_problem = Mock()
            mock_problem.upper_bound = value(pyomo_model.obj) if feasible else float('inf')
            mock_problem.lower_bound = mock_problem.upper_bound
            mock_results.problem = mock_problem

            # Values are already on the variables
            def mock_load_from(results):
                pass

            pyomo_model.solutions.load_from = mock_load_from

            return mock_results

        mock_solver.solve = mock_solve
        return mock_solver

    mock_config.create_solver = mock_create_solver
    return mock_config

