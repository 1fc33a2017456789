"""Tests for the rake allocation LP.

Structure and extraction are tested against a mock solver; tests marked
with the require_highs fixture solve for real and skip without HiGHS.
"""

import pytest
from pyomo.environ import value
from pyomo.opt import TerminationCondition

from rakeplan.models import OptimizationParams
from rakeplan.optimization import Backend, RakeAllocationLP
from rakeplan.validation import SolutionValidator
from tests.fixtures.planning_data import make_bundle, make_order, make_yard
from tests.fixtures.solver_mocks import create_mock_solver_config


TRAVEL_HOURS = 111 / 60


class TestModelStructure:
    """Test variables and constraints."""

    def test_scenario_b_structure(self, scenario_b_data, params):
        lp = RakeAllocationLP(scenario_b_data, params)
        model = lp.build_model()

        assert len(model.x) == 2
        assert len(model.demand_con) == 1
        assert len(model.inventory_con) == 1
        assert len(model.rake_capacity_con) == 2
        assert len(model.rake_hours_con) == 2
        assert len(model.yard_hours_con) == 1
        assert model.nconstraints() == 7

    def test_demand_row_equals_order_tons(self, scenario_b_data, params):
        model = RakeAllocationLP(scenario_b_data, params).build_model()
        con = model.demand_con["O1"]

        assert con.equality
        assert value(con.upper) == 5000.0

    def test_rake_hours_use_crew_window_minus_downtime(self, mixed_data, params):
        model = RakeAllocationLP(mixed_data, params).build_model()

        assert value(model.rake_hours_con["R1"].upper) == 72.0
        assert value(model.rake_hours_con["R2"].upper) == 42.0

    def test_rake_capacity_rows(self, mixed_data, params):
        model = RakeAllocationLP(mixed_data, params).build_model()

        assert value(model.rake_capacity_con["R3"].upper) == 58 * 63.0

    def test_inventory_rows_only_for_stocked_pairs(self, mixed_data, params):
        model = RakeAllocationLP(mixed_data, params).build_model()

        assert set(model.inventory_con.keys()) == {("Y1", "Fines"), ("Y1", "Lump"), ("Y2", "Fines"), ("Y2", "Pellets")}
        assert value(model.inventory_con["Y2", "Pellets"].upper) == 5000.0

    def test_variables_only_for_feasible_triples(self, mixed_data, params):
        lp = RakeAllocationLP(mixed_data, params)

        for candidate in lp.candidates:
            assert candidate.yard.available(candidate.order.product) > 0
            assert candidate.travel_hours <= params.max_work_hours

    def test_objective_coefficients(self, scenario_a_data, params):
        lp = RakeAllocationLP(scenario_a_data, params)
        model = lp.build_model()
        model.x[0].set_value(10.0)

        assert value(model.obj) == pytest.approx(10.0 * 0.6 * 1.8 * 111)

    def test_model_statistics(self, scenario_b_data, params):
        lp = RakeAllocationLP(scenario_b_data, params)
        assert lp.get_model_statistics()['built'] is False

        lp.model = lp.build_model()
        stats = lp.get_model_statistics()

        assert stats['num_variables'] == 2
        assert stats['num_continuous_vars'] == 2


class TestPreSolveChecks:
    """Problems settled without calling a solver."""

    def test_unservable_order_is_infeasible(self, params):
        data = make_bundle(
            orders=[make_order("O1", product="Lump")],
            products=["Fines", "Lump"],
        )
        mock_config = create_mock_solver_config()
        lp = RakeAllocationLP(data, params, solver_config=mock_config)

        result = lp.solve()

        assert lp.unservable_orders == ["O1"]
        assert result.is_infeasible()
        assert not result.success
        assert "O1" in result.infeasibility_message
        assert mock_config.solve_calls == []
        assert lp.get_solution() is None

    def test_no_orders_is_trivially_optimal(self, scenario_d_data, params):
        mock_config = create_mock_solver_config()
        lp = RakeAllocationLP(scenario_d_data, params, solver_config=mock_config)

        result = lp.solve()

        assert result.is_optimal()
        assert mock_config.solve_calls == []
        solution = lp.get_solution()
        assert solution.assignments == []
        assert solution.objective == 0.0
        assert solution.backend == Backend.LP


class TestMockSolve:
    """Extraction and solver plumbing with the mock solver."""

    def test_extracts_assignments_from_variables(self, scenario_b_data, params):
        lp = RakeAllocationLP(scenario_b_data, params, solver_config=create_mock_solver_config())

        result = lp.solve(solver_name='highs')

        assert result.is_optimal()
        solution = lp.get_solution()
        [assignment] = solution.assignments
        assert (assignment.yard_id, assignment.rake_id, assignment.tons) == ("Y1", "R1", 5000.0)
        assert assignment.eta_hour == pytest.approx(5.0 + TRAVEL_HOURS)
        assert assignment.cost == pytest.approx(5000.0 * 0.6 * 1.8 * 111)
        assert solution.objective == pytest.approx(5000.0 * 0.6 * 1.8 * 111)
        assert solution.metrics.total_tons == 5000.0
        assert solution.messages == []
        assert solution.solver.solver_name == 'highs'

    def test_validator_catches_capacity_breach(self, scenario_b_data, params):
        """The mock ignores capacity rows; the validator must notice."""
        lp = RakeAllocationLP(scenario_b_data, params, solver_config=create_mock_solver_config())
        lp.solve(solver_name='highs')

        is_valid, errors = SolutionValidator(scenario_b_data, params, lp.get_solution()).validate()

        assert not is_valid
        assert [e.category for e in errors] == ['Rake Capacity Exceeded']

    def test_time_limit_passed_to_solver(self, scenario_b_data, params):
        mock_config = create_mock_solver_config()
        lp = RakeAllocationLP(scenario_b_data, params, solver_config=mock_config)

        lp.solve(solver_name='highs', time_limit_seconds=12)

        [call] = mock_config.solve_calls
        assert call['options']['time_limit'] == 12
        assert call['load_solutions'] is False

    def test_solver_infeasible(self, scenario_b_data, params):
        mock_config = create_mock_solver_config(termination_condition=TerminationCondition.infeasible)
        lp = RakeAllocationLP(scenario_b_data, params, solver_config=mock_config)

        result = lp.solve(solver_name='highs')

        assert result.is_infeasible()
        assert not result.is_feasible()
        assert result.objective_value is None
        assert lp.get_solution() is None

    def test_time_limit_without_incumbent(self, scenario_b_data, params):
        mock_config = create_mock_solver_config(termination_condition=TerminationCondition.maxTimeLimit)
        lp = RakeAllocationLP(scenario_b_data, params, solver_config=mock_config)

        result = lp.solve(solver_name='highs')

        assert result.timed_out()
        assert not result.success
        assert not result.is_feasible()
        assert "time limit without a feasible solution" in result.infeasibility_message
        assert lp.get_solution() is None

    def test_time_limit_with_incumbent(self, scenario_b_data, params):
        mock_config = create_mock_solver_config(
            termination_condition=TerminationCondition.maxTimeLimit,
            with_incumbent=True,
        )
        lp = RakeAllocationLP(scenario_b_data, params, solver_config=mock_config)

        result = lp.solve(solver_name='highs')

        assert result.timed_out()
        assert result.is_feasible()
        assert lp.get_solution().metrics.total_tons == 5000.0

    def test_unclamped_weight_gives_negative_cost(self, scenario_b_data):
        params = OptimizationParams(service_level_weight=1.5)
        lp = RakeAllocationLP(scenario_b_data, params, solver_config=create_mock_solver_config())

        lp.solve(solver_name='highs')

        # On time, so only the (1 - w) transport term remains
        [assignment] = lp.get_solution().assignments
        assert assignment.cost == pytest.approx(5000.0 * -0.5 * 1.8 * 111)
        assert assignment.cost < 0

    def test_epsilon_suppresses_noise(self, scenario_b_data, params):
        lp = RakeAllocationLP(scenario_b_data, params)
        model = lp.build_model()
        model.x[0].set_value(5000.0)
        model.x[1].set_value(1e-6)

        solution = lp.extract_solution(model)

        assert [a.rake_id for a in solution.assignments] == ["R1"]

    def test_reset(self, scenario_b_data, params):
        lp = RakeAllocationLP(scenario_b_data, params, solver_config=create_mock_solver_config())
        lp.solve(solver_name='highs')
        lp.reset()

        assert lp.model is None
        assert lp.get_solution() is None


@pytest.mark.solver
class TestHighsSolve:
    """Real solves (skipped when HiGHS is not installed)."""

    def test_scenario_b_optimal(self, require_highs, scenario_b_data, params):
        lp = RakeAllocationLP(scenario_b_data, params)

        result = lp.solve(time_limit_seconds=10)

        assert result.is_optimal(), str(result)
        solution = lp.get_solution()
        assert solution.metrics.total_tons == pytest.approx(5000.0, rel=1e-6)
        assert solution.objective == pytest.approx(5000.0 * 0.6 * 1.8 * 111, rel=1e-6)
        is_valid, errors = SolutionValidator(scenario_b_data, params, solution).validate()
        assert is_valid, [e.message for e in errors]

    def test_scenario_a_infeasible(self, require_highs, scenario_a_data, params):
        """5,000t cannot fit a 3,480t rake: the LP reports rather than shorts."""
        result = RakeAllocationLP(scenario_a_data, params).solve(time_limit_seconds=10)

        assert not result.is_feasible()

    def test_prefers_cheaper_yard(self, require_highs, params):
        data = make_bundle(
            yards=[
                make_yard("FAR", inventory={"Fines": 10000.0}, lat=20.0, lng=86.0),
                make_yard("NEAR", inventory={"Fines": 10000.0}, lat=22.5, lng=86.0),
            ],
            orders=[make_order(tons=2000.0)],
        )
        lp = RakeAllocationLP(data, params)
        lp.solve(time_limit_seconds=10)

        assert {a.yard_id for a in lp.get_solution().assignments} == {"NEAR"}
