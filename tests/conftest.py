"""Pytest configuration and shared fixtures."""

import pytest

from rakeplan.models import OptimizationParams
from tests.fixtures.planning_data import (
    mixed_network,
    scenario_a,
    scenario_b,
    scenario_c,
    scenario_d,
)
from tests.fixtures.solver_mocks import create_mock_solver_config


@pytest.fixture
def params():
    """Default optimization parameters."""
    return OptimizationParams()


@pytest.fixture
def scenario_a_data():
    """Rake-capacity-bound single order."""
    return scenario_a()


@pytest.fixture
def scenario_b_data():
    """Single order split across two identical rakes."""
    return scenario_b()


@pytest.fixture
def scenario_c_data():
    """Order due at hour 0 (always late)."""
    return scenario_c()


@pytest.fixture
def scenario_d_data():
    """Empty order book."""
    return scenario_d()


@pytest.fixture
def mixed_data():
    """Multi-yard, multi-rake network with more demand than fleet capacity."""
    return mixed_network()


@pytest.fixture
def mock_solver_config():
    """Fixture providing mock solver config for LP tests without a solver binary."""
    return create_mock_solver_config()


def highs_available() -> bool:
    """True when Pyomo can run HiGHS in this environment."""
    from rakeplan.optimization import SolverConfig
    return SolverConfig.is_available('appsi_highs') or SolverConfig.is_available('highs')


@pytest.fixture
def require_highs():
    """Skip the test when no HiGHS interface is installed."""
    if not highs_available():
        pytest.skip("HiGHS solver not available - install with: pip install highspy")
