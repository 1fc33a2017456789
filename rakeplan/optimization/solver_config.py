"""Solver configuration and detection for the LP backend."""

from typing import Any, Dict, List, Optional
import logging

from pyomo.opt import SolverFactory

from .constants import DEFAULT_SOLVER_TIME_LIMIT_SECONDS

logger = logging.getLogger(__name__)


class SolverConfig:
    """Solver preference, detection and time limits.

    The LP backend always runs with a bounded time limit; a solve that hits it
    is reported as a failure.

    Example:
        config = SolverConfig(time_limit_seconds=10)
        solver_name = config.get_best_available_solver()
        solver = config.create_solver(solver_name)
    """

    #: Solvers tried in order when none is named
    PREFERENCE = ['appsi_highs', 'highs', 'cbc', 'glpk']

    #: HiGHS LP settings
    HIGHS_LP = {
        'presolve': 'on',
        'parallel': 'off',
    }

    def __init__(
        self,
        time_limit_seconds: float = DEFAULT_SOLVER_TIME_LIMIT_SECONDS,
        preference: Optional[List[str]] = None,
    ):
        self.time_limit_seconds = time_limit_seconds
        self.preference = list(preference or self.PREFERENCE)
        self._available: Optional[List[str]] = None

    @staticmethod
    def is_available(solver_name: str) -> bool:
        """Check whether Pyomo can run a solver in this environment."""
        if solver_name == 'appsi_highs':
            try:
                from pyomo.contrib.appsi.solvers import Highs
            except ImportError:
                return False
            return bool(Highs().available())

        try:
            solver = SolverFactory(solver_name)
            return bool(solver is not None and solver.available(exception_flag=False))
        except Exception as e:
            # Plugin lookup errors vary by solver and Pyomo version
            logger.debug(f"Solver {solver_name} unavailable: {e}")
            return False

    def get_available_solvers(self) -> List[str]:
        """Available solvers in preference order (cached)."""
        if self._available is None:
            self._available = [name for name in self.preference if self.is_available(name)]
            logger.debug(f"Available solvers: {self._available}")
        return list(self._available)

    def get_best_available_solver(self) -> str:
        """
        First available solver in preference order.

        Raises:
            RuntimeError: If no solver is available
        """
        available = self.get_available_solvers()
        if not available:
            raise RuntimeError(
                f"No LP solver available (tried {', '.join(self.preference)}). "
                f"Install HiGHS with: pip install highspy"
            )
        return available[0]

    def time_limit_options(self, solver_name: str) -> Dict[str, Any]:
        """Solver-specific option names for the time limit."""
        if solver_name in ('highs', 'appsi_highs'):
            return {'time_limit': self.time_limit_seconds}
        if solver_name == 'cbc':
            return {'seconds': self.time_limit_seconds}
        if solver_name == 'glpk':
            return {'tmlim': int(max(1, self.time_limit_seconds))}
        return {}

    def create_solver(self, solver_name: Optional[str] = None, options: Optional[Dict[str, Any]] = None):
        """
        Create a legacy-interface Pyomo solver with time limit applied.

        Args:
            solver_name: Solver to create (None = best available)
            options: Extra solver options

        Returns:
            Pyomo solver instance

        Raises:
            RuntimeError: If the solver is not available
        """
        name = solver_name or self.get_best_available_solver()
        if name == 'appsi_highs':
            name = 'highs'

        solver = SolverFactory(name)
        if solver is None or not solver.available(exception_flag=False):
            raise RuntimeError(f"Solver '{name}' is not available")

        solver_options = {}
        if name == 'highs':
            solver_options.update(self.HIGHS_LP)
        solver_options.update(self.time_limit_options(name))
        solver_options.update(options or {})

        for key, val in solver_options.items():
            solver.options[key] = val

        return solver
