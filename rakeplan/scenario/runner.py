"""Scenario runner for side-by-side "what-if" planning.

One DataBundle is planned under several named parameter sets and the results
are compared against the first (baseline) scenario. Every run goes through
``optimize()`` and so owns a fresh ConstraintTracker; runs never share
capacity state. Scenarios and results live in memory only.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Dict, List, Union
import logging
import time
import uuid

import pandas as pd

from rakeplan.models import DataBundle, OptimizationParams
from rakeplan.optimization import Backend, OptimizationResult, SolverFailedError, optimize

logger = logging.getLogger(__name__)


@dataclass
class Scenario:
    """A named parameter set to plan under.

    Attributes:
        id: Unique identifier (UUID)
        name: User-provided name (unique within a runner)
        params: Optimization parameters
        backend: Backend to plan with
        fallback_to_greedy: Use the heuristic if the LP backend fails
        description: Optional user notes
        created_at: Creation timestamp
    """
    id: str
    name: str
    params: OptimizationParams
    backend: Backend = Backend.GREEDY
    fallback_to_greedy: bool = False
    description: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now)


@dataclass
class ScenarioRun:
    """Outcome of planning one scenario."""
    scenario: Scenario
    result: Optional[OptimizationResult] = None
    planning_time_seconds: float = 0.0
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.result is not None


class ScenarioRunner:
    """Plans one DataBundle under several scenarios.

    Example:
        runner = ScenarioRunner(data)
        runner.add_scenario("baseline", OptimizationParams())
        runner.add_scenario("service", OptimizationParams(service_level_weight=0.9))
        runner.run_all()
        print(runner.compare())
    """

    #: Metrics compared across scenarios (column -> unit label)
    COMPARED_METRICS = {
        'total_tons': 't',
        'total_cost': '$',
        'objective': '$',
        'avg_eta': 'h',
        'on_time_pct': '%',
        'rake_utilization_pct': '%',
        'unfulfilled_orders': 'orders',
    }

    def __init__(self, data: DataBundle):
        self.data = data
        self.scenarios: Dict[str, Scenario] = {}
        self.runs: Dict[str, ScenarioRun] = {}

    def add_scenario(
        self,
        name: str,
        params: OptimizationParams,
        backend: Union[Backend, str] = Backend.GREEDY,
        fallback_to_greedy: bool = False,
        description: Optional[str] = None,
    ) -> Scenario:
        """Register a scenario.

        Raises:
            ValueError: If the name is already used
        """
        if name in self.scenarios:
            raise ValueError(f"Scenario '{name}' already exists")

        scenario = Scenario(
            id=str(uuid.uuid4()),
            name=name,
            params=params,
            backend=Backend(backend),
            fallback_to_greedy=fallback_to_greedy,
            description=description,
        )
        self.scenarios[name] = scenario
        return scenario

    def run(self, name: str) -> ScenarioRun:
        """Plan one scenario.

        An LP failure without fallback is recorded on the run rather than
        raised, so the remaining scenarios still run.
        """
        scenario = self.scenarios[name]
        logger.info(f"Running scenario '{name}' ({scenario.backend.value})")

        start = time.time()
        try:
            result = optimize(
                self.data,
                scenario.params,
                backend=scenario.backend,
                fallback_to_greedy=scenario.fallback_to_greedy,
            )
            run = ScenarioRun(scenario=scenario, result=result)
        except SolverFailedError as e:
            logger.warning(f"Scenario '{name}' failed: {e}")
            run = ScenarioRun(scenario=scenario, error=str(e))
        run.planning_time_seconds = time.time() - start

        self.runs[name] = run
        return run

    def run_all(self) -> Dict[str, ScenarioRun]:
        """Plan every scenario in registration order."""
        for name in self.scenarios:
            self.run(name)
        return dict(self.runs)

    def _row(self, run: ScenarioRun) -> Dict:
        row = {
            'scenario': run.scenario.name,
            'backend': run.scenario.backend.value,
            'service_level_weight': run.scenario.params.service_level_weight,
            'status': 'ok' if run.succeeded else 'failed',
            'planning_time_seconds': run.planning_time_seconds,
        }
        if run.succeeded:
            result = run.result
            metrics = result.metrics
            row.update({
                'total_tons': metrics.total_tons,
                'total_cost': metrics.total_cost,
                'objective': result.objective,
                'avg_eta': metrics.avg_eta,
                'on_time_pct': metrics.on_time_pct,
                'rake_utilization_pct': metrics.rake_utilization_pct,
                'unfulfilled_orders': sum(1 for m in result.messages if m.startswith("Unfulfilled:")),
            })
        else:
            row.update({metric: float('nan') for metric in self.COMPARED_METRICS})
        return row

    def compare(self, names: Optional[List[str]] = None) -> pd.DataFrame:
        """Compare scenarios side-by-side.

        Args:
            names: Scenarios to compare, baseline first (default: all that
                have been run, in registration order)

        Returns:
            DataFrame with one row per scenario and, when two or more
            scenarios are compared, ``<metric>_delta`` columns against the
            baseline (0 for the baseline row)
        """
        if names is None:
            names = [n for n in self.scenarios if n in self.runs]

        missing = [n for n in names if n not in self.runs]
        if missing:
            raise KeyError(f"Scenarios not run yet: {', '.join(missing)}")

        df = pd.DataFrame([self._row(self.runs[n]) for n in names])

        if len(names) >= 2:
            for metric in self.COMPARED_METRICS:
                df[f'{metric}_delta'] = df[metric] - df[metric].iloc[0]

        return df
