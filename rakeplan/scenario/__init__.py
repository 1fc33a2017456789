"""What-if scenario comparison."""

from .runner import Scenario, ScenarioRun, ScenarioRunner

__all__ = ["Scenario", "ScenarioRun", "ScenarioRunner"]
