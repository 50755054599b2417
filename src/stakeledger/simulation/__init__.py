"""Scenario replay and Monte Carlo runs."""

from .monte_carlo import MonteCarloRunner, summarize
from .runner import (
    Environment,
    LedgerSnapshot,
    ScenarioRunner,
    SimulationResult,
    apply_action,
    build_environment,
)

__all__ = [
    "ScenarioRunner",
    "SimulationResult",
    "LedgerSnapshot",
    "Environment",
    "build_environment",
    "apply_action",
    "MonteCarloRunner",
    "summarize",
]
