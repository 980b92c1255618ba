"""Simulation entry points for monitored brickwork circuits."""

from .brickwork import (
    CircuitResult,
    DynamicsResult,
    brickwork_circuit,
    brickwork_circuit_dynamics,
    build_bonds,
    replay_brickwork_circuit,
)
from .montecarlo import (
    MonteCarloConfig,
    TrialsResult,
    run_thermalized_dynamics,
    run_trials,
)

__all__ = [
    "CircuitResult",
    "DynamicsResult",
    "brickwork_circuit",
    "brickwork_circuit_dynamics",
    "build_bonds",
    "replay_brickwork_circuit",
    "MonteCarloConfig",
    "TrialsResult",
    "run_thermalized_dynamics",
    "run_trials",
]
