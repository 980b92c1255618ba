"""Ensembles of independent monitored-circuit trials."""
from __future__ import annotations

import logging
import os
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from monitored_circuit.configs import CircuitConfig
from monitored_circuit.states import create_initial_state

from .brickwork import DynamicsResult, brickwork_circuit, brickwork_circuit_dynamics

logger = logging.getLogger(__name__)


@dataclass
class MonteCarloConfig:
    trials: int = 100
    seed: Optional[int] = None
    # None or 1 -> serial, -1 -> one process per CPU
    workers: Optional[int] = None

    def __post_init__(self) -> None:
        if self.trials < 1:
            raise ValueError(f"trials must be positive, got {self.trials}")


@dataclass
class TrialsResult:
    """Records stacked over trials, shape ``(trials, 2 * t_meas)``."""
    entropy: np.ndarray
    n_meas: np.ndarray
    n_det: np.ndarray
    i2: np.ndarray
    i3: Optional[np.ndarray] = None

    @property
    def trials(self) -> int:
        return self.entropy.shape[0]

    def mean_entropy(self) -> np.ndarray:
        return self.entropy.mean(axis=0)

    def mean_i2(self) -> np.ndarray:
        return self.i2.mean(axis=0)

    def deterministic_fraction(self) -> np.ndarray:
        """Fraction of deterministic outcomes per half step (NaN where nothing was measured)."""
        n_meas = self.n_meas.sum(axis=0).astype(float)
        n_det = self.n_det.sum(axis=0).astype(float)
        with np.errstate(invalid="ignore", divide="ignore"):
            return np.where(n_meas > 0, n_det / n_meas, np.nan)


def run_thermalized_dynamics(
    config: CircuitConfig, rng: Optional[np.random.Generator] = None
) -> DynamicsResult:
    """Prepare the initial state, run ``t_therm`` layers, then ``t_meas`` recorded layers."""
    rng = np.random.default_rng() if rng is None else rng
    probabilities = config.probabilities()
    state = create_initial_state(config.L, config.initial_state, rng=rng)
    if config.t_therm:
        state = brickwork_circuit(
            config.L,
            config.t_therm,
            probabilities,
            state,
            config.is_pbc,
            measure_first_qubit=config.measure_first_qubit,
            unitaries_type=config.unitaries_type,
            rng=rng,
        ).state
    return brickwork_circuit_dynamics(
        config.L,
        config.t_meas,
        probabilities,
        state,
        config.is_pbc,
        measure_first_qubit=config.measure_first_qubit,
        unitaries_type=config.unitaries_type,
        measure_i3=config.measure_i3,
        rng=rng,
    )


def _run_chunk(config: CircuitConfig, seeds: Sequence[np.random.SeedSequence]) -> List[DynamicsResult]:
    # Module level so ProcessPoolExecutor can pickle it.
    return [run_thermalized_dynamics(config, np.random.default_rng(s)) for s in seeds]


def _stack(results: Sequence[DynamicsResult], measure_i3: bool) -> TrialsResult:
    return TrialsResult(
        entropy=np.array([r.entropy_record for r in results], dtype=np.int64),
        n_meas=np.array([r.n_meas_record for r in results], dtype=np.int64),
        n_det=np.array([r.n_det_record for r in results], dtype=np.int64),
        i2=np.array([r.i2_record for r in results], dtype=np.int64),
        i3=np.array([r.i3_record for r in results], dtype=np.int64) if measure_i3 else None,
    )


def run_trials(config: CircuitConfig, mc_config: MonteCarloConfig) -> TrialsResult:
    """Run ``mc_config.trials`` independent trials of ``config``.

    Every trial draws from its own generator spawned from
    ``SeedSequence(mc_config.seed)``, so results do not depend on the number
    of workers.
    """
    seeds = np.random.SeedSequence(mc_config.seed).spawn(mc_config.trials)
    workers = mc_config.workers
    if workers == -1:
        workers = os.cpu_count()
    logger.debug(
        "running %d trials (L=%d, t_therm=%d, t_meas=%d) on %s worker(s)",
        mc_config.trials, config.L, config.t_therm, config.t_meas, workers or 1,
    )

    if workers is None or workers <= 1:
        results = _run_chunk(config, seeds)
    else:
        chunks = [seeds[i::workers] for i in range(workers)]
        with ProcessPoolExecutor(max_workers=workers) as pool:
            futures = [pool.submit(_run_chunk, config, chunk) for chunk in chunks if chunk]
            chunk_results = [f.result() for f in futures]
        # Restore trial order: chunk i holds trials i, i + workers, ...
        results = [None] * mc_config.trials
        for i, chunk in enumerate(chunk_results):
            results[i::workers] = chunk
    return _stack(results, config.measure_i3)
