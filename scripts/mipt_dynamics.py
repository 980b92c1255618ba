"""CLI entry point for thermalize-then-measure monitored brickwork runs."""
from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path

import numpy as np

# Ensure the src/ directory is available for imports when executed as a script
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from monitored_circuit import STATE_TYPES, CircuitConfig
from simulation import MonteCarloConfig, run_trials


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--L", type=int, default=32, help="Number of qubits in the chain")
    parser.add_argument("--p", type=float, default=0.14, help="Measurement probability per qubit and sublayer")
    parser.add_argument("--t-therm", type=int, default=None, help="Thermalization layers (default: 4L)")
    parser.add_argument("--t-meas", type=int, default=None, help="Recorded layers (default: 4L)")
    parser.add_argument("--init", type=str, default="product_rand", choices=STATE_TYPES, help="Initial state")
    parser.add_argument("--unitaries", type=str, default="cliffords", choices=("cliffords", "dual_unitaries"))
    parser.add_argument("--obc", action="store_true", help="Open instead of periodic boundaries")
    parser.add_argument("--skip-first-qubit", action="store_true", help="Never measure qubit 0 (reference qubit)")
    parser.add_argument("--i3", action="store_true", help="Also record the tripartite information")
    parser.add_argument("--trials", type=int, default=10, help="Number of independent trials")
    parser.add_argument("--workers", type=int, default=None, help="Worker processes (-1: one per CPU)")
    parser.add_argument("--seed", type=int, default=46, help="Seed for the trial generators")
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Optional JSON file for the averaged records",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args()


def run_experiment(args: argparse.Namespace):
    config = CircuitConfig(
        L=args.L,
        p=args.p,
        is_pbc=not args.obc,
        initial_state=args.init,
        unitaries_type=args.unitaries,
        measure_first_qubit=not args.skip_first_qubit,
        t_therm=args.t_therm if args.t_therm is not None else 4 * args.L,
        t_meas=args.t_meas if args.t_meas is not None else 4 * args.L,
        measure_i3=args.i3,
    )
    mc_config = MonteCarloConfig(trials=args.trials, seed=args.seed, workers=args.workers)
    result = run_trials(config, mc_config)

    print(f"L={config.L}, p={args.p}, pbc={config.is_pbc}, unitaries={config.unitaries_type}")
    print(f"trials={result.trials}, t_therm={config.t_therm}, t_meas={config.t_meas}")
    entropy = result.mean_entropy()
    i2 = result.mean_i2()
    det = result.deterministic_fraction()
    print("half-step   S_half     I2   det_frac")
    for k in range(len(entropy)):
        print(f"{k + 1:9d} {entropy[k]:8.3f} {i2[k]:6.3f} {det[k]:10.3f}")
    if result.i3 is not None:
        print(f"time-averaged I3 = {result.i3.mean():.3f}")
    print(f"late-time S_half = {entropy[len(entropy) // 2:].mean():.3f}")
    if args.output is not None:
        payload = {
            "config": asdict(config),
            "trials": result.trials,
            "seed": args.seed,
            "mean_entropy": entropy.tolist(),
            "mean_i2": i2.tolist(),
            "deterministic_fraction": [None if np.isnan(x) else float(x) for x in det],
        }
        if result.i3 is not None:
            payload["mean_i3"] = result.i3.mean(axis=0).tolist()
        args.output.parent.mkdir(parents=True, exist_ok=True)
        with args.output.open("w") as fh:
            json.dump(payload, fh, indent=2)
        print(f"Wrote {args.output}")
    return result


def main() -> None:
    args = parse_args()
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")
    run_experiment(args)


if __name__ == "__main__":
    main()
