"""
run_simulation.py
Headless runner for the churn demo.

Builds a random hidden register, drives the churn circuit for a number of
steps, logs each report and optionally saves the run history as CSV.

Usage:
    python run_simulation.py --qubits 4 --steps 50 --seed 7 --csv Results/churn.csv
"""
__author__ = "Rahul Rajesh 2360445"

import argparse
import asyncio
import os
import sys

# Ensure project root is on sys.path regardless of launch location
_PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))
if _PROJECT_ROOT not in sys.path:
    sys.path.insert(0, _PROJECT_ROOT)

import numpy as np

from config.logging_config import configure_logging, get_logger
from qpu.report import format_report
from qpu.simulator import DualStateSimulator
from streams.churn_stream import MIN_QUBITS, ChurnCircuit, churn_stream
from streams.report_buffer import ReportBuffer

log = get_logger("qpu.driver")


async def run(
    num_qubits: int,
    steps:      int,
    period:     float,
    seed:       int | None,
) -> ReportBuffer:
    """Drive the churn circuit and collect every report in a ReportBuffer."""
    rng = np.random.default_rng(seed)
    simulator = DualStateSimulator.with_random_initial_state(num_qubits, rng=rng)
    circuit = ChurnCircuit(simulator, rng=rng)
    history = ReportBuffer(maxlen=steps + 1)

    async for report in churn_stream(simulator, steps=steps, period=period, circuit=circuit):
        history.push(report)
        log.info("\n" + format_report(report))

    return history


def main() -> None:
    parser = argparse.ArgumentParser(description="Eve QPU churn simulation")
    parser.add_argument("--qubits", type=int, default=MIN_QUBITS)
    parser.add_argument("--steps",  type=int, default=50)
    parser.add_argument("--period", type=float, default=0.0,
                        help="Seconds to wait between steps")
    parser.add_argument("--seed",   type=int, default=None)
    parser.add_argument("--csv",    default=None,
                        help="Write the report history to this CSV file")
    args = parser.parse_args()

    configure_logging()
    log.info(f"--- Churn run | qubits={args.qubits} | steps={args.steps} | seed={args.seed} ---")

    history = asyncio.run(run(args.qubits, args.steps, args.period, args.seed))

    if args.csv:
        out_dir = os.path.dirname(args.csv)
        if out_dir:
            os.makedirs(out_dir, exist_ok=True)
        df = history.to_frame()
        df.to_csv(args.csv, index=False)
        log.info(f"Saved {len(df)} reports to {args.csv}")


if __name__ == "__main__":
    main()
