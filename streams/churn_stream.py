"""
streams/churn_stream.py
Demo gate sequence ("churn") and an async generator that runs it step by step,
emitting a StateReport after each step.

The driver owns the loop: the simulator never calls back into a renderer, the
consumer reads each yielded report instead.

Usage:
    sim = DualStateSimulator.with_random_initial_state(4)
    async for report in churn_stream(sim, steps=50):
        print(format_report(report))
"""
__author__ = "Rahul Rajesh 2360445"

import asyncio
from collections.abc import AsyncIterator

import numpy as np

from config.logging_config import get_logger
from config.simulation_config import CONSTANTS
from qpu.gates import HADAMARD, PAULI_X, from_angle_axis_phase_rotation
from qpu.report import StateReport, summarize
from qpu.simulator import DualStateSimulator, RandomSource

log = get_logger("qpu.driver")

MIN_QUBITS: int = 4


class ChurnCircuit:
    """
    Precomputed operators and the per-step routine of the demo circuit.

    Each step:
      1. Measure q0; invert the reading with probability `flip_probability`.
      2. If the (possibly inverted) reading is on: small Y rotation on q1, then X on q0.
      3. H on q0, X rotation on q2 controlled by q1, CNOT q2 → q3,
         confounding X rotation on q3.
      4. Measure q3; if on, X on q3 to clear it.
    """

    def __init__(
        self,
        simulator: DualStateSimulator,
        rng: RandomSource | None = None,
        flip_probability: float = CONSTANTS['flip_probability'],
    ) -> None:
        if simulator.num_qubits < MIN_QUBITS:
            raise ValueError(
                f"Churn circuit needs at least {MIN_QUBITS} qubits, got {simulator.num_qubits}"
            )
        self.simulator = simulator
        self.flip_probability: float = flip_probability
        self._rng: RandomSource = rng if rng is not None else np.random.default_rng()

        # Pre-compute matrices for operations.
        sim = simulator
        self.x0 = sim.expand_operation(PAULI_X, 0)
        self.x3 = sim.expand_operation(PAULI_X, 3)
        self.h0 = sim.expand_operation(HADAMARD, 0)
        self.cnot_2_onto_3 = sim.expand_operation(PAULI_X, 3, [2])
        self.small_y_rot_1 = sim.expand_operation(
            from_angle_axis_phase_rotation(np.pi / 3, (0, 1, 0)), 1)
        self.small_x_rot_2_when_1 = sim.expand_operation(
            from_angle_axis_phase_rotation(np.pi / 4, (1, 0, 0)), 2, [1])
        self.confounding_x3 = sim.expand_operation(
            from_angle_axis_phase_rotation(np.pi / 2 + 0.4, (1, 0, 0)), 3)

    def step(self) -> None:
        sim = self.simulator

        generated_entropy = sim.measure_qubit(0)
        if self._rng.random() < self.flip_probability:
            generated_entropy = not generated_entropy  # mix it up some more
        if generated_entropy:
            sim.apply_operation(self.small_y_rot_1)
            sim.apply_operation(self.x0)
        sim.apply_operation(self.h0)

        sim.apply_operation(self.small_x_rot_2_when_1)
        sim.apply_operation(self.cnot_2_onto_3)
        sim.apply_operation(self.confounding_x3)
        if sim.measure_qubit(3):
            sim.apply_operation(self.x3)  # clear


async def churn_stream(
    simulator: DualStateSimulator,
    steps:     int | None = None,
    period:    float = CONSTANTS['default_period'],
    circuit:   ChurnCircuit | None = None,
) -> AsyncIterator[StateReport]:
    """
    Async generator yielding the initial StateReport, then one per churn step.

    Args:
        simulator: Register to drive (at least 4 qubits unless `circuit` is given).
        steps:     Number of steps to run; None runs until the consumer stops.
        period:    Seconds to sleep between steps.
        circuit:   Pre-built ChurnCircuit (default: one built for `simulator`).
    """
    circuit = circuit if circuit is not None else ChurnCircuit(simulator)

    log.info(
        f"Churn stream started | qubits={simulator.num_qubits} | "
        f"steps={'unbounded' if steps is None else steps} | period={period:.3f}s"
    )

    yield summarize(simulator)

    done: int = 0
    while steps is None or done < steps:
        circuit.step()
        done += 1
        report = summarize(simulator)
        log.debug(
            f"Step {done} | ops={report.operation_count} | "
            f"trace_distance={report.trace_distance:.4f} | entropy={report.entropy_bits:.3f}"
        )
        yield report

        if steps is not None and done == steps:
            break
        # Yield control to the event loop so consumers can run between steps
        await asyncio.sleep(period)
