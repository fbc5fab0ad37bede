"""
qpu/report.py
Snapshot summaries of a DualStateSimulator.

Computes every figure a viewer of the simulation needs (per-qubit Bloch
vectors for both perspectives, full trace distance, remaining entropy,
eigenvalue spectrum, counters) and renders them as deterministic text.
Drawing is left to whoever consumes the StateReport.
"""
__author__ = "Rahul Rajesh 2360445"

from dataclasses import dataclass

from config.simulation_config import CONSTANTS
from qpu.analysis import (
    bloch_vector,
    entropy,
    partial_trace,
    qubit_trace_distance,
    trace_distance,
)
from qpu.simulator import DualStateSimulator


@dataclass(frozen=True)
class QubitReport:
    """
    Marginal view of one qubit.

    Attributes:
        index:          Qubit index.
        actual_bloch:   Bloch vector of the true state's marginal.
        inferred_bloch: Bloch vector of the inferred density's marginal.
        distance:       qubit_trace_distance between the two marginals.
    """
    index:          int
    actual_bloch:   tuple[float, float, float]
    inferred_bloch: tuple[float, float, float]
    distance:       float


@dataclass(frozen=True)
class StateReport:
    """
    Structured output of summarize().

    Attributes:
        operation_count:     Operations applied so far.
        misprediction_score: Accumulated |predicted − actual| on-probability.
        entropy_bits:        Von Neumann entropy of the inferred density.
        trace_distance:      Trace distance between inferred and actual density.
        spectrum:            Eigenvalue magnitudes of the inferred density.
        qubits:              One QubitReport per qubit, in index order.
    """
    operation_count:     int
    misprediction_score: float
    entropy_bits:        float
    trace_distance:      float
    spectrum:            tuple[float, ...]
    qubits:              tuple[QubitReport, ...]

    def as_row(self) -> dict[str, float]:
        """Flatten the scalar fields into one table row (one distance column per qubit)."""
        row: dict[str, float] = {
            "operation_count":     self.operation_count,
            "misprediction_score": self.misprediction_score,
            "entropy_bits":        self.entropy_bits,
            "trace_distance":      self.trace_distance,
        }
        for q in self.qubits:
            row[f"qubit_{q.index}_distance"] = q.distance
        return row


def summarize(
    simulator: DualStateSimulator,
    tolerance: float = CONSTANTS['eigen_tolerance'],
    max_iterations: int = CONSTANTS['eigen_max_iterations'],
) -> StateReport:
    """Compute a StateReport from the simulator's read-only accessors."""
    actual = simulator.actual_density
    inferred = simulator.inferred_density

    qubits: list[QubitReport] = []
    for k in range(simulator.num_qubits):
        actual_bit = partial_trace(actual, k)
        inferred_bit = partial_trace(inferred, k)
        qubits.append(QubitReport(
            index=k,
            actual_bloch=bloch_vector(actual_bit),
            inferred_bloch=bloch_vector(inferred_bit),
            distance=qubit_trace_distance(actual_bit, inferred_bit),
        ))

    spectrum = inferred.eigenvalue_magnitudes(tolerance, max_iterations)

    return StateReport(
        operation_count=simulator.operation_count,
        misprediction_score=simulator.misprediction_score,
        entropy_bits=entropy(spectrum),
        trace_distance=trace_distance(inferred, actual, tolerance, max_iterations),
        spectrum=tuple(float(p) for p in spectrum),
        qubits=tuple(qubits),
    )


def format_report(report: StateReport) -> str:
    """
    Render a StateReport as multi-line text.

    Returns:
        One line per headline figure followed by one line per qubit.
    """
    lines: list[str] = [
        f"Remaining Entropy: {report.entropy_bits:.2f} bits",
        f"Trace Distance: {report.trace_distance * 100:.1f}%",
        f"Operations Applied: {report.operation_count}",
        f"Accumulated Misprediction: {report.misprediction_score:.2f}",
    ]
    for q in report.qubits:
        lines.append(f"  qubit {q.index}: distance {q.distance:.4f}")
    return "\n".join(lines)
