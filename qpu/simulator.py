"""
qpu/simulator.py
Dual-state quantum register simulator.

Tracks the same register from two perspectives in lockstep:
  - the true state: a hidden pure state vector |ψ⟩ (unit norm)
  - the inferred state: the observer's density matrix ρ (Hermitian, trace 1),
    which starts maximally mixed and only ever sees the applied operators and
    the classical measurement outcomes

Unitary evolution:  |ψ⟩ → U|ψ⟩,  ρ → U ρ U†
Measurement:        outcome sampled from |ψ⟩ (Born rule), then both
                    representations are post-selected onto the outcome and
                    renormalised.
"""
__author__ = "Rahul Rajesh 2360445"

from collections.abc import Iterable
from dataclasses import dataclass, replace
from typing import Protocol

import numpy as np
from numpy.typing import ArrayLike, NDArray

from config.logging_config import get_logger
from config.simulation_config import CONSTANTS
from qpu.complex_matrix import ComplexMatrix
from qpu.errors import ConstructionError, MatrixDimensionError, OperatorError, QubitIndexError
from qpu.expansion import expand_operation

log = get_logger("qpu.simulation")


class RandomSource(Protocol):
    """Anything with a random() method returning a uniform float in [0, 1)."""

    def random(self) -> float: ...


@dataclass
class SimulatorCounters:
    """
    Diagnostic counters mutated only by the simulator.

    Attributes:
        operation_count:    Successful apply + measure calls.
        misprediction_score: Running Σ |predicted − actual| on-probability,
                             one term per measurement.
    """
    operation_count:    int   = 0
    misprediction_score: float = 0.0


def _is_power_of_2(n: int) -> bool:
    return n >= 1 and (n & (n - 1)) == 0


def _bit_is_set(dim: int, qubit_index: int) -> NDArray[np.bool_]:
    """Boolean mask over basis indices 0..dim-1: True where `qubit_index` is on."""
    return ((np.arange(dim) >> qubit_index) & 1) == 1


def _normalize_column(col: NDArray[np.complex128]) -> NDArray[np.complex128]:
    return col / np.linalg.norm(col)


def _random_column(num_qubits: int, rng: RandomSource) -> NDArray[np.complex128]:
    """Amplitudes with real and imaginary parts uniform in [−0.5, 0.5)."""
    dim = 1 << num_qubits
    parts = np.array([rng.random() - 0.5 for _ in range(2 * dim)], dtype=np.float64)
    return (parts[0::2] + 1j * parts[1::2]).reshape(-1, 1)


class DualStateSimulator:
    """
    Hidden true state plus the observer's inferred density matrix.

    Provides:
      - Construction from an explicit column vector or a random state
      - Operator expansion for this register size
      - Unitary evolution of both representations
      - Measurement with post-selection collapse and misprediction tracking
      - Read-only accessors for the reporting layer
    """

    def __init__(
        self,
        initial_state: ComplexMatrix | ArrayLike,
        rng: RandomSource | None = None,
        unitary_tolerance: float = CONSTANTS['unitary_tolerance'],
        collapse_epsilon: float = CONSTANTS['collapse_epsilon'],
    ) -> None:
        """
        Args:
            initial_state:     Column vector (width 1, power-of-2 height). Array-likes
                               are converted; a flat sequence is read as a column.
            rng:               Random source for measurement sampling
                               (default: numpy.random.default_rng()).
            unitary_tolerance: Frobenius bound used by apply_operation.
            collapse_epsilon:  Post-selected mass at or below which a collapse
                               falls back to the uniform consistent state.
        """
        column = self._coerce_column(initial_state)

        if column.width != 1 or not _is_power_of_2(column.height):
            raise ConstructionError(
                "Initial state must be a column matrix with power-of-2 height, "
                f"got shape {column.shape}"
            )
        amplitudes = column.to_array()
        norm = float(np.linalg.norm(amplitudes))
        if norm == 0.0 or not np.isfinite(norm):
            raise ConstructionError(f"Initial state must have a finite non-zero norm, got {norm}")

        dim: int = column.height
        self._rng: RandomSource = rng if rng is not None else np.random.default_rng()
        self._unitary_tolerance: float = unitary_tolerance
        self._collapse_epsilon: float = collapse_epsilon

        self._state: NDArray[np.complex128] = amplitudes / norm
        self._density: NDArray[np.complex128] = np.eye(dim, dtype=np.complex128) / dim
        self._counters = SimulatorCounters()

        log.info(f"Simulator ready | qubits={self.num_qubits} | dim={dim}")

    @staticmethod
    def _coerce_column(initial_state: ComplexMatrix | ArrayLike) -> ComplexMatrix:
        if isinstance(initial_state, ComplexMatrix):
            return initial_state
        arr = np.asarray(initial_state, dtype=np.complex128)
        if arr.ndim == 1:
            arr = arr.reshape(-1, 1)
        try:
            return ComplexMatrix(arr)
        except MatrixDimensionError as exc:
            raise ConstructionError(f"Initial state is not a matrix: {exc}") from exc

    @classmethod
    def with_initial_state(
        cls,
        column: ComplexMatrix | ArrayLike,
        rng: RandomSource | None = None,
    ) -> "DualStateSimulator":
        """Start from the given state vector, without revealing it to the observer."""
        return cls(column, rng=rng)

    @classmethod
    def with_random_initial_state(
        cls,
        num_qubits: int,
        rng: RandomSource | None = None,
    ) -> "DualStateSimulator":
        """Start from a random state, unknown to the observer."""
        if num_qubits < 1:
            raise ConstructionError(f"Register needs at least one qubit, got {num_qubits}")
        source: RandomSource = rng if rng is not None else np.random.default_rng()
        return cls(_random_column(num_qubits, source), rng=source)

    # ------------------------------------------------------------------
    # Read-only accessors
    # ------------------------------------------------------------------

    @property
    def dimension(self) -> int:
        return int(self._state.shape[0])

    @property
    def num_qubits(self) -> int:
        return self.dimension.bit_length() - 1

    @property
    def true_state(self) -> ComplexMatrix:
        return ComplexMatrix(self._state)

    @property
    def inferred_density(self) -> ComplexMatrix:
        return ComplexMatrix(self._density)

    @property
    def actual_density(self) -> ComplexMatrix:
        """|ψ⟩⟨ψ| of the true state."""
        return ComplexMatrix(self._state @ self._state.conj().T)

    @property
    def operation_count(self) -> int:
        return self._counters.operation_count

    @property
    def misprediction_score(self) -> float:
        return self._counters.misprediction_score

    @property
    def counters(self) -> SimulatorCounters:
        return replace(self._counters)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def expand_operation(
        self,
        single_qubit_op: ComplexMatrix,
        target_qubit: int,
        control_qubits: Iterable[int] = (),
    ) -> ComplexMatrix:
        """Full-register operator for this simulator's qubit count."""
        return expand_operation(single_qubit_op, target_qubit, self.num_qubits, control_qubits)

    def apply_operation(self, op: ComplexMatrix) -> None:
        """
        Apply a unitary to both representations:  |ψ⟩ → U|ψ⟩,  ρ → U ρ U†.

        Raises:
            OperatorError: `op` is not a square ComplexMatrix of the register's
                           dimension, or fails the unitarity check.
        """
        if not isinstance(op, ComplexMatrix):
            raise OperatorError(f"Operation must be a ComplexMatrix, got {type(op).__name__}")
        if op.shape != (self.dimension, self.dimension):
            raise OperatorError(
                f"Operation must be {self.dimension}x{self.dimension}, got {op.shape}"
            )
        if not op.is_unitary(self._unitary_tolerance):
            raise OperatorError(
                f"Operation must be unitary within tolerance {self._unitary_tolerance:g}"
            )

        u = op.to_array()
        self._state = u @ self._state
        self._density = u @ self._density @ u.conj().T
        self._counters.operation_count += 1

    def measure_qubit(self, qubit_index: int) -> bool:
        """
        Measure one qubit of the true state and collapse both representations.

        Draws exactly one sample from the random source. The gap between the
        observer's predicted on-probability and the true one is added to the
        misprediction score before collapsing.

        Args:
            qubit_index: Qubit to measure (bit position in the basis index).

        Returns:
            True if the qubit was found on.
        """
        if not 0 <= qubit_index < self.num_qubits:
            raise QubitIndexError(
                f"Qubit {qubit_index} outside register of {self.num_qubits} qubits"
            )

        on: NDArray[np.bool_] = _bit_is_set(self.dimension, qubit_index)

        actual_on: float = float(np.sum(np.abs(self._state[on, 0]) ** 2))
        predicted_on: float = float(np.sum(np.real(np.diag(self._density))[on]))

        result: bool = bool(self._rng.random() < actual_on)
        self._counters.misprediction_score += abs(predicted_on - actual_on)

        keep: NDArray[np.bool_] = on if result else ~on
        self._state = self._postselect_column(keep)
        self._density = self._postselect_density(keep)
        self._counters.operation_count += 1

        log.debug(
            f"Measured q{qubit_index} -> {int(result)} | actual_on={actual_on:.4f} | "
            f"predicted_on={predicted_on:.4f}"
        )
        return result

    # ------------------------------------------------------------------
    # Post-selection
    # ------------------------------------------------------------------

    def _postselect_column(self, keep: NDArray[np.bool_]) -> NDArray[np.complex128]:
        col = np.where(keep[:, None], self._state, 0)
        mass = float(np.sum(np.abs(col) ** 2))
        if mass > self._collapse_epsilon:
            return col / np.sqrt(mass)

        log.warning("True state post-selected onto an empty subspace; using uniform state")
        return _normalize_column(keep.astype(np.complex128).reshape(-1, 1))

    def _postselect_density(self, keep: NDArray[np.bool_]) -> NDArray[np.complex128]:
        rho = np.where(keep[:, None] & keep[None, :], self._density, 0)
        mass = float(np.real(np.trace(rho)))
        if mass > self._collapse_epsilon:
            return rho / mass

        log.warning("Inferred density post-selected onto an empty subspace; using projector")
        projector = np.diag(keep.astype(np.complex128))
        return projector / np.real(np.trace(projector))
