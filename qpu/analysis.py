"""
qpu/analysis.py
Comparisons between the true and inferred states.

  - partial_trace:        2×2 marginal of one qubit
  - bloch_vector:         (x, y, z) Pauli expectations of a qubit density matrix
  - trace_distance:       ½ Σ |λ(ρ − σ)|
  - qubit_trace_distance: ‖b(ρ) − b(σ)‖ / 2
  - entropy:              Σ −p log₂ p over eigenvalue magnitudes (bits)
"""
__author__ = "Rahul Rajesh 2360445"

from collections.abc import Iterable

import numpy as np
from numpy.typing import NDArray

from config.simulation_config import CONSTANTS
from qpu.complex_matrix import ComplexMatrix
from qpu.errors import MatrixDimensionError, QubitIndexError
from qpu.gates import PAULI_X, PAULI_Y, PAULI_Z


def partial_trace(density: ComplexMatrix, qubit_index: int) -> ComplexMatrix:
    """
    Reduce a 2ⁿ×2ⁿ density matrix to the 2×2 marginal of `qubit_index`.

    Entry (a, b) sums ρ[r, c] over every basis pair that agrees on all bits
    except `qubit_index`, where r has that bit = a and c has it = b.
    """
    dim = density.height
    if not density.is_square or dim < 2 or dim & (dim - 1):
        raise MatrixDimensionError(
            f"partial_trace needs a square power-of-2 matrix, got {density.shape}"
        )
    num_qubits = dim.bit_length() - 1
    if not 0 <= qubit_index < num_qubits:
        raise QubitIndexError(f"Qubit {qubit_index} outside register of {num_qubits} qubits")

    rho = density.to_array()
    idx: NDArray[np.int_] = np.arange(dim)
    rest: NDArray[np.int_] = idx[((idx >> qubit_index) & 1) == 0]
    branch: tuple[NDArray[np.int_], NDArray[np.int_]] = (rest, rest | (1 << qubit_index))

    reduced = np.empty((2, 2), dtype=np.complex128)
    for a in range(2):
        for b in range(2):
            reduced[a, b] = np.sum(rho[branch[a], branch[b]])
    return ComplexMatrix(reduced)


def bloch_vector(qubit_density: ComplexMatrix) -> tuple[float, float, float]:
    """
    Bloch-sphere coordinates (Tr ρX, Tr ρY, Tr ρZ) of a single-qubit density matrix.
    Pure states land on the unit sphere, mixed states inside it.
    """
    if qubit_density.shape != (2, 2):
        raise MatrixDimensionError(
            f"bloch_vector needs a 2x2 density matrix, got {qubit_density.shape}"
        )
    x = qubit_density.times(PAULI_X).trace().real
    y = qubit_density.times(PAULI_Y).trace().real
    z = qubit_density.times(PAULI_Z).trace().real
    return float(x), float(y), float(z)


def trace_distance(
    d1: ComplexMatrix,
    d2: ComplexMatrix,
    tolerance: float = CONSTANTS['eigen_tolerance'],
    max_iterations: int = CONSTANTS['eigen_max_iterations'],
) -> float:
    """½ · Σ |eigenvalues of (d1 − d2)|."""
    diff = d1.minus(d2)
    return float(np.sum(diff.eigenvalue_magnitudes(tolerance, max_iterations)) / 2.0)


def qubit_trace_distance(d1: ComplexMatrix, d2: ComplexMatrix) -> float:
    """Half the Euclidean distance between the Bloch vectors of two qubit states."""
    b1 = np.array(bloch_vector(d1))
    b2 = np.array(bloch_vector(d2))
    return float(np.linalg.norm(b2 - b1) / 2.0)


def entropy(eigenvalue_magnitudes: Iterable[float]) -> float:
    """
    Von Neumann entropy in bits from a density matrix spectrum.
    Non-positive entries contribute 0.
    """
    total = 0.0
    for p in eigenvalue_magnitudes:
        p = float(p)
        if p > 0:
            total -= p * np.log2(p)
    return float(total)


def von_neumann_entropy(
    density: ComplexMatrix,
    tolerance: float = CONSTANTS['eigen_tolerance'],
    max_iterations: int = CONSTANTS['eigen_max_iterations'],
) -> float:
    """S(ρ) = −Tr(ρ log₂ ρ). Returns 0 for a pure state, n for the n-qubit mixed state."""
    return entropy(density.eigenvalue_magnitudes(tolerance, max_iterations))
