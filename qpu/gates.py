"""
qpu/gates.py
Standard single-qubit operator library.

These are data, not simulation logic: 2×2 ComplexMatrix constants plus the
angle-axis rotation constructor used by the churn circuit.
"""
__author__ = "Rahul Rajesh 2360445"

import numpy as np
from scipy.linalg import expm

from qpu.complex_matrix import ComplexMatrix

# ---------------------------------------------------------------------------
# Pauli matrices and Hadamard gate
# ---------------------------------------------------------------------------
IDENTITY: ComplexMatrix = ComplexMatrix.identity(2)
PAULI_X:  ComplexMatrix = ComplexMatrix.square([[0, 1], [1, 0]])
PAULI_Y:  ComplexMatrix = ComplexMatrix.square([[0, -1j], [1j, 0]])
PAULI_Z:  ComplexMatrix = ComplexMatrix.square([[1, 0], [0, -1]])
HADAMARD: ComplexMatrix = ComplexMatrix.square([[1, 1], [1, -1]]).times(1 / np.sqrt(2))


def from_angle_axis_phase_rotation(
    angle: float,
    axis: tuple[float, float, float],
    phase: float = 0.0,
) -> ComplexMatrix:
    """
    Rotation of the Bloch sphere by `angle` radians around a unit `axis`,
    with an optional global phase.

        U = e^{iφ} · exp(−i·angle/2 · (x·X + y·Y + z·Z))

    Args:
        angle: Rotation angle in radians.
        axis:  (x, y, z) unit vector.
        phase: Global phase φ in radians (default 0).

    Returns:
        2×2 unitary ComplexMatrix.
    """
    x, y, z = (float(v) for v in axis)
    if abs(x * x + y * y + z * z - 1.0) > 1e-6:
        raise ValueError(f"Rotation axis must be a unit vector, got {axis}")

    generator = (
        x * PAULI_X.to_array()
        + y * PAULI_Y.to_array()
        + z * PAULI_Z.to_array()
    )
    return ComplexMatrix.square(np.exp(1j * phase) * expm(-0.5j * angle * generator))
