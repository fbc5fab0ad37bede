"""
qpu/expansion.py
Expansion of a single-qubit operator into a full-register operator.

Qubits are folded from index 0 upwards as `factor ⊗ accumulated`, so qubit k
ends up on bit k of the basis index (little-endian, see complex_matrix).
Controls are applied afterwards by forcing every entry whose row or column
does not have all control bits set to the identity value.
"""
__author__ = "Rahul Rajesh 2360445"

from collections.abc import Iterable

import numpy as np
from numpy.typing import NDArray

from config.logging_config import get_logger
from qpu.complex_matrix import ComplexMatrix
from qpu.errors import OperatorError
from qpu.gates import IDENTITY

log = get_logger("qpu.simulation")


def control_mask(control_qubits: Iterable[int]) -> int:
    """Bit mask with a 1 at every control qubit position."""
    mask = 0
    for q in control_qubits:
        mask |= 1 << q
    return mask


def controlify(matrix: ComplexMatrix, mask: int) -> ComplexMatrix:
    """
    Make `matrix` act as the identity on basis states whose `mask` bits are not
    all set: entry (r, c) becomes (1 if r == c else 0) unless both r and c
    contain every bit of `mask`.
    """
    if mask == 0:
        return matrix

    idx: NDArray[np.int_] = np.arange(matrix.height)
    active: NDArray[np.bool_] = (idx & mask) == mask
    keep: NDArray[np.bool_] = active[:, None] & active[None, :]

    out = np.where(keep, matrix.to_array(), np.eye(matrix.height, dtype=np.complex128))
    return ComplexMatrix(out)


def expand_operation(
    single_qubit_op: ComplexMatrix,
    target_qubit: int,
    num_qubits: int,
    control_qubits: Iterable[int] = (),
) -> ComplexMatrix:
    """
    Build the 2ⁿ×2ⁿ operator applying `single_qubit_op` to `target_qubit`,
    optionally conditioned on every qubit in `control_qubits` being on.

    Args:
        single_qubit_op: 2×2 operator (normally unitary; not re-checked here).
        target_qubit:    Index of the qubit the operator acts on.
        num_qubits:      Register size n.
        control_qubits:  Possibly-empty collection of control qubit indices.

    Returns:
        Full-register ComplexMatrix.
    """
    controls: tuple[int, ...] = tuple(int(q) for q in control_qubits)

    if single_qubit_op.shape != (2, 2):
        raise OperatorError(
            f"Single-qubit operator must be 2x2, got {single_qubit_op.shape}"
        )
    if num_qubits < 1:
        raise OperatorError(f"Register needs at least one qubit, got {num_qubits}")
    if not 0 <= target_qubit < num_qubits:
        raise OperatorError(
            f"Target qubit {target_qubit} outside register of {num_qubits} qubits"
        )
    for q in controls:
        if not 0 <= q < num_qubits:
            raise OperatorError(f"Control qubit {q} outside register of {num_qubits} qubits")
        if q == target_qubit:
            raise OperatorError(f"Qubit {q} cannot be both target and control")

    op = ComplexMatrix.identity(1)
    for i in range(num_qubits):
        factor = single_qubit_op if i == target_qubit else IDENTITY
        op = factor.tensor_product(op)

    expanded = controlify(op, control_mask(controls))
    log.debug(
        f"Expanded operator | target={target_qubit} | controls={list(controls)} | "
        f"dim={expanded.height}"
    )
    return expanded
