"""
qpu/errors.py
Error taxonomy for the dual-state simulator.

Validation failures are deterministic caller bugs: they are raised before any
state is touched and are never retried. Eigenvalue non-convergence is the one
soft failure and is surfaced as a warning only.
"""
__author__ = "Rahul Rajesh 2360445"


class QuantumSimulationError(Exception):
    """Base class for every error raised by the qpu package."""


class MatrixDimensionError(QuantumSimulationError, ValueError):
    """Operand shapes are incompatible for the requested matrix operation."""


class ConstructionError(QuantumSimulationError, ValueError):
    """Initial state is not a non-zero column with power-of-2 height."""


class OperatorError(QuantumSimulationError, ValueError):
    """Operator has the wrong size, is not unitary, or was expanded with bad indices."""


class QubitIndexError(QuantumSimulationError, IndexError):
    """Qubit index lies outside the register."""


class NumericNonConvergenceWarning(RuntimeWarning):
    """Eigenvalue extraction ran out of iterations; the result is a best estimate."""
