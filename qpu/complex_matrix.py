"""
qpu/complex_matrix.py
Dense complex matrix type backing every state and operator in the simulator.

A ComplexMatrix wraps a read-only 2-D numpy complex128 array (row-major).
All operations are pure and return new matrices; shape mismatches raise
MatrixDimensionError.

Bit-ordering convention (used by expansion, measurement and partial trace):
  - Little-endian: qubit k is bit k of a basis index (qubit 0 = LSB).
  - A.tensor_product(B) is the Kronecker product A ⊗ B, so A occupies the
    more significant bits of the combined index.
"""
__author__ = "Rahul Rajesh 2360445"

import numbers
import warnings

import numpy as np
from numpy.typing import ArrayLike, NDArray

from config.logging_config import get_logger
from config.simulation_config import CONSTANTS
from qpu.errors import MatrixDimensionError, NumericNonConvergenceWarning

log = get_logger("qpu.analysis")

# Jacobi rotations skip off-diagonal entries smaller than this
_NEGLIGIBLE: float = 1e-15


class ComplexMatrix:
    """
    Immutable rectangular matrix of complex numbers addressed by (row, column).

    A matrix of width 1 is a column state vector; a square matrix is an
    operator, an outer product or a density matrix.
    """

    __slots__ = ("_data",)

    def __init__(self, data: "ArrayLike | ComplexMatrix") -> None:
        if isinstance(data, ComplexMatrix):
            data = data._data
        arr: NDArray[np.complex128] = np.array(data, dtype=np.complex128)
        if arr.ndim != 2:
            raise MatrixDimensionError(
                f"ComplexMatrix needs 2-D data, got {arr.ndim}-D with shape {arr.shape}"
            )
        if arr.shape[0] == 0 or arr.shape[1] == 0:
            raise MatrixDimensionError(f"ComplexMatrix cannot be empty, got shape {arr.shape}")
        arr.flags.writeable = False
        self._data: NDArray[np.complex128] = arr

    @classmethod
    def _wrap(cls, arr: NDArray[np.complex128]) -> "ComplexMatrix":
        """Adopt a freshly computed array without copying it."""
        m = cls.__new__(cls)
        arr.flags.writeable = False
        m._data = arr
        return m

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def identity(cls, size: int) -> "ComplexMatrix":
        return cls._wrap(np.eye(size, dtype=np.complex128))

    @classmethod
    def zero(cls, height: int, width: int) -> "ComplexMatrix":
        return cls._wrap(np.zeros((height, width), dtype=np.complex128))

    @classmethod
    def column(cls, values: ArrayLike) -> "ComplexMatrix":
        """Build a column vector (width 1) from a flat sequence of amplitudes."""
        return cls(np.asarray(values, dtype=np.complex128).reshape(-1, 1))

    @classmethod
    def from_rows(cls, rows: ArrayLike) -> "ComplexMatrix":
        return cls(rows)

    @classmethod
    def square(cls, rows: ArrayLike) -> "ComplexMatrix":
        """Build an operator from rows, rejecting anything that is not n×n."""
        m = cls(rows)
        if not m.is_square:
            raise MatrixDimensionError(f"square needs an n x n matrix, got shape {m.shape}")
        return m

    # ------------------------------------------------------------------
    # Shape and element access
    # ------------------------------------------------------------------

    @property
    def height(self) -> int:
        return int(self._data.shape[0])

    @property
    def width(self) -> int:
        return int(self._data.shape[1])

    @property
    def shape(self) -> tuple[int, int]:
        return self.height, self.width

    @property
    def is_square(self) -> bool:
        return self.height == self.width

    def __getitem__(self, key: tuple[int, int]) -> complex:
        row, col = key
        return complex(self._data[row, col])

    def to_array(self) -> NDArray[np.complex128]:
        """Return a writable copy of the underlying array."""
        return self._data.copy()

    # ------------------------------------------------------------------
    # Arithmetic
    # ------------------------------------------------------------------

    def _require_same_shape(self, other: "ComplexMatrix", op: str) -> None:
        if self.shape != other.shape:
            raise MatrixDimensionError(
                f"{op} needs identical dimensions, got {self.shape} and {other.shape}"
            )

    def plus(self, other: "ComplexMatrix") -> "ComplexMatrix":
        self._require_same_shape(other, "plus")
        return ComplexMatrix._wrap(self._data + other._data)

    def minus(self, other: "ComplexMatrix") -> "ComplexMatrix":
        self._require_same_shape(other, "minus")
        return ComplexMatrix._wrap(self._data - other._data)

    def times(self, other: "ComplexMatrix | complex") -> "ComplexMatrix":
        """
        Matrix product when `other` is a ComplexMatrix, uniform scaling when it
        is a (possibly complex) scalar.
        """
        if isinstance(other, ComplexMatrix):
            if self.width != other.height:
                raise MatrixDimensionError(
                    f"times needs left width == right height, got {self.shape} and {other.shape}"
                )
            return ComplexMatrix._wrap(self._data @ other._data)
        if isinstance(other, numbers.Number):
            return ComplexMatrix._wrap(self._data * complex(other))
        raise TypeError(f"Cannot multiply ComplexMatrix by {type(other).__name__}")

    def adjoint(self) -> "ComplexMatrix":
        """Conjugate transpose."""
        return ComplexMatrix._wrap(self._data.conj().T.copy())

    def trace(self) -> complex:
        if not self.is_square:
            raise MatrixDimensionError(f"trace needs a square matrix, got {self.shape}")
        return complex(np.trace(self._data))

    def tensor_product(self, other: "ComplexMatrix") -> "ComplexMatrix":
        """Kronecker product self ⊗ other; `self` is the more significant factor."""
        return ComplexMatrix._wrap(np.kron(self._data, other._data))

    def norm(self) -> float:
        """Frobenius norm (the 2-norm for a column vector)."""
        return float(np.linalg.norm(self._data))

    __add__ = plus
    __sub__ = minus
    __matmul__ = times

    def __mul__(self, scalar: complex) -> "ComplexMatrix":
        if not isinstance(scalar, numbers.Number):
            return NotImplemented
        return self.times(scalar)

    __rmul__ = __mul__

    # ------------------------------------------------------------------
    # Predicates
    # ------------------------------------------------------------------

    def is_approximately_equal(self, other: "ComplexMatrix", tolerance: float) -> bool:
        """True when shapes match and the Frobenius norm of the difference is ≤ tolerance."""
        if self.shape != other.shape:
            return False
        return float(np.linalg.norm(self._data - other._data)) <= tolerance

    def is_unitary(self, tolerance: float = CONSTANTS['unitary_tolerance']) -> bool:
        """
        True iff the matrix is square and ‖A·A† − I‖_F ≤ tolerance.
        The bound is on the Frobenius norm of the whole deviation, not per entry.
        """
        if not self.is_square:
            return False
        deviation = self._data @ self._data.conj().T - np.eye(self.height)
        return float(np.linalg.norm(deviation)) <= tolerance

    def is_hermitian(self, tolerance: float = CONSTANTS['eigen_tolerance']) -> bool:
        if not self.is_square:
            return False
        return float(np.linalg.norm(self._data - self._data.conj().T)) <= tolerance

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ComplexMatrix):
            return NotImplemented
        return self.shape == other.shape and bool(np.array_equal(self._data, other._data))

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        body = np.array2string(self._data, precision=4, suppress_small=True)
        return f"ComplexMatrix({self.height}x{self.width}, {body})"

    # ------------------------------------------------------------------
    # Spectrum
    # ------------------------------------------------------------------

    def eigenvalue_magnitudes(
        self,
        tolerance: float = CONSTANTS['eigen_tolerance'],
        max_iterations: int = CONSTANTS['eigen_max_iterations'],
    ) -> NDArray[np.float64]:
        """
        Magnitudes of the eigenvalues of a Hermitian matrix, sorted descending.

        Runs cyclic Jacobi sweeps on the real symmetric embedding
        [[Re, −Im], [Im, Re]], whose spectrum is the spectrum of the matrix
        with every eigenvalue doubled. One iteration is one full sweep.

        Args:
            tolerance:      Off-diagonal Frobenius norm at which iteration stops.
                            Also the bound used to check the input is Hermitian.
            max_iterations: Sweep budget. Exhausting it emits a
                            NumericNonConvergenceWarning and returns the current
                            estimate.

        Returns:
            1-D float array of length `height`.
        """
        if not self.is_square:
            raise MatrixDimensionError(
                f"eigenvalue_magnitudes needs a square matrix, got {self.shape}"
            )
        if not self.is_hermitian(tolerance):
            raise MatrixDimensionError("eigenvalue_magnitudes needs a Hermitian matrix")

        herm = (self._data + self._data.conj().T) / 2.0
        re, im = herm.real, herm.imag
        embedded: NDArray[np.float64] = np.block([[re, -im], [im, re]])

        eigs, converged = _jacobi_eigenvalues(embedded, tolerance, int(max_iterations))
        if not converged:
            log.warning(
                f"Jacobi eigenvalues did not converge | dim={self.height} | "
                f"sweeps={max_iterations} | tolerance={tolerance:g}"
            )
            warnings.warn(
                f"eigenvalue extraction stopped after {max_iterations} sweeps "
                f"without reaching tolerance {tolerance:g}",
                NumericNonConvergenceWarning,
                stacklevel=2,
            )

        paired = np.sort(eigs)[::2]          # each eigenvalue appears twice
        return np.sort(np.abs(paired))[::-1]


def _off_diagonal_norm(a: NDArray[np.float64]) -> float:
    return float(np.linalg.norm(a - np.diag(np.diag(a))))


def _jacobi_eigenvalues(
    a: NDArray[np.float64],
    tolerance: float,
    max_iterations: int,
) -> tuple[NDArray[np.float64], bool]:
    """
    Cyclic Jacobi eigenvalue iteration for a real symmetric matrix.

    Each rotation applies A ← Pᵀ A P with the plane rotation that zeroes a[p, q]:
        θ = (a_qq − a_pp) / (2 a_pq),  t = sgn(θ) / (|θ| + √(θ² + 1)),
        c = 1 / √(t² + 1),             s = t·c

    Returns:
        (diagonal estimate, converged flag)
    """
    a = a.copy()
    n: int = a.shape[0]

    for _ in range(max_iterations):
        if _off_diagonal_norm(a) <= tolerance:
            return np.diag(a).copy(), True

        for p in range(n - 1):
            for q in range(p + 1, n):
                apq: float = a[p, q]
                if abs(apq) < _NEGLIGIBLE:
                    continue

                theta: float = (a[q, q] - a[p, p]) / (2.0 * apq)
                t: float = 1.0 / (abs(theta) + np.sqrt(theta * theta + 1.0))
                if theta < 0:
                    t = -t
                c: float = 1.0 / np.sqrt(t * t + 1.0)
                s: float = t * c

                col_p = a[:, p].copy()
                col_q = a[:, q].copy()
                a[:, p] = c * col_p - s * col_q
                a[:, q] = s * col_p + c * col_q

                row_p = a[p, :].copy()
                row_q = a[q, :].copy()
                a[p, :] = c * row_p - s * row_q
                a[q, :] = s * row_p + c * row_q

    return np.diag(a).copy(), _off_diagonal_norm(a) <= tolerance
