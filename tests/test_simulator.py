"""
tests/test_simulator.py
Pytest unit tests for qpu/simulator.py (dual-state simulator).

Tests verify the quantum mechanical invariants that must hold for both the
hidden true state and the observer's inferred density matrix: unit norm,
unit trace, reversibility, measurement collapse, and the bookkeeping counters.

Run with:
    pytest tests/test_simulator.py -v
"""
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import logging

import numpy as np
import pytest

from qpu.complex_matrix import ComplexMatrix
from qpu.errors import ConstructionError, OperatorError, QubitIndexError
from qpu.gates import HADAMARD, PAULI_X
from qpu.simulator import DualStateSimulator


# ----------------------------------------------------------------
# Helpers
# ----------------------------------------------------------------

class ScriptedRandom:
    """Random source that replays a fixed list of samples."""

    def __init__(self, samples: list[float]) -> None:
        self.samples = list(samples)
        self.used = 0

    def random(self) -> float:
        value = self.samples[self.used]
        self.used += 1
        return value


def _random_unitary(dim: int, seed: int) -> ComplexMatrix:
    rng = np.random.default_rng(seed)
    z = rng.normal(size=(dim, dim)) + 1j * rng.normal(size=(dim, dim))
    q, _ = np.linalg.qr(z)
    return ComplexMatrix(q)


def _state_norm(sim: DualStateSimulator) -> float:
    return sim.true_state.norm()


def _density_trace(sim: DualStateSimulator) -> float:
    return sim.inferred_density.trace().real


class TestConstruction:
    """Initial state validation and normalisation."""

    def test_state_is_normalised(self) -> None:
        """[3, 4] is stored as [0.6, 0.8]."""
        sim = DualStateSimulator.with_initial_state(ComplexMatrix.column([3, 4]))
        np.testing.assert_allclose(sim.true_state.to_array().ravel(), [0.6, 0.8])

    def test_flat_sequence_accepted_as_column(self) -> None:
        """A flat list of 4 amplitudes is a 2-qubit register."""
        sim = DualStateSimulator([1, 0, 0, 0])
        assert sim.num_qubits == 2
        assert sim.dimension == 4

    def test_inferred_density_starts_maximally_mixed(self) -> None:
        """The observer starts from I/N."""
        sim = DualStateSimulator([1, 0, 0, 0, 0, 0, 0, 0])
        np.testing.assert_allclose(sim.inferred_density.to_array(), np.eye(8) / 8)

    def test_counters_start_at_zero(self) -> None:
        """No operations and no misprediction before any call."""
        sim = DualStateSimulator([0, 1])
        assert sim.operation_count == 0
        assert sim.misprediction_score == 0.0

    def test_non_power_of_2_height_rejected(self) -> None:
        """3 amplitudes cannot describe a register."""
        with pytest.raises(ConstructionError, match="power-of-2"):
            DualStateSimulator(ComplexMatrix.column([1, 0, 0]))

    def test_non_column_rejected(self) -> None:
        """A square matrix is not a state vector."""
        with pytest.raises(ConstructionError, match="column"):
            DualStateSimulator(ComplexMatrix.identity(2))

    def test_zero_vector_rejected(self) -> None:
        """The all-zero vector cannot be normalised."""
        with pytest.raises(ConstructionError, match="non-zero"):
            DualStateSimulator([0, 0])

    def test_random_state_is_unit_norm(self) -> None:
        """Random initial states are normalised."""
        sim = DualStateSimulator.with_random_initial_state(3, rng=np.random.default_rng(5))
        assert sim.num_qubits == 3
        assert _state_norm(sim) == pytest.approx(1.0, abs=1e-12)

    def test_random_state_reproducible_with_seed(self) -> None:
        """Equal seeds give equal random states."""
        a = DualStateSimulator.with_random_initial_state(2, rng=np.random.default_rng(11))
        b = DualStateSimulator.with_random_initial_state(2, rng=np.random.default_rng(11))
        assert a.true_state == b.true_state

    def test_random_state_needs_a_qubit(self) -> None:
        """Zero qubits is rejected."""
        with pytest.raises(ConstructionError, match="at least one qubit"):
            DualStateSimulator.with_random_initial_state(0)


class TestApplyOperation:
    """Unitary evolution of both representations."""

    def test_norm_and_trace_preserved(self) -> None:
        """Unit norm and unit trace survive a chain of random unitaries."""
        sim = DualStateSimulator.with_random_initial_state(3, rng=np.random.default_rng(1))
        for seed in range(5):
            sim.apply_operation(_random_unitary(8, seed))
            assert _state_norm(sim) == pytest.approx(1.0, abs=1e-9)
            assert _density_trace(sim) == pytest.approx(1.0, abs=1e-9)

    def test_round_trip_restores_both_states(self) -> None:
        """U then U† restores the true state and the density."""
        sim = DualStateSimulator.with_random_initial_state(2, rng=np.random.default_rng(2))
        sim.measure_qubit(0)   # give the density matrix some structure first
        state_before = sim.true_state
        density_before = sim.inferred_density

        u = _random_unitary(4, 42)
        sim.apply_operation(u)
        sim.apply_operation(u.adjoint())

        assert sim.true_state.is_approximately_equal(state_before, 1e-9)
        assert sim.inferred_density.is_approximately_equal(density_before, 1e-9)

    def test_density_stays_hermitian(self) -> None:
        """U ρ U† stays Hermitian."""
        sim = DualStateSimulator.with_random_initial_state(2, rng=np.random.default_rng(3))
        sim.measure_qubit(1)
        sim.apply_operation(_random_unitary(4, 9))
        rho = sim.inferred_density.to_array()
        np.testing.assert_allclose(rho, rho.conj().T, atol=1e-12)

    def test_operation_counter_increments(self) -> None:
        """Each applied operation counts once."""
        sim = DualStateSimulator([1, 0])
        sim.apply_operation(HADAMARD)
        sim.apply_operation(HADAMARD)
        assert sim.operation_count == 2

    def test_wrong_size_rejected_without_mutation(self) -> None:
        """A 4x4 operator on one qubit is rejected and not counted."""
        sim = DualStateSimulator([1, 0])
        with pytest.raises(OperatorError, match="2x2"):
            sim.apply_operation(ComplexMatrix.identity(4))
        assert sim.operation_count == 0

    def test_non_unitary_rejected_without_mutation(self) -> None:
        """A shear is rejected and leaves the state untouched."""
        sim = DualStateSimulator([1, 0])
        before = sim.true_state
        with pytest.raises(OperatorError, match="unitary"):
            sim.apply_operation(ComplexMatrix([[1, 1], [0, 1]]))
        assert sim.true_state == before
        assert sim.operation_count == 0

    def test_non_matrix_rejected(self) -> None:
        """Raw numpy arrays are not accepted as operators."""
        sim = DualStateSimulator([1, 0])
        with pytest.raises(OperatorError, match="ComplexMatrix"):
            sim.apply_operation(np.eye(2))  # type: ignore[arg-type]

    def test_expand_operation_uses_register_size(self) -> None:
        """expand_operation pads to the simulator's register."""
        sim = DualStateSimulator([1, 0, 0, 0])
        op = sim.expand_operation(PAULI_X, 1)
        sim.apply_operation(op)
        np.testing.assert_allclose(sim.true_state.to_array().ravel(), [0, 0, 1, 0])


class TestMeasurement:
    """Born-rule sampling and post-selection collapse."""

    def test_off_state_measures_false_then_x_measures_true(self) -> None:
        """Basis states measure deterministically."""
        sim = DualStateSimulator([1, 0], rng=np.random.default_rng(0))
        for _ in range(20):
            assert sim.measure_qubit(0) is False
        sim.apply_operation(PAULI_X)
        for _ in range(20):
            assert sim.measure_qubit(0) is True

    def test_hadamard_rate_converges_to_half(self) -> None:
        """H|0⟩ reads on about half the time."""
        rng = np.random.default_rng(1234)
        trials = 2000
        hits = 0
        for _ in range(trials):
            sim = DualStateSimulator([1, 0], rng=rng)
            sim.apply_operation(HADAMARD)
            hits += sim.measure_qubit(0)
        assert hits / trials == pytest.approx(0.5, abs=0.05)

    def test_inferred_density_collapses_to_outcome(self) -> None:
        """The observer's density collapses to the measured basis state."""
        sim = DualStateSimulator([1, 0], rng=np.random.default_rng(8))
        sim.apply_operation(HADAMARD)
        result = sim.measure_qubit(0)
        expected = np.diag([0, 1]) if result else np.diag([1, 0])
        np.testing.assert_allclose(sim.inferred_density.to_array(), expected, atol=1e-12)

    def test_repeat_measurement_is_idempotent(self) -> None:
        """Measuring the same qubit twice agrees and adds no misprediction."""
        sim = DualStateSimulator.with_random_initial_state(3, rng=np.random.default_rng(21))
        first = sim.measure_qubit(1)
        score_after_first = sim.misprediction_score
        second = sim.measure_qubit(1)
        assert first == second
        assert sim.misprediction_score == pytest.approx(score_after_first, abs=1e-12)

    def test_collapse_keeps_unit_norm_and_trace(self) -> None:
        """Collapse renormalises both representations."""
        sim = DualStateSimulator.with_random_initial_state(3, rng=np.random.default_rng(4))
        for q in (0, 2, 1):
            sim.measure_qubit(q)
            assert _state_norm(sim) == pytest.approx(1.0, abs=1e-12)
            assert _density_trace(sim) == pytest.approx(1.0, abs=1e-12)

    def test_collapse_zeroes_inconsistent_amplitudes(self) -> None:
        """Entries that disagree with the outcome are zeroed."""
        sim = DualStateSimulator.with_random_initial_state(2, rng=np.random.default_rng(6))
        result = sim.measure_qubit(0)
        amps = sim.true_state.to_array().ravel()
        rho = sim.inferred_density.to_array()
        for i in range(4):
            if bool(i & 1) != result:
                assert amps[i] == 0
                assert np.all(rho[i, :] == 0)
                assert np.all(rho[:, i] == 0)

    def test_bell_pair_outcomes_agree(self) -> None:
        """After H(q0), CNOT(q0→q1) both qubits always read the same."""
        rng = np.random.default_rng(77)
        for _ in range(20):
            sim = DualStateSimulator([1, 0, 0, 0], rng=rng)
            sim.apply_operation(sim.expand_operation(HADAMARD, 0))
            sim.apply_operation(sim.expand_operation(PAULI_X, 1, [0]))
            assert sim.measure_qubit(0) == sim.measure_qubit(1)

    def test_misprediction_accumulates_gap(self) -> None:
        """|0⟩ is certainly off while the mixed observer predicts 50%."""
        sim = DualStateSimulator([1, 0])
        sim.measure_qubit(0)
        assert sim.misprediction_score == pytest.approx(0.5)
        sim.measure_qubit(0)
        assert sim.misprediction_score == pytest.approx(0.5)

    def test_each_measurement_consumes_one_sample(self) -> None:
        """One draw per measurement, compared against P(on)."""
        source = ScriptedRandom([0.9, 0.1])
        sim = DualStateSimulator([1, 0], rng=source)
        sim.apply_operation(HADAMARD)
        assert sim.measure_qubit(0) is False     # 0.9 ≥ P(on) = 0.5
        sim.apply_operation(HADAMARD)
        assert sim.measure_qubit(0) is True      # 0.1 < 0.5
        assert source.used == 2

    def test_empty_subspace_falls_back_to_uniform_state(self, caplog) -> None:
        """A sample below zero selects 'on' for a certain-off qubit; both states fall back."""
        source = ScriptedRandom([0.9, -0.1])
        sim = DualStateSimulator([1, 0], rng=source)
        assert sim.measure_qubit(0) is False     # observer now also certain of off
        with caplog.at_level(logging.WARNING):
            assert sim.measure_qubit(0) is True
        np.testing.assert_allclose(sim.true_state.to_array().ravel(), [0, 1])
        np.testing.assert_allclose(sim.inferred_density.to_array(), np.diag([0, 1]))
        assert _state_norm(sim) == pytest.approx(1.0, abs=1e-12)
        assert _density_trace(sim) == pytest.approx(1.0, abs=1e-12)
        assert "True state post-selected onto an empty subspace" in caplog.text
        assert "Inferred density post-selected onto an empty subspace" in caplog.text

    def test_counter_increments(self) -> None:
        """Each measurement counts as an operation."""
        sim = DualStateSimulator([1, 0, 0, 0])
        sim.measure_qubit(0)
        sim.measure_qubit(1)
        assert sim.operation_count == 2

    def test_out_of_range_index_rejected_without_mutation(self) -> None:
        """Measuring a missing qubit raises and changes nothing."""
        sim = DualStateSimulator([1, 0])
        with pytest.raises(QubitIndexError, match="Qubit 1"):
            sim.measure_qubit(1)
        assert sim.operation_count == 0
        assert sim.misprediction_score == 0.0


class TestAccessors:
    """Accessors expose snapshots, never the live internals."""

    def test_counters_are_a_copy(self) -> None:
        """Editing the counters snapshot does not touch the simulator."""
        sim = DualStateSimulator([1, 0])
        snapshot = sim.counters
        snapshot.operation_count = 99
        assert sim.operation_count == 0

    def test_actual_density_is_outer_product(self) -> None:
        """actual_density is |ψ⟩⟨ψ|."""
        sim = DualStateSimulator([1, 1j])
        np.testing.assert_allclose(
            sim.actual_density.to_array(),
            np.array([[0.5, -0.5j], [0.5j, 0.5]]),
            atol=1e-12,
        )

    def test_state_snapshot_unaffected_by_later_operations(self) -> None:
        """A returned state does not follow later changes."""
        sim = DualStateSimulator([1, 0])
        snapshot = sim.true_state
        sim.apply_operation(PAULI_X)
        np.testing.assert_allclose(snapshot.to_array().ravel(), [1, 0])
