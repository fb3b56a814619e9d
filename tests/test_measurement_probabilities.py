"""Tests for probability extraction."""

import pytest
import torch

import qsweep as qs
from qsweep.errors import DegenerateState
from qsweep.measurement import ProbabilityTable, compute_probabilities


class TestComputeProbabilities:
    def test_basis_state(self):
        table = compute_probabilities(qs.basis_state(2, 2))
        assert table.tolist() == [0.0, 0.0, 1.0, 0.0]
        assert table.n_qubits == 2
        assert not table.degenerate

    def test_random_state_sums_to_one(self, random_state):
        table = compute_probabilities(random_state(5))
        assert all(p >= 0.0 for p in table)
        assert sum(table) == pytest.approx(1.0, abs=1e-6)

    def test_renormalizes_drifted_state(self):
        """A state with norm != 1 is normalized at measurement."""
        state = torch.tensor([3.0, 4.0j], dtype=torch.complex64)
        table = compute_probabilities(state)
        assert table[0] == pytest.approx(9.0 / 25.0)
        assert table[1] == pytest.approx(16.0 / 25.0)
        assert table.norm_squared == pytest.approx(25.0)

    def test_keeps_real_dtype_and_device(self):
        state = qs.zero_state(2, dtype=torch.complex128)
        table = compute_probabilities(state)
        assert table.probabilities.dtype == torch.float64
        assert table.probabilities.device == state.device

    def test_degenerate_state_returns_zeros(self, log_stream):
        state = torch.zeros(4, dtype=torch.complex64)
        table = compute_probabilities(state)
        assert table.degenerate
        assert table.tolist() == [0.0, 0.0, 0.0, 0.0]
        assert "Degenerate state" in log_stream.getvalue()

    def test_degenerate_strict_raises(self):
        state = torch.full((2,), 1e-8, dtype=torch.complex128)
        with pytest.raises(DegenerateState) as exc_info:
            compute_probabilities(state, strict=True)
        assert exc_info.value.norm_squared == pytest.approx(2e-16)
        assert exc_info.value.threshold == 1e-12

    def test_degenerate_is_arithmetic_error(self):
        with pytest.raises(ArithmeticError):
            compute_probabilities(torch.zeros(2, dtype=torch.complex64), strict=True)

    def test_custom_threshold(self):
        state = torch.tensor([1e-3, 0.0], dtype=torch.complex64)
        assert compute_probabilities(state, threshold=1e-2).degenerate
        assert not compute_probabilities(state).degenerate

    def test_rejects_bad_length(self):
        with pytest.raises(ValueError, match="power of 2"):
            compute_probabilities(torch.ones(3, dtype=torch.complex64))


class TestProbabilityTable:
    def _table(self):
        probs = torch.tensor([0.5, 0.25, 0.0, 0.25])
        return ProbabilityTable(probs, n_qubits=2, norm_squared=1.0)

    def test_bitstring_is_msb_first(self):
        table = self._table()
        assert table.bitstring(1) == "01"
        assert table.bitstring(2) == "10"

    def test_as_dict(self):
        assert self._table().as_dict() == {"00": 0.5, "01": 0.25, "10": 0.0, "11": 0.25}

    def test_format_lines(self):
        assert self._table().format_lines() == [
            "State |00>: 0.50000",
            "State |01>: 0.25000",
            "State |10>: 0.00000",
            "State |11>: 0.25000",
        ]

    def test_format_precision(self):
        assert self._table().format_lines(precision=2)[0] == "State |00>: 0.50"
