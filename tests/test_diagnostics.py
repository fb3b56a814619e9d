"""Tests for diagnostics and debug mode."""

import math

import pytest
import torch

import qsweep as qs
from qsweep.diagnostics import (
    check_norm_drift,
    debug_context,
    env_flag,
    fidelity,
    is_debug_enabled,
    max_abs_deviation,
    set_debug_enabled,
    state_norm,
)


def test_state_norm():
    state = torch.tensor([3.0, 4.0j], dtype=torch.complex64)
    assert state_norm(state).item() == pytest.approx(5.0)


def test_state_norm_rejects_scalar():
    with pytest.raises(ValueError):
        state_norm(torch.tensor(1.0 + 0.0j))


def test_fidelity():
    zero = qs.basis_state(1, 0)
    plus = qs.apply_gate(zero, qs.H(), 0)
    assert fidelity(zero, zero).item() == pytest.approx(1.0)
    assert fidelity(zero, plus).item() == pytest.approx(0.5, abs=1e-6)


def test_fidelity_shape_mismatch():
    with pytest.raises(ValueError):
        fidelity(qs.zero_state(1), qs.zero_state(2))


def test_max_abs_deviation():
    a = torch.tensor([1.0, 0.0], dtype=torch.complex64)
    b = torch.tensor([1.0, 0.5j], dtype=torch.complex64)
    assert max_abs_deviation(a, b) == pytest.approx(0.5)
    assert max_abs_deviation(a, a) == 0.0


def test_max_abs_deviation_shape_mismatch():
    with pytest.raises(ValueError, match="Cannot compare"):
        max_abs_deviation(qs.zero_state(1), qs.zero_state(2))


def test_check_norm_drift_warns(log_stream):
    state = torch.tensor([1.0, 1.0], dtype=torch.complex64)
    drift = check_norm_drift(state, "test gate")
    assert drift == pytest.approx(math.sqrt(2.0) - 1.0, rel=1e-5)
    assert "Norm drift" in log_stream.getvalue()
    assert "test gate" in log_stream.getvalue()


def test_check_norm_drift_quiet_when_normalized(log_stream):
    assert check_norm_drift(qs.zero_state(2), "noop") == 0.0
    assert log_stream.getvalue() == ""


def test_debug_mode_toggle_and_context():
    """Test debug mode toggling and context manager."""
    set_debug_enabled(False)
    assert not is_debug_enabled()

    with debug_context(True):
        assert is_debug_enabled()
        with debug_context(False):
            assert not is_debug_enabled()
        assert is_debug_enabled()

    assert not is_debug_enabled()


def test_debug_mode_reports_drift_without_raising(log_stream):
    """In debug mode a non-unitary gate logs a warning and still returns."""
    scale = torch.tensor([[2.0, 0.0], [0.0, 2.0]], dtype=torch.complex64)
    with debug_context(True):
        result = qs.apply_gate(qs.zero_state(1), scale, 0)
    assert result[0] == 2.0
    assert "Norm drift" in log_stream.getvalue()


def test_debug_mode_off_is_silent(log_stream):
    scale = torch.tensor([[2.0, 0.0], [0.0, 2.0]], dtype=torch.complex64)
    with debug_context(False):
        qs.apply_gate(qs.zero_state(1), scale, 0)
    assert "Norm drift" not in log_stream.getvalue()


@pytest.mark.parametrize(
    "value, expected",
    [("1", True), ("TRUE", True), (" on ", True), ("yes", True),
     ("0", False), ("no", False), ("", False)],
)
def test_env_flag(monkeypatch, value, expected):
    monkeypatch.setenv("QSWEEP_TEST_FLAG", value)
    assert env_flag("QSWEEP_TEST_FLAG") is expected


def test_env_flag_default(monkeypatch):
    monkeypatch.delenv("QSWEEP_TEST_FLAG", raising=False)
    assert env_flag("QSWEEP_TEST_FLAG") is False
    assert env_flag("QSWEEP_TEST_FLAG", default="1") is True
