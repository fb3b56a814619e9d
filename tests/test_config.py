"""Tests for SimulatorConfig."""

import dataclasses

import pytest
import torch

from qsweep.config import SimulatorConfig

_ENV_VARS = (
    "QSWEEP_STRATEGY",
    "QSWEEP_ACCELERATOR_DEVICE",
    "QSWEEP_ACCELERATOR_FALLBACK",
    "QSWEEP_PERSISTENT_SESSION",
    "QSWEEP_COMPILE_KERNEL",
    "QSWEEP_EXACT_PHASE",
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestDefaults:
    def test_defaults(self):
        config = SimulatorConfig()
        assert config.strategy == "host"
        assert config.accelerator_device == "sv_cuda"
        assert config.accelerator_fallback == "error"
        assert not config.persistent_session
        assert not config.compile_kernel
        assert not config.exact_phase
        assert config.dtype == torch.complex64
        assert config.degenerate_threshold == 1e-12

    def test_frozen(self):
        config = SimulatorConfig()
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.strategy = "compare"

    def test_with_options(self):
        config = SimulatorConfig().with_options(strategy="compare", compare_atol=1e-3)
        assert config.strategy == "compare"
        assert config.compare_atol == 1e-3


class TestValidation:
    @pytest.mark.parametrize(
        "kwargs, match",
        [
            ({"strategy": "gpu"}, "Unknown strategy"),
            ({"accelerator_fallback": "retry"}, "Unknown accelerator_fallback"),
            ({"block_size": 0}, "block_size"),
            ({"compare_atol": -1.0}, "compare_atol"),
            ({"degenerate_threshold": -1.0}, "degenerate_threshold"),
            ({"dtype": torch.float32}, "dtype"),
        ],
    )
    def test_invalid_values(self, kwargs, match):
        with pytest.raises(ValueError, match=match):
            SimulatorConfig(**kwargs)


class TestFromEnv:
    def test_empty_environment_gives_defaults(self, clean_env):
        assert SimulatorConfig.from_env() == SimulatorConfig()

    def test_reads_environment(self, clean_env):
        clean_env.setenv("QSWEEP_STRATEGY", "Accelerator")
        clean_env.setenv("QSWEEP_ACCELERATOR_DEVICE", "sv_cpu")
        clean_env.setenv("QSWEEP_ACCELERATOR_FALLBACK", "host")
        clean_env.setenv("QSWEEP_PERSISTENT_SESSION", "yes")
        clean_env.setenv("QSWEEP_EXACT_PHASE", "1")

        config = SimulatorConfig.from_env()
        assert config.strategy == "accelerator"
        assert config.accelerator_device == "sv_cpu"
        assert config.accelerator_fallback == "host"
        assert config.persistent_session
        assert config.exact_phase
        assert not config.compile_kernel

    def test_overrides_win(self, clean_env):
        clean_env.setenv("QSWEEP_STRATEGY", "compare")
        config = SimulatorConfig.from_env(strategy="host")
        assert config.strategy == "host"

    def test_unknown_override(self, clean_env):
        with pytest.raises(TypeError, match="Unknown SimulatorConfig fields"):
            SimulatorConfig.from_env(colour="blue")

    def test_invalid_environment_value(self, clean_env):
        clean_env.setenv("QSWEEP_STRATEGY", "quantum")
        with pytest.raises(ValueError, match="Unknown strategy"):
            SimulatorConfig.from_env()
