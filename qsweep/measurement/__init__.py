"""Measurement: probabilities over computational basis states."""

from .probabilities import DEFAULT_DEGENERATE_THRESHOLD, ProbabilityTable, compute_probabilities

__all__ = ["ProbabilityTable", "compute_probabilities", "DEFAULT_DEGENERATE_THRESHOLD"]
