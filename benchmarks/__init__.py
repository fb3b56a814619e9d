"""Performance benchmarks for qsweep.

Microbenchmarks for the hot path of the simulator: single-qubit gate
application on the host and on an accelerator.
"""
