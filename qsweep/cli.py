"""Command line front end: read a circuit, run it, print probabilities."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Callable, Optional, Sequence, TextIO

from .circuit import QuantumCircuit
from .config import SimulatorConfig
from .errors import InvalidInstruction, QSweepError
from .io import parse_instruction, read_instructions
from .logging import configure_logging


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="qsweep",
        description="Simulate a qubit register under a sequence of gates.",
    )
    ap.add_argument("-n", "--qubits", type=int, help="number of qubits")
    ap.add_argument(
        "-i",
        "--instruction",
        action="append",
        default=[],
        help="instruction such as 'h q[0]' or 'cnot q[0],q[1]' (repeatable)",
    )
    ap.add_argument("-f", "--file", help="file with one instruction per line")
    ap.add_argument(
        "--strategy",
        choices=["host", "accelerator", "compare"],
        help="single-qubit execution strategy (default: QSWEEP_STRATEGY or host)",
    )
    ap.add_argument("--accelerator-device", help="accelerator device, e.g. sv_cuda")
    ap.add_argument(
        "--fallback",
        choices=["error", "host"],
        help="what to do if the accelerator is unavailable",
    )
    ap.add_argument("--exact-phase", action="store_true", help="exact T gate phase")
    ap.add_argument("--show-state", action="store_true", help="print final amplitudes")
    ap.add_argument("--draw", action="store_true", help="print a circuit diagram")
    ap.add_argument("--log-level", default="WARNING", help="logging level for stderr")
    return ap


def _config_from_args(args: argparse.Namespace) -> SimulatorConfig:
    overrides = {}
    if args.strategy:
        overrides["strategy"] = args.strategy
    if args.accelerator_device:
        overrides["accelerator_device"] = args.accelerator_device
    if args.fallback:
        overrides["accelerator_fallback"] = args.fallback
    if args.exact_phase:
        overrides["exact_phase"] = True
    return SimulatorConfig.from_env(**overrides)


def _prompt(message: str, stdin: TextIO, stdout: TextIO) -> str:
    stdout.write(message)
    stdout.flush()
    line = stdin.readline()
    if not line:
        raise EOFError("unexpected end of input")
    return line.strip()


def _interactive_circuit(
    n_qubits: Optional[int],
    stdin: TextIO,
    stdout: TextIO,
) -> QuantumCircuit:
    if n_qubits is None:
        n_qubits = int(_prompt("Enter number of qubits: ", stdin, stdout))
    circuit = QuantumCircuit(n_qubits)

    count = int(_prompt("Enter number of instructions: ", stdin, stdout))
    for _ in range(count):
        line = _prompt(
            "Enter instruction (e.g. 'h q[0]' or 'x q[1]'): ", stdin, stdout
        )
        try:
            instruction = parse_instruction(line, n_qubits)
        except InvalidInstruction as exc:
            stdout.write(f"{exc}\n")
            continue
        circuit.add_gate(instruction.gate, instruction.qubits)
    return circuit


def _scripted_circuit(
    n_qubits: int,
    lines: Sequence[str],
    report: Callable[[str], None],
) -> QuantumCircuit:
    circuit = QuantumCircuit(n_qubits)

    def on_error(lineno: int, exc: InvalidInstruction) -> None:
        report(f"line {lineno}: {exc}")

    instructions, _ = read_instructions(lines, n_qubits, on_error=on_error)
    circuit.extend(instructions)
    return circuit


def main(
    argv: Optional[Sequence[str]] = None,
    stdin: Optional[TextIO] = None,
    stdout: Optional[TextIO] = None,
) -> int:
    """Entry point for ``qsweep`` and ``python -m qsweep``; returns the exit code."""
    stdin = sys.stdin if stdin is None else stdin
    stdout = sys.stdout if stdout is None else stdout

    ap = build_parser()
    args = ap.parse_args(argv)
    configure_logging(level=args.log_level)

    def report(message: str) -> None:
        stdout.write(f"{message}\n")

    try:
        config = _config_from_args(args)
        lines = list(args.instruction)
        if args.file:
            lines.extend(Path(args.file).read_text(encoding="utf-8").splitlines())

        if lines:
            if args.qubits is None:
                ap.error("--qubits is required with --instruction or --file")
            circuit = _scripted_circuit(args.qubits, lines, report)
        else:
            circuit = _interactive_circuit(args.qubits, stdin, stdout)

        if args.draw:
            report(circuit.to_text_diagram())

        report("Starting circuit execution...")
        result = circuit.simulate(config=config)
    except ValueError as exc:
        sys.stderr.write(f"qsweep: error: {exc}\n")
        return 2
    except (QSweepError, OSError, EOFError, RuntimeError) as exc:
        # RuntimeError: torch allocation failures on large registers
        sys.stderr.write(f"qsweep: error: {exc}\n")
        return 1

    if args.show_state:
        report("Final state:")
        for index, amp in enumerate(result.state.detach().cpu().tolist()):
            label = result.probabilities.bitstring(index)
            report(f"|{label}>: {amp.real:+.5f} {amp.imag:+.5f}i")

    report("Final probabilities:")
    if result.probabilities.degenerate:
        report("State is degenerate (norm too small); all probabilities are zero.")
    for line in result.probabilities.format_lines():
        report(line)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
