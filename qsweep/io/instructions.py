"""Reader for one-line gate instructions such as ``h q[0]`` or ``cnot q[0],q[1]``.

The format is a gate name followed by qubit references. Every integer
found between ``[``, ``]`` and ``,`` separators is a target index, so
``cnot q[0],q[1]``, ``cnot q[0], q[1]`` and ``swap q[1,2]`` are all
accepted. Lines are checked against the qubit count and the gate's arity
before an :class:`~qsweep.circuit.Instruction` is produced.
"""

from __future__ import annotations

import re
from typing import Callable, Iterable, List, Optional, Tuple

from ..circuit import Instruction
from ..errors import InvalidInstruction
from ..gates import Gate

_TARGET_SEPARATORS = re.compile(r"[\[\],\s]+")


def _parse_targets(target_str: str) -> List[int]:
    targets = []
    for token in _TARGET_SEPARATORS.split(target_str):
        # str.isdigit also accepts superscripts such as "²"
        if token.isascii() and token.isdigit():
            targets.append(int(token))
    return targets


def parse_instruction(line: str, n_qubits: int) -> Instruction:
    """
    Parse and validate one instruction line.

    Parameters
    ----------
    line : str
        Instruction text, e.g. ``"h q[0]"``.
    n_qubits : int
        Number of qubits of the target circuit.

    Returns
    -------
    Instruction
        The validated instruction.

    Raises
    ------
    InvalidInstruction
        If the line is malformed, names an unknown gate, has no targets,
        targets a qubit outside [0, n_qubits), or does not match the
        gate's arity.
    """
    parts = line.strip().split(maxsplit=1)
    if len(parts) < 2:
        raise InvalidInstruction(f"Invalid instruction: {line.strip()!r}")

    gate_name, target_str = parts
    try:
        gate = Gate.from_name(gate_name.lower())
    except ValueError:
        raise InvalidInstruction(f"Unknown gate: {gate_name}") from None

    targets = _parse_targets(target_str)
    if not targets or any(q >= n_qubits for q in targets):
        raise InvalidInstruction(
            f"Invalid target qubits for instruction: {line.strip()!r}"
        )
    if len(targets) != gate.arity:
        raise InvalidInstruction(
            f"Gate {gate.value} expects {gate.arity} target(s), got {len(targets)} "
            f"in {line.strip()!r}"
        )
    if gate.arity == 2 and targets[0] == targets[1]:
        raise InvalidInstruction(
            f"Gate {gate.value} needs two distinct qubits in {line.strip()!r}"
        )

    return Instruction(gate=gate, qubits=tuple(targets))


def read_instructions(
    lines: Iterable[str],
    n_qubits: int,
    on_error: Optional[Callable[[int, InvalidInstruction], None]] = None,
) -> Tuple[List[Instruction], List[InvalidInstruction]]:
    """
    Parse many lines, skipping blanks and ``#`` comments.

    Invalid lines do not stop the read: each error is passed to
    ``on_error`` (with its 1-based line number) and collected.

    Returns
    -------
    tuple
        (valid instructions in order, errors in order).
    """
    instructions: List[Instruction] = []
    errors: List[InvalidInstruction] = []

    for lineno, raw in enumerate(lines, start=1):
        line = raw.split("#", 1)[0].strip()
        if not line:
            continue
        try:
            instructions.append(parse_instruction(line, n_qubits))
        except InvalidInstruction as exc:
            errors.append(exc)
            if on_error is not None:
                on_error(lineno, exc)

    return instructions, errors
