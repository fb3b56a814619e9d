"""Tests for the instruction line reader."""

import pytest

from qsweep.circuit import Instruction
from qsweep.errors import InvalidInstruction
from qsweep.gates import Gate
from qsweep.io import parse_instruction, read_instructions


class TestParseInstruction:
    @pytest.mark.parametrize(
        "line, expected",
        [
            ("h q[0]", Instruction(Gate.H, (0,))),
            ("X q[1]", Instruction(Gate.X, (1,))),
            ("  t   q[2]  ", Instruction(Gate.T, (2,))),
            ("id q[0]", Instruction(Gate.I, (0,))),
            ("cnot q[0],q[1]", Instruction(Gate.CNOT, (0, 1))),
            ("cnot q[2], q[0]", Instruction(Gate.CNOT, (2, 0))),
            ("swap q[1,2]", Instruction(Gate.SWAP, (1, 2))),
        ],
    )
    def test_valid_lines(self, line, expected):
        assert parse_instruction(line, 3) == expected

    def test_missing_target(self):
        with pytest.raises(InvalidInstruction, match="Invalid instruction"):
            parse_instruction("h", 2)

    def test_unknown_gate(self):
        with pytest.raises(InvalidInstruction, match="Unknown gate: rx"):
            parse_instruction("rx q[0]", 2)

    @pytest.mark.parametrize(
        "line", ["h q[5]", "h q[]", "h q[-1]", "h q[a]", "h q[²]", "h q[١]"]
    )
    def test_invalid_targets(self, line):
        with pytest.raises(InvalidInstruction, match="Invalid target qubits"):
            parse_instruction(line, 2)

    def test_arity_mismatch(self):
        with pytest.raises(InvalidInstruction, match="expects 2 target"):
            parse_instruction("cnot q[0]", 2)
        with pytest.raises(InvalidInstruction, match="expects 1 target"):
            parse_instruction("h q[0],q[1]", 2)

    def test_same_qubit_twice(self):
        with pytest.raises(InvalidInstruction, match="distinct"):
            parse_instruction("swap q[1],q[1]", 2)

    def test_invalid_instruction_is_value_error(self):
        with pytest.raises(ValueError):
            parse_instruction("nonsense", 1)


class TestReadInstructions:
    def test_non_ascii_digit_is_a_line_error(self):
        """A superscript index is reported on its line, not raised."""
        seen = []
        instructions, errors = read_instructions(
            ["h q[²]", "x q[0]"], 2, on_error=lambda lineno, exc: seen.append(lineno)
        )
        assert instructions == [Instruction(Gate.X, (0,))]
        assert len(errors) == 1
        assert "Invalid target qubits" in str(errors[0])
        assert seen == [1]

    def test_skips_blanks_and_comments(self):
        lines = ["# bell pair", "", "h q[0]", "cnot q[0],q[1]  # entangle", "   "]
        instructions, errors = read_instructions(lines, 2)
        assert instructions == [
            Instruction(Gate.H, (0,)),
            Instruction(Gate.CNOT, (0, 1)),
        ]
        assert errors == []

    def test_collects_errors_and_continues(self):
        seen = []
        lines = ["h q[0]", "bogus q[0]", "x q[9]", "x q[1]"]
        instructions, errors = read_instructions(
            lines, 2, on_error=lambda lineno, exc: seen.append(lineno)
        )
        assert [op.gate for op in instructions] == [Gate.H, Gate.X]
        assert len(errors) == 2
        assert seen == [2, 3]
