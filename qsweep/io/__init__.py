"""Instruction text input."""

from .instructions import parse_instruction, read_instructions

__all__ = ["parse_instruction", "read_instructions"]
