"""
Error types for the CHIP-8 interpreter.

Program defects (bad opcodes, stack misuse) are reported by the executor as a
``Fault`` value; the execution loop turns a fault into ``Chip8Fault`` so the
CLI can stop with a diagnostic.
"""
from __future__ import annotations

from dataclasses import dataclass

UNKNOWN_INSTRUCTION = "unrecognized instruction"
STACK_UNDERFLOW = "stack underflow on return"


@dataclass(frozen=True)
class Fault:
    reason: str
    word: int       # raw 16-bit instruction
    address: int    # address the instruction was fetched from

    def __str__(self) -> str:
        return f"{self.reason} 0x{self.word:04X} at 0x{self.address:03X}"


class Chip8Error(Exception):
    """Base class for every interpreter error."""


class Chip8Fault(Chip8Error):
    def __init__(self, fault: Fault):
        super().__init__(str(fault))
        self.fault = fault


class ProgramTooLarge(Chip8Error, ValueError):
    pass


class BackendError(Chip8Error):
    """Display, keyboard or audio backend could not be set up."""
