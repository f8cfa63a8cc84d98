"""
Machine state of the CHIP-8 virtual machine.

Pure data: memory, registers, call stack, timers and the 64x32 display. The
executor and the timer driver mutate one shared instance under a single lock
owned by the interpreter.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from .errors import ProgramTooLarge

# ==============================
# Constants
# ==============================
MEM_SIZE = 4096
ADDRESS_MASK = 0xFFF
START_ADDRESS = 0x200
FONT_ADDRESS = 0x50  # canonical address for font sprites
FONT_GLYPH_SIZE = 5
SCREEN_W, SCREEN_H = 64, 32
FLAG = 0xF

# Classic CHIP-8 4x5 font (each char 5 bytes)
FONTSET = [
    0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
    0x20, 0x60, 0x20, 0x20, 0x70,  # 1
    0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
    0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
    0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
    0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
    0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
    0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
    0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
    0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
    0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
    0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
    0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
    0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
    0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
    0xF0, 0x80, 0xF0, 0x80, 0x80   # F
]


def blank_display() -> List[List[bool]]:
    return [[False] * SCREEN_W for _ in range(SCREEN_H)]


@dataclass
class MachineState:
    memory: bytearray = field(default_factory=lambda: bytearray(MEM_SIZE))
    V: List[int] = field(default_factory=lambda: [0] * 16)  # registers V0..VF
    index: int = 0
    pc: int = 0
    stack: List[int] = field(default_factory=list)
    delay_timer: int = 0
    sound_timer: int = 0
    display: List[List[bool]] = field(default_factory=blank_display)  # display[y][x]

    def __post_init__(self):
        self.install_font()

    def install_font(self):
        self.memory[FONT_ADDRESS:FONT_ADDRESS + len(FONTSET)] = bytes(FONTSET)

    def reset(self):
        self.memory = bytearray(MEM_SIZE)
        self.install_font()
        self.V = [0] * 16
        self.index = 0
        self.pc = 0
        self.stack = []
        self.delay_timer = 0
        self.sound_timer = 0
        self.display = blank_display()

    def load_program(self, data: bytes):
        """Copy a program image verbatim to 0x200 and point pc at it."""
        end = START_ADDRESS + len(data)
        if end > MEM_SIZE:
            raise ProgramTooLarge(
                f"program is {len(data)} bytes, at most {MEM_SIZE - START_ADDRESS} fit")
        self.memory[START_ADDRESS:end] = data
        self.pc = START_ADDRESS

    # =============== Byte access ===============
    def read(self, addr: int) -> int:
        if not 0 <= addr < MEM_SIZE:
            raise IndexError(f"read outside memory: 0x{addr:X}")
        return self.memory[addr]

    def write(self, addr: int, value: int):
        if not 0 <= addr < MEM_SIZE:
            raise IndexError(f"write outside memory: 0x{addr:X}")
        self.memory[addr] = value & 0xFF

    def fetch(self) -> int:
        """Return the big-endian word at pc without advancing it."""
        hi = self.read(self.pc & ADDRESS_MASK)
        lo = self.read((self.pc + 1) & ADDRESS_MASK)
        return (hi << 8) | lo

    def clear_display(self):
        self.display = blank_display()
