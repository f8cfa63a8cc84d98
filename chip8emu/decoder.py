from __future__ import annotations

from typing import NamedTuple


class Instruction(NamedTuple):
    word: int
    op: int    # bits 15..12, instruction family
    x: int     # bits 11..8, register index
    y: int     # bits 7..4, register index
    n: int     # bits 3..0, 4-bit immediate
    kk: int    # bits 7..0, 8-bit immediate
    nnn: int   # bits 11..0, 12-bit address


def decode(word: int) -> Instruction:
    """Split a 16-bit instruction word into its fields. Never fails."""
    word &= 0xFFFF
    return Instruction(
        word=word,
        op=(word & 0xF000) >> 12,
        x=(word & 0x0F00) >> 8,
        y=(word & 0x00F0) >> 4,
        n=word & 0x000F,
        kk=word & 0x00FF,
        nnn=word & 0x0FFF,
    )
