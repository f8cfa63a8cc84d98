"""
Input sampling for the 16-key hexadecimal keypad.

Keyboard mapping (common layout):

  CHIP-8  =>  Keyboard
  1 2 3 C =>  1 2 3 4
  4 5 6 D =>  Q W E R
  7 8 9 E =>  A S D F
  A 0 B F =>  Z X C V
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import FrozenSet, Iterable, Optional

os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")
import pygame  # noqa: E402

# Keyboard mapping: pygame key -> CHIP-8 key value
KEYMAP = {
    pygame.K_1: 0x1,
    pygame.K_2: 0x2,
    pygame.K_3: 0x3,
    pygame.K_4: 0xC,
    pygame.K_q: 0x4,
    pygame.K_w: 0x5,
    pygame.K_e: 0x6,
    pygame.K_r: 0xD,
    pygame.K_a: 0x7,
    pygame.K_s: 0x8,
    pygame.K_d: 0x9,
    pygame.K_f: 0xE,
    pygame.K_z: 0xA,
    pygame.K_x: 0x0,
    pygame.K_c: 0xB,
    pygame.K_v: 0xF,
}


@dataclass(frozen=True)
class KeySnapshot:
    """Keypad values held at the start of one cycle."""
    held: FrozenSet[int] = frozenset()

    @classmethod
    def from_physical(cls, keys: Iterable[int]) -> "KeySnapshot":
        return cls(frozenset(KEYMAP[k] for k in keys if k in KEYMAP))

    def is_held(self, value: int) -> bool:
        return (value & 0xF) in self.held

    def lowest(self) -> Optional[int]:
        return min(self.held) if self.held else None

    def __bool__(self) -> bool:
        return bool(self.held)


NO_KEYS = KeySnapshot()


def sample(keyboard) -> KeySnapshot:
    """Take one snapshot from a keyboard backend exposing ``pressed()``."""
    return KeySnapshot.from_physical(keyboard.pressed())
