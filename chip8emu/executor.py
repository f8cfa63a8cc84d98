"""
Instruction semantics for the 35 standard CHIP-8 opcodes.

``Executor.execute`` applies one decoded instruction to a ``MachineState``.
The caller has already fetched the word and advanced pc past it, and holds the
state lock for the whole call. Program defects come back as a ``Fault`` value
instead of an exception, so tests and tools can inspect them.
"""
from __future__ import annotations

import logging
import random
from typing import Optional

from .config import Quirks
from .decoder import Instruction
from .errors import STACK_UNDERFLOW, UNKNOWN_INSTRUCTION, Fault
from .keypad import KeySnapshot
from .state import (
    ADDRESS_MASK, FLAG, FONT_ADDRESS, FONT_GLYPH_SIZE, SCREEN_H, SCREEN_W,
    MachineState,
)

logger = logging.getLogger(__name__)


class Executor:
    def __init__(self, renderer, quirks: Optional[Quirks] = None,
                 rng: Optional[random.Random] = None):
        self.renderer = renderer
        self.quirks = quirks or Quirks()
        self.rng = rng or random.Random()

    def execute(self, state: MachineState, ins: Instruction,
                keys: KeySnapshot) -> Optional[Fault]:
        address = (state.pc - 2) & ADDRESS_MASK
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("%03X: %04X", address, ins.word)

        V = state.V
        op, x, y, n, kk, nnn = ins.op, ins.x, ins.y, ins.n, ins.kk, ins.nnn

        if ins.word == 0x00E0:  # CLS
            state.clear_display()
            self.renderer.render(state.display)
        elif ins.word == 0x00EE:  # RET
            if not state.stack:
                return Fault(STACK_UNDERFLOW, ins.word, address)
            state.pc = state.stack.pop()
        elif op == 0x1:  # JP addr
            state.pc = nnn
        elif op == 0x2:  # CALL addr
            state.stack.append(state.pc)
            state.pc = nnn
        elif op == 0x3:  # SE Vx, byte
            if V[x] == kk:
                self._skip(state)
        elif op == 0x4:  # SNE Vx, byte
            if V[x] != kk:
                self._skip(state)
        elif op == 0x5 and n == 0:  # SE Vx, Vy
            if V[x] == V[y]:
                self._skip(state)
        elif op == 0x6:  # LD Vx, byte
            V[x] = kk
        elif op == 0x7:  # ADD Vx, byte (no carry flag)
            V[x] = (V[x] + kk) & 0xFF
        elif op == 0x8:
            return self._arithmetic(state, ins, address)
        elif op == 0x9 and n == 0:  # SNE Vx, Vy
            if V[x] != V[y]:
                self._skip(state)
        elif op == 0xA:  # LD I, addr
            state.index = nnn
        elif op == 0xB:  # JP V0, addr
            offset = V[x] if self.quirks.jump_uses_vx else V[0]
            state.pc = (nnn + offset) & ADDRESS_MASK
        elif op == 0xC:  # RND Vx, byte
            V[x] = self.rng.randint(0, 255) & kk
        elif op == 0xD:  # DRW Vx, Vy, nibble
            self._draw_sprite(state, V[x], V[y], n)
            self.renderer.render(state.display)
        elif op == 0xE and kk == 0x9E:  # SKP Vx
            if keys.is_held(V[x]):
                self._skip(state)
        elif op == 0xE and kk == 0xA1:  # SKNP Vx
            if not keys.is_held(V[x]):
                self._skip(state)
        elif op == 0xF:
            return self._misc(state, ins, keys, address)
        else:
            return Fault(UNKNOWN_INSTRUCTION, ins.word, address)
        return None

    # =============== 8XYN ===============
    def _arithmetic(self, state: MachineState, ins: Instruction,
                    address: int) -> Optional[Fault]:
        V = state.V
        x, y, n = ins.x, ins.y, ins.n

        if n == 0x0:  # LD Vx, Vy
            V[x] = V[y]
        elif n in (0x1, 0x2, 0x3):  # OR / AND / XOR Vx, Vy
            if n == 0x1:
                V[x] |= V[y]
            elif n == 0x2:
                V[x] &= V[y]
            else:
                V[x] ^= V[y]
            if self.quirks.logic_resets_vf:
                V[FLAG] = 0
        elif n == 0x4:  # ADD Vx, Vy
            total = V[x] + V[y]
            V[x] = total & 0xFF
            V[FLAG] = 1 if total > 0xFF else 0
        elif n == 0x5:  # SUB Vx, Vy (Vx = Vx - Vy)
            no_borrow = V[x] >= V[y]
            V[x] = (V[x] - V[y]) & 0xFF
            V[FLAG] = 1 if no_borrow else 0
        elif n == 0x6:  # SHR Vx {, Vy}
            source = V[y] if self.quirks.shift_uses_vy else V[x]
            V[x] = source >> 1
            V[FLAG] = source & 0x1
        elif n == 0x7:  # SUBN Vx, Vy (Vx = Vy - Vx)
            no_borrow = V[y] >= V[x]
            V[x] = (V[y] - V[x]) & 0xFF
            V[FLAG] = 1 if no_borrow else 0
        elif n == 0xE:  # SHL Vx {, Vy}
            source = V[y] if self.quirks.shift_uses_vy else V[x]
            V[x] = (source << 1) & 0xFF
            V[FLAG] = (source >> 7) & 0x1
        else:
            return Fault(UNKNOWN_INSTRUCTION, ins.word, address)
        return None

    # =============== FXNN ===============
    def _misc(self, state: MachineState, ins: Instruction, keys: KeySnapshot,
              address: int) -> Optional[Fault]:
        V = state.V
        x, kk = ins.x, ins.kk

        if kk == 0x07:  # LD Vx, DT
            V[x] = state.delay_timer
        elif kk == 0x0A:  # LD Vx, K (wait for key)
            key = keys.lowest()
            if key is None:
                # replay this instruction next cycle
                state.pc = (state.pc - 2) & ADDRESS_MASK
            else:
                V[x] = key
        elif kk == 0x15:  # LD DT, Vx
            state.delay_timer = V[x]
        elif kk == 0x18:  # LD ST, Vx
            state.sound_timer = V[x]
        elif kk == 0x1E:  # ADD I, Vx
            state.index = (state.index + V[x]) & 0xFFFF
        elif kk == 0x29:  # LD F, Vx
            state.index = FONT_ADDRESS + (V[x] & 0xF) * FONT_GLYPH_SIZE
        elif kk == 0x33:  # LD B, Vx (BCD)
            val = V[x]
            state.write(state.index & ADDRESS_MASK, val // 100)
            state.write((state.index + 1) & ADDRESS_MASK, (val // 10) % 10)
            state.write((state.index + 2) & ADDRESS_MASK, val % 10)
        elif kk == 0x55:  # LD [I], Vx
            for i in range(x + 1):
                state.write((state.index + i) & ADDRESS_MASK, V[i])
            if self.quirks.store_increments_index:
                state.index = (state.index + x + 1) & 0xFFFF
        elif kk == 0x65:  # LD Vx, [I]
            for i in range(x + 1):
                V[i] = state.read((state.index + i) & ADDRESS_MASK)
            if self.quirks.store_increments_index:
                state.index = (state.index + x + 1) & 0xFFFF
        else:
            return Fault(UNKNOWN_INSTRUCTION, ins.word, address)
        return None

    # =============== Helpers ===============
    @staticmethod
    def _skip(state: MachineState):
        state.pc = (state.pc + 2) & ADDRESS_MASK

    @staticmethod
    def _draw_sprite(state: MachineState, x_pos: int, y_pos: int, height: int):
        """XOR an 8-wide sprite at I onto the display, clipped at the edges."""
        state.V[FLAG] = 0
        x_pos %= SCREEN_W
        y_pos %= SCREEN_H
        for row in range(height):
            py = y_pos + row
            if py >= SCREEN_H:
                break
            sprite = state.read((state.index + row) & ADDRESS_MASK)
            line = state.display[py]
            for col in range(8):
                px = x_pos + col
                if px >= SCREEN_W:
                    break
                if (sprite >> (7 - col)) & 1:
                    if line[px]:
                        state.V[FLAG] = 1
                    line[px] = not line[px]
