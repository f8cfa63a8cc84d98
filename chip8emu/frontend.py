"""
pygame backends: window renderer, keyboard and square-wave beeper.

The interpreter only needs ``render(display)``, ``pressed()`` and ``beep()``;
anything with those methods can stand in for these classes.
"""
from __future__ import annotations

import logging
import os
from typing import Callable, List, Optional, Set

import numpy as np

os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")
import pygame  # noqa: E402

from .errors import BackendError  # noqa: E402
from .keypad import KEYMAP  # noqa: E402
from .state import SCREEN_H, SCREEN_W  # noqa: E402

logger = logging.getLogger(__name__)

SAMPLE_RATE = 44100
FOREGROUND = (255, 255, 255)
BACKGROUND = (0, 0, 0)


def square_wave(tone_hz: float, duration: float, sample_rate: int = SAMPLE_RATE,
                volume: float = 1.0) -> np.ndarray:
    """Signed 16-bit mono square wave."""
    t = np.arange(int(sample_rate * duration))
    wave = ((t * tone_hz * 2 / sample_rate) % 2 >= 1).astype('float32') * 2 - 1
    return (wave * 32767 * volume).astype('int16')


class PygameDisplay:
    def __init__(self, scale: int = 15, caption: str = "chip8emu"):
        self.scale = max(1, int(scale))
        try:
            pygame.display.init()
            self.surface = pygame.display.set_mode(
                (SCREEN_W * self.scale, SCREEN_H * self.scale))
        except pygame.error as e:
            raise BackendError(f"cannot open display: {e}") from e
        pygame.display.set_caption(caption)
        logger.info("display opened at scale %d", self.scale)

    def render(self, display: List[List[bool]]):
        surf = self.surface
        surf.fill(BACKGROUND)
        size = self.scale
        for y, line in enumerate(display):
            for x, on in enumerate(line):
                if on:
                    surf.fill(FOREGROUND, pygame.Rect(x * size, y * size, size, size))
        pygame.display.flip()

    def close(self):
        pygame.quit()


class PygameKeyboard:
    """Reports held keys; window close or Escape requests a stop."""

    def __init__(self, on_quit: Optional[Callable[[], None]] = None):
        self.on_quit = on_quit

    def pressed(self) -> Set[int]:
        for event in pygame.event.get():
            quit_requested = event.type == pygame.QUIT or (
                event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE)
            if quit_requested and self.on_quit is not None:
                self.on_quit()
        held = pygame.key.get_pressed()
        return {k for k in KEYMAP if held[k]}


class PygameBeeper:
    def __init__(self, tone_hz: float = 440.0, duration: float = 0.1, volume: float = 0.2):
        try:
            pygame.mixer.pre_init(SAMPLE_RATE, -16, 1, 256)
            pygame.mixer.init()
        except pygame.error as e:
            raise BackendError(f"cannot open audio device: {e}") from e
        rate, _, channels = pygame.mixer.get_init()
        wave = square_wave(tone_hz, duration, rate, volume)
        if channels > 1:
            wave = np.repeat(wave[:, None], channels, axis=1)
        self.sound = pygame.sndarray.make_sound(np.ascontiguousarray(wave))
        self.channel = None
        logger.info("audio ready: %.1f Hz tone, %d ms", tone_hz, round(duration * 1000))

    def beep(self):
        # a beep still playing covers this tick
        if self.channel is None or not self.channel.get_busy():
            self.channel = self.sound.play()


class SilentBeeper:
    def beep(self):
        pass
