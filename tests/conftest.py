"""Shared test doubles for the renderer, keyboard and audio backends."""
import random

import pytest

from chip8emu.executor import Executor
from chip8emu.state import START_ADDRESS, MachineState


class RecordingRenderer:
    def __init__(self):
        self.frames = []

    def render(self, display):
        self.frames.append([list(line) for line in display])


class FakeKeyboard:
    def __init__(self, keys=()):
        self.keys = set(keys)
        self.polls = 0

    def pressed(self):
        self.polls += 1
        return set(self.keys)


class CountingBeeper:
    def __init__(self):
        self.beeps = 0

    def beep(self):
        self.beeps += 1


@pytest.fixture
def state():
    s = MachineState()
    s.pc = START_ADDRESS
    return s


@pytest.fixture
def renderer():
    return RecordingRenderer()


@pytest.fixture
def executor(renderer):
    return Executor(renderer, rng=random.Random(1234))


def load_words(state, *words, at=START_ADDRESS):
    """Write big-endian instruction words into memory starting at ``at``."""
    data = b"".join(w.to_bytes(2, "big") for w in words)
    state.memory[at:at + len(data)] = data
