"""
Tests for the execution loop: per-cycle sampling, fetch/advance, faults,
IPS pacing and cooperative shutdown.
"""
import random
import threading
import time

import pygame
import pytest

from chip8emu.config import Config
from chip8emu.errors import STACK_UNDERFLOW, UNKNOWN_INSTRUCTION, Chip8Fault
from chip8emu.interpreter import Interpreter
from chip8emu.state import FLAG, START_ADDRESS

from conftest import CountingBeeper, FakeKeyboard, RecordingRenderer, load_words


def make_interpreter(state, keys=(), **config):
    keyboard = FakeKeyboard(keys)
    interp = Interpreter(state, RecordingRenderer(), keyboard, CountingBeeper(),
                         Config(**config), rng=random.Random(7))
    return interp, keyboard


# =============================================================================
#  STEP
# =============================================================================

def test_step_fetches_and_advances(state):
    load_words(state, 0x6A2B, 0x7A01)
    interp, kb = make_interpreter(state)
    assert interp.step() is None
    assert interp.step() is None
    assert state.V[0xA] == 0x2C
    assert state.pc == START_ADDRESS + 4
    assert kb.polls == 2
    assert interp.cycles == 2


def test_call_return_round_trip(state):
    load_words(state, 0x2300)
    load_words(state, 0x00EE, at=0x300)
    interp, _ = make_interpreter(state)
    interp.step()
    assert state.pc == 0x300
    interp.step()
    assert state.pc == START_ADDRESS + 2


def test_wait_for_key_holds_pc_until_key(state):
    load_words(state, 0xF50A)
    interp, kb = make_interpreter(state)
    interp.step()
    interp.step()
    assert state.pc == START_ADDRESS
    kb.keys.add(pygame.K_c)
    interp.step()
    assert state.V[5] == 0xB
    assert state.pc == START_ADDRESS + 2


def test_add_overflow_program(state):
    load_words(state, 0x61FF, 0x6201, 0x8124)
    interp, _ = make_interpreter(state)
    for _ in range(3):
        interp.step()
    assert state.V[1] == 0
    assert state.V[FLAG] == 1


def test_step_reports_fault_without_raising(state):
    load_words(state, 0x00EE)
    interp, _ = make_interpreter(state)
    fault = interp.step()
    assert fault.reason == STACK_UNDERFLOW
    assert fault.address == START_ADDRESS


def test_pc_wraps_at_end_of_memory(state):
    state.pc = 0xFFE
    load_words(state, 0x6001, at=0xFFE)
    interp, _ = make_interpreter(state)
    interp.step()
    assert state.pc == 0x000


# =============================================================================
#  RUN LOOP
# =============================================================================

def test_run_raises_fault(state):
    load_words(state, 0x6001, 0xFFFF)
    interp, _ = make_interpreter(state)
    with pytest.raises(Chip8Fault) as exc:
        interp.run()
    assert exc.value.fault.reason == UNKNOWN_INSTRUCTION
    assert exc.value.fault.word == 0xFFFF
    assert exc.value.fault.address == START_ADDRESS + 2
    assert not interp.timers.is_alive()


def test_run_until_stopped_and_paced(state):
    load_words(state, 0x1200)  # jump to self
    interp, _ = make_interpreter(state, ips=200)
    state.delay_timer = 255
    runner = threading.Thread(target=interp.run)
    started = time.perf_counter()
    runner.start()
    time.sleep(0.25)
    interp.stop()
    runner.join(timeout=2)
    elapsed = time.perf_counter() - started
    assert not runner.is_alive()
    assert not interp.timers.is_alive()
    assert 0 < interp.cycles <= 200 * elapsed + 2
    # timers advance on wall-clock time, not with instruction count
    assert state.delay_timer < 255


def test_stop_before_run_executes_nothing(state):
    load_words(state, 0x1200)
    interp, _ = make_interpreter(state)
    interp.stop()
    interp.run()
    assert interp.cycles == 0
