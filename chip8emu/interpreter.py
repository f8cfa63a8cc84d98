"""
Execution loop: input sampling, fetch/decode/execute and IPS pacing.

The interpreter owns the single lock guarding ``MachineState`` and the stop
event observed by both the execution loop and the timer thread. The lock is
held for exactly one instruction cycle, or one timer tick, at a time.
"""
from __future__ import annotations

import logging
import random
import threading
import time
from typing import Optional

from .config import Config
from .decoder import decode
from .errors import Chip8Fault, Fault
from .executor import Executor
from .keypad import sample
from .state import ADDRESS_MASK, MachineState
from .timers import TimerDriver

logger = logging.getLogger(__name__)


class Interpreter:
    def __init__(self, state: MachineState, renderer, keyboard, audio,
                 config: Optional[Config] = None,
                 rng: Optional[random.Random] = None,
                 clock=time.perf_counter):
        self.state = state
        self.keyboard = keyboard
        self.config = config or Config()
        self.clock = clock
        self.lock = threading.Lock()
        self.stop_event = threading.Event()
        self.executor = Executor(renderer, self.config.quirks, rng)
        self.timers = TimerDriver(state, self.lock, audio, self.stop_event, clock=clock)
        self.cycles = 0

    def step(self) -> Optional[Fault]:
        """Run one full instruction cycle."""
        keys = sample(self.keyboard)
        with self.lock:
            word = self.state.fetch()
            self.state.pc = (self.state.pc + 2) & ADDRESS_MASK
            fault = self.executor.execute(self.state, decode(word), keys)
        self.cycles += 1
        return fault

    def stop(self):
        self.stop_event.set()

    def run(self):
        """Execute until ``stop()`` is requested or the program faults."""
        period = 1.0 / self.config.ips
        logger.info("running at %d instructions per second", self.config.ips)
        self.timers.start()
        try:
            deadline = self.clock()
            while not self.stop_event.is_set():
                fault = self.step()
                if fault is not None:
                    logger.error("fatal: %s", fault)
                    raise Chip8Fault(fault)
                deadline += period
                delay = deadline - self.clock()
                if delay > 0:
                    self.stop_event.wait(delay)
                else:
                    # behind schedule: resync rather than burst
                    deadline = self.clock()
        finally:
            self.stop_event.set()
            self.timers.join()
            logger.info("stopped after %d cycles", self.cycles)
