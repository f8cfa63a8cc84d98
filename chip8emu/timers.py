"""
60 Hz delay/sound timer driver.

Runs on its own thread, decoupled from the instruction rate. Each tick takes
the shared state lock once, decrements both timers toward zero and, if the
sound timer was running, fires the audio backend after releasing the lock.
"""
from __future__ import annotations

import logging
import threading
import time

from .state import MachineState

logger = logging.getLogger(__name__)

TIMER_HZ = 60


class TimerDriver(threading.Thread):
    def __init__(self, state: MachineState, lock: threading.Lock, audio,
                 stop_event: threading.Event, rate: int = TIMER_HZ,
                 clock=time.perf_counter):
        super().__init__(name="chip8-timers", daemon=True)
        self.state = state
        self.lock = lock
        self.audio = audio
        self.stop_event = stop_event
        self.period = 1.0 / rate
        self.clock = clock
        self.ticks = 0

    def tick(self):
        with self.lock:
            sounding = self.state.sound_timer > 0
            if self.state.delay_timer > 0:
                self.state.delay_timer -= 1
            if self.state.sound_timer > 0:
                self.state.sound_timer -= 1
            self.ticks += 1
        if sounding:
            self.audio.beep()

    def run(self):
        logger.debug("timer thread started at %d Hz", round(1.0 / self.period))
        deadline = self.clock() + self.period
        while not self.stop_event.is_set():
            delay = deadline - self.clock()
            # late ticks run back to back, never merged
            if delay > 0 and self.stop_event.wait(delay):
                break
            self.tick()
            deadline += self.period
        logger.debug("timer thread stopped after %d ticks", self.ticks)
