"""CHIP-8 interpreter with a decoupled 60 Hz timer thread."""
from .config import Config, Quirks
from .decoder import Instruction, decode
from .errors import BackendError, Chip8Error, Chip8Fault, Fault, ProgramTooLarge
from .executor import Executor
from .interpreter import Interpreter
from .keypad import KEYMAP, KeySnapshot, sample
from .state import MachineState
from .timers import TimerDriver

__version__ = "0.1.0"
