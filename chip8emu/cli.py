"""
Command line entry point.

Run:
  chip8emu path/to/rom [--scale 15] [--clock 700] [--tone 440]
"""
from __future__ import annotations

import argparse
import logging
from pathlib import Path

from .config import (
    DEFAULT_BEEP_MS, DEFAULT_IPS, DEFAULT_SCALE, DEFAULT_TONE_HZ, Config, Quirks,
)
from .errors import BackendError, Chip8Fault, ProgramTooLarge
from .frontend import PygameBeeper, PygameDisplay, PygameKeyboard, SilentBeeper
from .interpreter import Interpreter
from .state import MachineState

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="chip8emu", description="CHIP-8 interpreter")
    parser.add_argument("rom", help="Path to CHIP-8 ROM")
    parser.add_argument("--scale", type=int, default=DEFAULT_SCALE,
                        help=f"Pixel scale factor (default {DEFAULT_SCALE})")
    parser.add_argument("--clock", type=int, default=DEFAULT_IPS,
                        help=f"Instructions per second (default {DEFAULT_IPS})")
    parser.add_argument("--tone", type=float, default=DEFAULT_TONE_HZ,
                        help=f"Beep tone frequency in Hz (default {DEFAULT_TONE_HZ:g})")
    parser.add_argument("--beep-ms", type=int, default=DEFAULT_BEEP_MS,
                        help=f"Beep length in milliseconds (default {DEFAULT_BEEP_MS})")
    parser.add_argument("--mute", action="store_true", help="Disable sound")
    parser.add_argument("--shift-vy", action="store_true",
                        help="8XY6/8XYE shift VY into VX")
    parser.add_argument("--jump-vx", action="store_true",
                        help="BXNN jumps to XNN + VX instead of NNN + V0")
    parser.add_argument("--legacy-store", action="store_true",
                        help="Use original FX55/FX65 quirk (I increments)")
    parser.add_argument("--logic-vf", action="store_true",
                        help="8XY1/8XY2/8XY3 reset VF")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Enable debug logging (traces every instruction)")
    return parser


def config_from_args(parser: argparse.ArgumentParser, args: argparse.Namespace) -> Config:
    quirks = Quirks(
        shift_uses_vy=args.shift_vy,
        jump_uses_vx=args.jump_vx,
        store_increments_index=args.legacy_store,
        logic_resets_vf=args.logic_vf,
    )
    try:
        return Config(ips=args.clock, tone_hz=args.tone, beep_ms=args.beep_ms,
                      scale=args.scale, mute=args.mute, quirks=quirks)
    except ValueError as e:
        parser.error(str(e))


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    config = config_from_args(parser, args)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="[%(levelname)s]:  %(message)s")

    rom = Path(args.rom)
    try:
        data = rom.read_bytes()
    except OSError as e:
        logger.error("cannot read ROM %s: %s", rom, e)
        return 1

    state = MachineState()
    try:
        state.load_program(data)
        logger.info("loaded %s (%d bytes)", rom.name, len(data))
        renderer = PygameDisplay(scale=config.scale, caption=rom.name)
    except (ProgramTooLarge, BackendError) as e:
        logger.error("%s", e)
        return 1
    try:
        audio = SilentBeeper() if config.mute else PygameBeeper(
            config.tone_hz, config.beep_ms / 1000)
    except BackendError as e:
        logger.error("%s", e)
        renderer.close()
        return 1

    keyboard = PygameKeyboard()
    interpreter = Interpreter(state, renderer, keyboard, audio, config)
    keyboard.on_quit = interpreter.stop
    renderer.render(state.display)

    try:
        interpreter.run()
    except Chip8Fault:
        # already logged by the interpreter
        return 1
    except KeyboardInterrupt:
        interpreter.stop()
        print("\nExiting.")
    finally:
        renderer.close()
    return 0
