"""CHIP-8 / Super-CHIP emulator package."""

from chipax.state import EmulatorState, create_state
from chipax.emulator import (
    execute, fetch, step, decrement_timer, load_program, load_rom, framebuffer, screen
)
from chipax.decode import Instruction, Op, decode
from chipax.keypad import set_key, check_keypad
from chipax.machine import Machine
from chipax.errors import (
    EmulatorFault, UnsupportedInstructionError, InvalidOpcodeError, StackFaultError, MemoryFaultError,
    ProgramTooLargeError, KeypadIndexError
)
from chipax.constants import *
from chipax.rendering import display_to_rgb, create_color_scheme

__all__ = [
    "EmulatorState",
    "create_state",
    "fetch",
    "execute",
    "step",
    "decrement_timer",
    "load_program",
    "load_rom",
    "framebuffer",
    "screen",
    "Instruction",
    "Op",
    "decode",
    "set_key",
    "check_keypad",
    "Machine",
    "EmulatorFault",
    "UnsupportedInstructionError",
    "InvalidOpcodeError",
    "StackFaultError",
    "MemoryFaultError",
    "ProgramTooLargeError",
    "KeypadIndexError",
    "PROGRAM_START",
    "FONT_START",
    "BIG_FONT_START",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
    "HIRES_SCREEN_WIDTH",
    "HIRES_SCREEN_HEIGHT",
    "display_to_rgb",
    "create_color_scheme",
]
