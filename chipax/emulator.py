"""Main CHIP-8 emulator execution engine."""

from typing import Union

import jax.numpy as jnp
from chipax.state import EmulatorState
from chipax.decode import Instruction, Op, decode
from chipax.constants import PROGRAM_START, MAX_PROGRAM_SIZE, LORES_SCALE
from chipax.errors import ProgramTooLargeError
from chipax.instructions.system import execute_unsupported, execute_invalid
from chipax.instructions.control_flow import (
    execute_jump, execute_call, execute_return, execute_jump_with_offset,
    execute_skip_if_equal_immediate, execute_skip_if_not_equal_immediate,
    execute_skip_if_equal_register, execute_skip_if_not_equal_register,
    execute_skip_if_key, execute_skip_if_not_key
)
from chipax.instructions.alu import ALU_OPERATIONS, execute_alu_operation
from chipax.instructions.memory import check_memory_range, execute_set, execute_add, execute_set_index, execute_random
from chipax.instructions.display import execute_display, execute_clear_screen
from chipax.instructions.extended import (
    execute_display_big, execute_scroll_down, execute_scroll_up, execute_scroll_right,
    execute_scroll_left, execute_low_resolution, execute_high_resolution
)
from chipax.instructions.misc import (
    execute_get_delay_timer, execute_wait_for_key, execute_set_delay_timer,
    execute_set_sound_timer, execute_add_to_index, execute_font_character,
    execute_big_font_character, execute_bcd_conversion, execute_store_registers,
    execute_load_registers
)


EXECUTORS = {
    Op.CLS: execute_clear_screen,
    Op.RET: execute_return,
    Op.SCD: execute_scroll_down,
    Op.SCU: execute_scroll_up,
    Op.SCR: execute_scroll_right,
    Op.SCL: execute_scroll_left,
    Op.EXIT: execute_unsupported,
    Op.LOW: execute_low_resolution,
    Op.HIGH: execute_high_resolution,
    Op.JP: execute_jump,
    Op.JP_V0: execute_jump_with_offset,
    Op.CALL: execute_call,
    Op.SE_BYTE: execute_skip_if_equal_immediate,
    Op.SNE_BYTE: execute_skip_if_not_equal_immediate,
    Op.SE_REG: execute_skip_if_equal_register,
    Op.SNE_REG: execute_skip_if_not_equal_register,
    Op.LD_BYTE: execute_set,
    Op.ADD_BYTE: execute_add,
    **{op: execute_alu_operation for op in ALU_OPERATIONS},
    Op.LD_I: execute_set_index,
    Op.RND: execute_random,
    Op.DRW: execute_display,
    Op.DRW16: execute_display_big,
    Op.SKP: execute_skip_if_key,
    Op.SKNP: execute_skip_if_not_key,
    Op.LD_DT_READ: execute_get_delay_timer,
    Op.LD_KEY: execute_wait_for_key,
    Op.LD_DT_WRITE: execute_set_delay_timer,
    Op.LD_ST: execute_set_sound_timer,
    Op.ADD_I: execute_add_to_index,
    Op.LD_FONT: execute_font_character,
    Op.LD_BIG_FONT: execute_big_font_character,
    Op.LD_BCD: execute_bcd_conversion,
    Op.STORE: execute_store_registers,
    Op.LOAD: execute_load_registers,
    Op.STORE_RPL: execute_unsupported,
    Op.LOAD_RPL: execute_unsupported,
    Op.INVALID: execute_invalid,
}


def execute(state: EmulatorState, instruction: Union[int, Instruction]) -> EmulatorState:
    """Execute single CHIP-8 instruction.

    Accepts either a raw 16-bit word or an already decoded ``Instruction``.
    The PC is not advanced here; ``step`` does that before executing.

    Raises:
        UnsupportedInstructionError: for EXIT, RPL transfers, LD HF in standard
            mode and words that do not decode (``InvalidOpcodeError``).
        StackFaultError: on call stack overflow or underflow.
        MemoryFaultError: when a sprite, BCD or register block access runs
            past the end of memory.
    """
    if not isinstance(instruction, Instruction):
        instruction = decode(instruction)
    return EXECUTORS[instruction.op](state, instruction)


def _pack_u16(high: jnp.uint8, low: jnp.uint8) -> jnp.uint16:
    """Pack two bytes into uint16."""
    return (high.astype(jnp.uint16) << 8) | low.astype(jnp.uint16)


def fetch(state: EmulatorState) -> tuple[EmulatorState, jnp.uint16]:
    """Fetch next instruction from memory and advance PC by 2."""
    check_memory_range(state.pc, 2)
    instruction = _pack_u16(state.memory[state.pc], state.memory[state.pc + 1])
    return state.replace(pc=jnp.astype(state.pc + 2, jnp.uint16)), instruction


def step(state: EmulatorState) -> tuple[EmulatorState, Instruction]:
    """Fetch, decode and execute one instruction. Returns the decoded instruction too."""
    state, word = fetch(state)
    instruction = decode(int(word))
    return execute(state, instruction), instruction


def decrement_timer(state: EmulatorState) -> EmulatorState:
    """Count the delay and sound timers down by one, stopping at zero."""
    return state.replace(
        delay_timer=jnp.where(state.delay_timer > 0, state.delay_timer - 1, state.delay_timer),
        sound_timer=jnp.where(state.sound_timer > 0, state.sound_timer - 1, state.sound_timer),
    )


def load_program(state: EmulatorState, data: bytes) -> EmulatorState:
    """Copy a program image into memory starting at 0x200."""
    if len(data) > MAX_PROGRAM_SIZE:
        raise ProgramTooLargeError(len(data), MAX_PROGRAM_SIZE)
    if not data:
        return state
    rom_array = jnp.array(list(data), dtype=jnp.uint8)
    new_memory = state.memory.at[PROGRAM_START:PROGRAM_START + len(data)].set(rom_array)
    return state.replace(memory=new_memory)


def load_rom(state: EmulatorState, filename: str) -> EmulatorState:
    """Load ROM data into CHIP-8 memory starting at 0x200."""
    with open(filename, 'rb') as f:
        rom_data = f.read()
    return load_program(state, rom_data)


def screen(state: EmulatorState) -> jnp.ndarray:
    """Display at the current logical resolution, shaped (width, height) and indexed [x, y]."""
    if state.hires:
        return state.display
    return state.display[::LORES_SCALE, ::LORES_SCALE]


def framebuffer(state: EmulatorState) -> jnp.ndarray:
    """Flat row-major view of ``screen``: pixel (x, y) sits at ``y * width + x``."""
    return screen(state).T.reshape(-1)
