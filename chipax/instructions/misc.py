"""CHIP-8 miscellaneous instructions (Fxxx)."""

import jax.numpy as jnp
from chipax.state import EmulatorState
from chipax.decode import Instruction
from chipax.constants import FONT_START, FONT_GLYPH_SIZE, BIG_FONT_START, BIG_FONT_GLYPH_SIZE, NUM_REGISTERS
from chipax.errors import UnsupportedInstructionError
from chipax.keypad import check_keypad
from chipax.instructions.memory import check_memory_range


def execute_get_delay_timer(state: EmulatorState, instruction: Instruction) -> EmulatorState:
    """FX07 - Set VX to delay timer value."""
    return state.replace(V=state.V.at[instruction.x].set(state.delay_timer))


def execute_set_delay_timer(state: EmulatorState, instruction: Instruction) -> EmulatorState:
    """FX15 - Set delay timer to VX."""
    return state.replace(delay_timer=state.V[instruction.x])


def execute_set_sound_timer(state: EmulatorState, instruction: Instruction) -> EmulatorState:
    """FX18 - Set sound timer to VX. Tracked only, no audio."""
    return state.replace(sound_timer=state.V[instruction.x])


def execute_add_to_index(state: EmulatorState, instruction: Instruction) -> EmulatorState:
    """FX1E - Add VX to I register."""
    new_i = state.I + jnp.astype(state.V[instruction.x], jnp.uint16)
    return state.replace(I=jnp.astype(new_i, jnp.uint16))


def execute_wait_for_key(state: EmulatorState, instruction: Instruction) -> EmulatorState:
    """FX0A - Wait for key press (blocking).

    With no key down the PC is rewound so the same instruction runs again on
    the next tick. Otherwise the lowest pressed key index lands in VX.
    """
    pressed_key = check_keypad(state.keypad)
    if pressed_key is None:
        return state.replace(pc=jnp.astype(state.pc - 2, jnp.uint16))
    return state.replace(V=state.V.at[instruction.x].set(pressed_key))


def execute_font_character(state: EmulatorState, instruction: Instruction) -> EmulatorState:
    """FX29 - Set I to location of sprite for digit VX."""
    font_address = FONT_START + jnp.astype(state.V[instruction.x], jnp.uint16) * FONT_GLYPH_SIZE
    return state.replace(I=jnp.astype(font_address, jnp.uint16))


def execute_big_font_character(state: EmulatorState, instruction: Instruction) -> EmulatorState:
    """FX30 - Set I to location of the 8x10 sprite for digit VX (extended mode only)."""
    if not state.hires:
        raise UnsupportedInstructionError(instruction.raw, "requires extended display mode")
    font_address = BIG_FONT_START + jnp.astype(state.V[instruction.x], jnp.uint16) * BIG_FONT_GLYPH_SIZE
    return state.replace(I=jnp.astype(font_address, jnp.uint16))


def execute_bcd_conversion(state: EmulatorState, instruction: Instruction) -> EmulatorState:
    """FX33 - Store BCD representation of VX at I, I+1, I+2."""
    check_memory_range(state.I, 3, instruction.raw)
    value = state.V[instruction.x]

    # Vectorized BCD conversion
    digits = jnp.array([
        value // 100,
        (value // 10) % 10,
        value % 10
    ], dtype=jnp.uint8)

    # Single vectorized memory update
    indices = jnp.arange(3) + state.I
    new_memory = state.memory.at[indices].set(digits)
    return state.replace(memory=new_memory)


def execute_store_registers(state: EmulatorState, instruction: Instruction) -> EmulatorState:
    """FX55 - Store V0 through VX in memory starting at I."""
    check_memory_range(state.I, instruction.x + 1, instruction.raw)
    register_mask = jnp.arange(NUM_REGISTERS) <= instruction.x
    base_indices = state.I + jnp.arange(NUM_REGISTERS)
    current_memory_values = state.memory[base_indices]
    new_memory_values = jnp.where(register_mask, state.V, current_memory_values)
    new_memory = state.memory.at[base_indices].set(new_memory_values)

    if state.index_increment:
        return state.replace(memory=new_memory, I=jnp.astype(state.I + instruction.x + 1, jnp.uint16))
    return state.replace(memory=new_memory)


def execute_load_registers(state: EmulatorState, instruction: Instruction) -> EmulatorState:
    """FX65 - Load V0 through VX from memory starting at I."""
    check_memory_range(state.I, instruction.x + 1, instruction.raw)
    register_mask = jnp.arange(NUM_REGISTERS) <= instruction.x
    base_indices = state.I + jnp.arange(NUM_REGISTERS)
    memory_values = state.memory[base_indices]
    new_V = jnp.where(register_mask, memory_values, state.V)

    if state.index_increment:
        return state.replace(V=new_V, I=jnp.astype(state.I + instruction.x + 1, jnp.uint16))
    return state.replace(V=new_V)
