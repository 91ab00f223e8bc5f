"""CHIP-8 display operations."""

import jax.numpy as jnp
from chipax.state import EmulatorState
from chipax.decode import Instruction
from chipax.instructions.memory import check_memory_range
from chipax.constants import (
    SCREEN_WIDTH, SCREEN_HEIGHT, HIRES_SCREEN_WIDTH, HIRES_SCREEN_HEIGHT, LORES_SCALE
)


def screen_size(state: EmulatorState) -> tuple[int, int]:
    """Logical (width, height) addressed by draw instructions in the current mode."""
    if state.hires:
        return HIRES_SCREEN_WIDTH, HIRES_SCREEN_HEIGHT
    return SCREEN_WIDTH, SCREEN_HEIGHT


def sprite_rows(state: EmulatorState, height: int, opcode: int = None) -> jnp.ndarray:
    """Unpack ``height`` one-byte rows at I into a (height, 8) bit matrix."""
    check_memory_range(state.I, height, opcode)
    rows = state.memory[state.I + jnp.arange(height)].astype(jnp.int32)
    return (rows[:, None] >> (7 - jnp.arange(8))[None, :]) & 1


def blit(state: EmulatorState, bits: jnp.ndarray, x: int, y: int) -> EmulatorState:
    """XOR a (rows, cols) bit matrix onto the display at logical (VX, VY).

    Coordinates wrap modulo the logical screen size. In standard mode every
    logical pixel covers a 2x2 block of the physical display. VF is set to 1
    when any lit pixel is turned off.
    """
    width, height = screen_size(state)
    rows, cols = bits.shape

    origin_x = jnp.astype(state.V[x], jnp.int32) % width
    origin_y = jnp.astype(state.V[y], jnp.int32) % height
    xs = (origin_x + jnp.arange(cols))[None, :] % width
    ys = (origin_y + jnp.arange(rows))[:, None] % height

    sprite = jnp.zeros((width, height), dtype=jnp.bool_).at[xs, ys].set(bits.astype(jnp.bool_))
    if not state.hires:
        sprite = jnp.repeat(jnp.repeat(sprite, LORES_SCALE, axis=0), LORES_SCALE, axis=1)

    collision = jnp.any(state.display & sprite)
    return state.replace(
        display=state.display ^ sprite,
        V=state.V.at[15].set(jnp.astype(collision, jnp.uint8))
    )


def execute_display(state: EmulatorState, instruction: Instruction) -> EmulatorState:
    """DXYN - Draw sprite at (VX, VY) with height N."""
    bits = sprite_rows(state, instruction.n, instruction.raw)
    return blit(state, bits, instruction.x, instruction.y)


def execute_clear_screen(state: EmulatorState, instruction: Instruction) -> EmulatorState:
    """00E0 - Clear display."""
    return state.replace(display=jnp.zeros_like(state.display))
