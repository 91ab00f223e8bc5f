"""Super-CHIP display extensions: 16x16 sprites, scrolling, resolution switch.

Scrolling always works on the physical 128x64 display, so in standard mode a
scroll of 4 columns moves the picture by 2 logical pixels.
"""

import jax.numpy as jnp
from chipax.state import EmulatorState
from chipax.decode import Instruction
from chipax.constants import SCROLL_COLUMNS
from chipax.instructions.display import blit
from chipax.instructions.memory import check_memory_range


def big_sprite_rows(state: EmulatorState, opcode: int = None) -> jnp.ndarray:
    """Unpack 16 big-endian two-byte rows at I into a (16, 16) bit matrix."""
    check_memory_range(state.I, 32, opcode)
    offsets = 2 * jnp.arange(16)
    high = state.memory[state.I + offsets].astype(jnp.int32)
    low = state.memory[state.I + offsets + 1].astype(jnp.int32)
    words = (high << 8) | low
    return (words[:, None] >> (15 - jnp.arange(16))[None, :]) & 1


def execute_display_big(state: EmulatorState, instruction: Instruction) -> EmulatorState:
    """DXY0 - Draw 16x16 sprite at (VX, VY). No-op without collision in standard mode."""
    if not state.hires:
        return state.replace(V=state.V.at[15].set(0))
    return blit(state, big_sprite_rows(state, instruction.raw), instruction.x, instruction.y)


def scroll_down(display: jnp.ndarray, rows: int) -> jnp.ndarray:
    """Move the picture down, blanking the rows it leaves at the top."""
    return jnp.roll(display, rows, axis=1).at[:, :rows].set(False)


def scroll_up(display: jnp.ndarray, rows: int) -> jnp.ndarray:
    """Move the picture up, blanking the rows it leaves at the bottom."""
    height = display.shape[1]
    return jnp.roll(display, -rows, axis=1).at[:, height - rows:].set(False)


def scroll_right(display: jnp.ndarray, columns: int) -> jnp.ndarray:
    """Move the picture right, blanking the columns it leaves on the left."""
    return jnp.roll(display, columns, axis=0).at[:columns, :].set(False)


def scroll_left(display: jnp.ndarray, columns: int) -> jnp.ndarray:
    """Move the picture left, blanking the columns it leaves on the right."""
    width = display.shape[0]
    return jnp.roll(display, -columns, axis=0).at[width - columns:, :].set(False)


def execute_scroll_down(state: EmulatorState, instruction: Instruction) -> EmulatorState:
    """00CN - Scroll display N rows down."""
    return state.replace(display=scroll_down(state.display, instruction.n))


def execute_scroll_up(state: EmulatorState, instruction: Instruction) -> EmulatorState:
    """00DN - Scroll display N rows up."""
    return state.replace(display=scroll_up(state.display, instruction.n))


def execute_scroll_right(state: EmulatorState, instruction: Instruction) -> EmulatorState:
    """00FB - Scroll display 4 columns right."""
    return state.replace(display=scroll_right(state.display, SCROLL_COLUMNS))


def execute_scroll_left(state: EmulatorState, instruction: Instruction) -> EmulatorState:
    """00FC - Scroll display 4 columns left."""
    return state.replace(display=scroll_left(state.display, SCROLL_COLUMNS))


def execute_low_resolution(state: EmulatorState, instruction: Instruction) -> EmulatorState:
    """00FE - Switch to standard 64x32 addressing. The display is kept as is."""
    return state.replace(hires=False)


def execute_high_resolution(state: EmulatorState, instruction: Instruction) -> EmulatorState:
    """00FF - Switch to extended 128x64 addressing. The display is kept as is."""
    return state.replace(hires=True)
