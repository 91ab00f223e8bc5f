"""CHIP-8 emulator state structures."""

import jax
import jax.numpy as jnp
from flax.struct import dataclass, PyTreeNode, field

from chipax.constants import (
    MEMORY_SIZE, PROGRAM_START, FONT_START, FONT_DATA, BIG_FONT_START, BIG_FONT_DATA,
    HIRES_SCREEN_WIDTH, HIRES_SCREEN_HEIGHT, NUM_REGISTERS, STACK_SIZE
)


@dataclass(frozen=True)
class StackState:
    """Stack state for subroutine calls."""
    data: jnp.ndarray = field(default_factory=lambda: jnp.zeros(STACK_SIZE, dtype=jnp.uint16))
    pointer: int = 0


class EmulatorState(PyTreeNode):
    """Main CHIP-8 emulator state.

    The display is always allocated at the extended 128x64 size and indexed
    ``[x, y]``. ``hires`` only changes how draw instructions address it.
    """
    rng: jax.random.PRNGKey
    memory: jnp.ndarray = field(default_factory=lambda: jnp.zeros(MEMORY_SIZE, dtype=jnp.uint8))
    pc: jnp.ndarray = field(default_factory=lambda: jnp.astype(PROGRAM_START, jnp.uint16))
    display: jnp.ndarray = field(
        default_factory=lambda: jnp.zeros((HIRES_SCREEN_WIDTH, HIRES_SCREEN_HEIGHT), dtype=jnp.bool_)
    )
    stack: StackState = field(default_factory=StackState)
    delay_timer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    sound_timer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    keypad: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint16))  # bit k set = key k down
    V: jnp.ndarray = field(default_factory=lambda: jnp.zeros(NUM_REGISTERS, dtype=jnp.uint8))
    I: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint16))
    hires: bool = field(pytree_node=False, default=False)
    index_increment: bool = field(pytree_node=False, default=False)


def create_state(
    rng: jax.random.PRNGKey = None,
    hires: bool = False,
    index_increment: bool = False,
) -> EmulatorState:
    """Create initial emulator state with both fonts loaded.

    Args:
        rng: PRNG key feeding ``RND``. Defaults to ``PRNGKey(0)``.
        hires: Start in extended (128x64) display mode.
        index_increment: Make ``LD [I], Vx`` / ``LD Vx, [I]`` advance ``I``
            past the copied block, as on the original COSMAC VIP.
    """
    if rng is None:
        rng = jax.random.PRNGKey(0)
    state = EmulatorState(rng, hires=hires, index_increment=index_increment)
    memory = state.memory.at[FONT_START:FONT_START + len(FONT_DATA)].set(
        jnp.array(FONT_DATA, dtype=jnp.uint8)
    )
    memory = memory.at[BIG_FONT_START:BIG_FONT_START + len(BIG_FONT_DATA)].set(
        jnp.array(BIG_FONT_DATA, dtype=jnp.uint8)
    )
    return state.replace(memory=memory)
