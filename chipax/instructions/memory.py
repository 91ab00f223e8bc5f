"""CHIP-8 memory and register operations."""

import jax
import jax.numpy as jnp
from chipax.state import EmulatorState
from chipax.decode import Instruction
from chipax.constants import MEMORY_SIZE
from chipax.errors import MemoryFaultError


def check_memory_range(address, length: int, opcode: int = None) -> None:
    """Raise ``MemoryFaultError`` unless ``length`` bytes from ``address`` lie in memory."""
    address = int(address)
    if address + length > MEMORY_SIZE:
        raise MemoryFaultError(address, length, opcode)


def execute_set(state: EmulatorState, instruction: Instruction) -> EmulatorState:
    """6XKK - Set VX = KK."""
    return state.replace(V=state.V.at[instruction.x].set(instruction.kk))


def execute_add(state: EmulatorState, instruction: Instruction) -> EmulatorState:
    """7XKK - Add KK to VX, wrapping, VF untouched."""
    return state.replace(V=state.V.at[instruction.x].add(instruction.kk))


def execute_set_index(state: EmulatorState, instruction: Instruction) -> EmulatorState:
    """ANNN - Set I = NNN."""
    return state.replace(I=jnp.astype(instruction.nnn, jnp.uint16))


def execute_random(state: EmulatorState, instruction: Instruction) -> EmulatorState:
    """CXKK - Set VX = random & KK."""
    key, subkey = jax.random.split(state.rng)
    random_value = jax.random.randint(subkey, shape=(), minval=0, maxval=256, dtype=jnp.uint8)
    return state.replace(V=state.V.at[instruction.x].set(random_value & instruction.kk), rng=key)
