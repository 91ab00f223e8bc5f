"""Test configuration and fixtures for CHIP-8 emulator tests."""

import pytest
import jax.numpy as jnp
from chipax import create_state


@pytest.fixture
def fresh_state():
    """Provide a fresh emulator state for each test."""
    return create_state()


@pytest.fixture
def hires_state():
    """Provide a fresh state in extended 128x64 display mode."""
    return create_state(hires=True)


@pytest.fixture
def incrementing_state():
    """Provide a fresh state whose block load/store advances I."""
    return create_state(index_increment=True)


def setup_sprite_in_memory(state, address, sprite_bytes):
    """Helper to put sprite data in memory."""
    return state.replace(
        memory=state.memory.at[address:address+len(sprite_bytes)].set(
            jnp.array(sprite_bytes, dtype=jnp.uint8)
        )
    )


def set_registers(state, **registers):
    """Helper to set registers by name, e.g. ``set_registers(state, V1=0x10, VF=1)``."""
    V = state.V
    for name, value in registers.items():
        V = V.at[int(name[1:], 16)].set(value)
    return state.replace(V=V)
