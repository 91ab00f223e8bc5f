"""Keypad bitmask helpers."""

import operator
from typing import Optional

import jax.numpy as jnp

from chipax.constants import NUM_KEYS
from chipax.errors import KeypadIndexError
from chipax.state import EmulatorState


def check_keypad(keypad) -> Optional[int]:
    """Return the lowest pressed key index, or None when no key is down."""
    mask = int(keypad) & 0xFFFF
    if mask == 0:
        return None
    return (mask & -mask).bit_length() - 1


def pressed_keys(keypad) -> list[int]:
    """All pressed key indices, lowest first."""
    mask = int(keypad)
    return [key for key in range(NUM_KEYS) if mask >> key & 1]


def set_key(state: EmulatorState, index: int, pressed: bool) -> EmulatorState:
    """Set or clear exactly one keypad bit."""
    try:
        index = operator.index(index)
    except TypeError:
        raise KeypadIndexError(index) from None
    if not 0 <= index < NUM_KEYS:
        raise KeypadIndexError(index)
    bit = jnp.astype(1 << index, jnp.uint16)
    if pressed:
        keypad = state.keypad | bit
    else:
        keypad = state.keypad & ~bit
    return state.replace(keypad=jnp.astype(keypad, jnp.uint16))
