"""CHIP-8 ALU operations (8xxx)."""

import jax.numpy as jnp
from chipax.state import EmulatorState
from chipax.decode import Instruction, Op


def alu_set(vx, vy):
    """8XY0 - Set: VX = VY."""
    return vy, None


def alu_or(vx, vy):
    """8XY1 - Binary OR: VX |= VY."""
    return vx | vy, None


def alu_and(vx, vy):
    """8XY2 - Binary AND: VX &= VY."""
    return vx & vy, None


def alu_xor(vx, vy):
    """8XY3 - Logical XOR: VX ^= VY."""
    return vx ^ vy, None


def alu_add(vx, vy):
    """8XY4 - Add: VX += VY, set carry flag."""
    result = jnp.astype(vx, jnp.int32) + vy
    carry = jnp.astype(result > 255, jnp.uint8)
    return jnp.astype(result & 0xFF, jnp.uint8), carry


def alu_sub_xy(vx, vy):
    """8XY5 - Subtract: VX -= VY, VF = 1 when no borrow."""
    no_borrow = jnp.astype(vx >= vy, jnp.uint8)
    result = (jnp.astype(vx, jnp.int32) - vy) & 0xFF
    return jnp.astype(result, jnp.uint8), no_borrow


def alu_shift_right(vx, vy):
    """8XY6 - Shift right: VX >>= 1. VY is ignored."""
    shifted_bit = vx & 1
    result = vx >> 1
    return result, jnp.astype(shifted_bit, jnp.uint8)


def alu_sub_yx(vx, vy):
    """8XY7 - Subtract: VX = VY - VX, VF = 1 when no borrow."""
    no_borrow = jnp.astype(vy >= vx, jnp.uint8)
    result = (jnp.astype(vy, jnp.int32) - vx) & 0xFF
    return jnp.astype(result, jnp.uint8), no_borrow


def alu_shift_left(vx, vy):
    """8XYE - Shift left: VX <<= 1. VY is ignored."""
    shifted_bit = (vx & 0x80) >> 7
    result = (jnp.astype(vx, jnp.int32) << 1) & 0xFF
    return jnp.astype(result, jnp.uint8), jnp.astype(shifted_bit, jnp.uint8)


ALU_OPERATIONS = {
    Op.LD_REG: alu_set,
    Op.OR: alu_or,
    Op.AND: alu_and,
    Op.XOR: alu_xor,
    Op.ADD: alu_add,
    Op.SUB: alu_sub_xy,
    Op.SHR: alu_shift_right,
    Op.SUBN: alu_sub_yx,
    Op.SHL: alu_shift_left,
}


def execute_alu_operation(state: EmulatorState, instruction: Instruction) -> EmulatorState:
    """8XYN - ALU operations dispatcher.

    The flag is written after the result, so VF holds the flag when X is F.
    Logic and copy operations leave VF alone.
    """
    vx = state.V[instruction.x]
    vy = state.V[instruction.y]

    result, vf = ALU_OPERATIONS[instruction.op](vx, vy)

    new_V = state.V.at[instruction.x].set(result)
    if vf is not None:
        new_V = new_V.at[15].set(vf)
    return state.replace(V=new_V)
