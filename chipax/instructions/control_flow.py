"""CHIP-8 control flow instructions."""

import jax.numpy as jnp
from chipax.state import EmulatorState
from chipax.decode import Instruction
from chipax.stack import push, pop


def execute_jump(state: EmulatorState, instruction: Instruction) -> EmulatorState:
    """1NNN - Jump to address NNN."""
    return state.replace(pc=jnp.astype(instruction.nnn, jnp.uint16))


def execute_call(state: EmulatorState, instruction: Instruction) -> EmulatorState:
    """2NNN - Call subroutine at NNN."""
    state = state.replace(stack=push(state.stack, state.pc))
    return execute_jump(state, instruction)


def execute_return(state: EmulatorState, instruction: Instruction) -> EmulatorState:
    """00EE - Return from subroutine."""
    stack, address = pop(state.stack)
    return state.replace(stack=stack, pc=address)


def execute_jump_with_offset(state: EmulatorState, instruction: Instruction) -> EmulatorState:
    """BNNN - Jump to address NNN + V0."""
    jump_address = instruction.nnn + jnp.astype(state.V[0], jnp.uint16)
    return state.replace(pc=jnp.astype(jump_address, jnp.uint16))


def make_skip_instruction(condition_fn):
    """Factory for skip instructions."""
    def skip_instruction(state: EmulatorState, instruction: Instruction) -> EmulatorState:
        condition = condition_fn(state, instruction)
        return state.replace(pc=jnp.where(condition, state.pc + 2, state.pc))
    return skip_instruction


def _key_pressed(state: EmulatorState, instruction: Instruction):
    key_index = jnp.astype(state.V[instruction.x] & 0xF, jnp.uint16)
    return ((state.keypad >> key_index) & 1) == 1


execute_skip_if_equal_immediate = make_skip_instruction(
    lambda state, inst: state.V[inst.x] == inst.kk
)

execute_skip_if_not_equal_immediate = make_skip_instruction(
    lambda state, inst: state.V[inst.x] != inst.kk
)

execute_skip_if_equal_register = make_skip_instruction(
    lambda state, inst: state.V[inst.x] == state.V[inst.y]
)

execute_skip_if_not_equal_register = make_skip_instruction(
    lambda state, inst: state.V[inst.x] != state.V[inst.y]
)

# EX9E / EXA1
execute_skip_if_key = make_skip_instruction(_key_pressed)

execute_skip_if_not_key = make_skip_instruction(
    lambda state, inst: ~_key_pressed(state, inst)
)
