"""Instructions the machine decodes but refuses to run."""

from chipax.state import EmulatorState
from chipax.decode import Instruction
from chipax.errors import UnsupportedInstructionError, InvalidOpcodeError


def execute_unsupported(state: EmulatorState, instruction: Instruction) -> EmulatorState:
    """00FD (EXIT), FX75 / FX85 (RPL flag transfer) - not implemented by this machine."""
    raise UnsupportedInstructionError(instruction.raw, f"({instruction}) not supported")


def execute_invalid(state: EmulatorState, instruction: Instruction) -> EmulatorState:
    """Word that matched no instruction pattern."""
    raise InvalidOpcodeError(instruction.raw)
