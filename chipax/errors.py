"""Exceptions raised by the interpreter core.

Two families exist. ``EmulatorFault`` and its subclasses mean the running
program image cannot continue: the host should stop the machine and reject the
image. ``ValueError`` subclasses are precondition violations reported before
any state is touched.
"""


class EmulatorFault(Exception):
    """Unrecoverable failure while executing a program image."""


class UnsupportedInstructionError(EmulatorFault):
    """Decoded instruction that this machine does not implement in its current mode."""

    def __init__(self, opcode: int, reason: str = "not supported"):
        self.opcode = opcode
        self.reason = reason
        super().__init__(f"opcode {opcode:#06X} {reason}")


class InvalidOpcodeError(UnsupportedInstructionError):
    """16-bit word that does not decode to any known instruction."""

    def __init__(self, opcode: int):
        super().__init__(opcode, "is not a valid instruction")


class StackFaultError(EmulatorFault):
    """Call stack overflow (too many nested calls) or underflow (return on empty stack)."""


class ProgramTooLargeError(ValueError):
    """Program image does not fit in memory above the program start address."""

    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(f"program image is {size} bytes, limit is {limit} bytes")


class KeypadIndexError(ValueError):
    """Keypad index outside the 4-bit range."""

    def __init__(self, index):
        self.index = index
        super().__init__(f"keypad index should be a nibble (0x0-0xF), got {index!r}")


class MemoryFaultError(EmulatorFault):
    """Instruction fetch or memory access that runs past the end of memory."""

    def __init__(self, address: int, length: int, opcode: int = None):
        self.address = address
        self.length = length
        self.opcode = opcode
        where = f"opcode {opcode:#06X} " if opcode is not None else "fetch "
        super().__init__(
            f"{where}accesses {length} byte(s) at {address:#06X}, past the end of memory"
        )
