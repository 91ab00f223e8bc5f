"""Stateful host-facing wrapper around the functional emulator core."""

from typing import Optional

import jax
import numpy as np

from chipax.decode import Instruction
from chipax.emulator import step, decrement_timer, load_program, framebuffer, screen
from chipax.keypad import set_key
from chipax.state import EmulatorState, create_state


class Machine:
    """A CHIP-8 machine loaded with one program image.

    Owns a single ``EmulatorState`` and replaces it on every call. Build a new
    ``Machine`` to reset or load another program. Not thread-safe: a host that
    drives it from several threads must lock the whole machine.

    Args:
        program: Program image copied to 0x200. At most 3584 bytes.
        seed: Seed for the ``RND`` instruction. ``None`` draws one from OS entropy.
        hires: Start in extended 128x64 display mode.
        index_increment: Make block register load/store advance ``I``.
    """

    def __init__(
        self,
        program: bytes = b"",
        seed: Optional[int] = None,
        hires: bool = False,
        index_increment: bool = False,
    ):
        if seed is None:
            seed = int(np.random.SeedSequence().generate_state(1)[0]) & 0x7FFFFFFF
        state = create_state(jax.random.PRNGKey(seed), hires=hires, index_increment=index_increment)
        self.state: EmulatorState = load_program(state, program)
        self.seed = seed

    @classmethod
    def from_rom(cls, filename: str, **kwargs) -> "Machine":
        """Read a program image from disk and build a machine around it."""
        with open(filename, "rb") as f:
            program = f.read()
        return cls(program, **kwargs)

    def tick(self) -> Instruction:
        """Run one instruction and return it decoded.

        Raises:
            EmulatorFault: the program hit an unsupported opcode or broke the
                call stack. The machine must not be ticked again.
        """
        self.state, instruction = step(self.state)
        return instruction

    def decrement_timer(self) -> None:
        """Advance the timers by one host time slice (60 Hz on real hardware)."""
        self.state = decrement_timer(self.state)

    def set_key(self, index: int, pressed: bool) -> None:
        """Press or release keypad key ``index`` (0x0-0xF)."""
        self.state = set_key(self.state, index, pressed)

    def framebuffer(self) -> np.ndarray:
        """Flat row-major boolean pixels of ``width * height`` length."""
        return np.asarray(framebuffer(self.state))

    def screen(self) -> np.ndarray:
        """Pixels shaped (width, height), indexed [x, y]."""
        return np.asarray(screen(self.state))

    @property
    def width(self) -> int:
        return self.screen().shape[0]

    @property
    def height(self) -> int:
        return self.screen().shape[1]

    @property
    def hires(self) -> bool:
        return self.state.hires
