"""Tests for memory and register operations."""

import jax
import jax.numpy as jnp
import pytest
from chipax import (
    execute, step, create_state, load_program, load_rom, ProgramTooLargeError,
    MemoryFaultError, EmulatorFault, PROGRAM_START, FONT_START
)
from chipax.constants import FONT_DATA, MAX_PROGRAM_SIZE, MEMORY_SIZE
from conftest import set_registers, setup_sprite_in_memory


class TestBasicMemory:
    """Test basic memory operations."""

    def test_set_basic(self, fresh_state):
        """6XKK - Set VX = KK."""
        state = execute(fresh_state, 0x600A)  # V0 = 0xA
        assert state.V[0] == 0xA

    def test_add_basic(self, fresh_state):
        """7XKK - Add KK to VX."""
        state = fresh_state.replace(V=fresh_state.V.at[1].set(0x10))
        state = execute(state, 0x7105)  # V1 += 5
        assert state.V[1] == 0x15

    def test_add_wraps_without_flag(self, fresh_state):
        """7XKK - Overflow wraps and VF is untouched."""
        state = set_registers(fresh_state, V1=0xFF, VF=0x07)
        state = execute(state, 0x7102)
        assert state.V[1] == 0x01
        assert state.V[15] == 0x07


class TestIndexRegister:
    """Test I register operations."""

    def test_set_index_basic(self, fresh_state):
        """ANNN - Set I register to NNN."""
        state = execute(fresh_state, 0xA123)  # I = 0x123
        assert state.I == 0x123

    def test_set_index_maximum(self, fresh_state):
        """ANNN - Set I register to maximum 12-bit value."""
        state = execute(fresh_state, 0xAFFF)  # I = 0xFFF
        assert state.I == 0xFFF

    def test_set_index_multiple_operations(self, fresh_state):
        """ANNN - Test multiple consecutive I register sets."""
        state = fresh_state

        state = execute(state, 0xA111)  # I = 0x111
        assert state.I == 0x111

        state = execute(state, 0xA222)  # I = 0x222
        state = execute(state, 0xA500)  # I = 0x500
        state = execute(state, 0x60FF)  # V0 = 255
        state = execute(state, 0xF033)  # BCD conversion

        assert state.memory[0x500] == 2  # Hundreds
        assert state.memory[0x501] == 5  # Tens
        assert state.memory[0x502] == 5  # Ones


class TestRandom:
    """CXKK with an injected PRNG key."""

    def test_random_is_masked(self, fresh_state):
        state = fresh_state
        for _ in range(20):
            state = execute(state, 0xC30F)
            assert int(state.V[3]) & 0xF0 == 0

    def test_random_zero_mask(self, fresh_state):
        state = set_registers(fresh_state, V3=0xAA)
        state = execute(state, 0xC300)
        assert state.V[3] == 0

    def test_random_is_reproducible_per_key(self):
        """Same key, same sequence; the key advances after every draw."""
        first = create_state(jax.random.PRNGKey(1234))
        second = create_state(jax.random.PRNGKey(1234))

        for _ in range(5):
            first = execute(first, 0xC0FF)
            second = execute(second, 0xC0FF)
            assert first.V[0] == second.V[0]

        assert not (first.rng == create_state(jax.random.PRNGKey(1234)).rng).all()


class TestProgramLoading:
    """Program images land at 0x200 and oversized ones are refused."""

    def test_fonts_loaded(self, fresh_state):
        for offset, byte in enumerate(FONT_DATA):
            assert state_byte(fresh_state, FONT_START + offset) == byte

    def test_program_copied_verbatim(self, fresh_state):
        state = load_program(fresh_state, bytes([0x12, 0x34, 0xAB]))

        assert state.memory[PROGRAM_START] == 0x12
        assert state.memory[PROGRAM_START + 1] == 0x34
        assert state.memory[PROGRAM_START + 2] == 0xAB
        assert state.memory[PROGRAM_START + 3] == 0x00

    def test_full_size_program_fits(self, fresh_state):
        state = load_program(fresh_state, bytes([0x5A]) * MAX_PROGRAM_SIZE)
        assert state.memory[-1] == 0x5A

    def test_oversized_program_rejected(self, fresh_state):
        with pytest.raises(ProgramTooLargeError) as excinfo:
            load_program(fresh_state, bytes(MAX_PROGRAM_SIZE + 1))
        assert excinfo.value.size == MAX_PROGRAM_SIZE + 1

    def test_load_rom_from_file(self, fresh_state, tmp_path):
        rom = tmp_path / "jump.ch8"
        rom.write_bytes(bytes([0x12, 0x00]))

        state = load_rom(fresh_state, str(rom))

        assert state.memory[PROGRAM_START] == 0x12
        assert state.memory[PROGRAM_START + 1] == 0x00


class TestMemoryBounds:
    """Accesses that would run past 0xFFF fault instead of clamping or dropping bytes."""

    def test_fetch_of_last_word_is_allowed(self, fresh_state):
        state = setup_sprite_in_memory(fresh_state, MEMORY_SIZE - 2, [0x61, 0x23])
        state = state.replace(pc=jnp.astype(MEMORY_SIZE - 2, jnp.uint16))

        state, instruction = step(state)

        assert instruction.raw == 0x6123
        assert state.V[1] == 0x23

    def test_fetch_straddling_end_faults(self, fresh_state):
        state = setup_sprite_in_memory(fresh_state, MEMORY_SIZE - 1, [0x61])
        state = state.replace(pc=jnp.astype(MEMORY_SIZE - 1, jnp.uint16))

        with pytest.raises(MemoryFaultError) as excinfo:
            step(state)

        assert excinfo.value.address == MEMORY_SIZE - 1
        assert excinfo.value.opcode is None
        assert state.V[1] == 0

    def test_bcd_at_end_of_memory(self, fresh_state):
        state = set_registers(fresh_state, V0=123).replace(I=jnp.astype(MEMORY_SIZE - 3, jnp.uint16))

        state = execute(state, 0xF033)

        assert [int(b) for b in state.memory[-3:]] == [1, 2, 3]

    def test_bcd_past_end_faults(self, fresh_state):
        state = set_registers(fresh_state, V0=123).replace(I=jnp.astype(MEMORY_SIZE - 2, jnp.uint16))

        with pytest.raises(MemoryFaultError) as excinfo:
            execute(state, 0xF033)

        assert excinfo.value.opcode == 0xF033
        assert excinfo.value.length == 3

    @pytest.mark.parametrize("opcode", [0xF255, 0xF265])
    def test_register_block_past_end_faults(self, fresh_state, opcode):
        state = fresh_state.replace(I=jnp.astype(MEMORY_SIZE - 2, jnp.uint16))

        with pytest.raises(MemoryFaultError):
            execute(state, opcode)

    def test_register_block_ending_at_last_byte(self, fresh_state):
        state = set_registers(fresh_state, V0=7, V1=8)
        state = state.replace(I=jnp.astype(MEMORY_SIZE - 2, jnp.uint16))

        state = execute(state, 0xF155)

        assert [int(b) for b in state.memory[-2:]] == [7, 8]

    def test_sprite_past_end_faults(self, fresh_state):
        state = fresh_state.replace(I=jnp.astype(MEMORY_SIZE - 2, jnp.uint16))

        with pytest.raises(MemoryFaultError):
            execute(state, 0xD013)

    def test_big_sprite_past_end_faults(self, hires_state):
        state = hires_state.replace(I=jnp.astype(MEMORY_SIZE - 31, jnp.uint16))

        with pytest.raises(MemoryFaultError):
            execute(state, 0xD010)

    def test_memory_fault_is_emulator_fault(self):
        assert issubclass(MemoryFaultError, EmulatorFault)


def state_byte(state, address):
    return int(state.memory[address])
