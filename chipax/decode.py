"""CHIP-8 / Super-CHIP instruction decoding."""

import enum
from typing import Optional

from chex import dataclass


class Op(enum.Enum):
    """Instruction families, named after their assembler mnemonics."""
    CLS = "CLS"
    RET = "RET"
    SCD = "SCD"
    SCU = "SCU"
    SCR = "SCR"
    SCL = "SCL"
    EXIT = "EXIT"
    LOW = "LOW"
    HIGH = "HIGH"
    JP = "JP"
    JP_V0 = "JP V0"
    CALL = "CALL"
    SE_BYTE = "SE byte"
    SNE_BYTE = "SNE byte"
    SE_REG = "SE reg"
    SNE_REG = "SNE reg"
    LD_BYTE = "LD byte"
    ADD_BYTE = "ADD byte"
    LD_REG = "LD reg"
    OR = "OR"
    AND = "AND"
    XOR = "XOR"
    ADD = "ADD"
    SUB = "SUB"
    SHR = "SHR"
    SUBN = "SUBN"
    SHL = "SHL"
    LD_I = "LD I"
    RND = "RND"
    DRW = "DRW"
    DRW16 = "DRW16"
    SKP = "SKP"
    SKNP = "SKNP"
    LD_DT_READ = "LD Vx, DT"
    LD_KEY = "LD Vx, K"
    LD_DT_WRITE = "LD DT, Vx"
    LD_ST = "LD ST, Vx"
    ADD_I = "ADD I"
    LD_FONT = "LD F"
    LD_BIG_FONT = "LD HF"
    LD_BCD = "LD B"
    STORE = "LD [I]"
    LOAD = "LD Vx, [I]"
    STORE_RPL = "LD R"
    LOAD_RPL = "LD Vx, R"
    INVALID = "INVALID"


@dataclass(frozen=True)
class Instruction:
    """Decoded CHIP-8 instruction.

    Only the operand fields meaningful for ``op`` are set; the rest stay None.
    """
    op: Op
    raw: int
    x: Optional[int] = None    # VX register index
    y: Optional[int] = None    # VY register index
    n: Optional[int] = None    # 4-bit immediate
    kk: Optional[int] = None   # 8-bit immediate
    nnn: Optional[int] = None  # 12-bit address

    def __str__(self) -> str:
        return _MNEMONICS[self.op].format(
            x=self.x, y=self.y, n=self.n, kk=self.kk, nnn=self.nnn, raw=self.raw
        )


_MNEMONICS = {
    Op.CLS: "CLS",
    Op.RET: "RET",
    Op.SCD: "SCD {n:#x}",
    Op.SCU: "SCU {n:#x}",
    Op.SCR: "SCR",
    Op.SCL: "SCL",
    Op.EXIT: "EXIT",
    Op.LOW: "LOW",
    Op.HIGH: "HIGH",
    Op.JP: "JP {nnn:#05x}",
    Op.JP_V0: "JP V0, {nnn:#05x}",
    Op.CALL: "CALL {nnn:#05x}",
    Op.SE_BYTE: "SE V{x:X}, {kk:#04x}",
    Op.SNE_BYTE: "SNE V{x:X}, {kk:#04x}",
    Op.SE_REG: "SE V{x:X}, V{y:X}",
    Op.SNE_REG: "SNE V{x:X}, V{y:X}",
    Op.LD_BYTE: "LD V{x:X}, {kk:#04x}",
    Op.ADD_BYTE: "ADD V{x:X}, {kk:#04x}",
    Op.LD_REG: "LD V{x:X}, V{y:X}",
    Op.OR: "OR V{x:X}, V{y:X}",
    Op.AND: "AND V{x:X}, V{y:X}",
    Op.XOR: "XOR V{x:X}, V{y:X}",
    Op.ADD: "ADD V{x:X}, V{y:X}",
    Op.SUB: "SUB V{x:X}, V{y:X}",
    Op.SHR: "SHR V{x:X}, V{y:X}",
    Op.SUBN: "SUBN V{x:X}, V{y:X}",
    Op.SHL: "SHL V{x:X}, V{y:X}",
    Op.LD_I: "LD I, {nnn:#05x}",
    Op.RND: "RND V{x:X}, {kk:#04x}",
    Op.DRW: "DRW V{x:X}, V{y:X}, {n:#x}",
    Op.DRW16: "DRW V{x:X}, V{y:X}, 0",
    Op.SKP: "SKP V{x:X}",
    Op.SKNP: "SKNP V{x:X}",
    Op.LD_DT_READ: "LD V{x:X}, DT",
    Op.LD_KEY: "LD V{x:X}, K",
    Op.LD_DT_WRITE: "LD DT, V{x:X}",
    Op.LD_ST: "LD ST, V{x:X}",
    Op.ADD_I: "ADD I, V{x:X}",
    Op.LD_FONT: "LD F, V{x:X}",
    Op.LD_BIG_FONT: "LD HF, V{x:X}",
    Op.LD_BCD: "LD B, V{x:X}",
    Op.STORE: "LD [I], V{x:X}",
    Op.LOAD: "LD V{x:X}, [I]",
    Op.STORE_RPL: "LD R, V{x:X}",
    Op.LOAD_RPL: "LD V{x:X}, R",
    Op.INVALID: "INVALID {raw:#06x}",
}

# 8XYN and FXNN are keyed on their low nibble / low byte.
_ALU_OPS = {
    0x0: Op.LD_REG, 0x1: Op.OR, 0x2: Op.AND, 0x3: Op.XOR, 0x4: Op.ADD,
    0x5: Op.SUB, 0x6: Op.SHR, 0x7: Op.SUBN, 0xE: Op.SHL,
}

_MISC_OPS = {
    0x07: Op.LD_DT_READ, 0x0A: Op.LD_KEY, 0x15: Op.LD_DT_WRITE, 0x18: Op.LD_ST,
    0x1E: Op.ADD_I, 0x29: Op.LD_FONT, 0x30: Op.LD_BIG_FONT, 0x33: Op.LD_BCD,
    0x55: Op.STORE, 0x65: Op.LOAD, 0x75: Op.STORE_RPL, 0x85: Op.LOAD_RPL,
}

_SYSTEM_OPS = {
    0x00E0: Op.CLS, 0x00EE: Op.RET, 0x00FB: Op.SCR, 0x00FC: Op.SCL,
    0x00FD: Op.EXIT, 0x00FE: Op.LOW, 0x00FF: Op.HIGH,
}


def decode(instruction: int) -> Instruction:
    """Decode 16-bit instruction into an ``Instruction``.

    Never fails: words that match no pattern decode to ``Op.INVALID``.
    """
    instruction = int(instruction) & 0xFFFF
    opcode = (instruction & 0xF000) >> 12
    x = (instruction & 0x0F00) >> 8
    y = (instruction & 0x00F0) >> 4
    n = instruction & 0x000F
    kk = instruction & 0x00FF
    nnn = instruction & 0x0FFF

    def make(op, **fields):
        return Instruction(op=op, raw=instruction, **fields)

    if opcode == 0x0:
        if instruction in _SYSTEM_OPS:
            return make(_SYSTEM_OPS[instruction])
        if x == 0x0 and y == 0xC:
            return make(Op.SCD, n=n)
        if x == 0x0 and y == 0xD:
            return make(Op.SCU, n=n)
    elif opcode == 0x1:
        return make(Op.JP, nnn=nnn)
    elif opcode == 0x2:
        return make(Op.CALL, nnn=nnn)
    elif opcode == 0x3:
        return make(Op.SE_BYTE, x=x, kk=kk)
    elif opcode == 0x4:
        return make(Op.SNE_BYTE, x=x, kk=kk)
    elif opcode == 0x5:
        if n == 0x0:
            return make(Op.SE_REG, x=x, y=y)
    elif opcode == 0x6:
        return make(Op.LD_BYTE, x=x, kk=kk)
    elif opcode == 0x7:
        return make(Op.ADD_BYTE, x=x, kk=kk)
    elif opcode == 0x8:
        if n in _ALU_OPS:
            return make(_ALU_OPS[n], x=x, y=y)
    elif opcode == 0x9:
        # Low nibble is not checked, unlike 5XY0
        return make(Op.SNE_REG, x=x, y=y)
    elif opcode == 0xA:
        return make(Op.LD_I, nnn=nnn)
    elif opcode == 0xB:
        return make(Op.JP_V0, nnn=nnn)
    elif opcode == 0xC:
        return make(Op.RND, x=x, kk=kk)
    elif opcode == 0xD:
        if n == 0x0:
            return make(Op.DRW16, x=x, y=y)
        return make(Op.DRW, x=x, y=y, n=n)
    elif opcode == 0xE:
        if kk == 0x9E:
            return make(Op.SKP, x=x)
        if kk == 0xA1:
            return make(Op.SKNP, x=x)
    elif opcode == 0xF:
        if kk in _MISC_OPS:
            return make(_MISC_OPS[kk], x=x)

    return make(Op.INVALID)
