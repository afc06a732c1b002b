''' Instruction set and its 16-bit encoding '''

from dataclasses import dataclass, astuple, fields
from typing import ClassVar, NamedTuple, Sequence, Type, TypeAlias

import nibble.common.ops as ops
from nibble.common.hwconf import FIELD_MASK, IMM_MASK, WORD_MASK


class Decoded(NamedTuple):
    opcode: int
    a: int
    b: int
    imm: int


@dataclass(frozen=True)
class Instruction:
    opcode: ClassVar[int]
    mnemonic: ClassVar[str]

    def operands(self) -> tuple[int, ...]:
        return astuple(self)

    def encode_fields(self) -> int:
        return 0

    @classmethod
    def from_fields(cls, a: int, b: int):
        return cls()

    def __str__(self) -> str:
        args = ', '.join(str(arg) for arg in self.operands())
        return f'{self.mnemonic} {args}'.rstrip()


@dataclass(frozen=True)
class RegReg(Instruction):
    ''' A: destination register, B: source register '''
    dst: int = 0
    src: int = 0

    def encode_fields(self) -> int:
        return (self.dst & FIELD_MASK) << 8 | (self.src & FIELD_MASK) << 4

    @classmethod
    def from_fields(cls, a: int, b: int):
        return cls(a, b)


@dataclass(frozen=True)
class RegImm(Instruction):
    ''' A: destination register, [7:0]: unsigned immediate '''
    dst: int = 0
    imm: int = 0

    def encode_fields(self) -> int:
        return (self.dst & FIELD_MASK) << 8 | (self.imm & IMM_MASK)

    @classmethod
    def from_fields(cls, a: int, b: int):
        return cls(a, b)


@dataclass(frozen=True)
class SingleReg(Instruction):
    ''' B: the only register '''
    reg: int = 0

    def encode_fields(self) -> int:
        return (self.reg & FIELD_MASK) << 4

    @classmethod
    def from_fields(cls, a: int, b: int):
        return cls(b)


@dataclass(frozen=True)
class Target(Instruction):
    ''' A: jump target, so only addresses 0-15 are reachable '''
    target: int = 0

    def encode_fields(self) -> int:
        return (self.target & FIELD_MASK) << 8

    @classmethod
    def from_fields(cls, a: int, b: int):
        return cls(a)


@dataclass(frozen=True)
class Halt(Instruction):
    opcode = ops.HALT
    mnemonic = 'HALT'


@dataclass(frozen=True)
class Add(RegReg):
    opcode = ops.ADD
    mnemonic = 'ADD'


@dataclass(frozen=True)
class Mov(RegImm):
    opcode = ops.MOV
    mnemonic = 'MOV'


@dataclass(frozen=True)
class Mul(RegReg):
    opcode = ops.MUL
    mnemonic = 'MUL'


@dataclass(frozen=True)
class Sub(RegReg):
    opcode = ops.SUB
    mnemonic = 'SUB'


@dataclass(frozen=True)
class Swap(RegReg):
    opcode = ops.SWAP
    mnemonic = 'SWAP'


@dataclass(frozen=True)
class Div(RegReg):
    opcode = ops.DIV
    mnemonic = 'DIV'


@dataclass(frozen=True)
class Clr(SingleReg):
    opcode = ops.CLR
    mnemonic = 'CLR'


@dataclass(frozen=True)
class Inc(SingleReg):
    opcode = ops.INC
    mnemonic = 'INC'


@dataclass(frozen=True)
class Dec(SingleReg):
    opcode = ops.DEC
    mnemonic = 'DEC'


@dataclass(frozen=True)
class Print(SingleReg):
    opcode = ops.PRINT
    mnemonic = 'PRINT'


@dataclass(frozen=True)
class Pow(RegImm):
    opcode = ops.POW
    mnemonic = 'POW'


@dataclass(frozen=True)
class Movr(RegReg):
    opcode = ops.MOVR
    mnemonic = 'MOVR'


@dataclass(frozen=True)
class Cmp(RegReg):
    opcode = ops.CMP
    mnemonic = 'CMP'


@dataclass(frozen=True)
class Jmp(Target):
    opcode = ops.JMP
    mnemonic = 'JMP'


INSTRUCTIONS: dict[int, Type[Instruction]] = {
    cls.opcode: cls for cls in [
        Halt, Add, Mov, Mul, Sub, Swap, Div, Clr,
        Inc, Dec, Print, Pow, Movr, Cmp, Jmp
    ]
}

BY_MNEMONIC: dict[str, Type[Instruction]] = {
    cls.mnemonic: cls for cls in INSTRUCTIONS.values()
}

Instructions: TypeAlias = Sequence[Instruction]


def arity(cls: Type[Instruction]) -> int:
    return len(fields(cls))


def encode(instruction: Instruction) -> int:
    word = (instruction.opcode & FIELD_MASK) << 12 | instruction.encode_fields()
    return word & WORD_MASK


def decode(word: int) -> Decoded:
    return Decoded(
        opcode=(word >> 12) & FIELD_MASK,
        a=(word >> 8) & FIELD_MASK,
        b=(word >> 4) & FIELD_MASK,
        imm=word & IMM_MASK
    )


def decode_instruction(word: int) -> Instruction | None:
    ''' Rebuilds an instruction, None for an unassigned opcode '''
    decoded = decode(word)
    cls = INSTRUCTIONS.get(decoded.opcode)

    if cls is None:
        return None

    if issubclass(cls, RegImm):
        return cls.from_fields(decoded.a, decoded.imm)

    return cls.from_fields(decoded.a, decoded.b)
