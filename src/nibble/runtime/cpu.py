import logging as lg
from enum import Enum
from typing import Callable

import nibble.common.ops as ops
from nibble.common.hwconf import MEMORY_SIZE, REGISTER_COUNT, WORD_MASK
from nibble.common.instructions import Instructions, Decoded, decode, encode
from nibble.common.settings import Settings


Output = Callable[[str], None]


class HaltReason(Enum):
    HALT = 'halt'                       # HALT instruction
    END_OF_MEMORY = 'end-of-memory'     # PC ran past the last word
    INVALID_OPCODE = 'invalid-opcode'   # unassigned opcode
    DIVIDE_BY_ZERO = 'divide-by-zero'


class Halt(Exception):
    reason: HaltReason

    def __init__(self, reason: HaltReason = HaltReason.HALT):
        super().__init__(reason.value)
        self.reason = reason


class ExecutionError(Exception):
    pass


class Underflow(ExecutionError):
    mnemonic: str

    def __init__(self, mnemonic: str):
        super().__init__(f'{mnemonic} will result in a negative number')
        self.mnemonic = mnemonic


def register_name(index: int) -> str:
    return f'{chr(ord("a") + index)}x'


class CPU():
    pc: int             # Program counter
    zflag: bool         # Set by CMP on equality
    running: bool
    halt_reason: HaltReason | None
    gp: list[int]       # General purpose registers
    memory: list[int]

    def __init__(self, settings: Settings | None = None, output: Output | None = None):
        self.settings = settings if settings is not None else Settings()
        self.output = output if output is not None else print

        self.pc = 0
        self.zflag = False
        self.running = False
        self.halt_reason = None

        self.gp = [0] * REGISTER_COUNT
        self.memory = [0] * MEMORY_SIZE

    # - Helpers - #

    def debug_dump(self):
        state = [f'PC:{self.pc:X}', f'Z:{int(self.zflag)}']
        state.extend([f'{i}:{self.gp[i]:X}' for i in range(len(self.gp))])
        lg.debug(' '.join(state))

    def load_program(self, program: Instructions):
        if len(program) > MEMORY_SIZE:
            lg.warning(
                f'Program exceeds memory size ({len(program)} > {MEMORY_SIZE}), truncating'
            )

        for address, instruction in enumerate(program[:MEMORY_SIZE]):
            self.memory[address] = encode(instruction)

        self.pc = 0

        if self.settings.verbose:
            lg.debug(f'Memory: {self.memory}')

    def get_register(self, index: int) -> int | None:
        if 0 <= index < len(self.gp):
            return self.gp[index]

        return None

    def print_register(self, index: int):
        value = self.get_register(index)

        if value is None:
            self.output(f'Register index {index} is out of bounds.')
        else:
            self.output(f'{register_name(index)}: {value}')

    def fetch(self) -> int | None:
        if self.pc >= MEMORY_SIZE:
            return None

        word = self.memory[self.pc]
        self.pc += 1

        if self.settings.verbose:
            lg.debug(f'Program Counter: {self.pc}')
            lg.debug(f'Instruction: 0x{word:04X}')

        return word

    # - Operations - #

    def hlt(self, _: Decoded):
        raise Halt()

    def add(self, d: Decoded):
        self.gp[d.a] = (self.gp[d.a] + self.gp[d.b]) & WORD_MASK

    def mov(self, d: Decoded):
        self.gp[d.a] = d.imm

    def mul(self, d: Decoded):
        self.gp[d.a] = (self.gp[d.a] * self.gp[d.b]) & WORD_MASK

    def sub(self, d: Decoded):
        if self.gp[d.a] < self.gp[d.b]:
            raise Underflow('SUB')

        self.gp[d.a] -= self.gp[d.b]

    def swap(self, d: Decoded):
        self.gp[d.a], self.gp[d.b] = self.gp[d.b], self.gp[d.a]

    def div(self, d: Decoded):
        if self.gp[d.b] == 0:
            raise Halt(HaltReason.DIVIDE_BY_ZERO)

        self.gp[d.a] //= self.gp[d.b]

    def clr(self, d: Decoded):
        self.gp[d.b] = 0

    def inc(self, d: Decoded):
        self.gp[d.b] = (self.gp[d.b] + 1) & WORD_MASK

    def dec(self, d: Decoded):
        if self.gp[d.b] == 0:
            raise Underflow('DEC')

        self.gp[d.b] -= 1

    def prt(self, d: Decoded):
        self.print_register(d.b)

    def pow(self, d: Decoded):
        # Three-argument pow keeps the intermediate within the word
        self.gp[d.a] = pow(self.gp[d.a], d.imm, WORD_MASK + 1)

    def movr(self, d: Decoded):
        self.gp[d.a] = self.gp[d.b]

    def cmp(self, d: Decoded):
        self.zflag = self.gp[d.a] == self.gp[d.b]

    def jmp(self, d: Decoded):
        self.pc = d.a

    HANDLERS = {
        ops.HALT: hlt,
        ops.ADD: add,
        ops.MOV: mov,
        ops.MUL: mul,
        ops.SUB: sub,
        ops.SWAP: swap,
        ops.DIV: div,
        ops.CLR: clr,
        ops.INC: inc,
        ops.DEC: dec,
        ops.PRINT: prt,
        ops.POW: pow,
        ops.MOVR: movr,
        ops.CMP: cmp,
        ops.JMP: jmp
    }

    # -- Implementation -- #

    def step(self, word: int):
        decoded = decode(word)
        handler = self.HANDLERS.get(decoded.opcode)

        if handler is None:
            lg.debug(f'Invalid opcode 0x{decoded.opcode:X} at {self.pc - 1}')
            raise Halt(HaltReason.INVALID_OPCODE)

        handler(self, decoded)

    def run(self) -> HaltReason:
        self.running = True
        self.halt_reason = None

        try:
            while self.running:
                word = self.fetch()

                if word is None:
                    raise Halt(HaltReason.END_OF_MEMORY)

                self.step(word)

                if self.settings.verbose:
                    self.debug_dump()

        except Halt as h:
            self.halt_reason = h.reason
            lg.debug(f'Execution halted: {h.reason.value}')

        finally:
            self.running = False

        return self.halt_reason
