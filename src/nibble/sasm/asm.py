import logging as lg
from dataclasses import dataclass, field
from typing import TypeAlias

import pyparsing as pp

import nibble.common.ops as ops
from nibble.common.instructions import Instruction, Halt, BY_MNEMONIC, arity
from nibble.common.settings import Settings
from nibble.sasm.operands import AssemblyError
import nibble.sasm.grammar as grammar


HALT_MARKER = 'HALT'
BLOCK_PREFIX = '.'
BLOCK_END = '.end'

Tokens: TypeAlias = list[str]


@dataclass
class Program:
    instructions: list[Instruction] = field(default_factory=list)
    functions: dict[str, list[Instruction]] = field(default_factory=dict)

    def listing(self) -> str:
        return '\n'.join(
            f'{address:3} {instruction}'
            for address, instruction in enumerate(self.instructions)
        )


def numbered(source: str) -> str:
    return '\n'.join(f'{i + 1} {text}' for i, text in enumerate(source.splitlines()))


def lex_line(text: str, line: int | None = None) -> Tokens:
    try:
        return list(grammar.line.parse_string(text))
    except pp.ParseException as e:
        raise AssemblyError(f'Unexpected character in "{text.strip()}" ({e.msg})', line)


def lex(source: str) -> list[Tokens]:
    ''' Splits the source into per-line token lists, comments removed '''
    return [lex_line(text, i + 1) for i, text in enumerate(source.splitlines())]


def parse_value(token: str, line: int | None = None) -> int:
    '''
    Resolves an operand token: binary literal, decimal or single-letter
    register name (a=0 ... z=25)
    '''
    try:
        result = grammar.operand.parse_string(token, parse_all=True)
    except pp.ParseException:
        raise AssemblyError(f'Invalid operand "{token}"', line, token)

    handler, text = result[0]
    return handler(text, line)


class Assembler:
    settings: Settings

    def __init__(self, settings: Settings | None = None):
        self.settings = settings if settings is not None else Settings()

    def parse_operand(self, tokens: Tokens, index: int, line: int) -> int:
        if index >= len(tokens):
            return 0

        return parse_value(tokens[index], line)

    def parse_instruction(self, tokens: Tokens, line: int) -> Instruction:
        name = tokens[0]
        mnemonic = name.upper()

        if mnemonic in ops.RESERVED:
            raise AssemblyError(f'Reserved instruction: "{name}"', line, name)

        cls = BY_MNEMONIC.get(mnemonic)

        if cls is None:
            raise AssemblyError(f'Unknown instruction: "{name}"', line, name)

        count = arity(cls)

        if len(tokens) > count + 1:
            lg.debug(f'Ignoring extra operands {tokens[count + 1:]} on line {line}')

        args = [self.parse_operand(tokens, i + 1, line) for i in range(count)]
        return cls(*args)

    def assemble(self, source: str) -> Program:
        if self.settings.verbose:
            lg.debug(f'Source:\n{numbered(source)}')

        program = Program()
        current: str | None = None
        opened_at: int | None = None
        body: list[Instruction] = []
        offset = 0
        seen_tokens = False
        halted = False

        for i, text in enumerate(source.splitlines(keepends=True)):
            line = i + 1

            # Raw text check, before the line is tokenized
            if source[offset:offset + len(HALT_MARKER)] == HALT_MARKER:
                lg.debug(f'HALT detected on line {line}, parsing complete')
                halted = True
                break

            offset += len(text)
            tokens = lex_line(text, line)

            if self.settings.verbose:
                lg.debug(f'Line {line} tokens: {tokens}')

            if not tokens:
                continue

            seen_tokens = True
            head = tokens[0]

            if head == BLOCK_END:
                if current is None:
                    raise AssemblyError('.end without a corresponding function', line, head)

                program.functions[current] = body
                lg.debug(f'Function {current}: {len(body)} instructions')
                current = None

            elif head.startswith(BLOCK_PREFIX):
                name = head[len(BLOCK_PREFIX):]

                if current is not None:
                    raise AssemblyError('Nested function definitions are not allowed', line, head)

                if not name or name in program.functions:
                    raise AssemblyError(f'Invalid function name "{head}"', line, head)

                current = name
                opened_at = line
                body = []

            elif current is not None:
                body.append(self.parse_instruction(tokens, line))

            else:
                program.instructions.append(self.parse_instruction(tokens, line))

        if not seen_tokens and not halted:
            raise AssemblyError('Provided input is empty')

        if current is not None:
            raise AssemblyError(
                f'Function {BLOCK_PREFIX}{current} is never closed',
                opened_at,
                f'{BLOCK_PREFIX}{current}'
            )

        program.instructions.append(Halt())

        if self.settings.verbose:
            lg.debug(f'Global instructions:\n{program.listing()}')
            lg.debug(f'Functions: {program.functions}')

        return program


def assemble(source: str, settings: Settings | None = None) -> Program:
    return Assembler(settings).assemble(source)
