''' Operand resolution handlers and assembly errors '''

import re
import logging as lg

from nibble.common.hwconf import WORD_MASK


class AssemblyError(Exception):
    line: int | None    # 1-based source line
    token: str | None

    def __init__(self, message: str, line: int | None = None, token: str | None = None):
        super().__init__(message)
        self.message = message
        self.line = line
        self.token = token

    def __str__(self) -> str:
        if self.line is None:
            return self.message

        return f'{self.message} on line {self.line}'


BIN_DIGITS = re.compile(r'[+-]?[01]+')


def on_binary(token: str, line: int | None) -> int:
    # Digits start at the third character: 'b0101' reads as 0b101
    digits = token[2:]

    if not BIN_DIGITS.fullmatch(digits):
        raise AssemblyError(f'Not a valid binary number: "{token}"', line, token)

    value = int(digits, 2)
    lg.debug(f'Binary {token} -> {value}')
    return value & WORD_MASK


def on_decimal(token: str, line: int | None) -> int:
    value = int(token)

    if value > WORD_MASK:
        raise AssemblyError(f'Value out of range: "{token}"', line, token)

    return value


def on_register(token: str, line: int | None) -> int:
    return ord(token.lower()) - ord('a')
