HALT  = 0x0  # stop
ADD   = 0x1  # A + B -> A
MOV   = 0x2  # U8 -> A
MUL   = 0x3  # A * B -> A
SUB   = 0x4  # A - B -> A, fatal on underflow
SWAP  = 0x5  # A <-> B
DIV   = 0x6  # A // B -> A, halts on zero divisor
CLR   = 0x7  # 0 -> B
INC   = 0x8  # B + 1 -> B
DEC   = 0x9  # B - 1 -> B, fatal on underflow
PRINT = 0xA  # B -> output
POW   = 0xB  # A ** U8 -> A
MOVR  = 0xC  # B -> A
CMP   = 0xD  # A == B -> Z
JMP   = 0xE  # A -> PC

MNEMONICS = {
    'HALT': HALT,
    'ADD': ADD,
    'MOV': MOV,
    'MUL': MUL,
    'SUB': SUB,
    'SWAP': SWAP,
    'DIV': DIV,
    'CLR': CLR,
    'INC': INC,
    'DEC': DEC,
    'PRINT': PRINT,
    'POW': POW,
    'MOVR': MOVR,
    'CMP': CMP,
    'JMP': JMP
}

NAMES = {op: name for name, op in MNEMONICS.items()}

# Recognized by the assembler but without an opcode
RESERVED = {'NOP'}
