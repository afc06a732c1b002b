MEMORY_SIZE    = 256          # memory capacity in words
REGISTER_COUNT = 16           # general purpose registers

WORD_BITS = 16
WORD_MASK = (1 << WORD_BITS) - 1
WORD_SIZE = 2                 # bytes per word in a binary image
WORD_FMT  = '>H'              # images are big-endian

FIELD_MASK = 0xF              # 4-bit register / target field
IMM_MASK   = 0xFF             # 8-bit immediate

CONFIG_FILENAME = 'config.toml'
DEFAULT_SOURCE_FILENAME = 'main.asm'

# Written when the requested source file does not exist
DEFAULT_SOURCE = 'MOV 1, 5\nMOV 2, 3\nADD 0, 1\nSUB 1, 2\nMUL 1, 2\n'
