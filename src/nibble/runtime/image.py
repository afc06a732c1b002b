''' Binary images: flat big-endian words, no header '''

import struct
import logging as lg
from pathlib import Path
from typing import Sequence

from nibble.common.hwconf import MEMORY_SIZE, WORD_SIZE, WORD_FMT, WORD_MASK
from nibble.runtime.cpu import CPU


class ImageError(Exception):
    pass


def image_length(memory: Sequence[int]) -> int:
    ''' One past the highest address holding a non-HALT word '''
    for address in range(len(memory) - 1, -1, -1):
        if memory[address] != 0:
            return address + 1

    return 0


def pack_image(memory: Sequence[int]) -> bytes:
    # Interior zero words are kept so addresses do not shift
    length = image_length(memory)
    return b''.join(struct.pack(WORD_FMT, word & WORD_MASK) for word in memory[:length])


def unpack_image(data: bytes) -> list[int]:
    if len(data) % WORD_SIZE:
        lg.warning(f'Image has {len(data)} bytes, ignoring the trailing odd byte')

    usable = len(data) - len(data) % WORD_SIZE
    return [word for (word,) in struct.iter_unpack(WORD_FMT, data[:usable])]


def emit_binary(cpu: CPU, path: str | Path):
    if isinstance(path, str):
        path = Path(path)

    data = pack_image(cpu.memory)
    lg.debug(f'Emitting {len(data) // WORD_SIZE} words to {path}')

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
    except OSError as e:
        raise ImageError(f'Unable to write image {path}: {e}') from e


def load_binary(cpu: CPU, path: str | Path):
    if isinstance(path, str):
        path = Path(path)

    try:
        data = path.read_bytes()
    except OSError as e:
        raise ImageError(f'Unable to read image {path}: {e}') from e

    lg.debug(f'Loading {path}')
    load_image(cpu, data)


def load_image(cpu: CPU, data: bytes):
    words = unpack_image(data)

    if len(words) > MEMORY_SIZE:
        lg.warning(f'Binary exceeds memory size ({len(words)} > {MEMORY_SIZE}), truncating')
        words = words[:MEMORY_SIZE]

    cpu.memory[:] = words + [0] * (MEMORY_SIZE - len(words))
    cpu.pc = 0

    lg.debug(f'Loaded {len(words)} words')
