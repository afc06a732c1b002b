from pathlib import Path
import logging as lg
import sys

import click

from nibble.common.hwconf import DEFAULT_SOURCE
from nibble.common.settings import Settings
from nibble.sasm.asm import Program, assemble
from nibble.sasm.operands import AssemblyError
from nibble.runtime.cpu import CPU
from nibble.runtime.image import ImageError, emit_binary


EXIT_OK = 0
EXIT_ASSEMBLY_ERROR = 1
EXIT_IMAGE_ERROR = 4


def read_source(filepath: str | Path) -> str:
    ''' Reads a source file, creating it with a sample program if missing '''
    if isinstance(filepath, str):
        filepath = Path(filepath)

    if not filepath.exists():
        lg.info(f'Could not find {filepath}; creating it')
        filepath.parent.mkdir(parents=True, exist_ok=True)
        filepath.write_text(DEFAULT_SOURCE, encoding='utf-8')
        return DEFAULT_SOURCE

    lg.debug(f'Reading {filepath}')
    return filepath.read_text(encoding='utf-8')


def build_image(program: Program, binary: Path, settings: Settings):
    cpu = CPU(settings)
    cpu.load_program(program.instructions)
    emit_binary(cpu, binary)


@click.command()
@click.option('-v', '--verbose', is_flag=True, help='Sets logging level to debug')
@click.argument('source', type=Path)
@click.argument('binary', type=Path)
def compile(verbose: bool, source: Path, binary: Path):
    lg.basicConfig(level=lg.DEBUG if verbose else lg.INFO)
    lg.info('NIBBLE ASM')

    settings = Settings().update(verbose=verbose)

    try:
        program = assemble(read_source(source), settings)
        build_image(program, binary, settings)

    except AssemblyError as e:
        lg.error(f'Assembly failed: {e}')
        sys.exit(EXIT_ASSEMBLY_ERROR)

    except ImageError as e:
        lg.error(str(e))
        sys.exit(EXIT_IMAGE_ERROR)

    lg.info(f'{len(program.instructions)} instructions written to {binary}')
    sys.exit(EXIT_OK)


if __name__ == '__main__':
    compile()
