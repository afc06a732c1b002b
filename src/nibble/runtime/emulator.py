import sys
from pathlib import Path
import logging as lg
import traceback

import click

from nibble.common.hwconf import CONFIG_FILENAME, DEFAULT_SOURCE_FILENAME
from nibble.common.settings import Settings, load_settings
from nibble.sasm.asm import Program, assemble
from nibble.sasm.masm import read_source
from nibble.sasm.operands import AssemblyError
from nibble.runtime.image import ImageError, emit_binary, load_binary, load_image
import nibble.runtime.cpu as cpu


EXIT_HALT = 0
EXIT_ASSEMBLY_ERROR = 1
EXIT_EXEC_ERROR = 2
EXIT_KEYBOARD = 3
EXIT_IMAGE_ERROR = 4
EXIT_GENERAL_ERROR = 100


def execute(
    code: Program | bytes,
    settings: Settings | None = None,
    output: cpu.Output | None = None
) -> cpu.CPU:
    ''' Runs a program or a raw binary image on a fresh processor '''
    proc = cpu.CPU(settings, output)

    if isinstance(code, Program):
        proc.load_program(code.instructions)
    else:
        load_image(proc, code)

    reason = proc.run()
    lg.debug(f'Halt reason: {reason.value}')
    return proc


def dump_registers(proc: cpu.CPU):
    click.echo()

    for index, value in enumerate(proc.gp):
        click.echo(f'R{index}: ' + click.style(str(value), fg='cyan'))


def report_halt(reason: cpu.HaltReason):
    if reason == cpu.HaltReason.DIVIDE_BY_ZERO:
        click.secho('ERROR, dividing by zero is not allowed.', fg='red', err=True)

    elif reason == cpu.HaltReason.INVALID_OPCODE:
        click.secho('Execution stopped on an invalid opcode.', fg='yellow', err=True)


def load(filename: Path, binary: bool, settings: Settings) -> cpu.CPU:
    proc = cpu.CPU(settings)

    if binary:
        load_binary(proc, filename)
    else:
        program = assemble(read_source(filename), settings)
        proc.load_program(program.instructions)

    return proc


@click.command()
@click.option('-v', '--verbose', is_flag=True, help='Trace fetches and assembly')
@click.option('-c', '--config', type=Path, default=Path(CONFIG_FILENAME), help='Settings file')
@click.option('-f', '--file', 'filename', type=Path, default=Path(DEFAULT_SOURCE_FILENAME))
@click.option('-b', '--binary', is_flag=True, help='FILE is a binary image')
@click.option('-o', '--output', type=Path, help='Emit the loaded binary image')
def run(verbose: bool, config: Path, filename: Path, binary: bool, output: Path | None):
    settings = load_settings(config)

    if verbose:
        settings.update(verbose=True)

    lg.basicConfig(level=lg.DEBUG if settings.verbose else lg.INFO)
    lg.info('NIBBLE')

    try:
        proc = load(filename, binary, settings)

        if output is not None:
            emit_binary(proc, output)

        reason = proc.run()
        report_halt(reason)
        dump_registers(proc)

        if settings.debug and not binary:
            click.secho('\nFILE CONTENTS', fg='white')
            click.secho(read_source(filename), fg='green')

        sys.exit(EXIT_HALT)

    except AssemblyError as e:
        click.secho(f'ERROR, {e}', fg='red', err=True)
        sys.exit(EXIT_ASSEMBLY_ERROR)

    except cpu.Underflow as e:
        click.secho('ERROR, ', fg='red', err=True, nl=False)
        click.secho(e.mnemonic, fg='yellow', err=True, nl=False)
        click.secho(' WILL RESULT IN NEGATIVE NUMBER.\nTERMINATING.', fg='red', err=True)
        sys.exit(EXIT_EXEC_ERROR)

    except ImageError as e:
        click.secho(f'ERROR, {e}', fg='red', err=True)
        sys.exit(EXIT_IMAGE_ERROR)

    except KeyboardInterrupt:
        lg.info('Execution halted by the user')
        sys.exit(EXIT_KEYBOARD)

    except Exception as e:
        lg.info(f'Execution halted on general error {e}')
        traceback.print_exc()
        sys.exit(EXIT_GENERAL_ERROR)


if __name__ == '__main__':
    run()
