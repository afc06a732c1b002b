from click.testing import CliRunner

from nibble.common.instructions import Mov, Inc, encode
import nibble.runtime.emulator as emulator
import nibble.sasm.asm as asm

from fixtures import source_file  # noqa: F401


def invoke(*args: str):
    return CliRunner().invoke(emulator.run, list(args))


def test_execute_program():
    proc = emulator.execute(asm.assemble('MOV 0, 5\nPOW 0, 2'))
    assert proc.gp[0] == 25


def test_execute_image():
    image = bytes.fromhex('2003') + encode(Inc(0)).to_bytes(2, 'big')
    proc = emulator.execute(image)
    assert proc.gp[0] == 4


def test_execute_output():
    lines: list[str] = []
    emulator.execute(asm.assemble('MOV d, 9\nPRINT d'), output=lines.append)
    assert lines == ['dx: 9']


def test_run(source_file, tmp_path):  # noqa: F811
    source = source_file('MOV 0,5\nMOV 1,3\nADD 0,1\nPRINT a\nHALT')
    result = invoke('-f', str(source), '-c', str(tmp_path / 'config.toml'))

    assert result.exit_code == emulator.EXIT_HALT
    assert 'ax: 8' in result.output
    assert 'R0: 8' in result.output
    assert 'R1: 3' in result.output
    assert 'R15: 0' in result.output
    assert 'FILE CONTENTS' not in result.output


def test_run_default_program(tmp_path):
    source = tmp_path / 'main.asm'
    result = invoke('-f', str(source), '-c', str(tmp_path / 'config.toml'))

    assert result.exit_code == emulator.EXIT_HALT
    assert source.exists()
    assert 'R0: 5' in result.output
    assert 'R1: 6' in result.output
    assert 'R2: 3' in result.output


def test_run_debug(source_file, tmp_path):  # noqa: F811
    source = source_file('INC a\n')
    config = tmp_path / 'config.toml'
    config.write_text('debug = true\n')

    result = invoke('-f', str(source), '-c', str(config))

    assert result.exit_code == emulator.EXIT_HALT
    assert 'FILE CONTENTS' in result.output
    assert 'INC a' in result.output


def test_run_underflow(source_file, tmp_path):  # noqa: F811
    source = source_file('MOV 0,1\nMOV 1,2\nSUB 0,1\n')
    result = invoke('-f', str(source), '-c', str(tmp_path / 'config.toml'))

    assert result.exit_code == emulator.EXIT_EXEC_ERROR
    assert 'SUB' in result.output


def test_run_divide_by_zero(source_file, tmp_path):  # noqa: F811
    source = source_file('MOV 0,8\nDIV 0,1\nMOV 2,1\n')
    result = invoke('-f', str(source), '-c', str(tmp_path / 'config.toml'))

    assert result.exit_code == emulator.EXIT_HALT
    assert 'dividing by zero' in result.output
    assert 'R0: 8' in result.output
    assert 'R2: 0' in result.output


def test_run_assembly_error(source_file, tmp_path):  # noqa: F811
    source = source_file('MOV 0,1\nJUMP 3\n')
    result = invoke('-f', str(source), '-c', str(tmp_path / 'config.toml'))

    assert result.exit_code == emulator.EXIT_ASSEMBLY_ERROR
    assert 'JUMP' in result.output
    assert 'line 2' in result.output


def test_run_emit_and_load_binary(source_file, tmp_path):  # noqa: F811
    source = source_file('MOV 0, 6\nMOV 1, 7\nMUL 0, 1\n')
    config = str(tmp_path / 'config.toml')
    binary = tmp_path / 'prog.bin'

    result = invoke('-f', str(source), '-c', config, '-o', str(binary))
    assert result.exit_code == emulator.EXIT_HALT
    assert binary.read_bytes() == bytes.fromhex('200621073010')

    result = invoke('-f', str(binary), '-c', config, '-b')
    assert result.exit_code == emulator.EXIT_HALT
    assert 'R0: 42' in result.output


def test_run_missing_binary(tmp_path):
    result = invoke('-f', str(tmp_path / 'none.bin'), '-c', str(tmp_path / 'config.toml'), '-b')
    assert result.exit_code == emulator.EXIT_IMAGE_ERROR


def test_execute_preserves_image():
    proc = emulator.execute(asm.assemble('MOV 0, 1'))
    assert proc.memory[0] == encode(Mov(0, 1))


def test_run_unreadable_config(source_file, tmp_path):  # noqa: F811
    source = source_file('MOV 0, 3\n')
    config = tmp_path / 'config.toml'
    config.mkdir()

    result = invoke('-f', str(source), '-c', str(config))

    assert result.exit_code == emulator.EXIT_HALT
    assert 'R0: 3' in result.output


def test_divide_by_zero_reported_once(source_file, tmp_path):  # noqa: F811
    source = source_file('DIV 0, 1\n')
    result = invoke('-f', str(source), '-c', str(tmp_path / 'config.toml'))

    assert result.exit_code == emulator.EXIT_HALT
    assert result.output.lower().count('dividing by zero') == 1
