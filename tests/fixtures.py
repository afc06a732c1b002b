# type: ignore
import pytest

from nibble.common.settings import Settings


@pytest.fixture
def verbose():
    yield Settings().update(verbose=True)


@pytest.fixture
def source_file(tmp_path):
    def write(contents: str, name: str = 'main.asm'):
        path = tmp_path / name
        path.write_text(contents)
        return path

    yield write
