import argparse
import sys

import pytest

from kuroe.stage import Context

# Runs "*.py" and "*.cpp" sources with the current interpreter, so that the
# tests need neither a C++ compiler nor a python3 in PATH.
PYTHON_LANGUAGE = f'py|cpp,{sys.executable} %(target)'


def namespace(**kwargs) -> argparse.Namespace:
    args = {'bail_on_error': False, 'werror': False, 'max_additional_info': 15,
            'language': [PYTHON_LANGUAGE]}
    args.update(kwargs)
    return argparse.Namespace(**args)


@pytest.fixture
def context():
    with Context(namespace()) as ctx:
        yield ctx


@pytest.fixture
def write_program(tmp_path):
    """Write a program source file and return its path as a string."""
    def write(name, code):
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(code)
        return str(path)
    return write
