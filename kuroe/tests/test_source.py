# -*- coding: utf-8 -*-
import os
import sys

import pytest

from kuroe import languages
from kuroe.run import CompileFailure, ExecuteStatus, SourceCode, compile_and_get_runstep

COMPILER = '''
import shutil, sys
with open(sys.argv[1], 'a') as log:
    log.write('compiled\\n')
if 'syntax error' in open(sys.argv[2]).read():
    sys.exit(1)
shutil.copy(sys.argv[2], 'prog.py')
'''


@pytest.fixture
def foo_languages(tmp_path):
    """Languages with a fake compiled language for *.foo files: "compiling"
    copies the source to prog.py in the working directory and logs each
    compilation to compile.log."""
    compiler = tmp_path / 'compiler.py'
    compiler.write_text(COMPILER)
    log = tmp_path / 'compile.log'
    foo = languages.CustomLanguage('foo', [f'{sys.executable} {compiler} {log} %(target)',
                                           f'{sys.executable} prog.py'])
    return languages.Languages().with_custom([foo]), log


def test_compile_once_run_many(tmp_path, foo_languages):
    langs, log = foo_languages
    src = tmp_path / 'hello.foo'
    src.write_text('import sys\nprint("hello", *sys.argv[1:])\n')
    out = tmp_path / 'out.txt'

    with SourceCode(str(src), langs, work_dir=str(tmp_path)) as prog:
        for seed in range(3):
            status, _ = prog.run(outfile=str(out), args=[str(seed)])
            assert status is ExecuteStatus.SUCCESS
            assert out.read_text() == f'hello {seed}\n'
        assert log.read_text() == 'compiled\n'
        assert os.path.isfile(os.path.join(prog.path, 'prog.py'))
        scratch = prog.path

    assert not os.path.exists(scratch)


def test_compile_failure_is_remembered(tmp_path, foo_languages):
    langs, log = foo_languages
    src = tmp_path / 'bad.foo'
    src.write_text('syntax error')

    with SourceCode(str(src), langs, work_dir=str(tmp_path)) as prog:
        with pytest.raises(CompileFailure):
            prog.compile()
        with pytest.raises(CompileFailure):
            prog.run()
    assert log.read_text() == 'compiled\n'


def test_unknown_extension(tmp_path, foo_languages):
    langs, _ = foo_languages
    with pytest.raises(languages.NoLanguageDetected):
        SourceCode(str(tmp_path / 'prog.bar'), langs, work_dir=str(tmp_path))


def test_compile_and_get_runstep(tmp_path, foo_languages):
    langs, log = foo_languages
    src = tmp_path / 'hello.foo'
    src.write_text('print("hi")\n')
    scratch = tmp_path / 'scratch'
    scratch.mkdir()

    runstep = compile_and_get_runstep(str(scratch), str(src), langs)
    out = tmp_path / 'out.txt'
    status, _ = runstep.execute(str(scratch), outfile=str(out))
    assert status is ExecuteStatus.SUCCESS
    assert out.read_text() == 'hi\n'

    with pytest.raises(languages.NoLanguageDetected):
        compile_and_get_runstep(str(scratch), str(tmp_path / 'x.bar'), langs)


def test_compile_timeout(tmp_path):
    slow = languages.CustomLanguage('slow', ['sleep 10', 'true'])
    langs = languages.Languages().with_custom([slow])
    with SourceCode(str(tmp_path / 'a.slow'), langs, work_dir=str(tmp_path), compile_timelim=0.2) as prog:
        with pytest.raises(CompileFailure) as err:
            prog.compile()
    assert err.value.status is ExecuteStatus.TIME_LIMIT_EXCEED
