# -*- coding: utf-8 -*-
import os
import sys
import time

import pytest

from kuroe.run import CommandStep, ExecuteStatus, ProgramError, SpawnFailure


def python_step(code):
    return CommandStep(sys.executable, ['-c', code])


def test_success(tmp_path):
    status, runtime = CommandStep('true').execute(tmp_path)
    assert status is ExecuteStatus.SUCCESS
    assert runtime >= 0


def test_fail(tmp_path):
    status, _ = CommandStep('false').execute(tmp_path)
    assert status is ExecuteStatus.FAIL


def test_exit_code(tmp_path):
    status, _ = python_step('import sys; sys.exit(3)').execute(tmp_path)
    assert status is ExecuteStatus.FAIL


def test_time_limit_exceeded(tmp_path):
    pidfile = tmp_path / 'pid'
    step = python_step(
        'import os, sys, time\n'
        'open(sys.argv[1], "w").write(str(os.getpid()))\n'
        'time.sleep(30)\n'
    )
    start = time.monotonic()
    status, runtime = step.execute(tmp_path, args=[str(pidfile)], timelim=2)
    assert status is ExecuteStatus.TIME_LIMIT_EXCEED
    assert 2 <= runtime < 10
    assert time.monotonic() - start < 10

    # The child has been reaped, so there is no such process any more.
    pid = int(pidfile.read_text())
    with pytest.raises(ProcessLookupError):
        os.kill(pid, 0)


def test_sleep_longer_than_limit(tmp_path):
    status, _ = CommandStep('sleep', ['5']).execute(tmp_path, timelim=0.2)
    assert status is ExecuteStatus.TIME_LIMIT_EXCEED


def test_missing_program(tmp_path):
    with pytest.raises(SpawnFailure):
        CommandStep('kuroe-no-such-program').execute(tmp_path)


def test_not_executable(tmp_path):
    script = tmp_path / 'script'
    script.write_text('#!/bin/sh\nexit 0\n')
    with pytest.raises(SpawnFailure):
        CommandStep('./script').execute(tmp_path)


def test_spawn_failure_is_program_error():
    assert issubclass(SpawnFailure, ProgramError)


def test_streams(tmp_path):
    infile = tmp_path / 'in.txt'
    outfile = tmp_path / 'out.txt'
    errfile = tmp_path / 'err.txt'
    infile.write_text('hello')
    step = python_step('import sys; data = sys.stdin.read(); print(data.upper()); print("oops", file=sys.stderr)')
    status, _ = step.execute(tmp_path, infile=infile, outfile=outfile, errfile=errfile)
    assert status is ExecuteStatus.SUCCESS
    assert outfile.read_text() == 'HELLO\n'
    assert errfile.read_text() == 'oops\n'


def test_output_truncated(tmp_path):
    outfile = tmp_path / 'out.txt'
    outfile.write_text('a much longer previous content')
    CommandStep('echo', ['hi']).execute(tmp_path, outfile=outfile)
    assert outfile.read_text() == 'hi\n'


def test_working_directory(tmp_path):
    outfile = tmp_path / 'out.txt'
    workdir = tmp_path / 'work'
    workdir.mkdir()
    CommandStep('pwd').execute(workdir, outfile=outfile)
    assert os.path.realpath(outfile.read_text().strip()) == os.path.realpath(workdir)


def test_additional_args(tmp_path):
    outfile = tmp_path / 'out.txt'
    CommandStep('echo', ['a']).execute(tmp_path, args=['b', 7], outfile=outfile)
    assert outfile.read_text() == 'a b 7\n'

    CommandStep('echo', ['a']).execute(tmp_path, args=[], outfile=outfile)
    assert outfile.read_text() == 'a\n'


def test_ignore_additional_args(tmp_path):
    outfile = tmp_path / 'out.txt'
    step = CommandStep('echo', ['a'], ignore_additional_args=True)
    step.execute(tmp_path, args=['42'], outfile=outfile)
    assert outfile.read_text() == 'a\n'
    assert step.get_runcmd(['42']) == ['echo', 'a']


def test_relative_program_in_work_dir(tmp_path):
    script = tmp_path / 'run'
    script.write_text('#!/bin/sh\necho ran\n')
    script.chmod(0o755)
    outfile = tmp_path / 'out.txt'
    status, _ = CommandStep('./run').execute(tmp_path, outfile=outfile)
    assert status is ExecuteStatus.SUCCESS
    assert outfile.read_text() == 'ran\n'


def test_equal_steps_are_interchangeable():
    assert CommandStep('g++', ['-O2', 'a.cpp']) == CommandStep('g++', ('-O2', 'a.cpp'))
    assert hash(CommandStep('g++', ['-O2'])) == hash(CommandStep('g++', ('-O2',)))
    assert CommandStep('g++', ['-O2']) != CommandStep('g++', ['-O3'])
    assert str(CommandStep('g++', ['-O2', 'a.cpp'])) == 'g++ -O2 a.cpp'
