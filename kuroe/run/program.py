"""Execution of a single external command under a wall-clock time limit.
"""
import contextlib
import logging
import os
import subprocess
import time
from dataclasses import dataclass
from enum import StrEnum

from .errors import ProgramError, SpawnFailure

log = logging.getLogger(__name__)

# Seconds to wait for a killed process to be reaped.
KILL_WAIT = 5.0


class ExecuteStatus(StrEnum):
    """Outcome of one run of a program."""
    SUCCESS = 'Success'
    TIME_LIMIT_EXCEED = 'TimeLimitExceed'
    FAIL = 'Fail'


@dataclass(frozen=True)
class CommandStep:
    """One concrete invocation of an external program.

    Attributes:
        program (str): program to execute, looked up in PATH unless it
            contains a slash (in which case it is relative to the
            working directory the step is executed in).
        args (tuple of str): fixed arguments, always passed.
        ignore_additional_args (bool): if true, arguments given to
            execute() are dropped instead of appended to args.
    """
    program: str
    args: tuple[str, ...] = ()
    ignore_additional_args: bool = False

    def __post_init__(self) -> None:
        # Accept any iterable of arguments but store a tuple.
        object.__setattr__(self, 'args', tuple(self.args))

    def __str__(self) -> str:
        return ' '.join(self.get_runcmd())

    def get_runcmd(self, args=None) -> list[str]:
        """Full argument vector for an invocation with additional args."""
        argv = [self.program, *self.args]
        if args and not self.ignore_additional_args:
            argv.extend(str(arg) for arg in args)
        return argv

    def execute(self, work_dir, args=None, infile=os.devnull, outfile=os.devnull,
                errfile=os.devnull, timelim: float | None = 10.0,
                kill_wait: float = KILL_WAIT) -> tuple[ExecuteStatus, float]:
        """Run the command.

        Args:
            work_dir (str): working directory of the process
            args (list of str): additional command-line arguments
            infile (str): name of file to pass on stdin, or None to
                inherit stdin
            outfile (str): name of file to send stdout to (created or
                truncated), or None to inherit stdout
            errfile (str): name of file to send stderr to, or None to
                inherit stderr
            timelim (float): wall-clock time limit in seconds, or None
                for no limit
            kill_wait (float): how long to wait for the process to be
                reaped after it has been killed on timeout

        Returns:
            pair (status, runtime):
               status (ExecuteStatus): classified outcome of the run
               runtime (float): wall-clock runtime of the process, in seconds

        Raises:
            SpawnFailure: the process could not be started
            ProgramError: a killed process could not be reaped
        """
        argv = self.get_runcmd(args)
        log.debug('run "%s < %s > %s 2> %s" in %s',
                  ' '.join(argv), infile, outfile, errfile, work_dir)

        with contextlib.ExitStack() as stack:
            stdin = _open_stream(stack, infile, 'rb')
            stdout = _open_stream(stack, outfile, 'wb')
            stderr = _open_stream(stack, errfile, 'wb')

            start = time.monotonic()
            try:
                proc = subprocess.Popen(argv, cwd=work_dir,
                                        stdin=stdin, stdout=stdout, stderr=stderr)
            except OSError as exc:
                raise SpawnFailure(argv, exc.strerror or str(exc)) from exc

            try:
                returncode = proc.wait(timeout=timelim)
            except subprocess.TimeoutExpired:
                # The deadline wins even if the process exits between the
                # timeout and the kill; it is reaped either way.
                proc.kill()
                try:
                    proc.wait(timeout=kill_wait)
                except subprocess.TimeoutExpired:
                    raise ProgramError('Process %d (%s) could not be reaped after kill'
                                       % (proc.pid, ' '.join(argv)))
                runtime = time.monotonic() - start
                log.debug('"%s" killed after %.2fs', argv[0], runtime)
                return ExecuteStatus.TIME_LIMIT_EXCEED, runtime

            runtime = time.monotonic() - start

        if returncode == 0:
            return ExecuteStatus.SUCCESS, runtime
        log.debug('"%s" exited with status %d', argv[0], returncode)
        return ExecuteStatus.FAIL, runtime


def _open_stream(stack, filename, mode):
    if filename is None:
        return None
    return stack.enter_context(open(filename, mode))
