"""
Implementation of programs provided by source code.
"""
import logging
import os
import shutil
import tempfile
import threading

from .errors import CompileFailure
from .program import KILL_WAIT, CommandStep, ExecuteStatus

log = logging.getLogger(__name__)

# Default time limit for each compile step, in seconds.
COMPILE_TIMELIM = 10.0


def get_extension(path) -> str:
    """Extension of a file name, without the dot ('' if there is none)."""
    return os.path.splitext(os.path.basename(path))[1][1:]


def compile_and_get_runstep(scratch_dir, target, languages,
                            timelim=COMPILE_TIMELIM, kill_wait=KILL_WAIT) -> CommandStep:
    """Compile target in scratch_dir and return the step that runs it.

    The returned step must be executed in scratch_dir.

    Args:
        scratch_dir (str): working directory for compiling and running
        target (str): path of the source file
        languages (kuroe.languages.Languages): toolchains to pick from
        timelim (float): time limit for each compile step

    Raises:
        kuroe.languages.NoLanguageDetected: unknown extension
        CompileFailure: a compile step did not succeed
        SpawnFailure: a compiler could not be started
    """
    language = languages.detect_language(get_extension(target))
    return _compile(language, scratch_dir, target, timelim, kill_wait)


def _compile(language, scratch_dir, target, timelim, kill_wait):
    for step in language.compile(target):
        log.debug('compile command: %s', step)
        status, _ = step.execute(scratch_dir, timelim=timelim, kill_wait=kill_wait)
        if status is not ExecuteStatus.SUCCESS:
            raise CompileFailure(target, step, status)
    return language.run(target)


class SourceCode(object):
    """Class representing a program provided by source code.

    The program is compiled at most once, into its own scratch directory,
    and every run reuses the result.  The scratch directory is removed by
    cleanup(), or on leaving the object's context.
    """
    def __init__(self, path, languages, work_dir=None,
                 compile_timelim=COMPILE_TIMELIM, kill_wait=KILL_WAIT):
        """Instantiate SourceCode object

        Args:
            path (str): path of the source file.

            languages (kuroe.languages.Languages): toolchains, used
                for detecting the language of the file from its
                extension.

            work_dir (str): temp directory in which to create the
                scratch directory of the program

        Raises:
            kuroe.languages.NoLanguageDetected: unknown extension
        """
        self.src = str(path)
        self.name = os.path.basename(self.src)
        self.language = languages.detect_language(get_extension(self.src))
        self.compile_timelim = compile_timelim
        self.kill_wait = kill_wait

        self.path = tempfile.mkdtemp(prefix='%s-' % self.name, dir=work_dir)

        self._compile_lock = threading.Lock()
        self._runstep: CommandStep | None = None
        self._compile_error: Exception | None = None

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.cleanup()

    def __str__(self):
        """String representation"""
        return '%s (%s)' % (self.src, self.language.name)

    def compile(self) -> CommandStep:
        """Compile the source code, unless already done.

        Returns:
            the CommandStep running the program in self.path.

        Raises:
            the error of the (first) compilation, if it failed.
        """
        with self._compile_lock:
            if self._compile_error is not None:
                raise self._compile_error
            if self._runstep is None:
                try:
                    self._runstep = _compile(self.language, self.path, self.src,
                                             self.compile_timelim, self.kill_wait)
                except Exception as err:
                    self._compile_error = err
                    raise
            return self._runstep

    def run(self, infile=os.devnull, outfile=os.devnull, errfile=os.devnull,
            args=None, timelim=10.0) -> tuple[ExecuteStatus, float]:
        """Run the program in its scratch directory.

        See kuroe.run.CommandStep.execute for the arguments.
        """
        runstep = self.compile()
        return runstep.execute(self.path, args=args, infile=infile, outfile=outfile,
                               errfile=errfile, timelim=timelim, kill_wait=self.kill_wait)

    def cleanup(self):
        shutil.rmtree(self.path, ignore_errors=True)
