"""Produce answer files by running a reference solver on testcases."""
import argparse
import os
from pathlib import Path

from . import run
from .languages import LanguageConfigError
from .stage import Context, StageAspect, positive_float
from .testcase import ANSWER_EXT, find_testcases


def solve(solver: run.SourceCode, testcase: str, outfile: str, timelim: float) -> run.ExecuteStatus:
    """Run solver on testcase, writing its stdout to outfile.

    Whatever the solver wrote is kept even if it failed or timed out.
    """
    status, _ = solver.run(infile=testcase, outfile=outfile, timelim=timelim)
    return status


class Solver(StageAspect):
    def __init__(self, context: Context, outdir: str, timelim: float) -> None:
        super().__init__('solve', context)
        self.outdir = outdir
        self.timelim = timelim

    def __str__(self) -> str:
        return 'solver'

    def check(self, target: str, testcases: list[str]) -> dict[str, run.ExecuteStatus] | None:
        """Write <outdir>/<stem>.ans for every testcase.

        Returns:
            dict from testcase to status, or None if the solver could not
            be compiled.
        """
        limits = self.context.limits
        try:
            solver = run.SourceCode(target, self.context.language_config, work_dir=self.context.tmpdir,
                                    compile_timelim=limits.compile_time, kill_wait=limits.kill_wait)
        except LanguageConfigError as err:
            self.error(f'[IGNORED] {target}: {err}')
            return None

        results = {}
        with solver:
            try:
                solver.compile()
                os.makedirs(self.outdir, exist_ok=True)
            except (run.ProgramError, OSError) as err:
                self.error(f'[IGNORED] {target}: {err}')
                return None

            answers: set[str] = set()
            for testcase in testcases:
                answer = os.path.join(self.outdir, f'{Path(testcase).stem}.{ANSWER_EXT}')
                if answer in answers:
                    self.warning(f'[IGNORED] {testcase}: another testcase already writes {answer}')
                    continue
                answers.add(answer)
                try:
                    status = solve(solver, testcase, answer, self.timelim)
                except (run.ProgramError, OSError) as err:
                    self.warning(f'[SOLVE FAILED] {testcase}: {err}')
                    continue
                results[testcase] = status
                if status is run.ExecuteStatus.SUCCESS:
                    self.msg(f'[SOLVE] {answer}: {status}')
                else:
                    self.warning(f'[SOLVE FAILED] {testcase}: {status}, partial output kept in {answer}')
        return results


def add_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument('solver', metavar='SOLVER', help='solver source file')
    parser.add_argument('-t', '--testcases', nargs='+', default=[os.path.join('testcases', 'input')],
                        help='testcase (*.in) or directory containing testcases')
    parser.add_argument('-r', '--recursive', action='store_true',
                        help='search testcase directories recursively')
    parser.add_argument('-o', '--outdir', default=os.path.join('testcases', 'answer'),
                        help='directory to write answers to')
    parser.add_argument('--timelimit', '--tl', type=positive_float, default=None,
                        help='time limit for one solver run, in seconds')


def run_stage(args: argparse.Namespace, context: Context) -> dict[str, run.ExecuteStatus]:
    timelim = args.timelimit if args.timelimit is not None else context.limits.solve_time
    solver = Solver(context, args.outdir, timelim)

    if not os.path.isfile(args.solver):
        solver.error(f'solver {args.solver} not found')
        return {}
    testcases = find_testcases(args.testcases, args.recursive)
    if not testcases:
        solver.warning('no testcases found')
        return {}

    return solver.check(args.solver, testcases) or {}
