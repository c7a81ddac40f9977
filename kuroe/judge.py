"""
Judge solvers against testcases with known answers.

Judging is done in two phases per solver: first the solver is run on every
testcase, then every output of a successful run is compared with the
answer, either by diff or by a checker program invoked as
"checker <input> <output> <answer>" (exit code zero means accepted).
"""
from __future__ import annotations

import argparse
import collections
import os
from concurrent.futures import ThreadPoolExecutor
from enum import StrEnum
from typing import Literal

from . import run
from .languages import LanguageConfigError
from .stage import Context, StageAspect, format_table, positive_float, target_outdirs
from .testcase import OUTPUT_EXT, TestcasePairing, enumerate_valid_testcases

# SE: the solver could not be run, JE: the output could not be judged.
Verdict = Literal['AC', 'WA', 'TLE', 'RTE', 'SE', 'JE']

_VERDICTS: list[Verdict] = ['AC', 'WA', 'TLE', 'RTE', 'SE', 'JE']

DIFF = run.CommandStep('diff')


class JudgePolicy(StrEnum):
    ALL = 'all'
    TLE_BREAK = 'tle_break'


class JudgeResult:
    def __init__(self, testcase: TestcasePairing, verdict: Verdict, reason: str | None = None) -> None:
        self.testcase = testcase
        self.verdict = verdict
        self.reason = reason

    def __str__(self) -> str:
        if self.reason is None:
            return self.verdict
        return f'{self.verdict} [{self.reason}]'


def judge_by_diff(work_dir: str, case: TestcasePairing, timelim: float,
                  kill_wait: float = run.KILL_WAIT) -> bool:
    """Exact comparison of output and answer, by "diff <answer> <output>"."""
    status, _ = DIFF.execute(work_dir,
                             args=[os.path.realpath(case.answer_path), os.path.realpath(case.output_path)],
                             timelim=timelim, kill_wait=kill_wait)
    if status is run.ExecuteStatus.TIME_LIMIT_EXCEED:
        raise run.ProgramError('diff timed out')
    return status is run.ExecuteStatus.SUCCESS


def judge_by_checker(checker: run.SourceCode, case: TestcasePairing, timelim: float) -> bool:
    """Judge by "checker <input> <output> <answer>"."""
    status, _ = checker.run(
        args=[os.path.realpath(case.input_path), os.path.realpath(case.output_path),
              os.path.realpath(case.answer_path)],
        timelim=timelim,
    )
    if status is run.ExecuteStatus.TIME_LIMIT_EXCEED:
        raise run.ProgramError(f'checker {checker.name} timed out')
    return status is run.ExecuteStatus.SUCCESS


class Judge(StageAspect):
    def __init__(self, context: Context, outdir: str, checker: run.SourceCode | None = None,
                 policy: JudgePolicy = JudgePolicy.ALL, timelim: float = 2.0,
                 check_timelim: float = 10.0) -> None:
        super().__init__('judge', context)
        self.outdir = outdir
        self.checker = checker
        self.policy = policy
        self.timelim = timelim
        self.check_timelim = check_timelim

    def __str__(self) -> str:
        return 'judge'

    def solve_all(self, solver: run.SourceCode, testcases: list[TestcasePairing],
                  outdir: str) -> list[TestcasePairing | JudgeResult]:
        """Phase one: run solver on the testcases, in order.

        Returns, per testcase reached, either the testcase with its output
        and status filled in, or an SE result if the solver could not run.
        """
        solved: list[TestcasePairing | JudgeResult] = []
        for case in testcases:
            output = os.path.join(outdir, f'{case.name}.{OUTPUT_EXT}')
            try:
                status, runtime = solver.run(infile=case.input_path, outfile=output, timelim=self.timelim)
            except (run.ProgramError, OSError) as err:
                self.warning(f'[IGNORED] {solver.src} {case.input_path}: {err}')
                solved.append(JudgeResult(case, 'SE', str(err)))
                continue
            self.info(f'[OUTPUT] {output}, status = {status}, {runtime:.2f}s')
            solved.append(case.solved(output, status))
            if status is run.ExecuteStatus.TIME_LIMIT_EXCEED and self.policy is JudgePolicy.TLE_BREAK:
                self.info(f'{solver.src}: time limit exceeded, skipping remaining testcases')
                break
        return solved

    def judge(self, case: TestcasePairing) -> JudgeResult:
        """Phase two for one solved testcase."""
        if case.status is run.ExecuteStatus.TIME_LIMIT_EXCEED:
            return JudgeResult(case, 'TLE')
        if case.status is not run.ExecuteStatus.SUCCESS:
            return JudgeResult(case, 'RTE')
        try:
            if self.checker is not None:
                accepted = judge_by_checker(self.checker, case, self.check_timelim)
            else:
                accepted = judge_by_diff(self.context.tmpdir, case, self.check_timelim,
                                         self.context.limits.kill_wait)
        except (run.ProgramError, OSError) as err:
            self.warning(f'[JUDGE FAILED] {case.output_path}: {err}')
            return JudgeResult(case, 'JE', str(err))
        return JudgeResult(case, 'AC' if accepted else 'WA')

    def judge_solver(self, target: str, testcases: list[TestcasePairing],
                     outdir: str) -> list[JudgeResult] | None:
        """Judge one solver.  Returns None if it could not be compiled."""
        limits = self.context.limits
        try:
            solver = run.SourceCode(target, self.context.language_config, work_dir=self.context.tmpdir,
                                    compile_timelim=limits.compile_time, kill_wait=limits.kill_wait)
        except LanguageConfigError as err:
            self.warning(f'[IGNORED] {target}: {err}')
            return None

        with solver:
            try:
                solver.compile()
                os.makedirs(outdir, exist_ok=True)
            except (run.ProgramError, OSError) as err:
                self.warning(f'[IGNORED] {target}: {err}')
                return None
            solved = self.solve_all(solver, testcases, outdir)

        results = []
        for item in solved:
            res = item if isinstance(item, JudgeResult) else self.judge(item)
            self.msg(f'[JUDGE] {target} {res.testcase.name}: {res}')
            results.append(res)
        return results

    def check(self, solvers: list[str], testcases: list[TestcasePairing],
              threads: int = 1) -> dict[str, list[JudgeResult]]:
        """Judge every solver; solvers are independent of each other and
        may be judged in parallel.  The report keeps the order of solvers.
        """
        outdirs = target_outdirs(self.outdir, solvers)

        def job(target: str) -> list[JudgeResult] | None:
            return self.judge_solver(target, testcases, outdirs[target])

        if threads > 1:
            with ThreadPoolExecutor(max_workers=threads) as executor:
                results = list(executor.map(job, solvers))
        else:
            results = [job(target) for target in solvers]

        return {target: res for target, res in zip(solvers, results) if res is not None}


def format_report(report: dict[str, list[JudgeResult]], testcases: list[TestcasePairing]) -> str:
    """Table with one row per testcase and one column per solver."""
    solvers = list(report)
    verdicts = {target: {res.testcase.input_path: res.verdict for res in results}
                for target, results in report.items()}
    rows = [[case.name] + [verdicts[target].get(case.input_path, '-') for target in solvers]
            for case in testcases]
    table = format_table(['testcase'] + solvers, rows)

    tallies = []
    for target, results in report.items():
        count = collections.Counter(res.verdict for res in results)
        tally = ', '.join(f'{v} {count[v]}' for v in _VERDICTS if count[v])
        tallies.append(f'{target}: {tally or "no testcases judged"}')
    return '\n'.join([table] + tallies)


def add_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument('solvers', metavar='SOLVER', nargs='+', help='solver source file')
    parser.add_argument('-c', '--checker', default=None,
                        help='checker source file (default: exact comparison with diff)')
    parser.add_argument('-t', '--testcases', nargs='+', default=['testcases'],
                        help='directory containing testcases (*.in and *.ans)')
    parser.add_argument('--recursive', action=argparse.BooleanOptionalAction, default=True,
                        help='search testcase directories recursively')
    parser.add_argument('-o', '--outdir', default=os.path.join('testcases', 'output'),
                        help='directory to write solver outputs to')
    parser.add_argument('--policy', type=JudgePolicy, choices=list(JudgePolicy), default=JudgePolicy.ALL,
                        help='"all" runs every testcase, "tle_break" stops a solver at its first time limit exceeded')
    parser.add_argument('--timelimit', '--tl', type=positive_float, default=None,
                        help='time limit for one solver run, in seconds')
    parser.add_argument('-j', '--threads', type=int, default=1,
                        help='judge this many solvers in parallel')


def run_stage(args: argparse.Namespace, context: Context) -> dict[str, list[JudgeResult]]:
    limits = context.limits
    timelim = args.timelimit if args.timelimit is not None else limits.judge_time
    judge = Judge(context, args.outdir, policy=args.policy, timelim=timelim,
                  check_timelim=limits.check_time)

    ignored: list[str] = []
    testcases = enumerate_valid_testcases(run.find_programs(args.testcases, args.recursive), ignored)
    for path in ignored:
        judge.warning(f'{path} ignored, another testcase has the same name')
    if not testcases:
        judge.warning('no testcases found')
        return {}

    if args.checker is None:
        return _judge(judge, args, testcases)

    try:
        checker = run.SourceCode(args.checker, context.language_config, work_dir=context.tmpdir,
                                 compile_timelim=limits.compile_time, kill_wait=limits.kill_wait)
    except LanguageConfigError as err:
        judge.error(f'checker {args.checker}: {err}')
        return {}
    with checker:
        try:
            checker.compile()
        except (run.ProgramError, OSError) as err:
            judge.error(f'checker {args.checker}: {err}')
            return {}
        judge.checker = checker
        return _judge(judge, args, testcases)


def _judge(judge: Judge, args: argparse.Namespace,
           testcases: list[TestcasePairing]) -> dict[str, list[JudgeResult]]:
    report = judge.check(args.solvers, testcases, args.threads)
    if report:
        judge.msg(format_report(report, testcases))
    return report
