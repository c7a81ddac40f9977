"""Run input validators on testcases."""
import argparse
import os
from pathlib import Path

from . import run
from .languages import LanguageConfigError
from .stage import Context, StageAspect, format_table, positive_float, target_outdirs
from .testcase import find_testcases

VALIDATOR_OUTPUT_EXT = 'val'


class ValidationResult:
    def __init__(self, testcase: str, status: run.ExecuteStatus, errfile: str | None = None) -> None:
        self.testcase = testcase
        self.status = status
        self.errfile = errfile

    def __str__(self) -> str:
        return f'{self.testcase}: {self.status}'


def read_feedback(errfile: str | None) -> str | None:
    """Error output of a validator run, if it was kept."""
    if errfile is None:
        return None
    with open(errfile, errors='replace') as f:
        return f.read()


class Validators(StageAspect):
    def __init__(self, context: Context, outdir: str, quiet: bool, timelim: float) -> None:
        super().__init__('validate', context)
        self.outdir = outdir
        self.quiet = quiet
        self.timelim = timelim

    def __str__(self) -> str:
        return 'input validators'

    def validate(self, validator: run.SourceCode, testcase: str, outdir: str) -> ValidationResult:
        """Run validator with testcase on stdin.  Unless quiet, its stderr
        is kept in outdir/<stem>.val."""
        errfile = None
        if not self.quiet:
            errfile = os.path.join(outdir, f'{Path(testcase).stem}.{VALIDATOR_OUTPUT_EXT}')
        status, _ = validator.run(infile=testcase, errfile=errfile if errfile else os.devnull,
                                  timelim=self.timelim)
        return ValidationResult(testcase, status, errfile)

    def check_validator(self, target: str, testcases: list[str], outdir: str) -> list[ValidationResult] | None:
        """Validate all testcases with one validator, keeping its error
        output in outdir.  Returns None if the validator could not be
        compiled."""
        limits = self.context.limits
        try:
            validator = run.SourceCode(target, self.context.language_config, work_dir=self.context.tmpdir,
                                       compile_timelim=limits.compile_time, kill_wait=limits.kill_wait)
        except LanguageConfigError as err:
            self.warning(f'[IGNORED] {target}: {err}')
            return None

        with validator:
            try:
                validator.compile()
                if not self.quiet:
                    os.makedirs(outdir, exist_ok=True)
            except (run.ProgramError, OSError) as err:
                self.warning(f'[IGNORED] {target}: {err}')
                return None

            results = []
            for testcase in testcases:
                try:
                    res = self.validate(validator, testcase, outdir)
                except (run.ProgramError, OSError) as err:
                    self.warning(f'[VALIDATE] {testcase}: failed to run {target}: {err}')
                    continue
                if res.status is run.ExecuteStatus.SUCCESS:
                    self.info(f'[VALIDATE] {res}')
                else:
                    self.warning(f'[VALIDATE] {res}, rejected by {target}', read_feedback(res.errfile))
                results.append(res)
        return results

    def check(self, validators: list[str], testcases: list[str]) -> dict[str, list[ValidationResult]]:
        """Run every validator on every testcase and print one table per
        validator."""
        report = {}
        outdirs = target_outdirs(self.outdir, validators)
        for i, target in enumerate(validators):
            results = self.check_validator(target, testcases, outdirs[target])
            if results is None:
                continue
            report[target] = results
            if i > 0:
                self.msg('')
            self.msg(f'[{target}]')
            self.msg(self.format_results(results))
        return report

    def format_results(self, results: list[ValidationResult]) -> str:
        if self.quiet:
            return format_table(['status', 'target'], [[str(r.status), r.testcase] for r in results])
        return format_table(['status', 'target', 'stderr'],
                            [[str(r.status), r.testcase, r.errfile or ''] for r in results])


def add_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument('validators', metavar='VALIDATOR', nargs='+',
                        help='validator source file, or directory containing validators')
    parser.add_argument('-r', '--recursive', action='store_true',
                        help='search validator directories recursively')
    parser.add_argument('-t', '--testcases', nargs='+', default=[os.path.join('testcases', 'input')],
                        help='testcase (*.in) or directory containing testcases')
    parser.add_argument('--recursive_testcases', action='store_true',
                        help='search testcase directories recursively')
    parser.add_argument('-o', '--outdir', default=os.path.join('testcases', 'validate'),
                        help='directory to keep validator error output in')
    parser.add_argument('-q', '--quiet', action='store_true',
                        help='do not save the error output of validators')
    parser.add_argument('--timelimit', '--tl', type=positive_float, default=None,
                        help='time limit for one validator run, in seconds')


def run_stage(args: argparse.Namespace, context: Context) -> dict[str, list[ValidationResult]]:
    timelim = args.timelimit if args.timelimit is not None else context.limits.validate_time

    validators = run.find_programs(args.validators, args.recursive)
    if not validators:
        print('no validator found!')
        return {}
    testcases = find_testcases(args.testcases, args.recursive_testcases)
    if not testcases:
        print('no testcase found!')
        return {}

    return Validators(context, args.outdir, args.quiet, timelim).check(validators, testcases)
