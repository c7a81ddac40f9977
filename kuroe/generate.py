"""Generate testcases by running generator programs with consecutive seeds."""
import argparse
import os
import shutil
import tempfile
import time

from . import run
from .languages import LanguageConfigError
from .stage import Context, StageAspect, positive_float
from .testcase import InvalidFilenameForm, TargetFileInfo


class Generators(StageAspect):
    def __init__(self, context: Context, outdir: str, count: int, seed: int,
                 timelim: float) -> None:
        super().__init__('generate', context)
        self.outdir = outdir
        self.count = count
        self.seed = seed
        self.timelim = timelim

    def __str__(self) -> str:
        return 'generators'

    def generate(self, target: str) -> list[str]:
        """Run one generator and return the paths of its testcases.

        The generator is run once per case with the seed as its only
        argument.  Cases are written to a staging directory first and only
        moved to the output directory if all of them were generated.
        """
        info = TargetFileInfo.from_path(target)
        count = info.count if info.count is not None else self.count
        limits = self.context.limits

        with run.SourceCode(target, self.context.language_config, work_dir=self.context.tmpdir,
                            compile_timelim=limits.compile_time, kill_wait=limits.kill_wait) as prog:
            prog.compile()
            staging_dir = tempfile.mkdtemp(prefix='staging', dir=self.context.tmpdir)
            try:
                for i in range(count):
                    seed = self.seed + i
                    outfile = os.path.join(staging_dir, info.case_name(i))
                    status, runtime = prog.run(outfile=outfile, args=[str(seed)], timelim=self.timelim)
                    self.debug('%s seed %d: %s in %.2fs', target, seed, status, runtime)
                    if status is not run.ExecuteStatus.SUCCESS:
                        raise run.ProgramError('generation with seed %d: %s' % (seed, status))

                generated = []
                for i in range(count):
                    dest = os.path.join(self.outdir, info.case_name(i))
                    shutil.move(os.path.join(staging_dir, info.case_name(i)), dest)
                    generated.append(dest)
                return generated
            finally:
                shutil.rmtree(staging_dir, ignore_errors=True)

    def check(self, targets: list[str]) -> list[str]:
        """Run all generators, skipping the ones that fail."""
        os.makedirs(self.outdir, exist_ok=True)
        cases = []
        for target in targets:
            start = time.monotonic()
            try:
                generated = self.generate(target)
            except (InvalidFilenameForm, LanguageConfigError, run.ProgramError, OSError) as err:
                self.warning(f'[IGNORED] {target}: {err}')
                continue
            self.msg(f'[GENERATED] {target}: {len(generated)} cases, elapsed {time.monotonic() - start:.2f}s')
            cases.extend(generated)
        return cases


def add_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument('generators', metavar='GENERATOR', nargs='+',
                        help='generator source file, or directory containing generators')
    parser.add_argument('-r', '--recursive', action='store_true',
                        help='search generator directories recursively')
    parser.add_argument('-o', '--outdir', default=os.path.join('testcases', 'input'),
                        help='directory to write testcases to')
    parser.add_argument('-n', '--count', type=int, default=None,
                        help='number of testcases per generator, unless the file name says otherwise (name.COUNT.ext)')
    parser.add_argument('-s', '--seed', type=int, default=None,
                        help='seed of the first testcase; testcase i gets seed + i')
    parser.add_argument('--timelimit', '--tl', type=positive_float, default=None,
                        help='time limit for one generator run, in seconds')


def run_stage(args: argparse.Namespace, context: Context) -> list[str]:
    defaults = context.settings.generate
    count = args.count if args.count is not None else defaults.count
    seed = args.seed if args.seed is not None else defaults.seed
    timelim = args.timelimit if args.timelimit is not None else context.limits.generate_time

    targets = run.find_programs(args.generators, args.recursive)
    if not targets:
        print('no generator found!')
        return []
    generators = Generators(context, args.outdir, count, seed, timelim)
    return generators.check(targets)
