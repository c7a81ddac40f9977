"""
Plumbing shared by the pipeline stages: the invocation context, error and
warning reporting, common command line arguments and logging setup.
"""
from __future__ import annotations

import argparse
import logging
import os
import shutil
import sys
import tempfile
import threading
from pathlib import Path

import colorlog

from . import languages
from . import settings as settings_module

log = logging.getLogger('kuroe')


class StageError(Exception):
    """Raised to stop a stage at the first error (with --bail_on_error)."""
    pass


class Context:
    """Everything shared by the units of work of one kuroe invocation.

    Owns a temporary directory, in which every compiled program gets its
    own scratch directory, and the ordered list of toolchains.  Use as a
    context manager so that the temporary directory is removed.
    """

    def __init__(self, args: argparse.Namespace,
                 settings: settings_module.Settings | None = None,
                 language_config: languages.Languages | None = None) -> None:
        config_dirs = [Path.cwd()]
        if settings is None:
            settings = settings_module.load_settings(config_dirs)
        if language_config is None:
            language_config = languages.load_language_config(config_dirs)

        customs = [languages.parse_custom_language(spec) for spec in getattr(args, 'language', None) or []]
        customs += [languages.parse_custom_language(spec) for spec in settings.custom_languages]

        self.settings = settings
        self.limits = settings.limits
        self.language_config = language_config.with_custom(customs)
        self.bail_on_error: bool = args.bail_on_error
        self.werror: bool = args.werror
        self.max_additional_info: int = args.max_additional_info
        self.errors = 0
        self.warnings = 0
        # Guards the error and warning counters, also those of each StageAspect.
        self.lock = threading.Lock()
        self.tmpdir = tempfile.mkdtemp(prefix='kuroe-')

    def __enter__(self) -> Context:
        return self

    def __exit__(self, exc_type, exc_value, exc_traceback) -> None:
        shutil.rmtree(self.tmpdir, ignore_errors=True)


class StageAspect:
    """Base class for the stages, and for parts of a stage that report
    errors and warnings on their own."""

    def __init__(self, name: str, context: Context) -> None:
        self.log = log.getChild(name)
        self.context = context
        self.errors = 0
        self.warnings = 0

    def __append_additional_info(self, msg: str, additional_info: str | None) -> str:
        max_additional_info = self.context.max_additional_info
        if additional_info is None or max_additional_info <= 0:
            return msg
        additional_info = additional_info.rstrip()
        if not additional_info:
            return msg
        lines = additional_info.split('\n')
        if len(lines) == 1:
            return f'{msg} ({lines[0]})'
        if len(lines) > max_additional_info:
            lines = lines[:max_additional_info] + [f'[.....truncated to {max_additional_info} lines.....]']

        return f'{msg}:\n' + '\n'.join(' ' * 8 + line for line in lines)

    def error(self, msg: str, additional_info: str | None = None, *args) -> None:
        with self.context.lock:
            self.errors += 1
            self.context.errors += 1
        self.log.error(self.__append_additional_info(msg, additional_info), *args)
        if self.context.bail_on_error:
            raise StageError(msg)

    def warning(self, msg: str, additional_info: str | None = None, *args) -> None:
        if self.context.werror:
            self.error(msg, additional_info, *args)
            return
        with self.context.lock:
            self.warnings += 1
            self.context.warnings += 1
        self.log.warning(self.__append_additional_info(msg, additional_info), *args)

    def info(self, msg: str, *args) -> None:
        self.log.info(msg, *args)

    def debug(self, msg: str, *args) -> None:
        self.log.debug(msg, *args)

    def msg(self, msg):
        print(msg)


def target_outdirs(outdir: str, targets: list[str]) -> dict[str, str]:
    """Separate output directory per target, named by its stem.  Targets
    with the same stem get a numeric suffix: sol, sol_2, sol_3, ...
    """
    used: set[str] = set()
    res = {}
    for target in targets:
        name = base = Path(target).stem
        suffix = 2
        while name in used:
            name = f'{base}_{suffix}'
            suffix += 1
        used.add(name)
        res[target] = os.path.join(outdir, name)
    return res


def format_table(headers: list[str], rows: list[list[str]]) -> str:
    """Plain fixed-width table."""
    widths = [len(h) for h in headers]
    for row in rows:
        widths = [max(w, len(cell)) for w, cell in zip(widths, row)]

    def line(cells):
        return '| ' + ' | '.join(cell.ljust(w) for cell, w in zip(cells, widths)) + ' |'

    sep = '+' + '+'.join('-' * (w + 2) for w in widths) + '+'
    return '\n'.join([sep, line(headers), sep] + [line(row) for row in rows] + [sep])


def positive_float(s: str) -> float:
    try:
        value = float(s)
    except ValueError:
        raise argparse.ArgumentTypeError(f'{s} is not a number')
    if value <= 0:
        raise argparse.ArgumentTypeError(f'{s} is not positive')
    return value


def argparser_basic_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument('-b', '--bail_on_error', action='store_true', help='stop on first error')
    parser.add_argument('--log_level', default='warning', help='set log level (debug, info, warning, error, critical)')
    parser.add_argument('-e', '--werror', action='store_true', help='consider warnings as errors')
    parser.add_argument(
        '--max_additional_info',
        type=int,
        default=15,
        help='maximum number of lines of additional info to display about an error (set to 0 to disable additional info)',
    )
    parser.add_argument(
        '-l',
        '--language',
        metavar='PATTERN,COMMAND,...',
        action='append',
        default=[],
        help='custom language: extension regex, then compile commands, then the run command, '
        'separated by commas; %%(target) is replaced by the source path.  Can be repeated, '
        'earlier ones take precedence over later ones and over the built-in languages',
    )


def initialize_logging(args: argparse.Namespace) -> None:
    fmt = '%(log_color)s%(levelname)s %(message)s'
    colorlog.basicConfig(stream=sys.stdout, format=fmt, level=getattr(logging, args.log_level.upper()))
