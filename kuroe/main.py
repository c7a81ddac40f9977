#! /usr/bin/env python3
# -*- coding: utf-8 -*-
import argparse
import sys

from pydantic import ValidationError

from . import generate, judge, solve, validate
from .config import ConfigError
from .languages import LanguageConfigError
from .stage import Context, StageError, argparser_basic_arguments, initialize_logging
from .version import add_version_arg

STAGES = {
    'generate': (generate, 'generate testcases'),
    'validate': (validate, 'validate testcases'),
    'solve': (solve, 'generate answers with a reference solver'),
    'judge': (judge, 'judge solvers'),
}


def argparser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='kuroe', description='kuroe is a lightweight tool for creating competitive programming problems')
    add_version_arg(parser)
    subparsers = parser.add_subparsers(dest='stage', metavar='STAGE', required=True)
    for name, (module, description) in STAGES.items():
        subparser = subparsers.add_parser(name, help=description, description=description)
        module.add_arguments(subparser)
        argparser_basic_arguments(subparser)
    return parser


def main(argv: list[str] | None = None) -> None:
    args = argparser().parse_args(argv)
    initialize_logging(args)
    module = STAGES[args.stage][0]

    try:
        context = Context(args)
    except (ConfigError, LanguageConfigError, ValidationError) as e:
        print(f'ERROR: invalid configuration: {e}')
        sys.exit(1)

    try:
        with context:
            module.run_stage(args, context)
    except StageError:
        print('bailing out on first error')
    except KeyboardInterrupt:
        print('\naborting...')
    finally:
        def p(x: int) -> str:
            return '' if x == 1 else 's'

        errors = context.errors
        print(f'{args.stage}: {errors} error{p(errors)}, {context.warnings} warning{p(context.warnings)}')
    sys.exit(1 if errors > 0 else 0)


if __name__ == '__main__':
    main()
