"""
Naming of generated testcases and pairing of testcase files.

A testcase is a pair of files with a common stem, the input "<stem>.in"
and the expected answer "<stem>.ans".  Generators are named
"<name>.<count>.<ext>" or "<name>.<ext>"; the optional count says how many
testcases the generator produces, and generated inputs are called
"<name>_000.in", "<name>_001.in", ...
"""
import dataclasses
import os
import re
from dataclasses import dataclass
from pathlib import Path

from .run import ExecuteStatus, find_programs

INPUT_EXT = 'in'
ANSWER_EXT = 'ans'
OUTPUT_EXT = 'out'

_COUNT_RE = re.compile(r'[0-9]+')


class InvalidFilenameForm(ValueError):
    """A file name can not be interpreted as "name[.count].ext"."""
    pass


@dataclass(frozen=True)
class TargetFileInfo:
    name: str
    count: int | None
    ext: str

    @classmethod
    def from_path(cls, path) -> 'TargetFileInfo':
        """Interpret the file name of path as "name.count.ext".

        The segment before the extension is taken as the count only if it
        is a non-negative integer; otherwise it is part of the name.

        Raises:
            InvalidFilenameForm: no extension, or nothing left for the name
        """
        filename = os.path.basename(path)
        stem, dot, ext = filename.rpartition('.')
        if not dot or not stem:
            raise InvalidFilenameForm('%s: expected a file name of the form name.ext' % filename)

        name, dot, count = stem.rpartition('.')
        if _COUNT_RE.fullmatch(count) is None:
            return cls(stem, None, ext)
        if not name:
            raise InvalidFilenameForm('%s: no name before the count %s' % (filename, count))
        return cls(name, int(count), ext)

    def case_name(self, index: int) -> str:
        """File name of the index:th generated input."""
        return '%s_%03d.%s' % (self.name, index, INPUT_EXT)


@dataclass(frozen=True, order=True)
class TestcasePairing:
    """One judged unit.  The output and status are filled in (on a copy)
    once the solver has been run on the input.
    """
    input_path: str
    answer_path: str
    output_path: str | None = None
    status: ExecuteStatus | None = None

    __test__ = False  # not a pytest test class

    @property
    def name(self) -> str:
        return Path(self.input_path).stem

    def solved(self, output_path, status: ExecuteStatus) -> 'TestcasePairing':
        return dataclasses.replace(self, output_path=str(output_path), status=status)


def has_ext(path, ext) -> bool:
    return Path(path).suffix == '.' + ext


def find_testcases(paths, recursive=False) -> list[str]:
    """All input files (*.in) designated by the command line paths."""
    return [path for path in find_programs(paths, recursive) if has_ext(path, INPUT_EXT)]


def enumerate_valid_testcases(all_files, ignored=None) -> list[TestcasePairing]:
    """Pair up input and answer files by stem.

    Inputs without an answer are dropped, as are answers without an
    input.  If several inputs (or answers) share a stem, the first one in
    all_files is used.

    Args:
        all_files (list of str): candidate files, in discovery order
        ignored (list): if not None, duplicate files that were not
            used are appended to it

    Returns:
        list of TestcasePairing, sorted by input path.
    """
    answers = {}
    for path in all_files:
        if has_ext(path, ANSWER_EXT):
            stem = Path(path).stem
            if stem in answers:
                if ignored is not None:
                    ignored.append(path)
                continue
            answers[stem] = path

    cases = {}
    for path in all_files:
        if has_ext(path, INPUT_EXT):
            stem = Path(path).stem
            if stem not in answers:
                continue
            if stem in cases:
                if ignored is not None:
                    ignored.append(path)
                continue
            cases[stem] = TestcasePairing(str(path), str(answers[stem]))

    return sorted(cases.values())
