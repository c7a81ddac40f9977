"""Package for managing execution of external programs in kuroe.
"""
from .errors import CompileFailure, ProgramError, SpawnFailure
from .program import KILL_WAIT, CommandStep, ExecuteStatus
from .source import COMPILE_TIMELIM, SourceCode, compile_and_get_runstep, get_extension
from .rutil import find_files


def find_programs(paths, recursive=False):
    """Find all program files designated by a list of command line paths.

    Args:
        paths (list of str): files or directories in which to search
        recursive (bool): search subdirectories of directories too

    Returns:
        list of str, in the order of paths, each directory sorted.
    """
    ret = []
    for path in paths:
        ret.extend(find_files(path, recursive))
    return ret
