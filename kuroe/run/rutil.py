"""Some utility functions for the run module.
"""
import os


def find_files(base, recursive=False):
    """List the files designated by a command line path.

    Args:
        base (str): a file, which is returned as is, or a directory
        recursive (bool): if true, also list files in subdirectories
            of a directory

    Returns:
        list of str, sorted.  Empty if base does not exist.
    """
    if os.path.isfile(base):
        return [str(base)]
    if not os.path.isdir(base):
        return []
    if recursive:
        return sorted(list_files_recursive(base))
    return sorted(os.path.join(base, name) for name in os.listdir(base)
                  if os.path.isfile(os.path.join(base, name)))


def list_files_recursive(root):
    """List files in a directory with subdirectories.

    Returns:
        list of str, all file names for all files contained in a
        directory and its subdirectories.
    """
    ret = []
    for (path, _, files) in os.walk(root):
        ret.extend([os.path.join(path, filename) for filename in files])
    return ret
