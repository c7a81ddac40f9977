"""
Layered YAML configuration.

Every configuration file has a base version shipped in kuroe/config/.
Copies of the same file found in the system, user and problem directories
are merged on top of it, later ones winning.
"""
import collections.abc
import os
from pathlib import Path
from typing import Any

import yaml

BASE_CONFIG_DIR = Path(__file__).parent / 'config'


class ConfigError(Exception):
    pass


def search_path(priority_dirs=None) -> list[Path]:
    """Directories holding configuration, by increasing priority.  The
    first one holds the base files."""
    return [
        BASE_CONFIG_DIR,
        Path('/etc/kuroe'),
        Path(os.environ.get('XDG_CONFIG_HOME', Path.home() / '.config')) / 'kuroe',
    ] + [Path(d) for d in priority_dirs or []]


def read_config_file(path: Path) -> dict | None:
    """Contents of one YAML file, or None if there is no such file.

    Raises:
        ConfigError: the file is not valid YAML, or not a mapping
    """
    if not path.is_file():
        return None
    try:
        with open(path) as f:
            content = yaml.safe_load(f)
    except yaml.YAMLError as err:
        raise ConfigError(f'{path}: failed to parse: {err}')
    if content is None:
        return {}
    if not isinstance(content, dict):
        raise ConfigError(f'{path}: expected a mapping at top level, got {type(content).__name__}')
    return content


def load_config(configuration_file: str, priority_dirs=None) -> dict:
    """Load the merged configuration of e.g. "languages.yaml".

    Args:
        configuration_file (str): file name, relative to each config
            directory
        priority_dirs (list of Path): directories overriding the standard
            ones, the last one winning

    Raises:
        ConfigError: missing base file, or a file that can not be used
    """
    base_dir, *overrides = search_path(priority_dirs)
    res = read_config_file(base_dir / configuration_file)
    if res is None:
        raise ConfigError(f'Base configuration file {configuration_file} not found in {base_dir}')
    for dirname in overrides:
        update = read_config_file(dirname / configuration_file)
        if update:
            merge_config(res, update)
    return res


def merge_config(orig: dict, update: collections.abc.Mapping[str, Any]) -> None:
    """Merge update into orig in place.  Mappings present on both sides
    are merged recursively, any other value of update replaces the one in
    orig."""
    for key, value in update.items():
        current = orig.get(key)
        if isinstance(current, collections.abc.Mapping) and isinstance(value, collections.abc.Mapping):
            merge_config(current, value)
        else:
            orig[key] = value
