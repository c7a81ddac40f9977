# -*- coding: utf-8 -*-
from pathlib import Path

import pytest
from pydantic import ValidationError

from kuroe import config
from kuroe import settings


@pytest.fixture
def config_dirs(tmp_path, monkeypatch):
    dir1 = tmp_path / 'config1'
    dir2 = tmp_path / 'config2'
    dir1.mkdir()
    dir2.mkdir()
    (dir1 / 'test.yaml').write_text('prop1: hello\nprop2: 5\n')
    (dir1 / 'test2.yaml').write_text('prop1: hello\nprop2: 5\nprop4: {a: 1, b: 2}\n')
    (dir2 / 'test2.yaml').write_text('prop1: abc\nprop3: [hello, world]\nprop4: {b: 3}\n')
    (dir1 / 'broken.yaml').write_text('prop1: [unclosed\n')
    (dir1 / 'list.yaml').write_text('- a\n- b\n')
    monkeypatch.setattr(config, 'search_path',
                        lambda priority_dirs=None: [dir1, dir2] + [Path(d) for d in priority_dirs or []])
    return dir1, dir2


def test_load_basic_config(config_dirs):
    conf = config.load_config('test.yaml')
    assert conf == {'prop1': 'hello', 'prop2': 5}


def test_load_updated_config(config_dirs):
    conf = config.load_config('test2.yaml')
    assert conf == {'prop1': 'abc', 'prop2': 5, 'prop3': ['hello', 'world'], 'prop4': {'a': 1, 'b': 3}}


def test_priority_dirs_override(config_dirs, tmp_path):
    local = tmp_path / 'local'
    local.mkdir()
    (local / 'test.yaml').write_text('prop2: 7\n')
    conf = config.load_config('test.yaml', [local])
    assert conf == {'prop1': 'hello', 'prop2': 7}


def test_load_missing_config(config_dirs):
    with pytest.raises(config.ConfigError):
        config.load_config('non_existent_file')


def test_load_broken_config(config_dirs):
    with pytest.raises(config.ConfigError):
        config.load_config('broken.yaml')


def test_load_non_mapping_config(config_dirs):
    with pytest.raises(config.ConfigError):
        config.load_config('list.yaml')


def test_empty_override_is_ignored(config_dirs, tmp_path):
    local = tmp_path / 'local'
    local.mkdir()
    (local / 'test.yaml').write_text('')
    assert config.load_config('test.yaml', [local]) == {'prop1': 'hello', 'prop2': 5}


def test_search_path_order(tmp_path):
    dirs = config.search_path([tmp_path])
    assert dirs[0] == config.BASE_CONFIG_DIR
    assert dirs[-1] == tmp_path


def test_merge_config():
    merge = config.merge_config

    dict1 = {'a': 1, 'b': {'sub1': 1, 'sub2': False}, 'c': 3}
    dict2 = {'b': {'sub3': 'new', 'sub2': 47}}
    dict3 = {'a': 0, 'b': 12}

    merge(dict1, dict2)
    assert dict1 == {'a': 1, 'b': {'sub1': 1, 'sub2': 47, 'sub3': 'new'}, 'c': 3}

    merge(dict1, dict3)
    assert dict1 == {'a': 0, 'b': 12, 'c': 3}


def test_default_settings():
    s = settings.load_settings()
    assert s.limits.judge_time == 2
    assert s.limits.compile_time == 10
    assert s.generate.count == 1
    assert s.generate.seed == 0


def test_settings_override(tmp_path):
    (tmp_path / 'kuroe.yaml').write_text('limits: {solve_time: 3.5}\ngenerate: {seed: 42}\n')
    s = settings.load_settings([tmp_path])
    assert s.limits.solve_time == 3.5
    assert s.limits.judge_time == 2
    assert s.generate.seed == 42
    assert s.generate.count == 1


def test_settings_typo_fails():
    with pytest.raises(ValidationError):
        settings.Settings.model_validate({'limits': {'judge_tme': 1}})


def test_settings_bad_limit_fails():
    with pytest.raises(ValidationError):
        settings.Settings.model_validate({'limits': {'judge_time': 0}})
