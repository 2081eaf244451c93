import os

import pytest

from enscan.config import (
    CONFIG_VERSION,
    CONFIG_YAML,
    ENConfig,
    ENOptions,
    EnsGo,
    default_config_path,
    write_default_config,
)


def test_default_yaml_parses_to_current_version():
    conf = ENConfig.from_yaml(CONFIG_YAML)
    assert conf.version == CONFIG_VERSION
    assert conf.cookies.aiqicha == ""
    assert conf.app.miit_api == ""


def test_custom_yaml_values_and_unknown_keys():
    text = (
        "version: 0.7\n"
        "app:\n  miit_api: 'http://localhost:5000'\n"
        "cookies:\n  aiqicha: 'token'\n  auth_token: 'token'\n  qcc: 'placeholder'\n"
    )
    conf = ENConfig.from_yaml(text)
    assert conf.version == 0.7
    assert conf.app.miit_api == "http://localhost:5000"
    assert conf.cookies.aiqicha == "token"
    assert conf.cookies.auth_token == "token"
    assert conf.cookies.tianyancha == ""


def test_missing_version_is_zero():
    conf = ENConfig.from_yaml("cookies:\n  kuaicha: 'token'\n")
    assert conf.version == 0.0
    assert conf.cookies.kuaicha == "token"


def test_non_mapping_yaml_is_rejected():
    with pytest.raises(ValueError):
        ENConfig.from_yaml("- a\n- b\n")


def test_bad_version_is_rejected():
    with pytest.raises(ValueError):
        ENConfig.from_yaml("version: abc\n")


def test_write_default_config_round_trip(tmp_path):
    path = tmp_path / "config.yaml"
    write_default_config(str(path))
    conf = ENConfig.from_yaml(path.read_text(encoding="utf-8"))
    assert conf.version == CONFIG_VERSION


def test_default_config_path_name():
    path = default_config_path()
    assert os.path.basename(path) == "config.yaml"
    assert os.path.isabs(path)


def test_random_delay_in_range():
    options = ENOptions(delay_time=-1)
    values = {options.delay_seconds() for _ in range(50)}
    assert values <= {1, 2, 3, 4, 5}
    assert values


def test_fixed_delay_sets_max_time():
    options = ENOptions(delay_time=3)
    assert options.delay_seconds() == 0
    assert options.delay_max_time == 3


def test_no_delay_keeps_max_time():
    options = ENOptions()
    assert options.delay_seconds() == 0
    assert options.delay_max_time == 0


def test_ensgo_lists_are_independent():
    first, second = EnsGo(), EnsGo()
    first.field.append("name")
    assert second.field == []