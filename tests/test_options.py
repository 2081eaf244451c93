import pytest

from enscan import config, log, utils
from enscan.config import ENOptions
from enscan.log import Level
from enscan.options import (
    ConfigError,
    banner,
    build_arg_parser,
    parse_args,
    parse_options,
)


@pytest.fixture
def config_path(tmp_path):
    path = tmp_path / "config.yaml"
    config.write_default_config(str(path))
    return str(path)


def test_banner_holds_build_information():
    text = banner()
    assert "Built At:" in text
    assert "Version:" in text


def test_parse_args_defaults():
    opts = parse_args([])
    assert opts.scan_type == "aqc"
    assert opts.deep == 1
    assert opts.timeout == 1
    assert opts.out_put_type == "xlsx"
    assert opts.is_show is True
    assert opts.keyword == ""
    assert opts.is_hold is False


def test_parse_args_values():
    opts = parse_args(
        ["-n", "小米", "-type", "aqc,tyc", "-invest", "51.5", "-hold", "-delay", "-1", "--deep", "2"]
    )
    assert opts.keyword == "小米"
    assert opts.scan_type == "aqc,tyc"
    assert opts.invest_num == 51.5
    assert opts.is_hold is True
    assert opts.delay_time == -1
    assert opts.deep == 2


def test_parse_args_explicit_boolean_values():
    opts = parse_args(["-is-show=false", "--branch=true", "-n", "x"])
    assert opts.is_show is False
    assert opts.is_get_branch is True
    assert opts.keyword == "x"


def test_parse_args_rejects_bad_boolean():
    with pytest.raises(SystemExit) as info:
        parse_args(["-hold=maybe"])
    assert info.value.code == 2


def test_arg_parser_reads_out_type():
    ns = build_arg_parser().parse_args(["-out-type", "json", "-out-dir", "!"])
    assert ns.out_put_type == "json"
    assert ns.output == "!"


def test_version_creates_config(tmp_path):
    path = tmp_path / "config.yaml"
    with pytest.raises(SystemExit) as info:
        parse_options(ENOptions(version=True), str(path))
    assert info.value.code == 0
    assert path.read_text(encoding="utf-8") == config.CONFIG_YAML


def test_version_keeps_existing_config(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("version: 9\n", encoding="utf-8")
    with pytest.raises(SystemExit):
        parse_options(ENOptions(version=True), str(path))
    assert path.read_text(encoding="utf-8") == "version: 9\n"


def test_missing_config_is_an_error(tmp_path):
    with pytest.raises(ConfigError):
        parse_options(ENOptions(keyword="小米"), str(tmp_path / "none.yaml"))


def test_outdated_config_is_an_error(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("version: 0.4\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        parse_options(ENOptions(keyword="小米"), str(path))


def test_broken_yaml_is_an_error(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("version: [\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        parse_options(ENOptions(keyword="小米"), str(path))


def test_nothing_to_search_exits(config_path):
    with pytest.raises(SystemExit) as info:
        parse_options(ENOptions(), config_path)
    assert info.value.code == 0


def test_defaults_are_filled_in(config_path):
    opts = parse_options(ENOptions(keyword="小米"), config_path)
    assert opts.get_type == ["aqc"]
    assert opts.get_field == config.DEFAULT_INFOS
    assert opts.output == "outs"
    assert opts.is_merge_out is True
    assert opts.en_config.version == config.CONFIG_VERSION


def test_all_fields_and_types(config_path):
    opts = parse_options(ENOptions(keyword="小米", get_flags="all", scan_type="all"), config_path)
    assert opts.get_field == utils.unique(config.DEFAULT_ALL_INFOS)
    assert opts.get_type == config.ENS_TYPES


def test_extra_fields_are_appended(config_path):
    opts = parse_options(
        ENOptions(
            keyword="小米", invest_num=10, is_hold=True, is_supplier=True, is_search_branch=True
        ),
        config_path,
    )
    assert opts.is_get_branch is True
    assert opts.get_field == config.DEFAULT_INFOS + [
        "branch", "invest", "partner", "holds", "supplier"
    ]


def test_unknown_scan_types_are_dropped(config_path):
    opts = parse_options(ENOptions(keyword="小米", scan_type="aqc,nope,aqc,kc"), config_path)
    assert opts.get_type == ["aqc", "kc"]


def test_field_flags_are_split(config_path):
    opts = parse_options(ENOptions(keyword="小米", get_flags="icp,app,icp"), config_path)
    assert opts.get_field == ["icp", "app"]


def test_update_file_needs_single_field(config_path):
    with pytest.raises(ConfigError):
        parse_options(ENOptions(keyword="小米", up_out_file="up.csv"), config_path)
    opts = parse_options(
        ENOptions(keyword="小米", up_out_file="up.csv", get_flags="icp"), config_path
    )
    assert opts.get_field == ["icp"]


def test_input_file_must_exist(config_path, tmp_path):
    with pytest.raises(ConfigError):
        parse_options(ENOptions(input_file=str(tmp_path / "missing.txt")), config_path)
    names = tmp_path / "names.txt"
    names.write_text("小米\n", encoding="utf-8")
    opts = parse_options(ENOptions(input_file=str(names)), config_path)
    assert opts.input_file == str(names)


def test_json_output_and_no_merge(config_path):
    opts = parse_options(
        ENOptions(keyword="小米", is_json_output=True, is_no_merge=True, output="!"), config_path
    )
    assert opts.out_put_type == "json"
    assert opts.is_merge_out is False
    assert opts.output == "!"


def test_debug_raises_log_level(config_path):
    try:
        parse_options(ENOptions(keyword="小米", is_debug=True), config_path)
        assert log.DEFAULT_LOGGER.enabled(Level.DEBUG) is True
    finally:
        log.DEFAULT_LOGGER.set_max_level(Level.INFO)
    assert log.DEFAULT_LOGGER.enabled(Level.DEBUG) is False


def test_cookies_are_loaded(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "version: 0.5\ncookies:\n  aiqicha: 'token'\napp:\n  miit_api: 'http://localhost'\n",
        encoding="utf-8",
    )
    opts = parse_options(ENOptions(company_id="123"), str(path))
    assert opts.en_config.cookies.aiqicha == "token"
    assert opts.en_config.app.miit_api == "http://localhost"