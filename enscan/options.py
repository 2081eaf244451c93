"""Command-line flags and validation of the options of one run."""

from __future__ import annotations

import argparse
import platform
import sys
from typing import Optional, Sequence

from enscan import config, log, utils
from enscan.config import ENConfig, ENOptions
from enscan.log import Level

_BANNER_ART = """

███████╗███╗   ██╗███████╗ ██████╗ █████╗ ███╗   ██╗
██╔════╝████╗  ██║██╔════╝██╔════╝██╔══██╗████╗  ██║
█████╗  ██╔██╗ ██║███████╗██║     ███████║██╔██╗ ██║
██╔══╝  ██║╚██╗██║╚════██║██║     ██╔══██║██║╚██╗██║
███████╗██║ ╚████║███████║╚██████╗██║  ██║██║ ╚████║
╚══════╝╚═╝  ╚═══╝╚══════╝ ╚═════╝╚═╝  ╚═╝╚═╝  ╚═══╝

"""

# (flag name, ENOptions field, value type, default, help text)
_FLAGS = (
    ("n", "keyword", str, "", "关键词 eg 小米"),
    ("i", "company_id", str, "", "公司PID"),
    ("f", "input_file", str, "", "批量查询，文本按行分隔"),
    ("type", "scan_type", str, "aqc", "查询渠道，可多选"),
    ("invest", "invest_num", float, 0.0, "投资比例 eg 100"),
    ("field", "get_flags", str, "", "获取字段信息 eg icp"),
    ("deep", "deep", int, 1, "递归搜索n层公司"),
    ("hold", "is_hold", bool, False, "是否查询控股公司"),
    ("supplier", "is_supplier", bool, False, "是否查询供应商信息"),
    ("branch", "is_get_branch", bool, False, "查询分支机构（分公司）信息"),
    ("is-branch", "is_search_branch", bool, False, "深度查询分支机构信息（数量巨大）"),
    ("json", "is_json_output", bool, False, "json导出"),
    ("out-dir", "output", str, "", "结果输出的文件夹位置(默认为outs)"),
    ("branch-filter", "branch_filter", str, "",
     "提供一个正则表达式，名称匹配该正则的分支机构和子公司会被跳过"),
    ("out-update", "up_out_file", str, "", "导出指定范围文件，自更新"),
    ("out-type", "out_put_type", str, "xlsx", "导出的文件后缀 默认xlsx"),
    ("debug", "is_debug", bool, False, "是否显示debug详细信息"),
    ("is-show", "is_show", bool, True, "是否展示信息输出"),
    ("is-group", "is_group", bool, False, "查询关键词为集团"),
    ("api", "is_api_mode", bool, False, "API模式运行"),
    ("mcp", "is_mcp_server", bool, False, "MCP模式运行"),
    ("is-pid", "is_key_pid", bool, False, "批量查询文件是否为公司PID"),
    ("delay", "delay_time", int, 0, "每个请求延迟（S）-1为随机延迟1-5S"),
    ("proxy", "proxy", str, "", "设置代理"),
    ("timeout", "timeout", int, 1, "每个请求默认1（分钟）超时"),
    ("no-merge", "is_no_merge", bool, False, "开启后查询文件将单独导出"),
    ("v", "version", bool, False, "版本信息"),
)

_BOOL_FLAGS = {name: dest for name, dest, kind, _, _ in _FLAGS if kind is bool}
_TRUE_WORDS = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE_WORDS = {"0", "f", "F", "FALSE", "false", "False"}


class ConfigError(Exception):
    """The configuration file or the options of a run cannot be used."""


def banner() -> str:
    """Print the program banner with build information and return it."""
    text = (
        f"{_BANNER_ART}Built At: {config.BUILT_AT}\n"
        f"Python Version: {platform.python_version()}\n"
        f"Author: {config.GIT_AUTHOR}\n"
        f"Build SHA: {config.BUILD_SHA}\n"
        f"Version: {config.GIT_TAG}\n\n"
        "工具仅用于信息收集，请勿用于非法用途\n"
        "开发人员不承担任何责任，也不对任何滥用或损坏负责.\n"
    )
    log.echo(text)
    return text


def build_arg_parser() -> argparse.ArgumentParser:
    """Parser for the command-line flags; each takes one or two dashes."""
    parser = argparse.ArgumentParser(prog="enscan", allow_abbrev=False)
    for name, dest, kind, default, text in _FLAGS:
        strings = (f"-{name}", f"--{name}")
        if kind is bool:
            parser.add_argument(
                *strings, dest=dest, action="store_const", const=True, default=default, help=text
            )
        else:
            parser.add_argument(*strings, dest=dest, type=kind, default=default, help=text)
    return parser


def _split_bool_values(
    parser: argparse.ArgumentParser, tokens: Sequence[str]
) -> tuple[list[str], dict[str, bool]]:
    """Pull ``-flag=value`` forms of boolean flags out of the arguments."""
    remaining: list[str] = []
    overrides: dict[str, bool] = {}
    for position, token in enumerate(tokens):
        if token == "--":
            remaining.extend(tokens[position:])
            break
        name, sep, value = token.partition("=")
        bare = name.lstrip("-")
        dashes = len(name) - len(bare)
        if sep and dashes in (1, 2) and bare in _BOOL_FLAGS:
            if value in _TRUE_WORDS:
                overrides[_BOOL_FLAGS[bare]] = True
            elif value in _FALSE_WORDS:
                overrides[_BOOL_FLAGS[bare]] = False
            else:
                parser.error(f"invalid boolean value {value!r} for -{bare}")
        else:
            remaining.append(token)
    return remaining, overrides


def parse_args(argv: Optional[Sequence[str]] = None) -> ENOptions:
    """Show the banner and read the command-line flags into options."""
    banner()
    parser = build_arg_parser()
    tokens = list(sys.argv[1:] if argv is None else argv)
    remaining, overrides = _split_bool_values(parser, tokens)
    values = vars(parser.parse_args(remaining))
    values.update(overrides)
    return ENOptions(**values)


def _load_config(path: str) -> ENConfig:
    if not utils.path_exists(path):
        raise ConfigError(f"没有找到配置文件 {path} 请先运行 -v 创建")
    try:
        with open(path, encoding="utf-8") as handle:
            text = handle.read()
    except OSError as exc:
        raise ConfigError(f"配置文件解析错误 #{exc}") from exc
    try:
        conf = ENConfig.from_yaml(text)
    except ValueError as exc:
        raise ConfigError(f"【配置文件加载失败】: {exc}") from exc
    if conf.version < config.CONFIG_VERSION:
        raise ConfigError(
            f"配置文件当前[V{conf.version:.1f}] 程序需要[V{config.CONFIG_VERSION:.1f}] "
            "不匹配，请备份配置文件重新运行-v"
        )
    return conf


def _select_types(options: ENOptions) -> None:
    if options.scan_type == "" and not options.get_type:
        options.scan_type = "aqc"
    if options.scan_type == "all":
        options.get_type = list(config.ENS_TYPES)
        options.is_merge_out = True
    elif options.scan_type != "":
        options.get_type = options.scan_type.split(",")
    kept = []
    for kind in utils.unique(options.get_type):
        if kind in config.SCAN_TYPE_KEYS:
            kept.append(kind)
        else:
            log.error(f"没有这个{kind}查询方式\n支持列表\n{config.SCAN_TYPE_KEYS}")
    options.get_type = kept


def _select_fields(options: ENOptions) -> None:
    options.get_field = utils.unique(options.get_field)
    if options.get_flags == "" and not options.get_field:
        options.get_field = list(config.DEFAULT_INFOS)
    elif options.get_flags == "all":
        options.get_field = list(config.DEFAULT_ALL_INFOS)
    elif options.get_flags != "":
        options.get_field = options.get_flags.split(",")
        if not options.get_field:
            raise ConfigError(f"没有获取字段信息！\n{options.get_flags}")

    if options.up_out_file != "" and len(options.get_field) > 1:
        raise ConfigError(f"自更新导出仅支持输出一个参数！⌈{options.get_field}⌋")

    if options.is_search_branch:
        options.is_get_branch = True
    if options.is_get_branch:
        options.get_field.append("branch")
    if options.invest_num != 0:
        options.get_field.extend(["invest", "partner"])
        log.info(f"获取投资信息，将会获取⌈{options.deep}⌋级子公司")
    if options.is_hold:
        options.get_field.append("holds")
    if options.is_supplier:
        options.get_field.append("supplier")
    options.get_field = utils.unique(options.get_field)


def parse_options(options: ENOptions, config_path: Optional[str] = None) -> ENOptions:
    """Check and complete the options, loading the configuration file.

    Exits with status 0 after ``-v`` or when there is nothing to search for;
    raises ConfigError when the configuration or options are unusable.
    """
    path = config_path or config.default_config_path()

    if options.is_debug:
        log.DEFAULT_LOGGER.set_max_level(Level.DEBUG)
        log.debug("DEBUG 模式已开启")

    if options.version:
        log.info(f"Current Version: {config.GIT_TAG}")
        log.info(f"当前所需配置文件版本 V{config.CONFIG_VERSION:.1f}")
        if not utils.path_exists(path):
            try:
                config.write_default_config(path)
            except OSError as exc:
                raise ConfigError(f"配置文件创建失败 {exc}") from exc
            log.info("配置文件生成成功！")
        raise SystemExit(0)

    conf = _load_config(path)

    if not (
        options.keyword
        or options.company_id
        or options.input_file
        or options.is_api_mode
        or options.is_mcp_server
    ):
        build_arg_parser().print_help(sys.stderr)
        raise SystemExit(0)

    if options.output == "":
        options.output = "outs"
    if options.is_json_output:
        options.out_put_type = "json"
    if options.output == "!":
        log.info("当前模式不会导出文件信息！")
    if options.proxy != "":
        log.info(f"代理已设定 ⌈{options.proxy}⌋")
    if options.input_file != "" and not utils.file_exists(options.input_file):
        raise ConfigError(f"未获取到文件⌈{options.input_file}⌋请检查文件名是否正确")

    _select_types(options)
    _select_fields(options)

    if options.is_no_merge:
        log.info("批量查询文件将单独导出！")
    options.is_merge_out = not options.is_no_merge
    options.en_config = conf
    return options