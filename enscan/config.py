"""Run options, configuration file and the per-source endpoint description."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from typing import Any, Optional

import yaml

from enscan import utils

BUILT_AT = ""
BUILD_SHA = ""
GIT_AUTHOR = ""
GIT_TAG = ""

DEFAULT_ALL_INFOS = ["icp", "weibo", "wechat", "app", "weibo", "job", "wx_app", "copyright"]
DEFAULT_INFOS = ["icp", "weibo", "wechat", "app", "wx_app"]
CAN_SEARCH_ALL_INFOS = [
    "enterprise_info", "icp", "weibo", "wechat", "app", "job", "wx_app",
    "copyright", "supplier", "invest", "branch", "holds", "partner",
]
DEEP_SEARCH = ["invest", "branch", "holds", "supplier"]
ENS_TYPES = ["aqc", "tyc", "kc", "miit"]
SCAN_TYPE_KEYS = {
    "aqc": "爱企查",
    "qcc": "企查查",
    "tyc": "天眼查",
    "xlb": "小蓝本",
    "kc": "快查",
    "all": "全部查询",
    "aldzs": "阿拉丁",
    "coolapk": "酷安市场",
    "qimai": "七麦数据",
    "chinaz": "站长之家",
    "miit": "miitICP",
}

CONFIG_FILE_NAME = "config.yaml"
CONFIG_VERSION = 0.5
CONFIG_YAML = """version: 0.5
app:
  miit_api: ''          # ICP 查询服务地址
cookies:
  aiqicha: ''           # 爱企查   Cookie
  tianyancha: ''        # 天眼查   Cookie
  tycid: ''             # 天眼查   CApi ID(capi.tianyancha.com)
  auth_token: ''        # 天眼查   Token (capi.tianyancha.com)
  qcc: ''               # 企查查   Cookie
  qcctid: ''            # 企查查   TID
  aldzs: ''             # 阿拉丁   Cookie
  xlb: ''               # 小蓝本   Token
  qimai: ''             # 七麦数据 Cookie
"""


def _text(value: Any) -> str:
    return "" if value is None else str(value)


@dataclass
class Cookies:
    """Credentials for each data source."""

    aldzs: str = ""
    aiqicha: str = ""
    qidian: str = ""
    kuaicha: str = ""
    tianyancha: str = ""
    tycid: str = ""
    auth_token: str = ""
    qimai: str = ""


@dataclass
class AppConfig:
    """Settings of the plug-in sources."""

    miit_api: str = ""


@dataclass
class ENConfig:
    """Contents of the YAML configuration file."""

    version: float = 0.0
    cookies: Cookies = field(default_factory=Cookies)
    app: AppConfig = field(default_factory=AppConfig)

    @classmethod
    def from_yaml(cls, text: str) -> "ENConfig":
        """Build a configuration from YAML text; unknown keys are ignored."""
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ValueError(f"invalid configuration: {exc}") from exc
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError("configuration must be a mapping")
        cookies_data = data.get("cookies") or {}
        app_data = data.get("app") or {}
        if not isinstance(cookies_data, dict) or not isinstance(app_data, dict):
            raise ValueError("'cookies' and 'app' must be mappings")
        try:
            version = float(data.get("version") or 0)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"invalid configuration version: {exc}") from exc
        cookies = Cookies(**{f.name: _text(cookies_data.get(f.name)) for f in fields(Cookies)})
        app = AppConfig(**{f.name: _text(app_data.get(f.name)) for f in fields(AppConfig)})
        return cls(version=version, cookies=cookies, app=app)


@dataclass
class ENOptions:
    """Everything one run is told to do."""

    keyword: str = ""
    company_id: str = ""
    group_id: str = ""
    input_file: str = ""
    output: str = ""
    scan_type: str = "aqc"
    proxy: str = ""
    is_key_pid: bool = False
    is_group: bool = False
    is_get_branch: bool = False
    is_search_branch: bool = False
    invest_num: float = 0.0
    delay_time: int = 0
    delay_max_time: int = 0
    timeout: int = 1
    get_flags: str = ""
    version: bool = False
    is_hold: bool = False
    is_supplier: bool = False
    is_show: bool = True
    get_field: list[str] = field(default_factory=list)
    get_type: list[str] = field(default_factory=list)
    is_debug: bool = False
    is_json_output: bool = False
    deep: int = 1
    up_out_file: str = ""
    is_merge_out: bool = False
    is_no_merge: bool = False
    out_put_type: str = "xlsx"
    is_api_mode: bool = False
    is_mcp_server: bool = False
    en_config: Optional[ENConfig] = None
    branch_filter: str = ""

    def delay_seconds(self) -> int:
        """Seconds to wait before a request: random 1-5 when delay is -1."""
        if self.delay_time == -1:
            return utils.range_rand(1, 5)
        if self.delay_time != 0:
            self.delay_max_time = self.delay_time
        return 0


@dataclass
class EnsGo:
    """How one kind of information is fetched from a source and shown."""

    name: str = ""
    api: str = ""
    field: list[str] = field(default_factory=list)
    keyword: list[str] = field(default_factory=list)
    total: int = 0
    available: int = 0
    g_num: str = ""
    type_info: list[str] = field(default_factory=list)
    fids: str = ""
    s_data: dict[str, str] = field(default_factory=dict)
    gs_data: str = ""
    rf: str = ""
    data_module_id: int = 0
    app_params: tuple[str, str] = ("", "")


@dataclass
class ENsD:
    """The search a source is working on."""

    keyword: str = ""
    name: str = ""
    pid: str = ""
    op: Optional[ENOptions] = None


def default_config_path() -> str:
    """Configuration file next to the running program."""
    return os.path.join(utils.get_config_path(), CONFIG_FILE_NAME)


def write_default_config(path: str) -> None:
    """Write the default configuration file to ``path``."""
    with open(path, "w", encoding="utf-8") as handle:
        handle.write(CONFIG_YAML)