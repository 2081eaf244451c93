"""Plug-in that looks up ICP records, apps and mini programs by company name."""

from __future__ import annotations

import time
import warnings
from typing import Any, Optional
from urllib.parse import quote_plus

import requests

from enscan import log
from enscan.config import ENOptions, EnsGo
from enscan.sources.base import AppSource
from enscan.utils import json_get

_RETRY_SECONDS = 10
_PAGE_PAUSE_SECONDS = 5

_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/98.0.4758.80 Safari/537.36 Edg/98.0.1108.43"
    ),
    "Accept": "text/html, application/xhtml+xml, image/jxr, */*",
    "Content-Type": "application/json;charset=UTF-8",
}


def get_en_map() -> dict[str, EnsGo]:
    """Endpoints and fields of every kind of information the plug-in offers."""
    en_map = {
        "icp": EnsGo(
            name="ICP备案",
            api="web",
            field=["", "domain", "domain", "serviceLicence", "unitName"],
            keyword=["网站名称", "网址", "域名", "网站备案/许可证号", "公司名称"],
        ),
        "app": EnsGo(
            name="APP",
            api="app",
            field=["serviceName", "serviceType", "version", "updateRecordTime", "", "", "", "", ""],
            keyword=["名称", "分类", "当前版本", "更新时间", "简介", "logo", "Bundle ID", "链接", "market"],
        ),
        "wx_app": EnsGo(
            name="小程序",
            api="miniapp",
            field=["serviceName", "serviceType", "", "", ""],
            keyword=["名称", "分类", "头像", "二维码", "阅读量"],
        ),
        "fastapp": EnsGo(
            name="快应用",
            api="fastapp",
            field=["serviceName", "serviceType", "", "", ""],
            keyword=["名称", "分类", "头像", "二维码", "阅读量"],
        ),
    }
    for item in en_map.values():
        item.app_params = ("enterprise_info", "name")
        item.keyword.append("数据关联  ")
        item.field.append("inFrom")
    return en_map


def _array(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def _as_int(value: Any) -> int:
    if isinstance(value, (bool, int, float)):
        return int(value)
    if isinstance(value, str):
        try:
            return int(float(value))
        except ValueError:
            return 0
    return 0


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value in ("1", "t", "T", "TRUE", "true", "True")
    return False


def _api_base(options: ENOptions) -> str:
    return options.en_config.app.miit_api if options.en_config is not None else ""


def get_req(url: str, data: str, options: ENOptions) -> str:
    """Fetch ``url``; POST ``data`` when it is not empty.

    Connection failures are retried after a pause; an unsuccessful status
    is logged and gives ``""``.
    """
    proxies: Optional[dict[str, str]] = (
        {"http": options.proxy, "https": options.proxy} if options.proxy else None
    )
    timeout = options.timeout * 60 if options.timeout > 0 else None
    method = "POST" if data else "GET"
    body = data.encode("utf-8") if data else None
    while True:
        time.sleep(options.delay_seconds())
        try:
            with warnings.catch_warnings():
                warnings.filterwarnings("ignore", message="Unverified HTTPS request")
                response = requests.request(
                    method, url, data=body, headers=_HEADERS, proxies=proxies,
                    timeout=timeout, verify=False,
                )
        except requests.RequestException as exc:
            log.error(f"【miit】请求发生错误， {url} {_RETRY_SECONDS}秒后重试\n{exc}")
            time.sleep(_RETRY_SECONDS)
            continue
        break
    if 200 <= response.status_code < 300:
        return response.content.decode("utf-8", errors="replace")
    log.error(f"【miit】未知错误 {response.status_code}")
    return ""


def get_info_list(keyword: str, kind: str, options: ENOptions) -> list[Any]:
    """All rows of the query endpoint ``kind`` for ``keyword``, page by page."""
    url = f"{_api_base(options)}/query/{kind}?page=1&search={quote_plus(keyword, safe='')}"
    content = get_req(url + "&page=1", "", options)
    data = json_get(content, "data")
    rows = list(_array(json_get(data, "list")))
    if _as_bool(json_get(data, "hasNextPage")):
        for page in range(2, _as_int(json_get(data, "pages")) + 1):
            log.info(f"当前：{kind},{page}")
            # The service blocks quickly, so pages are fetched slowly.
            time.sleep(_PAGE_PAUSE_SECONDS)
            content = get_req(f"{url}&page={page}", "", options)
            rows.extend(_array(json_get(content, "data.list")))
    return rows


class Miit(AppSource):
    """Look up registrations by company name through the configured service."""

    def get_info_list(self, keyword: str, kind: str) -> list[Any]:
        return get_info_list(keyword, get_en_map()[kind].api, self.options)

    def get_en_map(self) -> dict[str, EnsGo]:
        return get_en_map()