"""Company information from the KuaiCha service."""

from __future__ import annotations

import math
import time
import warnings
from typing import Any, Optional

import requests

from enscan import log
from enscan.config import ENOptions, ENsD, EnsGo
from enscan.sources.base import EnScanSource
from enscan.utils import json_get, json_str

BASE_URL = "https://www.kuaicha365.com/"
SEARCH_URL = BASE_URL + "enterprise_info_app/V1/search/company_search_pc"
BASIC_INFO_URL = BASE_URL + "open/app/v1/pc_enterprise/basic/info"
PAGE_SIZE = 10
_RETRY_SECONDS = 5

_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/98.0.4758.80 Safari/537.36 Edg/98.0.1108.43"
    ),
    "Accept": "text/html, application/xhtml+xml, image/jxr, */*",
    "Content-Type": "application/json;charset=UTF-8",
    "Source": "PC",
    "Referer": BASE_URL + "search-result?",
}

_STATUS_MESSAGES = {
    403: "【KC】ip被禁止访问网站，请更换ip",
    401: "【KC】Cookie有问题或过期，请重新获取",
    302: "【KC】需要更新Cookie",
}


def get_en_map() -> dict[str, EnsGo]:
    """Endpoints and fields of every kind of information KuaiCha offers."""
    en_map = {
        "enterprise_info": EnsGo(
            name="企业信息",
            api="enterprise_info_api/V1/find_company_basic_info",
            field=["name", "legal_person", "state", "telphone", "email", "reg_capital",
                   "established_date", "corp_address", "operating_scope",
                   "unified_social_credit_code", "org_id"],
            keyword=["企业名称", "法人代表", "经营状态", "电话", "邮箱", "注册资本", "成立日期",
                     "注册地址", "经营范围", "统一社会信用代码", "PID"],
        ),
        "wechat": EnsGo(
            name="微信公众号",
            api="open/commercial/v1/wechat_public_number",
            field=["wechat_public_number", "wechat_number", "introduction", "qr_code", ""],
            keyword=["名称", "ID", "描述", "二维码", "LOGO"],
        ),
        "job": EnsGo(
            name="招聘信息",
            api="open/commercial/v1/require_info",
            field=["position", "background", "location", "publish_time", "url"],
            keyword=["招聘职位", "学历要求", "工作地点", "发布日期", "招聘描述"],
        ),
        "copyright": EnsGo(
            name="软件著作权",
            api="open/trademark/v1/software_info",
            field=["software_full_name", "software_short_name", "type", "reg_num", ""],
            keyword=["软件名称", "软件简介", "分类", "登记号", "权利取得方式"],
        ),
        "supplier": EnsGo(
            name="供应商",
            api="open/commercial/v1/main_suppliers_extend",
            field=["", "ratio", "amt", "publish_time", "", "supplier_to_customer_type", "orgid"],
            keyword=["名称", "金额占比", "金额", "报告期/公开时间", "数据来源", "关联关系", "PID"],
        ),
        "invest": EnsGo(
            name="投资信息",
            api="open/app/v1/pc_enterprise/invest_abroad/list",
            field=["frgn_invest_corp_name", "legal_representative", "", "invest_ratio",
                   "frgn_invest_corp_id"],
            keyword=["企业名称", "法人", "状态", "投资比例", "PID"],
            fids="&is_latest=1",
        ),
        "holds": EnsGo(
            name="控股企业",
            api="open/app/v1/pc_enterprise/hold_corp/list",
            field=["hold_corp_name", "legal_representative", "", "hold_ratio", "",
                   "hold_corp_code"],
            keyword=["企业名称", "法人", "状态", "投资比例", "持股层级", "PID"],
        ),
        "branch": EnsGo(
            name="分支信息",
            api="open/app/v1/pc_enterprise/branch_office/list",
            field=["org_name", "person_name", "", "org_id"],
            keyword=["企业名称", "法人", "状态", "PID"],
        ),
        "partner": EnsGo(
            name="股东信息",
            api="open/app/v1/pc_enterprise/shareholder/latest_announcement",
            field=["shareholder_name", "shareholding_ratio", "share_held_num", "shareholder_id"],
            keyword=["股东名称", "持股比例", "认缴出资金额", "PID"],
        ),
    }
    for item in en_map.values():
        item.keyword.append("数据关联  ")
        item.field.append("inFrom")
    return en_map


def _cookie(options: ENOptions) -> str:
    return options.en_config.cookies.kuaicha if options.en_config is not None else ""


def _array(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def _as_int(value: Any) -> int:
    if isinstance(value, (bool, int)):
        return int(value)
    if isinstance(value, float):
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


def get_req(url: str, data: str, options: ENOptions) -> str:
    """Fetch ``url``; POST ``data`` when it is not empty.

    Connection failures are retried after a pause; an unsuccessful status
    is logged and gives ``""``.
    """
    headers = dict(_HEADERS, Cookie=_cookie(options))
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
                    method, url, data=body, headers=headers, proxies=proxies,
                    timeout=timeout, verify=False,
                )
        except requests.RequestException as exc:
            log.error(f"【KC】请求发生错误， {url} {_RETRY_SECONDS}秒后重试\n{exc}")
            time.sleep(_RETRY_SECONDS)
            continue
        break
    status = response.status_code
    if 200 <= status < 300:
        return response.content.decode("utf-8", errors="replace")
    if status in _STATUS_MESSAGES:
        log.error(_STATUS_MESSAGES[status])
    elif status == 404:
        log.error(f"【KC】请求错误 404 {url}")
    else:
        log.error(f"【KC】未知错误 {status}")
    return ""


def get_info_list(pid: str, kind: str, options: ENOptions) -> list[Any]:
    """All rows of the list endpoint ``kind`` for a company, page by page."""
    url = BASE_URL + kind
    if "open/app/v1" in kind:
        url += f"?page_size={PAGE_SIZE}&org_id={pid}"
    else:
        url += f"?pageSize={PAGE_SIZE}&&orgid={pid}"
    content = get_req(url + "&page=1", "", options)
    if json_str(content, "status_code") != "0":
        return []
    data = json_get(content, "data")
    if not _as_bool(json_get(data, "next_page")):
        return _array(json_get(data, "list"))
    pages = math.ceil(_as_int(json_get(data, "total")) / PAGE_SIZE)
    rows: list[Any] = []
    for page in range(1, pages + 1):
        log.info(f"当前：{kind},{page}")
        content = get_req(f"{url}&page={page}", "", options)
        rows.extend(_array(json_get(content, "data.list")))
    return rows


class KuaiCha(EnScanSource):
    """Company search and details from KuaiCha."""

    def advance_filter(self) -> list[Any]:
        name = self.options.keyword
        query = f'{{"search_conditions":[],"keyword":"{name}","page":1,"page_size":20}}"}}'
        content = get_req(SEARCH_URL, query, self.options)
        content = content.replace("<em>", "⌈").replace("</em>", "⌋")
        companies = _array(json_get(content, "data.list"))
        if not companies:
            log.debug(content, 查询请求=name)
            raise LookupError(f"【KC】没有查询到关键词 ⌈{name}⌋")
        return companies

    def get_en_map(self) -> dict[str, EnsGo]:
        return get_en_map()

    def get_ens_d(self) -> ENsD:
        return ENsD(name=self.options.keyword, pid=self.options.company_id, op=self.options)

    def get_company_base_info_by_id(self, pid: str) -> tuple[Any, dict[str, EnsGo]]:
        en_map = get_en_map()
        content = get_req(f"{BASIC_INFO_URL}?org_id={pid}", "", self.options)
        detail = json_get(content, "data")
        # The service gives no counts, so every kind is assumed to have data.
        for item in en_map.values():
            item.total = 1
        return (detail if isinstance(detail, dict) else {}), en_map

    def get_en_info_list(self, pid: str, en_map: EnsGo) -> list[Any]:
        return get_info_list(pid + en_map.fids, en_map.api, self.options)