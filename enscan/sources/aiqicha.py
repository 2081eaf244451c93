"""Company information from the AiQiCha service."""

from __future__ import annotations

import time
import warnings
from typing import Any, Optional
from urllib.parse import quote_plus

import requests

from enscan import log
from enscan.config import ENOptions, ENsD, EnsGo
from enscan.sources.base import EnScanSource
from enscan.utils import json_get, json_str

BASE_URL = "https://aiqicha.baidu.com/"
_RETRY_SECONDS = 5
_VERIFY_RETRY_SECONDS = 10
_VERIFY_MARKER = "百度安全验证"
_PAGE_DATA_START = "window.pageData ="
_PAGE_DATA_END = "window.isSpider ="

_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/98.0.4758.80 Safari/537.36 Edg/98.0.1108.43"
    ),
    "Accept": "text/html, application/xhtml+xml, image/jxr, */*",
    "Referer": BASE_URL,
}

_STATUS_MESSAGES = {
    403: "【AQC】ip被禁止访问网站，请更换ip",
    401: "【AQC】Cookie有问题或过期，请重新获取",
    302: "【AQC】需要更新Cookie",
}

# Section ids of the navigation list mapped to the kinds of information used here.
EN_MAPPING = {
    "webRecord": "icp",
    "appinfo": "app",
    "wechatoa": "wechat",
    "enterprisejob": "job",
    "microblog": "weibo",
    "hold": "holds",
    "shareholders": "partner",
}

_DIGIT_TABLES: dict[int, dict[str, str]] = {
    0: {},
    1: {"0": "0", "1": "1", "2": "2", "3": "3", "4": "5",
        "5": "4", "6": "7", "7": "6", "8": "9", "9": "8"},
    2: {"0": "0", "1": "1", "2": "2", "3": "3", "4": "6",
        "5": "8", "6": "9", "7": "4", "8": "5", "9": "7"},
}


def get_en_map() -> dict[str, EnsGo]:
    """Endpoints and fields of every kind of information AiQiCha offers."""
    en_map = {
        "enterprise_info": EnsGo(
            name="企业信息",
            api="detail/basicAllDataAjax",
            field=["entName", "legalPerson", "openStatus", "telephone", "email", "regCapital",
                   "startDate", "regAddr", "scope", "taxNo", "pid"],
            keyword=["企业名称", "法人代表", "经营状态", "电话", "邮箱", "注册资本", "成立日期",
                     "注册地址", "经营范围", "统一社会信用代码", "PID"],
        ),
        "icp": EnsGo(
            name="ICP备案",
            api="detail/icpinfoAjax",
            field=["siteName", "homeSite", "domain", "icpNo", ""],
            keyword=["网站名称", "网址", "域名", "网站备案/许可证号", "公司名称"],
        ),
        "app": EnsGo(
            name="APP",
            api="c/appinfoAjax",
            field=["name", "classify", "", "", "logoBrief", "logo", "", "", ""],
            keyword=["名称", "分类", "当前版本", "更新时间", "简介", "logo", "Bundle ID", "链接", "market"],
        ),
        "weibo": EnsGo(
            name="微博",
            api="c/microblogAjax",
            field=["nickname", "weiboLink", "brief", "logo"],
            keyword=["微博昵称", "链接", "简介", "LOGO"],
        ),
        "wechat": EnsGo(
            name="微信公众号",
            api="c/wechatoaAjax",
            field=["wechatName", "wechatId", "wechatIntruduction", "qrcode", "wechatLogo"],
            keyword=["名称", "ID", "描述", "二维码", "LOGO"],
        ),
        "job": EnsGo(
            name="招聘信息",
            api="c/enterprisejobAjax",
            field=["jobTitle", "education", "location", "publishDate", "desc"],
            keyword=["招聘职位", "学历要求", "工作地点", "发布日期", "招聘描述"],
        ),
        "copyright": EnsGo(
            name="软件著作权",
            api="detail/copyrightAjax",
            field=["softwareName", "shortName", "softwareType", "PubType", ""],
            keyword=["软件名称", "软件简介", "分类", "登记号", "权利取得方式"],
        ),
        "supplier": EnsGo(
            name="供应商",
            api="c/supplierAjax",
            field=["supplier", "", "", "cooperationDate", "source", "", "supplierId"],
            keyword=["名称", "金额占比", "金额", "报告期/公开时间", "数据来源", "关联关系", "PID"],
        ),
        "invest": EnsGo(
            name="投资信息",
            api="detail/investajax",
            field=["entName", "legalPerson", "openStatus", "regRate", "pid"],
            keyword=["企业名称", "法人", "状态", "投资比例", "PID"],
        ),
        "holds": EnsGo(
            name="控股企业",
            api="detail/holdsAjax",
            field=["entName", "", "", "proportion", "", "pid"],
            keyword=["企业名称", "法人", "状态", "投资比例", "持股层级", "PID"],
        ),
        "branch": EnsGo(
            name="分支信息",
            api="detail/branchajax",
            field=["entName", "legalPerson", "openStatus", "pid"],
            keyword=["企业名称", "法人", "状态", "PID"],
        ),
        "partner": EnsGo(
            name="股东信息",
            api="detail/sharesAjax",
            field=["name", "subRate", "subMoney", "pid"],
            keyword=["股东名称", "持股比例", "认缴出资金额", "PID"],
        ),
    }
    for item in en_map.values():
        item.keyword.append("数据关联  ")
        item.field.append("inFrom")
    return en_map


def _cookie(options: ENOptions) -> str:
    return options.en_config.cookies.aiqicha if options.en_config is not None else ""


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


def _as_text(value: Any) -> str:
    return json_str({"value": value}, "value")


def get_req(url: str, options: ENOptions) -> str:
    """GET ``url`` and return the body text.

    Connection failures and security-check pages are retried after a
    pause; an unsuccessful status is logged and gives ``""``.
    """
    headers = dict(_HEADERS, Cookie=_cookie(options))
    proxies: Optional[dict[str, str]] = (
        {"http": options.proxy, "https": options.proxy} if options.proxy else None
    )
    timeout = options.timeout * 60 if options.timeout > 0 else None
    while True:
        time.sleep(options.delay_seconds())
        try:
            with warnings.catch_warnings():
                warnings.filterwarnings("ignore", message="Unverified HTTPS request")
                response = requests.get(
                    url, headers=headers, proxies=proxies, timeout=timeout, verify=False
                )
        except requests.RequestException as exc:
            log.error(f"【AQC】请求发生错误， {url} {_RETRY_SECONDS}秒后重试\n{exc}")
            time.sleep(_RETRY_SECONDS)
            continue
        status = response.status_code
        if 200 <= status < 300:
            text = response.content.decode("utf-8", errors="replace")
            if _VERIFY_MARKER in text:
                log.error(
                    "【AQC】需要安全验证，请打开浏览器进行验证后操作，"
                    f"{_VERIFY_RETRY_SECONDS}秒后重试！ {BASE_URL}"
                )
                log.debug(f"URL:{url}\n\n{text}")
                time.sleep(_VERIFY_RETRY_SECONDS)
                continue
            return text
        if status in _STATUS_MESSAGES:
            log.error(_STATUS_MESSAGES[status])
        elif status == 404:
            log.error(f"【AQC】请求错误 404 {url}")
        else:
            log.error(f"【AQC】未知错误 {status}")
        return ""


def page_parse_json(content: str) -> Any:
    """The ``result`` value of the page data embedded in a search page.

    Raises ValueError when the page holds no such data.
    """
    start = content.find(_PAGE_DATA_START)
    end = content.find(_PAGE_DATA_END)
    if end > start:
        text = content[start + len(_PAGE_DATA_START):end]
        text = text.replace("\n", "").replace(" ", "")[:-1]
        return json_get(text, "result")
    log.error("【AQC】无法解析页面数据，请开启Debug检查")
    log.debug(f"【AQC】页面返回数据\n————\n{content}————\n")
    raise ValueError("无法解析页面数据")


def transform_number(text: str, table: int) -> str:
    """Map each digit through substitution table 0, 1 or 2.

    Characters the table does not know become NUL characters.
    """
    if table not in _DIGIT_TABLES:
        raise ValueError(f"unknown digit table: {table}")
    codes = _DIGIT_TABLES[table]
    return "".join(codes.get(char, "\x00") for char in text)


def _expand_icp(rows: list[Any]) -> list[Any]:
    expanded = []
    for row in rows:
        if not isinstance(row, dict):
            continue
        home_sites = _array(row.get("homeSite"))
        home_site = _as_text(home_sites[0]) if home_sites else ""
        for domain in _array(row.get("domain")):
            expanded.append(dict(row, domain=_as_text(domain), homeSite=home_site))
    return expanded


def get_info_list(pid: str, kind: str, options: ENOptions) -> list[Any]:
    """All rows of the list endpoint ``kind`` for a company, page by page."""
    url = f"{BASE_URL}{kind}?pid={pid}"
    content = get_req(url, options)
    if json_str(content, "status") != "0":
        return []
    data = json_get(content, "data")
    if kind == "relations/relationalMapAjax":
        data = json_get(content, "data.investRecordData")
    page_count = _as_int(json_get(data, "pageCount"))
    rows: list[Any]
    if page_count > 1:
        rows = []
        for page in range(1, page_count + 1):
            log.info(f"当前：{kind},{page}")
            content = get_req(f"{url}&p={page}", options)
            rows.extend(_array(json_get(content, "data.list")))
    else:
        rows = _array(json_get(data, "list"))
    if kind == "detail/icpinfoAjax":
        rows = _expand_icp(rows)
    return rows


class AiQiCha(EnScanSource):
    """Company search and details from AiQiCha."""

    def advance_filter(self) -> list[Any]:
        name = self.options.keyword
        url = f"{BASE_URL}s?q={quote_plus(name, safe='')}&t=0"
        content = get_req(url, self.options)
        content = content.replace("<em>", "⌈").replace("<\\/em>", "⌋")
        try:
            result = page_parse_json(content)
        except ValueError:
            result = None
        companies = _array(json_get(result, "resultList"))
        if not companies:
            log.debug(content, 查询请求=name)
            raise LookupError(f"【AQC】没有查询到关键词 ⌈{name}⌋")
        return companies

    def get_en_map(self) -> dict[str, EnsGo]:
        return get_en_map()

    def get_ens_d(self) -> ENsD:
        return ENsD(name=self.options.keyword, pid=self.options.company_id, op=self.options)

    def get_company_base_info_by_id(self, pid: str) -> tuple[Any, dict[str, EnsGo]]:
        content = get_req(f"{BASE_URL}detail/basicAllDataAjax?pid={pid}", self.options)
        basic = json_get(content, "data.basicData")
        result = dict(basic) if isinstance(basic, dict) else {}
        result["pid"] = pid
        en_map = get_en_map()
        navigation = get_req(f"{BASE_URL}compdata/navigationListAjax?pid={pid}", self.options)
        if json_str(navigation, "status") == "0":
            for section in _array(json_get(navigation, "data")):
                for child in _array(json_get(section, "children")):
                    section_id = json_str(child, "id")
                    entry = en_map.get(EN_MAPPING.get(section_id, section_id)) or EnsGo()
                    entry.name = json_str(child, "name")
                    entry.total = _as_int(json_get(child, "total"))
                    entry.available = _as_int(json_get(child, "avaliable"))
                    en_map[section_id] = entry
        else:
            log.error("初始化数量失败！")
            log.debug(navigation, pid=pid)
        return result, en_map

    def get_en_info_list(self, pid: str, en_map: EnsGo) -> list[Any]:
        return get_info_list(pid, en_map.api, self.options)