"""Unified output format: converting source rows and writing result files."""

from __future__ import annotations

import json
import os
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional

from enscan import log
from enscan.config import EnsGo
from enscan.excel import Workbook, export_excel
from enscan.utils import json_str

_EXTRA_KEYS = ["from", "extra"]
_EXTRA_HEADERS = ["数据关联", "补充信息"]
_MAX_NAME = 20


class OutputError(Exception):
    """A result file could not be written."""


@dataclass
class ENSMap:
    """Columns of one kind of information in the unified output."""

    name: str
    j_field: list[str]
    keyword: list[str]
    only: str = ""


ENS_MAP_LN: dict[str, ENSMap] = {
    "enterprise_info": ENSMap(
        name="企业信息",
        j_field=["name", "legal_person", "status", "phone", "email", "registered_capital",
                 "incorporation_date", "address", "scope", "reg_code", "pid"],
        keyword=["企业名称", "法人代表", "经营状态", "电话", "邮箱", "注册资本", "成立日期",
                 "注册地址", "经营范围", "统一社会信用代码", "PID"],
    ),
    "icp": ENSMap(
        name="ICP备案",
        only="domain",
        j_field=["website_name", "website", "domain", "icp", "company_name"],
        keyword=["网站名称", "网址", "域名", "网站备案/许可证号", "公司名称"],
    ),
    "wx_app": ENSMap(
        name="微信小程序",
        j_field=["name", "category", "logo", "qrcode", "read_num"],
        keyword=["名称", "分类", "头像", "二维码", "阅读量"],
    ),
    "wechat": ENSMap(
        name="微信公众号",
        j_field=["name", "wechat_id", "description", "qrcode", "avatar"],
        keyword=["名称", "ID", "简介", "二维码", "头像"],
    ),
    "weibo": ENSMap(
        name="微博",
        j_field=["name", "profile_url", "description", "avatar"],
        keyword=["微博昵称", "链接", "简介", "头像"],
    ),
    "supplier": ENSMap(
        name="供应商",
        j_field=["name", "scale", "amount", "report_time", "data_source", "relation", "pid"],
        keyword=["名称", "金额占比", "金额", "报告期/公开时间", "数据来源", "关联关系", "PID"],
    ),
    "job": ENSMap(
        name="招聘",
        j_field=["name", "education", "location", "publish_time", "salary"],
        keyword=["招聘职位", "学历", "办公地点", "发布日期", "薪资"],
    ),
    "invest": ENSMap(
        name="投资",
        j_field=["name", "legal_person", "status", "scale", "pid"],
        keyword=["企业名称", "法人", "状态", "投资比例", "PID"],
    ),
    "branch": ENSMap(
        name="分支机构",
        j_field=["name", "legal_person", "status", "pid"],
        keyword=["企业名称", "法人", "状态", "PID"],
    ),
    "holds": ENSMap(
        name="控股企业",
        j_field=["name", "legal_person", "status", "scale", "level", "pid"],
        keyword=["企业名称", "法人", "状态", "投资比例", "持股层级", "PID"],
    ),
    "app": ENSMap(
        name="APP",
        j_field=["name", "category", "version", "update_at", "description", "logo",
                 "bundle_id", "link", "market"],
        keyword=["名称", "分类", "当前版本", "更新时间", "简介", "logo", "Bundle ID", "链接", "market"],
    ),
    "copyright": ENSMap(
        name="软件著作权",
        j_field=["name", "short_name", "category", "reg_num", "pub_type"],
        keyword=["软件全称", "软件简称", "分类", "登记号", "权利取得方式"],
    ),
    "partner": ENSMap(
        name="股东信息",
        j_field=["name", "scale", "reg_cap", "pid"],
        keyword=["股东名称", "持股比例", "认缴出资金额", "PID"],
    ),
}


def info_to_map(
    infos: Mapping[str, list[Any]],
    en_map: Mapping[str, EnsGo],
    extra_info: str,
) -> dict[str, list[dict[str, str]]]:
    """Turn raw source rows into rows keyed by the unified column names.

    A source field past the unified columns, when it is the last one, is
    stored under ``from``; every row also gets ``extra``.
    """
    result: dict[str, list[dict[str, str]]] = {}
    for kind, rows in infos.items():
        columns = ENS_MAP_LN[kind].j_field
        source_fields = en_map[kind].field
        last = len(source_fields) - 1
        converted = []
        for row in rows:
            values: dict[str, str] = {}
            for i, source_field in enumerate(source_fields):
                if i == last and i >= len(columns):
                    values["from"] = json_str(row, source_field)
                else:
                    values[columns[i]] = json_str(row, source_field)
            values["extra"] = extra_info
            converted.append(values)
        result[kind] = converted
    return result


def out_str_by_en_info(data: Mapping[str, list[Mapping[str, str]]], kind: str) -> str:
    """Rows of one kind as comma-separated lines, ending with from and extra."""
    keys = ENS_MAP_LN[kind].j_field + _EXTRA_KEYS
    return "".join(
        ",".join(row.get(key, "") for key in keys) + "\n" for row in data.get(kind, [])
    )


def _to_json(data: Mapping[str, Any]) -> str:
    text = json.dumps(data, ensure_ascii=False, sort_keys=True, separators=(",", ":"))
    return text.replace("<", "\\u003c").replace(">", "\\u003e").replace("&", "\\u0026")


def out_file_by_en_info(
    data: Mapping[str, list[Mapping[str, str]]],
    name: str,
    file_type: str,
    out_dir: str,
) -> Optional[str]:
    """Write results to a json or xlsx file in ``out_dir`` and return its path.

    The directory ``"!"`` means no file is written.
    """
    if out_dir == "!":
        log.debug("不导出文件", 设定DIR=out_dir)
        return None
    log.info(f"{name} 结果导出中")
    if not os.path.exists(out_dir):
        log.info(f"导出⌈{out_dir}⌋目录不存在，尝试创建")
        try:
            os.mkdir(out_dir)
        except OSError as exc:
            log.debug(str(exc), dir=out_dir)
            raise OutputError(f"【创建目录失败】\n {exc} \n") from exc
    if len(name) > _MAX_NAME:
        name = name[:_MAX_NAME]
        log.warning(f"导出文件名过长，自动截断为⌈{name}⌋")
    stamp = f"{datetime.now():%Y-%m-%d}--{int(time.time())}"
    save_path = os.path.join(out_dir, f"{name}-{stamp}.{file_type}")
    if file_type == "json":
        try:
            text = _to_json(data)
        except (TypeError, ValueError) as exc:
            raise OutputError(f"[JSON格式化数据失败]\n {exc} \n") from exc
        try:
            with open(save_path, "w", encoding="utf-8") as handle:
                handle.write(text)
        except OSError as exc:
            raise OutputError(f"[JSON导出文件失败]\n{exc}") from exc
    elif file_type == "xlsx":
        book = Workbook()
        for kind, rows in data.items():
            columns = ENS_MAP_LN[kind]
            keys = columns.j_field + _EXTRA_KEYS
            table = [[row.get(key, "") for key in keys] if row else [] for row in rows]
            export_excel(columns.name, columns.keyword + _EXTRA_HEADERS, table, book)
        book.remove_sheet("Sheet1")
        try:
            book.save(save_path)
        except OSError as exc:
            raise OutputError(f"表格导出失败：{exc}") from exc
    else:
        raise OutputError(f"不支持的导出类型 {file_type}")
    log.info(f"导出成功⌈{save_path}⌋")
    return save_path