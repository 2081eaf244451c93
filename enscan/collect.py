"""Collect company details from a source, following investments and branches."""

from __future__ import annotations

import re
from typing import Any, Optional

from enscan import log, utils
from enscan.config import DEEP_SEARCH, ENOptions
from enscan.sources.base import AppSource, EnScanSource

Rows = dict[str, list[Any]]


def _with_origin(row: Any, in_from: str) -> dict[str, Any]:
    """Copy of ``row`` tagged with where it was reached from."""
    if isinstance(row, dict):
        return dict(row, inFrom=in_from)
    return {"inFrom": in_from}


def _merge_into(target: Rows, source: Rows) -> None:
    for kind, rows in source.items():
        target.setdefault(kind, []).extend(rows)


def advance_filter(job: EnScanSource) -> str:
    """PID of the first company matching the keyword, or ``""`` when none match."""
    en_map = job.get_en_map()["enterprise_info"]
    try:
        companies = job.advance_filter()
    except LookupError as exc:
        log.error(str(exc))
        return ""
    log.info(
        f"关键词：“{job.get_ens_d().name}” 查询到 {len(companies)} 个结果，默认选择第一个"
    )
    pid_field = en_map.field[10]
    utils.show_table(
        en_map.keyword[:3] + ["PID"], en_map.field[:3] + [pid_field], "企业信息", companies
    )
    pid = utils.json_str(companies[0], pid_field)
    log.debug("搜索", PID=pid)
    return pid


def _deep_kinds(search_list: list[str], options: ENOptions) -> list[str]:
    kinds = []
    for kind in search_list:
        if kind not in DEEP_SEARCH:
            continue
        if kind == "branch" and not options.is_search_branch:
            continue
        kinds.append(kind)
    return kinds


def _name_filter(options: ENOptions) -> Optional[re.Pattern[str]]:
    return re.compile(options.branch_filter) if options.branch_filter else None


def _skipped(name_filter: Optional[re.Pattern[str]], name: str) -> bool:
    if name_filter is not None and name_filter.search(name):
        log.info(f"根据过滤器跳过 [{name}]")
        return True
    return False


def get_info_by_id(pid: str, search_list: list[str], job: EnScanSource) -> Rows:
    """Details of a company and, where asked, of the companies linked to it."""
    if pid == "":
        log.error("获取PID为空！")
        return {}
    en_map = job.get_en_map()
    options = job.get_ens_d().op or job.options
    en_info = get_company_info_by_id(pid, "", search_list, job)
    en_name = utils.json_str(en_info["enterprise_info"][0], en_map["enterprise_info"].field[0])

    deep = _deep_kinds(search_list, options)
    if deep:
        log.info(f"深度搜索列表：{deep}")
    name_filter = _name_filter(options)

    for kind in deep:
        fields = en_map[kind].field
        pid_key = fields[-2]
        name_key = fields[0]
        scale_key = fields[3]
        if not en_info.get(kind):
            log.info(f"【x】{en_map[kind].name} 数量为空，跳过搜索", type=kind)
            continue

        if kind == "invest":
            level = list(en_info[kind])
            for depth in range(options.deep):
                if not level:
                    break
                next_level: list[Any] = []
                for row in level:
                    target_pid = utils.json_str(row, pid_key)
                    target_name = utils.json_str(row, name_key)
                    if _skipped(name_filter, target_name):
                        continue
                    log.debug("查询PID", PID=target_pid, Name=target_name)
                    share = utils.format_invest(utils.json_str(row, scale_key))
                    if share < options.invest_num:
                        continue
                    association = (
                        f"{target_name} ⌈{depth + 1}⌋级投资⌈{share:.2f}%⌋-{en_name}"
                    )
                    log.info(association)
                    found = get_company_info_by_id(target_pid, association, search_list, job)
                    _merge_into(en_info, found)
                    next_level.extend(found.get(kind, []))
                level = next_level
        else:
            association = f"{en_map[kind].name} {en_name}"
            log.info(association)
            rows = list(en_info[kind])
            for number, row in enumerate(rows, 1):
                log.info(f"[{number}/{len(rows)}]")
                target_pid = utils.json_str(row, pid_key)
                target_name = utils.json_str(row, name_key)
                if _skipped(name_filter, target_name):
                    continue
                found = get_company_info_by_id(
                    target_pid, f"{target_name} {association}", search_list, job
                )
                _merge_into(en_info, found)
    return en_info


def get_company_info_by_id(
    pid: str, in_from: str, search_list: list[str], job: EnScanSource
) -> Rows:
    """Basic data and every requested kind of information of one company."""
    base, en_map = job.get_company_base_info_by_id(pid)
    name_field = job.get_en_map()["enterprise_info"].field[0]
    log.info(f"正在获取⌈{utils.json_str(base, name_field)}⌋信息")
    en_data: Rows = {"enterprise_info": [_with_origin(base, in_from)]}
    for kind in search_list:
        entry = en_map.get(kind)
        if entry is None:
            continue
        if entry.total <= 0 or entry.api == "":
            log.info(f"GET ⌈{entry.name}⌋ 为空", type=kind)
            continue
        try:
            rows = job.get_en_info_list(pid, entry)
        except (LookupError, ValueError) as exc:
            log.error(str(exc))
            rows = []
        if rows:
            en_data.setdefault(kind, []).extend(_with_origin(row, in_from) for row in rows)
        utils.show_table(entry.keyword, entry.field, entry.name, rows)
    return en_data


def get_app_by_id(rdata: dict[str, list[dict[str, str]]], search_list: list[str],
                  app: AppSource) -> Rows:
    """Ask a plug-in about each value of the collected rows it needs."""
    en_data: Rows = {}
    en_map = app.get_en_map()
    for kind in search_list:
        entry = en_map.get(kind)
        if entry is None:
            continue
        section, column = entry.app_params
        targets = [row.get(column, "") for row in rdata.get(section, [])]
        log.info(f"共获取到【{len(targets)}】条，开始执行插件获取信息")
        for number, target in enumerate(targets, 1):
            log.info(f"正在获取第【{number}】条数据 【{target}】")
            rows = app.get_info_list(target, kind)
            en_data.setdefault(kind, []).extend(rows)
            utils.show_table(entry.keyword, entry.field, entry.name, rows)
    return en_data