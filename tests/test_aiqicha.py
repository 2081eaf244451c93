import json
import re
from unittest.mock import patch
from urllib.parse import parse_qs, urlsplit

import pytest
import responses

from enscan.config import Cookies, ENConfig, ENOptions
from enscan.sources import aiqicha
from enscan.sources.aiqicha import AiQiCha

URL_RE = re.compile(r"https://aiqicha\.baidu\.com/.*")


@pytest.fixture
def mocked():
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        yield rsps


def _options(**kwargs):
    conf = ENConfig(version=0.5, cookies=Cookies(aiqicha="placeholder"))
    return ENOptions(en_config=conf, **kwargs)


def _query(request):
    return parse_qs(urlsplit(request.url).query)


def _path(request):
    return urlsplit(request.url).path


def _page(payload):
    return f"<script>window.pageData = {payload}; window.isSpider = null;</script>"


def test_en_map_fields_and_keywords_line_up():
    en_map = aiqicha.get_en_map()
    for item in en_map.values():
        assert item.field[-1] == "inFrom"
        assert len(item.field) == len(item.keyword)
    assert en_map["enterprise_info"].field[10] == "pid"


def test_en_map_is_fresh_each_call():
    first = aiqicha.get_en_map()
    first["icp"].field.append("extra")
    second = aiqicha.get_en_map()
    assert second["icp"].field[-1] == "inFrom"


def test_page_parse_json_reads_result():
    content = _page('{"result": {"resultList": [{"pid": "1"}]}}')
    assert aiqicha.page_parse_json(content) == {"resultList": [{"pid": "1"}]}


def test_page_parse_json_strips_spaces_and_newlines():
    content = _page('{"result":\n {"name": "A B"}}')
    assert aiqicha.page_parse_json(content) == {"name": "AB"}


def test_page_parse_json_without_page_data_raises():
    with pytest.raises(ValueError):
        aiqicha.page_parse_json("<html>nothing here</html>")


def test_transform_number_table_one_is_an_involution():
    digits = "0123456789"
    once = aiqicha.transform_number(digits, 1)
    assert once != digits
    assert aiqicha.transform_number(once, 1) == digits


def test_transform_number_table_two_is_a_permutation():
    digits = "0123456789"
    result = aiqicha.transform_number(digits, 2)
    assert sorted(result) == sorted(digits)
    assert result[:4] == digits[:4]


def test_transform_number_unknown_table_raises():
    with pytest.raises(ValueError):
        aiqicha.transform_number("123", 5)


def test_get_req_returns_body_and_sends_cookie(mocked):
    url = "https://aiqicha.baidu.com/detail/test"
    mocked.add(responses.GET, url, body="hello")
    assert aiqicha.get_req(url, _options()) == "hello"
    assert mocked.calls[0].request.headers["Cookie"] == "placeholder"


def test_get_req_forbidden_gives_empty(mocked):
    url = "https://aiqicha.baidu.com/detail/test"
    mocked.add(responses.GET, url, body="no", status=403)
    assert aiqicha.get_req(url, _options()) == ""


@patch("enscan.sources.aiqicha.time.sleep")
def test_get_req_retries_security_check(sleep, mocked):
    url = "https://aiqicha.baidu.com/detail/test"
    mocked.add(responses.GET, url, body="请完成百度安全验证")
    mocked.add(responses.GET, url, body="ok")
    assert aiqicha.get_req(url, _options()) == "ok"
    assert len(mocked.calls) == 2
    sleep.assert_any_call(10)


def test_get_info_list_single_page(mocked):
    rows = [{"entName": "A"}, {"entName": "B"}]
    body = json.dumps({"status": 0, "data": {"pageCount": 1, "list": rows}})
    mocked.add_callback(responses.GET, URL_RE, callback=lambda r: (200, {}, body))
    assert aiqicha.get_info_list("P1", "detail/investajax", _options()) == rows
    assert _query(mocked.calls[0].request)["pid"] == ["P1"]


def test_get_info_list_multiple_pages(mocked):
    def handler(request):
        query = _query(request)
        if "p" not in query:
            return 200, {}, json.dumps({"status": 0, "data": {"pageCount": 2, "list": []}})
        page = query["p"][0]
        return 200, {}, json.dumps({"status": 0, "data": {"list": [{"entName": "e" + page}]}})

    mocked.add_callback(responses.GET, URL_RE, callback=handler)
    rows = aiqicha.get_info_list("P1", "detail/investajax", _options())
    assert [row["entName"] for row in rows] == ["e1", "e2"]
    assert len(mocked.calls) == 3


def test_get_info_list_bad_status_gives_nothing(mocked):
    body = json.dumps({"status": 1, "data": {"list": [{"entName": "A"}]}})
    mocked.add_callback(responses.GET, URL_RE, callback=lambda r: (200, {}, body))
    assert aiqicha.get_info_list("P1", "detail/investajax", _options()) == []


def test_get_info_list_relational_map_uses_invest_records(mocked):
    rows = [{"entName": "R"}]
    body = json.dumps({"status": 0, "data": {"list": [{"entName": "X"}],
                                             "investRecordData": {"list": rows}}})
    mocked.add_callback(responses.GET, URL_RE, callback=lambda r: (200, {}, body))
    assert aiqicha.get_info_list("P1", "relations/relationalMapAjax", _options()) == rows


def test_get_info_list_icp_one_row_per_domain(mocked):
    site = {"siteName": "site", "domain": ["a.example.com", "b.example.com"],
            "homeSite": ["www.example.com"]}
    bare = {"siteName": "bare", "domain": ["c.example.com"], "homeSite": []}
    body = json.dumps({"status": 0, "data": {"list": [site, bare]}})
    mocked.add_callback(responses.GET, URL_RE, callback=lambda r: (200, {}, body))
    rows = aiqicha.get_info_list("P1", "detail/icpinfoAjax", _options())
    assert [row["domain"] for row in rows] == ["a.example.com", "b.example.com", "c.example.com"]
    assert [row["homeSite"] for row in rows] == ["www.example.com", "www.example.com", ""]
    assert all(row["siteName"] in ("site", "bare") for row in rows)


def test_company_base_info_fills_counts(mocked):
    def handler(request):
        if _path(request) == "/detail/basicAllDataAjax":
            return 200, {}, json.dumps({"data": {"basicData": {"entName": "Example Co"}}})
        children = [
            {"id": "webRecord", "name": "网站备案", "total": 3, "avaliable": 2},
            {"id": "invest", "name": "对外投资", "total": "4", "avaliable": 4},
        ]
        return 200, {}, json.dumps({"status": 0, "data": [{"children": children}]})

    mocked.add_callback(responses.GET, URL_RE, callback=handler)
    result, en_map = AiQiCha(_options()).get_company_base_info_by_id("PID9")
    assert result == {"entName": "Example Co", "pid": "PID9"}
    assert en_map["icp"].total == 3
    assert en_map["icp"].available == 2
    assert en_map["webRecord"] is en_map["icp"]
    assert en_map["invest"].total == 4
    assert en_map["branch"].total == 0


def test_company_base_info_navigation_failure_keeps_zero_counts(mocked):
    def handler(request):
        if _path(request) == "/detail/basicAllDataAjax":
            return 200, {}, "{}"
        return 200, {}, json.dumps({"status": 1})

    mocked.add_callback(responses.GET, URL_RE, callback=handler)
    result, en_map = AiQiCha(_options()).get_company_base_info_by_id("PID9")
    assert result == {"pid": "PID9"}
    assert all(item.total == 0 for item in en_map.values())


def test_advance_filter_parses_search_page(mocked):
    payload = '{"result":{"resultList":[{"entName":"<em>Mi<\\/em>Co","pid":"123"}]}}'
    mocked.add_callback(responses.GET, URL_RE, callback=lambda r: (200, {}, _page(payload)))
    companies = AiQiCha(_options(keyword="小米 科技")).advance_filter()
    assert companies == [{"entName": "⌈Mi⌋Co", "pid": "123"}]
    query = _query(mocked.calls[0].request)
    assert query["q"] == ["小米 科技"]
    assert query["t"] == ["0"]


def test_advance_filter_without_results_raises(mocked):
    mocked.add_callback(responses.GET, URL_RE, callback=lambda r: (200, {}, "<html></html>"))
    with pytest.raises(LookupError):
        AiQiCha(_options(keyword="nothing")).advance_filter()


def test_get_ens_d_reflects_options():
    options = _options(keyword="Example", company_id="PID1")
    ens = AiQiCha(options).get_ens_d()
    assert (ens.name, ens.pid) == ("Example", "PID1")
    assert ens.op is options


def test_get_en_info_list_uses_endpoint(mocked):
    body = json.dumps({"status": 0, "data": {"list": [{"nickname": "w"}]}})
    mocked.add_callback(responses.GET, URL_RE, callback=lambda r: (200, {}, body))
    source = AiQiCha(_options())
    rows = source.get_en_info_list("P2", source.get_en_map()["weibo"])
    assert rows == [{"nickname": "w"}]
    assert _path(mocked.calls[0].request) == "/c/microblogAjax"