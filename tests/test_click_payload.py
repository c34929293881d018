"""
Tests for click payload assembly
"""

from capi_param_builder.models import FbcParamConfig, default_fbc_param_configs
from capi_param_builder.processing.click_payload import (
    append_segment,
    build_fbc_payload,
    get_referer_query,
)


def multi_source_configs():
    return [
        FbcParamConfig(query="fbclid", prefix="", label="clickID"),
        FbcParamConfig(query="query", prefix="test", label="test123"),
    ]


def test_fbclid_from_query():
    """測試 fbclid"""
    assert build_fbc_payload(default_fbc_param_configs(), {"fbclid": "abc"}) == "abc"


def test_query_takes_precedence_over_referer():
    """query 優先於 referer"""
    payload = build_fbc_payload(
        default_fbc_param_configs(),
        {"fbclid": "test123"},
        "example.com?fbclid=456test",
    )
    assert payload == "test123"


def test_referer_without_scheme():
    """referer 沒有 scheme 時補上 http://"""
    assert build_fbc_payload(default_fbc_param_configs(), {}, "example.com?fbclid=test123") == "test123"


def test_referer_with_scheme():
    assert build_fbc_payload(default_fbc_param_configs(), None, "https://example.com/ad?fbclid=IwAR_ref") == "IwAR_ref"


def test_no_signal():
    """沒有任何來源時回傳空字串"""
    assert build_fbc_payload(default_fbc_param_configs(), {"other": "x"}, "example.com?fbclidtest=1") == ""
    assert build_fbc_payload(default_fbc_param_configs(), {"fbclid": ""}) == ""


def test_malformed_referer_is_ignored():
    """無法解析的 referer 不提供 signal"""
    assert get_referer_query("http://[::1") is None
    assert build_fbc_payload(default_fbc_param_configs(), {}, "http://[::1?fbclid=x") == ""


def test_multiple_sources():
    """測試多個來源 (非 fbclid 以 '_' 分隔)"""
    payload = build_fbc_payload(multi_source_configs(), {"fbclid": "test123", "query": "placeholder"})
    assert payload == "test123_test_placeholder"


def test_multiple_sources_mix_referer_and_query():
    """fbclid 來自 referer，其他來自 query"""
    payload = build_fbc_payload(
        multi_source_configs(),
        {"balabala": "test123", "query": "placeholder"},
        "example.com?fbclid=456test",
    )
    assert payload == "456test_test_placeholder"


def test_duplicate_prefix_is_skipped():
    """_prefix_ 已存在時不重複加入"""
    assert append_segment("abc_test_placeholder", "query", "test", "other") == "abc_test_placeholder"
    assert append_segment("", "query", "test", "value") == "test_value"
    assert append_segment("abc", "fbclid", "", "def") == "abcdef"
