"""
Tests for _fbc / _fbp token parsing
"""

import pytest

from capi_param_builder.models import AppendixState, InvalidToken, ParsedToken
from capi_param_builder.processing.token_codec import (
    append_appendix,
    build_token,
    parse_token,
    validate_token,
)


def test_parse_current_token():
    """測試 5 段 token (8 字元 appendix)"""
    result = parse_token("fb.1.1700000000000.IwAR3xyz.AQMCAQEA")

    assert isinstance(result, ParsedToken)
    assert result.tag == "fb"
    assert result.sub_domain_index == 1
    assert result.timestamp == 1700000000000
    assert result.payload == "IwAR3xyz"
    assert result.appendix == "AQMCAQEA"
    assert result.appendix_state == AppendixState.CURRENT_APPENDIX
    assert not result.needs_rewrite


def test_parse_legacy_language_token():
    """測試 2 字元 legacy language token"""
    result = parse_token("fb.1.123.abc.Bg")

    assert isinstance(result, ParsedToken)
    assert result.appendix_state == AppendixState.LEGACY_TOKEN
    assert not result.needs_rewrite


def test_parse_four_segment_token_needs_rewrite():
    """4 段 token 有效，但需要補 appendix"""
    result = parse_token("fb.1.123.abc")

    assert isinstance(result, ParsedToken)
    assert result.appendix is None
    assert result.appendix_state == AppendixState.ABSENT
    assert result.needs_rewrite


@pytest.mark.parametrize("raw", [
    "",
    None,
    "fb.1.123",
    "invalid.format.with.too.many.parts.here",
    "fb.1.123.abc.invalid",
    "fb.1.123.abc.INVALID",
    "fb.1.123.abc.zz",
    "fb.1.123.",
    "fb.1.123..AQMCAQEA",
    "fc.1.123.abc",
    "fb.x.123.abc",
    "fb.1.12a.abc",
    "fb.-1.123.abc",
    "fb..123.abc",
])
def test_parse_invalid(raw):
    """測試無效 token"""
    result = parse_token(raw)
    assert isinstance(result, InvalidToken)
    assert result.reason


def test_validate_token():
    """validate_token 無效時回傳 None"""
    assert validate_token("fb.1.123.abc.zz", "_fbc") is None
    assert validate_token(None) is None
    assert validate_token("fb.1.123.abc").payload == "abc"


def test_build_token():
    """測試組出 token"""
    token = build_token(1, 1700000000000, "abc", "AQMCAQEA")
    assert token == "fb.1.1700000000000.abc.AQMCAQEA"
    assert isinstance(parse_token(token), ParsedToken)


def test_append_appendix_preserves_token():
    """補 appendix 不改變原本的 timestamp / payload"""
    assert append_appendix("fb.1.123.abc", "AQMAAQEA") == "fb.1.123.abc.AQMAAQEA"
