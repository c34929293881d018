"""
Tests for ParamBuilderConfig
"""

import pytest
from pydantic import ValidationError

from capi_param_builder.config import ParamBuilderConfig
from capi_param_builder.param_builder import ParamBuilder
from capi_param_builder.processing.domain_resolver import (
    DomainListStrategy,
    HeuristicStrategy,
    PublicSuffixResolver,
    ResolverStrategy,
)


def test_default_config():
    """預設: heuristic + fbclid"""
    cfg = ParamBuilderConfig()

    assert isinstance(cfg.build_strategy(), HeuristicStrategy)
    assert [c.query for c in cfg.fbc_param_configs] == ["fbclid"]


def test_domain_list_strategy():
    cfg = ParamBuilderConfig(domain_list=["https://example.com", "test.com"])
    strategy = cfg.build_strategy()

    assert isinstance(strategy, DomainListStrategy)
    assert strategy.domains == ["example.com", "test.com"]


def test_public_suffix_takes_precedence():
    """use_public_suffix 優先於 domain_list"""
    cfg = ParamBuilderConfig(domain_list=["example.com"], use_public_suffix=True)
    strategy = cfg.build_strategy()

    assert isinstance(strategy, ResolverStrategy)
    assert isinstance(strategy.resolver, PublicSuffixResolver)


def test_from_yaml(tmp_path):
    """從 YAML 載入設定並建立 ParamBuilder"""
    config_file = tmp_path / "param_builder.yaml"
    config_file.write_text(
        "domain_list:\n"
        "  - example.com\n"
        "fbc_param_configs:\n"
        "  - query: fbclid\n"
        "    prefix: ''\n"
        "    label: clickID\n"
        "  - query: campaign\n"
        "    prefix: cmp\n"
        "    label: campaign\n",
        encoding="utf-8",
    )

    cfg = ParamBuilderConfig.from_yaml(str(config_file))
    builder = ParamBuilder.from_config(cfg)
    cookies = builder.process_request("a.b.example.com", {"fbclid": "abc", "campaign": "42"}, {})

    assert all(cookie.domain == "example.com" for cookie in cookies)
    assert ".abc_cmp_42." in builder.get_fbc()


def test_from_empty_yaml(tmp_path):
    config_file = tmp_path / "empty.yaml"
    config_file.write_text("", encoding="utf-8")

    cfg = ParamBuilderConfig.from_yaml(str(config_file))
    assert cfg.domain_list == []


def test_public_suffix_builder():
    """tldextract 解析 co.uk"""
    builder = ParamBuilder.from_config(ParamBuilderConfig(use_public_suffix=True))
    cookies = builder.process_request("shop.example.co.uk", {"fbclid": "abc"}, {})

    assert all(cookie.domain == "example.co.uk" for cookie in cookies)
    assert builder.get_fbc().startswith("fb.2.")


def test_invalid_config():
    """設定錯誤在載入時拋出 ValidationError"""
    with pytest.raises(ValidationError):
        ParamBuilderConfig(fbc_param_configs=[{"prefix": "missing query"}])
