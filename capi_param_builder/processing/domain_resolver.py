"""
eTLD+1 resolution for cookie scoping

三種策略 (擇一，建構時決定):
1. ResolverStrategy: 外部注入的 resolver (失敗時退回 heuristic)
2. DomainListStrategy: 候選 domain 清單 (第一個符合者)
3. HeuristicStrategy: 超過兩個 label 時去掉最左邊的 label

IP host 不經過任何策略。
"""

import logging
from typing import Any, List, Optional, Union, Literal

import tldextract
from pydantic import BaseModel, ConfigDict, Field, field_validator

from capi_param_builder.models import DomainResolution
from capi_param_builder.processing.host_parser import (
    extract_host,
    is_ip_address,
    maybe_bracket_ipv6,
)

logger = logging.getLogger(__name__)


class DomainListStrategy(BaseModel):
    """候選 eTLD+1 清單 (依序比對)"""
    kind: Literal["list"] = "list"
    domains: List[str] = Field(default_factory=list)

    @field_validator("domains", mode="before")
    @classmethod
    def _normalize_domains(cls, value):
        # 允許 "https://example.com:8080" 這類輸入
        normalized = []
        for domain in value or []:
            host = extract_host(domain)
            if host:
                normalized.append(host)
        return normalized


class ResolverStrategy(BaseModel):
    """外部 resolver，需提供 resolve_etld_plus1(hostname)、resolve(hostname) 或本身可呼叫"""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    kind: Literal["resolver"] = "resolver"
    resolver: Any


class HeuristicStrategy(BaseModel):
    """無設定時的 fallback"""
    kind: Literal["heuristic"] = "heuristic"


DomainStrategy = Union[DomainListStrategy, ResolverStrategy, HeuristicStrategy]


class PublicSuffixResolver:
    """
    以 tldextract 解析 eTLD+1

    使用內建 public suffix snapshot (不需要網路)，確保結果穩定。
    """

    def __init__(self, cache_dir: Optional[str] = None, include_psl_private_domains: bool = False):
        """
        Args:
            cache_dir: tldextract cache 目錄 (None 表示不寫 cache)
            include_psl_private_domains: 是否使用 PSL private section
        """
        self._extractor = tldextract.TLDExtract(
            cache_dir=cache_dir,
            suffix_list_urls=(),
            include_psl_private_domains=include_psl_private_domains,
        )

    def resolve_etld_plus1(self, hostname: str) -> str:
        extracted = self._extractor(hostname)

        # 沒有 public suffix (例如 localhost) 時保留原值
        if not extracted.suffix or not extracted.domain:
            return hostname

        return f"{extracted.domain}.{extracted.suffix}".lower()


def _is_resolver(value: Any) -> bool:
    return (
        hasattr(value, "resolve_etld_plus1")
        or hasattr(value, "resolve")
        or callable(value)
    )


def build_strategy(input_params: Any = None) -> DomainStrategy:
    """
    依建構參數決定策略

    Args:
        input_params: domain 清單 (或單一 domain 字串)、resolver 物件、既有的 strategy 或 None

    Returns:
        DomainStrategy

    Raises:
        TypeError: 無法辨識的建構參數
    """
    if input_params is None:
        return HeuristicStrategy()
    if isinstance(input_params, (DomainListStrategy, ResolverStrategy, HeuristicStrategy)):
        return input_params
    if isinstance(input_params, str):
        return DomainListStrategy(domains=[input_params])
    if isinstance(input_params, (list, tuple)):
        return DomainListStrategy(domains=list(input_params))
    if isinstance(input_params, (set, frozenset)):
        # set 沒有順序，排序確保比對結果穩定
        return DomainListStrategy(domains=sorted(input_params))
    if _is_resolver(input_params):
        return ResolverStrategy(resolver=input_params)
    raise TypeError(
        f"Unsupported ParamBuilder input {type(input_params).__name__}: "
        "expected a domain list or an eTLD+1 resolver"
    )


def _call_resolver(resolver: Any, hostname: str) -> Optional[str]:
    """呼叫外部 resolver，任何例外都轉為 None"""
    try:
        if hasattr(resolver, "resolve_etld_plus1"):
            return resolver.resolve_etld_plus1(hostname)
        if hasattr(resolver, "resolve"):
            return resolver.resolve(hostname)
        if callable(resolver):
            return resolver(hostname)
        logger.warning(f"Resolver {type(resolver).__name__} has no resolve_etld_plus1, using fallback")
    except Exception as e:
        logger.warning(f"Error resolving eTLD+1 for {hostname}: {e}")
    return None


def heuristic_etld_plus1(hostname: Optional[str]) -> Optional[str]:
    """超過兩個 label 時去掉最左邊的 label"""
    if hostname and len(hostname.split(".")) > 2:
        return hostname[hostname.index(".") + 1:]
    return hostname


def get_etld_plus1(hostname: Optional[str], strategy: DomainStrategy) -> Optional[str]:
    """
    以指定策略取得 hostname 的 eTLD+1

    Args:
        hostname: 已去除 port 的 hostname (非 IP)
        strategy: DomainStrategy

    Returns:
        eTLD+1
    """
    if hostname:
        if isinstance(strategy, ResolverStrategy):
            resolved = _call_resolver(strategy.resolver, hostname)
            if resolved:
                return resolved
        elif isinstance(strategy, DomainListStrategy):
            for domain in strategy.domains:
                if hostname == domain or hostname.endswith("." + domain):
                    return domain

    return heuristic_etld_plus1(hostname)


def compute_domain(host: Optional[str], strategy: DomainStrategy) -> DomainResolution:
    """
    計算 host 的 cookie domain 與 sub_domain_index

    Args:
        host: 原始 Host header
        strategy: DomainStrategy

    Returns:
        DomainResolution
    """
    hostname = extract_host(host)

    if is_ip_address(hostname):
        return DomainResolution(
            host=host,
            etld_plus_1=maybe_bracket_ipv6(hostname),
            sub_domain_index=0,
        )

    etld_plus_1 = get_etld_plus1(hostname, strategy)
    sub_domain_index = len(etld_plus_1.split(".")) - 1 if etld_plus_1 else 0

    logger.debug(f"Resolved {host} -> {etld_plus_1} (sub_domain_index={sub_domain_index})")
    return DomainResolution(
        host=host,
        etld_plus_1=etld_plus_1,
        sub_domain_index=sub_domain_index,
    )


def resolve_domain(
    host: Optional[str],
    strategy: DomainStrategy,
    cache: Optional[DomainResolution] = None,
) -> DomainResolution:
    """
    帶 cache 的 compute_domain

    cache 為 None 或 host 改變時才重新計算。
    """
    if cache is not None and cache.host == host:
        return cache
    return compute_domain(host, strategy)
