"""
ParamBuilder: _fbc / _fbp 的產生與驗證

流程:
1. 解析 host 的 eTLD+1 (同一 host 使用 cache)
2. 驗證既有的 _fbp / _fbc cookie (無效視同不存在，舊版 4 段補上 appendix)
3. 從 query / referer 組出候選 click payload
4. _fbp 不存在時產生新的
5. 依候選 payload 決定 _fbc 是否新增或覆寫
6. 回傳需要寫入的 cookies (同名只保留最後一筆)
"""

import logging
import random
from typing import Any, Dict, List, Optional, Tuple

from capi_param_builder.constants import (
    APPENDIX_MODIFIED_NEW,
    APPENDIX_NET_NEW,
    APPENDIX_NO_CHANGE,
    DEFAULT_1PC_AGE,
    FBC_NAME_STRING,
    FBP_NAME_STRING,
    FBP_RANDOM_UPPER_BOUND,
)
from capi_param_builder.models import (
    CookieSettings,
    DomainResolution,
    FbcParamConfig,
    ParsedToken,
    ProcessResult,
    RequestContext,
    default_fbc_param_configs,
)
from capi_param_builder.processing.appendix import get_appendix
from capi_param_builder.processing.click_payload import build_fbc_payload
from capi_param_builder.processing.domain_resolver import (
    DomainStrategy,
    build_strategy,
    resolve_domain,
)
from capi_param_builder.processing.token_codec import (
    append_appendix,
    build_token,
    validate_token,
)
from capi_param_builder.utils.time import now_millis

logger = logging.getLogger(__name__)


class _CookieWriter:
    """收集 cookie 寫入指令 (同名覆蓋，保留第一次出現的順序)"""

    def __init__(self, domain: Optional[str]):
        self.domain = domain
        self._cookies: Dict[str, CookieSettings] = {}

    def set(self, name: str, value: str) -> None:
        logger.debug(f"Scheduling {name}={value} (domain={self.domain})")
        self._cookies[name] = CookieSettings(
            name=name,
            value=value,
            max_age=DEFAULT_1PC_AGE,
            domain=self.domain,
        )

    def to_list(self) -> List[CookieSettings]:
        return list(self._cookies.values())


def _preprocess_cookie(
    token: Optional[ParsedToken],
    cookie_name: str,
    writer: _CookieWriter,
    appendix_no_change: str,
) -> Optional[str]:
    """既有 token: 舊版 4 段補上 appendix 並排程寫入，其他原樣回傳"""
    if token is None:
        return None
    if token.needs_rewrite:
        updated = append_appendix(token.raw, appendix_no_change)
        writer.set(cookie_name, updated)
        return updated
    return token.raw


def process(
    request: RequestContext,
    strategy: DomainStrategy,
    fbc_param_configs: Optional[List[FbcParamConfig]] = None,
    cache: Optional[DomainResolution] = None,
    now_ms: Optional[int] = None,
    rng: Optional[random.Random] = None,
) -> Tuple[ProcessResult, DomainResolution]:
    """
    處理單一 request (不修改任何共享狀態)

    Args:
        request: 正規化後的 request
        strategy: eTLD+1 策略
        fbc_param_configs: click ID 來源 (None 使用預設 fbclid)
        cache: 上一次的 DomainResolution
        now_ms: 當前時間 (epoch ms，None 使用系統時間)
        rng: random 來源 (None 使用 random module)

    Returns:
        (ProcessResult, 新的 DomainResolution cache)
    """
    if fbc_param_configs is None:
        fbc_param_configs = default_fbc_param_configs()
    rng = rng or random

    domain = resolve_domain(request.host, strategy, cache)
    writer = _CookieWriter(domain.etld_plus_1)

    appendix_net_new = get_appendix(APPENDIX_NET_NEW)
    appendix_modified_new = get_appendix(APPENDIX_MODIFIED_NEW)
    appendix_no_change = get_appendix(APPENDIX_NO_CHANGE)

    # Step 2: 既有 cookies
    cookies = request.cookies or {}
    fbc_token = validate_token(cookies.get(FBC_NAME_STRING), FBC_NAME_STRING)
    fbp_token = validate_token(cookies.get(FBP_NAME_STRING), FBP_NAME_STRING)
    fbc = _preprocess_cookie(fbc_token, FBC_NAME_STRING, writer, appendix_no_change)
    fbp = _preprocess_cookie(fbp_token, FBP_NAME_STRING, writer, appendix_no_change)

    # Step 3: 候選 payload
    new_fbc_payload = build_fbc_payload(fbc_param_configs, request.query_params, request.referer)

    drop_ts = now_ms if now_ms is not None else now_millis()

    # Step 4: _fbp
    if not fbp:
        new_fbp_payload = rng.randint(0, FBP_RANDOM_UPPER_BOUND - 1)
        fbp = build_token(domain.sub_domain_index, drop_ts, str(new_fbp_payload), appendix_net_new)
        writer.set(FBP_NAME_STRING, fbp)

    # Step 5: _fbc
    if new_fbc_payload:
        if fbc_token is None:
            fbc = build_token(domain.sub_domain_index, drop_ts, new_fbc_payload, appendix_net_new)
            writer.set(FBC_NAME_STRING, fbc)
        elif new_fbc_payload != fbc_token.payload:
            logger.debug(f"Click payload changed: {fbc_token.payload} -> {new_fbc_payload}")
            fbc = build_token(domain.sub_domain_index, drop_ts, new_fbc_payload, appendix_modified_new)
            writer.set(FBC_NAME_STRING, fbc)

    result = ProcessResult(
        cookies_to_set=writer.to_list(),
        fbc=fbc,
        fbp=fbp,
        domain=domain,
    )
    return result, domain


class ParamBuilder:
    """
    有狀態的 ParamBuilder

    保留 eTLD+1 cache 與最近一次的 _fbc / _fbp。
    同一 instance 不可同時處理多個 request。
    """

    def __init__(
        self,
        input_params: Any = None,
        fbc_param_configs: Optional[List[FbcParamConfig]] = None,
    ):
        """
        初始化 ParamBuilder

        Args:
            input_params: domain 清單、eTLD+1 resolver 或 None (heuristic)
            fbc_param_configs: click ID 來源 (None 使用預設 fbclid)
        """
        self.strategy = build_strategy(input_params)
        self.fbc_param_configs = (
            list(fbc_param_configs) if fbc_param_configs else default_fbc_param_configs()
        )

        # captured values
        self.fbc: Optional[str] = None
        self.fbp: Optional[str] = None
        self.cookies_to_set: List[CookieSettings] = []

        # eTLD+1 cache
        self._domain_cache: Optional[DomainResolution] = None

    @classmethod
    def from_config(cls, cfg) -> "ParamBuilder":
        """從 ParamBuilderConfig 建立"""
        return cls(cfg.build_strategy(), cfg.fbc_param_configs)

    @property
    def etld_plus_1(self) -> Optional[str]:
        return self._domain_cache.etld_plus_1 if self._domain_cache else None

    @property
    def sub_domain_index(self) -> int:
        return self._domain_cache.sub_domain_index if self._domain_cache else 0

    def process_request(
        self,
        host: Optional[str],
        queries: Optional[Dict[str, str]] = None,
        cookies: Optional[Dict[str, str]] = None,
        referer: Optional[str] = None,
    ) -> List[CookieSettings]:
        """
        處理 request

        Args:
            host: Host header
            queries: query parameters
            cookies: request cookies
            referer: Referer header

        Returns:
            需要寫入的 CookieSettings
        """
        context = RequestContext(
            host=host or "",
            query_params=queries or {},
            cookies=cookies or {},
            referer=referer,
        )
        return self.process_request_from_context(context)

    def process_request_from_context(self, context: RequestContext) -> List[CookieSettings]:
        """處理已正規化的 RequestContext"""
        self.fbc = None
        self.fbp = None
        self.cookies_to_set = []

        result, self._domain_cache = process(
            context,
            self.strategy,
            self.fbc_param_configs,
            cache=self._domain_cache,
        )

        self.fbc = result.fbc
        self.fbp = result.fbp
        self.cookies_to_set = result.cookies_to_set
        return self.cookies_to_set

    def get_cookies_to_set(self) -> List[CookieSettings]:
        return self.cookies_to_set

    def get_fbc(self) -> Optional[str]:
        return self.fbc

    def get_fbp(self) -> Optional[str]:
        return self.fbp
