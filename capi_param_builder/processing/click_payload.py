"""
Click payload assembly

依 FbcParamConfig 順序，從 query string (其次為 referer 的 query string)
組出 _fbc 的 payload。
"""

import logging
from typing import Dict, List, Optional
from urllib.parse import urlparse, parse_qs

from capi_param_builder.constants import FBCLID_STRING
from capi_param_builder.models import FbcParamConfig

logger = logging.getLogger(__name__)


def get_referer_query(referer: Optional[str]) -> Optional[Dict[str, List[str]]]:
    """
    解析 referer 的 query string

    沒有 scheme 時補上 http://；解析失敗回傳 None。
    """
    if not referer:
        return None

    if "://" not in referer:
        referer = "http://" + referer

    try:
        parsed = urlparse(referer)
        return parse_qs(parsed.query, keep_blank_values=True)
    except ValueError as e:
        logger.debug(f"Ignoring malformed referer {referer!r}: {e}")
        return None


def append_segment(existing_payload: str, query: str, prefix: str, value: str) -> str:
    """
    加上一段 payload

    fbclid 不使用分隔符號；其他來源以 '_' 分隔，若 _prefix_ 已存在則略過。
    """
    is_click_id = query == FBCLID_STRING
    separator = "" if is_click_id else "_"

    # 避免重複
    if not is_click_id and f"{separator}{prefix}{separator}" in existing_payload:
        return existing_payload

    new_segment = f"{prefix}{separator}{value}"
    if existing_payload:
        return f"{existing_payload}{separator}{new_segment}"
    return new_segment


def build_fbc_payload(
    fbc_param_configs: List[FbcParamConfig],
    query_params: Optional[Dict[str, str]],
    referer: Optional[str] = None,
) -> str:
    """
    組出候選 _fbc payload

    Args:
        fbc_param_configs: 來源設定 (依序)
        query_params: request query parameters
        referer: Referer header

    Returns:
        payload，空字串表示本次 request 沒有 click signal
    """
    query_params = query_params or {}
    referer_query = get_referer_query(referer)

    payload = ""
    for param_config in fbc_param_configs:
        value = query_params.get(param_config.query)
        if not value and referer_query:
            value = (referer_query.get(param_config.query) or [None])[0]
        if value:
            payload = append_segment(payload, param_config.query, param_config.prefix, value)

    return payload
