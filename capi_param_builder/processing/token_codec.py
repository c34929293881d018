"""
_fbc / _fbp token codec

Token 格式: fb.<sub_domain_index>.<timestamp_ms>.<payload>[.<appendix>]

驗證失敗回傳 InvalidToken (不拋出例外)，呼叫端視同 cookie 不存在。
"""

import logging
from typing import Optional

from capi_param_builder.constants import (
    DIGITS_REGEX,
    MAX_PAYLOAD_WITH_LANGUAGE_TOKEN_SPLIT_LENGTH,
    MIN_PAYLOAD_SPLIT_LENGTH,
    TOKEN_TAG,
)
from capi_param_builder.models import (
    AppendixState,
    InvalidToken,
    ParsedToken,
    TokenParseResult,
)
from capi_param_builder.processing.appendix import classify_trailing_segment

logger = logging.getLogger(__name__)


def _is_digit(value: str) -> bool:
    return DIGITS_REGEX.fullmatch(value) is not None


def parse_token(raw: Optional[str]) -> TokenParseResult:
    """
    解析並驗證 token

    1. 段數必須為 4 或 5
    2. 5 段時第 5 段必須是 legacy token 或 8 字元 appendix
    3. fb tag、兩個十進位數字欄位、非空 payload

    Args:
        raw: cookie 值

    Returns:
        ParsedToken 或 InvalidToken
    """
    if not raw:
        return InvalidToken(raw=raw, reason="empty")

    segments = raw.split(".")
    if not MIN_PAYLOAD_SPLIT_LENGTH <= len(segments) <= MAX_PAYLOAD_WITH_LANGUAGE_TOKEN_SPLIT_LENGTH:
        return InvalidToken(raw=raw, reason=f"segment count {len(segments)}")

    appendix = None
    appendix_state = AppendixState.ABSENT
    if len(segments) == MAX_PAYLOAD_WITH_LANGUAGE_TOKEN_SPLIT_LENGTH:
        appendix = segments[-1]
        appendix_state = classify_trailing_segment(appendix)
        if appendix_state == AppendixState.INVALID:
            return InvalidToken(raw=raw, reason=f"invalid appendix {appendix!r}")

    tag, sub_domain_index, timestamp, payload = segments[:4]
    if tag != TOKEN_TAG:
        return InvalidToken(raw=raw, reason=f"invalid tag {tag!r}")
    if not _is_digit(sub_domain_index):
        return InvalidToken(raw=raw, reason="non-numeric sub_domain_index")
    if not _is_digit(timestamp):
        return InvalidToken(raw=raw, reason="non-numeric timestamp")
    if not payload:
        return InvalidToken(raw=raw, reason="empty payload")

    return ParsedToken(
        raw=raw,
        tag=tag,
        sub_domain_index=int(sub_domain_index),
        timestamp=int(timestamp),
        payload=payload,
        appendix=appendix,
        appendix_state=appendix_state,
    )


def validate_token(raw: Optional[str], cookie_name: str = "") -> Optional[ParsedToken]:
    """parse_token 的簡化版: 無效時記錄原因並回傳 None"""
    result = parse_token(raw)
    if isinstance(result, InvalidToken):
        if raw:
            logger.debug(f"Dropping malformed {cookie_name or 'token'}: {result.reason}")
        return None
    return result


def build_token(sub_domain_index: int, timestamp: int, payload: str, appendix: str) -> str:
    """組出新的 token"""
    return f"{TOKEN_TAG}.{sub_domain_index}.{timestamp}.{payload}.{appendix}"


def append_appendix(token: str, appendix: str) -> str:
    """舊版 4 段 token 補上 appendix (其餘部分不變)"""
    return f"{token}.{appendix}"
