"""
Appendix codec

6 bytes [format, language, change_type, major, minor, patch]
-> base64url (無 padding, 8 字元)。

版本字串無法解析時回傳固定的 LANGUAGE_TOKEN。
"""

import base64
import binascii
import logging
import re
from typing import Optional

from capi_param_builder.constants import (
    APPENDIX_GENERAL_NEW,
    APPENDIX_LENGTH_V1,
    APPENDIX_LENGTH_V2,
    APPENDIX_MODIFIED_NEW,
    APPENDIX_NET_NEW,
    APPENDIX_NO_CHANGE,
    DEFAULT_FORMAT,
    LANGUAGE_TOKEN,
    LANGUAGE_TOKEN_INDEX,
    SUPPORTED_LANGUAGES_TOKEN,
)
from capi_param_builder.models import AppendixInfo, AppendixState
from capi_param_builder.version import __version__

logger = logging.getLogger(__name__)

_VERSION_REGEX = re.compile(r"[0-9]+(\.[0-9]+){2}")
_VALID_CHANGE_TYPES = (APPENDIX_NET_NEW, APPENDIX_GENERAL_NEW, APPENDIX_MODIFIED_NEW)


def _b64url_encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def get_appendix(
    appendix_type,
    version: Optional[str] = None,
    language_index: int = LANGUAGE_TOKEN_INDEX,
) -> str:
    """
    產生 appendix

    Args:
        appendix_type: APPENDIX_* change type (其他值視為 NO_CHANGE)
        version: release 版本 (預設為本套件版本)
        language_index: language byte

    Returns:
        8 字元 appendix，或版本無效時的 LANGUAGE_TOKEN
    """
    if version is None:
        version = __version__

    if not isinstance(version, str) or _VERSION_REGEX.fullmatch(version) is None:
        logger.warning(f"Invalid release version {version!r}, using language token")
        return LANGUAGE_TOKEN

    major, minor, patch = (int(part) for part in version.split("."))

    # regex 不檢查 byte range
    if major > 255 or minor > 255 or patch > 255:
        logger.warning(f"Release version {version} out of byte range, using language token")
        return LANGUAGE_TOKEN

    # bool 也是 int，需排除
    if isinstance(appendix_type, bool) or appendix_type not in _VALID_CHANGE_TYPES:
        appendix_type = APPENDIX_NO_CHANGE

    data = bytes([DEFAULT_FORMAT, language_index, appendix_type, major, minor, patch])
    return _b64url_encode(data)


def decode_appendix(value: str) -> Optional[AppendixInfo]:
    """
    解析 8 字元 appendix

    Returns:
        AppendixInfo，無法解出 6 bytes 時回傳 None
    """
    if not value or len(value) != APPENDIX_LENGTH_V2:
        return None

    try:
        data = base64.urlsafe_b64decode(value.encode("ascii"))
    except (binascii.Error, UnicodeEncodeError, ValueError):
        return None

    if len(data) != 6:
        return None

    return AppendixInfo(
        format_version=data[0],
        language_index=data[1],
        change_type=data[2],
        major=data[3],
        minor=data[4],
        patch=data[5],
    )


def classify_trailing_segment(segment: str) -> AppendixState:
    """
    分類 token 的第 5 段

    - 2 字元: 必須是支援的 language token (V1)
    - 8 字元: V2 appendix，不檢查內容
    - 其他: invalid
    """
    if len(segment) == APPENDIX_LENGTH_V1:
        if segment in SUPPORTED_LANGUAGES_TOKEN:
            return AppendixState.LEGACY_TOKEN
        return AppendixState.INVALID

    if len(segment) == APPENDIX_LENGTH_V2:
        return AppendixState.CURRENT_APPENDIX

    return AppendixState.INVALID
