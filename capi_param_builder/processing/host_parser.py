"""
Host header parsing

從 Host header (可能含 scheme / port / IPv6 brackets) 取出 hostname，
以及 IP 判斷。只做 best-effort 修剪，不拋出例外。
"""

from typing import Optional

from capi_param_builder.constants import IPV4_REGEX, IPV6_SEG_REGEX


def extract_host(value: Optional[str]) -> Optional[str]:
    """
    取出 hostname

    例如:
    - https://a.example.com:8080 -> a.example.com
    - [::1]:8080 -> ::1
    - google.com -> google.com

    Args:
        value: Host header 或 URL

    Returns:
        hostname，空輸入回傳 None
    """
    if not value:
        return None

    if "://" in value:
        value = value.split("://")[1]

    pos_colon = value.rfind(":")
    pos_bracket = value.rfind("]")
    if pos_colon == -1:
        return value

    # 沒有 ']' (非 IPv6) 或 ':' 在 ']' 之後 -> port
    if pos_bracket == -1 or pos_colon > pos_bracket:
        value = value[:pos_colon]

    # IPv6 去除 brackets
    if len(value) >= 2 and value[0] == "[" and value[-1] == "]":
        return value[1:-1]
    return value


def maybe_bracket_ipv6(value: str) -> str:
    """IPv6 加上 brackets (作為 cookie domain)"""
    if ":" in value:
        return f"[{value}]"
    return value


def is_ip_address(value: Optional[str]) -> bool:
    """IPv4 dotted quad 或 IPv6"""
    if not value:
        return False
    return IPV4_REGEX.fullmatch(value) is not None or is_ipv6_address(value)


def is_ipv6_address(value: str) -> bool:
    """
    IPv6 結構檢查

    最多 8 組；index 0 之後最多一個空組 (:: 省略)；其餘每組 1-4 hex digits。
    """
    parts = value.split(":")
    if len(parts) > 8:
        return False

    empty_parts = 0
    for i, part in enumerate(parts):
        if not part:
            if i > 0:
                empty_parts += 1
                if empty_parts > 1:
                    return False
        elif IPV6_SEG_REGEX.fullmatch(part) is None:
            return False
    return True
