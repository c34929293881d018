"""Time utilities for token timestamps."""

from datetime import datetime, timezone


def utcnow() -> datetime:
    """取得當前 UTC 時間 (tz-aware)"""
    return datetime.now(timezone.utc)


def to_epoch_millis(dt: datetime) -> int:
    """
    轉換為 epoch milliseconds

    Args:
        dt: 輸入時間 (naive 視為 UTC)

    Returns:
        epoch ms
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(dt.timestamp() * 1000)


def now_millis() -> int:
    """當前時間 (epoch ms)，token 的 timestamp 欄位"""
    return to_epoch_millis(utcnow())
