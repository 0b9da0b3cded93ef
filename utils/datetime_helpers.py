# -*- coding: utf-8 -*-
"""Datetime helpers.

数据库中的 ``datetime`` 一律按 UTC 存储（无时区信息）。
入参统一解析成 naive UTC，出参统一格式化为带 ``Z`` 的 ISO 8601 字符串。
"""

from __future__ import annotations

import math
from datetime import date, datetime, timezone
from typing import Optional

DAY_SECONDS = 24 * 60 * 60


def utcnow() -> datetime:
    """当前 UTC 时间（naive）。"""

    return datetime.now(timezone.utc).replace(tzinfo=None)


def _ensure_utc(dt: datetime) -> datetime:
    """将给定 ``datetime`` 统一转换为带 UTC 时区的对象。"""

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_naive_utc(dt: datetime) -> datetime:
    return _ensure_utc(dt).replace(tzinfo=None)


def parse_iso_datetime(value) -> Optional[datetime]:
    """解析 ISO 8601 字符串；无法解析时返回 ``None``。

    接受 ``2024-01-01``、``2024-01-01T08:00:00``、``...Z``、``...+07:00``。
    """

    if value is None:
        return None
    if isinstance(value, datetime):
        return to_naive_utc(value)
    if not isinstance(value, str) or not value.strip():
        return None
    raw = value.strip()
    if raw.endswith("Z") or raw.endswith("z"):
        raw = raw[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        return None
    return to_naive_utc(parsed)


def parse_iso_date(value) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError:
        return None


def datetime_to_iso(dt: Optional[datetime]) -> Optional[str]:
    """将 UTC ``datetime`` 格式化为 ``YYYY-MM-DDTHH:MM:SS[.ffffff]Z``。"""

    if dt is None:
        return None
    return to_naive_utc(dt).isoformat() + "Z"


def date_to_iso(d: Optional[date]) -> Optional[str]:
    if d is None:
        return None
    return d.isoformat()


def elapsed_days(start: datetime, end: Optional[datetime] = None) -> int:
    """起止之间的天数，向上取整；``end`` 为空时以当前时间计算。"""

    end = end or utcnow()
    seconds = (to_naive_utc(end) - to_naive_utc(start)).total_seconds()
    return math.ceil(seconds / DAY_SECONDS)
