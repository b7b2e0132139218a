"""时间处理工具"""

from datetime import date, datetime, time, timedelta
from typing import Any, Optional, Tuple


def now() -> datetime:
    """获取当前时间"""
    return datetime.now()


def parse_visit_date(value: Any) -> Optional[datetime]:
    """解析 visitDate：datetime / date / ISO 字符串，失败返回 None"""
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    # 统一为本地 naive 时间
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def day_range(start: date, end: date) -> Tuple[datetime, datetime]:
    """[start 00:00:00, end 23:59:59.999999]"""
    return (
        datetime.combine(start, time.min),
        datetime.combine(end, time.max),
    )


def current_week_range(today: Optional[date] = None) -> Tuple[datetime, datetime]:
    """本周一至周日"""
    today = today or date.today()
    monday = today - timedelta(days=today.weekday())
    return day_range(monday, monday + timedelta(days=6))
