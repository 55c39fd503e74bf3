# password_policy/utils/clock.py
"""Time helpers. All timestamps handled by the engine are naive UTC."""
from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """Current time as a naive UTC datetime, matching what SQLite hands back"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Convert an aware datetime to naive UTC; naive values are assumed UTC"""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def days_ago(value: Optional[datetime], now: datetime) -> int:
    """Whole days elapsed between ``value`` and ``now`` (never negative, 0 when undated)"""
    if value is None:
        return 0
    delta = to_naive_utc(now) - to_naive_utc(value)
    return delta.days if delta.days > 0 else 0


def humanize_days_ago(value: Optional[datetime], now: datetime) -> str:
    """Render an age the way the reuse message shows it, e.g. '3 days ago'"""
    if value is None:
        return 'previously'
    days = days_ago(value, now)
    if days == 0:
        return 'today'
    if days == 1:
        return '1 day ago'
    return f'{days} days ago'
