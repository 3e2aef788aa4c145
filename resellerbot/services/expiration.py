from __future__ import annotations

from datetime import date, datetime

import pytz

STATUS_EXPIRED = "expired"
STATUS_EXPIRING = "expiring"
STATUS_ACTIVE = "active"
STATUS_UNKNOWN = "unknown"

_INPUT_FORMATS = ("%Y-%m-%d", "%d/%m/%Y")


def parse_expiration(text: str) -> date:
    """Parse a due date typed by a seller; stored form is ISO ``YYYY-MM-DD``."""
    value = (text or "").strip()
    for fmt in _INPUT_FORMATS:
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    raise ValueError(f"Invalid date: {value!r}. Use YYYY-MM-DD or DD/MM/YYYY")


def today_in(timezone: str) -> date:
    return datetime.now(pytz.timezone(timezone)).date()


def days_until(expires_at: str | date, today: date) -> int:
    if isinstance(expires_at, str):
        expires_at = date.fromisoformat(expires_at)
    return (expires_at - today).days


def expiration_status(expires_at: str | date | None, today: date, soon_days: int) -> str:
    if not expires_at:
        return STATUS_UNKNOWN
    remaining = days_until(expires_at, today)
    if remaining < 0:
        return STATUS_EXPIRED
    if remaining <= soon_days:
        return STATUS_EXPIRING
    return STATUS_ACTIVE
