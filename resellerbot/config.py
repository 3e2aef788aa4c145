from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv


@dataclass(frozen=True)
class AppConfig:
    bot_token: str
    admin_chat_id: int
    app_secret: str
    database_path: str
    timezone: str
    expiring_soon_days: int
    log_level: str


def _to_int(name: str, value: str, *, minimum: int | None = None) -> int:
    try:
        parsed = int(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer") from exc
    if minimum is not None and parsed < minimum:
        raise ValueError(f"{name} must be >= {minimum}")
    return parsed


def load_config() -> AppConfig:
    load_dotenv()

    bot_token = os.getenv("BOT_TOKEN", "").strip()
    admin_chat_id_raw = os.getenv("ADMIN_CHAT_ID", "").strip()
    app_secret = os.getenv("APP_SECRET", "").strip()
    database_path = os.getenv("DATABASE_PATH", "/var/lib/resellerbot/resellerbot.db").strip()

    if not bot_token:
        raise ValueError("BOT_TOKEN is required")
    if not admin_chat_id_raw:
        raise ValueError("ADMIN_CHAT_ID is required")
    if not app_secret:
        raise ValueError("APP_SECRET is required")

    return AppConfig(
        bot_token=bot_token,
        admin_chat_id=_to_int("ADMIN_CHAT_ID", admin_chat_id_raw),
        app_secret=app_secret,
        database_path=database_path,
        timezone=os.getenv("TIMEZONE", "UTC").strip() or "UTC",
        expiring_soon_days=_to_int("EXPIRING_SOON_DAYS", os.getenv("EXPIRING_SOON_DAYS", "3").strip(), minimum=0),
        log_level=(os.getenv("LOG_LEVEL", "INFO").strip() or "INFO").upper(),
    )
