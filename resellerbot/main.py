from __future__ import annotations

import asyncio
import logging

from aiogram import Bot, Dispatcher
from aiogram.fsm.storage.memory import MemoryStorage

from resellerbot.bot.handlers_admin import build_admin_router
from resellerbot.bot.handlers_seller import build_seller_router
from resellerbot.config import AppConfig, load_config
from resellerbot.db import Database
from resellerbot.repositories.clients import ClientRepository
from resellerbot.repositories.panels import PanelRepository
from resellerbot.repositories.sellers import SellerRepository
from resellerbot.services.allocator import SharedCredentialAllocator
from resellerbot.services.crypto import CryptoService


logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )


async def run(config: AppConfig) -> None:
    db = Database(config.database_path)
    await db.init()

    seller_repo = SellerRepository(db)
    panel_repo = PanelRepository(db)
    client_repo = ClientRepository(db)

    # The admin also sells, so it needs a tenant row.
    existing = await seller_repo.get(config.admin_chat_id)
    if existing is None:
        await seller_repo.add(config.admin_chat_id, "admin")

    crypto = CryptoService(config.app_secret)
    allocator = SharedCredentialAllocator(
        db=db,
        panels_repo=panel_repo,
        clients_repo=client_repo,
    )

    bot = Bot(token=config.bot_token)
    dp = Dispatcher(storage=MemoryStorage())

    dp.include_router(
        build_admin_router(
            admin_chat_id=config.admin_chat_id,
            seller_repo=seller_repo,
        )
    )
    dp.include_router(
        build_seller_router(
            admin_chat_id=config.admin_chat_id,
            seller_repo=seller_repo,
            client_repo=client_repo,
            allocator=allocator,
            crypto=crypto,
            timezone=config.timezone,
            expiring_soon_days=config.expiring_soon_days,
        )
    )

    logger.info("Starting polling with database %s", config.database_path)
    await dp.start_polling(bot)


def main() -> None:
    config = load_config()
    configure_logging(config.log_level)
    asyncio.run(run(config))


if __name__ == "__main__":
    main()
