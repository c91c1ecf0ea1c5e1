"""Main bot entry point."""

from __future__ import annotations

import asyncio
import logging
import sys

from aiogram import Bot, Dispatcher
from aiogram.types import ErrorEvent

from . import storage
from .config import get_settings
from .handlers import (
    register_admin_handlers,
    register_catalog_handlers,
    register_checkout_handlers,
    register_start_handlers,
)
from .pixel import get_pixel_client
from .services import CheckoutService, ProductService
from .storage import db as storage_db

logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
    )

    # Reduce noise from httpx
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


async def global_error_handler(event: ErrorEvent) -> bool:
    """Global error handler for all unhandled exceptions."""
    logger.error(
        "Unhandled exception in handler",
        exc_info=event.exception,
        extra={
            "update": event.update,
        },
    )

    # Try to notify user
    try:
        update = event.update
        if update.message:
            await update.message.answer(
                "❌ Une erreur est survenue. Réessayez ou utilisez /start"
            )
        elif update.callback_query:
            await update.callback_query.answer(
                "Une erreur est survenue. Réessayez.", show_alert=True
            )
    except Exception as e:
        logger.error("Failed to notify user about error: %s", e)

    return True


async def prepare_storage(db_path: str = "") -> None:
    """Create tables and seed the 58 wilayas on first run."""
    if db_path:
        storage_db.DB_PATH = db_path
    await storage.init_db()
    logger.info("Database initialized at %s", storage_db.DB_PATH)

    if not await storage.tariffs_exist():
        count = await storage.import_wilaya_data()
        logger.info("Seeded %d wilayas without prices", count)


async def main():
    """Main application entry point."""
    cfg = get_settings()
    setup_logging(cfg.log_level)
    logger.info("Starting bot...")

    await prepare_storage(cfg.db_path)

    bot = Bot(token=cfg.telegram_bot_token)
    dp = Dispatcher()

    # Ensure polling works even if webhook was previously set for this bot token
    try:
        me = await bot.get_me()
        logger.info("Bot identity: @%s (%s)", me.username, me.id)
        await bot.delete_webhook(drop_pending_updates=True)
        logger.info("Webhook deleted (drop_pending_updates=True)")
    except Exception as e:
        logger.error("Failed to initialize bot (get_me/delete_webhook): %s", e)
        raise

    dp.error.register(global_error_handler)

    product_service = ProductService()
    checkout_service = CheckoutService(
        pixel=get_pixel_client(),
        confirmation_hold_seconds=cfg.confirmation_hold_seconds,
    )
    logger.info("Services initialized")

    # Admin router is included last; plain dp handlers run first
    register_start_handlers(dp, product_service)
    register_catalog_handlers(dp, product_service, checkout_service)
    register_checkout_handlers(dp, product_service, checkout_service)
    register_admin_handlers(dp, product_service, cfg)
    logger.info("Handlers registered (owners: %d)", len(cfg.owner_telegram_ids))

    logger.info("Bot started, polling for updates...")
    try:
        await dp.start_polling(bot)
    finally:
        await bot.session.close()


if __name__ == "__main__":
    asyncio.run(main())
