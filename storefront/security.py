"""Owner-only access for store administration commands."""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable

from aiogram import BaseMiddleware
from aiogram.types import CallbackQuery, Message, TelegramObject

logger = logging.getLogger(__name__)


class OwnerOnlyMiddleware(BaseMiddleware):
    """Drop updates from anyone outside the owner whitelist."""

    def __init__(self, is_owner: Callable[[int], bool]):
        self.is_owner = is_owner

    async def __call__(
        self,
        handler: Callable[[TelegramObject, dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: dict[str, Any],
    ) -> Any:
        user_id: int | None = None

        if isinstance(event, Message) and event.from_user:
            user_id = event.from_user.id
        elif isinstance(event, CallbackQuery) and event.from_user:
            user_id = event.from_user.id

        if user_id is None:
            return None

        if not self.is_owner(user_id):
            logger.warning("Rejected admin command from user %s", user_id)
            if isinstance(event, Message):
                await event.answer("⛔ Accès refusé. Réservé au propriétaire de la boutique.")
            elif isinstance(event, CallbackQuery):
                await event.answer("⛔ Accès refusé", show_alert=True)
            return None

        return await handler(event, data)
