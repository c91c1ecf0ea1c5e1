"""Store settings storage (a single row)."""

from __future__ import annotations

import logging

import aiosqlite

from ..models import StoreSettings
from .db import connect

logger = logging.getLogger(__name__)


async def get_store_settings() -> StoreSettings | None:
    async with connect() as db:
        db.row_factory = aiosqlite.Row
        cur = await db.execute(
            "SELECT id, store_name, phone_number, show_header, fb_pixel_id "
            "FROM settings ORDER BY id LIMIT 1"
        )
        row = await cur.fetchone()
        return StoreSettings.from_row(row) if row else None


async def save_store_settings(
    *,
    store_name: str,
    phone_number: str,
    show_header: bool = True,
    fb_pixel_id: str | None = None,
    settings_id: int | None = None,
) -> int:
    """Update the given settings row, or create it when settings_id is None. Returns the id."""
    values = (store_name, phone_number, 1 if show_header else 0, fb_pixel_id)
    async with connect() as db:
        if settings_id is not None:
            cur = await db.execute(
                "UPDATE settings SET store_name = ?, phone_number = ?, show_header = ?, "
                "fb_pixel_id = ? WHERE id = ?",
                (*values, settings_id),
            )
            await db.commit()
            if cur.rowcount == 0:
                raise LookupError(f"Settings {settings_id} not found")
            return settings_id

        cur = await db.execute(
            "INSERT INTO settings(store_name, phone_number, show_header, fb_pixel_id) "
            "VALUES(?, ?, ?, ?)",
            values,
        )
        await db.commit()
        logger.info("Store settings created")
        return cur.lastrowid
