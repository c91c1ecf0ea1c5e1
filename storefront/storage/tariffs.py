"""Delivery tariff storage (one row per wilaya)."""

from __future__ import annotations

import logging

import aiosqlite

from ..models import Tariff
from ..pricing import dedupe_and_sort_tariffs
from ..wilayas import WILAYAS
from .db import connect

logger = logging.getLogger(__name__)

_TARIFF_COLUMNS = (
    "id, wilaya_code, wilaya_name, price, delivery_office_price, delivery_office_address"
)


async def tariffs_exist() -> bool:
    async with connect() as db:
        cur = await db.execute("SELECT 1 FROM tarif_livraison LIMIT 1")
        return await cur.fetchone() is not None


async def import_wilaya_data(entries: list[tuple[int, str]] | None = None) -> int:
    """Insert code and name for each wilaya, prices left empty. Returns rows inserted."""
    entries = WILAYAS if entries is None else entries
    async with connect() as db:
        await db.executemany(
            "INSERT INTO tarif_livraison(wilaya_code, wilaya_name) VALUES(?, ?)",
            [(str(code), name) for code, name in entries],
        )
        await db.commit()
    logger.info("Imported %d wilayas into tarif_livraison", len(entries))
    return len(entries)


async def add_tariff(
    wilaya_code: str,
    wilaya_name: str,
    price: str | None = None,
    delivery_office_price: str | None = None,
    delivery_office_address: str | None = None,
) -> Tariff:
    async with connect() as db:
        cur = await db.execute(
            "INSERT INTO tarif_livraison(wilaya_code, wilaya_name, price, delivery_office_price, "
            "delivery_office_address) VALUES(?, ?, ?, ?, ?)",
            (wilaya_code, wilaya_name, price, delivery_office_price, delivery_office_address),
        )
        await db.commit()
        return Tariff(
            id=cur.lastrowid,
            wilaya_code=wilaya_code,
            wilaya_name=wilaya_name,
            price=price,
            delivery_office_price=delivery_office_price,
            delivery_office_address=delivery_office_address,
        )


async def get_all_tariffs() -> list[Tariff]:
    """All rows in insertion order, duplicates included."""
    async with connect() as db:
        db.row_factory = aiosqlite.Row
        cur = await db.execute(f"SELECT {_TARIFF_COLUMNS} FROM tarif_livraison ORDER BY id")
        rows = await cur.fetchall()
        return [Tariff.from_row(r) for r in rows]


async def get_sorted_tariffs() -> list[Tariff]:
    """Tariffs for the wilaya picker: first row per code, ascending numeric code."""
    return dedupe_and_sort_tariffs(await get_all_tariffs())


async def update_tariff(
    tariff_id: int,
    price: str | None = None,
    delivery_office_price: str | None = None,
    delivery_office_address: str | None = None,
) -> None:
    """Overwrite the price fields of one tariff row. Raises LookupError if missing."""
    async with connect() as db:
        cur = await db.execute(
            "UPDATE tarif_livraison SET price = ?, delivery_office_price = ?, "
            "delivery_office_address = ? WHERE id = ?",
            (price, delivery_office_price, delivery_office_address, tariff_id),
        )
        await db.commit()
        if cur.rowcount == 0:
            raise LookupError(f"Tariff {tariff_id} not found")
    logger.info(
        "Tariff %s updated: home=%s office=%s", tariff_id, price, delivery_office_price
    )
