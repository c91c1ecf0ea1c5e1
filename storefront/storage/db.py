"""Database configuration and initialization."""

from __future__ import annotations

import logging
import os
from pathlib import Path

import aiosqlite

logger = logging.getLogger(__name__)

# Use relative path for local development, absolute for Docker
_DATA_DIR = Path(__file__).parent.parent.parent / "data"
if os.getenv("STOREFRONT_DB_PATH"):
    DB_PATH = os.environ["STOREFRONT_DB_PATH"]
elif os.path.exists("/app/data"):
    DB_PATH = "/app/data/storefront.sqlite3"
else:
    DB_PATH = str(_DATA_DIR / "storefront.sqlite3")


def connect() -> aiosqlite.Connection:
    """Open a connection to the current DB_PATH (read at call time)."""
    return aiosqlite.connect(DB_PATH)


async def init_db() -> None:
    """Initialize all database tables."""
    Path(DB_PATH).parent.mkdir(parents=True, exist_ok=True)
    async with connect() as db:
        await db.execute(
            """
            CREATE TABLE IF NOT EXISTS categories (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name_fr TEXT NOT NULL,
                name_ar TEXT NOT NULL
            );
            """
        )

        await db.execute(
            """
            CREATE TABLE IF NOT EXISTS products (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                product_id TEXT NOT NULL,
                name TEXT NOT NULL,
                price INTEGER NOT NULL,
                promo_price INTEGER,
                description TEXT,
                images_json TEXT NOT NULL DEFAULT '[]',
                category_id INTEGER NOT NULL REFERENCES categories(id)
            );
            """
        )
        await db.execute(
            "CREATE INDEX IF NOT EXISTS idx_products_category ON products(category_id)"
        )

        # Delivery tariffs; wilaya_code is not unique, readers keep the first row per code
        await db.execute(
            """
            CREATE TABLE IF NOT EXISTS tarif_livraison (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                wilaya_code TEXT,
                wilaya_name TEXT,
                price TEXT,
                delivery_office_price TEXT,
                delivery_office_address TEXT
            );
            """
        )

        await db.execute(
            """
            CREATE TABLE IF NOT EXISTS orders (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                order_number TEXT NOT NULL UNIQUE,
                product_ref INTEGER NOT NULL,
                product_code TEXT NOT NULL,
                product_name TEXT NOT NULL,
                quantity INTEGER NOT NULL,
                full_name TEXT NOT NULL,
                phone_number TEXT NOT NULL,
                selected_wilaya TEXT NOT NULL,
                selected_delivery_type TEXT NOT NULL,
                delivery_address TEXT,
                exact_address TEXT,
                order_remarks TEXT,
                delivery_price INTEGER NOT NULL DEFAULT 0,
                total_price INTEGER NOT NULL,
                created_at TEXT NOT NULL
            );
            """
        )
        await db.execute(
            "CREATE INDEX IF NOT EXISTS idx_orders_created ON orders(created_at)"
        )

        # Single-row store settings
        await db.execute(
            """
            CREATE TABLE IF NOT EXISTS settings (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                store_name TEXT,
                phone_number TEXT,
                show_header INTEGER NOT NULL DEFAULT 1,
                fb_pixel_id TEXT
            );
            """
        )

        await db.commit()
    logger.debug("Database initialized at %s", DB_PATH)
