"""Product and category storage."""

from __future__ import annotations

import json
import logging
import math

import aiosqlite

from ..models import Category, Product
from .db import connect

logger = logging.getLogger(__name__)

PRODUCTS_PER_PAGE = 6

_PRODUCT_COLUMNS = "id, product_id, name, price, promo_price, description, images_json, category_id"


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------


async def create_category(name_fr: str, name_ar: str) -> Category:
    async with connect() as db:
        cur = await db.execute(
            "INSERT INTO categories(name_fr, name_ar) VALUES(?, ?)", (name_fr, name_ar)
        )
        await db.commit()
        return Category(id=cur.lastrowid, name_fr=name_fr, name_ar=name_ar)


async def get_all_categories() -> list[Category]:
    async with connect() as db:
        db.row_factory = aiosqlite.Row
        cur = await db.execute("SELECT id, name_fr, name_ar FROM categories ORDER BY id")
        rows = await cur.fetchall()
        return [Category.from_row(r) for r in rows]


async def get_category(category_id: int) -> Category | None:
    async with connect() as db:
        db.row_factory = aiosqlite.Row
        cur = await db.execute(
            "SELECT id, name_fr, name_ar FROM categories WHERE id = ?", (category_id,)
        )
        row = await cur.fetchone()
        return Category.from_row(row) if row else None


async def get_category_product_counts() -> list[tuple[Category, int]]:
    """Every category with its number of products (empty ones included)."""
    async with connect() as db:
        db.row_factory = aiosqlite.Row
        cur = await db.execute(
            """
            SELECT c.id, c.name_fr, c.name_ar, COUNT(p.id) AS product_count
            FROM categories c
            LEFT JOIN products p ON p.category_id = c.id
            GROUP BY c.id
            ORDER BY c.id
            """
        )
        rows = await cur.fetchall()
        return [(Category.from_row(r), int(r["product_count"])) for r in rows]


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------


async def create_product(
    *,
    name: str,
    price: int,
    product_id: str,
    category_id: int,
    promo_price: int | None = None,
    description: str = "",
    images: list[str] | None = None,
) -> Product:
    async with connect() as db:
        cur = await db.execute(
            "INSERT INTO products(product_id, name, price, promo_price, description, images_json, category_id) "
            "VALUES(?, ?, ?, ?, ?, ?, ?)",
            (
                product_id,
                name,
                price,
                promo_price,
                description,
                json.dumps(images or []),
                category_id,
            ),
        )
        await db.commit()
        new_id = cur.lastrowid
    logger.info("Product created: id=%s product_id=%s", new_id, product_id)
    return Product(
        id=new_id,
        product_id=product_id,
        name=name,
        price=price,
        category_id=category_id,
        promo_price=promo_price,
        description=description,
        images=list(images or []),
    )


async def update_product(
    product_ref: int,
    *,
    name: str,
    price: int,
    category_id: int,
    promo_price: int | None = None,
    description: str = "",
    images: list[str] | None = None,
) -> Product:
    """Replace product fields. Raises LookupError if the product does not exist."""
    async with connect() as db:
        cur = await db.execute(
            "UPDATE products SET name = ?, price = ?, promo_price = ?, description = ?, "
            "images_json = ?, category_id = ? WHERE id = ?",
            (
                name,
                price,
                promo_price,
                description,
                json.dumps(images or []),
                category_id,
                product_ref,
            ),
        )
        await db.commit()
        if cur.rowcount == 0:
            raise LookupError(f"Product {product_ref} not found")

    product = await get_product(product_ref)
    if product is None:
        raise LookupError(f"Product {product_ref} not found after update")
    return product


async def delete_product(product_ref: int) -> None:
    async with connect() as db:
        await db.execute("DELETE FROM products WHERE id = ?", (product_ref,))
        await db.commit()


async def get_product(product_ref: int) -> Product | None:
    async with connect() as db:
        db.row_factory = aiosqlite.Row
        cur = await db.execute(
            f"SELECT {_PRODUCT_COLUMNS} FROM products WHERE id = ?", (product_ref,)
        )
        row = await cur.fetchone()
        return Product.from_row(row) if row else None


async def get_products_by_category(category_id: int, limit: int = 0) -> list[Product]:
    """Products of a category in insertion order; limit <= 0 returns all."""
    query = f"SELECT {_PRODUCT_COLUMNS} FROM products WHERE category_id = ? ORDER BY id"
    params: tuple = (category_id,)
    if limit > 0:
        query += " LIMIT ?"
        params = (category_id, limit)

    async with connect() as db:
        db.row_factory = aiosqlite.Row
        cur = await db.execute(query, params)
        rows = await cur.fetchall()
        return [Product.from_row(r) for r in rows]


async def get_product_count_by_category(category_id: int) -> tuple[int, int]:
    """Returns (total_products, total_pages)."""
    async with connect() as db:
        cur = await db.execute(
            "SELECT COUNT(*) FROM products WHERE category_id = ?", (category_id,)
        )
        row = await cur.fetchone()
    total = int(row[0]) if row else 0
    return total, math.ceil(total / PRODUCTS_PER_PAGE)


async def get_products_by_category_paginated(category_id: int, page: int) -> list[Product]:
    """One page of a category; pages start at 1."""
    skip = (max(page, 1) - 1) * PRODUCTS_PER_PAGE
    async with connect() as db:
        db.row_factory = aiosqlite.Row
        cur = await db.execute(
            f"SELECT {_PRODUCT_COLUMNS} FROM products WHERE category_id = ? "
            "ORDER BY id LIMIT ? OFFSET ?",
            (category_id, PRODUCTS_PER_PAGE, skip),
        )
        rows = await cur.fetchall()
        return [Product.from_row(r) for r in rows]


async def search_products(query: str) -> list[Product]:
    """Case-insensitive substring match on product name."""
    q = (query or "").strip().lower()
    if not q:
        return []
    async with connect() as db:
        db.row_factory = aiosqlite.Row
        cur = await db.execute(f"SELECT {_PRODUCT_COLUMNS} FROM products ORDER BY id")
        rows = await cur.fetchall()
    # Python lower() handles accented names, SQLite LOWER() only ASCII
    return [Product.from_row(r) for r in rows if q in r["name"].lower()]


async def get_total_product_count() -> int:
    async with connect() as db:
        cur = await db.execute("SELECT COUNT(*) FROM products")
        row = await cur.fetchone()
        return int(row[0]) if row else 0
