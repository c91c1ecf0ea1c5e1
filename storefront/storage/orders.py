"""Order storage. Orders are append-only."""

from __future__ import annotations

import logging
from datetime import UTC, datetime

import aiosqlite

from ..models import Order, OrderCreate
from ..utils import make_order_id, to_db_timestamp
from .db import connect

logger = logging.getLogger(__name__)

_ORDER_COLUMNS = (
    "o.id, o.order_number, o.product_ref, o.product_code, "
    "COALESCE(p.name, o.product_name) AS product_name, o.quantity, o.full_name, "
    "o.phone_number, o.selected_wilaya, o.selected_delivery_type, o.delivery_address, "
    "o.exact_address, o.order_remarks, o.delivery_price, o.total_price, o.created_at"
)


async def create_order(payload: OrderCreate, created_at: datetime | None = None) -> Order:
    """Persist an order and return it with its generated id, number and timestamp."""
    created = to_db_timestamp(created_at or datetime.now(UTC))
    order_number = make_order_id("CMD")

    async with connect() as db:
        cur = await db.execute(
            """
            INSERT INTO orders(
                order_number, product_ref, product_code, product_name, quantity,
                full_name, phone_number, selected_wilaya, selected_delivery_type,
                delivery_address, exact_address, order_remarks, delivery_price,
                total_price, created_at
            ) VALUES(?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                order_number,
                payload.product_ref,
                payload.product_code,
                payload.product_name,
                payload.quantity,
                payload.full_name,
                payload.phone_number,
                payload.selected_wilaya,
                payload.selected_delivery_type,
                payload.delivery_address,
                payload.exact_address,
                payload.order_remarks,
                payload.delivery_price,
                payload.total_price,
                created,
            ),
        )
        await db.commit()
        order_id = cur.lastrowid

    logger.info(
        "Order created: id=%s number=%s product=%s total=%s",
        order_id,
        order_number,
        payload.product_code,
        payload.total_price,
    )
    return Order(
        id=order_id,
        order_number=order_number,
        product_ref=payload.product_ref,
        product_code=payload.product_code,
        product_name=payload.product_name,
        quantity=payload.quantity,
        full_name=payload.full_name,
        phone_number=payload.phone_number,
        selected_wilaya=payload.selected_wilaya,
        selected_delivery_type=payload.selected_delivery_type,
        delivery_address=payload.delivery_address,
        exact_address=payload.exact_address,
        order_remarks=payload.order_remarks,
        delivery_price=payload.delivery_price,
        total_price=payload.total_price,
        created_at=datetime.fromisoformat(created),
    )


async def get_orders(start: datetime, end: datetime) -> list[Order]:
    """
    Orders created within [start, end], most recent first.

    The product name comes from the current catalog when the product still
    exists, otherwise from the snapshot taken at submission.
    """
    async with connect() as db:
        db.row_factory = aiosqlite.Row
        cur = await db.execute(
            f"""
            SELECT {_ORDER_COLUMNS}
            FROM orders o
            LEFT JOIN products p ON p.id = o.product_ref
            WHERE o.created_at >= ? AND o.created_at <= ?
            ORDER BY o.created_at DESC, o.id DESC
            """,
            (to_db_timestamp(start), to_db_timestamp(end)),
        )
        rows = await cur.fetchall()
        return [Order.from_row(r) for r in rows]


async def count_orders(start: datetime, end: datetime) -> int:
    async with connect() as db:
        cur = await db.execute(
            "SELECT COUNT(*) FROM orders WHERE created_at >= ? AND created_at <= ?",
            (to_db_timestamp(start), to_db_timestamp(end)),
        )
        row = await cur.fetchone()
        return int(row[0]) if row else 0
