from __future__ import annotations

import html
import random
import string
from datetime import UTC, datetime


def make_order_id(prefix: str = "CMD") -> str:
    ts = datetime.now(UTC).strftime("%y%m%d%H%M%S")
    rnd = "".join(random.choices(string.ascii_uppercase + string.digits, k=4))
    return f"{prefix}-{ts}-{rnd}"


def escape_html(text: str) -> str:
    """
    Escape special characters for Telegram HTML parse mode.
    Handles: < > & and preserves other characters.
    """
    return html.escape(str(text))


def da(amount: int) -> str:
    """Format an amount in Algerian dinars: 12 500 DA."""
    return f"{amount:,}".replace(",", " ") + " DA"


def to_db_timestamp(dt: datetime) -> str:
    """UTC ISO-8601 string with second precision; naive values are taken as UTC."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC).isoformat(timespec="seconds")
