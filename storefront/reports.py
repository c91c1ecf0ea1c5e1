"""Order reporting for store owners."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Literal

from . import storage
from .models import Order
from .utils import da, escape_html

PeriodKey = Literal["today", "yesterday", "week", "month", "custom"]

PERIODS: tuple[PeriodKey, ...] = ("today", "yesterday", "week", "month", "custom")

PERIOD_TITLES: dict[str, str] = {
    "today": "Commandes aujourd'hui",
    "yesterday": "Commandes hier",
    "week": "Commandes cette semaine",
    "month": "Commandes ce mois",
    "custom": "Commandes dans la période",
}

DELIVERY_LABELS = {"home": "À domicile", "office": "Au bureau"}


@dataclass
class OrdersSummary:
    period: str
    start: datetime
    end: datetime
    orders: list[Order]
    previous_count: int | None = None

    @property
    def orders_count(self) -> int:
        return len(self.orders)

    @property
    def revenue(self) -> int:
        return sum(o.total_price for o in self.orders)


def get_period_range(
    period: PeriodKey,
    now: datetime,
    custom_start: date | None = None,
    custom_end: date | None = None,
) -> tuple[datetime, datetime]:
    """
    Start and end of a reporting period in the timezone of ``now``.

    ``week`` starts on Monday. Periods that include today end at ``now``;
    ``yesterday`` and a custom end date stop at 23:59:59.999999.
    """
    tz = now.tzinfo
    midnight = datetime.combine(now.date(), time.min, tzinfo=tz)
    start = midnight
    end = now

    if period == "today":
        pass
    elif period == "yesterday":
        start = midnight - timedelta(days=1)
        end = datetime.combine(start.date(), time.max, tzinfo=tz)
    elif period == "week":
        start = midnight - timedelta(days=now.weekday())
    elif period == "month":
        start = midnight.replace(day=1)
    elif period == "custom":
        if custom_start is not None:
            start = datetime.combine(custom_start, time.min, tzinfo=tz)
        if custom_end is not None:
            end = datetime.combine(custom_end, time.max, tzinfo=tz)
    else:
        raise ValueError(f"Unknown period: {period!r}")

    return start, end


def previous_range(start: datetime, end: datetime) -> tuple[datetime, datetime]:
    """Window of the same length ending just before ``start``."""
    return start - (end - start), start - timedelta(microseconds=1)


async def summarize_orders(
    period: PeriodKey,
    now: datetime,
    custom_start: date | None = None,
    custom_end: date | None = None,
) -> OrdersSummary:
    start, end = get_period_range(period, now, custom_start, custom_end)
    orders = await storage.get_orders(start, end)
    prev_start, prev_end = previous_range(start, end)
    previous_count = await storage.count_orders(prev_start, prev_end)
    return OrdersSummary(
        period=period, start=start, end=end, orders=orders, previous_count=previous_count
    )


def format_order_line(order: Order, tz=None) -> str:
    created = order.created_at.astimezone(tz) if tz else order.created_at
    delivery = DELIVERY_LABELS.get(order.selected_delivery_type, order.selected_delivery_type)
    address = order.exact_address if order.selected_delivery_type == "home" else order.delivery_address
    lines = [
        f"<b>{escape_html(order.order_number)}</b> • {created:%d/%m/%Y %H:%M}",
        f"{escape_html(order.product_name)} ({escape_html(order.product_code)}) × {order.quantity}",
        f"{escape_html(order.full_name)} • {escape_html(order.phone_number)}",
        f"{escape_html(order.selected_wilaya)} • {delivery}",
    ]
    if address:
        lines.append(escape_html(address))
    if order.order_remarks:
        lines.append(f"<i>{escape_html(order.order_remarks)}</i>")
    lines.append(f"Total: <b>{da(order.total_price)}</b>")
    return "\n".join(lines)


def format_summary(summary: OrdersSummary, limit: int = 20, tz=None) -> str:
    title = PERIOD_TITLES.get(summary.period, "Commandes")
    head = (
        f"📊 <b>{title}</b>\n"
        f"{summary.start:%d/%m/%Y} – {summary.end:%d/%m/%Y}\n\n"
        f"🛍 Commandes: <b>{summary.orders_count}</b>\n"
        f"💰 Chiffre d'affaires: <b>{da(summary.revenue)}</b>"
    )
    if summary.previous_count is not None:
        head += f"\n📈 Période précédente: {summary.previous_count} commande(s)"
    if not summary.orders:
        return head + "\n\nAucune commande sur cette période."

    body = "\n\n".join(format_order_line(o, tz) for o in summary.orders[:limit])
    text = f"{head}\n\n━━━━━━━━━━━━━━━━━━━━━━\n{body}"
    if summary.orders_count > limit:
        text += f"\n\n… et {summary.orders_count - limit} autres"
    return text
