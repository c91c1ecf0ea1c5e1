"""Tests for owner order reports."""

from datetime import UTC, date, datetime, time, timedelta
from zoneinfo import ZoneInfo

import pytest

from storefront import storage
from storefront.models import OrderCreate
from storefront.reports import format_summary, get_period_range, previous_range, summarize_orders

ALGIERS = ZoneInfo("Africa/Algiers")
# Wednesday
NOW = datetime(2026, 3, 11, 15, 30, tzinfo=ALGIERS)


def payload(total=2000, delivery_type="home"):
    return OrderCreate(
        product_ref=1,
        product_code="PRD-001",
        product_name="Robe <kabyle>",
        quantity=2,
        full_name="Amine Benali",
        phone_number="0555123456",
        selected_wilaya="16 - Alger",
        selected_delivery_type=delivery_type,
        delivery_address="Bureau Centre" if delivery_type == "office" else "",
        exact_address="Bab Ezzouar" if delivery_type == "home" else "",
        order_remarks="",
        delivery_price=400,
        total_price=total,
    )


class TestPeriodRange:
    def test_today(self):
        start, end = get_period_range("today", NOW)
        assert start == datetime(2026, 3, 11, tzinfo=ALGIERS)
        assert end == NOW

    def test_yesterday(self):
        start, end = get_period_range("yesterday", NOW)
        assert start == datetime(2026, 3, 10, tzinfo=ALGIERS)
        assert end == datetime.combine(date(2026, 3, 10), time.max, tzinfo=ALGIERS)

    def test_week_starts_monday(self):
        start, end = get_period_range("week", NOW)
        assert start == datetime(2026, 3, 9, tzinfo=ALGIERS)
        assert end == NOW

    def test_month(self):
        start, _ = get_period_range("month", NOW)
        assert start == datetime(2026, 3, 1, tzinfo=ALGIERS)

    def test_custom(self):
        start, end = get_period_range("custom", NOW, date(2026, 1, 1), date(2026, 1, 31))
        assert start == datetime(2026, 1, 1, tzinfo=ALGIERS)
        assert end.date() == date(2026, 1, 31)
        assert end.time() == time.max

    def test_unknown_period(self):
        with pytest.raises(ValueError):
            get_period_range("decade", NOW)

    def test_previous_range_same_length(self):
        start, end = get_period_range("today", NOW)
        prev_start, prev_end = previous_range(start, end)
        assert prev_start == datetime(2026, 3, 10, 8, 30, tzinfo=ALGIERS)
        assert prev_end == start - timedelta(microseconds=1)


class TestSummary:
    @pytest.mark.asyncio
    async def test_summarize_today(self):
        await storage.init_db()
        # 10:00 local is 09:00 UTC
        await storage.create_order(payload(2000), created_at=datetime(2026, 3, 11, 9, 0, tzinfo=UTC))
        await storage.create_order(payload(1500, "office"), created_at=datetime(2026, 3, 11, 13, 0, tzinfo=UTC))
        await storage.create_order(payload(9999), created_at=datetime(2026, 3, 10, 12, 0, tzinfo=UTC))

        summary = await summarize_orders("today", NOW)
        assert summary.orders_count == 2
        assert summary.revenue == 3500
        assert summary.orders[0].total_price == 1500

    @pytest.mark.asyncio
    async def test_format_summary(self):
        await storage.init_db()
        await storage.create_order(payload(2000), created_at=datetime(2026, 3, 11, 9, 0, tzinfo=UTC))
        summary = await summarize_orders("today", NOW)

        text = format_summary(summary, tz=ALGIERS)
        assert "Commandes aujourd'hui" in text
        assert "2 000 DA" in text
        assert "Robe &lt;kabyle&gt;" in text
        assert "11/03/2026 10:00" in text
        assert "Bab Ezzouar" in text

    @pytest.mark.asyncio
    async def test_format_empty(self):
        await storage.init_db()
        summary = await summarize_orders("yesterday", NOW)
        assert "Aucune commande" in format_summary(summary)

    @pytest.mark.asyncio
    async def test_format_limit(self):
        await storage.init_db()
        for hour in range(5):
            await storage.create_order(payload(100), created_at=datetime(2026, 3, 11, hour, 0, tzinfo=UTC))
        summary = await summarize_orders("today", NOW)
        assert "et 3 autres" in format_summary(summary, limit=2)

    @pytest.mark.asyncio
    async def test_previous_period_count(self):
        await storage.init_db()
        await storage.create_order(payload(2000), created_at=datetime(2026, 3, 11, 9, 0, tzinfo=UTC))
        # 13:00 and 07:00 local the day before; only the first is in the previous window
        await storage.create_order(payload(1500), created_at=datetime(2026, 3, 10, 12, 0, tzinfo=UTC))
        await storage.create_order(payload(1500), created_at=datetime(2026, 3, 10, 6, 0, tzinfo=UTC))

        summary = await summarize_orders("today", NOW)
        assert summary.orders_count == 1
        assert summary.previous_count == 1
        assert "Période précédente: 1 commande(s)" in format_summary(summary)
