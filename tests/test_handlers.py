"""Tests for handler text formatting and startup wiring."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import aiosqlite
import pytest
from aiogram.exceptions import TelegramBadRequest
from aiogram.types import Chat, Message

from storefront import storage
from storefront.checkout import CheckoutDraft
from storefront.handlers.catalog import SEARCH_INPUT
from storefront.handlers.checkout import TEXT_INPUT
from storefront.handlers.common import (
    format_checkout,
    format_confirmation,
    format_product_card,
    safe_edit_text,
)
from storefront.handlers.start import contact_text, welcome_text
from storefront.main import prepare_storage
from storefront.models import Order, StoreSettings


class TestProductCard:
    def test_promo(self, product):
        text = format_product_card(product)
        assert "800 DA" in text
        assert "<s>1 000 DA</s>" in text
        assert "-20%" in text

    def test_long_description_truncated(self, product):
        product.description = "x" * 1000
        assert "x" * 600 not in format_product_card(product)


class TestCheckoutText:
    def test_lists_missing_fields(self, product, tariffs):
        text = format_checkout(CheckoutDraft(product, tariffs))
        assert "À compléter" in text
        assert "nom complet" in text
        assert "Total: 800 DA" in text

    def test_complete_form(self, product, tariffs):
        draft = CheckoutDraft(product, tariffs)
        draft.set_full_name("Amine")
        draft.set_phone_number("0555123456")
        draft.set_quantity(3)
        draft.select_wilaya("16")
        draft.select_delivery_type("office")

        text = format_checkout(draft)
        assert "À compléter" not in text
        assert "Bureau Centre" in text
        assert "16 - Alger" in text
        assert "Total: 2 700 DA" in text

    def test_invalid_phone_warning(self, product, tariffs):
        draft = CheckoutDraft(product, tariffs)
        draft.set_phone_number("055")
        assert "Numéro invalide" in format_checkout(draft)


def test_confirmation_text():
    order = Order(
        id=1,
        order_number="CMD-260311120000-AB12",
        product_ref=1,
        product_code="PRD-001",
        product_name="Robe",
        quantity=3,
        full_name="Amine",
        phone_number="0555123456",
        selected_wilaya="16 - Alger",
        selected_delivery_type="office",
        delivery_address="Bureau Centre",
        exact_address="",
        order_remarks="",
        delivery_price=300,
        total_price=2700,
        created_at=datetime(2026, 3, 11, 12, tzinfo=UTC),
    )
    text = format_confirmation(order)
    assert "CMD-260311120000-AB12" in text
    assert "Bureau: Bureau Centre" in text
    assert "2 700 DA" in text


def test_start_texts():
    assert "notre boutique" in welcome_text(None)
    assert "Boutique DZ" in welcome_text(StoreSettings(id=1, store_name="Boutique DZ"))
    assert "disponible(s)" not in welcome_text(None)
    assert "12 produit(s) disponible(s)" in welcome_text(None, product_count=12)
    assert "pas encore disponible" in contact_text(None)
    assert "+213555000000" in contact_text(StoreSettings(id=1, phone_number="0555000000"))


@pytest.mark.asyncio
async def test_prepare_storage_seeds_once(tmp_path, monkeypatch):
    db_path = str(tmp_path / "nested" / "shop.sqlite3")
    await prepare_storage(db_path)
    await prepare_storage(db_path)

    async with aiosqlite.connect(db_path) as db:
        cursor = await db.execute("SELECT COUNT(*) FROM tarif_livraison")
        (count,) = await cursor.fetchone()
    assert count == 58
    assert len(await storage.get_sorted_tariffs()) == 58


def text_message(text):
    return Message(
        message_id=1,
        date=datetime.now(UTC),
        chat=Chat(id=1, type="private"),
        text=text,
    )


class TestFormInputFilters:
    @pytest.mark.parametrize("flt", [TEXT_INPUT, SEARCH_INPUT])
    def test_plain_text_accepted(self, flt):
        assert flt.resolve(text_message("Amine Benali"))

    @pytest.mark.parametrize("flt", [TEXT_INPUT, SEARCH_INPUT])
    @pytest.mark.parametrize("command", ["/orders", "/start", "/tarif 16 400 300"])
    def test_commands_left_to_their_handlers(self, flt, command):
        assert not flt.resolve(text_message(command))

    def test_non_text_message_ignored(self):
        message = Message(message_id=1, date=datetime.now(UTC), chat=Chat(id=1, type="private"))
        assert not TEXT_INPUT.resolve(message)


def editable_message(edit_error=None):
    message = MagicMock(spec=Message)
    message.message_id = 10
    message.edit_text = AsyncMock(side_effect=edit_error)
    message.answer = AsyncMock()
    return message


class TestSafeEditText:
    @pytest.mark.asyncio
    async def test_edits_in_place(self):
        message = editable_message()
        await safe_edit_text(message, "Commande annulée.", parse_mode="HTML")

        message.edit_text.assert_awaited_once_with("Commande annulée.", parse_mode="HTML")
        message.answer.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_falls_back_to_new_message(self):
        error = TelegramBadRequest(method=MagicMock(), message="message can't be edited")
        message = editable_message(error)
        await safe_edit_text(message, "Que souhaitez-vous faire ?", reply_markup=None)

        message.answer.assert_awaited_once_with("Que souhaitez-vous faire ?", reply_markup=None)

    @pytest.mark.asyncio
    async def test_other_errors_propagate(self):
        message = editable_message(RuntimeError("network down"))
        with pytest.raises(RuntimeError):
            await safe_edit_text(message, "x")
        message.answer.assert_not_awaited()
