"""Catalog, category pages, product page and search handlers."""

from __future__ import annotations

import logging

from aiogram import Dispatcher, F
from aiogram.exceptions import TelegramBadRequest
from aiogram.fsm.context import FSMContext
from aiogram.fsm.state import State, StatesGroup
from aiogram.types import CallbackQuery, Message

from ..keyboards import (
    MENU_CATALOG,
    MENU_SEARCH,
    back_to_menu_kb,
    categories_kb,
    category_page_kb,
    product_kb,
    search_results_kb,
)
from ..services import CheckoutService, ProductService
from ..utils import escape_html
from .common import format_product_card, safe_edit_text

logger = logging.getLogger(__name__)


class SearchState(StatesGroup):
    query = State()


SEARCH_INPUT = F.text & ~F.text.startswith("/")


def register_catalog_handlers(
    dp: Dispatcher,
    product_service: ProductService,
    checkout_service: CheckoutService,
) -> None:
    """Register catalog handlers."""

    async def send_categories(message: Message, edit: bool = False) -> None:
        categories = await product_service.get_categories()
        if not categories:
            text, kb = "Le catalogue est vide pour le moment.", back_to_menu_kb()
        else:
            text, kb = "📋 <b>Catégories</b>", categories_kb(categories)
        if edit:
            await safe_edit_text(message, text, parse_mode="HTML", reply_markup=kb)
        else:
            await message.answer(text, parse_mode="HTML", reply_markup=kb)

    @dp.message(F.text == MENU_CATALOG)
    async def text_catalog(m: Message, state: FSMContext):
        await state.clear()
        await send_categories(m)

    @dp.callback_query(F.data == "categories")
    async def categories(cb: CallbackQuery, state: FSMContext):
        await state.clear()
        await send_categories(cb.message, edit=True)
        await cb.answer()

    @dp.callback_query(F.data.startswith("cat:"))
    async def category_page(cb: CallbackQuery):
        # cat:{category_id}:{page}
        try:
            _, category_s, page_s = cb.data.split(":")
            category_id, page = int(category_s), int(page_s)
        except ValueError:
            await cb.answer()
            return

        category = await product_service.get_category(category_id)
        if category is None:
            await cb.answer("Catégorie introuvable", show_alert=True)
            return

        products, total, pages = await product_service.get_category_page(category_id, page)
        page = max(1, min(page, pages or 1))
        if not products:
            text = f"📋 <b>{escape_html(category.name_fr)}</b>\n\nAucun produit dans cette catégorie."
        else:
            text = (
                f"📋 <b>{escape_html(category.name_fr)}</b> • {escape_html(category.name_ar)}\n"
                f"{total} produit(s)"
            )
        kb = category_page_kb(category_id, products, page, pages)

        try:
            await cb.message.edit_text(text, parse_mode="HTML", reply_markup=kb)
        except TelegramBadRequest as e:
            logger.debug("Cannot edit category page: %s", e)
            try:
                await cb.message.delete()
            except TelegramBadRequest as e:
                logger.debug("Cannot delete previous message: %s", e)
            await cb.message.answer(text, parse_mode="HTML", reply_markup=kb)
        await cb.answer()

    @dp.callback_query(F.data.startswith("product:"))
    async def product_page(cb: CallbackQuery):
        try:
            product_ref = int(cb.data.split(":")[1])
        except ValueError:
            await cb.answer()
            return

        product = await product_service.get_product(product_ref)
        if product is None:
            await cb.answer("Produit introuvable", show_alert=True)
            return

        await checkout_service.track_view(cb.from_user.id, product)

        caption = format_product_card(product)
        related = await product_service.get_related(product)
        kb = product_kb(product, related)
        photo_url = product.images[0] if product.images else ""
        if photo_url:
            try:
                await cb.message.answer_photo(photo_url, caption=caption, parse_mode="HTML", reply_markup=kb)
            except TelegramBadRequest as e:
                logger.warning("Failed to send photo for product %s: %s", product.id, e)
                await cb.message.answer(caption, parse_mode="HTML", reply_markup=kb)
        else:
            await cb.message.answer(caption, parse_mode="HTML", reply_markup=kb)
        await cb.answer()

    async def ask_search(message: Message, state: FSMContext) -> None:
        await state.set_state(SearchState.query)
        await message.answer("🔍 Tapez le nom du produit recherché:")

    @dp.message(F.text == MENU_SEARCH)
    async def text_search(m: Message, state: FSMContext):
        await ask_search(m, state)

    @dp.callback_query(F.data == "search:start")
    async def search_start(cb: CallbackQuery, state: FSMContext):
        await ask_search(cb.message, state)
        await cb.answer()

    @dp.message(SearchState.query, SEARCH_INPUT)
    async def search_query(m: Message, state: FSMContext):
        query = (m.text or "").strip()
        await state.clear()
        found = await product_service.search(query)
        if not found:
            await m.answer(
                f"Aucun produit trouvé pour « {escape_html(query)} ».",
                parse_mode="HTML",
                reply_markup=search_results_kb([]),
            )
            return
        await m.answer(
            f"🔍 {len(found)} résultat(s) pour « {escape_html(query)} »:",
            parse_mode="HTML",
            reply_markup=search_results_kb(found),
        )
