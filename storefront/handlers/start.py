"""Start and menu handlers."""

from __future__ import annotations

from aiogram import Dispatcher, F
from aiogram.filters import CommandStart
from aiogram.fsm.context import FSMContext
from aiogram.types import CallbackQuery, Message

from ..keyboards import MENU_CONTACT, back_to_menu_kb, main_menu_kb, persistent_menu
from ..models import StoreSettings
from ..services import ProductService
from ..utils import escape_html
from .common import safe_edit_text


def welcome_text(settings: StoreSettings | None, product_count: int = 0) -> str:
    name = settings.store_name if settings and settings.store_name else "notre boutique"
    text = (
        f"👋 Bienvenue chez <b>{escape_html(name)}</b> !\n\n"
        "Parcourez le catalogue, choisissez un produit et commandez en quelques étapes.\n"
        "💵 Paiement à la livraison dans les 58 wilayas."
    )
    if product_count:
        text += f"\n\n🛍 {product_count} produit(s) disponible(s)"
    return text


def contact_text(settings: StoreSettings | None) -> str:
    if not settings or not settings.phone_number:
        return "📞 Le numéro de contact n'est pas encore disponible."
    phone = settings.phone_number.lstrip("0")
    return (
        "📞 <b>Contactez-nous</b>\n\n"
        f"Téléphone: <code>{escape_html(settings.phone_number)}</code>\n"
        f"Depuis l'étranger: <code>+213{escape_html(phone)}</code>"
    )


def register_start_handlers(dp: Dispatcher, product_service: ProductService) -> None:
    """Register start and menu handlers."""

    @dp.message(CommandStart())
    async def start(m: Message, state: FSMContext):
        await state.clear()
        settings = await product_service.get_settings()
        product_count = await product_service.get_product_count()
        await m.answer(welcome_text(settings, product_count), parse_mode="HTML", reply_markup=persistent_menu())
        await m.answer("Que souhaitez-vous faire ?", reply_markup=main_menu_kb())

    @dp.callback_query(F.data == "menu")
    async def menu(cb: CallbackQuery, state: FSMContext):
        await state.clear()
        await safe_edit_text(cb.message, "Que souhaitez-vous faire ?", reply_markup=main_menu_kb())
        await cb.answer()

    @dp.message(F.text == MENU_CONTACT)
    async def text_contact(m: Message):
        settings = await product_service.get_settings()
        await m.answer(contact_text(settings), parse_mode="HTML", reply_markup=back_to_menu_kb())

    @dp.callback_query(F.data == "info:contact")
    async def info_contact(cb: CallbackQuery):
        settings = await product_service.get_settings()
        await cb.message.answer(contact_text(settings), parse_mode="HTML", reply_markup=back_to_menu_kb())
        await cb.answer()

    @dp.callback_query(F.data == "noop")
    async def noop(cb: CallbackQuery):
        await cb.answer()
