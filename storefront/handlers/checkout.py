"""Product checkout handlers: order form, wilaya and delivery selection, submission."""

from __future__ import annotations

import logging

from aiogram import Dispatcher, F
from aiogram.exceptions import TelegramBadRequest
from aiogram.fsm.context import FSMContext
from aiogram.fsm.state import State, StatesGroup
from aiogram.types import CallbackQuery, Message

from ..checkout import CheckoutDraft
from ..keyboards import back_to_menu_kb, checkout_kb, order_done_kb, wilaya_select_kb
from ..services import CheckoutService, ProductService
from ..services.checkout_service import REASON_FAILED, REASON_IN_FLIGHT, REASON_INVALID
from .common import FIELD_LABELS, format_checkout, format_confirmation, safe_edit_text

logger = logging.getLogger(__name__)


class CheckoutState(StatesGroup):
    form = State()
    full_name = State()
    phone = State()
    address = State()
    remarks = State()


# Free text typed into a form field; commands fall through to their own handlers
TEXT_INPUT = F.text & ~F.text.startswith("/")

FIELD_PROMPTS = {
    "name": (CheckoutState.full_name, "👤 Entrez votre nom complet:"),
    "phone": (CheckoutState.phone, "📞 Entrez votre numéro de téléphone (ex: 0555123456):"),
    "address": (CheckoutState.address, "🏠 Entrez votre adresse exacte (commune, rue, n°):"),
    "remarks": (CheckoutState.remarks, "📝 Remarques pour la commande (ou « - » pour aucune):"),
}


def session_key(chat_id: int, user_id: int) -> str:
    return f"{chat_id}:{user_id}"


def register_checkout_handlers(
    dp: Dispatcher,
    product_service: ProductService,
    checkout_service: CheckoutService,
) -> None:
    """Register checkout handlers."""

    async def load_draft(state: FSMContext) -> CheckoutDraft | None:
        data = await state.get_data()
        draft_state = data.get("draft")
        if not draft_state:
            return None
        product = await product_service.get_product(int(draft_state["product_ref"]))
        if product is None:
            return None
        tariffs = await product_service.get_tariffs()
        return CheckoutDraft.from_state(product, tariffs, draft_state)

    async def save_draft(state: FSMContext, draft: CheckoutDraft, user_id: int) -> None:
        data = await state.get_data()
        updates: dict = {"draft": draft.to_state()}

        if not data.get("tracked_initiate") and (draft.full_name.strip() or draft.phone_number):
            await checkout_service.track_initiate_checkout(user_id, draft.product)
            updates["tracked_initiate"] = True
        if not data.get("tracked_payment") and draft.can_order:
            await checkout_service.track_payment_info(user_id, draft)
            updates["tracked_payment"] = True

        await state.update_data(**updates)

    async def show_form(message: Message, draft: CheckoutDraft, edit: bool = False) -> None:
        text = format_checkout(draft)
        kb = checkout_kb(draft)
        if edit:
            await safe_edit_text(message, text, parse_mode="HTML", reply_markup=kb)
        else:
            await message.answer(text, parse_mode="HTML", reply_markup=kb)

    async def draft_or_abort(cb: CallbackQuery, state: FSMContext) -> CheckoutDraft | None:
        draft = await load_draft(state)
        if draft is None:
            await state.clear()
            await cb.answer("Commande expirée, recommencez depuis le produit.", show_alert=True)
        return draft

    @dp.callback_query(F.data.startswith("order:start:"))
    async def order_start(cb: CallbackQuery, state: FSMContext):
        try:
            product_ref = int(cb.data.split(":")[2])
        except ValueError:
            await cb.answer()
            return

        product = await product_service.get_product(product_ref)
        if product is None:
            await cb.answer("Produit introuvable", show_alert=True)
            return

        tariffs = await product_service.get_tariffs()
        draft = CheckoutDraft(product, tariffs)

        await state.clear()
        await state.set_state(CheckoutState.form)
        await state.update_data(draft=draft.to_state(), tracked_initiate=False, tracked_payment=False)
        await show_form(cb.message, draft)
        await cb.answer()

    @dp.callback_query(F.data == "order:form")
    async def order_form(cb: CallbackQuery, state: FSMContext):
        draft = await draft_or_abort(cb, state)
        if draft is None:
            return
        await state.set_state(CheckoutState.form)
        await show_form(cb.message, draft, edit=True)
        await cb.answer()

    @dp.callback_query(F.data.in_({"qty:inc", "qty:dec"}))
    async def change_quantity(cb: CallbackQuery, state: FSMContext):
        draft = await draft_or_abort(cb, state)
        if draft is None:
            return
        if cb.data == "qty:inc":
            draft.increase_quantity()
        else:
            draft.decrease_quantity()
        await save_draft(state, draft, cb.from_user.id)
        await show_form(cb.message, draft, edit=True)
        await cb.answer()

    @dp.callback_query(F.data.startswith("field:"))
    async def ask_field(cb: CallbackQuery, state: FSMContext):
        field = cb.data.split(":")[1]
        prompt = FIELD_PROMPTS.get(field)
        if prompt is None or await load_draft(state) is None:
            await cb.answer()
            return
        next_state, text = prompt
        await state.set_state(next_state)
        await cb.message.answer(text)
        await cb.answer()

    async def apply_text(m: Message, state: FSMContext, apply) -> None:
        draft = await load_draft(state)
        if draft is None:
            await state.clear()
            await m.answer("Commande expirée, recommencez depuis le produit.", reply_markup=back_to_menu_kb())
            return
        apply(draft, (m.text or "").strip())
        await save_draft(state, draft, m.from_user.id)
        await state.set_state(CheckoutState.form)
        await show_form(m, draft)

    @dp.message(CheckoutState.full_name, TEXT_INPUT)
    async def input_full_name(m: Message, state: FSMContext):
        await apply_text(m, state, lambda d, v: d.set_full_name(v))

    @dp.message(CheckoutState.phone, TEXT_INPUT)
    async def input_phone(m: Message, state: FSMContext):
        await apply_text(m, state, lambda d, v: d.set_phone_number(v))

    @dp.message(CheckoutState.address, TEXT_INPUT)
    async def input_address(m: Message, state: FSMContext):
        await apply_text(m, state, lambda d, v: d.set_exact_address(v))

    @dp.message(CheckoutState.remarks, TEXT_INPUT)
    async def input_remarks(m: Message, state: FSMContext):
        await apply_text(m, state, lambda d, v: d.set_remarks("" if v == "-" else v))

    @dp.callback_query(F.data.startswith("wilaya:page:"))
    async def wilaya_page(cb: CallbackQuery, state: FSMContext):
        try:
            page = int(cb.data.split(":")[2])
        except ValueError:
            await cb.answer()
            return
        if await load_draft(state) is None:
            await state.clear()
            await cb.answer("Commande expirée, recommencez depuis le produit.", show_alert=True)
            return

        tariffs = await product_service.get_tariffs()
        kb = wilaya_select_kb(tariffs, page=page)
        try:
            await cb.message.edit_reply_markup(reply_markup=kb)
        except TelegramBadRequest as e:
            logger.debug("Cannot edit wilaya picker: %s", e)
            await cb.message.answer("Choisissez votre wilaya:", reply_markup=kb)
        await cb.answer()

    @dp.callback_query(F.data.startswith("wilaya:"))
    async def wilaya_selected(cb: CallbackQuery, state: FSMContext):
        # wilaya:{code}
        code = cb.data.split(":", 1)[1]
        draft = await draft_or_abort(cb, state)
        if draft is None:
            return
        draft.select_wilaya(code)
        await save_draft(state, draft, cb.from_user.id)
        await show_form(cb.message, draft, edit=True)
        await cb.answer()

    @dp.callback_query(F.data.in_({"delivery:home", "delivery:office"}))
    async def delivery_selected(cb: CallbackQuery, state: FSMContext):
        draft = await draft_or_abort(cb, state)
        if draft is None:
            return
        if not draft.wilaya_code:
            await cb.answer("Choisissez d'abord votre wilaya", show_alert=True)
            return
        draft.select_delivery_type(cb.data.split(":")[1])
        await save_draft(state, draft, cb.from_user.id)
        await show_form(cb.message, draft, edit=True)
        await cb.answer()

    @dp.callback_query(F.data == "order:confirm")
    async def order_confirm(cb: CallbackQuery, state: FSMContext):
        key = session_key(cb.message.chat.id, cb.from_user.id)
        if checkout_service.is_submitting(key):
            await cb.answer("Commande en cours d'envoi…")
            return

        draft = await draft_or_abort(cb, state)
        if draft is None:
            return

        outcome = await checkout_service.submit(key, draft, user_id=cb.from_user.id)

        if outcome.ok and outcome.order is not None:
            logger.info("Order %s placed by user %s", outcome.order.order_number, cb.from_user.id)
            await state.clear()
            await cb.answer()
            try:
                await cb.message.edit_text("⏳ Traitement de votre commande…")
            except TelegramBadRequest as e:
                logger.debug("Cannot edit confirmed form: %s", e)
            await checkout_service.confirmation_hold()
            await cb.message.answer(
                format_confirmation(outcome.order), parse_mode="HTML", reply_markup=order_done_kb()
            )
            return

        if outcome.reason == REASON_INVALID:
            missing = ", ".join(FIELD_LABELS[e] for e in draft.errors)
            await cb.answer(f"À compléter: {missing}", show_alert=True)
        elif outcome.reason == REASON_IN_FLIGHT:
            await cb.answer("Commande en cours d'envoi…")
        elif outcome.reason == REASON_FAILED:
            await cb.answer("❌ Échec de l'envoi, veuillez réessayer.", show_alert=True)
        else:
            await state.clear()
            await cb.answer("Commande déjà envoyée.", show_alert=True)

    @dp.callback_query(F.data == "order:cancel")
    async def order_cancel(cb: CallbackQuery, state: FSMContext):
        await state.clear()
        await safe_edit_text(cb.message, "Commande annulée.", reply_markup=back_to_menu_kb())
        await cb.answer()
