"""Common utilities for handlers."""

from __future__ import annotations

import logging

from aiogram.exceptions import TelegramBadRequest
from aiogram.types import Message

from ..checkout import CheckoutDraft
from ..models import Order, Product
from ..pricing import discount_percent
from ..utils import da, escape_html

logger = logging.getLogger(__name__)

FIELD_LABELS = {
    "full_name": "nom complet",
    "phone_number": "téléphone (10 chiffres, commence par 0)",
    "wilaya": "wilaya",
    "delivery_type": "type de livraison",
    "exact_address": "adresse exacte",
}


def format_price(product: Product) -> str:
    pct = discount_percent(product)
    if pct is None:
        return f"💰 <b>{da(product.price)}</b>"
    return f"💰 <b>{da(product.promo_price)}</b> <s>{da(product.price)}</s> (-{pct}%)"


def format_product_card(product: Product) -> str:
    """Format product card for the product page using HTML."""
    caption = (
        f"🏷 <b>{escape_html(product.name)}</b>\n\n"
        f"{format_price(product)}\n"
        f"📦 <b>Référence:</b> <code>{escape_html(product.product_id)}</code>"
    )
    if product.description:
        desc = product.description
        if len(desc) > 600:
            desc = desc[:597] + "..."
        caption += f"\n\n📝 <i>{escape_html(desc)}</i>"
    return caption


def format_checkout(draft: CheckoutDraft) -> str:
    """Order form summary with the live total."""
    p = draft.product
    lines = [
        f"🛒 <b>{escape_html(p.name)}</b>",
        f"{da(draft.unit_price)} × {draft.quantity} = <b>{da(draft.unit_price * draft.quantity)}</b>",
        "",
        f"👤 {escape_html(draft.full_name) or '—'}",
        f"📞 {escape_html(draft.phone_number) or '—'}",
    ]
    if draft.phone_error:
        lines.append("⚠️ Numéro invalide (ex: 0555123456)")

    if draft.wilaya_code:
        name = draft.wilaya_name or ""
        lines.append(f"📍 {escape_html(draft.wilaya_code)} - {escape_html(name)}")
    else:
        lines.append("📍 —")

    if draft.delivery_type == "home":
        lines.append(f"🏠 Livraison à domicile • {da(draft.delivery_price)}")
        lines.append(f"   {escape_html(draft.exact_address) or 'Adresse exacte à renseigner'}")
    elif draft.delivery_type == "office":
        lines.append(f"🏢 Livraison au bureau • {da(draft.delivery_price)}")
        if draft.delivery_address:
            lines.append(f"   {escape_html(draft.delivery_address)}")

    if draft.remarks:
        lines.append(f"📝 <i>{escape_html(draft.remarks)}</i>")

    lines.append("━━━━━━━━━━━━━━━━━━━━━━")
    lines.append(f"💰 <b>Total: {da(draft.total_price)}</b>")

    missing = [FIELD_LABELS[e] for e in draft.errors]
    if missing:
        lines.append("")
        lines.append("À compléter: " + ", ".join(missing))
    return "\n".join(lines)


def format_confirmation(order: Order) -> str:
    delivery = "à domicile" if order.selected_delivery_type == "home" else "au bureau"
    lines = [
        "✅ <b>Commande confirmée !</b>",
        "",
        f"N° <code>{escape_html(order.order_number)}</code>",
        f"{escape_html(order.product_name)} × {order.quantity}",
        f"Nom: {escape_html(order.full_name)}",
        f"Téléphone: {escape_html(order.phone_number)}",
        f"Wilaya: {escape_html(order.selected_wilaya)}",
        f"Livraison {delivery} • {da(order.delivery_price)}",
    ]
    if order.selected_delivery_type == "office" and order.delivery_address:
        lines.append(f"Bureau: {escape_html(order.delivery_address)}")
    if order.exact_address:
        lines.append(f"Adresse: {escape_html(order.exact_address)}")
    lines.append(f"💰 <b>Total: {da(order.total_price)}</b>")
    lines.append("")
    lines.append("Nous vous appellerons pour confirmer la livraison.")
    return "\n".join(lines)


async def safe_edit_text(message: Message, text: str, **kwargs) -> None:
    """Edit the message in place, or send a new one when Telegram refuses the edit."""
    try:
        await message.edit_text(text, **kwargs)
    except TelegramBadRequest as e:
        logger.debug("Cannot edit message %s: %s", message.message_id, e)
        await message.answer(text, **kwargs)
