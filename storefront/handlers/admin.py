"""Owner commands: order reports, delivery tariffs, store settings."""

from __future__ import annotations

import logging
from datetime import date, datetime
from zoneinfo import ZoneInfo

from aiogram import Dispatcher, Router
from aiogram.filters import Command, CommandObject
from aiogram.types import Message

from .. import storage
from ..config import Settings
from ..models import StoreSettings, Tariff
from ..pricing import find_tariff, parse_fee, wilaya_label
from ..reports import format_summary, summarize_orders
from ..security import OwnerOnlyMiddleware
from ..services import ProductService
from ..utils import da, escape_html
from .admin_catalog import register_catalog_commands

logger = logging.getLogger(__name__)

ORDERS_USAGE = (
    "Usage: /orders [today|yesterday|week|month]\n"
    "ou /orders AAAA-MM-JJ AAAA-MM-JJ"
)
TARIF_USAGE = "Usage: /tarif <code> <domicile> <bureau> [adresse du bureau]"
TARIF_ADD_USAGE = "Usage: /tarif_add <code> <nom de la wilaya>"
SETTING_USAGE = "Usage: /setting <store_name|phone_number|show_header|fb_pixel_id> <valeur>"

SETTING_KEYS = ("store_name", "phone_number", "show_header", "fb_pixel_id")
_TRUE_WORDS = {"1", "on", "oui", "yes", "true"}
_FALSE_WORDS = {"0", "off", "non", "no", "false"}


def parse_orders_args(args: str | None) -> tuple[str, date | None, date | None]:
    """
    /orders arguments -> (period, custom_start, custom_end).

    Raises ValueError on anything unrecognised.
    """
    parts = (args or "").split()
    if not parts:
        return "today", None, None
    if len(parts) == 1 and parts[0] in ("today", "yesterday", "week", "month"):
        return parts[0], None, None
    if len(parts) == 2:
        start = date.fromisoformat(parts[0])
        end = date.fromisoformat(parts[1])
        if end < start:
            raise ValueError("end before start")
        return "custom", start, end
    raise ValueError(f"bad arguments: {args!r}")


def format_tariff_line(tariff: Tariff) -> str:
    line = (
        f"<b>{escape_html(wilaya_label(tariff.wilaya_code, tariff.wilaya_name))}</b> • "
        f"🏠 {da(parse_fee(tariff.price))} • 🏢 {da(parse_fee(tariff.delivery_office_price))}"
    )
    if tariff.delivery_office_address:
        line += f"\n   {escape_html(tariff.delivery_office_address)}"
    return line


def format_store_settings(settings: StoreSettings | None) -> str:
    if settings is None:
        return "⚙️ Aucun paramètre enregistré.\n\n" + escape_html(SETTING_USAGE)
    return (
        "⚙️ <b>Paramètres de la boutique</b>\n\n"
        f"store_name: {escape_html(settings.store_name) or '—'}\n"
        f"phone_number: {escape_html(settings.phone_number) or '—'}\n"
        f"show_header: {'oui' if settings.show_header else 'non'}\n"
        f"fb_pixel_id: {escape_html(settings.fb_pixel_id or '') or '—'}"
    )


def apply_setting(current: StoreSettings | None, key: str, value: str) -> dict:
    """Keyword arguments for save_store_settings with one field changed."""
    values = {
        "store_name": current.store_name if current else "",
        "phone_number": current.phone_number if current else "",
        "show_header": current.show_header if current else True,
        "fb_pixel_id": current.fb_pixel_id if current else None,
        "settings_id": current.id if current else None,
    }

    value = value.strip()
    if key == "show_header":
        word = value.lower()
        if word in _TRUE_WORDS:
            values["show_header"] = True
        elif word in _FALSE_WORDS:
            values["show_header"] = False
        else:
            raise ValueError(f"show_header expects on/off, got {value!r}")
    elif key == "fb_pixel_id":
        values["fb_pixel_id"] = None if value in ("", "-") else value
    elif key in ("store_name", "phone_number"):
        values[key] = value
    else:
        raise ValueError(f"unknown setting {key!r}")
    return values


async def add_wilaya_tariff(product_service: ProductService, args: str | None) -> str:
    """Add a tariff row for a wilaya missing from the table, prices left empty."""
    parts = (args or "").split(maxsplit=1)
    if len(parts) < 2:
        return escape_html(TARIF_ADD_USAGE)

    code, name = parts[0], parts[1].strip()
    if find_tariff(await storage.get_all_tariffs(), code) is not None:
        return f"La wilaya {escape_html(code)} existe déjà, utilisez /tarif."

    tariff = await storage.add_tariff(code, name)
    product_service.invalidate_cache()
    logger.info("Tariff row added for wilaya %s", code)
    return "✅ Wilaya ajoutée\n\n" + format_tariff_line(tariff)


def register_admin_handlers(
    dp: Dispatcher,
    product_service: ProductService,
    cfg: Settings,
) -> None:
    """Register owner commands on a router restricted to cfg.owner_telegram_ids."""
    router = Router(name="admin")
    router.message.middleware(OwnerOnlyMiddleware(cfg.is_owner))
    tz = ZoneInfo(cfg.timezone)

    @router.message(Command("orders"))
    async def cmd_orders(m: Message, command: CommandObject):
        try:
            period, start, end = parse_orders_args(command.args)
        except ValueError:
            await m.answer(ORDERS_USAGE)
            return

        summary = await summarize_orders(period, datetime.now(tz), start, end)
        await m.answer(format_summary(summary, tz=tz), parse_mode="HTML")

    @router.message(Command("tarifs"))
    async def cmd_tarifs(m: Message):
        tariffs = await product_service.get_tariffs(force_refresh=True)
        if not tariffs:
            await m.answer("Aucun tarif enregistré.")
            return
        text = "🚚 <b>Tarifs de livraison</b>\n\n" + "\n".join(
            format_tariff_line(t) for t in tariffs
        )
        await m.answer(text, parse_mode="HTML")

    @router.message(Command("tarif"))
    async def cmd_tarif(m: Message, command: CommandObject):
        parts = (command.args or "").split(maxsplit=3)
        if len(parts) < 3:
            await m.answer(TARIF_USAGE)
            return

        code, home, office = parts[:3]
        address = parts[3] if len(parts) > 3 else None

        tariff = find_tariff(await storage.get_all_tariffs(), code)
        if tariff is None:
            await m.answer(f"Wilaya {escape_html(code)} introuvable.")
            return

        await storage.update_tariff(
            tariff.id,
            price=home,
            delivery_office_price=office,
            delivery_office_address=address if address is not None else tariff.delivery_office_address,
        )
        product_service.invalidate_cache()
        logger.info("Owner %s updated tariff for wilaya %s", m.from_user.id, code)

        updated = find_tariff(await product_service.get_tariffs(), code)
        await m.answer("✅ Tarif mis à jour\n\n" + format_tariff_line(updated or tariff), parse_mode="HTML")

    @router.message(Command("tarif_add"))
    async def cmd_tarif_add(m: Message, command: CommandObject):
        await m.answer(await add_wilaya_tariff(product_service, command.args), parse_mode="HTML")

    @router.message(Command("settings"))
    async def cmd_settings(m: Message):
        settings = await product_service.get_settings(force_refresh=True)
        await m.answer(format_store_settings(settings), parse_mode="HTML")

    @router.message(Command("setting"))
    async def cmd_setting(m: Message, command: CommandObject):
        parts = (command.args or "").split(maxsplit=1)
        if not parts or parts[0] not in SETTING_KEYS:
            await m.answer(SETTING_USAGE)
            return

        key = parts[0]
        value = parts[1] if len(parts) > 1 else ""
        current = await product_service.get_settings(force_refresh=True)
        try:
            values = apply_setting(current, key, value)
        except ValueError:
            await m.answer(SETTING_USAGE)
            return

        await storage.save_store_settings(**values)
        product_service.invalidate_cache()
        logger.info("Owner %s changed setting %s", m.from_user.id, key)

        settings = await product_service.get_settings(force_refresh=True)
        await m.answer(format_store_settings(settings), parse_mode="HTML")

    register_catalog_commands(router, product_service)
    dp.include_router(router)
