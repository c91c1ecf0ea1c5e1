"""Owner catalog commands: categories and products."""

from __future__ import annotations

import logging

from aiogram import Router
from aiogram.filters import Command, CommandObject
from aiogram.types import Message

from .. import storage
from ..models import Product
from ..services import ProductService
from ..utils import da, escape_html

logger = logging.getLogger(__name__)

CATEGORY_USAGE = "Usage: /category <nom français> | <nom arabe>"
PRODUCT_USAGE = (
    "Usage: /product <id catégorie> | <référence> | <nom> | <prix> [| <prix promo>] [| <description>]"
)
PRODUCT_EDIT_USAGE = (
    "Usage: /product_edit <id> <name|price|promo|description|category|image> <valeur>\n"
    "« - » efface promo, description ou images"
)
PRODUCT_DELETE_USAGE = "Usage: /product_delete <id>"

PRODUCT_FIELDS = ("name", "price", "promo", "description", "category", "image")


def _split_pipe(args: str | None) -> list[str]:
    return [part.strip() for part in (args or "").split("|")]


def _parse_amount(value: str) -> int:
    amount = int(value.replace(" ", ""))
    if amount < 0:
        raise ValueError(f"negative amount: {value!r}")
    return amount


def parse_category_args(args: str | None) -> tuple[str, str]:
    parts = _split_pipe(args)
    if len(parts) != 2 or not all(parts):
        raise ValueError(f"bad category arguments: {args!r}")
    return parts[0], parts[1]


def parse_product_args(args: str | None) -> dict:
    """
    /product arguments -> create_product keyword arguments.

    Raises ValueError on a missing field or a non-numeric price.
    """
    parts = _split_pipe(args)
    if len(parts) < 4 or not all(parts[:4]):
        raise ValueError(f"bad product arguments: {args!r}")

    promo = parts[4] if len(parts) > 4 else ""
    return {
        "category_id": int(parts[0]),
        "product_id": parts[1],
        "name": parts[2],
        "price": _parse_amount(parts[3]),
        "promo_price": _parse_amount(promo) if promo else None,
        "description": " | ".join(parts[5:]) if len(parts) > 5 else "",
    }


def apply_product_edit(product: Product, field: str, value: str) -> dict:
    """Keyword arguments for update_product with one field changed."""
    values = {
        "name": product.name,
        "price": product.price,
        "category_id": product.category_id,
        "promo_price": product.promo_price,
        "description": product.description,
        "images": list(product.images),
    }

    value = value.strip()
    clear = value == "-"
    if field == "name":
        if not value or clear:
            raise ValueError("empty name")
        values["name"] = value
    elif field == "price":
        values["price"] = _parse_amount(value)
    elif field == "promo":
        values["promo_price"] = None if clear or not value else _parse_amount(value)
    elif field == "description":
        values["description"] = "" if clear else value
    elif field == "category":
        values["category_id"] = int(value)
    elif field == "image":
        if clear:
            values["images"] = []
        elif value:
            values["images"].append(value)
        else:
            raise ValueError("empty image url")
    else:
        raise ValueError(f"unknown product field {field!r}")
    return values


def format_product_line(product: Product) -> str:
    price = da(product.price)
    if product.promo_price:
        price = f"{da(product.promo_price)} (au lieu de {price})"
    return (
        f"#{product.id} <b>{escape_html(product.name)}</b> "
        f"<code>{escape_html(product.product_id)}</code> • {price}"
    )


async def _unknown_category_text(category_id: int) -> str:
    categories = await storage.get_all_categories()
    listing = ", ".join(f"{c.id} {escape_html(c.name_fr)}" for c in categories) or "aucune"
    return f"Catégorie {category_id} introuvable. Catégories: {listing}"


async def list_categories(product_service: ProductService) -> str:
    categories = await product_service.get_categories(force_refresh=True)
    if not categories:
        return "Aucune catégorie.\n\n" + escape_html(CATEGORY_USAGE)
    lines = [
        f"{c.id}. <b>{escape_html(c.name_fr)}</b> • {escape_html(c.name_ar)} ({count})"
        for c, count in categories
    ]
    return "🗂 <b>Catégories</b>\n\n" + "\n".join(lines)


async def create_category(product_service: ProductService, args: str | None) -> str:
    try:
        name_fr, name_ar = parse_category_args(args)
    except ValueError:
        return escape_html(CATEGORY_USAGE)

    category = await storage.create_category(name_fr, name_ar)
    product_service.invalidate_cache()
    logger.info("Category created: id=%s name=%s", category.id, name_fr)
    return f"✅ Catégorie #{category.id} créée: <b>{escape_html(name_fr)}</b>"


async def create_product(product_service: ProductService, args: str | None) -> str:
    try:
        fields = parse_product_args(args)
    except ValueError:
        return escape_html(PRODUCT_USAGE)

    if await storage.get_category(fields["category_id"]) is None:
        return await _unknown_category_text(fields["category_id"])

    product = await storage.create_product(**fields)
    product_service.invalidate_cache()
    return "✅ Produit créé\n\n" + format_product_line(product)


async def edit_product(product_service: ProductService, args: str | None) -> str:
    parts = (args or "").split(maxsplit=2)
    if len(parts) < 3 or parts[1] not in PRODUCT_FIELDS:
        return escape_html(PRODUCT_EDIT_USAGE)

    try:
        product_ref = int(parts[0])
    except ValueError:
        return escape_html(PRODUCT_EDIT_USAGE)

    product = await storage.get_product(product_ref)
    if product is None:
        return f"Produit #{product_ref} introuvable."

    try:
        values = apply_product_edit(product, parts[1], parts[2])
    except ValueError:
        return escape_html(PRODUCT_EDIT_USAGE)

    if values["category_id"] != product.category_id and await storage.get_category(values["category_id"]) is None:
        return await _unknown_category_text(values["category_id"])

    updated = await storage.update_product(product_ref, **values)
    product_service.invalidate_cache()
    logger.info("Product %s updated: %s", product_ref, parts[1])
    return "✅ Produit mis à jour\n\n" + format_product_line(updated)


async def delete_product(product_service: ProductService, args: str | None) -> str:
    try:
        product_ref = int((args or "").strip())
    except ValueError:
        return escape_html(PRODUCT_DELETE_USAGE)

    product = await storage.get_product(product_ref)
    if product is None:
        return f"Produit #{product_ref} introuvable."

    await storage.delete_product(product_ref)
    product_service.invalidate_cache()
    logger.info("Product %s deleted", product_ref)
    return f"🗑 Produit #{product_ref} supprimé: {escape_html(product.name)}"


def register_catalog_commands(router: Router, product_service: ProductService) -> None:
    """Register catalog commands on the owner router."""

    @router.message(Command("categories"))
    async def cmd_categories(m: Message):
        await m.answer(await list_categories(product_service), parse_mode="HTML")

    @router.message(Command("category"))
    async def cmd_category(m: Message, command: CommandObject):
        await m.answer(await create_category(product_service, command.args), parse_mode="HTML")

    @router.message(Command("product"))
    async def cmd_product(m: Message, command: CommandObject):
        await m.answer(await create_product(product_service, command.args), parse_mode="HTML")

    @router.message(Command("product_edit"))
    async def cmd_product_edit(m: Message, command: CommandObject):
        await m.answer(await edit_product(product_service, command.args), parse_mode="HTML")

    @router.message(Command("product_delete"))
    async def cmd_product_delete(m: Message, command: CommandObject):
        await m.answer(await delete_product(product_service, command.args), parse_mode="HTML")
