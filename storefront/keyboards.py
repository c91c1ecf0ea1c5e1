from __future__ import annotations

from aiogram.types import (
    InlineKeyboardButton,
    InlineKeyboardMarkup,
    KeyboardButton,
    ReplyKeyboardMarkup,
)

from .checkout import CheckoutDraft
from .models import Category, Product, Tariff
from .pricing import parse_fee, unit_price
from .utils import da

MENU_CATALOG = "🗂 Catalogue"
MENU_SEARCH = "🔍 Recherche"
MENU_CONTACT = "📞 Contact"


def persistent_menu() -> ReplyKeyboardMarkup:
    """Menu permanent en bas de l'écran."""
    return ReplyKeyboardMarkup(
        keyboard=[
            [KeyboardButton(text=MENU_CATALOG), KeyboardButton(text=MENU_SEARCH)],
            [KeyboardButton(text=MENU_CONTACT)],
        ],
        resize_keyboard=True,
        is_persistent=True,
    )


def main_menu_kb() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        inline_keyboard=[
            [
                InlineKeyboardButton(text="🗂 Catalogue", callback_data="categories"),
                InlineKeyboardButton(text="🔍 Recherche", callback_data="search:start"),
            ],
            [InlineKeyboardButton(text="📞 Contact", callback_data="info:contact")],
        ]
    )


def back_to_menu_kb() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        inline_keyboard=[[InlineKeyboardButton(text="🏠 Menu", callback_data="menu")]]
    )


def categories_kb(categories: list[tuple[Category, int]]) -> InlineKeyboardMarkup:
    """One button per category with its product count, 2 per row."""
    rows = []
    for i in range(0, len(categories), 2):
        row = []
        for category, count in categories[i : i + 2]:
            row.append(
                InlineKeyboardButton(
                    text=f"🔖 {category.name_fr} ({count})",
                    callback_data=f"cat:{category.id}:1",
                )
            )
        rows.append(row)
    rows.append([InlineKeyboardButton(text="🏠 Menu", callback_data="menu")])
    return InlineKeyboardMarkup(inline_keyboard=rows)


def product_button_text(product: Product) -> str:
    text = f"{product.name} • {da(unit_price(product))}"
    return text if len(text) <= 40 else text[:37] + "..."


def category_page_kb(
    category_id: int,
    products: list[Product],
    page: int,
    total_pages: int,
) -> InlineKeyboardMarkup:
    """Products of one category page plus pagination (pages start at 1)."""
    rows = [
        [InlineKeyboardButton(text=f"📦 {product_button_text(p)}", callback_data=f"product:{p.id}")]
        for p in products
    ]

    if total_pages > 1:
        nav_row = []
        if page > 1:
            nav_row.append(
                InlineKeyboardButton(text="⬅️", callback_data=f"cat:{category_id}:{page - 1}")
            )
        nav_row.append(InlineKeyboardButton(text=f"{page}/{total_pages}", callback_data="noop"))
        if page < total_pages:
            nav_row.append(
                InlineKeyboardButton(text="➡️", callback_data=f"cat:{category_id}:{page + 1}")
            )
        rows.append(nav_row)

    rows.append(
        [
            InlineKeyboardButton(text="📋 Catégories", callback_data="categories"),
            InlineKeyboardButton(text="🏠 Menu", callback_data="menu"),
        ]
    )
    return InlineKeyboardMarkup(inline_keyboard=rows)


def search_results_kb(products: list[Product]) -> InlineKeyboardMarkup:
    rows = [
        [InlineKeyboardButton(text=f"📦 {product_button_text(p)}", callback_data=f"product:{p.id}")]
        for p in products[:10]
    ]
    rows.append(
        [
            InlineKeyboardButton(text="🔍 Nouvelle recherche", callback_data="search:start"),
            InlineKeyboardButton(text="🏠 Menu", callback_data="menu"),
        ]
    )
    return InlineKeyboardMarkup(inline_keyboard=rows)


def product_kb(product: Product, related: list[Product] | None = None) -> InlineKeyboardMarkup:
    """Order button, same-category suggestions, navigation."""
    rows = [[InlineKeyboardButton(text="🛒 Commander", callback_data=f"order:start:{product.id}")]]
    for p in related or []:
        rows.append(
            [InlineKeyboardButton(text=f"👀 {product_button_text(p)}", callback_data=f"product:{p.id}")]
        )
    rows.append(
        [
            InlineKeyboardButton(text="⬅️ Retour", callback_data=f"cat:{product.category_id}:1"),
            InlineKeyboardButton(text="🏠 Menu", callback_data="menu"),
        ]
    )
    return InlineKeyboardMarkup(inline_keyboard=rows)


# ---------------------------------------------------------------------------
# Checkout keyboards
# ---------------------------------------------------------------------------
WILAYAS_PER_PAGE = 16


def _mark(done: bool) -> str:
    return "✅" if done else "✏️"


def checkout_kb(draft: CheckoutDraft) -> InlineKeyboardMarkup:
    """Order form: quantity, customer fields, wilaya, delivery type, confirm."""
    errors = set(draft.errors)
    rows = [
        [
            InlineKeyboardButton(text="➖", callback_data="qty:dec"),
            InlineKeyboardButton(text=f"{draft.quantity}", callback_data="noop"),
            InlineKeyboardButton(text="➕", callback_data="qty:inc"),
        ],
        [
            InlineKeyboardButton(
                text=f"{_mark('full_name' not in errors)} Nom complet", callback_data="field:name"
            ),
            InlineKeyboardButton(
                text=f"{_mark('phone_number' not in errors)} Téléphone", callback_data="field:phone"
            ),
        ],
        [
            InlineKeyboardButton(
                text=f"{_mark('wilaya' not in errors)} Wilaya", callback_data="wilaya:page:0"
            )
        ],
    ]

    if draft.wilaya_code:
        tariff = next((t for t in draft.tariffs if t.wilaya_code == draft.wilaya_code), None)
        home_fee = parse_fee(tariff.price) if tariff else 0
        office_fee = parse_fee(tariff.delivery_office_price) if tariff else 0
        home_text = f"🏠 Domicile • {da(home_fee)}"
        office_text = f"🏢 Bureau • {da(office_fee)}"
        if draft.delivery_type == "home":
            home_text = "🔘 " + home_text
        elif draft.delivery_type == "office":
            office_text = "🔘 " + office_text
        rows.append(
            [
                InlineKeyboardButton(text=home_text, callback_data="delivery:home"),
                InlineKeyboardButton(text=office_text, callback_data="delivery:office"),
            ]
        )

    if draft.address_required:
        rows.append(
            [
                InlineKeyboardButton(
                    text=f"{_mark('exact_address' not in errors)} Adresse exacte",
                    callback_data="field:address",
                )
            ]
        )

    rows.append([InlineKeyboardButton(text="📝 Remarques", callback_data="field:remarks")])

    if draft.can_order:
        rows.append(
            [
                InlineKeyboardButton(
                    text=f"✅ Confirmer la commande • {da(draft.total_price)}",
                    callback_data="order:confirm",
                )
            ]
        )
    rows.append([InlineKeyboardButton(text="❌ Annuler", callback_data="order:cancel")])
    return InlineKeyboardMarkup(inline_keyboard=rows)


def wilaya_select_kb(tariffs: list[Tariff], page: int = 0) -> InlineKeyboardMarkup:
    """
    Wilaya picker with pagination, 2 per row, in the given (code) order.
    tariffs: already deduplicated and sorted by wilaya code
    """
    total = len(tariffs)
    start = page * WILAYAS_PER_PAGE
    page_items = tariffs[start : start + WILAYAS_PER_PAGE]

    rows = []
    for i in range(0, len(page_items), 2):
        rows.append(
            [
                InlineKeyboardButton(
                    text=f"{t.wilaya_code} - {t.wilaya_name}",
                    callback_data=f"wilaya:{t.wilaya_code}",
                )
                for t in page_items[i : i + 2]
            ]
        )

    total_pages = (total + WILAYAS_PER_PAGE - 1) // WILAYAS_PER_PAGE
    if total_pages > 1:
        nav_row = []
        if page > 0:
            nav_row.append(InlineKeyboardButton(text="⬅️", callback_data=f"wilaya:page:{page - 1}"))
        nav_row.append(InlineKeyboardButton(text=f"{page + 1}/{total_pages}", callback_data="noop"))
        if page < total_pages - 1:
            nav_row.append(InlineKeyboardButton(text="➡️", callback_data=f"wilaya:page:{page + 1}"))
        rows.append(nav_row)

    rows.append([InlineKeyboardButton(text="↩️ Retour au formulaire", callback_data="order:form")])
    return InlineKeyboardMarkup(inline_keyboard=rows)


def order_done_kb() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        inline_keyboard=[
            [
                InlineKeyboardButton(text="🗂 Continuer mes achats", callback_data="categories"),
                InlineKeyboardButton(text="🏠 Menu", callback_data="menu"),
            ]
        ]
    )
