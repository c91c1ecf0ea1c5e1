"""Unit price, delivery fee and order total rules for the product checkout."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass

from .models import DeliveryType, Product, Tariff

logger = logging.getLogger(__name__)

# Local Algerian mobile format: 0 followed by 9 digits
PHONE_RE = re.compile(r"^0\d{9}$")

_LEADING_INT_RE = re.compile(r"^\s*(\d+)")


@dataclass(frozen=True)
class DeliveryQuote:
    """Resolved delivery fee for a wilaya and delivery type."""

    fee: int
    office_address: str
    address_required: bool


def unit_price(product: Product) -> int:
    """Promo price when set and non-zero, otherwise the regular price."""
    if product.promo_price:
        return product.promo_price
    return product.price


def discount_percent(product: Product) -> int | None:
    """Rounded discount shown next to a promo price, None without promo."""
    if not product.promo_price or product.price <= 0:
        return None
    return round((product.price - product.promo_price) / product.price * 100)


def parse_fee(value: str | int | None) -> int:
    """
    Parse a tariff price field.

    Behaves like a lenient integer parse: leading digits are read, anything
    else (missing, empty, non-numeric, negative) yields 0.
    """
    if value is None:
        return 0
    if isinstance(value, int):
        return max(value, 0)
    m = _LEADING_INT_RE.match(str(value))
    return int(m.group(1)) if m else 0


def find_tariff(tariffs: Iterable[Tariff], wilaya_code: str) -> Tariff | None:
    for tariff in tariffs:
        if tariff.wilaya_code == wilaya_code:
            return tariff
    return None


def resolve_delivery(
    tariffs: Iterable[Tariff],
    wilaya_code: str,
    delivery_type: DeliveryType,
) -> DeliveryQuote:
    """
    Resolve the flat delivery fee for a wilaya.

    Home delivery uses the tariff's ``price`` and requires an exact address.
    Office delivery uses ``delivery_office_price`` and the tariff's pickup
    address. A wilaya without tariff resolves to a zero fee.
    """
    address_required = delivery_type == "home"
    tariff = find_tariff(tariffs, wilaya_code)
    if tariff is None:
        logger.warning("No tariff for wilaya %r, delivery fee defaults to 0", wilaya_code)
        return DeliveryQuote(fee=0, office_address="", address_required=address_required)

    if delivery_type == "home":
        return DeliveryQuote(fee=parse_fee(tariff.price), office_address="", address_required=True)

    return DeliveryQuote(
        fee=parse_fee(tariff.delivery_office_price),
        office_address=tariff.delivery_office_address or "",
        address_required=False,
    )


def order_total(unit: int, quantity: int, delivery_fee: int) -> int:
    return unit * quantity + delivery_fee


def normalize_phone(raw: str) -> str:
    """Keep digits only; partial input is allowed."""
    return re.sub(r"\D", "", raw or "")


def is_valid_phone(phone: str) -> bool:
    return bool(PHONE_RE.match((phone or "").strip()))


def form_errors(
    full_name: str,
    phone_number: str,
    wilaya_code: str,
    delivery_type: str,
    exact_address: str,
) -> list[str]:
    """
    List the order form fields that still block submission.

    Returns field keys: ``full_name``, ``phone_number``, ``wilaya``,
    ``delivery_type``, ``exact_address``. Empty list means the order can be sent.
    """
    errors = []
    if not (full_name or "").strip():
        errors.append("full_name")
    if not is_valid_phone(phone_number):
        errors.append("phone_number")
    if not wilaya_code:
        errors.append("wilaya")
    if delivery_type not in ("home", "office"):
        errors.append("delivery_type")
    if delivery_type == "home" and not (exact_address or "").strip():
        errors.append("exact_address")
    return errors


def is_form_valid(
    full_name: str,
    phone_number: str,
    wilaya_code: str,
    delivery_type: str,
    exact_address: str,
) -> bool:
    return not form_errors(full_name, phone_number, wilaya_code, delivery_type, exact_address)


def wilaya_label(code: str, name: str | None) -> str:
    """Label stored on the order, e.g. ``16 - Alger``."""
    if not name:
        return code
    return f"{code} - {name}"


def _code_sort_key(tariff: Tariff) -> tuple[int, int, str]:
    code = tariff.wilaya_code or ""
    if code.strip().isdigit():
        return (0, int(code), code)
    return (1, 0, code)


def dedupe_and_sort_tariffs(tariffs: Iterable[Tariff]) -> list[Tariff]:
    """
    Keep the first tariff seen for each wilaya code and sort by numeric code.

    Records missing a code or a name are skipped. Later duplicates of a code
    are dropped without merging.
    """
    unique: dict[str, Tariff] = {}
    for tariff in tariffs:
        if not tariff.wilaya_code or not tariff.wilaya_name:
            continue
        if tariff.wilaya_code in unique:
            logger.debug("Dropping duplicate tariff id=%s for wilaya %s", tariff.id, tariff.wilaya_code)
            continue
        unique[tariff.wilaya_code] = tariff
    return sorted(unique.values(), key=_code_sort_key)
