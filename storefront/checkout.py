"""Per-session order draft for the product checkout."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from .models import DELIVERY_TYPES, DeliveryType, OrderCreate, Product, Tariff
from .pricing import (
    find_tariff,
    form_errors,
    is_valid_phone,
    normalize_phone,
    order_total,
    resolve_delivery,
    unit_price,
    wilaya_label,
)


class CheckoutDraft:
    """
    Mutable checkout state for one product.

    Every setter recomputes the derived fields (delivery price, total,
    submit permission) before returning, so readers always see a
    consistent draft.
    """

    def __init__(self, product: Product, tariffs: Sequence[Tariff]):
        self.product = product
        self.tariffs = list(tariffs)

        self.quantity = 1
        self.wilaya_code = ""
        self.delivery_type: DeliveryType | None = None
        self.delivery_price = 0
        self.delivery_address = ""
        self.exact_address = ""
        self.address_required = False
        self.full_name = ""
        self.phone_number = ""
        self.remarks = ""

        self.total_price = 0
        self.can_order = False
        self.consumed = False
        self._recompute()

    # -------------------------------------------------------------------------
    # Derived state
    # -------------------------------------------------------------------------
    @property
    def unit_price(self) -> int:
        return unit_price(self.product)

    @property
    def errors(self) -> list[str]:
        return form_errors(
            self.full_name,
            self.phone_number,
            self.wilaya_code,
            self.delivery_type or "",
            self.exact_address,
        )

    @property
    def phone_error(self) -> bool:
        """True when something was typed but it is not a valid number yet."""
        return bool(self.phone_number) and not is_valid_phone(self.phone_number)

    @property
    def wilaya_name(self) -> str | None:
        tariff = find_tariff(self.tariffs, self.wilaya_code)
        return tariff.wilaya_name if tariff else None

    def _recompute(self) -> None:
        self.total_price = order_total(self.unit_price, self.quantity, self.delivery_price)
        self.can_order = not self.errors

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------
    def increase_quantity(self) -> None:
        self.quantity += 1
        self._recompute()

    def decrease_quantity(self) -> None:
        if self.quantity > 1:
            self.quantity -= 1
        self._recompute()

    def set_quantity(self, quantity: int) -> None:
        self.quantity = max(1, int(quantity))
        self._recompute()

    def select_wilaya(self, wilaya_code: str) -> None:
        """Pick a region; delivery type and fee must be chosen again."""
        self.wilaya_code = wilaya_code
        self.delivery_type = None
        self.delivery_price = 0
        self.delivery_address = ""
        self.address_required = False
        self._recompute()

    def select_delivery_type(self, delivery_type: DeliveryType) -> None:
        if delivery_type not in DELIVERY_TYPES:
            raise ValueError(f"Unknown delivery type: {delivery_type!r}")
        quote = resolve_delivery(self.tariffs, self.wilaya_code, delivery_type)
        self.delivery_type = delivery_type
        self.delivery_price = quote.fee
        self.delivery_address = quote.office_address
        self.address_required = quote.address_required
        self.exact_address = ""
        self._recompute()

    def set_full_name(self, full_name: str) -> None:
        self.full_name = full_name or ""
        self._recompute()

    def set_phone_number(self, raw: str) -> None:
        self.phone_number = normalize_phone(raw)
        self._recompute()

    def set_exact_address(self, address: str) -> None:
        self.exact_address = address or ""
        self._recompute()

    def set_remarks(self, remarks: str) -> None:
        self.remarks = remarks or ""
        self._recompute()

    def mark_consumed(self) -> None:
        self.consumed = True

    # -------------------------------------------------------------------------
    # Submission payload and FSM persistence
    # -------------------------------------------------------------------------
    def to_order_create(self) -> OrderCreate:
        if self.delivery_type is None:
            raise ValueError("Delivery type is not selected")
        return OrderCreate(
            product_ref=self.product.id,
            product_code=self.product.product_id,
            product_name=self.product.name,
            quantity=self.quantity,
            full_name=self.full_name.strip(),
            phone_number=self.phone_number,
            selected_wilaya=wilaya_label(self.wilaya_code, self.wilaya_name),
            selected_delivery_type=self.delivery_type,
            delivery_address=self.delivery_address,
            exact_address=self.exact_address.strip(),
            order_remarks=self.remarks.strip(),
            delivery_price=self.delivery_price,
            total_price=self.total_price,
        )

    def to_state(self) -> dict[str, Any]:
        """User-entered fields only; derived values are rebuilt on load."""
        return {
            "product_ref": self.product.id,
            "quantity": self.quantity,
            "wilaya_code": self.wilaya_code,
            "delivery_type": self.delivery_type,
            "exact_address": self.exact_address,
            "full_name": self.full_name,
            "phone_number": self.phone_number,
            "remarks": self.remarks,
            "consumed": self.consumed,
        }

    @classmethod
    def from_state(
        cls,
        product: Product,
        tariffs: Sequence[Tariff],
        state: dict[str, Any],
    ) -> CheckoutDraft:
        draft = cls(product, tariffs)
        draft.set_quantity(state.get("quantity") or 1)
        if state.get("wilaya_code"):
            draft.select_wilaya(str(state["wilaya_code"]))
            if state.get("delivery_type") in DELIVERY_TYPES:
                draft.select_delivery_type(state["delivery_type"])
        draft.set_exact_address(state.get("exact_address", ""))
        draft.set_full_name(state.get("full_name", ""))
        draft.set_phone_number(state.get("phone_number", ""))
        draft.set_remarks(state.get("remarks", ""))
        draft.consumed = bool(state.get("consumed"))
        return draft
