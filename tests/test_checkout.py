"""Tests for the checkout draft."""

import pytest

from storefront.checkout import CheckoutDraft


def fill_customer(draft):
    draft.set_full_name("Amine Benali")
    draft.set_phone_number("0555123456")


class TestCheckoutDraft:
    def test_initial_state(self, product, tariffs):
        draft = CheckoutDraft(product, tariffs)
        assert draft.quantity == 1
        assert draft.delivery_type is None
        assert draft.delivery_price == 0
        assert draft.total_price == 800
        assert draft.can_order is False
        assert set(draft.errors) == {"full_name", "phone_number", "wilaya", "delivery_type"}

    def test_home_delivery_total(self, product, tariffs):
        draft = CheckoutDraft(product, tariffs)
        draft.increase_quantity()
        draft.increase_quantity()
        draft.select_wilaya("16")
        draft.select_delivery_type("home")

        assert draft.unit_price == 800
        assert draft.delivery_price == 400
        assert draft.total_price == 2800
        assert draft.address_required is True

    def test_switch_to_office(self, product, tariffs):
        draft = CheckoutDraft(product, tariffs)
        draft.set_quantity(3)
        draft.select_wilaya("16")
        draft.select_delivery_type("home")
        draft.set_exact_address("Cité 200 logements")
        draft.select_delivery_type("office")

        assert draft.total_price == 2700
        assert draft.address_required is False
        assert draft.delivery_address == "Bureau Centre"
        assert draft.exact_address == ""
        assert "exact_address" not in draft.errors

    def test_home_clears_office_address(self, product, tariffs):
        draft = CheckoutDraft(product, tariffs)
        draft.select_wilaya("16")
        draft.select_delivery_type("office")
        draft.select_delivery_type("home")
        assert draft.delivery_address == ""
        assert draft.delivery_price == 400

    @pytest.mark.parametrize("delivery_type", ["home", "office"])
    def test_changing_wilaya_resets_delivery(self, product, tariffs, delivery_type):
        draft = CheckoutDraft(product, tariffs)
        draft.select_wilaya("16")
        draft.select_delivery_type(delivery_type)
        draft.select_wilaya("31")

        assert draft.delivery_type is None
        assert draft.delivery_price == 0
        assert draft.delivery_address == ""
        assert draft.total_price == 800

    def test_quantity_never_below_one(self, product, tariffs):
        draft = CheckoutDraft(product, tariffs)
        draft.decrease_quantity()
        assert draft.quantity == 1
        draft.set_quantity(0)
        assert draft.quantity == 1
        draft.set_quantity(-4)
        assert draft.quantity == 1

    def test_missing_tariff_is_free_delivery(self, product, tariffs):
        draft = CheckoutDraft(product, tariffs)
        fill_customer(draft)
        draft.set_quantity(2)
        draft.select_wilaya("48")
        draft.select_delivery_type("office")

        assert draft.delivery_price == 0
        assert draft.total_price == 1600
        assert draft.can_order is True
        assert draft.to_order_create().selected_wilaya == "48"

    def test_unknown_delivery_type_rejected(self, product, tariffs):
        draft = CheckoutDraft(product, tariffs)
        draft.select_wilaya("16")
        with pytest.raises(ValueError):
            draft.select_delivery_type("pickup")

    def test_phone_keeps_digits_only(self, product, tariffs):
        draft = CheckoutDraft(product, tariffs)
        draft.set_phone_number("0555 12 34 5")
        assert draft.phone_number == "055512345"
        assert draft.phone_error is True
        draft.set_phone_number("0555 12 34 56")
        assert draft.phone_error is False

    def test_home_requires_exact_address(self, product, tariffs):
        draft = CheckoutDraft(product, tariffs)
        fill_customer(draft)
        draft.select_wilaya("16")
        draft.select_delivery_type("home")
        assert draft.can_order is False
        assert draft.errors == ["exact_address"]

        draft.set_exact_address("12 rue Didouche Mourad")
        assert draft.can_order is True

    def test_to_order_create(self, product, tariffs):
        draft = CheckoutDraft(product, tariffs)
        fill_customer(draft)
        draft.set_quantity(3)
        draft.select_wilaya("16")
        draft.select_delivery_type("office")
        draft.set_remarks("  Appeler après 18h ")

        payload = draft.to_order_create()
        assert payload.product_ref == 1
        assert payload.product_code == "PRD-001"
        assert payload.quantity == 3
        assert payload.phone_number == "0555123456"
        assert payload.selected_wilaya == "16 - Alger"
        assert payload.selected_delivery_type == "office"
        assert payload.delivery_address == "Bureau Centre"
        assert payload.delivery_price == 300
        assert payload.total_price == 2700
        assert payload.order_remarks == "Appeler après 18h"

    def test_to_order_create_without_delivery_type(self, product, tariffs):
        draft = CheckoutDraft(product, tariffs)
        with pytest.raises(ValueError):
            draft.to_order_create()


class TestDraftState:
    def test_round_trip_preserves_entered_fields(self, product, tariffs):
        draft = CheckoutDraft(product, tariffs)
        fill_customer(draft)
        draft.set_quantity(2)
        draft.select_wilaya("16")
        draft.select_delivery_type("home")
        draft.set_exact_address("Bab El Oued")

        restored = CheckoutDraft.from_state(product, tariffs, draft.to_state())
        assert restored.to_state() == draft.to_state()
        assert restored.total_price == 2000
        assert restored.can_order is True

    def test_restore_uses_current_tariffs(self, product, tariffs):
        draft = CheckoutDraft(product, tariffs)
        draft.select_wilaya("16")
        draft.select_delivery_type("home")
        state = draft.to_state()

        tariffs[0].price = "700"
        restored = CheckoutDraft.from_state(product, tariffs, state)
        assert restored.delivery_price == 700

    def test_restore_from_empty_state(self, product, tariffs):
        restored = CheckoutDraft.from_state(product, tariffs, {"product_ref": 1})
        assert restored.quantity == 1
        assert restored.wilaya_code == ""
        assert restored.delivery_type is None

    def test_consumed_flag_survives_restore(self, product, tariffs):
        draft = CheckoutDraft(product, tariffs)
        assert CheckoutDraft.from_state(product, tariffs, draft.to_state()).consumed is False

        draft.mark_consumed()
        restored = CheckoutDraft.from_state(product, tariffs, draft.to_state())
        assert restored.consumed is True
