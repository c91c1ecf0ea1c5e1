"""Tests for keyboard builders."""

from storefront.checkout import CheckoutDraft
from storefront.keyboards import (
    WILAYAS_PER_PAGE,
    categories_kb,
    category_page_kb,
    checkout_kb,
    product_button_text,
    product_kb,
    wilaya_select_kb,
)
from storefront.models import Category, Product, Tariff


def callbacks(kb):
    return [btn.callback_data for row in kb.inline_keyboard for btn in row]


def make_tariffs(n):
    return [Tariff(id=i, wilaya_code=str(i), wilaya_name=f"W{i}", price="400") for i in range(1, n + 1)]


class TestCatalogKeyboards:
    def test_categories_two_per_row(self):
        cats = [(Category(id=i, name_fr=f"C{i}", name_ar=""), i) for i in range(1, 4)]
        kb = categories_kb(cats)
        assert len(kb.inline_keyboard[0]) == 2
        assert "cat:3:1" in callbacks(kb)
        assert kb.inline_keyboard[-1][0].callback_data == "menu"

    def test_category_page_navigation(self):
        products = [Product(id=i, product_id=f"P{i}", name=f"Robe {i}", price=100, category_id=5) for i in range(3)]
        kb = category_page_kb(5, products, page=2, total_pages=3)
        data = callbacks(kb)
        assert "cat:5:1" in data
        assert "cat:5:3" in data
        assert "product:0" in data

    def test_single_page_has_no_navigation(self):
        kb = category_page_kb(5, [], page=1, total_pages=1)
        assert callbacks(kb) == ["categories", "menu"]

    def test_button_text_truncated(self):
        product = Product(id=1, product_id="P", name="x" * 60, price=100, category_id=1)
        assert len(product_button_text(product)) <= 40

    def test_product_kb(self, product):
        data = callbacks(product_kb(product))
        assert data[0] == "order:start:1"
        assert "cat:1:1" in data

    def test_product_kb_related(self, product):
        related = [
            Product(id=2, product_id="PRD-002", name="Robe chaouie", price=1500, category_id=1),
            Product(id=3, product_id="PRD-003", name="Karakou", price=9000, category_id=1),
        ]
        data = callbacks(product_kb(product, related))
        assert data == ["order:start:1", "product:2", "product:3", "cat:1:1", "menu"]


class TestCheckoutKeyboard:
    def test_fresh_form_hides_delivery_and_confirm(self, product, tariffs):
        data = callbacks(checkout_kb(CheckoutDraft(product, tariffs)))
        assert "delivery:home" not in data
        assert "order:confirm" not in data
        assert "field:address" not in data
        assert "order:cancel" in data

    def test_delivery_options_after_wilaya(self, product, tariffs):
        draft = CheckoutDraft(product, tariffs)
        draft.select_wilaya("16")
        kb = checkout_kb(draft)
        texts = [btn.text for row in kb.inline_keyboard for btn in row]
        assert any("400 DA" in t for t in texts)
        assert any("300 DA" in t for t in texts)

    def test_address_field_for_home(self, product, tariffs):
        draft = CheckoutDraft(product, tariffs)
        draft.select_wilaya("16")
        draft.select_delivery_type("home")
        assert "field:address" in callbacks(checkout_kb(draft))

    def test_confirm_only_when_valid(self, product, tariffs):
        draft = CheckoutDraft(product, tariffs)
        draft.set_full_name("Amine")
        draft.set_phone_number("0555123456")
        draft.select_wilaya("16")
        draft.select_delivery_type("office")
        kb = checkout_kb(draft)
        assert "order:confirm" in callbacks(kb)
        confirm = next(b for row in kb.inline_keyboard for b in row if b.callback_data == "order:confirm")
        assert "1 100 DA" in confirm.text


class TestWilayaKeyboard:
    def test_first_page(self):
        kb = wilaya_select_kb(make_tariffs(58), page=0)
        data = callbacks(kb)
        assert data[0] == "wilaya:1"
        assert f"wilaya:{WILAYAS_PER_PAGE}" in data
        assert f"wilaya:{WILAYAS_PER_PAGE + 1}" not in data
        assert "wilaya:page:1" in data
        assert data[-1] == "order:form"

    def test_last_page(self):
        kb = wilaya_select_kb(make_tariffs(58), page=3)
        data = callbacks(kb)
        assert "wilaya:58" in data
        assert "wilaya:page:2" in data
        assert "wilaya:page:4" not in data

    def test_label(self):
        kb = wilaya_select_kb(make_tariffs(2))
        assert kb.inline_keyboard[0][0].text == "1 - W1"
