"""Pytest configuration."""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import pytest

from storefront.models import Product, Tariff
from storefront.pixel import NoopPixelClient, set_pixel_client


@pytest.fixture(autouse=True)
def isolate_test_database(tmp_path, monkeypatch):
    """
    Isolate each test with its own database.

    storage.db.connect() reads DB_PATH at call time, so patching the module
    attribute is enough for every storage module.
    """
    test_db_path = str(tmp_path / "test_isolated.sqlite3")
    monkeypatch.setattr("storefront.storage.db.DB_PATH", test_db_path)
    yield test_db_path


@pytest.fixture(autouse=True)
def disable_pixel():
    """Never hit the Graph API from tests."""
    set_pixel_client(NoopPixelClient())
    yield
    set_pixel_client(None)


@pytest.fixture
def product():
    return Product(
        id=1,
        product_id="PRD-001",
        name="Robe kabyle",
        price=1000,
        category_id=1,
        promo_price=800,
    )


@pytest.fixture
def tariffs():
    return [
        Tariff(
            id=1,
            wilaya_code="16",
            wilaya_name="Alger",
            price="400",
            delivery_office_price="300",
            delivery_office_address="Bureau Centre",
        ),
        Tariff(
            id=2,
            wilaya_code="31",
            wilaya_name="Oran",
            price="600 DA",
            delivery_office_price=None,
            delivery_office_address=None,
        ),
    ]
