"""Tests for service layer."""

import pytest
import pytest_asyncio

from storefront import storage
from storefront.services import ProductService


@pytest_asyncio.fixture
async def catalog():
    await storage.init_db()
    cat = await storage.create_category("Robes", "فساتين")
    for i in range(8):
        await storage.create_product(name=f"Robe {i}", price=1000 + i, product_id=f"R{i}", category_id=cat.id)
    return cat


class TestProductService:
    @pytest.mark.asyncio
    async def test_categories_cached(self, catalog):
        service = ProductService()
        first = await service.get_categories()
        assert [(c.name_fr, n) for c, n in first] == [("Robes", 8)]

        await storage.create_category("Sacs", "حقائب")
        assert len(await service.get_categories()) == 1
        assert len(await service.get_categories(force_refresh=True)) == 2

    @pytest.mark.asyncio
    async def test_invalidate_cache(self, catalog):
        service = ProductService()
        await service.get_tariffs()
        await storage.add_tariff("16", "Alger", "400")

        assert await service.get_tariffs() == []
        service.invalidate_cache()
        assert [t.wilaya_code for t in await service.get_tariffs()] == ["16"]

    @pytest.mark.asyncio
    async def test_product_always_fresh(self, catalog):
        service = ProductService()
        product = (await service.search("robe 0"))[0]
        await storage.update_product(product.id, name=product.name, price=5000, category_id=catalog.id)

        assert (await service.get_product(product.id)).price == 5000

    @pytest.mark.asyncio
    async def test_category_page_clamped(self, catalog):
        service = ProductService()
        products, total, pages = await service.get_category_page(catalog.id, 1)
        assert total == 8
        assert pages == 2
        assert len(products) == storage.PRODUCTS_PER_PAGE

        products, _, _ = await service.get_category_page(catalog.id, 99)
        assert [p.name for p in products] == ["Robe 6", "Robe 7"]

    @pytest.mark.asyncio
    async def test_empty_category_page(self, catalog):
        service = ProductService()
        empty = await storage.create_category("Vide", "فارغ")
        products, total, pages = await service.get_category_page(empty.id, 1)
        assert (products, total, pages) == ([], 0, 0)

    @pytest.mark.asyncio
    async def test_settings(self, catalog):
        service = ProductService()
        assert await service.get_settings() is None
        await storage.save_store_settings(store_name="Boutique", phone_number="0555000000")
        assert (await service.get_settings(force_refresh=True)).store_name == "Boutique"

    @pytest.mark.asyncio
    async def test_related_excludes_current_product(self, catalog):
        service = ProductService()
        products, _, _ = await service.get_category_page(catalog.id, 1)
        first = products[0]

        related = await service.get_related(first)
        assert len(related) == 4
        assert first.id not in [p.id for p in related]
        assert all(p.category_id == catalog.id for p in related)

        assert len(await service.get_related(first, limit=2)) == 2

    @pytest.mark.asyncio
    async def test_related_empty_for_single_product(self, catalog):
        service = ProductService()
        other = await storage.create_category("Sacs", "حقائب")
        bag = await storage.create_product(name="Sac", price=3000, product_id="S1", category_id=other.id)
        assert await service.get_related(bag) == []

    @pytest.mark.asyncio
    async def test_product_count(self, catalog):
        service = ProductService()
        assert await service.get_product_count() == 8
