"""Product service with caching layer over the catalog storage."""

from __future__ import annotations

import logging
import time

from .. import storage
from ..models import Category, Product, StoreSettings, Tariff

logger = logging.getLogger(__name__)

CACHE_TTL_SECONDS = 60


class ProductService:
    """Service for catalog reads with TTL caching of the slow-changing parts."""

    def __init__(self) -> None:
        self._categories_cache: list[tuple[Category, int]] = []
        self._categories_cache_time: float = 0
        self._tariffs_cache: list[Tariff] = []
        self._tariffs_cache_time: float = 0
        self._settings_cache: StoreSettings | None = None
        self._settings_cache_time: float = 0

    async def get_categories(self, force_refresh: bool = False) -> list[tuple[Category, int]]:
        """Categories with their product counts."""
        now = time.time()
        if force_refresh or (now - self._categories_cache_time > CACHE_TTL_SECONDS):
            logger.debug("Refreshing categories cache")
            self._categories_cache = await storage.get_category_product_counts()
            self._categories_cache_time = now
        return self._categories_cache

    async def get_tariffs(self, force_refresh: bool = False) -> list[Tariff]:
        """Deduplicated tariffs sorted by wilaya code."""
        now = time.time()
        if force_refresh or (now - self._tariffs_cache_time > CACHE_TTL_SECONDS):
            logger.debug("Refreshing tariffs cache")
            self._tariffs_cache = await storage.get_sorted_tariffs()
            self._tariffs_cache_time = now
        return self._tariffs_cache

    async def get_settings(self, force_refresh: bool = False) -> StoreSettings | None:
        now = time.time()
        if force_refresh or (now - self._settings_cache_time > CACHE_TTL_SECONDS):
            logger.debug("Refreshing settings cache")
            self._settings_cache = await storage.get_store_settings()
            self._settings_cache_time = now
        return self._settings_cache

    async def get_product(self, product_ref: int) -> Product | None:
        """Single product, always read fresh so prices are current at checkout."""
        return await storage.get_product(product_ref)

    async def get_category(self, category_id: int) -> Category | None:
        return await storage.get_category(category_id)

    async def get_category_page(self, category_id: int, page: int) -> tuple[list[Product], int, int]:
        """Returns (products, total_products, total_pages) for a 1-based page."""
        total, pages = await storage.get_product_count_by_category(category_id)
        page = max(1, min(page, pages or 1))
        products = await storage.get_products_by_category_paginated(category_id, page)
        return products, total, pages

    async def get_related(self, product: Product, limit: int = 4) -> list[Product]:
        """Other products of the same category, shown under a product page."""
        products = await storage.get_products_by_category(product.category_id, limit=limit + 1)
        return [p for p in products if p.id != product.id][:limit]

    async def get_product_count(self) -> int:
        return await storage.get_total_product_count()

    async def search(self, query: str) -> list[Product]:
        return await storage.search_products(query)

    def invalidate_cache(self) -> None:
        """Force cache invalidation."""
        self._categories_cache_time = 0
        self._tariffs_cache_time = 0
        self._settings_cache_time = 0
