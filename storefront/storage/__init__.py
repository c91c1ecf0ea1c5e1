"""Storage package for SQLite-backed data.

This package provides modular storage for:
- db.py: Database configuration and initialization
- catalog.py: Categories and products
- tariffs.py: Per-wilaya delivery tariffs
- orders.py: Submitted orders
- settings.py: Store settings
"""

from .catalog import (
    PRODUCTS_PER_PAGE,
    create_category,
    create_product,
    delete_product,
    get_all_categories,
    get_category,
    get_category_product_counts,
    get_product,
    get_product_count_by_category,
    get_products_by_category,
    get_products_by_category_paginated,
    get_total_product_count,
    search_products,
    update_product,
)
from .db import connect, init_db
from .orders import count_orders, create_order, get_orders
from .settings import get_store_settings, save_store_settings
from .tariffs import (
    add_tariff,
    get_all_tariffs,
    get_sorted_tariffs,
    import_wilaya_data,
    tariffs_exist,
    update_tariff,
)

__all__ = [
    # Database
    "connect",
    "init_db",
    # Catalog
    "PRODUCTS_PER_PAGE",
    "create_category",
    "get_all_categories",
    "get_category",
    "get_category_product_counts",
    "create_product",
    "update_product",
    "delete_product",
    "get_product",
    "get_products_by_category",
    "get_product_count_by_category",
    "get_products_by_category_paginated",
    "search_products",
    "get_total_product_count",
    # Tariffs
    "tariffs_exist",
    "import_wilaya_data",
    "add_tariff",
    "get_all_tariffs",
    "get_sorted_tariffs",
    "update_tariff",
    # Orders
    "create_order",
    "get_orders",
    "count_orders",
    # Settings
    "get_store_settings",
    "save_store_settings",
]
