"""Handlers package for the Telegram bot."""

from .admin import register_admin_handlers
from .catalog import register_catalog_handlers
from .checkout import register_checkout_handlers
from .start import register_start_handlers

__all__ = [
    "register_start_handlers",
    "register_catalog_handlers",
    "register_checkout_handlers",
    "register_admin_handlers",
]
