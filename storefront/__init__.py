"""Telegram storefront with per-wilaya delivery pricing."""
