"""Services package."""

from .checkout_service import CheckoutService, SubmitOutcome
from .product_service import ProductService

__all__ = ["CheckoutService", "ProductService", "SubmitOutcome"]
