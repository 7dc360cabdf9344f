"""Checkout merchant resolution."""

from .service import CheckoutResolver, CheckoutResult, checkout_sort_key

__all__ = ["CheckoutResolver", "CheckoutResult", "checkout_sort_key"]
