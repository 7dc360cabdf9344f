"""Route group exports."""

from . import categories, checkout, health, merchants

__all__ = ["merchants", "categories", "checkout", "health"]
