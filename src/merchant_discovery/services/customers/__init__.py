"""Customer location helpers."""

from .location import CustomerLocation, CustomerLocationResolver

__all__ = ["CustomerLocation", "CustomerLocationResolver"]
