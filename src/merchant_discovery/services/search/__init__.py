"""Radius search engine."""

from .models import Pagination, RadiusSearchResult, with_distance
from .service import (
    RadiusSearchEngine,
    sort_by_distance,
    validate_filters,
    validate_pagination,
    validate_radius_value,
)

__all__ = [
    "RadiusSearchEngine",
    "RadiusSearchResult",
    "Pagination",
    "with_distance",
    "sort_by_distance",
    "validate_filters",
    "validate_pagination",
    "validate_radius_value",
]
