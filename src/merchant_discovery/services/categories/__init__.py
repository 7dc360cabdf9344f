"""Category aggregation."""

from .service import CategoryAggregation, CategoryAggregator

__all__ = ["CategoryAggregator", "CategoryAggregation"]
