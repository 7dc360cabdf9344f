"""Radius search result models."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List

from ...models.domain import Coordinate, Merchant, MerchantWithDistance, PerformanceMetrics
from ..geospatial import estimate_delivery_minutes


@dataclass(slots=True)
class Pagination:
    limit: int
    offset: int
    total: int

    @property
    def page(self) -> int:
        return self.offset // self.limit + 1

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.total else 0

    @property
    def has_next_page(self) -> bool:
        return self.offset + self.limit < self.total

    @property
    def has_prev_page(self) -> bool:
        return self.offset > 0

    def as_dict(self) -> dict:
        return {
            "limit": self.limit,
            "offset": self.offset,
            "page": self.page,
            "total_pages": self.total_pages,
            "has_next_page": self.has_next_page,
            "has_prev_page": self.has_prev_page,
        }


@dataclass(slots=True)
class RadiusSearchResult:
    merchants: List[MerchantWithDistance]
    total_count: int
    pagination: Pagination
    search_center: Coordinate
    search_radius_meters: float
    performance_metrics: PerformanceMetrics
    within_delivery_radius: bool = False
    metadata: dict = field(default_factory=dict)


def with_distance(
    merchant: Merchant,
    meters: float,
    source: str,
    seconds: float | None = None,
    default_delivery_minutes: float = 30,
) -> MerchantWithDistance:
    """Attach a resolved distance to a merchant for the current query."""

    radius = merchant.delivery_radius_meters
    return MerchantWithDistance(
        merchant=merchant,
        distance_meters=meters,
        distance_km=round(meters / 1000.0, 2),
        is_within_delivery_radius=radius is not None and meters <= radius,
        estimated_delivery_time_minutes=estimate_delivery_minutes(
            meters, merchant.avg_delivery_time_minutes, default_delivery_minutes
        ),
        distance_source=source,
        duration_seconds=seconds,
    )
