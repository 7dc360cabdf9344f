"""Great-circle distance strategy."""

from __future__ import annotations

from typing import Sequence

from ...config import settings
from ...models.domain import Coordinate, DistanceResult
from ..geospatial import haversine_m
from .base import DistanceProvider


class HaversineDistanceProvider(DistanceProvider):
    """Straight-line distance with travel time estimated at an average rider speed."""

    strategy = "haversine"

    def __init__(self, average_speed_kmh: float | None = None) -> None:
        self.average_speed_kmh = average_speed_kmh or settings.haversine_speed_kmh

    def distances(self, origins: Sequence[Coordinate], destination: Coordinate) -> list[DistanceResult]:
        meters_per_second = self.average_speed_kmh / 3.6
        results = []
        for origin in origins:
            meters = haversine_m(origin.latitude, origin.longitude, destination.latitude, destination.longitude)
            results.append(DistanceResult(meters=meters, seconds=meters / meters_per_second, status="OK"))
        return results
