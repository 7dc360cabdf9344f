"""Spatial-store distance strategy computed by PostGIS."""

from __future__ import annotations

import logging
from typing import Sequence

from ...data.merchants_repository import MerchantRepository
from ...errors import DiscoveryError
from ...models.domain import Coordinate, DistanceResult
from .base import DistanceProvider

logger = logging.getLogger(__name__)


class SpatialDistanceProvider(DistanceProvider):
    """Metric-projected ``ST_Distance`` between two points, no external network call.

    Radius searches using this strategy push filtering, ordering and paging
    into the store instead (see ``RadiusSearchEngine``).
    """

    strategy = "spatial"

    def __init__(self, repository: MerchantRepository) -> None:
        self.repository = repository

    def distances(self, origins: Sequence[Coordinate], destination: Coordinate) -> list[DistanceResult]:
        results = []
        for origin in origins:
            try:
                meters = self.repository.point_distance(origin, destination)
            except DiscoveryError as e:
                logger.warning(f"Spatial distance failed for {origin}: {e}")
                results.append(DistanceResult(meters=None, seconds=None, status="REQUEST_FAILED"))
                continue
            if meters is None:
                results.append(DistanceResult(meters=None, seconds=None, status="NOT_FOUND"))
            else:
                results.append(DistanceResult(meters=meters, seconds=None, status="OK"))
        return results
