"""Routed (road network) distance strategy backed by the Routes matrix API."""

from __future__ import annotations

import logging
from typing import Sequence

from ...errors import DiscoveryError, ErrorCode
from ...models.domain import Coordinate, DistanceResult
from .base import DistanceProvider
from .routes_client import RoutesMatrixClient

logger = logging.getLogger(__name__)


class RoutedDistanceProvider(DistanceProvider):
    strategy = "routed"

    def __init__(self, client: RoutesMatrixClient) -> None:
        self.client = client

    def distances(self, origins: Sequence[Coordinate], destination: Coordinate) -> list[DistanceResult]:
        if not origins:
            return []
        matrix = self.client.matrix(
            [(origin.latitude, origin.longitude) for origin in origins],
            [(destination.latitude, destination.longitude)],
        )
        return [row[0] for row in matrix]

    def check_available(self) -> None:
        if not self.client.check_health():
            logger.error("Routes distance provider failed its availability check")
            raise DiscoveryError(
                ErrorCode.DISTANCE_PROVIDER_UNAVAILABLE,
                "Routed distance provider is unavailable; the availability check failed.",
            )
