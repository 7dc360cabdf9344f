"""Factory for distance providers based on configured strategy."""

from __future__ import annotations

import logging

from ...data.merchants_repository import MerchantRepository
from ...errors import DiscoveryError, ErrorCode
from .base import DistanceProvider
from .haversine import HaversineDistanceProvider
from .routed import RoutedDistanceProvider
from .routes_client import RoutesMatrixClient
from .spatial import SpatialDistanceProvider

logger = logging.getLogger(__name__)


def build_routed_provider(client: RoutesMatrixClient | None = None) -> RoutedDistanceProvider:
    if client is None:
        try:
            client = RoutesMatrixClient()
        except ValueError as e:
            logger.error(f"Routes client initialization failed: {e}")
            raise DiscoveryError(
                ErrorCode.DISTANCE_PROVIDER_UNAVAILABLE,
                "Routed distance provider is not configured. Set DISCOVERY_ROUTES_API_KEY.",
            ) from e
    return RoutedDistanceProvider(client)


def get_provider(strategy: str, repository: MerchantRepository | None = None) -> DistanceProvider:
    match strategy:
        case "routed":
            return build_routed_provider()
        case "spatial":
            return SpatialDistanceProvider(repository or MerchantRepository())
        case "haversine":
            return HaversineDistanceProvider()
        case _:
            raise ValueError(f"Unknown distance strategy '{strategy}'.")
