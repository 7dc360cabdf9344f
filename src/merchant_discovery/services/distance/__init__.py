"""Distance provider strategies."""

from .base import DistanceProvider
from .dispatcher import build_routed_provider, get_provider
from .haversine import HaversineDistanceProvider
from .routed import RoutedDistanceProvider
from .routes_client import RoutesMatrixClient
from .spatial import SpatialDistanceProvider

__all__ = [
    "DistanceProvider",
    "RoutedDistanceProvider",
    "SpatialDistanceProvider",
    "HaversineDistanceProvider",
    "RoutesMatrixClient",
    "build_routed_provider",
    "get_provider",
]
