"""Geospatial helper functions."""

from __future__ import annotations

import math
from numbers import Real
from typing import Any

from shapely.errors import ShapelyError
from shapely.geometry import Point, shape

from ..errors import DiscoveryError, ErrorCode
from ..models.domain import Coordinate

EARTH_RADIUS_KM = 6371.0
EARTH_RADIUS_M = EARTH_RADIUS_KM * 1000.0


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute distance between two coordinates using the Haversine formula."""

    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def haversine_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    return haversine_km(lat1, lon1, lat2, lon2) * 1000.0


def is_valid_coordinate(latitude: Any, longitude: Any) -> bool:
    """Return True for finite numeric latitude/longitude within WGS84 bounds."""

    for value in (latitude, longitude):
        if isinstance(value, bool) or not isinstance(value, Real):
            return False
        if not math.isfinite(value):
            return False
    return -90 <= latitude <= 90 and -180 <= longitude <= 180


def validate_coordinate(latitude: Any, longitude: Any) -> Coordinate:
    if not is_valid_coordinate(latitude, longitude):
        raise DiscoveryError(
            ErrorCode.INVALID_COORDINATES,
            f"Invalid coordinates provided: latitude={latitude!r}, longitude={longitude!r}",
        )
    return Coordinate(float(latitude), float(longitude))


def parse_point_geometry(geometry: Any) -> Coordinate | None:
    """Return the coordinate of a well-formed GeoJSON point, or None.

    A point is well formed only when its ``coordinates`` hold exactly two
    numeric components (longitude, latitude) inside WGS84 bounds.
    """

    if not isinstance(geometry, dict) or geometry.get("type") != "Point":
        return None
    components = geometry.get("coordinates")
    if not isinstance(components, (list, tuple)) or len(components) != 2:
        return None
    lon, lat = components
    if not is_valid_coordinate(lat, lon):
        return None
    return Coordinate(float(lat), float(lon))


def geometry_contains(geometry: Any, latitude: float, longitude: float) -> bool:
    """Return True if a GeoJSON geometry contains or touches the point.

    Unparseable payloads are treated as not containing the point.
    """

    if not geometry:
        return False
    try:
        polygon = shape(geometry)
    except (ShapelyError, ValueError, TypeError, AttributeError, KeyError, IndexError):
        return False
    if polygon.is_empty:
        return False
    return polygon.intersects(Point(longitude, latitude))


def estimate_delivery_minutes(distance_meters: float, avg_delivery_time_minutes: float | None, default_minutes: float = 30) -> int:
    """Merchant average (or default) plus five minutes per km beyond the first two."""

    base_time = avg_delivery_time_minutes or default_minutes
    distance_km = distance_meters / 1000.0
    additional_time = max(0.0, (distance_km - 2.0) * 5.0)
    return int(round(base_time + additional_time))
