"""Domain models for merchants, customers and catalog records."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(slots=True, frozen=True)
class Coordinate:
    latitude: float
    longitude: float


@dataclass(slots=True)
class Merchant:
    """Represents a delivery merchant outlet with its location and zone geometries."""

    merchant_id: str
    name: str
    vendor_id: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    delivery_radius_meters: Optional[float] = None
    is_active: bool = True
    is_accepting_orders: bool = True
    is_currently_delivering: bool = False
    service_area: Optional[dict] = None
    priority_zones: Optional[dict] = None
    delivery_zones: Optional[dict] = None
    restricted_areas: Optional[dict] = None
    avg_delivery_time_minutes: Optional[float] = None
    min_order_amount: Optional[float] = None
    location_geometry: Optional[dict] = None
    raw: dict = field(default_factory=dict)

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    @property
    def coordinate(self) -> Optional[Coordinate]:
        if not self.has_coordinates:
            return None
        return Coordinate(self.latitude, self.longitude)


@dataclass(slots=True, frozen=True)
class MerchantFilters:
    """Optional store-side filters applied on top of the active/accepting-orders baseline."""

    is_currently_delivering: Optional[bool] = None
    max_delivery_time_minutes: Optional[float] = None
    min_order_amount: Optional[float] = None

    @property
    def is_empty(self) -> bool:
        return (
            self.is_currently_delivering is None
            and self.max_delivery_time_minutes is None
            and self.min_order_amount is None
        )


@dataclass(slots=True)
class Customer:
    customer_id: str
    user_id: Optional[str] = None
    active_address_id: Optional[str] = None


@dataclass(slots=True)
class Address:
    address_id: str
    customer_id: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    formatted_address: Optional[str] = None


@dataclass(slots=True)
class DistanceResult:
    """Outcome of a single origin -> destination distance resolution."""

    meters: Optional[float]
    seconds: Optional[float]
    status: str

    @property
    def ok(self) -> bool:
        return self.status == "OK" and self.meters is not None


@dataclass(slots=True)
class ZoneMembership:
    in_service_area: bool
    in_priority_zone: bool
    in_delivery_zone: bool
    in_restricted_area: bool
    zone_priority: str

    @property
    def zone_types(self) -> list[str]:
        types: list[str] = []
        if self.in_service_area:
            types.append("service")
        if self.in_priority_zone:
            types.append("priority")
        if self.in_delivery_zone:
            types.append("delivery")
        if self.in_restricted_area:
            types.append("restricted")
        return types


@dataclass(slots=True)
class MerchantWithDistance:
    """A merchant resolved against a customer location for one query."""

    merchant: Merchant
    distance_meters: float
    distance_km: float
    is_within_delivery_radius: bool
    estimated_delivery_time_minutes: int
    distance_source: str
    duration_seconds: Optional[float] = None
    zones: Optional[ZoneMembership] = None


@dataclass(slots=True)
class MerchantProduct:
    merchant_id: str
    product_id: str
    is_active: bool = True
    is_available: bool = True


@dataclass(slots=True)
class Category:
    category_id: str
    name: str
    slug: Optional[str] = None
    is_active: bool = True
    display_order: Optional[int] = None
    raw: dict = field(default_factory=dict)


@dataclass(slots=True)
class Product:
    product_id: str
    name: str
    is_active: bool = True
    categories: list[Category] = field(default_factory=list)


@dataclass(slots=True)
class CategoryWithMetadata:
    category: Category
    product_count: int
    merchant_count: int


@dataclass(slots=True)
class PerformanceMetrics:
    """Timing and volume figures attached to every discovery result."""

    strategy: str
    query_time_ms: float = 0.0
    merchants_scanned: int = 0
    merchants_matched: int = 0
    distance_failures: int = 0
    malformed_geometries: int = 0
    fallback_count: int = 0
    extra: dict[str, Any] = field(default_factory=dict)
