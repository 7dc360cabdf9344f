"""Discovery request/response schemas."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class PerformanceMetricsModel(BaseModel):
    strategy: str
    query_time_ms: float
    merchants_scanned: int
    merchants_matched: int
    distance_failures: int = 0
    malformed_geometries: int = 0
    fallback_count: int = 0
    extra: Dict[str, Any] = Field(default_factory=dict)


class CoordinateModel(BaseModel):
    latitude: float
    longitude: float


class ZoneMembershipModel(BaseModel):
    in_service_area: bool
    in_priority_zone: bool
    in_delivery_zone: bool
    in_restricted_area: bool
    zone_priority: str
    zone_types: List[str]


class MerchantModel(BaseModel):
    id: str
    name: str
    vendor_id: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    delivery_radius_meters: Optional[float] = None
    is_active: bool
    is_accepting_orders: bool
    is_currently_delivering: bool
    avg_delivery_time_minutes: Optional[float] = None
    min_order_amount: Optional[float] = None
    distance_meters: float
    distance_km: float
    duration_seconds: Optional[float] = None
    is_within_delivery_radius: bool
    estimated_delivery_time_minutes: int
    distance_source: str
    zones: Optional[ZoneMembershipModel] = None


class PaginationModel(BaseModel):
    limit: int
    offset: int
    page: int
    total_pages: int
    has_next_page: bool
    has_prev_page: bool


class RadiusSearchResponse(BaseModel):
    merchants: List[MerchantModel]
    total_count: int
    pagination: PaginationModel
    search_center: CoordinateModel
    search_radius_meters: float
    within_delivery_radius: bool = False
    performance_metrics: PerformanceMetricsModel


class CustomerModel(BaseModel):
    id: str
    user_id: Optional[str] = None


class AddressModel(BaseModel):
    id: str
    formatted_address: Optional[str] = None
    latitude: float
    longitude: float


class CustomerMerchantsResponse(RadiusSearchResponse):
    customer: CustomerModel
    address: AddressModel


class CategoryModel(BaseModel):
    id: str
    name: str
    slug: Optional[str] = None
    is_active: bool
    display_order: Optional[int] = None
    product_count: int
    merchant_count: int


class CategoriesForMerchantsRequest(BaseModel):
    merchant_ids: List[str] = Field(default_factory=list)
    sort_by: str = "name"
    limit: Optional[int] = Field(default=20, ge=0)
    include_inactive: bool = False


class CategoriesResponse(BaseModel):
    categories: List[CategoryModel]
    total_categories: int
    merchants_analyzed: int
    product_count: int
    merchant_count: int
    performance_metrics: PerformanceMetricsModel


class LocationCategoriesResponse(CategoriesResponse):
    customer: CustomerModel
    address: AddressModel
    search_radius: float
    merchants_found: int
    response_time_ms: float


class CheckoutResponse(BaseModel):
    customer: CustomerModel
    address: AddressModel
    merchants: List[MerchantModel]
    total_count: int
    search_radius_meters: float
    performance_metrics: PerformanceMetricsModel


class ErrorResponse(BaseModel):
    code: str
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)
