"""Merchant discovery endpoints."""

from __future__ import annotations

from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, status

from ...models.domain import MerchantFilters
from ...schemas.discovery import CustomerMerchantsResponse, RadiusSearchResponse
from ...services.discovery import DiscoveryService
from ...services.outputs.formatter import customer_search_to_response, search_to_response
from ..deps import get_discovery_service
from ..errors import to_http_exception

router = APIRouter(prefix="/merchants", tags=["merchants"])

Strategy = Literal["routed", "spatial", "haversine"]
ZoneType = Literal["service", "priority", "delivery", "restricted"]


@router.get("/nearby", response_model=RadiusSearchResponse, status_code=status.HTTP_200_OK)
def nearby_merchants(
    latitude: float = Query(..., description="Customer latitude"),
    longitude: float = Query(..., description="Customer longitude"),
    radius_meters: Optional[float] = Query(default=None, description="Search radius; defaults to the configured radius"),
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    zone_type: Optional[ZoneType] = Query(default=None, description="Only merchants whose zones include this type"),
    strategy: Optional[Strategy] = Query(default=None, description="Distance strategy override"),
    service: DiscoveryService = Depends(get_discovery_service),
) -> RadiusSearchResponse:
    try:
        result = service.nearby(
            latitude,
            longitude,
            radius_meters=radius_meters,
            limit=limit,
            offset=offset,
            zone_type=zone_type,
            strategy=strategy,
        )
    except Exception as exc:
        raise to_http_exception(exc, "find nearby merchants") from exc
    return search_to_response(result)


@router.get("/delivery-radius", response_model=RadiusSearchResponse, status_code=status.HTTP_200_OK)
def merchants_in_delivery_radius(
    latitude: float = Query(...),
    longitude: float = Query(...),
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    strategy: Optional[Strategy] = Query(default=None),
    is_currently_delivering: Optional[bool] = Query(default=None),
    max_delivery_time_minutes: Optional[float] = Query(default=None, gt=0, description="Upper bound on the merchant's average delivery time"),
    min_order_amount: Optional[float] = Query(default=None, ge=0, description="Only merchants whose minimum order is at most this amount"),
    service: DiscoveryService = Depends(get_discovery_service),
) -> RadiusSearchResponse:
    """Merchants whose own delivery radius covers the given point."""
    filters = MerchantFilters(
        is_currently_delivering=is_currently_delivering,
        max_delivery_time_minutes=max_delivery_time_minutes,
        min_order_amount=min_order_amount,
    )
    try:
        result = service.in_delivery_radius(
            latitude, longitude, limit=limit, offset=offset, strategy=strategy, filters=filters
        )
    except Exception as exc:
        raise to_http_exception(exc, "find merchants in delivery radius") from exc
    return search_to_response(result)


@router.get("/location-based", response_model=CustomerMerchantsResponse, status_code=status.HTTP_200_OK)
def location_based_merchants(
    customer_id: str = Query(..., min_length=1),
    radius_meters: Optional[float] = Query(default=None),
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    zone_type: Optional[ZoneType] = Query(default=None),
    strategy: Optional[Strategy] = Query(default=None),
    service: DiscoveryService = Depends(get_discovery_service),
) -> CustomerMerchantsResponse:
    try:
        result = service.merchants_for_customer(
            customer_id,
            radius_meters=radius_meters,
            limit=limit,
            offset=offset,
            zone_type=zone_type,
            strategy=strategy,
        )
    except Exception as exc:
        raise to_http_exception(exc, "find merchants for customer") from exc
    return customer_search_to_response(result)
