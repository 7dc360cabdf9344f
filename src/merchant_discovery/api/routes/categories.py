"""Category aggregation endpoints."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from ...schemas.discovery import CategoriesForMerchantsRequest, CategoriesResponse, LocationCategoriesResponse
from ...services.discovery import DiscoveryService
from ...services.outputs.formatter import categories_to_response, customer_categories_to_response
from ..deps import get_discovery_service
from ..errors import to_http_exception

router = APIRouter(prefix="/categories", tags=["categories"])


@router.post("/for-merchants", response_model=CategoriesResponse, status_code=status.HTTP_200_OK)
def categories_for_merchants(
    payload: CategoriesForMerchantsRequest,
    service: DiscoveryService = Depends(get_discovery_service),
) -> CategoriesResponse:
    try:
        aggregation = service.categories_for_merchants(
            payload.merchant_ids,
            sort_by=payload.sort_by,
            limit=payload.limit,
            include_inactive=payload.include_inactive,
        )
    except Exception as exc:
        raise to_http_exception(exc, "aggregate categories") from exc
    return categories_to_response(aggregation)


@router.get("/location-based", response_model=LocationCategoriesResponse, status_code=status.HTTP_200_OK)
def location_based_categories(
    customer_id: str = Query(..., min_length=1),
    sort_by: str = Query(default="name", description="name, productCount, merchantCount, displayOrder or popularity"),
    limit: int = Query(default=20, ge=1, le=200),
    include_inactive: bool = Query(default=False),
    radius_meters: Optional[float] = Query(default=None),
    service: DiscoveryService = Depends(get_discovery_service),
) -> LocationCategoriesResponse:
    try:
        result = service.categories_for_customer(
            customer_id,
            sort_by=sort_by,
            limit=limit,
            include_inactive=include_inactive,
            radius_meters=radius_meters,
        )
    except Exception as exc:
        raise to_http_exception(exc, "load location-based categories") from exc
    return customer_categories_to_response(result)
