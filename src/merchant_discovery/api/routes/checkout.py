"""Checkout merchant endpoints."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from ...schemas.discovery import CheckoutResponse
from ...services.discovery import DiscoveryService
from ...services.outputs.formatter import checkout_to_response
from ..deps import get_discovery_service
from ..errors import to_http_exception

router = APIRouter(prefix="/checkout", tags=["checkout"])


@router.get("/merchants", response_model=CheckoutResponse, status_code=status.HTTP_200_OK)
def checkout_merchants(
    customer_id: str = Query(..., min_length=1),
    radius_meters: Optional[float] = Query(default=None),
    limit: Optional[int] = Query(default=None, ge=1, le=200),
    service: DiscoveryService = Depends(get_discovery_service),
) -> CheckoutResponse:
    try:
        result = service.merchants_for_checkout(customer_id, radius_meters=radius_meters, limit=limit)
    except Exception as exc:
        raise to_http_exception(exc, "resolve checkout merchants") from exc
    return checkout_to_response(result)
