"""Translate discovery errors into HTTP responses."""

from __future__ import annotations

import logging

from fastapi import HTTPException, status

from ..errors import DiscoveryError, ErrorCode

STATUS_BY_CODE = {
    ErrorCode.INVALID_COORDINATES: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_RADIUS: status.HTTP_400_BAD_REQUEST,
    ErrorCode.RADIUS_TOO_LARGE: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_PAGINATION: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_SORT: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_ZONE_TYPE: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_FILTER: status.HTTP_400_BAD_REQUEST,
    ErrorCode.CUSTOMER_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.ADDRESS_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.ADDRESS_MISSING_COORDINATES: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorCode.DISTANCE_PROVIDER_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorCode.STORE_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def to_http_exception(exc: Exception, action: str) -> HTTPException:
    if isinstance(exc, DiscoveryError):
        return HTTPException(
            status_code=STATUS_BY_CODE.get(exc.code, status.HTTP_400_BAD_REQUEST),
            detail=exc.to_dict(),
        )
    if isinstance(exc, ValueError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail={"code": "BAD_REQUEST", "message": str(exc)})
    logging.exception(f"Error while trying to {action}: {exc}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={"code": "INTERNAL_ERROR", "message": f"Failed to {action}: {exc}"},
    )
