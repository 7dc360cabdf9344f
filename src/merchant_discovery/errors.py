"""Typed errors surfaced by discovery operations."""

from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    INVALID_COORDINATES = "INVALID_COORDINATES"
    INVALID_RADIUS = "INVALID_RADIUS"
    RADIUS_TOO_LARGE = "RADIUS_TOO_LARGE"
    INVALID_PAGINATION = "INVALID_PAGINATION"
    INVALID_SORT = "INVALID_SORT"
    INVALID_ZONE_TYPE = "INVALID_ZONE_TYPE"
    INVALID_FILTER = "INVALID_FILTER"
    DISTANCE_PROVIDER_UNAVAILABLE = "DISTANCE_PROVIDER_UNAVAILABLE"
    CUSTOMER_NOT_FOUND = "CUSTOMER_NOT_FOUND"
    ADDRESS_NOT_FOUND = "ADDRESS_NOT_FOUND"
    ADDRESS_MISSING_COORDINATES = "ADDRESS_MISSING_COORDINATES"
    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"
    # Per-row condition on the spatial path; recorded in metrics, never raised out of a query.
    MALFORMED_GEOMETRY = "MALFORMED_GEOMETRY"


class DiscoveryError(ValueError):
    """Error carrying a stable code that callers can branch on."""

    def __init__(self, code: ErrorCode, message: str, details: dict | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"

    def to_dict(self) -> dict:
        payload = {"code": self.code.value, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload
