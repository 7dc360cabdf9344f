"""Service-zone classification of a customer point against merchant geometries."""

from __future__ import annotations

from typing import Iterable, Literal

from ...config import settings
from ...errors import DiscoveryError, ErrorCode
from ...models.domain import Merchant, MerchantWithDistance, ZoneMembership
from ..geospatial import geometry_contains

ZONE_TYPES = ("service", "priority", "delivery", "restricted")

ZoneMode = Literal["presence", "containment"]


def validate_zone_type(zone_type: str) -> str:
    if zone_type not in ZONE_TYPES:
        raise DiscoveryError(
            ErrorCode.INVALID_ZONE_TYPE,
            f"Unknown zone type '{zone_type}'. Expected one of {', '.join(ZONE_TYPES)}.",
        )
    return zone_type


class ServiceZoneClassifier:
    """Report zone membership flags for a merchant and a customer point.

    In ``presence`` mode a merchant counts as covering the point when it has
    the corresponding geometry on record. ``containment`` mode runs a real
    point-in-polygon test on the stored GeoJSON instead.
    """

    def __init__(self, mode: ZoneMode | None = None) -> None:
        self.mode = mode or settings.zone_mode
        if self.mode not in ("presence", "containment"):
            raise ValueError(f"Unknown zone mode '{self.mode}'.")

    def _member(self, geometry: dict | None, latitude: float, longitude: float) -> bool:
        if self.mode == "presence":
            return bool(geometry)
        return geometry_contains(geometry, latitude, longitude)

    def classify(self, merchant: Merchant, latitude: float, longitude: float) -> ZoneMembership:
        in_priority = self._member(merchant.priority_zones, latitude, longitude)
        in_delivery = self._member(merchant.delivery_zones, latitude, longitude)
        if in_priority:
            zone_priority = "high"
        elif in_delivery:
            zone_priority = "medium"
        else:
            zone_priority = "standard"
        return ZoneMembership(
            in_service_area=self._member(merchant.service_area, latitude, longitude),
            in_priority_zone=in_priority,
            in_delivery_zone=in_delivery,
            in_restricted_area=self._member(merchant.restricted_areas, latitude, longitude),
            zone_priority=zone_priority,
        )

    def annotate(self, merchants: Iterable[MerchantWithDistance], latitude: float, longitude: float) -> list[MerchantWithDistance]:
        annotated = []
        for entry in merchants:
            entry.zones = self.classify(entry.merchant, latitude, longitude)
            annotated.append(entry)
        return annotated

    def filter_by_zone(
        self,
        merchants: Iterable[MerchantWithDistance],
        zone_type: str,
        latitude: float,
        longitude: float,
    ) -> list[MerchantWithDistance]:
        """Keep merchants whose zone flags include ``zone_type``."""

        validate_zone_type(zone_type)
        kept = []
        for entry in merchants:
            if entry.zones is None:
                entry.zones = self.classify(entry.merchant, latitude, longitude)
            if zone_type in entry.zones.zone_types:
                kept.append(entry)
        return kept
