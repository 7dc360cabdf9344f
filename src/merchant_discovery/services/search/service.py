"""Radius search orchestration."""

from __future__ import annotations

import logging
import math
import time
from typing import Any

from ...config import Settings, settings as default_settings
from ...data.merchants_repository import MerchantRepository, merchant_from_row
from ...errors import DiscoveryError, ErrorCode
from ...models.domain import Coordinate, MerchantFilters, MerchantWithDistance, PerformanceMetrics
from ..distance.base import DistanceProvider
from ..geospatial import is_valid_coordinate, parse_point_geometry, validate_coordinate
from ..zones import ServiceZoneClassifier, validate_zone_type
from .models import Pagination, RadiusSearchResult, with_distance

logger = logging.getLogger(__name__)


def _is_finite_number(value: Any) -> bool:
    return not isinstance(value, bool) and isinstance(value, (int, float)) and math.isfinite(value)


def validate_radius_value(radius_meters: Any, max_radius_meters: float) -> float:
    """Reject non-finite, non-positive and oversized radii."""
    if not _is_finite_number(radius_meters):
        raise DiscoveryError(ErrorCode.INVALID_RADIUS, f"radius must be a finite number, got {radius_meters!r}")
    if radius_meters <= 0:
        raise DiscoveryError(ErrorCode.INVALID_RADIUS, f"radius must be positive, got {radius_meters}")
    if radius_meters > max_radius_meters:
        raise DiscoveryError(
            ErrorCode.RADIUS_TOO_LARGE,
            f"radius {radius_meters}m exceeds the maximum of {max_radius_meters}m",
            details={"max_radius_meters": max_radius_meters},
        )
    return float(radius_meters)


def validate_pagination(limit: Any, offset: Any) -> tuple[int, int]:
    if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
        raise DiscoveryError(ErrorCode.INVALID_PAGINATION, f"limit must be a positive integer, got {limit!r}")
    if isinstance(offset, bool) or not isinstance(offset, int) or offset < 0:
        raise DiscoveryError(ErrorCode.INVALID_PAGINATION, f"offset must be a non-negative integer, got {offset!r}")
    return limit, offset


def validate_filters(filters: MerchantFilters | None) -> MerchantFilters | None:
    if filters is None or filters.is_empty:
        return None
    if filters.max_delivery_time_minutes is not None and (
        not _is_finite_number(filters.max_delivery_time_minutes) or filters.max_delivery_time_minutes <= 0
    ):
        raise DiscoveryError(
            ErrorCode.INVALID_FILTER,
            f"max_delivery_time_minutes must be a positive number, got {filters.max_delivery_time_minutes!r}",
        )
    if filters.min_order_amount is not None and (
        not _is_finite_number(filters.min_order_amount) or filters.min_order_amount < 0
    ):
        raise DiscoveryError(
            ErrorCode.INVALID_FILTER,
            f"min_order_amount must be a non-negative number, got {filters.min_order_amount!r}",
        )
    return filters


def sort_by_distance(merchants: list[MerchantWithDistance]) -> list[MerchantWithDistance]:
    return sorted(merchants, key=lambda entry: (entry.distance_meters, entry.merchant.merchant_id))


class RadiusSearchEngine:
    """Distance-sorted, paginated merchant search around a customer point.

    The injected provider decides the mode: ``spatial`` pushes the radius
    filter, ordering and paging into the store; every other strategy fetches
    a candidate superset and resolves merchant -> customer distances itself.
    """

    def __init__(
        self,
        repository: MerchantRepository,
        provider: DistanceProvider,
        classifier: ServiceZoneClassifier | None = None,
        config: Settings | None = None,
    ) -> None:
        self.repository = repository
        self.provider = provider
        self.config = config or default_settings
        self.classifier = classifier or ServiceZoneClassifier(self.config.zone_mode)

    def validate_radius(self, radius_meters: Any, within_delivery_radius: bool = False) -> float:
        if radius_meters is None:
            if within_delivery_radius:
                return float(self.config.max_search_radius_meters)
            return float(self.config.default_radius_meters)
        return validate_radius_value(radius_meters, self.config.max_search_radius_meters)

    def find_within_radius(
        self,
        latitude: float,
        longitude: float,
        radius_meters: float | None = None,
        limit: int = 20,
        offset: int = 0,
        within_delivery_radius: bool = False,
        zone_type: str | None = None,
        filters: MerchantFilters | None = None,
    ) -> RadiusSearchResult:
        started = time.perf_counter()
        origin = validate_coordinate(latitude, longitude)
        radius = self.validate_radius(radius_meters, within_delivery_radius)
        limit, offset = validate_pagination(limit, offset)
        if zone_type is not None:
            validate_zone_type(zone_type)
        filters = validate_filters(filters)

        if self.provider.strategy == "spatial":
            result = self._spatial_search(origin, radius, limit, offset, within_delivery_radius, zone_type, filters)
        else:
            result = self._distance_search(origin, radius, limit, offset, within_delivery_radius, zone_type, filters)

        result.performance_metrics.query_time_ms = round((time.perf_counter() - started) * 1000, 2)
        logger.info(
            f"Radius search ({result.performance_metrics.strategy}) at {origin.latitude},{origin.longitude} "
            f"r={radius:.0f}m: {result.performance_metrics.merchants_matched} matched of "
            f"{result.performance_metrics.merchants_scanned} scanned in {result.performance_metrics.query_time_ms}ms"
        )
        return result

    def _empty_result(self, origin: Coordinate, radius: float, limit: int, offset: int, within_delivery_radius: bool, metrics: PerformanceMetrics) -> RadiusSearchResult:
        return RadiusSearchResult(
            merchants=[],
            total_count=0,
            pagination=Pagination(limit=limit, offset=offset, total=0),
            search_center=origin,
            search_radius_meters=radius,
            performance_metrics=metrics,
            within_delivery_radius=within_delivery_radius,
        )

    def _distance_search(
        self,
        origin: Coordinate,
        radius: float,
        limit: int,
        offset: int,
        within_delivery_radius: bool,
        zone_type: str | None,
        filters: MerchantFilters | None,
    ) -> RadiusSearchResult:
        metrics = PerformanceMetrics(strategy=self.provider.strategy)
        fetch_size = min(self.config.max_candidates, self.config.candidate_overfetch_factor * (offset + limit))
        candidates, candidates_total = self.repository.find_candidates(limit=fetch_size, filters=filters)
        metrics.extra["candidates_available"] = candidates_total

        eligible = []
        for merchant in candidates:
            if not merchant.has_coordinates:
                continue
            if not is_valid_coordinate(merchant.latitude, merchant.longitude):
                logger.warning(f"Skipping merchant {merchant.merchant_id} with out-of-range coordinates")
                continue
            if within_delivery_radius and not merchant.delivery_radius_meters:
                continue
            eligible.append(merchant)

        if not eligible:
            return self._empty_result(origin, radius, limit, offset, within_delivery_radius, metrics)

        self.provider.check_available()
        metrics.merchants_scanned = len(eligible)
        results = self.provider.distances([merchant.coordinate for merchant in eligible], origin)

        matched: list[MerchantWithDistance] = []
        for merchant, outcome in zip(eligible, results):
            if not outcome.ok:
                metrics.distance_failures += 1
                logger.warning(f"Excluding merchant {merchant.merchant_id}: distance status {outcome.status}")
                continue
            threshold = radius
            if within_delivery_radius:
                threshold = min(radius, merchant.delivery_radius_meters)
            if outcome.meters > threshold:
                continue
            matched.append(
                with_distance(
                    merchant,
                    outcome.meters,
                    self.provider.strategy,
                    seconds=outcome.seconds,
                    default_delivery_minutes=self.config.default_delivery_time_minutes,
                )
            )

        self.classifier.annotate(matched, origin.latitude, origin.longitude)
        if zone_type:
            matched = self.classifier.filter_by_zone(matched, zone_type, origin.latitude, origin.longitude)

        ordered = sort_by_distance(matched)
        metrics.merchants_matched = len(ordered)
        return RadiusSearchResult(
            merchants=ordered[offset:offset + limit],
            total_count=len(ordered),
            pagination=Pagination(limit=limit, offset=offset, total=len(ordered)),
            search_center=origin,
            search_radius_meters=radius,
            performance_metrics=metrics,
            within_delivery_radius=within_delivery_radius,
        )

    def _spatial_search(
        self,
        origin: Coordinate,
        radius: float,
        limit: int,
        offset: int,
        within_delivery_radius: bool,
        zone_type: str | None,
        filters: MerchantFilters | None,
    ) -> RadiusSearchResult:
        metrics = PerformanceMetrics(strategy="spatial")
        rows = self.repository.find_within_radius(
            origin.latitude,
            origin.longitude,
            radius,
            limit=limit,
            offset=offset,
            use_delivery_radius=within_delivery_radius,
            filters=filters,
        )
        metrics.merchants_scanned = len(rows)
        if rows:
            total_count = int(rows[0].get("total_count") or 0)
        elif offset > 0:
            # An empty page past the end carries no window count; ask the store directly.
            total_count = self.repository.count_within_radius(
                origin.latitude,
                origin.longitude,
                radius,
                use_delivery_radius=within_delivery_radius,
                filters=filters,
            )
        else:
            total_count = 0

        merchants: list[MerchantWithDistance] = []
        for row in rows:
            merchant = merchant_from_row(row)
            point = parse_point_geometry(merchant.location_geometry)
            if point is None:
                metrics.malformed_geometries += 1
                logger.warning(f"{ErrorCode.MALFORMED_GEOMETRY.value}: skipping merchant {merchant.merchant_id}")
                continue
            distance = row.get("distance_meters")
            if distance is None:
                metrics.distance_failures += 1
                continue
            distance = float(distance)
            if distance > radius:
                continue
            if merchant.latitude is None or merchant.longitude is None:
                merchant.latitude, merchant.longitude = point.latitude, point.longitude
            merchants.append(
                with_distance(
                    merchant,
                    distance,
                    "spatial",
                    default_delivery_minutes=self.config.default_delivery_time_minutes,
                )
            )

        self.classifier.annotate(merchants, origin.latitude, origin.longitude)
        if zone_type:
            # Paging already happened in SQL; the zone filter narrows this page only.
            merchants = self.classifier.filter_by_zone(merchants, zone_type, origin.latitude, origin.longitude)

        # Rows excluded here were counted by the store; keep the total honest.
        skipped = metrics.merchants_scanned - len(merchants)
        total_count = max(total_count - skipped, len(merchants))
        metrics.merchants_matched = len(merchants)
        return RadiusSearchResult(
            merchants=sort_by_distance(merchants),
            total_count=total_count,
            pagination=Pagination(limit=limit, offset=offset, total=total_count),
            search_center=origin,
            search_radius_meters=radius,
            performance_metrics=metrics,
            within_delivery_radius=within_delivery_radius,
        )
