"""Merchant selection for checkout."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import List

from ...config import Settings, settings as default_settings
from ...data.merchants_repository import MerchantRepository
from ...errors import DiscoveryError, ErrorCode
from ...models.domain import Address, Customer, DistanceResult, MerchantWithDistance, PerformanceMetrics
from ..customers import CustomerLocationResolver
from ..distance.base import DistanceProvider
from ..distance.haversine import HaversineDistanceProvider
from ..geospatial import is_valid_coordinate
from ..search import validate_radius_value, with_distance

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class CheckoutResult:
    customer: Customer
    address: Address
    merchants: List[MerchantWithDistance]
    total_count: int
    search_radius_meters: float
    performance_metrics: PerformanceMetrics


def checkout_sort_key(entry: MerchantWithDistance) -> tuple:
    """Merchants that deliver to the customer first, nearest first within each group."""
    return (not entry.is_within_delivery_radius, entry.distance_meters, entry.merchant.merchant_id)


class CheckoutResolver:
    """Rank delivering merchants for a customer's checkout.

    Unlike display searches, a merchant whose routed distance cannot be
    resolved is kept with a haversine distance instead of being dropped.
    """

    def __init__(
        self,
        locations: CustomerLocationResolver,
        repository: MerchantRepository,
        routed_provider: DistanceProvider | None,
        fallback_provider: DistanceProvider | None = None,
        config: Settings | None = None,
    ) -> None:
        self.locations = locations
        self.repository = repository
        self.routed_provider = routed_provider
        self.fallback_provider = fallback_provider or HaversineDistanceProvider()
        self.config = config or default_settings

    def merchants_for_checkout(
        self,
        customer_id: str,
        radius_meters: float | None = None,
        limit: int | None = None,
    ) -> CheckoutResult:
        started = time.perf_counter()
        radius = validate_radius_value(
            radius_meters if radius_meters is not None else self.config.checkout_radius_meters,
            self.config.max_search_radius_meters,
        )
        if limit is not None and limit < 1:
            raise DiscoveryError(ErrorCode.INVALID_PAGINATION, f"limit must be a positive integer, got {limit}")

        location = self.locations.resolve(customer_id)
        destination = location.coordinate
        strategy = self.routed_provider.strategy if self.routed_provider else self.fallback_provider.strategy
        metrics = PerformanceMetrics(strategy=strategy)

        candidates, _ = self.repository.find_candidates(limit=self.config.max_candidates, require_delivering=True)
        eligible = [
            merchant
            for merchant in candidates
            if merchant.is_currently_delivering
            and merchant.has_coordinates
            and is_valid_coordinate(merchant.latitude, merchant.longitude)
        ]
        metrics.merchants_scanned = len(eligible)

        resolved: list[MerchantWithDistance] = []
        if eligible:
            origins = [merchant.coordinate for merchant in eligible]
            routed = self._routed_distances(origins, destination)
            for merchant, outcome in zip(eligible, routed):
                source = strategy
                if not outcome.ok:
                    metrics.distance_failures += 1
                    metrics.fallback_count += 1
                    logger.warning(
                        f"Routed distance for merchant {merchant.merchant_id} returned {outcome.status}; "
                        f"using {self.fallback_provider.strategy} fallback"
                    )
                    outcome = self.fallback_provider.distance(merchant.coordinate, destination)
                    source = self.fallback_provider.strategy
                if not outcome.ok or outcome.meters > radius:
                    continue
                resolved.append(
                    with_distance(
                        merchant,
                        outcome.meters,
                        source,
                        seconds=outcome.seconds,
                        default_delivery_minutes=self.config.default_delivery_time_minutes,
                    )
                )

        resolved.sort(key=checkout_sort_key)
        total_count = len(resolved)
        if limit is not None:
            resolved = resolved[:limit]

        metrics.merchants_matched = total_count
        metrics.query_time_ms = round((time.perf_counter() - started) * 1000, 2)
        logger.info(
            f"Checkout merchants for customer {location.customer.customer_id}: {total_count} of "
            f"{metrics.merchants_scanned} delivering merchants ({metrics.fallback_count} via fallback) "
            f"in {metrics.query_time_ms}ms"
        )
        return CheckoutResult(
            customer=location.customer,
            address=location.address,
            merchants=resolved,
            total_count=total_count,
            search_radius_meters=radius,
            performance_metrics=metrics,
        )

    def _routed_distances(self, origins, destination) -> list[DistanceResult]:
        unresolved = [DistanceResult(meters=None, seconds=None, status="UNAVAILABLE") for _ in origins]
        if self.routed_provider is None:
            return unresolved
        try:
            return self.routed_provider.distances(origins, destination)
        except Exception as e:
            logger.error(f"Routed distance provider failed during checkout: {e}. Falling back for all merchants.")
            return unresolved
