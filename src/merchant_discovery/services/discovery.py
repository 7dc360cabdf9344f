"""Entry points combining location resolution, search, categories and checkout."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Sequence

from ..config import Settings, settings as default_settings
from ..data.catalog_repository import CatalogRepository
from ..data.customers_repository import CustomerRepository
from ..data.merchants_repository import MerchantRepository
from ..errors import DiscoveryError
from ..models.domain import MerchantFilters
from .categories import CategoryAggregation, CategoryAggregator
from .checkout import CheckoutResolver, CheckoutResult
from .customers import CustomerLocation, CustomerLocationResolver
from .distance import DistanceProvider, get_provider
from .search import RadiusSearchEngine, RadiusSearchResult
from .zones import ServiceZoneClassifier

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class CustomerSearchResult:
    location: CustomerLocation
    search: RadiusSearchResult


@dataclass(slots=True)
class CustomerCategoriesResult:
    location: CustomerLocation
    aggregation: CategoryAggregation
    search_radius_meters: float
    merchants_found: int
    query_time_ms: float


class DiscoveryService:
    """Builds engines from configuration; every collaborator can be injected."""

    def __init__(
        self,
        merchants: MerchantRepository | None = None,
        customers: CustomerRepository | None = None,
        catalog: CatalogRepository | None = None,
        providers: dict[str, DistanceProvider] | None = None,
        config: Settings | None = None,
    ) -> None:
        self.config = config or default_settings
        self.merchants = merchants or MerchantRepository()
        self.customers = customers or CustomerRepository()
        self.catalog = catalog or CatalogRepository()
        self._providers: dict[str, DistanceProvider] = dict(providers or {})
        self.classifier = ServiceZoneClassifier(self.config.zone_mode)
        self.locations = CustomerLocationResolver(self.customers)

    def provider(self, strategy: str | None = None) -> DistanceProvider:
        name = strategy or self.config.distance_strategy
        if name not in self._providers:
            self._providers[name] = get_provider(name, repository=self.merchants)
        return self._providers[name]

    def engine(self, strategy: str | None = None) -> RadiusSearchEngine:
        return RadiusSearchEngine(self.merchants, self.provider(strategy), self.classifier, self.config)

    def nearby(
        self,
        latitude: float,
        longitude: float,
        radius_meters: float | None = None,
        limit: int = 20,
        offset: int = 0,
        zone_type: str | None = None,
        strategy: str | None = None,
    ) -> RadiusSearchResult:
        return self.engine(strategy).find_within_radius(
            latitude, longitude, radius_meters=radius_meters, limit=limit, offset=offset, zone_type=zone_type
        )

    def in_delivery_radius(
        self,
        latitude: float,
        longitude: float,
        limit: int = 20,
        offset: int = 0,
        strategy: str | None = None,
        filters: MerchantFilters | None = None,
    ) -> RadiusSearchResult:
        """Merchants whose own delivery radius covers the point, optionally narrowed by ``filters``."""
        return self.engine(strategy).find_within_radius(
            latitude, longitude, limit=limit, offset=offset, within_delivery_radius=True, filters=filters
        )

    def merchants_for_customer(
        self,
        customer_id: str,
        radius_meters: float | None = None,
        limit: int = 20,
        offset: int = 0,
        zone_type: str | None = None,
        strategy: str | None = None,
    ) -> CustomerSearchResult:
        engine = self.engine(strategy)
        # Reject bad parameters before touching the customer store.
        engine.validate_radius(radius_meters)
        location = self.locations.resolve(customer_id)
        search = engine.find_within_radius(
            location.coordinate.latitude,
            location.coordinate.longitude,
            radius_meters=radius_meters,
            limit=limit,
            offset=offset,
            zone_type=zone_type,
        )
        return CustomerSearchResult(location=location, search=search)

    def categories_for_merchants(
        self,
        merchant_ids: Sequence[str],
        sort_by: str = "name",
        limit: int | None = 20,
        include_inactive: bool = False,
    ) -> CategoryAggregation:
        return CategoryAggregator(self.catalog).categories_for_merchants(
            merchant_ids, sort_by=sort_by, limit=limit, include_inactive=include_inactive
        )

    def categories_for_customer(
        self,
        customer_id: str,
        sort_by: str = "name",
        limit: int | None = 20,
        include_inactive: bool = False,
        radius_meters: float | None = None,
        strategy: str | None = None,
    ) -> CustomerCategoriesResult:
        started = time.perf_counter()
        aggregator = CategoryAggregator(self.catalog)
        engine = self.engine(strategy)
        radius = engine.validate_radius(radius_meters)
        location = self.locations.resolve(customer_id)
        search = engine.find_within_radius(
            location.coordinate.latitude,
            location.coordinate.longitude,
            radius_meters=radius,
            limit=self.config.max_candidates,
        )
        merchant_ids = [entry.merchant.merchant_id for entry in search.merchants]
        aggregation = aggregator.categories_for_merchants(
            merchant_ids, sort_by=sort_by, limit=limit, include_inactive=include_inactive
        )
        aggregation.performance_metrics.extra["search"] = {
            "strategy": search.performance_metrics.strategy,
            "query_time_ms": search.performance_metrics.query_time_ms,
            "merchants_scanned": search.performance_metrics.merchants_scanned,
            "merchants_matched": search.performance_metrics.merchants_matched,
            "distance_failures": search.performance_metrics.distance_failures,
        }
        return CustomerCategoriesResult(
            location=location,
            aggregation=aggregation,
            search_radius_meters=radius,
            merchants_found=search.total_count,
            query_time_ms=round((time.perf_counter() - started) * 1000, 2),
        )

    def merchants_for_checkout(
        self,
        customer_id: str,
        radius_meters: float | None = None,
        limit: int | None = None,
    ) -> CheckoutResult:
        try:
            routed = self.provider("routed")
        except DiscoveryError as e:
            logger.warning(f"Routed provider unavailable for checkout, ranking by haversine only: {e}")
            routed = None
        resolver = CheckoutResolver(self.locations, self.merchants, routed, config=self.config)
        return resolver.merchants_for_checkout(customer_id, radius_meters=radius_meters, limit=limit)
