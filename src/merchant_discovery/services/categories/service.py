"""Category aggregation over a resolved merchant set."""

from __future__ import annotations

import logging
import time
from collections import defaultdict
from dataclasses import dataclass
from typing import List, Sequence

from ...data.catalog_repository import CatalogRepository
from ...errors import DiscoveryError, ErrorCode
from ...models.domain import Category, CategoryWithMetadata, PerformanceMetrics

MISSING_DISPLAY_ORDER = 999

SORT_ALIASES = {
    "name": "name",
    "productCount": "productCount",
    "product_count": "productCount",
    "popularity": "productCount",
    "merchantCount": "merchantCount",
    "merchant_count": "merchantCount",
    "displayOrder": "displayOrder",
    "display_order": "displayOrder",
}

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class CategoryAggregation:
    categories: List[CategoryWithMetadata]
    merchants_analyzed: int
    product_count: int
    performance_metrics: PerformanceMetrics

    @property
    def merchant_count(self) -> int:
        """Merchants contributing at least one product to the returned categories."""
        return self.performance_metrics.extra.get("merchants_with_products", 0)


def _sort_key(sort_by: str):
    def name_key(entry: CategoryWithMetadata) -> tuple:
        return (entry.category.name.lower(), entry.category.category_id)

    match sort_by:
        case "name":
            return name_key
        case "productCount":
            return lambda entry: (-entry.product_count, *name_key(entry))
        case "merchantCount":
            return lambda entry: (-entry.merchant_count, *name_key(entry))
        case "displayOrder":
            return lambda entry: (
                entry.category.display_order if entry.category.display_order is not None else MISSING_DISPLAY_ORDER,
                *name_key(entry),
            )
    raise DiscoveryError(
        ErrorCode.INVALID_SORT,
        f"Unknown sort '{sort_by}'. Expected one of name, productCount, merchantCount, displayOrder.",
    )


class CategoryAggregator:
    """Walk merchant -> product -> category links and count what each category offers."""

    def __init__(self, catalog: CatalogRepository) -> None:
        self.catalog = catalog

    def categories_for_merchants(
        self,
        merchant_ids: Sequence[str],
        sort_by: str = "name",
        limit: int | None = 20,
        include_inactive: bool = False,
    ) -> CategoryAggregation:
        started = time.perf_counter()
        canonical_sort = SORT_ALIASES.get(sort_by)
        key = _sort_key(canonical_sort or sort_by)
        if limit is not None and limit < 0:
            raise DiscoveryError(ErrorCode.INVALID_PAGINATION, f"limit must be non-negative, got {limit}")

        unique_merchant_ids = list(dict.fromkeys(str(mid) for mid in merchant_ids if mid is not None))
        metrics = PerformanceMetrics(strategy="category_aggregation", merchants_scanned=len(unique_merchant_ids))
        if not unique_merchant_ids:
            return CategoryAggregation(categories=[], merchants_analyzed=0, product_count=0, performance_metrics=metrics)

        links = self.catalog.active_merchant_products(unique_merchant_ids)
        merchants_by_product: dict[str, set[str]] = defaultdict(set)
        for link in links:
            merchants_by_product[link.product_id].add(link.merchant_id)

        products = self.catalog.active_products_with_categories(list(merchants_by_product))

        categories: dict[str, Category] = {}
        product_counts: dict[str, int] = defaultdict(int)
        merchants_by_category: dict[str, set[str]] = defaultdict(set)
        for product in products:
            seen_in_product: set[str] = set()
            for category in product.categories:
                if category.category_id in seen_in_product:
                    continue
                seen_in_product.add(category.category_id)
                categories.setdefault(category.category_id, category)
                product_counts[category.category_id] += 1
                merchants_by_category[category.category_id] |= merchants_by_product.get(product.product_id, set())

        aggregated = [
            CategoryWithMetadata(
                category=category,
                product_count=product_counts[category_id],
                merchant_count=len(merchants_by_category[category_id]),
            )
            for category_id, category in categories.items()
            if include_inactive or category.is_active
        ]
        aggregated.sort(key=key)
        if limit is not None:
            aggregated = aggregated[:limit]

        contributing_merchants: set[str] = set()
        for category_id in (entry.category.category_id for entry in aggregated):
            contributing_merchants |= merchants_by_category[category_id]

        metrics.merchants_matched = len(contributing_merchants)
        metrics.extra.update({
            "merchant_products": len(links),
            "products": len(products),
            "categories_found": len(categories),
            "merchants_with_products": len(contributing_merchants),
        })
        metrics.query_time_ms = round((time.perf_counter() - started) * 1000, 2)
        logger.info(
            f"Aggregated {len(aggregated)} categories from {len(products)} products "
            f"across {len(unique_merchant_ids)} merchants in {metrics.query_time_ms}ms"
        )
        return CategoryAggregation(
            categories=aggregated,
            merchants_analyzed=len(unique_merchant_ids),
            product_count=len(products),
            performance_metrics=metrics,
        )
