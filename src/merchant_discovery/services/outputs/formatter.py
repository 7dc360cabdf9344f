"""Utilities to serialize discovery results into API response models."""

from __future__ import annotations

from dataclasses import asdict

from ...models.domain import Address, CategoryWithMetadata, Customer, MerchantWithDistance, PerformanceMetrics
from ...schemas.discovery import (
    AddressModel,
    CategoriesResponse,
    CategoryModel,
    CheckoutResponse,
    CoordinateModel,
    CustomerMerchantsResponse,
    CustomerModel,
    LocationCategoriesResponse,
    MerchantModel,
    PaginationModel,
    PerformanceMetricsModel,
    RadiusSearchResponse,
    ZoneMembershipModel,
)
from ..categories import CategoryAggregation
from ..checkout import CheckoutResult
from ..discovery import CustomerCategoriesResult, CustomerSearchResult
from ..search import RadiusSearchResult


def metrics_to_model(metrics: PerformanceMetrics) -> PerformanceMetricsModel:
    return PerformanceMetricsModel(**asdict(metrics))


def merchant_to_model(entry: MerchantWithDistance) -> MerchantModel:
    merchant = entry.merchant
    zones = None
    if entry.zones is not None:
        zones = ZoneMembershipModel(**asdict(entry.zones), zone_types=entry.zones.zone_types)
    return MerchantModel(
        id=merchant.merchant_id,
        name=merchant.name,
        vendor_id=merchant.vendor_id,
        latitude=merchant.latitude,
        longitude=merchant.longitude,
        delivery_radius_meters=merchant.delivery_radius_meters,
        is_active=merchant.is_active,
        is_accepting_orders=merchant.is_accepting_orders,
        is_currently_delivering=merchant.is_currently_delivering,
        avg_delivery_time_minutes=merchant.avg_delivery_time_minutes,
        min_order_amount=merchant.min_order_amount,
        distance_meters=entry.distance_meters,
        distance_km=entry.distance_km,
        duration_seconds=entry.duration_seconds,
        is_within_delivery_radius=entry.is_within_delivery_radius,
        estimated_delivery_time_minutes=entry.estimated_delivery_time_minutes,
        distance_source=entry.distance_source,
        zones=zones,
    )


def customer_to_model(customer: Customer) -> CustomerModel:
    return CustomerModel(id=customer.customer_id, user_id=customer.user_id)


def address_to_model(address: Address) -> AddressModel:
    return AddressModel(
        id=address.address_id,
        formatted_address=address.formatted_address,
        latitude=address.latitude,
        longitude=address.longitude,
    )


def search_to_response(result: RadiusSearchResult) -> RadiusSearchResponse:
    return RadiusSearchResponse(**_search_fields(result))


def _search_fields(result: RadiusSearchResult) -> dict:
    return {
        "merchants": [merchant_to_model(entry) for entry in result.merchants],
        "total_count": result.total_count,
        "pagination": PaginationModel(**result.pagination.as_dict()),
        "search_center": CoordinateModel(**asdict(result.search_center)),
        "search_radius_meters": result.search_radius_meters,
        "within_delivery_radius": result.within_delivery_radius,
        "performance_metrics": metrics_to_model(result.performance_metrics),
    }


def customer_search_to_response(result: CustomerSearchResult) -> CustomerMerchantsResponse:
    return CustomerMerchantsResponse(
        **_search_fields(result.search),
        customer=customer_to_model(result.location.customer),
        address=address_to_model(result.location.address),
    )


def category_to_model(entry: CategoryWithMetadata) -> CategoryModel:
    category = entry.category
    return CategoryModel(
        id=category.category_id,
        name=category.name,
        slug=category.slug,
        is_active=category.is_active,
        display_order=category.display_order,
        product_count=entry.product_count,
        merchant_count=entry.merchant_count,
    )


def _category_fields(aggregation: CategoryAggregation) -> dict:
    return {
        "categories": [category_to_model(entry) for entry in aggregation.categories],
        "total_categories": len(aggregation.categories),
        "merchants_analyzed": aggregation.merchants_analyzed,
        "product_count": aggregation.product_count,
        "merchant_count": aggregation.merchant_count,
        "performance_metrics": metrics_to_model(aggregation.performance_metrics),
    }


def categories_to_response(aggregation: CategoryAggregation) -> CategoriesResponse:
    return CategoriesResponse(**_category_fields(aggregation))


def customer_categories_to_response(result: CustomerCategoriesResult) -> LocationCategoriesResponse:
    return LocationCategoriesResponse(
        **_category_fields(result.aggregation),
        customer=customer_to_model(result.location.customer),
        address=address_to_model(result.location.address),
        search_radius=result.search_radius_meters,
        merchants_found=result.merchants_found,
        response_time_ms=result.query_time_ms,
    )


def checkout_to_response(result: CheckoutResult) -> CheckoutResponse:
    return CheckoutResponse(
        customer=customer_to_model(result.customer),
        address=address_to_model(result.address),
        merchants=[merchant_to_model(entry) for entry in result.merchants],
        total_count=result.total_count,
        search_radius_meters=result.search_radius_meters,
        performance_metrics=metrics_to_model(result.performance_metrics),
    )
