"""Merchant reads from the persistent store."""

from __future__ import annotations

import json
from typing import Any

from ..models.domain import Coordinate, Merchant, MerchantFilters
from .base import SupabaseRepository, as_bool, as_float


def _geometry(value: Any) -> dict | None:
    if value in (None, "", {}, []):
        return None
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError:
            return None
    return value if isinstance(value, dict) else None


def merchant_from_row(row: dict) -> Merchant:
    """Map a ``merchants`` row (or spatial RPC row) onto the domain record."""

    return Merchant(
        merchant_id=str(row.get("id")),
        name=(row.get("outlet_name") or row.get("name") or "").strip(),
        vendor_id=str(row["vendor_id"]) if row.get("vendor_id") is not None else None,
        latitude=as_float(row.get("merchant_latitude")),
        longitude=as_float(row.get("merchant_longitude")),
        delivery_radius_meters=as_float(row.get("delivery_radius_meters")),
        is_active=as_bool(row.get("is_active"), default=True),
        is_accepting_orders=as_bool(row.get("is_accepting_orders"), default=True),
        is_currently_delivering=as_bool(row.get("is_currently_delivering")),
        service_area=_geometry(row.get("service_area")),
        priority_zones=_geometry(row.get("priority_zones")),
        delivery_zones=_geometry(row.get("delivery_zones")),
        restricted_areas=_geometry(row.get("restricted_areas")),
        avg_delivery_time_minutes=as_float(row.get("avg_delivery_time_minutes")),
        min_order_amount=as_float(row.get("min_order_amount")),
        location_geometry=_geometry(row.get("location")),
        raw=row,
    )


def _spatial_params(
    latitude: float,
    longitude: float,
    radius_meters: float,
    use_delivery_radius: bool,
    filters: MerchantFilters | None,
) -> dict:
    filters = filters or MerchantFilters()
    return {
        "lat": latitude,
        "lng": longitude,
        "radius_meters": radius_meters,
        "use_delivery_radius": use_delivery_radius,
        "currently_delivering": filters.is_currently_delivering,
        "max_delivery_minutes": filters.max_delivery_time_minutes,
        "max_min_order_amount": filters.min_order_amount,
    }


class MerchantRepository(SupabaseRepository):
    """Coarse-filtered merchant reads plus the server-side spatial queries."""

    table = "merchants"

    def find_candidates(
        self,
        limit: int,
        offset: int = 0,
        require_delivering: bool = False,
        filters: MerchantFilters | None = None,
    ) -> tuple[list[Merchant], int]:
        """Active, order-accepting merchants with both coordinates populated."""

        query = (
            self.client.table(self.table)
            .select("*", count="exact")
            .eq("is_active", True)
            .eq("is_accepting_orders", True)
            .not_.is_("merchant_latitude", "null")
            .not_.is_("merchant_longitude", "null")
        )
        if require_delivering:
            query = query.eq("is_currently_delivering", True)
        if filters is not None:
            if filters.is_currently_delivering is not None:
                query = query.eq("is_currently_delivering", filters.is_currently_delivering)
            if filters.max_delivery_time_minutes is not None:
                query = query.lte("avg_delivery_time_minutes", filters.max_delivery_time_minutes)
            if filters.min_order_amount is not None:
                query = query.lte("min_order_amount", filters.min_order_amount)
        query = query.order("id").range(offset, offset + limit - 1)
        response = self._execute(query, "fetch candidate merchants")
        rows = response.data or []
        total = response.count if response.count is not None else len(rows)
        return [merchant_from_row(row) for row in rows], total

    def count_active(self) -> int:
        query = self.client.table(self.table).select("id", count="exact").eq("is_active", True).limit(1)
        response = self._execute(query, "count active merchants")
        return response.count or 0

    def find_within_radius(
        self,
        latitude: float,
        longitude: float,
        radius_meters: float,
        limit: int,
        offset: int = 0,
        use_delivery_radius: bool = False,
        filters: MerchantFilters | None = None,
    ) -> list[dict]:
        """Run the ST_DWithin radius query; ordering and paging happen in SQL.

        Each row carries the merchant columns plus ``distance_meters``,
        ``total_count`` and ``location`` (the stored point as GeoJSON).
        """

        params = _spatial_params(latitude, longitude, radius_meters, use_delivery_radius, filters)
        params.update({"result_limit": limit, "result_offset": offset})
        query = self.client.rpc("merchants_within_radius", params)
        response = self._execute(query, "run spatial radius query")
        return list(response.data or [])

    def count_within_radius(
        self,
        latitude: float,
        longitude: float,
        radius_meters: float,
        use_delivery_radius: bool = False,
        filters: MerchantFilters | None = None,
    ) -> int:
        """Number of merchants the radius query matches, independent of paging."""

        query = self.client.rpc(
            "merchants_within_radius_count",
            _spatial_params(latitude, longitude, radius_meters, use_delivery_radius, filters),
        )
        data = self._execute(query, "count spatial radius matches").data
        if isinstance(data, list):
            data = data[0] if data else 0
        if isinstance(data, dict):
            data = data.get("merchants_within_radius_count", 0)
        return int(data or 0)

    def point_distance(self, origin: Coordinate, destination: Coordinate) -> float | None:
        query = self.client.rpc(
            "merchant_point_distance",
            {
                "origin_lat": origin.latitude,
                "origin_lng": origin.longitude,
                "destination_lat": destination.latitude,
                "destination_lng": destination.longitude,
            },
        )
        response = self._execute(query, "compute spatial distance")
        data = response.data
        if isinstance(data, list):
            data = data[0] if data else None
        if isinstance(data, dict):
            data = data.get("distance_meters")
        return as_float(data)
