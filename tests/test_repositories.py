from types import SimpleNamespace

import pytest

from merchant_discovery.data import base as data_base
from merchant_discovery.data.catalog_repository import CatalogRepository
from merchant_discovery.data.customers_repository import CustomerRepository
from merchant_discovery.data.merchants_repository import MerchantRepository, merchant_from_row
from merchant_discovery.errors import DiscoveryError, ErrorCode
from merchant_discovery.models.domain import Coordinate, MerchantFilters


class FakeQuery:
    """Records PostgREST builder calls and returns canned rows on execute()."""

    def __init__(self, name, rows=None, count=None, error=None):
        self.name = name
        self.rows = rows or []
        self.count = count
        self.error = error
        self.calls = []

    def __getattr__(self, method):
        def record(*args, **kwargs):
            self.calls.append((method, args, kwargs))
            return self

        return record

    @property
    def not_(self):
        self.calls.append(("not_", (), {}))
        return self

    def execute(self):
        if self.error:
            raise self.error
        return SimpleNamespace(data=self.rows, count=self.count)


class FakeSupabase:
    def __init__(self, tables=None, rpcs=None):
        self.tables = tables or {}
        self.rpcs = rpcs or {}
        self.queries = []

    def table(self, name):
        query = self.tables.get(name) or FakeQuery(name)
        self.queries.append(query)
        return query

    def rpc(self, name, params):
        query = self.rpcs[name]
        query.calls.append(("rpc", (name, params), {}))
        self.queries.append(query)
        return query


MERCHANT_ROW = {
    "id": 7,
    "outlet_name": " Jollibee Ermita ",
    "vendor_id": 3,
    "merchant_latitude": "14.5995",
    "merchant_longitude": 120.9842,
    "delivery_radius_meters": 3000,
    "is_active": True,
    "is_accepting_orders": "true",
    "is_currently_delivering": None,
    "priority_zones": '{"type": "Polygon", "coordinates": []}',
    "delivery_zones": {},
    "location": '{"type": "Point", "coordinates": [120.9842, 14.5995]}',
}


def test_merchant_from_row_normalises_columns():
    merchant = merchant_from_row(MERCHANT_ROW)

    assert merchant.merchant_id == "7"
    assert merchant.name == "Jollibee Ermita"
    assert merchant.vendor_id == "3"
    assert merchant.latitude == 14.5995
    assert merchant.is_accepting_orders is True
    assert merchant.is_currently_delivering is False
    assert merchant.priority_zones == {"type": "Polygon", "coordinates": []}
    assert merchant.delivery_zones is None
    assert merchant.location_geometry["type"] == "Point"


def test_find_candidates_applies_coarse_filters():
    query = FakeQuery("merchants", rows=[MERCHANT_ROW], count=41)
    repository = MerchantRepository(client=FakeSupabase(tables={"merchants": query}))

    merchants, total = repository.find_candidates(limit=30, require_delivering=True)

    assert [m.merchant_id for m in merchants] == ["7"]
    assert total == 41
    methods = [(name, args) for name, args, _ in query.calls]
    assert ("eq", ("is_active", True)) in methods
    assert ("eq", ("is_accepting_orders", True)) in methods
    assert ("eq", ("is_currently_delivering", True)) in methods
    assert ("is_", ("merchant_latitude", "null")) in methods
    assert ("range", (0, 29)) in methods


def test_find_within_radius_calls_spatial_function():
    rpc = FakeQuery("merchants_within_radius", rows=[{"id": 1, "distance_meters": 10.5, "total_count": 1}])
    repository = MerchantRepository(client=FakeSupabase(rpcs={"merchants_within_radius": rpc}))

    rows = repository.find_within_radius(14.5, 120.9, 5000, limit=20, offset=40, use_delivery_radius=True)

    assert rows[0]["distance_meters"] == 10.5
    _, (name, params), _ = rpc.calls[0]
    assert name == "merchants_within_radius"
    assert params == {
        "lat": 14.5,
        "lng": 120.9,
        "radius_meters": 5000,
        "result_limit": 20,
        "result_offset": 40,
        "use_delivery_radius": True,
        "currently_delivering": None,
        "max_delivery_minutes": None,
        "max_min_order_amount": None,
    }


def test_find_candidates_applies_store_filters():
    query = FakeQuery("merchants", rows=[], count=0)
    repository = MerchantRepository(client=FakeSupabase(tables={"merchants": query}))
    filters = MerchantFilters(is_currently_delivering=False, max_delivery_time_minutes=25, min_order_amount=200)

    repository.find_candidates(limit=10, filters=filters)

    methods = [(name, args) for name, args, _ in query.calls]
    assert ("eq", ("is_currently_delivering", False)) in methods
    assert ("lte", ("avg_delivery_time_minutes", 25)) in methods
    assert ("lte", ("min_order_amount", 200)) in methods


def test_find_candidates_without_filters_leaves_store_columns_alone():
    query = FakeQuery("merchants", rows=[], count=0)
    repository = MerchantRepository(client=FakeSupabase(tables={"merchants": query}))

    repository.find_candidates(limit=10)

    methods = [name for name, _, _ in query.calls]
    assert "lte" not in methods
    assert ("eq", ("is_currently_delivering", True)) not in [(name, args) for name, args, _ in query.calls]


def test_spatial_queries_forward_filters():
    rpc = FakeQuery("merchants_within_radius", rows=[])
    repository = MerchantRepository(client=FakeSupabase(rpcs={"merchants_within_radius": rpc}))

    repository.find_within_radius(
        14.5, 120.9, 5000, limit=10, filters=MerchantFilters(is_currently_delivering=True, max_delivery_time_minutes=40)
    )

    _, (_, params), _ = rpc.calls[0]
    assert params["currently_delivering"] is True
    assert params["max_delivery_minutes"] == 40
    assert params["max_min_order_amount"] is None


@pytest.mark.parametrize("data", [37, [37], [{"merchants_within_radius_count": 37}], {"merchants_within_radius_count": "37"}])
def test_count_within_radius_reads_scalar_shapes(data):
    rpc = FakeQuery("merchants_within_radius_count", rows=data)
    repository = MerchantRepository(client=FakeSupabase(rpcs={"merchants_within_radius_count": rpc}))

    assert repository.count_within_radius(14.5, 120.9, 5000, use_delivery_radius=True) == 37
    _, (name, params), _ = rpc.calls[0]
    assert name == "merchants_within_radius_count"
    assert params["use_delivery_radius"] is True
    assert "result_limit" not in params


def test_count_within_radius_empty_response_is_zero():
    rpc = FakeQuery("merchants_within_radius_count", rows=[])
    repository = MerchantRepository(client=FakeSupabase(rpcs={"merchants_within_radius_count": rpc}))

    assert repository.count_within_radius(14.5, 120.9, 5000) == 0


def test_point_distance_reads_scalar_rows():
    rpc = FakeQuery("merchant_point_distance", rows=[{"distance_meters": "812.4"}])
    repository = MerchantRepository(client=FakeSupabase(rpcs={"merchant_point_distance": rpc}))

    assert repository.point_distance(Coordinate(14.6, 120.98), Coordinate(14.59, 120.97)) == 812.4


def test_query_failure_becomes_store_unavailable():
    query = FakeQuery("customers", error=RuntimeError("connection reset"))
    repository = CustomerRepository(client=FakeSupabase(tables={"customers": query}))

    with pytest.raises(DiscoveryError) as excinfo:
        repository.get_customer("C1")
    assert excinfo.value.code is ErrorCode.STORE_UNAVAILABLE


def test_missing_client_is_store_unavailable(monkeypatch):
    monkeypatch.setattr(data_base, "get_supabase_client", lambda: None)

    with pytest.raises(DiscoveryError) as excinfo:
        MerchantRepository().count_active()
    assert excinfo.value.code is ErrorCode.STORE_UNAVAILABLE


def test_customer_and_address_lookup():
    client = FakeSupabase(
        tables={
            "customers": FakeQuery("customers", rows=[{"id": "C1", "user_id": "U1", "active_address_id": "A1"}]),
            "addresses": FakeQuery(
                "addresses",
                rows=[{"id": "A1", "customer_id": "C1", "latitude": "14.6", "longitude": "120.98", "formatted_address": "Manila"}],
            ),
        }
    )
    repository = CustomerRepository(client=client)

    customer = repository.get_customer("C1")
    address = repository.get_address(customer.active_address_id)

    assert customer.active_address_id == "A1"
    assert (address.latitude, address.longitude) == (14.6, 120.98)


def test_catalog_reads_links_and_nested_categories():
    client = FakeSupabase(
        tables={
            "merchant_products": FakeQuery(
                "merchant_products",
                rows=[
                    {"merchant_id": "M1", "product_id": "P1", "is_active": True, "is_available": True},
                    {"merchant_id": "M1", "product_id": None},
                ],
            ),
            "products": FakeQuery(
                "products",
                rows=[
                    {
                        "id": "P1",
                        "name": "Cola",
                        "is_active": True,
                        "categories": [{"id": "c1", "name": "Beverages", "slug": "beverages", "is_active": True, "display_order": "2"}],
                    }
                ],
            ),
        }
    )
    catalog = CatalogRepository(client=client)

    links = catalog.active_merchant_products(["M1"])
    products = catalog.active_products_with_categories(["P1"])

    assert [(link.merchant_id, link.product_id) for link in links] == [("M1", "P1")]
    assert products[0].categories[0].name == "Beverages"
    assert products[0].categories[0].display_order == 2
