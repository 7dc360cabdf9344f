import pytest

from merchant_discovery.errors import DiscoveryError, ErrorCode
from merchant_discovery.models.domain import Address, Customer, DistanceResult, Merchant
from merchant_discovery.services.checkout import CheckoutResolver
from merchant_discovery.services.customers import CustomerLocationResolver
from merchant_discovery.services.distance.base import DistanceProvider

CUSTOMER_POINT = (14.5995, 120.9842)


class DummyCustomers:
    def __init__(self):
        self.calls = []

    def get_customer(self, customer_id):
        self.calls.append(customer_id)
        if customer_id != "C1":
            return None
        return Customer(customer_id="C1", user_id="U1", active_address_id="A1")

    def get_address(self, address_id):
        return Address(address_id="A1", customer_id="C1", latitude=CUSTOMER_POINT[0], longitude=CUSTOMER_POINT[1])


class DummyMerchants:
    def __init__(self, merchants):
        self.merchants = merchants
        self.calls = []

    def find_candidates(self, limit, offset=0, require_delivering=False):
        self.calls.append({"limit": limit, "require_delivering": require_delivering})
        return self.merchants, len(self.merchants)


class DummyRouted(DistanceProvider):
    strategy = "routed"

    def __init__(self, results=None, error=None):
        self.results = results or {}
        self.error = error

    def distances(self, origins, destination):
        if self.error:
            raise self.error
        return [self.results.get(origin.latitude, DistanceResult(None, None, "NOT_FOUND")) for origin in origins]


def _merchant(mid, lat, lon=120.9842, radius=None, delivering=True):
    return Merchant(
        merchant_id=mid,
        name=f"Merchant {mid}",
        latitude=lat,
        longitude=lon,
        delivery_radius_meters=radius,
        is_currently_delivering=delivering,
    )


def _resolver(merchants, routed, customers=None):
    customers = customers or DummyCustomers()
    return CheckoutResolver(CustomerLocationResolver(customers), DummyMerchants(merchants), routed)


def test_checkout_falls_back_to_haversine_per_merchant():
    merchants = [
        _merchant("routed", 14.62, radius=5000),
        # ~1.1 km north of the customer; routed lookup fails for this one.
        _merchant("fallback", 14.6095, radius=5000),
    ]
    routed = DummyRouted({14.62: DistanceResult(meters=3000, seconds=600, status="OK")})

    result = _resolver(merchants, routed).merchants_for_checkout("C1")

    by_id = {entry.merchant.merchant_id: entry for entry in result.merchants}
    assert set(by_id) == {"routed", "fallback"}
    assert by_id["routed"].distance_source == "routed"
    assert by_id["routed"].distance_meters == 3000
    assert by_id["fallback"].distance_source == "haversine"
    assert by_id["fallback"].distance_meters == pytest.approx(1112, rel=0.01)
    assert [entry.merchant.merchant_id for entry in result.merchants] == ["fallback", "routed"]
    assert result.performance_metrics.fallback_count == 1
    assert result.performance_metrics.distance_failures == 1
    assert result.customer.customer_id == "C1"


def test_checkout_ranks_deliverable_merchants_first():
    merchants = [
        _merchant("close-but-out-of-range", 14.601, radius=500),
        _merchant("far-but-delivers", 14.602, radius=10_000),
    ]
    routed = DummyRouted({
        14.601: DistanceResult(meters=1000, seconds=200, status="OK"),
        14.602: DistanceResult(meters=4000, seconds=800, status="OK"),
    })

    result = _resolver(merchants, routed).merchants_for_checkout("C1")

    assert [entry.merchant.merchant_id for entry in result.merchants] == ["far-but-delivers", "close-but-out-of-range"]
    assert result.merchants[0].is_within_delivery_radius
    assert not result.merchants[1].is_within_delivery_radius


def test_checkout_survives_provider_outage():
    merchants = [_merchant("m1", 14.6005), _merchant("m2", 14.6015)]
    routed = DummyRouted(error=ConnectionError("routes down"))

    result = _resolver(merchants, routed).merchants_for_checkout("C1")

    assert [entry.merchant.merchant_id for entry in result.merchants] == ["m1", "m2"]
    assert all(entry.distance_source == "haversine" for entry in result.merchants)
    assert result.performance_metrics.fallback_count == 2


def test_checkout_without_routed_provider_uses_haversine_only():
    result = _resolver([_merchant("m1", 14.6005)], None).merchants_for_checkout("C1")

    assert result.performance_metrics.strategy == "haversine"
    assert result.merchants[0].distance_source == "haversine"


def test_checkout_filters_non_delivering_and_applies_radius_and_limit():
    merchants = [
        _merchant("idle", 14.6000, delivering=False),
        _merchant("near", 14.6010),
        _merchant("mid", 14.6020),
        _merchant("far", 15.5),
    ]
    repository = DummyMerchants(merchants)
    resolver = CheckoutResolver(CustomerLocationResolver(DummyCustomers()), repository, DummyRouted())

    result = resolver.merchants_for_checkout("C1", radius_meters=20_000, limit=1)

    assert [entry.merchant.merchant_id for entry in result.merchants] == ["near"]
    assert result.total_count == 2
    assert repository.calls[0]["require_delivering"] is True


def test_checkout_validates_before_customer_lookup():
    customers = DummyCustomers()
    resolver = _resolver([], DummyRouted(), customers=customers)

    with pytest.raises(DiscoveryError) as excinfo:
        resolver.merchants_for_checkout("C1", radius_meters=200_000)
    assert excinfo.value.code is ErrorCode.RADIUS_TOO_LARGE

    with pytest.raises(DiscoveryError) as excinfo:
        resolver.merchants_for_checkout("C1", limit=0)
    assert excinfo.value.code is ErrorCode.INVALID_PAGINATION
    assert customers.calls == []


def test_checkout_unknown_customer():
    with pytest.raises(DiscoveryError) as excinfo:
        _resolver([], DummyRouted()).merchants_for_checkout("nobody")
    assert excinfo.value.code is ErrorCode.CUSTOMER_NOT_FOUND


def test_discovery_checkout_without_routes_key(monkeypatch):
    from merchant_discovery.services.discovery import DiscoveryService
    from merchant_discovery.services.distance import routes_client

    monkeypatch.setattr(routes_client.settings, "routes_api_key", None)
    service = DiscoveryService(
        merchants=DummyMerchants([_merchant("m1", 14.6005)]),
        customers=DummyCustomers(),
        catalog=object(),
    )

    result = service.merchants_for_checkout("C1")

    assert result.performance_metrics.strategy == "haversine"
    assert [entry.merchant.merchant_id for entry in result.merchants] == ["m1"]


@pytest.mark.parametrize("radius", [float("nan"), float("inf"), "abc", -5, 0])
def test_checkout_rejects_invalid_radius(radius):
    customers = DummyCustomers()
    routed = DummyRouted({-33.0: DistanceResult(meters=9_000_000, seconds=360_000, status="OK")})
    resolver = _resolver([_merchant("sydney", -33.0, lon=151.0, radius=5000)], routed, customers=customers)

    with pytest.raises(DiscoveryError) as excinfo:
        resolver.merchants_for_checkout("C1", radius_meters=radius)

    assert excinfo.value.code is ErrorCode.INVALID_RADIUS
    assert customers.calls == []


def test_checkout_drops_merchants_beyond_the_radius():
    routed = DummyRouted({-33.0: DistanceResult(meters=9_000_000, seconds=360_000, status="OK")})
    resolver = _resolver([_merchant("sydney", -33.0, lon=151.0, radius=5000)], routed)

    result = resolver.merchants_for_checkout("C1", radius_meters=50_000)

    assert result.merchants == []
    assert result.total_count == 0


def test_checkout_puts_merchants_without_delivery_radius_in_second_group():
    merchants = [
        _merchant("no-radius-near", 14.601),
        _merchant("no-radius-far", 14.603),
        _merchant("covers", 14.602, radius=10_000),
    ]
    routed = DummyRouted({
        14.601: DistanceResult(meters=300, seconds=60, status="OK"),
        14.603: DistanceResult(meters=6000, seconds=900, status="OK"),
        14.602: DistanceResult(meters=4000, seconds=800, status="OK"),
    })

    result = _resolver(merchants, routed).merchants_for_checkout("C1")

    assert [entry.merchant.merchant_id for entry in result.merchants] == ["covers", "no-radius-near", "no-radius-far"]
    assert [entry.is_within_delivery_radius for entry in result.merchants] == [True, False, False]
