import pytest
from pydantic import ValidationError

from merchant_discovery.config import Settings
from merchant_discovery.errors import DiscoveryError, ErrorCode
from merchant_discovery.services.distance import (
    HaversineDistanceProvider,
    RoutedDistanceProvider,
    SpatialDistanceProvider,
    build_routed_provider,
    get_provider,
)
from merchant_discovery.services.distance import routes_client


def test_defaults():
    config = Settings(_env_file=None)

    assert config.routes_max_elements_per_request == 625
    assert config.routes_travel_mode == "TWO_WHEELER"
    assert config.max_search_radius_meters == 100_000
    assert config.default_radius_meters == 10_000
    assert config.zone_mode == "presence"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("DISCOVERY_DISTANCE_STRATEGY", "haversine")
    monkeypatch.setenv("DISCOVERY_MAX_CANDIDATES", "120")
    monkeypatch.setenv("DISCOVERY_FRONTEND_ALLOWED_ORIGINS", '["https://shop.example", "https://admin.example"]')

    config = Settings(_env_file=None)

    assert config.distance_strategy == "haversine"
    assert config.max_candidates == 120
    assert config.frontend_allowed_origins == ("https://shop.example", "https://admin.example")


def test_allowed_origins_accepts_comma_separated_values():
    config = Settings(_env_file=None, frontend_allowed_origins="https://a.example, https://b.example")
    assert config.frontend_allowed_origins == ("https://a.example", "https://b.example")


def test_unknown_strategy_rejected(monkeypatch):
    monkeypatch.setenv("DISCOVERY_DISTANCE_STRATEGY", "teleport")
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_get_provider_dispatch(monkeypatch):
    monkeypatch.setattr(routes_client.settings, "routes_api_key", "key")

    assert isinstance(get_provider("routed"), RoutedDistanceProvider)
    assert isinstance(get_provider("haversine"), HaversineDistanceProvider)
    assert isinstance(get_provider("spatial", repository=object()), SpatialDistanceProvider)
    with pytest.raises(ValueError):
        get_provider("teleport")


def test_routed_provider_without_key_is_unavailable(monkeypatch):
    monkeypatch.setattr(routes_client.settings, "routes_api_key", None)

    with pytest.raises(DiscoveryError) as excinfo:
        build_routed_provider()
    assert excinfo.value.code is ErrorCode.DISTANCE_PROVIDER_UNAVAILABLE
