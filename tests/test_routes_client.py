import json

import httpx
import pytest

from merchant_discovery.services.distance import routes_client
from merchant_discovery.services.distance.routes_client import (
    RoutesMatrixClient,
    parse_duration,
    parse_element,
)


def _origin_index(request_origin: dict) -> int:
    # Test origins encode their position in the latitude (index / 100).
    return round(request_origin["waypoint"]["location"]["latLng"]["latitude"] * 100)


def _client(handler, **overrides) -> RoutesMatrixClient:
    options = {
        "api_key": "test-key",
        "base_url": "https://routes.test",
        "backoff_seconds": 0,
        "max_retries": 2,
    }
    options.update(overrides)
    return RoutesMatrixClient(transport=httpx.MockTransport(handler), **options)


def _origins(count: int) -> list[tuple[float, float]]:
    return [(i / 100, 120.0) for i in range(count)]


def test_matrix_chunks_large_requests_and_keeps_input_order():
    requests: list[int] = []

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.headers["X-Goog-Api-Key"] == "test-key"
        assert "distanceMeters" in request.headers["X-Goog-FieldMask"]
        body = json.loads(request.content)
        assert body["travelMode"] == "TWO_WHEELER"
        assert body["routingPreference"] == "TRAFFIC_AWARE"
        origins = body["origins"]
        requests.append(len(origins) * len(body["destinations"]))
        elements = [
            {
                "originIndex": local,
                "destinationIndex": 0,
                "condition": "ROUTE_EXISTS",
                "distanceMeters": _origin_index(origin) * 10,
                "duration": f"{_origin_index(origin)}s",
            }
            for local, origin in enumerate(origins)
        ]
        # The API streams elements in arbitrary order.
        return httpx.Response(200, json=list(reversed(elements)))

    client = _client(handler, max_parallel_requests=3)
    matrix = client.matrix(_origins(1300), [(14.5995, 120.9842)])

    assert sorted(requests) == [50, 625, 625]
    assert len(matrix) == 1300
    for index, row in enumerate(matrix):
        assert row[0].status == "OK"
        assert row[0].meters == index * 10
        assert row[0].seconds == index


def test_matrix_maps_element_conditions_and_rpc_codes():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json=[
                {"originIndex": 0, "destinationIndex": 0, "condition": "ROUTE_EXISTS", "duration": "0s"},
                {"originIndex": 1, "destinationIndex": 0, "condition": "ROUTE_NOT_FOUND"},
                {"originIndex": 2, "destinationIndex": 0, "status": {"code": 8, "message": "quota"}},
                {"originIndex": 3, "destinationIndex": 0, "status": {"code": 4}},
            ],
        )

    matrix = _client(handler).matrix(_origins(4), [(14.5995, 120.9842)])
    statuses = [row[0].status for row in matrix]

    assert statuses == ["OK", "NOT_FOUND", "QUOTA_EXCEEDED", "TIMEOUT"]
    # Zero distances are omitted from the payload.
    assert matrix[0][0].meters == 0


def test_matrix_retries_server_errors_then_succeeds():
    calls = {"count": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        calls["count"] += 1
        if calls["count"] == 1:
            return httpx.Response(503, json={"error": "busy"})
        return httpx.Response(
            200,
            json=[{"originIndex": 0, "destinationIndex": 0, "condition": "ROUTE_EXISTS", "distanceMeters": 1200, "duration": "300s"}],
        )

    matrix = _client(handler).matrix(_origins(1), [(14.5995, 120.9842)])

    assert calls["count"] == 2
    assert matrix[0][0].ok
    assert matrix[0][0].meters == 1200
    assert matrix[0][0].seconds == 300


def test_matrix_does_not_retry_client_errors():
    calls = {"count": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        calls["count"] += 1
        return httpx.Response(400, json={"error": "bad request"})

    matrix = _client(handler).matrix(_origins(2), [(14.5995, 120.9842)])

    assert calls["count"] == 1
    assert [row[0].status for row in matrix] == ["REQUEST_FAILED", "REQUEST_FAILED"]


def test_matrix_marks_exhausted_throttling_as_quota_exceeded():
    calls = {"count": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        calls["count"] += 1
        return httpx.Response(429, json={"error": "slow down"})

    matrix = _client(handler, max_retries=1).matrix(_origins(1), [(14.5995, 120.9842)])

    assert calls["count"] == 2
    assert matrix[0][0].status == "QUOTA_EXCEEDED"
    assert not matrix[0][0].ok


def test_matrix_timeout_marks_chunk_as_timeout():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    matrix = _client(handler, max_retries=0).matrix(_origins(3), [(14.5995, 120.9842)])

    assert [row[0].status for row in matrix] == ["TIMEOUT"] * 3


def test_check_health_uses_single_fixed_pair():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        seen.append((len(body["origins"]), len(body["destinations"])))
        return httpx.Response(
            200,
            json=[{"originIndex": 0, "destinationIndex": 0, "condition": "ROUTE_EXISTS", "distanceMeters": 1500}],
        )

    assert _client(handler).check_health() is True
    assert seen == [(1, 1)]


def test_check_health_reports_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"error": "down"})

    assert _client(handler, max_retries=0).check_health() is False


def test_client_requires_api_key(monkeypatch):
    monkeypatch.setattr(routes_client.settings, "routes_api_key", None)
    with pytest.raises(ValueError):
        RoutesMatrixClient()


def test_parse_helpers():
    assert parse_duration("845s") == 845.0
    assert parse_duration("1.5s") == 1.5
    assert parse_duration(None) is None
    assert parse_duration("soon") is None

    result = parse_element({"condition": "ROUTE_EXISTS", "distanceMeters": 950, "duration": "120s"})
    assert (result.meters, result.seconds, result.status) == (950.0, 120.0, "OK")
    assert parse_element({"status": {"code": 14}}).status == "UNAVAILABLE"
