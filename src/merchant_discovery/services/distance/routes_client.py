"""HTTP client for the Routes distance matrix API."""

from __future__ import annotations

import logging
import re
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Sequence

import httpx

from ...config import settings
from ...models.domain import DistanceResult

MATRIX_PATH = "/distanceMatrix/v2:computeRouteMatrix"
FIELD_MASK = "originIndex,destinationIndex,status,condition,distanceMeters,duration"

# Element-level google.rpc codes we translate to readable statuses.
RPC_STATUS_NAMES = {
    4: "TIMEOUT",
    5: "NOT_FOUND",
    7: "PERMISSION_DENIED",
    8: "QUOTA_EXCEEDED",
    14: "UNAVAILABLE",
}

# Small fixed pair used for availability checks (Manila, ~1.5 km apart).
HEALTH_CHECK_ORIGIN = (14.5995, 120.9842)
HEALTH_CHECK_DESTINATION = (14.5866, 120.9762)

logger = logging.getLogger(__name__)


class RoutesMatrixClient:
    """Batched origin/destination distance lookups against the Routes API.

    Coordinates are ``(lat, lon)`` tuples. Results are returned as a matrix
    indexed ``[origin][destination]`` in input order regardless of how the
    request was chunked.
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        travel_mode: str | None = None,
        routing_preference: str | None = None,
        timeout: float | None = None,
        health_check_timeout: float | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
        max_elements_per_request: int | None = None,
        max_parallel_requests: int | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.api_key = api_key or settings.routes_api_key
        if not self.api_key:
            raise ValueError("Routes API key is not configured.")
        self.base_url = (base_url or settings.routes_base_url).rstrip("/")
        self.travel_mode = travel_mode or settings.routes_travel_mode
        self.routing_preference = routing_preference or settings.routes_routing_preference
        self.timeout = timeout if timeout is not None else settings.routes_timeout_seconds
        self.health_check_timeout = health_check_timeout if health_check_timeout is not None else settings.routes_health_check_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.routes_max_retries
        self.backoff_seconds = backoff_seconds if backoff_seconds is not None else settings.routes_backoff_seconds
        self.max_elements_per_request = max_elements_per_request or settings.routes_max_elements_per_request
        self.max_parallel_requests = max_parallel_requests or settings.routes_max_parallel_requests
        self._transport = transport

    def _get_client(self, timeout: float) -> httpx.Client:
        """Create a client per request so chunk workers never share one."""
        return httpx.Client(
            timeout=httpx.Timeout(timeout, connect=min(timeout, 10.0)),
            transport=self._transport,
        )

    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "X-Goog-Api-Key": self.api_key,
            "X-Goog-FieldMask": FIELD_MASK,
        }

    def _payload(
        self,
        origins: Sequence[tuple[float, float]],
        destinations: Sequence[tuple[float, float]],
    ) -> dict:
        def waypoint(lat: float, lon: float) -> dict:
            return {"waypoint": {"location": {"latLng": {"latitude": lat, "longitude": lon}}}}

        payload = {
            "origins": [waypoint(lat, lon) for lat, lon in origins],
            "destinations": [waypoint(lat, lon) for lat, lon in destinations],
            "travelMode": self.travel_mode,
        }
        # Routing preference is only accepted for motorised traffic-aware modes.
        if self.travel_mode in {"DRIVE", "TWO_WHEELER"}:
            payload["routingPreference"] = self.routing_preference
        return payload

    def _matrix_single_request(
        self,
        origins: Sequence[tuple[float, float]],
        destinations: Sequence[tuple[float, float]],
        timeout: float | None = None,
    ) -> list[dict]:
        """Make a single matrix request for a chunk that fits the element limit."""
        if not origins or not destinations:
            raise ValueError("At least one origin and one destination are required.")
        if len(origins) * len(destinations) > self.max_elements_per_request:
            raise ValueError(
                f"Matrix chunk of {len(origins)}x{len(destinations)} exceeds "
                f"{self.max_elements_per_request} elements per request."
            )

        url = f"{self.base_url}{MATRIX_PATH}"
        client = self._get_client(timeout or self.timeout)
        try:
            attempt = 0
            while True:
                try:
                    response = client.post(url, json=self._payload(origins, destinations), headers=self._headers())
                    response.raise_for_status()
                    data = response.json()
                    if not isinstance(data, list):
                        raise ValueError("Routes matrix response is not a list of elements.")
                    return data
                except httpx.HTTPStatusError as e:
                    status_code = e.response.status_code
                    # Only throttling and server errors are worth another attempt.
                    if status_code != 429 and status_code < 500:
                        raise
                    attempt += 1
                    if attempt > self.max_retries:
                        raise
                    wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                    logger.debug(f"Routes HTTP {status_code}, retrying in {wait_time:.1f}s (attempt {attempt}/{self.max_retries})")
                    time.sleep(wait_time)
                except httpx.TimeoutException as e:
                    attempt += 1
                    if attempt > self.max_retries:
                        logger.warning(f"Routes request timed out after {self.max_retries} retries: {e}")
                        raise
                    wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                    logger.debug(f"Routes request timeout, retrying in {wait_time:.1f}s (attempt {attempt}/{self.max_retries})")
                    time.sleep(wait_time)
                except (httpx.ConnectError, httpx.NetworkError, OSError) as e:
                    attempt += 1
                    if attempt > self.max_retries:
                        raise ConnectionError(
                            f"Failed to connect to Routes service at {self.base_url}: {e}"
                        ) from e
                    wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                    logger.debug(f"Routes network error, retrying in {wait_time:.1f}s (attempt {attempt}/{self.max_retries}): {e}")
                    time.sleep(wait_time)
        finally:
            client.close()

    def _plan_chunks(self, origin_count: int, destination_count: int) -> list[tuple[int, int, int, int]]:
        """Split the matrix into (o_start, o_end, d_start, d_end) blocks under the element limit."""
        destination_chunk = min(destination_count, self.max_elements_per_request)
        origin_chunk = max(1, self.max_elements_per_request // destination_chunk)
        chunks = []
        for o_start in range(0, origin_count, origin_chunk):
            for d_start in range(0, destination_count, destination_chunk):
                chunks.append((
                    o_start,
                    min(o_start + origin_chunk, origin_count),
                    d_start,
                    min(d_start + destination_chunk, destination_count),
                ))
        return chunks

    def _process_chunk_request(
        self,
        origins: Sequence[tuple[float, float]],
        destinations: Sequence[tuple[float, float]],
        block: tuple[int, int, int, int],
    ) -> tuple[tuple[int, int, int, int], list[dict] | None, str | None]:
        """Process a single chunk and return its elements or a failure status."""
        o_start, o_end, d_start, d_end = block
        try:
            elements = self._matrix_single_request(origins[o_start:o_end], destinations[d_start:d_end])
            return block, elements, None
        except Exception as e:
            failure = failure_status(e)
            logger.warning(
                f"Routes chunk origins[{o_start}:{o_end}] -> destinations[{d_start}:{d_end}] failed ({failure}): {e}"
            )
            return block, None, failure

    def matrix(
        self,
        origins: Sequence[tuple[float, float]],
        destinations: Sequence[tuple[float, float]],
    ) -> list[list[DistanceResult]]:
        """Get distance/duration results for every origin/destination pair."""
        if not origins or not destinations:
            return [[] for _ in origins]

        results: list[list[DistanceResult]] = [
            [DistanceResult(meters=None, seconds=None, status="NOT_FOUND") for _ in destinations]
            for _ in origins
        ]
        blocks = self._plan_chunks(len(origins), len(destinations))
        start_time = time.time()
        if len(blocks) > 1:
            logger.info(
                f"Chunking Routes matrix request: {len(origins)}x{len(destinations)} elements in {len(blocks)} requests "
                f"(max {self.max_elements_per_request} elements, parallel: {self.max_parallel_requests})"
            )

        failed_chunks = 0
        with ThreadPoolExecutor(max_workers=min(self.max_parallel_requests, len(blocks))) as executor:
            futures = [
                executor.submit(self._process_chunk_request, origins, destinations, block)
                for block in blocks
            ]
            for future in as_completed(futures):
                (o_start, o_end, d_start, d_end), elements, failure = future.result()
                if elements is None:
                    failed_chunks += 1
                    for o_idx in range(o_start, o_end):
                        for d_idx in range(d_start, d_end):
                            results[o_idx][d_idx] = DistanceResult(meters=None, seconds=None, status=failure or "REQUEST_FAILED")
                    continue
                for element in elements:
                    local_origin = element.get("originIndex", 0)
                    local_destination = element.get("destinationIndex", 0)
                    o_idx = o_start + local_origin
                    d_idx = d_start + local_destination
                    if o_start <= o_idx < o_end and d_start <= d_idx < d_end:
                        results[o_idx][d_idx] = parse_element(element)

        elapsed = time.time() - start_time
        if failed_chunks:
            logger.warning(f"Routes matrix partial failure: {failed_chunks}/{len(blocks)} requests failed in {elapsed:.2f}s")
        else:
            logger.debug(f"Routes matrix completed: {len(blocks)} requests in {elapsed:.2f}s")
        return results

    def check_health(self) -> bool:
        """Issue one trivial distance request with the short health-check timeout."""
        try:
            elements = self._matrix_single_request([HEALTH_CHECK_ORIGIN], [HEALTH_CHECK_DESTINATION], timeout=self.health_check_timeout)
        except (httpx.HTTPError, ConnectionError, ValueError) as e:
            logger.warning(f"Routes availability check failed: {e}")
            return False
        return any(parse_element(element).ok for element in elements)


def parse_duration(value: str | None) -> float | None:
    """Parse a protobuf duration string such as ``"845s"`` into seconds."""
    if value is None:
        return None
    match = re.fullmatch(r"(-?\d+(?:\.\d+)?)s", str(value).strip())
    if not match:
        return None
    return float(match.group(1))


def parse_element(element: dict) -> DistanceResult:
    status = element.get("status") or {}
    code = status.get("code", 0) if isinstance(status, dict) else 0
    if code:
        return DistanceResult(meters=None, seconds=None, status=RPC_STATUS_NAMES.get(code, "REQUEST_FAILED"))
    condition = element.get("condition")
    if condition != "ROUTE_EXISTS":
        return DistanceResult(meters=None, seconds=None, status="NOT_FOUND")
    # Zero-valued fields are omitted from the response.
    meters = float(element.get("distanceMeters", 0))
    return DistanceResult(meters=meters, seconds=parse_duration(element.get("duration")), status="OK")


def failure_status(error: Exception) -> str:
    if isinstance(error, httpx.TimeoutException):
        return "TIMEOUT"
    if isinstance(error, httpx.HTTPStatusError):
        if error.response.status_code == 429:
            return "QUOTA_EXCEEDED"
        if error.response.status_code == 403:
            return "PERMISSION_DENIED"
        return "REQUEST_FAILED"
    if isinstance(error, ConnectionError):
        return "UNAVAILABLE"
    return "REQUEST_FAILED"
