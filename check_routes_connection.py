#!/usr/bin/env python3
"""Manual check that the Routes matrix API is reachable and chunking works."""

import sys
import time
from pathlib import Path

# Add src to path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root / "src"))

from merchant_discovery.config import settings
from merchant_discovery.services.distance.routes_client import RoutesMatrixClient


def main() -> int:
    print("=" * 60)
    print("Routes Matrix Connection Test")
    print("=" * 60)
    print()

    print("1. Checking configuration...")
    if not settings.routes_api_key:
        print("   [ERROR] DISCOVERY_ROUTES_API_KEY is not configured")
        return 1
    print(f"   [OK] Base URL: {settings.routes_base_url}")
    print(f"   [OK] Travel mode: {settings.routes_travel_mode}")
    print()

    client = RoutesMatrixClient()

    print("2. Running availability check...")
    if not client.check_health():
        print("   [ERROR] Availability check failed")
        return 1
    print("   [OK] Availability check succeeded")
    print()

    # Merchants scattered around Manila, all routed to one customer point.
    count = int(sys.argv[1]) if len(sys.argv) > 1 else 40
    customer = (14.5995, 120.9842)
    merchants = [(14.55 + (i % 10) * 0.01, 120.95 + (i // 10) * 0.01) for i in range(count)]

    print(f"3. Requesting {count} merchant -> customer distances "
          f"(max {client.max_elements_per_request} elements per request)...")
    start_time = time.time()
    matrix = client.matrix(merchants, [customer])
    elapsed = time.time() - start_time

    statuses: dict[str, int] = {}
    for row in matrix:
        statuses[row[0].status] = statuses.get(row[0].status, 0) + 1
    print(f"   [INFO] Completed in {elapsed:.2f}s")
    for status, total in sorted(statuses.items()):
        print(f"   [INFO] {status}: {total}")
    sample = next((row[0] for row in matrix if row[0].ok), None)
    if sample:
        print(f"   [INFO] Sample: {sample.meters:.0f} m, {sample.seconds or 0:.0f} s")
    return 0 if statuses.get("OK") else 1


if __name__ == "__main__":
    sys.exit(main())
