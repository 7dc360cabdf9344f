#!/usr/bin/env python3
"""Helper script to check and create the .env file for Supabase and Routes configuration."""

from pathlib import Path
import sys

TEMPLATE = """# Supabase Configuration (Required for merchant, customer and catalog reads)
# Get these from: https://supabase.com/dashboard -> Your Project -> Settings -> API
DISCOVERY_SUPABASE_URL=https://your-project-id.supabase.co
DISCOVERY_SUPABASE_KEY=your-service-role-key-here

# Routes matrix API (Required for routed distances)
DISCOVERY_ROUTES_API_KEY=your-routes-api-key
# DISCOVERY_ROUTES_TRAVEL_MODE=TWO_WHEELER

# Search behaviour
# DISCOVERY_DISTANCE_STRATEGY=routed
# DISCOVERY_DEFAULT_RADIUS_METERS=10000
# DISCOVERY_ZONE_MODE=presence

# API Configuration
DISCOVERY_API_PREFIX=/api
# DISCOVERY_FRONTEND_ALLOWED_ORIGINS - JSON array or comma-separated list
"""

SECRET_KEYS = ("DISCOVERY_SUPABASE_KEY", "DISCOVERY_ROUTES_API_KEY")


def _mask(line: str) -> str:
    name, _, value = line.partition("=")
    value = value.strip()
    if name.strip() in SECRET_KEYS and len(value) > 20:
        return f"{name}={value[:8]}...{value[-4:]}"
    return line


def main() -> int:
    project_root = Path(__file__).parent
    env_file = project_root / ".env"

    print("=" * 60)
    print("Discovery Environment Checker")
    print("=" * 60)
    print()

    if not env_file.exists():
        env_file.write_text(TEMPLATE, encoding="utf-8")
        print(f"Created template .env file at: {env_file}")
        print("Please edit it and add your Supabase and Routes credentials.")
        return 1

    print(f"Found .env file at: {env_file}")
    print("-" * 60)
    for line in env_file.read_text(encoding="utf-8").splitlines():
        print(_mask(line))
    print("-" * 60)
    print()

    sys.path.insert(0, str(project_root / "src"))
    from merchant_discovery.config import settings

    checks = {
        "Supabase URL": settings.supabase_url,
        "Supabase key": settings.supabase_key,
        "Routes API key": settings.routes_api_key,
    }
    missing = [label for label, value in checks.items() if not value]
    for label, value in checks.items():
        print(f"{'[OK]' if value else '[MISSING]'} {label}")
    print()
    print(f"Distance strategy: {settings.distance_strategy}, zone mode: {settings.zone_mode}")

    if missing:
        print()
        print("Troubleshooting:")
        print("1. Make sure .env exists in the project root")
        print("2. Make sure variables start with the DISCOVERY_ prefix")
        print("3. Restart the backend after editing .env")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
