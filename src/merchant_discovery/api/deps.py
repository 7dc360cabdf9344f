"""Shared route dependencies."""

from __future__ import annotations

from functools import lru_cache

from ..services.discovery import DiscoveryService


@lru_cache()
def get_discovery_service() -> DiscoveryService:
    return DiscoveryService()
