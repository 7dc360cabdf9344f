"""Shared plumbing for Supabase-backed repositories."""

from __future__ import annotations

import logging
from typing import Any, Iterator, Sequence

from ..db.supabase import get_supabase_client
from ..errors import DiscoveryError, ErrorCode

# PostgREST puts `in.(...)` filters in the query string; keep id lists short.
IN_FILTER_BATCH_SIZE = 100

logger = logging.getLogger(__name__)


class SupabaseRepository:
    def __init__(self, client: Any | None = None) -> None:
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = get_supabase_client()
        if self._client is None:
            raise DiscoveryError(
                ErrorCode.STORE_UNAVAILABLE,
                "Supabase not configured. Set DISCOVERY_SUPABASE_URL and DISCOVERY_SUPABASE_KEY.",
            )
        return self._client

    def _execute(self, query: Any, description: str) -> Any:
        try:
            return query.execute()
        except DiscoveryError:
            raise
        except Exception as e:
            logger.error(f"Supabase query failed ({description}): {e}")
            raise DiscoveryError(
                ErrorCode.STORE_UNAVAILABLE,
                f"Failed to {description}: {e}",
            ) from e


def batched(values: Sequence[str], size: int = IN_FILTER_BATCH_SIZE) -> Iterator[list[str]]:
    for i in range(0, len(values), size):
        yield list(values[i:i + size])


def as_bool(value: Any, default: bool = False) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in {"true", "t", "1", "yes"}
    return bool(value)


def as_float(value: Any) -> float | None:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None
