"""Base class for distance provider strategies."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from ...models.domain import Coordinate, DistanceResult


class DistanceProvider(ABC):
    """Contract for travel distance strategies.

    Distances are measured from each origin to the destination. Callers pass
    merchants as origins and the customer as destination, the direction a
    rider travels.
    """

    strategy: str = "unknown"

    @abstractmethod
    def distances(self, origins: Sequence[Coordinate], destination: Coordinate) -> list[DistanceResult]:
        """Resolve one result per origin, in input order."""
        raise NotImplementedError

    def distance(self, origin: Coordinate, destination: Coordinate) -> DistanceResult:
        return self.distances([origin], destination)[0]

    def check_available(self) -> None:
        """Raise DiscoveryError(DISTANCE_PROVIDER_UNAVAILABLE) if the provider cannot serve queries."""
        return None
