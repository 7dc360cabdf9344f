"""Service-zone classification."""

from .classifier import ZONE_TYPES, ServiceZoneClassifier, validate_zone_type

__all__ = ["ServiceZoneClassifier", "ZONE_TYPES", "validate_zone_type"]
