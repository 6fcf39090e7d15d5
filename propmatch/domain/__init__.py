"""Domain models for the property matching engine."""

from .models import (
    FEATURE_FLAGS,
    ClientRecord,
    ContactEvent,
    ContactEventType,
    ListingType,
    PropertyRecord,
    PropertyStatus,
    PropertyType,
    SearchCriteria,
)

__all__ = [
    "SearchCriteria",
    "PropertyRecord",
    "ClientRecord",
    "ContactEvent",
    "ContactEventType",
    "PropertyType",
    "ListingType",
    "PropertyStatus",
    "FEATURE_FLAGS",
]
