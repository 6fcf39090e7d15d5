"""Core domain models for properties, clients and search criteria.

This module defines the records the matching engine reads from the CRM:
- PropertyType / ListingType / PropertyStatus: bilingual enums from the listing catalogue
- SearchCriteria: a client's (or an ad-hoc) set of search preferences
- PropertyRecord: a property listing owned by an agent
- ClientRecord: a client owned by an agent, optionally with stored SearchCriteria
- ContactEvent: a call, email, meeting, viewing or page view recorded by an agent
"""

from datetime import datetime
from enum import Enum
from typing import Dict, FrozenSet, Optional, Tuple

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from propmatch.utils.timestamps import ensure_utc


class LocalizedEnum(str, Enum):
    """String enum with a German and an English display name per member."""

    def localized_name(self, language: str = "en") -> str:
        """Return the display name for a language code ("de" or anything else for English)."""
        german, english = _DISPLAY_NAMES[type(self).__name__][self.value]
        return german if language == "de" else english

    @property
    def english_name(self) -> str:
        return self.localized_name("en")


class PropertyType(LocalizedEnum):
    """Kinds of property an agent can list."""

    APARTMENT = "APARTMENT"
    HOUSE = "HOUSE"
    TOWNHOUSE = "TOWNHOUSE"
    VILLA = "VILLA"
    PENTHOUSE = "PENTHOUSE"
    LOFT = "LOFT"
    DUPLEX = "DUPLEX"
    STUDIO = "STUDIO"
    OFFICE = "OFFICE"
    RETAIL = "RETAIL"
    WAREHOUSE = "WAREHOUSE"
    INDUSTRIAL = "INDUSTRIAL"
    RESTAURANT = "RESTAURANT"
    HOTEL = "HOTEL"
    PARKING_SPACE = "PARKING_SPACE"
    GARAGE = "GARAGE"
    LAND = "LAND"
    FARM = "FARM"
    CASTLE = "CASTLE"
    OTHER = "OTHER"


class ListingType(LocalizedEnum):
    """How a property is offered."""

    SALE = "SALE"
    RENT = "RENT"
    LEASE = "LEASE"


class PropertyStatus(LocalizedEnum):
    """Lifecycle status of a listing. Only AVAILABLE listings are matchable by default."""

    AVAILABLE = "AVAILABLE"
    RESERVED = "RESERVED"
    SOLD = "SOLD"
    RENTED = "RENTED"
    WITHDRAWN = "WITHDRAWN"
    UNDER_CONSTRUCTION = "UNDER_CONSTRUCTION"


class ContactEventType(LocalizedEnum):
    """Interactions recorded between an agent and a client or property.

    VIEW is a passive page view; every other type counts as contact.
    """

    CALL = "CALL"
    EMAIL = "EMAIL"
    MEETING = "MEETING"
    VIEWING = "VIEWING"
    VIEW = "VIEW"

    @property
    def is_contact(self) -> bool:
        return self is not ContactEventType.VIEW


_DISPLAY_NAMES: Dict[str, Dict[str, Tuple[str, str]]] = {
    "PropertyType": {
        "APARTMENT": ("Wohnung", "Apartment"),
        "HOUSE": ("Haus", "House"),
        "TOWNHOUSE": ("Reihenhaus", "Townhouse"),
        "VILLA": ("Villa", "Villa"),
        "PENTHOUSE": ("Penthouse", "Penthouse"),
        "LOFT": ("Loft", "Loft"),
        "DUPLEX": ("Maisonette", "Duplex"),
        "STUDIO": ("Apartment", "Studio"),
        "OFFICE": ("Büro", "Office"),
        "RETAIL": ("Einzelhandel", "Retail"),
        "WAREHOUSE": ("Lager", "Warehouse"),
        "INDUSTRIAL": ("Industrie", "Industrial"),
        "RESTAURANT": ("Restaurant", "Restaurant"),
        "HOTEL": ("Hotel", "Hotel"),
        "PARKING_SPACE": ("Stellplatz", "Parking Space"),
        "GARAGE": ("Garage", "Garage"),
        "LAND": ("Grundstück", "Land"),
        "FARM": ("Bauernhof", "Farm"),
        "CASTLE": ("Schloss", "Castle"),
        "OTHER": ("Sonstiges", "Other"),
    },
    "ListingType": {
        "SALE": ("Kauf", "For Sale"),
        "RENT": ("Miete", "For Rent"),
        "LEASE": ("Pacht", "For Lease"),
    },
    "PropertyStatus": {
        "AVAILABLE": ("Verfügbar", "Available"),
        "RESERVED": ("Reserviert", "Reserved"),
        "SOLD": ("Verkauft", "Sold"),
        "RENTED": ("Vermietet", "Rented"),
        "WITHDRAWN": ("Zurückgezogen", "Withdrawn"),
        "UNDER_CONSTRUCTION": ("Im Bau", "Under Construction"),
    },
    "ContactEventType": {
        "CALL": ("Anruf", "Call"),
        "EMAIL": ("E-Mail", "Email"),
        "MEETING": ("Termin", "Meeting"),
        "VIEWING": ("Besichtigung", "Viewing"),
        "VIEW": ("Aufruf", "View"),
    },
}


# Boolean amenity flags on a listing, keyed by the feature name used in SearchCriteria
FEATURE_FLAGS: Dict[str, str] = {
    "elevator": "has_elevator",
    "balcony": "has_balcony",
    "terrace": "has_terrace",
    "garden": "has_garden",
    "garage": "has_garage",
    "parking": "has_parking",
    "basement": "has_basement",
    "attic": "has_attic",
    "barrier_free": "is_barrier_free",
    "pets_allowed": "pets_allowed",
    "furnished": "furnished",
}


def _split_values(v):
    """Accept a list/set or a comma-separated string (the CRM stores criteria lists as CSV)."""
    if v is None:
        return []
    if isinstance(v, str):
        return v.split(",")
    return list(v)


class SearchCriteria(BaseModel):
    """Search preferences a candidate is scored against.

    Either owned one-to-one by a client or built ad hoc for a single request.
    Instances are frozen: once resolved for a match run they never change.
    """

    min_living_area: Optional[float] = Field(None, ge=0, description="Minimum living area (m²)")
    max_living_area: Optional[float] = Field(None, ge=0, description="Maximum living area (m²)")
    min_rooms: Optional[float] = Field(None, ge=0, description="Minimum room count")
    max_rooms: Optional[float] = Field(None, ge=0, description="Maximum room count")
    min_budget: Optional[float] = Field(None, ge=0, description="Minimum budget (EUR)")
    max_budget: Optional[float] = Field(None, ge=0, description="Maximum budget (EUR)")
    preferred_locations: FrozenSet[str] = Field(
        default_factory=frozenset, description="Preferred cities, postal codes or states"
    )
    property_types: FrozenSet[PropertyType] = Field(
        default_factory=frozenset, description="Acceptable property types (empty = any)"
    )
    listing_types: FrozenSet[ListingType] = Field(
        default_factory=frozenset, description="Acceptable listing types (empty = any)"
    )
    required_features: FrozenSet[str] = Field(
        default_factory=frozenset, description="Amenities the candidate must offer"
    )
    additional_requirements: Optional[str] = Field(
        None, description="Free-text notes, informational only"
    )

    model_config = {"frozen": True, "populate_by_name": True, "alias_generator": to_camel}

    @field_validator("preferred_locations", mode="before")
    @classmethod
    def normalize_locations(cls, v):
        """Strip whitespace and drop empty entries."""
        return frozenset(loc.strip() for loc in _split_values(v) if loc and loc.strip())

    @field_validator("property_types", "listing_types", mode="before")
    @classmethod
    def normalize_enum_names(cls, v):
        """Accept enum members or case-insensitive names."""
        normalized = []
        for item in _split_values(v):
            if isinstance(item, Enum):
                normalized.append(item)
            elif isinstance(item, str) and item.strip():
                normalized.append(item.strip().upper().replace(" ", "_"))
        return frozenset(normalized)

    @field_validator("required_features", mode="before")
    @classmethod
    def normalize_features(cls, v):
        """Strip whitespace, convert to lowercase, remove empty strings."""
        return frozenset(
            term.strip().lower().replace(" ", "_")
            for term in _split_values(v)
            if term and term.strip()
        )

    @model_validator(mode="after")
    def validate_ranges(self):
        """Reject ranges whose minimum exceeds their maximum."""
        pairs = (
            ("min_living_area", "max_living_area", "living area"),
            ("min_rooms", "max_rooms", "rooms"),
            ("min_budget", "max_budget", "budget"),
        )
        for low_name, high_name, label in pairs:
            low = getattr(self, low_name)
            high = getattr(self, high_name)
            if low is not None and high is not None and low > high:
                raise ValueError(f"Minimum {label} cannot be greater than maximum ({low} > {high})")
        return self

    def has_budget_constraints(self) -> bool:
        return self.min_budget is not None or self.max_budget is not None

    def has_size_constraints(self) -> bool:
        return self.min_living_area is not None or self.max_living_area is not None

    def has_room_constraints(self) -> bool:
        return self.min_rooms is not None or self.max_rooms is not None


class PropertyRecord(BaseModel):
    """A property listing as stored by the CRM."""

    id: str = Field(..., min_length=1, description="Property identifier")
    agent_id: str = Field(..., min_length=1, description="Owning agent")
    title: str = Field(..., min_length=1, description="Listing title")
    property_type: Optional[PropertyType] = None
    listing_type: Optional[ListingType] = None
    status: PropertyStatus = PropertyStatus.AVAILABLE
    address_city: Optional[str] = None
    address_postal_code: Optional[str] = None
    address_state: Optional[str] = None
    living_area_sqm: Optional[float] = Field(None, ge=0)
    rooms: Optional[float] = Field(None, ge=0)
    price: Optional[float] = Field(None, ge=0)
    has_elevator: bool = False
    has_balcony: bool = False
    has_terrace: bool = False
    has_garden: bool = False
    has_garage: bool = False
    has_parking: bool = False
    has_basement: bool = False
    has_attic: bool = False
    is_barrier_free: bool = False
    pets_allowed: bool = False
    furnished: bool = False
    created_at: Optional[datetime] = None

    model_config = {"populate_by_name": True, "alias_generator": to_camel}

    @field_validator("address_city", "address_postal_code", "address_state")
    @classmethod
    def strip_address(cls, v: Optional[str]) -> Optional[str]:
        """Strip whitespace from address parts; blank becomes None."""
        if v is None:
            return None
        stripped = v.strip()
        return stripped if stripped else None

    @field_validator("created_at")
    @classmethod
    def created_at_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v)

    def feature_set(self) -> FrozenSet[str]:
        """Names of the amenities this listing offers."""
        return frozenset(name for name, flag in FEATURE_FLAGS.items() if getattr(self, flag))

    @property
    def price_per_sqm(self) -> Optional[float]:
        if self.price is None or not self.living_area_sqm:
            return None
        return round(self.price / self.living_area_sqm, 2)


class ClientRecord(BaseModel):
    """A client of an agent, with optional stored search preferences."""

    id: str = Field(..., min_length=1, description="Client identifier")
    agent_id: str = Field(..., min_length=1, description="Owning agent")
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    email: Optional[str] = None
    phone: Optional[str] = None
    address_city: Optional[str] = None
    address_postal_code: Optional[str] = None
    search_criteria: Optional[SearchCriteria] = None
    created_at: Optional[datetime] = None

    model_config = {"populate_by_name": True, "alias_generator": to_camel}

    @field_validator("first_name", "last_name")
    @classmethod
    def strip_whitespace(cls, v: str) -> str:
        """Strip whitespace from name fields."""
        stripped = v.strip()
        if not stripped:
            raise ValueError("Field cannot be empty or whitespace-only")
        return stripped

    @field_validator("created_at")
    @classmethod
    def created_at_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class ContactEvent(BaseModel):
    """One recorded interaction between an agent and a client or property."""

    agent_id: str = Field(..., min_length=1)
    candidate_id: str = Field(..., min_length=1, description="Client or property identifier")
    event_type: ContactEventType
    occurred_at: Optional[datetime] = None
    notes: Optional[str] = None

    model_config = {"populate_by_name": True, "alias_generator": to_camel}

    @field_validator("occurred_at")
    @classmethod
    def occurred_at_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v)
