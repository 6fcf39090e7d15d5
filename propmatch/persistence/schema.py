"""Database schema definition and ORM models.

This module defines SQLAlchemy ORM models for the CRM tables the matching
engine reads and provides conversion methods between ORM models and domain
models. List-valued search criteria are stored as comma-separated text.
"""

import logging
from typing import Iterable, List, Optional

from sqlalchemy import Boolean, Column, Float, ForeignKey, Index, Integer, String, Text, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, relationship

from propmatch.domain.models import (
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
from propmatch.utils.timestamps import format_timestamp, parse_iso_datetime

logger = logging.getLogger(__name__)

Base = declarative_base()


class PropertyModel(Base):
    """ORM model for properties table."""

    __tablename__ = "properties"

    id = Column(String(64), primary_key=True, nullable=False)
    agent_id = Column(String(64), nullable=False)
    title = Column(Text, nullable=False)

    property_type = Column(String(32), nullable=True)
    listing_type = Column(String(16), nullable=True)
    status = Column(String(32), nullable=False, default=PropertyStatus.AVAILABLE.value)

    address_city = Column(String(255), nullable=True)
    address_postal_code = Column(String(16), nullable=True)
    address_state = Column(String(255), nullable=True)

    living_area_sqm = Column(Float, nullable=True)
    rooms = Column(Float, nullable=True)
    price = Column(Float, nullable=True)

    # Amenity flags, one column per FEATURE_FLAGS entry
    has_elevator = Column(Boolean, nullable=False, default=False)
    has_balcony = Column(Boolean, nullable=False, default=False)
    has_terrace = Column(Boolean, nullable=False, default=False)
    has_garden = Column(Boolean, nullable=False, default=False)
    has_garage = Column(Boolean, nullable=False, default=False)
    has_parking = Column(Boolean, nullable=False, default=False)
    has_basement = Column(Boolean, nullable=False, default=False)
    has_attic = Column(Boolean, nullable=False, default=False)
    is_barrier_free = Column(Boolean, nullable=False, default=False)
    pets_allowed = Column(Boolean, nullable=False, default=False)
    furnished = Column(Boolean, nullable=False, default=False)

    created_at = Column(String(50), nullable=True)

    __table_args__ = (
        Index("idx_properties_agent", "agent_id"),
        Index("idx_properties_agent_status", "agent_id", "status"),
    )

    def to_domain(self) -> PropertyRecord:
        return PropertyRecord(
            id=self.id,
            agent_id=self.agent_id,
            title=self.title,
            property_type=PropertyType(self.property_type) if self.property_type else None,
            listing_type=ListingType(self.listing_type) if self.listing_type else None,
            status=PropertyStatus(self.status or PropertyStatus.AVAILABLE.value),
            address_city=self.address_city,
            address_postal_code=self.address_postal_code,
            address_state=self.address_state,
            living_area_sqm=self.living_area_sqm,
            rooms=self.rooms,
            price=self.price,
            created_at=parse_iso_datetime(self.created_at),
            **{flag: bool(getattr(self, flag)) for flag in FEATURE_FLAGS.values()},
        )

    @classmethod
    def from_domain(cls, record: PropertyRecord) -> "PropertyModel":
        return cls(
            id=record.id,
            agent_id=record.agent_id,
            title=record.title,
            property_type=_enum_value(record.property_type),
            listing_type=_enum_value(record.listing_type),
            status=record.status.value,
            address_city=record.address_city,
            address_postal_code=record.address_postal_code,
            address_state=record.address_state,
            living_area_sqm=record.living_area_sqm,
            rooms=record.rooms,
            price=record.price,
            created_at=format_timestamp(record.created_at),
            **{flag: getattr(record, flag) for flag in FEATURE_FLAGS.values()},
        )


class ClientModel(Base):
    """ORM model for clients table."""

    __tablename__ = "clients"

    id = Column(String(64), primary_key=True, nullable=False)
    agent_id = Column(String(64), nullable=False)
    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    phone = Column(String(64), nullable=True)
    address_city = Column(String(255), nullable=True)
    address_postal_code = Column(String(16), nullable=True)
    created_at = Column(String(50), nullable=True)

    search_criteria = relationship(
        "SearchCriteriaModel",
        uselist=False,
        lazy="joined",
        cascade="all, delete-orphan",
        back_populates="client",
    )

    __table_args__ = (Index("idx_clients_agent", "agent_id"),)

    def to_domain(self) -> ClientRecord:
        return ClientRecord(
            id=self.id,
            agent_id=self.agent_id,
            first_name=self.first_name,
            last_name=self.last_name,
            email=self.email,
            phone=self.phone,
            address_city=self.address_city,
            address_postal_code=self.address_postal_code,
            search_criteria=self.search_criteria.to_domain() if self.search_criteria else None,
            created_at=parse_iso_datetime(self.created_at),
        )

    @classmethod
    def from_domain(cls, record: ClientRecord) -> "ClientModel":
        model = cls(
            id=record.id,
            agent_id=record.agent_id,
            first_name=record.first_name,
            last_name=record.last_name,
            email=record.email,
            phone=record.phone,
            address_city=record.address_city,
            address_postal_code=record.address_postal_code,
            created_at=format_timestamp(record.created_at),
        )
        if record.search_criteria is not None:
            model.search_criteria = SearchCriteriaModel.from_domain(record.search_criteria)
        return model


class SearchCriteriaModel(Base):
    """ORM model for search_criteria table (one row per client at most)."""

    __tablename__ = "search_criteria"

    id = Column(Integer, primary_key=True, autoincrement=True)
    client_id = Column(
        String(64), ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, unique=True
    )

    min_living_area = Column(Float, nullable=True)
    max_living_area = Column(Float, nullable=True)
    min_rooms = Column(Float, nullable=True)
    max_rooms = Column(Float, nullable=True)
    min_budget = Column(Float, nullable=True)
    max_budget = Column(Float, nullable=True)

    # Comma-separated lists
    preferred_locations = Column(Text, nullable=True)
    property_types = Column(Text, nullable=True)
    listing_types = Column(Text, nullable=True)
    required_features = Column(Text, nullable=True)

    additional_requirements = Column(Text, nullable=True)

    client = relationship("ClientModel", back_populates="search_criteria")

    def to_domain(self) -> SearchCriteria:
        # The domain validators split the CSV columns
        return SearchCriteria(
            min_living_area=self.min_living_area,
            max_living_area=self.max_living_area,
            min_rooms=self.min_rooms,
            max_rooms=self.max_rooms,
            min_budget=self.min_budget,
            max_budget=self.max_budget,
            preferred_locations=self.preferred_locations,
            property_types=self.property_types,
            listing_types=self.listing_types,
            required_features=self.required_features,
            additional_requirements=self.additional_requirements,
        )

    @classmethod
    def from_domain(cls, criteria: SearchCriteria) -> "SearchCriteriaModel":
        return cls(
            min_living_area=criteria.min_living_area,
            max_living_area=criteria.max_living_area,
            min_rooms=criteria.min_rooms,
            max_rooms=criteria.max_rooms,
            min_budget=criteria.min_budget,
            max_budget=criteria.max_budget,
            preferred_locations=_join_csv(criteria.preferred_locations),
            property_types=_join_csv(t.value for t in criteria.property_types),
            listing_types=_join_csv(t.value for t in criteria.listing_types),
            required_features=_join_csv(criteria.required_features),
            additional_requirements=criteria.additional_requirements,
        )


class ContactEventModel(Base):
    """ORM model for contact_events table.

    Append-only log of agent interactions; candidate_id references either a
    client or a property.
    """

    __tablename__ = "contact_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    agent_id = Column(String(64), nullable=False)
    candidate_id = Column(String(64), nullable=False)
    event_type = Column(String(16), nullable=False)
    occurred_at = Column(String(50), nullable=False)
    notes = Column(Text, nullable=True)

    __table_args__ = (
        Index("idx_contact_events_candidate", "agent_id", "candidate_id", "event_type"),
    )

    def to_domain(self) -> ContactEvent:
        return ContactEvent(
            agent_id=self.agent_id,
            candidate_id=self.candidate_id,
            event_type=ContactEventType(self.event_type),
            occurred_at=parse_iso_datetime(self.occurred_at),
            notes=self.notes,
        )

    @classmethod
    def from_domain(cls, event: ContactEvent) -> "ContactEventModel":
        return cls(
            agent_id=event.agent_id,
            candidate_id=event.candidate_id,
            event_type=event.event_type.value,
            occurred_at=format_timestamp(event.occurred_at),
            notes=event.notes,
        )


def _enum_value(value) -> Optional[str]:
    return value.value if value is not None else None


def _join_csv(values: Iterable[str]) -> Optional[str]:
    """Sorted comma-separated text, or None for an empty collection."""
    items: List[str] = sorted(values)
    return ",".join(items) if items else None


def create_schema(engine: Engine) -> None:
    """Create all tables and indexes if they don't exist (idempotent).

    Args:
        engine: SQLAlchemy engine instance
    """
    logger.info("Creating database schema if not exists")

    try:
        Base.metadata.create_all(engine, checkfirst=True)
        tables = inspect(engine).get_table_names()
        logger.info(f"Database schema ready. Tables: {', '.join(tables)}")
    except Exception as e:
        logger.error(f"Failed to create database schema: {e}", exc_info=True)
        raise
