"""Data access layer (repositories) for persistence operations.

This module provides repository classes for properties, clients (with their
search criteria) and contact history. Repositories encapsulate database
operations and return domain models or scoring snapshots rather than ORM
models. Together they implement the ports the matching engine depends on.
"""

import logging
from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from propmatch.domain.models import (
    ClientRecord,
    ContactEvent,
    ContactEventType,
    PropertyRecord,
    PropertyStatus,
    SearchCriteria,
)
from propmatch.matching.models import CandidateSnapshot, MatchMode
from propmatch.matching.snapshots import snapshot_from_client, snapshot_from_property
from propmatch.utils.timestamps import utc_now

from .exceptions import DataIntegrityError, PersistenceError, RecordNotFoundError
from .schema import ClientModel, ContactEventModel, PropertyModel, SearchCriteriaModel

logger = logging.getLogger(__name__)

CONTACT_EVENT_TYPES = [t.value for t in ContactEventType if t.is_contact]


class PropertyRepository:
    """Repository for property listings.

    When ``agent_id`` is given, lookups only see that agent's listings.
    """

    def __init__(self, session: Session, agent_id: Optional[str] = None):
        self.session = session
        self.agent_id = agent_id

    def get_by_id(self, property_id: str) -> Optional[PropertyRecord]:
        """Retrieve a property by id.

        Returns:
            PropertyRecord if found (and owned by the scoped agent), None otherwise

        Raises:
            PersistenceError: If database error occurs
        """
        try:
            stmt = select(PropertyModel).where(PropertyModel.id == property_id)
            if self.agent_id is not None:
                stmt = stmt.where(PropertyModel.agent_id == self.agent_id)
            model = self.session.execute(stmt).scalar_one_or_none()
            return model.to_domain() if model is not None else None

        except SQLAlchemyError as e:
            logger.error(f"Error retrieving property {property_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve property: {e}") from e

    def get_property(self, property_id: str) -> Optional[CandidateSnapshot]:
        """Scoring snapshot of a property, None if it does not exist."""
        record = self.get_by_id(property_id)
        return snapshot_from_property(record) if record is not None else None

    def list_for_agent(
        self,
        agent_id: Optional[str] = None,
        statuses: Optional[Iterable[PropertyStatus]] = None,
    ) -> List[PropertyRecord]:
        """All listings of an agent ordered by id, optionally limited to some statuses.

        Raises:
            PersistenceError: If database error occurs
        """
        agent_id = agent_id or self.agent_id
        try:
            stmt = select(PropertyModel).order_by(PropertyModel.id)
            if agent_id is not None:
                stmt = stmt.where(PropertyModel.agent_id == agent_id)
            if statuses is not None:
                stmt = stmt.where(PropertyModel.status.in_([s.value for s in statuses]))
            return [model.to_domain() for model in self.session.execute(stmt).scalars().all()]

        except SQLAlchemyError as e:
            logger.error(f"Error listing properties for agent {agent_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to list properties: {e}") from e

    def add(self, record: PropertyRecord) -> PropertyRecord:
        """Insert a new property.

        Raises:
            DataIntegrityError: If a property with this id already exists
            PersistenceError: If database error occurs
        """
        try:
            model = PropertyModel.from_domain(record)
            self.session.add(model)
            self.session.flush()
            return model.to_domain()

        except IntegrityError as e:
            logger.error(f"Integrity error adding property {record.id}: {e}", exc_info=True)
            raise DataIntegrityError(f"Failed to add property due to constraint violation: {e}") from e
        except SQLAlchemyError as e:
            logger.error(f"Error adding property {record.id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to add property: {e}") from e

class ClientRepository:
    """Repository for clients and their stored search criteria.

    When ``agent_id`` is given, lookups only see that agent's clients.
    """

    def __init__(self, session: Session, agent_id: Optional[str] = None):
        self.session = session
        self.agent_id = agent_id

    def get_by_id(self, client_id: str) -> Optional[ClientRecord]:
        """
        Raises:
            PersistenceError: If database error occurs
        """
        try:
            model = self._get_model(client_id)
            return model.to_domain() if model is not None else None

        except SQLAlchemyError as e:
            logger.error(f"Error retrieving client {client_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve client: {e}") from e

    def get_search_criteria(self, client_id: str) -> Optional[SearchCriteria]:
        """Stored search criteria of a client.

        Returns:
            SearchCriteria, or None if the client has none configured

        Raises:
            RecordNotFoundError: If the client does not exist
            PersistenceError: If database error occurs
        """
        record = self.get_by_id(client_id)
        if record is None:
            raise RecordNotFoundError("client", client_id)
        return record.search_criteria

    def list_with_criteria(self, agent_id: Optional[str] = None) -> List[ClientRecord]:
        """Clients of an agent that have search criteria, ordered by id.

        Raises:
            PersistenceError: If database error occurs
        """
        agent_id = agent_id or self.agent_id
        try:
            stmt = (
                select(ClientModel)
                .join(SearchCriteriaModel, SearchCriteriaModel.client_id == ClientModel.id)
                .order_by(ClientModel.id)
            )
            if agent_id is not None:
                stmt = stmt.where(ClientModel.agent_id == agent_id)
            models = self.session.execute(stmt).unique().scalars().all()
            return [model.to_domain() for model in models]

        except SQLAlchemyError as e:
            logger.error(f"Error listing clients for agent {agent_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to list clients: {e}") from e

    def add(self, record: ClientRecord) -> ClientRecord:
        """Insert a new client together with its search criteria.

        Raises:
            DataIntegrityError: If a client with this id already exists
            PersistenceError: If database error occurs
        """
        try:
            model = ClientModel.from_domain(record)
            self.session.add(model)
            self.session.flush()
            return model.to_domain()

        except IntegrityError as e:
            logger.error(f"Integrity error adding client {record.id}: {e}", exc_info=True)
            raise DataIntegrityError(f"Failed to add client due to constraint violation: {e}") from e
        except SQLAlchemyError as e:
            logger.error(f"Error adding client {record.id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to add client: {e}") from e

    def set_search_criteria(
        self, client_id: str, criteria: Optional[SearchCriteria]
    ) -> ClientRecord:
        """Replace (or with None, remove) the stored criteria of a client.

        Raises:
            RecordNotFoundError: If the client does not exist
            PersistenceError: If database error occurs
        """
        try:
            model = self._get_model(client_id)
            if model is None:
                raise RecordNotFoundError("client", client_id)
            # Flush the orphan delete first; client_id is unique in search_criteria
            if model.search_criteria is not None:
                model.search_criteria = None
                self.session.flush()
            if criteria is not None:
                model.search_criteria = SearchCriteriaModel.from_domain(criteria)
            self.session.flush()
            return model.to_domain()

        except RecordNotFoundError:
            raise
        except SQLAlchemyError as e:
            logger.error(f"Error storing criteria for client {client_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to store search criteria: {e}") from e

    def _get_model(self, client_id: str) -> Optional[ClientModel]:
        stmt = select(ClientModel).where(ClientModel.id == client_id)
        if self.agent_id is not None:
            stmt = stmt.where(ClientModel.agent_id == self.agent_id)
        return self.session.execute(stmt).unique().scalar_one_or_none()


class ContactHistoryRepository:
    """Repository for the contact event log."""

    def __init__(self, session: Session):
        self.session = session

    def record_event(
        self,
        agent_id: str,
        candidate_id: str,
        event_type: ContactEventType,
        occurred_at: Optional[datetime] = None,
        notes: Optional[str] = None,
    ) -> ContactEvent:
        """Append an event; occurred_at defaults to now.

        Raises:
            PersistenceError: If database error occurs
        """
        event = ContactEvent(
            agent_id=agent_id,
            candidate_id=candidate_id,
            event_type=event_type,
            occurred_at=occurred_at or utc_now(),
            notes=notes,
        )
        try:
            model = ContactEventModel.from_domain(event)
            self.session.add(model)
            self.session.flush()
            return model.to_domain()

        except SQLAlchemyError as e:
            logger.error(
                f"Error recording {event_type.value} event for {candidate_id}: {e}", exc_info=True
            )
            raise PersistenceError(f"Failed to record contact event: {e}") from e

    def was_contacted(self, agent_id: str, candidate_id: str) -> bool:
        """Whether the agent has any non-view event for the candidate."""
        return self._count(agent_id, candidate_id, CONTACT_EVENT_TYPES) > 0

    def view_count(self, agent_id: str, candidate_id: str) -> int:
        """Number of VIEW events the agent recorded for the candidate."""
        return self._count(agent_id, candidate_id, [ContactEventType.VIEW.value])

    def _count(self, agent_id: str, candidate_id: str, event_types: List[str]) -> int:
        try:
            stmt = select(func.count(ContactEventModel.id)).where(
                ContactEventModel.agent_id == agent_id,
                ContactEventModel.candidate_id == candidate_id,
                ContactEventModel.event_type.in_(event_types),
            )
            return int(self.session.execute(stmt).scalar_one())

        except SQLAlchemyError as e:
            logger.error(f"Error counting events for {candidate_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to count contact events: {e}") from e


class SqlCandidateRepository:
    """Candidate source for the matching engine.

    Returns every listing of the agent for the property-searching modes and
    every client with stored criteria for reverse matching. Unavailable
    listings are included; the ranker decides whether to keep them.
    """

    def __init__(self, session: Session):
        self.properties = PropertyRepository(session)
        self.clients = ClientRepository(session)

    def fetch_candidates(
        self, agent_id: str, mode: MatchMode, criteria: SearchCriteria
    ) -> List[CandidateSnapshot]:
        """
        Raises:
            PersistenceError: If database error occurs
        """
        if mode is MatchMode.PROPERTY_TO_CLIENTS:
            candidates = [
                snapshot_from_client(record)
                for record in self.clients.list_with_criteria(agent_id)
            ]
        else:
            candidates = [
                snapshot_from_property(record)
                for record in self.properties.list_for_agent(agent_id)
            ]

        logger.debug(
            f"Loaded {len(candidates)} candidates for agent {agent_id}",
            extra={
                "event": "persistence.candidates.loaded",
                "agent_id": agent_id,
                "match_mode": mode.value,
                "candidate_count": len(candidates),
            },
        )
        return candidates
