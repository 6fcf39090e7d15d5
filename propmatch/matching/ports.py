"""Collaborator interfaces the matching engine depends on.

The engine never talks to storage directly. Callers inject objects that
satisfy these protocols; propmatch.persistence provides SQLAlchemy-backed
implementations and the tests use in-memory ones.

Lookups of unknown ids should raise a LookupError subclass (KeyError,
RecordNotFoundError, NotFoundError); the resolver turns those into
NotFoundError.
"""

from typing import List, Optional, Protocol

from propmatch.domain.models import SearchCriteria

from .models import CandidateSnapshot, MatchMode


class CandidateRepository(Protocol):
    def fetch_candidates(
        self, agent_id: str, mode: MatchMode, criteria: SearchCriteria
    ) -> List[CandidateSnapshot]:
        """Candidates of the agent for this mode: properties, or clients with stored criteria."""
        ...


class ClientCriteriaProvider(Protocol):
    def get_search_criteria(self, client_id: str) -> Optional[SearchCriteria]:
        """Stored criteria of a client, None if the client has none."""
        ...


class PropertyProvider(Protocol):
    def get_property(self, property_id: str) -> Optional[CandidateSnapshot]:
        """Snapshot of a single property, None if unknown."""
        ...


class ContactHistoryProvider(Protocol):
    def was_contacted(self, agent_id: str, candidate_id: str) -> bool:
        ...

    def view_count(self, agent_id: str, candidate_id: str) -> int:
        ...
