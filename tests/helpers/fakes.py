"""In-memory implementations of the matching engine's ports.

These stand in for the SQL repositories in unit tests. They record every
call so tests can assert on the order in which the service talks to its
collaborators.
"""

from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Tuple

from propmatch.domain.models import ListingType, PropertyStatus, PropertyType, SearchCriteria
from propmatch.matching.models import CandidateKind, CandidateSnapshot, MatchMode


def make_property(candidate_id: str = "prop-1", **overrides) -> CandidateSnapshot:
    """A fully populated, available Berlin apartment for sale; override any field."""
    values = dict(
        candidate_id=candidate_id,
        kind=CandidateKind.PROPERTY,
        label=f"Listing {candidate_id}",
        price=450_000.0,
        living_area=85.0,
        rooms=3.0,
        city="Berlin",
        postal_code="10115",
        state="Berlin",
        features=frozenset({"elevator", "balcony"}),
        property_type=PropertyType.APARTMENT,
        listing_type=ListingType.SALE,
        status=PropertyStatus.AVAILABLE,
        created_at=datetime(2026, 1, 10, 9, 0, tzinfo=timezone.utc),
    )
    values.update(overrides)
    return CandidateSnapshot(**values)


def make_client(
    candidate_id: str = "client-1",
    criteria: Optional[SearchCriteria] = None,
    **overrides,
) -> CandidateSnapshot:
    """A client candidate whose numeric fields mirror its criteria maxima."""
    values = dict(
        candidate_id=candidate_id,
        kind=CandidateKind.CLIENT,
        label=f"Client {candidate_id}",
        price=criteria.max_budget if criteria else None,
        living_area=criteria.max_living_area if criteria else None,
        rooms=criteria.max_rooms if criteria else None,
        created_at=datetime(2026, 1, 1, 9, 0, tzinfo=timezone.utc),
        criteria=criteria,
    )
    values.update(overrides)
    return CandidateSnapshot(**values)


class CallLog:
    """Shared, ordered record of collaborator calls."""

    def __init__(self):
        self.calls: List[Tuple[str, tuple]] = []

    def record(self, name: str, *args) -> None:
        self.calls.append((name, args))

    def names(self) -> List[str]:
        return [name for name, _ in self.calls]


class InMemoryCandidateRepository:
    """Candidates per agent, split into properties and clients."""

    def __init__(
        self,
        properties: Optional[Dict[str, Iterable[CandidateSnapshot]]] = None,
        clients: Optional[Dict[str, Iterable[CandidateSnapshot]]] = None,
        log: Optional[CallLog] = None,
    ):
        self.properties = {agent: list(items) for agent, items in (properties or {}).items()}
        self.clients = {agent: list(items) for agent, items in (clients or {}).items()}
        self.log = log or CallLog()

    def fetch_candidates(
        self, agent_id: str, mode: MatchMode, criteria: SearchCriteria
    ) -> List[CandidateSnapshot]:
        self.log.record("fetch_candidates", agent_id, mode, criteria)
        if mode is MatchMode.PROPERTY_TO_CLIENTS:
            return list(self.clients.get(agent_id, []))
        return list(self.properties.get(agent_id, []))


class InMemoryCriteriaProvider:
    """Stored criteria per client id; unknown clients raise KeyError."""

    def __init__(
        self,
        criteria: Optional[Dict[str, Optional[SearchCriteria]]] = None,
        log: Optional[CallLog] = None,
    ):
        self.criteria = dict(criteria or {})
        self.log = log or CallLog()

    def get_search_criteria(self, client_id: str) -> Optional[SearchCriteria]:
        self.log.record("get_search_criteria", client_id)
        return self.criteria[client_id]


class InMemoryPropertyProvider:
    """Property snapshots by id; unknown ids return None."""

    def __init__(
        self,
        properties: Optional[Iterable[CandidateSnapshot]] = None,
        log: Optional[CallLog] = None,
    ):
        self.properties = {p.candidate_id: p for p in (properties or [])}
        self.log = log or CallLog()

    def get_property(self, property_id: str) -> Optional[CandidateSnapshot]:
        self.log.record("get_property", property_id)
        return self.properties.get(property_id)


class InMemoryContactHistory:
    """Contacted ids and view counts keyed by (agent_id, candidate_id)."""

    def __init__(
        self,
        contacted: Optional[Iterable[Tuple[str, str]]] = None,
        views: Optional[Dict[Tuple[str, str], int]] = None,
        log: Optional[CallLog] = None,
    ):
        self.contacted = set(contacted or [])
        self.views = dict(views or {})
        self.log = log or CallLog()

    def was_contacted(self, agent_id: str, candidate_id: str) -> bool:
        self.log.record("was_contacted", agent_id, candidate_id)
        return (agent_id, candidate_id) in self.contacted

    def view_count(self, agent_id: str, candidate_id: str) -> int:
        self.log.record("view_count", agent_id, candidate_id)
        return self.views.get((agent_id, candidate_id), 0)
