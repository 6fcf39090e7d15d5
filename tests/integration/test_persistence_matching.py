"""Integration tests: matching runs against the SQL repositories.

Seeds tests/fixtures/sample_crm.yaml into a SQLite database and runs
MatchingService end to end for all three matching modes.
"""

import pytest

from propmatch.domain.models import ContactEventType
from propmatch.matching import MatchingService, MatchMode, build_response_dict
from propmatch.matching.exceptions import NotFoundError, ValidationError
from propmatch.persistence import (
    ClientRepository,
    ContactHistoryRepository,
    PropertyRepository,
    SqlCandidateRepository,
    close_database,
    get_session,
    init_database,
)
from tests.helpers import load_fixture_records, seed_database


@pytest.fixture(autouse=True)
def seeded_database(tmp_path):
    """File-backed database with the sample CRM data."""
    init_database(f"sqlite:///{tmp_path / 'crm.db'}")
    with get_session() as session:
        seed_database(session, load_fixture_records())
    yield
    close_database()


def run_match(request, agent_id="agent-1"):
    with get_session() as session:
        service = MatchingService(
            candidate_repository=SqlCandidateRepository(session),
            criteria_provider=ClientRepository(session, agent_id=agent_id),
            property_provider=PropertyRepository(session, agent_id=agent_id),
            contact_history=ContactHistoryRepository(session),
            clock=lambda: 0.0,
        )
        return service.match(request, agent_id=agent_id)


def scores(response):
    return [(r.candidate_id, r.match_score) for r in response.results]


class TestFixtureData:
    """Sanity checks on the seeded data."""

    def test_records_loaded(self):
        records = load_fixture_records()

        assert len(records.properties) == 6
        assert len(records.clients) == 5
        assert len(records.contact_events) == 4
        assert records.contact_events[1].event_type is ContactEventType.VIEW


@pytest.mark.integration
class TestClientToProperties:
    """Properties for a stored client."""

    def test_default_request(self):
        response = run_match({"clientId": "client-001"})

        assert response.mode is MatchMode.CLIENT_TO_PROPERTIES
        # prop-004 (69) misses the threshold, prop-005 is sold
        assert scores(response) == [("prop-001", 100), ("prop-002", 76)]
        assert response.total_matches == 2

    def test_all_candidates_scored(self):
        response = run_match(
            {"clientId": "client-001", "matchThreshold": 0, "includeUnavailable": True}
        )

        assert scores(response) == [
            ("prop-001", 100),
            ("prop-005", 100),
            ("prop-002", 76),
            ("prop-004", 69),
            ("prop-003", 3),
        ]

    def test_breakdown_of_partial_match(self):
        response = run_match({"clientId": "client-001"})
        partial = response.results[1]

        assert partial.breakdown.as_dict() == {
            "price": 100,
            "location": 100,
            "area": 0,
            "room": 100,
            "feature": 50,
            "type": 100,
        }
        assert partial.mismatch_reasons == ["Living area 14% below minimum"]

    def test_contact_history(self):
        response = run_match({"clientId": "client-001"})
        by_id = {r.candidate_id: r for r in response.results}

        assert by_id["prop-001"].view_count == 2
        assert by_id["prop-001"].previously_contacted is False
        assert by_id["prop-002"].previously_contacted is True

    def test_exclude_contacted(self):
        response = run_match({"clientId": "client-001", "includeContacted": False})

        assert scores(response) == [("prop-001", 100)]

    def test_client_without_criteria(self):
        with pytest.raises(ValidationError):
            run_match({"clientId": "client-003"})

    def test_client_of_other_agent(self):
        with pytest.raises(NotFoundError):
            run_match({"clientId": "client-001"}, agent_id="agent-2")


@pytest.mark.integration
class TestPropertyToClients:
    """Clients for a property."""

    def test_clients_ranked(self):
        response = run_match({"propertyId": "prop-001", "matchThreshold": 0})

        assert response.mode is MatchMode.PROPERTY_TO_CLIENTS
        assert scores(response) == [("client-001", 100), ("client-002", 38), ("client-004", 31)]

    def test_contacted_client_flagged(self):
        response = run_match({"propertyId": "prop-001", "matchThreshold": 0})
        by_id = {r.candidate_id: r for r in response.results}

        assert by_id["client-002"].previously_contacted is True
        assert by_id["client-001"].previously_contacted is False

    def test_default_threshold(self):
        response = run_match({"propertyId": "prop-001"})

        assert scores(response) == [("client-001", 100)]

    def test_property_of_other_agent(self):
        with pytest.raises(NotFoundError):
            run_match({"propertyId": "prop-101"})


@pytest.mark.integration
class TestCustomCriteria:
    """Properties for ad-hoc criteria."""

    def test_agent_scoping(self):
        response = run_match(
            {"customCriteria": {"maxBudget": 500000, "preferredLocations": ["Berlin"]}},
            agent_id="agent-2",
        )

        assert scores(response) == [("prop-101", 100)]

    def test_state_match_and_exact_location(self):
        request = {
            "customCriteria": {"preferredLocations": ["Brandenburg"]},
            "matchThreshold": 0,
        }

        relaxed = run_match(request)
        exact = run_match({**request, "exactLocationMatch": True})

        relaxed_potsdam = next(r for r in relaxed.results if r.candidate_id == "prop-003")
        exact_potsdam = next(r for r in exact.results if r.candidate_id == "prop-003")
        assert relaxed_potsdam.breakdown.location_score == 50
        assert exact_potsdam.breakdown.location_score == 0

    def test_sort_by_price_ascending(self):
        response = run_match(
            {"customCriteria": {}, "sortBy": "price", "sortDirection": "ASC"}
        )

        assert [r.candidate_id for r in response.results] == [
            "prop-004",
            "prop-002",
            "prop-001",
            "prop-003",
        ]

    def test_identical_runs_identical_output(self):
        request = {"customCriteria": {"maxBudget": 400000}, "matchThreshold": 0}

        assert build_response_dict(run_match(request)) == build_response_dict(run_match(request))
