"""Unit tests for criteria resolution per matching mode."""

import pytest

from propmatch.domain.models import ListingType, PropertyType, SearchCriteria
from propmatch.matching.exceptions import NotFoundError, ValidationError
from propmatch.matching.normalizer import normalize_request
from propmatch.matching.resolver import CriteriaResolver, derive_criteria_from_property
from tests.helpers import InMemoryCriteriaProvider, InMemoryPropertyProvider, make_property


@pytest.fixture
def client_criteria():
    return SearchCriteria(max_budget=500_000, preferred_locations=["Berlin"])


@pytest.fixture
def resolver(client_criteria):
    return CriteriaResolver(
        InMemoryCriteriaProvider({"client-1": client_criteria, "client-empty": None}),
        InMemoryPropertyProvider([make_property("prop-1")]),
    )


class TestDeriveCriteria:
    """Criteria implied by a property."""

    def test_budget_window_around_price(self):
        criteria = derive_criteria_from_property(make_property(price=400_000), 0.1)

        assert criteria.min_budget == pytest.approx(360_000)
        assert criteria.max_budget == pytest.approx(440_000)

    def test_point_targets_for_area_and_rooms(self):
        criteria = derive_criteria_from_property(make_property(living_area=85, rooms=3))

        assert criteria.min_living_area == criteria.max_living_area == 85
        assert criteria.min_rooms == criteria.max_rooms == 3

    def test_city_is_preferred_location(self):
        criteria = derive_criteria_from_property(make_property(city="Potsdam"))

        assert criteria.preferred_locations == frozenset({"Potsdam"})

    def test_postal_code_used_without_city(self):
        criteria = derive_criteria_from_property(make_property(city=None, postal_code="14467"))

        assert criteria.preferred_locations == frozenset({"14467"})

    def test_own_types_only(self):
        criteria = derive_criteria_from_property(make_property())

        assert criteria.property_types == frozenset({PropertyType.APARTMENT})
        assert criteria.listing_types == frozenset({ListingType.SALE})

    def test_unknown_attributes_stay_unconstrained(self):
        subject = make_property(
            price=None,
            living_area=None,
            rooms=None,
            city=None,
            postal_code=None,
            property_type=None,
            listing_type=None,
        )

        criteria = derive_criteria_from_property(subject)

        assert not criteria.has_budget_constraints()
        assert not criteria.has_size_constraints()
        assert not criteria.has_room_constraints()
        assert not criteria.preferred_locations
        assert not criteria.property_types
        assert not criteria.required_features


class TestResolve:
    """CriteriaResolver.resolve()."""

    def test_client_mode_uses_stored_criteria(self, resolver, client_criteria):
        resolved = resolver.resolve(normalize_request({"clientId": "client-1"}))

        assert resolved.criteria == client_criteria
        assert resolved.subject is None

    def test_custom_mode_uses_supplied_criteria(self, resolver):
        resolved = resolver.resolve(normalize_request({"customCriteria": {"minRooms": 4}}))

        assert resolved.criteria.min_rooms == 4

    def test_property_mode_sets_subject(self, resolver):
        resolved = resolver.resolve(normalize_request({"propertyId": "prop-1"}))

        assert resolved.subject.candidate_id == "prop-1"
        assert resolved.criteria.max_budget == pytest.approx(495_000)

    def test_configured_reverse_window(self):
        resolver = CriteriaResolver(
            InMemoryCriteriaProvider(),
            InMemoryPropertyProvider([make_property("prop-1", price=100_000)]),
            reverse_budget_window=0.25,
        )

        resolved = resolver.resolve(normalize_request({"propertyId": "prop-1"}))

        assert resolved.criteria.min_budget == pytest.approx(75_000)

    def test_unknown_client(self, resolver):
        with pytest.raises(NotFoundError) as exc_info:
            resolver.resolve(normalize_request({"clientId": "nobody"}))

        assert exc_info.value.entity == "client"
        assert exc_info.value.entity_id == "nobody"
        assert str(exc_info.value) == "Client not found: nobody"

    def test_unknown_property(self, resolver):
        with pytest.raises(NotFoundError) as exc_info:
            resolver.resolve(normalize_request({"propertyId": "nowhere"}))

        assert exc_info.value.entity == "property"

    def test_client_without_criteria(self, resolver):
        with pytest.raises(ValidationError) as exc_info:
            resolver.resolve(normalize_request({"clientId": "client-empty"}))

        assert exc_info.value.message == "Client does not have search criteria configured"
