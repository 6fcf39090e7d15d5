"""Unit tests for candidate scoring.

Tests the CandidateScorer for:
- Price scoring with and without budget flexibility
- Symmetric area/room decay
- Location tiers (exact, state or nearby postal code, none) and exact-location mode
- Feature ratio and all-or-nothing mode
- Property/listing type sub-checks
- Neutral scores for missing data and unconstrained criteria
- Weighted aggregation with the fixed type weight
"""

import pytest

from propmatch.config.models import MatchingConfig
from propmatch.domain.models import ListingType, PropertyType, SearchCriteria
from propmatch.matching.models import MatchFlags, ScoreBreakdown, ScoringWeights
from propmatch.matching.scorer import CandidateScorer, range_decay, round_half_up
from tests.helpers import make_property


@pytest.fixture
def scorer():
    return CandidateScorer(MatchingConfig())


@pytest.fixture
def strict_flags():
    return MatchFlags(allow_budget_flexibility=False, allow_feature_flexibility=False)


class TestRoundingAndDecay:
    """Tests for the arithmetic primitives."""

    @pytest.mark.parametrize(
        "value,expected",
        [(0.5, 1), (1.5, 2), (2.5, 3), (49.5, 50), (49.49, 49), (49.99999999999999, 50)],
    )
    def test_round_half_up(self, value, expected):
        assert round_half_up(value) == expected

    def test_inside_range_scores_full(self):
        assert range_decay(50, 40, 60, 0.1) == 100

    def test_boundaries_are_inside(self):
        assert range_decay(40, 40, 60, 0.1) == 100
        assert range_decay(60, 40, 60, 0.1) == 100

    def test_decay_above_upper_bound(self):
        # Window is 10% of 60 = 6; 3 over is halfway
        assert range_decay(63, 40, 60, 0.1) == 50

    def test_decay_below_lower_bound(self):
        # Window is 10% of 40 = 4; 2 under is halfway
        assert range_decay(38, 40, 60, 0.1) == 50

    def test_beyond_window_scores_zero(self):
        assert range_decay(70, 40, 60, 0.1) == 0

    def test_zero_window_is_hard_cutoff(self):
        assert range_decay(60.01, 40, 60, 0.0) == 0

    def test_below_ignored_when_not_penalized(self):
        assert range_decay(1, 40, 60, 0.1, penalize_below=False) == 100

    def test_window_from_range_width(self):
        # Range 40..60 is 20 wide; window 2, 1 over is halfway
        assert range_decay(61, 40, 60, 0.1, relative_to_range=True) == 50
        assert range_decay(39, 40, 60, 0.1, relative_to_range=True) == 50
        assert range_decay(62, 40, 60, 0.1, relative_to_range=True) == 0

    def test_range_width_falls_back_to_boundary(self):
        # One-sided: window 10% of 60
        assert range_decay(63, None, 60, 0.1, relative_to_range=True) == 50
        # Zero width: window 10% of 60
        assert range_decay(63, 60, 60, 0.1, relative_to_range=True) == 50

    def test_open_ranges(self):
        assert range_decay(1_000, None, None, 0.1) == 100
        assert range_decay(1_000, 10, None, 0.1) == 100
        assert range_decay(1, None, 10, 0.1) == 100


class TestPriceScore:
    """Tests for price scoring."""

    def test_price_inside_budget(self, scorer):
        criteria = SearchCriteria(min_budget=200_000, max_budget=300_000)
        candidate = make_property(price=250_000)

        assert scorer.score(criteria, candidate).price_score == 100

    def test_price_at_end_of_flexibility_window(self, scorer):
        criteria = SearchCriteria(max_budget=300_000)
        candidate = make_property(price=330_000)

        assert scorer.score(criteria, candidate).price_score == 0

    def test_price_halfway_into_flexibility_window(self, scorer):
        criteria = SearchCriteria(max_budget=300_000)
        candidate = make_property(price=315_000)

        assert scorer.score(criteria, candidate).price_score == 50

    def test_over_budget_without_flexibility(self, scorer, strict_flags):
        criteria = SearchCriteria(max_budget=300_000)
        candidate = make_property(price=300_001)

        assert scorer.score(criteria, candidate, strict_flags).price_score == 0

    def test_cheaper_than_minimum_never_penalized(self, scorer, strict_flags):
        criteria = SearchCriteria(min_budget=200_000, max_budget=300_000)
        candidate = make_property(price=50_000)

        assert scorer.score(criteria, candidate).price_score == 100
        assert scorer.score(criteria, candidate, strict_flags).price_score == 100

    def test_missing_price_is_neutral(self, scorer):
        criteria = SearchCriteria(max_budget=300_000)

        assert scorer.score(criteria, make_property(price=None)).price_score == 100

    def test_no_budget_is_neutral(self, scorer):
        assert scorer.score(SearchCriteria(), make_property(price=9e9)).price_score == 100

    def test_configured_flexibility(self):
        scorer = CandidateScorer(MatchingConfig(budget_flexibility=0.2))
        criteria = SearchCriteria(max_budget=100_000)

        # Window 20_000, 10_000 over
        assert scorer.score(criteria, make_property(price=110_000)).price_score == 50

    def test_price_never_increases_as_it_rises_over_budget(self, scorer):
        criteria = SearchCriteria(max_budget=300_000)
        prices = range(300_000, 345_001, 1_500)

        scores = [scorer.score(criteria, make_property(price=p)).price_score for p in prices]

        assert all(later <= earlier for earlier, later in zip(scores, scores[1:]))
        assert scores[0] == 100
        assert scores[-1] == 0


class TestAreaAndRoomScore:
    """Tests for living area and room scoring."""

    def test_area_inside_range(self, scorer):
        criteria = SearchCriteria(min_living_area=70, max_living_area=100)

        assert scorer.score(criteria, make_property(living_area=85)).area_score == 100

    def test_area_below_minimum_decays(self, scorer):
        criteria = SearchCriteria(min_living_area=100, max_living_area=120)

        # Window 2 m² (10% of the 20 m² range), 1 m² short
        assert scorer.score(criteria, make_property(living_area=99)).area_score == 50

    def test_area_above_maximum_decays(self, scorer):
        criteria = SearchCriteria(min_living_area=80, max_living_area=100)

        assert scorer.score(criteria, make_property(living_area=101)).area_score == 50
        assert scorer.score(criteria, make_property(living_area=102)).area_score == 0

    def test_one_sided_area_uses_bound(self, scorer):
        criteria = SearchCriteria(min_living_area=100)

        # Window 10 m², 5 m² short
        assert scorer.score(criteria, make_property(living_area=95)).area_score == 50

    def test_point_target_area_uses_bound(self, scorer):
        criteria = SearchCriteria(min_living_area=80, max_living_area=80)

        # Window 8 m², 2 m² over
        assert scorer.score(criteria, make_property(living_area=82)).area_score == 75

    def test_area_tolerance_ignores_request_flags(self, scorer, strict_flags):
        criteria = SearchCriteria(min_living_area=100, max_living_area=120)
        candidate = make_property(living_area=99)

        assert scorer.score(criteria, candidate, strict_flags).area_score == 50

    def test_rooms_outside_window(self, scorer):
        criteria = SearchCriteria(min_rooms=4, max_rooms=5)

        assert scorer.score(criteria, make_property(rooms=3)).room_score == 0

    def test_rooms_decay_over_range_width(self, scorer):
        criteria = SearchCriteria(min_rooms=2, max_rooms=7)

        # Window 0.5 rooms
        assert scorer.score(criteria, make_property(rooms=7.25)).room_score == 50

    def test_half_rooms(self, scorer):
        criteria = SearchCriteria(min_rooms=2, max_rooms=3)

        assert scorer.score(criteria, make_property(rooms=2.5)).room_score == 100

    def test_missing_values_are_neutral(self, scorer):
        criteria = SearchCriteria(min_living_area=100, min_rooms=4)
        candidate = make_property(living_area=None, rooms=None)

        breakdown = scorer.score(criteria, candidate)

        assert breakdown.area_score == 100
        assert breakdown.room_score == 100


class TestLocationScore:
    """Tests for location scoring."""

    def test_no_preferences(self, scorer):
        assert scorer.score(SearchCriteria(), make_property(city="Hamburg")).location_score == 100

    def test_city_match_is_case_insensitive(self, scorer):
        criteria = SearchCriteria(preferred_locations=["berlin"])

        assert scorer.score(criteria, make_property(city="Berlin")).location_score == 100

    def test_postal_code_match(self, scorer):
        criteria = SearchCriteria(preferred_locations=["10115"])
        candidate = make_property(city="Somewhere", postal_code="10115")

        assert scorer.score(criteria, candidate).location_score == 100

    def test_state_match_gets_partial_credit(self, scorer):
        criteria = SearchCriteria(preferred_locations=["Brandenburg"])
        candidate = make_property(city="Potsdam", postal_code="14467", state="Brandenburg")

        assert scorer.score(criteria, candidate).location_score == 50

    def test_state_match_ignored_with_exact_location(self, scorer):
        criteria = SearchCriteria(preferred_locations=["Brandenburg"])
        candidate = make_property(city="Potsdam", postal_code="14467", state="Brandenburg")
        flags = MatchFlags(exact_location_match=True)

        assert scorer.score(criteria, candidate, flags).location_score == 0

    def test_exact_location_still_accepts_city(self, scorer):
        criteria = SearchCriteria(preferred_locations=["Potsdam"])
        flags = MatchFlags(exact_location_match=True)

        assert scorer.score(criteria, make_property(city="Potsdam"), flags).location_score == 100

    def test_no_match(self, scorer):
        criteria = SearchCriteria(preferred_locations=["Munich"])
        candidate = make_property(city="Berlin", postal_code="10115", state="Berlin")

        assert scorer.score(criteria, candidate).location_score == 0

    def test_missing_address_is_neutral(self, scorer):
        criteria = SearchCriteria(preferred_locations=["Munich"])
        candidate = make_property(city=None, postal_code=None, state=None)

        assert scorer.score(criteria, candidate).location_score == 100

    def test_nearby_postal_code_gets_regional_credit(self, scorer):
        criteria = SearchCriteria(preferred_locations=["80331"])
        candidate = make_property(city="München", postal_code="80335", state="Bayern")

        assert scorer.score(criteria, candidate).location_score == 50

    def test_nearby_postal_code_ignored_with_exact_location(self, scorer):
        criteria = SearchCriteria(preferred_locations=["80331"])
        candidate = make_property(city="München", postal_code="80335", state="Bayern")
        flags = MatchFlags(exact_location_match=True)

        assert scorer.score(criteria, candidate, flags).location_score == 0

    def test_distant_postal_code(self, scorer):
        criteria = SearchCriteria(preferred_locations=["80331"])
        candidate = make_property(city="München", postal_code="80999", state="Bayern")

        assert scorer.score(criteria, candidate).location_score == 0

    def test_configured_postal_code_proximity(self):
        scorer = CandidateScorer(MatchingConfig(postal_code_proximity=1000))
        criteria = SearchCriteria(preferred_locations=["80331"])
        candidate = make_property(city="München", postal_code="80999", state="Bayern")

        assert scorer.score(criteria, candidate).location_score == 50

    def test_non_numeric_locations_are_not_compared_as_postal_codes(self, scorer):
        criteria = SearchCriteria(preferred_locations=["Munich"])
        candidate = make_property(city="Berlin", postal_code="10115", state="Berlin")

        assert scorer.score(criteria, candidate).location_score == 0

    def test_configured_state_score(self):
        scorer = CandidateScorer(MatchingConfig(state_match_score=30))
        criteria = SearchCriteria(preferred_locations=["Bavaria"])
        candidate = make_property(city="Augsburg", postal_code="86150", state="Bavaria")

        assert scorer.score(criteria, candidate).location_score == 30


class TestFeatureScore:
    """Tests for required feature scoring."""

    def test_half_of_required_features(self, scorer):
        criteria = SearchCriteria(required_features=["balcony", "garage"])
        candidate = make_property(features=frozenset({"balcony"}))

        assert scorer.score(criteria, candidate).feature_score == 50

    def test_ratio_is_rounded(self, scorer):
        criteria = SearchCriteria(required_features=["balcony", "garage", "garden"])
        candidate = make_property(features=frozenset({"balcony", "garden"}))

        assert scorer.score(criteria, candidate).feature_score == 67

    def test_all_or_nothing_without_flexibility(self, scorer, strict_flags):
        criteria = SearchCriteria(required_features=["balcony", "garage"])

        partial = make_property(features=frozenset({"balcony"}))
        complete = make_property(features=frozenset({"balcony", "garage", "garden"}))

        assert scorer.score(criteria, partial, strict_flags).feature_score == 0
        assert scorer.score(criteria, complete, strict_flags).feature_score == 100

    def test_no_required_features(self, scorer):
        assert scorer.score(SearchCriteria(), make_property(features=frozenset())).feature_score == 100

    def test_unknown_features_are_neutral(self, scorer):
        criteria = SearchCriteria(required_features=["garage"])

        assert scorer.score(criteria, make_property(features=None)).feature_score == 100


class TestTypeScore:
    """Tests for property/listing type scoring."""

    def test_both_match(self, scorer):
        criteria = SearchCriteria(property_types=["APARTMENT"], listing_types=["SALE"])

        assert scorer.score(criteria, make_property()).type_score == 100

    def test_one_of_two_matches(self, scorer):
        criteria = SearchCriteria(property_types=["HOUSE"], listing_types=["SALE"])

        assert scorer.score(criteria, make_property()).type_score == 50

    def test_neither_matches(self, scorer):
        criteria = SearchCriteria(property_types=["HOUSE"], listing_types=["RENT"])

        assert scorer.score(criteria, make_property()).type_score == 0

    def test_unconstrained_dimension_counts_as_match(self, scorer):
        criteria = SearchCriteria(listing_types=[ListingType.RENT])

        assert scorer.score(criteria, make_property()).type_score == 50

    def test_unknown_type_is_neutral(self, scorer):
        criteria = SearchCriteria(property_types=[PropertyType.HOUSE], listing_types=["RENT"])
        candidate = make_property(property_type=None, listing_type=None)

        assert scorer.score(criteria, candidate).type_score == 100


class TestAggregate:
    """Tests for weighted aggregation."""

    def test_perfect_scores(self, scorer):
        assert scorer.aggregate(ScoreBreakdown(), ScoringWeights.default()) == 100

    def test_zero_scores(self, scorer):
        breakdown = ScoreBreakdown(0, 0, 0, 0, 0, 0)

        assert scorer.aggregate(breakdown, ScoringWeights.default()) == 0

    def test_default_weights(self, scorer):
        breakdown = ScoreBreakdown(
            price_score=50,
            location_score=100,
            area_score=100,
            room_score=100,
            feature_score=100,
            type_score=100,
        )

        # 0.95 * (0.30 * 50 + 0.70 * 100) + 0.05 * 100 = 85.75
        assert scorer.aggregate(breakdown, ScoringWeights.default()) == 86

    def test_type_weight_applied(self, scorer):
        breakdown = ScoreBreakdown(type_score=0)

        assert scorer.aggregate(breakdown, ScoringWeights.default()) == 95

    def test_custom_weights(self, scorer):
        weights = ScoringWeights.from_values(price=1, location=0, area=0, room=0, feature=0)
        breakdown = ScoreBreakdown(price_score=40, location_score=0, area_score=0, room_score=0, feature_score=0)

        # 0.95 * 40 + 0.05 * 100 = 43
        assert scorer.aggregate(breakdown, weights) == 43

    def test_without_type_weight(self, scorer):
        weights = ScoringWeights.from_values(price=30, location=25, area=20, room=15, feature=10, type_weight=0.0)
        breakdown = ScoreBreakdown(price_score=0, type_score=0)

        assert scorer.aggregate(breakdown, weights) == 70

    def test_breakdown_weighted_sum_is_unrounded(self, scorer):
        breakdown = ScoreBreakdown(price_score=50)

        assert breakdown.weighted(ScoringWeights.default()) == pytest.approx(85.75)
        assert scorer.aggregate(breakdown, ScoringWeights.default()) == 86

    def test_breakdown_weighted_clips_scores(self):
        weights = ScoringWeights.from_values(price=1, type_weight=0.0)

        assert ScoreBreakdown(price_score=140).weighted(weights) == pytest.approx(100)
