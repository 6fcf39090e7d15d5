"""Candidate scoring for property/client matching.

This module implements the category scoring that:
1. Scores a candidate in six categories (price, location, area, room, feature, type)
2. Treats unconstrained criteria and missing candidate data as "no penalty" (100)
3. Combines the categories into one weighted aggregate score

All scoring is pure arithmetic on immutable inputs; no I/O happens here.
"""

import logging
import math
from typing import Optional

from propmatch.config.models import MatchingConfig
from propmatch.domain.models import SearchCriteria

from .models import CandidateSnapshot, MatchFlags, ScoreBreakdown, ScoringWeights

logger = logging.getLogger(__name__)

MAX_SCORE = 100
MIN_SCORE = 0


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positive values.

    The value is first rounded to 6 decimals so float noise such as
    49.99999999999999 does not flip the result.
    """
    return int(math.floor(round(value, 6) + 0.5))


def clamp_score(value: float) -> int:
    """Round and clip a score to [0, 100]."""
    return max(MIN_SCORE, min(MAX_SCORE, round_half_up(value)))


def range_decay(
    value: float,
    lower: Optional[float],
    upper: Optional[float],
    window_fraction: float,
    penalize_below: bool = True,
    relative_to_range: bool = False,
) -> int:
    """Score a value against a target range with linear decay outside it.

    Inside [lower, upper] the score is 100. Outside, the score falls linearly
    from 100 at the violated boundary to 0 at the end of the decay window and
    stays 0 beyond that. A window of 0 makes the range hard: anything outside
    scores 0.

    The window is ``window_fraction`` of the violated boundary by default.
    With ``relative_to_range`` it is ``window_fraction * (upper - lower)``
    instead, falling back to the boundary when the range is one-sided or
    has zero width.

    Args:
        value: Candidate value
        lower: Lower bound (None = unbounded)
        upper: Upper bound (None = unbounded)
        window_fraction: Decay window as a fraction of the range width or boundary
        penalize_below: If False, values below ``lower`` score 100
        relative_to_range: Size the window from the range width

    Returns:
        Integer score in [0, 100]
    """
    width = None
    if relative_to_range and lower is not None and upper is not None and upper > lower:
        width = upper - lower

    if lower is not None and value < lower:
        if not penalize_below:
            return MAX_SCORE
        base = width if width is not None else lower
        return _linear_decay(lower - value, base * window_fraction)
    if upper is not None and value > upper:
        base = width if width is not None else upper
        return _linear_decay(value - upper, base * window_fraction)
    return MAX_SCORE


def _linear_decay(distance: float, window: float) -> int:
    if window <= 0 or distance >= window:
        return MIN_SCORE
    return clamp_score(MAX_SCORE * (1 - distance / window))


def _is_postal_code(value: str) -> bool:
    return len(value) == 5 and value.isdigit()


def _casefold(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    stripped = value.strip().casefold()
    return stripped or None


class CandidateScorer:
    """Scores candidates against search criteria.

    Responsibilities:
    - Score each of the six categories in [0, 100]
    - Apply request flags (budget/feature flexibility, exact location)
    - Apply configured tolerances (area/room window, state tier, type weight)
    - Aggregate category scores with normalized weights
    """

    def __init__(
        self,
        config: Optional[MatchingConfig] = None,
        logger_instance: Optional[logging.Logger] = None,
    ):
        """Initialize CandidateScorer.

        Args:
            config: Matching settings (defaults to MatchingConfig())
            logger_instance: Optional logger instance (defaults to module logger)
        """
        self.config = config or MatchingConfig()
        self.logger = logger_instance or logger

    def score(
        self,
        criteria: SearchCriteria,
        candidate: CandidateSnapshot,
        flags: Optional[MatchFlags] = None,
    ) -> ScoreBreakdown:
        """Score a candidate in all six categories.

        Args:
            criteria: Criteria to score against
            candidate: Snapshot of the property being evaluated
            flags: Request switches (defaults to MatchFlags())

        Returns:
            ScoreBreakdown with one integer score per category
        """
        flags = flags or MatchFlags()
        breakdown = ScoreBreakdown(
            price_score=self.price_score(criteria, candidate, flags),
            location_score=self.location_score(criteria, candidate, flags),
            area_score=self.area_score(criteria, candidate),
            room_score=self.room_score(criteria, candidate),
            feature_score=self.feature_score(criteria, candidate, flags),
            type_score=self.type_score(criteria, candidate),
        )

        self.logger.debug(
            f"Candidate scored: {candidate.candidate_id}",
            extra={
                "event": "match.candidate.scored",
                "candidate_id": candidate.candidate_id,
                **{f"{name}_score": value for name, value in breakdown.as_dict().items()},
            },
        )
        return breakdown

    def aggregate(self, breakdown: ScoreBreakdown, weights: ScoringWeights) -> int:
        """Combine category scores into the aggregate score.

        The five user-weighted categories share ``1 - type_weight`` of the
        total in proportion to their normalized weights; the type category
        contributes its fixed ``type_weight``.

        Returns:
            Integer score in [0, 100]
        """
        return clamp_score(breakdown.weighted(weights))

    def price_score(
        self, criteria: SearchCriteria, candidate: CandidateSnapshot, flags: MatchFlags
    ) -> int:
        """Price against [min_budget, max_budget].

        Cheaper than the minimum is never penalized. Above the maximum the
        score decays over ``budget_flexibility`` of the maximum when budget
        flexibility is allowed, otherwise it drops straight to 0.
        """
        if candidate.price is None or not criteria.has_budget_constraints():
            return MAX_SCORE
        window = self.config.budget_flexibility if flags.allow_budget_flexibility else 0.0
        return range_decay(
            candidate.price,
            criteria.min_budget,
            criteria.max_budget,
            window,
            penalize_below=False,
        )

    def location_score(
        self, criteria: SearchCriteria, candidate: CandidateSnapshot, flags: MatchFlags
    ) -> int:
        """Exact city/postal match 100, same state/region partial credit, else 0.

        A candidate counts as in the same region when its state is a preferred
        location or its postal code is near a preferred postal code. Exact
        location matching disables the regional tier.
        """
        preferred = {_casefold(loc) for loc in criteria.preferred_locations} - {None}
        if not preferred:
            return MAX_SCORE

        city = _casefold(candidate.city)
        postal_code = _casefold(candidate.postal_code)
        state = _casefold(candidate.state)
        if city is None and postal_code is None and state is None:
            return MAX_SCORE

        if city in preferred or postal_code in preferred:
            return MAX_SCORE
        if flags.exact_location_match:
            return MIN_SCORE
        if state is not None and state in preferred:
            return self.config.state_match_score
        if postal_code is not None and any(
            self._postal_codes_near(postal_code, location) for location in preferred
        ):
            return self.config.state_match_score
        return MIN_SCORE

    def _postal_codes_near(self, postal_code: str, preferred: str) -> bool:
        """Both codes are 5-digit numbers within ``postal_code_proximity`` of each other."""
        if not (_is_postal_code(postal_code) and _is_postal_code(preferred)):
            return False
        return abs(int(postal_code) - int(preferred)) <= self.config.postal_code_proximity

    def area_score(self, criteria: SearchCriteria, candidate: CandidateSnapshot) -> int:
        """Living area against its range.

        The decay window is ``area_room_window`` of the range width, or of the
        violated bound for one-sided and zero-width ranges. Request flags do
        not change it.
        """
        if candidate.living_area is None or not criteria.has_size_constraints():
            return MAX_SCORE
        return range_decay(
            candidate.living_area,
            criteria.min_living_area,
            criteria.max_living_area,
            self.config.area_room_window,
            relative_to_range=True,
        )

    def room_score(self, criteria: SearchCriteria, candidate: CandidateSnapshot) -> int:
        """Room count against its range, same tolerance as area."""
        if candidate.rooms is None or not criteria.has_room_constraints():
            return MAX_SCORE
        return range_decay(
            candidate.rooms,
            criteria.min_rooms,
            criteria.max_rooms,
            self.config.area_room_window,
            relative_to_range=True,
        )

    def feature_score(
        self, criteria: SearchCriteria, candidate: CandidateSnapshot, flags: MatchFlags
    ) -> int:
        """Share of required features present; all-or-nothing without feature flexibility."""
        required = criteria.required_features
        if not required or candidate.features is None:
            return MAX_SCORE

        present = len(required & candidate.features)
        if flags.allow_feature_flexibility:
            return clamp_score(MAX_SCORE * present / len(required))
        return MAX_SCORE if present == len(required) else MIN_SCORE

    def type_score(self, criteria: SearchCriteria, candidate: CandidateSnapshot) -> int:
        """Mean of the property-type and listing-type checks (each 0 or 100)."""
        property_check = MAX_SCORE
        if criteria.property_types and candidate.property_type is not None:
            property_check = MAX_SCORE if candidate.property_type in criteria.property_types else MIN_SCORE

        listing_check = MAX_SCORE
        if criteria.listing_types and candidate.listing_type is not None:
            listing_check = MAX_SCORE if candidate.listing_type in criteria.listing_types else MIN_SCORE

        return clamp_score((property_check + listing_check) / 2)
