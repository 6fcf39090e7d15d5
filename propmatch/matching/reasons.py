"""Human-readable explanations for category scores.

Scores of 80 and above produce a match reason, scores below 50 a mismatch
reason (with the size of the miss where the numbers are known). Scores in
between stay silent so the output remains short.
"""

from typing import List, Optional, Tuple

from propmatch.domain.models import SearchCriteria

from .models import CATEGORIES, CandidateSnapshot, ScoreBreakdown
from .scorer import round_half_up

MATCH_REASON_MIN_SCORE = 80
MISMATCH_REASON_MAX_SCORE = 50


def explain(
    breakdown: ScoreBreakdown,
    criteria: Optional[SearchCriteria] = None,
    subject: Optional[CandidateSnapshot] = None,
) -> Tuple[List[str], List[str]]:
    """Derive match and mismatch reasons from a score breakdown.

    Args:
        breakdown: Category scores of one candidate
        criteria: Criteria the candidate was scored against (enables magnitudes)
        subject: Snapshot of the scored property (enables magnitudes)

    Returns:
        Tuple of (match_reasons, mismatch_reasons), each in category order
    """
    match_reasons: List[str] = []
    mismatch_reasons: List[str] = []
    scores = breakdown.as_dict()

    for category in CATEGORIES:
        score = scores[category]
        if score >= MATCH_REASON_MIN_SCORE:
            match_reasons.append(_MATCH_TEXT[category](criteria, subject))
        elif score < MISMATCH_REASON_MAX_SCORE:
            mismatch_reasons.append(_MISMATCH_TEXT[category](criteria, subject))

    return match_reasons, mismatch_reasons


def _percent(delta: float, base: float) -> int:
    return round_half_up(abs(delta) / base * 100) if base else 0


def _format_number(value: float) -> str:
    return f"{value:g}"


def _price_match(criteria, subject) -> str:
    if criteria is not None and not criteria.has_budget_constraints():
        return "No budget constraints specified"
    if (
        criteria is not None
        and subject is not None
        and subject.price is not None
        and criteria.max_budget is not None
        and subject.price > criteria.max_budget
    ):
        return f"Price slightly over budget ({_percent(subject.price - criteria.max_budget, criteria.max_budget)}%)"
    return "Price within budget"


def _price_mismatch(criteria, subject) -> str:
    if (
        criteria is not None
        and subject is not None
        and subject.price is not None
        and criteria.max_budget is not None
        and subject.price > criteria.max_budget
    ):
        return f"Price exceeds budget by {_percent(subject.price - criteria.max_budget, criteria.max_budget)}%"
    return "Price outside budget"


def _location_match(criteria, subject) -> str:
    if criteria is not None and not criteria.preferred_locations:
        return "No location preferences specified"
    if subject is not None and subject.city:
        return f"Located in preferred location {subject.city}"
    return "Location matches preferences"


def _location_mismatch(criteria, subject) -> str:
    if subject is not None and subject.city:
        return f"Location {subject.city} is not a preferred location"
    return "Location does not match preferences"


def _range_mismatch(label: str, value, lower, upper) -> Optional[str]:
    if value is None:
        return None
    if lower is not None and value < lower:
        return f"{label} {_percent(lower - value, lower)}% below minimum"
    if upper is not None and value > upper:
        return f"{label} {_percent(value - upper, upper)}% above maximum"
    return None


def _area_match(criteria, subject) -> str:
    if criteria is not None and not criteria.has_size_constraints():
        return "No living area constraints specified"
    if subject is not None and subject.living_area is not None:
        return f"Living area {_format_number(subject.living_area)} m² within desired range"
    return "Living area within desired range"


def _area_mismatch(criteria, subject) -> str:
    if criteria is not None and subject is not None:
        reason = _range_mismatch(
            "Living area", subject.living_area, criteria.min_living_area, criteria.max_living_area
        )
        if reason:
            return reason
    return "Living area outside desired range"


def _room_match(criteria, subject) -> str:
    if criteria is not None and not criteria.has_room_constraints():
        return "No room count constraints specified"
    if subject is not None and subject.rooms is not None:
        return f"{_format_number(subject.rooms)} rooms within desired range"
    return "Room count within desired range"


def _room_mismatch(criteria, subject) -> str:
    if criteria is not None and subject is not None and subject.rooms is not None:
        rooms = subject.rooms
        if criteria.min_rooms is not None and rooms < criteria.min_rooms:
            return f"{_format_number(rooms)} rooms is {_format_number(criteria.min_rooms - rooms)} below minimum"
        if criteria.max_rooms is not None and rooms > criteria.max_rooms:
            return f"{_format_number(rooms)} rooms is {_format_number(rooms - criteria.max_rooms)} above maximum"
    return "Room count outside desired range"


def _feature_match(criteria, subject) -> str:
    if criteria is not None and not criteria.required_features:
        return "No required features specified"
    if criteria is not None and subject is not None and subject.features is not None:
        missing = criteria.required_features - subject.features
        if missing:
            return f"Most required features present (missing: {', '.join(sorted(missing))})"
    return "All required features present"


def _feature_mismatch(criteria, subject) -> str:
    if criteria is not None and subject is not None and subject.features is not None:
        missing = criteria.required_features - subject.features
        if missing:
            return f"Missing required features: {', '.join(sorted(missing))}"
    return "Required features not available"


def _type_match(criteria, subject) -> str:
    if subject is not None and subject.property_type is not None:
        return f"Property type {subject.property_type.english_name} matches preferences"
    return "Property type matches preferences"


def _type_mismatch(criteria, subject) -> str:
    if subject is not None and subject.property_type is not None and subject.listing_type is not None:
        return (
            f"{subject.property_type.english_name} ({subject.listing_type.english_name}) "
            "does not match preferred property and listing types"
        )
    return "Property type does not match preferences"


_MATCH_TEXT = {
    "price": _price_match,
    "location": _location_match,
    "area": _area_match,
    "room": _room_match,
    "feature": _feature_match,
    "type": _type_match,
}

_MISMATCH_TEXT = {
    "price": _price_mismatch,
    "location": _location_mismatch,
    "area": _area_mismatch,
    "room": _room_mismatch,
    "feature": _feature_mismatch,
    "type": _type_mismatch,
}
