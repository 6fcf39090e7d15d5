"""Utility functions for preparing match responses for downstream consumers.

This module provides helpers for serializing responses into camelCase
JSON-ready dicts (the shape an API or the CLI emits) and for rendering a
short plain-text summary of a run.
"""

from typing import Any, Dict, List, Optional

from .models import CandidateSnapshot, MatchResponse, MatchResult


def build_candidate_dict(candidate: CandidateSnapshot) -> Dict[str, Any]:
    """Serialize a candidate snapshot.

    Returns:
        Dict with keys id, kind, label, price, livingAreaSqm, rooms, city,
        postalCode, state, propertyType, listingType, status, features and
        createdAt (ISO string). Unknown values are None; features are sorted.
    """
    return {
        "id": candidate.candidate_id,
        "kind": candidate.kind.value,
        "label": candidate.label,
        "price": candidate.price,
        "livingAreaSqm": candidate.living_area,
        "rooms": candidate.rooms,
        "city": candidate.city,
        "postalCode": candidate.postal_code,
        "state": candidate.state,
        "propertyType": _enum_value(candidate.property_type),
        "listingType": _enum_value(candidate.listing_type),
        "status": _enum_value(candidate.status),
        "features": sorted(candidate.features) if candidate.features is not None else None,
        "createdAt": candidate.created_at.isoformat() if candidate.created_at else None,
    }


def build_result_dict(result: MatchResult) -> Dict[str, Any]:
    """Serialize one ranked result including its category breakdown."""
    breakdown = result.breakdown
    return {
        "candidate": build_candidate_dict(result.candidate),
        "matchScore": result.match_score,
        "scoreBreakdown": {
            "priceScore": breakdown.price_score,
            "locationScore": breakdown.location_score,
            "areaScore": breakdown.area_score,
            "roomScore": breakdown.room_score,
            "featureScore": breakdown.feature_score,
            "typeScore": breakdown.type_score,
        },
        "matchReasons": list(result.match_reasons),
        "mismatchReasons": list(result.mismatch_reasons),
        "previouslyContacted": result.previously_contacted,
        "viewCount": result.view_count,
    }


def build_response_dict(response: MatchResponse) -> Dict[str, Any]:
    """Serialize a MatchResponse for JSON output."""
    return {
        "mode": response.mode.value,
        "results": [build_result_dict(result) for result in response.results],
        "totalMatches": response.total_matches,
        "returnedMatches": response.returned_matches,
        "matchThreshold": response.match_threshold,
        "executionTimeMs": response.execution_time_ms,
    }


def format_summary(response: MatchResponse, limit: Optional[int] = 10) -> str:
    """Render a short human-readable summary of a run.

    Args:
        response: Response to summarize
        limit: Maximum number of result lines (None for all)

    Returns:
        Multi-line string, one line per result
    """
    lines: List[str] = [
        f"Mode: {response.mode.value}",
        f"Matches: {response.returned_matches} of {response.total_matches} "
        f"(threshold {response.match_threshold}, {response.execution_time_ms} ms)",
    ]
    shown = response.results if limit is None else response.results[:limit]
    for position, result in enumerate(shown, start=1):
        label = result.candidate.label or result.candidate_id
        line = f"{position:>3}. [{result.match_score:>3}] {label} ({result.candidate_id})"
        if result.previously_contacted:
            line += " *contacted*"
        lines.append(line)
        if result.mismatch_reasons:
            lines.append(f"       - {'; '.join(result.mismatch_reasons)}")
    return "\n".join(lines)


def _enum_value(value) -> Optional[str]:
    return value.value if value is not None else None
