"""Filtering, ordering and truncation of scored candidates."""

import logging
from typing import Any, Callable, Dict, Iterable, List, Tuple

from .models import MatchResult, NormalizedRequest, SortDirection, SortField

logger = logging.getLogger(__name__)

SORT_KEYS: Dict[SortField, Callable[[MatchResult], Any]] = {
    SortField.MATCH_SCORE: lambda result: result.match_score,
    SortField.PRICE: lambda result: result.candidate.price,
    SortField.CREATED_AT: lambda result: result.candidate.created_at,
    SortField.LIVING_AREA: lambda result: result.candidate.living_area,
    SortField.ROOMS: lambda result: result.candidate.rooms,
}


def passes_filters(result: MatchResult, request: NormalizedRequest) -> bool:
    """Threshold (inclusive), availability and contact-history filters."""
    if result.match_score < request.match_threshold:
        return False
    if not request.include_unavailable and not result.candidate.is_available:
        return False
    if not request.include_contacted and result.previously_contacted:
        return False
    return True


def sort_results(
    results: Iterable[MatchResult],
    sort_by: SortField = SortField.MATCH_SCORE,
    direction: SortDirection = SortDirection.DESC,
) -> List[MatchResult]:
    """Order results by the requested key, then by candidate id ascending.

    Results without a value for the sort key (e.g. unknown price) go last in
    either direction. The id tie-break holds regardless of direction because
    the primary sort is stable over an id-ordered list.
    """
    key = SORT_KEYS[sort_by]
    by_id = sorted(results, key=lambda result: result.candidate_id)

    with_value = [result for result in by_id if key(result) is not None]
    without_value = [result for result in by_id if key(result) is None]

    with_value.sort(key=key, reverse=direction is SortDirection.DESC)
    return with_value + without_value


def rank(
    results: Iterable[MatchResult], request: NormalizedRequest
) -> Tuple[List[MatchResult], int]:
    """
    Filter, sort and truncate scored results.

    Args:
        results: Scored results in any order
        request: Normalized request (threshold, filters, sort, max_results)

    Returns:
        Tuple of (ordered results truncated to max_results, total matches
        after filtering and before truncation)
    """
    results = list(results)
    kept = [result for result in results if passes_filters(result, request)]
    total_matches = len(kept)

    ordered = sort_results(kept, request.sort_by, request.sort_direction)

    logger.debug(
        "Candidates ranked",
        extra={
            "event": "match.candidates.ranked",
            "scored_count": len(results),
            "filtered_out": len(results) - total_matches,
            "total_matches": total_matches,
            "sort_by": request.sort_by.value,
            "sort_direction": request.sort_direction.value,
        },
    )
    return ordered[: request.max_results], total_matches
