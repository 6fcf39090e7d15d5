"""Final response assembly."""

from typing import List

from .models import MatchResponse, MatchResult, NormalizedRequest


def assemble(
    ranked: List[MatchResult],
    total_matches: int,
    execution_time_ms: int,
    request: NormalizedRequest,
) -> MatchResponse:
    """Compose the MatchResponse from ranked results and run timing."""
    return MatchResponse(
        mode=request.mode,
        results=list(ranked),
        total_matches=total_matches,
        returned_matches=len(ranked),
        match_threshold=request.match_threshold,
        execution_time_ms=execution_time_ms,
    )
