"""Property/client matching engine.

This module provides:
- MatchRequest / MatchResponse: request and result structures of a match run
- MatchingService: end-to-end orchestration of a run
- CandidateScorer: six-category scoring and weighted aggregation
- CriteriaResolver: criteria lookup and derivation per matching mode
- Ports the engine needs from storage (candidates, criteria, contact history)
- Utility functions for serializing responses
"""

from .exceptions import MatchingError, NotFoundError, ValidationError
from .models import (
    CandidateKind,
    CandidateSnapshot,
    MatchMode,
    MatchRequest,
    MatchResponse,
    MatchResult,
    NormalizedRequest,
    ScoreBreakdown,
    ScoringWeights,
    SortDirection,
    SortField,
)
from .normalizer import normalize_request
from .resolver import CriteriaResolver, derive_criteria_from_property
from .scorer import CandidateScorer
from .service import MatchingService
from .snapshots import snapshot_from_client, snapshot_from_property
from .utils import build_response_dict, build_result_dict, format_summary

__all__ = [
    "CandidateKind",
    "CandidateScorer",
    "CandidateSnapshot",
    "CriteriaResolver",
    "MatchMode",
    "MatchRequest",
    "MatchResponse",
    "MatchResult",
    "MatchingError",
    "MatchingService",
    "NormalizedRequest",
    "NotFoundError",
    "ScoreBreakdown",
    "ScoringWeights",
    "SortDirection",
    "SortField",
    "ValidationError",
    "build_response_dict",
    "build_result_dict",
    "derive_criteria_from_property",
    "format_summary",
    "normalize_request",
    "snapshot_from_client",
    "snapshot_from_property",
]
