"""Data models for the matching engine.

This module defines the request, the per-run value objects and the result
structures of a match run:
- MatchRequest: user-facing request (validated with Pydantic)
- MatchMode / SortField / SortDirection: request enums
- ScoringWeights: immutable, normalized category weights
- MatchFlags / NormalizedRequest: validated request handed to the pipeline
- CandidateSnapshot: read-only view of a property or client being scored
- ResolvedCriteria: concrete criteria for one run
- ScoreBreakdown / MatchResult / MatchResponse: scoring output
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, FrozenSet, List, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

from propmatch.domain.models import ListingType, PropertyStatus, PropertyType, SearchCriteria

CATEGORIES = ("price", "location", "area", "room", "feature", "type")
WEIGHTED_CATEGORIES = CATEGORIES[:5]

DEFAULT_WEIGHTS: Dict[str, float] = {
    "price": 0.30,
    "location": 0.25,
    "area": 0.20,
    "room": 0.15,
    "feature": 0.10,
}
DEFAULT_TYPE_WEIGHT = 0.05

DEFAULT_MATCH_THRESHOLD = 70
DEFAULT_MAX_RESULTS = 50
MAX_RESULTS_LIMIT = 500


class MatchMode(str, Enum):
    """Which side is being searched for."""

    CLIENT_TO_PROPERTIES = "client_to_properties"
    PROPERTY_TO_CLIENTS = "property_to_clients"
    CUSTOM_CRITERIA = "custom_criteria"


class SortField(str, Enum):
    """Primary sort keys accepted by the ranker."""

    MATCH_SCORE = "matchScore"
    PRICE = "price"
    CREATED_AT = "createdAt"
    LIVING_AREA = "livingAreaSqm"
    ROOMS = "rooms"


class SortDirection(str, Enum):
    ASC = "ASC"
    DESC = "DESC"


class CandidateKind(str, Enum):
    PROPERTY = "property"
    CLIENT = "client"


class MatchRequest(BaseModel):
    """A request to rank candidates. Exactly one of client_id, property_id, custom_criteria is set."""

    client_id: Optional[str] = Field(None, description="Match properties for this client")
    property_id: Optional[str] = Field(None, description="Match clients for this property")
    custom_criteria: Optional[SearchCriteria] = Field(
        None, description="Match properties against ad-hoc criteria"
    )
    match_threshold: int = Field(
        DEFAULT_MATCH_THRESHOLD, ge=0, le=100, description="Minimum aggregate score to include"
    )
    max_results: int = Field(
        DEFAULT_MAX_RESULTS, ge=1, le=MAX_RESULTS_LIMIT, description="Maximum results returned"
    )
    exact_location_match: bool = False
    allow_budget_flexibility: bool = True
    allow_feature_flexibility: bool = True
    include_contacted: bool = True
    include_unavailable: bool = False
    price_weight: Optional[float] = Field(None, ge=0, le=100)
    location_weight: Optional[float] = Field(None, ge=0, le=100)
    area_weight: Optional[float] = Field(None, ge=0, le=100)
    room_weight: Optional[float] = Field(None, ge=0, le=100)
    feature_weight: Optional[float] = Field(None, ge=0, le=100)
    sort_by: SortField = SortField.MATCH_SCORE
    sort_direction: SortDirection = SortDirection.DESC

    model_config = {"populate_by_name": True, "alias_generator": to_camel}

    @field_validator("client_id", "property_id", mode="before")
    @classmethod
    def blank_id_is_unset(cls, v):
        """Treat empty identifiers as not provided."""
        if isinstance(v, str) and not v.strip():
            return None
        return v.strip() if isinstance(v, str) else v

    @field_validator("sort_direction", mode="before")
    @classmethod
    def normalize_direction(cls, v):
        """Accept asc/desc in any case; empty means default."""
        if v is None or (isinstance(v, str) and not v.strip()):
            return SortDirection.DESC
        return v.strip().upper() if isinstance(v, str) else v

    @field_validator("sort_by", mode="before")
    @classmethod
    def empty_sort_is_default(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            return SortField.MATCH_SCORE
        return v


@dataclass(frozen=True)
class ScoringWeights:
    """Normalized category weights for one match run.

    The five user-facing weights always sum to 1.0. The type category is not
    user-weighted: it takes the fixed share ``type_weight`` of the aggregate
    and the five user weights are scaled to consume the rest.

    Build instances with ScoringWeights.from_values() or ScoringWeights.default().
    """

    price: float
    location: float
    area: float
    room: float
    feature: float
    type_weight: float = DEFAULT_TYPE_WEIGHT

    @classmethod
    def default(cls, type_weight: float = DEFAULT_TYPE_WEIGHT) -> "ScoringWeights":
        """Weights {price .30, location .25, area .20, room .15, feature .10}."""
        return cls(**DEFAULT_WEIGHTS, type_weight=type_weight)

    @classmethod
    def from_values(
        cls,
        price: Optional[float] = None,
        location: Optional[float] = None,
        area: Optional[float] = None,
        room: Optional[float] = None,
        feature: Optional[float] = None,
        type_weight: float = DEFAULT_TYPE_WEIGHT,
    ) -> "ScoringWeights":
        """Normalize raw user weights so they sum to 1.0.

        Absent weights count as zero. When every weight is zero or absent the
        defaults are used instead.

        Raises:
            ValueError: If a weight is negative or type_weight is outside [0, 1)
        """
        if not 0.0 <= type_weight < 1.0:
            raise ValueError(f"type_weight must be in [0, 1), got {type_weight}")

        raw = [w if w is not None else 0.0 for w in (price, location, area, room, feature)]
        if any(w < 0 for w in raw):
            raise ValueError(f"Weights must be non-negative, got {raw}")

        total = sum(raw)
        if total <= 0:
            return cls.default(type_weight)
        return cls(*(w / total for w in raw), type_weight=type_weight)

    def as_dict(self) -> Dict[str, float]:
        """The five normalized user weights keyed by category."""
        return {
            "price": self.price,
            "location": self.location,
            "area": self.area,
            "room": self.room,
            "feature": self.feature,
        }

    def effective(self) -> Dict[str, float]:
        """Weights actually applied to the six categories (sum to 1.0)."""
        share = 1.0 - self.type_weight
        weights = {category: value * share for category, value in self.as_dict().items()}
        weights["type"] = self.type_weight
        return weights


@dataclass(frozen=True)
class MatchFlags:
    """Request switches that change how categories are scored."""

    exact_location_match: bool = False
    allow_budget_flexibility: bool = True
    allow_feature_flexibility: bool = True


@dataclass(frozen=True)
class NormalizedRequest:
    """A validated match request with exactly one mode and normalized weights."""

    mode: MatchMode
    client_id: Optional[str] = None
    property_id: Optional[str] = None
    custom_criteria: Optional[SearchCriteria] = None
    match_threshold: int = DEFAULT_MATCH_THRESHOLD
    max_results: int = DEFAULT_MAX_RESULTS
    flags: MatchFlags = field(default_factory=MatchFlags)
    include_contacted: bool = True
    include_unavailable: bool = False
    weights: ScoringWeights = field(default_factory=ScoringWeights.default)
    sort_by: SortField = SortField.MATCH_SCORE
    sort_direction: SortDirection = SortDirection.DESC

    @property
    def reference(self) -> Optional[str]:
        """The client or property id the run is anchored on (None for custom criteria)."""
        if self.mode is MatchMode.CLIENT_TO_PROPERTIES:
            return self.client_id
        if self.mode is MatchMode.PROPERTY_TO_CLIENTS:
            return self.property_id
        return None


@dataclass(frozen=True)
class CandidateSnapshot:
    """Read-only view of a property or client carrying exactly what the scorer needs.

    For client candidates, ``criteria`` holds the client's stored search
    preferences and the numeric fields mirror the upper bounds of those
    preferences (used only for sorting and display).
    """

    candidate_id: str
    kind: CandidateKind = CandidateKind.PROPERTY
    label: str = ""
    price: Optional[float] = None
    living_area: Optional[float] = None
    rooms: Optional[float] = None
    city: Optional[str] = None
    postal_code: Optional[str] = None
    state: Optional[str] = None
    features: Optional[FrozenSet[str]] = None
    property_type: Optional[PropertyType] = None
    listing_type: Optional[ListingType] = None
    status: Optional[PropertyStatus] = None
    created_at: Optional[datetime] = None
    criteria: Optional[SearchCriteria] = None

    @property
    def is_available(self) -> bool:
        """Unset status counts as available."""
        return self.status is None or self.status is PropertyStatus.AVAILABLE


@dataclass(frozen=True)
class ResolvedCriteria:
    """Concrete criteria for one run.

    Attributes:
        mode: Matching mode of the run
        criteria: Criteria candidates are fetched (and, outside reverse matching, scored) against
        subject: In reverse matching, the property every client's criteria are scored against
    """

    mode: MatchMode
    criteria: SearchCriteria
    subject: Optional[CandidateSnapshot] = None


@dataclass(frozen=True)
class ScoreBreakdown:
    """Six category scores, each an integer in [0, 100]."""

    price_score: int = 100
    location_score: int = 100
    area_score: int = 100
    room_score: int = 100
    feature_score: int = 100
    type_score: int = 100

    def as_dict(self) -> Dict[str, int]:
        """Category scores keyed by category name, in canonical order."""
        return {
            "price": self.price_score,
            "location": self.location_score,
            "area": self.area_score,
            "room": self.room_score,
            "feature": self.feature_score,
            "type": self.type_score,
        }

    @property
    def lowest_score(self) -> int:
        return min(self.as_dict().values())

    @property
    def highest_score(self) -> int:
        return max(self.as_dict().values())

    @property
    def average_score(self) -> float:
        scores = list(self.as_dict().values())
        return sum(scores) / len(scores)

    def weighted(self, weights: ScoringWeights) -> float:
        """Unrounded weighted sum of the category scores.

        Each score is clipped to [0, 100] first. CandidateScorer.aggregate
        rounds this into the aggregate match score.
        """
        effective = weights.effective()
        return sum(
            effective[category] * max(0, min(100, score))
            for category, score in self.as_dict().items()
        )


@dataclass
class MatchResult:
    """One ranked candidate with its score breakdown and explanations.

    Attributes:
        candidate: Snapshot of the matched property or client
        match_score: Aggregate score in [0, 100]
        breakdown: Per-category scores
        match_reasons: Categories that scored 80 or more, in category order
        mismatch_reasons: Categories that scored below 50, in category order
        previously_contacted: Whether the agent already contacted this candidate
        view_count: How often the candidate was viewed
    """

    candidate: CandidateSnapshot
    match_score: int
    breakdown: ScoreBreakdown
    match_reasons: List[str] = field(default_factory=list)
    mismatch_reasons: List[str] = field(default_factory=list)
    previously_contacted: bool = False
    view_count: int = 0

    @property
    def candidate_id(self) -> str:
        return self.candidate.candidate_id


@dataclass
class MatchResponse:
    """Final output of a match run.

    Attributes:
        mode: Matching mode the request selected
        results: Ranked, truncated results
        total_matches: Results that passed the filters, before truncation
        returned_matches: len(results)
        match_threshold: Threshold applied
        execution_time_ms: Duration of fetch + score + rank
    """

    mode: MatchMode
    results: List[MatchResult] = field(default_factory=list)
    total_matches: int = 0
    returned_matches: int = 0
    match_threshold: int = DEFAULT_MATCH_THRESHOLD
    execution_time_ms: int = 0
