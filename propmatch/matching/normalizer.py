"""Request validation and weight normalization.

normalize_request() is the first step of every match run. It rejects
malformed requests before any collaborator is called and produces the
NormalizedRequest the rest of the pipeline works on.
"""

import logging
from typing import Any, Mapping, Union

from pydantic import ValidationError as PydanticValidationError

from propmatch.config.exceptions import format_pydantic_errors

from .exceptions import ValidationError
from .models import (
    DEFAULT_TYPE_WEIGHT,
    MAX_RESULTS_LIMIT,
    MatchFlags,
    MatchMode,
    MatchRequest,
    NormalizedRequest,
    ScoringWeights,
    SortDirection,
    SortField,
)

logger = logging.getLogger(__name__)


def normalize_request(
    request: Union[MatchRequest, Mapping[str, Any]],
    type_weight: float = DEFAULT_TYPE_WEIGHT,
) -> NormalizedRequest:
    """
    Validate a match request and normalize its weights.

    Accepts either a MatchRequest or a raw mapping (snake_case or camelCase
    keys, as an API layer would receive it). Field errors in a mapping are
    reported as one ValidationError listing every failing field.

    Args:
        request: MatchRequest instance or raw request mapping
        type_weight: Fixed internal weight of the type category

    Returns:
        NormalizedRequest with exactly one mode and weights summing to 1.0

    Raises:
        ValidationError: If the mode count is not exactly one, or a value is
            out of range (values are never silently clamped)
    """
    if not isinstance(request, MatchRequest):
        request = _parse_request(request)

    errors = []

    modes = [
        mode
        for mode, value in (
            (MatchMode.CLIENT_TO_PROPERTIES, request.client_id),
            (MatchMode.PROPERTY_TO_CLIENTS, request.property_id),
            (MatchMode.CUSTOM_CRITERIA, request.custom_criteria),
        )
        if value is not None
    ]
    if not modes:
        errors.append("One of client_id, property_id or custom_criteria must be set")
    elif len(modes) > 1:
        errors.append(
            "Only one matching mode may be set, got: "
            + ", ".join(mode.value for mode in modes)
        )

    # Range checks repeat the model constraints for requests built with model_construct()
    if not isinstance(request.match_threshold, int) or not 0 <= request.match_threshold <= 100:
        errors.append(f"match_threshold must be between 0 and 100, got {request.match_threshold}")
    if not isinstance(request.max_results, int) or not 1 <= request.max_results <= MAX_RESULTS_LIMIT:
        errors.append(
            f"max_results must be between 1 and {MAX_RESULTS_LIMIT}, got {request.max_results}"
        )
    if not isinstance(request.sort_by, SortField):
        errors.append(f"Unsupported sort_by: {request.sort_by}")
    if not isinstance(request.sort_direction, SortDirection):
        errors.append(f"Unsupported sort_direction: {request.sort_direction}")

    weights = None
    try:
        weights = ScoringWeights.from_values(
            price=request.price_weight,
            location=request.location_weight,
            area=request.area_weight,
            room=request.room_weight,
            feature=request.feature_weight,
            type_weight=type_weight,
        )
    except ValueError as e:
        errors.append(str(e))

    if errors:
        logger.debug(
            "Match request rejected",
            extra={"event": "match.request.rejected", "error_count": len(errors)},
        )
        raise ValidationError("Invalid match request", errors=errors)

    return NormalizedRequest(
        mode=modes[0],
        client_id=request.client_id,
        property_id=request.property_id,
        custom_criteria=request.custom_criteria,
        match_threshold=request.match_threshold,
        max_results=request.max_results,
        flags=MatchFlags(
            exact_location_match=request.exact_location_match,
            allow_budget_flexibility=request.allow_budget_flexibility,
            allow_feature_flexibility=request.allow_feature_flexibility,
        ),
        include_contacted=request.include_contacted,
        include_unavailable=request.include_unavailable,
        weights=weights,
        sort_by=request.sort_by,
        sort_direction=request.sort_direction,
    )


def _parse_request(payload: Mapping[str, Any]) -> MatchRequest:
    """Build a MatchRequest from a raw mapping, converting Pydantic errors."""
    if payload is None:
        raise ValidationError("Match request is required")
    if not isinstance(payload, Mapping):
        raise ValidationError(
            f"Match request must be a mapping, got {type(payload).__name__}"
        )
    try:
        return MatchRequest.model_validate(dict(payload))
    except PydanticValidationError as e:
        raise ValidationError(
            "Invalid match request", errors=format_pydantic_errors(e)
        ) from e
