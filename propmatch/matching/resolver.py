"""Resolution of a normalized request into concrete search criteria."""

import logging
from typing import Optional

from propmatch.domain.models import SearchCriteria

from .exceptions import NotFoundError, ValidationError
from .models import CandidateSnapshot, MatchMode, NormalizedRequest, ResolvedCriteria
from .ports import ClientCriteriaProvider, PropertyProvider

logger = logging.getLogger(__name__)

DEFAULT_REVERSE_BUDGET_WINDOW = 0.10


def derive_criteria_from_property(
    subject: CandidateSnapshot, budget_window: float = DEFAULT_REVERSE_BUDGET_WINDOW
) -> SearchCriteria:
    """Build the implicit criteria a property stands for.

    The price becomes the centre of a budget window of +/- ``budget_window``,
    living area and rooms become point targets, the city (or postal code)
    becomes the preferred location and the property's own type and listing
    type are the only accepted ones. Unknown attributes stay unconstrained.
    """
    min_budget = max_budget = None
    if subject.price is not None:
        min_budget = subject.price * (1 - budget_window)
        max_budget = subject.price * (1 + budget_window)

    location = subject.city or subject.postal_code
    return SearchCriteria(
        min_budget=min_budget,
        max_budget=max_budget,
        min_living_area=subject.living_area,
        max_living_area=subject.living_area,
        min_rooms=subject.rooms,
        max_rooms=subject.rooms,
        preferred_locations=[location] if location else [],
        property_types=[subject.property_type] if subject.property_type else [],
        listing_types=[subject.listing_type] if subject.listing_type else [],
    )


class CriteriaResolver:
    """Turns a NormalizedRequest into ResolvedCriteria.

    - Client mode: the client's stored criteria
    - Custom mode: the supplied criteria as-is
    - Property mode: criteria derived from the property, which also becomes
      the run's subject
    """

    def __init__(
        self,
        criteria_provider: ClientCriteriaProvider,
        property_provider: PropertyProvider,
        reverse_budget_window: float = DEFAULT_REVERSE_BUDGET_WINDOW,
        logger_instance: Optional[logging.Logger] = None,
    ):
        self.criteria_provider = criteria_provider
        self.property_provider = property_provider
        self.reverse_budget_window = reverse_budget_window
        self.logger = logger_instance or logger

    def resolve(self, request: NormalizedRequest) -> ResolvedCriteria:
        """
        Resolve the criteria for a match run.

        Raises:
            NotFoundError: If the referenced client or property does not exist
            ValidationError: If the client has no stored search criteria
        """
        if request.mode is MatchMode.CLIENT_TO_PROPERTIES:
            criteria = self._load_client_criteria(request.client_id)
            return ResolvedCriteria(mode=request.mode, criteria=criteria)

        if request.mode is MatchMode.PROPERTY_TO_CLIENTS:
            subject = self._load_property(request.property_id)
            criteria = derive_criteria_from_property(subject, self.reverse_budget_window)
            self.logger.debug(
                f"Derived criteria from property {subject.candidate_id}",
                extra={
                    "event": "match.criteria.derived",
                    "property_id": subject.candidate_id,
                    "min_budget": criteria.min_budget,
                    "max_budget": criteria.max_budget,
                },
            )
            return ResolvedCriteria(mode=request.mode, criteria=criteria, subject=subject)

        return ResolvedCriteria(mode=request.mode, criteria=request.custom_criteria)

    def _load_client_criteria(self, client_id: str) -> SearchCriteria:
        try:
            criteria = self.criteria_provider.get_search_criteria(client_id)
        except NotFoundError:
            raise
        except LookupError as e:
            raise NotFoundError("client", client_id) from e

        if criteria is None:
            raise ValidationError(
                "Client does not have search criteria configured",
                errors=[f"client_id={client_id}"],
            )
        return criteria

    def _load_property(self, property_id: str) -> CandidateSnapshot:
        try:
            subject = self.property_provider.get_property(property_id)
        except NotFoundError:
            raise
        except LookupError as e:
            raise NotFoundError("property", property_id) from e

        if subject is None:
            raise NotFoundError("property", property_id)
        return subject
