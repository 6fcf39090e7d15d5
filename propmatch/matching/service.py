"""Orchestration of a single match run."""

import contextvars
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, List, Mapping, Optional, Union
from uuid import uuid4

from propmatch.config.models import MatchingConfig
from propmatch.logging import get_logger
from propmatch.logging.context import log_context

from .assembler import assemble
from .models import (
    CandidateSnapshot,
    MatchMode,
    MatchRequest,
    MatchResponse,
    MatchResult,
    NormalizedRequest,
    ResolvedCriteria,
)
from .normalizer import normalize_request
from .ports import (
    CandidateRepository,
    ClientCriteriaProvider,
    ContactHistoryProvider,
    PropertyProvider,
)
from .ranker import rank
from .reasons import explain
from .resolver import CriteriaResolver
from .scorer import CandidateScorer

logger = get_logger(__name__, component="matching")


class MatchingService:
    """
    Runs a match request end to end.

    A run goes through these stages:
    1. Normalize and validate the request
    2. Resolve the criteria (client, property or custom)
    3. Fetch the agent's candidates
    4. Score every candidate and derive its reasons
    5. Attach contact history
    6. Filter, sort and truncate
    7. Assemble the response

    The service holds no per-run state, so one instance can serve any number
    of runs. Scoring of large candidate sets can be spread over a thread pool
    (``max_workers`` > 1); results are identical to sequential scoring.
    """

    def __init__(
        self,
        candidate_repository: CandidateRepository,
        criteria_provider: ClientCriteriaProvider,
        property_provider: PropertyProvider,
        contact_history: ContactHistoryProvider,
        config: Optional[MatchingConfig] = None,
        scorer: Optional[CandidateScorer] = None,
        clock: Callable[[], float] = time.perf_counter,
    ):
        """
        Initialize the matching service.

        Args:
            candidate_repository: Source of candidates for an agent
            criteria_provider: Lookup of a client's stored search criteria
            property_provider: Lookup of a single property
            contact_history: Lookup of contact events per agent and candidate
            config: Matching settings (defaults to MatchingConfig())
            scorer: Candidate scorer (defaults to one built from config)
            clock: Monotonic clock in seconds, used for execution_time_ms
        """
        self.config = config or MatchingConfig()
        self.candidate_repository = candidate_repository
        self.contact_history = contact_history
        self.scorer = scorer or CandidateScorer(self.config)
        self.resolver = CriteriaResolver(
            criteria_provider,
            property_provider,
            reverse_budget_window=self.config.reverse_budget_window,
        )
        self.clock = clock

    def match(
        self, request: Union[MatchRequest, Mapping[str, Any]], agent_id: str
    ) -> MatchResponse:
        """
        Execute one match run for an agent.

        Args:
            request: MatchRequest or its camelCase/snake_case mapping
            agent_id: Agent whose candidates are searched

        Returns:
            MatchResponse with ranked results

        Raises:
            ValidationError: If the request is invalid or the client has no criteria
            NotFoundError: If the referenced client or property does not exist
        """
        normalized = normalize_request(request, type_weight=self.config.type_weight)

        with log_context(
            match_run_id=uuid4().hex,
            agent_id=agent_id,
            match_mode=normalized.mode.value,
        ):
            logger.info(
                "Match run started",
                extra={
                    "event": "match.run.started",
                    "reference_id": normalized.reference,
                    "match_threshold": normalized.match_threshold,
                    "max_results": normalized.max_results,
                },
            )

            resolved = self.resolver.resolve(normalized)

            started = self.clock()
            candidates = self.candidate_repository.fetch_candidates(
                agent_id, normalized.mode, resolved.criteria
            )
            logger.info(
                f"Fetched {len(candidates)} candidates",
                extra={
                    "event": "match.candidates.fetched",
                    "candidate_count": len(candidates),
                },
            )

            results = self._score_all(candidates, resolved, normalized)
            self._attach_contact_history(results, agent_id)
            ranked, total_matches = rank(results, normalized)

            execution_time_ms = max(0, int(round((self.clock() - started) * 1000)))
            response = assemble(ranked, total_matches, execution_time_ms, normalized)

            logger.info(
                "Match run completed",
                extra={
                    "event": "match.run.completed",
                    "candidate_count": len(candidates),
                    "scored_count": len(results),
                    "total_matches": response.total_matches,
                    "returned_matches": response.returned_matches,
                    "duration_ms": execution_time_ms,
                },
            )
            return response

    def _score_all(
        self,
        candidates: List[CandidateSnapshot],
        resolved: ResolvedCriteria,
        request: NormalizedRequest,
    ) -> List[MatchResult]:
        """Score candidates in input order, in parallel when configured."""
        workers = self.config.max_workers
        if workers > 1 and len(candidates) >= self.config.parallel_threshold:
            logger.debug(
                "Scoring candidates in parallel",
                extra={
                    "event": "match.scoring.parallel",
                    "max_workers": workers,
                    "candidate_count": len(candidates),
                },
            )
            with ThreadPoolExecutor(max_workers=workers) as executor:
                # Each task runs in a copy of the caller's context so the
                # run's log fields reach records emitted from worker threads.
                futures = [
                    executor.submit(
                        contextvars.copy_context().run,
                        self._score_candidate,
                        candidate,
                        resolved,
                        request,
                    )
                    for candidate in candidates
                ]
                scored = [future.result() for future in futures]
        else:
            scored = [self._score_candidate(c, resolved, request) for c in candidates]

        return [result for result in scored if result is not None]

    def _score_candidate(
        self,
        candidate: CandidateSnapshot,
        resolved: ResolvedCriteria,
        request: NormalizedRequest,
    ) -> Optional[MatchResult]:
        """
        Score a single candidate.

        In reverse matching the run's property is evaluated against each
        client's own criteria; clients without criteria are skipped.
        """
        if resolved.mode is MatchMode.PROPERTY_TO_CLIENTS:
            if candidate.criteria is None:
                return None
            criteria, evaluated = candidate.criteria, resolved.subject
        else:
            criteria, evaluated = resolved.criteria, candidate

        breakdown = self.scorer.score(criteria, evaluated, request.flags)
        match_reasons, mismatch_reasons = explain(breakdown, criteria, evaluated)
        return MatchResult(
            candidate=candidate,
            match_score=self.scorer.aggregate(breakdown, request.weights),
            breakdown=breakdown,
            match_reasons=match_reasons,
            mismatch_reasons=mismatch_reasons,
        )

    def _attach_contact_history(self, results: List[MatchResult], agent_id: str) -> None:
        for result in results:
            result.previously_contacted = bool(
                self.contact_history.was_contacted(agent_id, result.candidate_id)
            )
            result.view_count = int(self.contact_history.view_count(agent_id, result.candidate_id))
