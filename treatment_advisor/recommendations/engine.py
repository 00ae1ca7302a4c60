from __future__ import annotations

import logging
import time

from .errors import ValidationError
from .models import RecommendationResult, TreatmentRequest
from .ranking import rank
from .recorder import RecommendationRecorder
from .repository import CandidateRepository
from .scoring import score

logger = logging.getLogger(__name__)


def validate_request(request: TreatmentRequest) -> None:
    """Reject requests without a steel code before any work is done."""
    if not request.steel_code or not request.steel_code.strip():
        raise ValidationError("steel_code is required")


def find_recommendations(
    request: TreatmentRequest,
    repository: CandidateRepository,
) -> list[RecommendationResult]:
    """
    Score every active work instruction against *request* and return the
    ranked, explained shortlist.

    The catalog is fetched fresh on each call. ``RepositoryError`` from the
    repository propagates unchanged.
    """
    start_time = time.time()
    validate_request(request)

    candidates = [c for c in repository.fetch_active() if c.active]
    scored = [(c, score(request, c)) for c in candidates]
    results = rank(request, scored)

    elapsed_ms = round((time.time() - start_time) * 1000, 1)
    logger.info(
        "steel=%s candidates=%d results=%d elapsed_ms=%s",
        request.steel_code, len(candidates), len(results), elapsed_ms,
    )
    return results


def save_recommendation(
    request: TreatmentRequest,
    result: RecommendationResult,
    user_name: str,
    client_name: str,
    recorder: RecommendationRecorder,
) -> str:
    """
    Persist one chosen result and return its id.

    Callers must supply a non-empty *user_name*; this is not checked here.
    ``PersistenceError`` from the recorder propagates and is not retried.
    """
    validate_request(request)
    recommendation_id = recorder.save(request, result, user_name, client_name)
    logger.info(
        "Saved recommendation %s (work instruction %s, score %d)",
        recommendation_id, result.candidate.it_code, result.confidence_score,
    )
    return recommendation_id
