from __future__ import annotations

import logging
from functools import lru_cache

from fastapi import Depends, FastAPI, HTTPException, Request
from starlette.middleware.sessions import SessionMiddleware

from .analytics.feedback import feedback_stats, get_feedback, record_feedback
from .auth.dependencies import require_admin, require_user
from .auth.users import authenticate
from .config import DEFAULT_ADVISOR_CONFIG
from .recommendations.engine import find_recommendations, save_recommendation
from .recommendations.errors import PersistenceError, RepositoryError, ValidationError
from .recommendations.models import (
    FeedbackRequest,
    FeedbackResponse,
    HistoryItem,
    LoginRequest,
    RecommendationResponse,
    SaveRecommendationRequest,
    SaveRecommendationResponse,
    TreatmentRequest,
)
from .recommendations.recorder import InMemoryRecorder, load_steel_types
from .recommendations.repository import CandidateRepository, CsvCandidateRepository

logger = logging.getLogger(__name__)

app = FastAPI(title="Heat Treatment Advisor API", version="1.0.0")
app.add_middleware(SessionMiddleware, secret_key=DEFAULT_ADVISOR_CONFIG.session_secret)


# ── Collaborators ────────────────────────────────────────────────────────


def get_repository() -> CandidateRepository:
    return CsvCandidateRepository(DEFAULT_ADVISOR_CONFIG.catalog_path)


@lru_cache(maxsize=1)
def get_recorder() -> InMemoryRecorder:
    return InMemoryRecorder(load_steel_types(DEFAULT_ADVISOR_CONFIG.steel_types_path))


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


# ── Auth endpoints ───────────────────────────────────────────────────────


@app.post("/auth/login")
def login(body: LoginRequest, request: Request) -> dict:
    user = authenticate(body.username, body.password)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    request.session["user"] = user
    return {"status": "ok", "user": user}


@app.post("/auth/logout")
def logout(request: Request) -> dict:
    request.session.clear()
    return {"status": "logged_out"}


@app.get("/auth/me")
def auth_me(user: dict = Depends(require_user)) -> dict:
    return user


# ── Operator endpoints ───────────────────────────────────────────────────


@app.post("/recommendations", response_model=RecommendationResponse)
def recommendations(
    body: TreatmentRequest,
    user: dict = Depends(require_user),
    repository: CandidateRepository = Depends(get_repository),
) -> RecommendationResponse:
    try:
        results = find_recommendations(body, repository)
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except RepositoryError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc

    return RecommendationResponse(recommendations=results)


@app.post("/recommendations/save", response_model=SaveRecommendationResponse)
def save(
    body: SaveRecommendationRequest,
    user: dict = Depends(require_user),
    recorder: InMemoryRecorder = Depends(get_recorder),
) -> SaveRecommendationResponse:
    try:
        recommendation_id = save_recommendation(
            body.request, body.result, user["username"], body.client_name, recorder,
        )
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except PersistenceError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    return SaveRecommendationResponse(id=recommendation_id)


@app.get("/recommendations/history", response_model=list[HistoryItem])
def history(
    user: dict = Depends(require_user),
    recorder: InMemoryRecorder = Depends(get_recorder),
) -> list[HistoryItem]:
    with_feedback = {f.recommendation_id for f in get_feedback()}
    return [
        HistoryItem(recommendation=r, has_feedback=r.id in with_feedback)
        for r in recorder.list_recent(DEFAULT_ADVISOR_CONFIG.history_limit)
    ]


@app.post("/feedback", response_model=FeedbackResponse)
def feedback(
    body: FeedbackRequest,
    user: dict = Depends(require_user),
    recorder: InMemoryRecorder = Depends(get_recorder),
) -> FeedbackResponse:
    if recorder.get(body.recommendation_id) is None:
        raise HTTPException(status_code=404, detail="Recommendation not found")

    entry = record_feedback(
        body.recommendation_id,
        body.was_successful,
        user["username"],
        actual_hardness=body.actual_hardness,
        comments=body.comments,
    )
    logger.info("Feedback %s recorded for recommendation %s", entry.id, body.recommendation_id)
    return FeedbackResponse(
        status="recorded",
        feedback_id=entry.id,
        total_feedback=len(get_feedback()),
    )


# ── Admin endpoints ──────────────────────────────────────────────────────


@app.get("/feedback/stats")
def stats(user: dict = Depends(require_admin)) -> dict:
    return feedback_stats()
