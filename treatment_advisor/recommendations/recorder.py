from __future__ import annotations

import logging
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol

import pandas as pd
from pydantic import ValidationError as PydanticValidationError

from .errors import PersistenceError
from .models import PersistedRecommendation, RecommendationResult, TreatmentRequest

logger = logging.getLogger(__name__)


class RecommendationRecorder(Protocol):
    def save(
        self,
        request: TreatmentRequest,
        result: RecommendationResult,
        user_name: str,
        client_name: str,
    ) -> str:
        """Persist *result* for *request* and return the new record id."""
        ...


def _normalise_code(code: str) -> str:
    return code.strip().lower()


def load_steel_types(path: Path) -> dict[str, str]:
    """Read a ``code,id`` CSV into a lookup keyed by normalised steel code.

    Returns an empty table if the file cannot be read; steel-type resolution
    is best-effort and must never block a save.
    """
    try:
        df = pd.read_csv(path, dtype=str)
        return {
            _normalise_code(code): str(steel_id)
            for code, steel_id in zip(df["code"], df["id"])
            if pd.notna(code) and pd.notna(steel_id)
        }
    except (OSError, KeyError, ValueError):
        logger.warning("Could not load steel types from %s", path, exc_info=True)
        return {}


class InMemoryRecorder:
    """Process-local recommendation store.

    Inserts are serialised with a lock so a record is either fully stored
    or not stored at all.
    """

    def __init__(self, steel_types: dict[str, str] | None = None) -> None:
        self._steel_types = {_normalise_code(k): v for k, v in (steel_types or {}).items()}
        self._records: dict[str, PersistedRecommendation] = {}
        self._lock = threading.Lock()

    def resolve_steel_type(self, steel_code: str) -> str | None:
        return self._steel_types.get(_normalise_code(steel_code))

    def save(
        self,
        request: TreatmentRequest,
        result: RecommendationResult,
        user_name: str,
        client_name: str,
    ) -> str:
        steel_type_id = self.resolve_steel_type(request.steel_code)
        if steel_type_id is None:
            logger.info("Steel code %r not found in steel types; saving without link", request.steel_code)

        try:
            record = PersistedRecommendation(
                id=uuid.uuid4().hex,
                steel_type_id=steel_type_id,
                work_instruction_id=result.candidate.it_code,
                steel_code=request.steel_code,
                input_hardness=request.input_hardness,
                desired_hardness=request.desired_hardness,
                client_requirements=request.client_requirements,
                piece_description=request.piece_description or "",
                recommendation_reason=result.reason,
                confidence_score=result.confidence_score,
                user_name=user_name,
                client_name=client_name,
                created_at=datetime.now(timezone.utc),
            )
        except PydanticValidationError as exc:
            logger.warning("Rejected recommendation for %s", result.candidate.it_code, exc_info=True)
            raise PersistenceError("Could not save recommendation") from exc

        with self._lock:
            if record.id in self._records:
                raise PersistenceError(f"Duplicate recommendation id {record.id}")
            self._records[record.id] = record
        return record.id

    def get(self, recommendation_id: str) -> PersistedRecommendation | None:
        return self._records.get(recommendation_id)

    def list_recent(self, limit: int = 50) -> list[PersistedRecommendation]:
        # dict keeps insertion order, so reversing gives newest first
        with self._lock:
            records = list(reversed(self._records.values()))
        return records[:limit]

    def clear(self) -> None:
        with self._lock:
            self._records.clear()
