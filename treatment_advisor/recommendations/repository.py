from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Protocol

import pandas as pd

from .errors import RepositoryError
from .models import NumericRange, WorkInstructionCandidate

logger = logging.getLogger(__name__)

_TRUE_STRINGS = {"true", "1", "yes", "y", "t"}


class CandidateRepository(Protocol):
    def fetch_active(self) -> list[WorkInstructionCandidate]:
        """Return every active work instruction. Order is not significant."""
        ...


def _text(row: pd.Series, column: str) -> str | None:
    value = row.get(column)
    if value is None or pd.isna(value):
        return None
    text = str(value).strip()
    return text or None


def _number(row: pd.Series, column: str) -> float | None:
    value = row.get(column)
    if value is None or pd.isna(value):
        return None
    return float(value)


def _range(row: pd.Series, low_col: str, high_col: str) -> NumericRange | None:
    low, high = _number(row, low_col), _number(row, high_col)
    if low is None or high is None:
        return None
    return NumericRange(low=low, high=high)


def _flag(row: pd.Series, column: str) -> bool:
    """Only an explicit true value marks a row active; a blank flag is inactive."""
    value = _text(row, column)
    if value is None:
        return False
    return value.lower() in _TRUE_STRINGS


def _steels(row: pd.Series) -> list[str]:
    raw = _text(row, "applicable_steels") or ""
    return [s.strip() for s in raw.split(",") if s.strip()]


def row_to_candidate(row: pd.Series) -> WorkInstructionCandidate:
    """Map one catalog row into a candidate. Raises ``ValueError`` on bad data."""
    fields: dict[str, Any] = {
        "it_code": _text(row, "it_code") or "",
        "title": _text(row, "title") or "",
        "treatment_type": _text(row, "treatment_type") or "",
        "cooling_method": _text(row, "cooling_method"),
        "special_notes": _text(row, "special_notes") or "",
        "version": _text(row, "version") or "",
        "applicable_steels": _steels(row),
        "temperature_range": _range(row, "temperature_min", "temperature_max"),
        "duration_range": _range(row, "duration_min", "duration_max"),
        "hardness_input_range": _range(row, "hardness_input_min", "hardness_input_max"),
        "hardness_output_range": _range(row, "hardness_output_min", "hardness_output_max"),
        "active": _flag(row, "is_active"),
    }
    return WorkInstructionCandidate(**fields)


class CsvCandidateRepository:
    """Work-instruction catalog stored as CSV, re-read on every fetch."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _load(self) -> pd.DataFrame:
        return pd.read_csv(
            self.path,
            dtype={"it_code": str, "version": str, "applicable_steels": str, "is_active": str},
        )

    def fetch_active(self) -> list[WorkInstructionCandidate]:
        try:
            df = self._load()
            candidates = [row_to_candidate(row) for _, row in df.iterrows()]
        except (OSError, KeyError, ValueError, pd.errors.ParserError) as exc:
            logger.warning("Failed to read work-instruction catalog %s", self.path, exc_info=True)
            raise RepositoryError(f"Could not read work-instruction catalog: {self.path}") from exc

        active = [c for c in candidates if c.active]
        logger.debug("Loaded %d active of %d work instructions", len(active), len(candidates))
        return active


class InMemoryCandidateRepository:
    def __init__(self, candidates: list[WorkInstructionCandidate] | None = None) -> None:
        self._candidates = list(candidates or [])

    def fetch_active(self) -> list[WorkInstructionCandidate]:
        return [c for c in self._candidates if c.active]
