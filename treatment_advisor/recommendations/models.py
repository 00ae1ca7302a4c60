from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class TreatmentRequest(BaseModel):
    steel_code: str = Field(..., description="Steel grade code, e.g. AISI 4140")
    input_hardness: float | None = Field(default=None, description="Current hardness (HRC)")
    desired_hardness: float | None = Field(default=None, description="Target hardness (HRC)")
    piece_description: str | None = None
    client_requirements: dict[str, Any] = Field(default_factory=dict)


class NumericRange(BaseModel):
    model_config = ConfigDict(frozen=True)

    low: float
    high: float

    @model_validator(mode="after")
    def _check_order(self) -> NumericRange:
        if self.low > self.high:
            raise ValueError(f"range lower bound {self.low} exceeds upper bound {self.high}")
        return self

    def contains(self, value: float) -> bool:
        return self.low <= value <= self.high

    def distance(self, value: float) -> float:
        """Distance from *value* to the nearer bound."""
        return min(abs(value - self.low), abs(value - self.high))


class WorkInstructionCandidate(BaseModel):
    model_config = ConfigDict(frozen=True)

    it_code: str = Field(..., min_length=1)
    title: str
    treatment_type: str = ""
    cooling_method: str | None = None
    special_notes: str = ""
    version: str = ""
    applicable_steels: list[str] = Field(default_factory=list)
    temperature_range: NumericRange | None = None
    duration_range: NumericRange | None = None
    hardness_input_range: NumericRange | None = None
    hardness_output_range: NumericRange | None = None
    active: bool = True


class ScoreBreakdown(BaseModel):
    model_config = ConfigDict(frozen=True)

    total: int = Field(..., ge=0, le=100)
    steel_match: bool = False
    hardness_input_match: bool = False
    hardness_output_match: bool = False


class MatchDetails(BaseModel):
    steel_match: bool
    hardness_input_match: bool
    hardness_output_match: bool
    temperature_range: str | None = None
    duration_range: str | None = None


class RecommendationResult(BaseModel):
    candidate: WorkInstructionCandidate
    reason: str
    confidence_score: int = Field(..., ge=0, le=100)
    match_details: MatchDetails


class RecommendationResponse(BaseModel):
    recommendations: list[RecommendationResult]


class PersistedRecommendation(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    steel_type_id: str | None
    work_instruction_id: str = Field(..., min_length=1)
    steel_code: str
    input_hardness: float | None = None
    desired_hardness: float | None = None
    client_requirements: dict[str, Any] = Field(default_factory=dict)
    piece_description: str = ""
    recommendation_reason: str
    confidence_score: int = Field(..., ge=0, le=100)
    user_name: str
    client_name: str
    created_at: datetime


class SaveRecommendationRequest(BaseModel):
    request: TreatmentRequest
    result: RecommendationResult
    client_name: str = ""


class SaveRecommendationResponse(BaseModel):
    id: str


class HistoryItem(BaseModel):
    recommendation: PersistedRecommendation
    has_feedback: bool


class Feedback(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    recommendation_id: str
    was_successful: bool
    actual_hardness: float | None = None
    comments: str = ""
    user_name: str
    created_at: datetime


class FeedbackRequest(BaseModel):
    recommendation_id: str = Field(..., min_length=1)
    was_successful: bool
    actual_hardness: float | None = None
    comments: str = ""


class FeedbackResponse(BaseModel):
    status: str
    feedback_id: str
    total_feedback: int


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str
