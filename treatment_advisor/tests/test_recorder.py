from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError as PydanticValidationError

from treatment_advisor.recommendations.errors import PersistenceError
from treatment_advisor.recommendations.models import (
    MatchDetails,
    RecommendationResult,
    TreatmentRequest,
    WorkInstructionCandidate,
)
from treatment_advisor.recommendations.recorder import InMemoryRecorder, load_steel_types

REQUEST = TreatmentRequest(
    steel_code="aisi 4140",
    input_hardness=20,
    desired_hardness=55,
    piece_description="Drive shaft",
    client_requirements={"certificate": "EN 10204 3.1"},
)


def _result(it_code: str = "IT-001", confidence_score: int = 100) -> RecommendationResult:
    return RecommendationResult(
        candidate=WorkInstructionCandidate(it_code=it_code, title="Quench and temper"),
        reason="✓ Compatible with steel aisi 4140",
        confidence_score=confidence_score,
        match_details=MatchDetails(
            steel_match=True, hardness_input_match=True, hardness_output_match=True,
        ),
    )


def test_save_returns_id_and_stores_record():
    recorder = InMemoryRecorder({"AISI 4140": "st-4140"})
    recommendation_id = recorder.save(REQUEST, _result(), "operator", "ACME")

    record = recorder.get(recommendation_id)
    assert record is not None
    assert record.steel_type_id == "st-4140"
    assert record.work_instruction_id == "IT-001"
    assert record.input_hardness == 20
    assert record.desired_hardness == 55
    assert record.piece_description == "Drive shaft"
    assert record.client_requirements == {"certificate": "EN 10204 3.1"}
    assert record.confidence_score == 100
    assert record.user_name == "operator"
    assert record.client_name == "ACME"
    assert record.created_at.tzinfo is not None


def test_unresolved_steel_code_still_saves():
    recorder = InMemoryRecorder({})
    recommendation_id = recorder.save(REQUEST, _result(), "operator", "")
    assert recorder.get(recommendation_id).steel_type_id is None


def test_each_save_gets_a_new_id():
    recorder = InMemoryRecorder()
    first = recorder.save(REQUEST, _result(), "operator", "ACME")
    second = recorder.save(REQUEST, _result(), "operator", "ACME")
    assert first != second
    assert [r.id for r in recorder.list_recent()] == [second, first]


def test_list_recent_respects_limit():
    recorder = InMemoryRecorder()
    ids = [recorder.save(REQUEST, _result(), "operator", "ACME") for _ in range(4)]
    assert [r.id for r in recorder.list_recent(limit=2)] == [ids[3], ids[2]]


def test_invalid_result_leaves_no_record():
    recorder = InMemoryRecorder()
    bad = _result().model_copy(update={"confidence_score": 150})
    with pytest.raises(PersistenceError):
        recorder.save(REQUEST, bad, "operator", "ACME")
    assert recorder.list_recent() == []


def test_saved_record_is_immutable():
    recorder = InMemoryRecorder()
    record = recorder.get(recorder.save(REQUEST, _result(), "operator", "ACME"))
    with pytest.raises(PydanticValidationError):
        record.confidence_score = 1


def test_load_steel_types(tmp_path: Path):
    path = tmp_path / "steel_types.csv"
    path.write_text("id,code,name\nst-1,AISI 4140,Cr-Mo\nst-2, AISI D2 ,Tool\n", encoding="utf-8")
    assert load_steel_types(path) == {"aisi 4140": "st-1", "aisi d2": "st-2"}


def test_load_steel_types_missing_file_is_empty(tmp_path: Path):
    assert load_steel_types(tmp_path / "missing.csv") == {}
