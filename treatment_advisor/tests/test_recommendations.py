from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from treatment_advisor.app import app, get_recorder, get_repository
from treatment_advisor.recommendations.errors import PersistenceError, RepositoryError
from treatment_advisor.recommendations.models import NumericRange, WorkInstructionCandidate
from treatment_advisor.recommendations.recorder import InMemoryRecorder
from treatment_advisor.recommendations.repository import InMemoryCandidateRepository

CATALOG = [
    WorkInstructionCandidate(
        it_code="IT-001",
        title="Quench and temper 4140",
        cooling_method="Oil",
        applicable_steels=["AISI 4140"],
        temperature_range=NumericRange(low=840, high=870),
        duration_range=NumericRange(low=60, high=90),
        hardness_input_range=NumericRange(low=18, high=22),
        hardness_output_range=NumericRange(low=50, high=58),
    ),
    WorkInstructionCandidate(
        it_code="IT-002",
        title="Annealing",
        applicable_steels=["AISI 1045", "AISI 4140"],
        hardness_output_range=NumericRange(low=12, high=20),
    ),
    WorkInstructionCandidate(
        it_code="IT-003",
        title="Retired",
        applicable_steels=["AISI 4140"],
        active=False,
    ),
]

client = TestClient(app)


class BrokenRepository:
    def fetch_active(self):
        raise RepositoryError("catalog unavailable")


@pytest.fixture(autouse=True)
def _collaborators():
    recorder = InMemoryRecorder({"AISI 4140": "st-4140"})
    app.dependency_overrides[get_repository] = lambda: InMemoryCandidateRepository(CATALOG)
    app.dependency_overrides[get_recorder] = lambda: recorder
    yield recorder
    app.dependency_overrides.clear()


def _login(c):
    c.post("/auth/login", json={"username": "operator", "password": "operator123"})


def test_health():
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_recommendations_returns_ranked_results():
    _login(client)
    resp = client.post("/recommendations", json={
        "steel_code": "aisi 4140", "input_hardness": 20, "desired_hardness": 55,
    })
    assert resp.status_code == 200
    body = resp.json()["recommendations"]
    assert [r["candidate"]["it_code"] for r in body] == ["IT-001", "IT-002"]
    assert body[0]["confidence_score"] == 100
    assert body[0]["match_details"]["temperature_range"] == "840°C - 870°C"
    assert body[0]["match_details"]["duration_range"] == "60 - 90 min"
    assert body[0]["reason"].split("\n")[0] == "✓ Compatible with steel aisi 4140"
    assert body[1]["confidence_score"] == 40


def test_recommendations_score_ordering():
    _login(client)
    resp = client.post("/recommendations", json={"steel_code": "AISI 4140", "desired_hardness": 15})
    scores = [item["confidence_score"] for item in resp.json()["recommendations"]]
    assert scores == sorted(scores, reverse=True)


def test_recommendations_empty_for_unknown_steel():
    _login(client)
    resp = client.post("/recommendations", json={"steel_code": "Unobtainium"})
    assert resp.status_code == 200
    assert resp.json()["recommendations"] == []


def test_recommendations_rejects_empty_steel_code():
    _login(client)
    resp = client.post("/recommendations", json={"steel_code": ""})
    assert resp.status_code == 422


def test_recommendations_rejects_missing_steel_code():
    _login(client)
    resp = client.post("/recommendations", json={"input_hardness": 20})
    assert resp.status_code == 422


def test_recommendations_repository_failure_is_503():
    app.dependency_overrides[get_repository] = lambda: BrokenRepository()
    _login(client)
    resp = client.post("/recommendations", json={"steel_code": "AISI 4140"})
    assert resp.status_code == 503


def test_save_and_history(_collaborators):
    _login(client)
    request = {"steel_code": "AISI 4140", "input_hardness": 20, "desired_hardness": 55}
    result = client.post("/recommendations", json=request).json()["recommendations"][0]

    resp = client.post("/recommendations/save", json={
        "request": request, "result": result, "client_name": "ACME",
    })
    assert resp.status_code == 200
    recommendation_id = resp.json()["id"]

    record = _collaborators.get(recommendation_id)
    assert record.user_name == "operator"
    assert record.client_name == "ACME"
    assert record.steel_type_id == "st-4140"
    assert record.work_instruction_id == "IT-001"

    history = client.get("/recommendations/history").json()
    assert history[0]["recommendation"]["id"] == recommendation_id
    assert history[0]["has_feedback"] is False


def test_save_rejects_empty_steel_code():
    _login(client)
    result = client.post("/recommendations", json={"steel_code": "AISI 4140"}).json()["recommendations"][0]
    resp = client.post("/recommendations/save", json={
        "request": {"steel_code": ""}, "result": result,
    })
    assert resp.status_code == 422


def test_save_failure_is_500():
    recorder = MagicMock()
    recorder.save.side_effect = PersistenceError("insert failed")
    app.dependency_overrides[get_recorder] = lambda: recorder
    _login(client)
    result = client.post("/recommendations", json={"steel_code": "AISI 4140"}).json()["recommendations"][0]
    resp = client.post("/recommendations/save", json={
        "request": {"steel_code": "AISI 4140"}, "result": result,
    })
    assert resp.status_code == 500
    recorder.save.assert_called_once()


def test_save_rejects_malformed_result():
    _login(client)
    result = client.post("/recommendations", json={"steel_code": "AISI 4140"}).json()["recommendations"][0]
    result["candidate"]["it_code"] = ""
    resp = client.post("/recommendations/save", json={
        "request": {"steel_code": "AISI 4140"}, "result": result,
    })
    assert resp.status_code == 422
