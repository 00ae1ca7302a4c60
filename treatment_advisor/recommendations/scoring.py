"""
Weighted compatibility scoring for (request, work instruction) pairs.

Three criteria are evaluated independently, each contributing at most once:

* **steel**            exact code match 40, partial (substring) match 20
* **input_hardness**   within range 25, within the near band 15
* **output_hardness**  within range 35, within the near band 20,
                       within the far band 10

Bands are distances to the nearer range bound and are inclusive. The sum
is clipped to ``MAX_SCORE``.
"""
from __future__ import annotations

from .models import NumericRange, ScoreBreakdown, TreatmentRequest, WorkInstructionCandidate

MAX_SCORE = 100

SCORING_TABLE: dict[str, dict[str, float]] = {
    "steel": {"exact": 40, "partial": 20},
    "input_hardness": {"within": 25, "near": 15},
    "output_hardness": {"within": 35, "near": 20, "far": 10},
    "bands": {"near": 5.0, "far": 10.0},
}


def _steel_points(steel_code: str, applicable_steels: list[str]) -> tuple[int, bool]:
    if not applicable_steels:
        return 0, False

    code = steel_code.lower()
    steels = [s.lower() for s in applicable_steels]
    weights = SCORING_TABLE["steel"]

    if code in steels:
        return int(weights["exact"]), True
    if any(s in code or code in s for s in steels):
        return int(weights["partial"]), True
    return 0, False


def _input_hardness_points(value: float, rng: NumericRange) -> tuple[int, bool]:
    weights = SCORING_TABLE["input_hardness"]
    if rng.contains(value):
        return int(weights["within"]), True
    if rng.distance(value) <= SCORING_TABLE["bands"]["near"]:
        return int(weights["near"]), False
    return 0, False


def _output_hardness_points(value: float, rng: NumericRange) -> tuple[int, bool]:
    weights = SCORING_TABLE["output_hardness"]
    bands = SCORING_TABLE["bands"]
    if rng.contains(value):
        return int(weights["within"]), True

    diff = rng.distance(value)
    if diff <= bands["near"]:
        return int(weights["near"]), False
    if diff <= bands["far"]:
        return int(weights["far"]), False
    return 0, False


def score(request: TreatmentRequest, candidate: WorkInstructionCandidate) -> ScoreBreakdown:
    """Score how well *candidate* fits *request*. Pure; no I/O."""
    total, steel_match = _steel_points(request.steel_code, candidate.applicable_steels)

    hardness_input_match = False
    if request.input_hardness is not None and candidate.hardness_input_range is not None:
        points, hardness_input_match = _input_hardness_points(
            request.input_hardness, candidate.hardness_input_range,
        )
        total += points

    hardness_output_match = False
    if request.desired_hardness is not None and candidate.hardness_output_range is not None:
        points, hardness_output_match = _output_hardness_points(
            request.desired_hardness, candidate.hardness_output_range,
        )
        total += points

    return ScoreBreakdown(
        total=min(total, MAX_SCORE),
        steel_match=steel_match,
        hardness_input_match=hardness_input_match,
        hardness_output_match=hardness_output_match,
    )
