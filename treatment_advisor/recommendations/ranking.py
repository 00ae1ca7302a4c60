from __future__ import annotations

from collections.abc import Iterable

from .models import (
    MatchDetails,
    NumericRange,
    RecommendationResult,
    ScoreBreakdown,
    TreatmentRequest,
    WorkInstructionCandidate,
)

MAX_RESULTS = 5


def _fmt(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def format_temperature(rng: NumericRange | None) -> str | None:
    if rng is None:
        return None
    return f"{_fmt(rng.low)}°C - {_fmt(rng.high)}°C"


def format_duration(rng: NumericRange | None) -> str | None:
    if rng is None:
        return None
    return f"{_fmt(rng.low)} - {_fmt(rng.high)} min"


def build_reason(
    request: TreatmentRequest,
    candidate: WorkInstructionCandidate,
    breakdown: ScoreBreakdown,
) -> str:
    """Explain a match, one line per satisfied criterion or known parameter."""
    lines: list[str] = []

    if breakdown.steel_match:
        lines.append(f"✓ Compatible with steel {request.steel_code}")

    if breakdown.hardness_input_match and request.input_hardness is not None:
        lines.append(f"✓ Accepts input hardness of {_fmt(request.input_hardness)} HRC")

    if breakdown.hardness_output_match and request.desired_hardness is not None:
        lines.append(f"✓ Reaches desired hardness of {_fmt(request.desired_hardness)} HRC")

    temperature = format_temperature(candidate.temperature_range)
    if temperature:
        lines.append(f"Temperature: {temperature}")

    if candidate.cooling_method:
        lines.append(f"Cooling: {candidate.cooling_method}")

    return "\n".join(lines)


def rank(
    request: TreatmentRequest,
    scored: Iterable[tuple[WorkInstructionCandidate, ScoreBreakdown]],
) -> list[RecommendationResult]:
    """Drop irrelevant candidates, order by score then it_code, keep the top five."""
    relevant = [(c, b) for c, b in scored if b.total > 0]
    relevant.sort(key=lambda pair: (-pair[1].total, pair[0].it_code))

    results: list[RecommendationResult] = []
    for candidate, breakdown in relevant[:MAX_RESULTS]:
        results.append(RecommendationResult(
            candidate=candidate,
            reason=build_reason(request, candidate, breakdown),
            confidence_score=breakdown.total,
            match_details=MatchDetails(
                steel_match=breakdown.steel_match,
                hardness_input_match=breakdown.hardness_input_match,
                hardness_output_match=breakdown.hardness_output_match,
                temperature_range=format_temperature(candidate.temperature_range),
                duration_range=format_duration(candidate.duration_range),
            ),
        ))
    return results
