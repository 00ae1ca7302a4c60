from __future__ import annotations

import threading
import uuid
from datetime import datetime, timezone
from typing import Any

from ..recommendations.models import Feedback

_feedback: list[Feedback] = []
_lock = threading.Lock()


def record_feedback(
    recommendation_id: str,
    was_successful: bool,
    user_name: str,
    actual_hardness: float | None = None,
    comments: str = "",
) -> Feedback:
    """Store feedback for a saved recommendation. The recommendation itself is untouched."""
    entry = Feedback(
        id=uuid.uuid4().hex,
        recommendation_id=recommendation_id,
        was_successful=was_successful,
        actual_hardness=actual_hardness,
        comments=comments,
        user_name=user_name,
        created_at=datetime.now(timezone.utc),
    )
    with _lock:
        _feedback.append(entry)
    return entry


def get_feedback(recommendation_id: str | None = None) -> list[Feedback]:
    with _lock:
        entries = list(_feedback)
    if recommendation_id is None:
        return entries
    return [f for f in entries if f.recommendation_id == recommendation_id]


def feedback_stats() -> dict[str, Any]:
    fb = get_feedback()
    successful = sum(1 for f in fb if f.was_successful)
    return {
        "total": len(fb),
        "successful": successful,
        "unsuccessful": len(fb) - successful,
        "success_rate": round(successful / len(fb) * 100, 1) if fb else 0.0,
    }


def clear_feedback() -> None:
    with _lock:
        _feedback.clear()
