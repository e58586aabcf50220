import math
from typing import Iterable

from .calculator import round_half_up
from .snapshot import ResponseSnapshot


def average_completion_minutes(responses: Iterable[ResponseSnapshot]) -> int:
    """
    Mean minutes between a response being started (``created_at``) and
    submitted, rounded half up. Zero or negative durations count as they are.
    """
    durations = [
        (r.submitted_at - r.created_at).total_seconds() / 60
        for r in responses
        if r.submitted_at is not None and r.created_at is not None
    ]
    if not durations:
        return 0
    return int(round_half_up(math.fsum(durations) / len(durations)))
