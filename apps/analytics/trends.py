import datetime
from collections import Counter
from dataclasses import dataclass
from typing import Iterable, List

from django.utils import formats, timezone

from .snapshot import ResponseSnapshot

TREND_DAYS = 7
LABEL_FORMAT = "M j"


@dataclass(frozen=True)
class TrendPoint:
    day: datetime.date
    label: str
    count: int


def response_trends(
    responses: Iterable[ResponseSnapshot],
    now: datetime.datetime,
    days: int = TREND_DAYS,
    tz=None,
) -> List[TrendPoint]:
    """
    Daily response counts for the trailing window, oldest day first.

    Responses older than ``now - days`` are dropped; the rest are bucketed by
    the calendar date of ``submitted_at`` in ``tz`` (the active time zone by
    default). The first and last buckets may cover partial days.
    """
    tz = tz or timezone.get_current_timezone()
    cutoff = now - datetime.timedelta(days=days)

    per_day = Counter(
        timezone.localtime(r.submitted_at, tz).date()
        for r in responses
        if r.submitted_at is not None and r.submitted_at >= cutoff
    )

    local_now = timezone.localtime(now, tz)
    points = []
    for offset in range(days - 1, -1, -1):
        day = (local_now - datetime.timedelta(days=offset)).date()
        points.append(TrendPoint(day=day, label=formats.date_format(day, LABEL_FORMAT), count=per_day[day]))
    return points
