"""
Analytics report assembly.

``build_report`` turns a form snapshot into the JSON analytics report. The
CSV exports project the same snapshot row by row through ``exports``.
"""
import datetime
from dataclasses import dataclass, field
from typing import List

from .calculator import TOP_VALUES_LIMIT, FieldAnalytics, analyse_fields
from .completion import average_completion_minutes
from .snapshot import FormSnapshot, ResponseSnapshot
from .trends import TREND_DAYS, TrendPoint, response_trends

RECENT_RESPONSES = 10


@dataclass(frozen=True)
class AnalyticsReport:
    form_id: str
    form_title: str
    total_responses: int
    completion_rate: int
    average_completion_time: int
    field_analytics: List[FieldAnalytics] = field(default_factory=list)
    response_trends: List[TrendPoint] = field(default_factory=list)
    recent_responses: List[ResponseSnapshot] = field(default_factory=list)


def build_report(
    form: FormSnapshot,
    now: datetime.datetime,
    *,
    trend_days: int = TREND_DAYS,
    recent_limit: int = RECENT_RESPONSES,
    top_limit: int = TOP_VALUES_LIMIT,
) -> AnalyticsReport:
    responses = form.responses
    total = len(responses)
    return AnalyticsReport(
        form_id=form.id,
        form_title=form.title,
        total_responses=total,
        # a stored response is always a complete submission
        completion_rate=100 if total else 0,
        average_completion_time=average_completion_minutes(responses),
        field_analytics=analyse_fields(form.fields, responses, top_limit),
        response_trends=response_trends(responses, now, days=trend_days),
        recent_responses=list(responses[:recent_limit]),
    )
