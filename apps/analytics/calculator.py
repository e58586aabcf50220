"""
Per-field completion and distribution statistics.
"""
import math
import re
from collections import Counter
from dataclasses import dataclass, field, replace
from decimal import ROUND_HALF_UP, Context, Decimal
from typing import Any, Iterable, List, Optional

from apps.surveys.fields import FieldDefinition, FieldType, is_unanswered, resolve_value

from .snapshot import ResponseSnapshot

TOP_VALUES_LIMIT = 5
TWO_PLACES = Decimal("0.01")
# wide enough for every finite float at two decimal places
WIDE_CONTEXT = Context(prec=400)

_LEADING_NUMBER = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


@dataclass(frozen=True)
class TopValue:
    value: str
    count: int
    percentage: int


@dataclass(frozen=True)
class FieldAnalytics:
    field_id: str
    field_label: str
    field_type: str
    completion_rate: float
    total_responses: int
    average_value: Optional[Decimal] = None
    top_values: List[TopValue] = field(default_factory=list)


def round_half_up(value: float, places: int = 0) -> float:
    factor = 10 ** places
    return math.floor(value * factor + 0.5) / factor


def percent(part: int, whole: int) -> float:
    """part/whole as a percentage with two decimals; 0 for an empty whole."""
    if not whole:
        return 0
    return round_half_up(part / whole * 100, 2)


def display_value(value: Any) -> str:
    """String form of a stored value as the web client shows it."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (list, tuple)):
        return ",".join("" if v is None else display_value(v) for v in value)
    return str(value)


def parse_number(value: Any) -> Optional[float]:
    """
    Leading-number parse: "12abc" -> 12.0, "abc" -> None. Lists are read
    through their comma-joined form.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        match = _LEADING_NUMBER.match(display_value(value).lstrip())
        if not match:
            return None
        number = float(match.group(0))
    return number if math.isfinite(number) else None


def average(numbers: List[float]) -> Optional[Decimal]:
    if not numbers:
        return None
    count = len(numbers)
    try:
        mean = math.fsum(numbers) / count
    except OverflowError:
        mean = math.fsum(n / count for n in numbers)
    return Decimal(mean).quantize(TWO_PLACES, rounding=ROUND_HALF_UP, context=WIDE_CONTEXT)


def top_values(answers: Iterable[Any], limit: int = TOP_VALUES_LIMIT) -> List[TopValue]:
    """
    Frequency of each selected value, most frequent first. List answers count
    once per element; ties keep first-seen order. Percentages are relative to
    all counted selections.
    """
    counts = Counter()
    for answer in answers:
        items = answer if isinstance(answer, (list, tuple)) else [answer]
        for item in items:
            counts[display_value(item)] += 1

    total = sum(counts.values())
    ranked = sorted(counts.items(), key=lambda kv: kv[1], reverse=True)[:limit]
    return [
        TopValue(value=value, count=count, percentage=int(round_half_up(count / total * 100)))
        for value, count in ranked
    ]


def analyse_field(
    definition: FieldDefinition,
    responses: List[ResponseSnapshot],
    top_limit: int = TOP_VALUES_LIMIT,
) -> FieldAnalytics:
    answers = []
    for response in responses:
        value = resolve_value(response.data, definition)
        if not is_unanswered(value):
            answers.append(value)

    result = FieldAnalytics(
        field_id=definition.id,
        field_label=definition.label,
        field_type=definition.type,
        completion_rate=percent(len(answers), len(responses)),
        total_responses=len(answers),
    )
    if definition.type == FieldType.NUMBER:
        numbers = [n for n in map(parse_number, answers) if n is not None]
        return replace(result, average_value=average(numbers))
    if definition.is_choice:
        return replace(result, top_values=top_values(answers, top_limit))
    return result


def analyse_fields(
    fields: List[FieldDefinition],
    responses: List[ResponseSnapshot],
    top_limit: int = TOP_VALUES_LIMIT,
) -> List[FieldAnalytics]:
    """One entry per substantive field, in field order."""
    return [analyse_field(f, responses, top_limit) for f in fields if f.is_substantive]
