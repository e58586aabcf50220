"""
Flat tabular projections of a form's responses.

Two variants share the same per-field columns:

* ``raw``: the responses export, ISO-8601 timestamps.
* ``analytics``: the analytics export, adds the user id and uses local
  ``dd/mm/YYYY HH:MM:SS`` timestamps.

Cells resolve id first, then label; lists are joined with ", " and unanswered
values are empty. Rows come newest first, one per response.
"""
import csv
import io
from typing import Any, List

from django.utils import timezone

from apps.surveys.fields import is_unanswered, resolve_value

from .calculator import display_value
from .snapshot import FormSnapshot, ResponseSnapshot

RAW = "raw"
ANALYTICS = "analytics"
VARIANTS = (RAW, ANALYTICS)

LOCAL_TIMESTAMP_FORMAT = "%d/%m/%Y %H:%M:%S"


def cell(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return ", ".join("" if v is None else display_value(v) for v in value)
    if is_unanswered(value):
        return ""
    return display_value(value)


def _timestamp(value, variant: str) -> str:
    if value is None:
        return ""
    if variant == ANALYTICS:
        return timezone.localtime(value).strftime(LOCAL_TIMESTAMP_FORMAT)
    return value.isoformat()


def header(form: FormSnapshot, variant: str = RAW) -> List[str]:
    identity = ["Response ID", "User ID", "User Name", "User Email", "Submitted At"]
    if variant == RAW:
        identity.remove("User ID")
    return identity + [f.label for f in form.substantive_fields]


def row(form: FormSnapshot, response: ResponseSnapshot, variant: str = RAW) -> List[str]:
    values = [str(response.id)]
    if variant == ANALYTICS:
        values.append(str(response.user_id or ""))
    values += [response.user_name or "", response.user_email or "", _timestamp(response.submitted_at, variant)]
    values += [cell(resolve_value(response.data, f)) for f in form.substantive_fields]
    return values


def project(form: FormSnapshot, variant: str = RAW) -> List[List[str]]:
    """Header plus one row per response."""
    if variant not in VARIANTS:
        raise ValueError(f"Unknown export variant: {variant}")
    return [header(form, variant)] + [row(form, r, variant) for r in form.responses]


def to_csv(rows: List[List[Any]]) -> str:
    """Every cell quoted, rows separated by a bare newline."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerows(rows)
    return buffer.getvalue()
