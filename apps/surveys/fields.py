"""
Field definitions and the value model of form responses.

Response ``data`` is an open mapping of field key to value, where the value is
a string, a number, a date string or a list of strings. Older records are keyed
by the field label instead of the field id, so lookups go through
:func:`resolve_value`, which tries the id first and the label second.
"""
import math
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional

from django.db import models


class FieldType(models.TextChoices):
    TEXT = "text", "Text"
    EMAIL = "email", "Email"
    NUMBER = "number", "Number"
    TEXTAREA = "textarea", "Textarea"
    SELECT = "select", "Select"
    RADIO = "radio", "Radio"
    CHECKBOX = "checkbox", "Checkbox"
    DATE = "date", "Date"
    STATIC_TEXT = "static_text", "Static text"
    DIVIDER = "divider", "Divider"


# layout-only fields: never answered, analysed or exported
PRESENTATIONAL_TYPES = frozenset({FieldType.STATIC_TEXT, FieldType.DIVIDER})
CHOICE_TYPES = frozenset({FieldType.SELECT, FieldType.RADIO, FieldType.CHECKBOX})


@dataclass(frozen=True)
class FieldDefinition:
    id: str
    type: str
    label: str
    required: bool = False
    options: List[str] = field(default_factory=list)
    rows: Optional[int] = None
    placeholder: Optional[str] = None

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "FieldDefinition":
        return cls(
            id=str(raw.get("id") or ""),
            type=str(raw.get("type") or FieldType.TEXT),
            label=str(raw.get("label") or raw.get("name") or ""),
            required=bool(raw.get("required", False)),
            options=[str(o) for o in raw.get("options") or []],
            rows=raw.get("rows"),
            placeholder=raw.get("placeholder"),
        )

    @property
    def is_substantive(self) -> bool:
        return self.type not in PRESENTATIONAL_TYPES

    @property
    def is_choice(self) -> bool:
        return self.type in CHOICE_TYPES


def parse_fields(raw_fields) -> List[FieldDefinition]:
    return [FieldDefinition.from_dict(f) for f in raw_fields or [] if isinstance(f, Mapping)]


def substantive_fields(fields: List[FieldDefinition]) -> List[FieldDefinition]:
    return [f for f in fields if f.is_substantive]


def is_unanswered(value: Any) -> bool:
    """
    Historical records treat every falsy value as "not answered": missing,
    null, false, empty string, 0 and NaN. An empty list is still an answer.
    """
    if value is None or value is False:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, (int, float)):
        return value == 0 or (isinstance(value, float) and math.isnan(value))
    return False


def resolve_value(data: Any, definition: FieldDefinition) -> Any:
    """Value stored under the field id, else under the field label."""
    if not isinstance(data, Mapping):
        return None
    value = data.get(definition.id) if definition.id else None
    if is_unanswered(value) and definition.label:
        value = data.get(definition.label)
    return value
