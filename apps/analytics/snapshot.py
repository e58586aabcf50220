"""
In-memory snapshots the analytics engine works on.

The engine never touches the ORM: :mod:`apps.analytics.services` loads a form
and its responses once and hands these immutable snapshots to the calculators.
"""
import datetime
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from apps.surveys.fields import FieldDefinition, substantive_fields


@dataclass(frozen=True)
class ResponseSnapshot:
    id: str
    user_id: Optional[str]
    user_name: str
    user_email: str
    data: Dict[str, Any]
    submitted_at: Optional[datetime.datetime]
    created_at: Optional[datetime.datetime]


@dataclass(frozen=True)
class FormSnapshot:
    id: str
    title: str
    fields: List[FieldDefinition] = field(default_factory=list)
    # newest first
    responses: List[ResponseSnapshot] = field(default_factory=list)

    @property
    def substantive_fields(self) -> List[FieldDefinition]:
        return substantive_fields(self.fields)
