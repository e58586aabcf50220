"""
Loads forms and responses from the database and runs the analytics engine.

The engine modules are pure; this is the only place that queries the ORM.
Callers pass the request's :class:`Identity`; permission checks happen in the
views before these functions run.
"""
import logging
from typing import List

from django.conf import settings
from django.utils import timezone
from django.utils.translation import gettext_lazy as _
from rest_framework.exceptions import NotFound

from apps.surveys.models import Form

from . import exports
from .identity import Identity
from .report import AnalyticsReport, build_report
from .snapshot import FormSnapshot, ResponseSnapshot

logger = logging.getLogger(__name__)


def get_form(form_id) -> Form:
    form = Form.objects.filter(pk=form_id).first()
    if form is None:
        raise NotFound(_("Form not found"))
    return form


def load_snapshot(form_id) -> FormSnapshot:
    form = get_form(form_id)
    responses = form.responses.select_related("user").order_by("-submitted_at")
    return FormSnapshot(
        id=str(form.id),
        title=form.title,
        fields=form.field_definitions(),
        responses=[
            ResponseSnapshot(
                id=str(r.id),
                user_id=str(r.user_id),
                user_name=r.user.name,
                user_email=r.user.email,
                data=r.data,
                submitted_at=r.submitted_at,
                created_at=r.created_at,
            )
            for r in responses
        ],
    )


def form_report(identity: Identity, form_id, now=None) -> AnalyticsReport:
    snapshot = load_snapshot(form_id)
    report = build_report(
        snapshot,
        now or timezone.now(),
        trend_days=settings.ANALYTICS_TREND_DAYS,
        recent_limit=settings.ANALYTICS_RECENT_RESPONSES,
        top_limit=settings.ANALYTICS_TOP_VALUES,
    )
    logger.info("Analytics for form %s (%d responses) built for %s", form_id, report.total_responses, identity)
    return report


def export_rows(identity: Identity, form_id, variant: str = exports.RAW) -> List[List[str]]:
    snapshot = load_snapshot(form_id)
    rows = exports.project(snapshot, variant)
    logger.info("Exported %d %s rows of form %s for %s", len(rows) - 1, variant, form_id, identity)
    return rows


def export_filename(form_id, variant: str) -> str:
    prefix = "form-analytics" if variant == exports.ANALYTICS else "form-responses"
    return f"{prefix}-{form_id}.csv"


def responses_for_export(identity: Identity, form_id):
    form = get_form(form_id)
    logger.info("Exported responses of form %s as JSON for %s", form_id, identity)
    return form.responses.select_related("user").order_by("-submitted_at")
