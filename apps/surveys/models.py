import uuid

from django.conf import settings
from django.db import models
from django.db.models import JSONField
from django.utils import timezone

from .fields import parse_fields, substantive_fields


class BaseEntity(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class Form(BaseEntity):
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, related_name="forms", on_delete=models.SET_NULL, null=True, blank=True
    )
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    # ordered list of field definitions: {id, type, label, required, options, rows, placeholder}
    fields = JSONField(default=list, blank=True)
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [models.Index(fields=["is_active", "-created_at"], name="surveys_form_active_idx")]

    def __str__(self) -> str:
        return self.title

    def field_definitions(self):
        return parse_fields(self.fields)

    def substantive_field_definitions(self):
        return substantive_fields(self.field_definitions())


class FormResponse(BaseEntity):
    """
    One citizen's submission. ``created_at`` marks when filling started and
    ``submitted_at`` when it was sent; responses are never edited.
    """
    form = models.ForeignKey(Form, related_name="responses", on_delete=models.CASCADE)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, related_name="form_responses", on_delete=models.CASCADE)
    data = JSONField(default=dict)
    submitted_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["-submitted_at"]
        constraints = [
            models.UniqueConstraint(fields=["form", "user"], name="uniq_form_response_per_user"),
        ]
        indexes = [models.Index(fields=["form", "-submitted_at"], name="surveys_resp_form_sub_idx")]

    def __str__(self) -> str:
        return f"{self.form_id}:{self.user_id}"
