import re

from django.db import IntegrityError, transaction
from django.utils import timezone
from django.utils.translation import gettext_lazy as _
from rest_framework import serializers

from .fields import CHOICE_TYPES, PRESENTATIONAL_TYPES, FieldType, is_unanswered, resolve_value
from .models import Form, FormResponse

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class FieldDefinitionSerializer(serializers.Serializer):
    id = serializers.CharField(required=False, allow_blank=True, max_length=100)
    type = serializers.ChoiceField(choices=FieldType.choices)
    label = serializers.CharField(required=False, allow_blank=True, max_length=500)
    required = serializers.BooleanField(required=False, default=False)
    options = serializers.ListField(child=serializers.CharField(max_length=500), required=False)
    rows = serializers.IntegerField(required=False, min_value=1, max_value=50)
    placeholder = serializers.CharField(required=False, allow_blank=True, max_length=500)

    def validate(self, attrs):
        if attrs["type"] not in PRESENTATIONAL_TYPES and not attrs.get("label", "").strip():
            raise serializers.ValidationError({"label": _("This field is required.")})
        if attrs["type"] in CHOICE_TYPES and not attrs.get("options"):
            raise serializers.ValidationError({"options": _("Choice fields need at least one option.")})
        return attrs


class CreatorSerializer(serializers.Serializer):
    id = serializers.UUIDField(read_only=True)
    name = serializers.CharField(read_only=True)
    email = serializers.EmailField(read_only=True)


class FormSerializer(serializers.ModelSerializer):
    created_by = CreatorSerializer(read_only=True)
    response_count = serializers.SerializerMethodField()
    has_responded = serializers.SerializerMethodField()

    class Meta:
        model = Form
        fields = [
            "id", "title", "description", "fields", "is_active", "created_by",
            "response_count", "has_responded", "created_at", "updated_at",
        ]
        read_only_fields = ["id", "created_by", "created_at", "updated_at"]

    def get_response_count(self, obj) -> int:
        count = getattr(obj, "response_count", None)
        return count if count is not None else obj.responses.count()

    def get_has_responded(self, obj) -> bool:
        request = self.context.get("request")
        if request is None or not request.user.is_authenticated:
            return False
        return obj.responses.filter(user=request.user).exists()

    def validate_title(self, value: str) -> str:
        value = value.strip()
        if not value:
            raise serializers.ValidationError(_("Title is required"))
        return value

    def validate_fields(self, value):
        """Validate each definition and give every field a unique id."""
        if not isinstance(value, list):
            raise serializers.ValidationError(_("Fields must be a list."))
        definitions = FieldDefinitionSerializer(data=value, many=True)
        definitions.is_valid(raise_exception=True)

        normalized, seen = [], set()
        for item in definitions.validated_data:
            field_id = (item.get("id") or "").strip()
            if field_id and field_id in seen:
                raise serializers.ValidationError(_("Duplicate field id: %(id)s") % {"id": field_id})
            if field_id:
                seen.add(field_id)
            normalized.append({**item, "id": field_id})

        counter = 0
        for item in normalized:
            if item["id"]:
                continue
            counter += 1
            while f"field-{counter}" in seen:
                counter += 1
            item["id"] = f"field-{counter}"
            seen.add(item["id"])
        return normalized


class FormResponseSerializer(serializers.ModelSerializer):
    user_name = serializers.CharField(source="user.name", read_only=True)
    user_email = serializers.EmailField(source="user.email", read_only=True)

    class Meta:
        model = FormResponse
        fields = ["id", "form", "user", "data", "submitted_at", "created_at", "user_name", "user_email"]
        read_only_fields = fields


class UserFormResponseSerializer(serializers.ModelSerializer):
    form_title = serializers.CharField(source="form.title", read_only=True)

    class Meta:
        model = FormResponse
        fields = ["id", "form", "user", "data", "submitted_at", "created_at", "form_title"]
        read_only_fields = fields


class ResponseSubmitSerializer(serializers.Serializer):
    """
    A citizen's answers to a form. Needs ``form`` and ``request`` in the context.
    """
    data = serializers.JSONField()
    started_at = serializers.DateTimeField(required=False)

    def validate_data(self, value):
        if not isinstance(value, dict):
            raise serializers.ValidationError(_("Response data is required"))

        errors = {}
        for definition in self.context["form"].substantive_field_definitions():
            answer = resolve_value(value, definition)
            if is_unanswered(answer) or answer == []:
                if definition.required:
                    errors[definition.id] = _("%(label)s is required") % {"label": definition.label}
                continue
            if definition.type == FieldType.EMAIL and not EMAIL_RE.match(str(answer)):
                errors[definition.id] = _("Please enter a valid email address")
        if errors:
            raise serializers.ValidationError(errors)
        return value

    def create(self, validated_data):
        form = self.context["form"]
        user = self.context["request"].user
        now = timezone.now()
        try:
            with transaction.atomic():
                return FormResponse.objects.create(
                    form=form,
                    user=user,
                    data=validated_data["data"],
                    created_at=validated_data.get("started_at") or now,
                    submitted_at=now,
                )
        except IntegrityError:
            raise serializers.ValidationError({"detail": _("You have already responded to this form")})
