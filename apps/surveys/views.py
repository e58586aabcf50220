import logging

from django.contrib.auth import get_user_model
from django.db.models import Count
from django.utils.translation import gettext_lazy as _
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import serializers, status, viewsets
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

# drf-spectacular imports for OpenAPI annotations
from drf_spectacular.utils import (
    extend_schema,
    extend_schema_view,
    OpenApiExample,
    OpenApiParameter,
    OpenApiResponse,
    OpenApiTypes,
)

from apps.accounts.models import AuditLog
from common.permissions import IsAdmin

from .models import Form, FormResponse
from .serializers import (
    FormResponseSerializer,
    FormSerializer,
    ResponseSubmitSerializer,
    UserFormResponseSerializer,
)

logger = logging.getLogger(__name__)

####################################
# Shared examples & params
####################################
FORM_FILTER_PARAMS = [
    OpenApiParameter(
        name="is_active",
        required=False,
        location=OpenApiParameter.QUERY,
        type=OpenApiTypes.BOOL,
        description="Filter by published state",
    ),
    OpenApiParameter(
        name="search",
        required=False,
        location=OpenApiParameter.QUERY,
        type=OpenApiTypes.STR,
        description="Search title and description",
    ),
]

FORM_CREATE_EXAMPLE = OpenApiExample(
    "Create form example",
    value={
        "title": "Consulta sobre transporte público",
        "description": "Ajude a priorizar as melhorias do transporte.",
        "is_active": True,
        "fields": [
            {"id": "field-1", "type": "text", "label": "Bairro", "required": True},
            {
                "id": "field-2",
                "type": "checkbox",
                "label": "Quais linhas você usa?",
                "required": False,
                "options": ["101", "202", "303"],
            },
        ],
    },
)

RESPONSE_SUBMIT_EXAMPLE = OpenApiExample(
    "Submit response example",
    value={
        "data": {"field-1": "Centro", "field-2": ["101", "303"]},
        "started_at": "2026-10-17T12:00:00Z",
    },
)


class FormStatsSerializer(serializers.Serializer):
    totalUsers = serializers.IntegerField()
    totalForms = serializers.IntegerField()
    totalResponses = serializers.IntegerField()
    activeForms = serializers.IntegerField()


####################################
# FormViewSet
####################################
@extend_schema_view(
    list=extend_schema(
        summary="List Forms (admin)",
        description="All forms with their response counts, newest first.",
        parameters=FORM_FILTER_PARAMS,
        responses={200: FormSerializer(many=True)},
        tags=["Forms"],
    ),
    retrieve=extend_schema(
        summary="Retrieve Form",
        description="Any authenticated user; includes responseCount and whether the caller already responded.",
        responses={200: FormSerializer, 404: OpenApiResponse(description="Form not found")},
        tags=["Forms"],
    ),
    create=extend_schema(
        summary="Create Form (admin)",
        request=FormSerializer,
        responses={201: FormSerializer, 400: OpenApiResponse(description="Invalid field definitions")},
        examples=[FORM_CREATE_EXAMPLE],
        tags=["Forms"],
    ),
    update=extend_schema(summary="Update Form (admin)", request=FormSerializer, responses={200: FormSerializer}, tags=["Forms"]),
    partial_update=extend_schema(
        summary="Partial update Form (admin)", request=FormSerializer, responses={200: FormSerializer}, tags=["Forms"]
    ),
    destroy=extend_schema(
        summary="Delete Form (admin)",
        description="Deletes the form and every response submitted to it.",
        responses={204: OpenApiResponse(description="deleted")},
        tags=["Forms"],
    ),
)
class FormViewSet(viewsets.ModelViewSet):
    """
    Dynamic forms. Administrators build and publish them; citizens read the
    active ones and submit a single response each.
    """
    queryset = Form.objects.select_related("created_by").annotate(response_count=Count("responses"))
    serializer_class = FormSerializer
    permission_classes = [IsAdmin]
    lookup_value_regex = "[0-9a-fA-F-]{36}"
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    filterset_fields = ["is_active"]
    search_fields = ["title", "description"]
    ordering_fields = ["created_at", "updated_at", "title"]

    citizen_actions = ("retrieve", "active", "user_responses", "responses_count", "responses_check")

    def get_permissions(self):
        if self.action in self.citizen_actions:
            return [IsAuthenticated()]
        if self.action == "responses" and self.request.method == "POST":
            return [IsAuthenticated()]
        return super().get_permissions()

    def perform_create(self, serializer):
        form = serializer.save(created_by=self.request.user)
        AuditLog.log(actor=self.request.user, action="form.create", meta={"id": str(form.id), "title": form.title})
        logger.info("Form %s created by %s", form.id, self.request.user.id)

    def perform_update(self, serializer):
        form = serializer.save()
        AuditLog.log(actor=self.request.user, action="form.update", meta={"id": str(form.id)})

    def perform_destroy(self, instance):
        AuditLog.log(actor=self.request.user, action="form.delete", meta={"id": str(instance.id), "title": instance.title})
        logger.info("Form %s deleted by %s", instance.id, self.request.user.id)
        instance.delete()

    @extend_schema(
        summary="List active forms",
        description="Published forms any authenticated user can answer.",
        responses={200: FormSerializer(many=True)},
        tags=["Forms"],
    )
    @action(detail=False, methods=["get"])
    def active(self, request):
        queryset = self.filter_queryset(self.get_queryset().filter(is_active=True))
        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(self.get_serializer(page, many=True).data)
        return Response(self.get_serializer(queryset, many=True).data)

    @extend_schema(
        methods=["GET"],
        summary="List responses of a form (admin)",
        description="The form and its responses with submitter name/email, newest first.",
        responses={200: OpenApiResponse(description="form + responses")},
        tags=["Responses"],
    )
    @extend_schema(
        methods=["POST"],
        summary="Submit a response",
        description=(
            "Validates that the form is active, required fields are answered and email fields are well formed. "
            "A user may respond to each form only once."
        ),
        request=ResponseSubmitSerializer,
        responses={
            201: FormResponseSerializer,
            400: OpenApiResponse(description="Form inactive, validation error or already responded"),
            404: OpenApiResponse(description="Form not found"),
        },
        examples=[RESPONSE_SUBMIT_EXAMPLE],
        tags=["Responses"],
    )
    @action(detail=True, methods=["get", "post"])
    def responses(self, request, pk=None):
        form = self.get_object()
        if request.method == "POST":
            return self._submit_response(request, form)

        responses = form.responses.select_related("user").order_by("-submitted_at")
        return Response({
            "form": self.get_serializer(form).data,
            "responses": FormResponseSerializer(responses, many=True).data,
        })

    def _submit_response(self, request, form):
        if not form.is_active:
            raise serializers.ValidationError({"detail": _("Form is not active")})
        if form.responses.filter(user=request.user).exists():
            raise serializers.ValidationError({"detail": _("You have already responded to this form")})

        serializer = ResponseSubmitSerializer(data=request.data, context={"request": request, "form": form})
        serializer.is_valid(raise_exception=True)
        response = serializer.save()
        return Response(
            {
                "success": True,
                "message": _("Response submitted successfully"),
                "response": FormResponseSerializer(response).data,
            },
            status=status.HTTP_201_CREATED,
        )

    @extend_schema(
        summary="Count responses of a form",
        responses={200: OpenApiResponse(description="{count}")},
        tags=["Responses"],
    )
    @action(detail=True, methods=["get"], url_path="responses/count")
    def responses_count(self, request, pk=None):
        form = self.get_object()
        return Response({"count": form.responses.count()})

    @extend_schema(
        summary="Check whether the caller already responded",
        responses={200: OpenApiResponse(description="{hasResponded}")},
        tags=["Responses"],
    )
    @action(detail=True, methods=["get"], url_path="responses/check")
    def responses_check(self, request, pk=None):
        form = self.get_object()
        return Response({"hasResponded": form.responses.filter(user=request.user).exists()})

    @extend_schema(
        summary="List the caller's own responses",
        responses={200: UserFormResponseSerializer(many=True)},
        tags=["Responses"],
    )
    @action(detail=False, methods=["get"], url_path="user/responses")
    def user_responses(self, request):
        responses = (
            FormResponse.objects.filter(user=request.user)
            .select_related("form")
            .order_by("-submitted_at")
        )
        return Response(UserFormResponseSerializer(responses, many=True).data)

    @extend_schema(summary="Platform statistics (admin)", responses={200: FormStatsSerializer}, tags=["Forms"])
    @action(detail=False, methods=["get"], url_path="stats/overview")
    def stats_overview(self, request):
        stats = {
            "totalUsers": get_user_model().objects.count(),
            "totalForms": Form.objects.count(),
            "totalResponses": FormResponse.objects.count(),
            "activeForms": Form.objects.filter(is_active=True).count(),
        }
        return Response({"stats": FormStatsSerializer(stats).data})
