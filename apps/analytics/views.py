from rest_framework.renderers import JSONRenderer
from rest_framework.response import Response
from rest_framework.views import APIView
from drf_spectacular.utils import extend_schema, OpenApiParameter, OpenApiResponse, OpenApiTypes

from apps.surveys.serializers import FormResponseSerializer
from common.permissions import IsAdmin

from . import exports, services
from .identity import Identity
from .renderers import CSVRenderer, ExportContentNegotiation
from .serializers import AnalyticsReportSerializer


def _attachment(response: Response, filename: str) -> Response:
    response["Content-Disposition"] = f'attachment; filename="{filename}"'
    return response


@extend_schema(
    summary="Form analytics report (admin)",
    description=(
        "Per-field completion rates, averages for number fields, top values for choice fields, "
        "a 7-day response trend, the average completion time and the 10 newest responses."
    ),
    responses={200: AnalyticsReportSerializer, 404: OpenApiResponse(description="Form not found")},
    tags=["Analytics"],
)
class FormAnalyticsView(APIView):
    permission_classes = [IsAdmin]

    def get(self, request, form_id):
        report = services.form_report(Identity.from_request(request), form_id)
        return Response(AnalyticsReportSerializer(report).data)


@extend_schema(
    summary="Export form analytics as CSV (admin)",
    responses={(200, "text/csv"): OpenApiTypes.STR, 404: OpenApiResponse(description="Form not found")},
    tags=["Analytics"],
)
class FormAnalyticsExportView(APIView):
    permission_classes = [IsAdmin]
    renderer_classes = [CSVRenderer]
    content_negotiation_class = ExportContentNegotiation

    def get(self, request, form_id):
        rows = services.export_rows(Identity.from_request(request), form_id, exports.ANALYTICS)
        return _attachment(Response(rows), services.export_filename(form_id, exports.ANALYTICS))


@extend_schema(
    summary="Export form responses (admin)",
    description="CSV download by default; `?format=json` returns the responses as JSON instead.",
    parameters=[
        OpenApiParameter(
            name="format",
            required=False,
            location=OpenApiParameter.QUERY,
            type=OpenApiTypes.STR,
            enum=["csv", "json"],
            description="csv (default) or json",
        ),
    ],
    responses={
        (200, "text/csv"): OpenApiTypes.STR,
        (200, "application/json"): FormResponseSerializer(many=True),
        404: OpenApiResponse(description="Form not found"),
    },
    tags=["Analytics"],
)
class FormResponsesExportView(APIView):
    permission_classes = [IsAdmin]
    renderer_classes = [CSVRenderer, JSONRenderer]
    content_negotiation_class = ExportContentNegotiation

    def get(self, request, form_id):
        identity = Identity.from_request(request)
        if request.accepted_renderer.format == "json":
            responses = services.responses_for_export(identity, form_id)
            return Response(FormResponseSerializer(responses, many=True).data)
        rows = services.export_rows(identity, form_id, exports.RAW)
        return _attachment(Response(rows), services.export_filename(form_id, exports.RAW))
