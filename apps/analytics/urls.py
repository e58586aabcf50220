from django.urls import path

from .views import FormAnalyticsExportView, FormAnalyticsView, FormResponsesExportView

urlpatterns = [
    path("forms/<uuid:form_id>/analytics/", FormAnalyticsView.as_view(), name="form-analytics"),
    path("forms/<uuid:form_id>/analytics/export/", FormAnalyticsExportView.as_view(), name="form-analytics-export"),
    path("forms/<uuid:form_id>/responses/export/", FormResponsesExportView.as_view(), name="form-responses-export"),
]
