from django.contrib import admin
from django.http import JsonResponse
from django.urls import path, include
from drf_spectacular.views import (
    SpectacularAPIView,
    SpectacularSwaggerView,
    SpectacularRedocView,
)


def health(request):
    return JsonResponse({"status": "OK", "message": "Consulta Pública API is running"})


urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/health", health, name="health"),

    # --- Versioned app routes ---
    path("api/v1/", include("apps.accounts.urls")),
    # analytics/export routes live under forms/<id>/ next to the forms router
    path("api/v1/", include("apps.analytics.urls")),
    path("api/v1/", include("apps.surveys.urls")),

    # --- OpenAPI / Docs ---
    path("api/schema/", SpectacularAPIView.as_view(), name="schema"),
    path("api/docs/", SpectacularSwaggerView.as_view(url_name="schema"), name="swagger-ui"),
    path("api/docs/redoc/", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),
]
