from pathlib import Path

from django.conf import settings
from django.contrib import admin
from django.http import HttpResponse, JsonResponse
from django.urls import include, path
from drf_spectacular.views import (
    SpectacularAPIView,
    SpectacularRedocView,
    SpectacularSwaggerView,
)

from apps.common.views import live_health, ready_health

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/", include("apps.api.urls")),
    path("health/live", live_health, name="health-live"),
    path("health/ready", ready_health, name="health-ready"),
]


def exported_schema(request):
    """Serve the schema written by ``manage.py spectacular --file``."""
    schema_file = Path(settings.BASE_DIR) / "static" / settings.OPENAPI_STATIC_JSON
    if not schema_file.exists():
        return JsonResponse(
            {
                "error": {
                    "code": "NOT_FOUND",
                    "message": "Exported schema missing; run manage.py spectacular --file",
                    "status": 404,
                }
            },
            status=404,
        )
    return HttpResponse(schema_file.read_text(), content_type="application/json")


# Live schema while developing, the exported file otherwise.
schema_view = SpectacularAPIView.as_view() if settings.DEBUG else exported_schema

urlpatterns += [
    path("schema/", schema_view, name="schema"),
    path("docs/swagger/", SpectacularSwaggerView.as_view(url_name="schema"), name="swagger-ui"),
    path("docs/redoc/", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),
]
