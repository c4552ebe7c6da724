from django.contrib import admin
from django.urls import include, path, re_path
from drf_yasg import openapi
from drf_yasg.views import get_schema_view
from rest_framework import permissions
from rest_framework_simplejwt.views import TokenRefreshView

from bizsuite.users.auth_views import EmailTokenObtainPairView
from bizsuite.users.views import MeView, PublicUserDetailView

schema_view = get_schema_view(
    openapi.Info(
        title="Bizsuite — Backend API",
        default_version="v1",
        description=(
            "REST API for the bizsuite ERP backend. "
            "Provides endpoints for authentication, cash and material "
            "requisitions, quotations, orders and notifications."
        ),
        license=openapi.License(
            name="MIT License",
            url="https://opensource.org/licenses/MIT",
        ),
    ),
    public=True,
    permission_classes=(permissions.AllowAny,),
)

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/me/", MeView.as_view(), name="me"),
    path("api/auth/", include("bizsuite.users.urls")),
    path(
        "api/users/public/<int:pk>/",
        PublicUserDetailView.as_view(),
        name="public-user-detail",
    ),
    path(
        "api/auth/token/", EmailTokenObtainPairView.as_view(), name="token_obtain_pair"
    ),
    path("api/auth/token/refresh/", TokenRefreshView.as_view(), name="token_refresh"),
    path("api/", include("bizsuite.requisitions.urls")),
    path("api/", include("bizsuite.sales.urls")),
    path("api/", include("bizsuite.notifications.urls")),
    # Swagger / OpenAPI
    re_path(
        r"^swagger(?P<format>\.json|\.yaml)$",
        schema_view.without_ui(cache_timeout=0),
        name="schema-json",
    ),
    path(
        "swagger/",
        schema_view.with_ui("swagger", cache_timeout=0),
        name="schema-swagger-ui",
    ),
    path("redoc/", schema_view.with_ui("redoc", cache_timeout=0), name="schema-redoc"),
]
