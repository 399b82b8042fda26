from django.contrib import admin
from django.urls import include, path

from drf_spectacular.views import (
    SpectacularAPIView,
    SpectacularRedocView,
    SpectacularSwaggerView,
)
from rest_framework_simplejwt.views import TokenRefreshView

urlpatterns = [
    # --- JWT Token Authentication ---
    path("api/token/refresh/", TokenRefreshView.as_view(), name="token_refresh"),
    # --- Admin Panel ---
    path("admin/", admin.site.urls),

    # --- API Documentation (drf-spectacular) ---
    path("api/schema/", SpectacularAPIView.as_view(), name="schema"),
    path(
        "api/schema/swagger-ui/",
        SpectacularSwaggerView.as_view(url_name="schema"),
        name="swagger-ui",
    ),
    path(
        "api/schema/redoc/",
        SpectacularRedocView.as_view(url_name="schema"),
        name="redoc",
    ),

    # --- App URLs ---
    path("api/users/", include("users.urls")),
    path("api/wallet/", include("wallet.urls")),
    path("api/tournaments/", include("tournaments.urls")),
    path("api/chat/", include("chat.urls")),
    path("api/config/", include("siteconfig.urls")),
]
