"""
URL configuration for the Django application.

This is the root URL configuration that includes all app-specific routes.

URL Structure:
    /                                          - ReDoc API documentation
    /health/                                   - Health check endpoint (load balancers, Docker)
    /schema/                                   - OpenAPI schema (YAML)
    /api/v1/auth/
        me/                                    - Identity behind the auth cookie
    /api/v1/chat/
        messages/                              - Send message
        messages/{id}/                         - Edit / delete message
        messages/{id}/read/                    - Mark message read
        conversations/{user_id}/messages/      - History with one user
        presence/{user_id}/                    - Connection-derived presence

The realtime endpoint (ws/chat/) is routed in config/asgi.py.

For more information, see:
https://docs.djangoproject.com/en/5.2/topics/http/urls/
"""

from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularRedocView

from core.views import health_check

# =============================================================================
# API v1 Routes
# =============================================================================
# All routes here are prefixed with /api/v1/ automatically
api_v1_patterns = [
    # Authentication
    path("auth/", include("authentication.urls")),
    # Chat
    path("chat/", include("chat.urls")),
]

urlpatterns = [
    # Documentation
    path("", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    # Health check (Docker, Kubernetes, load balancers)
    path("health/", health_check, name="health_check"),
    # API v1
    path("api/v1/", include(api_v1_patterns)),
]
