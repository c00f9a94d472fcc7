"""
URL configuration for authentication app.

URL structure:
    /api/v1/auth/me/                - Current user profile (GET)
    /api/v1/auth/logout/            - Clear the auth cookie (POST)
    /api/v1/auth/users/             - User directory (GET)
    /api/v1/auth/users/{user_id}/   - One user's profile (GET)
"""

from django.urls import path

from authentication.views import LogoutView, MeView, UserDetailView, UserListView

app_name = "authentication"

urlpatterns = [
    path("me/", MeView.as_view(), name="me"),
    path("logout/", LogoutView.as_view(), name="logout"),
    path("users/", UserListView.as_view(), name="user-list"),
    path("users/<uuid:user_id>/", UserDetailView.as_view(), name="user-detail"),
]
