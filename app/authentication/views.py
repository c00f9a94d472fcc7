"""
Authentication views.

Login itself happens at the OAuth provider; the callback sets the ``auth``
cookie. The endpoints here tell a client who that cookie belongs to, let it
look other users up, and clear the cookie again.

Related files:
    - serializers.py: UserSerializer
    - backends.py: CookieJWTAuthentication
    - services.py: UserService
    - urls.py: URL routing
"""

from django.conf import settings
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.generics import ListAPIView
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from authentication.pagination import UserCursorPagination
from authentication.serializers import UserSerializer
from authentication.services import UserService


@extend_schema(
    summary="Current user",
    description="Return the profile of the user the auth cookie belongs to.",
    responses={200: UserSerializer},
    tags=["Auth"],
)
class MeView(APIView):
    """
    GET: Return the authenticated user's profile.

    URL: /api/v1/auth/me/
    """

    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response(UserSerializer(request.user).data)


@extend_schema(
    summary="Logout",
    description=(
        "Clear the auth cookie. Works with a missing or expired cookie, so a "
        "client can always sign out."
    ),
    request=None,
    responses={200: OpenApiResponse(description="Logged out")},
    tags=["Auth"],
)
class LogoutView(APIView):
    """
    POST: Clear the ``auth`` cookie.

    URL: /api/v1/auth/logout/
    """

    authentication_classes = []
    permission_classes = [AllowAny]

    def post(self, request):
        response = Response({"success": True, "message": "Successfully logged out"})
        response.delete_cookie(
            getattr(settings, "CHAT_AUTH_COOKIE_NAME", "auth"),
            path="/",
            samesite="Strict",
        )
        return response


@extend_schema(
    summary="List users",
    description="Active users, newest first. Filter with ?search= on username or name.",
    parameters=[
        OpenApiParameter(
            name="search",
            type=OpenApiTypes.STR,
            location=OpenApiParameter.QUERY,
            required=False,
            description="Case-insensitive substring of username or name",
        ),
    ],
    tags=["Users"],
)
class UserListView(ListAPIView):
    """
    GET: Cursor-paginated user directory.

    URL: /api/v1/auth/users/
    """

    permission_classes = [IsAuthenticated]
    serializer_class = UserSerializer
    pagination_class = UserCursorPagination

    def get_queryset(self):
        return UserService.search_users(self.request.query_params.get("search"))


class UserDetailView(APIView):
    """
    GET: Profile of one user.

    URL: /api/v1/auth/users/{user_id}/
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Get user",
        responses={
            200: UserSerializer,
            404: OpenApiResponse(description="User not found"),
        },
        tags=["Users"],
    )
    def get(self, request, user_id):
        result = UserService.get_user_profile(user_id)
        if not result.success:
            return Response(result.to_response(), status=status.HTTP_404_NOT_FOUND)

        return Response(UserSerializer(result.data).data)
