"""
Accounts app views.

All views follow the **Thin View** pattern: validate input via
serializers, delegate to the service layer, and return the result
wrapped in a DRF ``Response``.  **No business logic** resides here.

View Map
--------
- ``RegisterView``  — POST /auth/register/
- ``LoginView``     — POST /auth/login/
- ``MeView``        — GET /me/
- ``UserViewSet``   — /users/  (list, retrieve, approve, block,
                      assign-role, assign-station)
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from core.domain.audit import client_ip
from core.pagination import paginate

from .models import User
from .serializers import (
    AssignRoleSerializer,
    AssignStationSerializer,
    CustomTokenObtainPairSerializer,
    RegisterRequestSerializer,
    TokenResponseSerializer,
    UserDetailSerializer,
    UserFilterSerializer,
    UserListSerializer,
)
from .services import UserManagementService, UserRegistrationService


# ═══════════════════════════════════════════════════════════════════
#  Authentication Views
# ═══════════════════════════════════════════════════════════════════


class RegisterView(APIView):
    """
    POST /api/accounts/auth/register/

    Public endpoint.  Creates a ``PENDING`` officer account that an
    administrator must approve before it can log in.
    """

    permission_classes = [AllowAny]
    authentication_classes = []

    @extend_schema(
        summary="Register an officer account",
        request=RegisterRequestSerializer,
        responses={
            201: OpenApiResponse(response=UserDetailSerializer, description="Account created (pending approval)."),
            400: OpenApiResponse(description="Validation error."),
        },
        tags=["Auth"],
    )
    def post(self, request: Request) -> Response:
        serializer = RegisterRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = UserRegistrationService.register_user(serializer.validated_data)
        return Response(UserDetailSerializer(user).data, status=status.HTTP_201_CREATED)


class LoginView(APIView):
    """
    POST /api/accounts/auth/login/

    Public endpoint.  Authenticates via any of the four unique
    identifiers (username, national_id, phone_number, email) plus
    password and returns a JWT pair with the user's profile.
    """

    permission_classes = [AllowAny]
    authentication_classes = []

    @extend_schema(
        summary="Log in",
        request=CustomTokenObtainPairSerializer,
        responses={
            200: OpenApiResponse(response=TokenResponseSerializer, description="JWT pair and profile."),
            400: OpenApiResponse(description="Invalid credentials or account pending approval."),
        },
        tags=["Auth"],
    )
    def post(self, request: Request) -> Response:
        serializer = CustomTokenObtainPairSerializer(
            data=request.data,
            context={"request": request},
        )
        serializer.is_valid(raise_exception=True)

        payload = dict(serializer.validated_data)
        payload["user"] = UserDetailSerializer(serializer.user).data
        return Response(payload, status=status.HTTP_200_OK)


# ═══════════════════════════════════════════════════════════════════
#  Current User ("Me") View
# ═══════════════════════════════════════════════════════════════════


class MeView(APIView):
    """GET /api/accounts/me/ — the authenticated officer's profile."""

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Current user profile",
        responses={200: OpenApiResponse(response=UserDetailSerializer, description="Profile.")},
        tags=["Auth"],
    )
    def get(self, request: Request) -> Response:
        return Response(UserDetailSerializer(request.user).data, status=status.HTTP_200_OK)


# ═══════════════════════════════════════════════════════════════════
#  User Management ViewSet
# ═══════════════════════════════════════════════════════════════════


class UserViewSet(viewsets.ViewSet):
    """
    /api/accounts/users/

    Administrative user management.  The base permission is
    ``IsAuthenticated``; ``accounts.can_manage_users`` is enforced inside
    ``UserManagementService``.
    """

    permission_classes = [IsAuthenticated]
    queryset = User.objects.none()
    lookup_value_regex = r"\d+"

    @extend_schema(
        summary="List users",
        parameters=[
            OpenApiParameter(name="status", type=str, required=False, description="pending | active | blocked"),
            OpenApiParameter(name="role", type=int, required=False, description="Role PK."),
            OpenApiParameter(name="search", type=str, required=False, description="At least 2 characters."),
            OpenApiParameter(name="page", type=int, required=False),
            OpenApiParameter(name="limit", type=int, required=False, description="Page size (max 100)."),
        ],
        responses={200: OpenApiResponse(response=UserListSerializer(many=True), description="Paginated users.")},
        tags=["Users"],
    )
    def list(self, request: Request) -> Response:
        filters = UserFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)
        data = filters.validated_data

        qs = UserManagementService.list_users(
            request.user,
            status=data.get("status"),
            role_id=data.get("role"),
            search=data.get("search"),
        )
        return paginate(request, qs, UserListSerializer, view=self)

    @extend_schema(
        summary="Retrieve a user",
        responses={200: OpenApiResponse(response=UserDetailSerializer, description="User detail.")},
        tags=["Users"],
    )
    def retrieve(self, request: Request, pk: str = None) -> Response:
        user = UserManagementService.get_user(int(pk), requested_by=request.user)
        return Response(UserDetailSerializer(user).data, status=status.HTTP_200_OK)

    # ── Administrative actions ───────────────────────────────────

    @action(detail=True, methods=["patch"], url_path="approve")
    @extend_schema(
        summary="Approve an account",
        request=None,
        responses={200: OpenApiResponse(response=UserDetailSerializer, description="Account active.")},
        tags=["Users"],
    )
    def approve(self, request: Request, pk: str = None) -> Response:
        user = UserManagementService.approve_user(
            int(pk), performed_by=request.user, ip_address=client_ip(request),
        )
        return Response(UserDetailSerializer(user).data, status=status.HTTP_200_OK)

    @action(detail=True, methods=["patch"], url_path="block")
    @extend_schema(
        summary="Block an account",
        request=None,
        responses={200: OpenApiResponse(response=UserDetailSerializer, description="Account blocked.")},
        tags=["Users"],
    )
    def block(self, request: Request, pk: str = None) -> Response:
        user = UserManagementService.block_user(
            int(pk), performed_by=request.user, ip_address=client_ip(request),
        )
        return Response(UserDetailSerializer(user).data, status=status.HTTP_200_OK)

    @action(detail=True, methods=["patch"], url_path="assign-role")
    @extend_schema(
        summary="Change a user's role",
        request=AssignRoleSerializer,
        responses={200: OpenApiResponse(response=UserDetailSerializer, description="Role changed.")},
        tags=["Users"],
    )
    def assign_role(self, request: Request, pk: str = None) -> Response:
        serializer = AssignRoleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = UserManagementService.assign_role(
            user_id=int(pk),
            role_id=serializer.validated_data["role_id"],
            performed_by=request.user,
            ip_address=client_ip(request),
        )
        return Response(UserDetailSerializer(user).data, status=status.HTTP_200_OK)

    @action(detail=True, methods=["post"], url_path="assign-station")
    @extend_schema(
        summary="Assign an officer to a station",
        request=AssignStationSerializer,
        responses={200: OpenApiResponse(response=UserDetailSerializer, description="Station assigned.")},
        tags=["Users"],
    )
    def assign_station(self, request: Request, pk: str = None) -> Response:
        serializer = AssignStationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = UserManagementService.assign_station(
            user_id=int(pk),
            station_name=serializer.validated_data["station"],
            performed_by=request.user,
            ip_address=client_ip(request),
        )
        return Response(UserDetailSerializer(user).data, status=status.HTTP_200_OK)
