"""
Accounts app serializers.

Contains all Request and Response serializers for the accounts API.
Serializers handle field definitions, read/write constraints, and
basic validation.  **No business logic** lives here — all domain
rules are delegated to ``services.py``.
"""

from __future__ import annotations

import re
from typing import Any

from django.contrib.auth import authenticate, get_user_model
from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from .models import Role, Station, UserStatus

User = get_user_model()

_PHONE_RE = re.compile(r"^\+?\d{7,15}$")


# ═══════════════════════════════════════════════════════════════════
#  Authentication Serializers
# ═══════════════════════════════════════════════════════════════════


class RegisterRequestSerializer(serializers.ModelSerializer):
    """
    Validates officer self-registration.

    The account is created ``PENDING`` and cannot log evidence or hold
    custody until an administrator approves it.
    """

    password = serializers.CharField(
        write_only=True,
        min_length=8,
        style={"input_type": "password"},
        help_text="Minimum 8 characters.",
    )
    password_confirm = serializers.CharField(
        write_only=True,
        style={"input_type": "password"},
        help_text="Must match 'password'.",
    )

    class Meta:
        model = User
        fields = [
            "username",
            "password",
            "password_confirm",
            "email",
            "phone_number",
            "first_name",
            "last_name",
            "national_id",
        ]
        extra_kwargs = {
            "email": {"required": True},
            "first_name": {"required": True},
            "last_name": {"required": True},
            "national_id": {"required": True},
            "phone_number": {"required": True},
        }

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:
        if attrs["password"] != attrs["password_confirm"]:
            raise serializers.ValidationError(
                {"password_confirm": "Passwords do not match."}
            )

        national_id = attrs.get("national_id", "")
        if not national_id.isdigit():
            raise serializers.ValidationError(
                {"national_id": "National ID must contain digits only."}
            )

        if not _PHONE_RE.match(attrs.get("phone_number", "")):
            raise serializers.ValidationError(
                {"phone_number": "Phone number must be 7-15 digits, optionally prefixed with '+'."}
            )

        attrs.pop("password_confirm")
        return attrs


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    """
    Custom SimpleJWT serializer that:

    1. Accepts ``identifier`` + ``password`` instead of
       ``username`` + ``password``.
    2. Resolves the user via the ``MultiFieldAuthBackend``.
    3. Refuses accounts that are not yet approved.
    4. Injects RBAC claims (``role``, ``hierarchy_level``,
       ``permissions_list``) plus ``station`` into the access token.
    """

    username_field = "identifier"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields.pop(self.username_field, None)
        self.fields["identifier"] = serializers.CharField(
            help_text="Username, National ID, Phone Number, or Email.",
        )

    @classmethod
    def get_token(cls, user) -> Any:
        token = super().get_token(user)

        token["role"] = user.role.name if user.role else None
        token["hierarchy_level"] = user.hierarchy_level
        token["permissions_list"] = user.permissions_list
        token["station"] = user.station.name if user.station_id else None

        return token

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:
        """
        Authenticate using the custom ``MultiFieldAuthBackend``.

        Returns a dict containing ``access`` and ``refresh``; the view
        attaches the serialized ``user``.
        """
        user = authenticate(
            request=self.context.get("request"),
            identifier=attrs.get("identifier"),
            password=attrs.get("password"),
        )

        if user is None:
            raise serializers.ValidationError(
                {"detail": "Invalid credentials."},
                code="authentication",
            )

        if not user.is_approved:
            raise serializers.ValidationError(
                {"detail": "Account is pending administrator approval."},
                code="authentication",
            )

        refresh = self.get_token(user)
        self.user = user
        return {
            "access": str(refresh.access_token),
            "refresh": str(refresh),
        }


class TokenResponseSerializer(serializers.Serializer):
    """Shape of the login response (schema only)."""

    access = serializers.CharField(read_only=True)
    refresh = serializers.CharField(read_only=True)
    user = serializers.SerializerMethodField()

    def get_user(self, obj: dict) -> dict | None:
        user = obj.get("user")
        if user:
            return UserDetailSerializer(user).data
        return None


# ═══════════════════════════════════════════════════════════════════
#  Role & Station Serializers
# ═══════════════════════════════════════════════════════════════════


class RoleListSerializer(serializers.ModelSerializer):
    """Lightweight role representation (no permission detail)."""

    class Meta:
        model = Role
        fields = ["id", "name", "description", "hierarchy_level"]
        read_only_fields = ["id"]


class StationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Station
        fields = ["id", "name", "status"]
        read_only_fields = fields


# ═══════════════════════════════════════════════════════════════════
#  User Serializers
# ═══════════════════════════════════════════════════════════════════


class UserListSerializer(serializers.ModelSerializer):
    """
    Serializer for listing users (admin views).
    Includes role and station names for quick scanning.
    """

    role_name = serializers.CharField(
        source="role.name",
        read_only=True,
        default=None,
    )
    station_name = serializers.CharField(
        source="station.name",
        read_only=True,
        default=None,
    )

    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "email",
            "first_name",
            "last_name",
            "status",
            "role",
            "role_name",
            "station_name",
            "date_joined",
        ]
        read_only_fields = fields


class UserDetailSerializer(serializers.ModelSerializer):
    """
    Full user representation (used in retrieve, me, login and
    registration responses).

    ``permissions`` is a read-only flat list such as:
        ['evidence.add_evidence', 'evidence.add_evidencetransfer', ...]
    """

    role_detail = RoleListSerializer(source="role", read_only=True)
    station = StationSerializer(read_only=True)
    permissions = serializers.ListField(
        child=serializers.CharField(),
        source="permissions_list",
        read_only=True,
        help_text="Flat list of 'app_label.codename' permission strings.",
    )

    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "email",
            "national_id",
            "phone_number",
            "first_name",
            "last_name",
            "status",
            "is_active",
            "date_joined",
            "station",
            "role",
            "role_detail",
            "permissions",
        ]
        read_only_fields = fields


class AssignRoleSerializer(serializers.Serializer):
    """Accepts a ``role_id`` to assign to a user."""

    role_id = serializers.IntegerField(
        help_text="PK of the Role to assign to this user.",
    )


class AssignStationSerializer(serializers.Serializer):
    """Accepts the name of an active station to assign to an officer."""

    station = serializers.CharField(
        max_length=120,
        help_text="Name of an existing, active station.",
    )


class UserFilterSerializer(serializers.Serializer):
    """Query-parameter validation for ``GET /users/``."""

    status = serializers.ChoiceField(
        choices=UserStatus.choices,
        required=False,
    )
    role = serializers.IntegerField(required=False)
    search = serializers.CharField(required=False, allow_blank=True, max_length=100)
