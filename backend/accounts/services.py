"""
Accounts Service Layer.

This module is the **single source of truth** for all business logic
within the ``accounts`` app.  Views must remain *thin*: they validate
input through serializers, call a service method, and return the result
wrapped in a DRF ``Response``.

Architecture
------------
- ``UserRegistrationService`` — officer self-registration (PENDING).
- ``OfficerDirectoryService`` — resolves officers for the custody core
  (transfer destinations).
- ``UserManagementService``   — approve / block accounts, change roles,
  assign stations.  Every action is written to the audit trail and, where
  the officer is affected, emailed through the notification ledger.
"""

from __future__ import annotations

import logging
from typing import Any

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Q, QuerySet

from core.domain.access import require_permission
from core.domain.audit import AuditService
from core.domain.exceptions import DomainError, InvalidRequest, NotFound, PermissionDenied
from core.domain.notifications import NotificationService
from core.domain.transactions import lock_for_update, translate_storage_errors
from core.models import AuditAction, NotificationEvent
from core.pagination import search_term
from core.permissions_constants import AccountsPerms

from .backends import identifier_lookup
from .models import Role, Station, StationStatus, UserStatus

User = get_user_model()

logger = logging.getLogger(__name__)

_MANAGE_USERS = f"accounts.{AccountsPerms.CAN_MANAGE_USERS}"
_VIEW_USERS = f"accounts.{AccountsPerms.VIEW_USER}"


# ═══════════════════════════════════════════════════════════════════
#  Registration
# ═══════════════════════════════════════════════════════════════════


class UserRegistrationService:
    """Create officer accounts awaiting administrator approval."""

    @staticmethod
    def register_user(validated_data: dict[str, Any]) -> User:
        """
        Create a ``PENDING`` account with no role and no station.

        Uniqueness of username / email / national ID / phone number is
        validated by the serializer; a race between two registrations
        for the same value surfaces as ``Conflict``.
        """
        data = dict(validated_data)
        password = data.pop("password")

        with translate_storage_errors("registration"):
            with transaction.atomic():
                user = User(status=UserStatus.PENDING, **data)
                user.set_password(password)
                user.save()

        logger.info("User #%d registered (%s), awaiting approval", user.pk, user.username)
        return user


# ═══════════════════════════════════════════════════════════════════
#  Officer Directory
# ═══════════════════════════════════════════════════════════════════


class OfficerDirectoryService:
    """Read-only identity lookups used by the custody core."""

    @staticmethod
    def resolve_officer(identifier: str, email: str) -> User:
        """
        Resolve a transfer destination from an identifier plus the
        officer's email address.

        ``identifier`` may be a username, national ID, phone number or
        the numeric user ID.  Username, national ID and phone number take
        precedence; the user ID is only tried when none of them match.
        The email acts as a confirmation: it must belong to the same
        account.

        Raises:
            DomainError:    Either value is missing.
            NotFound:       No account matches ``identifier``.
            InvalidRequest: The email belongs to a different account, or
                            the account is not approved.
        """
        identifier = (identifier or "").strip()
        email = (email or "").strip()
        if not identifier or not email:
            raise DomainError("Destination officer identifier and email are required.")

        matches = list(User.objects.filter(identifier_lookup(identifier))[:2])
        if not matches and identifier.isdigit():
            matches = list(User.objects.filter(pk=int(identifier)))
        if not matches:
            raise NotFound(f"Officer '{identifier}' not found.")
        if len(matches) > 1:
            raise InvalidRequest(f"Identifier '{identifier}' matches more than one officer.")

        officer = matches[0]
        if officer.email.lower() != email.lower():
            raise InvalidRequest("Officer identifier and email do not match.")
        if not officer.is_active or not officer.is_approved:
            raise InvalidRequest(f"Officer '{officer.username}' is not an active account.")
        return officer


# ═══════════════════════════════════════════════════════════════════
#  User Management Service
# ═══════════════════════════════════════════════════════════════════


class UserManagementService:
    """
    Administrative account actions.

    Each mutating method follows the same shape:
        1. Permission check (``accounts.can_manage_users``).
        2. Lock the target row and apply the change inside ``atomic()``.
        3. After commit: audit entry (best-effort) and notification
           (best-effort, always recorded).
    """

    @staticmethod
    def list_users(
        requested_by: User,
        *,
        status: str | None = None,
        role_id: int | None = None,
        search: str | None = None,
    ) -> QuerySet[User]:
        require_permission(requested_by, _MANAGE_USERS, _VIEW_USERS)

        qs = User.objects.select_related("role", "station").order_by("-date_joined")

        if status:
            qs = qs.filter(status=status)
        if role_id is not None:
            qs = qs.filter(role_id=role_id)
        search = search_term(search)
        if search:
            qs = qs.filter(
                Q(username__icontains=search)
                | Q(email__icontains=search)
                | Q(first_name__icontains=search)
                | Q(last_name__icontains=search)
                | Q(station__name__icontains=search)
            )
        return qs

    @staticmethod
    def get_user(user_id: int, requested_by: User) -> User:
        require_permission(requested_by, _MANAGE_USERS, _VIEW_USERS)
        try:
            return User.objects.select_related("role", "station").get(pk=user_id)
        except User.DoesNotExist:
            raise NotFound(f"User with id {user_id} not found.")

    # ── Mutations ───────────────────────────────────────────────────

    @staticmethod
    def approve_user(user_id: int, performed_by: User, ip_address: str | None = None) -> User:
        """Move a PENDING or BLOCKED account to ACTIVE."""
        require_permission(performed_by, _MANAGE_USERS, message="Only administrators may approve accounts.")

        with transaction.atomic():
            target = UserManagementService._lock_target(user_id)
            target.status = UserStatus.ACTIVE
            target.is_active = True
            target.save(update_fields=["status", "is_active"])

        UserManagementService._after_commit(
            performed_by=performed_by,
            target=target,
            action=AuditAction.USER_APPROVED,
            details={"email": target.email},
            ip_address=ip_address,
            event=NotificationEvent.USER_APPROVED,
            context={"full_name": target.display_name},
        )
        return target

    @staticmethod
    def block_user(user_id: int, performed_by: User, ip_address: str | None = None) -> User:
        """Block an account.  Blocked officers cannot log in or receive custody."""
        require_permission(performed_by, _MANAGE_USERS, message="Only administrators may block accounts.")

        with transaction.atomic():
            target = UserManagementService._lock_target(user_id)
            target.status = UserStatus.BLOCKED
            target.save(update_fields=["status"])

        UserManagementService._after_commit(
            performed_by=performed_by,
            target=target,
            action=AuditAction.USER_BLOCKED,
            details={"email": target.email},
            ip_address=ip_address,
            event=NotificationEvent.USER_BLOCKED,
            context={"full_name": target.display_name},
        )
        return target

    @staticmethod
    def assign_role(
        *,
        user_id: int,
        role_id: int,
        performed_by: User,
        ip_address: str | None = None,
    ) -> User:
        """Assign (or change) a user's role."""
        require_permission(performed_by, _MANAGE_USERS, message="Only administrators may change roles.")

        try:
            new_role = Role.objects.get(pk=role_id)
        except Role.DoesNotExist:
            raise NotFound(f"Role with id {role_id} not found.")

        with transaction.atomic():
            target = UserManagementService._lock_target(user_id)
            previous = target.role.name if target.role else None
            target.role = new_role
            target.save(update_fields=["role"])

        # Cached permissions belong to the previous role.
        for cache in ("_perm_cache", "_superuser_perm_cache"):
            target.__dict__.pop(cache, None)

        UserManagementService._after_commit(
            performed_by=performed_by,
            target=target,
            action=AuditAction.ROLE_CHANGED,
            details={"from": previous, "to": new_role.name},
            ip_address=ip_address,
        )
        return target

    @staticmethod
    def assign_station(
        *,
        user_id: int,
        station_name: str,
        performed_by: User,
        ip_address: str | None = None,
    ) -> User:
        """Assign an officer to an active station."""
        require_permission(performed_by, _MANAGE_USERS, message="Only administrators may assign stations.")

        station_name = (station_name or "").strip()
        if not station_name:
            raise DomainError("Station name is required.")

        try:
            station = Station.objects.get(name=station_name, status=StationStatus.ACTIVE)
        except Station.DoesNotExist:
            raise NotFound(f"Station '{station_name}' does not exist or is inactive.")

        with transaction.atomic():
            target = UserManagementService._lock_target(user_id, allow_admin=True)
            previous = target.station.name if target.station_id else None
            target.station = station
            target.save(update_fields=["station"])

        UserManagementService._after_commit(
            performed_by=performed_by,
            target=target,
            action=AuditAction.STATION_ASSIGNED,
            details={"from": previous, "to": station.name},
            ip_address=ip_address,
            event=NotificationEvent.STATION_ASSIGNED,
            context={"full_name": target.display_name, "station": station.name},
        )
        return target

    # ── Private helpers ─────────────────────────────────────────────

    @staticmethod
    def _lock_target(user_id: int, *, allow_admin: bool = False) -> User:
        target = lock_for_update(User, pk=user_id)
        if not allow_admin and target.is_administrator:
            raise PermissionDenied("Administrator accounts cannot be modified through this action.")
        return target

    @staticmethod
    def _after_commit(
        *,
        performed_by: User,
        target: User,
        action: str,
        details: dict[str, Any],
        ip_address: str | None,
        event: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        logger.info("User #%d: %s by %s", target.pk, action, performed_by)

        AuditService.record(
            actor=performed_by,
            action_type=action,
            target_type="USER",
            target_id=target.pk,
            details=details,
            ip_address=ip_address,
        )
        if event is not None:
            NotificationService.dispatch(
                event_type=event,
                recipient_email=target.email,
                context=context or {},
                reference_id=target.pk,
            )
