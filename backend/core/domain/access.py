"""
core.domain.access — Permission guards shared by every app's service layer.

Authorization policy itself belongs to the identity collaborator (roles
and their permission sets in ``accounts``).  The custody core only needs
two questions answered:

    1) ``require_permission`` — does the user hold a given permission?
    2) ``require_active_officer`` — is the account allowed to act at all?

Usage in an app's service layer::

    from core.domain.access import require_permission

    require_permission(
        performed_by,
        f"accounts.{AccountsPerms.CAN_MANAGE_USERS}",
        message="Only administrators may block accounts.",
    )
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.domain.exceptions import PermissionDenied

if TYPE_CHECKING:
    from accounts.models import User


def require_permission(user: User, *perms: str, message: str = "") -> None:
    """
    Guard that raises ``PermissionDenied`` if the user lacks **all** of
    the given permissions (OR-logic: having any one is sufficient).

    Args:
        user:    Authenticated user.
        *perms:  One or more full permission strings (``app.codename``).
        message: Optional custom error message.
    """
    for perm in perms:
        if user.has_perm(perm):
            return
    raise PermissionDenied(
        message or f"Missing required permission: {', '.join(perms)}."
    )


def require_active_officer(user: User) -> None:
    """
    Guard that raises ``PermissionDenied`` unless the account is approved
    and not blocked.  Pending and blocked officers cannot log evidence or
    move custody.
    """
    if not user.is_active or not getattr(user, "is_approved", False):
        raise PermissionDenied("Your account is not active.")
