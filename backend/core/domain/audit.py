"""
core.domain.audit — Best-effort audit trail for privileged actions.

Every administrative action (approve / block an account, change a role,
assign a station, close a case) calls ``AuditService.record`` *after* its
own transaction has committed.  The write is always attempted; a failure
is logged and swallowed so it never blocks or rolls back the action it
accompanies.

Usage::

    from core.domain.audit import AuditService
    from core.models import AuditAction

    AuditService.record(
        actor=request.user,
        action_type=AuditAction.USER_BLOCKED,
        target_type="USER",
        target_id=user.pk,
        details={"email": user.email},
        ip_address=client_ip(request),
    )
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from django.db import DatabaseError, transaction

if TYPE_CHECKING:
    from accounts.models import User
    from core.models import AuditLogEntry

logger = logging.getLogger(__name__)


def client_ip(request: Any) -> str | None:
    """Originating network address of a DRF/Django request."""
    if request is None:
        return None
    return request.META.get("REMOTE_ADDR") or None


class AuditService:
    """Stateless writer for ``AuditLogEntry`` rows."""

    @staticmethod
    def record(
        *,
        actor: User | None,
        action_type: str,
        target_type: str,
        target_id: Any = "",
        details: dict[str, Any] | None = None,
        ip_address: str | None = None,
    ) -> AuditLogEntry | None:
        """
        Write one audit row.  Returns the row, or ``None`` if the write
        failed (the failure is logged, never raised).
        """
        from core.models import AuditLogEntry  # lazy: avoids circular import

        actor_name = ""
        if actor is not None:
            actor_name = actor.get_full_name() or actor.get_username()

        try:
            with transaction.atomic():
                entry = AuditLogEntry.objects.create(
                    actor=actor,
                    actor_name=actor_name,
                    action_type=action_type,
                    target_type=target_type,
                    target_id="" if target_id is None else str(target_id),
                    details=details or {},
                    ip_address=ip_address,
                )
        except DatabaseError:
            logger.error(
                "Audit log write failed: actor=%s action=%s target=%s#%s",
                actor_name or "system",
                action_type,
                target_type,
                target_id,
                exc_info=True,
            )
            return None

        logger.info(
            "Audit: %s performed %s on %s#%s",
            actor_name or "system",
            action_type,
            target_type,
            target_id,
        )
        return entry
