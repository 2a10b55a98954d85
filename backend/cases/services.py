"""
Cases app Service Layer.

This module is the **single source of truth** for all business logic
in the ``cases`` app.  Views must remain thin: validate input via
serializers, call a service method, and return the result wrapped in
a DRF ``Response``.

Architecture
------------
- ``CaseQueryService``     — Listing (search + newest-first) and lookup.
- ``CaseRegistryService``  — Case registration and closure.

Lifecycle
---------
  OPEN ──close──▶ CLOSED

Evidence can only be logged for, and transferred within, an ``OPEN``
case.  ``CaseQueryService.require_open_case`` is the guard the custody
core calls from inside its own transactions.
"""

from __future__ import annotations

import logging
from typing import Any

from django.conf import settings
from django.db import transaction
from django.db.models import Q, QuerySet
from django.utils import timezone

from core.domain.access import require_active_officer, require_permission
from core.domain.audit import AuditService
from core.domain.exceptions import Conflict, DomainError, NotFound
from core.domain.sequences import next_yearly_code
from core.domain.transactions import (
    atomic_transition,
    lock_for_share,
    translate_storage_errors,
)
from core.models import AuditAction
from core.pagination import search_term
from core.permissions_constants import CasesPerms

from .models import Case, CaseStatus

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════
#  Case Query Service
# ═══════════════════════════════════════════════════════════════════


class CaseQueryService:
    """Read access to the case registry."""

    @staticmethod
    def list_cases(
        *,
        search: str | None = None,
        status: str | None = None,
    ) -> QuerySet[Case]:
        """
        Cases newest-first.  ``search`` (at least two characters) matches
        case number, title, type and station name.
        """
        qs = Case.objects.select_related("created_by").order_by("-created_at", "-id")

        if status:
            qs = qs.filter(status=status)

        search = search_term(search)
        if search:
            qs = qs.filter(
                Q(case_number__icontains=search)
                | Q(title__icontains=search)
                | Q(case_type__icontains=search)
                | Q(station_name__icontains=search)
            )
        return qs

    @staticmethod
    def get_case(case_id: int) -> Case:
        try:
            return Case.objects.select_related("created_by").get(pk=case_id)
        except Case.DoesNotExist:
            raise NotFound(f"Case with id {case_id} not found.")

    @staticmethod
    def require_open_case(case_id: int, *, action: str) -> Case:
        """
        Share-lock a case and refuse ``action`` unless it is ``OPEN``.

        Must be called inside the caller's ``atomic()`` block.  The shared
        lock lets logging and transfers on the same case run side by side,
        while ``close_case`` waits for them to commit; a transfer that
        waited on a close re-reads the case and sees it ``CLOSED``.

        Raises:
            NotFound: No such case.
            Conflict: The case is closed.
        """
        case = lock_for_share(Case, case_id)
        if not case.is_open:
            raise Conflict(f"Case {case.case_number} is closed; {action} is not allowed.")
        return case


# ═══════════════════════════════════════════════════════════════════
#  Case Registry Service
# ═══════════════════════════════════════════════════════════════════


class CaseRegistryService:
    """Registration and closure of cases."""

    _REQUIRED_FIELDS = ("title", "case_type", "station_name")

    @staticmethod
    def create_case(validated_data: dict[str, Any], requesting_user: Any) -> Case:
        """
        Register a new ``OPEN`` case.

        The case number is drawn from the per-year ``case`` sequence inside
        the same transaction as the insert.
        """
        require_active_officer(requesting_user)

        data = {
            key: value.strip() if isinstance(value, str) else value
            for key, value in validated_data.items()
        }
        missing = [f for f in CaseRegistryService._REQUIRED_FIELDS if not data.get(f)]
        if missing:
            raise DomainError(f"Missing required field(s): {', '.join(missing)}.")

        with translate_storage_errors("case registration"):
            with transaction.atomic():
                case = Case.objects.create(
                    case_number=next_yearly_code("case", settings.CASE_NUMBER_PREFIX),
                    created_by=requesting_user,
                    status=CaseStatus.OPEN,
                    **data,
                )

        logger.info("Case %s (#%d) registered by %s", case.case_number, case.pk, requesting_user)
        return case

    @staticmethod
    def close_case(case_id: int, requesting_user: Any, ip_address: str | None = None) -> Case:
        """
        ``OPEN → CLOSED``.  Requires ``cases.can_close_case``.

        Closing freezes custody: no further evidence can be logged and no
        transfers can be made for the case.
        """
        require_permission(
            requesting_user,
            f"cases.{CasesPerms.CAN_CLOSE_CASE}",
            message="Only administrators may close cases.",
        )
        case = CaseQueryService.get_case(case_id)

        with translate_storage_errors("case closure"):
            atomic_transition(
                instance=case,
                target_status=CaseStatus.CLOSED,
                allowed_sources=[CaseStatus.OPEN],
                extra_updates={"closed_at": timezone.now()},
            )

        logger.info("Case %s closed by %s", case.case_number, requesting_user)
        AuditService.record(
            actor=requesting_user,
            action_type=AuditAction.CASE_CLOSED,
            target_type="CASE",
            target_id=case.pk,
            details={"case_number": case.case_number},
            ip_address=ip_address,
        )
        return case
