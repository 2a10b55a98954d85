"""
Evidence app Service Layer.

This module is the **single source of truth** for the custody core.
Views must remain thin: validate input via serializers, call a service
method, and return the result wrapped in a DRF ``Response``.

Architecture
------------
- ``EvidenceLoggingService``   — Log an item: code + catalog row + initial
                                 custody, all in one transaction.
- ``CustodyTransferService``   — The locked transfer protocol.
- ``EvidenceQueryService``     — Evidence lookups and the admin evidence ledger.
- ``CustodyQueryService``      — Current custody lookup.
- ``TransferQueryService``     — Per-item history and the admin transfer ledger.

Transfer protocol
-----------------
  validate input ─▶ resolve destination officer
      ┌────────────── atomic() ──────────────┐
      │ lock timeout                         │
      │ evidence exists, case is OPEN        │
      │ SELECT … FOR UPDATE custody row      │
      │ reject no-op                         │
      │ INSERT ledger entry                  │
      │ UPDATE custody row                   │
      └──────────────── commit ──────────────┘
  notify new holder (recorded, never raises) ─▶ return

Two requests for the same item serialize on the custody row lock; the
second one re-reads the committed state before deciding.  Requests for
different items never wait on each other.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from django.conf import settings
from django.db import transaction
from django.db.models import Q, QuerySet

from accounts.services import OfficerDirectoryService
from cases.services import CaseQueryService
from core.domain.access import require_active_officer, require_permission
from core.domain.exceptions import DomainError, NoOpTransfer, NotFound
from core.domain.notifications import NotificationService
from core.domain.sequences import next_yearly_code
from core.domain.transactions import (
    apply_lock_timeout,
    lock_for_update,
    translate_storage_errors,
)
from core.models import NotificationEvent
from core.pagination import search_term
from core.permissions_constants import CorePerms

from .models import Evidence, EvidenceCustody, EvidenceTransfer, TransferType

logger = logging.getLogger(__name__)

_VIEW_LEDGERS = f"core.{CorePerms.CAN_VIEW_LEDGERS}"

#: Field length limits shared with the serializers.
MAX_LOCATION_LENGTH = 120
MAX_REASON_LENGTH = 500


@dataclass(frozen=True)
class LoggedEvidence:
    evidence: Evidence
    notification_delivered: bool


@dataclass(frozen=True)
class CompletedTransfer:
    transfer: EvidenceTransfer
    notification_delivered: bool


def _required_text(value: Any, field: str, max_length: int | None = None) -> str:
    text = str(value or "").strip()
    if not text:
        raise DomainError(f"'{field}' is required and cannot be empty.")
    if max_length is not None and len(text) > max_length:
        raise DomainError(f"'{field}' must be at most {max_length} characters.")
    return text


def _notify(**kwargs: Any) -> bool:
    """
    Post-commit notification.  ``NotificationService.dispatch`` already
    records and absorbs transport failures; anything else it raises is
    logged here so the committed operation still reports success.
    """
    try:
        return NotificationService.dispatch(**kwargs).delivered
    except Exception:
        logger.exception(
            "Notification [%s] (ref=%s) failed outside the transport",
            kwargs.get("event_type"),
            kwargs.get("reference_id"),
        )
        return False


# ═══════════════════════════════════════════════════════════════════
#  Evidence Logging
# ═══════════════════════════════════════════════════════════════════


class EvidenceLoggingService:
    """Creates catalog entries together with their initial custody."""

    @staticmethod
    def log_evidence(
        *,
        case_id: int,
        description: str,
        category: str,
        station: str,
        attachment: Any,
        logged_by: Any,
    ) -> LoggedEvidence:
        """
        Log a seized item against an open case.

        Steps:
            1. Validate input (all text fields non-empty, attachment present).
            2. Inside one transaction: check the case is ``OPEN``, issue
               the next ``EVD-<year>-nnnnnn`` code, insert the evidence
               row and its custody row (holder = ``logged_by``,
               location = ``station``).
            3. After commit: email the logging officer (recorded in the
               notification ledger whatever the outcome).

        Raises:
            PermissionDenied: ``logged_by`` is pending or blocked.
            DomainError:      Missing field or attachment.
            NotFound:         No such case.
            Conflict:         The case is closed.
            StorageError:     The transaction failed; nothing was written.
        """
        require_active_officer(logged_by)

        description = _required_text(description, "description", 2000)
        category = _required_text(category, "category", 80)
        station = _required_text(station, "station", MAX_LOCATION_LENGTH)
        if not attachment:
            raise DomainError("An attachment (photo of the seized item) is required.")

        with translate_storage_errors("evidence logging"):
            with transaction.atomic():
                apply_lock_timeout()
                case = CaseQueryService.require_open_case(case_id, action="logging evidence")

                evidence = Evidence.objects.create(
                    case=case,
                    evidence_code=next_yearly_code("evidence", settings.EVIDENCE_CODE_PREFIX),
                    description=description,
                    category=category,
                    station=station,
                    logged_by=logged_by,
                    attachment=attachment,
                )
                EvidenceCustody.objects.create(
                    evidence=evidence,
                    current_holder=logged_by,
                    current_location=station,
                )

        logger.info(
            "Evidence %s (#%d) logged for case %s by user #%d at %s",
            evidence.evidence_code, evidence.pk, case.case_number, logged_by.pk, station,
        )

        delivered = _notify(
            event_type=NotificationEvent.EVIDENCE_LOGGED,
            recipient_email=logged_by.email,
            context={
                "evidence_code": evidence.evidence_code,
                "case_number": case.case_number,
                "station": station,
            },
            reference_id=evidence.pk,
        )
        return LoggedEvidence(evidence=evidence, notification_delivered=delivered)


# ═══════════════════════════════════════════════════════════════════
#  Custody Transfer
# ═══════════════════════════════════════════════════════════════════


class CustodyTransferService:
    """The only writer of ``EvidenceCustody`` after creation."""

    @staticmethod
    def transfer_custody(
        *,
        evidence_id: int,
        to_officer: str,
        to_officer_email: str,
        to_location: str,
        reason: str,
        initiated_by: Any,
        transfer_type: str = TransferType.TRANSFER,
    ) -> CompletedTransfer:
        """
        Move custody of one evidence item to another officer and/or
        location.

        Custody and the ledger change together or not at all.  The
        notification to the new holder happens after commit and its
        outcome is only reported, never raised.

        Raises:
            PermissionDenied: ``initiated_by`` is pending or blocked.
            DomainError:      Missing / oversized field or unknown transfer type.
            NotFound:         Destination officer or evidence does not exist.
            InvalidRequest:   Destination identifier and email disagree, or
                              the officer is not active.
            Conflict:         The case is closed.
            NoOpTransfer:     Destination equals the current custody.
            StorageError:     The transaction failed or timed out waiting
                              for the lock; nothing was written.
        """
        # ── 1. Validate & resolve (no storage side effects) ─────────
        require_active_officer(initiated_by)

        to_location = _required_text(to_location, "to_location", MAX_LOCATION_LENGTH)
        reason = _required_text(reason, "reason", MAX_REASON_LENGTH)
        if transfer_type not in TransferType.values:
            raise DomainError(
                f"Unknown transfer type '{transfer_type}'. "
                f"Allowed: {', '.join(TransferType.values)}."
            )
        to_holder = OfficerDirectoryService.resolve_officer(to_officer, to_officer_email)

        with translate_storage_errors("custody transfer"):
            with transaction.atomic():
                apply_lock_timeout()

                # ── 2. Evidence and case ────────────────────────────
                try:
                    evidence = Evidence.objects.select_related("case").get(pk=evidence_id)
                except Evidence.DoesNotExist:
                    raise NotFound(f"Evidence with id {evidence_id} not found.")
                CaseQueryService.require_open_case(evidence.case_id, action="custody transfer")

                # ── 3. Serialization point ──────────────────────────
                custody = lock_for_update(EvidenceCustody, evidence_id=evidence.pk)

                # ── 4. Reject no-op ─────────────────────────────────
                if custody.current_holder_id == to_holder.pk and custody.current_location == to_location:
                    raise NoOpTransfer()

                # ── 5. Ledger entry ─────────────────────────────────
                transfer = EvidenceTransfer.objects.create(
                    evidence=evidence,
                    case_id=evidence.case_id,
                    transfer_type=transfer_type,
                    initiated_by=initiated_by,
                    from_holder_id=custody.current_holder_id,
                    to_holder=to_holder,
                    from_location=custody.current_location,
                    to_location=to_location,
                    reason=reason,
                )

                # ── 6. Custody ──────────────────────────────────────
                CustodyTransferService._advance_custody(custody, to_holder, to_location)

        logger.info(
            "Evidence %s: custody #%d → #%d (%s → %s), transfer #%d by user #%d",
            evidence.evidence_code,
            transfer.from_holder_id, to_holder.pk,
            transfer.from_location, to_location,
            transfer.pk, initiated_by.pk,
        )

        # ── 8. Post-commit notification ─────────────────────────────
        delivered = _notify(
            event_type=NotificationEvent.CUSTODY_TRANSFERRED,
            recipient_email=to_holder.email,
            context={
                "evidence_code": evidence.evidence_code,
                "case_number": evidence.case.case_number,
                "from_holder": transfer.from_holder.display_name,
                "from_location": transfer.from_location,
                "to_holder": to_holder.display_name,
                "to_location": to_location,
                "reason": reason,
            },
            reference_id=transfer.pk,
        )
        return CompletedTransfer(transfer=transfer, notification_delivered=delivered)

    @staticmethod
    def _advance_custody(custody: EvidenceCustody, to_holder: Any, to_location: str) -> None:
        """Overwrite the locked custody row.  Caller holds the lock."""
        custody.current_holder = to_holder
        custody.current_location = to_location
        custody.save(update_fields=["current_holder", "current_location", "updated_at"])


# ═══════════════════════════════════════════════════════════════════
#  Query Services
# ═══════════════════════════════════════════════════════════════════


class EvidenceQueryService:
    """Read access to the evidence catalog."""

    @staticmethod
    def get_evidence(evidence_id: int) -> Evidence:
        try:
            return Evidence.objects.select_related(
                "case", "logged_by", "custody__current_holder",
            ).get(pk=evidence_id)
        except Evidence.DoesNotExist:
            raise NotFound(f"Evidence with id {evidence_id} not found.")

    @staticmethod
    def list_for_case(case_id: int) -> QuerySet[Evidence]:
        """Evidence of one case, newest first."""
        CaseQueryService.get_case(case_id)
        return (
            Evidence.objects
            .filter(case_id=case_id)
            .select_related("logged_by", "custody__current_holder")
            .order_by("-created_at", "-id")
        )

    @staticmethod
    def admin_ledger(
        requested_by: Any,
        *,
        search: str | None = None,
        category: str | None = None,
    ) -> QuerySet[Evidence]:
        """Every evidence item, newest first, for administrators and auditors."""
        require_permission(requested_by, _VIEW_LEDGERS, message="Only administrators and auditors may view the evidence ledger.")

        qs = Evidence.objects.select_related(
            "case", "logged_by", "custody__current_holder",
        ).order_by("-created_at", "-id")

        if category:
            qs = qs.filter(category__iexact=category)
        search = search_term(search)
        if search:
            qs = qs.filter(
                Q(evidence_code__icontains=search)
                | Q(description__icontains=search)
                | Q(category__icontains=search)
                | Q(station__icontains=search)
                | Q(case__case_number__icontains=search)
            )
        return qs


class CustodyQueryService:
    @staticmethod
    def get_current_custody(evidence_id: int) -> EvidenceCustody:
        """Current holder and location, with evidence code, description and case."""
        try:
            return EvidenceCustody.objects.select_related(
                "evidence", "evidence__case", "current_holder",
            ).get(evidence_id=evidence_id)
        except EvidenceCustody.DoesNotExist:
            raise NotFound(f"No custody record for evidence {evidence_id}.")


class TransferQueryService:
    """Read access to the transfer ledger."""

    _RELATED = ("evidence", "case", "initiated_by", "from_holder", "to_holder")

    @staticmethod
    def history(evidence_id: int) -> QuerySet[EvidenceTransfer]:
        """Transfers of one item, most recent first."""
        if not Evidence.objects.filter(pk=evidence_id).exists():
            raise NotFound(f"Evidence with id {evidence_id} not found.")
        return (
            EvidenceTransfer.objects
            .filter(evidence_id=evidence_id)
            .select_related(*TransferQueryService._RELATED)
            .order_by("-created_at", "-id")
        )

    @staticmethod
    def admin_ledger(
        requested_by: Any,
        *,
        search: str | None = None,
        transfer_type: str | None = None,
    ) -> QuerySet[EvidenceTransfer]:
        """Every transfer, most recent first, for administrators and auditors."""
        require_permission(requested_by, _VIEW_LEDGERS, message="Only administrators and auditors may view the transfer ledger.")

        qs = EvidenceTransfer.objects.select_related(
            *TransferQueryService._RELATED,
        ).order_by("-created_at", "-id")

        if transfer_type:
            qs = qs.filter(transfer_type=transfer_type)
        search = search_term(search)
        if search:
            qs = qs.filter(
                Q(evidence__evidence_code__icontains=search)
                | Q(case__case_number__icontains=search)
                | Q(from_location__icontains=search)
                | Q(to_location__icontains=search)
                | Q(reason__icontains=search)
            )
        return qs
