"""
core.domain.notifications — Guaranteed-write email notifications.

Centralises outbound notification delivery so every app uses one
consistent entry-point, and so that every *attempt* leaves exactly one
``NotificationLedgerEntry`` behind.

Design decisions
----------------
* **Called after commit** — services invoke ``NotificationService.dispatch``
  only once their own ``atomic()`` block has exited.  Delivery latency or
  failure can therefore never roll back a custody change.
* **Transport = Django's email backend** (SMTP in production, locmem in
  tests).  ``EMAIL_TIMEOUT`` bounds how long a request waits on SMTP.
* **Never raises** — any transport or rendering error is caught, logged,
  written to the ledger as ``FAILED`` and reported back through
  ``NotificationResult.delivered``.  A failure to write the ledger row
  itself is logged at CRITICAL: it means the notification audit trail is
  unreliable.

Usage::

    from core.domain.notifications import NotificationService
    from core.models import NotificationEvent

    result = NotificationService.dispatch(
        event_type=NotificationEvent.CUSTODY_TRANSFERRED,
        recipient_email=new_holder.email,
        context={"evidence_code": evidence.evidence_code, ...},
        reference_id=transfer.pk,
    )
    if not result.delivered:
        ...  # informational only
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.mail import send_mail
from django.core.validators import validate_email
from django.db import DatabaseError, transaction
from django.utils.html import format_html, strip_tags

from core.domain.exceptions import NotificationError
from core.models import DeliveryStatus, NotificationEvent

if TYPE_CHECKING:
    from core.models import NotificationLedgerEntry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NotificationResult:
    """Outcome of one notification attempt, reported to the caller as information."""

    delivered: bool
    entry: NotificationLedgerEntry | None = None
    error: str | None = None


# ── Event-type → (subject, html body) builders ──────────────────────
# Every interpolated value goes through ``format_html`` and is escaped.
_EVENT_TEMPLATES: dict[str, tuple[str, Callable[[dict[str, Any]], str]]] = {
    NotificationEvent.EVIDENCE_LOGGED: (
        "Evidence Logged – {evidence_code}",
        lambda c: format_html(
            "<h2>Evidence Logged</h2>"
            "<p>Evidence: {}</p><p>Case: {}</p><p>Station: {}</p>",
            c["evidence_code"], c["case_number"], c["station"],
        ),
    ),
    NotificationEvent.CUSTODY_TRANSFERRED: (
        "Custody Transferred – {evidence_code}",
        lambda c: format_html(
            "<h2>Evidence Custody Transferred To You</h2>"
            "<p>Evidence: {}</p><p>Case: {}</p>"
            "<p>From: {} ({})</p><p>To: {} ({})</p><p>Reason: {}</p>",
            c["evidence_code"], c["case_number"],
            c["from_holder"], c["from_location"],
            c["to_holder"], c["to_location"],
            c["reason"],
        ),
    ),
    NotificationEvent.USER_APPROVED: (
        "Account Approved",
        lambda c: format_html(
            "<h2>Account Approved</h2><p>Hello {}</p><p>Your account is now active.</p>",
            c["full_name"],
        ),
    ),
    NotificationEvent.USER_BLOCKED: (
        "Account Blocked",
        lambda c: format_html(
            "<h2>Account Blocked</h2><p>Hello {}</p><p>Your account has been blocked.</p>",
            c["full_name"],
        ),
    ),
    NotificationEvent.STATION_ASSIGNED: (
        "Station Assignment – {station}",
        lambda c: format_html(
            "<h2>Station Assignment Updated</h2><p>Hello {}</p><p>You are now assigned to: {}</p>",
            c["full_name"], c["station"],
        ),
    ),
}


class NotificationService:
    """
    Stateless helper that attempts delivery and always records the attempt.

    All methods are classmethods — no instance state is needed.
    """

    @classmethod
    def dispatch(
        cls,
        *,
        event_type: str,
        recipient_email: str | None,
        context: dict[str, Any],
        reference_id: Any = "",
    ) -> NotificationResult:
        """
        Attempt delivery of ``event_type`` to ``recipient_email`` and write
        one ledger row describing the outcome.

        Returns:
            ``NotificationResult`` — ``delivered`` is ``False`` when the
            transport failed; the error text is also on the ledger row.
        """
        recipient = (recipient_email or "").strip()
        subject = ""
        error: str | None = None

        try:
            subject, html = cls._build(event_type, context)
            cls._send(recipient, subject, html)
        except Exception as exc:
            error = str(exc) or type(exc).__name__
            logger.warning(
                "Notification [%s] to %r failed: %s",
                event_type,
                recipient,
                error,
            )

        entry = cls._record(
            event_type=event_type,
            recipient=recipient,
            subject=subject,
            reference_id=reference_id,
            error=error,
        )

        if error is None:
            logger.info("Notification [%s] sent to %s", event_type, recipient)
        return NotificationResult(delivered=error is None, entry=entry, error=error)

    # ── Private helpers ─────────────────────────────────────────────

    @staticmethod
    def _build(event_type: str, context: dict[str, Any]) -> tuple[str, str]:
        try:
            subject_template, body_builder = _EVENT_TEMPLATES[event_type]
        except KeyError:
            raise NotificationError(f"Unknown notification event: {event_type}")
        subject = f"{settings.EMAIL_SUBJECT_PREFIX}{subject_template.format(**context)}"
        return subject, body_builder(context)

    @staticmethod
    def _send(recipient: str, subject: str, html: str) -> None:
        try:
            validate_email(recipient)
        except ValidationError:
            raise NotificationError("Invalid recipient email")

        sent = send_mail(
            subject=subject,
            message=strip_tags(html),
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[recipient],
            html_message=html,
            fail_silently=False,
        )
        if not sent:
            raise NotificationError("Transport accepted no messages")

    @staticmethod
    def _record(
        *,
        event_type: str,
        recipient: str,
        subject: str,
        reference_id: Any,
        error: str | None,
    ) -> NotificationLedgerEntry | None:
        from core.models import NotificationLedgerEntry  # lazy import — avoids circular deps

        try:
            with transaction.atomic():
                return NotificationLedgerEntry.objects.create(
                    event_type=event_type,
                    recipient_email=recipient,
                    subject=subject[:255],
                    reference_id="" if reference_id is None else str(reference_id),
                    delivery_status=DeliveryStatus.FAILED if error else DeliveryStatus.SENT,
                    error_message=error,
                )
        except DatabaseError:
            logger.critical(
                "Notification ledger write FAILED for [%s] to %r (ref=%s); "
                "the notification audit trail is incomplete",
                event_type,
                recipient,
                reference_id,
                exc_info=True,
            )
            return None
