"""
Core app models.

Provides abstract base models plus the two "always record" ledgers shared
by every app:

* ``NotificationLedgerEntry`` — one row per attempted external notification.
* ``AuditLogEntry``           — one row per privileged administrative action.
"""

from django.conf import settings
from django.db import models

from core.permissions_constants import CorePerms


class TimeStampedModel(models.Model):
    """
    Abstract base model that provides self-updating ``created_at`` and
    ``updated_at`` timestamp fields for every concrete child model.
    """

    created_at = models.DateTimeField(
        auto_now_add=True,
        verbose_name="Created At",
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        verbose_name="Updated At",
    )

    class Meta:
        abstract = True


class AppendOnlyModel(models.Model):
    """
    Abstract base for ledger rows.

    A row may be inserted once.  Saving an existing row or deleting one
    raises ``Conflict``; history is never rewritten through the ORM.
    """

    class Meta:
        abstract = True

    def save(self, *args, **kwargs):
        if not self._state.adding:
            from core.domain.exceptions import Conflict

            raise Conflict(
                f"{type(self).__name__} #{self.pk} is append-only and cannot be modified."
            )
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        from core.domain.exceptions import Conflict

        raise Conflict(
            f"{type(self).__name__} #{self.pk} is append-only and cannot be deleted."
        )


# ────────────────────────────────────────────────────────────────────
# Choice enumerations
# ────────────────────────────────────────────────────────────────────

class NotificationEvent(models.TextChoices):
    """Custody and account events that trigger an outbound email."""

    EVIDENCE_LOGGED = "EVIDENCE_LOGGED", "Evidence Logged"
    CUSTODY_TRANSFERRED = "CUSTODY_TRANSFERRED", "Custody Transferred"
    USER_APPROVED = "USER_APPROVED", "Account Approved"
    USER_BLOCKED = "USER_BLOCKED", "Account Blocked"
    STATION_ASSIGNED = "STATION_ASSIGNED", "Station Assigned"


class DeliveryStatus(models.TextChoices):
    SENT = "SENT", "Sent"
    FAILED = "FAILED", "Failed"


class AuditAction(models.TextChoices):
    """Privileged administrative actions recorded in the audit trail."""

    USER_APPROVED = "USER_APPROVED", "User Approved"
    USER_BLOCKED = "USER_BLOCKED", "User Blocked"
    ROLE_CHANGED = "ROLE_CHANGED", "Role Changed"
    STATION_ASSIGNED = "STATION_ASSIGNED", "Station Assigned"
    CASE_CLOSED = "CASE_CLOSED", "Case Closed"


# ────────────────────────────────────────────────────────────────────
# Ledgers
# ────────────────────────────────────────────────────────────────────

class NotificationLedgerEntry(AppendOnlyModel):
    """
    Durable record of a single notification attempt.

    Exactly one row is written per attempt, whether the transport
    succeeded (``SENT``) or raised (``FAILED`` + ``error_message``).
    ``reference_id`` points back to the evidence item, transfer entry or
    account that triggered the email.
    """

    event_type = models.CharField(
        max_length=40,
        choices=NotificationEvent.choices,
        db_index=True,
        verbose_name="Event Type",
    )
    recipient_email = models.CharField(
        max_length=254,
        blank=True,
        default="",
        verbose_name="Recipient",
    )
    subject = models.CharField(
        max_length=255,
        blank=True,
        default="",
        verbose_name="Subject",
    )
    reference_id = models.CharField(
        max_length=64,
        blank=True,
        default="",
        db_index=True,
        verbose_name="Reference ID",
    )
    delivery_status = models.CharField(
        max_length=10,
        choices=DeliveryStatus.choices,
        verbose_name="Delivery Status",
    )
    error_message = models.TextField(
        null=True,
        blank=True,
        verbose_name="Error Detail",
    )
    attempted_at = models.DateTimeField(
        auto_now_add=True,
        db_index=True,
        verbose_name="Attempted At",
    )

    class Meta:
        verbose_name = "Notification Ledger Entry"
        verbose_name_plural = "Notification Ledger"
        ordering = ["-attempted_at", "-id"]
        constraints = [
            models.CheckConstraint(
                condition=(
                    models.Q(delivery_status=DeliveryStatus.SENT, error_message__isnull=True)
                    | models.Q(delivery_status=DeliveryStatus.FAILED, error_message__isnull=False)
                ),
                name="notification_error_only_when_failed",
            ),
        ]
        permissions = [
            (CorePerms.CAN_VIEW_LEDGERS, "Can view administrative ledgers"),
        ]

    def __str__(self):
        return f"[{self.delivery_status}] {self.event_type} → {self.recipient_email or '-'}"


class AuditLogEntry(AppendOnlyModel):
    """
    Actor / action / target record for a privileged administrative
    operation (approve or block an account, change a role, assign a
    station, close a case).
    """

    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="audit_entries",
        verbose_name="Actor",
    )
    actor_name = models.CharField(
        max_length=255,
        blank=True,
        default="",
        verbose_name="Actor Display Name",
    )
    action_type = models.CharField(
        max_length=40,
        choices=AuditAction.choices,
        db_index=True,
        verbose_name="Action",
    )
    target_type = models.CharField(
        max_length=40,
        verbose_name="Target Type",
    )
    target_id = models.CharField(
        max_length=64,
        blank=True,
        default="",
        verbose_name="Target ID",
    )
    details = models.JSONField(
        default=dict,
        blank=True,
        verbose_name="Details",
    )
    ip_address = models.GenericIPAddressField(
        null=True,
        blank=True,
        verbose_name="Source Address",
    )
    created_at = models.DateTimeField(
        auto_now_add=True,
        db_index=True,
        verbose_name="Created At",
    )

    class Meta:
        verbose_name = "Audit Log Entry"
        verbose_name_plural = "Audit Log"
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return f"{self.actor_name or 'system'}: {self.action_type} {self.target_type}#{self.target_id}"


class YearlySequence(models.Model):
    """
    Per-year counter backing human-readable identifiers
    (``EVD-2026-000001``, ``KSP-2026-000001``).

    One row per ``(name, year)``.  The row is locked and incremented
    inside the same transaction that inserts the numbered record, so a
    rolled-back insert also rolls back its number.
    """

    name = models.CharField(
        max_length=40,
        verbose_name="Sequence Name",
    )
    year = models.PositiveSmallIntegerField(
        verbose_name="Year",
    )
    last_value = models.PositiveIntegerField(
        default=0,
        verbose_name="Last Issued Value",
    )

    class Meta:
        verbose_name = "Yearly Sequence"
        verbose_name_plural = "Yearly Sequences"
        constraints = [
            models.UniqueConstraint(
                fields=["name", "year"],
                name="unique_sequence_per_year",
            ),
        ]

    def __str__(self):
        return f"{self.name}/{self.year} @ {self.last_value}"
