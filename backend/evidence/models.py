"""
Evidence app models.

Three records make up the custody core:

* ``Evidence``          — the catalog entry of a seized item.  Written once,
                          never modified.
* ``EvidenceCustody``   — the single mutable "who / where holds it now"
                          row per item (one-to-one with ``Evidence``).
* ``EvidenceTransfer``  — the append-only ledger of completed custody
                          changes.  Ordered by ``created_at`` its last entry
                          always equals the current ``EvidenceCustody``.

``EvidenceCustody`` is only ever written inside the locked transfer
transaction in ``services.CustodyTransferService``.
"""

from django.conf import settings
from django.db import models
from django.db.models import F, Q
from django.utils import timezone

from core.models import AppendOnlyModel


# ────────────────────────────────────────────────────────────────────
# Choice enumerations
# ────────────────────────────────────────────────────────────────────

class TransferType(models.TextChoices):
    """Nature of a custody change."""

    TRANSFER = "TRANSFER", "Transfer"
    RETURN = "RETURN", "Return"
    EXTERNAL = "EXTERNAL", "External (lab / court)"


# ────────────────────────────────────────────────────────────────────
# Evidence catalog
# ────────────────────────────────────────────────────────────────────

class Evidence(AppendOnlyModel):
    """
    A seized item logged against a case.

    ``evidence_code`` (``EVD-2026-000001``) is issued from a per-year
    sequence in the same transaction as the insert.  The attachment is
    the photographic proof of seizure and is mandatory.
    """

    case = models.ForeignKey(
        "cases.Case",
        on_delete=models.PROTECT,
        related_name="evidence_items",
        verbose_name="Case",
    )
    evidence_code = models.CharField(
        max_length=30,
        unique=True,
        editable=False,
        verbose_name="Evidence Code",
    )
    description = models.TextField(
        max_length=2000,
        verbose_name="Description",
    )
    category = models.CharField(
        max_length=80,
        verbose_name="Category",
    )
    station = models.CharField(
        max_length=120,
        verbose_name="Originating Station",
    )
    logged_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="logged_evidence",
        verbose_name="Logged By",
    )
    attachment = models.FileField(
        upload_to="evidence/%Y/%m/",
        max_length=255,
        verbose_name="Seizure Photo",
    )
    created_at = models.DateTimeField(
        auto_now_add=True,
        db_index=True,
        verbose_name="Logged At",
    )

    class Meta:
        verbose_name = "Evidence"
        verbose_name_plural = "Evidence"
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return f"{self.evidence_code} — {self.category}"


# ────────────────────────────────────────────────────────────────────
# Current custody
# ────────────────────────────────────────────────────────────────────

class EvidenceCustody(models.Model):
    """
    Current holder and location of one evidence item.

    Created together with its ``Evidence`` and then overwritten once per
    committed transfer.  The one-to-one key is the lock target that
    serializes concurrent transfers of the same item.
    """

    evidence = models.OneToOneField(
        Evidence,
        on_delete=models.PROTECT,
        related_name="custody",
        verbose_name="Evidence",
    )
    current_holder = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="held_evidence",
        verbose_name="Current Holder",
    )
    current_location = models.CharField(
        max_length=120,
        verbose_name="Current Location",
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        verbose_name="Updated At",
    )

    class Meta:
        verbose_name = "Evidence Custody"
        verbose_name_plural = "Evidence Custody"

    def __str__(self):
        return f"{self.evidence_id} held by {self.current_holder_id} at {self.current_location}"

    def delete(self, *args, **kwargs):
        from core.domain.exceptions import Conflict

        raise Conflict("Custody records are never deleted.")


# ────────────────────────────────────────────────────────────────────
# Transfer ledger
# ────────────────────────────────────────────────────────────────────

class EvidenceTransfer(AppendOnlyModel):
    """
    One completed custody change.  Never updated, never deleted.

    ``from_*`` is the custody state read under lock; ``to_*`` is the state
    written in the same transaction.
    """

    evidence = models.ForeignKey(
        Evidence,
        on_delete=models.PROTECT,
        related_name="transfers",
        verbose_name="Evidence",
    )
    case = models.ForeignKey(
        "cases.Case",
        on_delete=models.PROTECT,
        related_name="evidence_transfers",
        verbose_name="Case",
    )
    transfer_type = models.CharField(
        max_length=10,
        choices=TransferType.choices,
        default=TransferType.TRANSFER,
        verbose_name="Transfer Type",
    )
    initiated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="initiated_transfers",
        verbose_name="Initiated By",
    )
    from_holder = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="released_transfers",
        verbose_name="Previous Holder",
    )
    to_holder = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="received_transfers",
        verbose_name="New Holder",
    )
    from_location = models.CharField(
        max_length=120,
        verbose_name="Previous Location",
    )
    to_location = models.CharField(
        max_length=120,
        verbose_name="New Location",
    )
    reason = models.TextField(
        max_length=500,
        verbose_name="Reason",
    )
    transfer_date = models.DateTimeField(
        default=timezone.now,
        verbose_name="Transfer Date",
    )
    created_at = models.DateTimeField(
        auto_now_add=True,
        verbose_name="Recorded At",
    )

    class Meta:
        verbose_name = "Evidence Transfer"
        verbose_name_plural = "Evidence Transfers"
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(
                fields=["evidence", "created_at"],
                name="transfer_evidence_created_idx",
            ),
        ]
        constraints = [
            models.CheckConstraint(
                condition=~Q(reason=""),
                name="transfer_reason_not_empty",
            ),
            models.CheckConstraint(
                condition=~(Q(from_holder=F("to_holder")) & Q(from_location=F("to_location"))),
                name="transfer_changes_custody",
            ),
        ]

    def __str__(self):
        return (
            f"Transfer #{self.pk} of evidence {self.evidence_id}: "
            f"{self.from_holder_id}@{self.from_location} → {self.to_holder_id}@{self.to_location}"
        )
