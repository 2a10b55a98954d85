"""
Cases app models.

The case registry is a collaborator of the custody core: evidence is
always logged against a case, and custody may only move while that case
is ``OPEN``.
"""

from django.conf import settings
from django.db import models

from core.models import TimeStampedModel
from core.permissions_constants import CasesPerms


# ────────────────────────────────────────────────────────────────────
# Choice enumerations
# ────────────────────────────────────────────────────────────────────

class CaseStatus(models.TextChoices):
    OPEN = "OPEN", "Open"
    CLOSED = "CLOSED", "Closed"


# ────────────────────────────────────────────────────────────────────
# Models
# ────────────────────────────────────────────────────────────────────

class Case(TimeStampedModel):
    """
    A registered police case.

    ``case_number`` (``KSP-2026-000042``) is issued from a per-year
    sequence inside the insert transaction.
    """

    case_number = models.CharField(
        max_length=30,
        unique=True,
        editable=False,
        verbose_name="Case Number",
    )
    fir_number = models.CharField(
        max_length=60,
        blank=True,
        default="",
        verbose_name="FIR Number",
    )
    title = models.CharField(
        max_length=150,
        verbose_name="Case Title",
    )
    case_type = models.CharField(
        max_length=80,
        verbose_name="Case Type",
    )
    description = models.TextField(
        max_length=2000,
        blank=True,
        default="",
        verbose_name="Description",
    )
    station_name = models.CharField(
        max_length=120,
        verbose_name="Originating Station",
    )
    status = models.CharField(
        max_length=10,
        choices=CaseStatus.choices,
        default=CaseStatus.OPEN,
        db_index=True,
        verbose_name="Status",
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="created_cases",
        verbose_name="Created By",
    )
    closed_at = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name="Closed At",
    )

    class Meta:
        verbose_name = "Case"
        verbose_name_plural = "Cases"
        ordering = ["-created_at", "-id"]
        permissions = [
            (CasesPerms.CAN_CLOSE_CASE, "Can close an open case"),
        ]

    def __str__(self):
        return f"{self.case_number} — {self.title}"

    @property
    def is_open(self) -> bool:
        return self.status == CaseStatus.OPEN
