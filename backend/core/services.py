"""
Core app services — **Service Layer**.

Contains the cross-app aggregation behind the dashboard and the read
models over the two side-effect ledgers (notification ledger, audit
log).  Views delegate everything to the classes defined here.

╔══════════════════════════════════════════════════════════════════════╗
║  CROSS-APP IMPORT RULEBOOK                                         ║
║                                                                    ║
║  The core app is imported by every other app.  To prevent          ║
║  circular imports at module load time:                             ║
║                                                                    ║
║  1. NEVER import models from other apps at the **module level**.   ║
║     Resolve them with ``apps.get_model`` inside the method.        ║
║                                                                    ║
║  2. Choice/enum classes live in the owning app's ``models.py``;    ║
║     import them lazily inside methods too.                         ║
║                                                                    ║
║  3. Prefer ``.aggregate()`` / ``.values().annotate()`` over        ║
║     Python-side loops.                                             ║
╚══════════════════════════════════════════════════════════════════════╝
"""

from __future__ import annotations

from typing import Any, TYPE_CHECKING

from django.apps import apps
from django.db.models import Count, Q, QuerySet

from core.domain.access import require_permission
from core.models import AuditLogEntry, DeliveryStatus, NotificationLedgerEntry
from core.pagination import search_term
from core.permissions_constants import CorePerms

if TYPE_CHECKING:
    from accounts.models import User

_VIEW_LEDGERS = f"core.{CorePerms.CAN_VIEW_LEDGERS}"


# ════════════════════════════════════════════════════════════════════
#  Dashboard Aggregation Service
# ════════════════════════════════════════════════════════════════════

class DashboardAggregationService:
    """
    Produces the statistics dict consumed by ``DashboardStatsSerializer``.

    Any authenticated officer sees the counters.  ``custody_records``
    always equals ``total_evidence``; a mismatch means an item was logged
    without its custody row.
    """

    #: Number of transfers in the recent-activity feed.
    RECENT_TRANSFER_LIMIT: int = 10

    def __init__(self, user: User) -> None:
        self.user = user

    # ── Public API ──────────────────────────────────────────────────

    def get_stats(self) -> dict[str, Any]:
        """Return the full dashboard statistics dictionary."""
        from cases.models import CaseStatus

        Case = apps.get_model("cases", "Case")
        Evidence = apps.get_model("evidence", "Evidence")
        EvidenceCustody = apps.get_model("evidence", "EvidenceCustody")
        EvidenceTransfer = apps.get_model("evidence", "EvidenceTransfer")

        case_counts = Case.objects.aggregate(
            total_cases=Count("id"),
            open_cases=Count("id", filter=Q(status=CaseStatus.OPEN)),
            closed_cases=Count("id", filter=Q(status=CaseStatus.CLOSED)),
        )
        notification_counts = NotificationLedgerEntry.objects.aggregate(
            notifications_sent=Count("id", filter=Q(delivery_status=DeliveryStatus.SENT)),
            notifications_failed=Count("id", filter=Q(delivery_status=DeliveryStatus.FAILED)),
        )

        return {
            **case_counts,
            "total_evidence": Evidence.objects.count(),
            "custody_records": EvidenceCustody.objects.count(),
            "total_transfers": EvidenceTransfer.objects.count(),
            "total_officers": self._get_officer_count(),
            **notification_counts,
            "evidence_by_category": self._get_evidence_by_category(Evidence.objects.all()),
            "recent_transfers": self._get_recent_transfers(),
        }

    # ── Private helpers ─────────────────────────────────────────────

    def _get_officer_count(self) -> int:
        """Active, approved accounts."""
        from accounts.models import UserStatus

        User = apps.get_model("accounts", "User")
        return User.objects.filter(is_active=True, status=UserStatus.ACTIVE).count()

    def _get_evidence_by_category(self, evidence_qs: QuerySet) -> list[dict[str, Any]]:
        rows = (
            evidence_qs
            .values("category")
            .annotate(count=Count("id"))
            .order_by("-count", "category")
        )
        return [{"category": row["category"], "count": row["count"]} for row in rows]

    def _get_recent_transfers(self) -> list[dict[str, Any]]:
        """Latest committed transfers, newest first."""
        EvidenceTransfer = apps.get_model("evidence", "EvidenceTransfer")

        transfers = (
            EvidenceTransfer.objects
            .select_related("evidence", "from_holder", "to_holder")
            .order_by("-created_at", "-id")[: self.RECENT_TRANSFER_LIMIT]
        )
        return [
            {
                "timestamp": t.created_at,
                "evidence_code": t.evidence.evidence_code,
                "description": (
                    f"{t.from_holder.display_name} ({t.from_location}) → "
                    f"{t.to_holder.display_name} ({t.to_location})"
                ),
            }
            for t in transfers
        ]


# ════════════════════════════════════════════════════════════════════
#  Side-effect Ledger Queries
# ════════════════════════════════════════════════════════════════════

class LedgerQueryService:
    """
    Read models over the notification ledger and the audit log.

    Both require ``core.can_view_ledgers`` (administrators, auditors).
    Results are newest first; ``search`` shorter than two characters is
    ignored.
    """

    @staticmethod
    def notification_ledger(
        requested_by: Any,
        *,
        search: str | None = None,
        event_type: str | None = None,
        delivery_status: str | None = None,
    ) -> QuerySet[NotificationLedgerEntry]:
        require_permission(requested_by, _VIEW_LEDGERS, message="Only administrators and auditors may view the notification ledger.")

        qs = NotificationLedgerEntry.objects.order_by("-attempted_at", "-id")
        if event_type:
            qs = qs.filter(event_type=event_type)
        if delivery_status:
            qs = qs.filter(delivery_status=delivery_status)
        search = search_term(search)
        if search:
            qs = qs.filter(
                Q(recipient_email__icontains=search)
                | Q(subject__icontains=search)
                | Q(reference_id=search)
            )
        return qs

    @staticmethod
    def audit_log(
        requested_by: Any,
        *,
        search: str | None = None,
        action_type: str | None = None,
    ) -> QuerySet[AuditLogEntry]:
        require_permission(requested_by, _VIEW_LEDGERS, message="Only administrators and auditors may view the audit log.")

        qs = AuditLogEntry.objects.order_by("-created_at", "-id")
        if action_type:
            qs = qs.filter(action_type=action_type)
        search = search_term(search)
        if search:
            qs = qs.filter(
                Q(actor_name__icontains=search)
                | Q(target_type__icontains=search)
                | Q(target_id=search)
            )
        return qs


# ════════════════════════════════════════════════════════════════════
#  System Constants Service
# ════════════════════════════════════════════════════════════════════

class SystemConstantsService:
    """
    Gathers the system-wide choice enumerations and the role hierarchy
    into a single dict for the frontend.

    Stateless; all constants are public information needed to render
    dropdowns and labels.
    """

    @staticmethod
    def get_constants() -> dict[str, Any]:
        """Return all system constants as a dict."""
        from accounts.models import StationStatus, UserStatus
        from cases.models import CaseStatus
        from core.models import AuditAction, NotificationEvent
        from evidence.models import TransferType

        Role = apps.get_model("accounts", "Role")
        Station = apps.get_model("accounts", "Station")

        to_list = SystemConstantsService._choices_to_list

        return {
            "case_statuses": to_list(CaseStatus),
            "transfer_types": to_list(TransferType),
            "user_statuses": to_list(UserStatus),
            "notification_events": to_list(NotificationEvent),
            "delivery_statuses": to_list(DeliveryStatus),
            "audit_actions": to_list(AuditAction),
            "role_hierarchy": list(
                Role.objects.order_by("-hierarchy_level").values("id", "name", "hierarchy_level")
            ),
            "stations": list(Station.objects.filter(status=StationStatus.ACTIVE).order_by("name").values_list("name", flat=True)),
        }

    @staticmethod
    def _choices_to_list(choices_class: type) -> list[dict[str, str]]:
        return [
            {"value": str(value), "label": str(label)}
            for value, label in choices_class.choices
        ]
