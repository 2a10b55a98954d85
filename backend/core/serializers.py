"""
Core app serializers.

**Response-only** serializers for the dashboard and the system constants
(plain dicts produced by ``core.services``), plus read serializers and
query-parameter filters for the two side-effect ledgers.

These serializers never import models from other apps at module level.
"""

from __future__ import annotations

from rest_framework import serializers

from .models import (
    AuditAction,
    AuditLogEntry,
    DeliveryStatus,
    NotificationEvent,
    NotificationLedgerEntry,
)


# ════════════════════════════════════════════════════════════════════
#  Dashboard Statistics
# ════════════════════════════════════════════════════════════════════

class EvidenceByCategorySerializer(serializers.Serializer):
    category = serializers.CharField()
    count = serializers.IntegerField()


class RecentTransferSerializer(serializers.Serializer):
    """
    One row of the recent-transfer feed.

    Example::

        {
            "timestamp": "2026-03-01T10:20:00Z",
            "evidence_code": "EVD-2026-000004",
            "description": "Ali Rezaei (Central) → Sara Karimi (Lab)"
        }
    """

    timestamp = serializers.DateTimeField()
    evidence_code = serializers.CharField()
    description = serializers.CharField()


class DashboardStatsSerializer(serializers.Serializer):
    """
    Top-level response serializer for ``GET /api/core/dashboard/``.

    ``custody_records`` equals ``total_evidence`` on a healthy system.
    """

    # ── Scalar counters ──────────────────────────────────────────────
    total_cases = serializers.IntegerField()
    open_cases = serializers.IntegerField()
    closed_cases = serializers.IntegerField()
    total_evidence = serializers.IntegerField()
    custody_records = serializers.IntegerField(
        help_text="Custody rows; one per evidence item.",
    )
    total_transfers = serializers.IntegerField()
    total_officers = serializers.IntegerField(
        help_text="Active, approved accounts.",
    )
    notifications_sent = serializers.IntegerField()
    notifications_failed = serializers.IntegerField()

    # ── Breakdowns ───────────────────────────────────────────────────
    evidence_by_category = EvidenceByCategorySerializer(many=True)
    recent_transfers = RecentTransferSerializer(many=True)


# ════════════════════════════════════════════════════════════════════
#  Side-effect Ledgers
# ════════════════════════════════════════════════════════════════════

class NotificationLedgerFilterSerializer(serializers.Serializer):
    """Query parameters for ``GET /api/core/notification-ledger/``."""

    search = serializers.CharField(required=False, allow_blank=True, max_length=100)
    event_type = serializers.ChoiceField(choices=NotificationEvent.choices, required=False)
    delivery_status = serializers.ChoiceField(choices=DeliveryStatus.choices, required=False)


class AuditLogFilterSerializer(serializers.Serializer):
    """Query parameters for ``GET /api/core/audit-logs/``."""

    search = serializers.CharField(required=False, allow_blank=True, max_length=100)
    action_type = serializers.ChoiceField(choices=AuditAction.choices, required=False)


class NotificationLedgerEntrySerializer(serializers.ModelSerializer):
    class Meta:
        model = NotificationLedgerEntry
        fields = [
            "id",
            "event_type",
            "recipient_email",
            "subject",
            "reference_id",
            "delivery_status",
            "error_message",
            "attempted_at",
        ]
        read_only_fields = fields


class AuditLogEntrySerializer(serializers.ModelSerializer):
    action_display = serializers.CharField(source="get_action_type_display", read_only=True)

    class Meta:
        model = AuditLogEntry
        fields = [
            "id",
            "actor",
            "actor_name",
            "action_type",
            "action_display",
            "target_type",
            "target_id",
            "details",
            "ip_address",
            "created_at",
        ]
        read_only_fields = fields


# ════════════════════════════════════════════════════════════════════
#  System Constants / Enums
# ════════════════════════════════════════════════════════════════════

class ChoiceItemSerializer(serializers.Serializer):
    """
    A single key-label pair representing one choice/enum option.

    Example::

        {"value": "TRANSFER", "label": "Transfer"}
    """

    value = serializers.CharField()
    label = serializers.CharField()


class RoleHierarchyItemSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    name = serializers.CharField()
    hierarchy_level = serializers.IntegerField()


class SystemConstantsSerializer(serializers.Serializer):
    """
    Top-level response serializer for ``GET /api/core/constants/``.

    Lets the frontend build dropdowns, filters and labels without
    hardcoding values.
    """

    case_statuses = ChoiceItemSerializer(many=True)
    transfer_types = ChoiceItemSerializer(many=True)
    user_statuses = ChoiceItemSerializer(many=True)
    notification_events = ChoiceItemSerializer(many=True)
    delivery_statuses = ChoiceItemSerializer(many=True)
    audit_actions = ChoiceItemSerializer(many=True)
    role_hierarchy = RoleHierarchyItemSerializer(many=True)
    stations = serializers.ListField(child=serializers.CharField())
