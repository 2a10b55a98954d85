"""
Evidence app serializers.

Contains all Request and Response serializers for the Evidence API.
Serializers handle field definitions and field-level validation only.
**No business logic, locking or permission checks live here** — those
belong in ``services.py``.

Structure
---------
1. Filter / query-param serializers
2. Evidence read serializers (list, detail, custody)
3. Write serializers (log evidence, transfer custody)
4. Transfer ledger serializers (history, admin ledger, transfer result)
"""

from __future__ import annotations

from rest_framework import serializers

from .models import Evidence, EvidenceCustody, EvidenceTransfer, TransferType
from .services import MAX_LOCATION_LENGTH, MAX_REASON_LENGTH


# ═══════════════════════════════════════════════════════════════════
#  1. Filter / Query-Parameter Serializers
# ═══════════════════════════════════════════════════════════════════


class EvidenceLedgerFilterSerializer(serializers.Serializer):
    """
    Query parameters for ``GET /api/admin/evidence/``.

    ``search`` matches evidence code, description, category, station or
    case number; fewer than two characters is ignored.
    """

    search = serializers.CharField(required=False, allow_blank=True, max_length=100)
    category = serializers.CharField(required=False, allow_blank=True, max_length=80)


class TransferLedgerFilterSerializer(serializers.Serializer):
    """Query parameters for ``GET /api/admin/transfers/``."""

    search = serializers.CharField(required=False, allow_blank=True, max_length=100)
    transfer_type = serializers.ChoiceField(choices=TransferType.choices, required=False)


# ═══════════════════════════════════════════════════════════════════
#  2. Evidence Read Serializers
# ═══════════════════════════════════════════════════════════════════


class EvidenceListSerializer(serializers.ModelSerializer):
    """Compact row used by the case evidence list and the admin ledger."""

    case_number = serializers.CharField(source="case.case_number", read_only=True)
    logged_by_name = serializers.CharField(source="logged_by.display_name", read_only=True)
    current_holder_name = serializers.CharField(
        source="custody.current_holder.display_name", read_only=True,
    )
    current_location = serializers.CharField(source="custody.current_location", read_only=True)

    class Meta:
        model = Evidence
        fields = [
            "id",
            "evidence_code",
            "case",
            "case_number",
            "category",
            "description",
            "station",
            "logged_by",
            "logged_by_name",
            "current_holder_name",
            "current_location",
            "created_at",
        ]
        read_only_fields = fields


class EvidenceDetailSerializer(serializers.ModelSerializer):
    case_number = serializers.CharField(source="case.case_number", read_only=True)
    logged_by_name = serializers.CharField(source="logged_by.display_name", read_only=True)
    custody = serializers.SerializerMethodField()

    class Meta:
        model = Evidence
        fields = [
            "id",
            "evidence_code",
            "case",
            "case_number",
            "description",
            "category",
            "station",
            "logged_by",
            "logged_by_name",
            "attachment",
            "created_at",
            "custody",
        ]
        read_only_fields = fields

    def get_custody(self, obj: Evidence) -> dict | None:
        custody = getattr(obj, "custody", None)
        if custody is None:
            return None
        return {
            "current_holder": custody.current_holder_id,
            "current_holder_name": custody.current_holder.display_name,
            "current_location": custody.current_location,
            "updated_at": serializers.DateTimeField().to_representation(custody.updated_at),
        }


class CustodySerializer(serializers.ModelSerializer):
    """Current custody of one item, with its code, description and case."""

    evidence_code = serializers.CharField(source="evidence.evidence_code", read_only=True)
    description = serializers.CharField(source="evidence.description", read_only=True)
    case = serializers.IntegerField(source="evidence.case_id", read_only=True)
    case_number = serializers.CharField(source="evidence.case.case_number", read_only=True)
    current_holder_name = serializers.CharField(source="current_holder.display_name", read_only=True)
    current_holder_email = serializers.EmailField(source="current_holder.email", read_only=True)

    class Meta:
        model = EvidenceCustody
        fields = [
            "evidence",
            "evidence_code",
            "description",
            "case",
            "case_number",
            "current_holder",
            "current_holder_name",
            "current_holder_email",
            "current_location",
            "updated_at",
        ]
        read_only_fields = fields


# ═══════════════════════════════════════════════════════════════════
#  3. Write Serializers
# ═══════════════════════════════════════════════════════════════════


class EvidenceCreateSerializer(serializers.Serializer):
    """
    Multipart input for ``POST /api/evidence/``.

    The attachment (photo of the seized item) is mandatory.  The code,
    logging officer and initial custody are set by the service.
    """

    case = serializers.IntegerField(min_value=1)
    description = serializers.CharField(max_length=2000)
    category = serializers.CharField(max_length=80)
    station = serializers.CharField(max_length=MAX_LOCATION_LENGTH)
    attachment = serializers.FileField(allow_empty_file=False)


class TransferRequestSerializer(serializers.Serializer):
    """
    Input for ``POST /api/evidence/{id}/transfer/``.

    ``to_officer`` is the destination officer's username, national id,
    phone number or primary key; ``to_officer_email`` must belong to the
    same account.
    """

    to_officer = serializers.CharField(max_length=150)
    to_officer_email = serializers.EmailField()
    to_location = serializers.CharField(max_length=MAX_LOCATION_LENGTH)
    reason = serializers.CharField(max_length=MAX_REASON_LENGTH)
    transfer_type = serializers.ChoiceField(
        choices=TransferType.choices,
        default=TransferType.TRANSFER,
    )


# ═══════════════════════════════════════════════════════════════════
#  4. Transfer Ledger Serializers
# ═══════════════════════════════════════════════════════════════════


class TransferSerializer(serializers.ModelSerializer):
    """One ledger entry with the display names of every officer involved."""

    evidence_code = serializers.CharField(source="evidence.evidence_code", read_only=True)
    case_number = serializers.CharField(source="case.case_number", read_only=True)
    transfer_type_display = serializers.CharField(source="get_transfer_type_display", read_only=True)
    initiated_by_name = serializers.CharField(source="initiated_by.display_name", read_only=True)
    from_holder_name = serializers.CharField(source="from_holder.display_name", read_only=True)
    to_holder_name = serializers.CharField(source="to_holder.display_name", read_only=True)

    class Meta:
        model = EvidenceTransfer
        fields = [
            "id",
            "evidence",
            "evidence_code",
            "case",
            "case_number",
            "transfer_type",
            "transfer_type_display",
            "initiated_by",
            "initiated_by_name",
            "from_holder",
            "from_holder_name",
            "from_location",
            "to_holder",
            "to_holder_name",
            "to_location",
            "reason",
            "transfer_date",
            "created_at",
        ]
        read_only_fields = fields


class TransferResultSerializer(serializers.Serializer):
    """Response of a committed transfer.  ``email_sent`` is informational."""

    transfer = TransferSerializer(read_only=True)
    email_sent = serializers.BooleanField(read_only=True)


class EvidenceCreateResultSerializer(serializers.Serializer):
    evidence = EvidenceDetailSerializer(read_only=True)
    email_sent = serializers.BooleanField(read_only=True)
