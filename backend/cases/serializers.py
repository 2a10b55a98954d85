"""
Cases app serializers.

Field definitions and field-level validation only.  **No business logic
lives here** — case numbering and lifecycle rules belong in
``services.py``.
"""

from __future__ import annotations

from rest_framework import serializers

from .models import Case, CaseStatus


# ═══════════════════════════════════════════════════════════════════
#  Filter / Query-Parameter Serializers
# ═══════════════════════════════════════════════════════════════════


class CaseFilterSerializer(serializers.Serializer):
    """
    Query parameters for ``GET /api/cases/``.

    ``search`` shorter than two characters is ignored by the service.
    """

    status = serializers.ChoiceField(
        choices=CaseStatus.choices,
        required=False,
        help_text="OPEN or CLOSED.",
    )
    search = serializers.CharField(
        required=False,
        allow_blank=True,
        max_length=100,
        help_text="Matches case number, title, type or station (min. 2 characters).",
    )


# ═══════════════════════════════════════════════════════════════════
#  Read Serializers
# ═══════════════════════════════════════════════════════════════════


class CaseListSerializer(serializers.ModelSerializer):
    """Compact representation for list pages."""

    class Meta:
        model = Case
        fields = [
            "id",
            "case_number",
            "title",
            "case_type",
            "station_name",
            "status",
            "created_at",
        ]
        read_only_fields = fields


class CaseDetailSerializer(serializers.ModelSerializer):
    status_display = serializers.CharField(source="get_status_display", read_only=True)
    created_by_name = serializers.CharField(source="created_by.display_name", read_only=True)

    class Meta:
        model = Case
        fields = [
            "id",
            "case_number",
            "fir_number",
            "title",
            "case_type",
            "description",
            "station_name",
            "status",
            "status_display",
            "created_by",
            "created_by_name",
            "created_at",
            "updated_at",
            "closed_at",
        ]
        read_only_fields = fields


# ═══════════════════════════════════════════════════════════════════
#  Write Serializers
# ═══════════════════════════════════════════════════════════════════


class CaseCreateSerializer(serializers.ModelSerializer):
    """
    Validates case registration input.

    ``case_number``, ``status`` and ``created_by`` are set by the service.
    """

    class Meta:
        model = Case
        fields = [
            "fir_number",
            "title",
            "case_type",
            "description",
            "station_name",
        ]
        extra_kwargs = {
            "title": {"required": True, "allow_blank": False},
            "case_type": {"required": True, "allow_blank": False},
            "station_name": {"required": True, "allow_blank": False},
        }
