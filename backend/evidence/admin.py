from django.contrib import admin

from .models import Evidence, EvidenceCustody, EvidenceTransfer


class ReadOnlyLedgerAdmin(admin.ModelAdmin):
    """Ledger rows are written by the services only."""

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Evidence)
class EvidenceAdmin(ReadOnlyLedgerAdmin):
    list_display = ("evidence_code", "category", "case", "station",
                    "logged_by", "created_at")
    list_filter = ("category",)
    search_fields = ("evidence_code", "description", "case__case_number")


@admin.register(EvidenceCustody)
class EvidenceCustodyAdmin(ReadOnlyLedgerAdmin):
    list_display = ("evidence", "current_holder", "current_location", "updated_at")
    search_fields = ("evidence__evidence_code", "current_location")


@admin.register(EvidenceTransfer)
class EvidenceTransferAdmin(ReadOnlyLedgerAdmin):
    list_display = ("id", "evidence", "transfer_type", "from_holder",
                    "to_holder", "to_location", "created_at")
    list_filter = ("transfer_type",)
    search_fields = ("evidence__evidence_code", "reason")
