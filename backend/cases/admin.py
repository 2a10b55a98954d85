from django.contrib import admin

from .models import Case


@admin.register(Case)
class CaseAdmin(admin.ModelAdmin):
    list_display = ("case_number", "title", "case_type", "station_name",
                    "status", "created_at")
    list_filter = ("status", "case_type")
    search_fields = ("case_number", "title", "station_name")
    readonly_fields = ("case_number", "created_by", "created_at",
                       "updated_at", "closed_at")
