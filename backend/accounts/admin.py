from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import Role, Station, User


@admin.register(Role)
class RoleAdmin(admin.ModelAdmin):
    list_display = ("name", "hierarchy_level", "description")
    search_fields = ("name",)
    ordering = ("-hierarchy_level",)
    filter_horizontal = ("permissions",)


@admin.register(Station)
class StationAdmin(admin.ModelAdmin):
    list_display = ("name", "status", "created_at")
    list_filter = ("status",)
    search_fields = ("name",)


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ("username", "email", "first_name", "last_name",
                    "status", "station", "role")
    search_fields = ("username", "email", "national_id", "phone_number")
    list_filter = ("status", "is_staff", "role", "station")
    fieldsets = BaseUserAdmin.fieldsets + (
        ("Officer", {"fields": ("national_id", "phone_number", "status",
                                "station", "role")}),
    )
    add_fieldsets = BaseUserAdmin.add_fieldsets + (
        ("Officer", {"fields": ("email", "national_id", "phone_number",
                                "first_name", "last_name", "status",
                                "station", "role")}),
    )
