"""
Accounts app models.

Defines the dynamic Role system, the station registry and a custom User
model that extends Django's ``AbstractUser``.  The custody core trusts
the resolved ``User`` as the initiator of every transfer and the logging
officer of every evidence item.
"""

from django.contrib.auth.models import AbstractUser, Permission
from django.db import models

from core.models import TimeStampedModel
from core.permissions_constants import AccountsPerms


class UserStatus(models.TextChoices):
    """Account lifecycle managed by administrators."""

    PENDING = "pending", "Pending Approval"
    ACTIVE = "active", "Active"
    BLOCKED = "blocked", "Blocked"


class StationStatus(models.TextChoices):
    ACTIVE = "active", "Active"
    INACTIVE = "inactive", "Inactive"


class Role(models.Model):
    """
    Dynamic, admin-manageable role.

    ``hierarchy_level`` encodes relative authority (System Admin=100,
    Auditor=50, Station Officer=10).  Roles and their permission sets are
    seeded by the ``setup_rbac`` management command.
    """

    name = models.CharField(
        max_length=100,
        unique=True,
        verbose_name="Role Name",
    )
    description = models.TextField(
        blank=True,
        default="",
        verbose_name="Description",
    )
    hierarchy_level = models.PositiveSmallIntegerField(
        default=0,
        verbose_name="Hierarchy Level",
        help_text="Higher value = more authority.",
    )
    permissions = models.ManyToManyField(
        Permission,
        blank=True,
        verbose_name="Permissions",
        help_text="Specific permissions for this role.",
    )

    class Meta:
        verbose_name = "Role"
        verbose_name_plural = "Roles"
        ordering = ["-hierarchy_level"]

    def __str__(self):
        return self.name


class Station(TimeStampedModel):
    """A police station that officers are assigned to and evidence is stored at."""

    name = models.CharField(
        max_length=120,
        unique=True,
        verbose_name="Station Name",
    )
    status = models.CharField(
        max_length=10,
        choices=StationStatus.choices,
        default=StationStatus.ACTIVE,
        verbose_name="Status",
    )

    class Meta:
        verbose_name = "Station"
        verbose_name_plural = "Stations"
        ordering = ["name"]

    def __str__(self):
        return self.name


class User(AbstractUser):
    """
    Custom user model for police officers.

    Login is supported via *any one* of username / national_id /
    phone_number / email together with the password.  New accounts start
    ``PENDING`` and must be approved by an administrator before they can
    log evidence or hold custody.
    """

    national_id = models.CharField(
        max_length=10,
        unique=True,
        verbose_name="National ID",
        db_index=True,
    )
    phone_number = models.CharField(
        max_length=15,
        unique=True,
        verbose_name="Phone Number",
        db_index=True,
    )
    email = models.EmailField(
        unique=True,
        verbose_name="Email Address",
    )
    status = models.CharField(
        max_length=10,
        choices=UserStatus.choices,
        default=UserStatus.PENDING,
        db_index=True,
        verbose_name="Account Status",
    )
    station = models.ForeignKey(
        Station,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="officers",
        verbose_name="Current Station",
    )

    # ── Single-role assignment (dynamic RBAC) ────────────────────────
    role = models.ForeignKey(
        Role,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="users",
        verbose_name="Assigned Role",
    )

    REQUIRED_FIELDS = ["email", "national_id", "phone_number",
                       "first_name", "last_name"]

    class Meta:
        verbose_name = "User"
        verbose_name_plural = "Users"
        permissions = [
            (AccountsPerms.CAN_MANAGE_USERS, "Admin-level user management"),
        ]

    def __str__(self):
        role_name = self.role.name if self.role else "No Role"
        return f"{self.username} ({self.display_name}) - {role_name}"

    @property
    def display_name(self) -> str:
        return self.get_full_name() or self.username

    @property
    def is_approved(self) -> bool:
        return self.is_superuser or self.status == UserStatus.ACTIVE

    @property
    def is_administrator(self) -> bool:
        return self.is_superuser or self.has_perm(f"accounts.{AccountsPerms.CAN_MANAGE_USERS}")

    @property
    def hierarchy_level(self) -> int:
        """Return the hierarchy_level of the user's role (0 if none)."""
        return self.role.hierarchy_level if self.role else 0

    # ── RBAC Permission Overrides ────────────────────────────────────

    def get_all_permissions(self, obj=None) -> set:
        """
        Return a set of permission strings ('app_label.codename') the user has.
        """
        if not self.is_active:
            return set()

        if self.is_superuser:
            if not hasattr(self, "_superuser_perm_cache"):
                perms = Permission.objects.select_related("content_type").all()
                self._superuser_perm_cache = {f"{p.content_type.app_label}.{p.codename}" for p in perms}
            return self._superuser_perm_cache

        if not self.role:
            return set()

        if not hasattr(self, "_perm_cache"):
            perms = self.role.permissions.select_related("content_type")
            self._perm_cache = {f"{p.content_type.app_label}.{p.codename}" for p in perms}

        return self._perm_cache

    def has_perm(self, perm: str, obj=None) -> bool:
        if self.is_active and self.is_superuser:
            return True

        return perm in self.get_all_permissions(obj)

    def has_perms(self, perm_list, obj=None) -> bool:
        return all(self.has_perm(perm, obj) for perm in perm_list)

    def has_module_perms(self, app_label: str) -> bool:
        if self.is_active and self.is_superuser:
            return True

        return any(perm.startswith(f"{app_label}.") for perm in self.get_all_permissions())

    @property
    def permissions_list(self) -> list[str]:
        """Flat list of permission strings, injected into JWT claims."""
        return sorted(self.get_all_permissions())
