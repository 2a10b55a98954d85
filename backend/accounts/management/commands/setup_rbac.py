"""
Management command: setup_rbac
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

Seeds the database with base **Roles** and links each role to its
set of Django permissions.  Optionally seeds the station registry.

Key design principle — **this command does NOT create Permission objects**.
Permissions must already exist in the database:
    • Standard CRUD permissions are auto-created by Django after
      ``migrate`` (one per model × {add, change, delete, view}).
    • Custom workflow permissions are declared in each model's
      ``Meta.permissions`` tuple and inserted by ``migrate``.

The command is **idempotent** — safe to run multiple times.  Existing
roles are updated; permissions are replaced (set) to match the
mapping below.

Usage::

    python manage.py setup_rbac
    python manage.py setup_rbac --station "Central" --station "Harbour"
"""

from django.contrib.auth.models import Permission
from django.core.management.base import BaseCommand

from accounts.models import Role, Station, StationStatus
from core.permissions_constants import (
    AccountsPerms,
    CasesPerms,
    CorePerms,
    EvidencePerms,
)

# ────────────────────────────────────────────────────────────────────
# Role → Permission mapping
# ────────────────────────────────────────────────────────────────────
# Key:   (role_name, description, hierarchy_level)
# Value: list of (app_label, codename) pairs

_OFFICER_PERMS: list[tuple[str, str]] = [
    ("accounts", AccountsPerms.VIEW_STATION),
    ("cases", CasesPerms.VIEW_CASE),
    ("cases", CasesPerms.ADD_CASE),
    ("evidence", EvidencePerms.VIEW_EVIDENCE),
    ("evidence", EvidencePerms.ADD_EVIDENCE),
    ("evidence", EvidencePerms.VIEW_EVIDENCECUSTODY),
    ("evidence", EvidencePerms.VIEW_EVIDENCETRANSFER),
    ("evidence", EvidencePerms.ADD_EVIDENCETRANSFER),
]

_AUDITOR_PERMS: list[tuple[str, str]] = [
    ("accounts", AccountsPerms.VIEW_USER),
    ("accounts", AccountsPerms.VIEW_STATION),
    ("cases", CasesPerms.VIEW_CASE),
    ("evidence", EvidencePerms.VIEW_EVIDENCE),
    ("evidence", EvidencePerms.VIEW_EVIDENCECUSTODY),
    ("evidence", EvidencePerms.VIEW_EVIDENCETRANSFER),
    ("core", CorePerms.CAN_VIEW_LEDGERS),
]

ROLE_PERMISSIONS_MAP: dict[tuple[str, str, int], list[tuple[str, str]]] = {
    (
        "System Admin",
        "Full system access — manages officers, stations and case closure.",
        100,
    ): sorted(set(_OFFICER_PERMS + _AUDITOR_PERMS + [
        ("accounts", AccountsPerms.CHANGE_USER),
        ("accounts", AccountsPerms.VIEW_ROLE),
        ("accounts", AccountsPerms.CAN_MANAGE_USERS),
        ("cases", CasesPerms.CAN_CLOSE_CASE),
    ])),
    (
        "Auditor",
        "Read-only access to every ledger for oversight.",
        50,
    ): _AUDITOR_PERMS,
    (
        "Station Officer",
        "Logs evidence and transfers custody for open cases.",
        10,
    ): _OFFICER_PERMS,
}


class Command(BaseCommand):
    help = (
        "Seeds the database with base Roles and maps each role to its "
        "Django permissions.  Safe to run multiple times (idempotent).  "
        "Does NOT create permissions — run `migrate` first."
    )

    def add_arguments(self, parser):
        parser.add_argument(
            "--station",
            action="append",
            default=[],
            dest="stations",
            help="Station name to register as ACTIVE (repeatable).",
        )

    def handle(self, *args, **options):
        self.stdout.write(self.style.MIGRATE_HEADING(
            "\n══════════════════════════════════════════"
            "\n  RBAC Setup — Seeding Roles & Permissions"
            "\n══════════════════════════════════════════\n"
        ))

        all_permissions: dict[tuple[str, str], Permission] = {
            (p.content_type.app_label, p.codename): p
            for p in Permission.objects.select_related("content_type").all()
        }

        roles_created = 0
        roles_updated = 0
        warnings = 0

        for (role_name, description, hierarchy_level), keys in ROLE_PERMISSIONS_MAP.items():
            # ── 1. Idempotent role creation / update ────────────────
            role, created = Role.objects.update_or_create(
                name=role_name,
                defaults={
                    "description": description,
                    "hierarchy_level": hierarchy_level,
                },
            )

            # ── 2. Resolve permissions ──────────────────────────────
            resolved: list[Permission] = []
            for app_label, codename in keys:
                perm = all_permissions.get((app_label, codename))
                if perm is None:
                    warnings += 1
                    self.stdout.write(self.style.WARNING(
                        f"  ⚠  Permission '{app_label}.{codename}' not found — "
                        f"skipped for role '{role_name}'.  (Run migrate first?)"
                    ))
                    continue
                resolved.append(perm)

            # ── 3. Set permissions (replaces old set entirely) ──────
            role.permissions.set(resolved)

            if created:
                roles_created += 1
            else:
                roles_updated += 1
            self.stdout.write(self.style.SUCCESS(
                f"  ✔  {'Created' if created else 'Updated'} role: {role_name:<16s} "
                f"(hierarchy={hierarchy_level}, permissions={len(resolved)})"
            ))

        # ── Stations ────────────────────────────────────────────────
        for name in options["stations"]:
            station, created = Station.objects.get_or_create(
                name=name.strip(),
                defaults={"status": StationStatus.ACTIVE},
            )
            self.stdout.write(self.style.SUCCESS(
                f"  ✔  {'Created' if created else 'Found'} station: {station.name}"
            ))

        # ── Summary ─────────────────────────────────────────────────
        self.stdout.write(self.style.MIGRATE_HEADING(
            "\n──────────────────────────────────────────"
        ))
        summary = (
            f"  Done!  {roles_created} role(s) created, "
            f"{roles_updated} role(s) updated."
        )
        if warnings:
            summary += f"  ({warnings} permission warning(s) — see above.)"
        self.stdout.write(self.style.SUCCESS(summary + "\n"))
