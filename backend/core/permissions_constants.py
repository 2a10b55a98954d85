"""
Permissions Constants — **Single Source of Truth**

Every permission referenced in code (views, services, ``setup_rbac``,
DRF permission classes) MUST use one of the constants defined here.

Organisation
------------
- **Standard CRUD** permissions follow Django's auto-generated naming:
  ``<action>_<model_lowercase>``. They are listed here for reference so
  that the ``setup_rbac`` command can map them to roles without typos.

- **Custom workflow** permissions are constants that map to codenames
  registered via each model's ``Meta.permissions`` tuple.  Adding a new
  custom permission requires:
    1. Add the constant below.
    2. Add the ``(codename, description)`` to the related model's
       ``Meta.permissions``.
    3. Run ``makemigrations`` + ``migrate``.
    4. Add the constant to the appropriate role lists in ``setup_rbac``.

All constants store the **codename only** (no ``app_label.`` prefix).
"""


# ════════════════════════════════════════════════════════════════════
#  ACCOUNTS APP
# ════════════════════════════════════════════════════════════════════

class AccountsPerms:
    """Standard + custom permissions for accounts models."""

    VIEW_USER = "view_user"
    CHANGE_USER = "change_user"
    VIEW_ROLE = "view_role"
    VIEW_STATION = "view_station"

    # ── Custom workflow permissions ─────────────────────────────────
    CAN_MANAGE_USERS = "can_manage_users"
    """Approve / block accounts, change roles, assign stations."""


# ════════════════════════════════════════════════════════════════════
#  CASES APP
# ════════════════════════════════════════════════════════════════════

class CasesPerms:
    VIEW_CASE = "view_case"
    ADD_CASE = "add_case"

    CAN_CLOSE_CASE = "can_close_case"


# ════════════════════════════════════════════════════════════════════
#  EVIDENCE APP
# ════════════════════════════════════════════════════════════════════

class EvidencePerms:
    VIEW_EVIDENCE = "view_evidence"
    ADD_EVIDENCE = "add_evidence"
    VIEW_EVIDENCECUSTODY = "view_evidencecustody"
    VIEW_EVIDENCETRANSFER = "view_evidencetransfer"
    ADD_EVIDENCETRANSFER = "add_evidencetransfer"


# ════════════════════════════════════════════════════════════════════
#  CORE APP
# ════════════════════════════════════════════════════════════════════

class CorePerms:
    CAN_VIEW_LEDGERS = "can_view_ledgers"
    """Read the evidence, transfer, audit and notification ledgers."""
