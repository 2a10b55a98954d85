"""
core.domain — Shared domain utilities for cross-app service layers.

Modules
-------
exceptions     Domain-specific exceptions that map cleanly to HTTP responses.
notifications  Guaranteed-write email notification helper.
audit          Best-effort audit trail for privileged actions.
transactions   Helpers for ``transaction.atomic`` + ``select_for_update``.
access         Permission guards.
sequences      Per-year human-readable identifiers (``EVD-2026-000001``).

Usage from any app::

    from core.domain.exceptions import DomainError, NoOpTransfer
    from core.domain.notifications import NotificationService
    from core.domain.audit import AuditService
    from core.domain.transactions import lock_for_update, translate_storage_errors
    from core.domain.access import require_permission
"""
