"""
core.domain.exceptions — Domain-specific exception hierarchy.

These exceptions represent business-rule violations inside service layers.
They are deliberately **not** DRF exceptions so that the domain layer stays
framework-agnostic.  ``core.domain.exception_handler`` maps them to HTTP
responses carrying both a ``detail`` message and a machine-readable
``code`` so that callers can tell failure categories apart.

Mapping cheatsheet
------------------
┌─────────────────────┬──────┬────────────────────┐
│ Domain Exception    │ HTTP │ code               │
├─────────────────────┼──────┼────────────────────┤
│ DomainError         │ 400  │ validation_error   │
│ InvalidRequest      │ 400  │ invalid_request    │
│ PermissionDenied    │ 403  │ permission_denied  │
│ NotFound            │ 404  │ not_found          │
│ Conflict            │ 409  │ conflict           │
│ InvalidTransition   │ 409  │ invalid_transition │
│ NoOpTransfer        │ 409  │ noop_transfer      │
│ StorageError        │ 500  │ storage_error      │
│ NotificationError   │  —   │ never leaves the notification ledger │
└─────────────────────┴──────┴────────────────────┘

Recommended usage inside a service::

    from core.domain.exceptions import NoOpTransfer

    if custody.current_holder_id == to_holder.pk and custody.current_location == to_location:
        raise NoOpTransfer()
"""

from __future__ import annotations


class DomainError(Exception):
    """
    Base class for all domain / business-rule errors.

    Raised directly for missing or empty required input; such errors are
    detected before any storage access.  Maps to HTTP 400.
    """

    code = "validation_error"

    def __init__(self, message: str = "A business rule was violated.") -> None:
        self.message = message
        super().__init__(self.message)


class InvalidRequest(DomainError):
    """
    The request is well-formed but internally inconsistent, e.g. the
    destination officer's identifier and email address do not belong to
    the same account.

    Maps to HTTP 400.
    """

    code = "invalid_request"

    def __init__(self, message: str = "The request is inconsistent.") -> None:
        super().__init__(message)


class PermissionDenied(DomainError):
    """
    The authenticated user does not have the required role or permission
    for this operation.

    Maps to HTTP 403.
    """

    code = "permission_denied"

    def __init__(self, message: str = "You do not have permission to perform this action.") -> None:
        super().__init__(message)


class NotFound(DomainError):
    """
    The requested resource (case, evidence item, destination holder…)
    does not exist.

    Maps to HTTP 404.
    """

    code = "not_found"

    def __init__(self, message: str = "The requested resource was not found.") -> None:
        super().__init__(message)


class Conflict(DomainError):
    """
    The operation conflicts with the current state of the resource.

    Typical usage: unique-constraint violation under a race, operating on
    a closed case, rewriting an append-only ledger row.
    Maps to HTTP 409.
    """

    code = "conflict"

    def __init__(self, message: str = "The operation conflicts with the current state.") -> None:
        super().__init__(message)


class InvalidTransition(Conflict):
    """
    A state-machine transition that is not allowed from the current status.

    Inherits from ``Conflict`` because an invalid transition IS a conflict
    with the resource's current state.  Maps to HTTP 409.
    """

    code = "invalid_transition"

    def __init__(
        self,
        message: str | None = None,
        *,
        current: str | None = None,
        target: str | None = None,
        reason: str | None = None,
    ) -> None:
        if message is None:
            parts = ["Invalid state transition"]
            if current and target:
                parts.append(f"from '{current}' to '{target}'")
            if reason:
                parts.append(f"({reason})")
            message = " ".join(parts) + "."
        super().__init__(message)
        self.current = current
        self.target = target
        self.reason = reason


class NoOpTransfer(Conflict):
    """
    A custody transfer whose destination holder and location both equal
    the current custody state.  Nothing is written.
    """

    code = "noop_transfer"

    def __init__(
        self,
        message: str = "Transfer must change the holder or the location of the evidence.",
    ) -> None:
        super().__init__(message)


class StorageError(DomainError):
    """
    A transaction or commit failed at the database layer.  The transaction
    has been rolled back; callers must assume nothing changed.

    Maps to HTTP 500.
    """

    code = "storage_error"

    def __init__(self, message: str = "The operation could not be stored. No changes were made.") -> None:
        super().__init__(message)


class NotificationError(DomainError):
    """
    The notification transport refused or failed to deliver a message.

    Always absorbed by ``NotificationService``; it is recorded in the
    notification ledger and never propagated to the caller.
    """

    code = "notification_failed"

    def __init__(self, message: str = "Notification delivery failed.") -> None:
        super().__init__(message)
