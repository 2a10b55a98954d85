"""
core.domain.transactions — Helpers for safe state transitions.

Provides utilities that wrap ``transaction.atomic`` and
``select_for_update`` into reusable patterns so that every app's
service layer follows the same concurrency-safe approach.

Design goals
------------
* Ensure that state-transition reads always lock the row first
  (``select_for_update``) to prevent race conditions.
* Bound the time a request may wait for a row lock, so a stuck
  transaction cannot pin a request forever.
* Translate low-level database failures into domain errors only
  **after** the atomic block has rolled back.

Usage::

    from core.domain.transactions import (
        apply_lock_timeout,
        lock_for_update,
        translate_storage_errors,
    )

    with translate_storage_errors("custody transfer"):
        with transaction.atomic():
            apply_lock_timeout()
            custody = lock_for_update(EvidenceCustody, evidence_id=evidence.pk)
            ...
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterable, Iterator, TypeVar

from django.conf import settings
from django.db import DatabaseError, IntegrityError, connection, models, transaction

from core.domain.exceptions import Conflict, InvalidTransition, NotFound, StorageError

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=models.Model)


def atomic_transition(
    *,
    instance: M,
    status_field: str = "status",
    target_status: str,
    allowed_sources: Iterable[str] | None = None,
    save_fields: Iterable[str] | None = None,
    extra_updates: dict[str, Any] | None = None,
) -> M:
    """
    Atomically transition a model instance from one status to another.

    Steps performed inside ``transaction.atomic()``:
        1. Re-fetch the instance with ``select_for_update()`` to acquire
           a row-level lock.
        2. Read the current value of ``status_field``.
        3. If ``allowed_sources`` is provided, verify the current value
           is among them; raise ``InvalidTransition`` otherwise.
        4. Set ``status_field`` to ``target_status`` (plus any
           ``extra_updates``) and save.

    Raises:
        NotFound:          If the instance no longer exists in the DB.
        InvalidTransition: If the current status is not in ``allowed_sources``.
    """
    model_class = type(instance)

    with transaction.atomic():
        locked = lock_for_update(model_class, pk=instance.pk)

        current = getattr(locked, status_field)

        if allowed_sources is not None and current not in allowed_sources:
            raise InvalidTransition(
                current=str(current),
                target=target_status,
                reason=(
                    f"Allowed source states: "
                    f"{', '.join(str(s) for s in allowed_sources)}"
                ),
            )

        setattr(locked, status_field, target_status)
        for field, value in (extra_updates or {}).items():
            setattr(locked, field, value)

        update_fields = {status_field, "updated_at"}
        if save_fields:
            update_fields.update(save_fields)
        if extra_updates:
            update_fields.update(extra_updates)

        locked.save(update_fields=list(update_fields))

    instance.refresh_from_db()
    return instance


def lock_for_update(model_class: type[M], **lookup: Any) -> M:
    """
    Acquire a row-level lock on the single row matching ``lookup``.

    Must be called inside an ``atomic()`` block.  A concurrent
    transaction holding the same lock makes this call wait until that
    transaction commits or rolls back; the row is then re-read, so the
    caller always decides on committed state.

    Raises:
        NotFound: If no row matches.
    """
    try:
        return model_class.objects.select_for_update().get(**lookup)
    except model_class.DoesNotExist:
        raise NotFound(f"{model_class._meta.verbose_name} matching {lookup} does not exist.")


def lock_for_share(model_class: type[M], pk: Any) -> M:
    """
    Acquire a shared row lock on the row with primary key ``pk``.

    Any number of transactions may share-lock the same row at once, but
    ``lock_for_update`` on it waits until they all finish (and vice
    versa).  Must be called inside an ``atomic()`` block.

    Only PostgreSQL has ``FOR SHARE``; other backends serialize writers
    at the database level, so a plain read is enough there.

    Raises:
        NotFound: If no row matches.
    """
    qs = model_class.objects.filter(pk=pk)
    if connection.vendor == "postgresql":
        sql, params = qs.query.sql_with_params()
        rows = list(model_class.objects.raw(f"{sql} FOR SHARE", params))
    else:
        rows = list(qs)
    if not rows:
        raise NotFound(f"{model_class._meta.verbose_name} with id {pk} does not exist.")
    return rows[0]


def apply_lock_timeout(timeout_ms: int | None = None) -> None:
    """
    Bound how long the current transaction waits for row locks.

    Only PostgreSQL supports a per-transaction lock timeout; on other
    backends this is a no-op.  Must be called inside ``atomic()``.
    A timeout surfaces as ``OperationalError`` and rolls the transaction
    back.
    """
    if connection.vendor != "postgresql":
        return
    if timeout_ms is None:
        timeout_ms = settings.CUSTODY_LOCK_TIMEOUT_MS
    with connection.cursor() as cursor:
        cursor.execute(
            "SELECT set_config('lock_timeout', %s, true)",
            [f"{int(timeout_ms)}ms"],
        )


@contextmanager
def translate_storage_errors(operation: str) -> Iterator[None]:
    """
    Convert database failures raised by the wrapped block into domain
    errors.

    Wrap the ``atomic()`` block, not the other way round: the exception
    must leave the atomic block (rolling it back) before it is translated.

    * ``IntegrityError`` → ``Conflict``
    * any other ``DatabaseError`` → ``StorageError``

    Domain errors raised inside the block pass through unchanged.
    """
    try:
        yield
    except IntegrityError as exc:
        logger.warning("Integrity violation during %s: %s", operation, exc)
        raise Conflict(
            f"The {operation} conflicts with a concurrent change. Please retry."
        ) from exc
    except DatabaseError as exc:
        logger.exception("Storage failure during %s; transaction rolled back", operation)
        raise StorageError(
            f"The {operation} could not be completed. No changes were made."
        ) from exc
