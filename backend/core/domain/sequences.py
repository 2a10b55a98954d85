"""
core.domain.sequences — Gap-free, per-year human-readable identifiers.

Usage (inside the transaction that inserts the numbered row)::

    with transaction.atomic():
        code = next_yearly_code("evidence", settings.EVIDENCE_CODE_PREFIX)
        Evidence.objects.create(evidence_code=code, ...)
"""

from __future__ import annotations

from django.db import transaction
from django.utils import timezone


def next_yearly_code(name: str, prefix: str, *, year: int | None = None) -> str:
    """
    Issue the next identifier of sequence ``name`` for ``year``.

    Format: ``{prefix}-{year}-{value:06d}``.  Must run inside ``atomic()``:
    the counter row stays locked until the caller commits, so concurrent
    callers are served strictly one after another.
    """
    from core.models import YearlySequence  # lazy: avoids circular import

    if not transaction.get_connection().in_atomic_block:
        raise RuntimeError("next_yearly_code() must be called inside transaction.atomic().")

    if year is None:
        year = timezone.now().year

    counter, _ = YearlySequence.objects.select_for_update().get_or_create(
        name=name,
        year=year,
    )
    counter.last_value += 1
    counter.save(update_fields=["last_value"])

    return f"{prefix}-{year}-{counter.last_value:06d}"
