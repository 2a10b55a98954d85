"""
Tests for the side-effect writers shared by every app:
``NotificationService``, ``AuditService`` and ``next_yearly_code``.
"""

from __future__ import annotations

import logging
from unittest import mock

import pytest
from django.core import mail
from django.db import DatabaseError, transaction

from core.domain.audit import AuditService
from core.domain.notifications import NotificationService
from core.domain.sequences import next_yearly_code
from core.models import (
    AuditAction,
    AuditLogEntry,
    DeliveryStatus,
    NotificationEvent,
    NotificationLedgerEntry,
)

pytestmark = pytest.mark.django_db

_TRANSFER_CONTEXT = {
    "evidence_code": "EVD-2026-000001",
    "case_number": "KSP-2026-000001",
    "from_holder": "Ali Rezaei",
    "from_location": "Central",
    "to_holder": "Sara <Karimi>",
    "to_location": "Lab",
    "reason": "Ballistics",
}


class TestNotificationService:

    def test_successful_delivery_is_recorded(self):
        result = NotificationService.dispatch(
            event_type=NotificationEvent.CUSTODY_TRANSFERRED,
            recipient_email="sara@police.test",
            context=_TRANSFER_CONTEXT,
            reference_id=42,
        )

        assert result.delivered
        assert result.entry.delivery_status == DeliveryStatus.SENT
        assert result.entry.reference_id == "42"
        assert result.entry.subject == "[CEMS] Custody Transferred – EVD-2026-000001"

        message = mail.outbox[0]
        html = message.alternatives[0][0]
        assert "Sara &lt;Karimi&gt;" in html
        assert "<Karimi>" not in html

    def test_invalid_recipient_is_recorded_as_failed(self):
        result = NotificationService.dispatch(
            event_type=NotificationEvent.USER_APPROVED,
            recipient_email="not-an-address",
            context={"full_name": "Ali"},
        )

        assert not result.delivered
        assert result.entry.delivery_status == DeliveryStatus.FAILED
        assert result.entry.error_message == "Invalid recipient email"
        assert mail.outbox == []

    def test_missing_recipient_is_recorded_as_failed(self):
        result = NotificationService.dispatch(
            event_type=NotificationEvent.USER_BLOCKED,
            recipient_email=None,
            context={"full_name": "Ali"},
        )

        assert not result.delivered
        assert NotificationLedgerEntry.objects.get().recipient_email == ""

    def test_unknown_event_is_recorded_as_failed(self):
        result = NotificationService.dispatch(
            event_type="SOMETHING_ELSE",
            recipient_email="ali@police.test",
            context={},
        )

        assert not result.delivered
        assert "Unknown notification event" in result.error

    def test_ledger_write_failure_is_logged_not_raised(self, caplog):
        with mock.patch(
            "core.models.NotificationLedgerEntry.objects.create",
            side_effect=DatabaseError("disk full"),
        ):
            with caplog.at_level(logging.CRITICAL, logger="core.domain.notifications"):
                result = NotificationService.dispatch(
                    event_type=NotificationEvent.USER_APPROVED,
                    recipient_email="ali@police.test",
                    context={"full_name": "Ali"},
                )

        assert result.delivered
        assert result.entry is None
        assert "audit trail is incomplete" in caplog.text


class TestAuditService:

    def test_record(self, create_user):
        admin = create_user(username="chief", first_name="Chief", last_name="Rahimi")

        entry = AuditService.record(
            actor=admin,
            action_type=AuditAction.CASE_CLOSED,
            target_type="CASE",
            target_id=7,
            details={"case_number": "KSP-2026-000007"},
            ip_address="10.0.0.5",
        )

        assert entry.actor_name == "Chief Rahimi"
        assert entry.target_id == "7"
        assert AuditLogEntry.objects.count() == 1

    def test_write_failure_is_swallowed(self):
        with mock.patch(
            "core.models.AuditLogEntry.objects.create",
            side_effect=DatabaseError("disk full"),
        ):
            entry = AuditService.record(
                actor=None,
                action_type=AuditAction.CASE_CLOSED,
                target_type="CASE",
                target_id=7,
            )

        assert entry is None


class TestYearlySequence:

    def test_sequences_are_independent_per_name_and_year(self):
        with transaction.atomic():
            assert next_yearly_code("evidence", "EVD", year=2025) == "EVD-2025-000001"
            assert next_yearly_code("evidence", "EVD", year=2025) == "EVD-2025-000002"
            assert next_yearly_code("evidence", "EVD", year=2026) == "EVD-2026-000001"
            assert next_yearly_code("case", "KSP", year=2025) == "KSP-2025-000001"

    def test_rolled_back_number_is_reissued(self):
        with pytest.raises(RuntimeError):
            with transaction.atomic():
                next_yearly_code("evidence", "EVD", year=2030)
                raise RuntimeError("insert failed")

        with transaction.atomic():
            assert next_yearly_code("evidence", "EVD", year=2030) == "EVD-2030-000001"
