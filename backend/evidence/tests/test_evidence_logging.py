"""
Tests for ``EvidenceLoggingService.log_evidence`` and ``POST /api/evidence/``.

Logging issues the next per-year evidence code, inserts the catalog row
and its custody row in one transaction, then emails the logging officer.
"""

from __future__ import annotations

from unittest import mock

from django.core import mail
from django.db import DatabaseError
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from accounts.models import UserStatus
from cases.models import CaseStatus
from core.domain.exceptions import Conflict, DomainError, NotFound, PermissionDenied, StorageError
from core.models import DeliveryStatus, NotificationEvent, NotificationLedgerEntry
from evidence.models import Evidence, EvidenceCustody
from evidence.services import EvidenceLoggingService

from .factories import make_case, make_officer, seizure_photo


class TestEvidenceLoggingService(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.officer = make_officer("o1")
        cls.case = make_case(cls.officer)

    def _log(self, **overrides):
        kwargs = {
            "case_id": self.case.pk,
            "description": "Black backpack with tools",
            "category": "Tools",
            "station": "Central",
            "attachment": seizure_photo(),
            "logged_by": self.officer,
        }
        kwargs.update(overrides)
        return EvidenceLoggingService.log_evidence(**kwargs)

    def test_first_item_gets_first_code_of_the_year(self):
        result = self._log()

        year = timezone.now().year
        self.assertEqual(result.evidence.evidence_code, f"EVD-{year}-000001")

    def test_codes_are_sequential(self):
        first = self._log().evidence
        second = self._log(description="Crowbar").evidence

        self.assertEqual(first.evidence_code[-6:], "000001")
        self.assertEqual(second.evidence_code[-6:], "000002")

    def test_initial_custody_is_logging_officer_at_station(self):
        evidence = self._log(station="  Central  ").evidence

        custody = EvidenceCustody.objects.get(evidence=evidence)
        self.assertEqual(custody.current_holder, self.officer)
        self.assertEqual(custody.current_location, "Central")

    def test_logging_officer_is_emailed_and_ledger_records_it(self):
        result = self._log()

        self.assertTrue(result.notification_delivered)
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, [self.officer.email])
        self.assertIn(result.evidence.evidence_code, mail.outbox[0].subject)

        entry = NotificationLedgerEntry.objects.get()
        self.assertEqual(entry.event_type, NotificationEvent.EVIDENCE_LOGGED)
        self.assertEqual(entry.delivery_status, DeliveryStatus.SENT)
        self.assertEqual(entry.reference_id, str(result.evidence.pk))

    def test_missing_attachment_is_rejected_before_storage(self):
        with self.assertRaises(DomainError):
            self._log(attachment=None)
        self.assertFalse(Evidence.objects.exists())

    def test_blank_fields_are_rejected(self):
        for field in ("description", "category", "station"):
            with self.subTest(field=field):
                with self.assertRaises(DomainError):
                    self._log(**{field: "   "})
        self.assertFalse(Evidence.objects.exists())

    def test_unknown_case(self):
        with self.assertRaises(NotFound):
            self._log(case_id=999_999)

    def test_closed_case_is_refused(self):
        self.case.status = CaseStatus.CLOSED
        self.case.save(update_fields=["status"])

        with self.assertRaises(Conflict):
            self._log()
        self.assertFalse(Evidence.objects.exists())

    def test_pending_officer_cannot_log(self):
        pending = make_officer("rookie", status=UserStatus.PENDING)

        with self.assertRaises(PermissionDenied):
            self._log(logged_by=pending)

    def test_custody_insert_failure_rolls_back_the_evidence_row(self):
        with mock.patch(
            "evidence.services.EvidenceCustody.objects.create",
            side_effect=DatabaseError("disk full"),
        ):
            with self.assertRaises(StorageError):
                self._log()

        self.assertFalse(Evidence.objects.exists())
        self.assertFalse(EvidenceCustody.objects.exists())
        self.assertFalse(NotificationLedgerEntry.objects.exists())


class TestEvidenceCreateEndpoint(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.officer = make_officer("o1")
        cls.case = make_case(cls.officer)

    def setUp(self):
        self.client = APIClient()
        self.client.force_authenticate(user=self.officer)
        self.url = reverse("evidence-list")

    def test_multipart_upload_creates_evidence(self):
        resp = self.client.post(
            self.url,
            {
                "case": self.case.pk,
                "description": "Phone found at the scene",
                "category": "Electronics",
                "station": "Central",
                "attachment": seizure_photo(),
            },
            format="multipart",
        )

        self.assertEqual(resp.status_code, status.HTTP_201_CREATED, resp.data)
        self.assertTrue(resp.data["email_sent"])
        body = resp.data["evidence"]
        self.assertTrue(body["evidence_code"].startswith("EVD-"))
        self.assertEqual(body["custody"]["current_holder"], self.officer.pk)
        self.assertEqual(body["custody"]["current_location"], "Central")

    def test_attachment_is_required(self):
        resp = self.client.post(
            self.url,
            {
                "case": self.case.pk,
                "description": "Phone",
                "category": "Electronics",
                "station": "Central",
            },
            format="multipart",
        )

        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("attachment", resp.data)

    def test_case_evidence_list_is_newest_first(self):
        for description in ("first", "second", "third"):
            EvidenceLoggingService.log_evidence(
                case_id=self.case.pk,
                description=description,
                category="Misc",
                station="Central",
                attachment=seizure_photo(),
                logged_by=self.officer,
            )

        resp = self.client.get(reverse("case-evidence-list", kwargs={"case_pk": self.case.pk}))

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual([row["description"] for row in resp.data], ["third", "second", "first"])

    def test_unauthenticated_request_is_rejected(self):
        resp = APIClient().post(self.url, {}, format="multipart")
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)
