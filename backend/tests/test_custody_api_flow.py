"""
Integration tests — end-to-end custody flow over HTTP.

Scenario (every step through the public API, authenticated by the real
login endpoint):

    1. Officer logs in and registers a case.
    2. Officer logs an evidence item with an attachment.
    3. Officer hands custody to a second officer.
    4. Repeating the same hand-over is refused (409 ``noop_transfer``).
    5. History, custody and the admin ledgers all agree.
    6. The case is closed; further transfers are refused.
"""

from __future__ import annotations

import io

from django.contrib.auth import get_user_model
from django.core import mail
from django.core.files.uploadedfile import SimpleUploadedFile
from django.core.management import call_command
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from accounts.models import Role, UserStatus
from core.models import NotificationEvent, NotificationLedgerEntry
from evidence.models import EvidenceTransfer

User = get_user_model()

_PASSWORD = "Str0ng!Pass99"


class TestCustodyApiFlow(TestCase):

    @classmethod
    def setUpTestData(cls):
        call_command("setup_rbac", "--station", "Central", stdout=io.StringIO())
        officer_role = Role.objects.get(name="Station Officer")

        cls.ali = User.objects.create_user(
            username="ali",
            password=_PASSWORD,
            email="ali@police.test",
            national_id="3300000001",
            phone_number="09133000001",
            first_name="Ali",
            last_name="Rezaei",
            role=officer_role,
            status=UserStatus.ACTIVE,
        )
        cls.sara = User.objects.create_user(
            username="sara",
            password=_PASSWORD,
            email="sara@police.test",
            national_id="3300000002",
            phone_number="09133000002",
            first_name="Sara",
            last_name="Karimi",
            role=officer_role,
            status=UserStatus.ACTIVE,
        )
        cls.admin = User.objects.create_user(
            username="chief",
            password=_PASSWORD,
            email="chief@police.test",
            national_id="3300000003",
            phone_number="09133000003",
            role=Role.objects.get(name="System Admin"),
            status=UserStatus.ACTIVE,
        )

    def setUp(self):
        self.client = APIClient()

    # ── Helpers ──────────────────────────────────────────────────────

    def login(self, identifier: str) -> None:
        resp = self.client.post(
            reverse("accounts:login"),
            {"identifier": identifier, "password": _PASSWORD},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_200_OK, msg=resp.data)
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {resp.data['access']}")

    def register_case(self) -> int:
        resp = self.client.post(
            reverse("case-list"),
            {"title": "Armed robbery", "case_type": "Robbery", "station_name": "Central"},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED, msg=resp.data)
        return resp.data["id"]

    def log_evidence(self, case_id: int) -> dict:
        resp = self.client.post(
            reverse("evidence-list"),
            {
                "case": case_id,
                "description": "9mm pistol recovered from the getaway car",
                "category": "Firearm",
                "station": "Central",
                "attachment": SimpleUploadedFile("pistol.jpg", b"jpeg-bytes", content_type="image/jpeg"),
            },
            format="multipart",
        )
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED, msg=resp.data)
        return resp.data

    def transfer(self, evidence_id: int, to: User, location: str = "Central", **extra):
        payload = {
            "to_officer": to.username,
            "to_officer_email": to.email,
            "to_location": location,
            "reason": "Ballistics examination",
            **extra,
        }
        return self.client.post(
            reverse("evidence-transfer", kwargs={"pk": evidence_id}),
            payload,
            format="json",
        )

    # ── Scenario ─────────────────────────────────────────────────────

    def test_full_custody_lifecycle(self):
        self.login("ali@police.test")
        case_id = self.register_case()

        created = self.log_evidence(case_id)
        evidence = created["evidence"]
        self.assertTrue(created["email_sent"])
        self.assertTrue(evidence["evidence_code"].startswith("EVD-"))
        self.assertEqual(evidence["custody"]["current_holder"], self.ali.pk)
        self.assertEqual(evidence["custody"]["current_location"], "Central")

        # Hand over to Sara at the same station.
        resp = self.transfer(evidence["id"], self.sara)
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED, msg=resp.data)
        self.assertTrue(resp.data["email_sent"])
        self.assertEqual(resp.data["transfer"]["from_holder_name"], "Ali Rezaei")
        self.assertEqual(resp.data["transfer"]["to_holder_name"], "Sara Karimi")
        self.assertEqual(mail.outbox[-1].to, ["sara@police.test"])

        # Same hand-over again: nothing changes.
        resp = self.transfer(evidence["id"], self.sara)
        self.assertEqual(resp.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(resp.data["code"], "noop_transfer")
        self.assertEqual(EvidenceTransfer.objects.count(), 1)

        # Custody and history agree.
        custody = self.client.get(reverse("evidence-custody", kwargs={"pk": evidence["id"]}))
        self.assertEqual(custody.data["current_holder"], self.sara.pk)
        self.assertEqual(custody.data["current_holder_email"], "sara@police.test")

        history = self.client.get(reverse("evidence-history", kwargs={"pk": evidence["id"]}))
        self.assertEqual(history.status_code, status.HTTP_200_OK)
        self.assertEqual(len(history.data), 1)
        self.assertEqual(history.data[0]["to_holder"], custody.data["current_holder"])
        self.assertEqual(history.data[0]["to_location"], custody.data["current_location"])

        case_evidence = self.client.get(reverse("case-evidence-list", kwargs={"case_pk": case_id}))
        self.assertEqual(case_evidence.data[0]["current_holder_name"], "Sara Karimi")

        # Notification ledger: one row for the logging, one for the transfer.
        self.assertEqual(
            list(
                NotificationLedgerEntry.objects.order_by("id").values_list("event_type", flat=True)
            ),
            [NotificationEvent.EVIDENCE_LOGGED, NotificationEvent.CUSTODY_TRANSFERRED],
        )

        # Administrators see the same entry in the transfer ledger.
        self.login("chief")
        ledger = self.client.get(reverse("admin-transfer-list"))
        self.assertEqual(ledger.status_code, status.HTTP_200_OK)
        self.assertEqual(ledger.data["total"], 1)
        self.assertEqual(ledger.data["data"][0]["evidence_code"], evidence["evidence_code"])

        # Closing the case freezes custody.
        closed = self.client.post(reverse("case-close", kwargs={"pk": case_id}))
        self.assertEqual(closed.status_code, status.HTTP_200_OK)

        self.login("sara")
        resp = self.transfer(evidence["id"], self.ali, location="Vault")
        self.assertEqual(resp.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(resp.data["code"], "conflict")

    def test_transfer_validation_errors(self):
        self.login("ali")
        evidence_id = self.log_evidence(self.register_case())["evidence"]["id"]

        resp = self.transfer(evidence_id, self.sara, reason="")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

        resp = self.transfer(evidence_id, self.sara, to_officer_email="ali@police.test")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.data["code"], "invalid_request")

        resp = self.transfer(evidence_id, self.sara, to_officer="ghost")
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)

        resp = self.transfer(999_999, self.sara)
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)

        self.assertFalse(EvidenceTransfer.objects.exists())

    def test_history_of_unknown_evidence(self):
        self.login("ali")

        resp = self.client.get(reverse("evidence-history", kwargs={"pk": 999_999}))

        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(resp.data["code"], "not_found")

    def test_non_numeric_ids_are_not_found(self):
        self.login("chief")

        for path in (
            "/api/evidence/abc/",
            "/api/evidence/abc/custody/",
            "/api/evidence/abc/history/",
            "/api/accounts/users/abc/",
        ):
            with self.subTest(path=path):
                resp = self.client.get(path)
                self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)

        resp = self.client.post("/api/evidence/abc/transfer/", {}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)

        resp = self.client.patch("/api/accounts/users/abc/approve/", {}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)
