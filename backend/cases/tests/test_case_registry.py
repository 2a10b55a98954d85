"""
Integration tests — the case registry.

Endpoints under test::

    POST /api/cases/              case-list
    GET  /api/cases/              case-list
    GET  /api/cases/{id}/         case-detail
    POST /api/cases/{id}/close/   case-close

Case numbers come from the per-year ``case`` sequence
(``KSP-<year>-000001``).  Closing a case freezes custody of its evidence.
"""

from __future__ import annotations

import io
from unittest import mock

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.db import DatabaseError
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import AccessToken

from accounts.models import Role, UserStatus
from cases.models import Case, CaseStatus
from core.models import AuditAction, AuditLogEntry

User = get_user_model()

_CASE_PAYLOAD = {
    "title": "Jewellery store robbery",
    "case_type": "Robbery",
    "station_name": "Central",
    "fir_number": "FIR-118/2026",
    "description": "Display cases smashed overnight.",
}


def _user(username: str, n: int, **kwargs):
    kwargs.setdefault("status", UserStatus.ACTIVE)
    return User.objects.create_user(
        username=username,
        password="Str0ng!Pass99",
        email=f"{username}@police.test",
        national_id=f"66000000{n:02d}",
        phone_number=f"091200000{n:02d}",
        **kwargs,
    )


class TestCaseRegistry(TestCase):

    @classmethod
    def setUpTestData(cls):
        call_command("setup_rbac", stdout=io.StringIO())
        cls.admin = _user("chief", 1, role=Role.objects.get(name="System Admin"))
        cls.officer = _user("officer", 2, role=Role.objects.get(name="Station Officer"))

    def setUp(self):
        self.client = APIClient()
        self.login_as(self.officer)

    def login_as(self, user):
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {AccessToken.for_user(user)}")

    def _create(self, **overrides):
        return self.client.post(reverse("case-list"), {**_CASE_PAYLOAD, **overrides}, format="json")

    # ── Registration ─────────────────────────────────────────────────

    def test_case_numbers_are_issued_per_year(self):
        year = timezone.now().year

        first = self._create()
        second = self._create(title="Second robbery")

        self.assertEqual(first.status_code, status.HTTP_201_CREATED, msg=first.data)
        self.assertEqual(first.data["case_number"], f"KSP-{year}-000001")
        self.assertEqual(second.data["case_number"], f"KSP-{year}-000002")
        self.assertEqual(first.data["status"], CaseStatus.OPEN)
        self.assertEqual(first.data["created_by"], self.officer.pk)

    def test_blank_required_field(self):
        resp = self._create(title="   ")

        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(Case.objects.exists())

    def test_pending_officer_cannot_register_cases(self):
        self.login_as(_user("rookie", 3, status=UserStatus.PENDING))

        resp = self._create()

        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)

    # ── Listing ──────────────────────────────────────────────────────

    def test_list_is_newest_first_and_searchable(self):
        self._create(title="Bicycle theft", case_type="Theft")
        self._create(title="Arson at depot", case_type="Arson")

        resp = self.client.get(reverse("case-list"))
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["total"], 2)
        self.assertEqual(resp.data["data"][0]["title"], "Arson at depot")

        resp = self.client.get(reverse("case-list"), {"search": "bicy"})
        self.assertEqual([c["title"] for c in resp.data["data"]], ["Bicycle theft"])

    def test_single_character_search_is_ignored(self):
        self._create(title="Bicycle theft")
        self._create(title="Arson at depot")

        resp = self.client.get(reverse("case-list"), {"search": "b"})

        self.assertEqual(resp.data["total"], 2)

    def test_retrieve_unknown_case(self):
        resp = self.client.get(reverse("case-detail", kwargs={"pk": 999_999}))

        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(resp.data["code"], "not_found")

    # ── Closure ──────────────────────────────────────────────────────

    def test_admin_closes_case_and_it_is_audited(self):
        case_id = self._create().data["id"]
        self.login_as(self.admin)

        resp = self.client.post(reverse("case-close", kwargs={"pk": case_id}))

        self.assertEqual(resp.status_code, status.HTTP_200_OK, msg=resp.data)
        self.assertEqual(resp.data["status"], CaseStatus.CLOSED)
        self.assertIsNotNone(resp.data["closed_at"])

        audit = AuditLogEntry.objects.get(action_type=AuditAction.CASE_CLOSED)
        self.assertEqual(audit.target_type, "CASE")
        self.assertEqual(audit.target_id, str(case_id))

    def test_closing_twice_conflicts(self):
        case_id = self._create().data["id"]
        self.login_as(self.admin)
        self.client.post(reverse("case-close", kwargs={"pk": case_id}))

        resp = self.client.post(reverse("case-close", kwargs={"pk": case_id}))

        self.assertEqual(resp.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(resp.data["code"], "invalid_transition")
        self.assertEqual(AuditLogEntry.objects.count(), 1)

    def test_officer_cannot_close_case(self):
        case_id = self._create().data["id"]

        resp = self.client.post(reverse("case-close", kwargs={"pk": case_id}))

        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(Case.objects.get(pk=case_id).status, CaseStatus.OPEN)

    def test_storage_failure_during_closure_is_reported_and_not_audited(self):
        case_id = self._create().data["id"]
        self.login_as(self.admin)

        with mock.patch(
            "cases.services.atomic_transition",
            side_effect=DatabaseError("could not write case row"),
        ):
            resp = self.client.post(reverse("case-close", kwargs={"pk": case_id}))

        self.assertEqual(resp.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(resp.data["code"], "storage_error")
        self.assertEqual(Case.objects.get(pk=case_id).status, CaseStatus.OPEN)
        self.assertFalse(AuditLogEntry.objects.filter(action_type=AuditAction.CASE_CLOSED).exists())

    # ── Routing ──────────────────────────────────────────────────────

    def test_non_numeric_case_id_is_not_found(self):
        for path in ("/api/cases/abc/", "/api/cases/abc/evidence/"):
            with self.subTest(path=path):
                resp = self.client.get(path)
                self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)

        resp = self.client.post("/api/cases/abc/close/")
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)
