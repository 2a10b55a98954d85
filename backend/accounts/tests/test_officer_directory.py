"""Tests for ``OfficerDirectoryService.resolve_officer``."""

from __future__ import annotations

from django.contrib.auth import get_user_model
from django.test import TestCase

from accounts.models import UserStatus
from accounts.services import OfficerDirectoryService
from core.domain.exceptions import DomainError, InvalidRequest, NotFound

User = get_user_model()


class TestResolveOfficer(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.officer = User.objects.create_user(
            username="sara",
            password="Str0ng!Pass99",
            email="Sara.Karimi@police.test",
            national_id="4400000001",
            phone_number="09134400001",
            status=UserStatus.ACTIVE,
        )
        cls.other = User.objects.create_user(
            username="reza",
            password="Str0ng!Pass99",
            email="reza@police.test",
            national_id="4400000002",
            phone_number="09134400002",
            status=UserStatus.ACTIVE,
        )

    def test_resolves_by_each_identifier(self):
        for identifier in ("sara", "4400000001", "09134400001", str(self.officer.pk)):
            with self.subTest(identifier=identifier):
                officer = OfficerDirectoryService.resolve_officer(identifier, "sara.karimi@police.test")
                self.assertEqual(officer, self.officer)

    def test_surrounding_whitespace_is_ignored(self):
        officer = OfficerDirectoryService.resolve_officer("  sara ", " Sara.Karimi@police.test ")
        self.assertEqual(officer, self.officer)

    def test_missing_values(self):
        with self.assertRaises(DomainError):
            OfficerDirectoryService.resolve_officer("", "sara.karimi@police.test")
        with self.assertRaises(DomainError):
            OfficerDirectoryService.resolve_officer("sara", "  ")

    def test_unknown_identifier(self):
        with self.assertRaises(NotFound):
            OfficerDirectoryService.resolve_officer("ghost", "ghost@police.test")

    def test_email_of_another_officer(self):
        with self.assertRaises(InvalidRequest):
            OfficerDirectoryService.resolve_officer("sara", "reza@police.test")

    def test_pending_and_blocked_officers_cannot_receive_custody(self):
        for account_status in (UserStatus.PENDING, UserStatus.BLOCKED):
            with self.subTest(status=account_status):
                User.objects.filter(pk=self.other.pk).update(status=account_status)
                with self.assertRaises(InvalidRequest):
                    OfficerDirectoryService.resolve_officer("reza", "reza@police.test")

    def test_identifier_fields_take_precedence_over_user_id(self):
        namesake = User.objects.create_user(
            username="navid",
            password="Str0ng!Pass99",
            email="navid@police.test",
            national_id=str(self.officer.pk),
            phone_number="09134400003",
            status=UserStatus.ACTIVE,
        )

        officer = OfficerDirectoryService.resolve_officer(str(self.officer.pk), "navid@police.test")
        self.assertEqual(officer, namesake)

        # The user ID still resolves when no identifier field matches it.
        officer = OfficerDirectoryService.resolve_officer(str(self.other.pk), "reza@police.test")
        self.assertEqual(officer, self.other)
