"""
Smoke tests — verify that Django boots, URL routing resolves, the
OpenAPI schema builds, and the core domain modules are importable.
"""

from __future__ import annotations

import pytest
from django.urls import resolve, reverse


# ════════════════════════════════════════════════════════════════════
#  URL Routing Smoke Tests
# ════════════════════════════════════════════════════════════════════

class TestURLRouting:
    """Ensure all top-level URL names resolve."""

    EXPECTED_URLS = [
        # (url_name, expected_path)
        ("case-list",                     "/api/cases/"),
        ("admin-evidence-list",           "/api/admin/evidence/"),
        ("admin-transfer-list",           "/api/admin/transfers/"),
        ("core:dashboard-stats",          "/api/core/dashboard/"),
        ("core:system-constants",         "/api/core/constants/"),
        ("core:notification-ledger-list", "/api/core/notification-ledger/"),
        ("core:audit-log-list",           "/api/core/audit-logs/"),
        ("accounts:login",                "/api/accounts/auth/login/"),
    ]

    @pytest.mark.parametrize("url_name,expected_path", EXPECTED_URLS)
    def test_url_reverses(self, url_name: str, expected_path: str):
        assert reverse(url_name) == expected_path

    @pytest.mark.parametrize("url_name,expected_path", EXPECTED_URLS)
    def test_path_resolves_to_a_view(self, url_name: str, expected_path: str):
        match = resolve(expected_path)
        assert match.func is not None

    def test_detail_routes(self):
        assert reverse("evidence-transfer", kwargs={"pk": 7}) == "/api/evidence/7/transfer/"
        assert reverse("evidence-history", kwargs={"pk": 7}) == "/api/evidence/7/history/"
        assert reverse("evidence-custody", kwargs={"pk": 7}) == "/api/evidence/7/custody/"
        assert reverse("case-evidence-list", kwargs={"case_pk": 3}) == "/api/cases/3/evidence/"


# ════════════════════════════════════════════════════════════════════
#  OpenAPI schema
# ════════════════════════════════════════════════════════════════════

@pytest.mark.django_db
def test_schema_endpoint_renders(api_client):
    resp = api_client.get(reverse("schema"))

    assert resp.status_code == 200
    assert b"/api/evidence/{id}/transfer/" in resp.content


# ════════════════════════════════════════════════════════════════════
#  Core Domain Module Import Tests
# ════════════════════════════════════════════════════════════════════

class TestCoreDomainImports:

    def test_import_exceptions(self):
        from core.domain.exceptions import (
            Conflict,
            DomainError,
            InvalidRequest,
            NoOpTransfer,
            NotFound,
            PermissionDenied,
            StorageError,
        )

        assert issubclass(NoOpTransfer, Conflict)
        for exc in (InvalidRequest, NotFound, PermissionDenied, StorageError):
            assert issubclass(exc, DomainError)

    def test_import_services(self):
        from core.domain.notifications import NotificationService
        from core.domain.transactions import lock_for_update, translate_storage_errors

        assert callable(NotificationService.dispatch)
        assert callable(lock_for_update)
        assert callable(translate_storage_errors)
