"""
Integration tests — dashboard statistics and system constants.

    GET /api/core/dashboard/   core:dashboard-stats   (authenticated)
    GET /api/core/constants/   core:system-constants  (public)
"""

from __future__ import annotations

import pytest
from django.urls import reverse
from rest_framework import status

from evidence.services import CustodyTransferService, EvidenceLoggingService
from evidence.tests.factories import make_case, make_officer, seizure_photo

pytestmark = pytest.mark.django_db


class TestSystemConstants:

    def test_constants_are_public(self, api_client, role):
        resp = api_client.get(reverse("core:system-constants"))

        assert resp.status_code == status.HTTP_200_OK
        assert {"value": "TRANSFER", "label": "Transfer"} in resp.data["transfer_types"]
        assert [c["value"] for c in resp.data["case_statuses"]] == ["OPEN", "CLOSED"]
        assert [r["name"] for r in resp.data["role_hierarchy"]] == [
            "System Admin",
            "Auditor",
            "Station Officer",
        ]

    def test_only_active_stations_are_listed(self, api_client):
        from accounts.models import Station, StationStatus

        Station.objects.create(name="Central")
        Station.objects.create(name="Airport")
        Station.objects.create(name="Old Harbour", status=StationStatus.INACTIVE)

        resp = api_client.get(reverse("core:system-constants"))

        assert resp.data["stations"] == ["Airport", "Central"]


class TestDashboard:

    def test_requires_authentication(self, api_client):
        resp = api_client.get(reverse("core:dashboard-stats"))

        assert resp.status_code == status.HTTP_401_UNAUTHORIZED

    def test_empty_system(self, api_client, auth_header):
        api_client.credentials(HTTP_AUTHORIZATION=auth_header(username="viewer")["Authorization"])

        resp = api_client.get(reverse("core:dashboard-stats"))

        assert resp.status_code == status.HTTP_200_OK
        assert resp.data["total_cases"] == 0
        assert resp.data["total_evidence"] == 0
        assert resp.data["recent_transfers"] == []
        assert resp.data["total_officers"] == 1

    def test_counts_follow_the_ledgers(self, api_client, auth_header):
        ali = make_officer("ali", first_name="Ali", last_name="Rezaei")
        sara = make_officer("sara", first_name="Sara", last_name="Karimi")
        case = make_case(ali)
        for category in ("Firearm", "Firearm", "Drugs"):
            evidence = EvidenceLoggingService.log_evidence(
                case_id=case.pk,
                description=f"{category} item",
                category=category,
                station="Central",
                attachment=seizure_photo(),
                logged_by=ali,
            ).evidence
        CustodyTransferService.transfer_custody(
            evidence_id=evidence.pk,
            to_officer="sara",
            to_officer_email=sara.email,
            to_location="Lab",
            reason="Substance analysis",
            initiated_by=ali,
        )
        api_client.credentials(HTTP_AUTHORIZATION=auth_header(username="viewer")["Authorization"])

        data = api_client.get(reverse("core:dashboard-stats")).data

        assert data["total_cases"] == 1
        assert data["open_cases"] == 1
        assert data["total_evidence"] == 3
        assert data["custody_records"] == data["total_evidence"]
        assert data["total_transfers"] == 1
        assert data["notifications_sent"] == 4
        assert data["notifications_failed"] == 0
        assert data["evidence_by_category"] == [
            {"category": "Firearm", "count": 2},
            {"category": "Drugs", "count": 1},
        ]
        assert data["recent_transfers"][0]["evidence_code"] == evidence.evidence_code
        assert data["recent_transfers"][0]["description"] == "Ali Rezaei (Central) → Sara Karimi (Lab)"
