"""
Concurrent custody transfers against a real row lock.

SQLite serialises writers at the database level, so the scenario is only
meaningful on PostgreSQL where ``SELECT ... FOR UPDATE`` is exercised.
"""

from __future__ import annotations

import threading
import unittest

from django.db import connection, connections
from django.test import TransactionTestCase

from core.domain.exceptions import DomainError
from evidence.models import EvidenceCustody, EvidenceTransfer
from evidence.services import CustodyTransferService, EvidenceLoggingService

from .factories import make_case, make_officer, seizure_photo


@unittest.skipUnless(connection.vendor == "postgresql", "row locks need PostgreSQL")
class TestConcurrentTransfers(TransactionTestCase):

    def setUp(self):
        self.o1 = make_officer("o1")
        self.o2 = make_officer("o2")
        self.o3 = make_officer("o3")
        case = make_case(self.o1)
        self.evidence = EvidenceLoggingService.log_evidence(
            case_id=case.pk,
            description="Laptop seized at scene",
            category="Electronics",
            station="Central",
            attachment=seizure_photo(),
            logged_by=self.o1,
        ).evidence

    def _run_transfer(self, to, location, barrier, errors):
        try:
            barrier.wait()
            CustodyTransferService.transfer_custody(
                evidence_id=self.evidence.pk,
                to_officer=to.username,
                to_officer_email=to.email,
                to_location=location,
                reason="Concurrent handover",
                initiated_by=self.o1,
            )
        except DomainError as exc:
            errors.append(exc)
        finally:
            connections.close_all()

    def test_two_simultaneous_transfers_are_serialised(self):
        barrier = threading.Barrier(2)
        errors: list[DomainError] = []
        threads = [
            threading.Thread(target=self._run_transfer, args=(self.o2, "Lab", barrier, errors)),
            threading.Thread(target=self._run_transfer, args=(self.o3, "Vault", barrier, errors)),
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=30)

        self.assertEqual(errors, [])

        entries = list(
            EvidenceTransfer.objects.filter(evidence=self.evidence).order_by("created_at", "id")
        )
        self.assertEqual(len(entries), 2)

        first, second = entries
        # The second writer saw the first writer's result, not the original state.
        self.assertEqual(first.from_holder_id, self.o1.pk)
        self.assertEqual(second.from_holder_id, first.to_holder_id)
        self.assertEqual(second.from_location, first.to_location)

        custody = EvidenceCustody.objects.get(evidence=self.evidence)
        self.assertEqual(custody.current_holder_id, second.to_holder_id)
        self.assertEqual(custody.current_location, second.to_location)
