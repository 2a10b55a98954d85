"""
Evidence app URL configuration.

All routes are registered under the ``/api/`` prefix
(included from ``backend.urls``).

Route Hierarchy
---------------
  POST /api/evidence/                    → log evidence (multipart)
  GET  /api/evidence/{id}/               → retrieve

  ── Custody @actions ────────────────────────────────────────────
  GET  /api/evidence/{id}/custody/       → current holder / location
  POST /api/evidence/{id}/transfer/      → locked custody transfer
  GET  /api/evidence/{id}/history/       → transfer ledger of the item

  ── Administrative ledgers (read-only, paginated) ───────────────
  GET  /api/admin/evidence/
  GET  /api/admin/transfers/
"""

from rest_framework.routers import DefaultRouter

from .views import EvidenceLedgerViewSet, EvidenceViewSet, TransferLedgerViewSet

router = DefaultRouter()
router.register(
    prefix=r"evidence",
    viewset=EvidenceViewSet,
    basename="evidence",
)
router.register(
    prefix=r"admin/evidence",
    viewset=EvidenceLedgerViewSet,
    basename="admin-evidence",
)
router.register(
    prefix=r"admin/transfers",
    viewset=TransferLedgerViewSet,
    basename="admin-transfer",
)

urlpatterns = router.urls
