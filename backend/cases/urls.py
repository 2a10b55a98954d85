"""
Cases app URL configuration.

All routes are registered under the ``/api/`` prefix.

Route Hierarchy
---------------
  /api/cases/                          → list / create
  /api/cases/{id}/                     → retrieve
  POST /api/cases/{id}/close/          → OPEN → CLOSED
  GET  /api/cases/{case_pk}/evidence/  → evidence of the case, newest first

Router Strategy
---------------
``drf-nested-routers`` generates the ``{case_pk}`` prefix for the evidence
list, which is served by ``evidence.views.CaseEvidenceViewSet``.
"""

from rest_framework.routers import DefaultRouter
from rest_framework_nested import routers as nested_routers

from evidence.views import CaseEvidenceViewSet

from .views import CaseViewSet

router = DefaultRouter()
router.register(
    prefix=r"cases",
    viewset=CaseViewSet,
    basename="case",
)

# ── Nested router: evidence ──────────────────────────────────────────
# Parent lookup kwarg → case_pk
evidence_router = nested_routers.NestedDefaultRouter(
    parent_router=router,
    parent_prefix=r"cases",
    lookup="case",
)
evidence_router.register(
    prefix=r"evidence",
    viewset=CaseEvidenceViewSet,
    basename="case-evidence",
)

urlpatterns = [
    *router.urls,
    *evidence_router.urls,
]
