"""
Core app URL configuration.

URL prefix (registered in ``backend/urls.py``)::

    path('api/core/', include('core.urls'))

Endpoint summary
----------------
GET  /api/core/dashboard/              — Aggregated dashboard statistics.
GET  /api/core/constants/              — Choice enumerations for frontend dropdowns.
GET  /api/core/notification-ledger/    — Every notification attempt (admin / auditor).
GET  /api/core/audit-logs/             — Privileged administrative actions (admin / auditor).
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from . import views

app_name = "core"

# ── Router for ViewSet-based endpoints ───────────────────────────────
router = DefaultRouter()
router.register(
    prefix=r"notification-ledger",
    viewset=views.NotificationLedgerViewSet,
    basename="notification-ledger",
)
router.register(
    prefix=r"audit-logs",
    viewset=views.AuditLogViewSet,
    basename="audit-log",
)

urlpatterns = [
    # ── Dashboard ────────────────────────────────────────────────────
    path(
        "dashboard/",
        views.DashboardStatsView.as_view(),
        name="dashboard-stats",
    ),

    # ── System Constants / Enums ─────────────────────────────────────
    path(
        "constants/",
        views.SystemConstantsView.as_view(),
        name="system-constants",
    ),

    # ── Ledgers (router-generated URLs) ──────────────────────────────
    path("", include(router.urls)),
]
