"""
Core app views — **Thin Views**.

Each view delegates all business logic to the corresponding service in
``core.services``.  Views are responsible only for:

1. Extracting and validating query parameters from the request.
2. Calling the service with the authenticated user and parameters.
3. Serialising the result and returning an HTTP ``Response``.

No aggregation logic, no cross-app queries, no permission checks.
"""

from __future__ import annotations

from drf_spectacular.utils import (
    OpenApiParameter,
    OpenApiResponse,
    extend_schema,
)
from rest_framework import status, viewsets
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from .models import AuditLogEntry, NotificationLedgerEntry
from .pagination import paginate
from .serializers import (
    AuditLogEntrySerializer,
    AuditLogFilterSerializer,
    DashboardStatsSerializer,
    NotificationLedgerEntrySerializer,
    NotificationLedgerFilterSerializer,
    SystemConstantsSerializer,
)
from .services import (
    DashboardAggregationService,
    LedgerQueryService,
    SystemConstantsService,
)

_LEDGER_PAGE_PARAMETERS = [
    OpenApiParameter(name="search", type=str, required=False, description="At least 2 characters."),
    OpenApiParameter(name="page", type=int, required=False),
    OpenApiParameter(name="limit", type=int, required=False, description="Page size (max 100)."),
]


class DashboardStatsView(APIView):
    """
    **GET /api/core/dashboard/**

    Aggregated counters over cases, evidence, custody, transfers and the
    notification ledger, plus the latest transfers.

    **Authentication**: Required (``IsAuthenticated``).

    **Response** (``200 OK``):
        Serialised by ``DashboardStatsSerializer``.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Dashboard statistics",
        responses={200: OpenApiResponse(response=DashboardStatsSerializer, description="Dashboard stats.")},
        tags=["Dashboard"],
    )
    def get(self, request: Request) -> Response:
        service = DashboardAggregationService(user=request.user)
        data = service.get_stats()
        serializer = DashboardStatsSerializer(data)
        return Response(serializer.data, status=status.HTTP_200_OK)


class SystemConstantsView(APIView):
    """
    **GET /api/core/constants/**

    Choice enumerations, the role hierarchy and the active stations.
    Public; no authentication required.
    """

    permission_classes = [AllowAny]
    authentication_classes = []

    @extend_schema(
        summary="System constants",
        responses={200: OpenApiResponse(response=SystemConstantsSerializer, description="Choice enumerations.")},
        tags=["System"],
    )
    def get(self, request: Request) -> Response:
        data = SystemConstantsService.get_constants()
        serializer = SystemConstantsSerializer(data)
        return Response(serializer.data, status=status.HTTP_200_OK)


class NotificationLedgerViewSet(viewsets.ViewSet):
    """
    **GET /api/core/notification-ledger/**

    Every notification attempt, newest first.  Requires
    ``core.can_view_ledgers`` (enforced in ``LedgerQueryService``).
    """

    permission_classes = [IsAuthenticated]
    queryset = NotificationLedgerEntry.objects.none()

    @extend_schema(
        summary="Notification ledger (admin)",
        parameters=[
            OpenApiParameter(name="event_type", type=str, required=False),
            OpenApiParameter(name="delivery_status", type=str, required=False, description="SENT or FAILED."),
            *_LEDGER_PAGE_PARAMETERS,
        ],
        responses={
            200: OpenApiResponse(response=NotificationLedgerEntrySerializer(many=True), description="Paginated ledger."),
            403: OpenApiResponse(description="Missing can_view_ledgers permission."),
        },
        tags=["Admin Ledgers"],
    )
    def list(self, request: Request) -> Response:
        filters = NotificationLedgerFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)
        qs = LedgerQueryService.notification_ledger(request.user, **filters.validated_data)
        return paginate(request, qs, NotificationLedgerEntrySerializer, view=self)


class AuditLogViewSet(viewsets.ViewSet):
    """
    **GET /api/core/audit-logs/**

    Privileged administrative actions, newest first.  Requires
    ``core.can_view_ledgers``.
    """

    permission_classes = [IsAuthenticated]
    queryset = AuditLogEntry.objects.none()

    @extend_schema(
        summary="Audit log (admin)",
        parameters=[
            OpenApiParameter(name="action_type", type=str, required=False),
            *_LEDGER_PAGE_PARAMETERS,
        ],
        responses={
            200: OpenApiResponse(response=AuditLogEntrySerializer(many=True), description="Paginated audit log."),
            403: OpenApiResponse(description="Missing can_view_ledgers permission."),
        },
        tags=["Admin Ledgers"],
    )
    def list(self, request: Request) -> Response:
        filters = AuditLogFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)
        qs = LedgerQueryService.audit_log(request.user, **filters.validated_data)
        return paginate(request, qs, AuditLogEntrySerializer, view=self)
