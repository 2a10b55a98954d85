"""
Evidence app ViewSets.

Architecture: Views are intentionally thin.
Every view follows the strict three-step pattern:

    1. Parse / validate input via a serializer.
    2. Delegate all business logic to the appropriate service class.
    3. Serialize the result and return a DRF ``Response``.

No locking, custody logic or permission checks live here.

ViewSets
--------
- ``EvidenceViewSet``             — log, retrieve, current custody,
                                    transfer and per-item history.
- ``CaseEvidenceViewSet``         — evidence of one case (nested under
                                    ``/api/cases/{case_pk}/``).
- ``EvidenceLedgerViewSet``       — ``/api/admin/evidence/``.
- ``TransferLedgerViewSet``       — ``/api/admin/transfers/``.
"""

from __future__ import annotations

from drf_spectacular.utils import (
    OpenApiParameter,
    OpenApiResponse,
    extend_schema,
)
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response

from core.pagination import paginate

from .models import Evidence, EvidenceTransfer
from .serializers import (
    CustodySerializer,
    EvidenceCreateResultSerializer,
    EvidenceCreateSerializer,
    EvidenceDetailSerializer,
    EvidenceLedgerFilterSerializer,
    EvidenceListSerializer,
    TransferLedgerFilterSerializer,
    TransferRequestSerializer,
    TransferResultSerializer,
    TransferSerializer,
)
from .services import (
    CustodyQueryService,
    CustodyTransferService,
    EvidenceLoggingService,
    EvidenceQueryService,
    TransferQueryService,
)

_PAGE_PARAMETERS = [
    OpenApiParameter(name="page", type=int, required=False),
    OpenApiParameter(name="limit", type=int, required=False, description="Page size (max 100)."),
]


class EvidenceViewSet(viewsets.ViewSet):
    """
    Central ViewSet for the custody core.

    Uses ``viewsets.ViewSet`` (not ``ModelViewSet``) so every action is
    explicitly defined; evidence is never updated or deleted over HTTP.

    Permission Strategy
    -------------------
    The base permission is ``IsAuthenticated``.  Account-status checks
    are enforced inside the service layer, never in the view.
    """

    permission_classes = [IsAuthenticated]
    queryset = Evidence.objects.none()
    lookup_value_regex = r"\d+"

    @extend_schema(
        summary="Log evidence",
        description=(
            "Multipart upload.  Issues the next evidence code and creates the "
            "initial custody (logging officer at the given station).  The case "
            "must be OPEN.  ``email_sent`` reports the confirmation email."
        ),
        request={"multipart/form-data": EvidenceCreateSerializer},
        responses={
            201: OpenApiResponse(response=EvidenceCreateResultSerializer, description="Evidence logged."),
            400: OpenApiResponse(description="Missing field or attachment."),
            404: OpenApiResponse(description="Case not found."),
            409: OpenApiResponse(description="Case is closed."),
        },
        tags=["Evidence"],
    )
    def create(self, request: Request) -> Response:
        """POST /api/evidence/"""
        serializer = EvidenceCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        result = EvidenceLoggingService.log_evidence(
            case_id=data["case"],
            description=data["description"],
            category=data["category"],
            station=data["station"],
            attachment=data["attachment"],
            logged_by=request.user,
        )
        evidence = EvidenceQueryService.get_evidence(result.evidence.pk)
        payload = {
            "evidence": EvidenceDetailSerializer(evidence, context={"request": request}).data,
            "email_sent": result.notification_delivered,
        }
        return Response(payload, status=status.HTTP_201_CREATED)

    @extend_schema(
        summary="Retrieve evidence",
        responses={
            200: OpenApiResponse(response=EvidenceDetailSerializer, description="Evidence detail with current custody."),
            404: OpenApiResponse(description="Evidence not found."),
        },
        tags=["Evidence"],
    )
    def retrieve(self, request: Request, pk: int = None) -> Response:
        """GET /api/evidence/{id}/"""
        evidence = EvidenceQueryService.get_evidence(int(pk))
        serializer = EvidenceDetailSerializer(evidence, context={"request": request})
        return Response(serializer.data, status=status.HTTP_200_OK)

    @action(detail=True, methods=["get"], url_path="custody")
    @extend_schema(
        summary="Current custody",
        responses={
            200: OpenApiResponse(response=CustodySerializer, description="Current holder and location."),
            404: OpenApiResponse(description="Evidence not found."),
        },
        tags=["Evidence – Custody"],
    )
    def custody(self, request: Request, pk: int = None) -> Response:
        """GET /api/evidence/{id}/custody/"""
        custody = CustodyQueryService.get_current_custody(int(pk))
        return Response(CustodySerializer(custody).data, status=status.HTTP_200_OK)

    @action(detail=True, methods=["post"], url_path="transfer")
    @extend_schema(
        summary="Transfer custody",
        description=(
            "Moves custody to another officer and/or location.  Custody and "
            "the transfer ledger change together or not at all.  The new "
            "holder is emailed after commit; ``email_sent`` is informational."
        ),
        request=TransferRequestSerializer,
        responses={
            201: OpenApiResponse(response=TransferResultSerializer, description="Transfer committed."),
            400: OpenApiResponse(description="Validation error or inconsistent destination officer."),
            404: OpenApiResponse(description="Evidence or destination officer not found."),
            409: OpenApiResponse(description="No-op transfer or case closed (see ``code``)."),
            500: OpenApiResponse(description="Storage failure; nothing changed."),
        },
        tags=["Evidence – Custody"],
    )
    def transfer(self, request: Request, pk: int = None) -> Response:
        """POST /api/evidence/{id}/transfer/"""
        serializer = TransferRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = CustodyTransferService.transfer_custody(
            evidence_id=int(pk),
            initiated_by=request.user,
            **serializer.validated_data,
        )
        payload = {
            "transfer": TransferSerializer(result.transfer).data,
            "email_sent": result.notification_delivered,
        }
        return Response(payload, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["get"], url_path="history")
    @extend_schema(
        summary="Transfer history",
        description="Every committed transfer of the item, most recent first.",
        responses={
            200: OpenApiResponse(response=TransferSerializer(many=True), description="Ledger entries."),
            404: OpenApiResponse(description="Evidence not found."),
        },
        tags=["Evidence – Custody"],
    )
    def history(self, request: Request, pk: int = None) -> Response:
        """GET /api/evidence/{id}/history/"""
        transfers = TransferQueryService.history(int(pk))
        return Response(TransferSerializer(transfers, many=True).data, status=status.HTTP_200_OK)


class CaseEvidenceViewSet(viewsets.ViewSet):
    """Evidence logged against one case, newest first."""

    permission_classes = [IsAuthenticated]
    queryset = Evidence.objects.none()

    @extend_schema(
        summary="List evidence of a case",
        responses={
            200: OpenApiResponse(response=EvidenceListSerializer(many=True), description="Newest first."),
            404: OpenApiResponse(description="Case not found."),
        },
        tags=["Cases"],
    )
    def list(self, request: Request, case_pk: int = None) -> Response:
        """GET /api/cases/{case_pk}/evidence/"""
        qs = EvidenceQueryService.list_for_case(int(case_pk))
        return Response(EvidenceListSerializer(qs, many=True).data, status=status.HTTP_200_OK)


class EvidenceLedgerViewSet(viewsets.ViewSet):
    """Read-only administrative projection of the evidence catalog."""

    permission_classes = [IsAuthenticated]
    queryset = Evidence.objects.none()

    @extend_schema(
        summary="Evidence ledger (admin)",
        parameters=[
            OpenApiParameter(name="search", type=str, required=False, description="At least 2 characters."),
            OpenApiParameter(name="category", type=str, required=False),
            *_PAGE_PARAMETERS,
        ],
        responses={
            200: OpenApiResponse(response=EvidenceListSerializer(many=True), description="Paginated evidence."),
            403: OpenApiResponse(description="Ledger access requires the can_view_ledgers permission."),
        },
        tags=["Admin Ledgers"],
    )
    def list(self, request: Request) -> Response:
        """GET /api/admin/evidence/"""
        filters = EvidenceLedgerFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)
        qs = EvidenceQueryService.admin_ledger(request.user, **filters.validated_data)
        return paginate(request, qs, EvidenceListSerializer, view=self)


class TransferLedgerViewSet(viewsets.ViewSet):
    """Read-only administrative projection of the transfer ledger."""

    permission_classes = [IsAuthenticated]
    queryset = EvidenceTransfer.objects.none()

    @extend_schema(
        summary="Transfer ledger (admin)",
        parameters=[
            OpenApiParameter(name="search", type=str, required=False, description="At least 2 characters."),
            OpenApiParameter(name="transfer_type", type=str, required=False),
            *_PAGE_PARAMETERS,
        ],
        responses={
            200: OpenApiResponse(response=TransferSerializer(many=True), description="Paginated transfers."),
            403: OpenApiResponse(description="Ledger access requires the can_view_ledgers permission."),
        },
        tags=["Admin Ledgers"],
    )
    def list(self, request: Request) -> Response:
        """GET /api/admin/transfers/"""
        filters = TransferLedgerFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)
        qs = TransferQueryService.admin_ledger(request.user, **filters.validated_data)
        return paginate(request, qs, TransferSerializer, view=self)
