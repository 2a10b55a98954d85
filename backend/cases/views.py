"""
Cases app ViewSets.

Architecture: Views are intentionally thin.
Every view follows the strict three-step pattern:

    1. Parse / validate input via a serializer.
    2. Delegate all business logic to the appropriate service class.
    3. Serialize the result and return a DRF ``Response``.

ViewSets
--------
- ``CaseViewSet`` — list / create / retrieve plus the ``close`` action.
  Evidence of a case is served by ``evidence.views.CaseEvidenceViewSet``
  under ``/api/cases/{case_pk}/evidence/``.
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

from core.domain.audit import client_ip
from core.pagination import paginate

from .models import Case
from .serializers import (
    CaseCreateSerializer,
    CaseDetailSerializer,
    CaseFilterSerializer,
    CaseListSerializer,
)
from .services import CaseQueryService, CaseRegistryService


class CaseViewSet(viewsets.ViewSet):
    """
    Central ViewSet for the case registry.

    The base permission is ``IsAuthenticated``; role checks live in
    ``CaseRegistryService``.
    """

    permission_classes = [IsAuthenticated]
    queryset = Case.objects.none()
    lookup_value_regex = r"\d+"

    @extend_schema(
        summary="List cases",
        description="Cases newest-first, optionally filtered by status and searched.",
        parameters=[
            OpenApiParameter(name="status", type=str, required=False, description="OPEN or CLOSED."),
            OpenApiParameter(name="search", type=str, required=False, description="At least 2 characters."),
            OpenApiParameter(name="page", type=int, required=False),
            OpenApiParameter(name="limit", type=int, required=False, description="Page size (max 100)."),
        ],
        responses={200: OpenApiResponse(response=CaseListSerializer(many=True), description="Paginated cases.")},
        tags=["Cases"],
    )
    def list(self, request: Request) -> Response:
        """GET /api/cases/"""
        filters = CaseFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)
        qs = CaseQueryService.list_cases(**filters.validated_data)
        return paginate(request, qs, CaseListSerializer, view=self)

    @extend_schema(
        summary="Register a case",
        request=CaseCreateSerializer,
        responses={
            201: OpenApiResponse(response=CaseDetailSerializer, description="Case registered."),
            400: OpenApiResponse(description="Validation error."),
        },
        tags=["Cases"],
    )
    def create(self, request: Request) -> Response:
        """POST /api/cases/"""
        serializer = CaseCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        case = CaseRegistryService.create_case(serializer.validated_data, request.user)
        return Response(CaseDetailSerializer(case).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        summary="Retrieve a case",
        responses={200: OpenApiResponse(response=CaseDetailSerializer, description="Case detail.")},
        tags=["Cases"],
    )
    def retrieve(self, request: Request, pk: int = None) -> Response:
        """GET /api/cases/{id}/"""
        case = CaseQueryService.get_case(int(pk))
        return Response(CaseDetailSerializer(case).data, status=status.HTTP_200_OK)

    @action(detail=True, methods=["post"], url_path="close")
    @extend_schema(
        summary="Close a case",
        description="OPEN → CLOSED.  Custody of the case's evidence is frozen afterwards.",
        request=None,
        responses={
            200: OpenApiResponse(response=CaseDetailSerializer, description="Case closed."),
            409: OpenApiResponse(description="Case already closed."),
        },
        tags=["Cases"],
    )
    def close(self, request: Request, pk: int = None) -> Response:
        """POST /api/cases/{id}/close/"""
        case = CaseRegistryService.close_case(
            int(pk), request.user, ip_address=client_ip(request),
        )
        return Response(CaseDetailSerializer(case).data, status=status.HTTP_200_OK)
