"""
Pagination for administrative ledgers.

Every administrative list (users, evidence, transfers, audit log,
notification ledger) pages the same way::

    ?page=2&limit=15&search=abc

and answers with::

    {"data": [...], "total": 42, "page": 2, "totalPages": 3}
"""

from __future__ import annotations

import math

from django.conf import settings
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class LedgerPagination(PageNumberPagination):
    """``PageNumberPagination`` with ``limit`` as the page-size parameter."""

    page_query_param = "page"
    page_size_query_param = "limit"

    def __init__(self):
        self.page_size = settings.LEDGER_PAGE_SIZE
        self.max_page_size = settings.LEDGER_MAX_PAGE_SIZE

    def get_paginated_response(self, data) -> Response:
        total = self.page.paginator.count
        page_size = self.page.paginator.per_page
        return Response({
            "data": data,
            "total": total,
            "page": self.page.number,
            "totalPages": math.ceil(total / page_size) if total else 0,
        })

    def get_paginated_response_schema(self, schema: dict) -> dict:
        return {
            "type": "object",
            "required": ["data", "total", "page", "totalPages"],
            "properties": {
                "data": schema,
                "total": {"type": "integer", "example": 42},
                "page": {"type": "integer", "example": 1},
                "totalPages": {"type": "integer", "example": 3},
            },
        }


def paginate(request, queryset, serializer_class, view=None) -> Response:
    """
    Page ``queryset`` through ``LedgerPagination`` and serialize the page.

    Shared by the ``ViewSet``-based admin views, which do not go through
    ``GenericAPIView.paginate_queryset``.
    """
    paginator = LedgerPagination()
    page = paginator.paginate_queryset(queryset, request, view=view)
    serializer = serializer_class(page, many=True)
    return paginator.get_paginated_response(serializer.data)


def search_term(raw: str | None) -> str | None:
    """Return the stripped search text, or ``None`` when shorter than two characters."""
    term = (raw or "").strip()
    return term if len(term) >= 2 else None
