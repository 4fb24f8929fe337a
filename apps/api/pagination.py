"""
Pagination for asset and draft listings.

The studio's library view sorts and searches client-side, so it needs the
caller's whole list: without ``limit`` in the query string nothing is
paginated. Paged responses keep the success envelope and put the counters
under ``metadata.pagination``.
"""
from typing import Any, List

from rest_framework.pagination import LimitOffsetPagination
from rest_framework.response import Response

from .utils import success_response


class OptInLimitOffsetPagination(LimitOffsetPagination):
    default_limit = 50
    max_limit = 200

    def paginate_queryset(self, queryset, request, view=None):
        if self.limit_query_param not in request.query_params:
            return None
        return super().paginate_queryset(queryset, request, view)

    def get_paginated_response(self, data: List[Any]) -> Response:
        next_link = self.get_next_link()
        previous_link = self.get_previous_link()
        return success_response(data, metadata={
            "pagination": {
                "limit": self.limit,
                "offset": self.offset,
                "total_count": self.count,
                "has_next": next_link is not None,
                "has_previous": previous_link is not None,
            },
            "links": {"next": next_link, "previous": previous_link},
        })
