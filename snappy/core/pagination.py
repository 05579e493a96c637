from __future__ import annotations

from rest_framework.pagination import LimitOffsetPagination
from rest_framework.response import Response


class SkipLimitPagination(LimitOffsetPagination):
    """``?limit=&skip=`` pagination used by the mobile and web clients."""

    default_limit = 100
    max_limit = 500
    offset_query_param = "skip"

    def get_paginated_response(self, data):
        return Response(
            {
                "results": data,
                "pagination": {
                    "total": self.count,
                    "limit": self.limit,
                    "skip": self.offset,
                    "hasMore": self.count > self.offset + self.limit,
                },
            },
        )

    def get_paginated_response_schema(self, schema):
        return {
            "type": "object",
            "properties": {
                "results": schema,
                "pagination": {
                    "type": "object",
                    "properties": {
                        "total": {"type": "integer"},
                        "limit": {"type": "integer"},
                        "skip": {"type": "integer"},
                        "hasMore": {"type": "boolean"},
                    },
                },
            },
        }


class ActivityPagination(SkipLimitPagination):
    default_limit = 50
