from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter
from drf_spectacular.utils import extend_schema
from drf_spectacular.utils import extend_schema_view
from rest_framework.decorators import action
from rest_framework.mixins import ListModelMixin
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from snappy.activity import services
from snappy.activity.utils import purge_activity_older_than
from snappy.core.pagination import ActivityPagination

from .serializers import ActivityFilterSerializer
from .serializers import ActivitySerializer
from .serializers import CleanupSerializer


@extend_schema_view(
    list=extend_schema(
        tags=["Activity"],
        parameters=[
            OpenApiParameter("target_type", OpenApiTypes.STR),
            OpenApiParameter("target_id", OpenApiTypes.INT),
        ],
    ),
)
class ActivityViewSet(ListModelMixin, GenericViewSet):
    serializer_class = ActivitySerializer
    pagination_class = ActivityPagination

    def get_queryset(self):
        filters = ActivityFilterSerializer(data=self.request.query_params)
        filters.is_valid(raise_exception=True)
        return services.user_feed(self.request.user, **filters.validated_data)

    @extend_schema(tags=["Activity"], responses={200: ActivitySerializer(many=True)})
    @action(detail=False, methods=["get"], url_path=r"lists/(?P<list_id>\d+)")
    def list_feed(self, request, list_id=None):
        page = self.paginate_queryset(services.list_feed(request.user, list_id))
        serializer = self.get_serializer(page, many=True)
        return self.get_paginated_response(serializer.data)

    @extend_schema(
        tags=["Activity"],
        parameters=[OpenApiParameter("period", OpenApiTypes.STR, enum=["24h", "7d", "30d"])],
        responses={200: OpenApiTypes.OBJECT},
    )
    @action(detail=False, methods=["get"])
    def stats(self, request):
        return Response(
            services.activity_stats(request.user, request.query_params.get("period")),
        )

    @extend_schema(
        tags=["Activity"],
        parameters=[OpenApiParameter("days", OpenApiTypes.INT)],
        responses={200: OpenApiTypes.OBJECT},
    )
    @action(detail=False, methods=["delete"])
    def cleanup(self, request):
        payload = CleanupSerializer(data=request.query_params)
        payload.is_valid(raise_exception=True)
        deleted = purge_activity_older_than(
            payload.validated_data["days"],
            actor=request.user,
        )
        return Response({"deleted": deleted})
