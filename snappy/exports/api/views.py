from django.http import HttpResponse
from django.utils import timezone
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter
from drf_spectacular.utils import extend_schema
from rest_framework import serializers
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.viewsets import ViewSet

from snappy.exports import services

INCLUDE_ARCHIVED = OpenApiParameter("include_archived", OpenApiTypes.BOOL)


class ExportQuerySerializer(serializers.Serializer):
    include_archived = serializers.BooleanField(default=False)


class ExportViewSet(ViewSet):
    def _include_archived(self, request) -> bool:
        query = ExportQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        return query.validated_data["include_archived"]

    @extend_schema(tags=["Export"], parameters=[INCLUDE_ARCHIVED], responses={200: OpenApiTypes.OBJECT})
    @action(detail=False, methods=["get"], url_path="json")
    def as_json(self, request):
        return Response(
            services.export_json(
                request.user,
                include_archived=self._include_archived(request),
                request=request,
            ),
        )

    @extend_schema(tags=["Export"], parameters=[INCLUDE_ARCHIVED], responses={(200, "text/csv"): OpenApiTypes.STR})
    @action(detail=False, methods=["get"], url_path="csv")
    def as_csv(self, request):
        body = services.export_csv(
            request.user,
            include_archived=self._include_archived(request),
        )
        response = HttpResponse(body, content_type="text/csv; charset=utf-8")
        stamp = timezone.now().strftime("%Y%m%d%H%M%S")
        response["Content-Disposition"] = f'attachment; filename="snappy-todo-export-{stamp}.csv"'
        return response
