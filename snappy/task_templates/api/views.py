import logging

from django.db.models import F
from django.db.models import Q
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import extend_schema
from drf_spectacular.utils import extend_schema_view
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.viewsets import ModelViewSet

from snappy.core.exceptions import Forbidden
from snappy.core.exceptions import NotFound
from snappy.task_templates.models import Template

from .serializers import PopularQuerySerializer
from .serializers import TemplateFilterSerializer
from .serializers import TemplateSerializer

logger = logging.getLogger(__name__)


@extend_schema_view(
    list=extend_schema(tags=["Templates"], parameters=[TemplateFilterSerializer]),
    retrieve=extend_schema(tags=["Templates"]),
    create=extend_schema(tags=["Templates"]),
    update=extend_schema(tags=["Templates"]),
    partial_update=extend_schema(tags=["Templates"]),
    destroy=extend_schema(tags=["Templates"]),
)
class TemplateViewSet(ModelViewSet):
    """Templates: readable when owned or public, writable by the owner only."""

    serializer_class = TemplateSerializer
    pagination_class = None
    http_method_names = ["get", "post", "patch", "put", "delete"]

    def get_queryset(self):
        qs = Template.objects.select_related("owner")
        if self.action != "list":
            return qs

        # A plain dict keeps a missing is_public as None rather than False.
        filters = TemplateFilterSerializer(data=self.request.query_params.dict())
        filters.is_valid(raise_exception=True)
        user = self.request.user
        is_public = filters.validated_data.get("is_public")
        if is_public is None:
            qs = qs.filter(Q(owner=user) | Q(is_public=True))
        else:
            qs = qs.filter(owner=user, is_public=is_public)
        if category := filters.validated_data.get("category"):
            qs = qs.filter(category=category)
        return qs

    def get_object(self):
        template = Template.objects.select_related("owner").filter(pk=self.kwargs["pk"]).first()
        if template is None:
            msg = "Template not found"
            raise NotFound(msg)
        is_owner = template.owner_id == self.request.user.pk
        if not (is_owner or template.is_public):
            raise Forbidden
        if self.action in ("update", "partial_update", "destroy") and not is_owner:
            msg = "Only the template owner can change it"
            raise Forbidden(msg)
        return template

    def perform_create(self, serializer):
        template = serializer.save(owner=self.request.user)
        logger.info("User %s created template %s", self.request.user.pk, template.pk)

    @extend_schema(tags=["Templates"], request=None, responses={200: OpenApiTypes.OBJECT})
    @action(detail=True, methods=["post"])
    def use(self, request, pk=None):
        template = self.get_object()
        Template.objects.filter(pk=template.pk).update(usage_count=F("usage_count") + 1)
        template.refresh_from_db(fields=["usage_count"])
        return Response({"usage_count": template.usage_count})

    @extend_schema(
        tags=["Templates"],
        parameters=[PopularQuerySerializer],
        responses={200: TemplateSerializer(many=True)},
    )
    @action(detail=False, methods=["get"])
    def popular(self, request):
        query = PopularQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        templates = (
            Template.objects.filter(is_public=True)
            .select_related("owner")
            .order_by("-usage_count", "-created_at")[: query.validated_data["limit"]]
        )
        return Response({"results": TemplateSerializer(templates, many=True).data})
