from django.db.models import Prefetch
from drf_spectacular.utils import extend_schema
from drf_spectacular.utils import extend_schema_view
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.mixins import CreateModelMixin
from rest_framework.mixins import DestroyModelMixin
from rest_framework.mixins import ListModelMixin
from rest_framework.mixins import RetrieveModelMixin
from rest_framework.mixins import UpdateModelMixin
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from snappy.lists import access
from snappy.lists import services
from snappy.lists.models import Collaborator

from .serializers import CollaboratorRoleSerializer
from .serializers import CollaboratorSerializer
from .serializers import InviteSerializer
from .serializers import ListSerializer


@extend_schema_view(
    list=extend_schema(tags=["Lists"]),
    retrieve=extend_schema(tags=["Lists"]),
    create=extend_schema(tags=["Lists"]),
    update=extend_schema(tags=["Lists"]),
    partial_update=extend_schema(tags=["Lists"]),
    destroy=extend_schema(tags=["Lists"]),
)
class ListViewSet(
    ListModelMixin,
    RetrieveModelMixin,
    CreateModelMixin,
    UpdateModelMixin,
    DestroyModelMixin,
    GenericViewSet,
):
    serializer_class = ListSerializer
    pagination_class = None

    def get_queryset(self):
        return (
            access.readable_lists(self.request.user.pk)
            .select_related("owner")
            .prefetch_related(
                Prefetch(
                    "collaborators",
                    queryset=Collaborator.objects.select_related("user"),
                ),
            )
        )

    def get_object(self):
        task_list = services.get_list_for(self.request.user, self.kwargs["pk"])
        self.check_object_permissions(self.request, task_list)
        return task_list

    def perform_create(self, serializer):
        result = services.create_list(self.request.user, serializer.validated_data)
        serializer.instance = result.entity

    def perform_update(self, serializer):
        result = services.update_list(
            self.request.user,
            serializer.instance,
            serializer.validated_data,
        )
        serializer.instance = result.entity

    def perform_destroy(self, instance):
        services.delete_list(self.request.user, instance)

    @extend_schema(
        tags=["Lists"],
        request=InviteSerializer,
        responses={201: CollaboratorSerializer},
    )
    @action(detail=True, methods=["post"])
    def invite(self, request, pk=None):
        task_list = self.get_object()
        payload = InviteSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        result = services.invite_collaborator(
            request.user,
            task_list,
            payload.validated_data["email"],
            payload.validated_data["role"],
        )
        return Response(
            CollaboratorSerializer(result.entity, context={"request": request}).data,
            status=status.HTTP_201_CREATED,
        )

    @extend_schema(
        tags=["Lists"],
        methods=["PATCH"],
        request=CollaboratorRoleSerializer,
        responses={200: CollaboratorSerializer},
    )
    @extend_schema(tags=["Lists"], methods=["DELETE"], responses={204: None})
    @action(
        detail=True,
        methods=["patch", "delete"],
        url_path=r"collaborators/(?P<user_id>\d+)",
    )
    def collaborator(self, request, pk=None, user_id=None):
        task_list = self.get_object()
        if request.method == "DELETE":
            services.remove_collaborator(request.user, task_list, user_id)
            return Response(status=status.HTTP_204_NO_CONTENT)

        payload = CollaboratorRoleSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        result = services.update_collaborator_role(
            request.user,
            task_list,
            user_id,
            payload.validated_data["role"],
        )
        return Response(
            CollaboratorSerializer(result.entity, context={"request": request}).data,
        )
