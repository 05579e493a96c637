from django.utils import timezone
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter
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

from snappy.core.pagination import SkipLimitPagination
from snappy.realtime import get_fanout
from snappy.todos import comments as comment_handlers
from snappy.todos import focus
from snappy.todos import services

from .serializers import CommentSerializer
from .serializers import CommentTextSerializer
from .serializers import FocusSessionSerializer
from .serializers import FocusSessionWithTodoSerializer
from .serializers import FocusStopSerializer
from .serializers import ReactionInputSerializer
from .serializers import TodoFilterSerializer
from .serializers import TodoSerializer
from .serializers import TodoVersionSerializer

COMMENT_PATH = r"comments/(?P<comment_id>\d+)"


@extend_schema_view(
    list=extend_schema(
        tags=["Todos"],
        parameters=[
            OpenApiParameter("list_id", OpenApiTypes.INT),
            OpenApiParameter("tag", OpenApiTypes.STR),
            OpenApiParameter("status", OpenApiTypes.STR),
        ],
    ),
    retrieve=extend_schema(tags=["Todos"]),
    create=extend_schema(tags=["Todos"]),
    update=extend_schema(tags=["Todos"]),
    partial_update=extend_schema(tags=["Todos"]),
    destroy=extend_schema(tags=["Todos"]),
)
class TodoViewSet(
    ListModelMixin,
    RetrieveModelMixin,
    CreateModelMixin,
    UpdateModelMixin,
    DestroyModelMixin,
    GenericViewSet,
):
    serializer_class = TodoSerializer
    pagination_class = SkipLimitPagination

    @property
    def fanout(self):
        return get_fanout()

    def get_queryset(self):
        filters = TodoFilterSerializer(data=self.request.query_params)
        filters.is_valid(raise_exception=True)
        return services.list_todos(self.request.user, **filters.validated_data)

    def get_object(self):
        todo = services.get_todo_for(self.request.user, self.kwargs["pk"])
        self.check_object_permissions(self.request, todo)
        return todo

    def perform_create(self, serializer):
        result = services.create_todo(
            self.request.user,
            serializer.validated_data,
            fanout=self.fanout,
        )
        serializer.instance = result.entity

    def perform_update(self, serializer):
        result = services.update_todo(
            self.request.user,
            serializer.instance.pk,
            serializer.validated_data,
            fanout=self.fanout,
        )
        serializer.instance = result.entity

    def perform_destroy(self, instance):
        services.delete_todo(self.request.user, instance.pk, fanout=self.fanout)

    @extend_schema(tags=["Todos"], responses={200: TodoVersionSerializer(many=True)})
    @action(detail=True, methods=["get"])
    def versions(self, request, pk=None):
        todo = self.get_object()
        versions = todo.versions.select_related("modified_by")
        return Response({"results": TodoVersionSerializer(versions, many=True).data})

    # Comments ---------------------------------------------------------------
    @extend_schema(
        tags=["Comments"],
        methods=["GET"],
        responses={200: CommentSerializer(many=True)},
    )
    @extend_schema(
        tags=["Comments"],
        methods=["POST"],
        request=CommentSerializer,
        responses={201: CommentSerializer},
    )
    @action(detail=True, methods=["get", "post"], url_path="comments")
    def comments(self, request, pk=None):
        if request.method == "GET":
            found = comment_handlers.list_comments(request.user, pk)
            return Response({"results": CommentSerializer(found, many=True).data})

        payload = CommentSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        result = comment_handlers.add_comment(
            request.user,
            pk,
            payload.validated_data["text"],
            payload.validated_data.get("mentions", ()),
            fanout=self.fanout,
        )
        return Response(
            CommentSerializer(result.entity).data,
            status=status.HTTP_201_CREATED,
        )

    @extend_schema(
        tags=["Comments"],
        methods=["PATCH"],
        request=CommentTextSerializer,
        responses={200: CommentSerializer},
    )
    @extend_schema(tags=["Comments"], methods=["DELETE"], responses={204: None})
    @action(detail=True, methods=["patch", "delete"], url_path=COMMENT_PATH)
    def comment(self, request, pk=None, comment_id=None):
        if request.method == "DELETE":
            comment_handlers.delete_comment(request.user, pk, comment_id, fanout=self.fanout)
            return Response(status=status.HTTP_204_NO_CONTENT)

        payload = CommentTextSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        result = comment_handlers.edit_comment(
            request.user,
            pk,
            comment_id,
            payload.validated_data["text"].strip(),
            fanout=self.fanout,
        )
        return Response(CommentSerializer(result.entity).data)

    @extend_schema(
        tags=["Comments"],
        methods=["POST"],
        request=ReactionInputSerializer,
        responses={200: CommentSerializer},
    )
    @extend_schema(tags=["Comments"], methods=["DELETE"], responses={204: None})
    @action(detail=True, methods=["post", "delete"], url_path=f"{COMMENT_PATH}/reactions")
    def reactions(self, request, pk=None, comment_id=None):
        if request.method == "DELETE":
            comment_handlers.remove_reaction(request.user, pk, comment_id, fanout=self.fanout)
            return Response(status=status.HTTP_204_NO_CONTENT)

        payload = ReactionInputSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        result = comment_handlers.set_reaction(
            request.user,
            pk,
            comment_id,
            payload.validated_data["type"],
            fanout=self.fanout,
        )
        return Response(CommentSerializer(result.entity).data)

    # Focus sessions ----------------------------------------------------------
    @extend_schema(tags=["Focus"], request=None, responses={201: FocusSessionSerializer})
    @action(detail=True, methods=["post"], url_path="focus/start")
    def focus_start(self, request, pk=None):
        result = focus.start_focus_session(request.user, pk, fanout=self.fanout)
        return Response(
            FocusSessionSerializer(result.entity).data,
            status=status.HTTP_201_CREATED,
        )

    @extend_schema(tags=["Focus"], request=FocusStopSerializer)
    @action(detail=True, methods=["post"], url_path="focus/stop")
    def focus_stop(self, request, pk=None):
        payload = FocusStopSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        result = focus.stop_focus_session(
            request.user,
            pk,
            interrupted=payload.validated_data["interrupted"],
            fanout=self.fanout,
        )
        result.entity.todo.refresh_from_db(fields=["total_focus_time"])
        return Response(
            {
                "session": FocusSessionSerializer(result.entity).data,
                "total_focus_time": result.entity.todo.total_focus_time,
            },
        )

    @extend_schema(tags=["Focus"])
    @action(detail=True, methods=["get"], url_path="focus/active")
    def focus_active(self, request, pk=None):
        session = focus.active_focus_session(request.user, pk)
        if session is None:
            return Response({"active": False})
        return Response(
            {
                "active": True,
                "session": FocusSessionSerializer(session).data,
                "elapsed_minutes": focus.elapsed_minutes(
                    session.started_at,
                    timezone.now(),
                ),
            },
        )


class FocusViewSet(GenericViewSet):
    serializer_class = FocusSessionWithTodoSerializer
    pagination_class = SkipLimitPagination

    def get_queryset(self):
        return focus.all_focus_sessions(self.request.user)

    @extend_schema(
        tags=["Focus"],
        parameters=[OpenApiParameter("period", OpenApiTypes.STR, enum=["24h", "7d", "30d"])],
        responses={200: OpenApiTypes.OBJECT},
    )
    @action(detail=False, methods=["get"])
    def stats(self, request):
        return Response(focus.focus_stats(request.user, request.query_params.get("period")))

    @extend_schema(tags=["Focus"], responses={200: FocusSessionWithTodoSerializer(many=True)})
    @action(detail=False, methods=["get"])
    def sessions(self, request):
        page = self.paginate_queryset(self.get_queryset())
        serializer = self.get_serializer(page, many=True)
        return self.get_paginated_response(serializer.data)
