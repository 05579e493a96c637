from django.utils import timezone
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import extend_schema
from rest_framework.decorators import action
from rest_framework.parsers import FormParser
from rest_framework.parsers import MultiPartParser
from rest_framework.response import Response
from rest_framework.viewsets import ViewSet

from snappy.ai import services
from snappy.core.exceptions import NotFound
from snappy.integrations.llm.client import get_llm_client_from_settings
from snappy.todos.models import Todo

from .serializers import AnalyzeImageSerializer
from .serializers import AnalyzeTextSerializer
from .serializers import SuggestionsQuerySerializer
from .serializers import TranscriptSerializer

OPEN_STATUSES = (Todo.Status.TODO, Todo.Status.IN_PROGRESS)
SUGGESTION_CONTEXT_SIZE = 20


def _workload(count: int) -> str:
    if count > 10:  # noqa: PLR2004
        return "high"
    if count > 5:  # noqa: PLR2004
        return "medium"
    return "low"


class AIViewSet(ViewSet):
    """Assistant endpoints; every one degrades instead of failing when AI is off."""

    def _client(self):
        # The user's own preference can switch the assistant off.
        if not self.request.user.ai_enabled:
            return None
        return get_llm_client_from_settings()

    @extend_schema(tags=["AI"], request=AnalyzeTextSerializer, responses={200: OpenApiTypes.OBJECT})
    @action(detail=False, methods=["post"], url_path="analyze/text")
    def analyze_text(self, request):
        payload = AnalyzeTextSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        return Response(
            services.extract_task_from_text(payload.validated_data["text"], client=self._client()),
        )

    @extend_schema(tags=["AI"], request=AnalyzeImageSerializer, responses={200: OpenApiTypes.OBJECT})
    @action(
        detail=False,
        methods=["post"],
        url_path="analyze/image",
        parser_classes=[MultiPartParser, FormParser],
    )
    def analyze_image(self, request):
        payload = AnalyzeImageSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        image = payload.validated_data["image"]
        tasks = services.extract_tasks_from_image(
            image.read(),
            image.content_type,
            client=self._client(),
        )
        return Response({"tasks": tasks, "count": len(tasks)})

    @extend_schema(tags=["AI"], parameters=[SuggestionsQuerySerializer], responses={200: OpenApiTypes.OBJECT})
    @action(detail=False, methods=["get"])
    def suggestions(self, request):
        query = SuggestionsQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        todos = list(
            Todo.objects.filter(owner=request.user, status__in=OPEN_STATUSES)
            .order_by("-created_at")
            .values("id", "title", "priority", "due_at", "energy_level", "effort_minutes")[
                :SUGGESTION_CONTEXT_SIZE
            ],
        )
        context = {
            "todos": todos[:10],
            "currentTime": timezone.now().isoformat(),
            "userEnergy": query.validated_data["energy"],
            "workload": _workload(len(todos)),
        }
        return Response(
            {
                "suggestions": services.smart_suggestions(context, client=self._client()),
                "context": {"taskCount": len(todos), "workload": context["workload"]},
            },
        )

    @extend_schema(tags=["AI"], request=None, responses={200: OpenApiTypes.OBJECT})
    @action(detail=False, methods=["post"], url_path=r"tasks/(?P<todo_id>\d+)/breakdown")
    def breakdown(self, request, todo_id=None):
        # Owner-only, like focus tracking; other users see a missing todo.
        todo = Todo.objects.filter(pk=todo_id, owner=request.user).first()
        if todo is None:
            msg = "Todo not found"
            raise NotFound(msg)
        subtasks = services.breakdown_task(todo.title, todo.note, client=self._client())
        return Response(
            {"subtasks": subtasks, "original_task": {"id": todo.pk, "title": todo.title}},
        )

    @extend_schema(tags=["AI"], request=TranscriptSerializer, responses={200: OpenApiTypes.OBJECT})
    @action(detail=False, methods=["post"], url_path="meeting/summarize")
    def summarize(self, request):
        payload = TranscriptSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        summary = services.summarize_transcript(
            payload.validated_data["transcript"],
            client=self._client(),
        )
        return Response({"summary": summary})
