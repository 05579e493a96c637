import uuid

from django.contrib.auth import get_user_model
from rest_framework import serializers

from snappy.todos.models import Comment
from snappy.todos.models import CommentReaction
from snappy.todos.models import FocusSession
from snappy.todos.models import Todo
from snappy.todos.models import TodoVersion
from snappy.users.api.serializers import PublicUserSerializer

User = get_user_model()

MAX_TAGS = 20


class SubStepSerializer(serializers.Serializer):
    id = serializers.CharField(required=False, max_length=64)
    title = serializers.CharField(max_length=200)
    completed = serializers.BooleanField(default=False)
    order = serializers.IntegerField(default=0, min_value=0)

    def validate(self, attrs):
        attrs.setdefault("id", uuid.uuid4().hex)
        return attrs


class LinkSerializer(serializers.Serializer):
    url = serializers.URLField(max_length=2000)
    title = serializers.CharField(max_length=200, required=False, allow_blank=True)


class VoiceNoteSerializer(serializers.Serializer):
    url = serializers.CharField(max_length=500)
    duration = serializers.FloatField(required=False, min_value=0)
    transcript = serializers.CharField(required=False, allow_blank=True)


class TodoSerializer(serializers.ModelSerializer[Todo]):
    owner = PublicUserSerializer(read_only=True)
    list_id = serializers.IntegerField(required=False, allow_null=True)
    assigned_to = serializers.PrimaryKeyRelatedField(
        many=True,
        queryset=User.objects.filter(is_active=True),
        required=False,
    )
    tags = serializers.ListField(
        child=serializers.CharField(max_length=50),
        required=False,
        max_length=MAX_TAGS,
    )
    sub_steps = SubStepSerializer(many=True, required=False)
    links = LinkSerializer(many=True, required=False)
    voice_note = VoiceNoteSerializer(required=False, allow_null=True)
    blocks = serializers.ListField(child=serializers.JSONField(), required=False)
    is_overdue = serializers.BooleanField(read_only=True)

    class Meta:
        model = Todo
        fields = [
            "id",
            "title",
            "note",
            "blocks",
            "sub_steps",
            "links",
            "voice_note",
            "ai_summary",
            "owner",
            "list_id",
            "assigned_to",
            "tags",
            "ai_classification",
            "priority",
            "due_at",
            "best_time_to_complete",
            "estimated_duration",
            "snooze_until",
            "energy_level",
            "effort_minutes",
            "location",
            "mood",
            "status",
            "completed_at",
            "total_focus_time",
            "version",
            "source",
            "is_overdue",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "id",
            "owner",
            "ai_classification",
            "completed_at",
            "total_focus_time",
            "version",
            "is_overdue",
            "created_at",
            "updated_at",
        ]

    def validate_title(self, value: str) -> str:
        value = value.strip()
        if not value:
            msg = "Title is required"
            raise serializers.ValidationError(msg)
        return value

    def validate_tags(self, value: list[str]) -> list[str]:
        # Lower-cased, trimmed, first occurrence wins.
        cleaned = (tag.strip().lower() for tag in value)
        return list(dict.fromkeys(tag for tag in cleaned if tag))

    def validate_sub_steps(self, value):
        return [dict(step) for step in value]

    def validate_links(self, value):
        return [dict(link) for link in value]

    def validate_voice_note(self, value):
        return dict(value) if value is not None else None


class TodoVersionSerializer(serializers.ModelSerializer[TodoVersion]):
    modified_by = PublicUserSerializer(read_only=True)

    class Meta:
        model = TodoVersion
        fields = ["version", "title", "note", "modified_at", "modified_by"]
        read_only_fields = fields


class ReactionSerializer(serializers.ModelSerializer[CommentReaction]):
    user = PublicUserSerializer(read_only=True)

    class Meta:
        model = CommentReaction
        fields = ["user", "type", "updated_at"]
        read_only_fields = fields


class CommentSerializer(serializers.ModelSerializer[Comment]):
    user = PublicUserSerializer(read_only=True)
    mentions = serializers.PrimaryKeyRelatedField(
        many=True,
        queryset=User.objects.filter(is_active=True),
        required=False,
    )
    reactions = ReactionSerializer(many=True, read_only=True)

    class Meta:
        model = Comment
        fields = ["id", "user", "text", "mentions", "reactions", "created_at", "updated_at"]
        read_only_fields = ["id", "user", "reactions", "created_at", "updated_at"]

    def validate_text(self, value: str) -> str:
        value = value.strip()
        if not value:
            msg = "Comment text is required"
            raise serializers.ValidationError(msg)
        return value


class CommentTextSerializer(serializers.Serializer):
    text = serializers.CharField(max_length=2000)


class ReactionInputSerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=CommentReaction.Type.choices)


class FocusSessionSerializer(serializers.ModelSerializer[FocusSession]):
    class Meta:
        model = FocusSession
        fields = ["id", "started_at", "ended_at", "duration", "interrupted"]
        read_only_fields = fields


class FocusSessionWithTodoSerializer(FocusSessionSerializer):
    todo_id = serializers.IntegerField(read_only=True)
    todo_title = serializers.CharField(source="todo.title", read_only=True)

    class Meta(FocusSessionSerializer.Meta):
        fields = [*FocusSessionSerializer.Meta.fields, "todo_id", "todo_title"]
        read_only_fields = fields


class FocusStopSerializer(serializers.Serializer):
    interrupted = serializers.BooleanField(default=False)


class TodoFilterSerializer(serializers.Serializer):
    list_id = serializers.IntegerField(required=False, min_value=1)
    tag = serializers.CharField(required=False, max_length=50)
    status = serializers.ChoiceField(choices=Todo.Status.choices, required=False)
