from rest_framework import serializers

from snappy.activity.models import Activity
from snappy.users.api.serializers import PublicUserSerializer


class ActivitySerializer(serializers.ModelSerializer[Activity]):
    actor = PublicUserSerializer(read_only=True)

    class Meta:
        model = Activity
        fields = [
            "id",
            "actor",
            "action",
            "target_type",
            "target_id",
            "list_id",
            "payload",
            "created_at",
        ]
        read_only_fields = fields


class ActivityFilterSerializer(serializers.Serializer):
    target_type = serializers.ChoiceField(
        choices=Activity.TargetType.choices,
        required=False,
    )
    target_id = serializers.IntegerField(required=False, min_value=1)


class CleanupSerializer(serializers.Serializer):
    days = serializers.IntegerField(default=90, min_value=1, max_value=3650)
