from rest_framework import serializers

from snappy.task_templates.models import Template
from snappy.todos.api.serializers import SubStepSerializer
from snappy.todos.models import Todo
from snappy.users.api.serializers import PublicUserSerializer


class TemplatePayloadSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=200)
    note = serializers.CharField(max_length=5000, required=False, allow_blank=True)
    sub_steps = SubStepSerializer(many=True, required=False)
    tags = serializers.ListField(child=serializers.CharField(max_length=50), required=False)
    priority = serializers.IntegerField(min_value=0, max_value=3, default=2)
    effort_minutes = serializers.IntegerField(min_value=1, max_value=480, required=False)
    energy_level = serializers.ChoiceField(choices=Todo.EnergyLevel.choices, required=False)
    location = serializers.ChoiceField(choices=Todo.Location.choices, required=False)
    mood = serializers.ChoiceField(choices=Todo.Mood.choices, required=False)
    best_time_to_complete = serializers.CharField(max_length=20, required=False, allow_blank=True)

    def validate_title(self, value: str) -> str:
        value = value.strip()
        if not value:
            msg = "Template title is required"
            raise serializers.ValidationError(msg)
        return value

    def validate_tags(self, value: list[str]) -> list[str]:
        return list(dict.fromkeys(t.strip().lower() for t in value if t.strip()))

    def validate(self, attrs):
        if "sub_steps" in attrs:
            attrs["sub_steps"] = [dict(step) for step in attrs["sub_steps"]]
        return attrs


class TemplateSerializer(serializers.ModelSerializer[Template]):
    owner = PublicUserSerializer(read_only=True)
    template = TemplatePayloadSerializer()

    class Meta:
        model = Template
        fields = [
            "id",
            "name",
            "description",
            "icon",
            "template",
            "owner",
            "is_public",
            "category",
            "usage_count",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "owner", "usage_count", "created_at", "updated_at"]

    def validate_name(self, value: str) -> str:
        value = value.strip()
        if not value:
            msg = "Template name is required"
            raise serializers.ValidationError(msg)
        return value

    def create(self, validated_data):
        validated_data["template"] = dict(validated_data["template"])
        return Template.objects.create(**validated_data)

    def update(self, instance, validated_data):
        if "template" in validated_data:
            validated_data["template"] = dict(validated_data["template"])
        for field, value in validated_data.items():
            setattr(instance, field, value)
        instance.save()
        return instance


class TemplateFilterSerializer(serializers.Serializer):
    category = serializers.ChoiceField(choices=Template.Category.choices, required=False)
    is_public = serializers.BooleanField(required=False, allow_null=True, default=None)


class PopularQuerySerializer(serializers.Serializer):
    limit = serializers.IntegerField(min_value=1, max_value=50, default=10)
