from rest_framework import serializers

from snappy.todos.models import Todo

IMAGE_MIME_TYPES = ("image/jpeg", "image/png", "image/webp", "image/gif", "application/pdf")


class AnalyzeTextSerializer(serializers.Serializer):
    text = serializers.CharField(max_length=5000)


class AnalyzeImageSerializer(serializers.Serializer):
    image = serializers.FileField()

    def validate_image(self, value):
        if getattr(value, "content_type", None) not in IMAGE_MIME_TYPES:
            msg = "Unsupported image type"
            raise serializers.ValidationError(msg)
        return value


class SuggestionsQuerySerializer(serializers.Serializer):
    energy = serializers.ChoiceField(choices=Todo.EnergyLevel.choices, default="medium")


class TranscriptSerializer(serializers.Serializer):
    transcript = serializers.CharField(max_length=100_000)
