from django.contrib.auth import authenticate
from rest_framework import serializers

from snappy.users.models import User


class UserSettingsSerializer(serializers.Serializer):
    ai_enabled = serializers.BooleanField(required=False)
    multimedia_enabled = serializers.BooleanField(required=False)


class UserSerializer(serializers.ModelSerializer[User]):
    settings = UserSettingsSerializer(required=False)

    class Meta:
        model = User
        fields = ["id", "name", "email", "avatar_url", "settings", "created_at"]
        read_only_fields = ["id", "email", "created_at"]

    def validate_name(self, value: str) -> str:
        value = value.strip()
        if not 2 <= len(value) <= 50:  # noqa: PLR2004
            msg = "Name must be between 2 and 50 characters"
            raise serializers.ValidationError(msg)
        return value

    def update(self, instance, validated_data):
        settings_patch = validated_data.pop("settings", None)
        if settings_patch:
            instance.settings = {**(instance.settings or {}), **settings_patch}
        for field, value in validated_data.items():
            setattr(instance, field, value)
        instance.save()
        return instance


class PublicUserSerializer(serializers.ModelSerializer[User]):
    """Profile fields other users may see (mentions, collaborator pickers)."""

    class Meta:
        model = User
        fields = ["id", "name", "email", "avatar_url"]
        read_only_fields = fields


class RegisterSerializer(serializers.Serializer):
    name = serializers.CharField(min_length=2, max_length=50, trim_whitespace=True)
    email = serializers.EmailField()
    password = serializers.CharField(min_length=6, write_only=True, trim_whitespace=False)

    def validate_email(self, value: str) -> str:
        return value.strip().lower()


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, trim_whitespace=False)

    def validate(self, attrs):
        user = authenticate(
            self.context.get("request"),
            email=attrs["email"].strip().lower(),
            password=attrs["password"],
        )
        attrs["user"] = user
        return attrs


class AuthResponseSerializer(serializers.Serializer):
    user = UserSerializer()
    token = serializers.CharField()
