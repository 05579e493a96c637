from rest_framework import serializers

from snappy.lists.models import Collaborator
from snappy.lists.models import List
from snappy.users.api.serializers import PublicUserSerializer


class CollaboratorSerializer(serializers.ModelSerializer[Collaborator]):
    user = PublicUserSerializer(read_only=True)

    class Meta:
        model = Collaborator
        fields = ["user", "role", "added_at"]
        read_only_fields = fields


class ListSerializer(serializers.ModelSerializer[List]):
    owner = PublicUserSerializer(read_only=True)
    collaborators = CollaboratorSerializer(many=True, read_only=True)
    role = serializers.SerializerMethodField()

    class Meta:
        model = List
        fields = [
            "id",
            "name",
            "owner",
            "collaborators",
            "is_private",
            "color",
            "icon",
            "role",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "owner", "collaborators", "role", "created_at", "updated_at"]

    def validate_name(self, value: str) -> str:
        value = value.strip()
        if not value:
            msg = "Name is required"
            raise serializers.ValidationError(msg)
        return value

    def get_role(self, obj: List) -> str | None:
        request = self.context.get("request")
        user_id = getattr(getattr(request, "user", None), "pk", None)
        if user_id is None:
            return None
        if obj.owner_id == user_id:
            return "owner"
        for collaborator in obj.collaborators.all():
            if collaborator.user_id == user_id:
                return collaborator.role
        return None


class InviteSerializer(serializers.Serializer):
    email = serializers.EmailField()
    role = serializers.ChoiceField(
        choices=Collaborator.Role.choices,
        default=Collaborator.Role.EDITOR,
    )


class CollaboratorRoleSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=Collaborator.Role.choices)
