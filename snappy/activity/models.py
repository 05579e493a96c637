from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder
from django.db import models


class Activity(models.Model):
    class Action(models.TextChoices):
        CREATE_TODO = "create_todo"
        UPDATE_TODO = "update_todo"
        COMPLETE_TODO = "complete_todo"
        DELETE_TODO = "delete_todo"
        CREATE_LIST = "create_list"
        UPDATE_LIST = "update_list"
        DELETE_LIST = "delete_list"
        INVITE_USER = "invite_user"
        REMOVE_COLLABORATOR = "remove_collaborator"
        UPDATE_COLLABORATOR = "update_collaborator"

    class TargetType(models.TextChoices):
        TODO = "todo"
        LIST = "list"
        USER = "user"

    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="activities",
    )
    action = models.CharField(max_length=32, choices=Action.choices)
    target_type = models.CharField(max_length=10, choices=TargetType.choices)
    target_id = models.BigIntegerField()
    # Plain id rather than a FK: the list may be gone by the time the feed is read.
    list_id = models.BigIntegerField(null=True, blank=True, db_index=True)
    payload = models.JSONField(default=dict, blank=True, encoder=DjangoJSONEncoder)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        verbose_name_plural = "activities"
        indexes = [
            models.Index(fields=["actor", "-created_at"], name="activity_actor_recent"),
            models.Index(fields=["target_type", "target_id"], name="activity_target"),
        ]

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"[{self.created_at}] {self.actor_id}: {self.action}"
