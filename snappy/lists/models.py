from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import RegexValidator
from django.db import models

HEX_COLOR = RegexValidator(r"^#[0-9A-Fa-f]{6}$", "Color must be a hex value like #3B82F6")


class List(models.Model):
    DEFAULT_COLOR = "#3B82F6"
    DEFAULT_ICON = "📝"

    name = models.CharField(max_length=100)
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="owned_lists",
    )
    is_private = models.BooleanField(default=True)
    color = models.CharField(max_length=7, default=DEFAULT_COLOR, validators=[HEX_COLOR])
    icon = models.CharField(max_length=16, default=DEFAULT_ICON)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-updated_at", "-id"]

    def __str__(self) -> str:
        return self.name


class Collaborator(models.Model):
    """A non-owner user granted access to a list."""

    class Role(models.TextChoices):
        EDITOR = "editor", "Editor"
        VIEWER = "viewer", "Viewer"

    list = models.ForeignKey(List, on_delete=models.CASCADE, related_name="collaborators")
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="collaborations",
    )
    role = models.CharField(max_length=10, choices=Role.choices, default=Role.EDITOR)
    added_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["added_at", "id"]
        constraints = [
            models.UniqueConstraint(
                fields=["list", "user"],
                name="unique_list_collaborator",
            ),
        ]

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"{self.user_id} on {self.list_id} ({self.role})"

    def clean(self):
        if self.list_id and self.user_id == self.list.owner_id:
            raise ValidationError({"user": "The list owner cannot be a collaborator."})
