from django.conf import settings
from django.db import models


class Template(models.Model):
    """A reusable todo blueprint, private to its owner unless made public."""

    class Category(models.TextChoices):
        WORK = "work", "Work"
        PERSONAL = "personal", "Personal"
        STUDY = "study", "Study"
        HEALTH = "health", "Health"
        CREATIVE = "creative", "Creative"
        OTHER = "other", "Other"

    name = models.CharField(max_length=100)
    description = models.CharField(max_length=500, blank=True, default="")
    icon = models.CharField(max_length=16, default="📝")
    # Todo fields to prefill: title (required), note, sub_steps, tags, ...
    template = models.JSONField(default=dict)
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="templates",
    )
    is_public = models.BooleanField(default=False)
    category = models.CharField(
        max_length=16,
        choices=Category.choices,
        default=Category.OTHER,
        db_index=True,
    )
    usage_count = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-usage_count", "-created_at"]
        indexes = [
            models.Index(fields=["owner", "-created_at"], name="template_owner_recent"),
            models.Index(fields=["is_public", "-usage_count"], name="template_public_popular"),
        ]

    def __str__(self) -> str:
        return self.name
