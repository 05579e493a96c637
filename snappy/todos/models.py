from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder
from django.core.validators import MaxValueValidator
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q
from django.utils import timezone


class Todo(models.Model):
    class Status(models.TextChoices):
        TODO = "todo", "To do"
        IN_PROGRESS = "in-progress", "In progress"
        DONE = "done", "Done"
        ARCHIVED = "archived", "Archived"
        SNOOZED = "snoozed", "Snoozed"

    class EnergyLevel(models.TextChoices):
        LOW = "low", "Low"
        MEDIUM = "medium", "Medium"
        HIGH = "high", "High"

    class Location(models.TextChoices):
        ANYWHERE = "anywhere", "Anywhere"
        HOME = "home", "Home"
        OFFICE = "office", "Office"
        COMMUTE = "commute", "Commute"

    class Mood(models.TextChoices):
        CREATIVE = "creative", "Creative"
        ANALYTICAL = "analytical", "Analytical"
        ADMINISTRATIVE = "administrative", "Administrative"
        SOCIAL = "social", "Social"

    class Source(models.TextChoices):
        MANUAL = "manual", "Manual"
        EMAIL = "email", "Email"
        WHATSAPP = "whatsapp", "WhatsApp"
        SCREENSHOT = "screenshot", "Screenshot"
        VOICE = "voice", "Voice"
        EXTENSION = "extension", "Extension"

    # Content
    title = models.CharField(max_length=200)
    note = models.TextField(max_length=5000, blank=True, default="")
    blocks = models.JSONField(default=list, blank=True)
    sub_steps = models.JSONField(default=list, blank=True)
    links = models.JSONField(default=list, blank=True)
    voice_note = models.JSONField(null=True, blank=True)
    ai_summary = models.TextField(blank=True, default="")

    # Classification
    tags = models.JSONField(default=list, blank=True)
    ai_classification = models.JSONField(
        null=True,
        blank=True,
        encoder=DjangoJSONEncoder,
    )

    # Ownership; ``list`` shadows the builtin for the rest of the class body.
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="todos",
    )
    list = models.ForeignKey(
        "lists.List",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="todos",
    )
    assigned_to = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        blank=True,
        related_name="assigned_todos",
    )

    # Scheduling
    priority = models.PositiveSmallIntegerField(
        default=2,
        validators=[MinValueValidator(0), MaxValueValidator(3)],
    )
    due_at = models.DateTimeField(null=True, blank=True)
    best_time_to_complete = models.CharField(max_length=20, blank=True, default="")
    estimated_duration = models.PositiveIntegerField(null=True, blank=True)
    snooze_until = models.DateTimeField(null=True, blank=True)
    energy_level = models.CharField(
        max_length=10,
        choices=EnergyLevel.choices,
        default=EnergyLevel.MEDIUM,
    )
    effort_minutes = models.PositiveSmallIntegerField(
        default=15,
        validators=[MinValueValidator(1), MaxValueValidator(480)],
    )
    location = models.CharField(
        max_length=10,
        choices=Location.choices,
        default=Location.ANYWHERE,
    )
    mood = models.CharField(
        max_length=16,
        choices=Mood.choices,
        default=Mood.ADMINISTRATIVE,
    )

    # State
    status = models.CharField(
        max_length=16,
        choices=Status.choices,
        default=Status.TODO,
        db_index=True,
    )
    completed_at = models.DateTimeField(null=True, blank=True)
    total_focus_time = models.PositiveIntegerField(default=0)
    version = models.PositiveIntegerField(default=1)
    source = models.CharField(
        max_length=16,
        choices=Source.choices,
        default=Source.MANUAL,
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["owner", "status", "-created_at"], name="todo_owner_status"),
            models.Index(fields=["owner", "list"], name="todo_owner_list"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(status="done", completed_at__isnull=False)
                    | (~Q(status="done") & Q(completed_at__isnull=True))
                ),
                name="todo_completed_at_matches_status",
            ),
        ]

    def __str__(self) -> str:
        return self.title

    @property
    def is_overdue(self) -> bool:
        if self.due_at is None or self.status == self.Status.DONE:
            return False
        return timezone.now() > self.due_at


class TodoVersion(models.Model):
    """Snapshot of a todo's title and note before an edit replaced them."""

    todo = models.ForeignKey(Todo, on_delete=models.CASCADE, related_name="versions")
    version = models.PositiveIntegerField()
    title = models.CharField(max_length=200)
    note = models.TextField(blank=True, default="")
    modified_at = models.DateTimeField(auto_now_add=True)
    modified_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )

    class Meta:
        ordering = ["version"]
        constraints = [
            models.UniqueConstraint(fields=["todo", "version"], name="unique_todo_version"),
        ]

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"{self.todo_id} v{self.version}"


class Comment(models.Model):
    todo = models.ForeignKey(Todo, on_delete=models.CASCADE, related_name="comments")
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="comments",
    )
    text = models.TextField(max_length=2000)
    mentions = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        blank=True,
        related_name="mentioned_in",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["created_at", "id"]

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"Comment({self.pk}) on {self.todo_id}"


class CommentReaction(models.Model):
    class Type(models.TextChoices):
        LIKE = "like", "Like"
        LOVE = "love", "Love"
        CHECK = "check", "Check"
        ZAP = "zap", "Zap"

    comment = models.ForeignKey(Comment, on_delete=models.CASCADE, related_name="reactions")
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="comment_reactions",
    )
    type = models.CharField(max_length=10, choices=Type.choices)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["id"]
        constraints = [
            models.UniqueConstraint(
                fields=["comment", "user"],
                name="one_reaction_per_user_per_comment",
            ),
        ]

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"{self.user_id}:{self.type}"


class FocusSession(models.Model):
    todo = models.ForeignKey(Todo, on_delete=models.CASCADE, related_name="focus_sessions")
    started_at = models.DateTimeField(default=timezone.now)
    ended_at = models.DateTimeField(null=True, blank=True)
    # Whole minutes, set when the session is stopped.
    duration = models.PositiveIntegerField(null=True, blank=True)
    interrupted = models.BooleanField(default=False)

    class Meta:
        ordering = ["-started_at", "-id"]
        constraints = [
            models.UniqueConstraint(
                fields=["todo"],
                condition=Q(ended_at__isnull=True),
                name="one_open_focus_session_per_todo",
            ),
        ]

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"Focus({self.pk}) on {self.todo_id}"

    @property
    def is_open(self) -> bool:
        return self.ended_at is None
