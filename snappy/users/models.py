from django.contrib.auth.models import AbstractUser
from django.db import models
from django.db.models import CharField
from django.db.models import EmailField
from django.utils.translation import gettext_lazy as _

from .managers import UserManager


def default_user_settings() -> dict:
    return {"ai_enabled": True, "multimedia_enabled": True}


class User(AbstractUser):
    """
    Default custom user model for snappy.
    Users sign in with their email address; there is no username.
    """

    username = None  # type: ignore[assignment]
    first_name = None  # type: ignore[assignment]
    last_name = None  # type: ignore[assignment]

    # First and last name do not cover name patterns around the globe
    name = CharField(_("Full Name"), max_length=50)
    email = EmailField(_("email address"), unique=True)
    avatar_url = models.URLField(_("Avatar URL"), blank=True, max_length=500)
    settings = models.JSONField(default=default_user_settings, blank=True)
    # Audit timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = ["name"]

    objects = UserManager()

    def save(self, *args, **kwargs):
        if self.email:
            self.email = self.email.strip().lower()
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return self.email

    @property
    def ai_enabled(self) -> bool:
        return bool((self.settings or {}).get("ai_enabled", True))
