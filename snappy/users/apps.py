import contextlib

from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class UsersConfig(AppConfig):
    name = "snappy.users"
    verbose_name = _("Users")

    def ready(self):
        # Registers the OpenAPI security scheme for bearer tokens.
        with contextlib.suppress(ImportError):
            import snappy.users.schema  # noqa: F401, PLC0415
