from django.apps import AppConfig


class TaskTemplatesConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "snappy.task_templates"
    verbose_name = "Task templates"
