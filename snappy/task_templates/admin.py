from django.contrib import admin

from snappy.task_templates import models


@admin.register(models.Template)
class TemplateAdmin(admin.ModelAdmin):
    list_display = ["id", "name", "owner", "category", "is_public", "usage_count"]
    search_fields = ["name", "owner__email"]
    list_filter = ["category", "is_public"]
    raw_id_fields = ["owner"]
