from django.contrib import admin

from snappy.activity import models


@admin.register(models.Activity)
class ActivityAdmin(admin.ModelAdmin):
    list_display = ["id", "action", "actor", "target_type", "target_id", "created_at"]
    search_fields = ["action", "actor__email"]
    list_filter = ["action", "target_type", "created_at"]
