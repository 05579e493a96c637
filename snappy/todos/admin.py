from django.contrib import admin

from snappy.todos import models


class FocusSessionInline(admin.TabularInline):
    model = models.FocusSession
    extra = 0
    readonly_fields = ["started_at", "ended_at", "duration", "interrupted"]


@admin.register(models.Todo)
class TodoAdmin(admin.ModelAdmin):
    list_display = ["id", "title", "owner", "list", "status", "priority", "due_at"]
    search_fields = ["title", "owner__email"]
    list_filter = ["status", "priority", "source"]
    raw_id_fields = ["owner", "list", "assigned_to"]
    readonly_fields = ["completed_at", "version", "total_focus_time"]
    inlines = [FocusSessionInline]


@admin.register(models.Comment)
class CommentAdmin(admin.ModelAdmin):
    list_display = ["id", "todo", "user", "created_at"]
    search_fields = ["text", "user__email"]
    raw_id_fields = ["todo", "user", "mentions"]


@admin.register(models.TodoVersion)
class TodoVersionAdmin(admin.ModelAdmin):
    list_display = ["id", "todo", "version", "modified_at", "modified_by"]
    raw_id_fields = ["todo", "modified_by"]
