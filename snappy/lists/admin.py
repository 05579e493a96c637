from django.contrib import admin

from snappy.lists import models


class CollaboratorInline(admin.TabularInline):
    model = models.Collaborator
    extra = 0
    raw_id_fields = ["user"]


@admin.register(models.List)
class ListAdmin(admin.ModelAdmin):
    list_display = ["id", "name", "owner", "is_private", "updated_at"]
    search_fields = ["name", "owner__email"]
    raw_id_fields = ["owner"]
    inlines = [CollaboratorInline]
