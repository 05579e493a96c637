from django.conf import settings
from rest_framework.routers import DefaultRouter
from rest_framework.routers import SimpleRouter

from snappy.activity.api.views import ActivityViewSet
from snappy.ai.api.views import AIViewSet
from snappy.exports.api.views import ExportViewSet
from snappy.lists.api.views import ListViewSet
from snappy.task_templates.api.views import TemplateViewSet
from snappy.todos.api.views import FocusViewSet
from snappy.todos.api.views import TodoViewSet
from snappy.uploads.api.views import UploadViewSet
from snappy.users.api.views import UserViewSet

router = DefaultRouter() if settings.DEBUG else SimpleRouter()

router.register("users", UserViewSet)
router.register("lists", ListViewSet, basename="lists")
router.register("todos", TodoViewSet, basename="todos")
# Cross-todo focus endpoints (stats, session history).
router.register("focus", FocusViewSet, basename="focus")
router.register("activity", ActivityViewSet, basename="activity")
router.register("templates", TemplateViewSet, basename="templates")
router.register("ai", AIViewSet, basename="ai")
router.register("upload", UploadViewSet, basename="upload")
router.register("export", ExportViewSet, basename="export")


app_name = "api"
urlpatterns = router.urls
