import logging

from celery import shared_task

from snappy.ai.services import auto_classify_task
from snappy.integrations.llm.client import get_llm_client_from_settings
from snappy.todos.models import Todo

logger = logging.getLogger(__name__)


@shared_task(name="todos.classify")
def classify_todo(todo_id: int) -> dict | None:
    """Store AI suggestions for a todo without touching user-entered fields."""

    todo = Todo.objects.filter(pk=todo_id).only("title", "note").first()
    if todo is None:
        logger.info("Skipping classification of missing todo %s", todo_id)
        return None
    classification = auto_classify_task(
        todo.title,
        todo.note,
        client=get_llm_client_from_settings(),
    )
    Todo.objects.filter(pk=todo_id).update(ai_classification=classification)
    return classification
