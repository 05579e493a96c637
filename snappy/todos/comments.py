"""Comment and reaction handlers.

Comments on an inbox todo are private to its owner, so only todos that
belong to a list produce realtime events.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from typing import Any

from django.db import transaction

from snappy.core.exceptions import Forbidden
from snappy.core.exceptions import NotFound
from snappy.realtime.events import MutationResult
from snappy.realtime.events import comments as comment_events

from .api.serializers import CommentSerializer
from .models import Comment
from .models import CommentReaction
from .models import Todo
from .services import get_todo_for

if TYPE_CHECKING:
    from snappy.realtime.fanout import Fanout


def _payload(comment: Comment) -> dict[str, Any]:
    comment = (
        Comment.objects.select_related("user")
        .prefetch_related("mentions", "reactions__user")
        .get(pk=comment.pk)
    )
    return dict(CommentSerializer(comment).data)


def _get_comment(todo: Todo, comment_id: Any) -> Comment:
    try:
        return Comment.objects.get(todo=todo, pk=comment_id)
    except (Comment.DoesNotExist, ValueError, TypeError) as exc:
        msg = "Comment not found"
        raise NotFound(msg) from exc


def list_comments(user, todo_id: Any):
    todo = get_todo_for(user, todo_id)
    return (
        todo.comments.select_related("user")
        .prefetch_related("mentions", "reactions__user")
        .all()
    )


def add_comment(
    actor,
    todo_id: Any,
    text: str,
    mentions=(),
    *,
    fanout: Fanout,
) -> MutationResult[Comment]:
    todo = get_todo_for(actor, todo_id)
    with transaction.atomic():
        comment = Comment.objects.create(todo=todo, user=actor, text=text)
        if mentions:
            comment.mentions.set(mentions)
    events = comment_events.comment_added(todo.pk, _payload(comment), list_id=todo.list_id)
    fanout.publish(events)
    return MutationResult(comment, events)


def edit_comment(
    actor,
    todo_id: Any,
    comment_id: Any,
    text: str,
    *,
    fanout: Fanout,
) -> MutationResult[Comment]:
    todo = get_todo_for(actor, todo_id)
    comment = _get_comment(todo, comment_id)
    if comment.user_id != actor.pk:
        msg = "Not authorized to edit this comment"
        raise Forbidden(msg)
    comment.text = text
    comment.save(update_fields=["text", "updated_at"])
    events = comment_events.comment_updated(todo.pk, _payload(comment), list_id=todo.list_id)
    fanout.publish(events)
    return MutationResult(comment, events)


def delete_comment(
    actor,
    todo_id: Any,
    comment_id: Any,
    *,
    fanout: Fanout,
) -> MutationResult[int]:
    todo = get_todo_for(actor, todo_id)
    comment = _get_comment(todo, comment_id)
    if actor.pk not in (comment.user_id, todo.owner_id):
        msg = "Not authorized to delete this comment"
        raise Forbidden(msg)
    pk = comment.pk
    comment.delete()
    events = comment_events.comment_deleted(todo.pk, pk, list_id=todo.list_id)
    fanout.publish(events)
    return MutationResult(pk, events)


def set_reaction(  # noqa: PLR0913
    actor,
    todo_id: Any,
    comment_id: Any,
    reaction_type: str,
    *,
    fanout: Fanout,
) -> MutationResult[Comment]:
    """Add or replace the actor's reaction; the latest type wins."""
    todo = get_todo_for(actor, todo_id)
    comment = _get_comment(todo, comment_id)
    CommentReaction.objects.update_or_create(
        comment=comment,
        user=actor,
        defaults={"type": reaction_type},
    )
    events = comment_events.reaction_set(
        todo.pk,
        comment.pk,
        user_id=actor.pk,
        reaction_type=reaction_type,
        list_id=todo.list_id,
    )
    fanout.publish(events)
    return MutationResult(comment, events)


def remove_reaction(
    actor,
    todo_id: Any,
    comment_id: Any,
    *,
    fanout: Fanout,
) -> MutationResult[Comment]:
    todo = get_todo_for(actor, todo_id)
    comment = _get_comment(todo, comment_id)
    CommentReaction.objects.filter(comment=comment, user=actor).delete()
    events = comment_events.reaction_removed(
        todo.pk,
        comment.pk,
        user_id=actor.pk,
        list_id=todo.list_id,
    )
    fanout.publish(events)
    return MutationResult(comment, events)
