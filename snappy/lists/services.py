"""Mutation handlers for lists and their collaborators.

Each handler checks access against the current collaborator rows, persists
the change, then records an activity entry. List changes carry no realtime
events; clients pick them up on their next fetch.
"""

from __future__ import annotations

import logging
from typing import Any

from django.contrib.auth import get_user_model
from django.db import IntegrityError
from django.db import transaction

from snappy.activity.models import Activity
from snappy.activity.utils import log_activity
from snappy.core.exceptions import Conflict
from snappy.core.exceptions import Forbidden
from snappy.core.exceptions import NotFound
from snappy.realtime.events import MutationResult

from . import access
from .models import Collaborator
from .models import List

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("name", "color", "icon", "is_private")


def get_list_for(user, list_id: Any) -> List:
    """Fetch a list the user may read."""
    try:
        task_list = List.objects.select_related("owner").get(pk=list_id)
    except (List.DoesNotExist, ValueError, TypeError) as exc:
        msg = "List not found"
        raise NotFound(msg) from exc
    if not access.can_read(user.pk, task_list):
        raise Forbidden
    return task_list


def _require_owner(user, task_list: List) -> None:
    if not access.is_owner(user.pk, task_list):
        msg = "Only the list owner can do this"
        raise Forbidden(msg)


def create_list(actor, data: dict[str, Any]) -> MutationResult[List]:
    fields = {k: v for k, v in data.items() if k in EDITABLE_FIELDS}
    task_list = List.objects.create(owner=actor, **fields)
    log_activity(
        Activity.Action.CREATE_LIST,
        actor=actor,
        target_type=Activity.TargetType.LIST,
        target_id=task_list.pk,
        list_id=task_list.pk,
        payload={"name": task_list.name},
    )
    return MutationResult(task_list)


def update_list(actor, task_list: List, changes: dict[str, Any]) -> MutationResult[List]:
    if not access.can_write(actor.pk, task_list):
        raise Forbidden
    applied = {k: v for k, v in changes.items() if k in EDITABLE_FIELDS}
    for field, value in applied.items():
        setattr(task_list, field, value)
    task_list.save()
    log_activity(
        Activity.Action.UPDATE_LIST,
        actor=actor,
        target_type=Activity.TargetType.LIST,
        target_id=task_list.pk,
        list_id=task_list.pk,
        payload=applied,
    )
    return MutationResult(task_list)


def delete_list(actor, task_list: List) -> MutationResult[int]:
    _require_owner(actor, task_list)
    list_id, name = task_list.pk, task_list.name
    task_list.delete()
    log_activity(
        Activity.Action.DELETE_LIST,
        actor=actor,
        target_type=Activity.TargetType.LIST,
        target_id=list_id,
        list_id=list_id,
        payload={"name": name},
    )
    return MutationResult(list_id)


def invite_collaborator(
    actor,
    task_list: List,
    email: str,
    role: str = Collaborator.Role.EDITOR,
) -> MutationResult[Collaborator]:
    _require_owner(actor, task_list)
    user_model = get_user_model()
    try:
        invitee = user_model.objects.get(email__iexact=email.strip())
    except user_model.DoesNotExist as exc:
        msg = "User not found"
        raise NotFound(msg) from exc

    if invitee.pk == task_list.owner_id:
        msg = "The list owner is already a full editor"
        raise Conflict(msg)
    if Collaborator.objects.filter(list=task_list, user=invitee).exists():
        msg = "User is already a collaborator"
        raise Conflict(msg)

    try:
        with transaction.atomic():
            collaborator = Collaborator.objects.create(
                list=task_list,
                user=invitee,
                role=role,
            )
    except IntegrityError as exc:
        msg = "User is already a collaborator"
        raise Conflict(msg) from exc

    logger.info("List %s: invited user %s as %s", task_list.pk, invitee.pk, role)
    log_activity(
        Activity.Action.INVITE_USER,
        actor=actor,
        target_type=Activity.TargetType.LIST,
        target_id=task_list.pk,
        list_id=task_list.pk,
        payload={"user_id": invitee.pk, "email": invitee.email, "role": role},
    )
    return MutationResult(collaborator)


def _get_collaborator(task_list: List, user_id: Any) -> Collaborator:
    try:
        return Collaborator.objects.select_related("user").get(
            list=task_list,
            user_id=user_id,
        )
    except (Collaborator.DoesNotExist, ValueError, TypeError) as exc:
        msg = "Collaborator not found"
        raise NotFound(msg) from exc


def remove_collaborator(actor, task_list: List, user_id: Any) -> MutationResult[int]:
    _require_owner(actor, task_list)
    collaborator = _get_collaborator(task_list, user_id)
    removed_user_id = collaborator.user_id
    collaborator.delete()
    log_activity(
        Activity.Action.REMOVE_COLLABORATOR,
        actor=actor,
        target_type=Activity.TargetType.LIST,
        target_id=task_list.pk,
        list_id=task_list.pk,
        payload={"user_id": removed_user_id},
    )
    return MutationResult(removed_user_id)


def update_collaborator_role(
    actor,
    task_list: List,
    user_id: Any,
    role: str,
) -> MutationResult[Collaborator]:
    _require_owner(actor, task_list)
    collaborator = _get_collaborator(task_list, user_id)
    previous = collaborator.role
    collaborator.role = role
    collaborator.save(update_fields=["role"])
    log_activity(
        Activity.Action.UPDATE_COLLABORATOR,
        actor=actor,
        target_type=Activity.TargetType.LIST,
        target_id=task_list.pk,
        list_id=task_list.pk,
        payload={"user_id": collaborator.user_id, "before": previous, "after": role},
    )
    return MutationResult(collaborator)
