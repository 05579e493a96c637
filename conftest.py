from datetime import timedelta

import pytest
from asgiref.sync import sync_to_async
from django.apps import apps
from django.utils import timezone
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import AccessToken

from snappy.lists.models import Collaborator
from snappy.lists.models import List
from snappy.realtime.fanout import Fanout
from snappy.users.models import User
from snappy.users.tokens import issue_token
from snappy.users.tokens import verify_token


class RecordingTransport:
    """Stands in for the Socket.IO server and keeps every emit."""

    def __init__(self):
        self.sent: list[tuple[str, str, object]] = []

    async def emit(self, event, data=None, to=None, **kwargs):
        self.sent.append((to, event, data))

    def to(self, sid):
        return [(event, data) for target, event, data in self.sent if target == sid]

    def events(self, kind):
        return [(target, data) for target, event, data in self.sent if event == kind]


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def fanout(transport, monkeypatch):
    # The default verifier goes through channels' DB wrapper, which closes the
    # connection the test transaction is running on.
    instance = Fanout(transport, verify=sync_to_async(verify_token))
    monkeypatch.setattr(apps.get_app_config("realtime"), "fanout", instance)
    return instance


def make_user(email, name="Test User", password="Passw0rd!"):  # noqa: S107
    return User.objects.create_user(email=email, password=password, name=name)


@pytest.fixture
def user(db):
    return make_user("owner@example.com", "Olive Owner")


@pytest.fixture
def other_user(db):
    return make_user("editor@example.com", "Eddie Editor")


@pytest.fixture
def third_user(db):
    return make_user("viewer@example.com", "Vera Viewer")


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def auth_client(user):
    client = APIClient()
    client.force_authenticate(user=user)
    return client


@pytest.fixture
def client_for():
    def build(some_user):
        client = APIClient()
        client.force_authenticate(user=some_user)
        return client

    return build


@pytest.fixture
def token_for():
    return lambda some_user: issue_token(some_user.pk)


@pytest.fixture
def expired_token():
    def build(user_id):
        token = AccessToken()
        token["user_id"] = user_id
        token.set_exp(
            from_time=timezone.now() - timedelta(days=8),
            lifetime=timedelta(days=1),
        )
        return str(token)

    return build


@pytest.fixture
def shared_list(user, other_user, third_user):
    """A list owned by ``user`` with an editor and a viewer."""
    task_list = List.objects.create(name="Groceries", owner=user)
    Collaborator.objects.create(
        list=task_list,
        user=other_user,
        role=Collaborator.Role.EDITOR,
    )
    Collaborator.objects.create(
        list=task_list,
        user=third_user,
        role=Collaborator.Role.VIEWER,
    )
    return task_list


@pytest.fixture
def stranger(db):
    return make_user("stranger@example.com", "Sam Stranger")
