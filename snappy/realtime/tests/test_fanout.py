import pytest
from asgiref.sync import async_to_sync

from snappy.core.exceptions import MissingToken
from snappy.core.exceptions import TokenExpired
from snappy.realtime import get_fanout
from snappy.realtime.events import PRESENCE_UPDATE
from snappy.realtime.events import TYPING_START
from snappy.realtime.events import DomainEvent
from snappy.realtime.fanout import Fanout
from snappy.realtime.rooms import ListRoom
from snappy.realtime.rooms import UserRoom


class FailingTransport:
    def __init__(self, bad_sid):
        self.bad_sid = bad_sid
        self.sent = []

    async def emit(self, event, data=None, to=None, **kwargs):
        if to == self.bad_sid:
            msg = "socket gone"
            raise ConnectionError(msg)
        self.sent.append((to, event, data))


def route(fanout, event):
    return async_to_sync(fanout.route_event)(event)


def test_register_joins_user_room(fanout):
    conn = fanout.register("s1", 7)
    assert conn.rooms == {UserRoom(7)}
    assert fanout.members(UserRoom(7)) == {"s1"}


def test_join_is_idempotent(fanout, transport):
    fanout.register("s1", 1)
    assert fanout.join("s1", ListRoom(5)) is True
    assert fanout.join("s1", ListRoom(5)) is False

    delivered = route(fanout, DomainEvent("todo:created", (ListRoom(5),), {"id": 1}))

    assert delivered == 1
    assert transport.to("s1") == [("todo:created", {"id": 1})]


def test_join_and_leave_unknown_sid_are_noops(fanout):
    assert fanout.join("ghost", ListRoom(5)) is False
    assert fanout.leave("ghost", ListRoom(5)) is False
    assert fanout.members(ListRoom(5)) == frozenset()


def test_leave_stops_delivery(fanout, transport):
    fanout.register("s1", 1)
    fanout.join("s1", ListRoom(5))
    assert fanout.leave("s1", ListRoom(5)) is True
    assert fanout.leave("s1", ListRoom(5)) is False

    route(fanout, DomainEvent("todo:updated", (ListRoom(5),), {"id": 1}))

    assert transport.sent == []


def test_event_reaches_each_connection_once(fanout, transport):
    fanout.register("s1", 1)
    fanout.join("s1", ListRoom(5))
    event = DomainEvent("todo:created", (ListRoom(5), UserRoom(1)), {"id": 3})

    assert route(fanout, event) == 1
    assert len(transport.to("s1")) == 1


def test_excluded_sid_is_skipped(fanout, transport):
    fanout.register("s1", 1)
    fanout.register("s2", 2)
    for sid in ("s1", "s2"):
        fanout.join(sid, ListRoom(9))

    route(fanout, DomainEvent("typing:start", (ListRoom(9),), {}, exclude_sid="s1"))

    assert transport.to("s1") == []
    assert transport.to("s2") == [("typing:start", {})]


def test_empty_room_is_silent(fanout, transport):
    assert route(fanout, DomainEvent("todo:deleted", (ListRoom(404),), {"id": 1})) == 0
    assert transport.sent == []


def test_disconnect_discards_memberships(fanout, transport):
    fanout.register("s1", 1)
    fanout.join("s1", ListRoom(5))

    assert fanout.disconnect("s1") is not None
    assert fanout.disconnect("s1") is None
    assert fanout.join("s1", ListRoom(5)) is False

    route(fanout, DomainEvent("todo:created", (ListRoom(5), UserRoom(1)), {}))
    assert transport.sent == []
    assert fanout.connection_count() == 0


def test_failed_recipient_does_not_block_others():
    transport = FailingTransport("s1")
    fanout = Fanout(transport)
    fanout.register("s1", 1)
    fanout.register("s2", 2)
    for sid in ("s1", "s2"):
        fanout.join(sid, ListRoom(3))

    delivered = route(fanout, DomainEvent("todo:created", (ListRoom(3),), {"id": 1}))

    assert delivered == 1
    assert transport.sent == [("s2", "todo:created", {"id": 1})]


def test_events_arrive_in_routing_order(fanout, transport):
    fanout.register("s1", 1)
    for n in range(5):
        route(fanout, DomainEvent("todo:updated", (UserRoom(1),), {"n": n}))

    assert [data["n"] for _, data in transport.to("s1")] == [0, 1, 2, 3, 4]


def test_relay_typing_excludes_sender(fanout, transport):
    fanout.register("s1", 1)
    fanout.register("s2", 2)
    for sid in ("s1", "s2"):
        fanout.join(sid, ListRoom(4))

    async_to_sync(fanout.relay)("s1", TYPING_START, {"listId": 4, "todoId": 11})

    assert transport.to("s1") == []
    assert transport.to("s2") == [(TYPING_START, {"todoId": 11, "userId": 1})]


def test_relay_presence_adds_timestamp(fanout, transport):
    fanout.register("s1", 1)
    fanout.register("s2", 2)
    fanout.join("s2", ListRoom(4))

    async_to_sync(fanout.relay)("s1", PRESENCE_UPDATE, {"listId": 4, "status": "viewing"})

    [(kind, payload)] = transport.to("s2")
    assert kind == PRESENCE_UPDATE
    assert payload["userId"] == 1
    assert payload["status"] == "viewing"
    assert "timestamp" in payload


def test_relay_ignores_bad_payload(fanout, transport):
    fanout.register("s1", 1)
    assert async_to_sync(fanout.relay)("s1", TYPING_START, {"listId": "nope"}) == 0
    assert async_to_sync(fanout.relay)("ghost", TYPING_START, {"listId": 4}) == 0


@pytest.mark.django_db
def test_connect_with_valid_token(fanout, user, token_for):
    conn = async_to_sync(fanout.connect)("s1", token_for(user))

    assert conn.user_id == user.pk
    assert fanout.members(UserRoom(user.pk)) == {"s1"}


@pytest.mark.django_db
def test_connect_with_expired_token_registers_nothing(fanout, user, expired_token):
    with pytest.raises(TokenExpired):
        async_to_sync(fanout.connect)("s1", expired_token(user.pk))

    assert fanout.connection("s1") is None
    assert fanout.members(UserRoom(user.pk)) == frozenset()


def test_connect_without_token(fanout):
    with pytest.raises(MissingToken):
        async_to_sync(fanout.connect)("s1", None)
    assert fanout.connection_count() == 0


def test_get_fanout_returns_the_app_instance(fanout):
    assert get_fanout() is fanout
