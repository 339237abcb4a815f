from tracker.domain import Account
from tracker.events import NOTIFY, STATE_CHANGED, EventBus, notify
from tracker.functional import Left, Nothing, Right, Some, compose, find_by_id, pipe


def test_maybe_map_and_default():
    assert Some(5).map(lambda x: x * 2).get_or_else(0) == 10
    assert Nothing().map(lambda x: x * 2).get_or_else(0) == 0
    assert Nothing().is_none()


def test_either_bind_short_circuits():
    def positive(x):
        return Right(x) if x > 0 else Left("not positive")

    assert Right(3).bind(positive) == Right(3)
    assert Right(-1).bind(positive) == Left("not positive")
    assert Left("early").bind(positive).get_error() == "early"
    assert Left("e").map(lambda x: x + 1).is_left()


def test_find_by_id():
    accounts = (Account("a1", "One", "cash", 1), Account("a2", "Two", "cash", 2))
    assert find_by_id(accounts, "a2") == Some(accounts[1])
    assert find_by_id(accounts, "zz") == Nothing()


def test_compose_and_pipe():
    def add1(x):
        return x + 1

    def mul2(x):
        return x * 2

    assert compose(add1, mul2)(3) == 7
    assert pipe(3, add1, mul2) == 8


def test_bus_publish_and_unsubscribe():
    bus = EventBus()
    seen = []

    def handler(event, payload):
        seen.append((event.name, payload["message"]))
        return "handled"

    bus.subscribe(NOTIFY, handler)
    assert bus.publish(NOTIFY, {"message": "hi"}) == ["handled"]
    notify(bus, "info", "again")
    bus.unsubscribe(NOTIFY, handler)
    bus.publish(NOTIFY, {"message": "ignored"})
    assert seen == [(NOTIFY, "hi"), (NOTIFY, "again")]
    assert bus.publish(STATE_CHANGED, {"container": "x"}) == []
