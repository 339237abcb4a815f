from datetime import datetime
from typing import Callable, Dict, List, NamedTuple

__all__ = ['NOTIFY', 'STATE_CHANGED', 'Event', 'EventBus', 'notify']


class Event(NamedTuple):
    name: str
    ts: str
    payload: dict


Handler = Callable[[Event, dict], object]

NOTIFY = "NOTIFY"
STATE_CHANGED = "STATE_CHANGED"


class EventBus:
    """Synchronous publish/subscribe. One bus per client, passed in explicitly."""

    def __init__(self):
        self._subscribers: Dict[str, List[Handler]] = {}

    def subscribe(self, name: str, handler: Handler) -> None:
        self._subscribers.setdefault(name, []).append(handler)

    def unsubscribe(self, name: str, handler: Handler) -> None:
        handlers = self._subscribers.get(name, [])
        if handler in handlers:
            handlers.remove(handler)

    def publish(self, name: str, payload: dict) -> list:
        handlers = list(self._subscribers.get(name, []))
        if not handlers:
            return []
        event = Event(name=name, ts=datetime.now().isoformat(), payload=payload)
        return [handler(event, payload) for handler in handlers]


def notify(bus: EventBus, level: str, message: str) -> None:
    bus.publish(NOTIFY, {"level": level, "message": message})
