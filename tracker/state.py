import dataclasses
import logging
from typing import Any, Awaitable, Callable, Generic, NamedTuple, Optional, TypeVar

from tracker.api import ApiClient, ApiError
from tracker.events import STATE_CHANGED, EventBus, notify

logger = logging.getLogger(__name__)

S = TypeVar("S")


class Outcome(NamedTuple):
    ok: bool
    latest: bool          # False when a newer call of the same action was issued meanwhile
    payload: Any = None
    error: Optional[ApiError] = None


class StateContainer(Generic[S]):
    """Holds one immutable snapshot and replaces it on every change.

    Snapshots are frozen dataclasses with at least `loading` and `error`.
    Each action tags its request with a per-action sequence number; a
    response whose number is no longer the latest issued is dropped, so
    the state reflects the most recent call rather than the slowest one.
    `error` holds the last failure and is cleared when the action that
    produced it next succeeds.
    """

    name = "state"

    def __init__(self, api: ApiClient, bus: EventBus, initial: S):
        self._api = api
        self._bus = bus
        self._state = initial
        self._seq: dict[str, int] = {}
        self._inflight = 0
        self._error_from: Optional[str] = None

    @property
    def snapshot(self) -> S:
        return self._state

    def _set(self, **changes) -> None:
        self._state = dataclasses.replace(self._state, **changes)
        self._bus.publish(STATE_CHANGED, {"container": self.name})

    def _notify(self, level: str, message: str) -> None:
        notify(self._bus, level, message)

    def _fail(self, action: str, message: str) -> None:
        self._error_from = action
        self._set(error=message)
        self._notify("error", message)

    def _is_latest(self, action: str, seq: int) -> bool:
        return self._seq.get(action) == seq

    async def _request(self, action: str, fallback: str, call: Callable[[], Awaitable[Any]], quiet: bool = False) -> Outcome:
        """Run one API call with loading/error bookkeeping.

        On failure the error is stored and an error notification is
        published (server message first, `fallback` otherwise) unless the
        call was superseded or `quiet` is set. Data is never touched here.
        """
        seq = self._seq.get(action, 0) + 1
        self._seq[action] = seq
        self._inflight += 1
        self._set(loading=True)
        payload, error = None, None
        try:
            payload = await call()
        except ApiError as e:
            error = e
        finally:
            # runs on cancellation too
            self._inflight -= 1
            self._set(loading=self._inflight > 0)

        latest = self._is_latest(action, seq)
        if error is not None:
            message = error.message or fallback
            logger.warning("%s.%s failed (status=%s): %s", self.name, action, error.status, message)
            if latest and not quiet:
                self._fail(action, message)
            return Outcome(ok=False, latest=latest, error=error)

        if not latest:
            logger.debug("%s.%s response #%s superseded, dropped", self.name, action, seq)
        elif self._error_from == action:
            self._error_from = None
            self._set(error=None)
        return Outcome(ok=True, latest=latest, payload=payload)
