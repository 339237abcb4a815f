import httpx
import pytest

from tracker.config import Settings
from tracker.events import NOTIFY
from tracker.services import FinanceClient
from tracker.session import MemoryTokenStore


@pytest.fixture
def make_client():
    """Factory: a FinanceClient talking to `handler` instead of the network.

    Returns (client, notes) where notes collects every published notification.
    """
    def _make(handler, token="tok"):
        client = FinanceClient(
            Settings(api_url="http://test/api"),
            tokens=MemoryTokenStore(token),
            transport=httpx.MockTransport(handler),
        )
        notes = []
        client.bus.subscribe(NOTIFY, lambda event, payload: notes.append(payload))
        return client, notes
    return _make
