import logging
from dataclasses import dataclass
from typing import Optional

from tracker.api import ApiClient
from tracker.domain import Credentials, User
from tracker.events import EventBus
from tracker.state import StateContainer
from tracker.transforms import user_from_wire
from tracker.validation import validate_credentials

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthState:
    user: Optional[User] = None
    token: Optional[str] = None
    loading: bool = False
    error: Optional[str] = None
    field_errors: tuple[tuple[str, str], ...] = ()


class AuthStore(StateContainer[AuthState]):
    name = "auth"

    def __init__(self, api: ApiClient, bus: EventBus, tokens):
        super().__init__(api, bus, AuthState(token=tokens.load()))
        self._tokens = tokens

    @property
    def is_authenticated(self) -> bool:
        return bool(self._state.token)

    async def signup(self, creds: Credentials) -> bool:
        return await self._authenticate("signup", creds, "Signup failed", "Signed up successfully")

    async def login(self, creds: Credentials) -> bool:
        return await self._authenticate("login", creds, "Invalid credentials", "Logged in successfully")

    async def _authenticate(self, action: str, creds: Credentials, fallback: str, success: str) -> bool:
        checked = validate_credentials(creds, signup=action == "signup")
        if checked.is_left():
            self._set(field_errors=tuple(checked.get_error().items()))
            return False
        self._set(field_errors=())

        outcome = await self._request(action, fallback, lambda: self._api.post(f"/auth/{action}", checked.value))
        if not outcome.ok:
            return False
        payload = outcome.payload if isinstance(outcome.payload, dict) else {}
        token = payload.get("token")
        if not token:
            self._fail(action, fallback)
            return False
        self._tokens.save(token)
        self._set(user=user_from_wire(payload.get("user")), token=token)
        self._notify("success", success)
        logger.info("%s succeeded", action)
        return True

    def logout(self) -> None:
        self._tokens.clear()
        self._error_from = None
        self._set(user=None, token=None, error=None)

    async def get_me(self) -> Optional[User]:
        """A missing token or a 401 ends the session; other failures keep it."""
        if not self._state.token:
            self.logout()
            return None
        outcome = await self._request("me", "Failed to load profile", lambda: self._api.get("/auth/me"), quiet=True)
        if not outcome.latest:
            return self._state.user
        if outcome.ok:
            user = user_from_wire(outcome.payload)
            self._set(user=user)
            return user
        if outcome.error.is_unauthorized:
            logger.info("session expired, clearing token")
            self.logout()
            return None
        self._fail("me", outcome.error.message or "Failed to load profile")
        return self._state.user
